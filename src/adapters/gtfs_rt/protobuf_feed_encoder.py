from __future__ import annotations

from dataclasses import dataclass

from google.transit import gtfs_realtime_pb2

from src.app.ports.output import IFeedEncoder
from src.domain.models.feed import (
    FeedMessage,
    TripDescriptor,
    TripUpdateEntity,
    VehicleDescriptor,
    VehiclePositionEntity,
)

_SCHEDULED = gtfs_realtime_pb2.TripUpdate.StopTimeUpdate.SCHEDULED
_NO_DATA = gtfs_realtime_pb2.TripUpdate.StopTimeUpdate.NO_DATA


def _fill_trip(pb, trip: TripDescriptor) -> None:
    pb.trip_id = trip.trip_id
    pb.route_id = trip.route_id
    pb.direction_id = trip.direction_id
    pb.start_date = trip.start_date


def _fill_vehicle(pb, vehicle: VehicleDescriptor) -> None:
    pb.id = vehicle.vehicle_id
    if vehicle.label is not None:
        pb.label = vehicle.label
    pb.wheelchair_accessible = vehicle.wheelchair_accessible


def _fill_position(pb, ent: VehiclePositionEntity) -> None:
    _fill_trip(pb.trip, ent.trip)
    _fill_vehicle(pb.vehicle, ent.vehicle)
    pb.position.latitude = ent.position.lat
    pb.position.longitude = ent.position.lon
    if ent.bearing is not None:
        pb.position.bearing = ent.bearing
    if ent.speed_mps is not None:
        pb.position.speed = ent.speed_mps
    if ent.timestamp is not None:
        pb.timestamp = ent.timestamp


def _fill_trip_update(pb, ent: TripUpdateEntity) -> None:
    _fill_trip(pb.trip, ent.trip)
    _fill_vehicle(pb.vehicle, ent.vehicle)
    for stu in ent.stop_time_updates:
        # An update must name its stop; SCHEDULED also needs an arrival.
        if stu.stop_id is None:
            continue
        out = pb.stop_time_update.add()
        out.stop_id = stu.stop_id
        if stu.arrival_time is None:
            out.schedule_relationship = _NO_DATA
        else:
            out.arrival.time = stu.arrival_time
            out.schedule_relationship = _SCHEDULED
    if ent.delay_s is not None:
        pb.delay = ent.delay_s
    if ent.timestamp is not None:
        pb.timestamp = ent.timestamp


def to_protobuf(message: FeedMessage) -> gtfs_realtime_pb2.FeedMessage:
    feed = gtfs_realtime_pb2.FeedMessage()
    feed.header.gtfs_realtime_version = message.gtfs_realtime_version
    feed.header.timestamp = message.timestamp

    for ent in message.entities:
        out = feed.entity.add()
        out.id = ent.entity_id
        if isinstance(ent, VehiclePositionEntity):
            _fill_position(out.vehicle, ent)
        else:
            _fill_trip_update(out.trip_update, ent)

    return feed


@dataclass(frozen=True, slots=True)
class ProtobufFeedEncoder(IFeedEncoder):
    """Serializes feed messages to GTFS-Realtime protobuf bytes."""

    def encode(self, message: FeedMessage) -> bytes:
        return to_protobuf(message).SerializeToString()
