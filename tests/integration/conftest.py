from __future__ import annotations

import os
import urllib.request

import pytest
import redis


def _in_ci() -> bool:
    return bool(
        os.getenv("CI") or os.getenv("GITHUB_ACTIONS") or os.getenv("REQUIRE_SERVICES")
    )


def _unreachable(msg: str) -> None:
    # In CI the workflow is expected to start the services, so this is a hard failure.
    if _in_ci():
        pytest.fail(msg, pytrace=False)
    pytest.skip(f"{msg}; skipping integration tests")


def _localstack_healthy(endpoint_url: str) -> bool:
    url = endpoint_url.rstrip("/") + "/_localstack/health"
    try:
        with urllib.request.urlopen(url, timeout=1.5) as resp:  # nosec B310
            return 200 <= resp.status < 300
    except OSError:
        return False


@pytest.fixture(scope="session", autouse=True)
def localstack_env() -> None:
    """Set sane defaults so boto3 can talk to LocalStack in integration tests."""

    os.environ.setdefault("USE_LOCALSTACK", "true")
    os.environ.setdefault("ENDPOINT_URL", "http://localhost:4566")
    os.environ.setdefault("AWS_REGION", "us-west-2")

    # boto3 requires some credentials to be present, even for LocalStack.
    os.environ.setdefault("AWS_ACCESS_KEY_ID", "test")
    os.environ.setdefault("AWS_SECRET_ACCESS_KEY", "test")


@pytest.fixture(scope="session")
def require_localstack(localstack_env: None) -> str:
    endpoint_url = os.environ.get("ENDPOINT_URL", "http://localhost:4566")
    if not _localstack_healthy(endpoint_url):
        _unreachable(f"LocalStack not reachable at {endpoint_url}")
    return endpoint_url


@pytest.fixture(scope="session")
def require_redis() -> str:
    url = os.environ.get("REDIS_URL", "redis://127.0.0.1:6379/15")
    try:
        redis.Redis.from_url(url, socket_connect_timeout=1.5).ping()
    except redis.RedisError:
        _unreachable(f"Redis not reachable at {url}")
    return url
