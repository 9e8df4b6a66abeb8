"""
Unit tests for API dependency injection.
"""

from types import SimpleNamespace

from starlette.requests import Request

from daily_commit.api.dependencies import get_caller_id, get_runtime, get_settings
from daily_commit.config import Settings


def make_request(headers=None, client=("203.0.113.7", 5000), app=None) -> Request:
    scope = {
        "type": "http",
        "method": "POST",
        "path": "/commit",
        "headers": [(k.lower().encode(), v.encode()) for k, v in (headers or {}).items()],
        "client": client,
    }
    if app is not None:
        scope["app"] = app
    return Request(scope)


def test_get_settings():
    """Test settings singleton."""
    settings1 = get_settings()
    settings2 = get_settings()

    # Should be same instance (cached)
    assert settings1 is settings2
    assert isinstance(settings1, Settings)


def test_get_runtime_reads_app_state():
    """Test the runtime is taken from app.state."""
    runtime = object()
    app = SimpleNamespace(state=SimpleNamespace(runtime=runtime))

    assert get_runtime(make_request(app=app)) is runtime


def test_caller_id_from_client_address():
    """Test the socket peer is used without a proxy header."""
    assert get_caller_id(make_request()) == "203.0.113.7"


def test_caller_id_prefers_forwarded_for():
    """Test the first X-Forwarded-For address wins."""
    request = make_request(headers={"X-Forwarded-For": "198.51.100.1, 10.0.0.1"})

    assert get_caller_id(request) == "198.51.100.1"


def test_caller_id_unknown_without_client():
    """Test a request without peer information still gets an identity."""
    assert get_caller_id(make_request(client=None)) == "unknown"
