import base64
import json
from collections.abc import Callable
from types import SimpleNamespace
from typing import Any

import pytest


@pytest.fixture
def lambda_context(monkeypatch):
    context = SimpleNamespace(
        aws_request_id="test-request-id",
        function_name="test-function",
        memory_limit_in_mb=256,
        invoked_function_arn="arn:aws:lambda:us-east-1:000000000000:function:test",
        log_group_name="/aws/lambda/test-function",
        log_stream_name="2024/01/01/[$LATEST]test",
    )

    monkeypatch.setattr(
        "aws_lambda_powertools.utilities.typing.LambdaContext",
        lambda: context,
        raising=False,
    )

    return context


@pytest.fixture(autouse=True)
def reachable(monkeypatch):
    """Handlers probe the storage backend before writing; keep it local."""
    monkeypatch.setattr(
        "core.infrastructure.network.probe.ConnectivityProbe.check",
        lambda self: True,
    )


@pytest.fixture
def encode() -> Callable[[bytes], str]:
    def _encode(data: bytes) -> str:
        return base64.b64encode(data).decode("utf-8")

    return _encode


@pytest.fixture
def api_event() -> Callable[..., dict[str, Any]]:
    """
    Build an API Gateway proxy event.

    Usage:
        event = api_event("PATCH", {"entity_type": "sale"}, body={...}, user="john")
    """

    def _event(
        method: str,
        path_params: dict[str, str] | None = None,
        *,
        body: dict[str, Any] | None = None,
        user: str | None = "john",
        query: dict[str, str] | None = None,
    ) -> dict[str, Any]:
        authorizer = {"claims": {"sub": user}} if user else {}
        return {
            "httpMethod": method,
            "path": "/test",
            "pathParameters": path_params,
            "queryStringParameters": query,
            "body": json.dumps(body) if body is not None else None,
            "headers": {"Content-Type": "application/json"},
            "requestContext": {"authorizer": authorizer},
        }

    return _event


def parse_body(resp: dict[str, Any]) -> dict[str, Any]:
    return json.loads(resp["body"]) if resp.get("body") else {}


@pytest.fixture
def body_of() -> Callable[[dict[str, Any]], dict[str, Any]]:
    return parse_body
