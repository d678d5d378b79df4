"""Shared fixtures for the DocuWriter.ai MCP tests."""

import json
from typing import Any, Callable, Dict, List, Optional, Tuple

import httpx
import pytest

from docuwriter_mcp.client import DocuWriterClient

TEST_TOKEN = "test_token_123"
TEST_BASE_URL = "https://api.example.test/api"


class RecordingClient:
    """Stand-in for DocuWriterClient that records calls instead of sending them.

    ``responses`` maps method name to the value it returns; ``errors`` maps
    method name to an exception it raises.
    """

    def __init__(
        self,
        responses: Optional[Dict[str, Any]] = None,
        errors: Optional[Dict[str, Exception]] = None,
    ) -> None:
        self.calls: List[Tuple[str, tuple, dict]] = []
        self.responses = responses or {}
        self.errors = errors or {}

    def __getattr__(self, name: str) -> Callable[..., Any]:
        async def call(*args: Any, **kwargs: Any) -> Any:
            self.calls.append((name, args, kwargs))
            if name in self.errors:
                raise self.errors[name]
            return self.responses.get(name, {"data": {}})

        return call


@pytest.fixture
def recording_client() -> RecordingClient:
    return RecordingClient()


@pytest.fixture
def make_client() -> Callable[..., DocuWriterClient]:
    """Build a real client whose requests are answered by ``handler``."""

    def factory(handler: Callable[[httpx.Request], httpx.Response], **kwargs: Any) -> DocuWriterClient:
        return DocuWriterClient(
            TEST_TOKEN,
            base_url=kwargs.pop("base_url", TEST_BASE_URL),
            transport=httpx.MockTransport(handler),
            **kwargs,
        )

    return factory


def request_json(request: httpx.Request) -> Any:
    """Decoded JSON body of a captured request (None when empty)."""
    return json.loads(request.content) if request.content else None
