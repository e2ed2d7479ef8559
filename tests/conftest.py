"""Shared fixtures: loguru capture and a Paperless client backed by httpx.MockTransport."""

import contextlib
from typing import Callable, Dict, List

import httpx
import pytest
from loguru import logger

from paperless_uploader.utils.paperless_client import PaperlessClient

API_KEY = "test_key"


@pytest.fixture
def caplog(caplog):
    """Route loguru records into pytest's caplog."""
    handler_id = logger.add(caplog.handler, format="{message}", level=0)
    yield caplog
    with contextlib.suppress(ValueError):
        logger.remove(handler_id)


class FakePaperless:
    """In-memory stand-in for the Paperless tag and upload endpoints."""

    def __init__(self, tags: List[Dict] = None, upload_status: int = 200, upload_body: str = ""):
        self.tags = tags or []
        self.upload_status = upload_status
        self.upload_body = upload_body
        self.requests: List[httpx.Request] = []
        self.uploads: List[bytes] = []

    def __call__(self, request: httpx.Request) -> httpx.Response:
        self.requests.append(request)

        if request.url.path == "/api/tags/":
            return httpx.Response(200, json={"results": self.tags, "next": None})

        if request.url.path == "/api/documents/post_document/":
            self.uploads.append(request.read())
            return httpx.Response(self.upload_status, text=self.upload_body)

        return httpx.Response(404, text="not found")


@pytest.fixture
def fake_paperless() -> FakePaperless:
    return FakePaperless()


@pytest.fixture
def make_client() -> Callable[..., PaperlessClient]:
    """Build a client whose requests go to ``handler`` instead of the network."""
    clients = []

    def _make(handler, api_key: str = API_KEY) -> PaperlessClient:
        client = PaperlessClient(
            "http://paperless.test",
            api_key,
            transport=httpx.MockTransport(handler),
        )
        clients.append(client)
        return client

    yield _make

    for client in clients:
        client.close()
