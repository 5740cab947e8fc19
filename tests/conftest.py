"""Pytest fixtures for ynote_client tests."""

from __future__ import annotations

from collections.abc import Iterator
from pathlib import Path

import httpx
import pytest
from helpers import ACCESS_SECRET, ACCESS_TOKEN, BASE_URL, FakeYnoteServer

from ynote_client import Credentials, YnoteClient


@pytest.fixture
def consumer() -> Credentials:
    """Application credentials."""
    return Credentials("consumer-key", "consumer-secret")


@pytest.fixture
def access_token() -> Credentials:
    """An access token the fake server accepts."""
    return Credentials(ACCESS_TOKEN, ACCESS_SECRET)


@pytest.fixture
def fake_server() -> FakeYnoteServer:
    """Create an empty fake note service."""
    return FakeYnoteServer()


@pytest.fixture
def http_client(fake_server: FakeYnoteServer) -> Iterator[httpx.Client]:
    """An httpx.Client wired to the fake server."""
    with httpx.Client(transport=httpx.MockTransport(fake_server.handler)) as http:
        yield http


@pytest.fixture
def unauthorized_client(
    consumer: Credentials, http_client: httpx.Client
) -> Iterator[YnoteClient]:
    """A client without an access token."""
    with YnoteClient(consumer, BASE_URL, http_client=http_client) as client:
        yield client


@pytest.fixture
def client(
    consumer: Credentials, access_token: Credentials, http_client: httpx.Client
) -> Iterator[YnoteClient]:
    """A client holding a valid access token."""
    with YnoteClient(
        consumer, BASE_URL, access_token=access_token, http_client=http_client
    ) as client:
        yield client


@pytest.fixture
def temp_image(tmp_path: Path) -> Path:
    """Create a temporary PNG file for testing."""
    image_path = tmp_path / "photo.png"
    image_path.write_bytes(b"\x89PNG\r\n\x1a\n test content")
    return image_path


@pytest.fixture
def temp_pdf(tmp_path: Path) -> Path:
    """Create a temporary PDF file for testing."""
    pdf_path = tmp_path / "report.pdf"
    pdf_path.write_bytes(b"%PDF-1.4 test content")
    return pdf_path
