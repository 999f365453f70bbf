"""Tests for HTTP utilities module."""

from __future__ import annotations

from unittest.mock import patch

import httpx
import pytest

from narfetch.exceptions import TransportError
from narfetch.http_utils import build_client, get, stream


class TestBuildClient:
    """Tests for build_client."""

    def test_client_has_correct_settings(self) -> None:
        """Creates client with correct timeout and redirect settings."""
        with patch("narfetch.http_utils.httpx.Client") as mock_client_class:
            build_client()

        call_kwargs = mock_client_class.call_args[1]
        assert call_kwargs["follow_redirects"] is True
        assert call_kwargs["max_redirects"] == 5
        assert "timeout" in call_kwargs
        assert call_kwargs["headers"]["User-Agent"].startswith("narfetch/")

    def test_accepts_transport(self) -> None:
        transport = httpx.MockTransport(lambda request: httpx.Response(204))
        with build_client(transport=transport) as client:
            assert client.get("https://a.example/").status_code == 204


class TestGet:
    """Tests for get."""

    def test_returns_non_success_responses(self) -> None:
        transport = httpx.MockTransport(lambda request: httpx.Response(404))
        with httpx.Client(transport=transport) as client:
            assert get("https://a.example/x", client=client).status_code == 404

    def test_wraps_transport_errors(self) -> None:
        def handler(request: httpx.Request) -> httpx.Response:
            raise httpx.ConnectError("connection refused", request=request)

        with httpx.Client(transport=httpx.MockTransport(handler)) as client:
            with pytest.raises(TransportError, match="connection refused"):
                get("https://a.example/x", client=client)


class TestStream:
    """Tests for stream."""

    def test_streams_body(self) -> None:
        transport = httpx.MockTransport(lambda request: httpx.Response(200, content=b"abc"))
        with httpx.Client(transport=transport) as client:
            with stream("https://a.example/x", client=client) as response:
                assert b"".join(response.iter_bytes()) == b"abc"

    def test_wraps_transport_errors(self) -> None:
        def handler(request: httpx.Request) -> httpx.Response:
            raise httpx.ReadError("reset by peer", request=request)

        with httpx.Client(transport=httpx.MockTransport(handler)) as client:
            with pytest.raises(TransportError, match="reset by peer"):
                with stream("https://a.example/x", client=client):
                    pass

    def test_other_errors_pass_through(self) -> None:
        transport = httpx.MockTransport(lambda request: httpx.Response(200))
        with httpx.Client(transport=transport) as client:
            with pytest.raises(ValueError, match="boom"):
                with stream("https://a.example/x", client=client):
                    raise ValueError("boom")
