"""
Tests for the remote DOT renderer.
"""

import pytest
import requests

from dot_renderer import RemoteRenderer, RenderError


class FakeResponse:
    def __init__(self, status_code=200, content=b"<svg/>", text=""):
        self.status_code = status_code
        self.content = content
        self.text = text

    def raise_for_status(self):
        if self.status_code >= 400:
            raise requests.exceptions.HTTPError(f"{self.status_code} error", response=self)


class TestRemoteRenderer:
    """Tests for RemoteRenderer."""

    def test_endpoint(self):
        """Test the Kroki endpoint layout."""
        renderer = RemoteRenderer("http://localhost:8000/", "png")
        assert renderer.endpoint == "http://localhost:8000/graphviz/png"

    def test_unsupported_format(self):
        """Test that unknown formats are rejected."""
        with pytest.raises(ValueError):
            RemoteRenderer(output_format="gif")

    def test_render_posts_document(self, monkeypatch):
        """Test that the DOT text is posted and the image returned."""
        calls = {}

        def fake_post(url, data=None, headers=None, timeout=None):
            calls["url"] = url
            calls["data"] = data
            return FakeResponse(content=b"<svg>ok</svg>")

        monkeypatch.setattr(requests, "post", fake_post)
        image = RemoteRenderer("http://kroki.local", "svg").render("digraph G {\n}\n")
        assert image == b"<svg>ok</svg>"
        assert calls["url"] == "http://kroki.local/graphviz/svg"
        assert calls["data"] == b"digraph G {\n}\n"

    def test_http_error(self, monkeypatch):
        """Test that service errors become RenderError."""
        monkeypatch.setattr(requests, "post",
                            lambda *args, **kwargs: FakeResponse(400, b"", "Syntax error in line 2"))
        with pytest.raises(RenderError, match="Renderer error \\(400\\): Syntax error in line 2"):
            RemoteRenderer("http://kroki.local").render("digraph G {")

    def test_connection_error(self, monkeypatch):
        """Test that unreachable services are reported with their status."""
        def refuse(*args, **kwargs):
            raise requests.exceptions.ConnectionError("refused")

        monkeypatch.setattr(requests, "post", refuse)
        monkeypatch.setattr(requests, "get", refuse)
        with pytest.raises(RenderError, match="Cannot connect to renderer at http://kroki.local"):
            RemoteRenderer("http://kroki.local").render("digraph G {\n}\n")

    def test_empty_response(self, monkeypatch):
        """Test that an empty body is an error."""
        monkeypatch.setattr(requests, "post", lambda *args, **kwargs: FakeResponse(content=b""))
        with pytest.raises(RenderError):
            RemoteRenderer("http://kroki.local").render("digraph G {\n}\n")

    def test_health(self, monkeypatch):
        """Test the health probe."""
        monkeypatch.setattr(requests, "get", lambda *args, **kwargs: FakeResponse(200))
        assert RemoteRenderer("http://kroki.local").check_health() == (True, "ok")
        monkeypatch.setattr(requests, "get", lambda *args, **kwargs: FakeResponse(503))
        assert RemoteRenderer("http://kroki.local").check_health() == (False, "HTTP 503")
