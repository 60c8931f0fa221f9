"""
Remote DOT renderer.
Posts a DOT document to a Kroki-compatible service and returns the image.
"""

from typing import Tuple

import requests


SUPPORTED_FORMATS = ("svg", "png")


class RenderError(Exception):
    """Rendering service error."""
    pass


class RemoteRenderer:
    """Render Graphviz documents through an HTTP rendering service."""

    def __init__(self, base_url: str = "https://kroki.io", output_format: str = "svg",
                 timeout: int = 30):
        """
        Initialize remote renderer.

        Args:
            base_url: Service base URL (default: https://kroki.io)
            output_format: "svg" or "png" (default: svg)
            timeout: Request timeout in seconds (default: 30)
        """
        if output_format not in SUPPORTED_FORMATS:
            raise ValueError(
                f"Unsupported output format '{output_format}'. "
                f"Use one of: {', '.join(SUPPORTED_FORMATS)}"
            )
        self.base_url = base_url.rstrip("/")
        self.output_format = output_format
        self.timeout = timeout

    @property
    def endpoint(self) -> str:
        return f"{self.base_url}/graphviz/{self.output_format}"

    def check_health(self) -> Tuple[bool, str]:
        """
        Check that the rendering service answers.

        Returns:
            (is_healthy, status_info)
        """
        try:
            response = requests.get(f"{self.base_url}/health", timeout=5)
            if response.status_code == 200:
                return True, "ok"
            return False, f"HTTP {response.status_code}"
        except requests.exceptions.ConnectionError:
            return False, "Connection refused"
        except requests.exceptions.Timeout:
            return False, "Connection timeout"

    def render(self, document: str) -> bytes:
        """
        Render a DOT document.

        Args:
            document: DOT text

        Returns:
            Rendered image bytes
        """
        try:
            response = requests.post(
                self.endpoint,
                data=document.encode("utf-8"),
                headers={"Content-Type": "text/plain"},
                timeout=self.timeout,
            )
            response.raise_for_status()
        except requests.exceptions.ConnectionError as e:
            is_healthy, status = self.check_health()
            error_msg = f"Cannot connect to renderer at {self.base_url}.\n"
            error_msg += f"Connection status: {status if not is_healthy else 'reachable'}\n"
            error_msg += f"Details: {e}"
            raise RenderError(error_msg) from e
        except requests.exceptions.HTTPError as e:
            status_code = e.response.status_code if e.response is not None else "unknown"
            detail = e.response.text.strip() if e.response is not None else ""
            raise RenderError(f"Renderer error ({status_code}): {detail or e}") from e
        except requests.exceptions.RequestException as e:
            raise RenderError(f"Renderer error: {e}") from e

        if not response.content:
            raise RenderError("Renderer returned an empty response")
        return response.content
