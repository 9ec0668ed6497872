"""Google Imagen-4 generation through the proxy server."""

from __future__ import annotations

from typing import Any, Dict

from studio.backends.base import ProxyBackend
from studio.session.generation_session import BackendResponse, RemoteCall

MODEL_NAME = "google/imagen-4"


class Imagen4Backend(ProxyBackend):
    """Photorealistic text-to-image via ``/api/imagen4-generate``."""

    name = "Google Imagen-4"
    path = "/api/imagen4-generate"

    def build_payload(self, prompt: str, aspect_ratio: str = "1:1") -> Dict[str, Any]:
        if not prompt.strip():
            raise ValueError("prompt must not be empty")
        return {"prompt": prompt, "aspectRatio": aspect_ratio}

    def generate(self, prompt: str, aspect_ratio: str = "1:1") -> BackendResponse:
        return self._post(self.path, self.build_payload(prompt, aspect_ratio))

    def as_call(self, prompt: str, aspect_ratio: str = "1:1") -> RemoteCall:
        return self._as_call(self._post, self.path, self.build_payload(prompt, aspect_ratio))
