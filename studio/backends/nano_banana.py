"""Nano Banana image editing through the proxy server."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional, Tuple

from studio.backends.base import ProxyBackend
from studio.session.generation_session import BackendResponse, RemoteCall

OUTPUT_FORMATS = ("jpg", "png", "webp")


@dataclass(slots=True)
class EditRequest:
    """Request data for a Nano Banana edit."""

    prompt: str
    base_image: str
    additional_images: List[str] = field(default_factory=list)
    output_format: str = "jpg"
    hotspot: Optional[Tuple[float, float]] = None


def hotspot_prompt(prompt: str, hotspot: Optional[Tuple[float, float]]) -> str:
    """Append a position hint so the model focuses on the selected area."""
    if hotspot is None:
        return prompt
    x, y = hotspot
    return (
        f"{prompt} (please enhance the specific area at position x={x}, y={y} "
        "while preserving the rest of the image)"
    )


class NanoBananaBackend(ProxyBackend):
    """Image-to-image edits via the ``/api/nano-banana`` proxy endpoint."""

    name = "Nano Banana"
    path = "/api/nano-banana"

    def build_payload(self, request: EditRequest) -> Dict[str, Any]:
        if request.output_format not in OUTPUT_FORMATS:
            raise ValueError(f"Invalid output format '{request.output_format}'. Must be one of: {OUTPUT_FORMATS}")
        if not request.base_image:
            raise ValueError("An edit needs a base image")
        payload: Dict[str, Any] = {
            "prompt": hotspot_prompt(request.prompt, request.hotspot),
            "image_input": [request.base_image, *request.additional_images],
            "output_format": request.output_format,
        }
        if request.hotspot is not None:
            payload["hotspot"] = {"x": request.hotspot[0], "y": request.hotspot[1]}
        return payload

    def edit(self, request: EditRequest) -> BackendResponse:
        """Run an edit and return the proxy's image URL."""
        return self._post(self.path, self.build_payload(request))

    def as_call(self, request: EditRequest) -> RemoteCall:
        """Validate now, post later from a worker thread."""
        return self._as_call(self._post, self.path, self.build_payload(request))
