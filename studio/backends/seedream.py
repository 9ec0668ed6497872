"""Seedream image generation through the proxy server."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Dict, List, Optional, Tuple, Union

from config.settings import AppConfig
from studio.backends.base import ProxyBackend
from studio.prompts.category_presets import CategoryPresetRegistry
from studio.session.generation_session import BackendResponse, RemoteCall

BASE_RESOLUTIONS = {"1k": 1024, "2k": 2048, "4k": 4096}


@dataclass(slots=True)
class SeedreamRequest:
    """Request data for a Seedream generation."""

    prompt: str
    aspect_ratio: str = "4:3"
    category: str = "advertentie"
    image_input: Optional[Union[str, List[str]]] = None
    object_image: Optional[str] = None
    resolution: str = "1k"
    skip_enhancement: bool = False
    original_dimensions: Optional[Tuple[int, int]] = None


def credit_cost(resolution: str) -> int:
    """4k output costs two credits, everything else one."""
    return 2 if resolution == "4k" else 1


def resolution_dimensions(
    resolution: str,
    aspect_ratio: str,
    original_dimensions: Optional[Tuple[int, int]] = None,
) -> Tuple[int, int]:
    """Return ``(width, height)`` with the long side at the tier's base size."""
    base_size = BASE_RESOLUTIONS.get(resolution, 1024)
    try:
        if aspect_ratio == "original" and original_dimensions:
            width_part, height_part = (float(part) for part in original_dimensions)
        else:
            ratio = aspect_ratio if aspect_ratio != "original" else "1:1"
            width_part, height_part = (float(part) for part in ratio.split(":", 1))
        aspect = width_part / height_part
    except (ValueError, ZeroDivisionError) as exc:
        raise ValueError(f"Invalid aspect ratio '{aspect_ratio}'") from exc
    if aspect <= 0:
        raise ValueError(f"Invalid aspect ratio '{aspect_ratio}'")

    if aspect >= 1:
        return base_size, round(base_size / aspect)
    return round(base_size * aspect), base_size


class SeedreamBackend(ProxyBackend):
    """Text-to-image and image-to-image via ``/api/seedream-4``."""

    name = "Seedream"
    path = "/api/seedream-4"

    def __init__(self, config: AppConfig, registry: Optional[CategoryPresetRegistry] = None, **kwargs: Any) -> None:
        super().__init__(config, **kwargs)
        self.registry = registry or CategoryPresetRegistry()

    def enhance_prompt(self, request: SeedreamRequest) -> str:
        if request.skip_enhancement:
            return request.prompt
        return self.registry.compose(request.category, request.prompt)

    def build_payload(self, request: SeedreamRequest) -> Dict[str, Any]:
        width, height = resolution_dimensions(request.resolution, request.aspect_ratio, request.original_dimensions)
        payload: Dict[str, Any] = {
            "prompt": self.enhance_prompt(request),
            "aspect_ratio": request.aspect_ratio,
            "width": width,
            "height": height,
            "resolution": request.resolution,
        }
        if request.image_input:
            payload["image_input"] = (
                list(request.image_input) if isinstance(request.image_input, list) else request.image_input
            )
        if request.object_image:
            payload["object_image"] = request.object_image
        return payload

    def generate(self, request: SeedreamRequest) -> BackendResponse:
        """Generate an image and return the proxy's image URL."""
        return self._post(self.path, self.build_payload(request))

    def as_call(self, request: SeedreamRequest) -> RemoteCall:
        return self._as_call(self._post, self.path, self.build_payload(request))
