"""Callback implementations for the Gradio interface."""

from __future__ import annotations

import logging
from typing import Any, Optional, Tuple

from config.settings import AppConfig
from studio.backends.imagen4 import MODEL_NAME as IMAGEN_MODEL, Imagen4Backend
from studio.backends.nano_banana import EditRequest, NanoBananaBackend
from studio.backends.seedream import SeedreamBackend, SeedreamRequest, credit_cost
from studio.prompts.category_presets import CategoryPresetRegistry, find_quick_edit
from studio.services.history_service import GenerationHistoryService
from studio.session.errors import ErrorKind
from studio.session.generation_session import GenerationSession, SubmitOutcome
from studio.utils.image_utils import image_dimensions, to_data_url

logger = logging.getLogger(__name__)

SEEDREAM_MODEL = "seedream-4"

_FAILURE_PREFIX = {
    ErrorKind.INSUFFICIENT_CREDITS: "Not enough credits",
    ErrorKind.ALREADY_IN_PROGRESS: "Busy",
    ErrorKind.REMOTE_REJECTED: "Rejected by safety filters",
    ErrorKind.REMOTE_UNAVAILABLE: "Service unavailable",
    ErrorKind.INVALID_RESULT: "No usable result",
}


def describe_outcome(outcome: SubmitOutcome, credits: int) -> str:
    """Render a submission outcome as a status line."""
    if outcome.ok:
        note = "" if outcome.credits_deducted else " (credits could not be deducted)"
        return f"Done: {outcome.message} Credits remaining: {credits}{note}"
    prefix = _FAILURE_PREFIX.get(outcome.error_kind, "Failed") if outcome.error_kind else "Failed"
    return f"{prefix}: {outcome.message}"


def build_callbacks(
    config: AppConfig,
    editor_session: GenerationSession,
    generator_session: Optional[GenerationSession] = None,
    edit_backend: Optional[NanoBananaBackend] = None,
    seedream_backend: Optional[SeedreamBackend] = None,
    imagen_backend: Optional[Imagen4Backend] = None,
    history: Optional[GenerationHistoryService] = None,
    registry: Optional[CategoryPresetRegistry] = None,
) -> dict[str, Any]:
    """Return a dictionary of Gradio callback functions.

    The editor and the generator each own a session so their undo histories
    and in-flight requests stay independent; both draw on the same account.
    """

    presets = registry or CategoryPresetRegistry()
    session = editor_session
    generator = generator_session or GenerationSession(editor_session.account, notifier=editor_session.notifier)

    def _credits_line() -> str:
        return f"Credits: {session.credits}"

    def _history_line() -> str:
        return f"Step {session.current_index + 1} of {len(session.history)}"

    def _normalize_hotspot(x: Any, y: Any) -> Optional[Tuple[float, float]]:
        if x in ("", None) or y in ("", None):
            return None
        try:
            return float(x), float(y)
        except (TypeError, ValueError):
            return None

    def on_upload(image: Any) -> tuple[Optional[str], str]:
        if image is None:
            session.reset(None)
            return None, "No image loaded."
        try:
            reference = to_data_url(image)
        except (OSError, TypeError, ValueError) as exc:
            return None, f"Could not read the image: {exc}"
        session.reset(reference)
        return reference, f"Image loaded. {_credits_line()}"

    async def on_apply_edit(
        prompt: str,
        label: str = "",
        output_format: str = "",
        hotspot_x: Any = None,
        hotspot_y: Any = None,
    ) -> tuple[Optional[str], str]:
        if edit_backend is None:
            raise RuntimeError("Nano Banana backend is not configured")
        base_image = session.current_result()
        if base_image is None:
            return None, "Upload an image before editing."
        if not (prompt or "").strip():
            return base_image, "Describe the edit first."

        try:
            call = edit_backend.as_call(
                EditRequest(
                    prompt=prompt.strip(),
                    base_image=base_image,
                    output_format=output_format or config.default_output_format,
                    hotspot=_normalize_hotspot(hotspot_x, hotspot_y),
                )
            )
        except ValueError as exc:
            return base_image, f"Invalid edit: {exc}"

        outcome = await session.submit(label or prompt.strip(), 1, call)
        return session.current_result(), describe_outcome(outcome, session.credits)

    async def on_quick_edit(label: str) -> tuple[Optional[str], str]:
        try:
            edit = find_quick_edit(label)
        except KeyError as exc:
            return session.current_result(), str(exc)
        return await on_apply_edit(edit.prompt, edit.label)

    async def on_generate(
        prompt: str,
        model: str = SEEDREAM_MODEL,
        category: str = "",
        aspect_ratio: str = "4:3",
        resolution: str = "1k",
        init_image: Any = None,
    ) -> tuple[Optional[str], str]:
        category = category or config.default_category
        cost = 1
        enhanced: Optional[str] = None
        try:
            if model == IMAGEN_MODEL:
                if imagen_backend is None:
                    raise RuntimeError("Imagen-4 backend is not configured")
                call = imagen_backend.as_call(prompt, "1:1" if aspect_ratio == "original" else aspect_ratio)
            else:
                if seedream_backend is None:
                    raise RuntimeError("Seedream backend is not configured")
                request = SeedreamRequest(
                    prompt=prompt,
                    aspect_ratio=aspect_ratio,
                    category=category,
                    image_input=to_data_url(init_image) if init_image is not None else None,
                    resolution=resolution,
                    original_dimensions=image_dimensions(init_image),
                )
                cost = credit_cost(resolution)
                enhanced = seedream_backend.enhance_prompt(request)
                call = seedream_backend.as_call(request)
        except (TypeError, ValueError) as exc:
            return generator.current_result(), f"Invalid request: {exc}"

        outcome = await generator.submit(prompt.strip() or enhanced or "generation", cost, call)
        if outcome.ok and history is not None and outcome.reference:
            try:
                history.record_result(
                    prompt=prompt,
                    image_url=outcome.reference,
                    model=model,
                    credits_used=cost,
                    enhanced_prompt=enhanced,
                    category=category,
                    aspect_ratio=aspect_ratio,
                    resolution=resolution,
                )
            except OSError as exc:
                logger.error("Could not save generation to the gallery: %s", exc)
        return generator.current_result(), describe_outcome(outcome, generator.credits)

    def on_undo() -> tuple[Optional[str], str]:
        if session.undo() is None:
            return session.current_result(), "Nothing to undo."
        return session.current_result(), f"Undone. {_history_line()}"

    def on_redo() -> tuple[Optional[str], str]:
        if session.redo() is None:
            return session.current_result(), "Nothing to redo."
        return session.current_result(), f"Redone. {_history_line()}"

    def on_generator_undo() -> tuple[Optional[str], str]:
        if generator.undo() is None:
            return generator.current_result(), "Nothing to undo."
        return generator.current_result(), "Undone."

    def on_generator_redo() -> tuple[Optional[str], str]:
        if generator.redo() is None:
            return generator.current_result(), "Nothing to redo."
        return generator.current_result(), "Redone."

    def on_show_original() -> tuple[Optional[str], str]:
        return session.original_result(), "Showing the original image."

    def on_refresh_gallery(limit: int = 20) -> list[tuple[str, str]]:
        if history is None:
            return []
        return [(record.image_url, record.prompt) for record in history.list(int(limit))]

    def on_category_change(category: str) -> list[str]:
        return presets.suggestions(category)

    return {
        "on_upload": on_upload,
        "on_apply_edit": on_apply_edit,
        "on_quick_edit": on_quick_edit,
        "on_generate": on_generate,
        "on_undo": on_undo,
        "on_redo": on_redo,
        "on_generator_undo": on_generator_undo,
        "on_generator_redo": on_generator_redo,
        "on_show_original": on_show_original,
        "on_refresh_gallery": on_refresh_gallery,
        "on_category_change": on_category_change,
        "credits_line": _credits_line,
    }
