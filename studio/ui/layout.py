"""Gradio layout for the photo editor and generator."""

from __future__ import annotations

import logging
from typing import Any

try:
    import gradio as gr
except ImportError:  # pragma: no cover
    gr = None  # type: ignore

from config.settings import AppConfig
from studio.backends.imagen4 import MODEL_NAME as IMAGEN_MODEL, Imagen4Backend
from studio.backends.nano_banana import OUTPUT_FORMATS, NanoBananaBackend
from studio.backends.seedream import BASE_RESOLUTIONS, SeedreamBackend
from studio.prompts.category_presets import ASPECT_RATIO_OPTIONS, QUICK_EDITS, CategoryPresetRegistry
from studio.services.account_service import JsonAccountStore
from studio.services.history_service import GenerationHistoryService
from studio.services.notifier import LoggingNotifier
from studio.session.generation_session import GenerationSession
from studio.ui.callbacks import SEEDREAM_MODEL, build_callbacks


class GradioNotifier:
    """Show notifications as Gradio toasts and keep a log line."""

    def __init__(self) -> None:
        self._log = LoggingNotifier(logging.getLogger("phixo_studio.ui"))

    def notify(self, title: str, description: str, variant: str = "default") -> None:
        self._log.notify(title, description, variant)
        if variant == "destructive":
            gr.Warning(f"{title}: {description}")
        else:
            gr.Info(f"{title}: {description}")


def _load_registry(config: AppConfig) -> CategoryPresetRegistry:
    registry = CategoryPresetRegistry()
    registry.load_from_file(config.assets_dir / "categories.json")
    return registry


def build_app(config: AppConfig) -> Any:
    """Compose and return the Gradio application."""
    if gr is None:
        raise RuntimeError("Gradio is not installed, install the project dependencies first.")

    registry = _load_registry(config)
    account = JsonAccountStore(
        config.account_path,
        default_credits=config.default_credits,
        user_id=config.metadata.get("user_id"),
    )
    notifier = GradioNotifier()
    editor_session = GenerationSession(account, notifier=notifier, label="Nano Banana")
    generator_session = GenerationSession(account, notifier=notifier, label="PHIXO")
    callbacks_map = build_callbacks(
        config,
        editor_session,
        generator_session=generator_session,
        edit_backend=NanoBananaBackend(config),
        seedream_backend=SeedreamBackend(config, registry=registry),
        imagen_backend=Imagen4Backend(config),
        history=GenerationHistoryService(config.history_path, max_items=config.history_limit),
        registry=registry,
    )

    categories = registry.names()
    default_category = config.default_category if config.default_category in categories else categories[0]

    with gr.Blocks(title="PHIXO Studio") as demo:
        gr.Markdown("## PHIXO Studio")
        credits_md = gr.Markdown(callbacks_map["credits_line"]())

        with gr.Tab("Photo editor"):
            with gr.Row():
                with gr.Column():
                    upload = gr.Image(label="Photo", type="pil")
                    prompt = gr.Textbox(label="Describe the edit", lines=3)
                    with gr.Row():
                        output_format = gr.Dropdown(
                            label="Output format",
                            choices=list(OUTPUT_FORMATS),
                            value=config.default_output_format,
                        )
                        hotspot_x = gr.Number(label="Hotspot x (optional)")
                        hotspot_y = gr.Number(label="Hotspot y (optional)")
                    apply_btn = gr.Button("Apply edit (1 credit)", variant="primary")
                    quick_buttons = [gr.Button(edit.label) for edit in QUICK_EDITS]
                    with gr.Row():
                        undo_btn = gr.Button("Undo")
                        redo_btn = gr.Button("Redo")
                        original_btn = gr.Button("Show original")
                with gr.Column():
                    result = gr.Image(label="Result", type="filepath")
                    status = gr.Markdown("Ready.")

            upload.upload(fn=callbacks_map["on_upload"], inputs=[upload], outputs=[result, status])
            apply_btn.click(
                fn=callbacks_map["on_apply_edit"],
                inputs=[prompt, gr.State(""), output_format, hotspot_x, hotspot_y],
                outputs=[result, status],
            ).then(fn=callbacks_map["credits_line"], outputs=[credits_md])
            for button, edit in zip(quick_buttons, QUICK_EDITS):
                button.click(
                    fn=callbacks_map["on_quick_edit"],
                    inputs=[gr.State(edit.label)],
                    outputs=[result, status],
                ).then(fn=callbacks_map["credits_line"], outputs=[credits_md])
            undo_btn.click(fn=callbacks_map["on_undo"], outputs=[result, status])
            redo_btn.click(fn=callbacks_map["on_redo"], outputs=[result, status])
            original_btn.click(fn=callbacks_map["on_show_original"], outputs=[result, status])

        with gr.Tab("Photo generator"):
            with gr.Row():
                with gr.Column():
                    gen_prompt = gr.Textbox(label="Prompt", lines=4)
                    with gr.Row():
                        model = gr.Dropdown(
                            label="Model",
                            choices=[SEEDREAM_MODEL, IMAGEN_MODEL],
                            value=SEEDREAM_MODEL,
                        )
                        category = gr.Dropdown(label="Category", choices=categories, value=default_category)
                    suggestions = gr.Dropdown(
                        label="Suggestions",
                        choices=registry.suggestions(default_category),
                        allow_custom_value=True,
                    )
                    with gr.Row():
                        aspect_ratio = gr.Dropdown(
                            label="Aspect ratio",
                            choices=[(label, value) for value, label in ASPECT_RATIO_OPTIONS],
                            value="4:3",
                        )
                        resolution = gr.Radio(
                            label="Resolution (4k costs 2 credits)",
                            choices=list(BASE_RESOLUTIONS),
                            value="1k",
                        )
                    init_image = gr.Image(label="Reference image (optional)", type="pil")
                    generate_btn = gr.Button("Generate", variant="primary")
                    with gr.Row():
                        gen_undo_btn = gr.Button("Undo")
                        gen_redo_btn = gr.Button("Redo")
                with gr.Column():
                    gen_result = gr.Image(label="Generated image", type="filepath")
                    gen_status = gr.Markdown("Ready.")
                    gallery = gr.Gallery(label="Recent generations", columns=4)
                    refresh_btn = gr.Button("Refresh gallery")

            category.change(
                fn=lambda name: gr.update(choices=callbacks_map["on_category_change"](name)),
                inputs=[category],
                outputs=[suggestions],
            )
            suggestions.change(fn=lambda text: text or "", inputs=[suggestions], outputs=[gen_prompt])
            generate_btn.click(
                fn=callbacks_map["on_generate"],
                inputs=[gen_prompt, model, category, aspect_ratio, resolution, init_image],
                outputs=[gen_result, gen_status],
            ).then(fn=callbacks_map["credits_line"], outputs=[credits_md]).then(
                fn=callbacks_map["on_refresh_gallery"], outputs=[gallery]
            )
            gen_undo_btn.click(fn=callbacks_map["on_generator_undo"], outputs=[gen_result, gen_status])
            gen_redo_btn.click(fn=callbacks_map["on_generator_redo"], outputs=[gen_result, gen_status])
            refresh_btn.click(fn=callbacks_map["on_refresh_gallery"], outputs=[gallery])
            demo.load(fn=callbacks_map["on_refresh_gallery"], outputs=[gallery])

    return demo
