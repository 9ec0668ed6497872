"""Application entry point for PHIXO Studio."""

from __future__ import annotations

from typing import Optional

from config.settings import load_config
from studio.ui.layout import build_app
from studio.utils.logging import setup_logging


def main(config_path: Optional[str] = None) -> None:
    """Load configuration and launch the Gradio interface."""
    config = load_config(config_path)
    logger = setup_logging(config)
    logger.info("Starting PHIXO Studio against proxy %s", config.proxy_url)
    app = build_app(config)
    app.queue()
    app.launch(share=False, inbrowser=False)


if __name__ == "__main__":
    main()
