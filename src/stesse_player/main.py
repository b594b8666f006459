#!/usr/bin/env python3
"""Main entry point for the stesse-player backend proxy."""

from __future__ import annotations

import json
import logging
import logging.config
import sys
from pathlib import Path

from stesse_player.domain.shared.messages import LogTemplates

_LOGGING_CONFIG_PATH = Path(__file__).resolve().parents[2] / "logging_config.json"


def setup_logging(log_level: str = "INFO") -> None:
    resolved_level = getattr(logging, log_level.upper(), logging.INFO)

    try:
        with open(_LOGGING_CONFIG_PATH) as f:
            config = json.load(f)
        logging.config.dictConfig(config)
    except (FileNotFoundError, json.JSONDecodeError, ValueError):
        logging.basicConfig(
            level=resolved_level,
            format="%(asctime)s | %(levelname)-8s | %(name)s | %(message)s",
            datefmt="%Y-%m-%d %H:%M:%S",
        )
        logging.warning(LogTemplates.LOGGING_CONFIG_FALLBACK, _LOGGING_CONFIG_PATH)

    logging.getLogger().setLevel(resolved_level)


def main() -> int:
    from stesse_player.config.settings import get_settings

    settings = get_settings()
    setup_logging(settings.log_level)

    logger = logging.getLogger(__name__)

    import uvicorn

    from stesse_player.config.container import create_container
    from stesse_player.infrastructure.api.app import create_app

    container = create_container(settings)
    app = create_app(container)

    try:
        logger.info(
            LogTemplates.APP_STARTING.format(environment=settings.environment),
            settings.proxy.host,
            settings.proxy.port,
        )
        uvicorn.run(app, host=settings.proxy.host, port=settings.proxy.port, log_config=None)
        logger.info(LogTemplates.APP_STOPPED)
        return 0
    except KeyboardInterrupt:
        logger.info(LogTemplates.APP_KEYBOARD_INTERRUPT)
        return 0
    except Exception as e:
        logger.exception(LogTemplates.APP_FATAL_ERROR, e)
        return 1


def cli() -> None:
    """Console script entry point (used by pyproject.toml [project.scripts])."""
    sys.exit(main())


if __name__ == "__main__":
    cli()  # pragma: no cover
