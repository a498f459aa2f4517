"""Run the sticker bot with uvicorn."""

from __future__ import annotations

import sys

import uvicorn

from stickerbot.config import ConfigurationError, load_config
from stickerbot.logging import configure_logging, get_logger
from stickerbot.main import create_app
from stickerbot.runtime.paths import StorageError

APP_HOST = "0.0.0.0"

logger = get_logger("entrypoint")


def main() -> int:
    try:
        config = load_config()
    except ConfigurationError as exc:
        configure_logging()
        logger.error("Invalid configuration: %s", exc)
        return 2

    configure_logging(config.logging.level, config.logging.log_file)
    try:
        app = create_app(config)
    except StorageError as exc:
        logger.error("Unable to prepare storage: %s", exc)
        return 1

    logger.info("Starting server at port %s...", config.port)
    uvicorn.run(app, host=APP_HOST, port=config.port, log_config=None)
    return 0


if __name__ == "__main__":
    sys.exit(main())
