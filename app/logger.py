from __future__ import annotations

import sys

from loguru import logger

from app.config import AppSettings, settings

_FORMAT = (
    "<green>{time:YYYY-MM-DD HH:mm:ss}</green> | <level>{level}</level> | "
    "{extra[component]} | {message}"
)


def configure_logging(cfg: AppSettings) -> None:
    """(Re)install sinks. Called at import and again by create_app()."""
    logger.remove()
    logger.configure(extra={"component": "app"})
    logger.add(
        sys.stdout,
        level=cfg.log_level,
        enqueue=True,
        backtrace=False,
        diagnose=False,
        colorize=True,
        format=_FORMAT,
    )
    if cfg.log_file is not None:
        logger.add(
            cfg.log_file,
            rotation="20 MB",
            retention="14 days",
            compression="zip",
            level=cfg.log_level,
            enqueue=True,
            serialize=True,
        )


configure_logging(settings)


def get_logger(name: str = "app"):
    return logger.bind(component=name)
