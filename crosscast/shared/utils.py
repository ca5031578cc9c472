import sys
from os import environ
from traceback import TracebackException

from loguru import logger

from .config import config


def format_error(ex: BaseException) -> str:
    return "".join(TracebackException.from_exception(ex).format())


def get_build_info() -> tuple[str, str]:
    """Return (component name, build commit) used to prefix log lines."""
    return environ.get("CROSSCAST_COMPONENT", "crosscast"), environ.get("BUILD_COMMIT", "dev")


def init_logger():
    logger.remove()

    component, commit_id = get_build_info()

    if config.get_bool("DEBUG", False):
        logger_level = "DEBUG"
        logger_format = (
            f"<yellow>{component}:{commit_id}</yellow> | "
            "<green>{time:MM-DD HH:mm:ss.SSS}</green> | "
            "<level>{level: <8}</level> | "
            "<cyan>{name}</cyan>:<cyan>{function}</cyan>:<cyan>{line}</cyan> | "
            "<level>{message}</level>"
        )
    else:
        logger_level = "INFO"
        logger_format = (
            f"{component}:{commit_id} | "
            "{time:MM-DD HH:mm:ss.SSS} | "
            "{level: <8} | "
            "{name}:{function}:{line} | "
            "{message}"
        )
    logger.add(sys.stderr, level=logger_level, format=logger_format)
