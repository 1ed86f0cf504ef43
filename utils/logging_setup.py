"""Process-level logging for hosts that embed the pipeline."""
import logging

from settings import Settings

_FORMAT = "%(asctime)s  %(levelname)-8s  %(name)s  %(message)s"
_DATE_FORMAT = "%H:%M:%S"


def configure_logging(level: str | None = None) -> None:
    """Apply the project's console format at `level`.

    Without an explicit level, `Settings().log_level` (SCENECARD_LOG_LEVEL)
    is used. Unknown level names fall back to INFO.
    """
    if level is None:
        level = Settings().log_level
    numeric_level = getattr(logging, level.upper(), None)
    if not isinstance(numeric_level, int):
        numeric_level = logging.INFO
    logging.basicConfig(
        level=numeric_level,
        format=_FORMAT,
        datefmt=_DATE_FORMAT,
        force=True,
    )
