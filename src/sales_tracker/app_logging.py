"""Logging setup for the sales tracker.

Services attach the rows they touch through ``extra`` (``sale_id``,
``client_id``, ``photo_id``, ``path``); the formatter appends them so a failed
upload or deletion can be traced back to its storage object.
"""

import logging

ROOT_LOGGER = "sales_tracker"
CONTEXT_FIELDS = ("sale_id", "client_id", "photo_id", "path")


class ContextFormatter(logging.Formatter):
    """Formatter that appends record context passed through ``extra``."""

    def formatMessage(self, record: logging.LogRecord) -> str:  # noqa: N802
        message = super().formatMessage(record)
        context = " ".join(
            f"{name}={getattr(record, name)}"
            for name in CONTEXT_FIELDS
            if getattr(record, name, None) is not None
        )
        return f"{message} [{context}]" if context else message


def configure_logging(level: str = "INFO") -> None:
    """Attach one stream handler to the package logger.

    Repeated calls only update the level.
    """
    logger = logging.getLogger(ROOT_LOGGER)
    logger.setLevel(level.upper())
    if logger.handlers:
        return
    handler = logging.StreamHandler()
    handler.setFormatter(ContextFormatter("%(levelname)s: %(name)s: %(message)s"))
    logger.addHandler(handler)
    logger.propagate = False
