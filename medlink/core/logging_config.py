# medlink/core/logging_config.py
import logging

from medlink.core.config import settings

_configured = False


def configure_logging(level: str | None = None) -> None:
    """
    Configure root logging once per process.
    """
    global _configured
    if _configured:
        return

    logging.basicConfig(
        level=(level or settings.LOG_LEVEL).upper(),
        format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
    )
    # Reduce noise from HTTP client libraries
    logging.getLogger("httpx").setLevel(logging.WARNING)
    logging.getLogger("httpcore").setLevel(logging.WARNING)
    _configured = True
