from __future__ import annotations

import logging

from .config import settings

LOG_FORMAT = "%(asctime)s %(levelname)s [%(name)s] %(message)s"


def configure_logging(level: str | None = None) -> None:
    """Configure root logging once for the backend process.

    Uvicorn installs its own handlers; we only attach ours when the root
    logger has none so repeated app imports (tests, reload) stay quiet.
    """
    resolved = (level or settings.LOG_LEVEL or "INFO").upper()
    root = logging.getLogger()
    if not root.handlers:
        logging.basicConfig(level=resolved, format=LOG_FORMAT)
    root.setLevel(resolved)
    # httpx logs every request at INFO; keep interpreter calls out of the app log
    logging.getLogger("httpx").setLevel(logging.WARNING)
