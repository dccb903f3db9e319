"""taggable - inline tags in free-form text.

Keeps a display form (``@Alice``) and a canonical form (``@1ax``) of the same
text in one buffer, with cursor handling and repair of broken tags.
"""

import logging
import os
from logging.handlers import RotatingFileHandler
from pathlib import Path

from taggable.conversion import (
    Segment,
    build_buffer_from_canonical,
    segments_from_canonical,
    to_canonical,
    to_display,
)
from taggable.editor import ActiveQuery, EditorState, Selection, TagTextSession
from taggable.encoding import EncodedTag, TagRegistry, decode, encode
from taggable.matching import MatchSpan, find_canonical_spans, find_tag_spans
from taggable.policy import DEFAULT_POLICIES, TagPolicy

__version__ = "0.1.0"

__all__ = [
    "DEFAULT_POLICIES",
    "ActiveQuery",
    "EditorState",
    "EncodedTag",
    "MatchSpan",
    "Segment",
    "Selection",
    "TagPolicy",
    "TagRegistry",
    "TagTextSession",
    "build_buffer_from_canonical",
    "decode",
    "encode",
    "find_canonical_spans",
    "find_tag_spans",
    "segments_from_canonical",
    "to_canonical",
    "to_display",
]


def _setup_logging(log_dir: Path, console_level: str = "INFO") -> None:
    """Log DEBUG and up to a rotating file and *console_level* to stderr.

    Safe to call again (e.g. from the reloader process): handlers are only
    attached once per log file.
    """
    log_dir.mkdir(parents=True, exist_ok=True)
    log_file = log_dir / "taggable.log"

    root_logger = logging.getLogger()
    root_logger.setLevel(logging.DEBUG)
    if any(
        getattr(handler, "baseFilename", None) == os.path.abspath(log_file)
        for handler in root_logger.handlers
    ):
        return

    # File handler - detailed logging with rotation (10MB, keep 5 backups)
    file_handler = RotatingFileHandler(
        log_file,
        maxBytes=10 * 1024 * 1024,
        backupCount=5,
        encoding="utf-8",
    )
    file_handler.setLevel(logging.DEBUG)
    file_formatter = logging.Formatter(
        "%(asctime)s | %(levelname)-8s | %(name)s:%(lineno)d | %(message)s",
        datefmt="%Y-%m-%d %H:%M:%S",
    )
    file_handler.setFormatter(file_formatter)

    console_handler = logging.StreamHandler()
    console_handler.setLevel(console_level.upper())
    console_handler.setFormatter(logging.Formatter("%(levelname)s: %(message)s"))

    root_logger.addHandler(file_handler)
    root_logger.addHandler(console_handler)

    logging.info("Logging configured. Log file: %s", log_file.absolute())


def main() -> None:
    """Entry point for the tagging demo application."""
    from nicegui import ui

    from taggable.config import get_settings

    settings = get_settings()
    _setup_logging(settings.app.log_dir, settings.app.log_level)

    if not settings.dev.enable_demo_pages:
        logging.error("Demo pages are disabled (DEV__ENABLE_DEMO_PAGES=false)")
        return

    import taggable.demo.page  # noqa: F401 - registers routes

    print(f"taggable v{__version__}")
    print(f"Starting demo on http://{settings.app.host}:{settings.app.port}")

    ui.run(
        host=settings.app.host,
        port=settings.app.port,
        reload=settings.dev.reload,
        storage_secret=settings.app.storage_secret.get_secret_value(),
        title="taggable demo",
    )


if __name__ in {"__main__", "__mp_main__"}:
    main()
