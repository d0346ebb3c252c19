"""Discovery of source documents under the content directory."""

from __future__ import annotations

import logging
import re
from pathlib import Path

logger = logging.getLogger(__name__)


def discover(content_dir: Path, pattern: str | re.Pattern[str]) -> list[Path]:
    """Return files below ``content_dir`` whose relative POSIX path matches ``pattern``, sorted."""
    regex = re.compile(pattern) if isinstance(pattern, str) else pattern
    if not content_dir.is_dir():
        logger.warning("Content directory %s does not exist", content_dir)
        return []
    found = sorted(
        path
        for path in content_dir.rglob("*")
        if path.is_file() and regex.search(path.relative_to(content_dir).as_posix())
    )
    logger.debug("Found %d source documents in %s", len(found), content_dir)
    return found
