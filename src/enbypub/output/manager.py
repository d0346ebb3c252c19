"""Deduplicated, reference-counted output files.

Every writer of a logical output path shares one handle. The file is only
released, and its modification time applied, when the last writer closes.
"""

from __future__ import annotations

import logging
import os
import shutil
import threading
from collections.abc import Mapping
from datetime import datetime
from pathlib import Path
from typing import IO, Self

from enbypub.exceptions import OutputFileError
from enbypub.output.content_types import content_type_for_path

logger = logging.getLogger(__name__)


class OutputFile:
    """Handle to one logical output path. Obtain through :meth:`OutputManager.create`."""

    def __init__(self, manager: OutputManager, path: str, ospath: Path) -> None:
        self._manager = manager
        self.path = path
        self.ospath = ospath
        self._fp: IO[bytes] | None = None
        self._opens = 0
        self._error: OutputFileError | None = None
        self.content_type: str | None = None
        self.mod_time: datetime | None = None

    def __repr__(self) -> str:
        return f"OutputFile({self.path!r}, opens={self._opens})"

    def __enter__(self) -> Self:
        return self

    def __exit__(self, *exc: object) -> None:
        self.close()

    @property
    def is_open(self) -> bool:
        return self._fp is not None

    @property
    def opens(self) -> int:
        return self._opens

    @property
    def error(self) -> OutputFileError | None:
        return self._error

    def _fail(self, reason: str, cause: BaseException | None = None) -> OutputFileError:
        if self._error is None:
            self._error = OutputFileError(self.path, reason)
            self._error.__cause__ = cause
        return self._error

    def _check(self) -> None:
        if self._error is not None:
            raise self._error
        if self._fp is None:
            raise self._fail("file not open")

    def _open(self) -> None:
        try:
            self.ospath.parent.mkdir(parents=True, exist_ok=True)
            self._fp = self.ospath.open("wb")
        except OSError as e:
            raise self._fail(f"cannot open: {e}", e) from e
        self._opens = 1

    def as_type(self, content_type: str | None) -> Self:
        """Set the content type the file will be published with."""
        if self._error is None:
            self.content_type = content_type
        return self

    def at(self, mod_time: datetime | None) -> Self:
        """Set the modification time applied when the last writer closes."""
        if self._error is None:
            self.mod_time = mod_time
        return self

    def write(self, data: str | bytes) -> int:
        self._check()
        if isinstance(data, str):
            data = data.encode("utf-8")
        try:
            return self._fp.write(data)
        except OSError as e:
            raise self._fail(f"cannot write: {e}", e) from e

    def copy_from(self, source: Path) -> None:
        """Stream ``source`` into this file, then close it.

        The content type is guessed from ``source`` when none was set.
        """
        self._check()
        if self.content_type is None:
            self.content_type = content_type_for_path(Path(source).name, self._manager.content_types)
        try:
            with Path(source).open("rb") as src:
                shutil.copyfileobj(src, self._fp)
        except OSError as e:
            raise self._fail(f"cannot copy from '{source}': {e}", e) from e
        self.close()

    def _discard(self) -> None:
        fp, self._fp = self._fp, None
        self._opens = 0
        if fp is not None:
            try:
                fp.close()
            except OSError:
                logger.debug("Ignoring close failure of failed output %s", self.path)

    def close(self) -> None:
        """Release one reference; the last one closes the file and applies ``mod_time``.

        A failed handle raises its error. Closing a finalised handle is a no-op.
        """
        with self._manager.lock:
            if self._error is not None:
                self._discard()
                raise self._error
            if self._fp is None:
                return
            self._opens -= 1
            if self._opens > 0:
                return
            fp, self._fp = self._fp, None
        try:
            fp.close()
            if self.mod_time is not None:
                stamp = self.mod_time.timestamp()
                os.utime(self.ospath, (stamp, stamp))
        except OSError as e:
            raise self._fail(f"cannot finalise: {e}", e) from e
        logger.debug("Wrote %s (%s)", self.path, self.content_type or "unknown type")


class OutputManager:
    """Owns every output handle of a run and the manifest of paths produced."""

    def __init__(self, root: Path, content_types: Mapping[str, str] | None = None) -> None:
        self.root = Path(root)
        self.content_types = dict(content_types or {})
        self.lock = threading.Lock()
        self._files: dict[str, OutputFile] = {}

    def create(self, *path: str) -> OutputFile:
        """Return the open handle for ``path``, opening it if needed.

        A path whose handle was already finalised is reopened and truncated.
        Failures are stored in the returned handle and raised by its next use.
        """
        key = self._join(path)
        with self.lock:
            handle = self._files.get(key)
            if handle is not None and handle.error is None:
                if handle.is_open:
                    handle._opens += 1
                    return handle
                logger.warning("Output %s was already written; rewriting it", key)
            elif handle is not None:
                handle._discard()
            handle = OutputFile(self, key, self.root / key)
            self._files[key] = handle
            handle.content_type = content_type_for_path(key, self.content_types)
            if not key:
                handle._fail("empty or unsafe output path")
                return handle
            try:
                handle._open()
            except OutputFileError:
                logger.debug("Deferring open failure of %s to its first use", key)
            return handle

    @staticmethod
    def _join(path: tuple[str, ...]) -> str:
        parts: list[str] = []
        for component in path:
            for part in str(component).replace("\\", "/").split("/"):
                if part in ("", "."):
                    continue
                if part == "..":
                    return ""
                parts.append(part)
        return "/".join(parts)

    def manifest(self) -> list[Path]:
        """Every distinct absolute path created during the run, sorted.

        Paths whose handle failed are left out.
        """
        with self.lock:
            return sorted((self.root / key).absolute() for key, handle in self._files.items() if handle.error is None)

    def entries(self) -> list[tuple[Path, str | None]]:
        """``(path, content_type)`` pairs for the manifest."""
        with self.lock:
            return sorted(
                ((self.root / key).absolute(), handle.content_type)
                for key, handle in self._files.items()
                if handle.error is None
            )

    def open_handles(self) -> list[OutputFile]:
        with self.lock:
            return [handle for handle in self._files.values() if handle.is_open]
