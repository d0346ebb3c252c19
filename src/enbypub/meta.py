"""Build metadata, computed once per run."""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import UTC, datetime
from importlib.metadata import PackageNotFoundError, version

import enbypub

PACKAGE = "enbypub"


def package_version() -> str:
    try:
        return version(PACKAGE)
    except PackageNotFoundError:
        return enbypub.__version__


@dataclass(frozen=True)
class BuildMeta:
    """Version and timing information exposed to templates as ``meta``."""

    version: str = field(default_factory=package_version)
    package: str = PACKAGE
    build_time: datetime = field(default_factory=lambda: datetime.now(UTC))

    def generator(self) -> str:
        return f"{self.package}/{self.version}"

    def __str__(self) -> str:
        return f"{self.generator()} built {self.build_time.isoformat()}"
