"""Publish context shared by aggregators.

Carries the output manager, template renderer and build metadata of one run
without global state.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from enbypub.meta import BuildMeta
    from enbypub.output.manager import OutputManager
    from enbypub.rendering.templates import TemplateRenderer


@dataclass(frozen=True)
class PublishContext:
    """Run-scoped dependencies handed to every aggregator.

    Attributes:
        output: Manager owning every output handle of the run
        renderer: Template renderer writing through ``output``
        meta: Build metadata computed once per run
        base_url: Site-wide public URL, used when an aggregator sets none

    """

    output: OutputManager
    renderer: TemplateRenderer
    meta: BuildMeta
    base_url: str | None = None
