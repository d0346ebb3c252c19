from __future__ import annotations

from pathlib import Path

import pytest

from enbypub.core.context import PublishContext
from enbypub.output.manager import OutputManager
from enbypub.rendering.templates import TemplateRenderer
from tests.helpers import FIXED_META


@pytest.fixture
def public_dir(tmp_path: Path) -> Path:
    return tmp_path / "public"


@pytest.fixture
def output(public_dir: Path) -> OutputManager:
    return OutputManager(public_dir)


@pytest.fixture
def renderer(tmp_path: Path, output: OutputManager) -> TemplateRenderer:
    return TemplateRenderer(tmp_path / "templates", output, FIXED_META)


@pytest.fixture
def context(output: OutputManager, renderer: TemplateRenderer) -> PublishContext:
    return PublishContext(output=output, renderer=renderer, meta=FIXED_META, base_url="https://example.com/")
