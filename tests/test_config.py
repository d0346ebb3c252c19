from pathlib import Path

import pytest

from enbypub.config import PublishSettings
from enbypub.exceptions import ConfigError


@pytest.fixture(autouse=True)
def clean_env(monkeypatch):
    for name in ("ENBYPUB_BASE_URL", "ENBYPUB_PUBLIC_DIR", "ENBYPUB_ON_COLLISION"):
        monkeypatch.delenv(name, raising=False)


def test_defaults(tmp_path: Path):
    settings = PublishSettings.load(tmp_path)

    assert settings.root == tmp_path
    assert settings.public_dir == Path("public")
    assert settings.abs_public_dir == tmp_path / "public"
    assert settings.abs_content_dir == tmp_path / "content"
    assert settings.abs_feeds_file == tmp_path / "_feeds.yaml"
    assert settings.text_file_pattern == r"\.md$"
    assert settings.default_template == "text.html"
    assert settings.on_collision == "error"
    assert settings.base_url is None


def test_toml_file(tmp_path: Path):
    (tmp_path / ".enbypub.toml").write_text(
        'public_dir = "out"\nbase_url = "https://toml.example/"\n\n[content_types]\n".MD" = "text/x-markdown"\n'
    )

    settings = PublishSettings.load(tmp_path)

    assert settings.abs_public_dir == tmp_path / "out"
    assert settings.base_url == "https://toml.example/"
    assert settings.content_types == {"md": "text/x-markdown"}


def test_env_overrides_toml(tmp_path: Path, monkeypatch):
    (tmp_path / ".enbypub.toml").write_text('base_url = "https://toml.example/"\non_collision = "warn"\n')
    monkeypatch.setenv("ENBYPUB_BASE_URL", "https://env.example/")

    settings = PublishSettings.load(tmp_path)

    assert settings.base_url == "https://env.example/"
    assert settings.on_collision == "warn"


def test_overrides_beat_env(tmp_path: Path, monkeypatch):
    monkeypatch.setenv("ENBYPUB_PUBLIC_DIR", "from-env")

    settings = PublishSettings.load(tmp_path, public_dir=Path("from-flag"), base_url=None)

    assert settings.public_dir == Path("from-flag")


def test_absolute_paths_are_kept(tmp_path: Path):
    elsewhere = tmp_path / "elsewhere"
    settings = PublishSettings.load(tmp_path / "site", content_dir=elsewhere)
    assert settings.abs_content_dir == elsewhere


def test_invalid_pattern(tmp_path: Path):
    with pytest.raises(ConfigError, match="text_file_pattern"):
        PublishSettings.load(tmp_path, text_file_pattern="(")


def test_broken_toml(tmp_path: Path):
    (tmp_path / ".enbypub.toml").write_text("this is = = not toml")
    with pytest.raises(ConfigError):
        PublishSettings.load(tmp_path)
