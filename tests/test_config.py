from __future__ import annotations

from pathlib import Path

import pytest

from portal_preview.config import ConfigError, ConfigValidationError, YamlConfigLoader, deep_merge
from portal_preview.models import PreviewSettings


def test_load_settings_file(settings_path: Path) -> None:
    settings = YamlConfigLoader(settings_path, PreviewSettings).load()

    assert settings.environment == "prod"
    assert settings.target_group_header == "X-Target-Group"
    assert settings.preview_defaults.analytics_key == "UA-1234"
    assert [webspace.key for webspace in settings.webspaces] == ["corp"]
    assert len(settings.content) == 3


def test_missing_file_uses_defaults(tmp_path: Path) -> None:
    settings = YamlConfigLoader(tmp_path / "missing.yaml", PreviewSettings).load()

    assert settings.environment == "prod"
    assert settings.preview_defaults.analytics_key is None
    assert settings.webspaces == []
    assert settings.content == []


def test_template_dir_shorthand(tmp_path: Path) -> None:
    path = tmp_path / "preview.yaml"
    path.write_text("template_dir: themes/corp\n", encoding="utf-8")

    settings = YamlConfigLoader(path, PreviewSettings).load()

    assert settings.template_dirs == ["themes/corp"]


def test_invalid_yaml_raises_config_error(tmp_path: Path) -> None:
    path = tmp_path / "preview.yaml"
    path.write_text("webspaces: [unclosed\n", encoding="utf-8")

    with pytest.raises(ConfigError):
        YamlConfigLoader(path, PreviewSettings).load()


def test_non_mapping_raises_config_error(tmp_path: Path) -> None:
    path = tmp_path / "preview.yaml"
    path.write_text("- just\n- a list\n", encoding="utf-8")

    with pytest.raises(ConfigError):
        YamlConfigLoader(path, PreviewSettings).load()


def test_portal_localization_must_be_declared_by_webspace(tmp_path: Path) -> None:
    path = tmp_path / "preview.yaml"
    path.write_text(
        """
webspaces:
  - key: corp
    localizations:
      - language: en
    portals:
      - key: corp
        localizations:
          - language: nl
        """.strip(),
        encoding="utf-8",
    )

    with pytest.raises(ConfigValidationError) as excinfo:
        YamlConfigLoader(path, PreviewSettings).load()
    assert excinfo.value.errors


def test_deep_merge_does_not_mutate_inputs() -> None:
    base = {"a": {"b": 1, "c": 2}, "d": [1]}
    update = {"a": {"c": 3}, "e": 4}

    merged = deep_merge(base, update)

    assert merged == {"a": {"b": 1, "c": 3}, "d": [1], "e": 4}
    assert base == {"a": {"b": 1, "c": 2}, "d": [1]}
