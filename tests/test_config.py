"""Tests for schemaref.config."""

from __future__ import annotations

from pathlib import Path

import pytest

from schemaref.config import DEFAULT_EXCLUDE_TAGS, ConfigError, ReferenceConfig, load_config, normalize_tags


def test_load_config_returns_defaults_when_missing(tmp_path: Path) -> None:
    config = load_config(tmp_path)

    assert isinstance(config, ReferenceConfig)
    assert config.root == tmp_path.resolve()
    assert config.out == tmp_path.resolve() / "tmp"
    assert config.exclude_internal is True
    assert config.exclude_tags == list(DEFAULT_EXCLUDE_TAGS)
    assert config.disable_sources is True
    assert config.log_level == "Error"
    assert config.output is None
    assert config.title is None


def test_load_config_parses_expected_fields(tmp_path: Path) -> None:
    config_file = tmp_path / ".schemaref.yml"
    config_file.write_text(
        """
out: "build/docs"
exclude_internal: false
exclude_tags:
  - "@format"
  - "TJS-pattern"
  - "@format"
disable_sources: "no"
log_level: "Verbose"
output: "schema-reference"
title: "Config Reference"
""",
        encoding="utf-8",
    )

    config = load_config(config_file)

    assert config.root == tmp_path.resolve()
    assert config.out == tmp_path.resolve() / "build/docs"
    assert config.exclude_internal is False
    assert config.exclude_tags == ["@format", "@TJS-pattern"]
    assert config.disable_sources is False
    assert config.log_level == "Verbose"
    assert config.output == "schema-reference"
    assert config.title == "Config Reference"


def test_empty_exclude_tags_clears_defaults(tmp_path: Path) -> None:
    (tmp_path / ".schemaref.yml").write_text("exclude_tags: []\n", encoding="utf-8")

    assert load_config(tmp_path).exclude_tags == []


def test_empty_config_file_uses_defaults(tmp_path: Path) -> None:
    (tmp_path / ".schemaref.yml").write_text("\n", encoding="utf-8")

    config = load_config(tmp_path)

    assert config.exclude_tags == list(DEFAULT_EXCLUDE_TAGS)


def test_load_config_rejects_non_mapping_root(tmp_path: Path) -> None:
    (tmp_path / ".schemaref.yml").write_text("- out\n- tmp\n", encoding="utf-8")

    with pytest.raises(ConfigError, match="mapping"):
        load_config(tmp_path)


def test_load_config_rejects_invalid_yaml(tmp_path: Path) -> None:
    (tmp_path / ".schemaref.yml").write_text("out: [unclosed\n", encoding="utf-8")

    with pytest.raises(ConfigError, match="Failed to parse"):
        load_config(tmp_path)


def test_load_config_rejects_unknown_log_level(tmp_path: Path) -> None:
    (tmp_path / ".schemaref.yml").write_text("log_level: loud\n", encoding="utf-8")

    with pytest.raises(ConfigError, match="log_level"):
        load_config(tmp_path)


def test_normalize_tags() -> None:
    assert normalize_tags(["minimum", "@maximum", " ", "@minimum"]) == ["@minimum", "@maximum"]
