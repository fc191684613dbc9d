"""
tests/test_config.py
Unit tests for modelbake.config (project file loading and connection lookup).
"""

from __future__ import annotations

import json
import pathlib

import pytest

from modelbake.catalog import DatabaseSchemaSource, FixtureSchemaSource
from modelbake.config import (
    DATABASE_URL_ENV,
    BakeConfig,
    ConnectionConfig,
    find_config_file,
    load_config,
    parse_config,
)
from modelbake.errors import ConfigError


# ===========================================================================
# ConnectionConfig
# ===========================================================================


class TestConnectionConfig:
    """Tests for the exactly-one-source rule."""

    def test_url_only(self) -> None:
        conn = ConnectionConfig(url="sqlite://")
        assert conn.schema_file is None

    def test_schema_alias(self) -> None:
        conn = ConnectionConfig.model_validate({"url": "sqlite://", "schema": "public"})
        assert conn.db_schema == "public"

    def test_neither_is_rejected(self) -> None:
        with pytest.raises(ValueError):
            ConnectionConfig()

    def test_both_are_rejected(self) -> None:
        with pytest.raises(ValueError):
            ConnectionConfig(url="sqlite://", schema_file=pathlib.Path("schema.yaml"))


# ===========================================================================
# Parsing and loading
# ===========================================================================


class TestParseConfig:
    """Tests for parse_config() and load_config()."""

    def test_defaults(self) -> None:
        config = parse_config({})
        assert config.connections == {}
        assert config.output_dir == pathlib.Path(".")
        assert "i18n" in config.skip_tables

    def test_full_document(self) -> None:
        config = parse_config({
            "output_dir": "app",
            "skip_tables": ["audit_log"],
            "connections": {
                "default": {"url": "sqlite:///blog.db"},
                "offline": {"schema_file": "schema.yaml"},
            },
        })
        assert config.output_dir == pathlib.Path("app")
        assert config.skip_tables == ["audit_log"]
        assert config.connection("offline").schema_file == pathlib.Path("schema.yaml")

    def test_unknown_key_is_a_config_error(self) -> None:
        with pytest.raises(ConfigError) as exc_info:
            parse_config({"outptu_dir": "typo"})
        assert exc_info.value.details["errors"]

    def test_bad_connection_is_a_config_error(self) -> None:
        with pytest.raises(ConfigError):
            parse_config({"connections": {"default": {}}})

    def test_load_yaml(self, tmp_path: pathlib.Path) -> None:
        path = tmp_path / "modelbake.yaml"
        path.write_text(
            "connections:\n  default:\n    url: sqlite:///blog.db\n", encoding="utf-8"
        )
        config = load_config(path)
        assert config.connection().url == "sqlite:///blog.db"
        assert config.base_dir == tmp_path.resolve()

    def test_load_json(self, tmp_path: pathlib.Path) -> None:
        path = tmp_path / "modelbake.json"
        path.write_text(json.dumps({"output_dir": "out"}), encoding="utf-8")
        assert load_config(path).output_dir == pathlib.Path("out")

    def test_missing_file(self, tmp_path: pathlib.Path) -> None:
        with pytest.raises(ConfigError):
            load_config(tmp_path / "missing.yaml")

    def test_no_file_in_cwd(self, tmp_path: pathlib.Path, monkeypatch: pytest.MonkeyPatch) -> None:
        monkeypatch.chdir(tmp_path)
        assert load_config() == BakeConfig()

    def test_discovers_file_in_cwd(self, tmp_path: pathlib.Path, monkeypatch: pytest.MonkeyPatch) -> None:
        (tmp_path / "modelbake.yml").write_text("output_dir: baked\n", encoding="utf-8")
        monkeypatch.chdir(tmp_path)
        assert load_config().output_dir == pathlib.Path("baked")


def test_find_config_file_preference(tmp_path: pathlib.Path) -> None:
    assert find_config_file(tmp_path) is None
    (tmp_path / "modelbake.json").write_text("{}", encoding="utf-8")
    (tmp_path / "modelbake.yaml").write_text("{}", encoding="utf-8")
    assert find_config_file(tmp_path) == tmp_path / "modelbake.yaml"


# ===========================================================================
# Connection lookup
# ===========================================================================


class TestConnectionLookup:
    """Tests for BakeConfig.connection(), with_overrides() and source_for()."""

    def test_database_url_fallback(self, monkeypatch: pytest.MonkeyPatch) -> None:
        monkeypatch.setenv(DATABASE_URL_ENV, "sqlite:///env.db")
        assert BakeConfig().connection().url == "sqlite:///env.db"

    def test_fallback_only_for_default(self, monkeypatch: pytest.MonkeyPatch) -> None:
        monkeypatch.setenv(DATABASE_URL_ENV, "sqlite:///env.db")
        with pytest.raises(ConfigError):
            BakeConfig().connection("legacy")

    def test_configured_connection_beats_environment(self, monkeypatch: pytest.MonkeyPatch) -> None:
        monkeypatch.setenv(DATABASE_URL_ENV, "sqlite:///env.db")
        config = parse_config({"connections": {"default": {"url": "sqlite:///file.db"}}})
        assert config.connection().url == "sqlite:///file.db"

    def test_unknown_connection(self, monkeypatch: pytest.MonkeyPatch) -> None:
        monkeypatch.delenv(DATABASE_URL_ENV, raising=False)
        with pytest.raises(ConfigError) as exc_info:
            BakeConfig().connection()
        assert exc_info.value.details["connection"] == "default"

    def test_override_url(self) -> None:
        config = parse_config({"connections": {"default": {"schema_file": "schema.yaml"}}})
        updated = config.with_overrides(database_url="sqlite:///cli.db", output_dir=pathlib.Path("out"))
        assert updated.connection().url == "sqlite:///cli.db"
        assert updated.output_dir == pathlib.Path("out")
        assert config.connection().url is None

    def test_override_both_is_a_config_error(self) -> None:
        with pytest.raises(ConfigError):
            BakeConfig().with_overrides(
                database_url="sqlite://", schema_file=pathlib.Path("schema.yaml")
            )

    def test_source_for_database(self) -> None:
        config = parse_config({"connections": {"legacy": {"url": "sqlite://", "schema": "main"}}})
        source = config.source_for("legacy")
        assert isinstance(source, DatabaseSchemaSource)
        assert source.name == "legacy"
        assert source.schema == "main"

    def test_relative_schema_file_resolves_against_config(
        self, blog_schema_yaml_path: pathlib.Path
    ) -> None:
        config = parse_config(
            {"connections": {"default": {"schema_file": blog_schema_yaml_path.name}}},
            base_dir=blog_schema_yaml_path.parent,
        )
        source = config.source_for()
        assert isinstance(source, FixtureSchemaSource)
        assert "posts" in source.list_tables()
