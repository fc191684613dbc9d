"""
tests/test_cli.py
End-to-end tests for the modelbake command line (cli_main).

Each test runs inside its own temporary working directory with
``$DATABASE_URL`` unset, so no ambient configuration leaks in.
"""

from __future__ import annotations

import pathlib

import pytest

from modelbake.cli import (
    EXIT_CATALOG_ERROR,
    EXIT_EXPORT_ERROR,
    EXIT_INPUT_ERROR,
    EXIT_SUCCESS,
    cli_main,
)
from modelbake.config import DATABASE_URL_ENV


@pytest.fixture(autouse=True)
def _isolated_cwd(tmp_path: pathlib.Path, monkeypatch: pytest.MonkeyPatch) -> pathlib.Path:
    monkeypatch.chdir(tmp_path)
    monkeypatch.delenv(DATABASE_URL_ENV, raising=False)
    return tmp_path


def _exit_code(argv) -> int:
    with pytest.raises(SystemExit) as exc_info:
        cli_main(argv)
    return exc_info.value.code


# ===========================================================================
# Listing
# ===========================================================================


class TestListTables:
    """``modelbake`` without a name lists the bakeable tables."""

    def test_lists_tables(
        self, blog_schema_yaml_path: pathlib.Path, capsys: pytest.CaptureFixture
    ) -> None:
        code = _exit_code(["--schema-file", str(blog_schema_yaml_path)])
        assert code == EXIT_SUCCESS
        out = capsys.readouterr().out
        assert "Possible models based on your current database (connection 'default'):" in out
        assert "- posts\n" in out
        assert "- i18n" not in out

    def test_lists_from_database_url(self, sqlite_url: str, capsys: pytest.CaptureFixture) -> None:
        assert _exit_code(["--database-url", sqlite_url]) == EXIT_SUCCESS
        assert "- posts_tags" in capsys.readouterr().out

    def test_lists_from_config_file(
        self, blog_schema_yaml_path: pathlib.Path, tmp_path: pathlib.Path,
        capsys: pytest.CaptureFixture,
    ) -> None:
        (tmp_path / "modelbake.yaml").write_text(
            "skip_tables: [tags]\n"
            "connections:\n"
            "  offline:\n"
            f"    schema_file: {blog_schema_yaml_path.name}\n",
            encoding="utf-8",
        )
        assert _exit_code(["-c", "offline"]) == EXIT_SUCCESS
        out = capsys.readouterr().out
        assert "(connection 'offline')" in out
        assert "- i18n" in out
        assert "- tags\n" not in out


# ===========================================================================
# Baking
# ===========================================================================


class TestBake:
    """``modelbake NAME`` and ``modelbake all``."""

    def test_bake_one_model(
        self, blog_schema_yaml_path: pathlib.Path, tmp_path: pathlib.Path,
        capsys: pytest.CaptureFixture,
    ) -> None:
        code = _exit_code(["Post", "--schema-file", str(blog_schema_yaml_path), "-o", "app"])
        assert code == EXIT_SUCCESS
        assert (tmp_path / "app" / "models" / "post.py").is_file()
        assert (tmp_path / "app" / "tests" / "fixtures" / "post_fixture.py").is_file()
        assert "modelbake - Bake Report" in capsys.readouterr().out

    def test_bake_all(self, blog_schema_yaml_path: pathlib.Path, tmp_path: pathlib.Path) -> None:
        code = _exit_code(["all", "--schema-file", str(blog_schema_yaml_path), "--no-test"])
        assert code == EXIT_SUCCESS
        assert (tmp_path / "models" / "category.py").is_file()
        assert not (tmp_path / "models" / "i18n.py").exists()
        assert not (tmp_path / "tests" / "models").exists()

    def test_dry_run(self, blog_schema_yaml_path: pathlib.Path, tmp_path: pathlib.Path) -> None:
        code = _exit_code(["Post", "--schema-file", str(blog_schema_yaml_path), "--dry-run", "-o", "out"])
        assert code == EXIT_SUCCESS
        assert not (tmp_path / "out").exists()

    def test_quiet_prints_report(
        self, blog_schema_yaml_path: pathlib.Path, capsys: pytest.CaptureFixture
    ) -> None:
        _exit_code(["Tag", "--schema-file", str(blog_schema_yaml_path), "-q"])
        captured = capsys.readouterr()
        assert "Bake Report" in captured.out
        assert captured.err == ""

    def test_export_error(self, blog_schema_yaml_path: pathlib.Path, tmp_path: pathlib.Path) -> None:
        (tmp_path / "models").write_text("", encoding="utf-8")
        code = _exit_code(["Post", "--schema-file", str(blog_schema_yaml_path)])
        assert code == EXIT_EXPORT_ERROR


# ===========================================================================
# Failures
# ===========================================================================


class TestFailures:
    """Exit codes for catalog and input errors."""

    def test_empty_schema(self, empty_schema_yaml_path: pathlib.Path, tmp_path: pathlib.Path) -> None:
        code = _exit_code(["all", "--schema-file", str(empty_schema_yaml_path), "-o", "out"])
        assert code == EXIT_CATALOG_ERROR
        assert not (tmp_path / "out").exists()

    def test_unknown_table(self, blog_schema_yaml_path: pathlib.Path) -> None:
        assert _exit_code(["Widget", "--schema-file", str(blog_schema_yaml_path)]) == EXIT_CATALOG_ERROR

    def test_malformed_schema_file(self, tmp_path: pathlib.Path) -> None:
        path = tmp_path / "schema.yaml"
        path.write_text("tables:\n  posts: [id, title]\n", encoding="utf-8")
        assert _exit_code(["all", "--schema-file", str(path)]) == EXIT_CATALOG_ERROR

    def test_missing_schema_file(self, tmp_path: pathlib.Path) -> None:
        assert _exit_code(["--schema-file", str(tmp_path / "nope.yaml")]) == EXIT_CATALOG_ERROR

    def test_unreachable_database(self, tmp_path: pathlib.Path) -> None:
        url = f"sqlite:///{tmp_path / 'missing' / 'dir' / 'x.db'}"
        assert _exit_code(["--database-url", url]) == EXIT_CATALOG_ERROR

    def test_missing_sqlite_file(self, tmp_path: pathlib.Path) -> None:
        path = tmp_path / "blgo.db"
        assert _exit_code(["--database-url", f"sqlite:///{path}"]) == EXIT_CATALOG_ERROR
        assert not path.exists()

    def test_url_and_schema_file_together(self, blog_schema_yaml_path: pathlib.Path) -> None:
        code = _exit_code([
            "--database-url", "sqlite://", "--schema-file", str(blog_schema_yaml_path),
        ])
        assert code == EXIT_INPUT_ERROR

    def test_no_connection_configured(self) -> None:
        assert _exit_code([]) == EXIT_INPUT_ERROR

    def test_invalid_config_file(self, tmp_path: pathlib.Path) -> None:
        (tmp_path / "modelbake.yaml").write_text("connections: [oops]\n", encoding="utf-8")
        assert _exit_code([]) == EXIT_INPUT_ERROR

    def test_unknown_connection(self) -> None:
        assert _exit_code(["-c", "legacy"]) == EXIT_INPUT_ERROR

    def test_version(self, capsys: pytest.CaptureFixture) -> None:
        assert _exit_code(["--version"]) == 0
        assert "modelbake v" in capsys.readouterr().out
