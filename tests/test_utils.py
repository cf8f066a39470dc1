"""Unit tests for utility functions (appforge.utils).

Tests cover:
- run_command (exit status, cwd, env merging, Ctrl-C)
- contains_path / split_app_path / is_number
- load_json
- Rich output helpers
"""

from __future__ import annotations

import json
import os
import sys
from pathlib import Path
from unittest.mock import patch

import pytest

from appforge.utils import (
    contains_path,
    is_number,
    load_json,
    print_banner,
    print_error,
    print_success,
    print_summary_table,
    print_warning,
    run_command,
    split_app_path,
)


# ---------------------------------------------------------------------------
# run_command
# ---------------------------------------------------------------------------


class TestRunCommand:
    @pytest.mark.unit
    def test_exit_status(self):
        assert run_command([sys.executable, "-c", "raise SystemExit(3)"]) == 3

    @pytest.mark.unit
    def test_success(self):
        assert run_command([sys.executable, "-c", "pass"]) == 0

    @pytest.mark.unit
    def test_cwd(self, tmp_path: Path):
        script = "import pathlib; pathlib.Path('marker').write_text('x')"
        run_command([sys.executable, "-c", script], cwd=tmp_path)
        assert (tmp_path / "marker").exists()

    @pytest.mark.unit
    def test_env_is_merged(self, tmp_path: Path):
        out = tmp_path / "env.txt"
        script = (
            "import os, pathlib; "
            f"pathlib.Path({str(out)!r}).write_text("
            "os.environ['APPFORGE_TEST'] + ':' + str('PATH' in os.environ))"
        )
        run_command([sys.executable, "-c", script], env={"APPFORGE_TEST": "yes"})
        assert out.read_text() == "yes:True"

    @pytest.mark.unit
    def test_keyboard_interrupt(self):
        with patch("appforge.utils.subprocess.run", side_effect=KeyboardInterrupt):
            assert run_command(["anything"]) == 130

    @pytest.mark.unit
    def test_missing_program_raises(self):
        with pytest.raises(OSError):
            run_command(["definitely-not-a-real-program-appforge"])


# ---------------------------------------------------------------------------
# Name / path helpers
# ---------------------------------------------------------------------------


class TestPathHelpers:
    @pytest.mark.unit
    @pytest.mark.parametrize(
        ("value", "expected"),
        [
            ("blog", False),
            ("my-blog", False),
            ("examples/blog", True),
            ("/home/john/blog", True),
            ("./blog", True),
        ],
    )
    def test_contains_path(self, value, expected):
        assert contains_path(value) is expected

    @pytest.mark.unit
    def test_split_app_path(self, tmp_path: Path):
        parent, path, name = split_app_path(str(tmp_path / "projects" / "blog"))
        assert name == "blog"
        assert path == (tmp_path / "projects" / "blog").resolve()
        assert parent == path.parent

    @pytest.mark.unit
    def test_split_relative_path(self, tmp_path: Path, monkeypatch):
        monkeypatch.chdir(tmp_path)
        parent, path, name = split_app_path("examples/blog")
        assert name == "blog"
        assert path == tmp_path.resolve() / "examples" / "blog"

    @pytest.mark.unit
    def test_split_trailing_separator(self, tmp_path: Path):
        _, _, name = split_app_path(str(tmp_path / "blog") + os.sep)
        assert name == "blog"

    @pytest.mark.unit
    @pytest.mark.parametrize(
        ("value", "expected"),
        [("8080", True), ("-1", True), ("80a", False), ("", False), ("etc/server.xml", False)],
    )
    def test_is_number(self, value, expected):
        assert is_number(value) is expected


# ---------------------------------------------------------------------------
# load_json
# ---------------------------------------------------------------------------


class TestLoadJson:
    @pytest.mark.unit
    def test_object(self, tmp_path: Path):
        path = tmp_path / "data.json"
        path.write_text(json.dumps({"a": 1}), encoding="utf-8")
        assert load_json(path) == {"a": 1}

    @pytest.mark.unit
    def test_non_object_root_is_wrapped(self, tmp_path: Path):
        path = tmp_path / "data.json"
        path.write_text("[1, 2]", encoding="utf-8")
        assert load_json(path) == {"_root": [1, 2]}

    @pytest.mark.unit
    def test_missing_file(self, tmp_path: Path):
        with pytest.raises(FileNotFoundError):
            load_json(tmp_path / "missing.json")

    @pytest.mark.unit
    def test_invalid_json(self, tmp_path: Path):
        path = tmp_path / "bad.json"
        path.write_text("{", encoding="utf-8")
        with pytest.raises(json.JSONDecodeError):
            load_json(path)


# ---------------------------------------------------------------------------
# Rich output helpers
# ---------------------------------------------------------------------------


class TestOutputHelpers:
    @pytest.mark.unit
    def test_print_banner(self, capsys):
        print_banner("Starting web server")
        assert "Starting web server" in capsys.readouterr().out

    @pytest.mark.unit
    def test_print_summary_table(self, capsys):
        print_summary_table({"app.name": "blog", "port": 8080}, title="Server")
        out = capsys.readouterr().out
        assert "app.name" in out
        assert "8080" in out

    @pytest.mark.unit
    def test_print_messages(self, capsys):
        print_success("Created")
        print_warning("Careful")
        print_error("Failed")
        out = capsys.readouterr().out
        assert "Created" in out
        assert "Careful" in out
        assert "Failed" in out

    @pytest.mark.unit
    def test_messages_are_not_markup(self, capsys):
        print_error("Web application [/tmp/blog] does not exist.")
        assert "[/tmp/blog]" in capsys.readouterr().out
