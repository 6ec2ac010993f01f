from __future__ import annotations

from pathlib import Path

from haven.core.constants import DEFAULT_IGNORE_PATTERNS
from haven.infrastructure.sync.ignore import IgnorePatternSet, parse_ignore_file


def test_parse_ignore_file_drops_blanks_and_comments() -> None:
    content = "# comment\n\n  *.bak  \nlogs/\n   # indented comment\n"
    assert parse_ignore_file(content) == ["*.bak", "logs/"]


def test_defaults_come_first_and_duplicates_collapse() -> None:
    patterns = IgnorePatternSet(["*.bak", "node_modules/", "*.bak"])
    assert list(patterns)[: len(DEFAULT_IGNORE_PATTERNS)] == list(DEFAULT_IGNORE_PATTERNS)
    assert list(patterns)[-1] == "*.bak"
    assert len(patterns) == len(DEFAULT_IGNORE_PATTERNS) + 1
    assert "node_modules/" in patterns


def test_for_project_reads_havenignore(tmp_path: Path) -> None:
    assert len(IgnorePatternSet.for_project(str(tmp_path))) == len(DEFAULT_IGNORE_PATTERNS)

    (tmp_path / ".havenignore").write_text("data/\n", encoding="utf-8")
    patterns = IgnorePatternSet.for_project(str(tmp_path))
    assert "data/" in patterns


def test_engine_args() -> None:
    args = IgnorePatternSet(["data/"]).to_engine_args()
    assert args[0] == "--ignore-vcs"
    assert args[1:3] == ["--ignore", ".git/"]
    assert args[-2:] == ["--ignore", "data/"]
    assert args.count("--ignore") == len(DEFAULT_IGNORE_PATTERNS) + 1
