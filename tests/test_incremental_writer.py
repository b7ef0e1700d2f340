"""Tests for incremental writing and stale file deletion."""

from pathlib import Path

import pytest

from vitedoc.incremental_writer import IncrementalWriter
from vitedoc.run_stats import RunStats

MANAGED = ["api", ".vitepress/generated"]


def test_write_creates_file(tmp_path: Path) -> None:
    """Verify that a generated file is written with parent directories."""
    writer = IncrementalWriter(tmp_path, MANAGED)
    assert writer.write("api/L/Apple.md", "# Apple\n") is True
    assert (tmp_path / "api" / "L" / "Apple.md").read_text() == "# Apple\n"


def test_unchanged_write_is_skipped(tmp_path: Path) -> None:
    """Verify that identical content is not rewritten."""
    stats = RunStats()
    (tmp_path / "api").mkdir()
    (tmp_path / "api" / "index.md").write_text("same")
    writer = IncrementalWriter(tmp_path, MANAGED, stats)
    assert writer.write("api/index.md", "same") is False
    assert stats.files_unchanged == 1
    assert stats.files_written == 0


def test_stale_files_are_deleted(tmp_path: Path) -> None:
    """Verify that managed files not written in this run are removed."""
    old = tmp_path / "api" / "Gone" / "Old.md"
    old.parent.mkdir(parents=True)
    old.write_text("old")
    writer = IncrementalWriter(tmp_path, MANAGED)
    writer.write("api/L/New.md", "new")
    writer.finalize()
    assert writer.delete_stale() == ["api/Gone/Old.md"]
    assert not old.exists()
    assert not (tmp_path / "api" / "Gone").exists()
    assert (tmp_path / "api" / "L" / "New.md").exists()


def test_files_outside_managed_dirs_survive(tmp_path: Path) -> None:
    """Verify that hand-written files are never deleted."""
    guide = tmp_path / "guide" / "intro.md"
    guide.parent.mkdir(parents=True)
    guide.write_text("mine")
    theme = tmp_path / ".vitepress" / "theme" / "custom.css"
    theme.parent.mkdir(parents=True)
    theme.write_text("body {}")
    writer = IncrementalWriter(tmp_path, MANAGED)
    writer.finalize()
    assert writer.delete_stale() == []
    assert guide.read_text() == "mine"
    assert theme.read_text() == "body {}"


def test_scaffold_is_never_overwritten(tmp_path: Path) -> None:
    """Verify that an existing scaffold file keeps the user's edits."""
    (tmp_path / "index.md").write_text("custom home")
    writer = IncrementalWriter(tmp_path, MANAGED)
    assert writer.write_scaffold("index.md", "generated home") is False
    assert (tmp_path / "index.md").read_text() == "custom home"


def test_scaffold_in_managed_dir_is_not_stale(tmp_path: Path) -> None:
    """Verify that scaffold intents count as produced by the run."""
    writer = IncrementalWriter(tmp_path, MANAGED)
    writer.write_scaffold("api/README.md", "notes")
    writer.finalize()
    assert writer.delete_stale() == []
    assert (tmp_path / "api" / "README.md").exists()


def test_patch_import_line_inserts_after_last_import(tmp_path: Path) -> None:
    """Verify that a missing import is restored after the last import line."""
    theme = tmp_path / "index.ts"
    theme.write_text("import A from 'a'\nimport './b.css'\n\nexport default {}\n")
    writer = IncrementalWriter(tmp_path, MANAGED)
    assert writer.patch_import_line("index.ts", "import './c.css'") is True
    assert theme.read_text() == (
        "import A from 'a'\nimport './b.css'\nimport './c.css'\n\nexport default {}\n"
    )
    assert writer.patch_import_line("index.ts", "import './c.css'") is False


def test_patch_import_line_missing_file(tmp_path: Path) -> None:
    """Verify that patching a file that does not exist is a no-op."""
    writer = IncrementalWriter(tmp_path, MANAGED)
    assert writer.patch_import_line("missing.ts", "import 'x'") is False
    assert not (tmp_path / "missing.ts").exists()


def test_refuses_paths_outside_root(tmp_path: Path) -> None:
    """Verify that writes cannot escape the output root."""
    writer = IncrementalWriter(tmp_path / "site", MANAGED)
    with pytest.raises(ValueError, match="outside the output root"):
        writer.write("../escape.md", "x")
    assert not (tmp_path / "escape.md").exists()


def test_delete_before_finalize_is_refused(tmp_path: Path) -> None:
    """Verify that stale deletion needs the complete intent set."""
    writer = IncrementalWriter(tmp_path, MANAGED)
    with pytest.raises(RuntimeError):
        writer.delete_stale()


def test_write_after_finalize_is_refused(tmp_path: Path) -> None:
    """Verify that the intent set is frozen by finalize()."""
    writer = IncrementalWriter(tmp_path, MANAGED)
    writer.finalize()
    with pytest.raises(RuntimeError):
        writer.write("api/x.md", "x")


def test_output_root_that_is_a_file(tmp_path: Path) -> None:
    """Verify that a file as output root is a fatal error."""
    target = tmp_path / "site"
    target.write_text("not a directory")
    with pytest.raises(SystemExit):
        IncrementalWriter(target, MANAGED)


def test_symlinks_are_not_deleted(tmp_path: Path) -> None:
    """Verify that symlinked files in managed dirs are left alone."""
    outside = tmp_path / "outside.md"
    outside.write_text("keep")
    link = tmp_path / "site" / "api" / "link.md"
    link.parent.mkdir(parents=True)
    link.symlink_to(outside)
    writer = IncrementalWriter(tmp_path / "site", MANAGED)
    writer.finalize()
    assert writer.delete_stale() == []
    assert link.is_symlink()
    assert outside.read_text() == "keep"


def test_existing_non_utf8_file_is_replaced(tmp_path: Path) -> None:
    """Verify that undecodable bytes at a generated path are overwritten."""
    target = tmp_path / "api" / "x.md"
    target.parent.mkdir(parents=True)
    target.write_bytes(b"\xff\xfe\x00bad")
    writer = IncrementalWriter(tmp_path, MANAGED)
    assert writer.write("api/x.md", "# X\n") is True
    assert target.read_text(encoding="utf-8") == "# X\n"
