"""Tests for the one-time VitePress project scaffold."""

from pathlib import Path

from vitedoc.incremental_writer import IncrementalWriter
from vitedoc.scaffold import (
    API_STYLES_IMPORT,
    SCAFFOLD_FILES,
    THEME_INDEX_PATH,
    build_social_links,
    scaffold_placeholders,
    write_scaffold,
)

MANAGED = ["api", ".vitepress/generated"]


def test_social_links_github() -> None:
    """Verify a GitHub repository link."""
    assert build_social_links("https://github.com/example/fruit_kit") == (
        "[{ icon: 'github', link: 'https://github.com/example/fruit_kit' }]"
    )


def test_social_links_strip_tree_suffix() -> None:
    """Verify that a /tree/<branch>/... suffix is dropped."""
    links = build_social_links("https://github.com/example/mono/tree/main/packages/fruit")
    assert "link: 'https://github.com/example/mono'" in links


def test_social_links_gitlab() -> None:
    """Verify that GitLab repositories get the GitLab icon."""
    assert "icon: 'gitlab'" in build_social_links("https://gitlab.com/example/fruit_kit")


def test_social_links_escape_quotes() -> None:
    """Verify that quotes cannot break the TypeScript literal."""
    assert "link: 'https://example.com/it\\'s'" in build_social_links(
        "https://example.com/it's"
    )


def test_social_links_empty() -> None:
    """Verify that no repository means no social links."""
    assert build_social_links("") == "[]"


def test_placeholders_sanitize_package_name() -> None:
    """Verify that the package name is safe for package.json."""
    placeholders = scaffold_placeholders("My Kit!")
    assert placeholders["{{packageName}}"] == "My-Kit-"
    assert placeholders["{{npmPackageName}}"] == "my-kit-"


def test_write_scaffold_creates_files(tmp_path: Path) -> None:
    """Verify that every scaffold file is created with placeholders filled."""
    writer = IncrementalWriter(tmp_path, MANAGED)
    created = write_scaffold(writer, "fruit_kit", "https://github.com/example/fruit_kit")
    assert created == len(SCAFFOLD_FILES)
    config = (tmp_path / ".vitepress" / "config.ts").read_text()
    assert "title: 'fruit_kit API'" in config
    assert "{{" not in config
    assert "icon: 'github'" in config
    package_json = (tmp_path / "package.json").read_text()
    assert '"name": "fruit_kit-docs"' in package_json


def test_write_scaffold_keeps_user_edits(tmp_path: Path) -> None:
    """Verify that a second run creates nothing and keeps edited files."""
    write_scaffold(IncrementalWriter(tmp_path, MANAGED), "fruit_kit")
    (tmp_path / "index.md").write_text("my home page")
    assert write_scaffold(IncrementalWriter(tmp_path, MANAGED), "fruit_kit") == 0
    assert (tmp_path / "index.md").read_text() == "my home page"


def test_write_scaffold_restores_styles_import(tmp_path: Path) -> None:
    """Verify that a theme entry without the styles import is patched."""
    theme = tmp_path / THEME_INDEX_PATH
    theme.parent.mkdir(parents=True)
    theme.write_text("import DefaultTheme from 'vitepress/theme'\n\nexport default DefaultTheme\n")
    write_scaffold(IncrementalWriter(tmp_path, MANAGED), "fruit_kit")
    lines = theme.read_text().split("\n")
    assert lines[:2] == ["import DefaultTheme from 'vitepress/theme'", API_STYLES_IMPORT]
    assert lines.count(API_STYLES_IMPORT) == 1
