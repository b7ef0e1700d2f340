"""Tests for the generated VitePress sidebar."""

from vitedoc.load_model import LoadedModel
from vitedoc.path_resolver import PathResolver
from vitedoc.sidebar import build_api_sidebar, ts_string


def test_ts_string_escapes() -> None:
    """Verify single-quoted TypeScript literals."""
    assert ts_string("it's") == "'it\\'s'"
    assert ts_string("a\\b") == "'a\\\\b'"


def test_sidebar_lists_library_groups(model: LoadedModel, paths: PathResolver) -> None:
    """Verify one collapsible group per library with relative links."""
    sidebar = build_api_sidebar(model.local_packages, paths)
    assert sidebar.startswith("import type { DefaultTheme } from 'vitepress'\n")
    assert "export const apiSidebar: DefaultTheme.Sidebar = {" in sidebar
    assert "      text: 'L'," in sidebar
    assert "      base: '/api/L/'," in sidebar
    assert "{ text: 'Overview', link: 'index' }," in sidebar
    assert "{ text: 'Apple', link: 'Apple' }," in sidebar
    assert "{ text: 'main', link: 'main' }," in sidebar
    assert sidebar.index("text: 'Classes'") < sidebar.index("text: 'Functions'")


def test_sidebar_lists_topics(model: LoadedModel, paths: PathResolver) -> None:
    """Verify that topics with entities get a sidebar group."""
    sidebar = build_api_sidebar(model.local_packages, paths)
    assert "{ text: 'Pets', link: '/topics/Pets' }," in sidebar


def test_sidebar_skips_private_entities(model: LoadedModel, paths: PathResolver) -> None:
    """Verify that non-public containers are left out."""
    model.primary.libraries[0].containers[1].is_public = False
    sidebar = build_api_sidebar(model.local_packages, paths)
    assert "text: 'Cat'" not in sidebar
