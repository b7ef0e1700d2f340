"""Logic for generating VitePress sidebar data and generated stylesheets."""

from vitedoc.models import Package
from vitedoc.path_resolver import PathResolver
from vitedoc.render_library_page import group_entities, library_entities

API_SIDEBAR_PATH = ".vitepress/generated/api-sidebar.ts"
GUIDE_SIDEBAR_PATH = ".vitepress/generated/guide-sidebar.ts"
API_STYLES_PATH = ".vitepress/generated/api-styles.css"

GUIDE_SIDEBAR_STUB = (
    "import type { DefaultTheme } from 'vitepress'\n\n"
    "export const guideSidebar: DefaultTheme.Sidebar = {}\n"
)

API_STYLES = """\
.member-signature pre {
  margin: 0;
  padding: 12px 16px;
  overflow-x: auto;
  border-radius: 8px;
  background-color: var(--vp-code-block-bg);
  font-family: var(--vp-font-family-mono);
  font-size: 14px;
  line-height: 1.6;
}

.member-signature code {
  color: var(--vp-c-text-1);
}

.member-signature .kw {
  color: var(--vp-c-purple-1);
}

.member-signature .fn {
  color: var(--vp-c-indigo-1);
  font-weight: 600;
}

.member-signature .param {
  color: var(--vp-c-text-2);
}

.member-signature .type {
  color: var(--vp-c-green-1);
}

.member-signature .type-link {
  color: var(--vp-c-green-1);
  text-decoration: underline dotted;
}

.member-signature .num-lit,
.member-signature .str-lit {
  color: var(--vp-c-yellow-1);
}
"""


def ts_string(value: str) -> str:
    """Single-quoted TypeScript string literal."""
    return "'" + value.replace("\\", "\\\\").replace("'", "\\'") + "'"


def build_api_sidebar(packages: list[Package], paths: PathResolver) -> str:
    """Render ``api-sidebar.ts``: one collapsible group per navigable library."""
    lines = [
        "import type { DefaultTheme } from 'vitepress'",
        "",
        "export const apiSidebar: DefaultTheme.Sidebar = {",
        "  '/api/': [",
    ]
    for package in packages:
        if not package.is_local:
            continue
        for lib in paths.navigable_libraries(package):
            url = paths.url_for(lib)
            if url is None:
                continue
            lines += [
                "    {",
                f"      text: {ts_string(lib.name)},",
                f"      base: {ts_string(url)},",
                "      collapsed: true,",
                "      items: [",
                "        { text: 'Overview', link: 'index' },",
            ]
            for section, entities in group_entities(library_entities(lib)).items():
                items = []
                for entity in entities:
                    entity_url = paths.url_for(entity)
                    if entity_url is None:
                        continue
                    items.append(
                        f"          {{ text: {ts_string(entity.name)}, "
                        f"link: {ts_string(entity_url.removeprefix(url))} }},"
                    )
                if not items:
                    continue
                lines += [
                    "        {",
                    f"          text: {ts_string(section)},",
                    "          collapsed: true,",
                    "          items: [",
                    *[f"  {item}" for item in items],
                    "          ],",
                    "        },",
                ]
            lines += ["      ],", "    },"]
        topics = [c for c in package.topics if c.entities]
        if topics:
            lines += [
                "    {",
                "      text: 'Topics',",
                "      collapsed: true,",
                "      items: [",
                *[
                    f"        {{ text: {ts_string(c.name)}, link: {ts_string(paths.url_for(c) or '')} }},"
                    for c in topics
                ],
                "      ],",
                "    },",
            ]
    lines += ["  ],", "}", ""]
    return "\n".join(lines)
