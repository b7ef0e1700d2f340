"""Templates for the one-time VitePress project scaffold."""

import re

from vitedoc.incremental_writer import IncrementalWriter

UNSAFE_PACKAGE_NAME_RE = re.compile(r"[^a-zA-Z0-9_-]")
TREE_SUFFIX_RE = re.compile(r"/tree/[^/]+(/.*)?$")

THEME_INDEX_PATH = ".vitepress/theme/index.ts"
API_STYLES_IMPORT = "import '../generated/api-styles.css'"

PACKAGE_JSON = """\
{
  "name": "{{npmPackageName}}-docs",
  "private": true,
  "type": "module",
  "scripts": {
    "docs:dev": "vitepress dev",
    "docs:build": "vitepress build",
    "docs:preview": "vitepress preview"
  },
  "devDependencies": {
    "vitepress": "^1.6.3"
  }
}
"""

CONFIG_TS = """\
import { defineConfig } from 'vitepress'
import { apiSidebar } from './generated/api-sidebar'
import { guideSidebar } from './generated/guide-sidebar'

export default defineConfig({
  title: '{{packageName}} API',
  description: 'API documentation for {{packageName}}',
  ignoreDeadLinks: true,
  lastUpdated: true,
  themeConfig: {
    outline: { level: [2, 4] },
    search: {
      provider: 'local',
    },
    nav: [
      { text: 'Guide', link: '/guide/' },
      { text: 'API Reference', link: '/api/' },
    ],
    sidebar: {
      ...apiSidebar,
      ...guideSidebar,
    },
    socialLinks: {{socialLinks}},
  },
})
"""

INDEX_MD = """\
---
layout: home

hero:
  name: "{{packageName}}"
  text: "API Documentation"
  actions:
    - theme: brand
      text: Guide
      link: /guide/
    - theme: alt
      text: API Reference
      link: /api/
---
"""

GUIDE_INDEX_MD = """\
# Guide

Write your guide pages in this directory.
"""

GITIGNORE = """\
node_modules/
.vitepress/dist/
.vitepress/cache/
"""

THEME_INDEX_TS = """\
import DefaultTheme from 'vitepress/theme'
import './custom.css'
import '../generated/api-styles.css'
import ApiBreadcrumb from './components/ApiBreadcrumb.vue'

export default {
  extends: DefaultTheme,
  enhanceApp({ app }) {
    app.component('ApiBreadcrumb', ApiBreadcrumb)
  }
}
"""

CUSTOM_CSS = """\
:root {
  --vp-nav-bg-color: rgba(255, 255, 255, 0.7);
}

.dark {
  --vp-nav-bg-color: rgba(27, 27, 31, 0.7);
}

.VPNav {
  backdrop-filter: blur(12px);
}
"""

API_BREADCRUMB_VUE = """\
<script setup lang="ts">
import { computed } from 'vue'
import { useData } from 'vitepress'

const { frontmatter, page } = useData()

const libraryUrl = computed(() => {
  const parts = page.value.relativePath.split('/')
  return parts.length > 2 ? `/${parts[0]}/${parts[1]}/` : null
})
</script>

<template>
  <nav class="api-breadcrumb">
    <a href="/api/">API</a>
    <template v-if="frontmatter.library">
      <span class="sep">/</span>
      <a v-if="libraryUrl" :href="libraryUrl">{{ frontmatter.library }}</a>
    </template>
    <template v-if="frontmatter.category">
      <span class="sep">/</span>
      <span>{{ frontmatter.category }}</span>
    </template>
  </nav>
</template>

<style scoped>
.api-breadcrumb {
  font-size: 13px;
  color: var(--vp-c-text-2);
  margin-bottom: 8px;
}

.api-breadcrumb .sep {
  margin: 0 6px;
}
</style>
"""

SCAFFOLD_FILES = {
    "package.json": PACKAGE_JSON,
    ".vitepress/config.ts": CONFIG_TS,
    "index.md": INDEX_MD,
    "guide/index.md": GUIDE_INDEX_MD,
    ".gitignore": GITIGNORE,
    THEME_INDEX_PATH: THEME_INDEX_TS,
    ".vitepress/theme/custom.css": CUSTOM_CSS,
    ".vitepress/theme/components/ApiBreadcrumb.vue": API_BREADCRUMB_VUE,
}


def build_social_links(url: str) -> str:
    """``socialLinks`` array for the site config; ``[]`` without a repository."""
    if not url:
        return "[]"
    clean = TREE_SUFFIX_RE.sub("", url, count=1)
    icon = "gitlab" if "gitlab.com" in clean and "github.com" not in clean else "github"
    escaped = clean.replace("\\", "\\\\").replace("'", "\\'")
    return f"[{{ icon: '{icon}', link: '{escaped}' }}]"


def scaffold_placeholders(package_name: str, repository_url: str = "") -> dict[str, str]:
    safe_name = UNSAFE_PACKAGE_NAME_RE.sub("-", package_name)
    return {
        "{{packageName}}": safe_name,
        "{{npmPackageName}}": safe_name.lower(),
        "{{socialLinks}}": build_social_links(repository_url),
    }


def apply_placeholders(template: str, placeholders: dict[str, str]) -> str:
    for key, value in placeholders.items():
        template = template.replace(key, value)
    return template


def write_scaffold(
    writer: IncrementalWriter, package_name: str, repository_url: str = ""
) -> int:
    """Write missing scaffold files and patch the theme entry; returns files created."""
    placeholders = scaffold_placeholders(package_name, repository_url)
    created = 0
    for rel_path, template in SCAFFOLD_FILES.items():
        if writer.write_scaffold(rel_path, apply_placeholders(template, placeholders)):
            created += 1
    writer.patch_import_line(THEME_INDEX_PATH, API_STYLES_IMPORT)
    return created
