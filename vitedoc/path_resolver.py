"""Logic for assigning collision-free file paths, URLs and anchors."""

import logging
import re
from typing import Any

from vitedoc.comment_reference import OPERATOR_NAMES
from vitedoc.file_names import sanitize_anchor, sanitize_file_name, strip_generics
from vitedoc.link_target import LinkTarget
from vitedoc.load_config import DEFAULT_CONFIG
from vitedoc.models import (
    CATEGORY,
    CONTAINER,
    LIBRARY,
    MEMBER,
    PACKAGE,
    TOP_LEVEL,
    Container,
    DocumentableEntity,
    Library,
    Member,
    Package,
    TopLevelElement,
    library_of,
)
from vitedoc.run_stats import RunStats

logger = logging.getLogger(__name__)

KIND_SUFFIXES = {
    "class": "class",
    "enum": "enum",
    "mixin": "mixin",
    "extension": "extension",
    "extension_type": "extension-type",
    "function": "function",
    "variable": "property",
    "typedef": "typedef",
}


class PathResolver:
    """Deterministic path/URL/anchor assignment for a set of local packages.

    All indexes are built once in the constructor (the collision-counting
    pass completes before any path can be requested) and never change
    afterwards.
    """

    def __init__(
        self,
        packages: list[Package],
        config: dict[str, Any] | None = None,
        stats: RunStats | None = None,
    ) -> None:
        """Build the library slug index and the per-entity file name index."""
        lib_cfg = (config or DEFAULT_CONFIG)["libraries"]
        self.packages = packages
        self.stats = stats if stats is not None else RunStats()
        self._internal_names = frozenset(lib_cfg.get("internal_names") or [])
        self._internal_patterns = [
            re.compile(p) for p in lib_cfg.get("internal_patterns") or []
        ]
        self._dotted_prefixes = tuple(lib_cfg.get("dotted_prefixes") or [])
        self._duplicate_prefixes = [
            (str(e["internal"]), str(e["canonical"]))
            for e in lib_cfg.get("duplicate_prefixes") or []
        ]

        local_libraries = [
            lib for pkg in packages if pkg.is_local for lib in pkg.libraries
        ]
        self._local_names = frozenset(lib.name for lib in local_libraries)
        self._dir_names = self._assign_dir_names(packages)
        self._dir_names_by_name = {
            lib.name: d for lib, d in self._dir_names.items()
        }
        self._container_names = {
            lib: {
                sanitize_file_name(c.name).lower()
                for c in lib.containers
                if c.is_public
            }
            for lib in local_libraries
        }
        self._file_names = self._assign_file_names(local_libraries)

    # ------------------------------------------------------------------
    # Library classification
    # ------------------------------------------------------------------

    def is_internal_library(self, library: Library) -> bool:
        """Private or runtime-only libraries that never get a page."""
        name = library.name
        if name in self._internal_names:
            return True
        return any(p.search(name) for p in self._internal_patterns)

    def canonical_name_of(self, library: Library) -> str | None:
        """Name of the local library this one duplicates, if any."""
        name = library.name
        for internal, canonical in self._duplicate_prefixes:
            if name.startswith(internal):
                candidate = canonical + name[len(internal) :]
                if candidate != name and candidate in self._local_names:
                    return candidate
        return None

    def is_duplicate_library(self, library: Library) -> bool:
        return self.canonical_name_of(library) is not None

    def navigable_libraries(self, package: Package) -> list[Library]:
        """Libraries shown in overviews and navigation, sorted by name."""
        return [
            lib
            for lib in package.public_libraries
            if not self.is_internal_library(lib)
            and not self.is_duplicate_library(lib)
            and not lib.is_empty
        ]

    def dir_name_for(self, library: Library) -> str:
        """Collision-safe directory name for a library."""
        return (
            self._dir_names.get(library)
            or self._dir_names_by_name.get(library.name)
            or self._normalize_dots(library.dir_name)
        )

    # ------------------------------------------------------------------
    # Paths, URLs and anchors
    # ------------------------------------------------------------------

    def file_path_for(self, entity: DocumentableEntity) -> str | None:
        """Output file relative to the root, or None when there is no page."""
        variant = entity.variant
        if variant == PACKAGE:
            return "api/index.md"
        if variant == CATEGORY:
            return f"topics/{sanitize_file_name(entity.name)}.md"
        if variant == LIBRARY:
            lib: Library = entity  # type: ignore[assignment]
            if self._library_dir(lib) is None or self.is_duplicate_library(lib):
                return None
            return f"api/{self.dir_name_for(lib)}/index.md"
        if variant in (CONTAINER, TOP_LEVEL):
            file_name = self._page_file_name(entity)
            if file_name is None:
                return None
            return f"{file_name}.md"
        return None

    def url_for(self, entity: DocumentableEntity) -> str | None:
        """Public URL of an entity's page; members get their container's URL."""
        variant = entity.variant
        if variant == PACKAGE:
            return "/api/"
        if variant == CATEGORY:
            return f"/topics/{sanitize_file_name(entity.name)}"
        if variant == LIBRARY:
            lib_dir = self._library_dir(entity)  # type: ignore[arg-type]
            return f"/api/{lib_dir}/" if lib_dir else None
        if variant == MEMBER:
            enclosing = entity.enclosing  # type: ignore[attr-defined]
            return self.url_for(enclosing) if enclosing is not None else None
        if variant in (CONTAINER, TOP_LEVEL):
            file_name = self._page_file_name(entity)
            return f"/{file_name}" if file_name else None
        return None

    def anchor_for(self, entity: DocumentableEntity) -> str | None:
        """In-page anchor (without '#') for a member, None for anything else."""
        if entity.variant != MEMBER:
            return None
        member: Member = entity  # type: ignore[assignment]
        kind = member.kind
        if kind == "operator":
            symbol = member.name.removeprefix("operator").strip()
            word = OPERATOR_NAMES.get(symbol) or sanitize_anchor(symbol)
            return f"operator-{word}"
        if kind == "constructor":
            name = strip_generics(member.reference_name).lower()
            return f"ctor-{name}" if member.is_unnamed_constructor else name
        name = strip_generics(member.name)
        if kind == "enum_value":
            return f"value-{name.lower()}"
        if kind in ("field", "getter", "setter"):
            return f"prop-{name.removesuffix('=').lower()}"
        return name.lower()

    def link_for(self, entity: DocumentableEntity) -> str | None:
        """Full link: container URL plus '#anchor' for members."""
        if not entity.is_public:
            return None
        url = self.url_for(entity)
        if url is None:
            return None
        anchor = self.anchor_for(entity)
        return f"{url}#{anchor}" if anchor else url

    def target_for(self, entity: DocumentableEntity) -> LinkTarget | None:
        url = self.url_for(entity)
        if url is None or not entity.is_public:
            return None
        return LinkTarget(
            qualified_name=entity.qualified_name,
            kind=entity.kind,
            file_path=self.file_path_for(entity),
            url=url,
            anchor=self.anchor_for(entity),
        )

    def targets(self) -> list[LinkTarget]:
        """Every (path, url, anchor) triple in deterministic model order."""
        out: list[LinkTarget] = []

        def add(entity: DocumentableEntity) -> None:
            target = self.target_for(entity)
            if target is not None:
                out.append(target)

        for pkg in self.packages:
            if not pkg.is_local:
                continue
            add(pkg)
            for lib in pkg.libraries:
                if self.file_path_for(lib) is None:
                    continue
                add(lib)
                for container in lib.containers:
                    add(container)
                    if self.file_path_for(container) is None:
                        continue
                    for member in container.members:
                        add(member)
                for element in lib.top_level:
                    add(element)
            for category in pkg.topics:
                add(category)
        return out

    # ------------------------------------------------------------------
    # Index construction
    # ------------------------------------------------------------------

    def _normalize_dots(self, dir_name: str) -> str:
        if dir_name.startswith(self._dotted_prefixes):
            return dir_name.replace(".", "-")
        return dir_name

    def _assign_dir_names(self, packages: list[Package]) -> dict[Library, str]:
        candidates: list[Library] = []
        counts: dict[str, int] = {}
        for pkg in packages:
            if not pkg.is_local:
                continue
            for lib in pkg.public_libraries:
                if self.is_duplicate_library(lib):
                    continue
                candidates.append(lib)
                base = self._normalize_dots(lib.dir_name)
                counts[base] = counts.get(base, 0) + 1

        dir_names: dict[Library, str] = {}
        for lib in candidates:
            base = self._normalize_dots(lib.dir_name)
            if counts[base] > 1:
                owner = lib.package.name if lib.package else "package"
                dir_names[lib] = f"{owner}_{base}"
                self.stats.collisions += 1
                logger.warning(
                    f"Library directory '{base}' is used by {counts[base]} "
                    f"libraries; using '{dir_names[lib]}' for {lib.name}"
                )
            else:
                dir_names[lib] = base

        canonical = {lib.name: d for lib, d in dir_names.items()}
        for pkg in packages:
            if not pkg.is_local:
                continue
            for lib in pkg.libraries:
                if lib in dir_names:
                    continue
                target = self.canonical_name_of(lib)
                if target is not None and target in canonical:
                    dir_names[lib] = canonical[target]
        return dir_names

    def _assign_file_names(
        self, libraries: list[Library]
    ) -> dict[DocumentableEntity, str]:
        names: dict[DocumentableEntity, str] = {}
        for lib in libraries:
            for container in lib.containers:
                names[container] = self._safe_file_name(container, lib)
            for element in lib.top_level:
                names[element] = self._safe_file_name(element, lib)
        return names

    def _safe_file_name(
        self, entity: Container | TopLevelElement, library: Library
    ) -> str:
        safe = sanitize_file_name(entity.name)
        suffix = KIND_SUFFIXES.get(entity.kind, "element")
        if safe.lower() == "index":
            self._log_file_collision(entity, safe, f"{safe}-{suffix}", "index page")
            safe = f"{safe}-{suffix}"
        if entity.variant == TOP_LEVEL and safe.lower() in self._container_names.get(
            library, set()
        ):
            self._log_file_collision(
                entity, safe, f"{safe}-{suffix}", "a container page (case-insensitive)"
            )
            safe = f"{safe}-{suffix}"
        return safe

    def _log_file_collision(
        self, entity: DocumentableEntity, old: str, new: str, reason: str
    ) -> None:
        self.stats.collisions += 1
        logger.warning(
            f"File name '{old}' for {entity.qualified_name} collides with "
            f"{reason}; using '{new}'"
        )

    def _library_dir(self, library: Library) -> str | None:
        pkg = library.package
        if pkg is None or not pkg.is_local:
            return None
        if self.is_internal_library(library):
            return None
        return self.dir_name_for(library)

    def _page_file_name(self, entity: DocumentableEntity) -> str | None:
        if not entity.is_public:
            return None
        lib = library_of(entity)
        if lib is None:
            return None
        lib_dir = self._library_dir(lib)
        if lib_dir is None:
            return None
        file_name = self._file_names.get(entity)
        if file_name is None:
            return None
        return f"api/{lib_dir}/{file_name}"
