"""Logic for loading the resolved API model from a YAML or JSON document."""

import logging
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any

import yaml

from vitedoc.models import (
    Category,
    Container,
    DocumentableEntity,
    Library,
    Member,
    Package,
    Parameter,
    TopLevelElement,
    TypeParameter,
    TypeRef,
    is_container_kind,
    is_member_kind,
    is_top_level_kind,
)

logger = logging.getLogger(__name__)

PARAMETER_KINDS = ("positional", "optional", "named")


@dataclass
class LoadedModel:
    """Packages read from one model file; the first package is the primary one."""

    packages: list[Package]
    fragments: dict[str, str] = field(default_factory=dict)
    workspace_name: str = ""

    @property
    def primary(self) -> Package:
        return self.packages[0]

    @property
    def local_packages(self) -> list[Package]:
        return [p for p in self.packages if p.is_local]

    @property
    def is_workspace(self) -> bool:
        return len(self.local_packages) > 1


def load_model(path: str | Path) -> LoadedModel:
    """Read a model file and return the fully linked entity graph."""
    p = Path(path)
    if not p.is_file():
        msg = f"Model file not found: {p}"
        raise SystemExit(msg)
    try:
        doc = yaml.safe_load(p.read_text(encoding="utf-8")) or {}
    except (OSError, UnicodeDecodeError, yaml.YAMLError) as e:
        msg = f"Could not read model file {p}: {e}"
        raise SystemExit(msg) from e
    if not isinstance(doc, dict):
        msg = f"Model file {p} must contain a mapping at the top level"
        raise SystemExit(msg)
    return build_model(doc)


def build_model(doc: dict[str, Any]) -> LoadedModel:
    """Build and link the entity graph from an already parsed document."""
    raw_packages = doc.get("packages")
    if raw_packages is None:
        raw_packages = [doc["package"]] if doc.get("package") else []
    if not raw_packages:
        msg = "Model has no 'package' or 'packages' entry"
        raise SystemExit(msg)

    linker = _Linker()
    packages = [linker.package(raw) for raw in raw_packages]
    linker.link()

    fragments = {
        str(k).lower(): str(v) for k, v in (doc.get("html_fragments") or {}).items()
    }
    workspace_name = str(doc.get("workspace_name") or packages[0].name)
    logger.info(
        f"Loaded {len(packages)} package(s) with {linker.entity_count} entities"
    )
    return LoadedModel(packages, fragments, workspace_name)


def _entity_fields(raw: dict[str, Any]) -> dict[str, Any]:
    return {
        "name": str(raw.get("name") or ""),
        "kind": str(raw.get("kind") or ""),
        "documentation": str(raw.get("documentation") or ""),
        "is_public": bool(raw.get("is_public", True)),
        "is_deprecated": bool(raw.get("is_deprecated", False)),
        "annotations": [str(a) for a in raw.get("annotations") or []],
        "categories": [str(c) for c in raw.get("categories") or []],
        "href": raw.get("href"),
    }


class _Linker:
    """Builds entities and resolves cross references once all of them exist."""

    def __init__(self) -> None:
        self.by_qualified_name: dict[str, DocumentableEntity] = {}
        self.by_name: dict[str, list[DocumentableEntity]] = {}
        self.type_refs: list[tuple[TypeRef, str | None]] = []
        self.member_links: list[tuple[Member, str | None, str | None]] = []
        self.packages: list[Package] = []
        self.entity_count = 0

    # ------------------------------------------------------------------
    # Construction
    # ------------------------------------------------------------------

    def package(self, raw: dict[str, Any]) -> Package:
        pkg = Package(
            **_entity_fields(raw),
            description=str(raw.get("description") or ""),
            version=str(raw.get("version") or ""),
            repository=str(raw.get("repository") or ""),
            is_local=bool(raw.get("is_local", True)),
        )
        if not pkg.name:
            msg = "Every package in the model needs a name"
            raise SystemExit(msg)
        for raw_lib in raw.get("libraries") or []:
            pkg.libraries.append(self.library(raw_lib, pkg))
        for raw_cat in raw.get("categories") or []:
            category = Category(**_entity_fields(raw_cat), package=pkg)
            pkg.topics.append(category)
        self.packages.append(pkg)
        return pkg

    def library(self, raw: dict[str, Any], pkg: Package) -> Library:
        lib = Library(
            **_entity_fields(raw), package=pkg, dir_name=str(raw.get("dir_name") or "")
        )
        self._register(lib)
        for raw_container in raw.get("containers") or []:
            lib.containers.append(self.container(raw_container, lib))
        for raw_element in raw.get("top_level") or []:
            lib.top_level.append(self.top_level(raw_element, lib))
        return lib

    def container(self, raw: dict[str, Any], lib: Library) -> Container:
        fields = _entity_fields(raw)
        if not is_container_kind(fields["kind"]):
            msg = f"Unknown container kind {fields['kind']!r} for {fields['name']}"
            raise SystemExit(msg)
        container = Container(
            **fields,
            library=lib,
            type_parameters=self.type_parameters(raw),
            modifiers=[str(m) for m in raw.get("modifiers") or []],
            supertype=self.type_ref(raw.get("supertype")),
            interfaces=self.type_refs_of(raw.get("interfaces")),
            mixins=self.type_refs_of(raw.get("mixins")),
            superclass_constraints=self.type_refs_of(raw.get("superclass_constraints")),
            extended_type=self.type_ref(
                raw.get("extended_type") or raw.get("representation_type")
            ),
            is_exception=bool(raw.get("is_exception", False)),
            source_url=raw.get("source_url"),
        )
        self._register(container)
        for raw_member in raw.get("members") or []:
            container.members.append(self.member(raw_member, container))
        return container

    def member(self, raw: dict[str, Any], container: Container) -> Member:
        fields = _entity_fields(raw)
        if not is_member_kind(fields["kind"]):
            msg = (
                f"Unknown member kind {fields['kind']!r} for "
                f"{container.name}.{fields['name']}"
            )
            raise SystemExit(msg)
        member = Member(
            **fields,
            enclosing=container,
            return_type=self.type_ref(raw.get("return_type") or raw.get("type")),
            parameters=self.parameters(raw),
            type_parameters=self.type_parameters(raw),
            is_static=bool(raw.get("is_static", False)),
            is_const=bool(raw.get("is_const", False)),
            is_factory=bool(raw.get("is_factory", False)),
            is_override=bool(raw.get("is_override", False)),
            is_abstract=bool(raw.get("is_abstract", False)),
            attributes=[str(a) for a in raw.get("attributes") or []],
            constant_value=_optional_str(raw.get("constant_value")),
            source_url=raw.get("source_url"),
            source_code=raw.get("source_code"),
        )
        self.member_links.append(
            (member, raw.get("inherited_from"), raw.get("extension_provider"))
        )
        self.entity_count += 1
        return member

    def top_level(self, raw: dict[str, Any], lib: Library) -> TopLevelElement:
        fields = _entity_fields(raw)
        if not is_top_level_kind(fields["kind"]):
            msg = f"Unknown top-level kind {fields['kind']!r} for {fields['name']}"
            raise SystemExit(msg)
        element = TopLevelElement(
            **fields,
            library=lib,
            return_type=self.type_ref(raw.get("return_type") or raw.get("type")),
            parameters=self.parameters(raw),
            type_parameters=self.type_parameters(raw),
            aliased_type=self.type_ref(raw.get("aliased_type")),
            is_const=bool(raw.get("is_const", False)),
            is_final=bool(raw.get("is_final", False)),
            attributes=[str(a) for a in raw.get("attributes") or []],
            constant_value=_optional_str(raw.get("constant_value")),
            source_url=raw.get("source_url"),
            source_code=raw.get("source_code"),
        )
        self._register(element)
        return element

    def type_ref(self, raw: Any) -> TypeRef | None:
        """A type written either as ``"Name?"`` or as a mapping."""
        if raw is None or raw == "":
            return None
        if isinstance(raw, str):
            nullable = raw.endswith("?")
            ref = TypeRef(name=raw.removesuffix("?"), nullable=nullable)
            self.type_refs.append((ref, None))
            return ref
        ref = TypeRef(
            name=str(raw.get("name") or ""),
            target_name=raw.get("target"),
            arguments=self.type_refs_of(raw.get("arguments")),
            nullable=bool(raw.get("nullable", False)),
            href=raw.get("href"),
        )
        self.type_refs.append((ref, ref.target_name))
        return ref

    def type_refs_of(self, raw: Any) -> list[TypeRef]:
        refs = [self.type_ref(r) for r in raw or []]
        return [r for r in refs if r is not None]

    def type_parameters(self, raw: dict[str, Any]) -> list[TypeParameter]:
        out = []
        for tp in raw.get("type_parameters") or []:
            if isinstance(tp, str):
                out.append(TypeParameter(tp))
            else:
                out.append(
                    TypeParameter(str(tp.get("name") or ""), self.type_ref(tp.get("bound")))
                )
        return out

    def parameters(self, raw: dict[str, Any]) -> list[Parameter]:
        out = []
        for param in raw.get("parameters") or []:
            kind = str(param.get("kind") or "positional")
            if kind not in PARAMETER_KINDS:
                logger.warning(
                    f"Unknown parameter kind {kind!r} for {param.get('name')}; "
                    "treating it as positional"
                )
                kind = "positional"
            out.append(
                Parameter(
                    name=str(param.get("name") or ""),
                    type=self.type_ref(param.get("type")),
                    kind=kind,
                    required=bool(param.get("required", kind == "positional")),
                    default=_optional_str(param.get("default")),
                )
            )
        return out

    def _register(self, entity: DocumentableEntity) -> None:
        self.entity_count += 1
        self.by_qualified_name.setdefault(entity.qualified_name, entity)
        self.by_name.setdefault(entity.name, []).append(entity)

    # ------------------------------------------------------------------
    # Linking
    # ------------------------------------------------------------------

    def link(self) -> None:
        for ref, target_name in self.type_refs:
            ref.target = self._find(target_name or ref.name, exact=bool(target_name))
        for member, inherited_from, provider in self.member_links:
            member.inherited_from = self._find_container(inherited_from)
            member.extension_provider = self._find_container(provider)
        self._derive_implementers()
        self._collect_categories()

    def _find(self, name: str, *, exact: bool) -> DocumentableEntity | None:
        found = self.by_qualified_name.get(name)
        if found is not None or exact:
            if found is None:
                logger.debug(f"Type target not found in model: {name}")
            return found
        candidates = [
            e
            for e in self.by_name.get(name, [])
            if isinstance(e, Container) or e.kind == "typedef"
        ]
        return candidates[0] if len(candidates) == 1 else None

    def _find_container(self, name: str | None) -> Container | None:
        if not name:
            return None
        found = self._find(str(name), exact=False)
        if isinstance(found, Container):
            return found
        logger.warning(f"Unknown container referenced by a member: {name}")
        return None

    def _derive_implementers(self) -> None:
        for pkg in self.packages:
            for lib in pkg.libraries:
                for container in lib.containers:
                    for ref in [container.supertype, *container.interfaces, *container.mixins]:
                        target = ref.target if ref else None
                        if (
                            isinstance(target, Container)
                            and target is not container
                            and container not in target.implementers
                        ):
                            target.implementers.append(container)
                    if container.kind == "extension" and container.extended_type:
                        target = container.extended_type.target
                        if isinstance(target, Container):
                            target.extensions.append(container)

    def _collect_categories(self) -> None:
        for pkg in self.packages:
            by_name = {c.name: c for c in pkg.topics}
            for lib in pkg.libraries:
                for entity in [*lib.containers, *lib.top_level]:
                    for name in entity.categories:
                        category = by_name.get(name)
                        if category is None:
                            category = Category(name, package=pkg)
                            pkg.topics.append(category)
                            by_name[name] = category
                        if entity.is_public:
                            category.entities.append(entity)


def _optional_str(value: Any) -> str | None:
    return None if value is None else str(value)
