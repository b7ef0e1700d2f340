"""Data models for the resolved API entity graph."""

from __future__ import annotations

from collections.abc import Callable
from dataclasses import dataclass, field
from typing import ClassVar

PACKAGE = "package"
LIBRARY = "library"
CONTAINER = "container"
MEMBER = "member"
TOP_LEVEL = "top_level"
CATEGORY = "category"

CONTAINER_KINDS = ("class", "enum", "mixin", "extension", "extension_type")
MEMBER_KINDS = (
    "constructor",
    "method",
    "operator",
    "field",
    "getter",
    "setter",
    "enum_value",
)
TOP_LEVEL_KINDS = ("function", "variable", "typedef")

CALLABLE_KINDS = ("constructor", "method", "operator", "function")


def is_container_kind(kind: str) -> bool:
    """Return True for class-like kinds that own members and get a page."""
    return kind in CONTAINER_KINDS


def is_member_kind(kind: str) -> bool:
    """Return True for kinds rendered as an anchor on their container's page."""
    return kind in MEMBER_KINDS


def is_top_level_kind(kind: str) -> bool:
    """Return True for library-level functions, variables and typedefs."""
    return kind in TOP_LEVEL_KINDS


@dataclass(frozen=True)
class Capabilities:
    """What an entity can do, in place of a trait hierarchy."""

    is_callable: bool = False
    has_page: bool = False
    is_inheritable: bool = False
    is_static: bool = False
    is_const: bool = False
    is_factory: bool = False
    is_unnamed_constructor: bool = False


@dataclass(eq=False)
class TypeRef:
    """A reference to a type as written in a declaration."""

    name: str
    target_name: str | None = None
    arguments: list[TypeRef] = field(default_factory=list)
    nullable: bool = False
    href: str | None = None
    target: DocumentableEntity | None = field(default=None, repr=False)

    def display(self) -> str:
        """Plain text form, e.g. ``Map<String, int>?``."""
        text = self.name
        if self.arguments:
            text += "<" + ", ".join(a.display() for a in self.arguments) + ">"
        if self.nullable:
            text += "?"
        return text


@dataclass(eq=False)
class TypeParameter:
    name: str
    bound: TypeRef | None = None


@dataclass(eq=False)
class Parameter:
    name: str
    type: TypeRef | None = None
    kind: str = "positional"  # positional | optional | named
    required: bool = False
    default: str | None = None


ReferenceFilter = Callable[["DocumentableEntity"], bool]


@dataclass(eq=False)
class DocumentableEntity:
    """Any model node that owns documentation and may get a page or anchor."""

    variant: ClassVar[str] = ""

    name: str
    kind: str = ""
    documentation: str = ""
    is_public: bool = True
    is_deprecated: bool = False
    annotations: list[str] = field(default_factory=list)
    categories: list[str] = field(default_factory=list)
    href: str | None = None

    @property
    def qualified_name(self) -> str:
        parent = self.reference_parent()
        if parent is None or parent.variant == PACKAGE:
            return self.name
        return f"{parent.qualified_name}.{self.name}"

    @property
    def capabilities(self) -> Capabilities:
        return Capabilities()

    def reference_parent(self) -> DocumentableEntity | None:
        return None

    def reference_children(self) -> dict[str, DocumentableEntity]:
        return {}

    def reference_by(
        self,
        name: str | list[str],
        ref_filter: ReferenceFilter | None = None,
    ) -> DocumentableEntity | None:
        """Resolve ``name`` by walking this entity's lexical scope chain.

        Each scope is tried in turn: own children first, then the enclosing
        container, the library and finally the whole package. Dotted names
        descend through children. A candidate rejected by ``ref_filter`` lets
        the walk continue outward.
        """
        parts = name.split(".") if isinstance(name, str) else list(name)
        if not parts or not parts[0]:
            return None
        scope: DocumentableEntity | None = self
        while scope is not None:
            found = _descend(scope, parts)
            if found is not None and (ref_filter is None or ref_filter(found)):
                return found
            scope = scope.reference_parent()
        return None


def _descend(
    scope: DocumentableEntity, parts: list[str]
) -> DocumentableEntity | None:
    candidate = scope.reference_children().get(parts[0])
    for part in parts[1:]:
        if candidate is None:
            return None
        candidate = candidate.reference_children().get(part)
    return candidate


@dataclass(eq=False)
class Member(DocumentableEntity):
    """A constructor, method, operator, field, accessor or enum value."""

    variant: ClassVar[str] = MEMBER

    enclosing: Container | None = field(default=None, repr=False)
    return_type: TypeRef | None = None
    parameters: list[Parameter] = field(default_factory=list)
    type_parameters: list[TypeParameter] = field(default_factory=list)
    is_static: bool = False
    is_const: bool = False
    is_factory: bool = False
    is_override: bool = False
    is_abstract: bool = False
    attributes: list[str] = field(default_factory=list)
    constant_value: str | None = None
    source_url: str | None = None
    source_code: str | None = None
    inherited_from: Container | None = field(default=None, repr=False)
    extension_provider: Container | None = field(default=None, repr=False)

    @property
    def capabilities(self) -> Capabilities:
        return Capabilities(
            is_callable=self.kind in CALLABLE_KINDS,
            is_inheritable=self.kind != "constructor",
            is_static=self.is_static,
            is_const=self.is_const,
            is_factory=self.is_factory,
            is_unnamed_constructor=self.is_unnamed_constructor,
        )

    @property
    def is_unnamed_constructor(self) -> bool:
        return (
            self.kind == "constructor"
            and self.enclosing is not None
            and self.name in ("", "new", self.enclosing.name)
        )

    @property
    def reference_name(self) -> str:
        """Name used in references and anchors (unnamed ctors use the type)."""
        if self.is_unnamed_constructor and self.enclosing is not None:
            return self.enclosing.name
        return self.name

    @property
    def display_name(self) -> str:
        if self.kind == "constructor" and self.enclosing is not None:
            if self.is_unnamed_constructor:
                return self.enclosing.name
            return f"{self.enclosing.name}.{self.name}"
        if self.kind == "operator":
            return f"operator {self.name}"
        return self.name

    @property
    def is_inherited(self) -> bool:
        return self.inherited_from is not None

    @property
    def library(self) -> Library | None:
        return self.enclosing.library if self.enclosing else None

    def reference_parent(self) -> DocumentableEntity | None:
        return self.enclosing


@dataclass(eq=False)
class Container(DocumentableEntity):
    """A class, enum, mixin, extension or extension type."""

    variant: ClassVar[str] = CONTAINER

    library: Library | None = field(default=None, repr=False)
    type_parameters: list[TypeParameter] = field(default_factory=list)
    modifiers: list[str] = field(default_factory=list)
    supertype: TypeRef | None = None
    interfaces: list[TypeRef] = field(default_factory=list)
    mixins: list[TypeRef] = field(default_factory=list)
    superclass_constraints: list[TypeRef] = field(default_factory=list)
    extended_type: TypeRef | None = None
    members: list[Member] = field(default_factory=list)
    implementers: list[Container] = field(default_factory=list, repr=False)
    extensions: list[Container] = field(default_factory=list, repr=False)
    is_exception: bool = False
    source_url: str | None = None

    @property
    def capabilities(self) -> Capabilities:
        return Capabilities(has_page=True)

    def members_of(self, *kinds: str) -> list[Member]:
        return [m for m in self.members if m.kind in kinds]

    @property
    def constructors(self) -> list[Member]:
        return [m for m in self.members_of("constructor") if m.is_public]

    @property
    def enum_values(self) -> list[Member]:
        return [m for m in self.members_of("enum_value") if m.is_public]

    @property
    def instance_fields(self) -> list[Member]:
        return [
            m
            for m in self.members_of("field", "getter", "setter")
            if m.is_public and not m.is_static and not m.is_const
        ]

    @property
    def instance_methods(self) -> list[Member]:
        return [
            m for m in self.members_of("method") if m.is_public and not m.is_static
        ]

    @property
    def operators(self) -> list[Member]:
        return [m for m in self.members_of("operator") if m.is_public]

    @property
    def static_fields(self) -> list[Member]:
        return [
            m
            for m in self.members_of("field", "getter", "setter")
            if m.is_public and m.is_static and not m.is_const
        ]

    @property
    def static_methods(self) -> list[Member]:
        return [m for m in self.members_of("method") if m.is_public and m.is_static]

    @property
    def constants(self) -> list[Member]:
        return [
            m
            for m in self.members_of("field", "getter")
            if m.is_public and m.is_const
        ]

    def reference_parent(self) -> DocumentableEntity | None:
        return self.library

    def reference_children(self) -> dict[str, DocumentableEntity]:
        # Constructors go in first so that a same-named member shadows them.
        children: dict[str, DocumentableEntity] = {}
        for m in self.members_of("constructor"):
            children[m.reference_name] = m
        for m in self.members:
            if m.kind == "constructor":
                continue
            if m.kind == "operator":
                key = m.name.removeprefix("operator").strip()
            elif m.kind == "setter":
                key = m.name.removesuffix("=")
            else:
                key = m.name
            children[key] = m
        return children


@dataclass(eq=False)
class TopLevelElement(DocumentableEntity):
    """A library-level function, variable or typedef."""

    variant: ClassVar[str] = TOP_LEVEL

    library: Library | None = field(default=None, repr=False)
    return_type: TypeRef | None = None
    parameters: list[Parameter] = field(default_factory=list)
    type_parameters: list[TypeParameter] = field(default_factory=list)
    aliased_type: TypeRef | None = None
    is_const: bool = False
    is_final: bool = False
    attributes: list[str] = field(default_factory=list)
    constant_value: str | None = None
    source_url: str | None = None
    source_code: str | None = None

    @property
    def capabilities(self) -> Capabilities:
        return Capabilities(
            is_callable=self.kind == "function",
            has_page=True,
            is_const=self.is_const,
        )

    def reference_parent(self) -> DocumentableEntity | None:
        return self.library


@dataclass(eq=False)
class Library(DocumentableEntity):
    """A unit of public API owned by a package."""

    variant: ClassVar[str] = LIBRARY

    package: Package | None = field(default=None, repr=False)
    dir_name: str = ""
    containers: list[Container] = field(default_factory=list)
    top_level: list[TopLevelElement] = field(default_factory=list)

    def __post_init__(self) -> None:
        self.kind = self.kind or LIBRARY
        if not self.dir_name:
            self.dir_name = self.name.replace(":", "-").replace("/", "_")

    @property
    def qualified_name(self) -> str:
        return self.name

    @property
    def capabilities(self) -> Capabilities:
        return Capabilities(has_page=True)

    @property
    def is_empty(self) -> bool:
        return not any(c.is_public for c in self.containers) and not any(
            t.is_public for t in self.top_level
        )

    def containers_of(self, *kinds: str) -> list[Container]:
        return [c for c in self.containers if c.kind in kinds and c.is_public]

    def top_level_of(self, *kinds: str) -> list[TopLevelElement]:
        return [t for t in self.top_level if t.kind in kinds and t.is_public]

    def reference_parent(self) -> DocumentableEntity | None:
        return self.package

    def reference_children(self) -> dict[str, DocumentableEntity]:
        children: dict[str, DocumentableEntity] = {}
        for c in self.containers:
            children[c.name] = c
        for t in self.top_level:
            children.setdefault(t.name, t)
        return children


@dataclass(eq=False)
class Category(DocumentableEntity):
    """A cross-cutting topic grouping entities from any library."""

    variant: ClassVar[str] = CATEGORY

    package: Package | None = field(default=None, repr=False)
    entities: list[DocumentableEntity] = field(default_factory=list, repr=False)

    def __post_init__(self) -> None:
        self.kind = self.kind or CATEGORY

    @property
    def capabilities(self) -> Capabilities:
        return Capabilities(has_page=True)

    def reference_parent(self) -> DocumentableEntity | None:
        return self.package


@dataclass(eq=False)
class Package(DocumentableEntity):
    """Root of the graph: owns ordered libraries and categories."""

    variant: ClassVar[str] = PACKAGE

    description: str = ""
    version: str = ""
    repository: str = ""
    is_local: bool = True
    libraries: list[Library] = field(default_factory=list)
    topics: list[Category] = field(default_factory=list)

    def __post_init__(self) -> None:
        self.kind = self.kind or PACKAGE

    @property
    def capabilities(self) -> Capabilities:
        return Capabilities(has_page=True)

    @property
    def public_libraries(self) -> list[Library]:
        return sorted(
            (lib for lib in self.libraries if lib.is_public),
            key=lambda lib: lib.name.lower(),
        )

    def reference_children(self) -> dict[str, DocumentableEntity]:
        children: dict[str, DocumentableEntity] = {}
        for lib in self.libraries:
            for name, entity in lib.reference_children().items():
                children.setdefault(name, entity)
        for lib in self.libraries:
            children.setdefault(lib.name, lib)
        return children


def library_of(entity: DocumentableEntity) -> Library | None:
    """Return the library an entity lives in, if any."""
    if entity.variant == LIBRARY:
        return entity  # type: ignore[return-value]
    if entity.variant in (CONTAINER, TOP_LEVEL):
        return entity.library  # type: ignore[attr-defined]
    if entity.variant == MEMBER:
        return entity.library  # type: ignore[attr-defined]
    return None


def package_of(entity: DocumentableEntity) -> Package | None:
    """Return the package owning an entity, if any."""
    if entity.variant == PACKAGE:
        return entity  # type: ignore[return-value]
    if entity.variant == CATEGORY:
        return entity.package  # type: ignore[attr-defined]
    lib = library_of(entity)
    return lib.package if lib else None
