"""Tests for rendered package, library, container and element pages."""

from collections.abc import Callable

from vitedoc.doc_processor import DocProcessor
from vitedoc.load_model import LoadedModel
from vitedoc.models import Container, DocumentableEntity, Library, Member, TopLevelElement
from vitedoc.path_resolver import PathResolver
from vitedoc.render_container_page import outline_for, render_container_page
from vitedoc.render_library_page import render_library_page
from vitedoc.render_package_page import (
    render_category_page,
    render_package_page,
    render_workspace_overview,
)
from vitedoc.render_top_level_page import render_top_level_page


def container_page(
    name: str,
    paths: PathResolver,
    docs: DocProcessor,
    find: Callable[[str], DocumentableEntity],
) -> str:
    container = find(name)
    assert isinstance(container, Container)
    return render_container_page(container, paths, docs)


def test_class_page_scenario(
    paths: PathResolver, docs: DocProcessor, find: Callable[[str], DocumentableEntity]
) -> None:
    """Verify the page of a class with unnamed and factory constructors."""
    page = container_page("Apple", paths, docs, find)
    lines = page.split("\n")
    assert paths.file_path_for(find("Apple")) == "api/L/Apple.md"
    assert lines[0] == "---"
    assert 'title: "Apple"' in lines
    assert 'category: "Classes"' in lines
    assert 'library: "L"' in lines
    assert "# Apple" in lines
    assert "## Constructors {#section-constructors}" in lines
    assert "### Apple() {#ctor-apple}" in lines
    assert (
        '### Apple.fromString() <Badge type="tip" text="factory" /> {#fromstring}' in lines
    )
    assert '<span class="kw">factory</span>' in page
    assert "A red fruit. See [Cat](/api/L/Cat) and `Nonexistent`." in lines
    assert page.endswith("\n")
    assert not page.endswith("\n\n")


def test_member_sections_are_ordered(
    paths: PathResolver, docs: DocProcessor, find: Callable[[str], DocumentableEntity]
) -> None:
    """Verify the fixed order of member sections."""
    page = container_page("Apple", paths, docs, find)
    constructors = page.index("## Constructors")
    properties = page.index("## Properties")
    methods = page.index("## Methods")
    assert constructors < properties < methods
    assert '<span class="kw">final</span>' in page


def test_implemented_types_scenario(
    paths: PathResolver, docs: DocProcessor, find: Callable[[str], DocumentableEntity]
) -> None:
    """Verify that a class implementing an interface lists it with a link."""
    page = container_page("Dog", paths, docs, find)
    assert ":::info Implemented types\n- [Cat](/api/L/Cat)\n:::" in page
    assert ":::info Inheritance\nObject → [Animal](/api/L/Animal) → **Dog**\n:::" in page
    assert '<Badge type="info" text="override" />' in page
    assert '<span class="kw">implements</span>' in page


def test_implementers_and_modifiers(
    paths: PathResolver, docs: DocProcessor, find: Callable[[str], DocumentableEntity]
) -> None:
    """Verify implementers and modifier badges on an abstract class."""
    page = container_page("Cat", paths, docs, find)
    assert '# Cat <Badge type="info" text="abstract" />' in page.split("\n")
    assert ":::info Implementers\n- [Dog](/api/L/Dog)\n:::" in page


def test_available_extensions(
    paths: PathResolver, docs: DocProcessor, find: Callable[[str], DocumentableEntity]
) -> None:
    """Verify that extensions on a class are listed on its page."""
    page = container_page("Apple", paths, docs, find)
    assert ":::info Available Extensions\n- [AppleTools](/api/L/AppleTools)\n:::" in page


def test_extension_page(
    paths: PathResolver, docs: DocProcessor, find: Callable[[str], DocumentableEntity]
) -> None:
    """Verify the declaration and extended type of an extension."""
    page = container_page("AppleTools", paths, docs, find)
    assert 'category: "Extensions"' in page
    assert '<span class="kw">on</span> <a href="/api/L/Apple" class="type-link">Apple</a>' in page
    assert ":::info Extended type\n- [Apple](/api/L/Apple)\n:::" in page


def test_duplicate_member_anchors_are_disambiguated(
    paths: PathResolver, docs: DocProcessor, find: Callable[[str], DocumentableEntity]
) -> None:
    """Verify that a getter and setter of the same name get distinct anchors."""
    animal = find("Animal")
    assert isinstance(animal, Container)
    animal.members += [
        Member("legs", kind="getter", enclosing=animal),
        Member("legs=", kind="setter", enclosing=animal),
    ]
    page = render_container_page(animal, paths, docs)
    assert "{#prop-legs}" in page
    assert "{#prop-legs-2}" in page


def test_outline_for_crowded_pages(find: Callable[[str], DocumentableEntity]) -> None:
    """Verify that large containers only outline section headings."""
    apple = find("Apple")
    assert isinstance(apple, Container)
    assert outline_for(apple, 50) == [2, 3]
    assert outline_for(apple, 2) == [2, 2]


def test_deprecated_class(
    paths: PathResolver, docs: DocProcessor, find: Callable[[str], DocumentableEntity]
) -> None:
    """Verify the deprecated heading and warning callout."""
    animal = find("Animal")
    animal.is_deprecated = True
    animal.annotations = ["@Deprecated('Use Dog instead')"]
    page = container_page("Animal", paths, docs, find)
    assert '# <Badge type="warning" text="deprecated" /> ~~Animal~~' in page
    assert ":::warning DEPRECATED\nUse Dog instead\n:::" in page


def test_member_doc_headings_are_demoted(
    paths: PathResolver, docs: DocProcessor, find: Callable[[str], DocumentableEntity]
) -> None:
    """Verify that headings inside member docs move two levels down."""
    apple = find("Apple")
    assert isinstance(apple, Container)
    peel = next(m for m in apple.members if m.name == "peel")
    peel.documentation = "Peels it.\n\n## Example\n\nLike this."
    page = render_container_page(apple, paths, docs)
    assert "#### Example {#peel-example}" in page


def test_library_page(
    lib: Library, paths: PathResolver, docs: DocProcessor
) -> None:
    """Verify the overview tables of a library page."""
    page = render_library_page(lib, paths, docs)
    assert "<ApiBreadcrumb />" in page
    assert "# L" in page.split("\n")
    assert "The L library." in page
    assert "## Classes {#section-classes}" in page
    assert "| Class | Description |" in page
    assert "| [Animal](/api/L/Animal) | Any animal. |" in page
    assert "| [AppleTools](/api/L/AppleTools) | Apple |" in page
    assert "| [main](/api/L/main) | Entry point. |" in page
    assert "## Constants {#section-constants}" in page
    assert page.index("## Classes") < page.index("## Extensions") < page.index("## Functions")


def test_deprecated_entry_in_overview(
    lib: Library,
    paths: PathResolver,
    docs: DocProcessor,
    find: Callable[[str], DocumentableEntity],
) -> None:
    """Verify that deprecated entries are struck through."""
    find("Animal").is_deprecated = True
    page = render_library_page(lib, paths, docs)
    assert "| ~~[Animal](/api/L/Animal)~~ | **Deprecated.** Any animal. |" in page


def test_package_page(model: LoadedModel, paths: PathResolver, docs: DocProcessor) -> None:
    """Verify the package page drops the repeated title and lists libraries."""
    page = render_package_page(model.primary, paths, docs)
    lines = page.split("\n")
    assert "outline: false" in lines
    assert lines.count("# fruit_kit") == 1
    assert "A package about fruit." in lines
    assert "| [L](/api/L/) | The L library. |" in lines


def test_workspace_overview(model: LoadedModel, paths: PathResolver, docs: DocProcessor) -> None:
    """Verify the workspace page groups libraries per package."""
    page = render_workspace_overview("Fruit workspace", model.packages, paths, docs)
    assert "# Fruit workspace" in page
    assert "### fruit_kit {#fruit_kit}" in page
    assert "| [L](/api/L/) | The L library. |" in page


def test_category_page(model: LoadedModel, paths: PathResolver, docs: DocProcessor) -> None:
    """Verify that a topic page lists its tagged entities."""
    pets = model.primary.topics[0]
    page = render_category_page(pets, paths, docs)
    assert "# Pets" in page
    assert "Animals kept at home." in page
    assert "| [Dog](/api/L/Dog) |" in page


def test_function_page(
    paths: PathResolver, docs: DocProcessor, find: Callable[[str], DocumentableEntity]
) -> None:
    """Verify the page of a top-level function."""
    main = find("main")
    assert isinstance(main, TopLevelElement)
    page = render_top_level_page(main, paths, docs)
    assert 'title: "main function"' in page
    assert 'category: "Functions"' in page
    assert '<span class="type">void</span> <span class="fn">main</span>()' in page
    assert "Entry point." in page


def test_constant_page(
    paths: PathResolver, docs: DocProcessor, find: Callable[[str], DocumentableEntity]
) -> None:
    """Verify the page of a top-level constant."""
    element = find("maxApples")
    assert isinstance(element, TopLevelElement)
    page = render_top_level_page(element, paths, docs)
    assert 'title: "maxApples constant"' in page
    assert '<span class="kw">const</span>' in page
    assert '= <span class="num-lit">12</span>' in page


def test_long_parameter_lists_wrap(
    paths: PathResolver, docs: DocProcessor, find: Callable[[str], DocumentableEntity]
) -> None:
    """Verify that signatures wider than the limit put one parameter per line."""
    main = find("main")
    assert isinstance(main, TopLevelElement)
    short_page = render_top_level_page(main, paths, docs)
    config = {"pages": {"signature_wrap_width": 10}}
    apple = find("Apple")
    assert isinstance(apple, Container)
    from_string = next(m for m in apple.members if m.name == "fromString")
    main.parameters = from_string.parameters
    wide_page = render_top_level_page(main, paths, docs, config)
    assert "main</span>()" in short_page
    assert '<span class="fn">main</span>(\n  <span class="type">String</span>' in wide_page
