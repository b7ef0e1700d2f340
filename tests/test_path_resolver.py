"""Tests for file path, URL and anchor assignment."""

from collections.abc import Callable

from vitedoc.load_model import LoadedModel, build_model
from vitedoc.models import Container, DocumentableEntity, Library, Member, Package
from vitedoc.path_resolver import PathResolver
from vitedoc.run_stats import RunStats


def test_container_paths(paths: PathResolver, find: Callable[[str], DocumentableEntity]) -> None:
    """Verify the file path, URL and link of a container page."""
    apple = find("Apple")
    assert paths.file_path_for(apple) == "api/L/Apple.md"
    assert paths.url_for(apple) == "/api/L/Apple"
    assert paths.link_for(apple) == "/api/L/Apple"


def test_package_library_and_category_paths(
    model: LoadedModel, paths: PathResolver, lib: Library
) -> None:
    """Verify the fixed locations of package, library and topic pages."""
    assert paths.file_path_for(model.primary) == "api/index.md"
    assert paths.url_for(model.primary) == "/api/"
    assert paths.file_path_for(lib) == "api/L/index.md"
    assert paths.url_for(lib) == "/api/L/"
    pets = model.primary.topics[0]
    assert paths.file_path_for(pets) == "topics/Pets.md"


def test_member_anchors(paths: PathResolver, find: Callable[[str], DocumentableEntity]) -> None:
    """Verify anchors per member kind."""
    apple = find("Apple")
    assert isinstance(apple, Container)
    anchors = {m.name: paths.anchor_for(m) for m in apple.members}
    assert anchors == {
        "Apple": "ctor-apple",
        "fromString": "fromstring",
        "weight": "prop-weight",
        "peel": "peel",
    }
    assert paths.link_for(apple.members[1]) == "/api/L/Apple#fromstring"


def test_operator_and_enum_value_anchors() -> None:
    """Verify operator words and enum value prefixes."""
    container = Container("Vector", kind="class")
    plus = Member("+", kind="operator", enclosing=container)
    equals = Member("operator ==", kind="operator", enclosing=container)
    red = Member("red", kind="enum_value", enclosing=container)
    paths = PathResolver([])
    assert paths.anchor_for(plus) == "operator-plus"
    assert paths.anchor_for(equals) == "operator-equals"
    assert paths.anchor_for(red) == "value-red"


def test_index_name_collision() -> None:
    """Verify that an element named index never replaces the library page."""
    model = build_model(
        {
            "package": {
                "name": "p",
                "libraries": [
                    {"name": "lib", "containers": [{"name": "Index", "kind": "class"}]}
                ],
            }
        }
    )
    stats = RunStats()
    paths = PathResolver(model.packages, stats=stats)
    index_class = model.primary.libraries[0].containers[0]
    assert paths.file_path_for(index_class) == "api/lib/Index-class.md"
    assert stats.collisions == 1


def test_case_insensitive_collision_with_container() -> None:
    """Verify that a top-level element whose name differs only in case is renamed."""
    model = build_model(
        {
            "package": {
                "name": "p",
                "libraries": [
                    {
                        "name": "lib",
                        "containers": [{"name": "Apple", "kind": "class"}],
                        "top_level": [{"name": "apple", "kind": "function"}],
                    }
                ],
            }
        }
    )
    paths = PathResolver(model.packages)
    library = model.primary.libraries[0]
    assert paths.file_path_for(library.containers[0]) == "api/lib/Apple.md"
    assert paths.file_path_for(library.top_level[0]) == "api/lib/apple-function.md"


def test_internal_library_has_no_page() -> None:
    """Verify that private and runtime libraries are excluded."""
    package = Package("p")
    internal = Library("_private", package=package)
    internal.containers.append(Container("Hidden", kind="class", library=internal))
    package.libraries.append(internal)
    paths = PathResolver([package])
    assert paths.file_path_for(internal) is None
    assert paths.url_for(internal.containers[0]) is None
    assert paths.navigable_libraries(package) == []


def test_duplicate_library_maps_to_canonical() -> None:
    """Verify that internal duplicates are hidden and share the canonical directory."""
    package = Package("sdk")
    canonical = Library("dart:core", package=package)
    duplicate = Library("dart.core", package=package)
    for library in (canonical, duplicate):
        library.containers.append(Container("Object", kind="class", library=library))
        package.libraries.append(library)
    paths = PathResolver([package])
    assert paths.canonical_name_of(duplicate) == "dart:core"
    assert paths.file_path_for(duplicate) is None
    assert paths.dir_name_for(duplicate) == "dart-core"
    assert paths.navigable_libraries(package) == [canonical]


def test_library_directory_collision_is_disambiguated() -> None:
    """Verify that two libraries with the same directory get package prefixes."""
    first = Package("alpha")
    second = Package("beta")
    for package in (first, second):
        library = Library("utils", package=package)
        library.containers.append(Container("Helper", kind="class", library=library))
        package.libraries.append(library)
    stats = RunStats()
    paths = PathResolver([first, second], stats=stats)
    assert paths.dir_name_for(first.libraries[0]) == "alpha_utils"
    assert paths.dir_name_for(second.libraries[0]) == "beta_utils"
    assert stats.collisions == 2


def test_private_entity_has_no_link(paths: PathResolver, find: Callable[[str], DocumentableEntity]) -> None:
    """Verify that non-public entities never get a link."""
    cat = find("Cat")
    cat.is_public = False
    assert paths.link_for(cat) is None


def test_targets_are_deterministic(model: LoadedModel) -> None:
    """Verify that two resolvers over the same model agree on every target."""
    first = PathResolver(model.packages).targets()
    second = PathResolver(model.packages).targets()
    assert first == second
    assert any(t.file_path == "api/L/Apple.md" for t in first)


def test_targets_have_unique_pages(model: LoadedModel) -> None:
    """Verify that no two pages share an output file."""
    files = [
        t.file_path
        for t in PathResolver(model.packages).targets()
        if t.anchor is None and t.file_path is not None
    ]
    assert len(files) == len(set(files))
