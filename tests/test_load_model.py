"""Tests for loading and linking the API model."""

import json
from collections.abc import Callable
from pathlib import Path
from typing import Any

import pytest
import yaml

from vitedoc.load_model import build_model, load_model
from vitedoc.models import Container, DocumentableEntity, Member


def test_load_yaml_file(tmp_path: Path, model_doc: dict[str, Any]) -> None:
    """Verify that a YAML model file is read and linked."""
    model_file = tmp_path / "model.yaml"
    model_file.write_text(yaml.dump(model_doc))
    model = load_model(model_file)
    assert model.primary.name == "fruit_kit"
    assert [c.name for c in model.primary.libraries[0].containers] == [
        "Apple",
        "Cat",
        "Dog",
        "Animal",
        "AppleTools",
    ]


def test_load_json_file(tmp_path: Path, model_doc: dict[str, Any]) -> None:
    """Verify that JSON models load through the same reader."""
    model_file = tmp_path / "model.json"
    model_file.write_text(json.dumps(model_doc))
    model = load_model(str(model_file))
    assert model.primary.libraries[0].name == "L"
    assert not model.is_workspace


def test_missing_model_file(tmp_path: Path) -> None:
    """Verify that a missing model file is a fatal error."""
    with pytest.raises(SystemExit, match="Model file not found"):
        load_model(tmp_path / "missing.yaml")


def test_model_must_be_a_mapping(tmp_path: Path) -> None:
    """Verify that a list at the top level is rejected."""
    model_file = tmp_path / "model.yaml"
    model_file.write_text("- a\n- b\n")
    with pytest.raises(SystemExit, match="mapping"):
        load_model(model_file)


def test_empty_model() -> None:
    """Verify that a model without packages is rejected."""
    with pytest.raises(SystemExit):
        build_model({})


def test_unknown_container_kind(model_doc: dict[str, Any]) -> None:
    """Verify that an unknown container kind is rejected."""
    model_doc["package"]["libraries"][0]["containers"][0]["kind"] = "struct"
    with pytest.raises(SystemExit, match="struct"):
        build_model(model_doc)


def test_unknown_parameter_kind_is_positional(model_doc: dict[str, Any]) -> None:
    """Verify that an unknown parameter kind falls back to positional."""
    apple = model_doc["package"]["libraries"][0]["containers"][0]
    apple["members"][1]["parameters"][0]["kind"] = "variadic"
    model = build_model(model_doc)
    from_string = model.primary.libraries[0].containers[0].members[1]
    assert from_string.parameters[0].kind == "positional"


def test_type_targets_are_linked(find: Callable[[str], DocumentableEntity]) -> None:
    """Verify that supertypes, interfaces and extended types point at containers."""
    dog = find("Dog")
    assert isinstance(dog, Container)
    assert dog.supertype is not None
    assert dog.supertype.target is find("Animal")
    assert dog.interfaces[0].target is find("Cat")
    tools = find("AppleTools")
    assert isinstance(tools, Container)
    assert tools.extended_type is not None
    assert tools.extended_type.target is find("Apple")


def test_unknown_type_has_no_target(find: Callable[[str], DocumentableEntity]) -> None:
    """Verify that types outside the model stay unlinked."""
    apple = find("Apple")
    assert isinstance(apple, Container)
    source = apple.members[1].parameters[0]
    assert source.type is not None
    assert source.type.name == "String"
    assert source.type.target is None


def test_nullable_string_type(model_doc: dict[str, Any]) -> None:
    """Verify the short string form of a nullable type."""
    main = model_doc["package"]["libraries"][0]["top_level"][0]
    main["return_type"] = "Apple?"
    model = build_model(model_doc)
    element = model.primary.libraries[0].top_level[0]
    assert element.return_type is not None
    assert element.return_type.nullable
    assert element.return_type.display() == "Apple?"
    assert element.return_type.target is model.primary.libraries[0].containers[0]


def test_implementers_are_derived(find: Callable[[str], DocumentableEntity]) -> None:
    """Verify that implementers come from supertypes and interfaces."""
    dog = find("Dog")
    for name in ("Animal", "Cat"):
        container = find(name)
        assert isinstance(container, Container)
        assert container.implementers == [dog]


def test_extensions_are_derived(find: Callable[[str], DocumentableEntity]) -> None:
    """Verify that an extension is listed on the type it extends."""
    apple = find("Apple")
    assert isinstance(apple, Container)
    assert apple.extensions == [find("AppleTools")]


def test_categories_collect_entities(model_doc: dict[str, Any]) -> None:
    """Verify that tagged entities land in their topic, creating unknown topics."""
    cat = model_doc["package"]["libraries"][0]["containers"][1]
    cat["categories"] = ["Felines"]
    model = build_model(model_doc)
    topics = {t.name: [e.name for e in t.entities] for t in model.primary.topics}
    assert topics == {"Pets": ["Dog"], "Felines": ["Cat"]}


def test_member_links(model_doc: dict[str, Any]) -> None:
    """Verify that inherited and extension members point at their sources."""
    dog = model_doc["package"]["libraries"][0]["containers"][2]
    dog["members"].append(
        {"name": "slice", "kind": "method", "extension_provider": "AppleTools"}
    )
    dog["members"].append({"name": "sleep", "kind": "method", "inherited_from": "L.Animal"})
    model = build_model(model_doc)
    members = {m.name: m for m in model.primary.libraries[0].containers[2].members}
    assert isinstance(members["slice"], Member)
    assert members["slice"].extension_provider is not None
    assert members["slice"].extension_provider.name == "AppleTools"
    assert members["sleep"].inherited_from is not None
    assert members["sleep"].inherited_from.name == "Animal"
    assert members["sleep"].is_inherited


def test_workspace_model(model_doc: dict[str, Any]) -> None:
    """Verify that several local packages make a workspace."""
    second = {
        "name": "veg_kit",
        "libraries": [{"name": "V", "containers": [{"name": "Leek", "kind": "class"}]}],
    }
    doc = {
        "workspace_name": "Garden",
        "packages": [model_doc["package"], second],
    }
    model = build_model(doc)
    assert model.is_workspace
    assert model.workspace_name == "Garden"
    assert [p.name for p in model.local_packages] == ["fruit_kit", "veg_kit"]


def test_html_fragments_are_lowercased(model_doc: dict[str, Any]) -> None:
    """Verify that fragment digests are looked up case-insensitively."""
    model_doc["html_fragments"] = {"ABC123": "<b>x</b>"}
    model = build_model(model_doc)
    assert model.fragments == {"abc123": "<b>x</b>"}
    assert model.workspace_name == "fruit_kit"


def test_qualified_names(find: Callable[[str], DocumentableEntity]) -> None:
    """Verify that qualified names run from the library down."""
    apple = find("Apple")
    assert isinstance(apple, Container)
    assert apple.qualified_name == "L.Apple"
    assert apple.members[3].qualified_name == "L.Apple.peel"
