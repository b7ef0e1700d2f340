"""Shared fixtures: a small in-memory model and the services built on it."""

import copy
from collections.abc import Callable
from typing import Any

import pytest

from vitedoc.doc_processor import DocProcessor
from vitedoc.load_model import LoadedModel, build_model
from vitedoc.models import DocumentableEntity, Library
from vitedoc.path_resolver import PathResolver
from vitedoc.run_stats import RunStats

SAMPLE_MODEL: dict[str, Any] = {
    "package": {
        "name": "fruit_kit",
        "description": "Tools for fruit.",
        "documentation": "# fruit_kit\n\nA package about fruit.",
        "repository": "https://github.com/example/fruit_kit/tree/main/packages",
        "libraries": [
            {
                "name": "L",
                "documentation": "The L library.",
                "containers": [
                    {
                        "name": "Apple",
                        "kind": "class",
                        "documentation": "A red fruit. See [Cat] and [Nonexistent].",
                        "members": [
                            {
                                "name": "Apple",
                                "kind": "constructor",
                                "documentation": "Creates an apple.",
                            },
                            {
                                "name": "fromString",
                                "kind": "constructor",
                                "is_factory": True,
                                "parameters": [{"name": "source", "type": "String"}],
                                "documentation": "Parses an apple.",
                            },
                            {
                                "name": "weight",
                                "kind": "field",
                                "type": "int",
                                "attributes": ["final"],
                            },
                            {
                                "name": "peel",
                                "kind": "method",
                                "return_type": "void",
                                "documentation": "Peels the [Apple].",
                            },
                        ],
                    },
                    {
                        "name": "Cat",
                        "kind": "class",
                        "modifiers": ["abstract"],
                        "members": [
                            {"name": "meow", "kind": "method", "return_type": "void"},
                        ],
                    },
                    {
                        "name": "Dog",
                        "kind": "class",
                        "supertype": {"name": "Animal", "target": "L.Animal"},
                        "interfaces": ["Cat"],
                        "categories": ["Pets"],
                        "members": [
                            {
                                "name": "meow",
                                "kind": "method",
                                "return_type": "void",
                                "is_override": True,
                            },
                        ],
                    },
                    {"name": "Animal", "kind": "class", "documentation": "Any animal."},
                    {
                        "name": "AppleTools",
                        "kind": "extension",
                        "extended_type": "Apple",
                        "members": [{"name": "slice", "kind": "method"}],
                    },
                ],
                "top_level": [
                    {
                        "name": "main",
                        "kind": "function",
                        "return_type": "void",
                        "documentation": "Entry point.",
                    },
                    {
                        "name": "maxApples",
                        "kind": "variable",
                        "is_const": True,
                        "type": "int",
                        "constant_value": "12",
                    },
                ],
            }
        ],
        "categories": [{"name": "Pets", "documentation": "Animals kept at home."}],
    }
}


@pytest.fixture
def model_doc() -> dict[str, Any]:
    return copy.deepcopy(SAMPLE_MODEL)


@pytest.fixture
def model(model_doc: dict[str, Any]) -> LoadedModel:
    return build_model(model_doc)


@pytest.fixture
def stats() -> RunStats:
    return RunStats()


@pytest.fixture
def paths(model: LoadedModel, stats: RunStats) -> PathResolver:
    return PathResolver(model.packages, stats=stats)


@pytest.fixture
def docs(paths: PathResolver) -> DocProcessor:
    return DocProcessor(paths)


@pytest.fixture
def lib(model: LoadedModel) -> Library:
    return model.primary.libraries[0]


@pytest.fixture
def find(lib: Library) -> Callable[[str], DocumentableEntity]:
    """Look up a container or top-level element of the sample library by name."""

    def _find(name: str) -> DocumentableEntity:
        for entity in [*lib.containers, *lib.top_level]:
            if entity.name == name:
                return entity
        msg = f"No entity named {name}"
        raise KeyError(msg)

    return _find
