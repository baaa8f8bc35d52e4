"""
Tests for the flat module layout.

The engine's modules import each other by bare name (`from game import ...`),
so these check that each name resolves to this project and not to another
installed top-level module of the same name.
"""

import importlib
from pathlib import Path

import pytest

SOURCE_DIR = Path(__file__).resolve().parent.parent

FLAT_MODULES = [
    "ai", "config", "constants", "engine", "game",
    "logging_config", "mode_factory", "scheduling", "simulate",
]


@pytest.mark.parametrize("name", FLAT_MODULES)
def test_flat_module_resolves_here(name):
    module = importlib.import_module(name)
    assert Path(module.__file__).resolve().parent == SOURCE_DIR


@pytest.mark.parametrize("name", ["models", "modes"])
def test_subpackage_resolves_here(name):
    package = importlib.import_module(name)
    assert Path(package.__file__).resolve().parent.parent == SOURCE_DIR


def test_every_flat_module_is_installed():
    sources = {
        path.stem for path in SOURCE_DIR.glob("*.py")
        if not path.stem.startswith("test_") and path.stem != "conftest"
    }
    assert sources == set(FLAT_MODULES)
