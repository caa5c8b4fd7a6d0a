"""Shared pytest configuration for tern examples.

``example_module`` executes the ``app.py`` next to the requesting test in a
fresh namespace, so its controllers are registered again and any
in-memory state starts clean. ``example_app`` is that module's ``app``.
"""

import importlib.util
from pathlib import Path
from types import ModuleType

import pytest


def load_example(app_path: Path) -> ModuleType:
    spec = importlib.util.spec_from_file_location(f"example_{app_path.parent.name}", app_path)
    if spec is None or spec.loader is None:
        msg = f"Cannot load example from {app_path}"
        raise ImportError(msg)
    module = importlib.util.module_from_spec(spec)
    spec.loader.exec_module(module)
    return module


@pytest.fixture
def example_module(request: pytest.FixtureRequest) -> ModuleType:
    return load_example(Path(request.path).parent / "app.py")


@pytest.fixture
def example_app(example_module: ModuleType):
    return example_module.app
