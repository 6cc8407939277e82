"""Shared test fixtures for regschema-cli tests.

Provides CliRunner fixtures and importable registry targets.
"""

from __future__ import annotations

import logging
from collections.abc import Generator
from pathlib import Path

import pytest
import structlog
from click.testing import CliRunner

REGISTRY_MODULE = "game_registry_fixture"

REGISTRY_MODULE_SOURCE = '''\
import dataclasses
from enum import Enum
from typing import Annotated

from regschema_core import Bounds, TypeRegistry


class Direction(Enum):
    NORTH = 0
    SOUTH = 1


@dataclasses.dataclass
class Player:
    name: str
    health: Annotated[float, Bounds(minimum=0.0, maximum=1.0)]
    facing: Direction


registry = TypeRegistry()
registry.register(Player, component=True, type_path="Player")


def build_registry():
    return registry


not_a_registry = 42
'''

REGISTRY_YAML = """\
types:
  - descriptor:
      kind: enum
      type_path: Shape
      variants:
        - {kind: unit, name: Empty}
        - kind: struct
          name: Rect
          fields:
            - {name: width, type_path: f32, position: 0}
            - {name: label, type_path: "typing.Optional[string]", position: 1, is_optional: true}
    capabilities: [resource]
  - descriptor: {kind: value, type_path: f32}
"""


@pytest.fixture(autouse=True)
def restore_logging() -> Generator[None, None, None]:
    """Undo the logging setup done by each CLI invocation."""
    root = logging.getLogger()
    handlers, level = root.handlers[:], root.level
    yield
    root.handlers[:] = handlers
    root.setLevel(level)
    structlog.reset_defaults()


@pytest.fixture
def cli_runner() -> CliRunner:
    """Create a Click test runner.

    Returns:
        CliRunner instance for testing CLI commands.
    """
    return CliRunner()


@pytest.fixture
def isolated_runner(cli_runner: CliRunner) -> Generator[CliRunner, None, None]:
    """Create a Click test runner with an isolated filesystem.

    Yields:
        CliRunner instance with isolated filesystem.
    """
    with cli_runner.isolated_filesystem():
        yield cli_runner


@pytest.fixture
def registry_module(tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> str:
    """Write an importable module defining a game registry.

    Returns:
        Name of the module.
    """
    module_dir = tmp_path / "modules"
    module_dir.mkdir()
    (module_dir / f"{REGISTRY_MODULE}.py").write_text(REGISTRY_MODULE_SOURCE)
    monkeypatch.syspath_prepend(str(module_dir))
    return REGISTRY_MODULE


@pytest.fixture
def registry_file(tmp_path: Path) -> Path:
    """Write a YAML registry file with a mixed enum and a leaf value.

    Returns:
        Path to the registry file.
    """
    path = tmp_path / "registry.yaml"
    path.write_text(REGISTRY_YAML)
    return path
