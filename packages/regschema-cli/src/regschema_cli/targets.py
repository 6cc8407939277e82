"""Resolve the TARGET argument of regschema commands into a type registry.

TARGET is either:
- ``module:attribute``: an importable module and a dotted attribute naming a
  TypeRegistry, or a zero-argument callable returning one
- a path to a ``.yaml``/``.yml``/``.json`` registry file

Modules are imported with the current working directory on ``sys.path``, so
``regschema export game.schema:registry`` works from a project checkout
without installing it.
"""

from __future__ import annotations

import importlib
import os
import sys
from pathlib import Path
from typing import Any

from regschema_cli.errors import TargetResolutionError
from regschema_core.observability import get_logger
from regschema_core.registry import TypeRegistry, load_registry

logger = get_logger(__name__)

REGISTRY_FILE_SUFFIXES = frozenset({".yaml", ".yml", ".json"})


def resolve_registry(target: str) -> TypeRegistry:
    """Resolve TARGET into a TypeRegistry.

    Args:
        target: ``module:attribute`` reference or registry file path.

    Returns:
        The referenced registry.

    Raises:
        TargetResolutionError: If the target cannot be imported or does not
            name a registry.
        ConfigurationError: If a registry file is unreadable or malformed.

    Example:
        >>> registry = resolve_registry("game.schema:registry")
        >>> registry = resolve_registry("registry.yaml")
    """
    if Path(target).suffix.lower() in REGISTRY_FILE_SUFFIXES:
        return load_registry(target)

    module_name, _, attribute = target.partition(":")
    if not module_name or not attribute:
        raise TargetResolutionError(
            "Expected 'module:attribute' or a .yaml/.json registry file",
            target=target,
        )

    _put_cwd_on_path()
    try:
        module = importlib.import_module(module_name)
    except ImportError as e:
        logger.debug("target_import_failed", module=module_name, error=str(e))
        raise TargetResolutionError(
            f"Cannot import module '{module_name}'",
            target=target,
        ) from e

    obj: Any = module
    for part in attribute.split("."):
        try:
            obj = getattr(obj, part)
        except AttributeError as e:
            raise TargetResolutionError(
                f"Module '{module_name}' has no attribute '{attribute}'",
                target=target,
            ) from e

    if not isinstance(obj, TypeRegistry) and callable(obj):
        obj = obj()

    if not isinstance(obj, TypeRegistry):
        raise TargetResolutionError(
            f"'{attribute}' is not a TypeRegistry (got {type(obj).__name__})",
            target=target,
        )

    logger.debug("target_resolved", target=target, types=len(obj))
    return obj


def _put_cwd_on_path() -> None:
    # Console scripts start without the working directory on sys.path.
    cwd = os.getcwd()
    if "" in sys.path or cwd in sys.path:
        return
    sys.path.insert(0, cwd)
    logger.debug("cwd_added_to_path", path=cwd)
