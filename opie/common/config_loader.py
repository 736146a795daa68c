"""Run file loading, validation and operation lookup."""

from __future__ import annotations

import importlib
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any

from opie.common.errors import ConfigError, OperationLoadError
from opie.common.fs import read_yaml
from opie.common.schema import validate_operation_path, validate_run_config


@dataclass(frozen=True)
class RunConfig:
    operation: str
    input: Any = None
    context: Any = None
    logging: dict = field(default_factory=lambda: {"level": "INFO"})


def _deep_merge(base: Any, overlay: Any) -> Any:
    if isinstance(base, dict) and isinstance(overlay, dict):
        merged = dict(base)
        for key, value in overlay.items():
            if key in merged:
                merged[key] = _deep_merge(merged[key], value)
            else:
                merged[key] = value
        return merged
    return overlay


def _read_mapping(path: Path, ctx: str) -> dict:
    try:
        loaded = read_yaml(path)
    except FileNotFoundError as exc:
        raise ConfigError(f"{ctx} not found: {path}") from exc
    if loaded is None:
        return {}
    if not isinstance(loaded, dict):
        raise ConfigError(f"{ctx} must be a mapping: {path}")
    return loaded


def _load_yaml_with_overlay(path: Path, overlay_path: Path | None) -> dict:
    base = _read_mapping(path, "run file")
    if overlay_path is None or not overlay_path.exists():
        return base
    overlay = _read_mapping(overlay_path, "overlay file")
    return _deep_merge(base, overlay)


def load_run_config(
    path: Path,
    overlay_path: Path | None = None,
    *,
    allow_unknown: bool = False,
) -> RunConfig:
    cfg = validate_run_config(_load_yaml_with_overlay(path, overlay_path), allow_unknown=allow_unknown)
    return RunConfig(
        operation=cfg["operation"],
        input=cfg.get("input"),
        context=cfg.get("context"),
        logging=cfg["logging"],
    )


def load_operation(dotted: str):
    """Import ``package.module:ClassName`` and check it is an Operation subclass."""
    from opie.operation.base import Operation

    try:
        dotted = validate_operation_path(dotted)
    except ConfigError as exc:
        raise OperationLoadError(str(exc)) from exc

    module_name, _, attr_path = dotted.partition(":")
    try:
        target: Any = importlib.import_module(module_name)
    except ImportError as exc:
        raise OperationLoadError(f"Cannot import module {module_name!r}: {exc}") from exc

    for attr in attr_path.split("."):
        try:
            target = getattr(target, attr)
        except AttributeError as exc:
            raise OperationLoadError(f"{module_name!r} has no attribute {attr_path!r}") from exc

    if not (isinstance(target, type) and issubclass(target, Operation)):
        raise OperationLoadError(f"{dotted} is not an Operation subclass")
    return target
