"""Load a callable from a "package.module:attribute" reference."""

from __future__ import annotations

import importlib
from typing import Any, Callable

from pnpmarkets.errors import ConfigurationError


def load_callable(ref: str) -> Callable[..., Any]:
    module_path, sep, attr = ref.partition(":")
    if not sep or not module_path or not attr:
        raise ConfigurationError(f"Expected 'package.module:callable', got {ref!r}")
    try:
        module = importlib.import_module(module_path)
    except ImportError as e:
        raise ConfigurationError(f"Cannot import {module_path!r}: {e}") from e
    obj: Any = module
    for part in attr.split("."):
        try:
            obj = getattr(obj, part)
        except AttributeError as e:
            raise ConfigurationError(f"{module_path!r} has no attribute {attr!r}") from e
    if not callable(obj):
        raise ConfigurationError(f"{ref!r} is not callable")
    return obj
