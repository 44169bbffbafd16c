"""ReelCache: a cache-first movie catalog service."""

from __future__ import annotations

from importlib import import_module
from typing import Any

__version__ = "1.0.0"

# Importing ``reelcache.main`` builds the FastAPI app, so heavy attributes load
# on first access only.
_LAZY_ATTRIBUTES = {
    "app": "reelcache.main",
    "create_app": "reelcache.main",
    "ApplicationContext": "reelcache.context",
    "MovieRepository": "reelcache.repository",
}

__all__ = ["__version__", *_LAZY_ATTRIBUTES]


def __getattr__(name: str) -> Any:
    module_name = _LAZY_ATTRIBUTES.get(name)
    if module_name is None:
        raise AttributeError(f"module 'reelcache' has no attribute {name}")
    return getattr(import_module(module_name), name)
