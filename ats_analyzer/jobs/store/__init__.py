"""Job store registry with lazy loading.

Usage:
    from ats_analyzer.jobs.store import get_store

    store = get_store(settings.store)
    store.save(job)
    job = store.find_by_id(job.id)
"""

from __future__ import annotations

import importlib
from datetime import timedelta
from typing import Any

from ats_analyzer.core.config import StoreConfig
from ats_analyzer.jobs.store.base import JobStore

__all__ = ["JobStore", "available_stores", "get_store"]

# Lazy registry: maps backend name → (module_path, class_name)
_REGISTRY: dict[str, tuple[str, str]] = {
    "memory": ("ats_analyzer.jobs.store.memory", "MemoryJobStore"),
    "filesystem": ("ats_analyzer.jobs.store.filesystem", "FileSystemJobStore"),
    "redis": ("ats_analyzer.jobs.store.redis", "RedisJobStore"),
}


def get_store(config: StoreConfig) -> JobStore:
    """Instantiate the job store selected by ``config.backend``.

    Raises:
        ValueError: If the backend name is unknown.
    """
    name = config.backend
    if name not in _REGISTRY:
        valid = ", ".join(sorted(_REGISTRY))
        msg = f"Unknown job store backend '{name}'. Available: {valid}"
        raise ValueError(msg)

    module_path, class_name = _REGISTRY[name]
    module = importlib.import_module(module_path)
    cls = getattr(module, class_name)

    kwargs: dict[str, Any] = {"ttl": timedelta(seconds=config.effective_ttl_seconds)}
    if name == "filesystem":
        kwargs["directory"] = config.directory
    elif name == "redis":
        kwargs["url"] = config.redis_url
        kwargs["key_prefix"] = config.key_prefix
    return cls(**kwargs)  # type: ignore[no-any-return]


def available_stores() -> list[str]:
    """Return sorted list of registered backend names."""
    return sorted(_REGISTRY)
