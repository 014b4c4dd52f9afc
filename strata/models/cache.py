"""
Strata Models — per-connection model cache.

Each Database owns one ModelCache. Models are built lazily on first use
and dropped when the connection closes. Two tasks missing the cache at
the same moment may both build the model; the result is identical, the
second write simply wins.
"""

from __future__ import annotations

import logging
import threading
from typing import Dict

from .mapping import build_model
from .model import Model

logger = logging.getLogger("strata.models.cache")


class ModelCache:
    """Thread-safe map of mapped class -> sanitized Model."""

    def __init__(self) -> None:
        self._lock = threading.Lock()
        self._models: Dict[type, Model] = {}

    def get(self, cls: type) -> Model:
        with self._lock:
            model = self._models.get(cls)
        if model is not None:
            return model

        model = build_model(cls)
        with self._lock:
            self._models[cls] = model
        logger.debug("Cached model '%s' for %s", model.name, cls.__name__)
        return model

    def clear(self) -> None:
        with self._lock:
            self._models.clear()

    def __len__(self) -> int:
        with self._lock:
            return len(self._models)

    def __contains__(self, cls: type) -> bool:
        with self._lock:
            return cls in self._models


__all__ = ["ModelCache"]
