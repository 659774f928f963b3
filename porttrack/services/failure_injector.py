from __future__ import annotations

import random
from threading import Lock
from typing import Protocol

from porttrack.config import get_settings


class FailureInjector(Protocol):
    def should_fail(self, probability: float) -> bool: ...


class RandomFailureInjector:
    """Draws from a private RNG so a seed reproduces the same failure sequence."""

    def __init__(self, seed: int | None = None) -> None:
        self._rng = random.Random(seed)
        self._lock = Lock()

    def should_fail(self, probability: float) -> bool:
        if probability <= 0.0:
            return False
        with self._lock:
            return self._rng.random() < probability


_injector: FailureInjector | None = None


def set_failure_injector(injector: FailureInjector | None) -> None:
    global _injector
    _injector = injector


def get_failure_injector() -> FailureInjector:
    global _injector
    if _injector is None:
        _injector = RandomFailureInjector(seed=get_settings().failure_seed)
    return _injector
