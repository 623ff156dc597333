# Copyright (C) 2026 Bernardo Gómez Bey
# SPDX-License-Identifier: AGPL-3.0-or-later

"""Bounded execution of hash/verify calls.

Every Argon2 call holds ``memory_cost_kb`` KiB until it finishes, so N
concurrent logins cost N times that. ``HashingPool`` caps the number of calls
in flight. A timeout only abandons the caller's wait: the KDF cannot be
interrupted and keeps running on its worker until done.
"""

from __future__ import annotations

import os
from concurrent.futures import Future, ThreadPoolExecutor
from concurrent.futures import TimeoutError as FutureTimeoutError
from typing import Any, Callable, Optional, TypeVar

import structlog

from credhash.auth.errors import ConfigurationError, HashTimeoutError
from credhash.auth.passwords import Hasher, Password, VerifyResult

logger = structlog.get_logger(__name__)

T = TypeVar("T")


def workers_for_budget(memory_budget_kb: int, memory_cost_kb: int) -> int:
    return max(1, int(memory_budget_kb) // int(memory_cost_kb))


class HashingPool:
    def __init__(
        self,
        hasher: Hasher,
        *,
        max_workers: Optional[int] = None,
        memory_budget_kb: Optional[int] = None,
    ) -> None:
        if memory_budget_kb is not None and memory_budget_kb <= 0:
            raise ConfigurationError(f"memory_budget_kb must be > 0, got {memory_budget_kb}")
        if max_workers is None:
            if memory_budget_kb is not None:
                max_workers = workers_for_budget(memory_budget_kb, hasher.params.memory_cost_kb)
            else:
                max_workers = min(4, os.cpu_count() or 1)
        if max_workers <= 0:
            raise ConfigurationError(f"max_workers must be > 0, got {max_workers}")

        self._hasher = hasher
        self._max_workers = max_workers
        self._executor = ThreadPoolExecutor(max_workers=max_workers, thread_name_prefix="credhash")

    @property
    def hasher(self) -> Hasher:
        return self._hasher

    @property
    def max_workers(self) -> int:
        return self._max_workers

    def _wait(self, future, timeout: Optional[float], op: str):
        try:
            return future.result(timeout=timeout)
        except FutureTimeoutError:
            logger.warning("hash_call_timed_out", op=op, timeout=timeout)
            raise HashTimeoutError(f"{op} did not finish within {timeout}s") from None

    def submit(self, fn: Callable[..., T], *args: Any, **kwargs: Any) -> "Future[T]":
        return self._executor.submit(fn, *args, **kwargs)

    def run(self, fn: Callable[..., T], *args: Any, timeout: Optional[float] = None, **kwargs: Any) -> T:
        """Run ``fn`` (which hashes or verifies) on a pool worker and wait for it."""
        op = getattr(fn, "__name__", "call")
        return self._wait(self.submit(fn, *args, **kwargs), timeout, op)

    def hash(self, password: Password, *, timeout: Optional[float] = None) -> str:
        return self.run(self._hasher.hash, password, timeout=timeout)

    def verify(self, password: Password, encoded: str, *, timeout: Optional[float] = None) -> VerifyResult:
        return self.run(self._hasher.verify, password, encoded, timeout=timeout)

    def close(self, wait: bool = True) -> None:
        self._executor.shutdown(wait=wait)

    def __enter__(self) -> "HashingPool":
        return self

    def __exit__(self, *exc) -> None:
        self.close()
