# Author : Eshan Roy <eshanized@proton.me>
# SPDX-License-Identifier: MIT

"""
Shared, lock-guarded blob handles.

A SharedBlob is the only mutable state that crosses layer boundaries. The
same handle object is held by every layer that uses the blob: the producer
that writes it as a top, each consumer that reads it as a bottom, and every
layer that shares it as a parameter. Python's reference counting keeps the
underlying HeapBlob alive until the last holder drops its handle.

Access discipline:
  - `with handle.read() as blob:` any number of threads at once
  - `with handle.write() as blob:` exactly one thread, no readers

Acquisition blocks the calling thread with no timeout. New readers are
admitted while a writer is waiting, so a thread that already holds a read
guard can take a second read guard on the same blob without deadlocking.
Taking a write guard on a blob the same thread already holds in any mode
deadlocks; Layer rejects such wiring before acquiring anything.

If an exception escapes a write guard, the lock is poisoned. Every later
acquisition, including ones already blocked, raises LockPoisonedError.
"""

import logging
import threading
from collections.abc import Iterator, Sequence
from contextlib import contextmanager
from typing import Optional

import torch

from lamina.blob.exceptions import LockPoisonedError
from lamina.blob.heap import HeapBlob

logger = logging.getLogger(__name__)


class RwLock:
    """Blocking reader/writer lock with poisoning."""

    def __init__(self, name: str = "") -> None:
        self._name = name
        self._cond = threading.Condition(threading.Lock())
        self._readers = 0
        self._writer = False
        self._poisoned = False

    @property
    def readers(self) -> int:
        with self._cond:
            return self._readers

    @property
    def write_locked(self) -> bool:
        with self._cond:
            return self._writer

    @property
    def poisoned(self) -> bool:
        with self._cond:
            return self._poisoned

    def acquire_read(self) -> None:
        with self._cond:
            self._cond.wait_for(lambda: self._poisoned or not self._writer)
            if self._poisoned:
                raise LockPoisonedError(self._name)
            self._readers += 1

    def release_read(self) -> None:
        with self._cond:
            if self._readers <= 0:
                raise RuntimeError(f"release_read on '{self._name}' without a held read lock")
            self._readers -= 1
            if self._readers == 0:
                self._cond.notify_all()

    def acquire_write(self) -> None:
        with self._cond:
            self._cond.wait_for(
                lambda: self._poisoned or (not self._writer and self._readers == 0)
            )
            if self._poisoned:
                raise LockPoisonedError(self._name)
            self._writer = True

    def release_write(self, poison: bool = False) -> None:
        with self._cond:
            if not self._writer:
                raise RuntimeError(f"release_write on '{self._name}' without a held write lock")
            self._writer = False
            if poison:
                self._poisoned = True
            self._cond.notify_all()


class SharedBlob:
    """
    Reference-shared handle to one HeapBlob behind an RwLock.

    Args:
        blob: The blob to guard. The handle becomes its canonical owner;
              callers should not keep other references to it.
        name: Label used in errors and log records.
    """

    __slots__ = ("_blob", "_lock", "name")

    def __init__(self, blob: Optional[HeapBlob] = None, name: str = "") -> None:
        self._blob = blob if blob is not None else HeapBlob()
        self.name = name
        self._lock = RwLock(name)

    @classmethod
    def new(
        cls,
        shape: Sequence[int] = (),
        name: str = "",
        dtype: Optional[torch.dtype] = None,
    ) -> "SharedBlob":
        """Allocate a zero-filled blob of the given shape and wrap it."""
        return cls(HeapBlob(shape, dtype=dtype), name=name)

    @property
    def lock(self) -> RwLock:
        return self._lock

    @property
    def is_poisoned(self) -> bool:
        return self._lock.poisoned

    @contextmanager
    def read(self) -> Iterator[HeapBlob]:
        """
        Hold shared read access for the duration of the block.

        Raises:
            LockPoisonedError: If a previous writer failed.
        """
        self._lock.acquire_read()
        try:
            yield self._blob
        finally:
            self._lock.release_read()

    @contextmanager
    def write(self) -> Iterator[HeapBlob]:
        """
        Hold exclusive write access for the duration of the block.

        An exception raised inside the block poisons the blob and is re-raised.

        Raises:
            LockPoisonedError: If a previous writer failed.
        """
        self._lock.acquire_write()
        try:
            yield self._blob
        except BaseException:
            self._lock.release_write(poison=True)
            logger.error("blob_lock_poisoned", extra={"blob": self.name})
            raise
        self._lock.release_write()

    def __repr__(self) -> str:
        return f"SharedBlob(name={self.name!r}, poisoned={self.is_poisoned})"
