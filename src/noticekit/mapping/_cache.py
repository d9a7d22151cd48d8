# Copyright 2026 Google LLC
#
# Licensed under the Apache License, Version 2.0 (the "License");
# you may not use this file except in compliance with the License.
# You may obtain a copy of the License at
#
#     http://www.apache.org/licenses/LICENSE-2.0
#
# Unless required by applicable law or agreed to in writing, software
# distributed under the License is distributed on an "AS IS" BASIS,
# WITHOUT WARRANTIES OR CONDITIONS OF ANY KIND, either express or implied.
# See the License for the specific language governing permissions and
# limitations under the License.
#
# SPDX-License-Identifier: Apache-2.0

"""Shared cache of parsed mapping documents.

A multi-module build resolves the same mapping documents once per
module, possibly from several threads at once.  The cache keeps the
most recently used documents keyed by their resolved location:

- cache hits take a shared (read) lock and never block each other;
- a miss takes the exclusive (write) lock, re-checks the cache in case
  another thread populated it meanwhile, and only then parses.

One cache is created per top-level run and handed to every module run.
"""

from __future__ import annotations

import threading
from collections import OrderedDict
from collections.abc import Callable, Iterator
from contextlib import contextmanager
from typing import Final

from noticekit.logging import get_logger
from noticekit.mapping._model import MappingDocument

__all__ = [
    'DEFAULT_CACHE_SIZE',
    'MappingDocumentCache',
]

log = get_logger('noticekit.mapping.cache')

#: Number of parsed documents kept.
DEFAULT_CACHE_SIZE: Final[int] = 20


class _ReadWriteLock:
    """Many readers or one writer.

    A waiting writer blocks new readers, so steady cache hits cannot
    starve a miss.
    """

    def __init__(self) -> None:
        self._cond = threading.Condition(threading.Lock())
        self._readers = 0
        self._writer = False
        self._writers_waiting = 0

    @contextmanager
    def read(self) -> Iterator[None]:
        with self._cond:
            while self._writer or self._writers_waiting:
                self._cond.wait()
            self._readers += 1
        try:
            yield
        finally:
            with self._cond:
                self._readers -= 1
                if not self._readers:
                    self._cond.notify_all()

    @contextmanager
    def write(self) -> Iterator[None]:
        with self._cond:
            self._writers_waiting += 1
            try:
                while self._writer or self._readers:
                    self._cond.wait()
            finally:
                self._writers_waiting -= 1
            self._writer = True
        try:
            yield
        finally:
            with self._cond:
                self._writer = False
                self._cond.notify_all()


class MappingDocumentCache:
    """Bounded LRU cache of parsed mapping documents.

    Args:
        maxsize: Maximum number of documents kept.
    """

    def __init__(self, maxsize: int = DEFAULT_CACHE_SIZE) -> None:
        if maxsize < 1:
            raise ValueError('maxsize must be at least 1')
        self._maxsize = maxsize
        self._docs: OrderedDict[str, MappingDocument] = OrderedDict()
        self._lock = _ReadWriteLock()
        # Serializes recency updates made while holding only the read lock.
        self._touch = threading.Lock()

    def _lookup(self, location: str) -> MappingDocument | None:
        doc = self._docs.get(location)
        if doc is not None:
            with self._touch:
                self._docs.move_to_end(location)
        return doc

    def get_or_parse(self, location: str, parse: Callable[[], MappingDocument]) -> MappingDocument:
        """Return the cached document for *location*, parsing it on a miss.

        Args:
            location: Resolved location identity of the document.
            parse: Called at most once per cached lifetime of *location*
                to produce the document.  Exceptions propagate and leave
                the cache unchanged.
        """
        with self._lock.read():
            doc = self._lookup(location)
        if doc is not None:
            log.debug('mapping_cache_hit', location=location)
            return doc

        with self._lock.write():
            doc = self._lookup(location)
            if doc is not None:
                log.debug('mapping_cache_hit', location=location, after_wait=True)
                return doc
            log.debug('mapping_cache_miss', location=location)
            doc = parse()
            self._docs[location] = doc
            while len(self._docs) > self._maxsize:
                evicted, _ = self._docs.popitem(last=False)
                log.debug('mapping_cache_evict', location=evicted)
            return doc

    def __contains__(self, location: object) -> bool:
        with self._lock.read():
            return location in self._docs

    def __len__(self) -> int:
        with self._lock.read():
            return len(self._docs)

    def clear(self) -> None:
        """Drop every cached document."""
        with self._lock.write():
            self._docs.clear()
