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

r"""Dependency version strings with Maven comparable-version equality.

Two versions are equal when they denote the same release, not when their
strings are identical::

    ArtifactVersion('1.0') == ArtifactVersion('1.0.0')        # True
    ArtifactVersion('2.5.FINAL') == ArtifactVersion('2.5')    # True
    ArtifactVersion('1.0-cr1') == ArtifactVersion('1.0-RC1')  # True
    ArtifactVersion('1.0-SNAPSHOT') == ArtifactVersion('1.0') # False

Parsing rules:

- Items are separated by ``.`` and ``-``; a ``-`` also opens a nested
  item list, so ``1-1`` and ``1.1`` differ.
- A switch between digits and letters separates items (``1rc2`` is
  ``1``, ``rc``, ``2``).
- Numeric items compare as integers (``01 == 1``).
- Trailing zero and empty items are insignificant.
- Qualifiers compare case-insensitively, with the well-known aliases
  ``ga``/``final``/``release`` (a plain release), ``cr`` (``rc``) and
  ``a``/``b``/``m`` directly followed by a digit (alpha/beta/milestone).
"""

from __future__ import annotations

import re
from typing import Final, Union

__all__ = [
    'ArtifactVersion',
]

_Item = Union[int, str, tuple['_Item', ...]]

_TOKEN_RE: Final[re.Pattern[str]] = re.compile(r'\d+|[^\d.\-]+|[.\-]')

_RELEASE_ALIASES: Final[frozenset[str]] = frozenset({'', 'ga', 'final', 'release'})

_QUALIFIER_ALIASES: Final[dict[str, str]] = {
    'cr': 'rc',
}

_SHORT_QUALIFIERS: Final[dict[str, str]] = {
    'a': 'alpha',
    'b': 'beta',
    'm': 'milestone',
}


def _normalize_qualifier(token: str, *, followed_by_digit: bool) -> str:
    if followed_by_digit and token in _SHORT_QUALIFIERS:
        return _SHORT_QUALIFIERS[token]
    if token in _RELEASE_ALIASES:
        return ''
    return _QUALIFIER_ALIASES.get(token, token)


def _is_null(item: _Item) -> bool:
    if isinstance(item, tuple):
        return not item
    return item in (0, '')


def _trim(items: list[_Item]) -> tuple[_Item, ...]:
    while items and _is_null(items[-1]):
        items.pop()
    return tuple(items)


def _canonicalize(raw: str) -> tuple[_Item, ...]:
    tokens = _TOKEN_RE.findall(raw.strip().lower())
    # Stack of open lists; a '-' opens a nested list that lasts to the end.
    stack: list[list[_Item]] = [[]]
    for i, token in enumerate(tokens):
        if token == '.':
            continue
        if token == '-':
            stack.append([])
            continue
        if token.isdigit():
            stack[-1].append(int(token))
        else:
            next_is_digit = i + 1 < len(tokens) and tokens[i + 1].isdigit()
            stack[-1].append(_normalize_qualifier(token, followed_by_digit=next_is_digit))
    nested: tuple[_Item, ...] = ()
    for items in reversed(stack):
        trimmed = list(_trim(items))
        if nested:
            trimmed.append(nested)
        nested = tuple(trimmed)
    return nested


class ArtifactVersion:
    """A dependency version compared by release semantics.

    Args:
        raw: The version string as declared by the dependency.
    """

    __slots__ = ('_canonical', '_raw')

    def __init__(self, raw: str) -> None:
        self._raw = raw
        self._canonical = _canonicalize(raw)

    @property
    def raw(self) -> str:
        """The version string exactly as given."""
        return self._raw

    @property
    def canonical(self) -> tuple[_Item, ...]:
        """Normalized item structure used for equality."""
        return self._canonical

    def __eq__(self, other: object) -> bool:
        if isinstance(other, ArtifactVersion):
            return self._canonical == other._canonical
        if isinstance(other, str):
            return self._canonical == _canonicalize(other)
        return NotImplemented

    def __hash__(self) -> int:
        return hash(self._canonical)

    def __str__(self) -> str:
        return self._raw

    def __repr__(self) -> str:
        return f'ArtifactVersion({self._raw!r})'
