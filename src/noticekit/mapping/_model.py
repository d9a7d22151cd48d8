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

"""Data types for license mapping documents."""

from __future__ import annotations

import enum
import re
from dataclasses import dataclass, field

from noticekit.version import ArtifactVersion

__all__ = [
    'MappingDocument',
    'MappingEntry',
    'MatchKind',
    'ResolvedMapping',
    'VersionConstraint',
    'VersionType',
]


class VersionType(str, enum.Enum):
    """How a mapped version string is compared to a candidate version."""

    EXACT = 'exact'
    REGEX = 'regex'


class MatchKind(int, enum.Enum):
    """Outcome of a mapping lookup, ordered by specificity."""

    NONE = 0
    ALL_VERSIONS = 1
    REGEX = 2
    EXACT = 3


@dataclass(frozen=True)
class VersionConstraint:
    """A single ``version`` element of a mapping entry.

    Attributes:
        type: Exact (release-equality) or regex (anchored full match).
        value: The version string or pattern as written.
    """

    type: VersionType
    value: str
    _pattern: re.Pattern[str] | None = field(default=None, repr=False, compare=False)
    _version: ArtifactVersion | None = field(default=None, repr=False, compare=False)

    def __post_init__(self) -> None:
        if self.type is VersionType.REGEX:
            if self._pattern is None:
                object.__setattr__(self, '_pattern', re.compile(self.value))
        elif self._version is None:
            object.__setattr__(self, '_version', ArtifactVersion(self.value))

    @classmethod
    def exact(cls, value: str) -> VersionConstraint:
        """Build an exact-version constraint."""
        return cls(VersionType.EXACT, value)

    @classmethod
    def regex(cls, value: str) -> VersionConstraint:
        """Build a regex constraint; raises :class:`re.error` on a bad pattern."""
        return cls(VersionType.REGEX, value)

    def matches(self, candidate: ArtifactVersion) -> bool:
        """Return whether *candidate* satisfies this constraint."""
        if self._pattern is not None:
            return self._pattern.fullmatch(candidate.raw) is not None
        return self._version == candidate


@dataclass(frozen=True)
class MappingEntry:
    """One user-declared license override.

    Attributes:
        group_id: Group id the entry applies to.
        artifact_id: Artifact id the entry applies to.
        name: Display name override, if any.
        license: License name override, if any.
        versions: Version constraints; empty means all versions.
        source: Location of the document the entry came from.
    """

    group_id: str
    artifact_id: str
    name: str = ''
    license: str = ''
    versions: tuple[VersionConstraint, ...] = ()
    source: str = ''

    @property
    def key(self) -> str:
        """``groupId:artifactId``."""
        return f'{self.group_id}:{self.artifact_id}'

    @property
    def all_versions(self) -> bool:
        """``True`` when the entry carries no version constraint."""
        return not self.versions


@dataclass(frozen=True)
class MappingDocument:
    """A parsed mapping document.

    Attributes:
        location: Resolved location the document was read from.
        entries: Entries in document order.
    """

    location: str
    entries: tuple[MappingEntry, ...] = ()


@dataclass(frozen=True)
class ResolvedMapping:
    """Result of looking an artifact up in the mapping index.

    Attributes:
        kind: The kind of match that won.
        entry: The winning entry, or ``None`` when nothing matched.
    """

    kind: MatchKind = MatchKind.NONE
    entry: MappingEntry | None = None

    @property
    def matched(self) -> bool:
        """``True`` for any match, including all-versions."""
        return self.kind is not MatchKind.NONE

    @property
    def version_specific(self) -> bool:
        """``True`` for exact and regex matches."""
        return self.kind in (MatchKind.EXACT, MatchKind.REGEX)
