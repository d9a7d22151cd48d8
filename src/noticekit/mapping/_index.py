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

r"""Merged index over mapping documents and the version-matching policy.

Documents are merged in configuration order: for each
``groupId:artifactId`` key the entries of the first document come
first.  A lookup scans those entries (and each entry's version
constraints) in order::

    ┌──────────────────┬───────────────────────────────────────────────┐
    │ Constraint       │ Effect during the scan                        │
    ├──────────────────┼───────────────────────────────────────────────┤
    │ exact, matches   │ wins immediately, scan stops                  │
    │ regex, matches   │ remembered if it is the first regex match;    │
    │                  │ scanning continues in case an exact one wins  │
    │ none (all vers.) │ first such entry remembered as a fallback     │
    └──────────────────┴───────────────────────────────────────────────┘

so the result is ``exact > first regex > first all-versions > none``.
"""

from __future__ import annotations

from collections.abc import Iterable, Sequence

from noticekit.logging import get_logger
from noticekit.mapping._cache import MappingDocumentCache
from noticekit.mapping._model import MappingDocument, MappingEntry, MatchKind, ResolvedMapping, VersionType
from noticekit.mapping._parse import parse_mapping_document
from noticekit.resources import ResourceFinder
from noticekit.version import ArtifactVersion

__all__ = [
    'MappingIndex',
    'load_mapping_index',
]

log = get_logger('noticekit.mapping')


class MappingIndex:
    """Mapping entries merged from one or more documents.

    Args:
        documents: Parsed documents, highest precedence first.
    """

    def __init__(self, documents: Iterable[MappingDocument] = ()) -> None:
        self._entries: dict[str, list[MappingEntry]] = {}
        self._locations: list[str] = []
        for doc in documents:
            self._locations.append(doc.location)
            for entry in doc.entries:
                self._entries.setdefault(entry.key, []).append(entry)

    @property
    def locations(self) -> tuple[str, ...]:
        """Locations of the merged documents, in precedence order."""
        return tuple(self._locations)

    def entries_for(self, group_id: str, artifact_id: str) -> tuple[MappingEntry, ...]:
        """Return the merged entries for ``group_id:artifact_id``."""
        return tuple(self._entries.get(f'{group_id}:{artifact_id}', ()))

    def lookup(self, group_id: str, artifact_id: str, version: str | ArtifactVersion) -> ResolvedMapping:
        """Find the most specific entry matching an artifact version.

        Args:
            group_id: Artifact group id.
            artifact_id: Artifact id.
            version: Candidate version.

        Returns:
            The winning :class:`ResolvedMapping`; ``kind`` is
            :attr:`MatchKind.NONE` and ``entry`` is ``None`` when no entry
            matched.
        """
        candidate = version if isinstance(version, ArtifactVersion) else ArtifactVersion(version)
        regex_match: MappingEntry | None = None
        all_versions: MappingEntry | None = None

        for entry in self._entries.get(f'{group_id}:{artifact_id}', ()):
            if entry.all_versions:
                if all_versions is None:
                    all_versions = entry
                continue
            for constraint in entry.versions:
                if constraint.type is VersionType.EXACT:
                    if constraint.matches(candidate):
                        return ResolvedMapping(MatchKind.EXACT, entry)
                elif regex_match is None and constraint.matches(candidate):
                    regex_match = entry

        if regex_match is not None:
            return ResolvedMapping(MatchKind.REGEX, regex_match)
        if all_versions is not None:
            return ResolvedMapping(MatchKind.ALL_VERSIONS, all_versions)
        return ResolvedMapping()

    def __len__(self) -> int:
        return sum(len(entries) for entries in self._entries.values())


def load_mapping_index(
    locations: Sequence[str],
    finder: ResourceFinder,
    cache: MappingDocumentCache | None = None,
) -> MappingIndex:
    """Resolve, parse and merge mapping documents.

    Args:
        locations: Configured document locations, highest precedence first.
        finder: Resolves each location to a readable resource.
        cache: Shared document cache; a private one is used if omitted.

    Raises:
        ResourceNotFoundError: A location could not be found.
        MappingDocumentError: A document could not be read or parsed.
    """
    cache = cache if cache is not None else MappingDocumentCache()
    documents: list[MappingDocument] = []
    for location in locations:
        resource = finder.find(location)
        doc = cache.get_or_parse(
            resource.uri,
            lambda resource=resource: parse_mapping_document(resource.uri, resource.read_bytes()),
        )
        log.debug('mapping_document_loaded', location=location, uri=resource.uri, entries=len(doc.entries))
        documents.append(doc)
    return MappingIndex(documents)
