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

r"""Resolve the display name and license of a single artifact.

Resolution runs a layered pipeline and stops filling a field as soon
as it has a value:

    1. **Version-specific mapping**: an exact or regex mapping entry.
    2. **Package metadata**: the artifact's declared name and licenses
       (several licenses are joined with ``" or "``).
    3. **All-versions mapping**: an entry without version constraints.
    4. **Synthesized name**: ``groupId:artifactId`` when no name was
       found.  There is no fallback for the license.
    5. **Alias table**: the license name is replaced when it is a key
       of the configured alias table.

An artifact without a license after step 5 is unresolved.

Usage::

    resolver = LicenseResolver(index, metadata=LocalRepositoryMetadataProvider())
    info = resolver.resolve(artifact, optional=False)
    if info is None:
        unresolved.append(artifact)
"""

from __future__ import annotations

from collections.abc import Mapping

from noticekit._types import Artifact, ArtifactLicenseInfo, ArtifactMetadata
from noticekit.errors import MetadataLookupError
from noticekit.logging import get_logger
from noticekit.mapping import MappingIndex, ResolvedMapping
from noticekit.metadata import MetadataProvider

__all__ = [
    'LicenseResolver',
    'join_license_names',
]

log = get_logger('noticekit.resolver')


def _trim_to_none(value: str | None) -> str | None:
    if value is None:
        return None
    value = value.strip()
    return value or None


def join_license_names(metadata: ArtifactMetadata) -> str | None:
    """Combine declared licenses into one name (``None`` if there are none)."""
    names = [lic.name for lic in metadata.licenses]
    if not names:
        return None
    return ' or '.join(names)


class LicenseResolver:
    """Resolves artifacts against mappings, metadata and fallbacks.

    Args:
        index: Merged license mappings.
        metadata: Provider of declared package metadata, or ``None`` to
            rely on mappings only.
        aliases: License-name substitutions applied to the final name.
    """

    def __init__(
        self,
        index: MappingIndex,
        metadata: MetadataProvider | None = None,
        aliases: Mapping[str, str] | None = None,
    ) -> None:
        self._index = index
        self._metadata = metadata
        self._aliases = dict(aliases or {})

    def lookup_mapping(self, artifact: Artifact) -> ResolvedMapping:
        """Return the best mapping match for *artifact*."""
        return self._index.lookup(artifact.group_id, artifact.artifact_id, artifact.version)

    def load_metadata(self, artifact: Artifact) -> ArtifactMetadata | None:
        """Load *artifact*'s metadata, logging and absorbing lookup failures."""
        if self._metadata is None:
            return None
        try:
            metadata = self._metadata.load(artifact)
        except MetadataLookupError as exc:
            log.warning('license_info_not_found', artifact=str(artifact), cause=exc.reason)
            log.debug('license_info_not_found_detail', artifact=str(artifact), exc_info=exc)
            return None
        if metadata is None:
            log.warning('license_info_not_found', artifact=str(artifact), cause='no package metadata')
        return metadata

    def resolve(self, artifact: Artifact, *, optional: bool = False) -> ArtifactLicenseInfo | None:
        """Resolve *artifact*.

        Args:
            artifact: The artifact to resolve.
            optional: Effective optional flag computed by the caller.

        Returns:
            The resolved row, or ``None`` if no license could be found.
        """
        name: str | None = None
        license_name: str | None = None

        resolved = self.lookup_mapping(artifact)
        if resolved.version_specific and resolved.entry is not None:
            name = _trim_to_none(resolved.entry.name)
            license_name = _trim_to_none(resolved.entry.license)
            log.debug(
                'mapping_matched',
                artifact=str(artifact),
                kind=resolved.kind.name.lower(),
                source=resolved.entry.source,
            )

        metadata: ArtifactMetadata | None = None
        if name is None or license_name is None:
            metadata = self.load_metadata(artifact)
            if metadata is not None:
                if name is None:
                    name = _trim_to_none(metadata.name)
                if license_name is None:
                    license_name = _trim_to_none(join_license_names(metadata))

        if resolved.entry is not None and (name is None or license_name is None):
            if name is None:
                name = _trim_to_none(resolved.entry.name)
            if license_name is None:
                license_name = _trim_to_none(resolved.entry.license)
            log.debug('mapping_fallback_applied', artifact=str(artifact), kind=resolved.kind.name.lower())

        if name is None:
            name = f'{artifact.group_id}:{artifact.artifact_id}'

        if license_name is not None and license_name in self._aliases:
            alias = self._aliases[license_name]
            log.debug('license_alias_applied', license=license_name, alias=alias)
            license_name = alias

        if license_name is None:
            log.debug('license_unresolved', artifact=str(artifact))
            return None

        return ArtifactLicenseInfo(
            name=name,
            license=license_name,
            scope=artifact.scope,
            optional=optional,
            artifact=artifact,
            metadata=metadata,
        )
