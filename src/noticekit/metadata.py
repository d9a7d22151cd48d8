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

"""Artifact metadata (declared name, licenses, organization) from POM files.

When no mapping names a license for an artifact, the resolver asks a
:class:`MetadataProvider` for the artifact's own package descriptor.

Providers:

- :class:`LocalRepositoryMetadataProvider` reads POMs from a Maven-layout
  directory (``~/.m2/repository`` by default).
- :class:`RemoteRepositoryMetadataProvider` fetches POMs over HTTP
  (Maven Central by default) with ``httpx``.  No retries: a transient
  failure is reported like a permanent one.
- :class:`ChainMetadataProvider` asks several providers in order.

``licenses``, ``organization`` and ``inceptionYear`` are inherited from
parent POMs when the child does not declare them; ``name`` is not.
"""

from __future__ import annotations

import functools
from collections.abc import Sequence
from pathlib import Path
from typing import Final, Protocol
from xml.etree import ElementTree  # noqa: S405

import httpx

from noticekit._types import Artifact, ArtifactMetadata, License, Organization
from noticekit.errors import MetadataLookupError
from noticekit.logging import get_logger

__all__ = [
    'DEFAULT_LOCAL_REPOSITORY',
    'DEFAULT_REMOTE_REPOSITORY',
    'ChainMetadataProvider',
    'LocalRepositoryMetadataProvider',
    'MetadataProvider',
    'PomMetadataProvider',
    'RemoteRepositoryMetadataProvider',
    'parse_pom',
]

log = get_logger('noticekit.metadata')

DEFAULT_LOCAL_REPOSITORY: Final[Path] = Path.home() / '.m2' / 'repository'
DEFAULT_REMOTE_REPOSITORY: Final[str] = 'https://repo1.maven.org/maven2'

#: Parent POM chains longer than this are assumed to be cyclic.
MAX_PARENT_DEPTH: Final[int] = 10


class MetadataProvider(Protocol):
    """Loads an artifact's declared metadata."""

    def load(self, artifact: Artifact) -> ArtifactMetadata | None:
        """Return the metadata, or ``None`` if the artifact has none.

        Raises:
            MetadataLookupError: If the descriptor exists but cannot be
                fetched or parsed.
        """
        ...


class _Pom:
    """The fields of a POM that matter for attribution."""

    __slots__ = ('inception_year', 'licenses', 'name', 'organization', 'parent')

    def __init__(
        self,
        name: str,
        licenses: tuple[License, ...] | None,
        organization: Organization | None,
        inception_year: str,
        parent: tuple[str, str, str] | None,
    ) -> None:
        self.name = name
        self.licenses = licenses
        self.organization = organization
        self.inception_year = inception_year
        self.parent = parent


def _text(el: ElementTree.Element | None) -> str:
    if el is None or el.text is None:
        return ''
    return el.text.strip()


def _parse_pom_xml(data: bytes) -> _Pom:
    root = ElementTree.fromstring(data)  # noqa: S314

    # Handle Maven namespace.
    ns = ''
    if root.tag.startswith('{'):
        ns = root.tag.split('}')[0] + '}'

    licenses: tuple[License, ...] | None = None
    licenses_el = root.find(f'{ns}licenses')
    if licenses_el is not None:
        licenses = tuple(
            License(name=_text(lic.find(f'{ns}name')), url=_text(lic.find(f'{ns}url')))
            for lic in licenses_el.findall(f'{ns}license')
            if _text(lic.find(f'{ns}name'))
        )

    organization: Organization | None = None
    org_el = root.find(f'{ns}organization')
    if org_el is not None:
        organization = Organization(name=_text(org_el.find(f'{ns}name')), url=_text(org_el.find(f'{ns}url')))

    parent: tuple[str, str, str] | None = None
    parent_el = root.find(f'{ns}parent')
    if parent_el is not None:
        coords = (
            _text(parent_el.find(f'{ns}groupId')),
            _text(parent_el.find(f'{ns}artifactId')),
            _text(parent_el.find(f'{ns}version')),
        )
        if all(coords):
            parent = coords

    return _Pom(
        name=_text(root.find(f'{ns}name')),
        licenses=licenses,
        organization=organization,
        inception_year=_text(root.find(f'{ns}inceptionYear')),
        parent=parent,
    )


def parse_pom(data: bytes) -> ArtifactMetadata:
    """Parse a single POM without parent inheritance.

    Raises:
        ElementTree.ParseError: If *data* is not well-formed XML.
    """
    pom = _parse_pom_xml(data)
    return ArtifactMetadata(
        name=pom.name,
        licenses=pom.licenses or (),
        organization=pom.organization,
        inception_year=pom.inception_year,
    )


class PomMetadataProvider:
    """Base class for providers that read POM files.

    Subclasses implement :meth:`fetch_pom`.  Parsed POMs are memoized
    per instance, so a parent POM shared by many artifacts is fetched
    once.
    """

    def __init__(self) -> None:
        self._load_pom_cached = functools.lru_cache(maxsize=1024)(self._load_pom)

    def fetch_pom(self, group_id: str, artifact_id: str, version: str) -> bytes | None:
        """Return the raw POM, or ``None`` if it does not exist."""
        raise NotImplementedError

    def _load_pom(self, group_id: str, artifact_id: str, version: str) -> _Pom | None:
        data = self.fetch_pom(group_id, artifact_id, version)
        if data is None:
            return None
        return _parse_pom_xml(data)

    def load(self, artifact: Artifact) -> ArtifactMetadata | None:
        """Load *artifact*'s POM and merge inherited fields from its parents."""
        try:
            pom = self._load_pom_cached(artifact.group_id, artifact.artifact_id, artifact.version)
            if pom is None:
                return None

            licenses = pom.licenses
            organization = pom.organization
            inception_year = pom.inception_year
            parent = pom.parent
            depth = 0
            while parent is not None and (licenses is None or organization is None or not inception_year):
                depth += 1
                if depth > MAX_PARENT_DEPTH:
                    log.warning('pom_parent_chain_too_deep', artifact=str(artifact))
                    break
                parent_pom = self._load_pom_cached(*parent)
                if parent_pom is None:
                    log.debug('pom_parent_missing', artifact=str(artifact), parent=':'.join(parent))
                    break
                if licenses is None:
                    licenses = parent_pom.licenses
                if organization is None:
                    organization = parent_pom.organization
                inception_year = inception_year or parent_pom.inception_year
                parent = parent_pom.parent
        except ElementTree.ParseError as exc:
            raise MetadataLookupError(artifact, f'malformed POM: {exc}') from exc
        except (OSError, httpx.HTTPError) as exc:
            raise MetadataLookupError(artifact, str(exc)) from exc

        return ArtifactMetadata(
            name=pom.name,
            licenses=licenses or (),
            organization=organization,
            inception_year=inception_year,
        )


def _pom_path(group_id: str, artifact_id: str, version: str) -> str:
    return f'{group_id.replace(".", "/")}/{artifact_id}/{version}/{artifact_id}-{version}.pom'


class LocalRepositoryMetadataProvider(PomMetadataProvider):
    """Reads POMs from a Maven-layout repository directory.

    Args:
        repository: Root of the repository.
    """

    def __init__(self, repository: Path = DEFAULT_LOCAL_REPOSITORY) -> None:
        super().__init__()
        self._repository = repository

    def fetch_pom(self, group_id: str, artifact_id: str, version: str) -> bytes | None:
        """Read the POM file if present."""
        path = self._repository / _pom_path(group_id, artifact_id, version)
        if not path.is_file():
            return None
        return path.read_bytes()


class RemoteRepositoryMetadataProvider(PomMetadataProvider):
    """Fetches POMs from an HTTP Maven repository.

    Args:
        base_url: Repository root URL.
        client: HTTP client; a private one is created if omitted and
            closed by :meth:`close`.
        timeout: Request timeout in seconds for the private client.
    """

    def __init__(
        self,
        base_url: str = DEFAULT_REMOTE_REPOSITORY,
        *,
        client: httpx.Client | None = None,
        timeout: float = 30.0,
    ) -> None:
        super().__init__()
        self._base_url = base_url.rstrip('/')
        self._owns_client = client is None
        self._client = client if client is not None else httpx.Client(timeout=timeout, follow_redirects=True)

    def fetch_pom(self, group_id: str, artifact_id: str, version: str) -> bytes | None:
        """GET the POM; ``404`` means not found, other failures raise."""
        url = f'{self._base_url}/{_pom_path(group_id, artifact_id, version)}'
        resp = self._client.get(url)
        if resp.status_code == 404:
            return None
        resp.raise_for_status()
        return resp.content

    def close(self) -> None:
        """Close the private HTTP client, if any."""
        if self._owns_client:
            self._client.close()


class ChainMetadataProvider:
    """Asks providers in order; the first one with metadata wins.

    A lookup error from one provider is held back and raised only if no
    later provider finds the artifact.
    """

    def __init__(self, providers: Sequence[MetadataProvider]) -> None:
        self._providers = list(providers)

    def load(self, artifact: Artifact) -> ArtifactMetadata | None:
        """Return the first provider's metadata for *artifact*."""
        error: MetadataLookupError | None = None
        for provider in self._providers:
            try:
                metadata = provider.load(artifact)
            except MetadataLookupError as exc:
                log.debug('metadata_provider_failed', artifact=str(artifact), error=str(exc))
                error = error or exc
                continue
            if metadata is not None:
                return metadata
        if error is not None:
            raise error
        return None
