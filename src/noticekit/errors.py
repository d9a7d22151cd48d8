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

"""Exception hierarchy for noticekit.

Every fatal condition raised by the tool derives from
:class:`NoticeKitError` so the CLI can report it uniformly::

    NoticeKitError
    ├── ConfigError               conflicting or invalid options
    ├── ResourceError
    │   ├── ResourceNotFoundError location not found by any strategy
    │   └── MappingDocumentError  mapping document unreadable/malformed
    ├── GraphBuildError           dependency graph could not be built
    ├── UnresolvedArtifactsError  no license found for some artifacts
    ├── NoticeMismatchError       check mode found a stale NOTICE
    └── NoticeWriteError          generate mode could not write

:class:`MetadataLookupError` is deliberately *not* fatal: the resolver
logs it and falls back to the next strategy.
"""

from __future__ import annotations

from collections.abc import Sequence
from pathlib import Path

from noticekit._types import Artifact

__all__ = [
    'ConfigError',
    'GraphBuildError',
    'MappingDocumentError',
    'MetadataLookupError',
    'NoticeKitError',
    'NoticeMismatchError',
    'NoticeWriteError',
    'ResourceError',
    'ResourceNotFoundError',
    'UnresolvedArtifactsError',
]


class NoticeKitError(Exception):
    """Base class for all fatal noticekit errors."""


class ConfigError(NoticeKitError):
    """Raised for invalid or conflicting configuration."""


class ResourceError(NoticeKitError):
    """Raised when a mapping document or template cannot be loaded.

    Attributes:
        location: The location string as configured.
    """

    def __init__(self, location: str, message: str) -> None:
        self.location = location
        super().__init__(message)


class ResourceNotFoundError(ResourceError):
    """Raised when no lookup strategy can find a resource."""

    def __init__(self, location: str) -> None:
        super().__init__(location, f'Resource not found in file system, resource paths or URL: {location}')


class MappingDocumentError(ResourceError):
    """Raised when a license mapping document cannot be parsed.

    Attributes:
        errors: Human-readable problems found in the document.
    """

    def __init__(self, location: str, errors: Sequence[str]) -> None:
        self.errors = list(errors)
        bullet_list = '\n'.join(f'  - {e}' for e in self.errors)
        super().__init__(
            location,
            f'License mapping document {location!r} is invalid:\n{bullet_list}',
        )


class GraphBuildError(NoticeKitError):
    """Raised when a project's dependency graph cannot be built."""


class MetadataLookupError(Exception):
    """Raised by metadata providers when an artifact's descriptor is unreadable.

    Attributes:
        artifact: The artifact whose metadata could not be loaded.
    """

    def __init__(self, artifact: Artifact, reason: str) -> None:
        self.artifact = artifact
        self.reason = reason
        super().__init__(f'Failed to load metadata for {artifact}: {reason}')


class UnresolvedArtifactsError(NoticeKitError):
    """Raised when one or more artifacts have no resolvable license.

    Attributes:
        artifacts: The unresolved artifacts, in discovery order.
        stub_path: Where a stub mapping document was written, if any.
    """

    def __init__(self, artifacts: Sequence[Artifact], stub_path: Path | None = None) -> None:
        self.artifacts = list(artifacts)
        self.stub_path = stub_path
        super().__init__(f'Failed to find Licenses for {len(self.artifacts)} artifacts')


class NoticeMismatchError(NoticeKitError):
    """Raised in check mode when the existing NOTICE is missing or stale.

    Attributes:
        notice_path: The NOTICE file that was checked.
        expected_path: Where the expected contents were written, if any.
        diff: Line diff between expected and existing contents.
    """

    def __init__(
        self,
        message: str,
        *,
        notice_path: Path,
        expected_path: Path | None = None,
        diff: str = '',
    ) -> None:
        self.notice_path = notice_path
        self.expected_path = expected_path
        self.diff = diff
        super().__init__(message)


class NoticeWriteError(NoticeKitError):
    """Raised when the generated NOTICE file cannot be written."""
