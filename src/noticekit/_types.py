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

"""Shared leaf-level types used across noticekit.

This module must have **zero** imports from other ``noticekit``
subpackages to avoid circular-import chains.  It is safe to import
from any module in the project.
"""

from __future__ import annotations

from collections.abc import Iterable, Iterator
from dataclasses import dataclass, field
from pathlib import Path

__all__ = [
    'Artifact',
    'ArtifactLicenseInfo',
    'ArtifactMetadata',
    'DependencyNode',
    'License',
    'LicenseInfoSet',
    'Organization',
    'Project',
]


@dataclass(frozen=True)
class Artifact:
    """A uniquely versioned dependency.

    Attributes:
        group_id: Maven-style group id (e.g. ``"org.apache.commons"``).
        artifact_id: Artifact id within the group.
        version: Raw version string as declared.
        type: Packaging type, ``"jar"`` unless stated otherwise.
        classifier: Optional classifier (e.g. ``"sources"``).
        scope: Free-form usage scope (``"compile"``, ``"test"``, ...).
        optional: Whether the dependency was declared optional.
    """

    group_id: str
    artifact_id: str
    version: str
    type: str = 'jar'
    classifier: str = ''
    scope: str = field(default='', compare=False)
    optional: bool = field(default=False, compare=False)

    @property
    def key(self) -> tuple[str, str, str, str, str]:
        """Identity used to guard against resolving an artifact twice."""
        return (self.group_id, self.artifact_id, self.version, self.type, self.classifier)

    @property
    def mapping_key(self) -> str:
        """``groupId:artifactId``, the key mapping documents are indexed by."""
        return f'{self.group_id}:{self.artifact_id}'

    def __str__(self) -> str:
        parts = [self.group_id, self.artifact_id, self.type]
        if self.classifier:
            parts.append(self.classifier)
        parts.append(self.version)
        if self.scope:
            parts.append(self.scope)
        return ':'.join(parts)


@dataclass
class DependencyNode:
    """One node of a dependency tree.

    The root node of a tree is the project's own artifact.  Nodes keep a
    back reference to their parent so callers can walk to the root.
    """

    artifact: Artifact
    parent: DependencyNode | None = field(default=None, repr=False, compare=False)
    children: list[DependencyNode] = field(default_factory=list)

    def add_child(self, artifact: Artifact) -> DependencyNode:
        """Append a child node for *artifact* and return it."""
        child = DependencyNode(artifact=artifact, parent=self)
        self.children.append(child)
        return child

    def iter_ancestors(self) -> Iterator[DependencyNode]:
        """Yield this node's parent, grandparent, ... up to the root."""
        node = self.parent
        while node is not None:
            yield node
            node = node.parent


@dataclass
class Project:
    """A build module and its prebuilt dependency tree.

    Attributes:
        artifact: The module's own coordinates.
        name: Human-readable module name.
        basedir: Directory the module lives in.
        build_directory: Where side files (stub mappings, expected
            NOTICE files) are written.
        dependencies: Root of the module's dependency tree.
        modules: Child modules, in declaration order.
        parent: The aggregating parent module, if any.
        is_execution_root: Whether this module is the build root.
    """

    artifact: Artifact
    name: str
    basedir: Path
    build_directory: Path
    dependencies: DependencyNode | None = None
    modules: list[Project] = field(default_factory=list)
    parent: Project | None = field(default=None, repr=False, compare=False)
    is_execution_root: bool = False

    @property
    def artifact_id(self) -> str:
        """The module's artifact id."""
        return self.artifact.artifact_id

    def iter_modules(self) -> Iterator[Project]:
        """Yield every descendant module, depth first."""
        for module in self.modules:
            yield module
            yield from module.iter_modules()


@dataclass(frozen=True)
class License:
    """A declared license (name and optional URL)."""

    name: str
    url: str = ''


@dataclass(frozen=True)
class Organization:
    """The organization owning an artifact."""

    name: str = ''
    url: str = ''


@dataclass(frozen=True)
class ArtifactMetadata:
    """Ownership metadata declared by an artifact's own package descriptor.

    Attributes:
        name: Declared display name.  Empty if not declared.
        licenses: Declared licenses in declaration order.
        organization: Owning organization, if declared.
        inception_year: Year the project started, if declared.
    """

    name: str = ''
    licenses: tuple[License, ...] = ()
    organization: Organization | None = None
    inception_year: str = ''


@dataclass(frozen=True)
class ArtifactLicenseInfo:
    """One finalized row of the generated NOTICE.

    Attributes:
        name: Display name of the artifact.
        license: Resolved license name.
        scope: Scope of the artifact as it was first reached.
        optional: ``True`` if the artifact or any ancestor is optional.
        artifact: The artifact the row was resolved for.
        metadata: Package metadata used during resolution, if any.
    """

    name: str
    license: str
    scope: str = ''
    optional: bool = False
    artifact: Artifact | None = None
    metadata: ArtifactMetadata | None = None

    @property
    def sort_key(self) -> str:
        """Case-insensitive key used for identity and ordering."""
        return self.name.lower()


class LicenseInfoSet:
    """Ordered set of :class:`ArtifactLicenseInfo` keyed case-insensitively by name.

    Iteration is sorted by lower-cased display name so rendering is
    deterministic.  Adding a row whose name is already present (ignoring
    case) keeps the existing row.
    """

    def __init__(self, items: Iterable[ArtifactLicenseInfo] = ()) -> None:
        self._items: dict[str, ArtifactLicenseInfo] = {}
        for item in items:
            self.add(item)

    def add(self, info: ArtifactLicenseInfo) -> bool:
        """Add *info*; return ``False`` if a row with the same name exists."""
        key = info.sort_key
        if key in self._items:
            return False
        self._items[key] = info
        return True

    def __contains__(self, info: object) -> bool:
        return isinstance(info, ArtifactLicenseInfo) and info.sort_key in self._items

    def __iter__(self) -> Iterator[ArtifactLicenseInfo]:
        for key in sorted(self._items):
            yield self._items[key]

    def __len__(self) -> int:
        return len(self._items)

    def __repr__(self) -> str:
        return f'LicenseInfoSet({list(self)!r})'
