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

"""Walk a project's dependency trees and aggregate resolved licenses.

Every artifact identity is resolved once per traversal, however many
paths lead to it and however many modules declare it.  An artifact is
*effectively optional* when it, or any ancestor on the path it was
first reached through, is declared optional::

    app
    ├── a (optional)      optional
    │   └── b             optional (through a)
    └── c
        └── d             not optional

Unresolved artifacts are collected rather than raised so a single run
reports every missing license.
"""

from __future__ import annotations

from collections.abc import Collection
from dataclasses import dataclass, field

from noticekit._types import Artifact, DependencyNode, LicenseInfoSet, Project
from noticekit.graph import DependencyGraphProvider, prebuilt_graph
from noticekit.logging import get_logger
from noticekit.resolver import LicenseResolver

__all__ = [
    'TraversalResult',
    'is_excluded',
    'is_effectively_optional',
    'traverse',
]

log = get_logger('noticekit.walker')


@dataclass
class TraversalResult:
    """Accumulated outcome of a traversal.

    Attributes:
        licenses: Resolved rows, ordered case-insensitively by name.
        unresolved: Artifacts without a license, in discovery order.
        visited: Identities of every artifact already resolved.
    """

    licenses: LicenseInfoSet = field(default_factory=LicenseInfoSet)
    unresolved: dict[tuple[str, ...], Artifact] = field(default_factory=dict)
    visited: set[tuple[str, ...]] = field(default_factory=set)

    @property
    def unresolved_artifacts(self) -> list[Artifact]:
        """Unresolved artifacts in discovery order."""
        return list(self.unresolved.values())


def is_effectively_optional(node: DependencyNode) -> bool:
    """Return whether *node* or any ancestor is optional.

    :func:`traverse` computes the same flag top-down; this walks parent
    links for callers holding a single node.
    """
    if node.artifact.optional:
        return True
    return any(ancestor.artifact.optional for ancestor in node.iter_ancestors())


def is_excluded(module: Project, root_artifact_id: str, excluded_modules: Collection[str]) -> bool:
    """Return whether *module* or one of its parents below the root is excluded.

    Args:
        module: The child module about to be aggregated.
        root_artifact_id: Artifact id of the module being aggregated into;
            the parent walk stops there.
        excluded_modules: Excluded artifact ids.
    """
    if module.artifact_id in excluded_modules:
        log.info('module_excluded', module=module.name, artifact_id=module.artifact_id)
        return True
    parent = module.parent
    while parent is not None and parent.artifact_id != root_artifact_id:
        if parent.artifact_id in excluded_modules:
            log.info('module_excluded', module=module.name, parent_artifact_id=parent.artifact_id)
            return True
        parent = parent.parent
    return False


def _visit_tree(root: DependencyNode, resolver: LicenseResolver, result: TraversalResult) -> None:
    stack: list[tuple[DependencyNode, bool]] = [(root, False)]
    while stack:
        node, ancestor_optional = stack.pop()
        artifact = node.artifact
        optional = ancestor_optional or artifact.optional
        # Reversed so children are visited in declaration order.
        for child in reversed(node.children):
            stack.append((child, optional))

        if artifact.key in result.visited:
            continue
        result.visited.add(artifact.key)

        info = resolver.resolve(artifact, optional=optional)
        if info is None:
            result.unresolved.setdefault(artifact.key, artifact)
        elif not result.licenses.add(info):
            log.debug('duplicate_display_name', name=info.name, artifact=str(artifact))


def traverse(
    project: Project,
    resolver: LicenseResolver,
    *,
    include_children: bool = True,
    excluded_modules: Collection[str] = (),
    graph_provider: DependencyGraphProvider = prebuilt_graph,
    result: TraversalResult | None = None,
) -> TraversalResult:
    """Resolve every artifact reachable from *project* (and its modules).

    Args:
        project: The module to start from.
        resolver: Resolves each distinct artifact.
        include_children: Recurse into child modules.
        excluded_modules: Artifact ids of child modules to skip, along
            with everything below them.
        graph_provider: Builds each module's dependency tree.
        result: Accumulator to continue; a new one is created if omitted.

    Raises:
        GraphBuildError: If a module's dependency tree cannot be built.
    """
    result = result if result is not None else TraversalResult()
    root_artifact_id = project.artifact_id
    pending = [project]
    while pending:
        current = pending.pop()
        log.info('parsing_dependencies', project=current.name)
        _visit_tree(graph_provider(current), resolver, result)
        if not include_children:
            break
        children = [m for m in current.modules if not is_excluded(m, root_artifact_id, excluded_modules)]
        pending.extend(reversed(children))
    return result
