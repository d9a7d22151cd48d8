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

r"""Load a prebuilt dependency graph.

noticekit does not resolve dependencies itself.  The build tool exports
the resolved tree of every module as JSON, validated against the
bundled ``dependency-graph.schema.json``::

    {
      "groupId": "org.example", "artifactId": "app", "version": "1.0",
      "name": "Example App",
      "dependencies": [
        {"groupId": "org.slf4j", "artifactId": "slf4j-api",
         "version": "2.0.9", "scope": "compile",
         "dependencies": []}
      ],
      "modules": [
        {"groupId": "org.example", "artifactId": "app-core", "version": "1.0",
         "basedir": "core", "dependencies": []}
      ]
    }

``basedir`` is relative to the parent module (the graph file's directory
for the root) and defaults to the module's artifact id; ``buildDirectory``
is relative to ``basedir`` and defaults to ``target``.
"""

from __future__ import annotations

import importlib.resources as _resources
import json
from pathlib import Path
from typing import Any, Protocol

import jsonschema

from noticekit._types import Artifact, DependencyNode, Project
from noticekit.errors import GraphBuildError

__all__ = [
    'DependencyGraphProvider',
    'load_graph_schema',
    'load_project',
    'parse_project',
    'prebuilt_graph',
]


class DependencyGraphProvider(Protocol):
    """Builds the dependency tree of a module."""

    def __call__(self, project: Project) -> DependencyNode:
        """Return the root node (the module's own artifact).

        Raises:
            GraphBuildError: If the tree cannot be built.
        """
        ...


def prebuilt_graph(project: Project) -> DependencyNode:
    """Return the tree loaded alongside *project*."""
    if project.dependencies is None:
        raise GraphBuildError(f'Cannot build project dependency tree for project: {project.artifact}')
    return project.dependencies


def load_graph_schema() -> dict[str, Any]:
    """Return the bundled JSON schema for dependency graph documents."""
    schema = _resources.files('noticekit').joinpath('data').joinpath('dependency-graph.schema.json')
    text = schema.read_text(encoding='utf-8')
    return json.loads(text)


def _artifact(data: dict[str, Any], *, scope: str = '', optional: bool = False) -> Artifact:
    return Artifact(
        group_id=data['groupId'],
        artifact_id=data['artifactId'],
        version=data['version'],
        type=data.get('type', 'jar'),
        classifier=data.get('classifier', ''),
        scope=scope,
        optional=optional,
    )


def _add_dependencies(node: DependencyNode, deps: list[dict[str, Any]]) -> None:
    for dep in deps:
        child = node.add_child(_artifact(dep, scope=dep.get('scope', ''), optional=dep.get('optional', False)))
        _add_dependencies(child, dep.get('dependencies', []))


def _build_project(data: dict[str, Any], basedir: Path, parent: Project | None) -> Project:
    artifact = _artifact(data)
    root = DependencyNode(artifact=artifact)
    _add_dependencies(root, data.get('dependencies', []))
    project = Project(
        artifact=artifact,
        name=data.get('name') or artifact.artifact_id,
        basedir=basedir,
        build_directory=basedir / data.get('buildDirectory', 'target'),
        dependencies=root,
        parent=parent,
        is_execution_root=parent is None,
    )
    for module in data.get('modules', []):
        module_dir = basedir / module.get('basedir', module['artifactId'])
        project.modules.append(_build_project(module, module_dir, project))
    return project


def parse_project(data: object, basedir: Path) -> Project:
    """Validate and convert a decoded graph document.

    Args:
        data: The decoded JSON document.
        basedir: Directory that relative root ``basedir`` values are
            resolved against.

    Raises:
        GraphBuildError: If the document does not match the schema.
    """
    if not isinstance(data, dict):
        raise GraphBuildError(f'Invalid dependency graph: expected a JSON object, got {type(data).__name__}')
    validator = jsonschema.Draft202012Validator(load_graph_schema())
    errors = sorted(validator.iter_errors(data), key=lambda e: [str(p) for p in e.absolute_path])
    if errors:
        details = '\n'.join(f'  - {".".join(str(p) for p in e.absolute_path) or "(root)"}: {e.message}' for e in errors)
        raise GraphBuildError(f'Invalid dependency graph ({len(errors)} schema violation(s)):\n{details}')
    root_dir = basedir / data['basedir'] if 'basedir' in data else basedir
    return _build_project(data, root_dir, None)


def load_project(path: Path) -> Project:
    """Load a dependency graph document from *path*.

    Raises:
        GraphBuildError: If the file cannot be read, decoded or validated.
    """
    try:
        data = json.loads(path.read_text(encoding='utf-8'))
    except (OSError, json.JSONDecodeError) as exc:
        raise GraphBuildError(f'Failed to read dependency graph {path}: {exc}') from exc
    return parse_project(data, path.resolve().parent)
