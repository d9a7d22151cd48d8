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

"""Tests for loading prebuilt dependency graph documents."""

from __future__ import annotations

import json
from pathlib import Path
from typing import Any

import pytest
from noticekit._types import Artifact, DependencyNode, Project
from noticekit.errors import GraphBuildError
from noticekit.graph import load_graph_schema, load_project, parse_project, prebuilt_graph


def _graph() -> dict[str, Any]:
    return {
        'groupId': 'org.example',
        'artifactId': 'app',
        'version': '1.0',
        'name': 'Example App',
        'dependencies': [
            {
                'groupId': 'org.slf4j',
                'artifactId': 'slf4j-api',
                'version': '2.0.9',
                'scope': 'compile',
                'dependencies': [],
            },
            {
                'groupId': 'com.example',
                'artifactId': 'extras',
                'version': '0.3',
                'optional': True,
                'classifier': 'all',
                'dependencies': [{'groupId': 'com.example', 'artifactId': 'extras-core', 'version': '0.3'}],
            },
        ],
        'modules': [
            {
                'groupId': 'org.example',
                'artifactId': 'app-core',
                'version': '1.0',
                'dependencies': [],
                'modules': [
                    {'groupId': 'org.example', 'artifactId': 'app-core-impl', 'version': '1.0', 'basedir': 'impl'},
                ],
            },
        ],
    }


class TestParseProject:
    """Tests for parse_project."""

    def test_root_project(self, tmp_path: Path) -> None:
        """The root module carries its tree and is the execution root."""
        project = parse_project(_graph(), tmp_path)
        assert project.name == 'Example App'
        assert project.is_execution_root
        assert project.basedir == tmp_path
        assert project.build_directory == tmp_path / 'target'
        assert project.dependencies is not None
        assert project.dependencies.artifact == project.artifact

    def test_dependency_attributes(self, tmp_path: Path) -> None:
        """Scope, optional and classifier are carried into artifacts."""
        root = parse_project(_graph(), tmp_path).dependencies
        assert root is not None
        slf4j, extras = root.children
        assert slf4j.artifact.scope == 'compile'
        assert not slf4j.artifact.optional
        assert extras.artifact.optional
        assert extras.artifact.classifier == 'all'
        assert extras.children[0].parent is extras
        assert extras.children[0].artifact.type == 'jar'

    def test_modules(self, tmp_path: Path) -> None:
        """Modules get parents, default names and base directories."""
        project = parse_project(_graph(), tmp_path)
        (core,) = project.modules
        (impl,) = core.modules
        assert core.parent is project
        assert core.name == 'app-core'
        assert core.basedir == tmp_path / 'app-core'
        assert not core.is_execution_root
        assert impl.basedir == tmp_path / 'app-core' / 'impl'
        assert [m.artifact_id for m in project.iter_modules()] == ['app-core', 'app-core-impl']

    def test_missing_coordinates(self, tmp_path: Path) -> None:
        """Documents without required coordinates are rejected."""
        data = _graph()
        del data['dependencies'][0]['version']
        with pytest.raises(GraphBuildError, match=r'dependencies\.0'):
            parse_project(data, tmp_path)

    def test_unknown_property(self, tmp_path: Path) -> None:
        """Unknown properties are rejected."""
        data = _graph()
        data['dependencies'][0]['licence'] = 'MIT'
        with pytest.raises(GraphBuildError, match='schema violation'):
            parse_project(data, tmp_path)

    def test_wrong_type(self, tmp_path: Path) -> None:
        """A non-boolean optional flag is rejected."""
        data = _graph()
        data['dependencies'][0]['optional'] = 'yes'
        with pytest.raises(GraphBuildError):
            parse_project(data, tmp_path)

    def test_not_an_object(self, tmp_path: Path) -> None:
        """The document must be an object."""
        with pytest.raises(GraphBuildError, match='expected a JSON object, got list'):
            parse_project([], tmp_path)


class TestLoadProject:
    """Tests for load_project and prebuilt_graph."""

    def test_load_from_file(self, tmp_path: Path) -> None:
        """Relative base directories resolve against the file's directory."""
        path = tmp_path / 'dependency-graph.json'
        path.write_text(json.dumps(_graph()), encoding='utf-8')
        project = load_project(path)
        assert project.basedir == tmp_path.resolve()

    def test_invalid_json(self, tmp_path: Path) -> None:
        """Undecodable files raise GraphBuildError."""
        path = tmp_path / 'dependency-graph.json'
        path.write_text('{', encoding='utf-8')
        with pytest.raises(GraphBuildError, match='Failed to read dependency graph'):
            load_project(path)

    def test_missing_file(self, tmp_path: Path) -> None:
        """A missing file raises GraphBuildError."""
        with pytest.raises(GraphBuildError):
            load_project(tmp_path / 'absent.json')

    def test_prebuilt_graph_without_tree(self, tmp_path: Path) -> None:
        """A project without a tree cannot be traversed."""
        project = Project(Artifact('g', 'a', '1'), 'a', tmp_path, tmp_path / 'target')
        with pytest.raises(GraphBuildError, match='Cannot build project dependency tree'):
            prebuilt_graph(project)

    def test_prebuilt_graph_returns_tree(self, tmp_path: Path) -> None:
        """The loaded tree is returned unchanged."""
        node = DependencyNode(Artifact('g', 'a', '1'))
        project = Project(Artifact('g', 'a', '1'), 'a', tmp_path, tmp_path / 'target', dependencies=node)
        assert prebuilt_graph(project) is node

    def test_schema_is_draft_2020_12(self) -> None:
        """The bundled schema declares draft 2020-12."""
        assert load_graph_schema()['$schema'].endswith('2020-12/schema')
