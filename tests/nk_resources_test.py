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

"""Tests for noticekit.resources (location lookup order)."""

from __future__ import annotations

import zipfile
from pathlib import Path

import httpx
import pytest
from noticekit._types import Artifact, Project
from noticekit.errors import ResourceError, ResourceNotFoundError
from noticekit.resources import Resource, ResourceFinder

# ── Helpers ──────────────────────────────────────────────────────────


def _project(basedir: Path, artifact_id: str, parent: Project | None = None, *, root: bool = False) -> Project:
    basedir.mkdir(parents=True, exist_ok=True)
    project = Project(
        artifact=Artifact('org.example', artifact_id, '1.0'),
        name=artifact_id,
        basedir=basedir,
        build_directory=basedir / 'target',
        parent=parent,
        is_execution_root=root,
    )
    if parent is not None:
        parent.modules.append(project)
    return project


def _client(handler) -> httpx.Client:  # noqa: ANN001
    return httpx.Client(transport=httpx.MockTransport(handler))


# ── Project tree ─────────────────────────────────────────────────────


class TestProjectTreeSearch:
    """Tests for the module-then-parents strategy."""

    def test_module_dir_first(self, tmp_path: Path) -> None:
        """A file in the module's own directory wins over the parent's."""
        root = _project(tmp_path, 'root', root=True)
        child = _project(tmp_path / 'child', 'child', root)
        (tmp_path / 'mappings.xml').write_text('root', encoding='utf-8')
        (tmp_path / 'child' / 'mappings.xml').write_text('child', encoding='utf-8')
        resource = ResourceFinder(child).find('mappings.xml')
        assert resource.read_text() == 'child'

    def test_falls_back_to_parent(self, tmp_path: Path) -> None:
        """A file only present in the parent directory is found."""
        root = _project(tmp_path, 'root', root=True)
        child = _project(tmp_path / 'child', 'child', root)
        (tmp_path / 'mappings.xml').write_text('root', encoding='utf-8')
        resource = ResourceFinder(child).find('mappings.xml')
        assert resource.read_text() == 'root'
        assert resource.uri == (tmp_path / 'mappings.xml').resolve().as_uri()

    def test_stops_at_execution_root(self, tmp_path: Path) -> None:
        """Parents above the execution root are not searched."""
        outer = _project(tmp_path, 'outer')
        root = _project(tmp_path / 'build', 'root', outer, root=True)
        (tmp_path / 'only-in-outer.xml').write_text('outer', encoding='utf-8')
        with pytest.raises(ResourceNotFoundError):
            ResourceFinder(root).find('only-in-outer.xml')


# ── File system, resource paths, bundled data ────────────────────────


class TestOtherStrategies:
    """Tests for the remaining lookup strategies."""

    def test_absolute_path(self, tmp_path: Path) -> None:
        """Absolute file system paths are accepted."""
        path = tmp_path / 'abs.xml'
        path.write_text('abs', encoding='utf-8')
        assert ResourceFinder().find(str(path)).read_text() == 'abs'

    def test_project_tree_beats_resource_paths(self, tmp_path: Path) -> None:
        """The module directory is searched before the resource paths."""
        project = _project(tmp_path / 'module', 'module', root=True)
        shared = tmp_path / 'shared'
        shared.mkdir()
        (shared / 'lookup-order.xml').write_text('shared', encoding='utf-8')
        (project.basedir / 'lookup-order.xml').write_text('module', encoding='utf-8')
        finder = ResourceFinder(project, [shared])
        assert finder.find('lookup-order.xml').read_text() == 'module'

    def test_resource_path_directory(self, tmp_path: Path) -> None:
        """Resource path directories are searched with the leading slash stripped."""
        shared = tmp_path / 'shared'
        shared.mkdir()
        (shared / 'lookup.xml').write_text('shared', encoding='utf-8')
        resource = ResourceFinder(resource_paths=[shared]).find('/lookup.xml')
        assert resource.read_text() == 'shared'

    def test_resource_path_archive(self, tmp_path: Path) -> None:
        """Entries of jar archives on the resource path are found."""
        jar = tmp_path / 'mappings.jar'
        with zipfile.ZipFile(jar, 'w') as archive:
            archive.writestr('notice/lookup.xml', 'from-jar')
        resource = ResourceFinder(resource_paths=[jar]).find('notice/lookup.xml')
        assert resource.read_text() == 'from-jar'
        assert resource.uri.startswith('jar:file:')
        assert resource.uri.endswith('!/notice/lookup.xml')

    def test_archive_without_entry_skipped(self, tmp_path: Path) -> None:
        """Archives missing the entry fall through to later paths."""
        jar = tmp_path / 'empty.jar'
        with zipfile.ZipFile(jar, 'w') as archive:
            archive.writestr('other.xml', 'x')
        directory = tmp_path / 'dir'
        directory.mkdir()
        (directory / 'lookup.xml').write_text('dir', encoding='utf-8')
        resource = ResourceFinder(resource_paths=[jar, directory]).find('lookup.xml')
        assert resource.read_text() == 'dir'

    def test_bundled_template(self) -> None:
        """The default NOTICE template ships with the package."""
        resource = ResourceFinder().find('NOTICE.template')
        assert resource.uri == 'resource:noticekit/data/NOTICE.template'
        assert '#GENERATED_NOTICES#' in resource.read_text()

    def test_bundled_rejects_parent_segments(self) -> None:
        """Bundled lookups cannot escape the data directory."""
        with pytest.raises(ResourceNotFoundError):
            ResourceFinder().find('../__init__.py')

    def test_file_url(self, tmp_path: Path) -> None:
        """file: URLs are read from disk."""
        path = tmp_path / 'url.xml'
        path.write_text('url', encoding='utf-8')
        assert ResourceFinder().find(path.resolve().as_uri()).read_text() == 'url'

    def test_not_found(self) -> None:
        """Unknown locations raise ResourceNotFoundError."""
        with pytest.raises(ResourceNotFoundError, match='no-such-mapping.xml'):
            ResourceFinder().find('no-such-mapping.xml')


# ── HTTP ─────────────────────────────────────────────────────────────


class TestUrlStrategy:
    """Tests for http(s) locations."""

    def test_fetches_http(self) -> None:
        """A 200 response becomes a resource keyed by its URL."""

        def handler(request: httpx.Request) -> httpx.Response:
            return httpx.Response(200, content=b'<license-lookup/>')

        url = 'https://example.com/lookup.xml'
        resource = ResourceFinder(client=_client(handler)).find(url)
        assert resource.uri == url
        assert resource.read_bytes() == b'<license-lookup/>'

    def test_find_does_not_fetch(self) -> None:
        """URLs are only requested when the resource is read."""
        calls: list[httpx.Request] = []

        def handler(request: httpx.Request) -> httpx.Response:
            calls.append(request)
            return httpx.Response(200, content=b'x')

        resource = ResourceFinder(client=_client(handler)).find('https://example.com/lookup.xml')
        assert calls == []
        assert resource.read_bytes() == b'x'
        assert len(calls) == 1

    def test_non_200_is_not_found(self) -> None:
        """Any status other than 200 means not found."""

        def handler(request: httpx.Request) -> httpx.Response:
            return httpx.Response(404)

        resource = ResourceFinder(client=_client(handler)).find('https://example.com/missing.xml')
        with pytest.raises(ResourceNotFoundError):
            resource.read_bytes()

    def test_transport_error_is_resource_error(self) -> None:
        """Network errors surface as ResourceError on read."""

        def handler(request: httpx.Request) -> httpx.Response:
            raise httpx.ConnectError('refused', request=request)

        resource = ResourceFinder(client=_client(handler)).find('https://example.com/down.xml')
        with pytest.raises(ResourceError, match='refused'):
            resource.read_bytes()

    def test_offline_skips_http(self) -> None:
        """Offline finders never issue requests."""
        calls: list[httpx.Request] = []

        def handler(request: httpx.Request) -> httpx.Response:
            calls.append(request)
            return httpx.Response(200, content=b'x')

        with pytest.raises(ResourceNotFoundError):
            ResourceFinder(client=_client(handler), offline=True).find('https://example.com/lookup.xml')
        assert calls == []


class TestResource:
    """Tests for Resource reads."""

    def test_read_failure_wrapped(self) -> None:
        """Reader OSErrors surface as ResourceError."""

        def reader() -> bytes:
            raise OSError('gone')

        resource = Resource(location='x.xml', uri='file:///x.xml', _reader=reader)
        with pytest.raises(ResourceError, match='gone'):
            resource.read_bytes()

    def test_decode_failure_wrapped(self) -> None:
        """Undecodable content surfaces as ResourceError."""
        resource = Resource(location='x.xml', uri='file:///x.xml', _reader=lambda: b'\xff\xfe\xfa')
        with pytest.raises(ResourceError, match='decode'):
            resource.read_text('utf-8')
