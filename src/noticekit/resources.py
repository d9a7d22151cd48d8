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

"""Locate mapping documents and templates.

A location string from the configuration is tried against, in order:

1. the module's base directory, then each parent module's base
   directory until the execution root has been searched;
2. the file system, as an absolute path or relative to the working
   directory;
3. the configured resource paths (directories and ``.jar``/``.zip``
   archives), with any leading ``/`` stripped;
4. noticekit's bundled data (the default ``NOTICE.template`` lives
   there);
5. an ``http(s)`` or ``file`` URL.

The first hit wins.  Its :attr:`Resource.uri` identifies the resource
for caching, so the same document reached from two modules is parsed
once.  URLs are not checked by :meth:`ResourceFinder.find`; they are
fetched when read, and a status other than 200 raises
:class:`~noticekit.errors.ResourceNotFoundError` at that point.
"""

from __future__ import annotations

import importlib.resources as _resources
import os
import zipfile
from collections.abc import Callable, Sequence
from dataclasses import dataclass, field
from pathlib import Path
from urllib.parse import urlparse
from urllib.request import url2pathname

import httpx

from noticekit._types import Project
from noticekit.errors import ResourceError, ResourceNotFoundError
from noticekit.logging import get_logger

__all__ = [
    'Resource',
    'ResourceFinder',
]

log = get_logger('noticekit.resources')

_ARCHIVE_SUFFIXES = frozenset({'.jar', '.zip'})


@dataclass(frozen=True)
class Resource:
    """A located resource.

    Attributes:
        location: The location string that was looked up.
        uri: Resolved identity of the resource.
    """

    location: str
    uri: str
    _reader: Callable[[], bytes] = field(repr=False, compare=False)

    def read_bytes(self) -> bytes:
        """Return the resource contents.

        Raises:
            ResourceError: If the resource cannot be read.
        """
        try:
            return self._reader()
        except (OSError, KeyError, zipfile.BadZipFile, httpx.HTTPError) as exc:
            raise ResourceError(self.location, f'Failed to read {self.location!r} from {self.uri}: {exc}') from exc

    def read_text(self, encoding: str = 'utf-8') -> str:
        """Return the resource contents decoded with *encoding*."""
        data = self.read_bytes()
        try:
            return data.decode(encoding)
        except (UnicodeDecodeError, LookupError) as exc:
            raise ResourceError(self.location, f'Failed to decode {self.uri} as {encoding}: {exc}') from exc


def _readable_file(path: Path) -> bool:
    return path.is_file() and os.access(path, os.R_OK)


def _file_resource(location: str, path: Path) -> Resource:
    resolved = path.resolve()
    return Resource(location=location, uri=resolved.as_uri(), _reader=resolved.read_bytes)


class ResourceFinder:
    """Finds resources for one module run.

    Args:
        project: The module being processed; its base directory and
            those of its parents are searched first.
        resource_paths: Extra directories and archives to search.
        client: HTTP client used for URL locations.  A short-lived
            client is created per request if omitted.
        offline: Never fetch ``http(s)`` locations.
    """

    def __init__(
        self,
        project: Project | None = None,
        resource_paths: Sequence[Path] = (),
        *,
        client: httpx.Client | None = None,
        offline: bool = False,
    ) -> None:
        self._project = project
        self._resource_paths = list(resource_paths)
        self._client = client
        self._offline = offline

    def find(self, location: str) -> Resource:
        """Locate *location*.

        Raises:
            ResourceNotFoundError: If no strategy finds it.
        """
        strategies = (
            self._search_project_tree,
            self._search_file_system,
            self._search_resource_paths,
            self._search_bundled,
            self._search_url,
        )
        for strategy in strategies:
            resource = strategy(location)
            if resource is not None:
                log.debug('resource_found', location=location, uri=resource.uri, strategy=strategy.__name__)
                return resource
        raise ResourceNotFoundError(location)

    def _search_project_tree(self, location: str) -> Resource | None:
        project = self._project
        while project is not None:
            candidate = project.basedir / location
            if _readable_file(candidate):
                return _file_resource(location, candidate)
            if project.is_execution_root:
                break
            project = project.parent
        return None

    def _search_file_system(self, location: str) -> Resource | None:
        candidate = Path(location)
        if _readable_file(candidate):
            return _file_resource(location, candidate)
        return None

    def _search_resource_paths(self, location: str) -> Resource | None:
        name = location.lstrip('/')
        for entry in self._resource_paths:
            if entry.is_dir():
                candidate = entry / name
                if _readable_file(candidate):
                    return _file_resource(location, candidate)
            elif entry.suffix.lower() in _ARCHIVE_SUFFIXES and entry.is_file():
                try:
                    with zipfile.ZipFile(entry) as archive:
                        if name not in archive.namelist():
                            continue
                except (OSError, zipfile.BadZipFile) as exc:
                    log.warning('resource_archive_unreadable', archive=str(entry), error=str(exc))
                    continue
                archive_path = entry.resolve()

                def _read(archive_path: Path = archive_path, name: str = name) -> bytes:
                    with zipfile.ZipFile(archive_path) as archive:
                        return archive.read(name)

                return Resource(location=location, uri=f'jar:{archive_path.as_uri()}!/{name}', _reader=_read)
        return None

    def _search_bundled(self, location: str) -> Resource | None:
        parts = location.lstrip('/').split('/')
        if '..' in parts:
            return None
        target = _resources.files('noticekit').joinpath('data')
        for part in parts:
            target = target.joinpath(part)
        if not target.is_file():
            return None
        return Resource(
            location=location,
            uri=f'resource:noticekit/data/{location.lstrip("/")}',
            _reader=target.read_bytes,
        )

    def _search_url(self, location: str) -> Resource | None:
        parsed = urlparse(location)
        if parsed.scheme == 'file':
            path = Path(url2pathname(parsed.path))
            return _file_resource(location, path) if _readable_file(path) else None
        if parsed.scheme not in ('http', 'https') or not parsed.netloc:
            return None
        if self._offline:
            log.debug('resource_url_offline', location=location)
            return None
        # Fetched on read, so a cached document costs no request.
        return Resource(location=location, uri=location, _reader=lambda: self._fetch(location))

    def _fetch(self, url: str) -> bytes:
        if self._client is not None:
            response = self._client.get(url, follow_redirects=True)
        else:
            with httpx.Client(follow_redirects=True) as client:
                response = client.get(url)
        if response.status_code != 200:
            log.debug('resource_url_status', url=url, status=response.status_code)
            raise ResourceNotFoundError(url)
        return response.content
