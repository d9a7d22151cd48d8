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

"""Stub mapping document for artifacts whose license could not be found.

When a run fails on unresolved artifacts, a ready-to-edit TOML mapping
is written next to the build output so the user only has to fill in the
names and licenses::

    # Fill in "license" (and optionally "name") for each artifact, then
    # add this file to the license_mapping setting.

    [[artifact]]
    group_id = "com.example"
    artifact_id = "mystery-lib"
    version = ["1.2.3"]
    name = ""
    license = ""
"""

from __future__ import annotations

from collections.abc import Iterable
from pathlib import Path
from typing import Final

import tomlkit

from noticekit._types import Artifact
from noticekit.logging import get_logger

__all__ = [
    'STUB_FILE_NAME',
    'render_stub_mapping',
    'write_stub_mapping',
]

log = get_logger('noticekit.mapping.stub')

#: File name of the stub written to the build directory.
STUB_FILE_NAME: Final[str] = 'license-mappings.toml'


def render_stub_mapping(artifacts: Iterable[Artifact]) -> str:
    """Return the TOML text of a stub mapping for *artifacts*."""
    doc = tomlkit.document()
    doc.add(tomlkit.comment('Fill in "license" (and optionally "name") for each artifact, then'))
    doc.add(tomlkit.comment('add this file to the license_mapping setting.'))
    entries = tomlkit.aot()
    for artifact in artifacts:
        table = tomlkit.table()
        table.add('group_id', artifact.group_id)
        table.add('artifact_id', artifact.artifact_id)
        versions = tomlkit.array()
        versions.append(artifact.version)
        table.add('version', versions)
        table.add('name', '')
        table.add('license', '')
        entries.append(table)
    doc.add('artifact', entries)
    return tomlkit.dumps(doc)


def write_stub_mapping(artifacts: Iterable[Artifact], build_directory: Path) -> Path | None:
    """Write the stub mapping into *build_directory*.

    Failures are logged and swallowed: the stub is a convenience and must
    not mask the unresolved-artifact failure that triggered it.

    Returns:
        The written path, or ``None`` if writing failed.
    """
    path = build_directory / STUB_FILE_NAME
    try:
        path.parent.mkdir(parents=True, exist_ok=True)
        path.write_text(render_stub_mapping(artifacts), encoding='utf-8')
    except OSError as exc:
        log.warning('stub_mapping_write_failed', path=str(path), error=str(exc))
        return None
    log.error('stub_mapping_written', path=str(path))
    return path
