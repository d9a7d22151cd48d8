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

r"""Parsers for license mapping documents.

Two formats are accepted.  The XML ``license-lookup`` format::

    <license-lookup xmlns="https://source.jasig.org/schemas/maven-notice-plugin/license-lookup">
      <artifact>
        <groupId>org.codehaus.plexus</groupId>
        <artifactId>plexus-container-default</artifactId>
        <version type="regex">.*</version>
        <license>Apache Software License 2.0</license>
      </artifact>
    </license-lookup>

and the equivalent TOML (selected by a ``.toml`` suffix)::

    [[artifact]]
    group_id = "org.codehaus.plexus"
    artifact_id = "plexus-container-default"
    version = [{ value = ".*", type = "regex" }]
    license = "Apache Software License 2.0"

``version`` may be omitted (all versions), a single string (exact) or a
list of strings and ``{ value, type }`` tables.  ``type`` defaults to
``exact``.
"""

from __future__ import annotations

import re
import sys
from typing import Any
from xml.etree import ElementTree  # noqa: S405

if sys.version_info >= (3, 11):
    import tomllib
else:
    import tomli as tomllib

from noticekit.errors import MappingDocumentError
from noticekit.mapping._model import MappingDocument, MappingEntry, VersionConstraint, VersionType

__all__ = [
    'parse_mapping_document',
    'parse_toml_mapping',
    'parse_xml_mapping',
]

_ROOT_TAG = 'license-lookup'


def _local(tag: str) -> str:
    """Strip an ElementTree ``{namespace}`` prefix from *tag*."""
    return tag.rsplit('}', 1)[-1]


def _constraint(value: str, type_name: str, where: str, errors: list[str]) -> VersionConstraint | None:
    try:
        version_type = VersionType(type_name.strip().lower() or VersionType.EXACT.value)
    except ValueError:
        errors.append(f'{where}: unknown version type {type_name!r} (expected "exact" or "regex")')
        return None
    value = value.strip()
    if not value:
        errors.append(f'{where}: empty version')
        return None
    if version_type is VersionType.EXACT:
        return VersionConstraint.exact(value)
    try:
        return VersionConstraint.regex(value)
    except re.error as exc:
        errors.append(f'{where}: invalid version pattern {value!r}: {exc}')
        return None


def parse_xml_mapping(location: str, data: bytes) -> MappingDocument:
    """Parse an XML ``license-lookup`` document.

    Raises:
        MappingDocumentError: If the document is malformed.
    """
    try:
        root = ElementTree.fromstring(data)  # noqa: S314
    except ElementTree.ParseError as exc:
        raise MappingDocumentError(location, [f'malformed XML: {exc}']) from exc

    if _local(root.tag) != _ROOT_TAG:
        raise MappingDocumentError(location, [f'root element must be <{_ROOT_TAG}>, found <{_local(root.tag)}>'])

    errors: list[str] = []
    entries: list[MappingEntry] = []
    for index, artifact_el in enumerate(e for e in root if _local(e.tag) == 'artifact'):
        where = f'artifact[{index}]'
        fields: dict[str, str] = {}
        versions: list[VersionConstraint] = []
        for child in artifact_el:
            tag = _local(child.tag)
            text = child.text or ''
            if tag == 'version':
                constraint = _constraint(text, child.get('type', ''), where, errors)
                if constraint is not None:
                    versions.append(constraint)
            elif tag in ('groupId', 'artifactId', 'name', 'license'):
                fields[tag] = text.strip()
        if not fields.get('groupId') or not fields.get('artifactId'):
            errors.append(f'{where}: groupId and artifactId are required')
            continue
        entries.append(
            MappingEntry(
                group_id=fields['groupId'],
                artifact_id=fields['artifactId'],
                name=fields.get('name', ''),
                license=fields.get('license', ''),
                versions=tuple(versions),
                source=location,
            )
        )

    if errors:
        raise MappingDocumentError(location, errors)
    return MappingDocument(location=location, entries=tuple(entries))


def _toml_versions(raw: Any, where: str, errors: list[str]) -> list[VersionConstraint]:  # noqa: ANN401
    if raw is None:
        return []
    items = [raw] if isinstance(raw, (str, dict)) else raw
    if not isinstance(items, list):
        errors.append(f'{where}.version must be a string, a table or a list')
        return []
    constraints: list[VersionConstraint] = []
    for i, item in enumerate(items):
        item_where = f'{where}.version[{i}]'
        if isinstance(item, str):
            constraint = _constraint(item, VersionType.EXACT.value, item_where, errors)
        elif isinstance(item, dict):
            value = item.get('value')
            type_name = item.get('type', VersionType.EXACT.value)
            if not isinstance(value, str) or not isinstance(type_name, str):
                errors.append(f'{item_where} must have string "value" and "type" keys')
                continue
            constraint = _constraint(value, type_name, item_where, errors)
        else:
            errors.append(f'{item_where} must be a string or a table')
            continue
        if constraint is not None:
            constraints.append(constraint)
    return constraints


def parse_toml_mapping(location: str, data: bytes) -> MappingDocument:
    """Parse a TOML mapping document.

    Raises:
        MappingDocumentError: If the document is malformed.
    """
    try:
        doc = tomllib.loads(data.decode('utf-8'))
    except (tomllib.TOMLDecodeError, UnicodeDecodeError) as exc:
        raise MappingDocumentError(location, [f'malformed TOML: {exc}']) from exc

    raw_entries = doc.get('artifact', [])
    if not isinstance(raw_entries, list):
        raise MappingDocumentError(location, ['"artifact" must be an array of tables'])

    errors: list[str] = []
    entries: list[MappingEntry] = []
    for index, raw in enumerate(raw_entries):
        where = f'artifact[{index}]'
        if not isinstance(raw, dict):
            errors.append(f'{where} must be a table')
            continue
        group_id = raw.get('group_id')
        artifact_id = raw.get('artifact_id')
        if not isinstance(group_id, str) or not isinstance(artifact_id, str) or not group_id or not artifact_id:
            errors.append(f'{where}: group_id and artifact_id are required strings')
            continue
        name = raw.get('name', '')
        license_name = raw.get('license', '')
        if not isinstance(name, str) or not isinstance(license_name, str):
            errors.append(f'{where}: name and license must be strings')
            continue
        entries.append(
            MappingEntry(
                group_id=group_id.strip(),
                artifact_id=artifact_id.strip(),
                name=name.strip(),
                license=license_name.strip(),
                versions=tuple(_toml_versions(raw.get('version'), where, errors)),
                source=location,
            )
        )

    if errors:
        raise MappingDocumentError(location, errors)
    return MappingDocument(location=location, entries=tuple(entries))


def parse_mapping_document(location: str, data: bytes) -> MappingDocument:
    """Parse *data* as XML or TOML depending on *location*'s suffix."""
    if location.lower().endswith('.toml'):
        return parse_toml_mapping(location, data)
    return parse_xml_mapping(location, data)
