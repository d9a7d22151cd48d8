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

r"""License mapping store.

User-authored mapping documents override the display name and license
of specific artifacts, optionally restricted to exact versions or
version patterns.

Usage::

    from noticekit.mapping import MappingDocumentCache, load_mapping_index

    cache = MappingDocumentCache()
    index = load_mapping_index(['license-mappings.xml'], finder, cache)

    r = index.lookup('org.codehaus.plexus', 'plexus-container-default', '1.0.0')
    assert r.kind == MatchKind.REGEX
    assert r.entry.license == 'Apache Software License 2.0'
"""

from noticekit.mapping._cache import DEFAULT_CACHE_SIZE, MappingDocumentCache
from noticekit.mapping._index import MappingIndex, load_mapping_index
from noticekit.mapping._model import (
    MappingDocument,
    MappingEntry,
    MatchKind,
    ResolvedMapping,
    VersionConstraint,
    VersionType,
)
from noticekit.mapping._parse import parse_mapping_document, parse_toml_mapping, parse_xml_mapping
from noticekit.mapping._stub import STUB_FILE_NAME, render_stub_mapping, write_stub_mapping

__all__ = [
    'DEFAULT_CACHE_SIZE',
    'MappingDocument',
    'MappingDocumentCache',
    'MappingEntry',
    'MappingIndex',
    'MatchKind',
    'ResolvedMapping',
    'STUB_FILE_NAME',
    'VersionConstraint',
    'VersionType',
    'load_mapping_index',
    'parse_mapping_document',
    'parse_toml_mapping',
    'parse_xml_mapping',
    'render_stub_mapping',
    'write_stub_mapping',
]
