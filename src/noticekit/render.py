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

r"""Render resolved licenses into NOTICE text.

Message templates use positional ``{N}`` arguments.  Single quotes
quote literal text, so ``'{0}'`` renders a literal ``{0}`` and ``''``
renders one quote character.

Notice line arguments:

    ┌─────┬──────────────────────────────────────────┐
    │ Arg │ Value                                    │
    ├─────┼──────────────────────────────────────────┤
    │ {0} │ Display name                             │
    │ {1} │ License name                             │
    │ {2} │ Group id                                 │
    │ {3} │ Artifact id                              │
    │ {4} │ Version                                  │
    │ {5} │ Organization name                        │
    │ {6} │ Organization URL                         │
    │ {7} │ Copyright line (``copyright_message``)   │
    └─────┴──────────────────────────────────────────┘

The copyright template gets ``{0}`` inception year, ``{1}`` organization
name and ``{2}`` organization URL.  The license summary template gets
``{0}`` the 1-based row number, ``{1}`` the license name and ``{2}`` the
number of artifacts under it.
"""

from __future__ import annotations

import functools
import os
import re
from collections.abc import Iterable, Sequence
from dataclasses import dataclass

from noticekit._types import ArtifactLicenseInfo

__all__ = [
    'DEFAULT_NOTICE_MESSAGE',
    'NoticeRenderer',
    'RenderOptions',
    'compile_message',
    'format_message',
    'normalize_line_endings',
    'split_lines',
]

DEFAULT_NOTICE_MESSAGE = '  {0} under {1}'
DEFAULT_NOTICE_PLACEHOLDER = '#GENERATED_NOTICES#'
DEFAULT_SUMMARY_PLACEHOLDER = '#GENERATED_LICENSE_SUMMARY#'


@functools.lru_cache(maxsize=64)
def compile_message(pattern: str) -> tuple[str | int, ...]:
    """Split *pattern* into literal chunks and argument indexes.

    Raises:
        ValueError: On an unmatched brace or a non-numeric argument.
    """
    parts: list[str | int] = []
    literal: list[str] = []
    quoted = False
    i = 0
    n = len(pattern)
    while i < n:
        ch = pattern[i]
        if ch == "'":
            if i + 1 < n and pattern[i + 1] == "'":
                literal.append("'")
                i += 2
                continue
            quoted = not quoted
        elif quoted:
            literal.append(ch)
        elif ch == '{':
            end = pattern.find('}', i)
            if end < 0:
                raise ValueError(f'Unmatched braces in message pattern: {pattern!r}')
            # Format types such as {0,number} are accepted and ignored.
            index = pattern[i + 1 : end].split(',', 1)[0].strip()
            if not index.isdigit():
                raise ValueError(f'Invalid argument {pattern[i : end + 1]!r} in message pattern: {pattern!r}')
            if literal:
                parts.append(''.join(literal))
                literal = []
            parts.append(int(index))
            i = end + 1
            continue
        elif ch == '}':
            raise ValueError(f'Unmatched braces in message pattern: {pattern!r}')
        else:
            literal.append(ch)
        i += 1
    if literal:
        parts.append(''.join(literal))
    return tuple(parts)


def format_message(pattern: str, args: Sequence[object | None]) -> str:
    """Substitute positional *args* into *pattern*.

    Arguments beyond ``len(args)`` render as ``{N}``; ``None`` renders
    as an empty string.

    >>> format_message("  {0} under {1}", ["Guava", "Apache 2"])
    '  Guava under Apache 2'
    >>> format_message("'{0}' is ''{0}''", ["x"])
    "{0} is 'x'"
    """
    out: list[str] = []
    for part in compile_message(pattern):
        if isinstance(part, str):
            out.append(part)
        elif part >= len(args):
            out.append(f'{{{part}}}')
        else:
            value = args[part]
            out.append('' if value is None else str(value))
    return ''.join(out)


_LINE_BREAK = re.compile(r'\r\n|\r|\n')


def split_lines(text: str) -> list[str]:
    """Split *text* on ``\\r\\n``, ``\\r`` and ``\\n`` only.

    Unlike :meth:`str.splitlines`, form feeds and Unicode line separators
    stay part of the line.  A final terminator does not start a new line.
    """
    lines = _LINE_BREAK.split(text)
    if lines[-1] == '':
        lines.pop()
    return lines


def normalize_line_endings(text: str, linesep: str = os.linesep) -> str:
    """Return *text* with every line terminated by *linesep*."""
    return ''.join(line + linesep for line in split_lines(text))


@dataclass(frozen=True)
class RenderOptions:
    """Templates and filters used by :class:`NoticeRenderer`.

    Attributes:
        notice_message: Template for one line per artifact.
        copyright_message: Template for the ``{7}`` copyright argument.
        license_summary_message: Template for one summary line per license.
        notice_placeholder: Template text replaced with the notice lines.
        summary_placeholder: Template text replaced with the summary.
        include_scopes: If non-empty, only these scopes are rendered.
        exclude_scopes: Scopes that are never rendered.
        exclude_optional: Drop effectively optional artifacts.
    """

    notice_message: str = DEFAULT_NOTICE_MESSAGE
    copyright_message: str = ''
    license_summary_message: str = ''
    notice_placeholder: str = DEFAULT_NOTICE_PLACEHOLDER
    summary_placeholder: str = DEFAULT_SUMMARY_PLACEHOLDER
    include_scopes: frozenset[str] = frozenset()
    exclude_scopes: frozenset[str] = frozenset()
    exclude_optional: bool = False


class NoticeRenderer:
    """Turns resolved rows into notice lines and fills the template."""

    def __init__(self, options: RenderOptions | None = None, *, linesep: str = os.linesep) -> None:
        self.options = options or RenderOptions()
        self.linesep = linesep

    def is_rendered(self, info: ArtifactLicenseInfo) -> bool:
        """Return whether *info* passes the scope and optional filters."""
        opts = self.options
        if opts.include_scopes and (not info.scope or info.scope not in opts.include_scopes):
            return False
        if opts.exclude_scopes and info.scope and info.scope in opts.exclude_scopes:
            return False
        return not (opts.exclude_optional and info.optional)

    def copyright_line(self, info: ArtifactLicenseInfo) -> str | None:
        """Render the copyright template, if enough metadata is known."""
        metadata = info.metadata
        if not self.options.copyright_message or metadata is None or metadata.organization is None:
            return None
        org = metadata.organization
        if not metadata.inception_year or not org.name:
            return None
        return format_message(self.options.copyright_message, [metadata.inception_year, org.name, org.url or None])

    def _line_args(self, info: ArtifactLicenseInfo) -> list[object | None]:
        artifact = info.artifact
        metadata = info.metadata
        org = metadata.organization if metadata is not None else None
        return [
            info.name,
            info.license,
            artifact.group_id if artifact else None,
            artifact.artifact_id if artifact else None,
            artifact.version if artifact else None,
            org.name or None if org else None,
            org.url or None if org else None,
            self.copyright_line(info),
        ]

    def render_lines(self, results: Iterable[ArtifactLicenseInfo]) -> str:
        """Render one line per rendered row, in iteration order."""
        return ''.join(
            format_message(self.options.notice_message, self._line_args(info)) + self.linesep
            for info in results
            if self.is_rendered(info)
        )

    def render_summary(self, results: Iterable[ArtifactLicenseInfo]) -> str:
        """Render the per-license count table.

        Licenses are grouped ignoring case (the first spelling seen is
        displayed) and sorted by name.
        """
        counts: dict[str, int] = {}
        spelling: dict[str, str] = {}
        for info in results:
            if not self.is_rendered(info):
                continue
            key = info.license.lower()
            spelling.setdefault(key, info.license)
            counts[key] = counts.get(key, 0) + 1
        template = self.options.license_summary_message or '{1}: {2}'
        return ''.join(
            format_message(template, [number, spelling[key], counts[key]]) + self.linesep
            for number, key in enumerate(sorted(counts), start=1)
        )

    def render(self, template: str, results: Iterable[ArtifactLicenseInfo]) -> str:
        """Fill *template* with the notice lines and license summary.

        Only the first occurrence of each placeholder is replaced.
        """
        rows = list(results)
        contents = normalize_line_endings(template, self.linesep)
        contents = contents.replace(self.options.notice_placeholder, self.render_lines(rows), 1)
        placeholder = self.options.summary_placeholder
        if placeholder and placeholder in contents:
            contents = contents.replace(placeholder, self.render_summary(rows), 1)
        return contents
