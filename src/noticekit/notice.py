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

r"""Write or verify the rendered NOTICE file.

Check mode compares line content only, so a NOTICE committed with
``\r\n`` endings still matches output rendered with ``\n``.  On a
mismatch the rendered contents are saved next to the build output and
the difference is reported in ``diff``'s normal format, with the
expected contents as the original side::

    3c3
    <   Guava under Apache 2
    ---
    >   Guava under Apache License 2.0
"""

from __future__ import annotations

import difflib
from pathlib import Path

from noticekit.errors import NoticeMismatchError, NoticeWriteError
from noticekit.logging import get_logger
from noticekit.render import split_lines

__all__ = [
    'EXPECTED_FILE_NAME',
    'check_notice',
    'diff_lines',
    'write_notice',
]

log = get_logger('noticekit.notice')

EXPECTED_FILE_NAME = 'NOTICE.expected'

_CHANGE_TYPES = {'replace': 'c', 'delete': 'd', 'insert': 'a'}


def _range(start: int, end: int) -> str:
    if end - start > 1:
        return f'{start + 1},{end}'
    return str(start + 1)


def diff_lines(expected: list[str], actual: list[str]) -> str:
    """Return a normal-format diff from *expected* to *actual* (empty if equal)."""
    out: list[str] = []
    matcher = difflib.SequenceMatcher(a=expected, b=actual, autojunk=False)
    for tag, i1, i2, j1, j2 in matcher.get_opcodes():
        if tag == 'equal':
            continue
        out.append(f'{_range(i1, i2)}{_CHANGE_TYPES[tag]}{_range(j1, j2)}\n')
        out.extend(f'< {line}\n' for line in expected[i1:i2])
        out.append('---\n')
        out.extend(f'> {line}\n' for line in actual[j1:j2])
    return ''.join(out)


def write_notice(path: Path, contents: str, encoding: str = 'UTF-8') -> None:
    """Write *contents* to *path*, creating parent directories.

    Raises:
        NoticeWriteError: If the file cannot be written.
    """
    try:
        path.parent.mkdir(parents=True, exist_ok=True)
        # newline='' keeps the separators chosen by the renderer.
        with path.open('w', encoding=encoding, newline='') as f:
            f.write(contents)
    except (OSError, LookupError) as exc:
        raise NoticeWriteError(f'Failed to write NOTICE file to: {path}: {exc}') from exc
    log.info('notice_written', path=str(path))


def check_notice(path: Path, contents: str, encoding: str, expected_path: Path) -> None:
    """Verify that *path* holds *contents*.

    Args:
        path: The committed NOTICE file.
        contents: Freshly rendered NOTICE contents.
        encoding: Encoding of *path*.
        expected_path: Where *contents* are saved on a mismatch.

    Raises:
        NoticeMismatchError: If *path* is missing, unreadable, or differs.
    """
    if not path.exists():
        raise NoticeMismatchError(f'No NOTICE file exists at: {path}', notice_path=path)
    try:
        existing = path.read_text(encoding=encoding)
    except (OSError, LookupError, UnicodeDecodeError) as exc:
        raise NoticeMismatchError(f'Failed to read existing NOTICE File from: {path}: {exc}', notice_path=path) from exc

    diff = diff_lines(split_lines(contents), split_lines(existing))
    if not diff:
        log.info('notice_up_to_date', path=str(path))
        return

    try:
        expected_path.parent.mkdir(parents=True, exist_ok=True)
        with expected_path.open('w', encoding=encoding, newline='') as f:
            f.write(contents)
    except (OSError, LookupError) as exc:
        log.warning('expected_notice_write_failed', path=str(expected_path), error=str(exc))

    message = f"Existing NOTICE file '{path}' doesn't match expected NOTICE file: {expected_path}"
    log.error('notice_mismatch', path=str(path), expected=str(expected_path), diff=diff)
    raise NoticeMismatchError(message, notice_path=path, expected_path=expected_path, diff=diff)
