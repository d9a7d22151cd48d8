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

r"""Load and validate noticekit configuration.

Configuration is read from ``noticekit.toml`` (keys at the top level)
or from the ``[tool.noticekit]`` table of ``pyproject.toml``::

    # noticekit.toml
    license_mapping = ["license-mappings.xml", "https://example.com/shared.xml"]
    exclude_scopes = ["test"]
    notice_message = "  {0} ({2}:{3}:{4}) under {1}"
    excluded_modules = ["app-samples"]

    [license_aliases]
    "The Apache Software License, Version 2.0" = "Apache License, Version 2.0"

Keys:

    ┌──────────────────────────────┬──────────┬───────────────────────────────┐
    │ Key                          │ Type     │ Default                       │
    ├──────────────────────────────┼──────────┼───────────────────────────────┤
    │ license_mapping              │ [str]    │ []                            │
    │ license_lookup (deprecated)  │ [str]    │ []                            │
    │ skip                         │ bool     │ false                         │
    │ notice_template              │ str      │ "NOTICE.template"             │
    │ notice_template_placeholder  │ str      │ "#GENERATED_NOTICES#"         │
    │ include_scopes               │ [str]    │ []                            │
    │ exclude_scopes               │ [str]    │ []                            │
    │ exclude_optional             │ bool     │ false                         │
    │ include_child_dependencies   │ bool     │ true                          │
    │ generate_child_notices       │ bool     │ true                          │
    │ excluded_modules             │ [str]    │ []                            │
    │ notice_message               │ str      │ "  {0} under {1}"             │
    │ copyright_message            │ str      │ ""                            │
    │ license_summary_message      │ str      │ ""                            │
    │ license_summary_placeholder  │ str      │ "#GENERATED_LICENSE_SUMMARY#" │
    │ license_aliases              │ {str}    │ {}                            │
    │ output_dir                   │ str      │ "" (module base dir)          │
    │ file_name                    │ str      │ "NOTICE"                      │
    │ encoding                     │ str      │ "UTF-8"                       │
    │ resource_paths               │ [str]    │ []                            │
    │ local_repository             │ str      │ "~/.m2/repository"            │
    │ repositories                 │ [str]    │ [Maven Central]               │
    │ offline                      │ bool     │ false                         │
    │ jobs                         │ int      │ 4                             │
    └──────────────────────────────┴──────────┴───────────────────────────────┘

Relative ``resource_paths`` and ``local_repository`` are resolved
against the directory holding the configuration file.
"""

from __future__ import annotations

import codecs
import dataclasses
import sys
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Final

from noticekit.errors import ConfigError
from noticekit.metadata import DEFAULT_LOCAL_REPOSITORY, DEFAULT_REMOTE_REPOSITORY
from noticekit.render import (
    DEFAULT_NOTICE_MESSAGE,
    DEFAULT_NOTICE_PLACEHOLDER,
    DEFAULT_SUMMARY_PLACEHOLDER,
    RenderOptions,
    compile_message,
)

if sys.version_info >= (3, 11):
    import tomllib
else:
    import tomli as tomllib

__all__ = [
    'CONFIG_FILENAME',
    'NoticeConfig',
    'find_config_file',
    'load_config',
    'parse_config',
]

CONFIG_FILENAME: Final[str] = 'noticekit.toml'
PYPROJECT_FILENAME: Final[str] = 'pyproject.toml'


@dataclass(frozen=True)
class NoticeConfig:
    """Validated noticekit settings.

    See the module docstring for the meaning and defaults of each field.
    """

    license_mapping: tuple[str, ...] = ()
    license_lookup: tuple[str, ...] = ()
    skip: bool = False
    notice_template: str = 'NOTICE.template'
    notice_template_placeholder: str = DEFAULT_NOTICE_PLACEHOLDER
    include_scopes: frozenset[str] = frozenset()
    exclude_scopes: frozenset[str] = frozenset()
    exclude_optional: bool = False
    include_child_dependencies: bool = True
    generate_child_notices: bool = True
    excluded_modules: tuple[str, ...] = ()
    notice_message: str = DEFAULT_NOTICE_MESSAGE
    copyright_message: str = ''
    license_summary_message: str = ''
    license_summary_placeholder: str = DEFAULT_SUMMARY_PLACEHOLDER
    license_aliases: dict[str, str] = field(default_factory=dict, hash=False)
    output_dir: str = ''
    file_name: str = 'NOTICE'
    encoding: str = 'UTF-8'
    resource_paths: tuple[Path, ...] = ()
    local_repository: Path = DEFAULT_LOCAL_REPOSITORY
    repositories: tuple[str, ...] = (DEFAULT_REMOTE_REPOSITORY,)
    offline: bool = False
    jobs: int = 4

    def with_overrides(self, **overrides: Any) -> NoticeConfig:  # noqa: ANN401
        """Return a copy with *overrides* applied; ``None`` values are ignored."""
        changes = {k: v for k, v in overrides.items() if v is not None}
        return dataclasses.replace(self, **changes) if changes else self

    def render_options(self) -> RenderOptions:
        """Return the renderer settings carried by this configuration."""
        return RenderOptions(
            notice_message=self.notice_message,
            copyright_message=self.copyright_message,
            license_summary_message=self.license_summary_message,
            notice_placeholder=self.notice_template_placeholder,
            summary_placeholder=self.license_summary_placeholder,
            include_scopes=self.include_scopes,
            exclude_scopes=self.exclude_scopes,
            exclude_optional=self.exclude_optional,
        )


_BOOL_KEYS = frozenset({
    'skip',
    'exclude_optional',
    'include_child_dependencies',
    'generate_child_notices',
    'offline',
})
_STR_KEYS = frozenset({
    'notice_template',
    'notice_template_placeholder',
    'copyright_message',
    'license_summary_message',
    'license_summary_placeholder',
    'output_dir',
    'file_name',
    'encoding',
    'local_repository',
})
_LIST_KEYS = frozenset({
    'license_mapping',
    'license_lookup',
    'include_scopes',
    'exclude_scopes',
    'excluded_modules',
    'resource_paths',
    'repositories',
})
_TEMPLATE_KEYS = ('notice_message', 'copyright_message', 'license_summary_message')
VALID_KEYS: Final[frozenset[str]] = (
    _BOOL_KEYS | _STR_KEYS | _LIST_KEYS | frozenset({'notice_message', 'license_aliases', 'jobs'})
)


def _str_list(key: str, value: object) -> list[str]:
    if not isinstance(value, list):
        raise ConfigError(f'notice.{key} must be a list of strings, got {type(value).__name__}')
    for i, item in enumerate(value):
        if not isinstance(item, str):
            raise ConfigError(f'notice.{key}[{i}] must be a string, got {type(item).__name__}')
    return value


def _resolve_path(value: str, base_dir: Path) -> Path:
    path = Path(value).expanduser()
    return path if path.is_absolute() else base_dir / path


def parse_config(raw: dict[str, Any], base_dir: Path | None = None) -> NoticeConfig:
    """Validate a decoded configuration table.

    Args:
        raw: The decoded TOML table.
        base_dir: Directory relative paths are resolved against
            (the current directory if omitted).

    Raises:
        ConfigError: For unknown keys or values of the wrong type.
    """
    base_dir = base_dir if base_dir is not None else Path.cwd()
    unknown = sorted(set(raw) - VALID_KEYS)
    if unknown:
        raise ConfigError(f'Unknown key(s) in noticekit configuration: {", ".join(unknown)}')

    kwargs: dict[str, Any] = {}
    for key, value in raw.items():
        if key in _BOOL_KEYS:
            if not isinstance(value, bool):
                raise ConfigError(f'notice.{key} must be a boolean, got {type(value).__name__}')
            kwargs[key] = value
        elif key in _STR_KEYS or key == 'notice_message':
            if not isinstance(value, str):
                raise ConfigError(f'notice.{key} must be a string, got {type(value).__name__}')
            kwargs[key] = value
        elif key in _LIST_KEYS:
            kwargs[key] = _str_list(key, value)
        elif key == 'license_aliases':
            if not isinstance(value, dict):
                raise ConfigError(f'notice.license_aliases must be a table, got {type(value).__name__}')
            for alias_key, alias in value.items():
                if not isinstance(alias, str):
                    raise ConfigError(f'notice.license_aliases.{alias_key} must be a string')
            kwargs[key] = dict(value)
        elif key == 'jobs':
            if not isinstance(value, int) or isinstance(value, bool):
                raise ConfigError(f'notice.jobs must be an integer, got {type(value).__name__}')
            if value < 1:
                raise ConfigError(f'notice.jobs must be at least 1, got {value}')
            kwargs[key] = value

    for key in _TEMPLATE_KEYS:
        if kwargs.get(key):
            try:
                compile_message(kwargs[key])
            except ValueError as exc:
                raise ConfigError(f'notice.{key} must be a valid message template: {exc}') from exc

    if 'encoding' in kwargs:
        try:
            codecs.lookup(kwargs['encoding'])
        except LookupError as exc:
            raise ConfigError(f'notice.encoding must name a known encoding, got {kwargs["encoding"]!r}') from exc

    if 'file_name' in kwargs and not kwargs['file_name'].strip():
        raise ConfigError('notice.file_name must not be empty')

    for key in ('license_mapping', 'license_lookup', 'excluded_modules', 'repositories'):
        if key in kwargs:
            kwargs[key] = tuple(kwargs[key])
    for key in ('include_scopes', 'exclude_scopes'):
        if key in kwargs:
            kwargs[key] = frozenset(kwargs[key])
    if 'resource_paths' in kwargs:
        kwargs['resource_paths'] = tuple(_resolve_path(p, base_dir) for p in kwargs['resource_paths'])
    if 'local_repository' in kwargs:
        kwargs['local_repository'] = _resolve_path(kwargs['local_repository'], base_dir)

    return NoticeConfig(**kwargs)


def find_config_file(start: Path) -> Path | None:
    """Return the nearest configuration file at or above *start*.

    ``noticekit.toml`` wins over ``pyproject.toml`` in the same
    directory; a ``pyproject.toml`` without ``[tool.noticekit]`` is
    skipped.
    """
    for directory in (start, *start.parents):
        candidate = directory / CONFIG_FILENAME
        if candidate.is_file():
            return candidate
        pyproject = directory / PYPROJECT_FILENAME
        if pyproject.is_file():
            try:
                with pyproject.open('rb') as f:
                    data = tomllib.load(f)
            except (OSError, tomllib.TOMLDecodeError):
                continue
            if 'noticekit' in data.get('tool', {}):
                return pyproject
    return None


def load_config(path: Path | None = None, *, start: Path | None = None) -> NoticeConfig:
    """Load configuration from *path*, or discover it upward from *start*.

    Returns the defaults if no configuration file is found.

    Raises:
        ConfigError: If the file cannot be read, is not valid TOML, or
            fails validation.
    """
    if path is None:
        path = find_config_file((start or Path.cwd()).resolve())
        if path is None:
            return NoticeConfig()
    try:
        with path.open('rb') as f:
            data = tomllib.load(f)
    except OSError as exc:
        raise ConfigError(f'Failed to read configuration {path}: {exc}') from exc
    except tomllib.TOMLDecodeError as exc:
        raise ConfigError(f'Invalid TOML in {path}: {exc}') from exc

    if path.name == PYPROJECT_FILENAME:
        data = data.get('tool', {}).get('noticekit', {})
        if not isinstance(data, dict):
            raise ConfigError(f'{path}: [tool.noticekit] must be a table')
    return parse_config(data, path.resolve().parent)
