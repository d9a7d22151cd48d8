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

"""Tests for the per-module runner and the concurrent build driver."""

from __future__ import annotations

import asyncio
import os
from pathlib import Path
from typing import Any
from unittest.mock import patch

import pytest
from noticekit._types import Project
from noticekit.config import NoticeConfig, parse_config
from noticekit.errors import ConfigError, NoticeMismatchError, ResourceNotFoundError, UnresolvedArtifactsError
from noticekit.graph import parse_project
from noticekit.mapping import STUB_FILE_NAME, MappingDocumentCache, parse_mapping_document
from noticekit.runner import Mode, NoticeRunner, run_build

# ── Helpers ──────────────────────────────────────────────────────────

MAPPINGS = """
[[artifact]]
group_id = "org.example"
artifact_id = "app"
name = "Example App"
license = "Apache-2.0"

[[artifact]]
group_id = "org.example"
artifact_id = "app-core"
name = "Example Core"
license = "Apache-2.0"

[[artifact]]
group_id = "org.slf4j"
artifact_id = "slf4j-api"
version = ["2.0.9"]
name = "SLF4J API"
license = "MIT"

[[artifact]]
group_id = "com.google.guava"
artifact_id = "guava"
name = "Guava"
license = "Apache-2.0"
"""


def _graph(*, extra_dep: dict[str, Any] | None = None) -> dict[str, Any]:
    deps: list[dict[str, Any]] = [
        {'groupId': 'org.slf4j', 'artifactId': 'slf4j-api', 'version': '2.0.9', 'scope': 'compile'},
    ]
    if extra_dep is not None:
        deps.append(extra_dep)
    return {
        'groupId': 'org.example',
        'artifactId': 'app',
        'version': '1.0',
        'name': 'app',
        'dependencies': deps,
        'modules': [
            {
                'groupId': 'org.example',
                'artifactId': 'app-core',
                'version': '1.0',
                'dependencies': [{'groupId': 'com.google.guava', 'artifactId': 'guava', 'version': '33.0'}],
            },
        ],
    }


def _setup(tmp_path: Path, **graph_kwargs: Any) -> Project:  # noqa: ANN401
    (tmp_path / 'license-mappings.toml').write_text(MAPPINGS, encoding='utf-8')
    return parse_project(_graph(**graph_kwargs), tmp_path)


def _config(**raw: Any) -> NoticeConfig:  # noqa: ANN401
    raw.setdefault('license_mapping', ['license-mappings.toml'])
    return parse_config(raw)


def _notice_lines(path: Path) -> list[str]:
    return path.read_text(encoding='utf-8').splitlines()


# ── NoticeRunner.run ─────────────────────────────────────────────────


class TestNoticeRunner:
    """Tests for NoticeRunner.run."""

    def test_generate(self, tmp_path: Path) -> None:
        """Generate writes a NOTICE aggregating all modules."""
        project = _setup(tmp_path)
        path = NoticeRunner(_config()).run(project)
        assert path == tmp_path / 'NOTICE'
        lines = _notice_lines(path)
        assert lines[0] == 'This product includes software developed by third parties.'
        assert lines[3:7] == [
            '  Example App under Apache-2.0',
            '  Example Core under Apache-2.0',
            '  Guava under Apache-2.0',
            '  SLF4J API under MIT',
        ]

    def test_uses_platform_line_separator(self, tmp_path: Path) -> None:
        """Generated files use the platform line separator."""
        project = _setup(tmp_path)
        path = NoticeRunner(_config()).run(project)
        assert path is not None
        assert path.read_bytes().count(os.linesep.encode()) >= 7

    def test_generate_then_check(self, tmp_path: Path) -> None:
        """A freshly generated NOTICE passes the check."""
        project = _setup(tmp_path)
        NoticeRunner(_config(), Mode.GENERATE).run(project)
        assert NoticeRunner(_config(), Mode.CHECK).run(project) == tmp_path / 'NOTICE'

    def test_check_stale(self, tmp_path: Path) -> None:
        """A stale NOTICE fails the check and leaves NOTICE.expected."""
        project = _setup(tmp_path)
        (tmp_path / 'NOTICE').write_text('outdated\n', encoding='utf-8')
        with pytest.raises(NoticeMismatchError) as exc_info:
            NoticeRunner(_config(), Mode.CHECK).run(project)
        assert exc_info.value.expected_path == tmp_path / 'target' / 'NOTICE.expected'
        assert (tmp_path / 'target' / 'NOTICE.expected').is_file()
        assert '> outdated' in exc_info.value.diff

    def test_check_missing(self, tmp_path: Path) -> None:
        """Check mode fails when there is no NOTICE."""
        with pytest.raises(NoticeMismatchError, match='No NOTICE file exists'):
            NoticeRunner(_config(), Mode.CHECK).run(_setup(tmp_path))

    def test_unresolved(self, tmp_path: Path) -> None:
        """Unresolved artifacts fail the run after writing a stub mapping."""
        project = _setup(tmp_path, extra_dep={'groupId': 'com.mystery', 'artifactId': 'lib', 'version': '0.1'})
        with pytest.raises(UnresolvedArtifactsError, match='Failed to find Licenses for 1 artifacts') as exc_info:
            NoticeRunner(_config()).run(project)
        err = exc_info.value
        assert [a.artifact_id for a in err.artifacts] == ['lib']
        assert err.stub_path == tmp_path / 'target' / STUB_FILE_NAME
        assert 'com.mystery' in err.stub_path.read_text(encoding='utf-8')
        assert not (tmp_path / 'NOTICE').exists()

    def test_skip(self, tmp_path: Path) -> None:
        """The skip flag does nothing."""
        project = _setup(tmp_path)
        assert NoticeRunner(_config(skip=True)).run(project) is None
        assert not (tmp_path / 'NOTICE').exists()

    def test_skip_precedes_config_validation(self, tmp_path: Path) -> None:
        """A skipped run does not validate mapping settings."""
        cfg = _config(license_lookup=['old.xml'])
        assert NoticeRunner(cfg.with_overrides(skip=True)).run(_setup(tmp_path)) is None

    def test_conflicting_mapping_settings(self, tmp_path: Path) -> None:
        """license_lookup together with license_mapping is rejected."""
        cfg = _config(license_lookup=['old.xml'])
        with pytest.raises(ConfigError, match='Only one may be used'):
            NoticeRunner(cfg).run(_setup(tmp_path))

    def test_deprecated_lookup_used(self, tmp_path: Path) -> None:
        """license_lookup alone still works."""
        cfg = _config(license_mapping=[], license_lookup=['license-mappings.toml'])
        assert NoticeRunner(cfg).run(_setup(tmp_path)) == tmp_path / 'NOTICE'

    def test_child_notices_disabled(self, tmp_path: Path) -> None:
        """Non-root modules are skipped when child notices are disabled."""
        project = _setup(tmp_path)
        runner = NoticeRunner(_config(generate_child_notices=False))
        assert runner.run(project.modules[0]) is None
        assert runner.run(project) == tmp_path / 'NOTICE'

    def test_output_dir_and_name(self, tmp_path: Path) -> None:
        """output_dir is relative to the module and file_name names the file."""
        project = _setup(tmp_path)
        path = NoticeRunner(_config(output_dir='dist', file_name='NOTICE.txt')).run(project)
        assert path == tmp_path / 'dist' / 'NOTICE.txt'
        assert path.is_file()

    def test_custom_template(self, tmp_path: Path) -> None:
        """A template found next to the module replaces the bundled one."""
        project = _setup(tmp_path)
        (tmp_path / 'MY.template').write_text('Deps:\n@@\nEnd\n', encoding='utf-8')
        path = NoticeRunner(_config(notice_template='MY.template', notice_template_placeholder='@@')).run(project)
        assert path is not None
        lines = _notice_lines(path)
        assert lines[0] == 'Deps:'
        assert lines[-1] == 'End'

    def test_missing_template(self, tmp_path: Path) -> None:
        """An unknown template location fails the run."""
        with pytest.raises(ResourceNotFoundError):
            NoticeRunner(_config(notice_template='nope.template')).run(_setup(tmp_path))

    def test_offline_never_fetches(self, tmp_path: Path) -> None:
        """Offline runs treat http(s) locations as missing without a request."""
        cfg = _config(license_mapping=['https://example.com/license-mappings.toml'], offline=True)
        with patch('httpx.Client', side_effect=AssertionError('network used')):
            with pytest.raises(ResourceNotFoundError, match='example.com'):
                NoticeRunner(cfg).run(_setup(tmp_path))

    def test_exclude_scopes(self, tmp_path: Path) -> None:
        """Scope filters apply to the rendered lines."""
        project = _setup(tmp_path)
        path = NoticeRunner(_config(exclude_scopes=['compile'])).run(project)
        assert path is not None
        assert '  SLF4J API under MIT' not in _notice_lines(path)


# ── run_build ────────────────────────────────────────────────────────


class TestRunBuild:
    """Tests for run_build."""

    def test_runs_every_module(self, tmp_path: Path) -> None:
        """The root and each module get their own NOTICE."""
        project = _setup(tmp_path)
        paths = asyncio.run(run_build(project, NoticeRunner(_config()), jobs=2))
        assert paths == [tmp_path / 'NOTICE', tmp_path / 'app-core' / 'NOTICE']
        core_lines = _notice_lines(tmp_path / 'app-core' / 'NOTICE')
        assert '  Guava under Apache-2.0' in core_lines
        assert '  SLF4J API under MIT' not in core_lines

    def test_shared_cache_parses_once(self, tmp_path: Path) -> None:
        """Modules share one parsed copy of each mapping document."""
        project = _setup(tmp_path)
        cache = MappingDocumentCache()
        with patch('noticekit.mapping._index.parse_mapping_document', wraps=parse_mapping_document) as parse:
            asyncio.run(run_build(project, NoticeRunner(_config(), cache=cache)))
        assert parse.call_count == 1
        assert len(cache) == 1

    def test_first_failure_reraised(self, tmp_path: Path) -> None:
        """A failing module fails the build after every module ran."""
        project = _setup(tmp_path)
        (tmp_path / 'license-mappings.toml').write_text(
            MAPPINGS.replace('artifact_id = "guava"', 'artifact_id = "guava-renamed"'), encoding='utf-8'
        )
        with pytest.raises(UnresolvedArtifactsError):
            asyncio.run(run_build(project, NoticeRunner(_config())))
        assert (tmp_path / 'target' / STUB_FILE_NAME).is_file()
        assert (tmp_path / 'app-core' / 'target' / STUB_FILE_NAME).is_file()

    def test_skipped_modules_not_listed(self, tmp_path: Path) -> None:
        """Skipped child modules are not reported."""
        project = _setup(tmp_path)
        paths = asyncio.run(run_build(project, NoticeRunner(_config(generate_child_notices=False))))
        assert paths == [tmp_path / 'NOTICE']
