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

r"""Generate or check the NOTICE file of each module in a build.

One run per module::

    config ──▶ mapping index ──▶ traverse ──▶ unresolved? ──▶ render ──▶ write / check
                                                  │
                                                  └──▶ stub mapping + UnresolvedArtifactsError

:func:`run_build` runs the root module and every descendant module
concurrently on worker threads, bounded by ``jobs``.  All runs share one
:class:`~noticekit.mapping.MappingDocumentCache`, so a mapping document
referenced by many modules is parsed once.
"""

from __future__ import annotations

import asyncio
import enum
from collections.abc import Callable
from pathlib import Path

from noticekit._types import Project
from noticekit.config import NoticeConfig
from noticekit.errors import ConfigError, UnresolvedArtifactsError
from noticekit.graph import DependencyGraphProvider, prebuilt_graph
from noticekit.logging import get_logger
from noticekit.mapping import MappingDocumentCache, load_mapping_index, write_stub_mapping
from noticekit.metadata import MetadataProvider
from noticekit.notice import EXPECTED_FILE_NAME, check_notice, write_notice
from noticekit.render import NoticeRenderer
from noticekit.resolver import LicenseResolver
from noticekit.resources import ResourceFinder
from noticekit.walker import TraversalResult, traverse

__all__ = [
    'FinderFactory',
    'Mode',
    'NoticeRunner',
    'run_build',
]

log = get_logger('noticekit.runner')

FinderFactory = Callable[[Project], ResourceFinder]


class Mode(str, enum.Enum):
    """What to do with the rendered NOTICE."""

    GENERATE = 'generate'
    CHECK = 'check'


class NoticeRunner:
    """Runs noticekit for one module at a time.

    Args:
        config: Validated settings.
        mode: Write the NOTICE file or compare against it.
        metadata: Provider of package metadata; ``None`` uses mappings only.
        cache: Mapping document cache shared across runs.
        finder_factory: Builds the resource finder for a module.
        graph_provider: Builds each module's dependency tree.
    """

    def __init__(
        self,
        config: NoticeConfig,
        mode: Mode = Mode.GENERATE,
        *,
        metadata: MetadataProvider | None = None,
        cache: MappingDocumentCache | None = None,
        finder_factory: FinderFactory | None = None,
        graph_provider: DependencyGraphProvider = prebuilt_graph,
    ) -> None:
        self.config = config
        self.mode = mode
        self.metadata = metadata
        self.cache = cache if cache is not None else MappingDocumentCache()
        self.finder_factory = finder_factory or self._default_finder
        self.graph_provider = graph_provider

    def _default_finder(self, project: Project) -> ResourceFinder:
        return ResourceFinder(project, self.config.resource_paths, offline=self.config.offline)

    def mapping_locations(self) -> tuple[str, ...]:
        """Return the configured mapping locations.

        Raises:
            ConfigError: If both ``license_mapping`` and the deprecated
                ``license_lookup`` are set.
        """
        config = self.config
        if not config.license_lookup:
            return config.license_mapping
        log.warning('license_lookup_deprecated', hint="use 'license_mapping' instead")
        if config.license_mapping:
            raise ConfigError(
                "Both 'license_mapping' and 'license_lookup' configuration properties configured. Only one may be used."
            )
        return config.license_lookup

    def output_path(self, project: Project) -> Path:
        """Return the NOTICE path for *project*."""
        output_dir = Path(self.config.output_dir)
        if not output_dir.is_absolute():
            output_dir = project.basedir / output_dir
        return output_dir / self.config.file_name

    def read_template(self, finder: ResourceFinder) -> str:
        """Load the NOTICE template.

        Raises:
            ResourceError: If the template cannot be found or decoded.
        """
        return finder.find(self.config.notice_template).read_text(self.config.encoding)

    def collect(self, project: Project, finder: ResourceFinder, locations: tuple[str, ...]) -> TraversalResult:
        """Resolve the licenses of every dependency of *project*."""
        index = load_mapping_index(locations, finder, self.cache)
        resolver = LicenseResolver(index, self.metadata, self.config.license_aliases)
        return traverse(
            project,
            resolver,
            include_children=self.config.include_child_dependencies,
            excluded_modules=self.config.excluded_modules,
            graph_provider=self.graph_provider,
        )

    def fail_unresolved(self, project: Project, result: TraversalResult) -> None:
        """Write the stub mapping and raise if anything is unresolved.

        Raises:
            UnresolvedArtifactsError: If *result* has unresolved artifacts.
        """
        if not result.unresolved:
            return
        artifacts = result.unresolved_artifacts
        for artifact in artifacts:
            log.error('license_not_found', project=project.name, artifact=str(artifact))
        log.error('license_not_found_hint', hint="Try adding them to a 'license_mapping' file.")
        stub_path = write_stub_mapping(artifacts, project.build_directory)
        raise UnresolvedArtifactsError(artifacts, stub_path)

    def run(self, project: Project) -> Path | None:
        """Generate or check *project*'s NOTICE file.

        Returns:
            The NOTICE path, or ``None`` if the module was skipped.

        Raises:
            NoticeKitError: For configuration, resource, graph, resolution
                or output failures.
        """
        if self.config.skip:
            log.info('notice_checks_skipped', project=project.name)
            return None

        locations = self.mapping_locations()

        if not self.config.generate_child_notices and not project.is_execution_root:
            log.debug('child_notice_skipped', project=project.name)
            return None

        finder = self.finder_factory(project)
        result = self.collect(project, finder, locations)
        self.fail_unresolved(project, result)

        renderer = NoticeRenderer(self.config.render_options())
        contents = renderer.render(self.read_template(finder), result.licenses)

        path = self.output_path(project)
        if self.mode is Mode.CHECK:
            check_notice(path, contents, self.config.encoding, project.build_directory / EXPECTED_FILE_NAME)
        else:
            write_notice(path, contents, self.config.encoding)
        log.info(
            'notice_done',
            project=project.name,
            mode=self.mode.value,
            path=str(path),
            licenses=len(result.licenses),
        )
        return path


async def run_build(project: Project, runner: NoticeRunner, *, jobs: int | None = None) -> list[Path]:
    """Run *runner* for *project* and every descendant module.

    Module runs execute on worker threads, at most ``jobs`` at a time
    (``config.jobs`` if omitted).  Every failure is logged; the first
    one, in module order, is re-raised once all runs have finished.

    Returns:
        NOTICE paths of the modules that were not skipped, in module order.
    """
    modules = [project, *project.iter_modules()]
    sem = asyncio.Semaphore(jobs or runner.config.jobs)

    async def _do_one(module: Project) -> Path | None:
        async with sem:
            return await asyncio.to_thread(runner.run, module)

    outcomes = await asyncio.gather(*[_do_one(m) for m in modules], return_exceptions=True)

    first_error: BaseException | None = None
    paths: list[Path] = []
    for module, outcome in zip(modules, outcomes):
        if isinstance(outcome, BaseException):
            log.error('module_failed', project=module.name, error=str(outcome))
            first_error = first_error or outcome
        elif outcome is not None:
            paths.append(outcome)
    if first_error is not None:
        raise first_error
    return paths
