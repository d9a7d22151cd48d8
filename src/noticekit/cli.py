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

"""Command-line entry point.

Usage::

    noticekit generate --graph build/dependency-graph.json
    noticekit check --graph build/dependency-graph.json --offline

Remote repository credentials are read from the environment:
``NOTICEKIT_REPOSITORY_USERNAME`` with ``NOTICEKIT_REPOSITORY_PASSWORD``
for basic auth, or ``NOTICEKIT_REPOSITORY_TOKEN`` for a bearer token.
"""

from __future__ import annotations

import argparse
import asyncio
import os
import sys
from collections.abc import Sequence
from pathlib import Path

import httpx
from rich.console import Console
from rich.markup import escape

from noticekit import __version__
from noticekit._types import Project
from noticekit.config import NoticeConfig, load_config
from noticekit.errors import NoticeKitError, NoticeMismatchError, UnresolvedArtifactsError
from noticekit.graph import load_project
from noticekit.logging import configure_logging, get_logger
from noticekit.mapping import MappingDocumentCache
from noticekit.metadata import (
    ChainMetadataProvider,
    LocalRepositoryMetadataProvider,
    MetadataProvider,
    RemoteRepositoryMetadataProvider,
)
from noticekit.resources import ResourceFinder
from noticekit.runner import Mode, NoticeRunner, run_build

__all__ = [
    'build_metadata_provider',
    'build_parser',
    'main',
    'run',
]

log = get_logger('noticekit.cli')

DEFAULT_GRAPH_FILE = 'dependency-graph.json'


def build_parser() -> argparse.ArgumentParser:
    """Return the ``noticekit`` argument parser."""
    parser = argparse.ArgumentParser(
        prog='noticekit',
        description='Generate or verify a NOTICE file listing third-party dependency licenses.',
    )
    parser.add_argument('--version', action='version', version=f'%(prog)s {__version__}')
    parser.add_argument(
        'mode',
        choices=[m.value for m in Mode],
        help='generate writes the NOTICE file; check fails if it is out of date.',
    )
    parser.add_argument(
        '--graph',
        type=Path,
        default=Path(DEFAULT_GRAPH_FILE),
        help=f'Dependency graph JSON document (default: {DEFAULT_GRAPH_FILE}).',
    )
    parser.add_argument(
        '--config',
        type=Path,
        default=None,
        help='Configuration file (default: nearest noticekit.toml or pyproject.toml).',
    )
    parser.add_argument('--skip', action='store_true', default=None, help='Do nothing and exit successfully.')
    parser.add_argument(
        '--mapping',
        action='append',
        default=None,
        metavar='LOC',
        help='License mapping location; repeatable.  Replaces configured mappings.',
    )
    parser.add_argument('--output-dir', default=None, help='NOTICE output directory, relative to each module.')
    parser.add_argument('--jobs', type=int, default=None, help='Modules processed concurrently.')
    parser.add_argument(
        '--offline',
        action='store_true',
        default=None,
        help='Use the local repository only; never fetch over the network.',
    )
    verbosity = parser.add_mutually_exclusive_group()
    verbosity.add_argument('-v', '--verbose', action='store_true', help='Debug logging.')
    verbosity.add_argument('-q', '--quiet', action='store_true', help='Warnings and errors only.')
    parser.add_argument('--json-log', action='store_true', help='Log JSON lines to stderr.')
    return parser


def _repository_auth() -> httpx.Auth | None:
    token = os.environ.get('NOTICEKIT_REPOSITORY_TOKEN')
    if token:
        return _BearerAuth(token)
    username = os.environ.get('NOTICEKIT_REPOSITORY_USERNAME')
    password = os.environ.get('NOTICEKIT_REPOSITORY_PASSWORD')
    if username and password:
        return httpx.BasicAuth(username, password)
    return None


class _BearerAuth(httpx.Auth):
    def __init__(self, token: str) -> None:
        self._token = token

    def auth_flow(self, request: httpx.Request):  # noqa: ANN201
        request.headers['Authorization'] = f'Bearer {self._token}'
        yield request


def build_metadata_provider(config: NoticeConfig, client: httpx.Client | None) -> MetadataProvider:
    """Return the local repository, followed by remote ones unless offline."""
    providers: list[MetadataProvider] = [LocalRepositoryMetadataProvider(config.local_repository)]
    if not config.offline and client is not None:
        providers.extend(RemoteRepositoryMetadataProvider(url, client=client) for url in config.repositories)
    return ChainMetadataProvider(providers)


def _apply_overrides(config: NoticeConfig, args: argparse.Namespace) -> NoticeConfig:
    if args.jobs is not None and args.jobs < 1:
        raise NoticeKitError(f'--jobs must be at least 1, got {args.jobs}')
    return config.with_overrides(
        skip=args.skip,
        license_mapping=tuple(args.mapping) if args.mapping else None,
        license_lookup=() if args.mapping else None,
        output_dir=args.output_dir,
        jobs=args.jobs,
        offline=args.offline,
    )


def _report_error(console: Console, exc: NoticeKitError) -> None:
    console.print(f'[bold red]error:[/] {escape(str(exc))}')
    if isinstance(exc, UnresolvedArtifactsError):
        for artifact in exc.artifacts:
            console.print(f'  [yellow]•[/] {escape(str(artifact))}')
        if exc.stub_path is not None:
            console.print(f'  [dim]stub mapping written to {escape(str(exc.stub_path))}[/]')
    elif isinstance(exc, NoticeMismatchError) and exc.diff:
        console.print(escape(exc.diff), highlight=False, end='')


def run(args: argparse.Namespace, console: Console) -> int:
    """Execute a parsed command line and return the exit status."""
    project: Project = load_project(args.graph)
    config = load_config(args.config, start=args.graph.resolve().parent)
    config = _apply_overrides(config, args)
    mode = Mode(args.mode)

    client = None if config.offline else httpx.Client(timeout=30.0, follow_redirects=True, auth=_repository_auth())
    try:
        runner = NoticeRunner(
            config,
            mode,
            metadata=build_metadata_provider(config, client),
            cache=MappingDocumentCache(),
            finder_factory=lambda p: ResourceFinder(p, config.resource_paths, client=client, offline=config.offline),
        )
        paths = asyncio.run(run_build(project, runner))
    finally:
        if client is not None:
            client.close()

    verb = 'generated' if mode is Mode.GENERATE else 'up to date'
    for path in paths:
        console.print(f'[green]✓[/] {escape(str(path))} {verb}')
    return 0


def main(argv: Sequence[str] | None = None) -> int:
    """Run ``noticekit`` and return its exit status."""
    args = build_parser().parse_args(argv)
    configure_logging(verbose=args.verbose, quiet=args.quiet, json_log=args.json_log)
    err_console = Console(stderr=True)
    try:
        return run(args, Console())
    except NoticeKitError as exc:
        log.debug('command_failed', error=str(exc), exc_info=exc)
        _report_error(err_console, exc)
        return 1


if __name__ == '__main__':
    sys.exit(main())
