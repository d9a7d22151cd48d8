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

r"""noticekit: generate and verify third-party NOTICE files.

noticekit walks a project's resolved dependency graph, works out a
display name and license for every artifact (from license mapping
documents, then from the artifact's own POM), and fills a NOTICE
template with one line per artifact.

Usage::

    from noticekit.config import load_config
    from noticekit.graph import load_project
    from noticekit.runner import Mode, NoticeRunner

    project = load_project(Path('dependency-graph.json'))
    NoticeRunner(load_config(), Mode.CHECK).run(project)

Submodules are imported explicitly; this package only carries the
version.
"""

__version__ = '0.1.0'
