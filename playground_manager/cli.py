#!/usr/bin/env python3
# /*
# Copyright 2026 The Grove Authors.
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
# */

"""
cli.py - Bootstrap a local Argo Workflows playground on kind.

Creates (or reuses) a kind cluster, installs Argo Workflows via Helm, grants
a 'demo' ServiceAccount access to the Argo Server, and prints an access token
for the UI. Every step is idempotent; re-run to retry anything that degraded.

Environment Variables:
    All settings can be overridden via PLAYGROUND_* environment variables:
    - PLAYGROUND_CLUSTER_NAME (default: awte)
    - PLAYGROUND_ARGO_NAMESPACE / PLAYGROUND_WORKFLOW_NAMESPACE (default: argo)
    - PLAYGROUND_CHART_VERSION (default: latest)
    - PLAYGROUND_LOG_LEVEL (default: WARNING)
    - And more (see PlaygroundConfig for the full list)

Examples:
    # Default playground
    argo-playground

    # Named cluster with a pinned chart version
    argo-playground --cluster-name demo1 --version 0.45.0

For detailed usage information, run: argo-playground --help
"""

from __future__ import annotations

import logging
import sys
from pathlib import Path

import typer
from rich.markup import escape

from playground_manager import err_console
from playground_manager.config import resolve_config
from playground_manager.constants import DEFAULT_CLUSTER_NAME, DEFAULT_VALUES_FILE
from playground_manager.orchestrator import run

app = typer.Typer(
    help="Bootstrap a local Argo Workflows playground on kind.",
    add_completion=False,
    context_settings={"help_option_names": ["-h", "--help"]},
)


@app.command()
def setup(
    cluster_name: str | None = typer.Option(
        None, "--cluster-name", help=f"kind cluster name (default: {DEFAULT_CLUSTER_NAME})"),
    version: str | None = typer.Option(
        None, "--version", help="Argo Workflows chart version (default: latest)"),
    values: Path | None = typer.Option(
        None, "--values", help=f"Helm values overlay (default: {DEFAULT_VALUES_FILE})"),
) -> None:
    """Create or reuse the cluster, install Argo Workflows, and print an access token."""
    try:
        cfg = resolve_config(cluster_name=cluster_name, chart_version=version, values_file=values)
        logging.basicConfig(
            level=cfg.log_level,
            format="%(asctime)s [%(levelname)s] %(message)s",
            datefmt="%H:%M:%S",
        )
        run(cfg)
    except Exception as e:
        err_console.print(f"[red]\u274c {escape(str(e))}[/red]")
        raise typer.Exit(1)


def main(argv: list[str] | None = None) -> None:
    """Console entry point.

    Usage errors exit 1 instead of the default 2.
    """
    try:
        app(args=argv, prog_name="argo-playground")
    except SystemExit as e:
        sys.exit(1 if e.code == 2 else e.code)


if __name__ == "__main__":
    main()
