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

"""playground_manager - local Argo Workflows playground bootstrapper."""

from __future__ import annotations

import logging

from rich.console import Console
from rich.markup import escape

# Tokens must never be wrapped, so soft_wrap stays on for stdout.
console = Console(highlight=False, soft_wrap=True)
err_console = Console(stderr=True, highlight=False, soft_wrap=True)
logger = logging.getLogger("playground_manager")


def info(message: str) -> None:
    """Print an ``[INFO]`` progress line."""
    console.print(f"[green]\\[INFO][/green] {escape(message)}")


def warn(message: str) -> None:
    """Print a ``[WARN]`` progress line."""
    console.print(f"[yellow]\\[WARN][/yellow] {escape(message)}")
