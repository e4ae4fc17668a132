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

"""Command execution, prerequisite checks, and bounded polling."""

from __future__ import annotations

import shlex
import subprocess
import time
from collections.abc import Callable, Iterable
from typing import TypeVar

import sh
from tenacity import RetryError, Retrying, retry_if_result, stop_after_attempt, stop_after_delay, wait_fixed

from playground_manager import logger
from playground_manager.errors import MissingDependencyError

T = TypeVar("T")

CommandResult = tuple[bool, str, str]
Runner = Callable[..., CommandResult]


def run_command(args: list[str], timeout: int = 30, input: str | None = None) -> CommandResult:
    """Run a CLI command via subprocess and return (success, stdout, stderr).

    Callers inspect stderr for ``AlreadyExists``/``NotFound`` markers, so
    stdout and stderr are captured separately and never raise on a non-zero
    exit.

    Args:
        args: Full argv (e.g. ``["kubectl", "get", "ns", "argo"]``).
        timeout: Maximum seconds to wait for the command to complete.
        input: Text piped to stdin, e.g. a manifest for ``create -f -``.

    Returns:
        Tuple of (success, stdout, stderr).
    """
    logger.debug("+ %s", shlex.join(args))
    try:
        result = subprocess.run(
            args,
            capture_output=True,
            text=True,
            timeout=timeout,
            input=input,
        )
    except (subprocess.SubprocessError, OSError) as exc:
        return False, "", str(exc)
    if result.returncode != 0:
        logger.debug("exit %d: %s", result.returncode, result.stderr.strip())
    return result.returncode == 0, result.stdout, result.stderr


def require_commands(cmds: Iterable[str]) -> None:
    """Check that every command exists on the system PATH.

    Args:
        cmds: CLI command names, checked in order.

    Raises:
        MissingDependencyError: For the first command that is not found.
    """
    for cmd in cmds:
        try:
            path = sh.which(cmd)
        except sh.ErrorReturnCode:
            path = None
        if not path:
            raise MissingDependencyError(f"Required command '{cmd}' not found in PATH. Please install it first.")


def poll_until(
    fn: Callable[[], T],
    *,
    attempts: int,
    interval: float,
    timeout: float | None = None,
    sleep: Callable[[float], None] | None = None,
) -> T:
    """Call ``fn`` until it returns a truthy value or attempts run out.

    Exceptions raised by ``fn`` are not retried; they propagate.

    Args:
        fn: Zero-argument probe.
        attempts: Maximum number of calls.
        interval: Seconds to sleep between calls.
        timeout: Also stop once this many seconds have elapsed, or None for
            an attempt bound only.
        sleep: Sleep function, defaults to ``time.sleep``.

    Returns:
        The first truthy result, or the last falsy one once attempts are exhausted.
    """
    stop = stop_after_attempt(attempts)
    if timeout is not None:
        stop = stop | stop_after_delay(timeout)
    retryer = Retrying(
        stop=stop,
        wait=wait_fixed(interval),
        retry=retry_if_result(lambda result: not result),
        sleep=sleep or time.sleep,
    )
    try:
        return retryer(fn)
    except RetryError as err:
        return err.last_attempt.result()
