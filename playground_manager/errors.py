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

"""Error hierarchy for the playground pipeline.

Fatal errors (configuration, missing tools, rejected provisioning calls)
propagate to the CLI, which exits 1. Already-existing resources and readiness
timeouts are not errors; they are reported through ``models.Outcome``.
"""

from __future__ import annotations


class PlaygroundError(RuntimeError):
    """Base class for every error raised by playground_manager."""


class ConfigurationError(PlaygroundError):
    """Invalid invocation or settings."""


class MissingDependencyError(PlaygroundError):
    """A required CLI tool is not on PATH."""


class ProvisioningError(PlaygroundError):
    """A cluster, helm, or kubectl call was rejected.

    Attributes:
        command: The argv that failed, if any.
        stderr: Captured stderr of the failed call.
    """

    def __init__(self, message: str, command: list[str] | None = None, stderr: str = "") -> None:
        super().__init__(message)
        self.command = command or []
        self.stderr = stderr


class CredentialRetrievalFailure(PlaygroundError):
    """Neither direct issuance nor the Secret fallback produced a token.

    Attributes:
        attempts: Number of Secret reads performed before giving up.
    """

    def __init__(self, message: str, attempts: int = 0) -> None:
        super().__init__(message)
        self.attempts = attempts
