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

"""Outcome enum and value types shared across pipeline stages."""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum


class Outcome(str, Enum):
    """Result of an ensure or wait step."""

    CREATED = "created"
    EXISTS = "exists"
    READY = "ready"
    TIMEOUT = "timeout"


@dataclass(frozen=True)
class RoleRef:
    """Reference to a Role or ClusterRole.

    Attributes:
        kind: ``Role`` or ``ClusterRole``.
        name: Role name.
    """

    kind: str
    name: str

    @property
    def flag(self) -> str:
        """kubectl ``create rolebinding`` flag selecting this role."""
        return "--clusterrole" if self.kind == "ClusterRole" else "--role"


@dataclass(frozen=True)
class RoleBindingSpec:
    """Desired RoleBinding linking one ServiceAccount to one role.

    Attributes:
        name: RoleBinding name.
        namespace: Namespace the RoleBinding lives in.
        role: Role or ClusterRole being granted.
        subject_namespace: Namespace of the ServiceAccount.
        subject_name: ServiceAccount name.
    """

    name: str
    namespace: str
    role: RoleRef
    subject_namespace: str
    subject_name: str

    @property
    def subject(self) -> str:
        return f"{self.subject_namespace}:{self.subject_name}"


@dataclass(frozen=True)
class CredentialResult:
    """Outcome of the credential retrieval state machine.

    Attributes:
        token: Decoded bearer token.
        source: ``direct`` or ``secret``.
        attempts: Number of Secret reads performed (0 on the direct path).
    """

    token: str
    source: str
    attempts: int = 0
