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

"""kind cluster lifecycle."""

from __future__ import annotations

from playground_manager import info
from playground_manager.kube import Kind
from playground_manager.models import Outcome


def ensure_cluster(kind: Kind, name: str) -> Outcome:
    """Create the kind cluster unless one with this exact name exists.

    An existing cluster is reused as-is; its configuration is never reconciled.

    Args:
        kind: kind client.
        name: Cluster name.

    Returns:
        ``Outcome.CREATED`` or ``Outcome.EXISTS``.

    Raises:
        ProvisioningError: If listing or creating clusters fails.
    """
    if name in kind.list_clusters():
        info(f"kind cluster '{name}' already exists; reusing.")
        return Outcome.EXISTS

    info(f"Creating kind cluster '{name}'...")
    kind.create_cluster(name)
    return Outcome.CREATED
