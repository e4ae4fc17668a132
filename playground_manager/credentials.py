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

"""Access token retrieval for the demo ServiceAccount.

Two issuance paths exist because clusters differ in API support:

* ``kubectl create token`` (TokenRequest API), preferred;
* a ``kubernetes.io/service-account-token`` Secret that the token controller
  populates asynchronously, polled a bounded number of times.

``CredentialRetriever`` walks these as an explicit state machine:

    ATTEMPT_DIRECT -> SUCCESS
    ATTEMPT_DIRECT -> CREATE_SECRET -> POLL_SECRET -> SUCCESS | FAILED
"""

from __future__ import annotations

import base64
import binascii
from collections.abc import Callable
from enum import Enum

from playground_manager import console, info, logger
from playground_manager.config import PlaygroundConfig
from playground_manager.constants import SA_NAME_ANNOTATION, SA_TOKEN_SECRET_TYPE
from playground_manager.errors import CredentialRetrievalFailure, ProvisioningError
from playground_manager.kube import Kubectl
from playground_manager.models import CredentialResult
from playground_manager.utils import poll_until


class TokenState(str, Enum):
    ATTEMPT_DIRECT = "attempt-direct"
    CREATE_SECRET = "create-secret"
    POLL_SECRET = "poll-secret"
    SUCCESS = "success"
    FAILED = "failed"


TERMINAL_STATES = (TokenState.SUCCESS, TokenState.FAILED)


def token_secret_manifest(namespace: str, name: str, service_account: str) -> dict:
    """Build a legacy service-account token Secret bound to ``service_account``."""
    return {
        "apiVersion": "v1",
        "kind": "Secret",
        "metadata": {
            "name": name,
            "namespace": namespace,
            "annotations": {SA_NAME_ANNOTATION: service_account},
        },
        "type": SA_TOKEN_SECRET_TYPE,
    }


def decode_secret_token(secret: dict | None) -> str | None:
    """Return the base64-decoded ``data.token`` of a Secret, or None if unpopulated.

    A value that is not valid base64 or UTF-8 is treated as unpopulated.
    """
    encoded = ((secret or {}).get("data") or {}).get("token")
    if not encoded:
        return None
    try:
        return base64.b64decode(encoded, validate=True).decode("utf-8")
    except (binascii.Error, UnicodeDecodeError) as err:
        logger.debug("ignoring malformed token in Secret: %s", err)
        return None


class CredentialRetriever:
    """Obtain a bearer token for one ServiceAccount.

    Args:
        kubectl: kubectl client.
        namespace: Namespace of the ServiceAccount.
        service_account: ServiceAccount name.
        secret_name: Name of the fallback token Secret.
        attempts: Maximum Secret reads in ``POLL_SECRET``.
        interval: Seconds between Secret reads.
        sleep: Sleep function for the poll loop.
    """

    def __init__(
        self,
        kubectl: Kubectl,
        namespace: str,
        service_account: str,
        secret_name: str,
        attempts: int,
        interval: float,
        sleep: Callable[[float], None] | None = None,
    ) -> None:
        self.kubectl = kubectl
        self.namespace = namespace
        self.service_account = service_account
        self.secret_name = secret_name
        self.max_attempts = attempts
        self.interval = interval
        self.sleep = sleep

        self.state = TokenState.ATTEMPT_DIRECT
        self.token: str | None = None
        self.source: str | None = None
        self.attempts = 0
        self.error: ProvisioningError | None = None

    @classmethod
    def for_config(
        cls, kubectl: Kubectl, cfg: PlaygroundConfig, sleep: Callable[[float], None] | None = None
    ) -> CredentialRetriever:
        return cls(
            kubectl,
            cfg.argo_namespace,
            cfg.service_account,
            cfg.token_secret_name,
            cfg.token_poll_attempts,
            cfg.token_poll_interval,
            sleep=sleep,
        )

    def run(self) -> CredentialResult:
        """Drive the state machine to a terminal state.

        Returns:
            The decoded token and the path that produced it.

        Raises:
            CredentialRetrievalFailure: If both issuance paths are exhausted, or
                a kubectl call on the Secret path is rejected.
        """
        handlers = {
            TokenState.ATTEMPT_DIRECT: self._attempt_direct,
            TokenState.CREATE_SECRET: self._create_secret,
            TokenState.POLL_SECRET: self._poll_secret,
        }
        while self.state not in TERMINAL_STATES:
            logger.debug("token retrieval state: %s", self.state.value)
            try:
                self.state = handlers[self.state]()
            except ProvisioningError as err:
                self.error = err
                self.state = TokenState.FAILED

        if self.state is TokenState.FAILED:
            message = f"Failed to obtain an access token for service account '{self.service_account}'."
            if self.error is not None:
                message = f"{message} {self.error}"
            raise CredentialRetrievalFailure(message, attempts=self.attempts) from self.error
        return CredentialResult(token=self.token, source=self.source, attempts=self.attempts)

    def _attempt_direct(self) -> TokenState:
        token = self.kubectl.issue_token_direct(self.namespace, self.service_account)
        if token:
            self.token, self.source = token, "direct"
            return TokenState.SUCCESS
        info("'kubectl create token' is unavailable; creating a service-account token Secret...")
        return TokenState.CREATE_SECRET

    def _create_secret(self) -> TokenState:
        if self.kubectl.exists("secret", self.secret_name, self.namespace):
            info(f"Secret '{self.secret_name}' already exists in '{self.namespace}'.")
        else:
            self.kubectl.create_from_manifest(
                token_secret_manifest(self.namespace, self.secret_name, self.service_account)
            )
        return TokenState.POLL_SECRET

    def _read_token(self) -> str | None:
        self.attempts += 1
        return decode_secret_token(self.kubectl.get_secret(self.namespace, self.secret_name))

    def _poll_secret(self) -> TokenState:
        token = poll_until(self._read_token, attempts=self.max_attempts, interval=self.interval, sleep=self.sleep)
        if not token:
            return TokenState.FAILED
        self.token, self.source = token, "secret"
        return TokenState.SUCCESS


def token_banner(service_account: str) -> tuple[str, str]:
    """Return the (begin, end) marker lines framing an emitted token."""
    return (
        f"------ BEGIN ARGO ACCESS TOKEN ({service_account}) ------",
        f"------- END ARGO ACCESS TOKEN ({service_account}) -------",
    )


def print_token(result: CredentialResult, service_account: str, namespace: str) -> None:
    """Emit the token between marker lines, followed by the Bearer hint."""
    begin, end = token_banner(service_account)
    info(f"Generated access token for service account '{service_account}' (namespace '{namespace}').")
    console.print(begin, markup=False)
    console.print(result.token, markup=False)
    console.print(end, markup=False)
    console.print()
    console.print('To use this token in the Argo Workflows UI prefix it with "Bearer ".', markup=False)
    console.print()
