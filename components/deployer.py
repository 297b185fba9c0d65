"""
User-facing apply/remove operations.

``apply`` runs the forward path (normalize, resolve zone, ensure certificate,
bind each subdomain) and returns the outputs shown to the user together with
the PersistedState to store. ``remove`` hands a stored state to the teardown
orchestrator. Subdomains are bound one after the other; when one fails the
ones already bound stay in place, and re-running ``apply`` converges since
every step is idempotent.
"""

import time
from typing import Any, Callable, Mapping

import pulumi

from components._helpers import public_url
from components.binding import BindingOrchestrator
from components.certificates import (
    ISSUANCE_POLICY,
    READINESS_POLICY,
    CertificateManager,
)
from components.models import DomainSpec, PersistedState
from components.normalizer import DEFAULT_REGION, normalize_inputs
from components.polling import PollPolicy, RetryPolicy, Sleep
from components.providers import Clients
from components.teardown import TeardownOrchestrator
from components.zones import ZoneResolver

ClientFactory = Callable[[str], Clients]


class Deployer:
    """
    Args:
        client_factory: Builds the provider set for a region.
        retry: Rate-limit retry budget for every provider call.
        readiness: Poll policy while waiting for the validation record.
        issuance: Poll policy while waiting for the certificate to be issued.
        sleep: Wait function, replaced in tests.
    """

    def __init__(
        self,
        client_factory: ClientFactory,
        retry: RetryPolicy = RetryPolicy(),
        readiness: PollPolicy = READINESS_POLICY,
        issuance: PollPolicy = ISSUANCE_POLICY,
        sleep: Sleep = time.sleep,
    ):
        self._client_factory = client_factory
        self._retry = retry
        self._readiness = readiness
        self._issuance = issuance
        self._sleep = sleep

    def apply(
        self, inputs: Mapping[str, Any]
    ) -> tuple[dict[str, Any], PersistedState]:
        """
        Provision the domain described by ``inputs``.

        Returns:
            ``({"region": ..., "domains": ["https://api.example.com", ...]}, state)``
        """
        pulumi.log.debug("Validating domain.")
        spec = normalize_inputs(inputs)
        self.deploy(spec)

        outputs = {
            "region": spec.region,
            "domains": [public_url(sub.name) for sub in spec.subdomains],
        }
        return outputs, PersistedState.from_spec(spec)

    def deploy(self, spec: DomainSpec) -> None:
        clients = self._client_factory(spec.region)

        zones = ZoneResolver(clients.dns, retry=self._retry, sleep=self._sleep)
        zone_id = spec.hosted_zone_id or zones.resolve(
            spec.domain, spec.private_zone
        )

        certificate = CertificateManager(
            clients.certificates,
            clients.dns,
            readiness=self._readiness,
            issuance=self._issuance,
            retry=self._retry,
            sleep=self._sleep,
        ).ensure_certificate(spec.domain, zone_id, spec.certificate_arn)

        binder = BindingOrchestrator(clients, retry=self._retry, sleep=self._sleep)
        for subdomain in spec.subdomains:
            pulumi.log.debug(
                f"Adding {subdomain.name} domain to {subdomain.target_type.value} "
                f'with URL "{subdomain.url}"'
            )
            binder.bind(subdomain, zone_id, certificate.arn)

    def remove(self, state: PersistedState) -> PersistedState:
        """Tear down ``state``; returns the emptied state to store."""
        if state.is_empty:
            return PersistedState()
        clients = self._client_factory(state.region or DEFAULT_REGION)
        return TeardownOrchestrator(
            clients, retry=self._retry, sleep=self._sleep
        ).teardown(state)
