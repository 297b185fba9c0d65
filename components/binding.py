"""
Bind one subdomain to its backend: provider-side domain mapping plus DNS alias.

Each target type is an explicit state machine. Every state is one provider
write that is safe to repeat, and every state retries rate-limited calls up
to the RetryPolicy budget. Gateway targets::

    MAP_ATTEMPT --ok / mapping exists--> BOUND
    MAP_ATTEMPT --domain unknown-------> CREATE_DOMAIN --ok--> MAP_ATTEMPT

CDN targets::

    ATTACH_ALIAS --ok / already alias--> UPSERT_RECORD --ok--> BOUND
"""

import time
from enum import Enum

import pulumi

from components.errors import ResourceConflict, RetryLimitExceeded, UnknownDomain
from components.models import (
    AliasTarget,
    DnsRecord,
    GatewayDomain,
    SubdomainSpec,
    TargetType,
)
from components.polling import RetryPolicy, Sleep, retry_rate_limited
from components.providers import Clients

# Fixed hosted zone of every CloudFront distribution, used for alias records.
CLOUDFRONT_HOSTED_ZONE_ID = "Z2FDTNDATAQYW2"


class BindState(Enum):
    MAP_ATTEMPT = "map_attempt"
    CREATE_DOMAIN = "create_domain"
    ATTACH_ALIAS = "attach_alias"
    UPSERT_RECORD = "upsert_record"
    BOUND = "bound"


def alias_record(domain: str, dns_name: str, hosted_zone_id: str) -> DnsRecord:
    """A record aliasing ``domain`` onto a provider-managed endpoint."""
    return DnsRecord(
        name=domain,
        type="A",
        alias=AliasTarget(dns_name=dns_name, hosted_zone_id=hosted_zone_id),
    )


class BindingOrchestrator:
    def __init__(
        self,
        clients: Clients,
        retry: RetryPolicy = RetryPolicy(),
        sleep: Sleep = time.sleep,
    ):
        self._clients = clients
        self._retry = retry
        self._sleep = sleep

    def bind(
        self, subdomain: SubdomainSpec, zone_id: str, certificate_arn: str
    ) -> BindState:
        """
        Make ``subdomain`` resolve to its backend. Idempotent.

        Returns:
            BindState.BOUND

        Raises:
            RetryLimitExceeded: a state stayed rate limited, or the gateway
                kept reporting the domain as unknown after creating it.
            ProviderError: any other provider failure.
        """
        if subdomain.target_type == TargetType.GATEWAY:
            return self._bind_gateway(subdomain, zone_id, certificate_arn)
        if subdomain.target_type == TargetType.CDN:
            return self._bind_cdn(subdomain, zone_id, certificate_arn)
        raise ValueError(f"Cannot bind target type {subdomain.target_type.value}")

    def _run(self, operation, description: str):
        return retry_rate_limited(operation, description, self._retry, self._sleep)

    def _bind_gateway(
        self, subdomain: SubdomainSpec, zone_id: str, certificate_arn: str
    ) -> BindState:
        gateway = self._clients.gateway
        state = BindState.MAP_ATTEMPT
        creations = 0

        while state != BindState.BOUND:
            if state == BindState.MAP_ATTEMPT:
                pulumi.log.debug(
                    f"Mapping domain {subdomain.name} to API ID {subdomain.target_id}"
                )
                try:
                    self._run(
                        lambda: gateway.create_mapping(
                            subdomain.name, subdomain.target_id
                        ),
                        f"Mapping {subdomain.name}",
                    )
                    state = BindState.BOUND
                except UnknownDomain:
                    # Domain just created but not yet visible counts against the budget.
                    if creations >= self._retry.max_attempts:
                        raise RetryLimitExceeded(
                            f"Mapping {subdomain.name}", creations
                        )
                    pulumi.log.debug(
                        f"Domain {subdomain.name} not found in API Gateway. Creating..."
                    )
                    state = BindState.CREATE_DOMAIN
                except ResourceConflict:
                    pulumi.log.debug(
                        f"Domain {subdomain.name} is already mapped to API ID "
                        f"{subdomain.target_id}."
                    )
                    state = BindState.BOUND

            elif state == BindState.CREATE_DOMAIN:
                creations += 1
                domain = self._run(
                    lambda: self._create_gateway_domain(
                        subdomain.name, certificate_arn
                    ),
                    f"Creating API Gateway domain {subdomain.name}",
                )
                pulumi.log.debug(
                    f"Configuring DNS for API Gateway domain {subdomain.name}."
                )
                self._run(
                    lambda: self._clients.dns.upsert_record(
                        zone_id,
                        alias_record(
                            subdomain.name,
                            domain.distribution_domain,
                            domain.distribution_zone_id,
                        ),
                    ),
                    f"Upserting DNS record for {subdomain.name}",
                )
                state = BindState.MAP_ATTEMPT

        return state

    def _create_gateway_domain(
        self, domain: str, certificate_arn: str
    ) -> GatewayDomain:
        gateway = self._clients.gateway
        try:
            return gateway.create_domain(domain, certificate_arn)
        except ResourceConflict:
            # Left over from an interrupted run; reuse it.
            existing = gateway.get_domain(domain)
            if existing is None:
                raise
            return existing

    def _bind_cdn(
        self, subdomain: SubdomainSpec, zone_id: str, certificate_arn: str
    ) -> BindState:
        state = BindState.ATTACH_ALIAS

        while state != BindState.BOUND:
            if state == BindState.ATTACH_ALIAS:
                pulumi.log.debug(
                    f"Adding domain {subdomain.name} to CloudFront distribution "
                    f"{subdomain.target_id}."
                )
                added = self._run(
                    lambda: self._clients.cdn.add_alias(
                        subdomain.target_id, subdomain.name, certificate_arn
                    ),
                    f"Adding {subdomain.name} to CloudFront",
                )
                if not added:
                    pulumi.log.debug(
                        f"Domain {subdomain.name} is already an alias of "
                        f"{subdomain.target_id}."
                    )
                state = BindState.UPSERT_RECORD

            elif state == BindState.UPSERT_RECORD:
                pulumi.log.debug(
                    f"Configuring DNS for CloudFront domain {subdomain.name}."
                )
                self._run(
                    lambda: self._clients.dns.upsert_record(
                        zone_id,
                        alias_record(
                            subdomain.name, subdomain.url, CLOUDFRONT_HOSTED_ZONE_ID
                        ),
                    ),
                    f"Upserting DNS record for {subdomain.name}",
                )
                state = BindState.BOUND

        return state
