"""
Remove what a previous deployment recorded in its PersistedState.

Every lookup that finds nothing is treated as already clean, so teardown can
be re-run after a partial failure or after resources were deleted by hand.
A failing subdomain does not stop the others; failures are collected and
raised together once every subdomain has been attempted, leaving the state
untouched so the next run retries them.
"""

import time

import pulumi

from components._helpers import bare_domain
from components.binding import CLOUDFRONT_HOSTED_ZONE_ID, alias_record
from components.errors import DomainComponentError, TeardownError
from components.models import PersistedState, SubdomainState, TargetType
from components.polling import RetryPolicy, Sleep, retry_rate_limited
from components.providers import Clients
from components.zones import ZoneResolver


class TeardownOrchestrator:
    def __init__(
        self,
        clients: Clients,
        zones: ZoneResolver | None = None,
        retry: RetryPolicy = RetryPolicy(),
        sleep: Sleep = time.sleep,
    ):
        self._clients = clients
        self._zones = zones or ZoneResolver(clients.dns, retry=retry, sleep=sleep)
        self._retry = retry
        self._sleep = sleep

    def teardown(self, state: PersistedState) -> PersistedState:
        """
        Remove every recorded subdomain.

        Returns:
            An empty PersistedState, to be saved in place of ``state``.

        Raises:
            ZoneNotFound: the recorded domain has no hosted zone anymore.
            TeardownError: one or more subdomains could not be removed.
        """
        if state.is_empty:
            return PersistedState()

        pulumi.log.debug("Starting Domain component removal.")
        zone_id = self._zones.resolve(state.domain, state.private_zone)

        failures: dict[str, DomainComponentError] = {}
        for name, subdomain in state.subdomains.items():
            try:
                self.remove_subdomain(subdomain, zone_id)
            except DomainComponentError as e:
                pulumi.log.warn(f"Failed to remove domain {name}: {e}")
                failures[name] = e

        if failures:
            raise TeardownError(failures)
        return PersistedState()

    def remove_subdomain(self, subdomain: SubdomainState, zone_id: str) -> None:
        if subdomain.type == TargetType.CDN_WEBSITE:
            self._remove_website(subdomain, zone_id)
        elif subdomain.type == TargetType.GATEWAY:
            self._remove_gateway(subdomain, zone_id)
        elif subdomain.type == TargetType.CDN:
            self._remove_cdn(subdomain, zone_id)

    def _run(self, operation, description: str):
        return retry_rate_limited(operation, description, self._retry, self._sleep)

    def _delete_alias(self, zone_id: str, domain: str, dns_name: str, hosted_zone_id: str):
        deleted = self._run(
            lambda: self._clients.dns.delete_record(
                zone_id, alias_record(domain, dns_name, hosted_zone_id)
            ),
            f"Removing DNS record for {domain}",
        )
        if not deleted:
            pulumi.log.debug(f"No DNS record found for {domain}.")
        return deleted

    def _remove_website(self, subdomain: SubdomainState, zone_id: str) -> None:
        pulumi.log.debug(
            f"Fetching CloudFront distribution info for removal for domain "
            f"{subdomain.domain}."
        )
        distribution = self._run(
            lambda: self._clients.cdn.get_distribution_by_domain(subdomain.domain),
            f"Looking up CloudFront distribution for {subdomain.domain}",
        )
        if distribution is None:
            return

        pulumi.log.debug(f"Removing DNS records for website domain {subdomain.domain}.")
        self._delete_alias(
            zone_id, subdomain.domain, distribution.url, CLOUDFRONT_HOSTED_ZONE_ID
        )
        if subdomain.domain.startswith("www."):
            self._delete_alias(
                zone_id,
                bare_domain(subdomain.domain),
                distribution.url,
                CLOUDFRONT_HOSTED_ZONE_ID,
            )

    def _remove_gateway(self, subdomain: SubdomainState, zone_id: str) -> None:
        pulumi.log.debug(
            f"Fetching API Gateway domain {subdomain.domain} information for removal."
        )
        gateway = self._clients.gateway
        domain = self._run(
            lambda: gateway.get_domain(subdomain.domain),
            f"Looking up API Gateway domain {subdomain.domain}",
        )
        if domain is None:
            return

        # The record targets come from the domain, so it must outlive the record.
        pulumi.log.debug(
            f"Removing DNS records for API Gateway domain {subdomain.domain}."
        )
        self._delete_alias(
            zone_id,
            subdomain.domain,
            domain.distribution_domain,
            domain.distribution_zone_id,
        )
        pulumi.log.debug(f"Removing API Gateway domain {subdomain.domain}.")
        self._run(
            lambda: gateway.delete_domain(subdomain.domain),
            f"Removing API Gateway domain {subdomain.domain}",
        )

    def _remove_cdn(self, subdomain: SubdomainState, zone_id: str) -> None:
        pulumi.log.debug(f"Removing domain {subdomain.domain} from CloudFront.")
        self._run(
            lambda: self._clients.cdn.remove_alias(
                subdomain.target_id, subdomain.domain
            ),
            f"Removing {subdomain.domain} from CloudFront",
        )
        pulumi.log.debug(
            f"Removing CloudFront DNS records for domain {subdomain.domain}"
        )
        self._delete_alias(
            zone_id, subdomain.domain, subdomain.url, CLOUDFRONT_HOSTED_ZONE_ID
        )
