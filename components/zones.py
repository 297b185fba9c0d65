"""
Hosted zone lookup. Zones are created out of band; this module never creates one.
"""

import time

import pulumi

from components._helpers import same_name, strip_zone_prefix
from components.errors import ZoneNotFound
from components.polling import RetryPolicy, Sleep, retry_rate_limited
from components.providers import DnsProvider


class ZoneResolver:
    """
    Find the hosted zone that owns a root domain.

    Results are memoized for the lifetime of the resolver, which is one
    deployment or one removal.
    """

    def __init__(
        self,
        dns: DnsProvider,
        retry: RetryPolicy = RetryPolicy(),
        sleep: Sleep = time.sleep,
    ):
        self._dns = dns
        self._retry = retry
        self._sleep = sleep
        self._cache: dict[tuple[str, bool], str] = {}

    def resolve(self, domain: str, private: bool = False) -> str:
        """
        Return the zone id (without the "/hostedzone/" prefix) for ``domain``.

        Zone names come back fully qualified ("example.com."), so they are
        compared with the dotted form of ``domain``. Only zones whose
        visibility matches ``private`` are considered.

        Raises:
            ZoneNotFound: no zone matches.
            RetryLimitExceeded: listing zones stayed rate limited.
        """
        key = (domain.lower(), private)
        if key in self._cache:
            return self._cache[key]

        pulumi.log.debug(f"Getting the Hosted Zone ID for the domain {domain}.")
        zones = retry_rate_limited(
            self._dns.list_zones, "Listing hosted zones", self._retry, self._sleep
        )
        for zone in zones:
            if zone.private == private and same_name(zone.name, domain):
                zone_id = strip_zone_prefix(zone.id)
                self._cache[key] = zone_id
                return zone_id
        raise ZoneNotFound(domain)
