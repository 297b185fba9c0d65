"""
Interfaces of the cloud services the orchestrators talk to.

The orchestrators only depend on these abstract classes. The AWS
implementations live in ``components.aws_clients``; tests use in-memory
fakes. Implementations report failures with the ``components.errors``
provider taxonomy (RateLimited, ResourceNotFound, ResourceConflict,
ProviderError) rather than SDK-specific exceptions.
"""

from abc import ABC, abstractmethod
from dataclasses import dataclass

from components.models import (
    CertificateDetails,
    DnsRecord,
    Distribution,
    GatewayDomain,
    HostedZone,
)


class DnsProvider(ABC):
    """Authoritative DNS zones and their record sets."""

    @abstractmethod
    def list_zones(self) -> list[HostedZone]:
        """Return every hosted zone visible to the account."""

    @abstractmethod
    def list_records(
        self, zone_id: str, start_name: str, max_items: int = 10
    ) -> list[DnsRecord]:
        """
        Return up to ``max_items`` records in lexicographic order starting at
        ``start_name``. Records after ``start_name`` may be included.
        """

    @abstractmethod
    def upsert_record(self, zone_id: str, record: DnsRecord) -> None:
        """Create the record set, or replace it if one with the same name and type exists."""

    @abstractmethod
    def delete_record(self, zone_id: str, record: DnsRecord) -> bool:
        """Delete the record set. Return False if it did not exist."""


class CertificateProvider(ABC):
    """TLS certificate authority with DNS validation."""

    @abstractmethod
    def list_certificates(self) -> dict[str, str]:
        """Return a mapping of certificate domain name to arn."""

    @abstractmethod
    def request_certificate(self, domain: str, alternative_names: list[str]) -> str:
        """Request a DNS-validated certificate and return its arn."""

    @abstractmethod
    def describe_certificate(self, arn: str) -> CertificateDetails:
        """Return status and validation records of a certificate."""


class GatewayProvider(ABC):
    """API gateway custom domains and base path mappings."""

    @abstractmethod
    def create_domain(self, domain: str, certificate_arn: str) -> GatewayDomain:
        """
        Create an edge custom domain.

        Raises:
            ResourceConflict: The domain already exists.
        """

    @abstractmethod
    def create_mapping(self, domain: str, api_id: str) -> None:
        """
        Map the root base path of ``domain`` onto ``api_id``.

        Raises:
            UnknownDomain: ``domain`` is not a known custom domain.
            ResourceNotFound: ``api_id`` or its stage does not exist.
            ResourceConflict: A mapping already exists for the domain.
        """

    @abstractmethod
    def get_domain(self, domain: str) -> GatewayDomain | None:
        """Return the custom domain, or None if it does not exist."""

    @abstractmethod
    def delete_domain(self, domain: str) -> None:
        """Delete the custom domain and its mappings."""


class CdnProvider(ABC):
    """CDN distributions and their alternate domain names."""

    @abstractmethod
    def get_distribution_by_domain(self, domain: str) -> Distribution | None:
        """Return the distribution serving ``domain`` as an alias, or None."""

    @abstractmethod
    def add_alias(
        self, distribution_id: str, domain: str, certificate_arn: str
    ) -> bool:
        """
        Add ``domain`` to the distribution's aliases and serve it with the
        certificate. Return False if it was already an alias.
        """

    @abstractmethod
    def remove_alias(self, distribution_id: str, domain: str) -> bool:
        """
        Remove ``domain`` from the aliases. Return False if it was not one or
        the distribution no longer exists.
        """


@dataclass
class Clients:
    """Provider set for one region, as handed to the orchestrators."""

    dns: DnsProvider
    certificates: CertificateProvider
    gateway: GatewayProvider
    cdn: CdnProvider
