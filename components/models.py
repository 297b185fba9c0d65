"""
Data model shared by the normalizer, the orchestrators and the Pulumi resource.

All types are plain dataclasses so they can be built in tests without any
provider or Pulumi runtime. ``PersistedState`` round-trips through a plain
dict because that is what a dynamic provider stores as its outputs.
"""

from dataclasses import dataclass, field
from enum import Enum
from typing import Any


class TargetType(str, Enum):
    """Kind of backend a subdomain points at. Values match the recorded state."""

    GATEWAY = "awsApiGateway"
    CDN = "awsCloudFront"
    # Only found in state recorded by website deployments; teardown handles it.
    CDN_WEBSITE = "awsS3Website"


class CertificateStatus(str, Enum):
    NOT_FOUND = "NOT_FOUND"
    PENDING_VALIDATION = "PENDING_VALIDATION"
    ISSUED = "ISSUED"
    FAILED = "FAILED"

    @classmethod
    def from_provider(cls, status: str | None) -> "CertificateStatus":
        if not status:
            return cls.NOT_FOUND
        try:
            return cls(status)
        except ValueError:
            # EXPIRED, REVOKED, VALIDATION_TIMED_OUT, INACTIVE...
            return cls.FAILED


@dataclass(frozen=True)
class SubdomainSpec:
    """
    One subdomain to bind.

    Attributes:
        name: Fully qualified name, e.g. "api.example.com".
        target_type: GATEWAY or CDN; fixed at normalization time.
        target_id: REST API id (gateway) or distribution id (CDN).
        url: Target endpoint host, scheme stripped.
    """

    name: str
    target_type: TargetType
    target_id: str
    url: str


@dataclass(frozen=True)
class DomainSpec:
    """Normalized user input. Immutable once built by the normalizer."""

    domain: str
    region: str
    subdomains: tuple[SubdomainSpec, ...] = ()
    hosted_zone_id: str | None = None
    certificate_arn: str | None = None
    private_zone: bool = False


@dataclass(frozen=True)
class ValidationRecord:
    """DNS record ACM asks for before issuing a certificate."""

    name: str
    type: str
    value: str


@dataclass(frozen=True)
class CertificateHandle:
    arn: str
    status: CertificateStatus


@dataclass(frozen=True)
class CertificateDetails:
    """Result of describing a certificate: status plus per-domain validation records."""

    arn: str
    status: CertificateStatus
    validation_records: dict[str, ValidationRecord] = field(default_factory=dict)


@dataclass(frozen=True)
class AliasTarget:
    dns_name: str
    hosted_zone_id: str
    evaluate_target_health: bool = False


@dataclass(frozen=True)
class DnsRecord:
    """
    A record set. Either ``values`` (with ``ttl``) or ``alias`` is set.
    """

    name: str
    type: str
    ttl: int | None = None
    values: tuple[str, ...] = ()
    alias: AliasTarget | None = None


@dataclass(frozen=True)
class HostedZone:
    id: str
    name: str
    private: bool = False


@dataclass(frozen=True)
class GatewayDomain:
    domain: str
    distribution_domain: str
    distribution_zone_id: str


@dataclass(frozen=True)
class Distribution:
    id: str
    url: str
    aliases: tuple[str, ...] = ()


@dataclass
class SubdomainState:
    """What was deployed for one subdomain."""

    type: TargetType
    domain: str
    url: str = ""
    target_id: str = ""

    def to_dict(self) -> dict[str, Any]:
        return {
            "type": self.type.value,
            "domain": self.domain,
            "url": self.url,
            "target_id": self.target_id,
        }

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "SubdomainState":
        return cls(
            type=TargetType(data["type"]),
            domain=data["domain"],
            url=data.get("url", ""),
            target_id=data.get("target_id", ""),
        )


@dataclass
class PersistedState:
    """
    Durable record of a deployment; the only input teardown relies on.

    An empty state (no ``domain``) means nothing is deployed.
    """

    domain: str | None = None
    region: str | None = None
    private_zone: bool = False
    subdomains: dict[str, SubdomainState] = field(default_factory=dict)

    @property
    def is_empty(self) -> bool:
        return not self.domain

    def to_dict(self) -> dict[str, Any]:
        return {
            "domain": self.domain,
            "region": self.region,
            "private_zone": self.private_zone,
            "subdomains": {
                name: sub.to_dict() for name, sub in self.subdomains.items()
            },
        }

    @classmethod
    def from_dict(cls, data: dict[str, Any] | None) -> "PersistedState":
        if not data:
            return cls()
        return cls(
            domain=data.get("domain"),
            region=data.get("region"),
            private_zone=bool(data.get("private_zone", False)),
            subdomains={
                name: SubdomainState.from_dict(sub)
                for name, sub in (data.get("subdomains") or {}).items()
            },
        )

    @classmethod
    def from_spec(cls, spec: DomainSpec) -> "PersistedState":
        return cls(
            domain=spec.domain,
            region=spec.region,
            private_zone=spec.private_zone,
            subdomains={
                sub.name: SubdomainState(
                    type=sub.target_type,
                    domain=sub.name,
                    url=sub.url,
                    target_id=sub.target_id,
                )
                for sub in spec.subdomains
            },
        )
