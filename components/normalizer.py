"""
Turn raw component inputs into a DomainSpec.

Raw inputs look like::

    {
        "domain": "example.com",
        "region": "us-east-1",            # optional
        "hostedZoneId": "Z123",           # optional
        "certificateArn": "arn:aws:acm:...",  # optional
        "privateZone": False,             # optional
        "subdomains": {
            "api": {"url": "https://abc.execute-api.us-east-1.amazonaws.com", "id": "abc123"},
            "www": {"url": "https://d111.cloudfront.net", "id": "E2ABC"},
        },
    }

The target type of each subdomain is inferred from its backend URL with an
ordered list of TargetRule, where the first matching rule wins; pass a
different list to support other backends.
"""

from dataclasses import dataclass
from typing import Any, Mapping, Sequence

from components._helpers import is_root_domain, strip_scheme
from components.errors import InvalidDomain, UnrecognizedTarget
from components.models import DomainSpec, SubdomainSpec, TargetType

DEFAULT_REGION = "us-east-1"


@dataclass(frozen=True)
class TargetRule:
    """A backend URL containing ``marker`` is a ``target_type`` target."""

    marker: str
    target_type: TargetType

    def matches(self, url: str) -> bool:
        return self.marker in url


# First match wins: a URL mentioning both markers is a CloudFront target.
DEFAULT_TARGET_RULES: tuple[TargetRule, ...] = (
    TargetRule("cloudfront", TargetType.CDN),
    TargetRule("execute-api", TargetType.GATEWAY),
)


def classify_target(
    label: str,
    backend: Mapping[str, Any],
    domain: str,
    rules: Sequence[TargetRule] = DEFAULT_TARGET_RULES,
) -> SubdomainSpec:
    """
    Build the SubdomainSpec for ``label.domain`` from its backend outputs.

    Raises:
        UnrecognizedTarget: the backend has no url/id, or its url matches no rule.
    """
    name = f"{label}.{domain}"
    url = backend.get("url") if isinstance(backend, Mapping) else None
    target_id = backend.get("id") if isinstance(backend, Mapping) else None
    if not isinstance(url, str) or not target_id:
        raise UnrecognizedTarget(name, url)

    for rule in rules:
        if rule.matches(url):
            return SubdomainSpec(
                name=name,
                target_type=rule.target_type,
                target_id=str(target_id),
                url=strip_scheme(url),
            )
    raise UnrecognizedTarget(name, url)


def normalize_inputs(
    inputs: Mapping[str, Any],
    rules: Sequence[TargetRule] = DEFAULT_TARGET_RULES,
) -> DomainSpec:
    """
    Validate raw inputs and return the normalized DomainSpec.

    Region defaults to DEFAULT_REGION. Subdomains keep their input order.

    Raises:
        InvalidDomain: ``domain`` is missing or not exactly two labels.
        UnrecognizedTarget: a subdomain backend cannot be classified.
    """
    domain = inputs.get("domain")
    if not is_root_domain(domain):
        raise InvalidDomain(domain)
    domain = domain.lower()

    subdomains = tuple(
        classify_target(label, backend, domain, rules)
        for label, backend in (inputs.get("subdomains") or {}).items()
    )

    return DomainSpec(
        domain=domain,
        region=inputs.get("region") or DEFAULT_REGION,
        subdomains=subdomains,
        hosted_zone_id=inputs.get("hostedZoneId") or None,
        certificate_arn=inputs.get("certificateArn") or None,
        private_zone=bool(inputs.get("privateZone", False)),
    )
