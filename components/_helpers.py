"""
Pure helpers for DNS names and URLs. Testable without Pulumi or AWS.

Used by the normalizer (strip_scheme, is_root_domain), the zone resolver
(ensure_trailing_dot, strip_zone_prefix), teardown (bare_domain) and the
deployer (public_url). No provider types; all functions accept and return
plain Python types.
"""

HOSTED_ZONE_PREFIX = "/hostedzone/"


def ensure_trailing_dot(
    domain: str,
) -> str:
    """
    Return domain with a single trailing dot for DNS FQDN.

    Route 53 returns zone and record names fully qualified, with a trailing
    dot. Idempotent if already present.
    """
    return domain if domain.endswith(".") else f"{domain}."


def same_name(
    left: str,
    right: str,
) -> bool:
    """Compare two DNS names ignoring case and a trailing dot."""
    return ensure_trailing_dot(left).lower() == ensure_trailing_dot(right).lower()


def is_root_domain(
    domain: object,
) -> bool:
    """True for strings of exactly two labels, e.g. "example.com"."""
    if not isinstance(domain, str):
        return False
    labels = domain.split(".")
    return len(labels) == 2 and all(labels)


def strip_scheme(
    url: str,
) -> str:
    """
    Drop the https:// scheme and any trailing slash from a backend URL.

    Args:
        url: Backend URL, e.g. "https://abc.execute-api.us-east-1.amazonaws.com/".

    Returns:
        Host part, e.g. "abc.execute-api.us-east-1.amazonaws.com".
    """
    for scheme in ("https://", "http://"):
        if url.startswith(scheme):
            url = url[len(scheme):]
            break
    return url.rstrip("/")


def strip_zone_prefix(
    zone_id: str,
) -> str:
    """Route 53 zone ids are returned as "/hostedzone/Z123"; keep only "Z123"."""
    return zone_id.replace(HOSTED_ZONE_PREFIX, "")


def bare_domain(
    domain: str,
) -> str:
    """Return domain without a leading "www." label ("www.example.com" -> "example.com")."""
    return domain[len("www."):] if domain.startswith("www.") else domain


def public_url(
    domain: str,
) -> str:
    """HTTPS URL reported to the user for a bound subdomain; "www." is dropped."""
    return f"https://{bare_domain(domain)}"
