"""
Error taxonomy for custom domain provisioning.

Input and orchestration errors carry a ready-to-print message so the Pulumi
engine can surface them verbatim. Provider errors keep the raw provider code
so callers can branch on the condition (throttled, missing, already exists)
rather than on message text.
"""


class DomainComponentError(Exception):
    """Base class for every error raised by this package."""


class InvalidDomain(DomainComponentError):
    """Raised when the root domain is not of the form ``name.tld``."""

    def __init__(self, domain):
        super().__init__(
            f"Invalid domain specified: {domain!r}. "
            "Expected a root domain with exactly two labels, e.g. example.com."
        )
        self.domain = domain


class UnrecognizedTarget(DomainComponentError):
    """Raised when a subdomain backend matches no known target rule."""

    def __init__(self, subdomain: str, url):
        super().__init__(
            f"Cannot infer a target for subdomain {subdomain!r}: "
            f"backend URL {url!r} is neither an API Gateway nor a CloudFront URL."
        )
        self.subdomain = subdomain
        self.url = url


class ZoneNotFound(DomainComponentError):
    """Raised when no hosted zone owns the domain."""

    def __init__(self, domain: str):
        super().__init__(
            f"Domain {domain} was not found in your AWS account. "
            "Please purchase it from Route53 first then try again."
        )
        self.domain = domain


class CertificateNotReady(DomainComponentError):
    """Raised when ACM never exposes the DNS validation record."""

    def __init__(self, certificate_arn: str):
        super().__init__(
            "Your newly created AWS ACM Certificate is taking a while to "
            "initialize. Please try running this component again in a few minutes."
        )
        self.certificate_arn = certificate_arn


class CertificateNotValidated(DomainComponentError):
    """Raised when the certificate does not reach ISSUED within the poll window."""

    def __init__(self, certificate_arn: str):
        super().__init__(
            "Your newly validated AWS ACM Certificate is taking a while to "
            "register as valid. Please try running this component again in a few minutes."
        )
        self.certificate_arn = certificate_arn


class CertificateFailed(DomainComponentError):
    """Raised when the certificate is in a status it cannot recover from."""

    def __init__(self, certificate_arn: str, status: str):
        super().__init__(
            f"AWS ACM Certificate {certificate_arn} is in status {status} "
            "and cannot be used."
        )
        self.certificate_arn = certificate_arn
        self.status = status


class RetryLimitExceeded(DomainComponentError):
    """Raised when an operation keeps failing transiently past its retry budget."""

    def __init__(self, operation: str, attempts: int):
        super().__init__(
            f"{operation} did not succeed after {attempts} attempts."
        )
        self.operation = operation
        self.attempts = attempts


class TeardownError(DomainComponentError):
    """Raised after teardown when one or more subdomains failed to be removed."""

    def __init__(self, failures: dict):
        details = "; ".join(f"{name}: {error}" for name, error in failures.items())
        super().__init__(f"Failed to remove {len(failures)} domain(s): {details}")
        self.failures = failures


class ProviderError(DomainComponentError):
    """A cloud provider call failed. ``code`` is the provider's error code."""

    def __init__(self, code: str, message: str):
        super().__init__(f"{code}: {message}" if code else message)
        self.code = code
        self.message = message


class RateLimited(ProviderError):
    """The provider throttled the request; retrying later is safe."""


class ResourceNotFound(ProviderError):
    """The resource addressed by the request does not exist."""


class UnknownDomain(ResourceNotFound):
    """The gateway does not know the custom domain named in the request."""


class ResourceConflict(ProviderError):
    """The resource (or mapping) the request would create already exists."""
