"""
Find-or-create an ACM certificate and drive its DNS validation to ISSUED.

A freshly requested certificate goes through two slow phases:

1. ACM takes a few seconds before it publishes the CNAME it wants to see in
   DNS (readiness). Polled every 5s, 16 times.
2. Once the record is in the zone, DNS propagation and ACM's own checks take
   a minute or more (issuance). Polled every 10s, 16 times.

Both windows are capped. When a cap is hit the run fails with a
user-actionable error; ACM keeps validating on its side, so re-running later
picks up where this run stopped.
"""

import time

import pulumi

from components._helpers import same_name
from components.errors import (
    CertificateFailed,
    CertificateNotReady,
    CertificateNotValidated,
)
from components.models import (
    CertificateDetails,
    CertificateHandle,
    CertificateStatus,
    DnsRecord,
    ValidationRecord,
)
from components.polling import (
    PollPolicy,
    RetryPolicy,
    Sleep,
    poll_until,
    retry_rate_limited,
)
from components.providers import CertificateProvider, DnsProvider

READINESS_POLICY = PollPolicy(max_attempts=16, interval=5.0)
ISSUANCE_POLICY = PollPolicy(max_attempts=16, interval=10.0)
VALIDATION_RECORD_TTL = 300


class CertificateManager:
    def __init__(
        self,
        certificates: CertificateProvider,
        dns: DnsProvider,
        readiness: PollPolicy = READINESS_POLICY,
        issuance: PollPolicy = ISSUANCE_POLICY,
        retry: RetryPolicy = RetryPolicy(),
        sleep: Sleep = time.sleep,
    ):
        self._certificates = certificates
        self._dns = dns
        self._readiness = readiness
        self._issuance = issuance
        self._retry = retry
        self._sleep = sleep

    def _run(self, operation, description: str):
        return retry_rate_limited(operation, description, self._retry, self._sleep)

    def _describe(self, arn: str) -> CertificateDetails:
        return self._run(
            lambda: self._certificates.describe_certificate(arn),
            f"Describing certificate {arn}",
        )

    def find_or_request(self, domain: str) -> str:
        """Return the arn of the certificate issued for exactly ``domain``, requesting one if none exists."""
        pulumi.log.debug(
            f"Searching for an AWS ACM Certificate based on the domain: {domain}."
        )
        arn = self._run(
            self._certificates.list_certificates, "Listing ACM certificates"
        ).get(domain)
        if arn:
            return arn

        pulumi.log.debug(
            f"No existing AWS ACM Certificates found for the domain: {domain}. "
            "Creating a new one."
        )
        return self._run(
            lambda: self._certificates.request_certificate(
                domain, [domain, f"*.{domain}"]
            ),
            f"Requesting a certificate for {domain}",
        )

    def ensure_certificate(
        self,
        domain: str,
        zone_id: str,
        certificate_arn: str | None = None,
    ) -> CertificateHandle:
        """
        Return a handle on an ISSUED certificate for ``domain``.

        Args:
            domain: Root domain the certificate covers.
            zone_id: Hosted zone in which to write the validation record.
            certificate_arn: Use this certificate instead of searching by domain.

        Raises:
            CertificateNotReady: ACM never published the validation record.
            CertificateNotValidated: the certificate did not reach ISSUED in time.
            CertificateFailed: the certificate is expired, revoked or failed.
            RetryLimitExceeded: an ACM or Route 53 call stayed rate limited.
        """
        arn = certificate_arn or self.find_or_request(domain)

        pulumi.log.debug("Checking the status of AWS ACM Certificate.")
        status = self._describe(arn).status
        if status == CertificateStatus.ISSUED:
            return CertificateHandle(arn=arn, status=status)
        if status != CertificateStatus.PENDING_VALIDATION:
            raise CertificateFailed(arn, status.value)

        pulumi.log.debug(
            'AWS ACM Certificate Validation Status is "PENDING_VALIDATION". '
            'Validating via Route53 "DNS" method.'
        )
        self.validate(domain, zone_id, arn)
        pulumi.log.info(
            f"AWS ACM Certificate for {domain} has been validated via DNS."
        )
        return CertificateHandle(arn=arn, status=CertificateStatus.ISSUED)

    def validate(self, domain: str, zone_id: str, arn: str) -> None:
        record = self.wait_for_validation_record(domain, arn)
        self.ensure_validation_record(zone_id, record)
        self.wait_for_issued(arn)

    def wait_for_validation_record(self, domain: str, arn: str) -> ValidationRecord:
        """Poll until ACM exposes the validation record of the root domain."""

        def check() -> ValidationRecord | None:
            details = self._describe(arn)
            return details.validation_records.get(domain)

        return poll_until(
            check,
            self._readiness,
            on_timeout=lambda: CertificateNotReady(arn),
            sleep=self._sleep,
        )

    def ensure_validation_record(self, zone_id: str, record: ValidationRecord) -> bool:
        """
        Write the validation record unless it is already in the zone.

        A previous or concurrent deployment may have written it while
        validation was still in progress. Returns True when a write happened.
        """
        existing = self._run(
            lambda: self._dns.list_records(zone_id, record.name, max_items=10),
            f"Listing records at {record.name}",
        )
        if any(
            same_name(r.name, record.name) and r.type == record.type for r in existing
        ):
            pulumi.log.debug(f"Validation record {record.name} already exists.")
            return False

        validation = DnsRecord(
            name=record.name,
            type=record.type,
            ttl=VALIDATION_RECORD_TTL,
            values=(record.value,),
        )
        self._run(
            lambda: self._dns.upsert_record(zone_id, validation),
            f"Upserting validation record {record.name}",
        )
        return True

    def wait_for_issued(self, arn: str) -> None:
        def check() -> bool | None:
            status = self._describe(arn).status
            if status == CertificateStatus.ISSUED:
                return True
            if status not in (
                CertificateStatus.PENDING_VALIDATION,
                CertificateStatus.NOT_FOUND,
            ):
                raise CertificateFailed(arn, status.value)
            return None

        poll_until(
            check,
            self._issuance,
            on_timeout=lambda: CertificateNotValidated(arn),
            sleep=self._sleep,
        )
