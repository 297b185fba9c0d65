"""In-memory provider fakes used by the orchestration tests."""

from components._helpers import ensure_trailing_dot
from components.errors import ResourceConflict, UnknownDomain
from components.models import (
    CertificateDetails,
    CertificateStatus,
    Distribution,
    GatewayDomain,
    ValidationRecord,
)
from components.providers import (
    CdnProvider,
    CertificateProvider,
    DnsProvider,
    GatewayProvider,
)


class Scripted:
    """Raise queued errors for a method name before behaving normally."""

    def __init__(self):
        self.errors: dict[str, list[Exception]] = {}
        self.calls: list[tuple] = []

    def fail_next(self, method: str, *errors: Exception) -> None:
        self.errors.setdefault(method, []).extend(errors)

    def _enter(self, method: str, *args) -> None:
        self.calls.append((method, *args))
        queued = self.errors.get(method)
        if queued:
            raise queued.pop(0)

    def count(self, method: str) -> int:
        return sum(1 for call in self.calls if call[0] == method)


class FakeDns(Scripted, DnsProvider):
    def __init__(self, zones=None):
        super().__init__()
        self.zones = list(zones or [])
        self.records: dict[tuple[str, str, str], object] = {}
        self.list_zones_calls = 0

    @staticmethod
    def _key(zone_id, record):
        return (zone_id, ensure_trailing_dot(record.name).lower(), record.type)

    def add(self, zone_id, record):
        self.records[self._key(zone_id, record)] = record

    def has(self, zone_id, name, type_="A"):
        return (zone_id, ensure_trailing_dot(name).lower(), type_) in self.records

    def list_zones(self):
        self.list_zones_calls += 1
        self._enter("list_zones")
        return list(self.zones)

    def list_records(self, zone_id, start_name, max_items=10):
        self._enter("list_records", zone_id, start_name)
        start = ensure_trailing_dot(start_name).lower()
        names = sorted(
            (key, record)
            for key, record in self.records.items()
            if key[0] == zone_id and key[1] >= start
        )
        return [record for _, record in names][:max_items]

    def upsert_record(self, zone_id, record):
        self._enter("upsert_record", zone_id, record)
        self.add(zone_id, record)

    def delete_record(self, zone_id, record):
        self._enter("delete_record", zone_id, record)
        return self.records.pop(self._key(zone_id, record), None) is not None


class FakeCertificates(Scripted, CertificateProvider):
    """
    ``statuses[arn]`` is consumed one entry per describe; the last one sticks.
    ``ready_after[arn]`` is the number of describes before the validation
    record shows up.
    """

    def __init__(self):
        super().__init__()
        self.by_domain: dict[str, str] = {}
        self.statuses: dict[str, list[CertificateStatus]] = {}
        self.records: dict[str, dict[str, ValidationRecord]] = {}
        self.ready_after: dict[str, int] = {}
        self.describes: dict[str, int] = {}
        self.requested: list[tuple[str, list[str]]] = []

    def add(self, domain, arn, *statuses, record=None, ready_after=0):
        self.by_domain[domain] = arn
        self.statuses[arn] = list(statuses)
        self.records[arn] = {domain: record} if record else {}
        self.ready_after[arn] = ready_after

    def list_certificates(self):
        self._enter("list_certificates")
        return dict(self.by_domain)

    def request_certificate(self, domain, alternative_names):
        self._enter("request_certificate", domain)
        self.requested.append((domain, alternative_names))
        arn = f"arn:aws:acm:us-east-1:123:certificate/{domain}"
        self.add(
            domain,
            arn,
            CertificateStatus.PENDING_VALIDATION,
            CertificateStatus.PENDING_VALIDATION,
            CertificateStatus.ISSUED,
            record=ValidationRecord(f"_x1.{domain}.", "CNAME", "_y1.acm-validations.aws."),
        )
        return arn

    def describe_certificate(self, arn):
        self._enter("describe_certificate", arn)
        count = self.describes.get(arn, 0)
        self.describes[arn] = count + 1
        statuses = self.statuses[arn]
        status = statuses.pop(0) if len(statuses) > 1 else statuses[0]
        records = self.records[arn] if count >= self.ready_after[arn] else {}
        return CertificateDetails(arn=arn, status=status, validation_records=records)


class FakeGateway(Scripted, GatewayProvider):
    def __init__(self):
        super().__init__()
        self.domains: dict[str, GatewayDomain] = {}
        self.mappings: dict[str, str] = {}

    def create_domain(self, domain, certificate_arn):
        self._enter("create_domain", domain, certificate_arn)
        if domain in self.domains:
            raise ResourceConflict("ConflictException", "The domain name you provided already exists.")
        self.domains[domain] = GatewayDomain(
            domain=domain,
            distribution_domain=f"d-{domain.split('.')[0]}.cloudfront.net",
            distribution_zone_id="Z2FDTNDATAQYW2",
        )
        return self.domains[domain]

    def create_mapping(self, domain, api_id):
        self._enter("create_mapping", domain, api_id)
        if domain not in self.domains:
            raise UnknownDomain("NotFoundException", "Invalid domain name identifier specified")
        if domain in self.mappings:
            raise ResourceConflict("ConflictException", "Base path already exists for this domain name")
        self.mappings[domain] = api_id

    def get_domain(self, domain):
        self._enter("get_domain", domain)
        return self.domains.get(domain)

    def delete_domain(self, domain):
        self._enter("delete_domain", domain)
        self.domains.pop(domain)
        self.mappings.pop(domain, None)


class FakeCdn(Scripted, CdnProvider):
    def __init__(self):
        super().__init__()
        self.distributions: dict[str, dict] = {}

    def add_distribution(self, distribution_id, url, *aliases):
        self.distributions[distribution_id] = {"url": url, "aliases": list(aliases), "cert": None}

    def get_distribution_by_domain(self, domain):
        self._enter("get_distribution_by_domain", domain)
        for distribution_id, dist in self.distributions.items():
            if domain in dist["aliases"]:
                return Distribution(distribution_id, dist["url"], tuple(dist["aliases"]))
        return None

    def add_alias(self, distribution_id, domain, certificate_arn):
        self._enter("add_alias", distribution_id, domain)
        dist = self.distributions[distribution_id]
        if domain in dist["aliases"]:
            return False
        dist["aliases"].append(domain)
        dist["cert"] = certificate_arn
        return True

    def remove_alias(self, distribution_id, domain):
        self._enter("remove_alias", distribution_id, domain)
        dist = self.distributions.get(distribution_id)
        if dist is None or domain not in dist["aliases"]:
            return False
        dist["aliases"].remove(domain)
        return True


ZONE_ID = "Z0EXAMPLE"
CERT_ARN = "arn:aws:acm:us-east-1:123:certificate/example.com"
