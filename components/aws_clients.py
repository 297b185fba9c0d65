"""
boto3 implementations of the provider interfaces.

- **Route53Dns**: hosted zones and record sets.
- **AcmCertificates**: certificate lookup, request and description.
- **ApiGatewayDomains**: edge custom domains and base path mappings (REST APIs).
- **CloudFrontAliases**: alternate domain names of existing distributions.

``botocore`` ClientErrors are translated into the provider taxonomy of
``components.errors`` so the orchestrators never see SDK error codes.
Credentials come from the default boto3 chain.
"""

import copy
from contextlib import contextmanager
from typing import Any, Iterator

import boto3
from botocore.exceptions import ClientError

from components._helpers import same_name
from components.errors import (
    ProviderError,
    RateLimited,
    ResourceConflict,
    ResourceNotFound,
    UnknownDomain,
)
from components.models import (
    AliasTarget,
    CertificateDetails,
    CertificateStatus,
    DnsRecord,
    Distribution,
    GatewayDomain,
    HostedZone,
    ValidationRecord,
)
from components.providers import (
    CdnProvider,
    CertificateProvider,
    Clients,
    DnsProvider,
    GatewayProvider,
)

RATE_LIMIT_CODES = frozenset(
    {
        "Throttling",
        "ThrottlingException",
        "TooManyRequestsException",
        "PriorRequestNotComplete",
    }
)
NOT_FOUND_CODES = frozenset(
    {
        "NotFoundException",
        "NoSuchHostedZone",
        "NoSuchDistribution",
        "ResourceNotFoundException",
    }
)
CONFLICT_CODES = frozenset({"ConflictException", "CNAMEAlreadyExists"})

# API Gateway mapping of the domain root onto the deployed stage.
BASE_PATH = "(none)"
DEFAULT_STAGE = "production"
# API Gateway wording for a base path mapping on a domain it does not know.
UNKNOWN_DOMAIN_MESSAGE = "Invalid domain name identifier specified"


def translate_client_error(error: ClientError) -> ProviderError:
    """Map a botocore ClientError onto the provider error taxonomy."""
    details = error.response.get("Error", {})
    code = details.get("Code", "")
    message = details.get("Message", str(error))
    if code in RATE_LIMIT_CODES:
        return RateLimited(code, message)
    if code == "NotFoundException" and UNKNOWN_DOMAIN_MESSAGE in message:
        return UnknownDomain(code, message)
    if code in NOT_FOUND_CODES:
        return ResourceNotFound(code, message)
    if code in CONFLICT_CODES:
        return ResourceConflict(code, message)
    return ProviderError(code, message)


@contextmanager
def translated_errors() -> Iterator[None]:
    try:
        yield
    except ClientError as e:
        raise translate_client_error(e) from e


def _record_to_aws(record: DnsRecord) -> dict[str, Any]:
    record_set: dict[str, Any] = {"Name": record.name, "Type": record.type}
    if record.alias is not None:
        record_set["AliasTarget"] = {
            "HostedZoneId": record.alias.hosted_zone_id,
            "DNSName": record.alias.dns_name,
            "EvaluateTargetHealth": record.alias.evaluate_target_health,
        }
    else:
        record_set["TTL"] = record.ttl
        record_set["ResourceRecords"] = [{"Value": value} for value in record.values]
    return record_set


def _record_from_aws(record_set: dict[str, Any]) -> DnsRecord:
    alias = record_set.get("AliasTarget")
    return DnsRecord(
        name=record_set["Name"],
        type=record_set["Type"],
        ttl=record_set.get("TTL"),
        values=tuple(r["Value"] for r in record_set.get("ResourceRecords", [])),
        alias=(
            AliasTarget(
                dns_name=alias["DNSName"],
                hosted_zone_id=alias["HostedZoneId"],
                evaluate_target_health=alias.get("EvaluateTargetHealth", False),
            )
            if alias
            else None
        ),
    )


class Route53Dns(DnsProvider):
    def __init__(self, client):
        self._client = client

    def list_zones(self) -> list[HostedZone]:
        zones = []
        with translated_errors():
            for page in self._client.get_paginator("list_hosted_zones").paginate():
                for zone in page["HostedZones"]:
                    zones.append(
                        HostedZone(
                            id=zone["Id"],
                            name=zone["Name"],
                            private=zone.get("Config", {}).get("PrivateZone", False),
                        )
                    )
        return zones

    def list_records(
        self, zone_id: str, start_name: str, max_items: int = 10
    ) -> list[DnsRecord]:
        with translated_errors():
            res = self._client.list_resource_record_sets(
                HostedZoneId=zone_id,
                StartRecordName=start_name,
                MaxItems=str(max_items),
            )
        return [_record_from_aws(r) for r in res["ResourceRecordSets"]]

    def _change(self, zone_id: str, action: str, record: DnsRecord) -> None:
        with translated_errors():
            self._client.change_resource_record_sets(
                HostedZoneId=zone_id,
                ChangeBatch={
                    "Changes": [
                        {"Action": action, "ResourceRecordSet": _record_to_aws(record)}
                    ]
                },
            )

    def upsert_record(self, zone_id: str, record: DnsRecord) -> None:
        self._change(zone_id, "UPSERT", record)

    def delete_record(self, zone_id: str, record: DnsRecord) -> bool:
        try:
            self._change(zone_id, "DELETE", record)
        except ProviderError as e:
            # Route 53 rejects deleting a missing record set with InvalidChangeBatch.
            if e.code == "InvalidChangeBatch" and "not found" in e.message:
                return False
            raise
        return True


class AcmCertificates(CertificateProvider):
    def __init__(self, client):
        self._client = client

    def list_certificates(self) -> dict[str, str]:
        certificates: dict[str, str] = {}
        with translated_errors():
            for page in self._client.get_paginator("list_certificates").paginate():
                for summary in page["CertificateSummaryList"]:
                    certificates.setdefault(
                        summary["DomainName"], summary["CertificateArn"]
                    )
        return certificates

    def request_certificate(self, domain: str, alternative_names: list[str]) -> str:
        with translated_errors():
            res = self._client.request_certificate(
                DomainName=domain,
                SubjectAlternativeNames=alternative_names,
                ValidationMethod="DNS",
            )
        return res["CertificateArn"]

    def describe_certificate(self, arn: str) -> CertificateDetails:
        with translated_errors():
            res = self._client.describe_certificate(CertificateArn=arn)
        certificate = res.get("Certificate") or {}
        records = {}
        for option in certificate.get("DomainValidationOptions", []):
            resource_record = option.get("ResourceRecord")
            if resource_record:
                records[option["DomainName"]] = ValidationRecord(
                    name=resource_record["Name"],
                    type=resource_record["Type"],
                    value=resource_record["Value"],
                )
        return CertificateDetails(
            arn=arn,
            status=CertificateStatus.from_provider(certificate.get("Status")),
            validation_records=records,
        )


class ApiGatewayDomains(GatewayProvider):
    def __init__(self, client, stage: str = DEFAULT_STAGE):
        self._client = client
        self._stage = stage

    @staticmethod
    def _domain(res: dict[str, Any]) -> GatewayDomain:
        return GatewayDomain(
            domain=res["domainName"],
            distribution_domain=res["distributionDomainName"],
            distribution_zone_id=res["distributionHostedZoneId"],
        )

    def create_domain(self, domain: str, certificate_arn: str) -> GatewayDomain:
        with translated_errors():
            res = self._client.create_domain_name(
                domainName=domain,
                certificateArn=certificate_arn,
                securityPolicy="TLS_1_2",
                endpointConfiguration={"types": ["EDGE"]},
            )
        return self._domain(res)

    def create_mapping(self, domain: str, api_id: str) -> None:
        with translated_errors():
            self._client.create_base_path_mapping(
                domainName=domain,
                restApiId=api_id,
                basePath=BASE_PATH,
                stage=self._stage,
            )

    def get_domain(self, domain: str) -> GatewayDomain | None:
        try:
            with translated_errors():
                res = self._client.get_domain_name(domainName=domain)
        except ResourceNotFound:
            return None
        return self._domain(res)

    def delete_domain(self, domain: str) -> None:
        with translated_errors():
            self._client.delete_domain_name(domainName=domain)


class CloudFrontAliases(CdnProvider):
    def __init__(self, client):
        self._client = client

    def get_distribution_by_domain(self, domain: str) -> Distribution | None:
        with translated_errors():
            for page in self._client.get_paginator("list_distributions").paginate():
                for item in page["DistributionList"].get("Items", []):
                    aliases = tuple(item.get("Aliases", {}).get("Items", []))
                    if any(same_name(alias, domain) for alias in aliases):
                        return Distribution(
                            id=item["Id"], url=item["DomainName"], aliases=aliases
                        )
        return None

    def _get_config(self, distribution_id: str) -> tuple[dict[str, Any], str]:
        with translated_errors():
            res = self._client.get_distribution_config(Id=distribution_id)
        return copy.deepcopy(res["DistributionConfig"]), res["ETag"]

    def _put_config(
        self, distribution_id: str, config: dict[str, Any], etag: str
    ) -> None:
        with translated_errors():
            self._client.update_distribution(
                Id=distribution_id, IfMatch=etag, DistributionConfig=config
            )

    def add_alias(
        self, distribution_id: str, domain: str, certificate_arn: str
    ) -> bool:
        config, etag = self._get_config(distribution_id)
        aliases = list(config.get("Aliases", {}).get("Items", []))
        if domain in aliases:
            return False

        aliases.append(domain)
        config["Aliases"] = {"Quantity": len(aliases), "Items": aliases}
        config["ViewerCertificate"] = {
            "ACMCertificateArn": certificate_arn,
            "SSLSupportMethod": "sni-only",
            "MinimumProtocolVersion": "TLSv1.2_2021",
        }
        self._put_config(distribution_id, config, etag)
        return True

    def remove_alias(self, distribution_id: str, domain: str) -> bool:
        try:
            config, etag = self._get_config(distribution_id)
        except ResourceNotFound:
            return False
        aliases = list(config.get("Aliases", {}).get("Items", []))
        if domain not in aliases:
            return False

        aliases.remove(domain)
        config["Aliases"] = {"Quantity": len(aliases), "Items": aliases}
        if not aliases:
            # A custom certificate is only allowed while aliases remain.
            config["ViewerCertificate"] = {"CloudFrontDefaultCertificate": True}
        self._put_config(distribution_id, config, etag)
        return True


def get_clients(region: str) -> Clients:
    """Build the provider set for ``region`` from the default boto3 session chain."""
    session = boto3.session.Session(region_name=region)
    return Clients(
        dns=Route53Dns(session.client("route53")),
        certificates=AcmCertificates(session.client("acm")),
        gateway=ApiGatewayDomains(session.client("apigateway")),
        cdn=CloudFrontAliases(session.client("cloudfront")),
    )
