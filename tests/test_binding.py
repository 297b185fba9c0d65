"""Tests for the subdomain binding state machines"""

import pytest

from components.binding import CLOUDFRONT_HOSTED_ZONE_ID, BindingOrchestrator, BindState
from components.errors import (
    ProviderError,
    RateLimited,
    ResourceNotFound,
    RetryLimitExceeded,
    UnknownDomain,
)
from components.models import SubdomainSpec, TargetType
from tests.fakes import CERT_ARN, ZONE_ID

API = SubdomainSpec(
    name="api.example.com",
    target_type=TargetType.GATEWAY,
    target_id="abc123",
    url="abc123.execute-api.us-east-1.amazonaws.com",
)
WWW = SubdomainSpec(
    name="www.example.com",
    target_type=TargetType.CDN,
    target_id="E2ABC",
    url="d111.cloudfront.net",
)


def throttled():
    return RateLimited("TooManyRequestsException", "Too Many Requests")


def unknown_domain():
    return UnknownDomain("NotFoundException", "Invalid domain name identifier specified")


@pytest.fixture
def binder(clients, retry, sleeps):
    return BindingOrchestrator(clients, retry=retry, sleep=sleeps.append)


class TestGatewayBinding:
    def test_creates_domain_then_maps(self, binder, gateway, dns):
        assert binder.bind(API, ZONE_ID, CERT_ARN) == BindState.BOUND

        assert gateway.mappings == {"api.example.com": "abc123"}
        assert gateway.count("create_domain") == 1
        assert gateway.count("create_mapping") == 2
        record = dns.records[(ZONE_ID, "api.example.com.", "A")]
        assert record.alias.dns_name == "d-api.cloudfront.net"
        assert record.alias.hosted_zone_id == "Z2FDTNDATAQYW2"

    def test_binding_twice_is_a_no_op(self, binder, gateway, dns):
        binder.bind(API, ZONE_ID, CERT_ARN)
        upserts = dns.count("upsert_record")

        assert binder.bind(API, ZONE_ID, CERT_ARN) == BindState.BOUND
        assert gateway.count("create_domain") == 1
        assert dns.count("upsert_record") == upserts

    def test_rate_limited_mapping_is_retried_once(self, binder, gateway, sleeps):
        gateway.create_domain(API.name, CERT_ARN)
        gateway.calls.clear()
        gateway.fail_next("create_mapping", throttled())

        assert binder.bind(API, ZONE_ID, CERT_ARN) == BindState.BOUND
        assert gateway.count("create_mapping") == 2
        assert gateway.count("create_domain") == 0
        assert sleeps == [2.0]

    def test_rate_limited_domain_creation_is_retried(self, binder, gateway, sleeps):
        gateway.fail_next("create_domain", throttled(), throttled())

        assert binder.bind(API, ZONE_ID, CERT_ARN) == BindState.BOUND
        assert gateway.count("create_domain") == 3
        assert sleeps == [2.0, 2.0]

    def test_sustained_throttling_is_fatal(self, binder, gateway):
        gateway.fail_next("create_mapping", *(throttled() for _ in range(3)))

        with pytest.raises(RetryLimitExceeded):
            binder.bind(API, ZONE_ID, CERT_ARN)
        assert gateway.mappings == {}

    def test_reuses_domain_left_by_interrupted_run(self, binder, gateway, dns):
        # Domain exists but mapping was never created; gateway still reports it unknown once.
        gateway.create_domain(API.name, CERT_ARN)
        gateway.calls.clear()
        gateway.fail_next("create_mapping", unknown_domain())

        assert binder.bind(API, ZONE_ID, CERT_ARN) == BindState.BOUND
        assert gateway.count("create_domain") == 1
        assert gateway.count("get_domain") == 1
        assert dns.has(ZONE_ID, API.name)

    def test_other_errors_propagate(self, binder, gateway):
        gateway.fail_next("create_mapping", ProviderError("BadRequestException", "bad stage"))

        with pytest.raises(ProviderError, match="bad stage"):
            binder.bind(API, ZONE_ID, CERT_ARN)

    def test_unknown_rest_api_does_not_recreate_domain(self, binder, gateway):
        gateway.create_domain(API.name, CERT_ARN)
        gateway.calls.clear()
        gateway.fail_next(
            "create_mapping",
            ResourceNotFound("NotFoundException", "Invalid REST API identifier specified"),
        )

        with pytest.raises(ResourceNotFound, match="REST API"):
            binder.bind(API, ZONE_ID, CERT_ARN)
        assert gateway.count("create_domain") == 0
        assert gateway.mappings == {}

    def test_domain_never_visible_is_bounded(self, binder, gateway):
        def always_unknown(domain, api_id):
            raise unknown_domain()

        gateway.create_mapping = always_unknown

        with pytest.raises(RetryLimitExceeded, match="did not succeed after 3 attempts"):
            binder.bind(API, ZONE_ID, CERT_ARN)


class TestCdnBinding:
    def test_adds_alias_and_record(self, binder, cdn, dns):
        cdn.add_distribution("E2ABC", "d111.cloudfront.net")

        assert binder.bind(WWW, ZONE_ID, CERT_ARN) == BindState.BOUND

        assert cdn.distributions["E2ABC"]["aliases"] == ["www.example.com"]
        assert cdn.distributions["E2ABC"]["cert"] == CERT_ARN
        record = dns.records[(ZONE_ID, "www.example.com.", "A")]
        assert record.alias.dns_name == "d111.cloudfront.net"
        assert record.alias.hosted_zone_id == CLOUDFRONT_HOSTED_ZONE_ID

    def test_existing_alias_still_upserts_record(self, binder, cdn, dns):
        cdn.add_distribution("E2ABC", "d111.cloudfront.net", "www.example.com")

        assert binder.bind(WWW, ZONE_ID, CERT_ARN) == BindState.BOUND
        assert cdn.distributions["E2ABC"]["aliases"] == ["www.example.com"]
        assert dns.has(ZONE_ID, "www.example.com")

    def test_rate_limited_alias_is_retried(self, binder, cdn, sleeps):
        cdn.add_distribution("E2ABC", "d111.cloudfront.net")
        cdn.fail_next("add_alias", throttled())

        assert binder.bind(WWW, ZONE_ID, CERT_ARN) == BindState.BOUND
        assert cdn.count("add_alias") == 2
        assert sleeps == [2.0]
