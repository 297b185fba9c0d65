"""Shared fixtures: in-memory providers and a recording sleep."""

import pytest

from components.models import HostedZone
from components.polling import RetryPolicy
from components.providers import Clients
from tests.fakes import ZONE_ID, FakeCdn, FakeCertificates, FakeDns, FakeGateway


@pytest.fixture
def dns():
    return FakeDns(
        zones=[
            HostedZone(id="/hostedzone/Z0OTHER", name="example.org."),
            HostedZone(id=f"/hostedzone/{ZONE_ID}", name="example.com."),
            HostedZone(id="/hostedzone/Z0PRIVATE", name="example.com.", private=True),
        ]
    )


@pytest.fixture
def certificates():
    return FakeCertificates()


@pytest.fixture
def gateway():
    return FakeGateway()


@pytest.fixture
def cdn():
    return FakeCdn()


@pytest.fixture
def clients(dns, certificates, gateway, cdn):
    return Clients(dns=dns, certificates=certificates, gateway=gateway, cdn=cdn)


@pytest.fixture
def sleeps():
    """Recorded sleep durations; pass ``sleeps.append`` as the sleep function."""
    return []


@pytest.fixture
def retry():
    return RetryPolicy(max_attempts=3, delay=2.0)
