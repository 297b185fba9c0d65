"""
Stack configuration loaded from pulumi.Config().

Provides a typed, immutable view of stack settings, read from Pulumi config
(e.g. Pulumi.<stack>.yaml or pulumi config set). ``domain`` and
``subdomains`` are required; the rest is optional. Used by __main__.main()
to build the DomainInfra component.

Example stack config::

    config:
      custom-domain:domain: example.com
      custom-domain:subdomains:
        api:
          url: https://abc123.execute-api.us-east-1.amazonaws.com
          id: abc123
"""

from dataclasses import dataclass
from typing import Any, Callable

import pulumi
import pulumi_aws as aws

from components.normalizer import DEFAULT_REGION


def _require_str(config: pulumi.Config, key: str) -> str:
    return config.require(key)


def _require_object(config: pulumi.Config, key: str) -> dict:
    return config.require_object(key)


def _optional_str(config: pulumi.Config, key: str) -> str | None:
    return config.get(key) or None


def _optional_bool(config: pulumi.Config, key: str) -> bool:
    raw = config.get(key)
    if raw is None:
        return False
    if isinstance(raw, bool):
        return raw
    return str(raw).strip().lower() in ("1", "true", "yes")


def _region(config: pulumi.Config, key: str) -> str:
    # Stack value, then the provider's aws:region, then the default.
    return config.get(key) or aws.config.region or DEFAULT_REGION


# (key, parser); parser receives (config, key) and returns value.
_CONFIG_SPEC: list[tuple[str, Callable[[pulumi.Config, str], Any]]] = [
    ("domain", _require_str),
    ("subdomains", _require_object),
    ("region", _region),
    ("hosted_zone_id", _optional_str),
    ("certificate_arn", _optional_str),
    ("private_zone", _optional_bool),
]


@dataclass(frozen=True)
class StackConfig:
    """
    Stack configuration from Pulumi config.

    Attributes:
        domain: Root domain of the Route 53 hosted zone, e.g. "example.com" (required).
        subdomains: Label to backend descriptor ``{"url": ..., "id": ...}`` (required).
        region: AWS region; falls back to aws:region, then us-east-1.
        hosted_zone_id: Hosted zone to use instead of looking it up by domain.
        certificate_arn: ACM certificate to use instead of finding one by domain.
        private_zone: Whether the hosted zone is private.
    """

    domain: str
    subdomains: dict
    region: str
    hosted_zone_id: str | None
    certificate_arn: str | None
    private_zone: bool

    @classmethod
    def from_pulumi_config(cls, config: pulumi.Config) -> "StackConfig":
        """
        Build StackConfig from pulumi.Config(). Keys are parsed per _CONFIG_SPEC.
        """
        kwargs = {key: parser(config, key) for key, parser in _CONFIG_SPEC}
        return cls(**kwargs)
