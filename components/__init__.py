"""
Custom domain provisioning components.

The Pulumi-facing pieces wrap a provider-agnostic orchestration core:

- **DomainInfra**: ComponentResource; exposes ``domains`` and ``region``.
- **CustomDomain**: dynamic resource whose provider runs the Deployer on
  create/update and tears down the recorded state on delete.
- **Deployer**: apply/remove over the normalizer, ZoneResolver,
  CertificateManager, BindingOrchestrator and TeardownOrchestrator, driven
  through the DnsProvider/CertificateProvider/GatewayProvider/CdnProvider
  interfaces (boto3 implementations in ``components.aws_clients``).
"""

from components.deployer import Deployer
from components.domain import DomainInfra
from components.dynamic import CustomDomain

__all__ = ["CustomDomain", "Deployer", "DomainInfra"]
