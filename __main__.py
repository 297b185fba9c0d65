"""
Custom Domain - Pulumi entrypoint.

Binds subdomains of a Route 53 hosted domain to existing AWS backends:

- **API Gateway** REST APIs get an edge custom domain, a base path mapping
  and an alias record.
- **CloudFront** distributions get an alternate domain name and an alias
  record.

A single ACM certificate for the domain and its wildcard is found or
requested, and validated via DNS before anything is bound. Removing the
stack tears the custom domains and records down again.

Stack exports: region, domains.
"""

import pulumi

from components import DomainInfra
from config import StackConfig


def _component_name(domain: str) -> str:
    return f"domain-{domain.replace('.', '-')}"


def main():
    """
    Build the DomainInfra component and export the public URLs.

    Reads config (domain, subdomains, region and optional zone/certificate
    overrides), instantiates the component and exports its outputs.
    """
    config = StackConfig.from_pulumi_config(pulumi.Config())

    domain = DomainInfra(
        name=_component_name(config.domain),
        domain=config.domain,
        subdomains=config.subdomains,
        region=config.region,
        hosted_zone_id=config.hosted_zone_id,
        certificate_arn=config.certificate_arn,
        private_zone=config.private_zone,
    )

    for output_name, value in [
        ("region", domain.region),
        ("domains", domain.domains),
    ]:
        pulumi.export(output_name, value)


if __name__ == "__main__":
    main()
