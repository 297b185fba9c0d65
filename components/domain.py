"""
Custom domains for API Gateway and CloudFront backends.

This component binds subdomains of a Route 53 hosted domain to existing
backends: REST APIs (``*.execute-api.*`` URLs) get an edge custom domain and
a base path mapping, CloudFront distributions (``*.cloudfront.net`` URLs) get
an alternate domain name. Each subdomain also gets an alias ``A`` record, and
all of them share one ACM certificate covering ``domain`` and ``*.domain``,
requested and DNS-validated on the first deployment.

The hosted zone must already exist. Outputs (``domains``, ``region``) are
``Output`` values so the stack can export the public URLs.
"""

import pulumi

from components.dynamic import CustomDomain

ID: str = "customdomain:aws:DomainInfra"

# Backend descriptor as produced by other components: {"url": ..., "id": ...}.
Backend = dict[str, str]


class DomainInfra(pulumi.ComponentResource):
    """
    Certificate, custom domains and DNS records for a set of subdomains.

    Resources: one CustomDomain dynamic resource holding the deployment state.
    """

    def __init__(
        self,
        name: str,
        domain: str,
        subdomains: dict[str, Backend],
        region: str = "us-east-1",
        hosted_zone_id: str | None = None,
        certificate_arn: str | None = None,
        private_zone: bool = False,
    ):
        """
        Create the custom domain resource.

        Args:
            name: Pulumi resource name.
            domain: Root domain of the hosted zone (e.g. "example.com").
            subdomains: Label to backend descriptor, e.g.
                ``{"api": {"url": "https://abc.execute-api...", "id": "abc123"}}``.
            region: AWS region of the backends and certificate.
            hosted_zone_id: Skip the zone lookup and use this zone.
            certificate_arn: Use this certificate instead of finding one by domain.
            private_zone: Look the zone up among private hosted zones.

        Outputs (set on self, registered for the component):
            domains: Public HTTPS URLs, one per subdomain.
            region: Region the domain was deployed in.
        """
        super().__init__(
            ID,
            name,
        )

        child_opts = pulumi.ResourceOptions(parent=self)

        props = {
            "domain": domain,
            "region": region,
            "subdomains": subdomains,
            "privateZone": private_zone,
        }
        if hosted_zone_id:
            props["hostedZoneId"] = hosted_zone_id
        if certificate_arn:
            props["certificateArn"] = certificate_arn

        self.custom_domain = CustomDomain(
            f"{name}-domain",
            props,
            opts=child_opts,
        )

        self.domains: pulumi.Output[list] = self.custom_domain.domains
        self.region: pulumi.Output[str] = self.custom_domain.region
        self.register_outputs(
            {
                "domains": self.domains,
                "region": self.region,
            }
        )
