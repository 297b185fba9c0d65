"""
Pulumi dynamic provider running the apply/remove orchestration.

Pulumi stores the outputs of ``create``/``update`` in the stack state; they
carry the PersistedState under ``state``, which ``delete`` reads back to know
what to remove. A failing ``delete`` leaves the resource (and so its state)
in the stack, so ``pulumi destroy`` can simply be re-run.
"""

from typing import Any

import pulumi
from pulumi.dynamic import (
    CreateResult,
    DiffResult,
    Resource,
    ResourceProvider,
    UpdateResult,
)

from components.aws_clients import get_clients
from components.deployer import Deployer
from components.models import PersistedState, SubdomainState
from components.normalizer import normalize_inputs

# Changing any of these moves every record to another domain, zone or region.
REPLACE_ON_CHANGE = ("domain", "region", "privateZone")


def _same_binding(old: SubdomainState, new: SubdomainState | None) -> bool:
    return (
        new is not None
        and old.type == new.type
        and old.target_id == new.target_id
    )


class CustomDomainProvider(ResourceProvider):
    def _deployer(self) -> Deployer:
        return Deployer(get_clients)

    def _apply(self, props: dict[str, Any]) -> dict[str, Any]:
        outputs, state = self._deployer().apply(props)
        return {**props, **outputs, "state": state.to_dict()}

    def create(self, props: dict[str, Any]) -> CreateResult:
        outs = self._apply(props)
        return CreateResult(id_=outs["domain"], outs=outs)

    def diff(self, _id: str, olds: dict[str, Any], news: dict[str, Any]) -> DiffResult:
        replaces = [key for key in REPLACE_ON_CHANGE if olds.get(key) != news.get(key)]
        changes = bool(replaces) or any(
            olds.get(key) != news.get(key)
            for key in ("subdomains", "hostedZoneId", "certificateArn")
        )
        return DiffResult(
            changes=changes,
            replaces=replaces,
            delete_before_replace=True,
        )

    def update(
        self, _id: str, olds: dict[str, Any], news: dict[str, Any]
    ) -> UpdateResult:
        # Bindings that are gone or now point at another backend are removed
        # before the new set is bound.
        previous = PersistedState.from_dict(olds.get("state"))
        wanted = PersistedState.from_spec(normalize_inputs(news)).subdomains
        stale = {
            name: sub
            for name, sub in previous.subdomains.items()
            if not _same_binding(sub, wanted.get(name))
        }
        if stale:
            pulumi.log.info(f"Removing stale domain bindings: {sorted(stale)}")
            previous.subdomains = stale
            self._deployer().remove(previous)
        return UpdateResult(outs=self._apply(news))

    def delete(self, _id: str, props: dict[str, Any]) -> None:
        self._deployer().remove(PersistedState.from_dict(props.get("state")))


class CustomDomain(Resource):
    """
    Custom domain with certificate and subdomain bindings, managed by
    CustomDomainProvider.

    Outputs:
        domains: Public HTTPS URLs of the bound subdomains.
        region: Region the domain was deployed in.
        state: Recorded deployment, read back on delete.
    """

    domains: pulumi.Output[list]
    region: pulumi.Output[str]
    state: pulumi.Output[dict]

    def __init__(
        self,
        name: str,
        props: dict[str, Any],
        opts: pulumi.ResourceOptions | None = None,
    ):
        super().__init__(
            CustomDomainProvider(),
            name,
            {"region": None, **props, "domains": None, "state": None},
            opts,
        )
