# This module defines the catalog entities shared by the acquisition pipeline and the selection store.
# Entities are frozen once built and compare by id only, so two decodes of the same channel are the same channel.
# Packages are never transmitted; they are derived from a channel's price list in array order.
# The id prefix `channel.id + "_"` is the only link from a package back to its channel.

from __future__ import annotations

from dataclasses import dataclass
from decimal import Decimal

from campaign_planner.catalog.identifiers import ID_SEPARATOR, compound_id, content_id, slug


class IdentityEntity:
    """Equality and hashing by (type, id); structural fields are ignored on purpose."""

    id: str

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, IdentityEntity) or type(other) is not type(self):
            return NotImplemented
        return self.id == other.id

    def __hash__(self) -> int:
        return hash((type(self).__name__, self.id))


@dataclass(frozen=True, eq=False)
class ChannelRef(IdentityEntity):
    id: str
    channel_name: str
    external_id: str

    @classmethod
    def build(cls, channel_name: str, external_id: str) -> ChannelRef:
        return cls(
            id=compound_id(slug(channel_name), external_id),
            channel_name=channel_name,
            external_id=external_id,
        )

    def to_channel(self) -> Channel:
        return Channel.build(self.channel_name, external_id=self.external_id)


@dataclass(frozen=True, eq=False)
class TargetingCriterion(IdentityEntity):
    id: str
    label: str
    available_channels: tuple[ChannelRef, ...] = ()

    @classmethod
    def build(cls, label: str, available_channels: tuple[ChannelRef, ...] = ()) -> TargetingCriterion:
        return cls(id=slug(label), label=label, available_channels=tuple(available_channels))


@dataclass(frozen=True, eq=False)
class PackagePrice(IdentityEntity):
    id: str
    amount: Decimal
    feature_list: tuple[str, ...]
    currency: str

    @classmethod
    def build(cls, amount: Decimal, feature_list: tuple[str, ...] | list[str], currency: str) -> PackagePrice:
        features = tuple(feature_list)
        return cls(
            id=content_id(amount, currency, len(features)),
            amount=amount,
            feature_list=features,
            currency=currency,
        )


@dataclass(frozen=True, eq=False)
class Channel(IdentityEntity):
    id: str
    name: str
    packages: tuple[PackagePrice, ...] = ()
    external_id: str | None = None

    @classmethod
    def build(
        cls,
        name: str,
        *,
        packages: tuple[PackagePrice, ...] = (),
        external_id: str | None = None,
    ) -> Channel:
        return cls(id=slug(name), name=name, packages=tuple(packages), external_id=external_id)

    @property
    def has_external_id(self) -> bool:
        return bool(self.external_id)

    def with_packages(self, packages: tuple[PackagePrice, ...] | list[PackagePrice]) -> Channel:
        return Channel(id=self.id, name=self.name, packages=tuple(packages), external_id=self.external_id)

    def owns(self, package: Package) -> bool:
        prefix = self.id + ID_SEPARATOR
        if not package.id.startswith(prefix):
            return False
        return package.id[len(prefix) :].isdigit()


@dataclass(frozen=True, eq=False)
class Package(IdentityEntity):
    id: str
    name: str
    description: str
    amount: Decimal
    feature_list: tuple[str, ...]
    currency: str

    @property
    def details(self) -> str:
        return ", ".join(self.feature_list)

    def to_price(self) -> PackagePrice:
        return PackagePrice.build(self.amount, self.feature_list, self.currency)


def derive_packages(channel: Channel) -> list[Package]:
    """Synthesize one package per price entry; ids are `<channel.id>_<index>`."""

    return [
        Package(
            id=compound_id(channel.id, index),
            name=f"{channel.name} Package {index + 1}",
            description=f"Monthly package for {channel.name}",
            amount=price.amount,
            feature_list=price.feature_list,
            currency=price.currency,
        )
        for index, price in enumerate(channel.packages)
    ]
