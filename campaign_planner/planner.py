# This module is the session object that connects the fetch gateway to the selection store.
# It exists so a front end only deals with load results and never with fetch exceptions.
# Fetch failures become an inline error message on the result, which the caller can retry.
# The store is owned here and handed out read-only through the `store` attribute.

from __future__ import annotations

import logging
from collections.abc import Iterable
from dataclasses import dataclass, field

from campaign_planner.acquisition.errors import FetchError
from campaign_planner.acquisition.gateway import FetchGateway
from campaign_planner.catalog.entities import Channel, Package, TargetingCriterion, derive_packages
from campaign_planner.selection.store import SelectionStore

LOGGER = logging.getLogger("planner")


@dataclass(frozen=True)
class TargetingLoad:
    criteria: tuple[TargetingCriterion, ...] = ()
    channels: tuple[Channel, ...] = ()
    source: str | None = None
    error_message: str | None = None

    @property
    def ok(self) -> bool:
        return self.error_message is None


@dataclass(frozen=True)
class ChannelLoad:
    channel: Channel
    packages: tuple[Package, ...] = ()
    selected: Package | None = None
    error_message: str | None = None

    @property
    def ok(self) -> bool:
        return self.error_message is None


@dataclass
class CampaignPlanner:
    gateway: FetchGateway
    store: SelectionStore = field(default_factory=SelectionStore)
    last_targeting: TargetingLoad = field(default_factory=TargetingLoad)

    def load_targeting(self) -> TargetingLoad:
        try:
            data = self.gateway.fetch_targeting_data()
        except FetchError as exc:
            LOGGER.error("Failed to load targeting data: %s", exc)
            self.last_targeting = TargetingLoad(error_message=f"Failed to load data: {exc}")
            return self.last_targeting

        self.last_targeting = TargetingLoad(criteria=data.criteria, channels=data.channels, source=data.source)
        return self.last_targeting

    def proceed_to_channels(self, selected: Iterable[TargetingCriterion]) -> tuple[Channel, ...]:
        chosen = frozenset(selected)
        self.store.set_selected_criteria(chosen)
        return self.store.derive_visible_channels(chosen, self.last_targeting.channels)

    def load_channel(self, channel: Channel) -> ChannelLoad:
        try:
            detailed = self.gateway.fetch_channel_details(channel)
        except FetchError as exc:
            LOGGER.error("Failed to load channel details for '%s': %s", channel.name, exc)
            return ChannelLoad(channel=channel, error_message=f"Failed to load channel details: {exc}")

        return ChannelLoad(
            channel=detailed,
            packages=tuple(derive_packages(detailed)),
            selected=self.store.get_selected_package(channel),
        )

    def choose(self, package: Package, channel: Channel) -> None:
        self.store.select_package(package, channel)

    def remove(self, package: Package) -> None:
        channel = self.store.channel_for_package(package)
        if channel is not None:
            self.store.deselect_package(package, channel)
