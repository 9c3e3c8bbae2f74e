# This file is the single fetch interface used by the planner session.
# It exists so callers get targeting data and channel packages without caring whether they came from the API or a snapshot.
# The policy is one remote attempt, then one local attempt, whatever the failure kind was.
# Failure classification is logged for diagnostics only; it never changes the control flow.

from __future__ import annotations

import logging

from campaign_planner.acquisition.api_client import CampaignApiClient
from campaign_planner.acquisition.decoder import DecodeError, ResponseDecoder, TargetingData
from campaign_planner.acquisition.errors import (
    FallbackUnavailable,
    NetworkFailure,
    PreconditionError,
    TimeoutClassFailure,
)
from campaign_planner.acquisition.gateway_config import GatewayConfig
from campaign_planner.acquisition.local_store import LocalFallbackStore
from campaign_planner.catalog.entities import Channel

LOGGER = logging.getLogger("acquisition")

SOURCE_REMOTE = "remote"
SOURCE_LOCAL = "local"


def failure_kind(exc: BaseException) -> str:
    if isinstance(exc, TimeoutClassFailure):
        return "timeout-class"
    if isinstance(exc, NetworkFailure):
        return "network"
    if isinstance(exc, DecodeError):
        return "decode"
    return "unknown"


class FetchGateway:
    def __init__(
        self,
        *,
        config: GatewayConfig | None = None,
        api_client: CampaignApiClient | None = None,
        decoder: ResponseDecoder | None = None,
        local_store: LocalFallbackStore | None = None,
    ) -> None:
        self.config = config or GatewayConfig()
        self.api_client = api_client or CampaignApiClient(config=self.config)
        self.decoder = decoder or ResponseDecoder()
        self.local_store = local_store or LocalFallbackStore(self.config.fallback_roots or None)

    def fetch_targeting_data(self) -> TargetingData:
        try:
            raw = self.api_client.get_targeting()
            data = self.decoder.decode_targeting(raw, source=SOURCE_REMOTE)
        except (NetworkFailure, DecodeError) as exc:
            LOGGER.warning("Targeting fetch failed (%s): %s; trying local snapshot", failure_kind(exc), exc)
            return self._targeting_from_local(cause=exc)

        LOGGER.info(
            "Loaded %d targeting criteria and %d channels from the API",
            len(data.criteria),
            len(data.channels),
        )
        return data

    def fetch_channel_details(self, channel: Channel) -> Channel:
        if not channel.has_external_id:
            raise PreconditionError(
                f"Channel '{channel.name}' has no external id; its packages cannot be fetched"
            )
        external_id = str(channel.external_id)

        try:
            raw = self.api_client.get_channel(external_id)
            detailed = self.decoder.decode_channel(raw, channel)
        except (NetworkFailure, DecodeError) as exc:
            LOGGER.warning(
                "Channel fetch for '%s' failed (%s): %s; trying local snapshot",
                channel.name,
                failure_kind(exc),
                exc,
            )
            return self._channel_from_local(channel, external_id=external_id, cause=exc)

        LOGGER.info("Loaded %d packages for channel '%s' from the API", len(detailed.packages), channel.name)
        return detailed

    def _targeting_from_local(self, *, cause: Exception) -> TargetingData:
        key = self.config.targeting_resource_key
        asset = self.local_store.load(key)
        if asset.data is None:
            raise FallbackUnavailable(key, cause=cause, fallback_reason="no local snapshot") from cause

        try:
            data = self.decoder.decode_targeting(asset.data, source=SOURCE_LOCAL)
        except DecodeError as exc:
            raise FallbackUnavailable(key, cause=cause, fallback_reason=f"snapshot {asset.path}: {exc}") from exc

        LOGGER.info("Loaded %d targeting criteria from local snapshot %s", len(data.criteria), asset.path)
        return data

    def _channel_from_local(self, channel: Channel, *, external_id: str, cause: Exception) -> Channel:
        asset = self.local_store.load(external_id)
        if asset.data is None:
            LOGGER.warning("No local snapshot for channel '%s'; returning it without packages", channel.name)
            return channel

        try:
            detailed = self.decoder.decode_channel(asset.data, channel)
        except DecodeError as exc:
            raise FallbackUnavailable(
                external_id, cause=cause, fallback_reason=f"snapshot {asset.path}: {exc}"
            ) from exc

        LOGGER.info("Loaded %d packages for channel '%s' from %s", len(detailed.packages), channel.name, asset.path)
        return detailed
