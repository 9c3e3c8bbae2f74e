# This file defines runtime configuration for the fetch gateway.
# It exists so endpoints, timeouts, and snapshot locations can be tuned through environment variables.
# The request timeout must stay below the resource timeout so a fallback decision is reached before the caller gives up.

from __future__ import annotations

from dataclasses import dataclass
from pathlib import Path

from campaign_planner.common.settings import (
    DEFAULT_CHANNEL_URL_TEMPLATE,
    DEFAULT_TARGETING_KEY,
    DEFAULT_TARGETING_URL,
    Settings,
    load_settings,
)


@dataclass(frozen=True)
class GatewayConfig:
    targeting_url: str = DEFAULT_TARGETING_URL
    channel_url_template: str = DEFAULT_CHANNEL_URL_TEMPLATE
    request_timeout_seconds: float = 3.0
    resource_timeout_seconds: float = 6.0
    targeting_resource_key: str = DEFAULT_TARGETING_KEY
    fallback_roots: tuple[Path, ...] = ()

    def __post_init__(self) -> None:
        if self.request_timeout_seconds <= 0:
            raise ValueError("request_timeout_seconds must be positive")
        if self.request_timeout_seconds >= self.resource_timeout_seconds:
            raise ValueError(
                "request_timeout_seconds must be lower than resource_timeout_seconds "
                f"(got {self.request_timeout_seconds} >= {self.resource_timeout_seconds})"
            )
        if "{external_id}" not in self.channel_url_template:
            raise ValueError("channel_url_template must contain an '{external_id}' placeholder")

    def channel_url(self, external_id: str) -> str:
        return self.channel_url_template.format(external_id=external_id)


def load_gateway_config(*, load_env: bool = True, settings: Settings | None = None) -> GatewayConfig:
    settings = settings or load_settings(load_env=load_env)

    return GatewayConfig(
        targeting_url=settings.CAMPAIGN_TARGETING_URL,
        channel_url_template=settings.CAMPAIGN_CHANNEL_URL_TEMPLATE,
        request_timeout_seconds=settings.CAMPAIGN_REQUEST_TIMEOUT_SECONDS,
        resource_timeout_seconds=settings.CAMPAIGN_RESOURCE_TIMEOUT_SECONDS,
        targeting_resource_key=settings.CAMPAIGN_TARGETING_KEY,
        fallback_roots=settings.CAMPAIGN_FALLBACK_ROOTS,
    )
