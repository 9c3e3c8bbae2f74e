# This file turns raw response bytes into catalog entities while tolerating upstream schema drift.
# It exists so the same decoding rules apply to live responses and to bundled snapshots.
# Each payload kind has an explicit ordered list of strategies; the first one that matches wins.
# A strategy reports a shape mismatch instead of raising, so the order is visible in one place.

from __future__ import annotations

import json
import logging
from collections.abc import Callable, Sequence
from dataclasses import dataclass, field
from typing import Any, Generic, TypeVar

from pydantic import TypeAdapter, ValidationError

from campaign_planner.acquisition.payload_schemas import (
    ChannelPayload,
    LegacyPackagePayload,
    TargetingPayload,
)
from campaign_planner.catalog.entities import Channel, ChannelRef, PackagePrice, TargetingCriterion

LOGGER = logging.getLogger("acquisition")

TARGETING_CONTAINER_KEYS: tuple[str, ...] = ("channels", "data", "items", "targeting_specifics")
LEGACY_PACKAGE_CONTAINER_KEYS: tuple[str, ...] = ("campaigns", "data", "items")

_TARGETING_LIST = TypeAdapter(list[TargetingPayload])
_LEGACY_PACKAGE_LIST = TypeAdapter(list[LegacyPackagePayload])

T = TypeVar("T")


class DecodeError(ValueError):
    """Raised when no decode strategy accepts a payload."""


class UnrecognizedShape(DecodeError):
    pass


class EmptyResult(DecodeError):
    pass


@dataclass(frozen=True)
class DecodeSuccess(Generic[T]):
    strategy: str
    value: T


@dataclass(frozen=True)
class ShapeMismatch:
    strategy: str
    reason: str


DecodeOutcome = DecodeSuccess[T] | ShapeMismatch


@dataclass(frozen=True)
class TargetingData:
    criteria: tuple[TargetingCriterion, ...]
    channels: tuple[Channel, ...]
    source: str = "remote"
    strategy: str = field(default="", compare=False)


def _criterion_from_payload(payload: TargetingPayload) -> TargetingCriterion:
    refs = tuple(ChannelRef.build(item.channel, item.channel_id) for item in payload.available_channels)
    return TargetingCriterion.build(payload.target, refs)


def _strict_targeting_array(root: Any) -> DecodeOutcome[list[TargetingCriterion]]:
    name = "strict_array"
    if not isinstance(root, list):
        return ShapeMismatch(name, f"expected a top-level array, got {type(root).__name__}")
    try:
        payloads = _TARGETING_LIST.validate_python(root)
    except ValidationError as exc:
        return ShapeMismatch(name, f"{exc.error_count()} element error(s)")
    return DecodeSuccess(name, [_criterion_from_payload(item) for item in payloads])


def _keyed_targeting_container(root: Any) -> DecodeOutcome[list[TargetingCriterion]]:
    name = "keyed_container"
    if not isinstance(root, dict):
        return ShapeMismatch(name, f"expected an object, got {type(root).__name__}")

    # A key whose array yields no criteria (e.g. legacy `channels` of channel objects) falls through.
    first_array_key: str | None = None
    for key in TARGETING_CONTAINER_KEYS:
        items = root.get(key)
        if not isinstance(items, list):
            continue
        if first_array_key is None:
            first_array_key = key
        criteria: list[TargetingCriterion] = []
        for item in items:
            try:
                criteria.append(_criterion_from_payload(TargetingPayload.model_validate(item)))
            except ValidationError:
                continue
        if criteria:
            return DecodeSuccess(f"{name}:{key}", criteria)

    if first_array_key is not None:
        return DecodeSuccess(f"{name}:{first_array_key}", [])
    return ShapeMismatch(name, f"none of {', '.join(TARGETING_CONTAINER_KEYS)} holds an array")


def _channel_shape(root: Any) -> DecodeOutcome[list[PackagePrice]]:
    name = "channel_shape"
    try:
        payload = ChannelPayload.model_validate(root)
    except ValidationError as exc:
        return ShapeMismatch(name, f"{exc.error_count()} field error(s)")
    prices = [
        PackagePrice.build(fee.price, fee.details, fee.currency) for fee in payload.monthly_fees
    ]
    return DecodeSuccess(name, prices)


def _legacy_package_array(root: Any) -> DecodeOutcome[list[PackagePrice]]:
    name = "legacy_packages"
    items = root
    if isinstance(root, dict):
        items = next(
            (root[key] for key in LEGACY_PACKAGE_CONTAINER_KEYS if isinstance(root.get(key), list)),
            None,
        )
    if not isinstance(items, list):
        return ShapeMismatch(name, "no package array found")
    try:
        payloads = _LEGACY_PACKAGE_LIST.validate_python(items)
    except ValidationError as exc:
        return ShapeMismatch(name, f"{exc.error_count()} element error(s)")
    prices = [
        PackagePrice.build(item.monthly_fee, item.feature_list(), item.currency) for item in payloads
    ]
    return DecodeSuccess(name, prices)


TARGETING_STRATEGIES: tuple[Callable[[Any], DecodeOutcome[list[TargetingCriterion]]], ...] = (
    _strict_targeting_array,
    _keyed_targeting_container,
)
CHANNEL_STRATEGIES: tuple[Callable[[Any], DecodeOutcome[list[PackagePrice]]], ...] = (
    _channel_shape,
    _legacy_package_array,
)


def _parse_json(raw: bytes | str) -> Any:
    try:
        return json.loads(raw)
    except (ValueError, UnicodeDecodeError) as exc:
        raise UnrecognizedShape(f"Payload is not valid JSON: {exc}") from exc


def _run_strategies(
    root: Any,
    strategies: Sequence[Callable[[Any], DecodeOutcome[T]]],
    *,
    kind: str,
) -> DecodeSuccess[T]:
    mismatches: list[str] = []
    for strategy in strategies:
        outcome = strategy(root)
        if isinstance(outcome, DecodeSuccess):
            LOGGER.debug("Decoded %s payload with strategy %s", kind, outcome.strategy)
            return outcome
        mismatches.append(f"{outcome.strategy}: {outcome.reason}")
    raise UnrecognizedShape(f"Unrecognized {kind} payload ({'; '.join(mismatches)})")


def aggregate_channels(criteria: Sequence[TargetingCriterion]) -> tuple[Channel, ...]:
    """Flatten the refs of every criterion into channel stubs, first ref id wins."""

    seen: set[str] = set()
    channels: list[Channel] = []
    for criterion in criteria:
        for ref in criterion.available_channels:
            if ref.id in seen:
                continue
            seen.add(ref.id)
            channels.append(ref.to_channel())
    return tuple(channels)


class ResponseDecoder:
    def __init__(
        self,
        *,
        targeting_strategies: Sequence[Callable[[Any], DecodeOutcome[list[TargetingCriterion]]]] = TARGETING_STRATEGIES,
        channel_strategies: Sequence[Callable[[Any], DecodeOutcome[list[PackagePrice]]]] = CHANNEL_STRATEGIES,
    ) -> None:
        self.targeting_strategies = tuple(targeting_strategies)
        self.channel_strategies = tuple(channel_strategies)

    def decode_targeting(self, raw: bytes | str, *, source: str = "remote") -> TargetingData:
        root = _parse_json(raw)
        decoded = _run_strategies(root, self.targeting_strategies, kind="targeting")
        if not decoded.value:
            raise EmptyResult("Targeting payload decoded to zero criteria")

        criteria = tuple(decoded.value)
        return TargetingData(
            criteria=criteria,
            channels=aggregate_channels(criteria),
            source=source,
            strategy=decoded.strategy,
        )

    def decode_channel(self, raw: bytes | str, channel: Channel) -> Channel:
        """Fill `channel` with decoded packages; identity always comes from `channel`."""

        root = _parse_json(raw)
        decoded = _run_strategies(root, self.channel_strategies, kind="channel")
        return channel.with_packages(decoded.value)
