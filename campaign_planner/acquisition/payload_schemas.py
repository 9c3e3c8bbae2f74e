# This file defines the wire shapes the targeting and channel endpoints are known to return.
# It exists so shape detection is plain model validation instead of hand-written key probing.
# Numeric fields go through one lenient coercion rule; every other field is strict about its type.
# Unknown keys are ignored so additive upstream changes do not break decoding.

from __future__ import annotations

import math
from decimal import Decimal, InvalidOperation
from typing import Any

from pydantic import BaseModel, ConfigDict, Field, StrictInt, StrictStr, field_validator

ZERO = Decimal(0)
DEFAULT_CURRENCY = "USD"
LEGACY_DETAILS_SEPARATOR = ", "


def coerce_amount(value: Any) -> Decimal:
    """Accept a number or a decimal string; anything else degrades to zero."""

    if isinstance(value, bool):
        return ZERO
    if isinstance(value, int):
        return Decimal(value)
    if isinstance(value, float):
        return Decimal(str(value)) if math.isfinite(value) else ZERO
    if isinstance(value, Decimal):
        return value if value.is_finite() else ZERO
    if isinstance(value, str):
        try:
            parsed = Decimal(value.strip())
        except InvalidOperation:
            return ZERO
        return parsed if parsed.is_finite() else ZERO
    return ZERO


class _Payload(BaseModel):
    model_config = ConfigDict(extra="ignore", frozen=True)


class AvailableChannelPayload(_Payload):
    channel: StrictStr
    channel_id: StrictStr


class TargetingPayload(_Payload):
    target: StrictStr
    available_channels: list[AvailableChannelPayload]


class MonthlyFeePayload(_Payload):
    price: Decimal = Field(default=ZERO)
    details: list[StrictStr]
    currency: StrictStr

    @field_validator("price", mode="before")
    @classmethod
    def _coerce_price(cls, value: Any) -> Decimal:
        return coerce_amount(value)


class ChannelPayload(_Payload):
    channel: StrictStr
    monthly_fees: list[MonthlyFeePayload]


class LegacyPackagePayload(_Payload):
    id: StrictStr | StrictInt | None = None
    name: StrictStr
    description: StrictStr
    monthly_fee: Decimal = Field(default=ZERO)
    details: StrictStr | list[StrictStr]
    currency: StrictStr = DEFAULT_CURRENCY

    @field_validator("monthly_fee", mode="before")
    @classmethod
    def _coerce_fee(cls, value: Any) -> Decimal:
        return coerce_amount(value)

    def feature_list(self) -> tuple[str, ...]:
        if isinstance(self.details, list):
            return tuple(self.details)
        if not self.details:
            return ()
        return tuple(self.details.split(LEGACY_DETAILS_SEPARATOR))
