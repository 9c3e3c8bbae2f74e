# This test file validates response decoding across every payload shape the endpoints have returned.
# It exists so schema drift upstream degrades into a fallback instead of a crash.
# The tests cover strategy order, scalar coercion, and the identity guarantees on decoded channels.

from __future__ import annotations

import json
from decimal import Decimal
from typing import Any

import pytest

from campaign_planner.acquisition.decoder import (
    DecodeError,
    EmptyResult,
    ResponseDecoder,
    UnrecognizedShape,
)
from campaign_planner.acquisition.payload_schemas import coerce_amount
from campaign_planner.catalog.entities import Channel, PackagePrice, derive_packages


def _raw(payload: Any) -> bytes:
    return json.dumps(payload).encode("utf-8")


def test_strict_targeting_array_decodes_criteria_and_refs() -> None:
    raw = _raw(
        [{"target": "Location", "available_channels": [{"channel": "Facebook", "channel_id": "abc123"}]}]
    )

    data = ResponseDecoder().decode_targeting(raw)

    assert len(data.criteria) == 1
    criterion = data.criteria[0]
    assert (criterion.id, criterion.label) == ("location", "Location")
    assert [ref.id for ref in criterion.available_channels] == ["facebook_abc123"]
    assert data.strategy == "strict_array"
    assert data.source == "remote"


def test_targeting_channels_are_deduplicated_by_ref_id() -> None:
    raw = _raw(
        [
            {
                "target": "Location",
                "available_channels": [
                    {"channel": "Facebook", "channel_id": "abc"},
                    {"channel": "Google Ads", "channel_id": "def"},
                ],
            },
            {
                "target": "Age Group",
                "available_channels": [
                    {"channel": "Facebook", "channel_id": "abc"},
                    {"channel": "Instagram", "channel_id": "ghi"},
                ],
            },
        ]
    )

    data = ResponseDecoder().decode_targeting(raw)

    assert [channel.id for channel in data.channels] == ["facebook", "google_ads", "instagram"]
    assert [channel.external_id for channel in data.channels] == ["abc", "def", "ghi"]
    assert all(channel.packages == () for channel in data.channels)


def test_keyed_container_is_used_when_strict_array_does_not_match() -> None:
    raw = _raw(
        {
            "data": [
                {"target": "Interests", "available_channels": [{"channel": "LinkedIn", "channel_id": "lnk"}]},
                {"unexpected": True},
            ]
        }
    )

    data = ResponseDecoder().decode_targeting(raw)

    assert [criterion.id for criterion in data.criteria] == ["interests"]
    assert data.strategy == "keyed_container:data"


def test_legacy_targeting_specifics_next_to_channel_objects() -> None:
    raw = _raw(
        {
            "targeting_specifics": [
                {"target": "Location", "available_channels": [{"channel": "Facebook", "channel_id": "abc123"}]}
            ],
            "channels": [{"channel": "Facebook", "monthly_fees": []}],
        }
    )

    data = ResponseDecoder().decode_targeting(raw)

    assert [criterion.id for criterion in data.criteria] == ["location"]
    assert [channel.external_id for channel in data.channels] == ["abc123"]
    assert data.strategy == "keyed_container:targeting_specifics"


def test_keyed_container_skips_arrays_without_criteria() -> None:
    raw = _raw(
        {
            "channels": [{"name": "x"}],
            "data": [{"target": "Age Group", "available_channels": [{"channel": "Instagram", "channel_id": "ig"}]}],
        }
    )

    data = ResponseDecoder().decode_targeting(raw)

    assert [criterion.label for criterion in data.criteria] == ["Age Group"]
    assert data.strategy == "keyed_container:data"


def test_container_arrays_without_any_criteria_are_empty() -> None:
    raw = _raw({"channels": [{"name": "x"}], "items": [{"unexpected": True}]})

    with pytest.raises(EmptyResult):
        ResponseDecoder().decode_targeting(raw)


def test_partially_conforming_array_is_unrecognized() -> None:
    raw = _raw(
        [
            {"target": "Location", "available_channels": []},
            {"target": 42, "available_channels": []},
        ]
    )

    with pytest.raises(UnrecognizedShape):
        ResponseDecoder().decode_targeting(raw)


def test_channel_id_must_be_a_string() -> None:
    raw = _raw([{"target": "Location", "available_channels": [{"channel": "Facebook", "channel_id": 7}]}])

    with pytest.raises(UnrecognizedShape):
        ResponseDecoder().decode_targeting(raw)


@pytest.mark.parametrize("payload", [[], {"items": []}])
def test_empty_targeting_payload_is_rejected(payload: Any) -> None:
    with pytest.raises(EmptyResult):
        ResponseDecoder().decode_targeting(_raw(payload))


@pytest.mark.parametrize("raw", [b"", b"not json", b"\xff\xfe\x00", _raw({"unrelated": 1}), _raw("text")])
def test_unparseable_targeting_payload_is_unrecognized(raw: bytes) -> None:
    with pytest.raises(UnrecognizedShape):
        ResponseDecoder().decode_targeting(raw)


def test_decode_errors_are_value_errors() -> None:
    assert issubclass(DecodeError, ValueError)
    assert issubclass(EmptyResult, DecodeError)
    assert issubclass(UnrecognizedShape, DecodeError)


def test_channel_shape_coerces_string_price() -> None:
    raw = _raw(
        {
            "channel": "Facebook",
            "monthly_fees": [{"price": "140.50", "details": ["A", "B"], "currency": "EUR"}],
        }
    )
    stub = Channel.build("Facebook", external_id="abc123")

    channel = ResponseDecoder().decode_channel(raw, stub)
    packages = derive_packages(channel)

    assert len(packages) == 1
    assert packages[0].amount == Decimal("140.50")
    assert packages[0].currency == "EUR"
    assert packages[0].feature_list == ("A", "B")
    assert packages[0].id == "facebook_0"


def test_decoded_channel_keeps_caller_identity() -> None:
    raw = _raw({"channel": "Somebody Else", "monthly_fees": []})
    stub = Channel.build("Facebook", external_id="abc123")

    channel = ResponseDecoder().decode_channel(raw, stub)

    assert (channel.id, channel.name, channel.external_id) == ("facebook", "Facebook", "abc123")
    assert channel.packages == ()


def test_legacy_package_array_is_converted_back_to_prices() -> None:
    raw = _raw(
        [
            {
                "id": 17,
                "name": "Legacy",
                "description": "Old shape",
                "monthly_fee": 99,
                "details": "Reach, Frequency",
            }
        ]
    )

    channel = ResponseDecoder().decode_channel(raw, Channel.build("Facebook", external_id="abc"))

    assert len(channel.packages) == 1
    price = channel.packages[0]
    assert price.amount == Decimal(99)
    assert price.feature_list == ("Reach", "Frequency")
    assert price.currency == "USD"


def test_legacy_container_variant_is_accepted() -> None:
    raw = _raw(
        {
            "campaigns": [
                {"name": "Old", "description": "", "monthly_fee": "12.5", "details": [], "currency": "GBP"}
            ]
        }
    )

    channel = ResponseDecoder().decode_channel(raw, Channel.build("Facebook", external_id="abc"))

    assert channel.packages[0].amount == Decimal("12.5")
    assert channel.packages[0].currency == "GBP"


def test_legacy_round_trip_matches_channel_shape() -> None:
    fees = [
        {"price": 100, "details": ["A", "B"], "currency": "EUR"},
        {"price": "250.75", "details": ["C"], "currency": "USD"},
    ]
    decoder = ResponseDecoder()
    stub = Channel.build("Facebook", external_id="abc")
    direct = derive_packages(decoder.decode_channel(_raw({"channel": "Facebook", "monthly_fees": fees}), stub))

    legacy_payload = [
        {
            "id": item.id,
            "name": item.name,
            "description": item.description,
            "monthly_fee": str(item.amount),
            "details": item.details,
            "currency": item.currency,
        }
        for item in direct
    ]
    rebuilt = derive_packages(decoder.decode_channel(_raw(legacy_payload), stub))

    assert [(p.amount, p.currency, p.feature_list) for p in rebuilt] == [
        (p.amount, p.currency, p.feature_list) for p in direct
    ]


def test_channel_payload_with_bad_fee_entry_is_unrecognized() -> None:
    raw = _raw({"channel": "Facebook", "monthly_fees": [{"price": 1, "details": ["A"]}]})

    with pytest.raises(UnrecognizedShape):
        ResponseDecoder().decode_channel(raw, Channel.build("Facebook", external_id="abc"))


@pytest.mark.parametrize(
    ("value", "expected"),
    [
        (140.5, Decimal("140.5")),
        (100, Decimal(100)),
        ("140.50", Decimal("140.50")),
        (" 12 ", Decimal(12)),
        ("abc", Decimal(0)),
        ("NaN", Decimal(0)),
        (float("inf"), Decimal(0)),
        (None, Decimal(0)),
        (True, Decimal(0)),
        ({"amount": 1}, Decimal(0)),
    ],
)
def test_coerce_amount(value: Any, expected: Decimal) -> None:
    assert coerce_amount(value) == expected


def test_unparseable_price_defaults_to_zero_without_failing_decode() -> None:
    raw = _raw(
        {
            "channel": "Facebook",
            "monthly_fees": [
                {"price": "call us", "details": [], "currency": "EUR"},
                {"details": ["A"], "currency": "EUR"},
            ],
        }
    )

    channel = ResponseDecoder().decode_channel(raw, Channel.build("Facebook", external_id="abc"))

    assert [price.amount for price in channel.packages] == [Decimal(0), Decimal(0)]


def test_custom_strategy_order_is_respected() -> None:
    decoder = ResponseDecoder(channel_strategies=())

    with pytest.raises(UnrecognizedShape, match="Unrecognized channel payload"):
        decoder.decode_channel(_raw({"channel": "Facebook", "monthly_fees": []}), Channel.build("Facebook"))


def test_price_ids_are_stable_between_decodes() -> None:
    raw = _raw({"channel": "Facebook", "monthly_fees": [{"price": 5, "details": ["A"], "currency": "EUR"}]})
    stub = Channel.build("Facebook", external_id="abc")

    first = ResponseDecoder().decode_channel(raw, stub).packages
    second = ResponseDecoder().decode_channel(raw, stub).packages

    assert first == second
    assert isinstance(first[0], PackagePrice)
