"""
Command-line entry point for browsing targeting data and planning a campaign.
It wires configuration, logging, the fetch gateway, and a planner session together.
Run it as `campaign-planner <command>`; output is JSON and failures exit non-zero.
"""

from __future__ import annotations

import argparse
import json
import sys
from collections.abc import Sequence
from typing import Any

from campaign_planner.acquisition.errors import FetchError
from campaign_planner.acquisition.gateway import FetchGateway
from campaign_planner.acquisition.gateway_config import load_gateway_config
from campaign_planner.catalog.entities import Channel, Package
from campaign_planner.common.logging import configure_logging
from campaign_planner.common.settings import load_settings
from campaign_planner.planner import CampaignPlanner
from campaign_planner.selection.formatting import format_price, format_totals


def parse_args(argv: Sequence[str] | None = None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(description="Browse marketing channels and plan a campaign")
    subparsers = parser.add_subparsers(dest="command", required=True)

    subparsers.add_parser("targeting", help="List targeting criteria and the channels they unlock")

    packages = subparsers.add_parser("packages", help="List the packages offered by one channel")
    packages.add_argument("--channel", required=True, help="Channel display name, e.g. Facebook")
    packages.add_argument("--external-id", required=True, help="Opaque channel id used by the API")

    plan = subparsers.add_parser("plan", help="Select criteria and packages, then print a review")
    plan.add_argument(
        "--target",
        action="append",
        default=[],
        help="Targeting criterion label (repeatable, case-insensitive)",
    )
    plan.add_argument(
        "--pick",
        action="append",
        default=[],
        metavar="CHANNEL=INDEX",
        help="Pick the package at 1-based INDEX for CHANNEL (repeatable)",
    )
    return parser.parse_args(argv)


def _package_row(package: Package) -> dict[str, Any]:
    return {
        "id": package.id,
        "name": package.name,
        "price": format_price(package.amount, package.currency),
        "features": list(package.feature_list),
    }


def _parse_picks(raw_picks: Sequence[str]) -> dict[str, int]:
    picks: dict[str, int] = {}
    for raw in raw_picks:
        name, _, index = raw.partition("=")
        if not name or not index.isdigit() or int(index) < 1:
            raise ValueError(f"Invalid --pick value '{raw}', expected CHANNEL=INDEX")
        picks[name.strip().lower()] = int(index)
    return picks


def _show_targeting(planner: CampaignPlanner) -> dict[str, Any]:
    loaded = planner.load_targeting()
    if not loaded.ok:
        raise RuntimeError(loaded.error_message)
    return {
        "source": loaded.source,
        "criteria": [
            {
                "id": criterion.id,
                "label": criterion.label,
                "channels": [ref.channel_name for ref in criterion.available_channels],
            }
            for criterion in loaded.criteria
        ],
    }


def _show_packages(planner: CampaignPlanner, *, name: str, external_id: str) -> dict[str, Any]:
    loaded = planner.load_channel(Channel.build(name, external_id=external_id))
    if not loaded.ok:
        raise RuntimeError(loaded.error_message)
    return {"channel": loaded.channel.name, "packages": [_package_row(item) for item in loaded.packages]}


def _run_plan(planner: CampaignPlanner, *, targets: Sequence[str], picks: dict[str, int]) -> dict[str, Any]:
    loaded = planner.load_targeting()
    if not loaded.ok:
        raise RuntimeError(loaded.error_message)

    wanted = {label.lower() for label in targets}
    selected = [criterion for criterion in loaded.criteria if criterion.label.lower() in wanted]
    visible = planner.proceed_to_channels(selected)

    warnings: list[str] = []
    for channel in visible:
        index = picks.get(channel.name.lower())
        if index is None:
            continue
        if not channel.has_external_id:
            warnings.append(f"{channel.name}: no external id, packages unavailable")
            continue
        channel_load = planner.load_channel(channel)
        if not channel_load.ok:
            warnings.append(f"{channel.name}: {channel_load.error_message}")
            continue
        if index > len(channel_load.packages):
            warnings.append(f"{channel.name}: only {len(channel_load.packages)} package(s) available")
            continue
        planner.choose(channel_load.packages[index - 1], channel_load.channel)

    store = planner.store
    validation = store.validate()
    return {
        "criteria": sorted(criterion.label for criterion in store.selected_criteria),
        "channels": [channel.name for channel in store.visible_channels],
        "selections": [
            {"channel": channel.name, **_package_row(package)}
            for channel, package in store.packages_by_channel()
        ],
        "total": format_totals(store.totals_by_currency()),
        "valid": validation.ok,
        "reason": validation.reason,
        "warnings": warnings,
    }


def main(argv: Sequence[str] | None = None) -> int:
    args = parse_args(argv)

    try:
        settings = load_settings()
        configure_logging(settings)
        planner = CampaignPlanner(gateway=FetchGateway(config=load_gateway_config(settings=settings)))

        if args.command == "targeting":
            result = _show_targeting(planner)
        elif args.command == "packages":
            result = _show_packages(planner, name=args.channel, external_id=args.external_id)
        else:
            result = _run_plan(planner, targets=args.target, picks=_parse_picks(args.pick))
    except (RuntimeError, ValueError, FetchError) as exc:
        print(json.dumps({"error": str(exc)}, indent=2), file=sys.stderr)
        return 1

    print(json.dumps(result, indent=2))
    if args.command == "plan" and not result["valid"]:
        return 1
    return 0


if __name__ == "__main__":
    sys.exit(main())
