# This module holds the selection state shared by every step of the planning wizard.
# It exists so the one-package-per-channel rule is enforced in a single place, whichever view triggers the change.
# Packages are tied to channels only through their id prefix, so lookups tolerate channels loaded independently.
# No operation here raises: unknown channels and packages are no-ops, and validation returns a result value.

from __future__ import annotations

import logging
import threading
from collections.abc import Callable, Iterable
from dataclasses import dataclass
from decimal import Decimal

from campaign_planner.catalog.entities import Channel, Package, TargetingCriterion
from campaign_planner.catalog.identifiers import slug

LOGGER = logging.getLogger("selection")

NO_SELECTION_REASON = "No campaigns selected"

StoreListener = Callable[["SelectionStore"], None]


@dataclass(frozen=True)
class SelectionValidation:
    ok: bool
    reason: str | None = None


class SelectionStore:
    """Single-writer aggregate; every read and write holds the same re-entrant lock."""

    def __init__(self) -> None:
        self._lock = threading.RLock()
        self._selected_criteria: frozenset[TargetingCriterion] = frozenset()
        self._visible_channels: list[Channel] = []
        self._selected_packages: list[Package] = []
        self._listeners: list[StoreListener] = []

    @property
    def selected_criteria(self) -> frozenset[TargetingCriterion]:
        with self._lock:
            return self._selected_criteria

    @property
    def visible_channels(self) -> tuple[Channel, ...]:
        with self._lock:
            return tuple(self._visible_channels)

    @property
    def selected_packages(self) -> tuple[Package, ...]:
        with self._lock:
            return tuple(self._selected_packages)

    def subscribe(self, listener: StoreListener) -> Callable[[], None]:
        with self._lock:
            self._listeners.append(listener)

        def unsubscribe() -> None:
            with self._lock:
                if listener in self._listeners:
                    self._listeners.remove(listener)

        return unsubscribe

    def set_selected_criteria(self, criteria: Iterable[TargetingCriterion]) -> None:
        with self._lock:
            self._selected_criteria = frozenset(criteria)
            LOGGER.debug("Selected criteria: %s", sorted(item.label for item in self._selected_criteria))
        self._notify()

    def derive_visible_channels(
        self,
        criteria: Iterable[TargetingCriterion],
        all_channels: Iterable[Channel],
    ) -> tuple[Channel, ...]:
        """Resolve every channel reachable from `criteria`, synthesizing stubs for unknown ones."""

        if isinstance(criteria, (set, frozenset)):
            ordered_criteria = sorted(criteria, key=lambda item: item.id)
        else:
            ordered_criteria = list(criteria)
        catalog = list(all_channels)

        seen: set[str] = set()
        resolved: list[Channel] = []
        for criterion in ordered_criteria:
            for ref in criterion.available_channels:
                channel_id = slug(ref.channel_name)
                if channel_id in seen:
                    continue
                seen.add(channel_id)
                resolved.append(self._resolve_channel(channel_id, ref.channel_name, catalog))

        with self._lock:
            self._visible_channels = resolved
        LOGGER.info(
            "Derived %d visible channels from %d criteria",
            len(resolved),
            len(ordered_criteria),
        )
        self._notify()
        return tuple(resolved)

    @staticmethod
    def _resolve_channel(channel_id: str, channel_name: str, catalog: list[Channel]) -> Channel:
        lowered = channel_name.lower()
        for candidate in catalog:
            if candidate.id == channel_id or candidate.name.lower() == lowered:
                return candidate
        return Channel(id=channel_id, name=channel_name)

    def select_package(self, package: Package, channel: Channel) -> None:
        with self._lock:
            self._selected_packages = [item for item in self._selected_packages if not channel.owns(item)]
            self._selected_packages.append(package)
            LOGGER.info(
                "Selected %s for channel '%s' (%d selected)",
                package.name,
                channel.name,
                len(self._selected_packages),
            )
        self._notify()

    def deselect_package(self, package: Package, channel: Channel) -> None:
        with self._lock:
            before = len(self._selected_packages)
            self._selected_packages = [item for item in self._selected_packages if item.id != package.id]
            changed = len(self._selected_packages) != before
        if changed:
            LOGGER.info("Deselected %s for channel '%s'", package.name, channel.name)
            self._notify()

    def reset_channel(self, channel: Channel) -> None:
        with self._lock:
            before = len(self._selected_packages)
            self._selected_packages = [item for item in self._selected_packages if not channel.owns(item)]
            changed = len(self._selected_packages) != before
        if changed:
            LOGGER.info("Reset selection for channel '%s'", channel.name)
            self._notify()

    def reset(self) -> None:
        with self._lock:
            self._selected_criteria = frozenset()
            self._visible_channels = []
            self._selected_packages = []
        LOGGER.info("Reset all selection state")
        self._notify()

    def get_selected_package(self, channel: Channel) -> Package | None:
        with self._lock:
            return next((item for item in self._selected_packages if channel.owns(item)), None)

    def has_selected_package(self, channel: Channel) -> bool:
        return self.get_selected_package(channel) is not None

    def channel_for_package(self, package: Package) -> Channel | None:
        with self._lock:
            return next((channel for channel in self._visible_channels if channel.owns(package)), None)

    @property
    def selected_count(self) -> int:
        with self._lock:
            return len(self._selected_packages)

    @property
    def unique_channel_count(self) -> int:
        with self._lock:
            return len({channel.id for _, channel in self._owned_pairs()})

    def totals_by_currency(self) -> dict[str, Decimal]:
        """Sum amounts per currency; currencies are never converted or combined."""

        totals: dict[str, Decimal] = {}
        with self._lock:
            for item in self._selected_packages:
                totals[item.currency] = totals.get(item.currency, Decimal(0)) + item.amount
        return totals

    def packages_by_channel(self) -> list[tuple[Channel, Package]]:
        with self._lock:
            pairs = [(channel, package) for package, channel in self._owned_pairs()]
        return sorted(pairs, key=lambda pair: pair[0].name)

    def selections_by_channel_name(self) -> dict[str, str]:
        with self._lock:
            result: dict[str, str] = {}
            for channel in self._visible_channels:
                selected = next((item for item in self._selected_packages if channel.owns(item)), None)
                if selected is not None:
                    result[channel.name] = selected.name
            return result

    def validate(self) -> SelectionValidation:
        with self._lock:
            if not self._selected_packages:
                return SelectionValidation(ok=False, reason=NO_SELECTION_REASON)
        return SelectionValidation(ok=True)

    def _owned_pairs(self) -> list[tuple[Package, Channel]]:
        pairs: list[tuple[Package, Channel]] = []
        for package in self._selected_packages:
            owner = next((channel for channel in self._visible_channels if channel.owns(package)), None)
            if owner is not None:
                pairs.append((package, owner))
        return pairs

    def _notify(self) -> None:
        with self._lock:
            listeners = list(self._listeners)
        for listener in listeners:
            try:
                listener(self)
            except Exception:
                LOGGER.exception("Selection listener %r failed", listener)
