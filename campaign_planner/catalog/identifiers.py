# This module derives stable identifiers from human-readable names and compound keys.
# It exists so every layer that needs a channel or package id computes the same value.
# All functions are pure: no counters, no randomness, no clock.

from __future__ import annotations

import hashlib

ID_SEPARATOR = "_"


def slug(text: str) -> str:
    """Lowercase and replace spaces with underscores; defined for every string."""

    return text.lower().replace(" ", ID_SEPARATOR)


def compound_id(*parts: object) -> str:
    return ID_SEPARATOR.join(str(part) for part in parts)


def content_id(*parts: object, length: int = 12) -> str:
    digest = hashlib.sha1(compound_id(*parts).encode("utf-8")).hexdigest()
    return digest[:length]
