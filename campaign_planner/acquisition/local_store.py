# This file resolves a logical resource key to a bundled JSON snapshot on disk.
# It exists so the gateway can serve targeting data and channel packages without a network.
# Several folder spellings are probed in a fixed order because snapshots were shipped under different names.
# A missing snapshot is a normal result, not an exception; read errors are recorded and probing continues.

from __future__ import annotations

import logging
from collections.abc import Iterable
from dataclasses import dataclass
from pathlib import Path

LOGGER = logging.getLogger("acquisition")

BUNDLED_ROOT = Path(__file__).resolve().parent.parent / "resources"

CANDIDATE_TEMPLATES: tuple[str, ...] = (
    "Specifics-JSON/{key}.json",
    "Specifics-Json/{key}.json",
    "specifics-json/{key}.json",
    "Data/Specifics-JSON/{key}.json",
    "Resources/Specifics-JSON/{key}.json",
    "{key}.json",
)


@dataclass(frozen=True)
class LocalAsset:
    key: str
    data: bytes | None = None
    path: Path | None = None
    read_errors: tuple[str, ...] = ()

    @property
    def found(self) -> bool:
        return self.data is not None


class LocalFallbackStore:
    def __init__(
        self,
        roots: Iterable[Path | str] | None = None,
        *,
        templates: Iterable[str] = CANDIDATE_TEMPLATES,
    ) -> None:
        self.roots = tuple(Path(root) for root in roots) if roots is not None else (BUNDLED_ROOT,)
        self.templates = tuple(templates)

    def candidate_paths(self, key: str) -> list[Path]:
        if not key or "/" in key or "\\" in key or key in {".", ".."}:
            return []
        return [root / template.format(key=key) for root in self.roots for template in self.templates]

    def load(self, key: str) -> LocalAsset:
        read_errors: list[str] = []
        for path in self.candidate_paths(key):
            if not path.is_file():
                continue
            try:
                data = path.read_bytes()
            except OSError as exc:
                LOGGER.warning("Failed to read local snapshot %s: %s", path, exc)
                read_errors.append(f"{path}: {exc}")
                continue
            LOGGER.info("Loaded %d bytes for '%s' from %s", len(data), key, path)
            return LocalAsset(key=key, data=data, path=path, read_errors=tuple(read_errors))

        LOGGER.warning("No local snapshot found for '%s' under %d root(s)", key, len(self.roots))
        return LocalAsset(key=key, read_errors=tuple(read_errors))
