# subtrend/storage/history_store.py

"""Append-only per-service price history kept in ``data/history``."""

import json
import logging
import os
import tempfile
from datetime import datetime
from pathlib import Path
from typing import cast

from subtrend.config.settings import Settings
from subtrend.exceptions import HistoryFileError
from subtrend.models.price_snapshot import (
    HistoryEntry,
    HistorySnapshot,
    PriceSnapshot,
)
from subtrend.storage.price_store import read_json_file, validate_slug

logger = logging.getLogger("subtrend.history")


def _write_atomic(filepath: Path, payload: object) -> None:
    """Write JSON to a sibling temp file, then swap it into place."""
    filepath.parent.mkdir(parents=True, exist_ok=True)
    fd, tmp_name = tempfile.mkstemp(
        dir=filepath.parent, prefix=f".{filepath.stem}_", suffix=".tmp",
    )
    try:
        with os.fdopen(fd, "w", encoding="utf-8") as f:
            json.dump(payload, f, ensure_ascii=False, indent=2)
        os.replace(tmp_name, filepath)
    except BaseException:
        os.unlink(tmp_name)
        raise


def parse_history_payload(payload: object) -> list[HistorySnapshot]:
    """Decode a history file into snapshots sorted ascending by date.

    Snapshots without a string ``date`` or an array ``prices`` are
    dropped.  Individual entries are kept raw; callers skip the ones
    whose code or price is unusable.
    """
    if not isinstance(payload, dict):
        return []
    raw_snapshots = cast(dict[str, object], payload).get("snapshots")
    if not isinstance(raw_snapshots, list):
        return []

    snapshots: list[HistorySnapshot] = []
    for raw in cast(list[object], raw_snapshots):
        if not isinstance(raw, dict):
            continue
        item = cast(dict[str, object], raw)
        date = item.get("date")
        prices = item.get("prices")
        if not isinstance(date, str) or not isinstance(prices, list):
            continue
        snapshots.append(HistorySnapshot(
            date=date,
            entries=[
                HistoryEntry(
                    country_code=cast(dict[str, object], p).get("countryCode"),
                    krw=cast(dict[str, object], p).get("krw"),
                )
                for p in cast(list[object], prices)
                if isinstance(p, dict)
            ],
        ))

    snapshots.sort(key=lambda s: s.date)
    return snapshots


class HistoryStore:
    """File-backed store of dated price snapshots, one file per service."""

    def __init__(self, history_dir: Path | None = None) -> None:
        self.history_dir: Path = history_dir or Settings.HISTORY_DIR
        logger.debug(
            "HistoryStore initialised, history_dir=%s", self.history_dir,
        )

    def path_for(self, slug: str) -> Path:
        return self.history_dir / f"{validate_slug(slug)}.json"

    def load(self, slug: str) -> list[HistorySnapshot]:
        """Return the recorded snapshots for *slug*, oldest first."""
        snapshots = parse_history_payload(
            read_json_file(self.path_for(slug))
        )
        logger.debug(
            "Loaded %d history snapshots for '%s'", len(snapshots), slug,
        )
        return snapshots

    def record_snapshot(
        self,
        slug: str,
        snapshot: PriceSnapshot,
        recorded_on: str | None = None,
    ) -> bool:
        """Append the KRW prices of *snapshot* to the service's history.

        The snapshot is dated ``recorded_on``, else the snapshot's own
        ``last_updated_date``, else today.  Nothing is written when that
        date is already recorded.  Returns ``True`` if a snapshot was
        appended.

        Raises:
            HistoryFileError: the history file exists but is not a
                readable ``{"snapshots": [...]}`` document; it is left
                untouched.
        """
        filepath = self.path_for(slug)
        date = (
            recorded_on
            or snapshot.last_updated_date
            or datetime.now().strftime("%Y-%m-%d")
        )

        payload: dict[str, object] = {"snapshots": []}
        if filepath.exists():
            loaded = read_json_file(filepath)
            raw = (
                cast(dict[str, object], loaded).get("snapshots")
                if isinstance(loaded, dict)
                else None
            )
            if not isinstance(raw, list):
                logger.error(
                    "Refusing to overwrite unreadable history %s", filepath,
                )
                raise HistoryFileError(slug, filepath)
            payload = cast(dict[str, object], loaded)
        existing = cast(list[object], payload["snapshots"])

        if any(
            isinstance(s, dict)
            and cast(dict[str, object], s).get("date") == date
            for s in existing
        ):
            logger.info(
                "History for '%s' already has %s, skipping", slug, date,
            )
            return False

        prices = [
            {"countryCode": e.country_code, "krw": e.converted_krw}
            for e in snapshot.entries
            if e.converted_krw is not None
        ]
        existing.append({"date": date, "prices": prices})
        _write_atomic(filepath, payload)

        logger.info(
            "Recorded %d prices for '%s' on %s to %s",
            len(prices),
            slug,
            date,
            filepath,
        )
        return True
