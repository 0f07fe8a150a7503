"""Jurisdiction fuel-tax rate table."""

import csv
import logging
from dataclasses import dataclass
from datetime import date
from decimal import Decimal
from pathlib import Path
from typing import Iterable, Optional

from fleettax.domain.entities import Period
from fleettax.domain.errors import UnknownJurisdiction, ValidationError
from fleettax.domain.numbers import to_decimal
from fleettax.utils.date_parser import parse_date

logger = logging.getLogger(__name__)

# USD per gallon
DEFAULT_RATES: dict[str, tuple[str, str]] = {
    "FEDERAL": ("0.184", "Federal gasoline excise tax"),
    "LUST": ("0.001", "Leaking Underground Storage Tank fee"),
    "NM": ("0.17", "New Mexico state excise tax"),
    "TX": ("0.20", "Texas state excise tax"),
    "NM-DA": ("0.21", "Dona Ana County, NM"),
}


def normalize_jurisdiction(code: str) -> str:
    """Canonical form of a jurisdiction code."""
    return code.strip().upper()


@dataclass(frozen=True)
class RateEntry:
    """Per-gallon rate for a jurisdiction, optionally bounded by effective dates."""

    jurisdiction: str
    rate: Decimal
    name: Optional[str] = None
    effective_from: Optional[date] = None
    effective_to: Optional[date] = None

    def __post_init__(self) -> None:
        if self.rate < 0:
            raise ValidationError(
                f"Tax rate for {self.jurisdiction} cannot be negative: {self.rate}"
            )
        if (
            self.effective_from is not None
            and self.effective_to is not None
            and self.effective_to < self.effective_from
        ):
            raise ValidationError(
                f"Rate for {self.jurisdiction} ends before it starts "
                f"({self.effective_from} > {self.effective_to})"
            )

    def is_effective(self, on_date: date) -> bool:
        if self.effective_from is not None and on_date < self.effective_from:
            return False
        if self.effective_to is not None and on_date > self.effective_to:
            return False
        return True


class RateTable:
    """Lookup of per-gallon tax rates by jurisdiction and period.

    A jurisdiction may carry several entries with different effective
    windows; the entry covering the period's first day wins.
    """

    def __init__(self, entries: Iterable[RateEntry]):
        self._entries: dict[str, list[RateEntry]] = {}
        for entry in entries:
            code = normalize_jurisdiction(entry.jurisdiction)
            self._entries.setdefault(code, []).append(entry)
        for versions in self._entries.values():
            versions.sort(key=lambda e: e.effective_from or date.min)

    def __contains__(self, jurisdiction: str) -> bool:
        return normalize_jurisdiction(jurisdiction) in self._entries

    def __len__(self) -> int:
        return len(self._entries)

    def jurisdictions(self) -> list[str]:
        """Return all jurisdiction codes in the table, sorted."""
        return sorted(self._entries)

    def entries(self) -> list[RateEntry]:
        """Return every entry, ordered by jurisdiction then effective date."""
        return [entry for code in self.jurisdictions() for entry in self._entries[code]]

    def find_entry(self, jurisdiction: str, period: Period) -> Optional[RateEntry]:
        """Return the entry in effect for the period, or None."""
        versions = self._entries.get(normalize_jurisdiction(jurisdiction), [])
        for entry in versions:
            if entry.is_effective(period.start_date):
                return entry
        return None

    def has_rate(self, jurisdiction: str, period: Period) -> bool:
        return self.find_entry(jurisdiction, period) is not None

    def rate_for(self, jurisdiction: str, period: Period) -> Decimal:
        """Return the per-gallon rate for a jurisdiction in a period.

        Raises:
            UnknownJurisdiction: If no entry is in effect for the period
        """
        entry = self.find_entry(jurisdiction, period)
        if entry is None:
            raise UnknownJurisdiction([normalize_jurisdiction(jurisdiction)])
        return entry.rate


def default_rate_table() -> RateTable:
    """Build the built-in rate table."""
    return RateTable(
        RateEntry(jurisdiction=code, rate=Decimal(rate), name=name)
        for code, (rate, name) in DEFAULT_RATES.items()
    )


def load_rate_table(path: str | Path) -> RateTable:
    """Load a rate table from a CSV file.

    Required columns are ``jurisdiction`` and ``rate``; ``name``,
    ``effective_from`` and ``effective_to`` are optional.

    Raises:
        ValidationError: If the file is missing columns or holds bad values
    """
    path = Path(path)
    entries: list[RateEntry] = []
    with path.open(newline="", encoding="utf-8") as handle:
        reader = csv.DictReader(handle)
        fieldnames = set(reader.fieldnames or [])
        missing = {"jurisdiction", "rate"} - fieldnames
        if missing:
            raise ValidationError(
                f"Rate file {path} is missing column(s): {', '.join(sorted(missing))}"
            )
        for line_number, row in enumerate(reader, start=2):
            code = (row.get("jurisdiction") or "").strip()
            if not code:
                raise ValidationError(f"{path}:{line_number}: jurisdiction is empty")
            rate = to_decimal(row.get("rate"))
            if rate is None:
                raise ValidationError(
                    f"{path}:{line_number}: invalid rate {row.get('rate')!r}"
                )
            entries.append(
                RateEntry(
                    jurisdiction=normalize_jurisdiction(code),
                    rate=rate,
                    name=(row.get("name") or "").strip() or None,
                    effective_from=_optional_date(row.get("effective_from")),
                    effective_to=_optional_date(row.get("effective_to")),
                )
            )

    logger.debug(
        "rate_table_loaded", extra={"path": str(path), "entry_count": len(entries)}
    )
    return RateTable(entries)


def _optional_date(value: Optional[str]) -> Optional[date]:
    if value is None or not value.strip():
        return None
    return parse_date(value)
