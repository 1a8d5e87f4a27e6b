# o2d/dispatch_dashboard/models.py
"""
Data model for the Dispatch Dashboard.

The backend's row records are loosely shaped: any field may be missing, and
the same logical field can arrive under several names. `normalize_row` is the
single place that tolerates this; everything downstream works on the strict
`DispatchRow` type or on the DataFrame built by `rows_to_frame`.
"""

import logging
from dataclasses import asdict, dataclass, field
from datetime import datetime
from typing import Any, Dict, Iterable, List, Mapping, Optional, Tuple

import pandas as pd

from .constants import (
    DATE_SOURCE_FIELDS,
    ROW_FIELD_ALIASES,
    ROW_FIELDS,
    SUMMARY_FIELD_ALIASES,
    VOCABULARY_FIELD_ALIASES,
)

logger = logging.getLogger(__name__)

RESOLVED_DAY_COLUMN = "resolved_day"


# =============================================================================
# ROWS
# =============================================================================

@dataclass(frozen=True)
class DispatchRow:
    """One dispatch event. Empty string means the field was absent."""
    indate: str = ""
    outdate: str = ""
    gate_out_time: str = ""
    order_vrno: str = ""
    gate_vrno: str = ""
    wslipno: str = ""
    sales_person: str = ""
    party_name: str = ""
    item_name: str = ""
    invoice_no: str = ""
    state_name: str = ""

    def resolved_date_source(self) -> str:
        """First non-empty of out-date, in-date, gate-out timestamp."""
        for name in DATE_SOURCE_FIELDS:
            value = getattr(self, name)
            if value:
                return value
        return ""


def _clean_text(value: Any) -> str:
    if value is None:
        return ""
    if isinstance(value, float) and pd.isna(value):
        return ""
    return str(value).strip()


def _first_present(record: Mapping[str, Any], keys: Iterable[str]) -> Any:
    for key in keys:
        value = record.get(key)
        if value is not None and _clean_text(value) != "":
            return value
    return None


def normalize_row(record: Mapping[str, Any]) -> DispatchRow:
    """Map a raw API record onto DispatchRow, accepting every known alias."""
    values = {
        name: _clean_text(_first_present(record, aliases))
        for name, aliases in ROW_FIELD_ALIASES.items()
    }
    return DispatchRow(**values)


def normalize_rows(records: Any) -> Tuple[DispatchRow, ...]:
    if not isinstance(records, list):
        return tuple()

    rows = []
    skipped = 0
    for record in records:
        if isinstance(record, Mapping):
            rows.append(normalize_row(record))
        else:
            skipped += 1

    if skipped:
        logger.debug(f"Skipped {skipped} non-object row records")
    return tuple(rows)


# =============================================================================
# DATES
# =============================================================================

def parse_timestamp(value: Optional[str], tz: Optional[str] = None) -> Optional[pd.Timestamp]:
    """
    Parse a timestamp string; None when empty or unparseable.

    Timezone-aware values are converted to `tz` and made naive so the
    calendar day matches what operators see locally.
    """
    if not value:
        return None

    ts = pd.to_datetime(value, errors='coerce')
    if ts is None or pd.isna(ts):
        return None

    if ts.tzinfo is not None:
        ts = ts.tz_convert(tz) if tz else ts
        ts = ts.tz_localize(None)
    return ts


def to_calendar_day(value: Optional[str], tz: Optional[str] = None) -> Optional[pd.Timestamp]:
    ts = parse_timestamp(value, tz)
    return ts.normalize() if ts is not None else None


def rows_to_frame(rows: Iterable[DispatchRow], tz: Optional[str] = None) -> pd.DataFrame:
    """
    Build the working DataFrame: one column per row field plus `resolved_day`,
    the calendar day of the row's date source (NaT when none resolves).
    """
    rows = list(rows)
    df = pd.DataFrame([asdict(row) for row in rows], columns=ROW_FIELDS)

    days = [to_calendar_day(row.resolved_date_source(), tz) for row in rows]
    df[RESOLVED_DAY_COLUMN] = pd.Series(days, index=df.index, dtype='datetime64[ns]')
    return df


# =============================================================================
# SNAPSHOT
# =============================================================================

def _as_count(value: Any) -> Optional[int]:
    if value is None or isinstance(value, bool):
        return None
    try:
        return int(float(value))
    except (TypeError, ValueError, OverflowError):
        return None


def _as_text_list(value: Any) -> List[str]:
    if not isinstance(value, list):
        return []
    cleaned = [_clean_text(v) for v in value]
    return [v for v in cleaned if v]


@dataclass(frozen=True)
class DashboardSummary:
    """Server-side aggregates; None when the server omitted a field."""
    total_gate_in: Optional[int] = None
    total_gate_out: Optional[int] = None
    pending_gate_out: Optional[int] = None
    total_dispatch: Optional[int] = None

    @classmethod
    def from_payload(cls, payload: Any) -> "DashboardSummary":
        if not isinstance(payload, Mapping):
            return cls()
        return cls(**{
            name: _as_count(_first_present(payload, aliases))
            for name, aliases in SUMMARY_FIELD_ALIASES.items()
        })


@dataclass(frozen=True)
class FilterVocabulary:
    parties: Tuple[str, ...] = ()
    items: Tuple[str, ...] = ()
    sales_persons: Tuple[str, ...] = ()
    states: Tuple[str, ...] = ()

    @classmethod
    def from_payload(cls, payload: Any) -> "FilterVocabulary":
        if not isinstance(payload, Mapping):
            return cls()
        return cls(**{
            name: tuple(_as_text_list(_first_present(payload, aliases)))
            for name, aliases in VOCABULARY_FIELD_ALIASES.items()
        })


@dataclass(frozen=True)
class DashboardSnapshot:
    """
    One complete fetch result. Replaced as a whole on every successful refresh.

    `frame` is the DataFrame view of `rows` used by filters, metrics and ranking.
    """
    summary: DashboardSummary
    filter_vocabulary: FilterVocabulary
    rows: Tuple[DispatchRow, ...]
    fetched_at: datetime
    last_updated: Optional[datetime] = None
    frame: pd.DataFrame = field(default=None, compare=False, repr=False)

    def __post_init__(self):
        if self.frame is None:
            object.__setattr__(self, 'frame', rows_to_frame(self.rows))

    @classmethod
    def from_payload(
        cls,
        data: Mapping[str, Any],
        fetched_at: datetime,
        tz: Optional[str] = None
    ) -> "DashboardSnapshot":
        rows = normalize_rows(data.get('rows'))
        last_updated = parse_timestamp(_clean_text(data.get('lastUpdated')), tz)

        return cls(
            summary=DashboardSummary.from_payload(data.get('summary')),
            filter_vocabulary=FilterVocabulary.from_payload(data.get('filters')),
            rows=rows,
            fetched_at=fetched_at,
            last_updated=last_updated.to_pydatetime() if last_updated is not None else fetched_at,
            frame=rows_to_frame(rows, tz),
        )

    @property
    def row_count(self) -> int:
        return len(self.rows)


def _distinct_sorted(df: pd.DataFrame, column: str) -> List[str]:
    if df is None or df.empty:
        return []
    values = df[column].dropna().astype(str).str.strip()
    return sorted(set(v for v in values if v))


def filter_options(snapshot: Optional[DashboardSnapshot]) -> Dict[str, List[str]]:
    """
    Selector vocabulary: the server's lists when non-empty, otherwise the
    sorted distinct values present in the rows.
    """
    if snapshot is None:
        return {'parties': [], 'items': [], 'sales_persons': [], 'states': []}

    vocabulary = snapshot.filter_vocabulary
    df = snapshot.frame
    columns = {
        'parties': 'party_name',
        'items': 'item_name',
        'sales_persons': 'sales_person',
        'states': 'state_name',
    }
    return {
        name: list(getattr(vocabulary, name)) or _distinct_sorted(df, column)
        for name, column in columns.items()
    }


__all__ = [
    'DispatchRow',
    'DashboardSummary',
    'FilterVocabulary',
    'DashboardSnapshot',
    'RESOLVED_DAY_COLUMN',
    'normalize_row',
    'normalize_rows',
    'parse_timestamp',
    'to_calendar_day',
    'rows_to_frame',
    'filter_options',
]
