# o2d/dispatch_dashboard/filters.py
"""
Filter logic for the Dispatch Dashboard

Five independent predicates, combined with AND:
- party, item, salesperson, state: exact match on the trimmed field
- date range: inclusive, calendar-day granularity, on the row's resolved date
  (out-date, then in-date, then gate-out timestamp)

"No selection" is a sentinel string ("All Parties", ...) for the text
predicates and None for the date bounds.
"""

import logging
from dataclasses import dataclass, replace
from datetime import date, datetime
from typing import Any, List, Mapping, Optional, Tuple

import pandas as pd

from .constants import (
    ALL_ITEMS,
    ALL_PARTIES,
    ALL_SALESPERSONS,
    ALL_STATES,
    DISPLAY_DATE_FORMAT,
    FILTER_LABELS,
)
from .models import RESOLVED_DAY_COLUMN

logger = logging.getLogger(__name__)


# =============================================================================
# SELECTION
# =============================================================================

@dataclass(frozen=True)
class FilterSelection:
    """
    Current filter state of the dashboard.

    Attributes:
        party / item / sales_person / state: selected value or its "All ..." sentinel
        from_date / to_date: inclusive calendar-day bounds, None when unset
    """
    party: str = ALL_PARTIES
    item: str = ALL_ITEMS
    sales_person: str = ALL_SALESPERSONS
    state: str = ALL_STATES
    from_date: Optional[date] = None
    to_date: Optional[date] = None

    def cleared(self) -> "FilterSelection":
        return FilterSelection()

    def with_values(self, **changes) -> "FilterSelection":
        return replace(self, **changes)

    def __repr__(self) -> str:
        active = [f"{label}={value}" for label, value in describe_active_filters(self)]
        return f"FilterSelection({', '.join(active) or 'none'})"


# (selection attribute, frame column, sentinel)
TEXT_PREDICATES: List[Tuple[str, str, str]] = [
    ('party', 'party_name', ALL_PARTIES),
    ('item', 'item_name', ALL_ITEMS),
    ('sales_person', 'sales_person', ALL_SALESPERSONS),
    ('state', 'state_name', ALL_STATES),
]

def _as_date(value: Any) -> Optional[date]:
    if value is None or value == "":
        return None
    if isinstance(value, datetime):
        return value.date()
    if isinstance(value, date):
        return value
    ts = pd.to_datetime(value, errors='coerce')
    if pd.isna(ts):
        logger.warning(f"Ignoring unparseable date bound: {value!r}")
        return None
    return ts.date()


def normalize_selection(raw: Optional[Mapping[str, Any]]) -> FilterSelection:
    """
    Build a FilterSelection from loosely typed input (widget values, query
    params). None or blank text becomes the sentinel; dates accept date,
    datetime or parseable strings.
    """
    raw = raw or {}
    values = {}
    for attr, _, sentinel in TEXT_PREDICATES:
        value = raw.get(attr)
        text = str(value).strip() if value is not None else ""
        values[attr] = text or sentinel

    return FilterSelection(
        from_date=_as_date(raw.get('from_date')),
        to_date=_as_date(raw.get('to_date')),
        **values
    )


def has_active_filters(selection: FilterSelection) -> bool:
    """True if any predicate differs from its "no selection" value."""
    for attr, _, sentinel in TEXT_PREDICATES:
        if getattr(selection, attr) != sentinel:
            return True
    return selection.from_date is not None or selection.to_date is not None


def describe_active_filters(selection: FilterSelection) -> List[Tuple[str, str]]:
    """
    (label, value) pairs of the non-default predicates, in report order:
    Party, Item, State, Sales, From, To.
    """
    described = []
    for attr in ('party', 'item', 'state', 'sales_person'):
        sentinel = next(s for a, _, s in TEXT_PREDICATES if a == attr)
        value = getattr(selection, attr)
        if value != sentinel:
            described.append((FILTER_LABELS[attr], value))

    if selection.from_date is not None:
        described.append((FILTER_LABELS['from_date'], selection.from_date.strftime(DISPLAY_DATE_FORMAT)))
    if selection.to_date is not None:
        described.append((FILTER_LABELS['to_date'], selection.to_date.strftime(DISPLAY_DATE_FORMAT)))
    return described


# =============================================================================
# APPLY
# =============================================================================

def apply_filters(df: pd.DataFrame, selection: FilterSelection) -> pd.DataFrame:
    """
    Apply every active predicate to the row frame.

    Args:
        df: Frame built by rows_to_frame
        selection: Current FilterSelection

    Returns:
        The same frame when nothing is selected, otherwise the matching rows
    """
    if not has_active_filters(selection):
        return df

    if df.empty:
        return df

    mask = pd.Series(True, index=df.index)

    for attr, column, sentinel in TEXT_PREDICATES:
        value = getattr(selection, attr)
        if value == sentinel:
            continue
        field_values = df[column].fillna("").astype(str).str.strip()
        mask &= (field_values != "") & (field_values == value)

    if selection.from_date is not None or selection.to_date is not None:
        days = df[RESOLVED_DAY_COLUMN]
        mask &= days.notna()
        if selection.from_date is not None:
            mask &= days >= pd.Timestamp(selection.from_date)
        if selection.to_date is not None:
            mask &= days <= pd.Timestamp(selection.to_date)

    filtered = df[mask]
    logger.debug(f"Filtered rows: {len(df)} -> {len(filtered)} ({selection!r})")
    return filtered


__all__ = [
    'FilterSelection',
    'TEXT_PREDICATES',
    'normalize_selection',
    'has_active_filters',
    'describe_active_filters',
    'apply_filters',
]
