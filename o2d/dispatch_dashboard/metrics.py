# o2d/dispatch_dashboard/metrics.py
"""
Headline counters for the Dispatch Dashboard.

Two sources:
- no active filters: the server's summary aggregates, which may cover rows
  outside the client's fetch window; a field the server omitted falls back to
  the row count
- active filters: always recounted from the filtered rows, so the cards agree
  with the table on screen

Dispatch count and gate-in count are the same computation in this model.
"""

import logging
from dataclasses import asdict, dataclass
from typing import Dict, Optional

import pandas as pd

from .models import DashboardSummary

logger = logging.getLogger(__name__)

SOURCE_SERVER = "server"
SOURCE_ROWS = "rows"
SOURCE_MIXED = "mixed"


@dataclass(frozen=True)
class DispatchMetrics:
    total_gate_in: int = 0
    total_gate_out: int = 0
    pending_gate_out: int = 0
    total_dispatch: int = 0
    source: str = SOURCE_ROWS

    def to_dict(self) -> Dict:
        return asdict(self)


def count_from_rows(df: pd.DataFrame) -> DispatchMetrics:
    """Counters recomputed from a (filtered) row frame."""
    if df is None or df.empty:
        return DispatchMetrics(source=SOURCE_ROWS)

    gate_out_present = df['gate_out_time'].fillna("").astype(str).str.strip() != ""
    total = len(df)
    gate_out = int(gate_out_present.sum())

    return DispatchMetrics(
        total_gate_in=total,
        total_gate_out=gate_out,
        pending_gate_out=total - gate_out,
        total_dispatch=total,
        source=SOURCE_ROWS,
    )


def derive_metrics(
    summary: Optional[DashboardSummary],
    filtered_df: pd.DataFrame,
    filters_active: bool
) -> DispatchMetrics:
    """
    Compute the KPI cards.

    Args:
        summary: Server aggregates from the snapshot (may be None or partial)
        filtered_df: Rows after apply_filters (all rows when no filter is active)
        filters_active: has_active_filters(selection)

    Returns:
        DispatchMetrics
    """
    from_rows = count_from_rows(filtered_df)

    if filters_active or summary is None:
        return from_rows

    resolved = {}
    server_fields = 0
    for name in ('total_gate_in', 'total_gate_out', 'pending_gate_out', 'total_dispatch'):
        server_value = getattr(summary, name)
        if server_value is not None:
            resolved[name] = server_value
            server_fields += 1
        else:
            resolved[name] = getattr(from_rows, name)

    if server_fields == len(resolved):
        source = SOURCE_SERVER
    elif server_fields == 0:
        source = SOURCE_ROWS
    else:
        source = SOURCE_MIXED
        logger.debug(f"Server summary incomplete, {len(resolved) - server_fields} field(s) from rows")

    return DispatchMetrics(source=source, **resolved)


__all__ = [
    'DispatchMetrics',
    'count_from_rows',
    'derive_metrics',
    'SOURCE_SERVER',
    'SOURCE_ROWS',
    'SOURCE_MIXED',
]
