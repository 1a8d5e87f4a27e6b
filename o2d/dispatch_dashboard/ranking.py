# o2d/dispatch_dashboard/ranking.py
"""
Top-N party ranking for the Dispatch Dashboard.

Parties are ranked by dispatch count; everything past the cut-off is folded
into a single "Others" entry used by the pie chart.
"""

import logging
from dataclasses import dataclass, field
from typing import List, Optional, Tuple

import pandas as pd

from .constants import CHART_PALETTE, OTHERS_COLOR, OTHERS_LABEL, TOP_N

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class RankedEntry:
    rank: int
    name: str
    count: int
    items: Tuple[str, ...] = ()
    is_others: bool = False

    @property
    def items_text(self) -> str:
        return ", ".join(self.items)


@dataclass(frozen=True)
class Ranking:
    """
    Attributes:
        entries: Top parties, highest count first
        others: Sum of the remaining parties, None when nothing was cut
    """
    entries: Tuple[RankedEntry, ...] = ()
    others: Optional[RankedEntry] = None

    def all_entries(self) -> List[RankedEntry]:
        return list(self.entries) + ([self.others] if self.others else [])

    def to_dataframe(self) -> pd.DataFrame:
        """Table form: Rank, Customer Name, Dispatches, Items. Others excluded."""
        return pd.DataFrame(
            [
                {
                    'Rank': e.rank,
                    'Customer Name': e.name,
                    'Dispatches': e.count,
                    'Items': e.items_text,
                }
                for e in self.entries
            ],
            columns=['Rank', 'Customer Name', 'Dispatches', 'Items']
        )

    def __bool__(self) -> bool:
        return bool(self.entries)


@dataclass(frozen=True)
class ChartSlice:
    name: str
    value: int
    color: str = field(default=OTHERS_COLOR)


def _distinct_in_order(values) -> Tuple[str, ...]:
    seen = {}
    for value in values:
        if value and value not in seen:
            seen[value] = None
    return tuple(seen)


def rank_parties(df: pd.DataFrame, top_n: int = TOP_N) -> Ranking:
    """
    Rank parties by row count.

    Rows with an empty party name are ignored. Ties keep the order in which
    the parties first appear in the frame.

    Args:
        df: Filtered row frame
        top_n: Number of parties kept before folding into "Others"

    Returns:
        Ranking
    """
    if df is None or df.empty:
        return Ranking()

    work = pd.DataFrame({
        'party': df['party_name'].fillna("").astype(str).str.strip(),
        'item': df['item_name'].fillna("").astype(str).str.strip(),
    })
    work = work[work['party'] != ""]
    if work.empty:
        return Ranking()

    # groupby(sort=False) yields parties in first-seen order
    grouped = [
        (party, len(items), _distinct_in_order(items.tolist()))
        for party, items in work.groupby('party', sort=False)['item']
    ]

    # sorted() is stable, so equal counts keep first-seen order
    grouped = sorted(grouped, key=lambda g: g[1], reverse=True)

    top = grouped[:top_n]
    rest = grouped[top_n:]

    entries = tuple(
        RankedEntry(rank=i, name=party, count=count, items=items)
        for i, (party, count, items) in enumerate(top, start=1)
    )

    others = None
    if rest:
        others = RankedEntry(
            rank=len(entries) + 1,
            name=OTHERS_LABEL,
            count=sum(count for _, count, _ in rest),
            is_others=True,
        )
        logger.debug(f"Folded {len(rest)} parties into '{OTHERS_LABEL}'")

    return Ranking(entries=entries, others=others)


def chart_series(ranking: Ranking) -> List[ChartSlice]:
    """Pie slices: palette cycled by index, Others in the neutral colour."""
    slices = [
        ChartSlice(entry.name, entry.count, CHART_PALETTE[i % len(CHART_PALETTE)])
        for i, entry in enumerate(ranking.entries)
    ]
    if ranking.others is not None:
        slices.append(ChartSlice(ranking.others.name, ranking.others.count, OTHERS_COLOR))
    return slices


__all__ = [
    'RankedEntry',
    'Ranking',
    'ChartSlice',
    'rank_parties',
    'chart_series',
]
