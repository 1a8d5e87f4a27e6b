# o2d/dispatch_dashboard/__init__.py
"""
Dispatch Dashboard Module

Components:
- queries: DashboardDataSource (fetch, refresh, stale-response handling)
- models: Row normalization and snapshot parsing
- filters: Party / item / salesperson / state / date-range filtering
- metrics: Gate-in, gate-out, pending and dispatch counters
- ranking: Top customers with "Others"
- charts: Altair visualizations
- report: Printable HTML report
- export: Formatted Excel report generation

Usage:
    from o2d.dispatch_dashboard import (
        DashboardDataSource,
        FilterSelection,
        apply_filters,
        derive_metrics,
        rank_parties,
        compose_report,
    )
"""

from .queries import DashboardDataSource, FetchTicket
from .models import DashboardSnapshot, DashboardSummary, DispatchRow, filter_options, rows_to_frame
from .filters import FilterSelection, apply_filters, describe_active_filters, has_active_filters, normalize_selection
from .metrics import DispatchMetrics, derive_metrics
from .ranking import Ranking, RankedEntry, chart_series, rank_parties
from .report import DashboardReport, compose_report, render_html
from .export import ReportExporter

# Constants
from .constants import (
    ALL_ITEMS,
    ALL_PARTIES,
    ALL_SALESPERSONS,
    ALL_STATES,
    OTHERS_LABEL,
    TOP_N,
)

__all__ = [
    # Classes
    'DashboardDataSource',
    'FetchTicket',
    'DashboardSnapshot',
    'DashboardSummary',
    'DispatchRow',
    'FilterSelection',
    'DispatchMetrics',
    'Ranking',
    'RankedEntry',
    'DashboardReport',
    'ReportExporter',

    # Functions
    'filter_options',
    'rows_to_frame',
    'apply_filters',
    'describe_active_filters',
    'has_active_filters',
    'normalize_selection',
    'derive_metrics',
    'chart_series',
    'rank_parties',
    'compose_report',
    'render_html',

    # Constants
    'ALL_ITEMS',
    'ALL_PARTIES',
    'ALL_SALESPERSONS',
    'ALL_STATES',
    'OTHERS_LABEL',
    'TOP_N',
]

__version__ = '1.0.0'
