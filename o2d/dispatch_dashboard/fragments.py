# o2d/dispatch_dashboard/fragments.py
"""
Streamlit Fragments for the Dispatch Dashboard

The dashboard body runs as one fragment with run_every, so the periodic
refresh and filter changes rerun only this section, not the sidebar.
"""

import logging
from datetime import datetime
from typing import Dict, List, Optional

import pandas as pd
import streamlit as st

from ..api_client import ApiClient
from ..config import config
from .charts import DispatchCharts
from .constants import (
    ALL_ITEMS,
    ALL_PARTIES,
    ALL_SALESPERSONS,
    ALL_STATES,
    DISPLAY_DATE_FORMAT,
    REFRESH_INTERVAL_SECONDS,
    REPORT_ROW_LIMIT,
    TOP_N,
)
from .export import XLSX_MIME, ReportExporter
from .filters import FilterSelection, apply_filters, has_active_filters, normalize_selection
from .metrics import derive_metrics
from .models import filter_options
from .queries import DashboardDataSource
from .ranking import chart_series, rank_parties
from .report import compose_report, render_html

logger = logging.getLogger(__name__)

SOURCE_STATE_KEY = "o2d_dashboard_source"
FILTER_KEY_PREFIX = "o2d_filter_"

# (selection attribute, label, vocabulary key, sentinel)
SELECT_FILTERS = [
    ('party', "Party", 'parties', ALL_PARTIES),
    ('item', "Item", 'items', ALL_ITEMS),
    ('sales_person', "Salesperson", 'sales_persons', ALL_SALESPERSONS),
    ('state', "State", 'states', ALL_STATES),
]

LISTING_COLUMNS = {
    'party_name': "Party Name",
    'item_name': "Item",
    'indate': "In Date",
    'outdate': "Out Date",
    'gate_out_time': "Gate Out",
    'invoice_no': "Invoice No.",
    'sales_person': "Salesperson",
    'state_name': "State",
}


def get_data_source(client: ApiClient) -> DashboardDataSource:
    """One DashboardDataSource per browser session."""
    source = st.session_state.get(SOURCE_STATE_KEY)
    if source is None or source.client is not client:
        source = DashboardDataSource(
            client,
            refresh_interval=config.get_app_setting('DASHBOARD_REFRESH_SECONDS', REFRESH_INTERVAL_SECONDS),
            tz=config.get_app_setting('TIMEZONE'),
        )
        st.session_state[SOURCE_STATE_KEY] = source
    return source


def reset_data_source():
    st.session_state.pop(SOURCE_STATE_KEY, None)


# =============================================================================
# FILTER BAR
# =============================================================================

def _clear_filters():
    for key in list(st.session_state.keys()):
        if isinstance(key, str) and key.startswith(FILTER_KEY_PREFIX):
            del st.session_state[key]


def render_filter_bar(options: Dict[str, List[str]]) -> FilterSelection:
    """Selectors with an "All ..." first entry plus two optional date bounds."""
    with st.container(border=True):
        cols = st.columns(len(SELECT_FILTERS) + 2)

        raw = {}
        for col, (attr, label, vocab_key, sentinel) in zip(cols, SELECT_FILTERS):
            choices = [sentinel] + [v for v in options.get(vocab_key, []) if v != sentinel]
            key = f"{FILTER_KEY_PREFIX}{attr}"
            if st.session_state.get(key) not in choices:
                st.session_state.pop(key, None)
            with col:
                raw[attr] = st.selectbox(label, choices, key=key)

        with cols[-2]:
            raw['from_date'] = st.date_input(
                "From", value=None, format="DD/MM/YYYY", key=f"{FILTER_KEY_PREFIX}from_date"
            )
        with cols[-1]:
            raw['to_date'] = st.date_input(
                "To", value=None, format="DD/MM/YYYY", key=f"{FILTER_KEY_PREFIX}to_date"
            )

        selection = normalize_selection(raw)
        if has_active_filters(selection):
            st.button("✖ Clear filters", on_click=_clear_filters, key="o2d_clear_filters")

    return selection


# =============================================================================
# SECTIONS
# =============================================================================

def _render_header(source: DashboardDataSource):
    col_title, col_refresh = st.columns([5, 1])
    with col_title:
        st.subheader("📊 Dispatch Dashboard")
        snapshot = source.snapshot
        if snapshot is not None and snapshot.last_updated is not None:
            st.caption(f"Last updated: {snapshot.last_updated.strftime(DISPLAY_DATE_FORMAT + ' %H:%M:%S')}")
    with col_refresh:
        if st.button("🔄 Refresh", key="o2d_refresh", disabled=source.in_flight, use_container_width=True):
            source.refresh()


def _render_ranking(ranking, top_n: int):
    col_chart, col_table = st.columns([2, 3])
    with col_chart:
        st.altair_chart(DispatchCharts.build_distribution_pie(chart_series(ranking)), use_container_width=True)
    with col_table:
        st.markdown(f"**🏆 Top {top_n} Customers**")
        table = ranking.to_dataframe()
        if table.empty:
            st.info("No customer data available")
        else:
            st.dataframe(
                table,
                column_config={
                    'Rank': st.column_config.NumberColumn("Rank", width="small"),
                    'Dispatches': st.column_config.NumberColumn("Dispatches", format="%d"),
                },
                use_container_width=True,
                hide_index=True
            )


def _render_listing(filtered_df: pd.DataFrame):
    st.markdown(f"**📋 Filtered Results ({len(filtered_df):,} records)**")
    if filtered_df.empty:
        st.info("No records found matching your filters")
        return
    display_df = filtered_df[list(LISTING_COLUMNS.keys())].rename(columns=LISTING_COLUMNS)
    st.dataframe(display_df, use_container_width=True, hide_index=True, height=400)


def _render_exports(report, filtered_df: pd.DataFrame):
    stamp = report.generated_at.strftime('%Y%m%d_%H%M')
    col_html, col_xlsx, _ = st.columns([1, 1, 3])
    with col_html:
        st.download_button(
            label="🖨️ Print Report",
            data=render_html(report).encode('utf-8'),
            file_name=f"dispatch_report_{stamp}.html",
            mime="text/html",
            key="o2d_download_html",
            help="Opens the browser print dialog, use Save as PDF for a PDF copy"
        )
    with col_xlsx:
        excel_bytes = ReportExporter().create_report(report, filtered_df)
        st.download_button(
            label="📥 Export to Excel",
            data=excel_bytes,
            file_name=f"dispatch_report_{stamp}.xlsx",
            mime=XLSX_MIME,
            key="o2d_download_xlsx"
        )


def render_dashboard_body(source: DashboardDataSource):
    if source.snapshot is None and source.error is None:
        with st.spinner("Loading dashboard data..."):
            source.ensure_loaded()
    else:
        source.tick()

    _render_header(source)

    if source.is_loading:
        st.info("⏳ Loading dashboard data...")
        return

    if source.blocking_error:
        st.error(f"❌ {source.blocking_error}")
        if st.button("Retry", key="o2d_retry"):
            source.refresh()
        return

    if source.banner_error:
        st.warning(f"⚠️ Showing previous data, refresh failed: {source.banner_error}")

    snapshot = source.snapshot
    if snapshot is None:
        return

    top_n = config.get_app_setting('TOP_N', TOP_N)
    row_limit = config.get_app_setting('REPORT_ROW_LIMIT', REPORT_ROW_LIMIT)

    selection = render_filter_bar(filter_options(snapshot))
    active = has_active_filters(selection)
    filtered_df = apply_filters(snapshot.frame, selection)

    metrics = derive_metrics(snapshot.summary, filtered_df, active)
    ranking = rank_parties(filtered_df, top_n=top_n)

    DispatchCharts.render_kpi_cards(metrics, filters_active=active)
    _render_ranking(ranking, top_n)
    _render_listing(filtered_df)

    report = compose_report(snapshot, filtered_df, metrics, ranking, selection,
                            generated_at=datetime.now(), row_limit=row_limit)
    _render_exports(report, filtered_df)


def dashboard_fragment(source: DashboardDataSource, run_every: Optional[int] = None):
    """Run the dashboard body as a fragment that reruns every `run_every` seconds."""
    interval = run_every or int(source.refresh_interval.total_seconds())
    st.fragment(render_dashboard_body, run_every=interval)(source)


__all__ = [
    'get_data_source',
    'reset_data_source',
    'render_filter_bar',
    'render_dashboard_body',
    'dashboard_fragment',
]
