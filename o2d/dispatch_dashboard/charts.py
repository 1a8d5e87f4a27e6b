# o2d/dispatch_dashboard/charts.py
"""
Altair Chart Builders for the Dispatch Dashboard

- KPI summary cards (using st.metric)
- Party distribution pie (Top 10 + Others)
"""

import logging
from typing import List

import altair as alt
import pandas as pd
import streamlit as st

from .constants import CHART_WIDTH, COLORS, PIE_CHART_HEIGHT, PIE_CHART_WIDTH
from .metrics import SOURCE_MIXED, DispatchMetrics
from .ranking import ChartSlice

logger = logging.getLogger(__name__)


class DispatchCharts:
    """
    Chart builders for the dispatch dashboard.

    Usage:
        DispatchCharts.render_kpi_cards(metrics)
        chart = DispatchCharts.build_distribution_pie(chart_series(ranking))
        st.altair_chart(chart, use_container_width=True)
    """

    # =========================================================================
    # KPI CARDS
    # =========================================================================

    @staticmethod
    def render_kpi_cards(metrics: DispatchMetrics, filters_active: bool = False):
        with st.container(border=True):
            st.markdown("**🚚 DISPATCH OVERVIEW**")
            col1, col2, col3, col4 = st.columns(4)

            scope = "filtered rows" if filters_active else "all records"

            with col1:
                st.metric(
                    label="Total Gate In",
                    value=f"{metrics.total_gate_in:,}",
                    help=f"Vehicles entered through the gate ({scope})"
                )
            with col2:
                st.metric(
                    label="Total Gate Out",
                    value=f"{metrics.total_gate_out:,}",
                    help=f"Rows with a gate-out time ({scope})"
                )
            with col3:
                st.metric(
                    label="Pending Gate Out",
                    value=f"{metrics.pending_gate_out:,}",
                    help=f"Entered but not yet out ({scope})"
                )
            with col4:
                st.metric(
                    label="Total Dispatch",
                    value=f"{metrics.total_dispatch:,}",
                    help=f"Dispatch events ({scope})"
                )

            if metrics.source == SOURCE_MIXED:
                st.caption("Some counters were computed from the loaded rows")

    # =========================================================================
    # DISTRIBUTION
    # =========================================================================

    @staticmethod
    def build_distribution_pie(slices: List[ChartSlice], title: str = "Dispatch share by party") -> alt.Chart:
        if not slices:
            return DispatchCharts._empty_chart("No data available")

        df = pd.DataFrame([{'name': s.name, 'value': s.value, 'color': s.color} for s in slices])
        total = df['value'].sum()
        df['percent'] = df['value'] / total * 100 if total else 0
        df['order'] = range(len(df))

        color_scale = alt.Scale(domain=df['name'].tolist(), range=df['color'].tolist())

        return alt.Chart(df).mark_arc(innerRadius=50).encode(
            theta=alt.Theta('value:Q'),
            color=alt.Color(
                'name:N',
                scale=color_scale,
                sort=df['name'].tolist(),
                legend=alt.Legend(title='Party', orient='right')
            ),
            order=alt.Order('order:Q'),
            tooltip=[
                alt.Tooltip('name:N', title='Party'),
                alt.Tooltip('value:Q', title='Dispatches', format=','),
                alt.Tooltip('percent:Q', title='Share %', format='.1f')
            ]
        ).properties(
            width=PIE_CHART_WIDTH,
            height=PIE_CHART_HEIGHT,
            title=title
        )

    @staticmethod
    def _empty_chart(message: str = "No data available") -> alt.Chart:
        return alt.Chart(pd.DataFrame({'note': [message]})).mark_text(
            text=message,
            fontSize=16,
            color=COLORS['text_light']
        ).properties(
            width=CHART_WIDTH,
            height=200
        )


__all__ = ['DispatchCharts']
