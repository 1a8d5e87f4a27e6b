# o2d/views.py
"""
Screen registry for the O2D app.

The dashboard is the only screen implemented here; the per-step workflow
forms (gate entry, weighing, invoicing, ...) are served by their own apps and
are registered as placeholders so routing works for every catalog id.
"""

import logging
from dataclasses import dataclass
from typing import Optional

import streamlit as st

from .access import AccessSet
from .api_client import ApiClient
from .capabilities import DASHBOARD_VIEW, CapabilityCatalog
from .navigation import ViewRegistry
from .session import Identity

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class ViewContext:
    """Everything a screen needs to render."""
    view_id: str
    label: str
    identity: Optional[Identity]
    access: AccessSet
    api_client: ApiClient


def render_dashboard(context: ViewContext):
    # imported lazily: pulls in pandas/altair/openpyxl
    from .dispatch_dashboard.fragments import dashboard_fragment, get_data_source

    source = get_data_source(context.api_client)
    dashboard_fragment(source)


def render_placeholder(context: ViewContext):
    st.subheader(context.label)
    st.info("This step is recorded in its own workflow form. Use the sidebar to switch screens.")


def build_registry(catalog: CapabilityCatalog) -> ViewRegistry:
    """Dashboard plus a placeholder for every other catalog id."""
    registry = ViewRegistry()
    registry.register(DASHBOARD_VIEW, render_dashboard)
    for view_id in catalog.ids:
        if view_id not in registry:
            registry.register(view_id, render_placeholder)
    logger.debug(f"Registered {len(catalog.ids)} views")
    return registry


__all__ = [
    'ViewContext',
    'build_registry',
    'render_dashboard',
    'render_placeholder',
]
