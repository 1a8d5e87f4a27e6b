# o2d/dispatch_dashboard/constants.py
"""
Constants for the Dispatch Dashboard Module

Centralized configuration for:
- Filter sentinels
- Row field aliases
- Ranking / chart settings
- Report and export settings
"""

# =====================================================================
# FILTER SENTINELS ("no selection")
# =====================================================================

ALL_PARTIES = "All Parties"
ALL_ITEMS = "All Items"
ALL_SALESPERSONS = "All Salespersons"
ALL_STATES = "All States"

FILTER_LABELS = {
    "party": "Party",
    "item": "Item",
    "state": "State",
    "sales_person": "Sales",
    "from_date": "From",
    "to_date": "To",
}

DISPLAY_DATE_FORMAT = "%d/%m/%Y"

# =====================================================================
# ROW FIELDS
# =====================================================================

# Internal field -> accepted source keys, first present wins
ROW_FIELD_ALIASES = {
    "indate": ["indate", "inDate", "in_date", "INDATE"],
    "outdate": ["outdate", "outDate", "out_date", "OUTDATE"],
    "gate_out_time": ["gateOutTime", "gate_out_time", "gateouttime", "GATE_OUT_TIME"],
    "order_vrno": ["orderVrno", "order_vrno", "ORDER_VRNO"],
    "gate_vrno": ["gateVrno", "gate_vrno", "GATE_VRNO"],
    "wslipno": ["wslipno", "wSlipNo", "WSLIPNO"],
    "sales_person": ["salesPerson", "sales_person", "SALES_PERSON"],
    "party_name": ["partyName", "party_name", "PARTY_NAME"],
    "item_name": ["itemName", "item_name", "ITEM_NAME"],
    "invoice_no": ["invoiceNo", "invoice_no", "INVOICE_NO"],
    "state_name": ["stateName", "state_name", "state", "STATE"],
}

ROW_FIELDS = list(ROW_FIELD_ALIASES.keys())

# Date source priority for the date-range filter
DATE_SOURCE_FIELDS = ["outdate", "indate", "gate_out_time"]

# =====================================================================
# SUMMARY FIELDS
# =====================================================================

SUMMARY_FIELD_ALIASES = {
    "total_gate_in": ["totalGateIn", "total_gate_in"],
    "total_gate_out": ["totalGateOut", "total_gate_out"],
    "pending_gate_out": ["pendingGateOut", "pending_gate_out"],
    "total_dispatch": ["totalDispatch", "total_dispatch"],
}

VOCABULARY_FIELD_ALIASES = {
    "parties": ["parties"],
    "items": ["items"],
    "sales_persons": ["salesPersons", "sales_persons"],
    "states": ["states"],
}

# =====================================================================
# RANKING & CHARTS
# =====================================================================

TOP_N = 10
OTHERS_LABEL = "Others"

CHART_PALETTE = [
    "#0088FE", "#00C49F", "#FFBB28", "#FF8042",
    "#8884D8", "#82CA9D", "#FFC658", "#FF7C7C",
]
OTHERS_COLOR = "#999999"

CHART_WIDTH = 800

PIE_CHART_WIDTH = 400
PIE_CHART_HEIGHT = 300

COLORS = {
    "text_light": "#666666",
}

# =====================================================================
# DATA SOURCE
# =====================================================================

DASHBOARD_SUMMARY_PATH = "/dashboard/summary"
REFRESH_INTERVAL_SECONDS = 300

# =====================================================================
# REPORT / EXPORT SETTINGS
# =====================================================================

REPORT_ROW_LIMIT = 100
REPORT_TITLE = "Dashboard Report"
REPORT_SUBTITLE = "Filtered view of O2D operations"

EXCEL_STYLES = {
    "header_fill_color": "1f77b4",
    "header_font_color": "FFFFFF",
    "number_format": '#,##0',
    "date_format": 'DD/MM/YYYY',
}
