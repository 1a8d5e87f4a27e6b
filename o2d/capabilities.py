# o2d/capabilities.py
"""
Capability catalog: the ordered list of screens in the O2D workflow.

The catalog is the expansion target of the "all" access sentinel and the scan
order the router uses when picking a default landing screen. It is passed
explicitly wherever access is resolved so that "all" users pick up screens
added to the catalog without logging in again.
"""

from dataclasses import dataclass
from typing import Iterator, List, Optional, Tuple

DASHBOARD_VIEW = "dashboard"
REGISTRATION_VIEW = "register"
ALL_ACCESS_SENTINEL = "all"


@dataclass(frozen=True)
class Capability:
    """One screen of the workflow."""
    id: str
    label: str
    icon: str = ""


class CapabilityCatalog:
    """
    Ordered, versioned collection of capabilities.

    Usage:
        catalog = CapabilityCatalog(DEFAULT_CAPABILITIES, version="1")
        catalog.ids            # ('dashboard', 'orders', ...)
        "orders" in catalog    # True
        catalog.label_for("gate-out")
    """

    def __init__(self, capabilities: List[Capability], version: str = "1"):
        ids = [c.id for c in capabilities]
        if len(set(ids)) != len(ids):
            raise ValueError(f"Duplicate capability ids in catalog: {ids}")
        self._capabilities: Tuple[Capability, ...] = tuple(capabilities)
        self.version = version

    @property
    def ids(self) -> Tuple[str, ...]:
        return tuple(c.id for c in self._capabilities)

    @property
    def items(self) -> Tuple[Capability, ...]:
        return self._capabilities

    def get(self, capability_id: str) -> Optional[Capability]:
        for capability in self._capabilities:
            if capability.id == capability_id:
                return capability
        return None

    def label_for(self, capability_id: Optional[str]) -> str:
        capability = self.get(capability_id) if capability_id else None
        return capability.label if capability else ""

    def with_capability(self, capability: Capability, version: Optional[str] = None) -> "CapabilityCatalog":
        """Return a new catalog with one more capability appended."""
        return CapabilityCatalog(list(self._capabilities) + [capability], version or self.version)

    def __contains__(self, capability_id: object) -> bool:
        return capability_id in self.ids

    def __iter__(self) -> Iterator[str]:
        return iter(self.ids)

    def __len__(self) -> int:
        return len(self._capabilities)

    def __repr__(self) -> str:
        return f"CapabilityCatalog(version='{self.version}', size={len(self)})"


DEFAULT_CAPABILITIES = [
    Capability("dashboard", "Dashboard", "📊"),
    Capability("orders", "Orders", "🛒"),
    Capability("gate-entry", "Gate Entry", "🚪"),
    Capability("first-weight", "First Weight", "⚖️"),
    Capability("load-vehicle", "Load Vehicle", "📦"),
    Capability("second-weight", "Second Weight", "⚖️"),
    Capability("generate-invoice", "Generate Invoice", "🧾"),
    Capability("gate-out", "Gate Out Entry", "🚚"),
    Capability("payment", "Payment", "💳"),
    Capability("complaint-details", "Complaint Details", "💬"),
    Capability("party-feedback", "Party Feedback", "⭐"),
    Capability("permissions", "Permissions", "🛡️"),
    Capability("register", "User Register", "👤"),
]

DEFAULT_CATALOG = CapabilityCatalog(DEFAULT_CAPABILITIES, version="1")
