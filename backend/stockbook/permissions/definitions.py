# Overview: All capability definitions.
# Each capability is defined as: (code, name, description)

from .categories import Capability


CAPABILITY_DEFINITIONS = [
    (
        Capability.INVENTORY,
        "Inventory Access",
        "Manage products & stock",
    ),
    (
        Capability.INVOICES,
        "Invoices Access",
        "Create & view invoices",
    ),
    (
        Capability.ORDERS,
        "Orders & Returns",
        "Manage POs and RMAs",
    ),
    (
        Capability.REPORTS,
        "Reports View",
        "Financial & Sales Reports",
    ),
    (
        Capability.TEAM,
        "Team Management",
        "Add/Edit lower-level users",
    ),
    (
        Capability.SUPERADMIN,
        "Billing",
        "Plan and payment settings (Superadmin only)",
    ),
]
