# Overview: Capability constants gating feature areas.


class Capability:
    """Feature-area capabilities; each maps to a flag on UserPermissions."""
    INVENTORY = "inventory"
    INVOICES = "invoices"
    ORDERS = "orders"
    REPORTS = "reports"
    TEAM = "team"

    # Not a stored flag: only the Superadmin role holds it (billing surface)
    SUPERADMIN = "superadmin"


GRANULAR_CAPABILITIES = (
    Capability.INVENTORY,
    Capability.INVOICES,
    Capability.ORDERS,
    Capability.REPORTS,
    Capability.TEAM,
)
