# Overview: Read-only summaries over invoices and products for the dashboard and financial report.

from __future__ import annotations

from flask import current_app

from ..extensions import store
from ..models import Invoice, InvoiceStatus, Product


def _low_stock_threshold() -> int:
    return int(current_app.config.get("LOW_STOCK_THRESHOLD", 10))


def revenue_by_month(invoices: list[Invoice]) -> list[dict]:
    """Invoice totals grouped by YYYY-MM, oldest month first."""
    totals: dict[str, int] = {}
    for inv in invoices:
        month = inv.date[:7]
        totals[month] = totals.get(month, 0) + inv.total_cents
    return [{"month": month, "amount_cents": totals[month]} for month in sorted(totals)]


def cost_of_goods_cents(invoice: Invoice, products: dict[str, Product]) -> int:
    """Cost of an invoice's lines at the products' current cost. Unknown products cost 0."""
    total = 0
    for item in invoice.items:
        product = products.get(item.product_id)
        if product is not None:
            total += product.cost_cents * item.quantity
    return total


def dashboard_stats() -> dict:
    invoices = store.invoices.all()
    products = store.products.all()
    threshold = _low_stock_threshold()

    return {
        "total_revenue_cents": sum(i.total_cents for i in invoices if i.status == InvoiceStatus.PAID),
        "invoice_count": len(invoices),
        "low_stock_count": sum(1 for p in products if p.stock < threshold),
        "low_stock_threshold": threshold,
        "revenue_by_month": revenue_by_month(invoices),
    }


def financial_report() -> dict:
    """
    Revenue, cost of goods sold and gross profit over Paid invoices, plus
    the value of stock on hand at cost.

    COGS uses each product's *current* cost; invoice lines do not snapshot cost.
    """
    paid = [i for i in store.invoices.all() if i.status == InvoiceStatus.PAID]
    products = {p.id: p for p in store.products.all()}

    revenue = sum(i.total_cents for i in paid)
    cogs = 0
    per_invoice = []
    for inv in sorted(paid, key=lambda i: i.date):
        inv_cogs = cost_of_goods_cents(inv, products)
        cogs += inv_cogs
        per_invoice.append({
            "invoice_id": inv.id,
            "date": inv.date,
            "revenue_cents": inv.total_cents,
            "profit_cents": inv.total_cents - inv_cogs,
        })

    gross_profit = revenue - cogs
    return {
        "revenue_cents": revenue,
        "cogs_cents": cogs,
        "gross_profit_cents": gross_profit,
        "gross_margin_percent": round(gross_profit * 100 / revenue, 1) if revenue else 0.0,
        "inventory_valuation_cents": sum(p.stock * p.cost_cents for p in products.values()),
        "invoices": per_invoice,
    }


def usage_summary() -> dict:
    """Record counts shown on the billing page."""
    return {
        "users": store.users.count(),
        "products": store.products.count(),
        "invoices": store.invoices.count(),
        "purchase_orders": store.purchase_orders.count(),
    }
