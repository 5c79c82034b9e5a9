"""
Text Generation Service (Gemini REST API)

Two helpers backed by the generateContent endpoint:
- generate_product_description: short catalog blurb for a product name
- analyze_business_data: a few insights from a sales/stock summary

Neither ever raises to the caller. Each failure mode maps to a fixed
message so the UI can show something sensible:

    no API key configured       -> *_MISSING_KEY
    transport / HTTP / decoding -> *_FAILED
    reply without text          -> *_EMPTY
"""

from __future__ import annotations

from typing import Iterable

import httpx
from flask import current_app

from ..models import Invoice, Product


DESCRIPTION_MISSING_KEY = "AI Configuration Missing (API Key)"
DESCRIPTION_FAILED = "Failed to generate description."
DESCRIPTION_EMPTY = "No description generated."

INSIGHTS_MISSING_KEY = "AI Configuration Missing"
INSIGHTS_FAILED = "Could not analyze data at this moment."
INSIGHTS_EMPTY = "No insights available."

# Stock level counted as "low" in the insights summary
INSIGHTS_LOW_STOCK_THRESHOLD = 5


class GenerationError(Exception):
    """Raised internally when the API call does not produce a usable reply."""


def _api_key() -> str | None:
    return current_app.config.get("GEMINI_API_KEY") or None


def _endpoint() -> str:
    base = current_app.config.get("DESCRIPTION_API_BASE", "https://generativelanguage.googleapis.com/v1beta")
    model = current_app.config.get("DESCRIPTION_MODEL", "gemini-3-flash-preview")
    return f"{base.rstrip('/')}/models/{model}:generateContent"


def _extract_text(body: dict) -> str:
    """Concatenate the text parts of the first candidate."""
    candidates = body.get("candidates") or []
    if not candidates:
        return ""
    parts = (candidates[0].get("content") or {}).get("parts") or []
    return "".join(part.get("text", "") for part in parts if isinstance(part, dict)).strip()


def generate_text(prompt: str, *, api_key: str, client: httpx.Client | None = None) -> str:
    """
    One generateContent call. Returns the reply text ("" when the model sent none).

    Raises:
        GenerationError: network failure, non-2xx status or undecodable body
    """
    owns_client = client is None
    if owns_client:
        client = httpx.Client(timeout=current_app.config.get("DESCRIPTION_TIMEOUT_SECONDS", 15))

    try:
        response = client.post(
            _endpoint(),
            params={"key": api_key},
            json={"contents": [{"parts": [{"text": prompt}]}]},
        )
        response.raise_for_status()
        return _extract_text(response.json())
    except (httpx.HTTPError, ValueError, AttributeError) as exc:
        raise GenerationError(str(exc)) from exc
    finally:
        if owns_client:
            client.close()


def _generate(prompt: str, *, missing: str, failed: str, empty: str, client) -> str:
    api_key = _api_key()
    if not api_key:
        return missing
    try:
        text = generate_text(prompt, api_key=api_key, client=client)
    except GenerationError as exc:
        current_app.logger.warning("Text generation failed: %s", exc)
        return failed
    return text or empty


def generate_product_description(product_name: str, *, client: httpx.Client | None = None) -> str:
    prompt = (
        "Write a short, professional, and catchy product description "
        f'(max 20 words) for a product named "{product_name}".'
    )
    return _generate(
        prompt,
        missing=DESCRIPTION_MISSING_KEY,
        failed=DESCRIPTION_FAILED,
        empty=DESCRIPTION_EMPTY,
        client=client,
    )


def business_summary(invoices: Iterable[Invoice], products: Iterable[Product]) -> dict:
    """Aggregate figures sent to the model; no customer data leaves the app."""
    invoices = list(invoices)
    products = list(products)
    top = sorted(products, key=lambda p: p.stock, reverse=True)[:3]
    return {
        "total_revenue_cents": sum(i.total_cents for i in invoices),
        "invoice_count": len(invoices),
        "low_stock_count": sum(1 for p in products if p.stock < INSIGHTS_LOW_STOCK_THRESHOLD),
        "top_products": [p.name for p in top],
    }


def analyze_business_data(
    invoices: Iterable[Invoice],
    products: Iterable[Product],
    *,
    client: httpx.Client | None = None,
) -> str:
    summary = business_summary(invoices, products)
    revenue = summary["total_revenue_cents"] / 100
    prompt = (
        "Analyze this business data:\n"
        f"Total Revenue: ${revenue:,.2f}\n"
        f"Invoices Issued: {summary['invoice_count']}\n"
        f"Low Stock Items: {summary['low_stock_count']}\n"
        f"High Stock Products: {', '.join(summary['top_products'])}\n\n"
        "Provide 3 brief, actionable insights or tips for the business owner in a friendly tone.\n"
        "Focus on inventory optimization and sales growth."
    )
    return _generate(
        prompt,
        missing=INSIGHTS_MISSING_KEY,
        failed=INSIGHTS_FAILED,
        empty=INSIGHTS_EMPTY,
        client=client,
    )
