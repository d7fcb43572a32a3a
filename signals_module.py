"""
Signals Module - Interpretive Layer

Turns the normalized sales summary into a short, ordered list of plain-English
signals. Every rule is evaluated on each run and every applicable rule fires;
the order of the returned list is the display order.

Architecture:
- L0 (sales_snapshot: normalizer, detector, aggregator) → L1 (summary) → L2 (signals)
"""

from typing import Optional


# =============================================================================
# THRESHOLDS
# =============================================================================

# Ticket-size vs volume comparison factor
DRIVER_RATIO = 1.5

# Discounts as a share of gross
DISCOUNT_MATERIAL_RATE = 0.15
DISCOUNT_MODERATE_RATE = 0.05

# Tips per transaction (currency units)
TIPS_SOFT_PER_TRANSACTION = 1.0
TIPS_STRONG_PER_TRANSACTION = 2.5


DRIVER_MESSAGES = {
    "ticket_size": "Revenue is driven more by ticket size than transaction volume; protect average check to maintain momentum.",
    "volume": "Revenue is volume-led; keep an eye on traffic levers and service speed.",
    "balanced": "Ticket size and volume are balanced drivers of revenue.",
}

DISCOUNT_MESSAGES = {
    "material": "Discount pressure is material (discounts over 15% of gross). Ensure promos are intentional.",
    "moderate": "Moderate discounting detected; track whether promos are lifting ticket size or just eroding margin.",
    "light": "Discount impact is light; margin preservation is strong.",
}

TIPS_MESSAGES = {
    "soft": "Tips per transaction are soft; consider service quality or customer mix changes.",
    "strong": "Tips per transaction are strong; service experience may be a differentiator.",
    "steady": "Tips per transaction are steady; no major behavioral signal detected.",
}


# =============================================================================
# CLASSIFIERS
# =============================================================================

def classify_normalization(operating_days: int, calendar_days: int) -> str:
    """'gapped' when some calendar days show no activity, else 'continuous'."""
    if operating_days < calendar_days:
        return "gapped"
    return "continuous"


def classify_revenue_driver(gross_per_day: float,
                            net_per_transaction: float,
                            transactions_per_day: float) -> Optional[str]:
    """
    Classify what is carrying revenue.

    Compares net per transaction (a currency amount) against transactions per
    operating day (a count). The two are on different scales.

    Returns:
        "ticket_size", "volume" or "balanced", or None when any input is zero.
    """
    if not (gross_per_day and net_per_transaction and transactions_per_day):
        return None
    if net_per_transaction * DRIVER_RATIO > transactions_per_day:
        return "ticket_size"
    if transactions_per_day * DRIVER_RATIO > net_per_transaction:
        return "volume"
    return "balanced"


def classify_discount_pressure(discount_rate: float) -> str:
    if discount_rate >= DISCOUNT_MATERIAL_RATE:
        return "material"
    if discount_rate > DISCOUNT_MODERATE_RATE:
        return "moderate"
    return "light"


def classify_tips(tips_per_transaction: float) -> str:
    if tips_per_transaction < TIPS_SOFT_PER_TRANSACTION:
        return "soft"
    if tips_per_transaction > TIPS_STRONG_PER_TRANSACTION:
        return "strong"
    return "steady"


def build_signal_levels(operating_days: int,
                        calendar_days: int,
                        per_operating_day: dict,
                        ratios: dict) -> dict:
    """
    Run every classifier and return the results in display order.

    Keys: normalization, driver, discounts, tips. ``driver`` is None when the
    driver rule does not apply.
    """
    return {
        "normalization": classify_normalization(operating_days, calendar_days),
        "driver": classify_revenue_driver(
            per_operating_day.get("gross", 0),
            ratios.get("net_per_transaction", 0),
            per_operating_day.get("transactions", 0),
        ),
        "discounts": classify_discount_pressure(ratios.get("discount_rate", 0)),
        "tips": classify_tips(ratios.get("tips_per_transaction", 0)),
    }


# =============================================================================
# SIGNALS
# =============================================================================

def build_signals(operating_days: int,
                  calendar_days: int,
                  per_operating_day: dict,
                  ratios: dict) -> list[str]:
    """
    Build the ordered list of signal sentences.

    Args:
        operating_days: Days with at least one resolved record
        calendar_days: Inclusive span from first to last operating day
        per_operating_day: Metric -> total / operating_days
        ratios: discount_rate, net_per_transaction, tips_per_transaction

    Returns:
        [normalization note, driver note (when applicable), discount note, tips note]
    """
    levels = build_signal_levels(operating_days, calendar_days, per_operating_day, ratios)
    messages = []

    if levels["normalization"] == "gapped":
        messages.append(
            f"Operating-day normalization matters: {operating_days} active days across "
            f"{calendar_days} calendar days. Totals alone understate per-day performance."
        )
    else:
        messages.append("Performance is normalized: every calendar day shows activity.")

    if levels["driver"] is not None:
        messages.append(DRIVER_MESSAGES[levels["driver"]])

    messages.append(DISCOUNT_MESSAGES[levels["discounts"]])
    messages.append(TIPS_MESSAGES[levels["tips"]])

    return messages
