"""
Synthetic Sales Export Generator
================================

Generates POS "sales summary" exports the way vendors actually ship them:
- Vendor-specific column names (square / toast / clover)
- Formatting quality (pristine / typical / corrupted)
- Closed days, split shifts, footer totals, blank lines

Every cell is written as text, exactly like a CSV read with dtype=str, and
every export comes with a ground-truth dict so the engine's output can be
checked against what was generated.

Use for:
- Automated testing
- Demo runs (example_main.py)
- Edge case validation
"""

import random
from pathlib import Path
from typing import Literal

import numpy as np
import pandas as pd


METRIC_KEYS = ("gross", "net", "discounts", "tips", "transactions")

# Column names per vendor layout; every layout is detectable from its names
VENDOR_LAYOUTS = {
    "square": {
        "date": "Date",
        "gross": "Gross Sales",
        "discounts": "Discounts & Comps",
        "net": "Net Sales",
        "tips": "Tips",
        "transactions": "Transactions",
    },
    "toast": {
        "date": "Business Date",
        "gross": "Total Gross",
        "discounts": "Promo Amount",
        "net": "Total Net",
        "tips": "Gratuity",
        "transactions": "Orders",
    },
    "clover": {
        "date": "Day",
        "gross": "Revenue",
        "discounts": "Discounts",
        "net": "Net Sales",
        "tips": "Tip Total",
        "transactions": "Receipts",
    },
}

# Free-text column each vendor adds (never numeric-looking)
VENDOR_TEXT_COLUMNS = {
    "square": ("Location", "Main Street"),
    "toast": ("Restaurant", "Harbor Grill"),
    "clover": ("Merchant", "Corner Cafe"),
}

CORRUPTED_DATE_FORMATS = ["%Y-%m-%d", "%m/%d/%Y", "%Y-%m-%d 09:00:00", "%b %d, %Y"]


class SalesExportGenerator:
    """Generate synthetic daily sales exports for testing"""

    def __init__(self, seed: int = 42):
        """Initialize with random seed for reproducibility"""
        np.random.seed(seed)
        random.seed(seed)

    def trading_days(self,
                     start_date: str,
                     end_date: str,
                     closed_weekdays: tuple = (0,)) -> list:
        """
        Days with sales between start and end (inclusive).

        Weekdays use Monday=0. The first and last day always trade so the
        calendar span of the export equals the requested range.
        """
        all_days = pd.date_range(start=start_date, end=end_date, freq="D")
        if len(all_days) == 0:
            raise ValueError(f"Empty date range: {start_date} -> {end_date}")

        days = []
        for i, day in enumerate(all_days):
            is_edge = i == 0 or i == len(all_days) - 1
            if is_edge or day.weekday() not in closed_weekdays:
                days.append(day)
        return days

    def _day_figures(self) -> dict:
        """One day's numbers, already rounded the way a POS would print them"""
        transactions = int(np.random.randint(40, 180))
        gross = round(transactions * np.random.uniform(14.0, 32.0), 2)
        discounts = round(gross * np.random.uniform(0.0, 0.12), 2)
        net = round(gross - discounts, 2)
        tips = round(transactions * np.random.uniform(0.5, 3.0), 2)
        return {
            "gross": gross,
            "net": net,
            "discounts": discounts,
            "tips": tips,
            "transactions": transactions,
        }

    def _split_shift(self, figures: dict) -> list[dict]:
        """Split a day into lunch + dinner rows that add back to the day"""
        share = np.random.uniform(0.3, 0.5)
        lunch = {}
        dinner = {}
        for metric in METRIC_KEYS:
            if metric == "transactions":
                lunch[metric] = int(figures[metric] * share)
                dinner[metric] = figures[metric] - lunch[metric]
            else:
                lunch[metric] = round(figures[metric] * share, 2)
                dinner[metric] = round(figures[metric] - lunch[metric], 2)
        return [lunch, dinner]

    def _format_money(self, value: float, quality: str, metric: str) -> str:
        if quality == "pristine":
            return f"{value:.2f}"
        if quality == "typical":
            return f"${value:,.2f}"
        # corrupted
        if metric == "discounts" and random.random() < 0.5:
            return f"(${value:,.2f})"
        style = random.choice(["symbol", "nbsp", "plain"])
        if style == "symbol":
            return f"${value:,.2f}"
        if style == "nbsp":
            return f"$\u00a0{value:,.2f}"
        return f"{value:.2f}"

    def _format_date(self, day: pd.Timestamp, quality: str) -> str:
        if quality == "corrupted":
            return day.strftime(random.choice(CORRUPTED_DATE_FORMATS))
        return day.strftime("%Y-%m-%d")

    def _format_row(self, layout: dict, text_column: tuple, date_cell: str,
                    figures: dict, quality: str) -> dict:
        row = {layout["date"]: date_cell, text_column[0]: text_column[1]}
        for metric in METRIC_KEYS:
            if metric == "transactions":
                row[layout[metric]] = str(int(figures[metric]))
            else:
                row[layout[metric]] = self._format_money(figures[metric], quality, metric)
        return row

    def generate_sales_export(
        self,
        start_date: str = "2024-01-01",
        end_date: str = "2024-01-31",
        vendor: Literal["square", "toast", "clover"] = "square",
        quality: Literal["pristine", "typical", "corrupted"] = "typical",
        closed_weekdays: tuple = (0,),
    ) -> tuple[pd.DataFrame, dict]:
        """
        Generate one vendor export plus its ground truth.

        Args:
            start_date: First day of the export (always trades)
            end_date: Last day of the export (always trades)
            vendor: Column layout to use
            quality: pristine (plain numbers), typical (currency formatting,
                split shifts, footer), corrupted (mixed dates, parentheses,
                blank lines, subtotal rows)
            closed_weekdays: Weekdays with no trading (Monday=0)

        Returns:
            (export_df, truth) where export_df holds only strings and truth has
            operating_days, calendar_days, first_date, last_date, totals, columns
        """
        if vendor not in VENDOR_LAYOUTS:
            raise ValueError(f"Unknown vendor layout: {vendor}. Options: {list(VENDOR_LAYOUTS)}")

        layout = VENDOR_LAYOUTS[vendor]
        text_column = VENDOR_TEXT_COLUMNS[vendor]
        columns = [layout["date"], text_column[0]] + [layout[m] for m in METRIC_KEYS]
        blank_row = {c: "" for c in columns}

        days = self.trading_days(start_date, end_date, closed_weekdays)
        totals = {metric: 0.0 for metric in METRIC_KEYS}
        rows = []

        for i, day in enumerate(days):
            figures = self._day_figures()
            if quality != "pristine" and np.random.random() < 0.25:
                day_rows = self._split_shift(figures)
            else:
                day_rows = [figures]

            for part in day_rows:
                for metric in METRIC_KEYS:
                    totals[metric] += part[metric]
                rows.append(self._format_row(layout, text_column, self._format_date(day, quality), part, quality))

            if quality == "corrupted":
                if np.random.random() < 0.05:
                    rows.append(dict(blank_row))
                if i == len(days) // 2:
                    subtotal = self._format_row(layout, text_column, "Subtotal", totals, "typical")
                    subtotal[text_column[0]] = ""
                    rows.append(subtotal)

        if quality != "pristine":
            footer = self._format_row(layout, text_column, "Total", totals, "typical")
            footer[text_column[0]] = ""
            rows.append(footer)

        export_df = pd.DataFrame(rows, columns=columns)

        first_day = days[0]
        last_day = days[-1]
        truth = {
            "operating_days": len(days),
            "calendar_days": (last_day - first_day).days + 1,
            "first_date": first_day.strftime("%Y-%m-%d"),
            "last_date": last_day.strftime("%Y-%m-%d"),
            "totals": totals,
            "columns": dict(layout),
        }
        return export_df, truth


def write_export_csv(export_df: pd.DataFrame, path: str | Path) -> Path:
    """Save an export the way a vendor download would look on disk"""
    path = Path(path)
    path.parent.mkdir(parents=True, exist_ok=True)
    export_df.to_csv(path, index=False, encoding="utf-8-sig")
    return path


def validate_ground_truth(results: dict, truth: dict, tolerance: float = 0.01) -> list[str]:
    """
    Compare a snapshot run against the generator's ground truth.

    Args:
        results: Dictionary returned by sales_snapshot.run_sales_snapshot()
        truth: Ground truth returned by generate_sales_export()
        tolerance: Allowed absolute difference on money/count totals

    Returns:
        List of human-readable mismatches (empty when everything matches)
    """
    mismatches = []
    summary = results["summary"]
    selection = results["selection"]

    if selection.date_column != truth["columns"]["date"]:
        mismatches.append(
            f"Date column: detected {selection.date_column!r}, expected {truth['columns']['date']!r}"
        )
    for metric in METRIC_KEYS:
        detected = selection.metrics.get(metric)
        expected = truth["columns"][metric]
        if detected != expected:
            mismatches.append(f"{metric} column: detected {detected!r}, expected {expected!r}")

    for key in ("operating_days", "calendar_days", "first_date", "last_date"):
        if getattr(summary, key) != truth[key]:
            mismatches.append(f"{key}: engine {getattr(summary, key)}, expected {truth[key]}")

    for metric in METRIC_KEYS:
        got = summary.totals[metric]
        expected = truth["totals"][metric]
        if abs(got - expected) > tolerance:
            mismatches.append(f"total {metric}: engine {got:,.2f}, expected {expected:,.2f}")

    return mismatches
