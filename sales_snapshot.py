# %% [markdown]
# # Sales Snapshot Engine – v1.0
#
# Turns a POS "sales summary" export into per-day performance:
#
# - Cell cleaning (currency, separators, parentheses, messy dates)
# - Column detection (date + gross / net / discounts / tips / transactions)
# - Daily aggregation
# - Operating-day vs calendar-day normalization
# - Signals (ticket size vs volume, discount pressure, tips)
# - Export block, charts (matplotlib), CSV / JSON / Excel outputs
#
# Use synthetic mode for a demo run.
# Use client mode when a business sends you their export.


# %%
import json
import os
import re
from dataclasses import asdict, dataclass, field, fields
from datetime import date
from types import MappingProxyType
from typing import Optional

import matplotlib.pyplot as plt
import numpy as np
import pandas as pd

import generate_test_data
import signals_module

# %% [markdown]
# ## 1. CONFIG – Master Settings
#
# - Adjust these for your demo or per-client.
# - Signal thresholds live in signals_module and are not configurable.


# %%
CONFIG = {
    "currency": "$",
    "random_seed": 42,

    # Demo / report meta
    "business_name": "Corner Cafe",
    "period_label": "Jan–Mar 2024",
    "engine_version": "v1.0",

    # Synthetic export settings
    "synthetic_vendor": "square",        # square | toast | clover
    "synthetic_quality": "typical",      # pristine | typical | corrupted
    "start_date": "2024-01-01",
    "end_date": "2024-03-31",
    "closed_weekdays": (0,),             # Monday=0

    # Real data file path (fill when using client mode)
    "client_sales_path": "data/client_sales_summary.csv",
    "output_dir": "output",
}

METRIC_KEYS = ("gross", "net", "discounts", "tips", "transactions")
REQUIRED_METRICS = ("gross", "net")

METRIC_HINTS = {
    "gross": ["gross", "total sales", "total gross", "revenue"],
    "net": ["net", "total net", "net sales"],
    "discounts": ["discount", "comp", "promo"],
    "tips": ["tip", "gratuity"],
    "transactions": ["transactions", "orders", "receipts", "count"],
}

# Share of rows that must look numeric for the transactions fallback
TRANSACTIONS_FALLBACK_DENSITY = 1 / 3

_NUMBERISH = re.compile(r"[-\d.,$£€¥()%]")
_NUMBER_STRIP = re.compile(r"[$£€¥,\s()%\u00a0]")
_LEADING_NUMBER = re.compile(r"[+-]?(?:\d+\.?\d*|\.\d+)(?:[eE][+-]?\d+)?")
_DATE_SHAPE = re.compile(
    r"\d{1,4}-\d{1,2}"                # 2024-01-15, 01-15-2024 (slashes already folded)
    r"|\d{1,2}\.\d{1,2}\.\d{2,4}"     # 15.01.2024
    r"|[A-Za-z]{3,}\.?\s+\d{1,2}"     # Jan 15, 2024
    r"|\d{1,2}\s+[A-Za-z]{3,}"        # 15 Jan 2024
)
_TIME_SPLIT = re.compile(r"[\sT]")


# %% [markdown]
# ## 2. Errors
#
# One family, so callers can catch a single type and fall back to an empty state.


# %%
class SnapshotError(ValueError):
    """Base class for exports the engine cannot summarise."""


class EmptyInputError(SnapshotError):
    pass


class NoDateColumnError(SnapshotError):
    pass


class MissingMetricColumnsError(SnapshotError):
    def __init__(self, missing: list[str]):
        self.missing = list(missing)
        super().__init__(f"Missing expected numeric columns: {', '.join(self.missing)}")


class NoUsableDatedRowsError(SnapshotError):
    pass


# %% [markdown]
# ## 3. Data structures


# %%
@dataclass(frozen=True)
class ColumnSelection:
    """Resolved column for each role in one export. metrics is a read-only mapping."""
    date_column: Optional[str]
    metrics: dict = field(default_factory=dict)

    def __post_init__(self):
        object.__setattr__(self, "metrics", MappingProxyType(dict(self.metrics)))

    def missing_required(self) -> list[str]:
        return [m for m in REQUIRED_METRICS if not self.metrics.get(m)]


@dataclass(frozen=True)
class DailyAggregate:
    date_iso: str
    gross: float = 0.0
    net: float = 0.0
    discounts: float = 0.0
    tips: float = 0.0
    transactions: float = 0.0


@dataclass(frozen=True)
class Summary:
    """
    Normalized view of a daily sequence.

    Attributes:
        operating_days: Number of days with at least one resolved row
        calendar_days: Inclusive span first_date..last_date
        first_date / last_date: ISO dates bounding the export
        totals: Metric -> sum over days
        per_operating_day: Metric -> total / operating_days
        per_calendar_day: Metric -> total / calendar_days
        ratios: discount_rate, net_per_transaction, tips_per_transaction
        signals: Ordered signal sentences
        signal_levels: Classification behind each signal

    Mapping fields are stored as read-only views.
    """
    operating_days: int
    calendar_days: int
    first_date: str
    last_date: str
    totals: dict
    per_operating_day: dict
    per_calendar_day: dict
    ratios: dict
    signals: tuple
    signal_levels: dict

    def __post_init__(self):
        for name in ("totals", "per_operating_day", "per_calendar_day", "ratios", "signal_levels"):
            object.__setattr__(self, name, MappingProxyType(dict(getattr(self, name))))
        object.__setattr__(self, "signals", tuple(self.signals))


# %% [markdown]
# ## 4. Cell Normalizer
#
# Total functions: bad cells become 0 / None, never exceptions.


# %%
def parse_number(cell) -> float:
    """Parse a money/count cell. Returns 0.0 for empty or unparseable input."""
    if cell is None:
        return 0.0
    if isinstance(cell, (int, float, np.number)):
        return float(cell) if np.isfinite(cell) else 0.0

    value = _NUMBER_STRIP.sub("", str(cell))
    if not value:
        return 0.0

    match = _LEADING_NUMBER.match(value)
    if not match:
        return 0.0
    parsed = float(match.group(0))
    return parsed if np.isfinite(parsed) else 0.0


def _to_iso_date(value: str) -> Optional[str]:
    if not _DATE_SHAPE.search(value):
        return None
    try:
        ts = pd.Timestamp(value)
    except (ValueError, OverflowError, TypeError):
        return None
    if pd.isna(ts):
        return None
    if ts.tzinfo is not None:
        ts = ts.tz_convert("UTC")
    return ts.strftime("%Y-%m-%d")


def parse_date(cell) -> Optional[str]:
    """
    Resolve a date cell to an ISO calendar date (YYYY-MM-DD).

    Slashes are folded to dashes first. When the full value does not parse,
    the part before the first space or 'T' is tried, so trailing
    time-of-day text does not lose the row.

    Returns:
        ISO date string, or None when the cell is not a date.
    """
    if cell is None:
        return None
    value = str(cell).strip()
    if not value:
        return None

    value = value.replace("/", "-")
    iso = _to_iso_date(value)
    if iso is not None:
        return iso

    head = _TIME_SPLIT.split(value)[0]
    if head and head != value:
        return _to_iso_date(head)
    return None


def looks_numeric(cell) -> bool:
    """True when the cell contains any digit, sign, separator, currency, bracket or %."""
    if cell is None:
        return False
    return bool(_NUMBERISH.search(str(cell)))


# %% [markdown]
# ## 5. Column Detector


# %%
def _column_names(records: list[dict]) -> list[str]:
    return list(records[0].keys()) if records else []


def _numeric_density(records: list[dict], column: str) -> int:
    return sum(1 for row in records if looks_numeric(row.get(column, "")))


def detect_date_column(records: list[dict], column_names: list[str]) -> Optional[str]:
    """Column with the most parseable dates; earliest column wins ties."""
    best = None
    best_hits = 0
    for column in column_names:
        hits = sum(1 for row in records if parse_date(row.get(column)) is not None)
        if hits > best_hits:
            best = column
            best_hits = hits
    return best


def _hint_score(column: str, metric: str) -> int:
    column_lc = column.lower()
    return sum(1 for hint in METRIC_HINTS[metric] if hint in column_lc)


def _claim_metric_column(candidates: tuple,
                         metric: str,
                         densities: dict) -> tuple[Optional[str], tuple]:
    """
    Pick the best remaining column for one metric.

    Score = 2 x hint matches in the column name + numeric-looking cell count.
    Columns without a single numeric-looking cell are not eligible. Once a
    column is in hand, a column whose name matches no hint is skipped, so a
    dense unrelated column never displaces a sparse hinted one.

    Returns:
        (chosen column or None, candidates left for the next metric)
    """
    best = None
    best_score = None
    for column in candidates:
        density = densities[column]
        if density == 0:
            continue
        hints = _hint_score(column, metric)
        if hints == 0 and best is not None:
            continue
        score = 2 * hints + density
        if best_score is None or score > best_score:
            best = column
            best_score = score

    if best is None:
        return None, candidates
    return best, tuple(c for c in candidates if c != best)


def detect_metric_columns(records: list[dict], column_names: list[str]) -> dict:
    """
    Map each metric to a column, first-claimed wins.

    Metrics are resolved in METRIC_KEYS order, so gross and net get first pick
    of shared high-scoring columns. If transactions is still open afterwards,
    the first remaining column that looks numeric in more than a third of rows
    is used regardless of its name.

    Returns:
        {metric: column} for the metrics that could be resolved
    """
    densities = {column: _numeric_density(records, column) for column in column_names}
    candidates = tuple(column_names)
    selections = {}

    for metric in METRIC_KEYS:
        chosen, candidates = _claim_metric_column(candidates, metric, densities)
        if chosen is not None:
            selections[metric] = chosen

    if "transactions" not in selections:
        threshold = len(records) * TRANSACTIONS_FALLBACK_DENSITY
        for column in candidates:
            if densities[column] > threshold:
                selections["transactions"] = column
                break

    return selections


def detect_columns(records: list[dict], column_names: Optional[list[str]] = None) -> ColumnSelection:
    """Detect the date column, then the metric columns among the rest."""
    if column_names is None:
        column_names = _column_names(records)
    date_column = detect_date_column(records, column_names)
    metric_candidates = [c for c in column_names if c != date_column]
    return ColumnSelection(
        date_column=date_column,
        metrics=detect_metric_columns(records, metric_candidates),
    )


# %% [markdown]
# ## 6. Daily Aggregator


# %%
def aggregate(records: list[dict], selection: Optional[ColumnSelection] = None) -> list[DailyAggregate]:
    """
    Bucket rows by resolved date and sum each metric per day.

    Rows whose date cell does not resolve (footers, subtotals, notes) are
    dropped without error. Metrics with no detected column contribute zero.

    Args:
        records: Raw rows, column name -> cell text
        selection: Column roles; detected from the records when omitted

    Returns:
        DailyAggregate list sorted ascending by date

    Raises:
        EmptyInputError, NoDateColumnError, MissingMetricColumnsError,
        NoUsableDatedRowsError
    """
    if not records:
        raise EmptyInputError("No rows detected in the sales export.")

    if selection is None:
        selection = detect_columns(records)

    if not selection.date_column:
        raise NoDateColumnError(
            "Could not find a date column. Please ensure the export includes a date column."
        )

    missing = selection.missing_required()
    if missing:
        raise MissingMetricColumnsError(missing)

    buckets = {}
    for row in records:
        date_iso = parse_date(row.get(selection.date_column))
        if date_iso is None:
            continue

        entry = buckets.setdefault(date_iso, {metric: 0.0 for metric in METRIC_KEYS})
        for metric in METRIC_KEYS:
            column = selection.metrics.get(metric)
            if not column:
                continue
            entry[metric] += parse_number(row.get(column))

    if not buckets:
        raise NoUsableDatedRowsError("No usable dated rows found after parsing.")

    return [DailyAggregate(date_iso=d, **buckets[d]) for d in sorted(buckets)]


def daily_to_frame(daily: list[DailyAggregate]) -> pd.DataFrame:
    """Daily aggregates as a DataFrame (date + one column per metric)."""
    df = pd.DataFrame([asdict(day) for day in daily], columns=["date_iso", *METRIC_KEYS])
    return df.rename(columns={"date_iso": "date"})


# %% [markdown]
# ## 7. Summary Builder


# %%
def _safe_ratio(numerator: float, denominator: float) -> float:
    return numerator / denominator if denominator else 0.0


def build_summary(daily: list[DailyAggregate]) -> Summary:
    """
    Totals, operating/calendar day normalization, ratios and signals.

    Expects the ascending sequence produced by aggregate().
    """
    if not daily:
        raise NoUsableDatedRowsError("No usable dated rows found after parsing.")

    totals = {metric: 0.0 for metric in METRIC_KEYS}
    for day in daily:
        for metric in METRIC_KEYS:
            totals[metric] += getattr(day, metric)

    first_date = daily[0].date_iso
    last_date = daily[-1].date_iso
    operating_days = len(daily)
    calendar_days = (date.fromisoformat(last_date) - date.fromisoformat(first_date)).days + 1

    per_operating_day = {m: totals[m] / operating_days for m in METRIC_KEYS}
    per_calendar_day = {m: totals[m] / calendar_days for m in METRIC_KEYS}

    ratios = {
        "discount_rate": _safe_ratio(totals["discounts"], totals["gross"]),
        "net_per_transaction": _safe_ratio(totals["net"], totals["transactions"]),
        "tips_per_transaction": _safe_ratio(totals["tips"], totals["transactions"]),
    }

    signal_levels = signals_module.build_signal_levels(
        operating_days, calendar_days, per_operating_day, ratios
    )
    signals = signals_module.build_signals(
        operating_days, calendar_days, per_operating_day, ratios
    )

    return Summary(
        operating_days=operating_days,
        calendar_days=calendar_days,
        first_date=first_date,
        last_date=last_date,
        totals=totals,
        per_operating_day=per_operating_day,
        per_calendar_day=per_calendar_day,
        ratios=ratios,
        signals=tuple(signals),
        signal_levels=signal_levels,
    )


# %% [markdown]
# ## 8. Data Quality Report
#
# What the pipeline absorbed silently, reported after the fact.


# %%
def build_data_quality_report(records: list[dict],
                              selection: ColumnSelection,
                              daily: list[DailyAggregate]) -> tuple[dict, list]:
    """
    Analyse coverage and cleaning losses for one run.

    Returns:
        diagnostics_dict: a structured dict of metrics
        notes: a list of human-readable bullet-point strings
    """
    diagnostics = {}
    notes = []

    row_count = len(records)
    dated_row_count = sum(
        1 for row in records if parse_date(row.get(selection.date_column)) is not None
    ) if selection.date_column else 0

    diagnostics["row_count"] = row_count
    diagnostics["dated_row_count"] = dated_row_count
    diagnostics["dropped_row_count"] = row_count - dated_row_count
    diagnostics["date_column"] = selection.date_column
    diagnostics["metric_columns"] = dict(selection.metrics)
    diagnostics["missing_optional_metrics"] = [
        m for m in METRIC_KEYS if m not in REQUIRED_METRICS and not selection.metrics.get(m)
    ]

    # Non-blank cells with no digit at all parse to zero
    unparseable = {}
    for metric, column in selection.metrics.items():
        unparseable[metric] = sum(
            1 for row in records
            if str(row.get(column) or "").strip() and not re.search(r"\d", str(row.get(column)))
        )
    diagnostics["unparseable_metric_cells"] = unparseable

    if daily:
        daily_df = daily_to_frame(daily)
        operating_days = len(daily)
        calendar_days = (date.fromisoformat(daily[-1].date_iso) - date.fromisoformat(daily[0].date_iso)).days + 1
        diagnostics["date_min"] = daily[0].date_iso
        diagnostics["date_max"] = daily[-1].date_iso
        diagnostics["operating_days"] = operating_days
        diagnostics["calendar_days"] = calendar_days
        diagnostics["has_gaps_in_days"] = bool(calendar_days > operating_days)
        diagnostics["negative_day_values"] = {
            m: int((daily_df[m] < 0).sum()) for m in METRIC_KEYS
        }
    else:
        diagnostics["date_min"] = None
        diagnostics["date_max"] = None
        diagnostics["operating_days"] = 0
        diagnostics["calendar_days"] = 0
        diagnostics["has_gaps_in_days"] = False
        diagnostics["negative_day_values"] = {m: 0 for m in METRIC_KEYS}

    # Notes (human readable)
    notes.append(
        f"Rows: {row_count}; {dated_row_count} resolved to a date across "
        f"{diagnostics['operating_days']} distinct days."
    )

    if diagnostics["dropped_row_count"] > 0:
        pct_dropped = diagnostics["dropped_row_count"] / row_count * 100 if row_count else 0
        notes.append(
            f"{diagnostics['dropped_row_count']} rows ({pct_dropped:.1f}%) had no usable date "
            f"(footers, subtotals or malformed dates) and were excluded."
        )

    if diagnostics["missing_optional_metrics"]:
        notes.append(
            "No column detected for: " + ", ".join(diagnostics["missing_optional_metrics"])
            + ". These metrics are reported as zero."
        )

    for metric, count in unparseable.items():
        if count > 0:
            notes.append(f"{count} non-numeric {metric} cells were counted as zero.")

    if diagnostics["has_gaps_in_days"]:
        notes.append(
            f"Sales data has gaps: {diagnostics['operating_days']} operating days across "
            f"{diagnostics['calendar_days']} calendar days."
        )

    negatives = {m: n for m, n in diagnostics["negative_day_values"].items() if n}
    if negatives:
        notes.append(
            "Days with negative totals: "
            + ", ".join(f"{m} ({n})" for m, n in negatives.items())
            + "; check refunds and voids in the export."
        )

    if (diagnostics["dropped_row_count"] == 0 and not diagnostics["missing_optional_metrics"]
            and not any(unparseable.values()) and not negatives):
        notes.append("Every row resolved cleanly; the export appears complete and consistent.")

    return diagnostics, notes


# %% [markdown]
# ## 9. Loading (client exports)
#
# Turns a CSV/Excel file into raw text records. Every cell stays a string.


# %%
def _read_any_table(path: str) -> pd.DataFrame:
    """Read CSV/Excel as text with robust encoding handling and error reporting."""
    try:
        if str(path).lower().endswith((".xlsx", ".xls")):
            return pd.read_excel(path, dtype=str)
        try:
            # UTF-8 with BOM first (Excel / vendor downloads)
            return pd.read_csv(path, dtype=str, keep_default_na=False, encoding="utf-8-sig")
        except UnicodeDecodeError:
            return pd.read_csv(path, dtype=str, keep_default_na=False, encoding="latin-1")
    except Exception as e:
        raise ValueError(f"Failed to read {path}: {str(e)}")


def records_from_frame(df: pd.DataFrame) -> list[dict]:
    """DataFrame -> list of {column: text}; fully blank rows are skipped."""
    text_df = df.fillna("").astype(str)
    text_df.columns = [str(c) for c in text_df.columns]
    records = []
    for row in text_df.to_dict(orient="records"):
        if any(value.strip() for value in row.values()):
            records.append(row)
    return records


def load_sales_records(path: str) -> list[dict]:
    return records_from_frame(_read_any_table(path))


def load_client_sales_records(config: dict) -> list[dict]:
    path = config.get("client_sales_path")
    if not path:
        raise ValueError("Set CONFIG['client_sales_path'].")
    return load_sales_records(path)


# %% [markdown]
# ## 10. Formatting + Export Block


# %%
def _fmt_currency(value, currency_symbol="$"):
    try:
        value = float(value)
    except (TypeError, ValueError):
        return str(value)
    if value < 0:
        return f"-{currency_symbol}{abs(value):,.0f}"
    return f"{currency_symbol}{value:,.0f}"


def _fmt_decimal(value):
    try:
        return f"{float(value):,.2f}".rstrip("0").rstrip(".")
    except (TypeError, ValueError):
        return str(value)


def _fmt_percent(value):
    try:
        return f"{float(value) * 100:.1f}%"
    except (TypeError, ValueError):
        return str(value)


def _fmt_metric(metric: str, value, currency: str) -> str:
    if metric == "transactions":
        return _fmt_decimal(value)
    return _fmt_currency(value, currency)


def to_markdown_table(df: pd.DataFrame, cols: list, index: bool = False) -> str:
    if df.empty:
        return pd.DataFrame(columns=cols).to_markdown(index=index)
    return df[cols].to_markdown(index=index)


def format_per_day_table(summary: Summary, config: dict) -> str:
    """Per operating day vs per calendar day, one row per metric."""
    currency = config.get("currency", "$")
    table = pd.DataFrame({
        "metric": list(METRIC_KEYS),
        "total": [_fmt_metric(m, summary.totals[m], currency) for m in METRIC_KEYS],
        "per_operating_day": [_fmt_metric(m, summary.per_operating_day[m], currency) for m in METRIC_KEYS],
        "per_calendar_day": [_fmt_metric(m, summary.per_calendar_day[m], currency) for m in METRIC_KEYS],
    })
    return to_markdown_table(table, ["metric", "total", "per_operating_day", "per_calendar_day"])


def format_daily_table(daily_df: pd.DataFrame, config: dict) -> str:
    """Format the daily view as markdown table."""
    if daily_df.empty:
        return "No daily data available."

    currency = config.get("currency", "$")
    view = daily_df.copy()
    for metric in METRIC_KEYS:
        view[metric] = view[metric].apply(lambda v, m=metric: _fmt_metric(m, v, currency))
    return to_markdown_table(view, ["date", *METRIC_KEYS])


def format_column_mapping(selection: ColumnSelection) -> str:
    lines = [f"- date: {selection.date_column or '(not detected)'}"]
    for metric in METRIC_KEYS:
        lines.append(f"- {metric}: {selection.metrics.get(metric) or '(not detected, counted as 0)'}")
    return "\n".join(lines)


def build_snapshot_export_block(results: dict, config: dict = CONFIG) -> str:
    """
    Build the plain-text / markdown report for one snapshot run.

    Sections: header, normalization, totals, ratios, per-day performance,
    signals, column mapping, data quality, daily view.
    """
    summary = results["summary"]
    currency = config.get("currency", "$")
    lines = []

    lines.append(f"# Sales Snapshot – {config.get('business_name', 'Business')}")
    lines.append(f"Period: {config.get('period_label', 'n/a')} | Engine: {config.get('engine_version', 'n/a')}")
    lines.append("")

    lines.append("## Normalization")
    lines.append(f"- Operating days: {summary.operating_days}")
    lines.append(f"- Calendar days: {summary.calendar_days}")
    lines.append(f"- Range: {summary.first_date} → {summary.last_date}")
    lines.append("")

    lines.append("## Totals")
    lines.append(f"- Gross: {_fmt_currency(summary.totals['gross'], currency)}")
    lines.append(f"- Net: {_fmt_currency(summary.totals['net'], currency)}")
    lines.append(f"- Transactions: {_fmt_decimal(summary.totals['transactions'])}")
    lines.append("")

    lines.append("## Ratios")
    lines.append(f"- Discount rate: {_fmt_percent(summary.ratios['discount_rate'])}")
    lines.append(f"- Net / transaction: {_fmt_currency(summary.ratios['net_per_transaction'], currency)}")
    lines.append(f"- Tips / transaction: {_fmt_currency(summary.ratios['tips_per_transaction'], currency)}")
    lines.append("")

    lines.append("## Per-day performance")
    lines.append(format_per_day_table(summary, config))
    lines.append("")

    lines.append("## Signals")
    for signal in summary.signals:
        lines.append(f"- {signal}")
    lines.append("")

    lines.append("## Column mapping")
    lines.append(format_column_mapping(results["selection"]))
    lines.append("")

    notes = results.get("data_quality_notes") or []
    if notes:
        lines.append("## Data quality")
        for note in notes:
            lines.append(f"- {note}")
        lines.append("")

    lines.append("## Daily view")
    lines.append(format_daily_table(results["daily_df"], config))

    return "\n".join(lines)


# %% [markdown]
# ## 11. Charts + File Outputs


# %%
def save_all_charts(results: dict, output_dir: str, config: dict = CONFIG) -> None:
    """
    Save snapshot charts as PNG files in the output directory.

    Args:
        results: Dictionary returned by run_sales_snapshot().
        output_dir: Directory where PNG files will be saved.
        config: Configuration dictionary (defaults to module CONFIG).
    """
    os.makedirs(output_dir, exist_ok=True)
    currency = config.get("currency", "$")
    daily_df = results["daily_df"]
    summary = results["summary"]

    # Chart 1: Daily gross vs net
    if not daily_df.empty:
        fig, ax = plt.subplots(figsize=(12, 5))
        x = np.arange(len(daily_df))
        ax.bar(x, daily_df["gross"], color="#2E86AB", alpha=0.8, label="Gross")
        ax.plot(x, daily_df["net"], color="darkred", marker="o", linewidth=1.5, markersize=3, label="Net")

        step = max(1, len(daily_df) // 15)
        ax.set_xticks(x[::step])
        ax.set_xticklabels(daily_df["date"].iloc[::step], rotation=45, ha="right", fontsize=9)
        ax.set_ylabel(f"Sales ({currency})", fontsize=11, fontweight="bold")
        ax.set_title("Daily Sales: Gross & Net", fontsize=13, fontweight="bold", pad=15)
        ax.legend()
        ax.grid(axis="y", alpha=0.3, linestyle="--")
        plt.tight_layout()
        plt.savefig(os.path.join(output_dir, "daily_sales.png"), bbox_inches="tight", dpi=150)
        plt.close()

    # Chart 2: Per operating day vs per calendar day (money metrics)
    money_metrics = [m for m in METRIC_KEYS if m != "transactions"]
    fig, ax = plt.subplots(figsize=(9, 5))
    x = np.arange(len(money_metrics))
    width = 0.38
    ax.bar(x - width / 2, [summary.per_operating_day[m] for m in money_metrics],
           width, color="#6A994E", edgecolor="black", label="Per operating day")
    ax.bar(x + width / 2, [summary.per_calendar_day[m] for m in money_metrics],
           width, color="#F18F01", edgecolor="black", label="Per calendar day")
    ax.set_xticks(x)
    ax.set_xticklabels([m.title() for m in money_metrics])
    ax.set_ylabel(f"{currency} per day", fontsize=11, fontweight="bold")
    ax.set_title(
        f"Normalization: {summary.operating_days} operating vs {summary.calendar_days} calendar days",
        fontsize=13, fontweight="bold", pad=15,
    )
    ax.legend()
    ax.grid(axis="y", alpha=0.3, linestyle="--")
    plt.tight_layout()
    plt.savefig(os.path.join(output_dir, "per_day_normalization.png"), bbox_inches="tight", dpi=150)
    plt.close()


def summary_to_dict(summary: Summary) -> dict:
    """Plain JSON-ready copy of a Summary (mappings to dicts, signals to a list)."""
    plain = {}
    for f in fields(summary):
        value = getattr(summary, f.name)
        if isinstance(value, MappingProxyType):
            value = dict(value)
        elif isinstance(value, tuple):
            value = list(value)
        plain[f.name] = value
    return plain


def summary_to_frame(summary: Summary) -> pd.DataFrame:
    """One row per metric: total, per operating day, per calendar day."""
    return pd.DataFrame({
        "metric": list(METRIC_KEYS),
        "total": [summary.totals[m] for m in METRIC_KEYS],
        "per_operating_day": [summary.per_operating_day[m] for m in METRIC_KEYS],
        "per_calendar_day": [summary.per_calendar_day[m] for m in METRIC_KEYS],
    })


def export_results_to_excel(results: dict, path: str) -> None:
    """
    Write the daily view, summary, signals and data quality into one workbook.

    Args:
        results: Dictionary returned by run_sales_snapshot().
        path: File path where the Excel workbook will be saved.
    """
    summary = results["summary"]
    with pd.ExcelWriter(path) as writer:
        results["daily_df"].to_excel(writer, sheet_name="Daily", index=False)
        summary_to_frame(summary).to_excel(writer, sheet_name="Summary", index=False)
        pd.DataFrame({"signal": list(summary.signals)}).to_excel(writer, sheet_name="Signals", index=False)

        dq = results.get("data_quality_diagnostics")
        if dq:
            dq_df = pd.DataFrame(
                [(k, json.dumps(v) if isinstance(v, (dict, list)) else v) for k, v in dq.items()],
                columns=["metric", "value"],
            )
            dq_df.to_excel(writer, sheet_name="Data_Quality", index=False)

        dq_notes = results.get("data_quality_notes")
        if dq_notes:
            pd.DataFrame({"note": list(dq_notes)}).to_excel(writer, sheet_name="Data_Quality_Notes", index=False)


def write_outputs(results: dict, output_dir: str, config: dict = CONFIG) -> list[str]:
    """
    Write every snapshot output to output_dir.

    Files produced:
      - daily_sales.csv
      - summary_metrics.json
      - data_quality_diagnostics.json
      - data_quality_notes.txt
      - snapshot_export_block.txt
      - daily_sales.png, per_day_normalization.png
      - report_data.xlsx

    Returns:
        Sorted list of file names in output_dir after writing.
    """
    os.makedirs(output_dir, exist_ok=True)

    results["daily_df"].to_csv(os.path.join(output_dir, "daily_sales.csv"), index=False)

    with open(os.path.join(output_dir, "summary_metrics.json"), "w", encoding="utf-8") as f:
        json.dump(results["summary_metrics"], f, indent=2, default=str)

    with open(os.path.join(output_dir, "data_quality_diagnostics.json"), "w", encoding="utf-8") as f:
        json.dump(results["data_quality_diagnostics"], f, indent=2, default=str)

    with open(os.path.join(output_dir, "data_quality_notes.txt"), "w", encoding="utf-8") as f:
        for line in results["data_quality_notes"]:
            f.write(line.rstrip() + "\n")

    with open(os.path.join(output_dir, "snapshot_export_block.txt"), "w", encoding="utf-8") as f:
        f.write(results["export_block"])

    save_all_charts(results, output_dir, config)
    export_results_to_excel(results, os.path.join(output_dir, "report_data.xlsx"))

    return sorted(os.listdir(output_dir))


# %% [markdown]
# ## 12. Full Run


# %%
def run_sales_snapshot(records: list[dict], config: dict = CONFIG) -> dict:
    """
    Run the full snapshot on raw records and return all data objects.

    Does not print or write anything.

    Returns:
        A dictionary with keys: selection, daily, daily_df, summary,
        summary_metrics, data_quality_diagnostics, data_quality_notes,
        export_block, config

    Raises:
        SnapshotError subclasses when the export cannot be summarised.
    """
    selection = detect_columns(records)
    daily = aggregate(records, selection)
    summary = build_summary(daily)
    daily_df = daily_to_frame(daily)

    data_quality_diagnostics, data_quality_notes = build_data_quality_report(records, selection, daily)

    summary_metrics = summary_to_dict(summary)

    results = {
        "selection": selection,
        "daily": daily,
        "daily_df": daily_df,
        "summary": summary,
        "summary_metrics": summary_metrics,
        "data_quality_diagnostics": data_quality_diagnostics,
        "data_quality_notes": data_quality_notes,
        "config": config,
    }
    results["export_block"] = build_snapshot_export_block(results, config)
    return results


def run_full_snapshot(config: dict = CONFIG, data_source: str = "synthetic") -> dict:
    """
    Load (client) or generate (synthetic) an export and run the snapshot.

    Args:
        config: Configuration dictionary (defaults to module `CONFIG`).
        data_source: Either "synthetic" or "client".

    Returns:
        run_sales_snapshot() results; synthetic runs also carry
        "ground_truth" and "export_df".
    """
    if data_source == "synthetic":
        generator = generate_test_data.SalesExportGenerator(seed=config.get("random_seed", 42))
        export_df, truth = generator.generate_sales_export(
            start_date=config["start_date"],
            end_date=config["end_date"],
            vendor=config.get("synthetic_vendor", "square"),
            quality=config.get("synthetic_quality", "typical"),
            closed_weekdays=tuple(config.get("closed_weekdays", (0,))),
        )
        results = run_sales_snapshot(records_from_frame(export_df), config)
        results["ground_truth"] = truth
        results["export_df"] = export_df
        return results

    if data_source == "client":
        return run_sales_snapshot(load_client_sales_records(config), config)

    raise ValueError(f"Unknown data_source: {data_source!r} (expected 'synthetic' or 'client')")


if __name__ == "__main__":
    """Run a headless one-shot snapshot on the client export and write outputs to `output/`."""
    import sys

    try:
        results = run_full_snapshot(data_source="client")
    except SnapshotError as e:
        print(f"❌ {e}")
        print("No snapshot produced.")
        sys.exit(1)

    files = write_outputs(results, CONFIG["output_dir"], CONFIG)
    print(f"Wrote snapshot outputs to '{CONFIG['output_dir']}/'")
    for name in files:
        print(f"  - {name}")
