import os
import sys

import sales_snapshot as engine


def configure_client_paths():
    """
    Configure client data paths.

    User must edit the placeholder path below to match their actual export:
    - client_sales_path: CSV/Excel sales summary (one date column plus gross,
      net and optionally discounts, tips, transactions; any vendor naming)
    """
    config = engine.CONFIG.copy()

    # Edit this path to point to your actual client export
    config["client_sales_path"] = "data/client_sales_summary.csv"
    config["output_dir"] = "output_client"

    print("Client configuration loaded.")
    print(f"  Sales path: {config['client_sales_path']}")
    print(f"  Output dir: {config['output_dir']}")
    print()

    return config


def print_data_quality(results: dict) -> None:
    dq = results["data_quality_diagnostics"]
    print("\n" + "=" * 60)
    print("DATA QUALITY")
    print("=" * 60)
    print(f"  • Date column: {dq['date_column']}")
    for metric, column in dq["metric_columns"].items():
        print(f"  • {metric}: {column}")
    if dq["dropped_row_count"] > 0:
        print(f"\n⚠️  WARNING: {dq['dropped_row_count']} rows had no usable date and were excluded")
    if dq["missing_optional_metrics"]:
        print(f"⚠️  WARNING: no column detected for {', '.join(dq['missing_optional_metrics'])} (counted as 0)")
    print("\n📊 NOTES:")
    for note in results["data_quality_notes"]:
        print(f"  • {note}")
    print("=" * 60 + "\n")


def main():
    """Run the sales snapshot on client data and save outputs."""
    config = configure_client_paths()

    path = config.get("client_sales_path")
    if not path or not os.path.exists(path):
        raise FileNotFoundError(
            f"Client sales export is missing: {path or '<missing client_sales_path>'}.\n"
            "Please provide the file at the configured path in run_client.py and retry."
        )

    try:
        results = engine.run_full_snapshot(config=config, data_source="client")
    except engine.SnapshotError as e:
        print(f"❌ CRITICAL: {e}")
        print("No snapshot produced for this export.")
        return None

    print_data_quality(results)

    summary = results["summary"]
    print("Client summary:")
    print(f"  Operating days: {summary.operating_days} / calendar days: {summary.calendar_days}")
    print(f"  Range: {summary.first_date} → {summary.last_date}")
    for signal in summary.signals:
        print(f"  • {signal}")
    print()

    files = engine.write_outputs(results, config["output_dir"], config)
    print(f"✅ Wrote client outputs to ./{config['output_dir']}")
    for name in files:
        print(f"  - {name}")

    return results


if __name__ == "__main__":
    if main() is None:
        sys.exit(1)
