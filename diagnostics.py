import os
import traceback

import sales_snapshot as engine

# Try to import run_client if available (may raise ImportError)
try:
    import run_client
    _HAS_RUN_CLIENT = True
except ImportError:
    run_client = None
    _HAS_RUN_CLIENT = False


def print_topline(results: dict, currency: str = "$") -> None:
    summary = results["summary"]

    print("\n-- Normalization --")
    print(f"Operating days: {summary.operating_days}")
    print(f"Calendar days: {summary.calendar_days}")
    print(f"Range: {summary.first_date} → {summary.last_date}")

    print("\n-- Totals --")
    for metric in engine.METRIC_KEYS:
        print(f"{metric}: {engine._fmt_metric(metric, summary.totals[metric], currency)}")

    print("\n-- Ratios --")
    print(f"Discount rate: {engine._fmt_percent(summary.ratios['discount_rate'])}")
    print(f"Net / transaction: {engine._fmt_currency(summary.ratios['net_per_transaction'], currency)}")
    print(f"Tips / transaction: {engine._fmt_currency(summary.ratios['tips_per_transaction'], currency)}")

    print("\n-- Signals --")
    for i, signal in enumerate(summary.signals, 1):
        print(f"{i}. {signal}")
    print(f"Levels: {dict(summary.signal_levels)}")

    print("\n-- Data Quality Notes (first 3) --")
    dq_notes = results.get("data_quality_notes") or []
    if dq_notes:
        for i, line in enumerate(dq_notes[:3], 1):
            print(f"{i}. {line}")
    else:
        print("None")


def run_synthetic_diagnostics():
    print("=== SYNTHETIC SNAPSHOT DIAGNOSTICS ===")
    currency = engine.CONFIG.get("currency", "$")
    results = None

    for quality in ("pristine", "typical", "corrupted"):
        config = engine.CONFIG.copy()
        config["synthetic_quality"] = quality
        print(f"\n##### quality = {quality} #####")
        try:
            results = engine.run_full_snapshot(config=config, data_source="synthetic")
        except engine.SnapshotError as e:
            print("ERROR: Synthetic run failed:", str(e))
            print(traceback.format_exc())
            continue

        print_topline(results, currency)

        mismatches = engine.generate_test_data.validate_ground_truth(results, results["ground_truth"])
        print("\n-- Ground Truth --")
        if mismatches:
            for line in mismatches:
                print(f"❌ {line}")
        else:
            print("✅ All detected columns, day counts and totals match")

    # Export block preview
    print("\n-- Export Block (preview) --")
    block = (results or {}).get("export_block") or ""
    if block:
        print("\n".join(block.splitlines()[:12]))
        if len(block.splitlines()) > 12:
            print("... [truncated]")
    else:
        print("(empty)")


def run_client_diagnostics():
    print("\n=== CLIENT MODE DIAGNOSTICS ===")
    if not _HAS_RUN_CLIENT:
        print("run_client.py not found or could not be imported; skipping client diagnostics.")
        return

    print("Attempting to run run_client.main() (client-mode). This may fail if the client export is missing.")
    try:
        results = run_client.main()
        if results is None:
            print("run_client.py could not summarise the export (see message above).")
            return
        print("run_client.py completed successfully.")
        out_dir = "output_client"
        if os.path.isdir(out_dir):
            print("Files in ./output_client:")
            for f in sorted(os.listdir(out_dir)):
                print(f" - {f}")
    except FileNotFoundError as e:
        print("run_client.py raised an exception (this is expected if the client export is missing):")
        print(str(e))


def main():
    print("=== SALES SNAPSHOT DIAGNOSTICS ===")
    try:
        run_synthetic_diagnostics()
    except Exception:
        print("Unexpected error during synthetic diagnostics:")
        print(traceback.format_exc())

    print("\n----------------------------------------\n")

    try:
        run_client_diagnostics()
    except Exception:
        print("Unexpected error during client diagnostics:")
        print(traceback.format_exc())

    print("\n=== DIAGNOSTICS COMPLETE ===")


if __name__ == "__main__":
    main()
