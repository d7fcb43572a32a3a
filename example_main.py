import os

import generate_test_data
import sales_snapshot as engine


def main():
    """Run the sales snapshot on a synthetic export and save outputs."""

    # Run snapshot
    results = engine.run_full_snapshot(
        config=engine.CONFIG,
        data_source="synthetic",  # Change to "client" later when you have client data
    )

    summary = results["summary"]

    # Print summary
    print("Summary metrics:")
    print(f"  Operating days: {summary.operating_days}")
    print(f"  Calendar days: {summary.calendar_days}")
    print(f"  Totals: {dict(summary.totals)}")
    print(f"  Ratios: {dict(summary.ratios)}")

    print("\nSignals:")
    for signal in summary.signals:
        print(f"  • {signal}")

    print("\nFirst 5 days:")
    print(results["daily_df"].head(5).to_string(index=False))

    mismatches = generate_test_data.validate_ground_truth(results, results["ground_truth"])
    if mismatches:
        print("\n⚠️  Ground truth mismatches:")
        for line in mismatches:
            print(f"  • {line}")
    else:
        print("\n✅ Snapshot matches the generator's ground truth")

    # Keep the generated input next to the outputs
    out_dir = engine.CONFIG["output_dir"]
    os.makedirs(out_dir, exist_ok=True)
    generate_test_data.write_export_csv(results["export_df"], os.path.join(out_dir, "synthetic_sales_export.csv"))

    files = engine.write_outputs(results, out_dir, engine.CONFIG)

    print(f"\nWrote outputs to ./{out_dir}")
    for name in files:
        print(f"  - {name}")


if __name__ == "__main__":
    main()
