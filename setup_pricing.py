"""
Create the pricing workbook for Google Sheets upload, and a local config.
Run this script to generate the template file and data/pricing_config.json
"""
import argparse

import pandas as pd
from pathlib import Path

from src.config_store import ConfigStore, default_features, default_service_rows, default_time_periods
from src.sheets_storage import SHEET_HEADERS


def build_template(output_path: Path) -> None:
    """Write one sheet per worksheet the app reads, seeded with default prices"""
    services_df = pd.DataFrame(default_service_rows(), columns=SHEET_HEADERS['services'])
    features_df = pd.DataFrame(
        [{'key': k, 'value': v} for k, v in default_features().items()],
        columns=SHEET_HEADERS['features'],
    )
    jobs_df = pd.DataFrame(columns=SHEET_HEADERS['jobs'])
    partners_df = pd.DataFrame(columns=SHEET_HEADERS['partners'])
    periods_df = pd.DataFrame(default_time_periods(), columns=SHEET_HEADERS['time_multipliers'])

    with pd.ExcelWriter(output_path, engine='openpyxl') as writer:
        services_df.to_excel(writer, sheet_name='services', index=False)
        features_df.to_excel(writer, sheet_name='features', index=False)
        periods_df.to_excel(writer, sheet_name='time_multipliers', index=False)
        jobs_df.to_excel(writer, sheet_name='jobs', index=False)
        partners_df.to_excel(writer, sheet_name='partners', index=False)


def main():
    parser = argparse.ArgumentParser(description='Seed the pricing configuration')
    parser.add_argument('--output', '-o', default=str(Path(__file__).parent / "CloseBy_Pricing_Data.xlsx"))
    parser.add_argument('--data-dir', default='data')
    parser.add_argument('--discount', type=float, default=None,
                        help='Online discount as a fraction, e.g. 0.15')
    parser.add_argument('--after-hours', action='store_true',
                        help='Enable after-hours pricing in the local config')
    args = parser.parse_args()

    output_path = Path(args.output)
    build_template(output_path)
    print(f"✅ Template file created: {output_path}")

    store = ConfigStore(data_dir=args.data_dir)
    features = default_features()
    store.write_local(default_service_rows(), features, default_time_periods())
    if args.discount is not None:
        store.set_discount_rate(args.discount)
    if args.after_hours:
        store.set_after_hours(True)
    print(f"✅ Local pricing config written: {store.config_file}")

    print("\nNext steps:")
    print("1. Go to Google Sheets (sheets.google.com)")
    print("2. Click 'Blank spreadsheet' to create new")
    print(f"3. File → Import → Upload → Select '{output_path.name}'")
    print("4. Choose 'Replace spreadsheet' and click 'Import data'")
    print("5. Share the sheet with your Service Account email (Editor access)")
    print("6. Set PRICING_SHEET_ID to the ID from the sheet URL")


if __name__ == "__main__":
    main()
