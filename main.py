"""Main entry point for CloseBy Towing pricing and partner reports"""
import argparse
from pathlib import Path
from datetime import datetime

from src.config_store import ConfigStore
from src.data_loader import DataLoader
from src.job_storage import JobStorage
from src.models import Partner
from src.money import format_money
from src.price_catalog import PriceCatalog
from src.quote_calculator import QuoteCalculator, QuoteOptions, bill_miles
from src.report_generator import ReportGenerator
from config import DEFAULT_COMMISSION_RATE


def cmd_quote(args) -> int:
    catalog = PriceCatalog(ConfigStore(data_dir=args.data_dir))
    catalog.load()

    lookup = catalog.get_service_price(args.service)
    if lookup.error:
        print(f"⚠️ {lookup.error}")

    travel_rate, tow_rate = catalog.get_mileage_rates()
    calculator = QuoteCalculator(travel_rate=travel_rate, tow_rate=tow_rate)
    options = QuoteOptions(
        travel_miles=bill_miles(args.travel_miles),
        tow_miles_distance=bill_miles(args.tow_miles),
    )
    quote = calculator.quote_for_service(lookup, options, catalog.policy, catalog.get_time_multiplier())

    print(f"\n=== {args.service} ===")
    print(f"{catalog.get_discount_text()} Online Discount Applied")
    for line in quote.lines:
        if line.is_indicator:
            print(f"{line.label}")
            continue
        print(f"{line.label:<40} {format_money(line.discounted_amount):>10}"
              f"  (was {format_money(line.original_amount)})")
    print(f"{'Total':<40} {format_money(quote.total):>10}  (was {format_money(quote.original_total)})")
    print(f"You save {format_money(quote.savings)}")
    if quote.degraded:
        print("  → Estimate only, call to confirm pricing")
    return 0


def cmd_report(args) -> int:
    if args.partner_id:
        storage = JobStorage(data_dir=args.data_dir)
        stored = storage.get_partner_by_id(args.partner_id)
        if stored is None:
            print(f"❌ Partner not found: {args.partner_id}")
            return 1
        partner = stored.to_partner()
        jobs = [job.to_job() for job in storage.get_jobs_by_partner(partner.id)]
    else:
        if not args.input_file or not args.partner:
            print("❌ Provide --partner-id, or an input file with --partner")
            return 1
        rate = args.commission if args.commission is not None else DEFAULT_COMMISSION_RATE
        partner = Partner(id='partner', company_name=args.partner, commission_rate=rate)
        input_path = Path(args.input_file)
        if input_path.suffix.lower() == '.csv':
            jobs = DataLoader.load_from_csv(str(input_path), args.commission, partner.id)
        else:
            jobs = DataLoader.load_from_excel(str(input_path), args.commission, partner.id)
        print(f"Loaded {len(jobs)} jobs")

    generator = ReportGenerator(partner)
    generator.add_jobs(jobs)

    if args.output:
        output_path = args.output
    else:
        timestamp = datetime.now().strftime('%Y%m%d_%H%M%S')
        output_path = f"output/reports/{partner.company_name}_{timestamp}.xlsx"

    generator.export_excel(output_path)
    print(f"Report saved to: {output_path}")

    summary = generator.calculator.calculate_summary(partner, jobs)
    print(f"\n=== Summary ===")
    print(f"Referrals: {summary.total_referrals}")
    print(f"Completed: {summary.completed_referrals}")
    print(f"Earned (jobs): {format_money(summary.earned_from_jobs)}")
    print(f"This month: {format_money(summary.month_earnings)}")
    print(f"Commission owed: {format_money(summary.display_commission_owed)}")
    return 0


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(description='CloseBy Towing quotes and partner commission reports')
    parser.add_argument('--data-dir', default='data', help='Local data directory')
    sub = parser.add_subparsers(dest='command', required=True)

    quote = sub.add_parser('quote', help='Price a service with the online discount')
    quote.add_argument('service', help='Service name, e.g. "Local Towing"')
    quote.add_argument('--travel-miles', type=float, default=None, help='Miles from base to pickup')
    quote.add_argument('--tow-miles', type=float, default=None, help='Miles from pickup to drop-off')
    quote.set_defaults(func=cmd_quote)

    report = sub.add_parser('report', help='Generate a partner commission statement')
    report.add_argument('input_file', nargs='?', help='Excel/CSV file with referral jobs')
    report.add_argument('--partner', '-p', help='Partner company name (with input file)')
    report.add_argument('--partner-id', help='Stored partner ID (reads jobs from storage)')
    report.add_argument('--commission', '-c', type=float, default=None,
                        help=f'Commission rate in percent. Default: {DEFAULT_COMMISSION_RATE}')
    report.add_argument('--output', '-o', default=None, help='Output file path')
    report.set_defaults(func=cmd_report)
    return parser


def main(argv=None) -> int:
    args = build_parser().parse_args(argv)
    return args.func(args)


if __name__ == '__main__':
    raise SystemExit(main())
