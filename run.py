#!/usr/bin/env python3
"""
staytrack - Schengen stay tracker

Usage:
    python3 run.py --emails DIR             # Build stays from saved emails
    python3 run.py --stays stays.json       # Check a stay file
    python3 run.py --help                   # Show all options
"""

import logging
import sys
from datetime import date
from pathlib import Path

from staytrack import __version__
from staytrack.airports import city_to_airport_code, get_airport
from staytrack.compliance import ComplianceCalculator
from staytrack.config import load_config, load_stays, save_stays
from staytrack.email_handler import iter_email_files, read_email_file
from staytrack.errors import ConfigError, InvalidRange
from staytrack.models import StayPeriod, TravelPurpose
from staytrack.parser import EmailParser, to_flight_record
from staytrack.periods import build_periods, merge_periods
from staytrack.report import generate_pdf_report, generate_text_report

SCRIPT_DIR = Path(__file__).parent

HELP = f"""
staytrack v{__version__} - Schengen 90/180 stay tracker

Usage:
    python3 run.py --emails DIR [options]     Build stays from saved .eml files
    python3 run.py --stays FILE [options]     Check stays from a JSON file

Options:
    --mode single|trip         How flights become stays (default: from config)
    --home CODE                Home country for trip mode
    --date YYYY-MM-DD          Reference date (default: today)
    --plan ENTRY EXIT COUNTRY  Check a planned trip
    --pdf PATH                 Write a PDF report
    --text PATH                Write a plain text report
    --save-stays PATH          Save the stays as JSON
    --config FILE              Config file (default: config.json)
    --debug                    Verbose logging
    --help                     Show this help
"""


def _arg_value(args, flag, count=1):
    """Return the value(s) following a flag, or None if the flag is absent."""
    if flag not in args:
        return None
    i = args.index(flag)
    values = args[i + 1:i + 1 + count]
    if len(values) < count or any(v.startswith('--') for v in values):
        raise ValueError(f"{flag} needs {count} value(s)")
    return values[0] if count == 1 else values


def _parse_day(text, label):
    try:
        return date.fromisoformat(text)
    except ValueError:
        raise ValueError(f"{label} must be YYYY-MM-DD, got '{text}'") from None


def _hotel_stay(record):
    """Turn a hotel booking into a stay when its location names a known city.

    Returns None for bookings without usable dates; those emails are
    skipped, not fatal.
    """
    hotel = record.hotel
    if hotel is None or hotel.check_out < hotel.check_in:
        return None
    for part in reversed(hotel.location.split(',')):
        airport = get_airport(city_to_airport_code(part))
        if airport:
            return StayPeriod.between(
                airport.country_code,
                hotel.check_in,
                hotel.check_out,
                purpose=TravelPurpose.TOURISM,
                notes=f"Hotel {hotel.name or hotel.location}",
                confidence=0.8,
            )
    return None


def stays_from_emails(directory, config, mode, home_country):
    """Parse saved emails and build merged stays."""
    parser = EmailParser(confidence_threshold=config['confidence_threshold'])
    files = list(iter_email_files(directory))
    print(f"\n=== Reading {len(files)} email(s) from {directory} ===")

    messages = [read_email_file(path) for path in files]
    results = parser.parse_emails(messages)

    flights = []
    hotel_stays = []
    skipped = 0
    for path, result in zip(files, results):
        if not result.accepted:
            skipped += 1
            for warning in result.warnings:
                print(f"  {path.name}: {warning}")
            continue
        if result.record.kind == "flight":
            flight = to_flight_record(result.record, result.provider, result.confidence)
            if flight:
                flights.append(flight)
                print(f"  {path.name}: {flight.flight_number or '?'} "
                      f"{flight.departure_airport.code} -> {flight.arrival_airport.code} "
                      f"on {flight.departure_time.date()}")
            else:
                print(f"  {path.name}: flight found but route or date incomplete")
        else:
            stay = _hotel_stay(result.record)
            if stay:
                hotel_stays.append(stay)
                print(f"  {path.name}: hotel in {stay.country_name} "
                      f"{stay.entry_date} - {stay.exit_date}")
            else:
                print(f"  {path.name}: hotel booking without a usable city or dates")

    print(f"\n  {len(flights)} flight(s), {len(hotel_stays)} hotel stay(s), {skipped} email(s) skipped")
    periods = build_periods(flights, mode=mode, home_country=home_country)
    return merge_periods(periods + hotel_stays)


def display_status(calculator, stays, result):
    print(f"\n=== Stays ({len(stays)}) ===")
    for stay in sorted(stays, key=lambda s: s.entry_date):
        exit_text = stay.exit_date.isoformat() if stay.exit_date else "ongoing"
        marker = "*" if calculator.is_schengen(stay.country_code) else " "
        print(f"  {marker} {stay.entry_date} - {exit_text:<10}  {stay.country_name:<20} {stay.purpose.value}")

    print(f"\n=== Schengen status on {result.reference_date} ===")
    print(f"  Days used:       {result.used_days}")
    print(f"  Days remaining:  {result.remaining_days}")
    if result.next_reset_date:
        print(f"  Next reset:      {result.next_reset_date}")
    print(f"  Compliant:       {'yes' if result.is_compliant else 'NO'}")
    if result.violations:
        first, last = result.violations[0], result.violations[-1]
        print(f"  Over the limit on {len(result.violations)} day(s), {first.date} to {last.date}")
    for warning in calculator.generate_warnings(result):
        print(f"  ! {warning}")


def display_plan(validation, entry, exit_date, country):
    print(f"\n=== Planned trip {country.upper()} {entry} - {exit_date} ===")
    if validation.is_valid:
        print("  OK - the trip keeps you within the limit")
    else:
        print(f"  NOT ALLOWED - over the limit on {len(validation.violations)} day(s)")
        print(f"  First day over: {validation.violations[0].date}")
    print(f"  Schengen days used after the trip: {validation.schengen_days_after}")


def run(args):
    config_file = _arg_value(args, "--config")
    config = load_config(config_file)

    level = logging.DEBUG if "--debug" in args else getattr(logging, config['log_level'])
    logging.basicConfig(level=level, format="%(levelname)s %(name)s: %(message)s")

    mode = _arg_value(args, "--mode") or config['period_mode']
    home_country = _arg_value(args, "--home") or config.get('home_country')
    reference_date = _parse_day(_arg_value(args, "--date"), "--date") if "--date" in args else date.today()

    calculator = ComplianceCalculator(config['schengen_countries'])

    emails_dir = _arg_value(args, "--emails")
    stays_file = _arg_value(args, "--stays")
    if emails_dir:
        stays = stays_from_emails(emails_dir, config, mode, home_country)
    elif stays_file:
        stays = load_stays(stays_file)
    else:
        print(HELP)
        return 1

    result = calculator.evaluate(stays, reference_date)
    display_status(calculator, stays, result)

    plan = _arg_value(args, "--plan", count=3)
    if plan:
        entry = _parse_day(plan[0], "Plan entry")
        exit_date = _parse_day(plan[1], "Plan exit")
        validation = calculator.validate_trip(stays, entry, exit_date, plan[2])
        display_plan(validation, entry, exit_date, plan[2])

    save_path = _arg_value(args, "--save-stays")
    if save_path:
        save_stays(stays, save_path)
        print(f"\n  Stays saved to {save_path}")

    pdf_path = _arg_value(args, "--pdf")
    if pdf_path:
        generate_pdf_report(stays, result, pdf_path, schengen_countries=calculator.schengen_countries)
        print(f"\n  PDF report saved to {pdf_path}")

    text_path = _arg_value(args, "--text")
    if text_path:
        generate_text_report(stays, result, text_path, schengen_countries=calculator.schengen_countries)
        print(f"\n  Text report saved to {text_path}")

    print()
    return 0 if result.is_compliant else 2


def main():
    args = sys.argv[1:]

    if "--help" in args or "-h" in args or not args:
        print(HELP)
        return 0

    try:
        return run(args)
    except ConfigError as e:
        print(f"Configuration error: {e}")
        return 1
    except InvalidRange as e:
        print(f"Invalid trip: {e}")
        return 1
    except ValueError as e:
        print(f"Error: {e}")
        return 1


if __name__ == "__main__":
    sys.exit(main())
