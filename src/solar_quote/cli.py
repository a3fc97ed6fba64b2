from __future__ import annotations

import argparse
import json
import logging
import sys
from typing import List, Optional

from solar_quote.config import load_config
from solar_quote.engine import calculate_quote, coerce_bill_amount
from solar_quote.errors import InvalidInput, QuoteError
from solar_quote.result import CalculationResult
from solar_quote.sheet_export import export_quote_to_google_sheets


def prompt_bill_amount(currency: str) -> float:
    print("\nSolar Quote: let's size a system from your electricity bill.\n")
    while True:
        raw = input(f"Monthly electricity bill ({currency}): ")
        try:
            return coerce_bill_amount(raw, "bill")
        except InvalidInput as exc:
            print(f" - {exc}")


def format_quote(bill_amount: float, result: CalculationResult, currency: str) -> str:
    lines = [
        f"Quote for a monthly bill of {currency}{bill_amount:,.2f}",
        "-" * 40,
        f"Panels:                   {result.panel_count}",
        f"Array power:              {result.system_kwp} kWp",
        f"Inverter:                 {result.inverter_kw} kW",
        f"Battery bank:             {result.battery_kwh} kWh",
        f"Investment:               {currency}{result.investment:,.2f}",
        f"Monthly savings:          {currency}{result.monthly_savings:,.2f}",
        f"Daily savings:            {currency}{result.daily_savings:,.2f}",
        f"Annual extra income:      {currency}{result.annual_extra_income:,.2f}",
        f"Payback:                  {result.payback_years} years",
        f"Punitive block cost:      {currency}{result.punitive_block_savings:,.2f}",
        f"Property value uplift:    {currency}{result.property_value_uplift:,.2f}",
        "",
        result.breakdown_text,
    ]
    return "\n".join(lines)


def parse_args(argv: Optional[List[str]] = None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(description="Residential solar quote from a monthly electricity bill")
    parser.add_argument("bill", nargs="?", help="Monthly electricity bill amount. Prompted when omitted.")
    parser.add_argument(
        "--config",
        default=None,
        help="Path to a JSON configuration (tariff and market constants). Defaults to $SOLAR_QUOTE_CONFIG.",
    )
    parser.add_argument("--json", action="store_true", help="Print the API payload instead of the summary.")
    parser.add_argument(
        "--service-account-json",
        default=None,
        help="Google service account JSON; when given the quote is exported to a new Google Sheet.",
    )
    parser.add_argument(
        "--sheet-title",
        default="Cotizacion Solar",
        help="Title for the exported Google Sheet workbook.",
    )
    parser.add_argument("--verbose", action="store_true", help="Enable debug logging.")
    return parser.parse_args(argv)


def main(argv: Optional[List[str]] = None) -> int:
    args = parse_args(argv)
    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.WARNING,
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )

    try:
        config = load_config(args.config)
        if args.bill is not None:
            bill_amount = coerce_bill_amount(args.bill, "bill")
        else:
            bill_amount = prompt_bill_amount(config.currency_symbol)
        result = calculate_quote(bill_amount, config)
    except QuoteError as exc:
        print(f"error: {exc}", file=sys.stderr)
        return 1

    if args.json:
        print(json.dumps(result.to_payload(), ensure_ascii=False, indent=2))
    else:
        print(format_quote(bill_amount, result, config.currency_symbol))

    if args.service_account_json:
        sheet_url = export_quote_to_google_sheets(
            bill_amount=bill_amount,
            result=result,
            config=config,
            service_account_json_path=args.service_account_json,
            spreadsheet_title=args.sheet_title,
        )
        print(f"\nGoogle Sheet created: {sheet_url}")
    return 0


if __name__ == "__main__":
    sys.exit(main())
