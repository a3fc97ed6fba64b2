from __future__ import annotations

import logging
import math
from typing import Any, Dict

from solar_quote.config import QuoteConfig
from solar_quote.errors import InvalidInput
from solar_quote.finance import project
from solar_quote.result import CalculationResult, assemble
from solar_quote.sizing import size_system
from solar_quote.tariff import estimate_consumption

logger = logging.getLogger(__name__)

BILL_KEY = "gastoMensual"


def coerce_bill_amount(raw: Any, name: str = BILL_KEY) -> float:
    """Turn a raw bill value (number or numeric string) into a positive, finite float."""
    if isinstance(raw, bool) or not isinstance(raw, (int, float, str)):
        raise InvalidInput(f"'{name}' must be a number.")
    try:
        amount = float(raw)
    except ValueError:
        raise InvalidInput(f"'{name}' must be a number, got {raw!r}.") from None

    if not math.isfinite(amount):
        raise InvalidInput(f"'{name}' must be a finite number.")
    if amount <= 0:
        raise InvalidInput(f"'{name}' must be greater than zero.")
    return amount


def parse_bill_amount(payload: Any) -> float:
    """Pull a positive, finite monthly bill out of a decoded request body."""
    if not isinstance(payload, dict):
        raise InvalidInput("Request body must be a JSON object.")
    if payload.get(BILL_KEY) is None:
        raise InvalidInput(f"Missing required field '{BILL_KEY}'.")
    return coerce_bill_amount(payload[BILL_KEY])


def calculate_quote(bill_amount: float, config: QuoteConfig) -> CalculationResult:
    consumption = estimate_consumption(config.tariff, bill_amount)
    spec = size_system(consumption, config)
    projection = project(consumption, spec, bill_amount, config)
    result = assemble(spec, projection)

    logger.debug(
        "Quote for bill %.2f: %.1f kWh/month, %d panels, %.2f kWp, payback %.1f years.",
        bill_amount,
        consumption.kwh_per_month,
        result.panel_count,
        result.system_kwp,
        result.payback_years,
    )
    return result


def quote_from_payload(payload: Any, config: QuoteConfig) -> Dict[str, Any]:
    return calculate_quote(parse_bill_amount(payload), config).to_payload()
