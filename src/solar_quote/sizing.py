from __future__ import annotations

import math
from dataclasses import dataclass
from typing import Sequence

from solar_quote.config import QuoteConfig
from solar_quote.errors import DegenerateProjection
from solar_quote.tariff import ConsumptionEstimate


@dataclass(frozen=True)
class SystemSpec:
    panel_count: int
    panel_wattage: float
    system_kwp: float
    inverter_kw: float
    battery_kwh: float


def snap_inverter_size(system_kwp: float, sizes_kw: Sequence[float]) -> float:
    """Smallest commercial inverter rating that is >= the array peak power.

    Arrays above the largest rating get several units of the largest size.
    """
    for size in sizes_kw:
        if size >= system_kwp:
            return size
    largest = sizes_kw[-1]
    return math.ceil(system_kwp / largest) * largest


def required_kwp(consumption: ConsumptionEstimate, config: QuoteConfig) -> float:
    daily_kwh = consumption.kwh_per_month * config.oversize_margin / config.days_per_month
    return daily_kwh / config.sun_hours_per_day


def size_system(consumption: ConsumptionEstimate, config: QuoteConfig) -> SystemSpec:
    raw_kwp = required_kwp(consumption, config)
    if not math.isfinite(raw_kwp * 1000):
        raise DegenerateProjection(f"Consumption of {consumption.kwh_per_month:.6g} kWh is too large to size.")
    panel_count = max(1, math.ceil(raw_kwp * 1000 / config.panel_wattage))
    # Reported power always follows the rounded panel count.
    system_kwp = panel_count * config.panel_wattage / 1000

    return SystemSpec(
        panel_count=panel_count,
        panel_wattage=config.panel_wattage,
        system_kwp=system_kwp,
        inverter_kw=snap_inverter_size(system_kwp, config.inverter_sizes_kw),
        battery_kwh=consumption.kwh_per_month / config.days_per_month * config.autonomy_fraction,
    )
