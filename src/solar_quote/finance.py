from __future__ import annotations

import math
from dataclasses import dataclass
from typing import List

from solar_quote.config import QuoteConfig
from solar_quote.errors import DegenerateProjection
from solar_quote.sizing import SystemSpec
from solar_quote.tariff import ConsumptionEstimate, cost_of, punitive_block_savings

SHARE_TOLERANCE = 1e-9
# Savings below this are rounding noise, not a payback.
MIN_ANNUAL_SAVINGS = 1e-6


@dataclass(frozen=True)
class FinancialProjection:
    investment: float
    monthly_savings: float
    daily_savings: float
    payback_years: float
    punitive_block_savings: float
    annual_extra_income: float
    property_value_uplift: float
    breakdown_text: str


@dataclass(frozen=True)
class SavingsShare:
    block_index: int
    block_cost: float
    amount: float
    share: float

    @property
    def eliminated(self) -> bool:
        return self.amount >= self.block_cost - SHARE_TOLERANCE


def total_investment(spec: SystemSpec, config: QuoteConfig) -> float:
    return spec.system_kwp * config.cost_per_wp * 1000


def usable_generation_kwh(spec: SystemSpec, config: QuoteConfig) -> float:
    # The oversize margin is the modeled loss, so it comes back out of the yield.
    return spec.system_kwp * config.sun_hours_per_day * config.days_per_month / config.oversize_margin


def residual_grid_kwh(consumption: ConsumptionEstimate, spec: SystemSpec, config: QuoteConfig) -> float:
    """Monthly kWh still bought from the grid once the system is installed.

    Covers any generation shortfall plus the non-solar-hour share of solar-served
    consumption that the battery bank cannot carry.
    """
    demand = consumption.kwh_per_month
    solar_served = min(usable_generation_kwh(spec, config), demand)
    night_need = solar_served * config.non_solar_fraction
    night_from_grid = max(night_need - spec.battery_kwh * config.days_per_month, 0.0)
    return demand - solar_served + night_from_grid


def allocate_savings(consumption: ConsumptionEstimate, monthly_savings: float) -> List[SavingsShare]:
    """Spread savings over the reached blocks, most expensive block first."""
    shares: List[SavingsShare] = []
    remaining = monthly_savings
    for usage in reversed(consumption.cost_by_block):
        if remaining <= SHARE_TOLERANCE:
            break
        amount = min(remaining, usage.cost)
        shares.append(
            SavingsShare(
                block_index=usage.block_index,
                block_cost=usage.cost,
                amount=amount,
                share=amount / monthly_savings,
            )
        )
        remaining -= amount
    return shares


def _money(amount: float, symbol: str) -> str:
    return f"{symbol}{amount:,.2f}"


def _join(items: List[str]) -> str:
    if len(items) == 1:
        return items[0]
    return ", ".join(items[:-1]) + " y " + items[-1]


def breakdown_text(shares: List[SavingsShare], monthly_savings: float, symbol: str) -> str:
    eliminated = [
        f"el bloque {s.block_index + 1} ({_money(s.amount, symbol)}, {s.share:.1%} del ahorro)"
        for s in shares
        if s.eliminated
    ]
    reduced = [
        f"reduce el bloque {s.block_index + 1} en {_money(s.amount, symbol)} ({s.share:.1%} del ahorro)"
        for s in shares
        if not s.eliminated
    ]

    # Only the last block reached by the allocation can be partially covered.
    if eliminated and reduced:
        body = f"elimina por completo {', '.join(eliminated)} y {reduced[0]}"
    elif eliminated:
        body = f"elimina por completo {_join(eliminated)}"
    else:
        body = reduced[0]
    return f"Tu ahorro mensual de {_money(monthly_savings, symbol)} {body}."


def project(
    consumption: ConsumptionEstimate,
    spec: SystemSpec,
    bill_amount: float,
    config: QuoteConfig,
) -> FinancialProjection:
    investment = total_investment(spec, config)

    residual_kwh = residual_grid_kwh(consumption, spec, config)
    residual_bill = max(cost_of(config.tariff, residual_kwh), config.minimum_residual_bill)
    monthly_savings = bill_amount - residual_bill
    annual_extra_income = monthly_savings * 12

    if annual_extra_income <= MIN_ANNUAL_SAVINGS:
        raise DegenerateProjection(
            f"Annual savings are {annual_extra_income:.2f} for a bill of {bill_amount:.2f}; "
            f"payback is undefined (residual bill {residual_bill:.2f})."
        )

    property_value_uplift = annual_extra_income / config.cap_rate
    payback_years = investment / annual_extra_income
    figures = {
        "investment": investment,
        "annual_extra_income": annual_extra_income,
        "payback_years": payback_years,
        "property_value_uplift": property_value_uplift,
    }
    overflowed = sorted(name for name, value in figures.items() if not math.isfinite(value))
    if overflowed:
        raise DegenerateProjection(
            f"Bill of {bill_amount:.6g} overflows the projection ({', '.join(overflowed)})."
        )

    shares = allocate_savings(consumption, monthly_savings)
    return FinancialProjection(
        investment=investment,
        monthly_savings=monthly_savings,
        daily_savings=monthly_savings / config.days_per_month,
        payback_years=payback_years,
        punitive_block_savings=punitive_block_savings(config.tariff, bill_amount, consumption),
        annual_extra_income=annual_extra_income,
        property_value_uplift=property_value_uplift,
        breakdown_text=breakdown_text(shares, monthly_savings, config.currency_symbol),
    )
