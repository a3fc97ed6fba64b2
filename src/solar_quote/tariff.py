from __future__ import annotations

import math
from dataclasses import dataclass
from typing import List

from solar_quote.config import ElectricityTariff
from solar_quote.errors import InvalidInput

# Remaining bill below this is treated as exhausted, so a bill landing exactly on a
# tier edge attributes nothing to the next tier.
BILL_TOLERANCE = 1e-9


@dataclass(frozen=True)
class BlockUsage:
    block_index: int
    kwh: float
    cost: float
    price_per_kwh: float


@dataclass(frozen=True)
class ConsumptionEstimate:
    kwh_per_month: float
    cost_by_block: List[BlockUsage]

    @property
    def highest_block_index(self) -> int:
        return self.cost_by_block[-1].block_index if self.cost_by_block else 0


def estimate_consumption(tariff: ElectricityTariff, bill_amount: float) -> ConsumptionEstimate:
    """Invert the block tariff: monthly bill -> monthly kWh.

    Cost is continuous, monotonic and piecewise linear in kWh, so one ascending scan
    over the blocks gives the exact answer.
    """
    if not math.isfinite(bill_amount):
        raise InvalidInput(f"Monthly bill must be a finite number, got {bill_amount}.")
    if not bill_amount > 0:
        raise InvalidInput(f"Monthly bill must be greater than zero, got {bill_amount}.")

    remaining = float(bill_amount)
    total_kwh = 0.0
    usage: List[BlockUsage] = []

    for index, block in enumerate(tariff.blocks):
        if remaining <= BILL_TOLERANCE:
            break
        span = tariff.span_kwh(index)
        span_cost = span * block.price_per_kwh
        if remaining >= span_cost:
            kwh, cost = span, span_cost
        else:
            kwh, cost = remaining / block.price_per_kwh, remaining
        usage.append(BlockUsage(block_index=index, kwh=kwh, cost=cost, price_per_kwh=block.price_per_kwh))
        total_kwh += kwh
        remaining -= cost

    return ConsumptionEstimate(kwh_per_month=total_kwh, cost_by_block=usage)


def cost_of(tariff: ElectricityTariff, kwh: float) -> float:
    if kwh < 0:
        raise ValueError(f"Consumption cannot be negative, got {kwh}.")

    remaining = float(kwh)
    total = 0.0
    for index, block in enumerate(tariff.blocks):
        if remaining <= 0:
            break
        consumed = min(remaining, tariff.span_kwh(index))
        total += consumed * block.price_per_kwh
        remaining -= consumed
    return total


def punitive_block_savings(tariff: ElectricityTariff, bill_amount: float, estimate: ConsumptionEstimate) -> float:
    """Bill share billed in the most expensive block the customer reaches.

    Only the single highest block with consumption counts, even when the blocks
    below it carry the same price: with 14.0 / 14.0 top blocks just the last one
    is reported.
    """
    highest = estimate.highest_block_index
    if highest == 0:
        return float(bill_amount)
    return bill_amount - cost_of(tariff, tariff.lower_bound(highest))
