from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Dict

from solar_quote.finance import FinancialProjection
from solar_quote.sizing import SystemSpec

CURRENCY_DIGITS = 2
ENERGY_DIGITS = 1
# Array power follows the 550 W panel step, so it keeps two decimals (7 panels -> 3.85 kWp).
ARRAY_POWER_DIGITS = 2
YEARS_DIGITS = 1


@dataclass(frozen=True)
class CalculationResult:
    panel_count: int
    investment: float
    monthly_savings: float
    payback_years: float
    punitive_block_savings: float
    annual_extra_income: float
    property_value_uplift: float
    daily_savings: float
    system_kwp: float
    inverter_kw: float
    battery_kwh: float
    breakdown_text: str

    def to_payload(self) -> Dict[str, Any]:
        return {
            "numeroPaneles": self.panel_count,
            "inversionEstimada": self.investment,
            "ahorroMensual": self.monthly_savings,
            "retornoInversionAnos": self.payback_years,
            "costoBloqueCastigo": self.punitive_block_savings,
            "ingresoAnualExtra": self.annual_extra_income,
            "aumentoPlusvalia": self.property_value_uplift,
            "ahorroDiario": self.daily_savings,
            "potenciaSistemaKwp": self.system_kwp,
            "capacidadInversorKw": self.inverter_kw,
            "bateriasRecomendadasKwh": self.battery_kwh,
            "desgloseAhorro": self.breakdown_text,
        }


def assemble(spec: SystemSpec, projection: FinancialProjection) -> CalculationResult:
    """Merge sizing and projection into the public result.

    This is the only place values are rounded; everything upstream keeps full precision.
    """
    return CalculationResult(
        panel_count=int(spec.panel_count),
        investment=round(projection.investment, CURRENCY_DIGITS),
        monthly_savings=round(projection.monthly_savings, CURRENCY_DIGITS),
        payback_years=round(projection.payback_years, YEARS_DIGITS),
        punitive_block_savings=round(projection.punitive_block_savings, CURRENCY_DIGITS),
        annual_extra_income=round(projection.annual_extra_income, CURRENCY_DIGITS),
        property_value_uplift=round(projection.property_value_uplift, CURRENCY_DIGITS),
        daily_savings=round(projection.daily_savings, CURRENCY_DIGITS),
        system_kwp=round(spec.system_kwp, ARRAY_POWER_DIGITS),
        inverter_kw=round(spec.inverter_kw, ENERGY_DIGITS),
        battery_kwh=round(spec.battery_kwh, ENERGY_DIGITS),
        breakdown_text=projection.breakdown_text,
    )
