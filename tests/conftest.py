import pytest

from solar_quote.config import ElectricityTariff, QuoteConfig, TariffBlock


@pytest.fixture
def scenario_tariff() -> ElectricityTariff:
    return ElectricityTariff(
        blocks=(
            TariffBlock(threshold_kwh=100, price_per_kwh=6.0),
            TariffBlock(threshold_kwh=300, price_per_kwh=9.0),
            TariffBlock(threshold_kwh=None, price_per_kwh=14.0),
        )
    )


@pytest.fixture
def scenario_config(scenario_tariff: ElectricityTariff) -> QuoteConfig:
    return QuoteConfig(
        tariff=scenario_tariff,
        panel_wattage=550,
        autonomy_fraction=0.5,
        oversize_margin=1.10,
        sun_hours_per_day=5,
        cost_per_wp=1.6,
        cap_rate=0.08,
        minimum_residual_bill=50.0,
        non_solar_fraction=0.5,
    )
