import json

import pytest

from solar_quote.config import (
    DEFAULT_TARIFF,
    ElectricityTariff,
    QuoteConfig,
    TariffBlock,
    config_from_dict,
    load_config,
)
from solar_quote.errors import TariffConfigurationError


def test_default_config_is_valid_progressive_tariff() -> None:
    config = QuoteConfig()

    assert config.tariff is DEFAULT_TARIFF
    assert config.panel_wattage == 550
    assert config.autonomy_fraction == 0.5
    prices = [b.price_per_kwh for b in config.tariff.blocks]
    assert prices == sorted(prices)


@pytest.mark.parametrize(
    "blocks",
    [
        (),
        (TariffBlock(200, 4.0), TariffBlock(150, 6.0), TariffBlock(None, 8.0)),
        (TariffBlock(200, 4.0), TariffBlock(200, 6.0), TariffBlock(None, 8.0)),
        (TariffBlock(200, 6.0), TariffBlock(None, 4.0)),
        (TariffBlock(200, 4.0), TariffBlock(300, 6.0)),
        (TariffBlock(None, 4.0), TariffBlock(None, 6.0)),
        (TariffBlock(100, 0.0), TariffBlock(None, 6.0)),
    ],
)
def test_misconfigured_tariff_is_rejected(blocks) -> None:
    with pytest.raises(TariffConfigurationError):
        ElectricityTariff(blocks=blocks)


def test_flat_tariff_with_single_unbounded_block_is_valid() -> None:
    tariff = ElectricityTariff(blocks=(TariffBlock(None, 9.5),))
    assert tariff.span_kwh(0) == float("inf")


@pytest.mark.parametrize(
    "overrides",
    [
        {"panel_wattage": 0},
        {"oversize_margin": 0.9},
        {"autonomy_fraction": 1.5},
        {"cap_rate": -0.08},
        {"minimum_residual_bill": -1},
        {"inverter_sizes_kw": (5.0, 3.0)},
        {"inverter_sizes_kw": ()},
    ],
)
def test_out_of_range_constants_are_rejected(overrides) -> None:
    with pytest.raises(TariffConfigurationError):
        QuoteConfig(**overrides)


def test_config_from_dict_builds_tariff_rows() -> None:
    config = config_from_dict(
        {
            "tariff": [
                {"threshold_kwh": 100, "price_per_kwh": 6},
                {"threshold_kwh": 300, "price_per_kwh": 9},
                {"threshold_kwh": None, "price_per_kwh": 14},
            ],
            "cost_per_wp": 1.6,
            "inverter_sizes_kw": [3, 5, 8],
        }
    )

    assert config.tariff.blocks[1] == TariffBlock(threshold_kwh=300.0, price_per_kwh=9.0)
    assert config.cost_per_wp == 1.6
    assert config.inverter_sizes_kw == (3.0, 5.0, 8.0)


def test_config_from_dict_rejects_unknown_keys() -> None:
    with pytest.raises(TariffConfigurationError, match="sun_hours"):
        config_from_dict({"sun_hours": 5})


def test_config_from_dict_rejects_malformed_block() -> None:
    with pytest.raises(TariffConfigurationError):
        config_from_dict({"tariff": [{"price_per_kwh": 6}]})


def test_load_config_defaults_without_env(monkeypatch) -> None:
    monkeypatch.delenv("SOLAR_QUOTE_CONFIG", raising=False)
    assert load_config() == QuoteConfig()


def test_load_config_reads_file_from_env(monkeypatch, tmp_path) -> None:
    path = tmp_path / "quote.json"
    path.write_text(json.dumps({"sun_hours_per_day": 5.5, "cap_rate": 0.1}))
    monkeypatch.setenv("SOLAR_QUOTE_CONFIG", str(path))

    config = load_config()

    assert config.sun_hours_per_day == 5.5
    assert config.cap_rate == 0.1
    assert config.tariff == DEFAULT_TARIFF


def test_load_config_fails_on_unreadable_or_invalid_file(tmp_path) -> None:
    with pytest.raises(TariffConfigurationError):
        load_config(str(tmp_path / "missing.json"))

    bad = tmp_path / "bad.json"
    bad.write_text("[1, 2, 3]")
    with pytest.raises(TariffConfigurationError):
        load_config(str(bad))


def test_error_classes_share_base_and_are_documented() -> None:
    from solar_quote.errors import DegenerateProjection, InvalidInput, QuoteError

    for error in (InvalidInput, DegenerateProjection, TariffConfigurationError):
        assert issubclass(error, QuoteError)
        assert error.__doc__
