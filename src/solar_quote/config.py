from __future__ import annotations

import json
import logging
import math
import os
from dataclasses import dataclass, field, fields
from pathlib import Path
from typing import Any, Dict, Optional, Tuple

from solar_quote.errors import TariffConfigurationError

logger = logging.getLogger(__name__)

CONFIG_ENV_VAR = "SOLAR_QUOTE_CONFIG"


@dataclass(frozen=True)
class TariffBlock:
    # None marks the last, unbounded block.
    threshold_kwh: Optional[float]
    price_per_kwh: float


@dataclass(frozen=True)
class ElectricityTariff:
    blocks: Tuple[TariffBlock, ...]

    def __post_init__(self) -> None:
        validate_tariff(self.blocks)

    def lower_bound(self, index: int) -> float:
        if index == 0:
            return 0.0
        return float(self.blocks[index - 1].threshold_kwh)

    def span_kwh(self, index: int) -> float:
        block = self.blocks[index]
        if block.threshold_kwh is None:
            return math.inf
        return block.threshold_kwh - self.lower_bound(index)


def validate_tariff(blocks: Tuple[TariffBlock, ...]) -> None:
    if not blocks:
        raise TariffConfigurationError("Tariff must define at least one block.")
    if blocks[-1].threshold_kwh is not None:
        raise TariffConfigurationError("The last tariff block must be unbounded (threshold null).")

    previous_threshold = 0.0
    previous_price = 0.0
    for index, block in enumerate(blocks):
        if block.price_per_kwh <= 0:
            raise TariffConfigurationError(
                f"Block {index + 1} price must be positive, found {block.price_per_kwh}."
            )
        if block.price_per_kwh < previous_price:
            raise TariffConfigurationError(
                f"Block {index + 1} price {block.price_per_kwh} is below the previous block "
                f"price {previous_price}; tariff prices must be non-decreasing."
            )
        previous_price = block.price_per_kwh

        if index == len(blocks) - 1:
            break
        if block.threshold_kwh is None:
            raise TariffConfigurationError(f"Only the last block may be unbounded (block {index + 1}).")
        if block.threshold_kwh <= previous_threshold:
            raise TariffConfigurationError(
                f"Block {index + 1} threshold {block.threshold_kwh} must be greater than "
                f"{previous_threshold}; thresholds must be strictly increasing."
            )
        previous_threshold = block.threshold_kwh


# Residential block tariff (DOP/kWh), distribution companies of the Dominican Republic.
DEFAULT_TARIFF = ElectricityTariff(
    blocks=(
        TariffBlock(threshold_kwh=200, price_per_kwh=4.44),
        TariffBlock(threshold_kwh=300, price_per_kwh=6.97),
        TariffBlock(threshold_kwh=700, price_per_kwh=10.86),
        TariffBlock(threshold_kwh=None, price_per_kwh=11.10),
    )
)

DEFAULT_INVERTER_SIZES_KW = (1.5, 3.0, 3.6, 5.0, 6.0, 8.0, 10.0, 12.0, 15.0, 20.0)


@dataclass(frozen=True)
class QuoteConfig:
    tariff: ElectricityTariff = DEFAULT_TARIFF
    panel_wattage: float = 550.0
    autonomy_fraction: float = 0.5
    oversize_margin: float = 1.10
    sun_hours_per_day: float = 5.0
    cost_per_wp: float = 45.0
    cap_rate: float = 0.08
    minimum_residual_bill: float = 150.0
    non_solar_fraction: float = 0.5
    inverter_sizes_kw: Tuple[float, ...] = field(default=DEFAULT_INVERTER_SIZES_KW)
    days_per_month: int = 30
    currency_symbol: str = "RD$"

    def __post_init__(self) -> None:
        validate_config(self)


def validate_config(config: QuoteConfig) -> None:
    positive = {
        "panel_wattage": config.panel_wattage,
        "oversize_margin": config.oversize_margin,
        "sun_hours_per_day": config.sun_hours_per_day,
        "cost_per_wp": config.cost_per_wp,
        "cap_rate": config.cap_rate,
        "days_per_month": config.days_per_month,
    }
    for name, value in positive.items():
        if value <= 0:
            raise TariffConfigurationError(f"{name} must be positive, found {value}.")
    if config.oversize_margin < 1.0:
        raise TariffConfigurationError("oversize_margin must be at least 1.0.")
    for name in ("autonomy_fraction", "non_solar_fraction"):
        value = getattr(config, name)
        if not 0.0 <= value <= 1.0:
            raise TariffConfigurationError(f"{name} must be between 0 and 1, found {value}.")
    if config.minimum_residual_bill < 0:
        raise TariffConfigurationError("minimum_residual_bill cannot be negative.")
    sizes = config.inverter_sizes_kw
    if not sizes or any(s <= 0 for s in sizes) or list(sizes) != sorted(set(sizes)):
        raise TariffConfigurationError(
            "inverter_sizes_kw must be a non-empty, strictly increasing list of positive sizes."
        )


def tariff_from_rows(rows: Any) -> ElectricityTariff:
    if not isinstance(rows, list):
        raise TariffConfigurationError("'tariff' must be a list of blocks.")
    blocks = []
    for row in rows:
        try:
            threshold = row["threshold_kwh"]
            blocks.append(
                TariffBlock(
                    threshold_kwh=None if threshold is None else float(threshold),
                    price_per_kwh=float(row["price_per_kwh"]),
                )
            )
        except (KeyError, TypeError, ValueError) as exc:
            raise TariffConfigurationError(f"Invalid tariff block {row!r}: {exc}") from exc
    return ElectricityTariff(blocks=tuple(blocks))


def config_from_dict(data: Dict[str, Any]) -> QuoteConfig:
    known = {f.name for f in fields(QuoteConfig)}
    unknown = sorted(set(data) - known)
    if unknown:
        raise TariffConfigurationError(f"Unknown configuration keys: {', '.join(unknown)}.")

    values: Dict[str, Any] = dict(data)
    if "tariff" in values:
        values["tariff"] = tariff_from_rows(values["tariff"])
    if "inverter_sizes_kw" in values:
        values["inverter_sizes_kw"] = tuple(float(s) for s in values["inverter_sizes_kw"])
    return QuoteConfig(**values)


def load_config(path: Optional[str] = None) -> QuoteConfig:
    """Build the process-wide configuration.

    Reads the JSON file at ``path`` (or ``$SOLAR_QUOTE_CONFIG``) over the built-in
    defaults. Any inconsistency raises ``TariffConfigurationError`` so a bad tariff
    stops the process before it serves a single quote.
    """
    config_path = path or os.getenv(CONFIG_ENV_VAR, "")
    if not config_path:
        logger.info("Using built-in quote configuration.")
        return QuoteConfig()

    try:
        data = json.loads(Path(config_path).read_text())
    except (OSError, json.JSONDecodeError) as exc:
        raise TariffConfigurationError(f"Cannot read configuration {config_path}: {exc}") from exc
    if not isinstance(data, dict):
        raise TariffConfigurationError("Configuration file must contain a JSON object.")

    config = config_from_dict(data)
    logger.info("Loaded quote configuration from %s (%d tariff blocks).", config_path, len(config.tariff.blocks))
    return config
