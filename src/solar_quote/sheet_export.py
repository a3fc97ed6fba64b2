from __future__ import annotations

import json
from pathlib import Path
from typing import TYPE_CHECKING, Any, List

from solar_quote.config import QuoteConfig
from solar_quote.result import CalculationResult

if TYPE_CHECKING:
    import gspread

SCOPES = [
    "https://www.googleapis.com/auth/spreadsheets",
    "https://www.googleapis.com/auth/drive",
]


def load_google_client(service_account_json_path: str) -> "gspread.Client":
    import gspread
    from google.oauth2.service_account import Credentials

    credentials_info = json.loads(Path(service_account_json_path).read_text())
    creds = Credentials.from_service_account_info(credentials_info, scopes=SCOPES)
    return gspread.authorize(creds)


def export_quote_to_google_sheets(
    bill_amount: float,
    result: CalculationResult,
    config: QuoteConfig,
    service_account_json_path: str,
    spreadsheet_title: str,
    client: "gspread.Client | None" = None,
) -> str:
    client = client or load_google_client(service_account_json_path)
    sheet = client.create(spreadsheet_title)

    quote_tab = sheet.sheet1
    quote_tab.update_title("Cotizacion")
    quote_tab.update(range_name="A1", values=_quote_rows(bill_amount, result))

    tariff_tab = sheet.add_worksheet(title="Tarifa", rows=50, cols=5)
    tariff_tab.update(range_name="A1", values=_tariff_rows(config))

    assumptions_tab = sheet.add_worksheet(title="Supuestos", rows=50, cols=5)
    assumptions_tab.update(range_name="A1", values=_assumption_rows(config))

    return f"https://docs.google.com/spreadsheets/d/{sheet.id}"


def _quote_rows(bill_amount: float, result: CalculationResult) -> List[List[Any]]:
    rows: List[List[Any]] = [["Concepto", "Valor"], ["Gasto mensual", bill_amount]]
    rows.extend([key, value] for key, value in result.to_payload().items())
    return rows


def _tariff_rows(config: QuoteConfig) -> List[List[Any]]:
    rows: List[List[Any]] = [["Bloque", "Desde kWh", "Hasta kWh", "Precio por kWh"]]
    tariff = config.tariff
    for index, block in enumerate(tariff.blocks):
        upper = "" if block.threshold_kwh is None else block.threshold_kwh
        rows.append([index + 1, tariff.lower_bound(index), upper, block.price_per_kwh])
    return rows


def _assumption_rows(config: QuoteConfig) -> List[List[Any]]:
    return [
        ["Supuesto", "Valor", "Notas"],
        ["Potencia del panel (W)", config.panel_wattage, ""],
        ["Horas sol pico", config.sun_hours_per_day, "Por dia"],
        ["Margen de sobredimensionamiento", config.oversize_margin, "Perdidas y variacion estacional"],
        ["Autonomia de baterias", config.autonomy_fraction, "Fraccion del consumo diario"],
        ["Consumo fuera de horas sol", config.non_solar_fraction, "Fraccion servida por baterias"],
        ["Costo por Wp", config.cost_per_wp, "Inversion"],
        ["Tasa de capitalizacion", config.cap_rate, "Plusvalia"],
        ["Factura minima residual", config.minimum_residual_bill, "Cargo fijo"],
        ["Inversores comerciales (kW)", ", ".join(str(s) for s in config.inverter_sizes_kw), ""],
    ]
