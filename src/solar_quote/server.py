from __future__ import annotations

import json
import logging
import os
from typing import Dict, List, Optional

from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from solar_quote.config import QuoteConfig, load_config
from solar_quote.engine import quote_from_payload
from solar_quote.errors import DegenerateProjection, InvalidInput

logger = logging.getLogger(__name__)

ORIGINS_ENV_VAR = "SOLAR_QUOTE_ALLOWED_ORIGINS"
GENERIC_ERROR = "No se pudo realizar el cálculo. Inténtalo de nuevo."


def _allowed_origins() -> List[str]:
    raw = os.getenv(ORIGINS_ENV_VAR, "*")
    return [origin.strip() for origin in raw.split(",") if origin.strip()]


def create_app(config: Optional[QuoteConfig] = None) -> FastAPI:
    # Configuration errors surface here, before the app serves any request.
    quote_config = config or load_config()

    app = FastAPI(title="Solar Quote Engine")
    app.state.quote_config = quote_config
    app.add_middleware(
        CORSMiddleware,
        allow_origins=_allowed_origins(),
        allow_methods=["GET", "POST"],
        allow_headers=["Content-Type"],
    )

    @app.get("/health")
    def health() -> Dict[str, str]:
        return {"status": "ok"}

    @app.post("/api/calculate")
    async def calculate(request: Request) -> JSONResponse:
        try:
            payload = await request.json()
        except (json.JSONDecodeError, UnicodeDecodeError):
            return _handle_payload(None, quote_config)
        return _handle_payload(payload, quote_config)

    return app


def _handle_payload(payload: object, config: QuoteConfig) -> JSONResponse:
    try:
        return JSONResponse(status_code=200, content=quote_from_payload(payload, config))
    except InvalidInput as exc:
        logger.info("Rejected quote request: %s", exc)
        return JSONResponse(status_code=400, content={"error": str(exc)})
    except DegenerateProjection as exc:
        # Valid input the model cannot price, e.g. a bill below the minimum residual bill.
        logger.warning("No positive savings for quote request: %s", exc)
        return JSONResponse(status_code=500, content={"error": GENERIC_ERROR})
    except Exception:
        logger.exception("Quote calculation failed.")
        return JSONResponse(status_code=500, content={"error": GENERIC_ERROR})


app = create_app()
