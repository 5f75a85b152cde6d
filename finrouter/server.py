"""
HTTP surface: a FastAPI app exposing the finance routes.

Run with ``uvicorn finrouter.server:create_app --factory`` or ``finrouter serve``.
"""
import logging
from typing import Optional

from fastapi import APIRouter, FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from .client import FinanceRouter
from .config import Settings
from .log import configure_logging

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api")


def _finance_router(request: Request) -> FinanceRouter:
    return request.app.state.finance_router


@router.post("/finance")
async def finance(request: Request) -> JSONResponse:
    """Provider-adapter design: route a chat turn to one provider."""
    # The raw body goes through the router so JSON errors get an envelope too
    status, body = await _finance_router(request).handle(await request.body())
    return JSONResponse(body, status_code=status)


@router.post("/finance/chain")
async def finance_chain(request: Request) -> JSONResponse:
    """Chain design: analysis, chart or structured-analysis pipeline."""
    status, body = await _finance_router(request).handle_chain(await request.body())
    return JSONResponse(body, status_code=status)


@router.get("/health")
async def health() -> dict:
    return {"status": "ok"}


def create_app(finance_router: Optional[FinanceRouter] = None) -> FastAPI:
    """
    Build the application.

    Args:
        finance_router: Router to serve. Defaults to one built from the
            environment; tests pass their own.
    """
    finance_router = finance_router or FinanceRouter(Settings.from_env())
    settings = finance_router.settings
    configure_logging(settings.log_level)

    app = FastAPI(title="Financial Data Analyst Router")
    app.state.finance_router = finance_router
    app.add_middleware(
        CORSMiddleware,
        allow_origins=list(settings.cors_origins),
        allow_methods=["POST", "GET"],
        allow_headers=["*"],
    )
    app.include_router(router)

    logger.info("Finance router ready (providers: %s)", ", ".join(finance_router.providers))
    return app
