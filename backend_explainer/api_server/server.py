"""
FastAPI server — HTTP surface over the Solana tools.

Exposes the tool listing and tool calls (request/response, errors as isError
payloads) plus a plain REST route returning transfer summaries for a wallet.
Reads no database; every request fetches from the configured Solana RPC.
"""

from __future__ import annotations

from typing import Any

from fastapi import Depends, FastAPI, HTTPException, Query
from fastapi.responses import JSONResponse
from pydantic import BaseModel, Field
from solders.pubkey import Pubkey

from backend_explainer import __version__
from backend_explainer.api_server.solana_tools import (
    SOLANA_TOOLS,
    TransactionSource,
    call_tool,
    default_fetcher,
    explain_wallet_transactions,
)
from backend_explainer.core.exceptions import TransactionFetchError
from backend_explainer.explainer_logging import get_logger

logger = get_logger(__name__)


# -----------------------------------------------------------------------------
# Dependencies
# -----------------------------------------------------------------------------

def get_fetcher() -> TransactionSource:
    """Dependency: transaction source built from settings (overridden in tests)."""
    return default_fetcher()


# -----------------------------------------------------------------------------
# Request/response models
# -----------------------------------------------------------------------------

class CallToolRequest(BaseModel):
    """POST /tools/call body."""

    name: str = Field(..., min_length=1, description="Tool name")
    arguments: dict[str, Any] = Field(default_factory=dict, description="Tool arguments")


class TransferSummaryResponse(BaseModel):
    """One transfer summary (GET /wallet/{address}/transactions item)."""

    signature: str | None
    explorer_url: str | None
    date: str | None
    sender: str | None
    receiver: str | None
    amount: float | None
    asset_id: str | None
    slot: int | None


# -----------------------------------------------------------------------------
# App and routes
# -----------------------------------------------------------------------------

app = FastAPI(
    title="Backend Explainer API",
    description="Human-readable summaries of recent Solana wallet transactions.",
    version=__version__,
)


@app.get("/health")
def health() -> dict[str, str]:
    """Liveness probe: API is up."""
    return {"status": "ok"}


@app.get("/tools")
def list_tools() -> dict[str, Any]:
    """Registered tools with their input schemas."""
    return {"tools": SOLANA_TOOLS}


@app.post("/tools/call")
async def call_tool_route(
    body: CallToolRequest,
    fetcher: TransactionSource = Depends(get_fetcher),
) -> dict[str, Any]:
    """Run a tool. Failures are returned as {"content": [...], "isError": true} with status 200."""
    logger.info("tool_call_received", tool=body.name)
    return await call_tool(body.name, body.arguments, fetcher=fetcher)


@app.get("/wallet/{address}/transactions", response_model=list[TransferSummaryResponse])
async def wallet_transactions(
    address: str,
    limit: int = Query(100, ge=1, le=1000),
    fetcher: TransactionSource = Depends(get_fetcher),
) -> list[dict[str, Any]]:
    """
    Transfer summaries of the wallet's most recent transactions (newest first).

    Returns 400 for an invalid address and 502 when the RPC cannot deliver.
    """
    address = address.strip()
    try:
        Pubkey.from_string(address)
    except Exception:
        raise HTTPException(status_code=400, detail="Invalid Solana wallet address")

    try:
        summaries = await explain_wallet_transactions(address, limit, fetcher)
    except TransactionFetchError as e:
        logger.warning("wallet_transactions_failed", wallet_id=address, error=str(e))
        raise HTTPException(
            status_code=502,
            detail=f"Failed to fetch Solana transactions: {e}",
        ) from e
    return [s.to_dict() for s in summaries]


@app.exception_handler(HTTPException)
def http_exception_handler(request: Any, exc: HTTPException) -> JSONResponse:
    """Consistent JSON error response for HTTPException."""
    return JSONResponse(
        status_code=exc.status_code,
        content={"detail": exc.detail},
    )
