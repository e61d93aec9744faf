"""
Solana transaction fetcher — JSON-RPC source of raw transactions.

Responsibilities:
- getSignaturesForAddress for a wallet (newest first).
- getTransaction for each signature, issued concurrently (bounded), with
  maxSupportedTransactionVersion=0 so versioned transactions are returned.
- Retry transport errors with exponential backoff; discard transactions that
  fail or are not found so one bad signature never sinks the batch.
"""

from __future__ import annotations

import asyncio
import itertools
from typing import Any

import httpx

from backend_explainer.config.settings import Settings
from backend_explainer.core.exceptions import RpcError, TransactionFetchError
from backend_explainer.explainer_logging import bind_wallet, get_logger
from backend_explainer.solana_listener.models import SignatureInfo

logger = get_logger(__name__)

# JSON-RPC request ids
_request_ids = itertools.count(1)

MAX_SIGNATURES_PER_REQUEST = 1000
RETRYABLE_STATUS_CODES = frozenset({429, 500, 502, 503, 504})


def _build_rpc_body(method: str, params: list[Any]) -> dict[str, Any]:
    return {
        "jsonrpc": "2.0",
        "id": next(_request_ids),
        "method": method,
        "params": params,
    }


class SolanaTransactionFetcher:
    """
    Fetch recent raw transactions for a wallet from a Solana RPC endpoint.

    A fresh httpx.AsyncClient is opened per fetch_transactions call; pass
    transport (e.g. httpx.MockTransport) to replace the network in tests.
    """

    def __init__(
        self,
        rpc_url: str,
        *,
        request_timeout_sec: float = 30.0,
        max_concurrency: int = 10,
        commitment: str = "confirmed",
        max_retries: int = 3,
        min_retry_delay_sec: float = 0.5,
        max_retry_delay_sec: float = 8.0,
        transport: httpx.AsyncBaseTransport | None = None,
    ) -> None:
        """
        Args:
            rpc_url: Solana RPC HTTP endpoint (e.g. https://api.mainnet-beta.solana.com).
            request_timeout_sec: HTTP timeout for each RPC request.
            max_concurrency: Max getTransaction requests in flight at once.
            commitment: processed | confirmed | finalized.
            max_retries: Attempts per RPC call on transport errors / retryable HTTP status.
            min_retry_delay_sec: Initial delay for exponential backoff.
            max_retry_delay_sec: Cap for backoff delay.
            transport: Optional httpx transport override.
        """
        if not rpc_url.strip():
            raise ValueError("rpc_url must be non-empty")
        if max_concurrency < 1:
            raise ValueError("max_concurrency must be >= 1")
        if max_retries < 1:
            raise ValueError("max_retries must be >= 1")

        self._rpc_url = rpc_url.strip().rstrip("/")
        self._request_timeout = request_timeout_sec
        self._max_concurrency = max_concurrency
        self._commitment = commitment
        self._max_retries = max_retries
        self._min_retry_delay = min_retry_delay_sec
        self._max_retry_delay = max_retry_delay_sec
        self._transport = transport

    @classmethod
    def from_settings(cls, settings: Settings, **overrides: Any) -> "SolanaTransactionFetcher":
        """Build from config.Settings; keyword overrides win."""
        kwargs: dict[str, Any] = {
            "request_timeout_sec": settings.request_timeout_sec,
            "max_concurrency": settings.fetch_concurrency,
            "commitment": settings.commitment,
            "max_retries": settings.max_retries,
        }
        kwargs.update(overrides)
        rpc_url = kwargs.pop("rpc_url", None) or settings.solana_rpc_url
        return cls(rpc_url, **kwargs)

    def _client(self) -> httpx.AsyncClient:
        return httpx.AsyncClient(
            timeout=httpx.Timeout(self._request_timeout),
            transport=self._transport,
        )

    async def _rpc_call(
        self,
        client: httpx.AsyncClient,
        method: str,
        params: list[Any],
    ) -> Any:
        """Perform one JSON-RPC call with retry; return result (may be None)."""
        delay = self._min_retry_delay
        for attempt in range(self._max_retries):
            body = _build_rpc_body(method, params)
            try:
                resp = await client.post(self._rpc_url, json=body)
                if resp.status_code in RETRYABLE_STATUS_CODES:
                    raise httpx.HTTPStatusError(
                        f"retryable status {resp.status_code}",
                        request=resp.request,
                        response=resp,
                    )
                resp.raise_for_status()
                data = resp.json()
            except (httpx.HTTPError, ValueError) as e:
                if attempt + 1 >= self._max_retries:
                    logger.error(
                        "rpc_give_up",
                        method=method,
                        max_retries=self._max_retries,
                        error=str(e),
                    )
                    raise TransactionFetchError(f"{method} failed: {e}") from e
                logger.warning(
                    "rpc_retry",
                    method=method,
                    attempt=attempt + 1,
                    max_retries=self._max_retries,
                    error=str(e),
                )
                await asyncio.sleep(delay)
                delay = min(delay * 2, self._max_retry_delay)
                continue

            if not isinstance(data, dict):
                raise TransactionFetchError(f"{method} returned a non-object response")
            if "error" in data:
                err = data["error"]
                if isinstance(err, dict):
                    raise RpcError(str(err.get("message", err)), err.get("code"))
                raise RpcError(str(err))
            return data.get("result")
        raise TransactionFetchError(f"{method} failed")

    async def _get_signatures(
        self,
        client: httpx.AsyncClient,
        address: str,
        limit: int,
    ) -> list[SignatureInfo]:
        opts = {"limit": limit, "commitment": self._commitment}
        result = await self._rpc_call(client, "getSignaturesForAddress", [address, opts])
        if result is None:
            raise TransactionFetchError("getSignaturesForAddress returned no result")
        infos: list[SignatureInfo] = []
        for item in result if isinstance(result, list) else []:
            if not isinstance(item, dict) or "signature" not in item:
                continue
            try:
                infos.append(SignatureInfo.from_rpc_item(item))
            except (KeyError, TypeError, ValueError) as e:
                logger.debug("signature_item_skipped", error=str(e))
        return infos

    async def _get_transaction(
        self,
        client: httpx.AsyncClient,
        signature: str,
    ) -> dict[str, Any] | None:
        opts = {
            "encoding": "json",
            "commitment": self._commitment,
            "maxSupportedTransactionVersion": 0,
        }
        result = await self._rpc_call(client, "getTransaction", [signature, opts])
        return result if isinstance(result, dict) else None

    async def get_signatures(self, address: str, limit: int = 100) -> list[SignatureInfo]:
        """Latest signatures for address (newest first)."""
        if not (1 <= limit <= MAX_SIGNATURES_PER_REQUEST):
            raise ValueError(f"limit must be between 1 and {MAX_SIGNATURES_PER_REQUEST}")
        async with self._client() as client:
            return await self._get_signatures(client, address, limit)

    async def get_transaction(self, signature: str) -> dict[str, Any] | None:
        """Raw getTransaction result, or None if the transaction is not found."""
        async with self._client() as client:
            return await self._get_transaction(client, signature)

    async def fetch_transactions(self, address: str, limit: int = 100) -> list[dict[str, Any]]:
        """
        Fetch up to limit recent transactions for address.

        Signature listing failures propagate (TransactionFetchError). Individual
        getTransaction failures and not-found results are logged and dropped;
        the remaining transactions keep signature order (newest first).
        """
        if not (1 <= limit <= MAX_SIGNATURES_PER_REQUEST):
            raise ValueError(f"limit must be between 1 and {MAX_SIGNATURES_PER_REQUEST}")
        log = bind_wallet(__name__, address)
        semaphore = asyncio.Semaphore(self._max_concurrency)

        async with self._client() as client:
            infos = await self._get_signatures(client, address, limit)

            async def _bounded(sig: str) -> dict[str, Any] | None:
                async with semaphore:
                    return await self._get_transaction(client, sig)

            results = await asyncio.gather(
                *(_bounded(info.signature) for info in infos),
                return_exceptions=True,
            )

        transactions: list[dict[str, Any]] = []
        for info, result in zip(infos, results):
            if isinstance(result, BaseException):
                if not isinstance(result, Exception):
                    raise result
                log.warning(
                    "transaction_fetch_discarded",
                    signature=info.signature,
                    error=str(result),
                )
                continue
            if result is None:
                log.debug("transaction_not_found", signature=info.signature)
                continue
            transactions.append(result)

        log.info(
            "wallet_transactions_fetched",
            signature_count=len(infos),
            transaction_count=len(transactions),
        )
        return transactions
