"""
Main entrypoint: FastAPI server for the explainer backend.

Env: SOLANA_RPC_URL (or RPC_URL / HELIUS_API_KEY), API_HOST, API_PORT, LOG_LEVEL, etc.

Equivalent: uvicorn backend_explainer.api_server.app:app --host 0.0.0.0 --port 8000
"""

# Configure structured JSON logging before other imports that may log
from backend_explainer.explainer_logging import get_logger

logger = get_logger("main")


def main() -> None:
    """Run the FastAPI server in the main thread."""
    from backend_explainer.config import get_settings
    from backend_explainer.config.env import mask_rpc_url

    settings = get_settings()

    from backend_explainer.api_server.app import app
    import uvicorn

    logger.info(
        "main_server_starting",
        host=settings.api_host,
        port=settings.api_port,
        network=settings.solana_network,
        rpc_url=mask_rpc_url(settings.solana_rpc_url),
    )
    uvicorn.run(app, host=settings.api_host, port=settings.api_port, log_level=settings.log_level)


if __name__ == "__main__":
    main()
