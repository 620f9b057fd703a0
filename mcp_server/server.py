import logging
import os
from logging.handlers import RotatingFileHandler
from typing import Optional

import uvicorn
from dotenv import load_dotenv
from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from mcp_server import __version__
from mcp_server.aggregator import PriceAggregator
from mcp_server.connectors import default_connectors
from mcp_server.dispatcher import RpcDispatcher

logger = logging.getLogger("mcp-server")


def configure_logging(log_file: str = "logs/mcp-server.log"):
    """Log to stdout and to a rotating file"""
    os.makedirs(os.path.dirname(log_file), exist_ok=True)
    logging.basicConfig(
        level=getattr(logging, os.environ.get("LOG_LEVEL", "INFO").upper(), logging.INFO),
        format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
        handlers=[
            RotatingFileHandler(log_file, maxBytes=10485760, backupCount=5),
            logging.StreamHandler(),
        ],
    )


def create_aggregator() -> PriceAggregator:
    """Build the aggregator over all upstream sources, timeouts from the environment"""
    source_timeout = float(os.environ.get("PRICE_SOURCE_TIMEOUT", "5.0"))
    aggregator_timeout = float(os.environ.get("PRICE_AGGREGATOR_TIMEOUT", "5.0"))
    return PriceAggregator(default_connectors(timeout=source_timeout), timeout=aggregator_timeout)


def create_app(aggregator: Optional[PriceAggregator] = None) -> FastAPI:
    app = FastAPI(
        title="Crypto MCP Server",
        description="MCP server providing cryptocurrency prices from several sources in parallel",
        version=__version__,
    )

    app.add_middleware(
        CORSMiddleware,
        allow_origins=["*"],
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    dispatcher = RpcDispatcher(aggregator or create_aggregator())
    app.state.dispatcher = dispatcher

    # JSON-RPC errors are reported in the body, the HTTP status is always 200
    @app.post("/")
    async def handle_mcp_request(request: Request):
        body = await request.body()
        logger.debug(f"Received request: {body!r}")
        return await dispatcher.handle_raw(body)

    @app.get("/")
    async def server_info():
        return {
            "server": "crypto-mcp-server",
            "version": __version__,
            "protocol": "MCP JSON-RPC 2.0",
            "message": "Send POST requests to / with JSON-RPC 2.0 format",
        }

    @app.get("/health")
    async def health_check():
        """Simple HTTP health check endpoint"""
        return {"status": "ok"}

    @app.exception_handler(404)
    async def not_found(request: Request, exc: Exception):
        return JSONResponse(
            status_code=404,
            content={
                "error": "Not Found",
                "message": "This is an MCP server. Only POST requests to / are supported.",
            },
        )

    return app


def main():
    load_dotenv()
    configure_logging()

    host = os.environ.get("MCP_SERVER_HOST", "0.0.0.0")
    port = int(os.environ.get("MCP_SERVER_PORT", "4000"))

    logger.info(f"Starting Crypto MCP Server on port {port}")
    uvicorn.run(create_app(), host=host, port=port, log_level="info")


if __name__ == "__main__":
    main()
