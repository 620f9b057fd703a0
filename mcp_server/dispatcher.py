"""
JSON-RPC 2.0 dispatcher for the crypto price server

Routes initialize, tools/list and tools/call to their handlers through
jsonrpcserver. Every request gets exactly one response object, either a
result or an error, echoing the request id.
"""
import json
import logging
from typing import Any, Dict, Optional, Sequence, Union

from jsonrpcserver import async_dispatch
from jsonrpcserver.result import Error, Result, Success
from pydantic import ValidationError

from mcp_server import __version__
from mcp_server.aggregator import PriceAggregator
from mcp_server.tools import PRICE_TOOLS, ToolDefinition

logger = logging.getLogger("mcp-server.dispatcher")

PROTOCOL_VERSION = "2024-11-05"
SERVER_NAME = "crypto-price-server"

PARSE_ERROR = -32700
INVALID_REQUEST = -32600
METHOD_NOT_FOUND = -32601
INVALID_PARAMS = -32602
INTERNAL_ERROR = -32603

REQUIRED_FIELDS = ("jsonrpc", "method", "id")


def error_response(request_id: Any, code: int, message: str) -> Dict[str, Any]:
    return {
        "jsonrpc": "2.0",
        "error": {"code": code, "message": message},
        "id": request_id,
    }


def format_validation_error(error: ValidationError) -> str:
    problems = []
    for item in error.errors():
        location = ".".join(str(part) for part in item["loc"]) or "arguments"
        problems.append(f"{location}: {item['msg']}")
    return "; ".join(problems)


# Method handlers. jsonrpcserver passes the dispatcher as the context argument.

async def initialize(dispatcher: "RpcDispatcher", **_client_info: Any) -> Result:
    """Capability and version handshake, no side effects"""
    return Success({
        "protocolVersion": PROTOCOL_VERSION,
        "capabilities": {"tools": {}},
        "serverInfo": {"name": dispatcher.server_name, "version": __version__},
    })


async def tools_list(dispatcher: "RpcDispatcher", **_params: Any) -> Result:
    return Success({"tools": [tool.describe() for tool in dispatcher.tools.values()]})


async def tools_call(
    dispatcher: "RpcDispatcher", name: Any, arguments: Optional[Any] = None
) -> Result:
    if not isinstance(name, str) or name not in dispatcher.tools:
        logger.warning(f"tools/call for unknown tool: {name!r}")
        return Error(INVALID_PARAMS, f"Unknown tool: {name}")

    tool = dispatcher.tools[name]
    try:
        args = tool.args_model.model_validate(arguments if arguments is not None else {})
    except ValidationError as e:
        logger.warning(f"Invalid arguments for {name}: {arguments!r}")
        return Error(INVALID_PARAMS, f"Invalid arguments for {name}: {format_validation_error(e)}")

    logger.info(f"Calling tool {name} with {args.model_dump()}")
    try:
        text = await tool.handler(dispatcher.aggregator, args)
    except Exception as e:
        logger.error(f"Tool {name} failed: {str(e)}")
        return Error(INTERNAL_ERROR, f"Tool {name} failed: {str(e)}")

    # Results are wrapped as typed content blocks, not raw data
    return Success({"content": [{"type": "text", "text": text}]})


class RpcDispatcher:
    """
    Stateless JSON-RPC dispatcher over a fixed tool catalog.
    """

    def __init__(
        self,
        aggregator: PriceAggregator,
        tools: Sequence[ToolDefinition] = PRICE_TOOLS,
        server_name: str = SERVER_NAME,
    ):
        self.aggregator = aggregator
        self.tools: Dict[str, ToolDefinition] = {tool.name: tool for tool in tools}
        self.server_name = server_name
        self.methods = {
            "initialize": initialize,
            "tools/list": tools_list,
            "tools/call": tools_call,
        }

    async def handle_raw(self, body: Union[str, bytes]) -> Dict[str, Any]:
        """
        Handle an undecoded request body.

        Args:
            body: The raw HTTP request body

        Returns:
            The JSON-RPC response object
        """
        try:
            request = json.loads(body)
        except ValueError:
            logger.warning("Received a request body that is not valid JSON")
            return error_response(None, PARSE_ERROR, "Parse error")

        return await self.handle(request)

    async def handle(self, request: Any) -> Dict[str, Any]:
        """
        Handle a decoded JSON-RPC request.

        Args:
            request: The decoded request envelope

        Returns:
            The JSON-RPC response object
        """
        if not isinstance(request, dict):
            logger.warning("Rejected a request that is not a JSON object")
            return error_response(None, INVALID_REQUEST, "Invalid Request")

        missing = [field for field in REQUIRED_FIELDS if field not in request]
        if missing:
            logger.warning(f"Rejected request missing {', '.join(missing)}")
            return error_response(request.get("id"), INVALID_REQUEST, "Invalid Request")

        logger.info(f"Received: {request.get('method')}")
        response = await async_dispatch(json.dumps(request), methods=self.methods, context=self)

        if response:
            return json.loads(response)
        return error_response(request.get("id"), INTERNAL_ERROR, "No response produced")
