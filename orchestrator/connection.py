import itertools
import logging
from typing import Any, Dict, List, Optional

import httpx

from orchestrator.exceptions import JsonRpcError, ServerConnectionError
from orchestrator.models import JsonRpcRequest, JsonRpcResponse, ToolDescriptor

logger = logging.getLogger(__name__)

TRANSPORTS = ("http",)


class ServerConnection:
    """
    One configured tool server, reached with JSON-RPC 2.0 over HTTP POST.

    Connections keep no state between calls: every request is a fresh
    exchange, matched to its response by id.
    """

    def __init__(
        self,
        server_id: str,
        url: str,
        transport: str = "http",
        timeout: float = 30.0,
        http_transport: Optional[httpx.AsyncBaseTransport] = None,
    ):
        """
        Args:
            server_id: A friendly name for the server connection
            url: Endpoint the JSON-RPC requests are posted to
            transport: Transport kind, only "http" is supported
            timeout: Timeout for each request in seconds
            http_transport: Optional httpx transport (used to fake the server)
        """
        if transport not in TRANSPORTS:
            raise ValueError(f"Unsupported transport type: {transport}")

        self.server_id = server_id
        self.url = url
        self.transport = transport
        self.timeout = timeout
        self.http_transport = http_transport
        self._request_ids = itertools.count(1)

    def __repr__(self) -> str:
        return f"ServerConnection({self.server_id!r}, {self.url!r})"

    async def request(self, method: str, params: Optional[Dict[str, Any]] = None) -> Any:
        """
        Send one JSON-RPC request and return its result.

        Raises:
            JsonRpcError: If the server answered with an error object
            ServerConnectionError: On transport failures or malformed responses
        """
        request = JsonRpcRequest(method=method, params=params or {}, id=next(self._request_ids))
        logger.debug(f"Sending {method} to {self.server_id}: {request.params}")

        try:
            async with httpx.AsyncClient(timeout=self.timeout, transport=self.http_transport) as client:
                response = await client.post(self.url, json=request.model_dump())
        except httpx.TimeoutException:
            raise ServerConnectionError(f"Timeout calling {self.server_id} ({method})")
        except httpx.HTTPError as e:
            raise ServerConnectionError(f"Error calling {self.server_id} ({method}): {str(e) or type(e).__name__}")

        if response.status_code != 200:
            raise ServerConnectionError(f"{self.server_id} returned HTTP {response.status_code} for {method}")

        try:
            rpc_response = JsonRpcResponse.model_validate(response.json())
        except ValueError:
            raise ServerConnectionError(f"{self.server_id} sent an invalid JSON-RPC response for {method}")

        if rpc_response.id != request.id:
            raise ServerConnectionError(
                f"{self.server_id} answered request {request.id} with id {rpc_response.id}"
            )

        if rpc_response.error is not None:
            error = rpc_response.error
            logger.warning(f"{self.server_id} returned error {error.code} for {method}: {error.message}")
            raise JsonRpcError(error.code, error.message, error.data)

        return rpc_response.result

    def _expect_object(self, result: Any, method: str) -> Dict[str, Any]:
        if not isinstance(result, dict):
            raise ServerConnectionError(
                f"{self.server_id} returned a {type(result).__name__} result for {method}, expected an object"
            )
        return result

    async def initialize(self) -> Dict[str, Any]:
        result = self._expect_object(await self.request("initialize"), "initialize")
        server_info = result.get("serverInfo")
        if not isinstance(server_info, dict):
            server_info = {}
        logger.info(f"Initialized {self.server_id}: {server_info.get('name', 'unknown')} {server_info.get('version', '')}")
        return result

    async def list_tools(self) -> List[ToolDescriptor]:
        """Fetch the tools the server advertises"""
        result = self._expect_object(await self.request("tools/list"), "tools/list")
        tools = result.get("tools", [])
        if not isinstance(tools, list):
            raise ServerConnectionError(f"{self.server_id} advertised malformed tools")

        try:
            return [ToolDescriptor.model_validate({**tool, "server_id": self.server_id}) for tool in tools]
        except (TypeError, ValueError):
            raise ServerConnectionError(f"{self.server_id} advertised malformed tools")

    async def call_tool(self, name: str, arguments: Dict[str, Any]) -> str:
        """
        Call a tool and return its text content.

        Text blocks of the result are joined with newlines; other block
        types are skipped.
        """
        result = self._expect_object(
            await self.request("tools/call", {"name": name, "arguments": arguments}), "tools/call"
        )

        content = result.get("content")
        if not isinstance(content, list):
            raise ServerConnectionError(f"{self.server_id} returned no content for {name}")

        texts = []
        for block in content:
            if not isinstance(block, dict) or block.get("type") != "text":
                continue
            text = block.get("text", "")
            if not isinstance(text, str):
                raise ServerConnectionError(f"{self.server_id} returned a non-text text block for {name}")
            texts.append(text)
        return "\n".join(texts)
