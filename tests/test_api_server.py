import httpx
import pytest
from fastapi.testclient import TestClient

from api_server.main import create_app
from api_server.services.chat_service import ChatService, parse_servers
from llm.base_client import LLMError
from mcp_server.dispatcher import RpcDispatcher
from tests.helpers import ScriptedLLM, bitcoin_aggregator, dispatcher_transport, text_reply, tool_reply


def refuse(request):
    raise httpx.ConnectError("connection refused", request=request)


def make_client(replies, servers=None):
    service = ChatService(
        ScriptedLLM(replies),
        servers or {"crypto": "http://crypto.test/"},
        http_transport=dispatcher_transport(RpcDispatcher(bitcoin_aggregator())),
    )
    return TestClient(create_app(service)), service


class TestChatEndpoint:
    def test_new_session(self):
        client, service = make_client([
            tool_reply("get_crypto_price", coin_id="bitcoin"),
            text_reply("Bitcoin is at $45,232.75."),
        ])

        response = client.post("/api/v1/chat", json={"message": "price of bitcoin?"})

        assert response.status_code == 200
        body = response.json()
        assert body["answer"] == "Bitcoin is at $45,232.75."
        assert body["session_id"] in service.sessions

    def test_session_is_reused(self):
        client, _ = make_client([text_reply("one"), text_reply("two")])

        session_id = client.post("/api/v1/chat", json={"message": "hi"}).json()["session_id"]
        again = client.post("/api/v1/chat", json={"message": "again", "session_id": session_id})

        assert again.json()["session_id"] == session_id

        info = client.get(f"/api/v1/sessions/{session_id}").json()
        assert info["turns"] == 4
        assert info["servers"] == ["crypto"]

    def test_chat_error_is_bad_gateway(self):
        client, service = make_client([LLMError("LLM request timed out")])

        response = client.post("/api/v1/chat", json={"message": "hi", "session_id": "s1"})

        assert response.status_code == 502
        assert response.json()["detail"] == "LLM request timed out"
        assert service.sessions["s1"].history == []

    def test_empty_message_rejected(self):
        client, _ = make_client([])

        assert client.post("/api/v1/chat", json={"message": ""}).status_code == 422

    def test_unreachable_server_still_chats(self):
        client, service = make_client([text_reply("No tools, sorry.")])
        service.http_transport = httpx.MockTransport(refuse)

        response = client.post("/api/v1/chat", json={"message": "hi", "session_id": "s1"})

        assert response.status_code == 200
        assert service.sessions["s1"].connections == {}


    def test_malformed_server_is_skipped(self):
        client, service = make_client([text_reply("No tools, sorry.")])
        service.http_transport = httpx.MockTransport(
            lambda request: httpx.Response(200, json={"jsonrpc": "2.0", "id": 1, "result": ["x"]})
        )

        response = client.post("/api/v1/chat", json={"message": "hi", "session_id": "s1"})

        assert response.status_code == 200
        assert service.sessions["s1"].connections == {}


class TestSessionEndpoints:
    def test_tools(self):
        client, _ = make_client([text_reply("hello")])
        session_id = client.post("/api/v1/chat", json={"message": "hi"}).json()["session_id"]

        tools = client.get(f"/api/v1/sessions/{session_id}/tools").json()

        assert {tool["name"] for tool in tools} == {"get_crypto_price", "get_multiple_prices"}
        assert all(tool["server_id"] == "crypto" for tool in tools)

    def test_unknown_session(self):
        client, _ = make_client([])

        assert client.get("/api/v1/sessions/missing").status_code == 404
        assert client.get("/api/v1/sessions/missing/tools").status_code == 404
        assert client.delete("/api/v1/sessions/missing").status_code == 404

    def test_end_session(self):
        client, service = make_client([text_reply("hello")])
        session_id = client.post("/api/v1/chat", json={"message": "hi"}).json()["session_id"]

        assert client.delete(f"/api/v1/sessions/{session_id}").status_code == 200
        assert session_id not in service.sessions
        assert session_id not in service._locks

    def test_sessions_are_kept_until_ended(self):
        client, service = make_client([text_reply("a"), text_reply("b")])

        client.post("/api/v1/chat", json={"message": "hi", "session_id": "s1"})
        client.post("/api/v1/chat", json={"message": "hi", "session_id": "s2"})

        assert set(service.sessions) == {"s1", "s2"}
        assert set(service._locks) == {"s1", "s2"}

        client.delete("/api/v1/sessions/s1")

        assert set(service.sessions) == {"s2"}
        assert set(service._locks) == {"s2"}


class TestHealth:
    def test_healthy(self):
        client, _ = make_client([])

        body = client.get("/health").json()

        assert body["status"] == "healthy"
        assert body["components"]["sessions"] == 0

    def test_degraded_without_service(self):
        client = TestClient(create_app())

        assert client.get("/health").json()["status"] == "degraded"
        assert client.post("/api/v1/chat", json={"message": "hi"}).status_code == 503


class TestParseServers:
    def test_parses_entries(self):
        assert parse_servers("crypto=http://localhost:4000, news = http://news:5000/rpc") == {
            "crypto": "http://localhost:4000",
            "news": "http://news:5000/rpc",
        }

    def test_skips_empty_entries(self):
        assert parse_servers("crypto=http://localhost:4000,") == {"crypto": "http://localhost:4000"}

    def test_rejects_bad_entry(self):
        with pytest.raises(ValueError):
            parse_servers("crypto")
