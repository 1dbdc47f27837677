import pytest
from fastapi.testclient import TestClient

from pocket_mcp.server import app


@pytest.fixture
def client():
    return TestClient(app)


def test_services_route(client):
    resp = client.get("/tools/services", params={"category": "non-evm", "limit": 3})
    assert resp.status_code == 200
    data = resp.json()
    assert len(data["services"]) == 3
    assert all(service["category"] == "non-evm" for service in data["services"])
    assert "X-Request-ID" in resp.headers


def test_service_and_methods_routes(client):
    service = client.get("/tools/service/solana").json()
    assert service["protocol"] == "solana"
    assert "getSlot" in service["methods"]

    methods = client.get("/tools/methods/base", params={"network": "testnet"}).json()
    assert methods["service"] == "base-sepolia-testnet"
    assert "eth_getLogs" in methods["gatedMethods"]

    missing = client.get("/tools/service/atlantis").json()
    assert missing == {"error": "Blockchain service not found: atlantis (mainnet)"}
    assert client.get("/metrics").json()["tool_error"] == {"get_blockchain_service": 1}


def test_block_route_blocks_full_transactions(client):
    resp = client.get("/tools/block/ethereum/latest", params={"include_transactions": "true"})
    assert resp.status_code == 200
    data = resp.json()
    assert data["blocked"] is True
    assert data["error"].startswith("UNSAFE BLOCK QUERY BLOCKED")

    metrics = client.get("/metrics").json()
    assert metrics["tool_blocked"] == {"get_block_details": 1}
    assert metrics["tool_error"] == {}


def test_logs_route_blocks_unfiltered_filter(client):
    resp = client.post("/tools/logs", json={"blockchain": "ethereum", "filter": {"fromBlock": 1, "toBlock": 2}})
    data = resp.json()
    assert data["reason"] == "Unrestricted log queries can return massive amounts of data"


def test_query_route_blocks_history(client):
    resp = client.get("/tools/query", params={"q": "show the recent transactions of my wallet on base"})
    data = resp.json()
    assert data["blocked"] is True
    assert data["error"].startswith("UNSAFE QUERY BLOCKED")


def test_rpc_route_delegates(client, monkeypatch):
    from pocket_mcp import server as server_mod

    captured = {}

    async def fake_call_rpc_method(blockchain, method, params=None, network=None):
        captured.update(blockchain=blockchain, method=method, params=params, network=network)
        return {"blockchain": blockchain, "network": "mainnet", "service": "eth", "method": method, "result": "0x1"}

    monkeypatch.setattr(server_mod, "call_rpc_method", fake_call_rpc_method)
    resp = client.post("/tools/rpc", json={"blockchain": "ethereum", "method": "eth_chainId"})
    assert resp.json()["result"] == "0x1"
    assert captured == {"blockchain": "ethereum", "method": "eth_chainId", "params": None, "network": None}
    assert client.get("/metrics").json()["tool_success"] == {"call_rpc_method": 1}


def test_safety_routes(client):
    resp = client.post("/safety/check", json={"method": "debug_traceTransaction", "params": ["0xabc"]})
    data = resp.json()
    assert data["safe"] is False
    assert data["estimatedResponseKB"] == 1000
    assert data["classification"] == {"dangerous": True, "risk": "trace_fetch"}

    resp = client.post("/safety/check", json={"query": "what is the gas price on polygon"})
    assert resp.json() == {"safe": True}

    alternatives = client.get("/safety/alternatives").json()
    assert set(alternatives) == {
        "get_last_transaction",
        "get_transaction_history",
        "get_all_logs",
        "get_block_with_transactions",
    }


def test_rate_limited_route(client, monkeypatch):
    from pocket_mcp import server as server_mod

    async def deny(*_args, **_kwargs):
        return False

    monkeypatch.setattr(server_mod.rate_limiter, "allow", deny)
    resp = client.post("/safety/check", json={"query": "x"})
    assert resp.status_code == 429
    data = client.get("/metrics").json()
    assert data["rate_limited"] >= 1
    assert data["tool_error"].get("check_query_safety", 0) == 0
