import pytest

from pocket_mcp.config import SafetyConfig
from pocket_mcp.metrics import default_metrics
from pocket_mcp.pocket_api import NodeUnreachableError
from pocket_mcp.tools import (
    estimate_gas,
    get_block_details,
    get_transaction,
    get_transaction_receipt,
    search_logs,
)

TX_HASH = "0x" + "ab" * 32
ADDRESS = "0xd8dA6BF26964aF9D7eEd9e03E53415D37aA96045"
TOPIC = "0xddf252ad1be2c89b69c2b068fc378daa952ba7f163c4a11628f55a4df523b3ef"


class StubClient:
    def __init__(self, result=None, exc=None):
        self.result = result
        self.exc = exc
        self.calls = []

    async def _answer(self, name, *args, **kwargs):
        self.calls.append((name, args, kwargs))
        if self.exc is not None:
            raise self.exc
        return self.result

    async def fetch_transaction(self, service, tx_hash):
        return await self._answer("fetch_transaction", service.id, tx_hash)

    async def fetch_transaction_receipt(self, service, tx_hash):
        return await self._answer("fetch_transaction_receipt", service.id, tx_hash)

    async def estimate_gas(self, service, transaction):
        return await self._answer("estimate_gas", service.id, transaction)

    async def fetch_block(self, service, block_id, *, include_transactions=False):
        return await self._answer("fetch_block", service.id, block_id, include_transactions=include_transactions)

    async def fetch_logs(self, service, log_filter):
        return await self._answer("fetch_logs", service.id, log_filter)


@pytest.mark.asyncio
async def test_get_transaction_success_and_not_found():
    client = StubClient(result={"hash": TX_HASH, "blockNumber": "0x10"})
    result = await get_transaction("ethereum", TX_HASH, client=client)
    assert result["service"] == "eth"
    assert result["result"]["blockNumber"] == "0x10"
    assert client.calls == [("fetch_transaction", ("eth", TX_HASH), {})]

    missing = await get_transaction("base", TX_HASH, client=StubClient(result=None))
    assert missing == {"error": "Transaction not found."}


@pytest.mark.asyncio
async def test_get_transaction_validation():
    client = StubClient()
    assert await get_transaction("ethereum", "0x1234", client=client) == {"error": "Invalid transaction hash."}
    result = await get_transaction("solana", TX_HASH, client=client)
    assert result["error"].startswith("Solana is not an EVM chain")
    assert await get_transaction("ethereum", TX_HASH, network="regtest", client=client) == {
        "error": "Invalid network. Use mainnet or testnet."
    }
    assert client.calls == []


@pytest.mark.asyncio
async def test_get_transaction_receipt_records_estimate():
    client = StubClient(result={"status": "0x1", "logs": []})
    result = await get_transaction_receipt("ethereum", TX_HASH, network="testnet", client=client)
    assert result["service"] == "eth-sepolia-testnet"
    assert result["network"] == "testnet"
    assert default_metrics.snapshot()["estimated_response_kb"] == {"get_transaction_receipt": 10}


@pytest.mark.asyncio
async def test_get_transaction_receipt_node_unreachable():
    client = StubClient(exc=NodeUnreachableError("timeout"))
    assert await get_transaction_receipt("ethereum", TX_HASH, client=client) == {"error": "Node unreachable"}


@pytest.mark.asyncio
async def test_estimate_gas_validation_and_success():
    client = StubClient(result="0x5208")
    assert await estimate_gas("ethereum", {}, client=client) == {"error": "Transaction object is required."}
    assert await estimate_gas("ethereum", "0x", client=client) == {"error": "Transaction object is required."}
    assert await estimate_gas("ethereum", {"to": "0x123"}, client=client) == {"error": "Invalid 'to' address."}

    transaction = {"from": ADDRESS, "to": ADDRESS, "value": "0x1"}
    result = await estimate_gas("ethereum", transaction, client=client)
    assert result["result"] == "0x5208"
    assert client.calls == [("estimate_gas", ("eth", transaction), {})]


@pytest.mark.asyncio
async def test_get_block_details_header_only():
    client = StubClient(result={"number": "0x64", "transactions": []})
    result = await get_block_details("ethereum", 100, client=client)
    assert result["result"]["number"] == "0x64"
    assert client.calls == [("fetch_block", ("eth", "0x64"), {"include_transactions": False})]
    assert default_metrics.snapshot()["estimated_response_kb"] == {"get_block_details": 5}


@pytest.mark.asyncio
async def test_get_block_details_with_transactions_is_blocked():
    client = StubClient(result={})
    result = await get_block_details("ethereum", "latest", include_transactions=True, client=client)
    assert result["blocked"] is True
    assert result["error"].startswith("UNSAFE BLOCK QUERY BLOCKED")
    assert result["reason"] == "Requesting blocks with full transactions is disabled to prevent context overflow"
    assert client.calls == []
    assert default_metrics.snapshot()["tool_blocked"] == {"get_block_details": 1}


@pytest.mark.asyncio
async def test_get_block_details_with_transactions_blocked_even_when_allowed():
    client = StubClient(result={})
    safety = SafetyConfig(allow_blocks_with_transactions=True)
    result = await get_block_details("ethereum", "latest", True, client=client, safety_config=safety)
    assert result["reason"] == "Blocks can contain 100+ transactions, causing session crashes"
    assert client.calls == []


@pytest.mark.asyncio
async def test_get_block_details_invalid_and_missing():
    client = StubClient(result=None)
    assert await get_block_details("ethereum", "yesterday", client=client) == {"error": "Invalid block number."}
    assert await get_block_details("ethereum", -1, client=client) == {"error": "Invalid block number."}
    assert await get_block_details("ethereum", "latest", client=client) == {"error": "Block not found."}


@pytest.mark.asyncio
async def test_search_logs_normalizes_bounds():
    client = StubClient(result=[{"logIndex": "0x0"}, {"logIndex": "0x1"}])
    log_filter = {"fromBlock": 100, "toBlock": "105", "address": ADDRESS, "topics": [TOPIC]}
    result = await search_logs("ethereum", log_filter, client=client)
    assert result["count"] == 2
    sent = client.calls[0][1][1]
    assert sent["fromBlock"] == "0x64"
    assert sent["toBlock"] == "0x69"
    assert log_filter["fromBlock"] == 100


@pytest.mark.asyncio
async def test_search_logs_open_ended_range_allowed():
    client = StubClient(result=[])
    result = await search_logs("ethereum", {"fromBlock": 100, "toBlock": "latest", "topics": [TOPIC]}, client=client)
    assert result["count"] == 0
    assert client.calls[0][1][1]["toBlock"] == "latest"


@pytest.mark.asyncio
async def test_search_logs_blocked_cases():
    client = StubClient(result=[])
    wide = await search_logs("ethereum", {"fromBlock": 100, "toBlock": 200, "address": ADDRESS}, client=client)
    assert wide["blocked"] is True
    assert wide["reason"] == "Block range 100 exceeds maximum 10"

    unfiltered = await search_logs("ethereum", {"fromBlock": 100, "toBlock": 101}, client=client)
    assert unfiltered["reason"] == "Unrestricted log queries can return massive amounts of data"

    unparsable = await search_logs("ethereum", {"fromBlock": "earliest", "toBlock": 5, "address": ADDRESS}, client=client)
    assert unparsable["reason"] == "Unable to validate block range safety"

    not_an_object = await search_logs("ethereum", "0x1", client=client)
    assert not_an_object["blocked"] is True

    assert client.calls == []
    assert default_metrics.snapshot()["tool_blocked"] == {"search_logs": 4}


@pytest.mark.asyncio
async def test_search_logs_respects_wider_ceiling():
    client = StubClient(result=[])
    safety = SafetyConfig(max_block_range=200)
    result = await search_logs(
        "ethereum", {"fromBlock": 100, "toBlock": 200, "address": ADDRESS}, client=client, safety_config=safety
    )
    assert result["count"] == 0
