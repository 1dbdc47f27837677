import pytest

from pocket_mcp.safety import DANGEROUS_METHODS, MethodRisk, classify, is_dangerous_method, method_risk


def test_known_dangerous_methods():
    assert classify("eth_getLogs") == {"dangerous": True, "risk": "log_fetch"}
    assert classify("eth_getBlockByHash")["risk"] == "block_fetch"
    assert method_risk("debug_traceTransaction") is MethodRisk.TRACE_FETCH
    assert method_risk("eth_getTransactionReceipt") is MethodRisk.OTHER


def test_unknown_methods_are_presumed_safe():
    assert classify("eth_blockNumber") == {"dangerous": False, "risk": None}
    assert not is_dangerous_method("some_futureMethod")
    assert not is_dangerous_method(None)
    assert not is_dangerous_method(123)  # type: ignore[arg-type]


def test_membership_is_case_sensitive():
    assert is_dangerous_method("eth_getLogs")
    assert not is_dangerous_method("ETH_GETLOGS")
    assert not is_dangerous_method("eth_getlogs")
    assert not is_dangerous_method(" eth_getLogs")


def test_dangerous_set_is_read_only():
    with pytest.raises(TypeError):
        DANGEROUS_METHODS["eth_call"] = MethodRisk.OTHER  # type: ignore[index]
