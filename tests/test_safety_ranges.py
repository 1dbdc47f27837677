import pytest

from pocket_mcp.config import SafetyConfig
from pocket_mcp.safety import check_block_query, check_log_query, parse_block_number

DEFAULT = SafetyConfig()
TIGHT = SafetyConfig(max_block_range=10)


def test_block_without_transactions_is_safe():
    verdict = check_block_query("eth_getBlockByNumber", ["latest", False], DEFAULT)
    assert verdict.safe
    assert verdict.reason is None and verdict.suggestion is None


def test_block_flag_absent_is_safe():
    assert check_block_query("eth_getBlockByNumber", ["latest"], DEFAULT).safe
    assert check_block_query("eth_getBlockByHash", [], DEFAULT).safe
    assert check_block_query("eth_getBlockByNumber", None, DEFAULT).safe


def test_block_with_transactions_disabled_by_policy():
    verdict = check_block_query("eth_getBlockByNumber", ["latest", True], DEFAULT)
    assert not verdict.safe
    assert "disabled" in verdict.reason
    assert "by hash" in verdict.suggestion


def test_block_with_transactions_still_refused_when_policy_allows():
    # allow_blocks_with_transactions does not lift the refusal; the second rule always applies.
    permissive = SafetyConfig(allow_blocks_with_transactions=True)
    verdict = check_block_query("eth_getBlockByHash", ["0xabc", True], permissive)
    assert not verdict.safe
    assert "100+ transactions" in verdict.reason
    assert "block explorer" in verdict.suggestion


def test_block_flag_as_string_true_is_refused():
    assert not check_block_query("eth_getBlockByNumber", ["latest", "true"], DEFAULT).safe
    assert check_block_query("eth_getBlockByNumber", ["latest", "false"], DEFAULT).safe


def test_block_check_ignores_other_methods():
    assert check_block_query("eth_getBalance", ["0xabc", True], DEFAULT).safe


def test_log_range_exceeds_maximum():
    verdict = check_log_query([{"fromBlock": 100, "toBlock": 115, "address": "0xabc"}], TIGHT)
    assert not verdict.safe
    assert verdict.reason == "Block range 15 exceeds maximum 10"
    assert verdict.suggestion


def test_log_range_within_maximum_with_address():
    assert check_log_query([{"fromBlock": 100, "toBlock": 105, "address": "0xabc"}], TIGHT).safe


def test_log_range_boundary_is_inclusive():
    assert check_log_query([{"fromBlock": 100, "toBlock": 110, "topics": ["0xddf2"]}], TIGHT).safe
    assert not check_log_query([{"fromBlock": 100, "toBlock": 111, "topics": ["0xddf2"]}], TIGHT).safe


def test_log_open_ended_without_filters_is_unsafe():
    verdict = check_log_query([{"fromBlock": 100, "toBlock": "latest"}], DEFAULT)
    assert not verdict.safe
    assert "Unrestricted" in verdict.reason
    assert "address or topic" in verdict.suggestion


def test_log_open_ended_with_address_skips_range():
    assert check_log_query([{"fromBlock": 1, "address": "0xabc"}], DEFAULT).safe
    assert check_log_query([{"fromBlock": 1, "toBlock": "latest", "address": "0xabc"}], DEFAULT).safe


def test_log_hex_and_decimal_bounds():
    assert check_log_query([{"fromBlock": "0x64", "toBlock": "0x69", "address": "0xabc"}], TIGHT).safe
    assert check_log_query([{"fromBlock": "100", "toBlock": "105", "address": "0xabc"}], TIGHT).safe
    verdict = check_log_query([{"fromBlock": "0x64", "toBlock": "200", "address": "0xabc"}], TIGHT)
    assert verdict.reason == "Block range 100 exceeds maximum 10"


def test_log_unparseable_bound_is_unsafe():
    verdict = check_log_query([{"fromBlock": "earliest", "toBlock": "0x10", "address": "0xabc"}], DEFAULT)
    assert not verdict.safe
    assert verdict.reason == "Unable to validate block range safety"
    assert verdict.suggestion == "Specify explicit numeric block ranges"

    assert not check_log_query([{"fromBlock": "0xzz", "toBlock": 5, "address": "0xabc"}], DEFAULT).safe
    assert not check_log_query([{"fromBlock": True, "toBlock": 5, "address": "0xabc"}], DEFAULT).safe


def test_log_signed_or_underscored_hex_bound_is_unsafe():
    verdict = check_log_query([{"fromBlock": "0x0", "toBlock": "0x-1", "address": "0xabc"}], DEFAULT)
    assert not verdict.safe
    assert verdict.reason == "Unable to validate block range safety"
    assert not check_log_query([{"fromBlock": "0x1_0", "toBlock": "0x12", "address": "0xabc"}], DEFAULT).safe


def test_log_zero_from_block_is_range_checked():
    assert not check_log_query([{"fromBlock": 0, "toBlock": 1000, "address": "0xabc"}], DEFAULT).safe


def test_log_filter_missing_or_malformed_is_unsafe():
    assert not check_log_query([], DEFAULT).safe
    assert not check_log_query(None, DEFAULT).safe
    assert not check_log_query(["not-a-filter"], DEFAULT).safe
    assert not check_log_query([{}], DEFAULT).safe


def test_log_empty_constraints_do_not_count():
    assert not check_log_query([{"fromBlock": 1, "toBlock": 2, "address": ""}], DEFAULT).safe
    assert not check_log_query([{"fromBlock": 1, "toBlock": 2, "topics": []}], DEFAULT).safe
    assert not check_log_query([{"fromBlock": 1, "toBlock": 2, "topics": [None, None]}], DEFAULT).safe
    assert check_log_query([{"fromBlock": 1, "toBlock": 2, "topics": [None, "0xabc"]}], DEFAULT).safe
    assert check_log_query([{"fromBlock": 1, "toBlock": 2, "address": ["0xabc", "0xdef"]}], DEFAULT).safe


@pytest.mark.parametrize(
    "value, expected",
    [
        (10, 10),
        ("0x0a", 10),
        ("0XFF", 255),
        ("42", 42),
        (7.0, 7),
        (-1, None),
        (True, None),
        ("0x", None),
        ("latest", None),
        ("1e3", None),
        ("0x-5", None),
        ("0x +5", None),
        ("0xf_f", None),
        ("1_000", None),
        ("+7", None),
        ("\u0663", None),
        (None, None),
    ],
)
def test_parse_block_number(value, expected):
    assert parse_block_number(value) == expected
