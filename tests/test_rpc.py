"""Tests for the JSON-RPC client (pneuma.rpc) over a mocked transport."""

from __future__ import annotations

import os
from unittest.mock import patch

import httpx
import pytest

from blobcast.pneuma import rpc
from blobcast.pneuma.rpc import (
    DEFAULT_CHAIN_ID,
    DEFAULT_RPC_URL,
    RPCError,
    estimate_gas,
    eth_call,
    get_blob_base_fee,
    get_chain_id,
    get_fee_data,
    get_network_chain_id,
    get_nonce,
    get_rpc_url,
    get_transaction,
    get_transaction_receipt,
    send_raw_transaction,
    wait_for_receipt,
)


class TestConfig:
    def test_defaults(self) -> None:
        assert get_rpc_url() == DEFAULT_RPC_URL
        assert get_chain_id() == DEFAULT_CHAIN_ID == 11155111

    def test_environment_overrides(self) -> None:
        os.environ["BLOBCAST_RPC_URL"] = "http://localhost:8545"
        os.environ["CHAIN_ID"] = "1337"
        assert get_rpc_url() == "http://localhost:8545"
        assert get_chain_id() == 1337


class TestRpcCall:
    def test_request_shape(self, fake_node) -> None:
        fake_node.results["eth_chainId"] = "0xaa36a7"
        assert get_network_chain_id(rpc_url="http://node") == 11155111
        assert fake_node.calls == [("eth_chainId", [])]

    def test_error_object(self, fake_node) -> None:
        fake_node.results["eth_sendRawTransaction"] = {
            "error": {"code": -32000, "message": "max fee per blob gas less than block blob gas fee"}
        }
        with pytest.raises(RPCError) as exc_info:
            send_raw_transaction("0x03", rpc_url="http://node")
        assert exc_info.value.code == -32000
        assert "blob gas" in exc_info.value.message
        assert exc_info.value.method == "eth_sendRawTransaction"
        assert exc_info.value.exit_code == 1

    def test_http_error_propagates(self, fake_node) -> None:
        fake_node.status_code = 502
        with pytest.raises(httpx.HTTPStatusError):
            get_nonce("0x" + "11" * 20, rpc_url="http://node")

    def test_non_dict_error(self) -> None:
        error = RPCError("eth_call", "execution reverted")
        assert error.message == "execution reverted"
        assert error.code is None


class TestWrappers:
    def test_get_nonce(self, fake_node) -> None:
        fake_node.results["eth_getTransactionCount"] = "0x2a"
        assert get_nonce("0xabc", block="pending", rpc_url="http://node") == 42
        assert fake_node.calls[0] == ("eth_getTransactionCount", ["0xabc", "pending"])

    def test_fee_data(self, fake_node) -> None:
        fake_node.results["eth_getBlockByNumber"] = {"baseFeePerGas": hex(10)}
        fake_node.results["eth_maxPriorityFeePerGas"] = hex(3)
        fees = get_fee_data(rpc_url="http://node")
        assert fees.base_fee_per_gas == 10
        assert fees.max_priority_fee_per_gas == 3
        assert fees.max_fee_per_gas == 23

    def test_fee_data_without_base_fee(self, fake_node) -> None:
        fake_node.results["eth_getBlockByNumber"] = {"number": "0x1"}
        with pytest.raises(RPCError, match="baseFeePerGas"):
            get_fee_data(rpc_url="http://node")

    def test_blob_base_fee(self, fake_node) -> None:
        fake_node.results["eth_blobBaseFee"] = "0x1"
        assert get_blob_base_fee(rpc_url="http://node") == 1

    def test_estimate_gas(self, fake_node) -> None:
        fake_node.results["eth_estimateGas"] = "0x5208"
        assert estimate_gas({"to": "0xabc"}, rpc_url="http://node") == 21000

    def test_get_transaction_unknown(self, fake_node) -> None:
        fake_node.results["eth_getTransactionByHash"] = None
        assert get_transaction("0x01", rpc_url="http://node") is None

    def test_eth_call(self, fake_node) -> None:
        fake_node.results["eth_call"] = "0x1234"
        assert eth_call("0x0a", "0xff", rpc_url="http://node") == "0x1234"
        assert fake_node.calls[0] == ("eth_call", [{"to": "0x0a", "data": "0xff"}, "latest"])

    def test_receipt(self, fake_node) -> None:
        fake_node.results["eth_getTransactionReceipt"] = {"status": "0x1"}
        assert get_transaction_receipt("0x01", rpc_url="http://node") == {"status": "0x1"}

    def test_default_url_used(self, fake_node) -> None:
        fake_node.results["eth_chainId"] = "0x1"
        with patch.object(rpc, "get_rpc_url", return_value="http://configured") as get_url:
            get_network_chain_id()
        get_url.assert_called_once()


class TestWaitForReceipt:
    def test_polls_until_found(self, fake_node) -> None:
        answers = iter([None, None, {"status": "0x1", "blockNumber": "0x10"}])
        fake_node.results["eth_getTransactionReceipt"] = lambda params: next(answers)
        with patch("blobcast.pneuma.rpc.time.sleep") as sleep:
            receipt = wait_for_receipt("0x01", poll_interval=0.5, rpc_url="http://node")
        assert receipt["blockNumber"] == "0x10"
        assert sleep.call_count == 2

    def test_timeout(self, fake_node) -> None:
        fake_node.results["eth_getTransactionReceipt"] = None
        with patch("blobcast.pneuma.rpc.time.sleep"):
            with pytest.raises(TimeoutError):
                wait_for_receipt("0x01", timeout=0, rpc_url="http://node")
