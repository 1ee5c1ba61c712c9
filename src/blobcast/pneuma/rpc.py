"""
JSON-RPC client for the target network (Sepolia by default).

Thin request helper over httpx: every call opens a short-lived client,
posts one JSON-RPC request and returns its ``result`` field.
"""

from __future__ import annotations

import os
import time
from dataclasses import dataclass
from typing import Any, Optional

import httpx

# Default RPC endpoint (Sepolia)
DEFAULT_RPC_URL = "https://11155111.rpc.thirdweb.com"
DEFAULT_CHAIN_ID = 11_155_111  # Sepolia

RPC_TIMEOUT = 30


class RPCError(RuntimeError):
    """JSON-RPC error object returned by the node."""

    exit_code: int = 1

    def __init__(self, method: str, error: Any) -> None:
        self.method = method
        if isinstance(error, dict):
            self.code = error.get("code")
            self.message = error.get("message", "")
            self.data = error.get("data")
        else:
            self.code = None
            self.message = str(error)
            self.data = None
        super().__init__(f"RPC error from {method}: {self.message} (code {self.code})")


def get_rpc_url() -> str:
    """Get the RPC URL from environment or default."""
    return os.environ.get("BLOBCAST_RPC_URL", DEFAULT_RPC_URL)


def get_chain_id() -> int:
    """Get the configured chain ID from environment or default."""
    return int(os.environ.get("CHAIN_ID", str(DEFAULT_CHAIN_ID)))


def _to_int(value: Any) -> int:
    if isinstance(value, int):
        return value
    return int(value, 16)


def _rpc_call(method: str, params: list, rpc_url: Optional[str] = None) -> Any:
    """
    Make a JSON-RPC call.

    Args:
        method: RPC method name (e.g., "eth_call")
        params: RPC parameters
        rpc_url: RPC endpoint URL

    Returns:
        Result field from the RPC response

    Raises:
        RPCError: If the node answers with an error object
        httpx.HTTPStatusError: On a non-2xx HTTP status
    """
    url = rpc_url or get_rpc_url()
    payload = {
        "jsonrpc": "2.0",
        "method": method,
        "params": params,
        "id": 1,
    }

    with httpx.Client(timeout=RPC_TIMEOUT) as client:
        response = client.post(url, json=payload)
        response.raise_for_status()
        data = response.json()

    if "error" in data:
        raise RPCError(method, data["error"])

    return data.get("result")


@dataclass(frozen=True)
class FeeData:
    """EIP-1559 fee suggestion: max fee = 2 * base fee + priority fee."""
    base_fee_per_gas: int
    max_priority_fee_per_gas: int
    max_fee_per_gas: int


def get_network_chain_id(rpc_url: Optional[str] = None) -> int:
    """Chain ID reported by the node (eth_chainId)."""
    return _to_int(_rpc_call("eth_chainId", [], rpc_url=rpc_url))


def get_nonce(address: str, block: str = "latest", rpc_url: Optional[str] = None) -> int:
    """
    Get transaction nonce for an address.

    Args:
        address: 0x-prefixed address
        block: Block tag ("latest" or "pending")
        rpc_url: RPC endpoint URL
    """
    result = _rpc_call("eth_getTransactionCount", [address, block], rpc_url=rpc_url)
    return _to_int(result)


def get_fee_data(rpc_url: Optional[str] = None) -> FeeData:
    """Suggest EIP-1559 fees from the latest block and the node's tip estimate."""
    block = _rpc_call("eth_getBlockByNumber", ["latest", False], rpc_url=rpc_url)
    if not block or "baseFeePerGas" not in block:
        raise RPCError("eth_getBlockByNumber", "latest block has no baseFeePerGas")
    base_fee = _to_int(block["baseFeePerGas"])
    priority_fee = _to_int(_rpc_call("eth_maxPriorityFeePerGas", [], rpc_url=rpc_url))
    return FeeData(
        base_fee_per_gas=base_fee,
        max_priority_fee_per_gas=priority_fee,
        max_fee_per_gas=base_fee * 2 + priority_fee,
    )


def get_blob_base_fee(rpc_url: Optional[str] = None) -> int:
    """Current blob base fee in wei (eth_blobBaseFee)."""
    return _to_int(_rpc_call("eth_blobBaseFee", [], rpc_url=rpc_url))


def estimate_gas(tx: dict[str, Any], rpc_url: Optional[str] = None) -> int:
    """Estimate execution gas for a call object (eth_estimateGas)."""
    return _to_int(_rpc_call("eth_estimateGas", [tx], rpc_url=rpc_url))


def send_raw_transaction(raw_tx: str, rpc_url: Optional[str] = None) -> str:
    """
    Send a signed raw transaction.

    Args:
        raw_tx: 0x-prefixed hex encoded signed transaction

    Returns:
        Transaction hash (0x-prefixed hex)
    """
    return _rpc_call("eth_sendRawTransaction", [raw_tx], rpc_url=rpc_url)


def get_transaction(tx_hash: str, rpc_url: Optional[str] = None) -> Optional[dict]:
    """Look up a transaction by hash; None while the node does not know it."""
    return _rpc_call("eth_getTransactionByHash", [tx_hash], rpc_url=rpc_url)


def get_transaction_receipt(tx_hash: str, rpc_url: Optional[str] = None) -> Optional[dict]:
    return _rpc_call("eth_getTransactionReceipt", [tx_hash], rpc_url=rpc_url)


def eth_call(
    to: str,
    data: str,
    block: str = "latest",
    rpc_url: Optional[str] = None,
) -> str:
    """
    Execute a read-only call.

    Args:
        to: 0x-prefixed target address
        data: 0x-prefixed calldata
        block: Block tag

    Returns:
        0x-prefixed return data
    """
    return _rpc_call("eth_call", [{"to": to, "data": data}, block], rpc_url=rpc_url)


def wait_for_receipt(
    tx_hash: str,
    timeout: int = 120,
    poll_interval: float = 2.0,
    rpc_url: Optional[str] = None,
) -> dict:
    """
    Wait for a transaction receipt.

    Args:
        tx_hash: Transaction hash
        timeout: Maximum wait time in seconds
        poll_interval: Polling interval in seconds
        rpc_url: RPC endpoint URL

    Returns:
        Transaction receipt dict

    Raises:
        TimeoutError: If receipt not found within timeout
    """
    start = time.time()
    while time.time() - start < timeout:
        receipt = get_transaction_receipt(tx_hash, rpc_url=rpc_url)
        if receipt is not None:
            return receipt
        time.sleep(poll_interval)

    raise TimeoutError(f"Transaction {tx_hash} not confirmed within {timeout}s")
