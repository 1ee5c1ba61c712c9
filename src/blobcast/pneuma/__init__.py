"""
Pneuma - On-chain interaction layer for Blobcast.

Provides the JSON-RPC client, the point evaluation precompile call and the
type-3 blob transaction builder.

Uses httpx + eth-account + eth-abi + rlp instead of the heavyweight web3.py.
"""
