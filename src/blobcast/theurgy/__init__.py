"""
Theurgy - Command implementations for Blobcast.

Each module corresponds to a top-level CLI command:
- send:        Build, sign and broadcast a blob transaction
- verify:      Run the KZG / wallet round-trip checks on a payload
- bench:       Time commitments and proofs on both KZG backends
- evaluate:    Point evaluation at a root of unity (optionally on-chain)
- lookup:      Show a transaction and its receipt
- fetch_setup: Download the KZG trusted setup
- keygen:      Generate a devnet signing key
"""
