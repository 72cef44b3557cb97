"""
Pneuma - Contract interaction layer for clause-based chains.

Builds clauses from ABIs, submits them as one transaction, polls for the
receipt and decodes per-clause events.

Uses httpx + eth-abi + eth-hash; signing is delegated to an external wallet.
"""
