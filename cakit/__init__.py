"""
Chain Agent Kit - agent tools for Solana and EVM blockchain interactions.

This package provides tools for cross-chain swaps and bridges, Jupiter swaps,
pump.fun trading, transfers and ERC-20 approvals. Transactions are signed by
the signer bound to the current request (see cakit.signer.context).

Tools are registered as plugins via entry points in pyproject.toml.
"""

__version__ = "1.0.0"
