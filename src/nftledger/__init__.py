"""
nftledger - PSP34 Non-Fungible Token Ledger

Bookkeeping core for NFT collections: ownership, approvals, per-token
attributes and enumerable token listings, kept mutually consistent under
mint, burn and transfer.

Main Components:
- core.ledger: OwnershipLedger state aggregate
- core.enumeration: swap-and-pop enumeration indices
- core.allowances: single-token and blanket approvals
- core.attributes: per-token key/value storage
- core.contracts: deployable PSP34 collection and factory
"""

__version__ = "0.1.0"
__author__ = "nftledger Development Team"

__all__ = []
