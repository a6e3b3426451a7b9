"""
nftledger Contract Standards.

- PSP34: Non-fungible token collection contract
- Factory for deploying new collections
"""

from .psp34 import PSP34Collection, PSP34Factory

__all__ = [
    "PSP34Collection",
    "PSP34Factory",
]
