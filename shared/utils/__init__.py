# Shared utilities

from .blockchain_explorer_utils import generate_etherscan_link, shorten_address

__all__ = [
    "generate_etherscan_link",
    "shorten_address",
]
