#!/usr/bin/env python3
"""
blockchain_explorer_utils.py - Explorer link and address display helpers

Utility functions for linking tracked contracts to their explorer pages
and for rendering addresses compactly in reports.
"""

from shared.chains import get_chain_config

DEFAULT_EXPLORER_URL = "https://etherscan.io"


def generate_etherscan_link(address: str, chain: str = "ethereum") -> str:
    """
    Generate Etherscan-compatible address link on specified chain.

    Args:
        address: Contract or wallet address
        chain: Blockchain network name

    Returns:
        URL string to the explorer address page
    """
    chain_config = get_chain_config(chain or "ethereum")
    base_url = chain_config.explorer_url if chain_config else DEFAULT_EXPLORER_URL
    return f"{base_url}/address/{address}"


def shorten_address(address: str, keep: int = 8) -> str:
    """Leading characters of an address followed by an ellipsis."""
    return f"{address[:keep]}..."
