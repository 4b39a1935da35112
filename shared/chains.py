"""
Chain configuration for the quiz scam tracker.
Only Ethereum is tracked.
"""

import os
from dataclasses import dataclass
from typing import Dict, Optional


@dataclass
class ChainConfig:
    """Configuration for a specific blockchain"""

    name: str
    chain_id: int
    explorer_url: str
    explorer_api_url: str
    api_key_env: str


class ChainRegistry:
    """Lookup table of supported chains"""

    def __init__(self):
        self.chains: Dict[str, ChainConfig] = {
            "ethereum": ChainConfig(
                name="Ethereum",
                chain_id=int(os.getenv("ETHEREUM_CHAIN_ID", "1")),
                explorer_url="https://etherscan.io",
                explorer_api_url="https://api.etherscan.io/v2/api",
                api_key_env="ETHERSCAN_API_KEY",
            ),
        }

    def get_chain_config(self, chain_name: str) -> Optional[ChainConfig]:
        """Get configuration for a specific chain"""
        return self.chains.get(chain_name.lower())

    def is_valid_chain(self, chain_name: str) -> bool:
        """Check if a chain name is supported"""
        return chain_name.lower() in self.chains

    def get_supported_chains(self) -> list:
        """Get list of supported chain names"""
        return list(self.chains.keys())


# Lazy-loaded global instance
_chain_registry = None


def get_chain_registry() -> ChainRegistry:
    """Get or create the global chain registry instance"""
    global _chain_registry
    if _chain_registry is None:
        _chain_registry = ChainRegistry()
    return _chain_registry


def validate_chain_param(chain: str) -> str:
    """Validate and normalize chain parameter"""
    if not chain:
        return "ethereum"  # Default

    normalized_chain = chain.lower()
    registry = get_chain_registry()
    if not registry.is_valid_chain(normalized_chain):
        raise ValueError(
            f"Unsupported chain: {chain}. Supported: {registry.get_supported_chains()}"
        )

    return normalized_chain


def get_chain_config(chain: str) -> Optional[ChainConfig]:
    """Get configuration for the specified chain"""
    return get_chain_registry().get_chain_config(chain)
