"""
Quiz Scam Tracker Configuration Manager
Builds the scanner configuration from the environment
"""

import os
from dataclasses import dataclass, field
from pathlib import Path
from typing import Optional

from shared.chains import get_chain_config, validate_chain_param
from shared.env import load_env
from shared.paths import README_FILE, ROOT_DIR, SCAM_DB_FILE


class ConfigError(RuntimeError):
    """Raised when required configuration is missing or invalid"""


@dataclass
class ScannerConfig:
    """Explorer access, discovery window, pacing and output locations"""

    api_key: str
    chain: str = "ethereum"
    api_url: str = "https://api.etherscan.io/v2/api"
    chain_id: int = 1

    lookback_blocks: int = 200
    batch_size: int = 5

    # Pacing, in seconds
    batch_delay: float = 1.1
    request_delay: float = 0.2
    retry_backoff: float = 1.0
    request_timeout: float = 15.0
    max_retries: int = 3

    # Native balance above which a scam is still ACTIVE
    active_threshold: float = 0.01

    db_path: Path = field(default=SCAM_DB_FILE)
    readme_path: Path = field(default=README_FILE)
    log_level: str = "INFO"

    def require_api_key(self) -> str:
        """Return the API key or abort the run when it is missing"""
        if not self.api_key:
            raise ConfigError("Missing ETHERSCAN_API_KEY")
        return self.api_key

    def summary(self) -> dict:
        """Non-secret view of the configuration for health output"""
        return {
            "chain": self.chain,
            "chain_id": self.chain_id,
            "api_url": self.api_url,
            "api_key_configured": bool(self.api_key),
            "lookback_blocks": self.lookback_blocks,
            "batch_size": self.batch_size,
            "batch_delay": self.batch_delay,
            "request_delay": self.request_delay,
            "max_retries": self.max_retries,
            "active_threshold": self.active_threshold,
            "db_path": str(self.db_path),
            "readme_path": str(self.readme_path),
        }


class ConfigManager:
    """Configuration manager for loading environment-specific settings"""

    def __init__(self, root: Optional[Path] = ROOT_DIR):
        self._root = root
        self._config: Optional[ScannerConfig] = None

    def _load_environment_config(self):
        """Load configuration from .env files and the process environment"""
        load_env(self._root)

        chain = validate_chain_param(os.getenv("SCAM_CHAIN", "ethereum"))
        chain_config = get_chain_config(chain)

        self._config = ScannerConfig(
            api_key=os.getenv(chain_config.api_key_env, "").strip(),
            chain=chain,
            api_url=os.getenv("ETHERSCAN_API_URL", chain_config.explorer_api_url),
            chain_id=chain_config.chain_id,
            lookback_blocks=int(os.getenv("SCAM_LOOKBACK_BLOCKS", "200")),
            batch_size=int(os.getenv("SCAM_BATCH_SIZE", "5")),
            batch_delay=float(os.getenv("SCAM_BATCH_DELAY", "1.1")),
            request_delay=float(os.getenv("SCAM_REQUEST_DELAY", "0.2")),
            retry_backoff=float(os.getenv("SCAM_RETRY_BACKOFF", "1.0")),
            request_timeout=float(os.getenv("SCAM_REQUEST_TIMEOUT", "15")),
            max_retries=int(os.getenv("SCAM_MAX_RETRIES", "3")),
            active_threshold=float(os.getenv("SCAM_ACTIVE_THRESHOLD", "0.01")),
            db_path=Path(os.getenv("SCAM_DB_FILE", str(SCAM_DB_FILE))),
            readme_path=Path(os.getenv("SCAM_README_FILE", str(README_FILE))),
            log_level=os.getenv("LOG_LEVEL", "INFO").upper(),
        )

        if self._config.batch_size < 1:
            raise ConfigError("SCAM_BATCH_SIZE must be at least 1")
        if self._config.max_retries < 1:
            raise ConfigError("SCAM_MAX_RETRIES must be at least 1")

    def get_config(self) -> ScannerConfig:
        """Get the current scanner configuration"""
        if self._config is None:
            self._load_environment_config()
        return self._config


# Global config manager instance
_config_manager: Optional[ConfigManager] = None


def get_config_manager() -> ConfigManager:
    """Get the global configuration manager instance"""
    global _config_manager
    if _config_manager is None:
        _config_manager = ConfigManager()
    return _config_manager


def get_config() -> ScannerConfig:
    """Get the current scanner configuration"""
    return get_config_manager().get_config()
