from .config import ConfigError, ScannerConfig, get_config
from .env import load_env
from .explorer_client import ContractSource, ExplorerAPIError, ExplorerClient
from .logging_setup import setup_logging
from .paths import ROOT_DIR as project_root
from .report_formatter import render_scam_table, replace_marker_block, update_readme
from .scam_store import (
    ContractStatus,
    TrackedContract,
    derive_status,
    is_tracked,
    load_tracked_contracts,
    save_tracked_contracts,
)
