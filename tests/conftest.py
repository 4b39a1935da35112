"""
Shared fixtures and fakes for the quiz scam tracker tests.
"""

import sys
from datetime import datetime, timezone
from pathlib import Path

import pytest

# Add project root to path
sys.path.insert(0, str(Path(__file__).parent.parent))

from shared.config import ScannerConfig  # noqa: E402
from shared.explorer_client import ContractSource  # noqa: E402

SCAM_SOURCE = """
pragma solidity ^0.4.20;
contract QUIZ_GAME {
    function Try(string _response) external payable {
        require(msg.sender == tx.origin);
        if (responseHash == keccak256(_response) && msg.value > 1 ether) {
            msg.sender.transfer(this.balance);
        }
    }
    string public question;
    bytes32 responseHash;
    mapping (bytes32=>bool) admin;
    function Start(string _question, string _response) public payable isAdmin {
        if (responseHash == 0x0) {
            responseHash = keccak256(_response);
            question = _question;
        }
    }
    modifier isAdmin() { require(admin[keccak256(msg.sender)]); _; }
}
"""

START_SELECTOR = "0xc76de3e9"


class _NullAsyncSession:
    async def __aenter__(self):
        return self

    async def __aexit__(self, exc_type, exc, tb):
        return False


class FakeExplorerClient:
    """In-memory stand-in for ExplorerClient"""

    def __init__(self, latest_block=1000, blocks=None, balances=None, sources=None):
        self.latest_block = latest_block
        self.blocks = blocks or {}
        self.balances = {k.lower(): v for k, v in (balances or {}).items()}
        self.sources = {k.lower(): v for k, v in (sources or {}).items()}
        self.failing_balances = set()
        self.fetched_batches = []
        self.source_lookups = []

    def get_latest_block_number(self):
        if isinstance(self.latest_block, Exception):
            raise self.latest_block
        return self.latest_block

    def open_async_session(self):
        return _NullAsyncSession()

    async def fetch_blocks(self, session, block_numbers):
        self.fetched_batches.append(list(block_numbers))
        return [self.blocks.get(number, []) for number in block_numbers]

    def get_balance(self, address):
        if address.lower() in self.failing_balances:
            raise RuntimeError("explorer exploded")
        return self.balances.get(address.lower(), 0.0)

    def get_source_code(self, address):
        self.source_lookups.append(address)
        return self.sources.get(address.lower())


def scam_source(name="QUIZ_GAME", source_code=SCAM_SOURCE):
    return ContractSource(source_code=source_code, contract_name=name)


def fixed_clock(moment):
    return lambda: moment


@pytest.fixture
def now():
    return datetime(2025, 3, 1, 12, 30, 45, 123000, tzinfo=timezone.utc)


@pytest.fixture
def scanner_config(tmp_path):
    return ScannerConfig(
        api_key="test-key",
        lookback_blocks=10,
        batch_delay=0,
        request_delay=0,
        retry_backoff=0,
        db_path=tmp_path / "scams.json",
        readme_path=tmp_path / "README.md",
    )
