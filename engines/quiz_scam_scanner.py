#!/usr/bin/env python3
# SPDX-License-Identifier: BUSL-1.1
"""
quiz_scam_scanner.py - Quiz Scam Tracker Engine

Finds "quiz" honeypot contracts on Ethereum and tracks what they still hold.

Each run:
- refreshes the balance of every tracked contract
- scans a trailing window of blocks for calls to the quiz template's entry points
- pulls verified source for new candidates and checks the template fingerprints
- appends confirmed contracts to the JSON store
- rewrites the Markdown table between the README markers

The run is a single pass meant for an external scheduler (cron, CI).
"""

QUIZ_SCAM_SCANNER_VERSION = "1.0.0"

import argparse
import asyncio
import dataclasses
import json
import logging
import sys
from dataclasses import dataclass
from datetime import datetime
from pathlib import Path
from typing import Callable, Dict, Iterable, List, Optional, Tuple

from engines.detection_rules import DetectionRules, quiz_scam_rules
from shared.config import ConfigError, ScannerConfig, get_config
from shared.explorer_client import ExplorerClient
from shared.logging_setup import setup_logging
from shared.paths import ROOT_DIR
from shared.report_formatter import update_readme
from shared.scam_store import (
    TrackedContract,
    is_tracked,
    load_tracked_contracts,
    save_tracked_contracts,
    utc_now,
)

logger = logging.getLogger("quiz_scam_scanner")


@dataclass
class ScanSummary:
    """Counters for one run; failures are reported here, not raised"""

    tracked: int = 0
    refreshed: int = 0
    refresh_failures: int = 0
    candidates: int = 0
    new_scams: int = 0
    verify_failures: int = 0
    discovery_failed: bool = False

    @property
    def had_failures(self) -> bool:
        return bool(
            self.refresh_failures or self.verify_failures or self.discovery_failed
        )


class QuizScamScanner:
    def __init__(
        self,
        client: ExplorerClient,
        rules: Optional[DetectionRules] = None,
        batch_size: int = 5,
        batch_delay: float = 1.1,
    ):
        self.client = client
        self.rules = rules or quiz_scam_rules()
        self.batch_size = max(1, batch_size)
        self.batch_delay = batch_delay
        self.logger = logger

    def find_candidates(self, lookback: int) -> List[str]:
        """Addresses called with a suspicious selector in the last `lookback` blocks"""
        if lookback <= 0:
            return []

        current_block = self.client.get_latest_block_number()
        start_block = current_block - lookback
        self.logger.info(
            f"Scanning blocks {start_block} to {current_block} ({lookback} blocks)..."
        )

        blocks = [current_block - i for i in range(lookback) if current_block - i >= 0]
        candidates = asyncio.run(self._scan_blocks(blocks))
        self.logger.info(f"Scan complete. {len(candidates)} candidate addresses")
        return candidates

    async def _scan_blocks(self, blocks: List[int]) -> List[str]:
        # lowercased address -> address as first seen
        candidates: Dict[str, str] = {}
        total = len(blocks)

        async with self.client.open_async_session() as session:
            for i in range(0, total, self.batch_size):
                batch = blocks[i : i + self.batch_size]
                for transactions in await self.client.fetch_blocks(session, batch):
                    self._collect_candidates(transactions, candidates)

                await asyncio.sleep(self.batch_delay)
                progress = min(i + self.batch_size, total)
                self.logger.info(
                    f"Progress: {progress}/{total} blocks ({progress / total * 100:.1f}%)"
                )

        return list(candidates.values())

    def _collect_candidates(self, transactions: Iterable[dict], candidates: Dict[str, str]):
        for tx in transactions:
            if not isinstance(tx, dict):
                continue
            # Contract creations have no `to`; the deployed address is not captured
            to_address = tx.get("to")
            if not to_address:
                continue
            if self.rules.matches_call_data(tx.get("input") or ""):
                candidates.setdefault(to_address.lower(), to_address)

    def check_source_code(self, address: str) -> Optional[str]:
        """Contract name when the verified source matches every fingerprint, else None"""
        source = self.client.get_source_code(address)
        if source is None:
            return None
        if not self.rules.matches_source(source.source_code):
            return None
        return source.contract_name or "Unknown"


def refresh_tracked(
    contracts: List[TrackedContract],
    client: ExplorerClient,
    threshold: float,
    clock: Callable[[], datetime] = utc_now,
) -> Tuple[int, int]:
    """Refresh balances in place; returns (refreshed, failed)"""
    refreshed = failed = 0
    for contract in contracts:
        try:
            balance = client.get_balance(contract.address)
            contract.refresh(balance, clock(), threshold)
            refreshed += 1
        except Exception as e:
            failed += 1
            logger.error(f"Failed to update {contract.address}: {e}")
    return refreshed, failed


def verify_candidates(
    scanner: QuizScamScanner,
    contracts: List[TrackedContract],
    candidates: List[str],
    config: ScannerConfig,
    clock: Callable[[], datetime] = utc_now,
) -> Tuple[int, int]:
    """Append newly confirmed scams to `contracts`; returns (found, failed)"""
    found = failed = 0
    for address in candidates:
        if is_tracked(contracts, address):
            continue

        try:
            name = scanner.check_source_code(address)
            if not name:
                continue

            balance = scanner.client.get_balance(address)
            logger.warning(
                f"🚨 FOUND NEW SCAM: {name} @ {address} ({balance} ETH)"
            )
            contracts.append(
                TrackedContract.create(
                    address=address,
                    name=name,
                    balance=balance,
                    now=clock(),
                    chain=config.chain,
                    threshold=config.active_threshold,
                )
            )
            found += 1
        except Exception as e:
            failed += 1
            logger.error(f"Error checking {address}: {e}")
    return found, failed


def run_scan(
    config: ScannerConfig,
    client: Optional[ExplorerClient] = None,
    rules: Optional[DetectionRules] = None,
    clock: Callable[[], datetime] = utc_now,
) -> ScanSummary:
    """One full pass: load, refresh, discover, verify, persist, report"""
    config.require_api_key()
    client = client or ExplorerClient.from_config(config)
    scanner = QuizScamScanner(
        client,
        rules=rules,
        batch_size=config.batch_size,
        batch_delay=config.batch_delay,
    )
    summary = ScanSummary()

    contracts = load_tracked_contracts(config.db_path, config.active_threshold)
    logger.info(f"Loaded {len(contracts)} tracked scams.")

    logger.info("Updating balances of known scams...")
    summary.refreshed, summary.refresh_failures = refresh_tracked(
        contracts, client, config.active_threshold, clock
    )

    try:
        candidates = scanner.find_candidates(config.lookback_blocks)
    except Exception as e:
        logger.error(f"Candidate discovery failed: {e}")
        summary.discovery_failed = True
        candidates = []
    summary.candidates = len(candidates)

    logger.info(f"Analyzing {len(candidates)} candidate addresses...")
    summary.new_scams, summary.verify_failures = verify_candidates(
        scanner, contracts, candidates, config, clock
    )

    save_tracked_contracts(config.db_path, contracts)
    update_readme(config.readme_path, contracts, clock())

    summary.tracked = len(contracts)
    logger.info(
        f"Done. Database now has {summary.tracked} entries "
        f"({summary.new_scams} new, {summary.refresh_failures} refresh failures, "
        f"{summary.verify_failures} verification failures)."
    )
    return summary


def get_statistics(config: ScannerConfig) -> Dict:
    """Get statistics for --stats mode"""
    contracts = load_tracked_contracts(config.db_path, config.active_threshold)
    active = [c for c in contracts if c.is_active]
    first_seen = sorted(c.first_seen for c in contracts if c.first_seen)

    return {
        "version": QUIZ_SCAM_SCANNER_VERSION,
        "total_tracked": len(contracts),
        "active": len(active),
        "drained": len(contracts) - len(active),
        "active_balance": round(sum(c.balance for c in active), 6),
        "newest_first_seen": first_seen[-1] if first_seen else None,
        "db_path": str(config.db_path),
        "timestamp": utc_now().isoformat(),
    }


def _apply_overrides(config: ScannerConfig, args: argparse.Namespace) -> ScannerConfig:
    overrides = {}
    if args.lookback is not None:
        overrides["lookback_blocks"] = args.lookback
    if args.db:
        overrides["db_path"] = Path(args.db)
    if args.readme:
        overrides["readme_path"] = Path(args.readme)
    return dataclasses.replace(config, **overrides) if overrides else config


def main(argv: Optional[List[str]] = None):
    """Main function to run the Quiz Scam Tracker"""
    parser = argparse.ArgumentParser(
        description=f"Quiz Scam Tracker v{QUIZ_SCAM_SCANNER_VERSION}"
    )
    parser.add_argument("--health", "-H", action="store_true", help="Health check mode")
    parser.add_argument("--stats", action="store_true", help="Show statistics")
    parser.add_argument("--check", metavar="ADDRESS", help="Verify a single address")
    parser.add_argument("--lookback", type=int, help="Blocks to scan (default: 200)")
    parser.add_argument("--db", help="Path to the scam store JSON file")
    parser.add_argument("--readme", help="Path to the Markdown report")
    args = parser.parse_args(argv)

    # Health check mode
    if args.health:
        try:
            config = _apply_overrides(get_config(), args)
            health = {
                "engine": "quiz_scam_scanner",
                "version": QUIZ_SCAM_SCANNER_VERSION,
                "status": "healthy",
                "config": config.summary(),
                "timestamp": utc_now().isoformat(),
            }
            print(json.dumps(health, indent=2))
            return 0
        except Exception as e:
            print(
                json.dumps(
                    {
                        "engine": "quiz_scam_scanner",
                        "version": QUIZ_SCAM_SCANNER_VERSION,
                        "status": "unhealthy",
                        "error": str(e),
                    },
                    indent=2,
                )
            )
            return 1

    config = _apply_overrides(get_config(), args)

    # Stats mode
    if args.stats:
        print(json.dumps(get_statistics(config), indent=2))
        return 0

    setup_logging("quiz_scam_scanner", ROOT_DIR, config.log_level)

    # Single address mode
    if args.check:
        try:
            scanner = QuizScamScanner(ExplorerClient.from_config(config))
        except ConfigError as e:
            logger.critical(str(e))
            raise
        name = scanner.check_source_code(args.check)
        print(
            json.dumps(
                {"address": args.check, "is_quiz_scam": name is not None, "name": name},
                indent=2,
            )
        )
        return 0

    logger.info(f"🚀 Starting Quiz Scam Tracker v{QUIZ_SCAM_SCANNER_VERSION}")
    try:
        run_scan(config)
    except ConfigError as e:
        logger.critical(str(e))
        raise
    except KeyboardInterrupt:
        logger.info("Quiz Scam Tracker stopped by user")

    return 0


if __name__ == "__main__":
    sys.exit(main() or 0)
