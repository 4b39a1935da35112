"""
Persisted list of verified quiz scam contracts.

The store is a pretty-printed JSON array read at the start of a run and
rewritten wholesale at the end. An unreadable store is treated as empty
so a corrupt file never blocks a scan.
"""

import json
import logging
from dataclasses import asdict, dataclass
from datetime import datetime, timezone
from enum import Enum
from pathlib import Path
from typing import Any, Dict, List, Optional

logger = logging.getLogger(__name__)

DEFAULT_ACTIVE_THRESHOLD = 0.01
UNKNOWN_NAME = "Unknown"


class ContractStatus(str, Enum):
    ACTIVE = "ACTIVE"
    DRAINED = "DRAINED"


def derive_status(balance: float, threshold: float = DEFAULT_ACTIVE_THRESHOLD) -> str:
    """ACTIVE while the contract still holds more than the threshold."""
    if balance > threshold:
        return ContractStatus.ACTIVE.value
    return ContractStatus.DRAINED.value


def format_timestamp(moment: datetime) -> str:
    """UTC ISO-8601 with millisecond precision and a Z suffix."""
    moment = moment.astimezone(timezone.utc)
    return moment.strftime("%Y-%m-%dT%H:%M:%S.") + f"{moment.microsecond // 1000:03d}Z"


def utc_now() -> datetime:
    return datetime.now(timezone.utc)


@dataclass
class TrackedContract:
    """A verified scam contract and its latest known balance"""

    address: str
    chain: str
    balance: float
    name: str
    first_seen: str
    last_updated: str
    status: str

    @classmethod
    def create(
        cls,
        address: str,
        name: Optional[str],
        balance: float,
        now: datetime,
        chain: str = "ethereum",
        threshold: float = DEFAULT_ACTIVE_THRESHOLD,
    ) -> "TrackedContract":
        stamp = format_timestamp(now)
        return cls(
            address=address,
            chain=chain,
            balance=balance,
            name=name or UNKNOWN_NAME,
            first_seen=stamp,
            last_updated=stamp,
            status=derive_status(balance, threshold),
        )

    @classmethod
    def from_dict(
        cls, data: Dict[str, Any], threshold: float = DEFAULT_ACTIVE_THRESHOLD
    ) -> "TrackedContract":
        """Stored status is ignored and re-derived from the balance."""
        address = data["address"]
        if not isinstance(address, str) or not address:
            raise ValueError(f"invalid address {address!r}")
        balance = float(data.get("balance") or 0.0)
        return cls(
            address=address,
            chain=data.get("chain") or "ethereum",
            balance=balance,
            name=data.get("name") or UNKNOWN_NAME,
            first_seen=data.get("first_seen") or "",
            last_updated=data.get("last_updated") or "",
            status=derive_status(balance, threshold),
        )

    def to_dict(self) -> Dict[str, Any]:
        return asdict(self)

    def refresh(
        self,
        balance: float,
        now: datetime,
        threshold: float = DEFAULT_ACTIVE_THRESHOLD,
    ):
        """Record a fresh balance; first_seen is left alone."""
        self.balance = balance
        self.last_updated = format_timestamp(now)
        self.status = derive_status(balance, threshold)

    @property
    def is_active(self) -> bool:
        return self.status == ContractStatus.ACTIVE.value


def load_tracked_contracts(
    path: Path, threshold: float = DEFAULT_ACTIVE_THRESHOLD
) -> List[TrackedContract]:
    """Read the store; anything unreadable yields an empty list."""
    path = Path(path)
    if not path.exists():
        logger.info(f"No scam store at {path}, starting empty")
        return []

    try:
        with open(path, encoding="utf-8") as f:
            raw = json.load(f)
    except (OSError, ValueError) as e:
        logger.warning(f"Could not read scam store {path}: {e}; starting empty")
        return []

    if not isinstance(raw, list):
        logger.warning(f"Scam store {path} is not a JSON array; starting empty")
        return []

    contracts: List[TrackedContract] = []
    seen = set()
    for entry in raw:
        try:
            contract = TrackedContract.from_dict(entry, threshold)
        except (KeyError, TypeError, ValueError) as e:
            logger.warning(f"Skipping malformed store entry {entry!r}: {e}")
            continue

        key = contract.address.lower()
        if key in seen:
            logger.warning(f"Duplicate store entry for {contract.address} ignored")
            continue
        seen.add(key)
        contracts.append(contract)

    return contracts


def save_tracked_contracts(path: Path, contracts: List[TrackedContract]):
    path = Path(path)
    path.parent.mkdir(parents=True, exist_ok=True)
    with open(path, "w", encoding="utf-8") as f:
        json.dump([c.to_dict() for c in contracts], f, indent=2)
        f.write("\n")


def find_tracked(
    contracts: List[TrackedContract], address: str
) -> Optional[TrackedContract]:
    """Case-insensitive lookup by address"""
    needle = address.lower()
    for contract in contracts:
        if contract.address.lower() == needle:
            return contract
    return None


def is_tracked(contracts: List[TrackedContract], address: str) -> bool:
    return find_tracked(contracts, address) is not None
