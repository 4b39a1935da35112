#!/usr/bin/env python3
"""
explorer_client.py - Etherscan v2 API client

Wraps the handful of explorer calls the scam tracker needs:
- latest block number (proxy/eth_blockNumber)
- native balance (account/balance)
- full blocks with transaction bodies (proxy/eth_getBlockByNumber)
- verified source code (contract/getsourcecode)

Every call goes through the same retry policy: an explicit NOTOK answer,
a transport error or an unparsable body is retried with linear backoff,
and once retries are exhausted the call degrades to {"status": "0"}
instead of raising. Successful calls are followed by a fixed delay to
stay under the explorer's rate limit.
"""

import asyncio
import logging
import time
from dataclasses import dataclass
from typing import Any, Callable, Dict, List, Optional, Sequence

import aiohttp
import requests
from web3 import Web3

FAILURE_SENTINEL = {"status": "0"}


class ExplorerAPIError(Exception):
    """Explorer answered NOTOK or returned a payload of the wrong shape"""


@dataclass
class ContractSource:
    """Verified source text and the contract name reported alongside it"""

    source_code: str
    contract_name: str


class ExplorerClient:
    def __init__(
        self,
        api_key: str,
        api_url: str = "https://api.etherscan.io/v2/api",
        chain_id: int = 1,
        max_retries: int = 3,
        retry_backoff: float = 1.0,
        request_delay: float = 0.2,
        request_timeout: float = 15.0,
        session: Optional[requests.Session] = None,
        sleep: Callable[[float], None] = time.sleep,
    ):
        self.api_key = api_key
        self.api_url = api_url
        self.chain_id = chain_id
        self.max_retries = max_retries
        self.retry_backoff = retry_backoff
        self.request_delay = request_delay
        self.request_timeout = request_timeout
        self.session = session or requests.Session()
        self._sleep = sleep
        self.logger = logging.getLogger(__name__)

    @classmethod
    def from_config(cls, config) -> "ExplorerClient":
        """Build a client from a ScannerConfig"""
        return cls(
            api_key=config.require_api_key(),
            api_url=config.api_url,
            chain_id=config.chain_id,
            max_retries=config.max_retries,
            retry_backoff=config.retry_backoff,
            request_delay=config.request_delay,
            request_timeout=config.request_timeout,
        )

    def _build_query(self, params: Dict[str, str]) -> Dict[str, str]:
        query = {"apikey": self.api_key, "chainid": str(self.chain_id)}
        query.update(params)
        return query

    @staticmethod
    def _check_payload(data: Any) -> Dict[str, Any]:
        if not isinstance(data, dict):
            raise ExplorerAPIError(f"Unexpected payload type: {type(data).__name__}")
        if data.get("status") == "0" and data.get("message") == "NOTOK":
            raise ExplorerAPIError(str(data.get("result")))
        return data

    def request(self, params: Dict[str, str]) -> Dict[str, Any]:
        """Issue one explorer call with retries; never raises"""
        query = self._build_query(params)

        for attempt in range(1, self.max_retries + 1):
            try:
                response = self.session.get(
                    self.api_url, params=query, timeout=self.request_timeout
                )
                response.raise_for_status()
                data = self._check_payload(response.json())
                self._sleep(self.request_delay)
                return data
            except (requests.RequestException, ValueError, ExplorerAPIError) as e:
                if attempt == self.max_retries:
                    self.logger.error(
                        f"Request {params.get('module')}/{params.get('action')} "
                        f"failed after {self.max_retries} attempts: {e}"
                    )
                    return dict(FAILURE_SENTINEL)
                self.logger.debug(
                    f"Attempt {attempt} for {params.get('action')} failed: {e}"
                )
                self._sleep(self.retry_backoff * attempt)

        return dict(FAILURE_SENTINEL)

    def get_latest_block_number(self) -> int:
        data = self.request({"module": "proxy", "action": "eth_blockNumber"})
        result = data.get("result")
        if not isinstance(result, str) or not result.startswith("0x"):
            raise ExplorerAPIError(f"Malformed eth_blockNumber response: {data}")
        try:
            return int(result, 16)
        except ValueError as e:
            raise ExplorerAPIError(f"Malformed block number {result!r}") from e

    def get_balance(self, address: str) -> float:
        """Native balance in ether; 0.0 whenever the explorer does not answer OK"""
        data = self.request(
            {
                "module": "account",
                "action": "balance",
                "address": address,
                "tag": "latest",
            }
        )
        if data.get("status") != "1":
            return 0.0
        try:
            return float(Web3.from_wei(int(data["result"]), "ether"))
        except (KeyError, TypeError, ValueError):
            self.logger.warning(f"Unparsable balance for {address}: {data.get('result')}")
            return 0.0

    @staticmethod
    def _block_params(block_number: int) -> Dict[str, str]:
        return {
            "module": "proxy",
            "action": "eth_getBlockByNumber",
            "tag": hex(block_number),
            "boolean": "true",
        }

    @staticmethod
    def _transactions_from(data: Dict[str, Any]) -> List[Dict[str, Any]]:
        result = data.get("result")
        if isinstance(result, dict) and isinstance(result.get("transactions"), list):
            return result["transactions"]
        return []

    def get_block_transactions(self, block_number: int) -> List[Dict[str, Any]]:
        data = self.request(self._block_params(block_number))
        return self._transactions_from(data)

    def get_source_code(self, address: str) -> Optional[ContractSource]:
        """Verified source for an address, or None when it is not a verified contract"""
        data = self.request(
            {"module": "contract", "action": "getsourcecode", "address": address}
        )
        if data.get("status") != "1":
            return None

        result = data.get("result")
        if not isinstance(result, list) or not result or not isinstance(result[0], dict):
            return None

        entry = result[0]
        source_code = entry.get("SourceCode") or ""
        if not source_code:
            return None
        return ContractSource(
            source_code=source_code, contract_name=entry.get("ContractName") or ""
        )

    # ------------------------------------------------------------------
    # Async batch path used by block discovery
    # ------------------------------------------------------------------

    def open_async_session(self) -> aiohttp.ClientSession:
        """Session for concurrent block fetches; must be opened inside a running loop"""
        return aiohttp.ClientSession(
            timeout=aiohttp.ClientTimeout(total=self.request_timeout)
        )

    async def async_request(
        self, session: aiohttp.ClientSession, params: Dict[str, str]
    ) -> Dict[str, Any]:
        """Async twin of request() with the same retry and delay policy"""
        query = self._build_query(params)

        for attempt in range(1, self.max_retries + 1):
            try:
                async with session.get(self.api_url, params=query) as response:
                    response.raise_for_status()
                    data = await response.json(content_type=None)
                data = self._check_payload(data)
                await asyncio.sleep(self.request_delay)
                return data
            except (
                aiohttp.ClientError,
                asyncio.TimeoutError,
                ValueError,
                ExplorerAPIError,
            ) as e:
                if attempt == self.max_retries:
                    self.logger.error(
                        f"Request {params.get('action')} {params.get('tag', '')} "
                        f"failed after {self.max_retries} attempts: {e}"
                    )
                    return dict(FAILURE_SENTINEL)
                await asyncio.sleep(self.retry_backoff * attempt)

        return dict(FAILURE_SENTINEL)

    async def fetch_blocks(
        self, session: aiohttp.ClientSession, block_numbers: Sequence[int]
    ) -> List[List[Dict[str, Any]]]:
        """Fetch all blocks concurrently; transaction lists come back in input order"""
        responses = await asyncio.gather(
            *(
                self.async_request(session, self._block_params(number))
                for number in block_numbers
            )
        )
        return [self._transactions_from(data) for data in responses]
