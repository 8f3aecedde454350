from __future__ import annotations

import logging
from typing import Any

from web3 import Web3

from services.common.errors import TransportError

LOGGER = logging.getLogger('inspector.chain_client')


def hex_prefixed(value: Any) -> str:
    raw = value.hex() if hasattr(value, 'hex') else str(value)
    if raw.startswith('0x'):
        return raw
    return f'0x{raw}'


def checksum(address: str) -> str:
    return Web3.to_checksum_address(address)


class ChainClient:
    """Read-only access to one network endpoint.

    Every failure of the underlying provider surfaces as ``TransportError``;
    there is no retry here.
    """

    def __init__(self, rpc_url: str, timeout_seconds: int = 25, web3: Web3 | None = None) -> None:
        self.rpc_url = rpc_url
        self.web3 = web3 or Web3(Web3.HTTPProvider(rpc_url, request_kwargs={'timeout': timeout_seconds}))

    def block_number(self) -> int:
        try:
            return int(self.web3.eth.block_number)
        except Exception as exc:
            raise TransportError(f'eth_blockNumber failed at {self.rpc_url}: {exc}') from exc

    def get_code(self, address: str) -> bytes:
        try:
            return bytes(self.web3.eth.get_code(checksum(address)))
        except Exception as exc:
            raise TransportError(f'eth_getCode failed for {address} at {self.rpc_url}: {exc}') from exc

    def get_logs(
        self,
        address: str,
        from_block: int,
        to_block: int,
        topics: list[Any] | None = None
    ) -> list[Any]:
        params: dict[str, Any] = {
            'fromBlock': from_block,
            'toBlock': to_block,
            'address': checksum(address)
        }
        if topics:
            params['topics'] = topics

        try:
            logs = self.web3.eth.get_logs(params)
        except Exception as exc:
            raise TransportError(
                f'eth_getLogs failed for {address} blocks=[{from_block},{to_block}] at {self.rpc_url}: {exc}'
            ) from exc

        LOGGER.debug('logs fetched address=%s from=%s to=%s count=%s', address, from_block, to_block, len(logs))
        return list(logs)

    def contract(self, address: str, abi: list[dict[str, Any]]) -> Any:
        return self.web3.eth.contract(address=checksum(address), abi=abi)
