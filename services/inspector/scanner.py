from __future__ import annotations

import logging
from enum import Enum
from typing import Any, Iterator

from eth_abi import decode
from eth_abi.exceptions import DecodingError

from services.common.chain_client import ChainClient, checksum, hex_prefixed
from services.common.contracts import ASSET_REGISTERED_TOPIC, NEW_CHAIN_TOPIC
from services.common.errors import ShapeError
from services.inspector.models import MAX_CHAIN_ID

LOGGER = logging.getLogger('inspector.scanner')

DEFAULT_WINDOW_BLOCKS = 10_000


class HubEvent(Enum):
    NEW_CHAIN = 'NewChain'
    ASSET_REGISTERED = 'AssetRegistered'
    UNRECOGNIZED = 'unrecognized'


def _topic_bytes(topic: Any) -> bytes:
    if isinstance(topic, str):
        return bytes.fromhex(topic.removeprefix('0x'))
    return bytes(topic)


def log_topics(log: Any) -> list[Any]:
    return list(log['topics'])


def topic_to_uint(topic: Any) -> int:
    try:
        (value,) = decode(['uint256'], _topic_bytes(topic))
    except DecodingError as exc:
        raise ShapeError(f'topic {hex_prefixed(topic)} is not a 32-byte word') from exc
    return int(value)


def topic_to_chain_id(topic: Any) -> int:
    value = topic_to_uint(topic)
    if value > MAX_CHAIN_ID:
        raise ShapeError(f'chain id {value} does not fit in 64 bits')
    return value


def topic_to_address(topic: Any) -> str:
    raw = _topic_bytes(topic)
    try:
        (value,) = decode(['address'], raw)
    except DecodingError as exc:
        raise ShapeError(f'topic {hex_prefixed(raw)} does not hold an address') from exc
    return checksum(value)


def classify_hub_log(log: Any) -> HubEvent:
    topics = log_topics(log)
    if not topics:
        return HubEvent.UNRECOGNIZED
    topic0 = hex_prefixed(_topic_bytes(topics[0])).lower()
    if topic0 == NEW_CHAIN_TOPIC:
        return HubEvent.NEW_CHAIN
    if topic0 == ASSET_REGISTERED_TOPIC:
        return HubEvent.ASSET_REGISTERED
    return HubEvent.UNRECOGNIZED


class LogWindowScanner:
    """Walks a contract's event log backwards from the chain head in fixed block windows.

    Windows are issued one at a time; the next window depends on the
    cursor left by the previous one. Block 0 always gets its own final
    window, so a head of 0 yields exactly one query.
    """

    def __init__(self, client: ChainClient, window_blocks: int = DEFAULT_WINDOW_BLOCKS) -> None:
        if isinstance(window_blocks, bool) or not isinstance(window_blocks, int) or window_blocks <= 0:
            raise ValueError(f'window_blocks must be a positive integer, got {window_blocks!r}')
        self.client = client
        self.window_blocks = window_blocks

    def windows(self, head: int) -> Iterator[tuple[int, int]]:
        if head < 0:
            raise ValueError(f'head block must be non-negative, got {head}')

        cursor = head
        while cursor > 0:
            floor = max(0, cursor - self.window_blocks)
            yield floor + 1, cursor
            cursor = floor
        yield 0, 0

    def fetch_logs(self, address: str, topics: list[Any] | None = None, head: int | None = None) -> list[Any]:
        if head is None:
            head = self.client.block_number()

        logs: list[Any] = []
        pages = 0
        for from_block, to_block in self.windows(head):
            logs.extend(self.client.get_logs(address, from_block, to_block, topics))
            pages += 1

        LOGGER.info(
            'log scan finished address=%s head=%s window=%s pages=%s logs=%s',
            address,
            head,
            self.window_blocks,
            pages,
            len(logs)
        )
        return logs

    def scan_chain_ids(self, hub_address: str, head: int | None = None) -> set[int]:
        chain_ids: set[int] = set()
        for log in self.fetch_logs(hub_address, head=head):
            kind = classify_hub_log(log)
            if kind is HubEvent.NEW_CHAIN:
                chain_ids.add(topic_to_chain_id(log_topics(log)[1]))
            elif kind is HubEvent.ASSET_REGISTERED:
                # Asset registrations are read from the asset router instead.
                continue
        return chain_ids
