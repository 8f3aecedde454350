from __future__ import annotations

import logging
from typing import Callable

from services.common.chain_client import checksum
from services.common.contracts import NEW_HYPERCHAIN_TOPIC
from services.common.errors import PreconditionError
from services.inspector.models import NetworkRole
from services.inspector.scanner import LogWindowScanner, log_topics, topic_to_address, topic_to_chain_id

LOGGER = logging.getLogger('inspector.discovery')

HyperchainEnumerator = Callable[[], list[tuple[int, str]]]


class StmHyperchainEnumerator:
    """Lists hyperchains registered on a settlement layer from its transition manager's NewHyperchain log."""

    def __init__(self, scanner: LogWindowScanner, stm_address: str) -> None:
        self.scanner = scanner
        self.stm_address = checksum(stm_address)

    def __call__(self) -> list[tuple[int, str]]:
        pairs: list[tuple[int, str]] = []
        for log in self.scanner.fetch_logs(self.stm_address, topics=[NEW_HYPERCHAIN_TOPIC]):
            topics = log_topics(log)
            pairs.append((topic_to_chain_id(topics[1]), topic_to_address(topics[2])))
        return pairs


class ChainDiscoveryEngine:
    def __init__(self, scanner: LogWindowScanner, hyperchain_enumerator: HyperchainEnumerator | None = None) -> None:
        self.scanner = scanner
        self.hyperchain_enumerator = hyperchain_enumerator

    def discover_chains(self, hub_address: str, role: NetworkRole) -> set[int]:
        if role is NetworkRole.L1:
            chain_ids = self.scanner.scan_chain_ids(hub_address)
        elif role is NetworkRole.L2:
            if self.hyperchain_enumerator is None:
                raise PreconditionError('discovery on an L2 settlement layer needs a hyperchain enumerator')
            chain_ids = {chain_id for chain_id, _hyperchain in self.hyperchain_enumerator()}
        else:
            raise PreconditionError(f'unsupported network role: {role!r}')

        LOGGER.info(
            'chains discovered hub=%s role=%s count=%s',
            hub_address,
            role.value,
            len(chain_ids)
        )
        return chain_ids
