from __future__ import annotations

import logging
from concurrent.futures import ThreadPoolExecutor
from dataclasses import dataclass, field
from typing import Iterable

from services.common.chain_client import ChainClient, checksum
from services.common.contracts import ContractFactory
from services.common.errors import InspectorError, NotFoundError, PreconditionError, TransportError
from services.inspector.discovery import ChainDiscoveryEngine
from services.inspector.models import ZERO_ADDRESS, BridgeTopology, NetworkRole, StateTransitionSnapshot
from services.inspector.state_transition import StateTransitionReader

LOGGER = logging.getLogger('inspector.bridgehub')


class TopologyResolver:
    def __init__(self, contracts: ContractFactory, hub_address: str) -> None:
        self.contracts = contracts
        self.hub_address = checksum(hub_address)

    def resolve(self, chain_id: int) -> BridgeTopology:
        hub = self.contracts.bridgehub(self.hub_address)

        stm_address = hub.state_transition_manager(chain_id)
        try:
            base_token = hub.base_token(chain_id)
        except TransportError as exc:
            # Chains migrated between settlement layers can be left without a base token.
            LOGGER.warning('base token lookup failed chain_id=%s; using zero address: %s', chain_id, exc.detail)
            base_token = ZERO_ADDRESS
        state_transition = hub.get_hyperchain(chain_id)
        shared_bridge = hub.shared_bridge()
        validator_timelock = self.contracts.state_transition_manager(stm_address).validator_timelock()
        stm_asset_id = hub.stm_asset_id_from_chain_id(chain_id)

        return BridgeTopology(
            state_transition_manager=stm_address,
            state_transition=state_transition,
            shared_bridge=shared_bridge,
            base_token=base_token,
            validator_timelock=validator_timelock,
            stm_asset_id=stm_asset_id
        )

    def resolve_many(
        self,
        chain_ids: Iterable[int],
        max_workers: int = 8,
        isolate_failures: bool = False
    ) -> dict[int, BridgeTopology | InspectorError]:
        ordered = sorted(set(chain_ids))
        if not ordered:
            return {}

        results: dict[int, BridgeTopology | InspectorError] = {}
        with ThreadPoolExecutor(max_workers=max(1, min(max_workers, len(ordered)))) as executor:
            futures = {chain_id: executor.submit(self.resolve, chain_id) for chain_id in ordered}
            for chain_id, future in futures.items():
                try:
                    results[chain_id] = future.result()
                except InspectorError as exc:
                    if not isolate_failures:
                        raise
                    LOGGER.error('chain resolution failed chain_id=%s: %s', chain_id, exc.detail)
                    results[chain_id] = exc
        return results


@dataclass
class Bridgehub:
    address: str
    shared_bridge: str
    contracts: ContractFactory
    known_chains: set[int] | None = field(default=None)

    @classmethod
    def open(
        cls,
        client: ChainClient,
        address: str,
        discovery: ChainDiscoveryEngine | None = None,
        role: NetworkRole = NetworkRole.L1,
        contracts: ContractFactory | None = None
    ) -> Bridgehub:
        address = checksum(address)
        if not client.get_code(address):
            raise NotFoundError(
                f'no contract code at bridgehub address {address} on {client.rpc_url}; '
                'check the address and the network'
            )

        contracts = contracts or ContractFactory(client)
        shared_bridge = contracts.bridgehub(address).shared_bridge()

        known_chains = None
        if discovery is not None:
            known_chains = discovery.discover_chains(address, role)

        return cls(address=address, shared_bridge=shared_bridge, contracts=contracts, known_chains=known_chains)

    def __str__(self) -> str:
        return f'Bridgehub at {self.address}. Shared bridge: {self.shared_bridge}'

    @property
    def resolver(self) -> TopologyResolver:
        return TopologyResolver(self.contracts, self.address)

    def chain_details(self, chain_id: int) -> BridgeTopology:
        return self.resolver.resolve(chain_id)

    def detailed_report(
        self,
        max_workers: int = 8,
        isolate_failures: bool = False
    ) -> dict[int, BridgeTopology | InspectorError]:
        if self.known_chains is None:
            raise PreconditionError('chains not scanned; open the bridgehub with discovery enabled first')
        return self.resolver.resolve_many(self.known_chains, max_workers=max_workers, isolate_failures=isolate_failures)

    def state_transition(self, chain_id: int) -> StateTransitionSnapshot:
        address = self.contracts.bridgehub(self.address).get_hyperchain(chain_id)
        return StateTransitionReader(self.contracts).read_snapshot(address)
