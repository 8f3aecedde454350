from __future__ import annotations

import logging

from services.common.contracts import ContractFactory
from services.inspector.models import ProtocolVersion, StateTransitionSnapshot

LOGGER = logging.getLogger('inspector.state_transition')


class StateTransitionReader:
    def __init__(self, contracts: ContractFactory) -> None:
        self.contracts = contracts

    def read_snapshot(self, address: str) -> StateTransitionSnapshot:
        # Sequential reads; the counters may move between calls.
        contract = self.contracts.hyperchain(address)

        verifier = contract.verifier()
        admin = contract.admin()
        committed = contract.total_batches_committed()
        verified = contract.total_batches_verified()
        executed = contract.total_batches_executed()
        major, minor, patch = contract.semver_protocol_version()
        bootloader_hash = contract.bootloader_bytecode_hash()
        default_account_hash = contract.default_account_bytecode_hash()
        upgrade_tx_hash = contract.system_contracts_upgrade_tx_hash()
        chain_id = contract.chain_id()
        settlement_layer = contract.settlement_layer()

        LOGGER.debug(
            'state transition read address=%s chain_id=%s batches=%s/%s/%s',
            address,
            chain_id,
            committed,
            verified,
            executed
        )
        return StateTransitionSnapshot(
            verifier=verifier,
            admin=admin,
            batches_committed=committed,
            batches_verified=verified,
            batches_executed=executed,
            protocol_version=ProtocolVersion(major, minor, patch),
            bootloader_hash=bootloader_hash,
            default_account_hash=default_account_hash,
            system_upgrade_tx_hash=upgrade_tx_hash,
            chain_id=chain_id,
            settlement_layer=settlement_layer
        )
