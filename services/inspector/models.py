from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import Union

ZERO_ADDRESS = '0x0000000000000000000000000000000000000000'
ZERO_HASH = '0x' + '00' * 32
# Token address the native token vault reports for the base currency.
NATIVE_TOKEN_SENTINEL = '0x0000000000000000000000000000000000000001'

MAX_CHAIN_ID = 2**64 - 1


class NetworkRole(str, Enum):
    L1 = 'l1'
    L2 = 'l2'


@dataclass(frozen=True)
class BridgeTopology:
    state_transition_manager: str
    state_transition: str
    shared_bridge: str
    base_token: str
    validator_timelock: str
    stm_asset_id: str


@dataclass(frozen=True)
class ProtocolVersion:
    major: int
    minor: int
    patch: int

    def __str__(self) -> str:
        return f'{self.major}.{self.minor}.{self.patch}'


@dataclass(frozen=True)
class StateTransitionSnapshot:
    verifier: str
    admin: str
    batches_committed: int
    batches_verified: int
    batches_executed: int
    protocol_version: ProtocolVersion
    bootloader_hash: str
    default_account_hash: str
    system_upgrade_tx_hash: str
    chain_id: int
    settlement_layer: str


@dataclass(frozen=True)
class HubHandler:
    pass


@dataclass(frozen=True)
class VaultHandler:
    token_address: str
    token_name: str


@dataclass(frozen=True)
class OtherHandler:
    deployment_tracker: str


AssetHandler = Union[HubHandler, VaultHandler, OtherHandler]


@dataclass(frozen=True)
class RegisteredAsset:
    asset_id: str
    handler: AssetHandler
