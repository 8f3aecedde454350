from __future__ import annotations

from typing import Any

from web3 import Web3

from services.common.chain_client import ChainClient, checksum, hex_prefixed
from services.common.errors import TransportError


def _view(name: str, inputs: list[str], outputs: list[str]) -> dict[str, Any]:
    return {
        'inputs': [{'internalType': kind, 'name': '', 'type': kind} for kind in inputs],
        'name': name,
        'outputs': [{'internalType': kind, 'name': '', 'type': kind} for kind in outputs],
        'stateMutability': 'view',
        'type': 'function'
    }


BRIDGEHUB_ABI = [
    _view('sharedBridge', [], ['address']),
    _view('stateTransitionManager', ['uint256'], ['address']),
    _view('baseToken', ['uint256'], ['address']),
    _view('getHyperchain', ['uint256'], ['address']),
    _view('stmAssetIdFromChainId', ['uint256'], ['bytes32'])
]

STATE_TRANSITION_MANAGER_ABI = [
    _view('validatorTimelock', [], ['address'])
]

HYPERCHAIN_ABI = [
    _view('getVerifier', [], ['address']),
    _view('getAdmin', [], ['address']),
    _view('getTotalBatchesCommitted', [], ['uint256']),
    _view('getTotalBatchesVerified', [], ['uint256']),
    _view('getTotalBatchesExecuted', [], ['uint256']),
    _view('getSemverProtocolVersion', [], ['uint32', 'uint32', 'uint32']),
    _view('getL2BootloaderBytecodeHash', [], ['bytes32']),
    _view('getL2DefaultAccountBytecodeHash', [], ['bytes32']),
    _view('getL2SystemContractsUpgradeTxHash', [], ['bytes32']),
    _view('getChainId', [], ['uint256']),
    _view('getSettlementLayer', [], ['address'])
]

ASSET_ROUTER_ABI = [
    _view('nativeTokenVault', [], ['address']),
    _view('BRIDGE_HUB', [], ['address'])
]

NATIVE_TOKEN_VAULT_ABI = [
    _view('tokenAddress', ['bytes32'], ['address']),
    _view('chainBalance', ['uint256', 'address'], ['uint256'])
]

ERC20_NAME_ABI = [
    _view('name', [], ['string'])
]

NEW_CHAIN_TOPIC = hex_prefixed(Web3.keccak(text='NewChain(uint256,address,address)'))
ASSET_REGISTERED_TOPIC = hex_prefixed(Web3.keccak(text='AssetRegistered(bytes32,address,bytes32,address)'))
ASSET_HANDLER_REGISTERED_INITIAL_TOPIC = hex_prefixed(
    Web3.keccak(text='AssetHandlerRegisteredInitial(bytes32,address,bytes32,address)')
)
NEW_HYPERCHAIN_TOPIC = hex_prefixed(Web3.keccak(text='NewHyperchain(uint256,address)'))


class ReadOnlyContract:
    label = 'contract'
    abi: list[dict[str, Any]] = []

    def __init__(self, client: ChainClient, address: str) -> None:
        self.address = checksum(address)
        self._contract = client.contract(self.address, self.abi)

    def _call(self, function_name: str, *args: Any) -> Any:
        function = getattr(self._contract.functions, function_name)
        try:
            return function(*args).call()
        except Exception as exc:
            raise TransportError(f'{self.label}.{function_name} failed at {self.address}: {exc}') from exc

    def _address(self, function_name: str, *args: Any) -> str:
        return checksum(self._call(function_name, *args))

    def _bytes32(self, function_name: str, *args: Any) -> str:
        return hex_prefixed(bytes(self._call(function_name, *args)))


class BridgehubContract(ReadOnlyContract):
    label = 'Bridgehub'
    abi = BRIDGEHUB_ABI

    def shared_bridge(self) -> str:
        return self._address('sharedBridge')

    def state_transition_manager(self, chain_id: int) -> str:
        return self._address('stateTransitionManager', chain_id)

    def base_token(self, chain_id: int) -> str:
        return self._address('baseToken', chain_id)

    def get_hyperchain(self, chain_id: int) -> str:
        return self._address('getHyperchain', chain_id)

    def stm_asset_id_from_chain_id(self, chain_id: int) -> str:
        return self._bytes32('stmAssetIdFromChainId', chain_id)


class StateTransitionManagerContract(ReadOnlyContract):
    label = 'StateTransitionManager'
    abi = STATE_TRANSITION_MANAGER_ABI

    def validator_timelock(self) -> str:
        return self._address('validatorTimelock')


class HyperchainContract(ReadOnlyContract):
    label = 'Hyperchain'
    abi = HYPERCHAIN_ABI

    def verifier(self) -> str:
        return self._address('getVerifier')

    def admin(self) -> str:
        return self._address('getAdmin')

    def total_batches_committed(self) -> int:
        return int(self._call('getTotalBatchesCommitted'))

    def total_batches_verified(self) -> int:
        return int(self._call('getTotalBatchesVerified'))

    def total_batches_executed(self) -> int:
        return int(self._call('getTotalBatchesExecuted'))

    def semver_protocol_version(self) -> tuple[int, int, int]:
        major, minor, patch = self._call('getSemverProtocolVersion')
        return int(major), int(minor), int(patch)

    def bootloader_bytecode_hash(self) -> str:
        return self._bytes32('getL2BootloaderBytecodeHash')

    def default_account_bytecode_hash(self) -> str:
        return self._bytes32('getL2DefaultAccountBytecodeHash')

    def system_contracts_upgrade_tx_hash(self) -> str:
        return self._bytes32('getL2SystemContractsUpgradeTxHash')

    def chain_id(self) -> int:
        return int(self._call('getChainId'))

    def settlement_layer(self) -> str:
        return self._address('getSettlementLayer')


class AssetRouterContract(ReadOnlyContract):
    label = 'L1AssetRouter'
    abi = ASSET_ROUTER_ABI

    def native_token_vault(self) -> str:
        return self._address('nativeTokenVault')

    def bridge_hub(self) -> str:
        return self._address('BRIDGE_HUB')


class NativeTokenVaultContract(ReadOnlyContract):
    label = 'NativeTokenVault'
    abi = NATIVE_TOKEN_VAULT_ABI

    def token_address(self, asset_id: str) -> str:
        return self._address('tokenAddress', bytes.fromhex(asset_id.removeprefix('0x')))

    def chain_balance(self, chain_id: int, token: str) -> int:
        return int(self._call('chainBalance', chain_id, checksum(token)))


class Erc20Contract(ReadOnlyContract):
    label = 'ERC20'
    abi = ERC20_NAME_ABI

    def name(self) -> str:
        return str(self._call('name'))


class ContractFactory:
    def __init__(self, client: ChainClient) -> None:
        self.client = client

    def bridgehub(self, address: str) -> BridgehubContract:
        return BridgehubContract(self.client, address)

    def state_transition_manager(self, address: str) -> StateTransitionManagerContract:
        return StateTransitionManagerContract(self.client, address)

    def hyperchain(self, address: str) -> HyperchainContract:
        return HyperchainContract(self.client, address)

    def asset_router(self, address: str) -> AssetRouterContract:
        return AssetRouterContract(self.client, address)

    def native_token_vault(self, address: str) -> NativeTokenVaultContract:
        return NativeTokenVaultContract(self.client, address)

    def erc20(self, address: str) -> Erc20Contract:
        return Erc20Contract(self.client, address)
