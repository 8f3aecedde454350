"""Asset discovery for the shared asset router.

Registrations are read from the router's ``AssetHandlerRegisteredInitial``
log. Each distinct asset id is then classified by the deployment tracker
that registered it: the native token vault, the bridgehub itself, or
anything else.
"""
from __future__ import annotations

import logging
from concurrent.futures import ThreadPoolExecutor
from dataclasses import dataclass
from typing import Any, Mapping

from services.common.chain_client import checksum, hex_prefixed
from services.common.contracts import ASSET_HANDLER_REGISTERED_INITIAL_TOPIC, ContractFactory
from services.inspector.models import (
    NATIVE_TOKEN_SENTINEL,
    HubHandler,
    OtherHandler,
    RegisteredAsset,
    VaultHandler,
)
from services.inspector.scanner import LogWindowScanner, log_topics, topic_to_address

LOGGER = logging.getLogger('inspector.assets')

NATIVE_TOKEN_NAME = 'ETH'


@dataclass(frozen=True)
class AssetRegistration:
    asset_id: str
    deployment_tracker: str
    block_number: int
    log_index: int


@dataclass
class AssetRouterState:
    address: str
    native_token_vault: str
    bridgehub: str
    registered_assets: dict[str, RegisteredAsset]


def short_asset_id(asset_id: str) -> str:
    raw = asset_id.lower().removeprefix('0x')
    return f'0x{raw[:8]}..{raw[-6:]}'


def well_known_name(asset_id: str, names: Mapping[str, str]) -> str:
    return names.get(asset_id.lower(), short_asset_id(asset_id))


def asset_display_name(asset: RegisteredAsset, names: Mapping[str, str]) -> str:
    base = well_known_name(asset.asset_id, names)
    if isinstance(asset.handler, VaultHandler):
        return f'{asset.handler.token_name}-{base}'
    return base


def _asset_id_from_topic(topic: Any) -> str:
    return hex_prefixed(topic).lower()


def parse_registration(log: Any) -> AssetRegistration:
    topics = log_topics(log)
    return AssetRegistration(
        asset_id=_asset_id_from_topic(topics[1]),
        deployment_tracker=topic_to_address(topics[2]),
        block_number=int(log.get('blockNumber', 0) or 0),
        log_index=int(log.get('logIndex', 0) or 0)
    )


def latest_registrations(registrations: list[AssetRegistration]) -> dict[str, AssetRegistration]:
    # Last writer in log order wins, independent of scan or completion order.
    latest: dict[str, AssetRegistration] = {}
    for registration in sorted(registrations, key=lambda item: (item.block_number, item.log_index)):
        latest[registration.asset_id] = registration
    return latest


class AssetRegistry:
    def __init__(
        self,
        contracts: ContractFactory,
        scanner: LogWindowScanner,
        max_workers: int = 8,
        asset_names: Mapping[str, str] | None = None
    ) -> None:
        self.contracts = contracts
        self.scanner = scanner
        self.max_workers = max(1, max_workers)
        self.asset_names = {key.lower(): value for key, value in (asset_names or {}).items()}

    def load_router(self, asset_router_address: str) -> AssetRouterState:
        router = self.contracts.asset_router(asset_router_address)
        native_token_vault = router.native_token_vault()
        bridgehub = router.bridge_hub()
        assets = self._discover(router.address, native_token_vault, bridgehub)
        return AssetRouterState(
            address=router.address,
            native_token_vault=native_token_vault,
            bridgehub=bridgehub,
            registered_assets=assets
        )

    def discover_assets(self, asset_router_address: str) -> dict[str, RegisteredAsset]:
        return self.load_router(asset_router_address).registered_assets

    def classify(self, registration: AssetRegistration, native_token_vault: str, bridgehub: str) -> RegisteredAsset:
        tracker = checksum(registration.deployment_tracker)
        if tracker == checksum(native_token_vault):
            vault = self.contracts.native_token_vault(native_token_vault)
            token_address = vault.token_address(registration.asset_id)
            if token_address == checksum(NATIVE_TOKEN_SENTINEL):
                token_name = NATIVE_TOKEN_NAME
            else:
                token_name = self.contracts.erc20(token_address).name()
            handler: Any = VaultHandler(token_address=token_address, token_name=token_name)
        elif tracker == checksum(bridgehub):
            handler = HubHandler()
        else:
            handler = OtherHandler(deployment_tracker=tracker)
        return RegisteredAsset(asset_id=registration.asset_id, handler=handler)

    def chain_balance(self, native_token_vault: str, chain_id: int, asset_id: str) -> int:
        vault = self.contracts.native_token_vault(native_token_vault)
        token_address = vault.token_address(asset_id)
        return vault.chain_balance(chain_id, token_address)

    def _discover(self, router_address: str, native_token_vault: str, bridgehub: str) -> dict[str, RegisteredAsset]:
        logs = self.scanner.fetch_logs(router_address, topics=[ASSET_HANDLER_REGISTERED_INITIAL_TOPIC])
        registrations = latest_registrations([parse_registration(log) for log in logs])
        if not registrations:
            LOGGER.info('no registered assets router=%s', router_address)
            return {}

        workers = min(self.max_workers, len(registrations))
        with ThreadPoolExecutor(max_workers=workers) as executor:
            futures = {
                asset_id: executor.submit(self.classify, registration, native_token_vault, bridgehub)
                for asset_id, registration in registrations.items()
            }
            # result() re-raises the first failure; no partial map is returned.
            assets = {asset_id: future.result() for asset_id, future in futures.items()}

        LOGGER.info(
            'assets classified router=%s registrations=%s distinct=%s',
            router_address,
            len(logs),
            len(assets)
        )
        return assets
