from __future__ import annotations

import argparse
import dataclasses
import logging
import os
import sys

from web3 import Web3

from services.common.chain_client import ChainClient
from services.common.contracts import ContractFactory
from services.common.errors import ConfigError, InspectorError
from services.inspector.assets import AssetRegistry
from services.inspector.bridgehub import Bridgehub
from services.inspector.config import Settings, get_settings
from services.inspector.discovery import ChainDiscoveryEngine, StmHyperchainEnumerator
from services.inspector.models import NetworkRole, VaultHandler
from services.inspector.report import render_asset_router, render_bridgehub, render_snapshot, render_topology
from services.inspector.scanner import LogWindowScanner

LOGGER = logging.getLogger('inspector.main')


def _build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(description='Read-only topology report for a Bridgehub deployment')
    parser.add_argument('--rpc-url', help='RPC endpoint (overrides INSPECTOR_RPC_URL)')
    parser.add_argument('--bridgehub', help='Bridgehub address (overrides INSPECTOR_BRIDGEHUB_ADDRESS)')
    subparsers = parser.add_subparsers(dest='command', required=True)

    subparsers.add_parser('chains', help='Discover every chain and print its contract addresses')

    chain = subparsers.add_parser('chain', help='Print one chain with its state transition snapshot')
    chain.add_argument('--chain-id', type=int, required=True)

    assets = subparsers.add_parser('assets', help='List assets registered with the shared asset router')
    assets.add_argument('--balance-chain-id', type=int, help='Also read native vault balances for this chain')
    return parser


def _discovery(settings: Settings, scanner: LogWindowScanner) -> ChainDiscoveryEngine:
    enumerator = None
    if settings.network_role is NetworkRole.L2:
        if not settings.l2_stm_address:
            raise ConfigError('INSPECTOR_L2_STM_ADDRESS is required when INSPECTOR_NETWORK_ROLE=l2')
        enumerator = StmHyperchainEnumerator(scanner, settings.l2_stm_address)
    return ChainDiscoveryEngine(scanner, enumerator)


def run(settings: Settings, args: argparse.Namespace) -> str:
    if not settings.bridgehub_address:
        raise ConfigError('bridgehub address is not set; pass --bridgehub or INSPECTOR_BRIDGEHUB_ADDRESS')

    client = ChainClient(settings.rpc_url, timeout_seconds=settings.rpc_timeout_seconds)
    contracts = ContractFactory(client)
    scanner = LogWindowScanner(client, settings.log_window_blocks)

    LOGGER.info(
        'starting command=%s rpc=%s role=%s bridgehub=%s',
        args.command,
        settings.rpc_url,
        settings.network_role.value,
        settings.bridgehub_address
    )

    if args.command == 'chains':
        hub = Bridgehub.open(
            client,
            settings.bridgehub_address,
            discovery=_discovery(settings, scanner),
            role=settings.network_role,
            contracts=contracts
        )
        details = hub.detailed_report(
            max_workers=settings.max_workers,
            isolate_failures=settings.isolate_chain_failures
        )
        return render_bridgehub(hub, details)

    if args.command == 'chain':
        hub = Bridgehub.open(client, settings.bridgehub_address, contracts=contracts)
        topology = hub.chain_details(args.chain_id)
        snapshot = hub.state_transition(args.chain_id)
        return '\n'.join([str(hub), render_topology(args.chain_id, topology), render_snapshot(snapshot)])

    hub = Bridgehub.open(client, settings.bridgehub_address, contracts=contracts)
    router_address = settings.asset_router_address or hub.shared_bridge
    registry = AssetRegistry(contracts, scanner, max_workers=settings.max_workers, asset_names=settings.asset_names)
    state = registry.load_router(router_address)

    balances = None
    if args.balance_chain_id is not None:
        balances = {
            asset_id: registry.chain_balance(state.native_token_vault, args.balance_chain_id, asset_id)
            for asset_id, asset in state.registered_assets.items()
            if isinstance(asset.handler, VaultHandler)
        }
    return render_asset_router(state, registry.asset_names, balances)


def main(argv: list[str] | None = None) -> int:
    logging.basicConfig(
        level=os.getenv('LOG_LEVEL', 'INFO').upper(),
        format='%(asctime)s %(levelname)s [%(name)s] %(message)s'
    )
    args = _build_parser().parse_args(argv)

    try:
        settings = get_settings()
        overrides = {}
        if args.rpc_url:
            overrides['rpc_url'] = args.rpc_url
        if args.bridgehub:
            if not Web3.is_address(args.bridgehub):
                raise ConfigError(f'--bridgehub is not a valid address: {args.bridgehub!r}')
            overrides['bridgehub_address'] = Web3.to_checksum_address(args.bridgehub)
        if overrides:
            settings = dataclasses.replace(settings, **overrides)
        output = run(settings, args)
    except InspectorError as exc:
        LOGGER.error('%s failed: %s', args.command, exc.detail)
        return exc.exit_code

    print(output)
    return 0


if __name__ == '__main__':
    sys.exit(main())
