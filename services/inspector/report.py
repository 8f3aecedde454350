from __future__ import annotations

from typing import Mapping

from services.common.errors import InspectorError
from services.inspector.assets import AssetRouterState, asset_display_name
from services.inspector.bridgehub import Bridgehub
from services.inspector.models import (
    ZERO_ADDRESS,
    ZERO_HASH,
    BridgeTopology,
    HubHandler,
    OtherHandler,
    RegisteredAsset,
    StateTransitionSnapshot,
    VaultHandler,
)


def _flag_if_set(value: str, empty: str) -> str:
    if value.lower() == empty.lower():
        return value
    return f'{value} (!)'


def render_topology(chain_id: int, topology: BridgeTopology) -> str:
    return '\n'.join(
        [
            f'  Chain: {chain_id}',
            f'    Shared bridge:      {topology.shared_bridge}',
            f'    STM:                {topology.state_transition_manager}',
            f'    ST:                 {topology.state_transition}',
            f'    Base Token:         {topology.base_token}',
            f'    Validator timelock: {topology.validator_timelock}',
            f'    STM Asset id:       {topology.stm_asset_id}'
        ]
    )


def render_bridgehub(hub: Bridgehub, details: Mapping[int, BridgeTopology | InspectorError]) -> str:
    lines = [str(hub), f'  Chains:             {len(details)}']
    for chain_id in sorted(details):
        entry = details[chain_id]
        if isinstance(entry, InspectorError):
            lines.append(f'  Chain: {chain_id}')
            lines.append(f'    error: {entry.detail}')
            continue
        lines.append(render_topology(chain_id, entry))
    return '\n'.join(lines)


def render_snapshot(snapshot: StateTransitionSnapshot) -> str:
    return '\n'.join(
        [
            f'Chain id: {snapshot.chain_id}',
            f'  Protocol version: {snapshot.protocol_version}',
            f'  Batches (C,V,E):  {snapshot.batches_committed} {snapshot.batches_verified} {snapshot.batches_executed}',
            f'  System upgrade:   {_flag_if_set(snapshot.system_upgrade_tx_hash, ZERO_HASH)}',
            f'  AA hash:          {snapshot.default_account_hash}',
            f'  Verifier:         {snapshot.verifier}',
            f'  Admin:            {snapshot.admin}',
            f'  Bootloader hash:  {snapshot.bootloader_hash}',
            f'  Settlement layer: {_flag_if_set(snapshot.settlement_layer, ZERO_ADDRESS)}'
        ]
    )


def _describe_handler(asset: RegisteredAsset) -> str:
    handler = asset.handler
    if isinstance(handler, VaultHandler):
        return f'NativeTokenVault(token={handler.token_address}, name={handler.token_name})'
    if isinstance(handler, HubHandler):
        return 'Bridgehub'
    if isinstance(handler, OtherHandler):
        return f'Other({handler.deployment_tracker})'
    raise TypeError(f'unknown asset handler {handler!r}')


def render_asset(asset: RegisteredAsset, names: Mapping[str, str], balances: Mapping[str, int] | None = None) -> str:
    lines = [
        f'Asset:     {asset_display_name(asset, names)}',
        f'  id:      {asset.asset_id}',
        f'  tracker: {_describe_handler(asset)}'
    ]
    if balances is not None and asset.asset_id in balances:
        lines.append(f'  balance: {balances[asset.asset_id]}')
    return '\n'.join(lines)


def render_asset_router(
    state: AssetRouterState,
    names: Mapping[str, str],
    balances: Mapping[str, int] | None = None
) -> str:
    lines = [
        f'=== L1 Asset Router @ {state.address}',
        f'   Native vault:   {state.native_token_vault}',
        f'   Bridgehub:      {state.bridgehub}',
        f'   Assets: {len(state.registered_assets)}'
    ]
    for asset_id in sorted(state.registered_assets):
        rendered = render_asset(state.registered_assets[asset_id], names, balances)
        lines.extend(f'   {line}' for line in rendered.splitlines())
    return '\n'.join(lines)
