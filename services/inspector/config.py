from __future__ import annotations

import os
from dataclasses import dataclass, field
from functools import lru_cache

from web3 import Web3

from services.common.errors import ConfigError
from services.inspector.models import NetworkRole
from services.inspector.scanner import DEFAULT_WINDOW_BLOCKS


def _env_bool(name: str, default: bool) -> bool:
    value = os.getenv(name)
    if value is None:
        return default
    return value.strip().lower() in {'1', 'true', 'yes', 'y', 'on'}


def _env_int(name: str, default: int, minimum: int = 1) -> int:
    raw = os.getenv(name, '').strip()
    if not raw:
        return default
    try:
        value = int(raw)
    except ValueError as exc:
        raise ConfigError(f'{name} must be an integer, got {raw!r}') from exc
    if value < minimum:
        raise ConfigError(f'{name} must be >= {minimum}, got {value}')
    return value


def _env_address(name: str) -> str:
    raw = os.getenv(name, '').strip()
    if not raw:
        return ''
    if not Web3.is_address(raw):
        raise ConfigError(f'{name} is not a valid address: {raw!r}')
    return Web3.to_checksum_address(raw)


def parse_asset_names(raw: str) -> dict[str, str]:
    names: dict[str, str] = {}
    for part in raw.split(','):
        item = part.strip()
        if not item:
            continue
        if '=' not in item:
            raise ConfigError(f'asset name entry must look like 0x<asset id>=<name>, got {item!r}')
        asset_id, name = item.split('=', 1)
        asset_id = asset_id.strip().lower()
        try:
            raw_id = bytes.fromhex(asset_id.removeprefix('0x'))
        except ValueError as exc:
            raise ConfigError(f'asset id must be 32 bytes of hex, got {asset_id!r}') from exc
        if len(raw_id) != 32:
            raise ConfigError(f'asset id must be 32 bytes of hex, got {asset_id!r}')
        if not asset_id.startswith('0x'):
            asset_id = f'0x{asset_id}'
        names[asset_id] = name.strip()
    return names


@dataclass(frozen=True)
class Settings:
    rpc_url: str
    network_role: NetworkRole
    bridgehub_address: str
    asset_router_address: str
    l2_stm_address: str
    log_window_blocks: int
    max_workers: int
    rpc_timeout_seconds: int
    isolate_chain_failures: bool
    asset_names: dict[str, str] = field(default_factory=dict)


@lru_cache(maxsize=1)
def get_settings() -> Settings:
    role_raw = os.getenv('INSPECTOR_NETWORK_ROLE', 'l1').strip().lower()
    try:
        network_role = NetworkRole(role_raw)
    except ValueError as exc:
        raise ConfigError(f"INSPECTOR_NETWORK_ROLE must be 'l1' or 'l2', got {role_raw!r}") from exc

    return Settings(
        rpc_url=os.getenv('INSPECTOR_RPC_URL', 'http://localhost:8545').strip(),
        network_role=network_role,
        bridgehub_address=_env_address('INSPECTOR_BRIDGEHUB_ADDRESS'),
        asset_router_address=_env_address('INSPECTOR_ASSET_ROUTER_ADDRESS'),
        l2_stm_address=_env_address('INSPECTOR_L2_STM_ADDRESS'),
        log_window_blocks=_env_int('INSPECTOR_LOG_WINDOW_BLOCKS', DEFAULT_WINDOW_BLOCKS),
        max_workers=_env_int('INSPECTOR_MAX_WORKERS', 8),
        rpc_timeout_seconds=_env_int('INSPECTOR_RPC_TIMEOUT_SECONDS', 25),
        isolate_chain_failures=_env_bool('INSPECTOR_ISOLATE_CHAIN_FAILURES', False),
        asset_names=parse_asset_names(os.getenv('INSPECTOR_ASSET_NAMES', ''))
    )
