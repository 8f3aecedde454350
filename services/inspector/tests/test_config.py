import unittest
from unittest.mock import patch

from web3 import Web3

from services.common.errors import ConfigError
from services.inspector.config import get_settings, parse_asset_names
from services.inspector.models import NetworkRole

HUB_ADDRESS = '0x303a465b659cbb0ab36ee643ea362c509eeb5213'


class SettingsTests(unittest.TestCase):
    def tearDown(self) -> None:
        get_settings.cache_clear()

    def test_defaults(self) -> None:
        with patch.dict('os.environ', {}, clear=True):
            get_settings.cache_clear()
            settings = get_settings()

        self.assertEqual(settings.network_role, NetworkRole.L1)
        self.assertEqual(settings.log_window_blocks, 10_000)
        self.assertEqual(settings.max_workers, 8)
        self.assertFalse(settings.isolate_chain_failures)
        self.assertEqual(settings.bridgehub_address, '')

    def test_reads_environment(self) -> None:
        with patch.dict(
            'os.environ',
            {
                'INSPECTOR_RPC_URL': 'http://node:3050',
                'INSPECTOR_NETWORK_ROLE': 'L2',
                'INSPECTOR_BRIDGEHUB_ADDRESS': HUB_ADDRESS,
                'INSPECTOR_LOG_WINDOW_BLOCKS': '5000',
                'INSPECTOR_ISOLATE_CHAIN_FAILURES': 'true',
                'INSPECTOR_ASSET_NAMES': f"0x{'AB' * 32}=ETH-era"
            },
            clear=True
        ):
            get_settings.cache_clear()
            settings = get_settings()

        self.assertEqual(settings.rpc_url, 'http://node:3050')
        self.assertEqual(settings.network_role, NetworkRole.L2)
        self.assertEqual(settings.bridgehub_address, Web3.to_checksum_address(HUB_ADDRESS))
        self.assertEqual(settings.log_window_blocks, 5000)
        self.assertTrue(settings.isolate_chain_failures)
        self.assertEqual(settings.asset_names, {'0x' + 'ab' * 32: 'ETH-era'})

    def test_rejects_invalid_values(self) -> None:
        for env in (
            {'INSPECTOR_NETWORK_ROLE': 'l3'},
            {'INSPECTOR_LOG_WINDOW_BLOCKS': '0'},
            {'INSPECTOR_MAX_WORKERS': 'many'},
            {'INSPECTOR_BRIDGEHUB_ADDRESS': '0x1234'}
        ):
            with patch.dict('os.environ', env, clear=True):
                get_settings.cache_clear()
                with self.assertRaises(ConfigError):
                    get_settings()

    def test_asset_names_need_full_ids(self) -> None:
        with self.assertRaises(ConfigError):
            parse_asset_names('0x1234=short')
        with self.assertRaises(ConfigError):
            parse_asset_names('no-separator')
        with self.assertRaises(ConfigError):
            parse_asset_names('0x' + 'z' * 64 + '=not-hex')
        self.assertEqual(parse_asset_names(''), {})
