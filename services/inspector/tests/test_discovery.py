import unittest

from services.common.contracts import NEW_HYPERCHAIN_TOPIC
from services.common.errors import PreconditionError
from services.inspector.discovery import ChainDiscoveryEngine, StmHyperchainEnumerator
from services.inspector.models import NetworkRole
from services.inspector.scanner import LogWindowScanner
from services.inspector.tests.fakes import FakeChainClient, addr, make_log, topic, word
from services.inspector.tests.test_scanner import HUB, new_chain_log

STM = addr(0x5777)


class ChainDiscoveryTests(unittest.TestCase):
    def test_l1_uses_hub_log_scan(self) -> None:
        client = FakeChainClient(head=50, logs=[new_chain_log(270, 5), new_chain_log(270, 40)])
        engine = ChainDiscoveryEngine(LogWindowScanner(client))

        self.assertEqual(engine.discover_chains(HUB, NetworkRole.L1), {270})

    def test_l2_uses_hyperchain_enumerator_and_drops_addresses(self) -> None:
        client = FakeChainClient(head=50, logs=[new_chain_log(999, 5)])
        enumerator_calls = []

        def enumerator():
            enumerator_calls.append(True)
            return [(505, addr(1)), (506, addr(2)), (505, addr(3))]

        engine = ChainDiscoveryEngine(LogWindowScanner(client), enumerator)

        self.assertEqual(engine.discover_chains(HUB, NetworkRole.L2), {505, 506})
        self.assertEqual(len(enumerator_calls), 1)
        self.assertEqual(client.queries, [])

    def test_l2_without_enumerator_is_a_precondition_error(self) -> None:
        engine = ChainDiscoveryEngine(LogWindowScanner(FakeChainClient()))

        with self.assertRaises(PreconditionError):
            engine.discover_chains(HUB, NetworkRole.L2)

    def test_stm_enumerator_reads_new_hyperchain_events(self) -> None:
        client = FakeChainClient(
            head=20_000,
            logs=[
                make_log(STM, 100, [topic(NEW_HYPERCHAIN_TOPIC), word(505), word(0xAAA)]),
                make_log(STM, 15_000, [topic(NEW_HYPERCHAIN_TOPIC), word(506), word(0xBBB)])
            ]
        )
        enumerator = StmHyperchainEnumerator(LogWindowScanner(client), STM)

        self.assertEqual(sorted(enumerator()), [(505, addr(0xAAA)), (506, addr(0xBBB))])
