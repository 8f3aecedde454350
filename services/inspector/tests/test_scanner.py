import unittest

from services.common.contracts import ASSET_REGISTERED_TOPIC, NEW_CHAIN_TOPIC
from services.common.errors import ShapeError, TransportError
from services.inspector.scanner import (
    HubEvent,
    LogWindowScanner,
    classify_hub_log,
    topic_to_address,
    topic_to_chain_id,
)
from services.inspector.tests.fakes import FakeChainClient, addr, make_log, topic, word

HUB = addr(0xB0B)


def new_chain_log(chain_id: int, block_number: int) -> dict:
    return make_log(HUB, block_number, [topic(NEW_CHAIN_TOPIC), word(chain_id), word(0xCAFE)])


class WindowTests(unittest.TestCase):
    def test_windows_walk_backwards_and_finish_on_block_zero(self) -> None:
        scanner = LogWindowScanner(FakeChainClient(), window_blocks=10_000)

        self.assertEqual(
            list(scanner.windows(25_000)),
            [(15_001, 25_000), (5_001, 15_000), (1, 5_000), (0, 0)]
        )

    def test_head_zero_scans_a_single_window(self) -> None:
        scanner = LogWindowScanner(FakeChainClient(), window_blocks=10_000)

        self.assertEqual(list(scanner.windows(0)), [(0, 0)])

    def test_window_exactly_dividing_head(self) -> None:
        scanner = LogWindowScanner(FakeChainClient(), window_blocks=100)

        self.assertEqual(list(scanner.windows(200)), [(101, 200), (1, 100), (0, 0)])

    def test_rejects_non_positive_window(self) -> None:
        for value in (0, -5, True, 2.5):
            with self.assertRaises(ValueError):
                LogWindowScanner(FakeChainClient(), window_blocks=value)


class ChainIdScanTests(unittest.TestCase):
    def test_discovers_chains_across_windows(self) -> None:
        client = FakeChainClient(
            head=25_000,
            logs=[new_chain_log(270, 12_500), new_chain_log(271, 500)]
        )
        scanner = LogWindowScanner(client, window_blocks=10_000)

        chain_ids = scanner.scan_chain_ids(HUB)

        self.assertEqual(chain_ids, {270, 271})
        self.assertEqual(
            [(start, end) for _address, start, end in client.queries],
            [(15_001, 25_000), (5_001, 15_000), (1, 5_000), (0, 0)]
        )

    def test_result_does_not_depend_on_window_size(self) -> None:
        logs = [
            new_chain_log(324, 0),
            new_chain_log(270, 1_000),
            new_chain_log(271, 2_500),
            new_chain_log(270, 4_999),
            new_chain_log(505, 10_000)
        ]
        small = LogWindowScanner(FakeChainClient(head=10_000, logs=logs), window_blocks=2_500)
        large = LogWindowScanner(FakeChainClient(head=10_000, logs=logs), window_blocks=5_000)

        self.assertEqual(small.scan_chain_ids(HUB), {324, 270, 271, 505})
        self.assertEqual(small.scan_chain_ids(HUB), large.scan_chain_ids(HUB))

    def test_ignores_asset_registrations_and_unknown_events(self) -> None:
        client = FakeChainClient(
            head=100,
            logs=[
                make_log(HUB, 10, [topic(ASSET_REGISTERED_TOPIC), word(1), word(2), word(3)]),
                make_log(HUB, 20, [word(0xDEAD), word(99)]),
                new_chain_log(300, 30)
            ]
        )

        self.assertEqual(LogWindowScanner(client).scan_chain_ids(HUB), {300})

    def test_query_failure_aborts_the_scan(self) -> None:
        client = FakeChainClient(head=25_000, logs=[new_chain_log(270, 20_000)])
        client.fail_on_window = (5_001, 15_000)

        with self.assertRaises(TransportError):
            LogWindowScanner(client, window_blocks=10_000).scan_chain_ids(HUB)
        self.assertEqual(len(client.queries), 2)


class TopicDecodingTests(unittest.TestCase):
    def test_classifies_hub_events(self) -> None:
        self.assertIs(classify_hub_log(new_chain_log(1, 1)), HubEvent.NEW_CHAIN)
        self.assertIs(
            classify_hub_log(make_log(HUB, 1, [topic(ASSET_REGISTERED_TOPIC)])),
            HubEvent.ASSET_REGISTERED
        )
        self.assertIs(classify_hub_log(make_log(HUB, 1, [])), HubEvent.UNRECOGNIZED)

    def test_chain_id_must_fit_64_bits(self) -> None:
        self.assertEqual(topic_to_chain_id(word(2**64 - 1)), 2**64 - 1)
        with self.assertRaises(ShapeError):
            topic_to_chain_id(word(2**64))

    def test_address_narrowing(self) -> None:
        self.assertEqual(topic_to_address(word(0xB0B)), HUB)
        with self.assertRaises(ShapeError):
            topic_to_address(word(1 << 200))
