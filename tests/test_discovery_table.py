"""Tests for discovery/packet.py and discovery/table.py."""

import threading

import pytest

from mystrom_exporter.discovery.models import DeviceRecord
from mystrom_exporter.discovery.packet import decode_packet, normalize_mac
from mystrom_exporter.discovery.table import DeviceTable


class TestDecodePacket:
    def test_decodes_mac_and_device_type(self):
        record = decode_packet(bytes([0x01, 0x02, 0x03, 0x04, 0x05, 0x06, 0x02]), ("10.0.0.5", 1234), now=100.0)

        assert record == DeviceRecord(
            mac_address="01:02:03:04:05:06", source_ip="10.0.0.5", port=1234, device_type=2, last_seen=100.0
        )

    def test_extra_payload_is_ignored(self):
        record = decode_packet(bytes([0x5c, 0xcf, 0x7f, 0xab, 0xcd, 0xef, 0x6b, 0xff, 0xff]), ("10.0.0.9", 7979))

        assert record.mac_address == "5c:cf:7f:ab:cd:ef"
        assert record.device_type == 107

    @pytest.mark.parametrize("length", [0, 1, 6])
    def test_short_packets_are_discarded(self, length):
        assert decode_packet(bytes(range(length)), ("10.0.0.5", 1234)) is None


@pytest.mark.parametrize(
    "raw, expected",
    [
        ("01:02:03:04:05:06", "01:02:03:04:05:06"),
        ("5C:CF:7F:AB:CD:EF", "5c:cf:7f:ab:cd:ef"),
        ("5c-cf-7f-ab-cd-ef", "5c:cf:7f:ab:cd:ef"),
        ("5CCF7FABCDEF", "5c:cf:7f:ab:cd:ef"),
        ("garbage", "garbage"),
    ],
)
def test_normalize_mac(raw, expected):
    assert normalize_mac(raw) == expected


def record(mac="01:02:03:04:05:06", ip="10.0.0.5", port=1234, device_type=2, last_seen=100.0):
    return DeviceRecord(mac_address=mac, source_ip=ip, port=port, device_type=device_type, last_seen=last_seen)


class TestDeviceTable:
    def test_upsert_same_record_twice_is_idempotent(self):
        table = DeviceTable()
        rec = record()

        assert table.upsert(rec) is True
        assert table.upsert(rec) is False

        assert table.snapshot() == {"01:02:03:04:05:06": rec}

    def test_last_write_wins(self):
        table = DeviceTable()
        table.upsert(record(ip="10.0.0.5"))
        table.upsert(record(ip="10.0.0.6", device_type=3))

        snapshot = table.snapshot()
        assert len(snapshot) == 1
        assert snapshot["01:02:03:04:05:06"].source_ip == "10.0.0.6"
        assert snapshot["01:02:03:04:05:06"].device_type == 3

    def test_lookup_known_and_unknown(self):
        table = DeviceTable()
        table.upsert(record(ip="10.0.0.5"))

        assert table.lookup("01:02:03:04:05:06") == "10.0.0.5"
        assert table.lookup("01-02-03-04-05-06") == "10.0.0.5"
        assert table.lookup("aa:bb:cc:dd:ee:ff") == ""

    def test_snapshot_is_a_copy(self):
        table = DeviceTable()
        table.upsert(record())

        snapshot = table.snapshot()
        table.upsert(record(mac="aa:bb:cc:dd:ee:ff"))

        assert list(snapshot) == ["01:02:03:04:05:06"]
        assert len(table) == 2

    def test_prune_removes_only_stale_records(self):
        table = DeviceTable()
        table.upsert(record(mac="01:02:03:04:05:06", last_seen=100.0))
        table.upsert(record(mac="aa:bb:cc:dd:ee:ff", last_seen=190.0))

        removed = table.prune(max_age=50, now=200.0)

        assert removed == ["01:02:03:04:05:06"]
        assert list(table.snapshot()) == ["aa:bb:cc:dd:ee:ff"]

    def test_concurrent_readers_and_writer(self):
        table = DeviceTable()
        errors = []

        def writer():
            for i in range(2000):
                table.upsert(record(mac=f"00:00:00:00:{i // 256:02x}:{i % 256:02x}", ip=f"10.0.{i // 256}.{i % 256}"))

        def reader():
            try:
                for _ in range(200):
                    for mac, rec in table.snapshot().items():
                        assert rec.mac_address == mac
            except AssertionError as e:
                errors.append(e)

        threads = [threading.Thread(target=writer)] + [threading.Thread(target=reader) for _ in range(4)]
        for thread in threads:
            thread.start()
        for thread in threads:
            thread.join()

        assert errors == []
        assert len(table) == 2000
