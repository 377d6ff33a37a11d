#!/usr/bin/env python3
"""
End-to-end tests of the report run against an in-memory device provider.
"""

import io
import logging

import pytest
from rich.console import Console

import config_manager
from device_provider import DeviceQueryError
from disk_models import HealthStatus, Partition, PhysicalDisk, ReliabilityCounters, Volume
from disk_report import ReportResult, environment_info, main, run_report
from report_logger import set_console_level

GIB = 1024**3
HALF_BAR = "[" + "█" * 10 + "░" * 10 + "]"


class FakeProvider:
    """Provider serving fixed disks; records every partition/volume query"""

    def __init__(self, disks=(), counters=None, partitions=None, volumes=None, available=True):
        self.disks = list(disks)
        self.counters = counters or {}
        self.partitions = partitions or {}
        self.volumes = volumes or {}
        self.available = available
        self.partition_queries = []
        self.volume_queries = []

    def is_available(self):
        return self.available

    def list_physical_disks(self):
        return list(self.disks)

    def get_reliability_counters(self, disk):
        counters = self.counters.get(disk.device_id)
        if isinstance(counters, Exception):
            raise counters
        return counters

    def list_partitions(self, disk_id):
        self.partition_queries.append(disk_id)
        partitions = self.partitions.get(disk_id, [])
        if isinstance(partitions, Exception):
            raise partitions
        return partitions

    def get_volume(self, partition):
        self.volume_queries.append(partition)
        return self.volumes.get((partition.disk_id, partition.number))


def make_disk(device_id="sda", status=HealthStatus.HEALTHY, name="Test Disk"):
    return PhysicalDisk(
        device_id=device_id,
        friendly_name=name,
        serial_number="SN-" + device_id,
        media_type="HDD",
        bus_type="sat",
        size_bytes=500 * GIB,
        health_status=status,
        operational_status="OK",
    )


@pytest.fixture
def console():
    return Console(file=io.StringIO(), width=120, color_system=None, highlight=False)


@pytest.fixture(autouse=True)
def isolated_config(tmp_path, monkeypatch):
    monkeypatch.setattr(config_manager, "CONFIG_FILE", tmp_path / "settings.json")
    return tmp_path / "settings.json"


def test_healthy_disk_without_counters(console):
    provider = FakeProvider(
        disks=[make_disk()],
        partitions={"sda": [Partition(disk_id="sda", number=1, device_name="/dev/sda1")]},
        volumes={("sda", 1): Volume(mount_label="/", size_bytes=2147483648, free_bytes=1073741824)},
    )
    result = run_report(provider, console)
    out = console.file.getvalue()

    assert result == ReportResult(ok=True, disks_reported=1)
    assert "100.00/100" in out
    assert "2.00 GB" in out
    assert "1.00 GB" in out
    assert "50%" in out
    assert HALF_BAR in out
    assert "Reliability counters not available" in out


def test_disk_without_partitions(console):
    provider = FakeProvider(disks=[make_disk()])
    run_report(provider, console)
    out = console.file.getvalue()
    assert "No partitions on this disk" in out
    assert "Partitions:" not in out
    assert provider.volume_queries == []


def test_disks_reported_in_device_id_order(console):
    provider = FakeProvider(disks=[make_disk("sdb", name="Second"), make_disk("sda", name="First")])
    result = run_report(provider, console)
    out = console.file.getvalue()
    assert result.disks_reported == 2
    assert out.index("Disk sda") < out.index("Disk sdb")
    assert provider.partition_queries == ["sda", "sdb"]


def test_counters_are_scored_and_displayed(console):
    counters = ReliabilityCounters(temperature=40, read_errors=1, write_errors=3, power_on_hours=8760)
    provider = FakeProvider(disks=[make_disk()], counters={"sda": counters})
    run_report(provider, console)
    out = console.file.getvalue()
    assert "84.50/100" in out
    assert "40°C" in out
    assert "Reliability counters:" in out


def test_unreadable_counters_score_zero(console):
    provider = FakeProvider(disks=[make_disk()], counters={"sda": ValueError("garbled")})
    result = run_report(provider, console)
    assert result.ok
    assert " 0.00/100 -" in console.file.getvalue()


def test_scoring_failure_does_not_affect_other_disks(console):
    provider = FakeProvider(
        disks=[make_disk("sda"), make_disk("sdb", status=HealthStatus.WARNING)],
        counters={"sda": ReliabilityCounters(temperature=None)},
    )
    result = run_report(provider, console)
    out = console.file.getvalue()
    assert result.disks_reported == 2
    assert " 0.00/100 -" in out
    assert "50.00/100" in out


def test_enumeration_failure_is_reported(console):
    provider = FakeProvider(
        disks=[make_disk("sda"), make_disk("sdb")],
        partitions={"sdb": DeviceQueryError("sysfs went away")},
    )
    result = run_report(provider, console)
    out = console.file.getvalue()
    assert not result.ok
    assert result.disks_reported == 1
    assert isinstance(result.error, DeviceQueryError)
    assert "sysfs went away" in out
    assert "administrative privileges" in out
    assert "Try running the report again" in out


def test_main_unavailable_exits_zero(console):
    provider = FakeProvider(disks=[make_disk()], available=False)
    with pytest.raises(SystemExit) as exc:
        main([], provider=provider, console=console)
    out = console.file.getvalue()
    assert exc.value.code == 0
    assert "not available on this system" in out
    assert "virtual machine" in out
    assert "Python:" in out
    assert provider.partition_queries == []
    assert provider.volume_queries == []


def test_main_failure_still_finishes_and_exits_zero(console):
    provider = FakeProvider(disks=[make_disk()], partitions={"sda": RuntimeError("boom")})
    with pytest.raises(SystemExit) as exc:
        main([], provider=provider, console=console)
    out = console.file.getvalue()
    assert exc.value.code == 0
    assert "boom" in out
    assert "Disk report finished." in out


def test_main_uses_configured_bar_width(console, isolated_config):
    config_manager.save_config({"display": {"bar_width": 10}}, isolated_config)
    provider = FakeProvider(
        disks=[make_disk()],
        partitions={"sda": [Partition(disk_id="sda", number=1)]},
        volumes={("sda", 1): Volume(mount_label="/srv", size_bytes=1000, free_bytes=500)},
    )
    with pytest.raises(SystemExit):
        main([], provider=provider, console=console)
    out = console.file.getvalue()
    assert "[" + "█" * 5 + "░" * 5 + "]" in out
    assert "Reported 1 disk(s)" in out
    assert "Disk report finished." in out


def run_main(argv, provider, console):
    with pytest.raises(SystemExit) as exc:
        main(argv, provider=provider, console=console)
    return exc.value.code, console.file.getvalue()


def test_main_ignores_unknown_arguments(console):
    code, out = run_main(["--bogus"], FakeProvider(disks=[make_disk()]), console)
    assert code == 0
    assert "Reported 1 disk(s)" in out
    assert "Disk report finished." in out


def test_main_survives_non_string_log_file(console, isolated_config):
    config_manager.save_config({"logging": {"log_file": 5}}, isolated_config)
    code, out = run_main([], FakeProvider(disks=[make_disk()]), console)
    assert code == 0
    assert "Reported 1 disk(s)" in out


class BrokenAvailabilityProvider(FakeProvider):
    def is_available(self):
        raise OSError("smartctl crashed")


def test_main_availability_check_failure_counts_as_unavailable(console):
    provider = BrokenAvailabilityProvider(disks=[make_disk()])
    code, out = run_main([], provider, console)
    assert code == 0
    assert "not available on this system" in out
    assert "Disk report finished." in out
    assert provider.partition_queries == []


def test_debug_verbosity_logs_exported_settings(console, isolated_config, caplog):
    config_manager.save_config({"logging": {"verbosity": "debug"}}, isolated_config)
    try:
        with caplog.at_level(logging.DEBUG, logger="diskscore"):
            run_main([], FakeProvider(disks=[make_disk()]), console)
    finally:
        set_console_level("warning")
    assert f"Settings from {isolated_config}" in caplog.text
    assert '"verbosity": "debug"' in caplog.text


def test_environment_info_keys():
    info = environment_info()
    assert set(info) == {'OS', 'Python', 'DiskScore', 'pySMART', 'smartctl'}
