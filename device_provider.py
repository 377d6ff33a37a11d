#!/usr/bin/env python3
"""
DiskScore - Device Data Provider

Copyright (C) 2026 Magnus S. Modig

This program is free software: you can redistribute it and/or modify
it under the terms of the GNU General Public License as published by
the Free Software Foundation, either version 3 of the License, or
(at your option) any later version.

This program is distributed in the hope that it will be useful,
but WITHOUT ANY WARRANTY; without even the implied warranty of
MERCHANTABILITY or FITNESS FOR A PARTICULAR PURPOSE. See the
GNU General Public License for more details.

You should have received a copy of the GNU General Public License
along with this program. If not, see <https://www.gnu.org/licenses/>.

Collects disks and reliability counters through pySMART (smartctl) and
partitions/volumes through sysfs and psutil.
"""

import os
import re
import shutil
from pathlib import Path
from typing import Dict, List, Optional

import psutil
from pySMART import DeviceList

from disk_models import HealthStatus, Partition, PhysicalDisk, ReliabilityCounters, Volume
from report_logger import get_logger

logger = get_logger(__name__)

SYS_BLOCK = Path('/sys/block')
BY_LABEL = Path('/dev/disk/by-label')

# 2^32-1: USB bridges report this for attributes they cannot read
SENTINEL = 4294967295

ASSESSMENT_STATUS = {
    'PASS': HealthStatus.HEALTHY,
    'WARN': HealthStatus.WARNING,
    'FAIL': HealthStatus.UNHEALTHY,
}

# ATA attribute IDs
ATTR_POWER_ON_HOURS = 9
ATTR_REPORTED_UNCORRECT = 187
ATTR_OFFLINE_UNCORRECTABLE = 198
ATTR_WRITE_ERROR_RATE = 200


class DeviceQueryError(RuntimeError):
    """Raised when the platform refuses to enumerate storage"""


def _raw_int(raw) -> Optional[int]:
    """First integer of a raw SMART value, None if unreadable"""
    if raw is None:
        return None
    try:
        value = int(str(raw).split()[0])
    except (ValueError, TypeError, IndexError):
        return None
    if value >= SENTINEL:
        return 0
    return value


def _find_attribute(device, attr_id: int):
    if not device.attributes:
        return None
    return next((a for a in device.attributes if a and a.num == attr_id), None)


def _parse_capacity(capacity) -> Optional[int]:
    """Parse capacity string like "480 GB" or "1.0 TB" """
    if not capacity:
        return None
    try:
        cap_str = str(capacity).upper().replace(',', '')
        number = float(cap_str.split()[0])
        if 'TB' in cap_str:
            return int(number * (1024**4))
        elif 'GB' in cap_str:
            return int(number * (1024**3))
        elif 'MB' in cap_str:
            return int(number * (1024**2))
    except (ValueError, TypeError, IndexError):
        pass
    return None


class SmartDeviceProvider:
    """Linux storage snapshot backed by smartctl, sysfs and psutil"""

    def __init__(self, sys_block: Path = SYS_BLOCK, by_label: Path = BY_LABEL):
        self.sys_block = Path(sys_block)
        self.by_label = Path(by_label)
        self._devices: Dict[str, object] = {}
        self._mounts = None

    def is_available(self) -> bool:
        """smartctl on PATH and a sysfs block tree to read partitions from"""
        if shutil.which('smartctl') is None:
            logger.debug("smartctl not found in PATH")
            return False
        if not self.sys_block.is_dir():
            logger.debug(f"{self.sys_block} not present")
            return False
        return True

    def list_physical_disks(self) -> List[PhysicalDisk]:
        try:
            devlist = DeviceList()
        except Exception as e:
            raise DeviceQueryError(f"Error scanning devices: {e}") from e

        disks = []
        for device in devlist.devices:
            if device is None:
                continue
            self._devices[device.name] = device
            disks.append(self._to_physical_disk(device))
        logger.info(f"Found {len(disks)} storage device(s)")
        return sorted(disks, key=lambda d: d.device_id)

    def _to_physical_disk(self, device) -> PhysicalDisk:
        assessment = (device.assessment or '').upper()
        size = getattr(device, 'size', None)
        if not isinstance(size, int) or size <= 0:
            size = _parse_capacity(device.capacity)
        return PhysicalDisk(
            device_id=device.name,
            friendly_name=device.model,
            serial_number=device.serial,
            media_type='SSD' if device.is_ssd else 'HDD',
            bus_type=device.interface,
            size_bytes=size,
            health_status=ASSESSMENT_STATUS.get(assessment, HealthStatus.UNKNOWN),
            operational_status='Degraded' if assessment == 'FAIL' else 'OK',
        )

    def get_reliability_counters(self, disk: PhysicalDisk) -> Optional[ReliabilityCounters]:
        """Counters for a disk, None when the drive reports nothing usable"""
        device = self._devices.get(disk.device_id)
        if device is None:
            return None
        try:
            if device.interface == 'nvme':
                return self._nvme_counters(device)
            return self._ata_counters(device)
        except Exception as e:
            logger.warning(f"Could not read reliability counters for {disk.device_id}: {e}")
            return None

    def _ata_counters(self, device) -> Optional[ReliabilityCounters]:
        if not device.attributes or not any(device.attributes):
            return None

        def value_of(attr_id: int) -> Optional[int]:
            attr = _find_attribute(device, attr_id)
            return _raw_int(attr.raw) if attr else None

        read_errors = value_of(ATTR_REPORTED_UNCORRECT)
        if read_errors is None:
            read_errors = value_of(ATTR_OFFLINE_UNCORRECTABLE)
        write_errors = value_of(ATTR_WRITE_ERROR_RATE)
        hours = value_of(ATTR_POWER_ON_HOURS)
        temperature = device.temperature

        if all(v is None for v in (read_errors, write_errors, hours, temperature)):
            return None
        return ReliabilityCounters(
            temperature=temperature or 0,
            read_errors=read_errors or 0,
            write_errors=write_errors or 0,
            power_on_hours=hours or 0,
        )

    def _nvme_counters(self, device) -> Optional[ReliabilityCounters]:
        nvme = device.if_attributes
        if nvme is None:
            return None
        hours = _raw_int(getattr(nvme, 'powerOnHours', None))
        integrity = _raw_int(getattr(nvme, 'integrityErrors', None))
        log_entries = _raw_int(getattr(nvme, 'errorEntries', None))
        temperature = device.temperature
        if all(v is None for v in (hours, integrity, log_entries, temperature)):
            return None
        return ReliabilityCounters(
            temperature=temperature or 0,
            read_errors=integrity or 0,
            write_errors=log_entries or 0,
            power_on_hours=hours or 0,
        )

    def _block_name(self, disk_id: str) -> Optional[str]:
        """sysfs name for a disk; smartctl names NVMe controllers (nvme0), sysfs namespaces (nvme0n1)"""
        if (self.sys_block / disk_id).is_dir():
            return disk_id
        if not self.sys_block.is_dir():
            return None
        for entry in sorted(os.listdir(self.sys_block)):
            if re.fullmatch(rf"{re.escape(disk_id)}n\d+", entry):
                return entry
        return None

    def list_partitions(self, disk_id: str) -> List[Partition]:
        block = self._block_name(disk_id)
        if block is None:
            return []
        partitions = []
        for child in sorted((self.sys_block / block).iterdir()):
            number_file = child / 'partition'
            if not number_file.is_file():
                continue
            number = int(number_file.read_text().strip())
            partitions.append(Partition(disk_id=disk_id, number=number, device_name=f"/dev/{child.name}"))
        return sorted(partitions, key=lambda p: p.number)

    def _mount_table(self) -> Dict[str, object]:
        if self._mounts is None:
            self._mounts = {}
            for part in psutil.disk_partitions(all=False):
                self._mounts.setdefault(os.path.realpath(part.device), part)
        return self._mounts

    def _labels(self) -> Dict[str, str]:
        labels = {}
        if not self.by_label.is_dir():
            return labels
        for link in self.by_label.iterdir():
            # udev escapes spaces in label names
            label = link.name.replace('\\x20', ' ')
            labels[os.path.realpath(link)] = label
        return labels

    def get_volume(self, partition: Partition) -> Optional[Volume]:
        """Mounted filesystem on a partition, None when not mounted"""
        if not partition.device_name:
            return None
        device_path = os.path.realpath(partition.device_name)
        mount = self._mount_table().get(device_path)
        if mount is None:
            return None
        usage = psutil.disk_usage(mount.mountpoint)
        return Volume(
            mount_label=mount.mountpoint,
            size_bytes=usage.total,
            free_bytes=min(usage.free, usage.total),
            filesystem_label=self._labels().get(device_path),
            filesystem=mount.fstype or None,
        )
