#!/usr/bin/env python3
# DiskScore
# Copyright (C) 2026 Magnus S. Modig
# Licensed under GPLv3. See LICENSE for details.

"""
Read-only snapshots of the storage layout collected once per run.

Reliability counters are optional per disk: a provider returns ``None`` when a
drive reports nothing usable, and every consumer must handle that case.
"""

from dataclasses import dataclass
from enum import Enum
from typing import Optional, Union


class HealthStatus(Enum):
    """Coarse health status reported by the device"""
    HEALTHY = "Healthy"
    WARNING = "Warning"
    UNHEALTHY = "Unhealthy"
    UNKNOWN = "Unknown"

    @classmethod
    def from_value(cls, value) -> "HealthStatus":
        """Lenient lookup: unknown or missing values map to UNKNOWN"""
        if isinstance(value, cls):
            return value
        if value is None:
            return cls.UNKNOWN
        text = str(value).strip().lower()
        for status in cls:
            if status.value.lower() == text:
                return status
        return cls.UNKNOWN


@dataclass(frozen=True)
class PhysicalDisk:
    device_id: str
    friendly_name: Optional[str]
    serial_number: Optional[str]
    media_type: Optional[str]
    bus_type: Optional[str]
    size_bytes: Optional[int]
    health_status: HealthStatus = HealthStatus.UNKNOWN
    operational_status: Optional[str] = None


@dataclass(frozen=True)
class ReliabilityCounters:
    temperature: Union[int, float] = 0
    read_errors: int = 0
    write_errors: int = 0
    power_on_hours: Union[int, float] = 0


@dataclass(frozen=True)
class Partition:
    disk_id: str
    number: int
    device_name: Optional[str] = None


@dataclass(frozen=True)
class Volume:
    mount_label: str
    size_bytes: int
    free_bytes: int
    filesystem_label: Optional[str] = None
    filesystem: Optional[str] = None

    @property
    def used_bytes(self) -> int:
        return self.size_bytes - self.free_bytes

    @property
    def percent_used(self) -> int:
        """Whole-number share of the volume in use (0 for an empty volume)"""
        if not self.size_bytes:
            return 0
        return round(self.used_bytes / self.size_bytes * 100)
