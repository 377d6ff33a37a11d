#!/usr/bin/env python3
"""
DiskScore - Health Score

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

Converts reliability counters into a single 0-100 wear score.
"""

import math
from typing import Dict, Optional

from disk_models import HealthStatus, PhysicalDisk, ReliabilityCounters
from report_logger import get_logger

logger = get_logger(__name__)

# Weights - fixed, sum to 1.0
WEIGHTS = {
    'temperature': 0.30,
    'read_errors': 0.25,
    'write_errors': 0.25,
    'power_on_hours': 0.20,
}

TEMPERATURE_BASELINE_C = 30
TEMPERATURE_PENALTY_PER_DEGREE = 2
ERROR_PENALTY_PER_DOUBLING = 10
HOURS_PER_YEAR = 8760  # 365 * 24
AGE_PENALTY_PER_YEAR = 10

# Used when a disk reports no counters at all
FALLBACK_SCORES = {
    HealthStatus.HEALTHY: 100,
    HealthStatus.WARNING: 50,
    HealthStatus.UNHEALTHY: 10,
}


def _clamp(value: float) -> float:
    return max(0.0, min(100.0, value))


def score_temperature(temp) -> float:
    """2 points per degree above 30C. Zero or negative means no sensor reading."""
    if temp <= 0:
        return 100.0
    penalty = max(0, (temp - TEMPERATURE_BASELINE_C) * TEMPERATURE_PENALTY_PER_DEGREE)
    return _clamp(100 - penalty)


def score_errors(count) -> float:
    """
    Logarithmic error penalty: the first few errors cost little,
    every doubling of the count costs another 10 points.
    """
    if count == 0:
        return 100.0
    return _clamp(100 - math.log2(count + 1) * ERROR_PENALTY_PER_DOUBLING)


def score_power_on_hours(hours) -> float:
    """10 points per year of continuous operation"""
    if hours <= 0:
        return 100.0
    return _clamp(100 - (hours / HOURS_PER_YEAR) * AGE_PENALTY_PER_YEAR)


COUNTER_FIELDS = ('temperature', 'read_errors', 'write_errors', 'power_on_hours')


def _readings(counters: ReliabilityCounters) -> Dict[str, float]:
    """Raw counter values; anything that is not a finite number is unusable"""
    readings = {}
    for name in COUNTER_FIELDS:
        value = getattr(counters, name)
        if isinstance(value, bool) or not math.isfinite(value):
            raise ValueError(f"{name} is not a usable reading: {value!r}")
        readings[name] = value
    return readings


def wear_factors(counters: ReliabilityCounters) -> Dict[str, float]:
    """Individual wear factors, each in [0, 100]"""
    readings = _readings(counters)
    return {
        'temperature': score_temperature(readings['temperature']),
        'read_errors': score_errors(readings['read_errors']),
        'write_errors': score_errors(readings['write_errors']),
        'power_on_hours': score_power_on_hours(readings['power_on_hours']),
    }


def fallback_score(status) -> float:
    """Score from the coarse health status alone"""
    return float(FALLBACK_SCORES.get(HealthStatus.from_value(status), 0))


def calculate_health_score(disk: PhysicalDisk, counters: Optional[ReliabilityCounters]) -> float:
    """
    Calculate a health score (0-100) for one disk.

    With counters:
        temperature 30% + read errors 25% + write errors 25% + power-on hours 20%,
        rounded to two decimals.

    Without counters:
        Healthy 100, Warning 50, Unhealthy 10, anything else 0.

    Never raises. A counters record that cannot be evaluated scores 0.
    """
    if counters is None:
        status = disk.health_status if disk is not None else None
        return fallback_score(status)

    try:
        factors = wear_factors(counters)
        total = sum(factors[name] * weight for name, weight in WEIGHTS.items())
        return round(_clamp(total), 2)
    except Exception as e:
        device_id = getattr(disk, 'device_id', '?')
        logger.warning(f"Could not score reliability counters for {device_id}: {e}")
        return 0.0
