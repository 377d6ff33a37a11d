#!/usr/bin/env python3
# DiskScore
# Copyright (C) 2026 Magnus S. Modig
# Licensed under GPLv3. See LICENSE for details.

"""Text formatting and console rendering for the disk report."""

from enum import Enum
from typing import Iterable, Optional, Tuple

from rich.console import Console
from rich.text import Text

from disk_models import HealthStatus, Partition, PhysicalDisk, ReliabilityCounters, Volume
from health_score import HOURS_PER_YEAR

BYTE_UNITS = ['B', 'KB', 'MB', 'GB', 'TB', 'PB']

DEFAULT_BAR_WIDTH = 20
FULL_GLYPH = '█'
EMPTY_GLYPH = '░'

SEPARATOR = '-' * 60


class HealthTier(Enum):
    """Severity tiers for a health score, best first"""
    NOMINAL = "nominal"
    CAUTION = "caution"
    ELEVATED = "elevated"
    WARNING = "warning"
    CRITICAL = "critical"


# Inclusive lower bounds, checked in order
TIER_THRESHOLDS = [
    (80, HealthTier.NOMINAL),
    (60, HealthTier.CAUTION),
    (40, HealthTier.ELEVATED),
    (20, HealthTier.WARNING),
]

TIER_STYLES = {
    HealthTier.NOMINAL: 'green',
    HealthTier.CAUTION: 'yellow',
    HealthTier.ELEVATED: 'dark_orange',
    HealthTier.WARNING: 'red',
    HealthTier.CRITICAL: 'bold red',
}

RECOMMENDATIONS = {
    HealthTier.NOMINAL: "Disk is in good condition. Continue normal use.",
    HealthTier.CAUTION: "Monitor the disk regularly. Consider a backup.",
    HealthTier.ELEVATED: "Increased risk of failure. Back up your data now.",
    HealthTier.WARNING: "High risk of failure. Back up and plan a replacement.",
    HealthTier.CRITICAL: "CRITICAL: Replace the disk as soon as possible!",
}

STATUS_STYLES = {
    HealthStatus.HEALTHY: 'green',
    HealthStatus.WARNING: 'yellow',
    HealthStatus.UNHEALTHY: 'red',
    HealthStatus.UNKNOWN: 'dim',
}


def format_bytes(value: int) -> str:
    """Human readable size with two decimals, capped at PB"""
    size = float(value or 0)
    index = 0
    while size >= 1024 and index < len(BYTE_UNITS) - 1:
        size /= 1024
        index += 1
    return f"{size:.2f} {BYTE_UNITS[index]}"


def bar_segments(percentage: float, width: int = DEFAULT_BAR_WIDTH) -> Tuple[int, int]:
    """Return (filled, empty) cell counts for a bar"""
    percentage = max(0.0, min(100.0, float(percentage)))
    filled = round(percentage / 100 * width)
    return filled, width - filled


def progress_bar(percentage: float, width: int = DEFAULT_BAR_WIDTH,
                 full: str = FULL_GLYPH, empty: str = EMPTY_GLYPH) -> str:
    filled, blank = bar_segments(percentage, width)
    return f"[{full * filled}{empty * blank}]"


def classify_score(score: float) -> HealthTier:
    for lower_bound, tier in TIER_THRESHOLDS:
        if score >= lower_bound:
            return tier
    return HealthTier.CRITICAL


def format_health_rating(score: float) -> str:
    """Get a textual rating based on health score"""
    if score >= 95:
        return "Excellent"
    elif score >= 80:
        return "Good"
    elif score >= 60:
        return "Fair"
    elif score >= 40:
        return "Poor"
    elif score >= 20:
        return "Bad"
    else:
        return "Critical"


def recommendation_for(tier: HealthTier) -> str:
    return RECOMMENDATIONS[tier]


def health_status_style(status: HealthStatus) -> str:
    return STATUS_STYLES.get(HealthStatus.from_value(status), 'dim')


HOURS_PER_DAY = 24
HOURS_PER_MONTH = 730  # ~30.4 days


def format_power_on_time(hours) -> str:
    """
    Convert hours to a human-readable format.
    - For < 24 hours: Show decimal hours (e.g., "17.8 hours")
    - For >= 24 hours: Show years, months, days, hours breakdown
    """
    if hours < HOURS_PER_DAY:
        return f"{hours:.1f} hours"

    hours = int(hours)
    years = hours // HOURS_PER_YEAR
    remaining = hours % HOURS_PER_YEAR
    months = remaining // HOURS_PER_MONTH
    remaining = remaining % HOURS_PER_MONTH
    days = remaining // HOURS_PER_DAY
    remaining_hours = remaining % HOURS_PER_DAY

    parts = []
    if years > 0:
        parts.append(f"{years} y")
    if months > 0:
        parts.append(f"{months} mo")
    if days > 0 or (years == 0 and months == 0):
        parts.append(f"{days} d")
    if remaining_hours > 0 or len(parts) == 0:
        parts.append(f"{remaining_hours} h")

    return ", ".join(parts) + f" ({hours:,} hours total)"


def _field(label: str, value, style: Optional[str] = None, indent: int = 2) -> Text:
    text = Text(" " * indent + f"{label + ':':<16}")
    text.append("N/A" if value is None or value == "" else str(value), style=style)
    return text


class ReportRenderer:
    """Writes disk sections to a Rich console"""

    def __init__(self, console: Console, bar_width: int = DEFAULT_BAR_WIDTH,
                 full_glyph: str = FULL_GLYPH, empty_glyph: str = EMPTY_GLYPH):
        self.console = console
        self.bar_width = bar_width
        self.full_glyph = full_glyph
        self.empty_glyph = empty_glyph

    def bar(self, percentage: float) -> str:
        return progress_bar(percentage, self.bar_width, self.full_glyph, self.empty_glyph)

    def header(self, disk_count: int) -> None:
        self.console.print(Text(f"Found {disk_count} physical disk(s)", style='bold'))
        self.console.print(SEPARATOR, markup=False)

    def render_disk(self, disk: PhysicalDisk) -> None:
        """Identity, status and capacity fields"""
        title = Text(f"Disk {disk.device_id}", style='bold cyan')
        if disk.friendly_name:
            title.append(f": {disk.friendly_name}", style='bold')
        self.console.print(title)
        self.console.print(_field("Serial", disk.serial_number))
        self.console.print(_field("Media type", disk.media_type))
        self.console.print(_field("Bus type", disk.bus_type))
        size = format_bytes(disk.size_bytes) if disk.size_bytes is not None else None
        self.console.print(_field("Size", size))
        status = HealthStatus.from_value(disk.health_status)
        self.console.print(_field("Health status", status.value, health_status_style(status)))
        self.console.print(_field("Operational", disk.operational_status))

    def render_score(self, score: float) -> None:
        tier = classify_score(score)
        style = TIER_STYLES[tier]
        self.console.print(_field("Health score", f"{score:.2f}/100 - {format_health_rating(score)}", style))
        self.console.print(Text("  " + self.bar(score), style=style))
        self.console.print(_field("Recommendation", recommendation_for(tier), style))

    def render_counters(self, counters: Optional[ReliabilityCounters]) -> None:
        if counters is None:
            self.console.print(Text("  Reliability counters not available", style='dim'))
            return
        self.console.print(Text("  Reliability counters:"))
        temperature = f"{counters.temperature}°C" if counters.temperature and counters.temperature > 0 else None
        self.console.print(_field("Temperature", temperature, indent=4))
        self.console.print(_field("Read errors", counters.read_errors, indent=4))
        self.console.print(_field("Write errors", counters.write_errors, indent=4))
        power_on = None
        if counters.power_on_hours and counters.power_on_hours > 0:
            power_on = format_power_on_time(counters.power_on_hours)
        self.console.print(_field("Power on", power_on, indent=4))

    def render_partitions(self, entries: Iterable[Tuple[Partition, Optional[Volume]]]) -> int:
        """
        Print each partition with a resolvable volume.

        Partitions without a volume are skipped silently.
        Returns the number of partitions seen.
        """
        entries = list(entries)
        if not entries:
            self.console.print(Text("  No partitions on this disk", style='yellow'))
            return 0

        self.console.print(Text("  Partitions:"))
        for partition, volume in entries:
            if volume is None:
                continue
            title = Text(f"    Partition {partition.number}")
            if partition.device_name:
                title.append(f" ({partition.device_name})")
            title.append(f" - {volume.mount_label}", style='bold')
            if volume.filesystem_label:
                title.append(f" [{volume.filesystem_label}]")
            if volume.filesystem:
                title.append(f" {volume.filesystem}", style='dim')
            self.console.print(title)
            percent = volume.percent_used
            self.console.print(_field("Size", format_bytes(volume.size_bytes), indent=6))
            self.console.print(_field("Free", format_bytes(volume.free_bytes), indent=6))
            self.console.print(_field("Used", f"{percent}%", indent=6))
            self.console.print(Text("      " + self.bar(percent)))
        return len(entries)

    def separator(self) -> None:
        self.console.print(SEPARATOR, markup=False)
