#!/usr/bin/env python3
"""
DiskScore - Physical Disk Health Report

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
"""

import argparse
import platform
import shutil
import sys
from contextlib import contextmanager
from dataclasses import dataclass
from importlib.metadata import PackageNotFoundError, version
from typing import Dict, List, Optional

from rich.console import Console
from rich.text import Text

import config_manager
from device_provider import SmartDeviceProvider
from disk_models import PhysicalDisk
from health_score import calculate_health_score
from presenter import ReportRenderer
from report_logger import get_logger, set_console_level, setup_file_logging

__version__ = "1.0.0"

logger = get_logger(__name__)

REMEDIATION_HINTS = [
    "Run the tool with administrative privileges (sudo)",
    "Check the physical and cable connections of your disks",
    "Try running the report again",
]

UNAVAILABLE_CAUSES = [
    "Running inside a virtual machine or container without direct disk access",
    "Missing administrative privileges (try sudo)",
    "Storage subsystem support is missing (install smartmontools)",
]


@dataclass
class ReportResult:
    """Outcome of one report run"""
    ok: bool
    disks_reported: int = 0
    error: Optional[Exception] = None


def _package_version(name: str) -> str:
    try:
        return version(name)
    except PackageNotFoundError:
        return "not installed"


def environment_info() -> Dict[str, str]:
    """Basic identification of the host and tooling"""
    return {
        'OS': f"{platform.system()} {platform.release()}".strip(),
        'Python': platform.python_version(),
        'DiskScore': __version__,
        'pySMART': _package_version('pySMART'),
        'smartctl': shutil.which('smartctl') or "not found",
    }


def print_unavailable(console: Console) -> None:
    """Explain why disks cannot be enumerated on this host"""
    console.print(Text("Physical disk information is not available on this system.", style='bold yellow'))
    console.print("\nPossible causes:")
    for cause in UNAVAILABLE_CAUSES:
        console.print(Text(f"  - {cause}"))
    console.print("\nEnvironment:")
    for key, value in environment_info().items():
        console.print(Text(f"  {key + ':':<11} {value}"))


def report_failure(console: Console, error: Exception) -> None:
    console.print(Text(f"Error while reading disk information: {error}", style='bold red'))
    console.print_exception()
    console.print("\nSuggestions:")
    for hint in REMEDIATION_HINTS:
        console.print(Text(f"  - {hint}"))


@contextmanager
def report_session(console: Console):
    """Guarantees the completion notice whatever happens inside the run"""
    try:
        yield
    finally:
        console.print(Text("\nDisk report finished.", style='bold'))


def _score_disk(provider, disk: PhysicalDisk):
    """Fetch counters once and score them; unreadable counters score 0"""
    try:
        counters = provider.get_reliability_counters(disk)
    except Exception as e:
        logger.warning(f"Could not read reliability counters for {disk.device_id}: {e}")
        return None, 0.0
    return counters, calculate_health_score(disk, counters)


def run_report(provider, console: Console, renderer: Optional[ReportRenderer] = None) -> ReportResult:
    """
    Print the full report for every disk the provider knows about.

    Any failure while enumerating disks, partitions or volumes is reported to
    the console and returned in the result instead of raised.
    """
    renderer = renderer or ReportRenderer(console)
    reported = 0
    try:
        disks: List[PhysicalDisk] = sorted(provider.list_physical_disks(), key=lambda d: d.device_id)
        renderer.header(len(disks))

        for disk in disks:
            counters, score = _score_disk(provider, disk)
            renderer.render_disk(disk)
            renderer.render_score(score)
            renderer.render_counters(counters)

            partitions = provider.list_partitions(disk.device_id)
            entries = [(partition, provider.get_volume(partition)) for partition in partitions]
            renderer.render_partitions(entries)
            renderer.separator()
            reported += 1

        console.print(Text(f"Reported {reported} disk(s)", style='bold green'))
        return ReportResult(ok=True, disks_reported=reported)
    except Exception as e:
        logger.debug("Report aborted", exc_info=True)
        report_failure(console, e)
        return ReportResult(ok=False, disks_reported=reported, error=e)


def _configure_logging(config: Dict) -> None:
    verbosity = config_manager.get_log_verbosity(config)
    set_console_level(verbosity)
    try:
        setup_file_logging(config_manager.get_log_file(config), verbose=verbosity == 'debug')
    except (OSError, TypeError, ValueError) as e:
        logger.warning(f"File logging disabled: {e}")
    logger.debug(f"Settings from {config_manager.CONFIG_FILE}:\n{config_manager.export_config()}")


def build_renderer(console: Console, config: Dict) -> ReportRenderer:
    full, empty = config_manager.get_glyphs(config)
    return ReportRenderer(
        console,
        bar_width=config_manager.get_bar_width(config),
        full_glyph=full,
        empty_glyph=empty,
    )


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        description='DiskScore - report physical disks, partitions and a health score for each disk',
        formatter_class=argparse.RawDescriptionHelpFormatter
    )
    parser.add_argument(
        '--version',
        action='version',
        version=f'%(prog)s {__version__}'
    )
    return parser


def main(argv=None, provider=None, console: Optional[Console] = None):
    """Main entry point; always exits with status 0"""
    try:
        _, unknown = build_parser().parse_known_args(argv)
        if unknown:
            logger.warning(f"Ignoring unknown arguments: {' '.join(unknown)}")

        config = config_manager.load_config()
        _configure_logging(config)

        if console is None:
            console = Console(no_color=not config_manager.is_color_enabled(config), highlight=False)
        if provider is None:
            provider = SmartDeviceProvider()

        with report_session(console):
            try:
                available = provider.is_available()
            except Exception as e:
                logger.warning(f"Availability check failed: {e}")
                available = False
            if not available:
                print_unavailable(console)
            else:
                run_report(provider, console, build_renderer(console, config))
    except SystemExit:
        # --help, --version and argument errors stop here
        pass
    except Exception as e:
        logger.error(f"DiskScore stopped: {e}", exc_info=True)

    sys.exit(0)


if __name__ == '__main__':
    main()
