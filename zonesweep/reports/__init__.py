"""
Report generation modules for ZoneSweep
"""

import csv
import json
from pathlib import Path
from typing import List, Optional

from zonesweep.core.records import ZoneTransferResult
from zonesweep.core.utils import get_timestamp, get_timestamp_filename

CSV_HEADER = ['Domain', 'Nameserver', 'Name', 'Type', 'TTL', 'Value']


def default_report_path(extension: str, directory: Optional[Path] = None) -> Path:
    """
    Build a timestamped report file name, e.g. ``axfr-20240101-120000.json``.

    Args:
        extension: File extension without the dot
        directory: Directory for the file (current directory if None)
    """
    name = f"axfr-{get_timestamp_filename()}.{extension}"
    return (directory or Path(".")) / name


def generate_json_report(results: List[ZoneTransferResult], output_path: Path) -> None:
    """
    Generate JSON report.

    Every attempted (domain, nameserver) pair is written, failed ones included.

    Args:
        results: Zone transfer results in attempt order
        output_path: Output file path
    """
    report = [result.to_dict() for result in results]

    with open(output_path, 'w', encoding='utf-8') as f:
        json.dump(report, f, indent=2, ensure_ascii=False)


def generate_csv_report(results: List[ZoneTransferResult], output_path: Path) -> None:
    """
    Generate CSV report.

    One row per record of each successful transfer.

    Args:
        results: Zone transfer results in attempt order
        output_path: Output file path
    """
    with open(output_path, 'w', newline='', encoding='utf-8') as f:
        writer = csv.writer(f)

        writer.writerow(CSV_HEADER)

        for result in results:
            if not result.success:
                continue
            for record in result.records:
                writer.writerow([
                    result.domain,
                    result.nameserver,
                    record.name,
                    record.type,
                    record.ttl,
                    record.value,
                ])


def format_transfer_report(results: List[ZoneTransferResult]) -> str:
    """
    Format zone transfer results as a human-readable report.

    Args:
        results: Zone transfer results

    Returns:
        Formatted text report
    """
    succeeded = [r for r in results if r.success]

    lines = []
    lines.append("=" * 70)
    lines.append("ZONE TRANSFER REPORT")
    lines.append("=" * 70)
    lines.append("")
    lines.append(f"Generated: {get_timestamp()}")
    lines.append(f"Attempts: {len(results)}")
    lines.append(f"Successful: {len(succeeded)}")
    lines.append(f"Records Disclosed: {sum(len(r.records) for r in succeeded)}")

    for result in results:
        lines.append("")
        lines.append("-" * 70)
        status = "SUCCESS" if result.success else "FAILED"
        lines.append(f"{result.domain}@{result.nameserver}: {status}")
        if not result.success:
            lines.append(f"  Error: {result.error_message}")
            continue
        for record in result.records:
            lines.append(f"  {record.name} {record.ttl} {record.type} {record.value}")

    lines.append("")
    lines.append("=" * 70)

    return "\n".join(lines)


__all__ = [
    "CSV_HEADER",
    "default_report_path",
    "generate_json_report",
    "generate_csv_report",
    "format_transfer_report",
]
