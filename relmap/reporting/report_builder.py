"""
Report Builder Module
=====================

Writes relationship mapping results to disk and formats them as text.

The report contains:
- Per-company relationship summaries
- Aggregate statistics
- The rendered relationship tree
- The full node/connection lists and any skipped lookups

Design Decisions:
-----------------
1. Reports are structured data (JSON-serializable)
2. The text report is what the CLI prints; it never re-renders the tree
"""

import json
from pathlib import Path

from ..model.schemas import MappingResult


REPORT_FILENAME = "relmap_results.json"


class ReportBuilder:
    """Saves mapping results as JSON reports.

    Usage:
        builder = ReportBuilder(output_dir="output")
        path = builder.save_json(result)
    """

    def __init__(self, output_dir: str = "output"):
        """Initialize the report builder.

        Args:
            output_dir: Directory for output files
        """
        self.output_dir = Path(output_dir)

    def save_json(self, result: MappingResult) -> str:
        """Save the result as JSON and record the path on it.

        Returns:
            Path to saved JSON file
        """
        self.output_dir.mkdir(parents=True, exist_ok=True)
        json_path = self.output_dir / REPORT_FILENAME

        result.report_path = str(json_path)
        with open(json_path, "w", encoding="utf-8") as f:
            json.dump(result.to_dict(), f, indent=2, default=str, ensure_ascii=False)

        return str(json_path)


def generate_text_report(result: MappingResult) -> str:
    """Format a mapping result as plain text.

    Args:
        result: MappingResult to format

    Returns:
        Multi-line report string
    """
    lines = [
        "RELATIONSHIP MAPPING REPORT",
        "=" * 60,
        result.message,
        "",
        f"Total entities:    {result.total_mapped}",
        f"Total connections: {result.total_connections}",
    ]

    if result.stats:
        stats = result.stats
        lines.extend([
            f"Companies:         {stats.companies_count}",
            f"Employees:         {stats.employees_count}",
            f"Contacts:          {stats.contacts_count}",
            f"Strong links:      {stats.strong_connections_count}",
            f"Average strength:  {stats.average_connection_strength:.2f}",
        ])

    for summary in result.relationships:
        lines.extend(["", "-" * 60, f"{summary.company_name} ({summary.company_type}, ID {summary.company_id})"])
        if summary.responsible_employee:
            employee = summary.responsible_employee
            email = f" <{employee.email}>" if employee.email else ""
            lines.append(f"  Account manager: {employee.name}{email}")
        for contact in summary.contacts:
            details = ", ".join(v for v in (contact.email, contact.phone) if v)
            lines.append(f"  Contact: {contact.name}" + (f" ({details})" if details else ""))
        if summary.portfolio_companies:
            names = ", ".join(c.name for c in summary.portfolio_companies)
            lines.append(f"  Portfolio: {names}")
        lines.append(f"  Strength: {summary.connection_strength}/100 - {summary.strength_reason}")

    if result.network_map:
        lines.extend(["", result.network_map])

    return "\n".join(lines)
