"""Markdown export of a customer's release update."""

from pathlib import Path

from update_lens.adapters.export.links import (
    is_release_plans_url,
    is_valid_guid,
    is_valid_http_url,
)
from update_lens.core import (
    ReleaseExporter,
    ReleasePlanRecord,
    ReleaseRecord,
    normalize_product_label,
)

SOURCE_FALLBACK = "Source not available"
DOCS_FALLBACK = "Documentation not available"


class MarkdownExporter(ReleaseExporter):
    """Render records grouped by product as a Markdown document."""

    def render(self, records: list[ReleaseRecord], customer_name: str) -> str:
        """Render one section per product, in order of first appearance."""
        grouped: dict[str, list[ReleaseRecord]] = {}
        for record in records:
            label = normalize_product_label(record.product_name) or record.product_name
            grouped.setdefault(label, []).append(record)

        lines = [
            f"# Release Update - {customer_name}",
            "",
        ]

        if not grouped:
            lines.append("No updates match the current filters.")
            return "\n".join(lines)

        for product, product_records in grouped.items():
            lines.extend([
                f"## {product}",
                "",
            ])
            for record in product_records:
                lines.extend(self._format_record(record))
            lines.append("")

        return "\n".join(lines)

    def _format_record(self, record: ReleaseRecord) -> list[str]:
        """Format single record as a bullet with details."""
        docs_url = record.learn_url if is_valid_http_url(record.learn_url) else DOCS_FALLBACK
        return [
            f"- {record.title}",
            f"  - Status: {record.status.value}",
            f"  - Date: {record.release_date}",
            f"  - Summary: {record.description or record.summary}",
            f"  - Link: {self._source_link(record)}",
            f"  - Documentation: {docs_url}",
        ]

    def _source_link(self, record: ReleaseRecord) -> str:
        if isinstance(record, ReleasePlanRecord):
            # Only deep links into the release planner are trustworthy
            if (
                record.source_plan_id
                and is_valid_guid(record.source_plan_id)
                and is_release_plans_url(record.source_url)
            ):
                return record.source_url
            return SOURCE_FALLBACK

        if is_valid_http_url(record.source_url):
            return record.source_url
        return SOURCE_FALLBACK

    def save(self, content: str, output_path: Path) -> None:
        """Save document to file."""
        output_path.parent.mkdir(parents=True, exist_ok=True)
        output_path.write_text(content, encoding="utf-8")
        print(f"Update saved to {output_path}")
