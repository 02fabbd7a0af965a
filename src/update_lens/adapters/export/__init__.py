"""Export adapters."""

from update_lens.adapters.export.markdown_exporter import MarkdownExporter

__all__ = ["MarkdownExporter"]
