"""Export adapters."""

from hfn_discovery.adapters.export.markdown_exporter import MarkdownExporter

__all__ = ["MarkdownExporter"]
