"""Markdown export of saved items."""

from datetime import date, datetime

from hfn_discovery.core import ItemType, SavedItem

SECTION_TITLES = {
    ItemType.PROFILE: "👤 People",
    ItemType.JOB: "💼 Jobs",
    ItemType.EVENT: "📅 Events",
    ItemType.GROUP: "👥 Groups",
    ItemType.ARTICLE: "📄 Articles",
    ItemType.POST: "💬 Posts",
}


def format_date(value: datetime | date) -> str:
    """Format like 'Nov 15, 2023'."""
    return f"{value.strftime('%b')} {value.day}, {value.year}"


class MarkdownExporter:
    """Render saved items as a markdown document grouped by type."""
    
    def render(self, items: list[SavedItem], generated_on: date) -> str:
        """Render items, keeping the given order inside each section."""
        header = f"# 🔖 Saved items ({format_date(generated_on)})"
        if not items:
            return f"{header}\n\nNothing saved yet."
        
        lines = [
            header,
            "",
            f"Saved items: {len(items)}",
            "",
        ]
        
        for item_type, title in SECTION_TITLES.items():
            section = [item for item in items if item.type == item_type]
            if not section:
                continue
            
            lines.extend([
                f"## {title} ({len(section)})",
                "",
            ])
            for item in section:
                lines.extend(self._format_item(item))
        
        return "\n".join(lines)
    
    def _format_item(self, item: SavedItem) -> list[str]:
        """Format single saved item."""
        heading = f"### [{item.title}]({item.url})" if item.url else f"### {item.title}"
        lines = [heading, ""]
        
        if item.description:
            lines.extend([item.description, ""])
        
        meta_parts = [f"Saved {format_date(item.saved_at)}"]
        if item.date:
            meta_parts.append(format_date(item.date))
        if item.tags:
            tags = ", ".join(f"`{tag}`" for tag in item.visible_tags)
            if item.hidden_tag_count:
                tags += f" +{item.hidden_tag_count} more"
            meta_parts.append(tags)
        
        lines.append(f"*{' • '.join(meta_parts)}*")
        lines.append("")
        lines.append("---")
        lines.append("")
        
        return lines
