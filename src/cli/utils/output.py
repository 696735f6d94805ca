"""Output formatting utilities for CLI."""

import json
from enum import Enum
from typing import Any, Dict, List, Optional

import yaml
from rich.console import Console
from rich.markup import escape
from rich.table import Table


class OutputFormat(Enum):
    """Output format options."""

    TABLE = "table"
    JSON = "json"
    YAML = "yaml"


class OutputFormatter:
    """Handle output formatting for different formats.

    Items must already be JSON-safe (e.g. ``model_dump(mode="json")``).
    """

    def __init__(self, format_type: str = "table", console: Optional[Console] = None):
        self.console = console or Console()
        try:
            self.format = OutputFormat(format_type.lower())
        except ValueError:
            self.format = OutputFormat.TABLE

    def _print_raw(self, text: str):
        self.console.print(text, markup=False, highlight=False, soft_wrap=True)

    def _print_structured(self, data: Any):
        if self.format == OutputFormat.JSON:
            self._print_raw(json.dumps(data, indent=2))
        else:
            self._print_raw(
                yaml.safe_dump(data, default_flow_style=False, sort_keys=False).rstrip()
            )

    def print_list(
        self,
        items: List[Dict[str, Any]],
        columns: Optional[List[str]] = None,
        title: Optional[str] = None,
        total: Optional[int] = None,
    ):
        """
        Print a list of items.

        Args:
            items: List of items to print
            columns: Column names to display (for table format)
            title: Table title (for table format)
            total: Count of all matching items, when items is one page
        """
        if self.format != OutputFormat.TABLE:
            payload: Any = items
            if total is not None:
                payload = {"results": items, "total": total}
            self._print_structured(payload)
            return

        if not items:
            self.console.print("[dim]No items found[/dim]")
        else:
            if not columns:
                columns = list(items[0].keys())

            table = Table(title=title)
            for col in columns:
                table.add_column(col.replace("_", " ").title())

            for item in items:
                row = []
                for col in columns:
                    value = item.get(col, "")
                    if value is None:
                        value = "-"
                    elif isinstance(value, list):
                        value = ", ".join(str(v) for v in value)
                    else:
                        value = str(value)
                    row.append(value)
                table.add_row(*row)

            self.console.print(table)

        if total is not None:
            self.console.print(f"[dim]Total: {total}[/dim]")

    def print_detail(
        self,
        item: Dict[str, Any],
        title: Optional[str] = None,
    ):
        """
        Print detailed view of a single item.

        Args:
            item: Item to print
            title: Optional title
        """
        if self.format != OutputFormat.TABLE:
            self._print_structured(item)
            return

        if title:
            self.console.print(f"[bold]{title}[/bold]\n")

        for key, value in item.items():
            formatted_key = key.replace("_", " ").title()

            if value is None:
                formatted_value = "Not set"
            elif isinstance(value, list):
                formatted_value = ", ".join(str(v) for v in value) or "-"
            else:
                formatted_value = str(value)

            self.console.print(f"[cyan]{formatted_key}:[/cyan] ", end="")
            self._print_raw(formatted_value)

    def print_success(self, message: str):
        """Print success message."""
        if self.format == OutputFormat.TABLE:
            self.console.print(f"[green]✓[/green] {escape(message)}")
        else:
            self._print_structured({"status": "success", "message": message})

    def print_error(self, message: str):
        """Print error message."""
        if self.format == OutputFormat.TABLE:
            self.console.print(f"[red]✗[/red] {escape(message)}")
        else:
            self._print_structured({"status": "error", "message": message})
