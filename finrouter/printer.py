"""
Rich printer for displaying response envelopes in the terminal.
"""
import json
from typing import Dict, Any, Optional

from rich.console import Console, Group
from rich.markdown import Markdown
from rich.panel import Panel
from rich.syntax import Syntax
from rich.text import Text

console = Console()


class RichPrinter:
    """
    Displays success and error envelopes with rich formatting.

    Attributes:
        title: Title for the display panel
        show_metadata: Whether to show request metadata under the content
        code_theme: Theme for code blocks
        border_style: Border style for successful responses
    """

    def __init__(
        self,
        title: str = "Response",
        show_metadata: bool = False,
        code_theme: str = "coffee",
        border_style: str = "green",
        output_console: Optional[Console] = None,
    ):
        self.title = title
        self.show_metadata = show_metadata
        self.code_theme = code_theme
        self.border_style = border_style
        self.console = output_console or console
        self._body: Optional[Dict[str, Any]] = None

    def print_envelope(
        self,
        status: int,
        body: Dict[str, Any],
        meta: Optional[Dict[str, Any]] = None,
    ) -> Dict[str, Any]:
        """
        Display a router response.

        Args:
            status: HTTP-equivalent status code.
            body: ``{"content", "hasToolUse"}`` or ``{"error", "details"}``.
            meta: Optional request details (provider, model) shown when
                ``show_metadata`` is enabled.

        Returns:
            The same body for chaining
        """
        self._body = body

        if "error" in body:
            details = body.get("details")
            text = Text(body["error"], style="bold red")
            if details:
                text.append(f"\n\n{details}", style="red")
            self.console.print(
                Panel(text, title=f"[bold]Error[/bold] [dim]({status})[/dim]", border_style="red")
            )
            return body

        provider = (meta or {}).get("provider", "")
        title = f"[bold]{self.title}[/bold]"
        if provider:
            title += f" [dim]({provider})[/dim]"

        self.console.print(
            Panel(
                self._build_content(body.get("content", ""), meta),
                title=title,
                border_style=self.border_style,
                padding=(1, 2),
            )
        )
        return body

    def _build_content(self, text: str, meta: Optional[Dict[str, Any]]) -> Any:
        if not text.strip():
            return Text("(empty response)", style="dim italic")

        markdown = Markdown(text, code_theme=self.code_theme)

        if self.show_metadata and meta:
            metadata_display = Syntax(
                json.dumps(meta, indent=2, default=str),
                "json",
                theme="lightbulb",
                background_color="default",
            )
            return Group(
                markdown,
                Panel(metadata_display, title="[bold]Metadata[/bold]", border_style="dim"),
            )

        return markdown

    def get_text(self) -> str:
        """Get the content from the last printed response."""
        if self._body:
            return self._body.get("content", "")
        return ""
