"""Command-line entry point using Typer."""
import asyncio
from pathlib import Path
from typing import Any, Dict, Optional

import typer
import uvicorn

from .client import FinanceRouter
from .config import Settings
from .log import configure_logging
from .printer import RichPrinter, console
from .utils import encode_file

app = typer.Typer(
    name="finrouter",
    help="Route financial-analysis chat requests to Anthropic, OpenAI or Google models",
    no_args_is_help=True,
)


@app.command()
def serve(
    host: Optional[str] = typer.Option(None, help="Bind address (default: FINROUTER_HOST)"),
    port: Optional[int] = typer.Option(None, help="Port (default: FINROUTER_PORT)"),
    reload: bool = typer.Option(False, "--reload", help="Reload on code changes"),
):
    """Serve the HTTP API with uvicorn."""
    settings = Settings.from_env()
    configure_logging(settings.log_level)
    uvicorn.run(
        "finrouter.server:create_app",
        factory=True,
        host=host or settings.host,
        port=port or settings.port,
        reload=reload,
        log_config=None,
    )


@app.command()
def ask(
    prompt: str = typer.Argument(..., help="Message to send"),
    model: str = typer.Option(..., "--model", "-m", help="Model identifier"),
    provider: str = typer.Option("anthropic", "--provider", "-p", help="anthropic, openai or google"),
    file: Optional[Path] = typer.Option(None, "--file", "-f", help="Attach a text or image file"),
    chain: bool = typer.Option(False, "--chain", help="Use the prompt-chain pipeline"),
    chart_type: Optional[str] = typer.Option(None, "--chart-type", help="Chart chain: bar, line, pie, ..."),
    structured: bool = typer.Option(False, "--structured", help="Chain: validate into four sections"),
    show_metadata: bool = typer.Option(False, "--meta", help="Show request metadata"),
):
    """Send one request through the router and print the result."""
    settings = Settings.from_env()
    configure_logging(settings.log_level)
    router = FinanceRouter(settings)

    payload: Dict[str, Any] = {
        "messages": [{"role": "user", "content": prompt}],
        "model": model,
        "provider": provider,
    }

    use_chain = chain or chart_type is not None or structured
    if use_chain:
        if file is not None:
            console.print("[yellow]--file is ignored by the chain pipeline[/yellow]")
        payload["chartType"] = chart_type
        payload["structured"] = structured
        status, body = asyncio.run(router.handle_chain(payload))
    else:
        if file is not None:
            payload["fileData"] = encode_file(file)
        status, body = asyncio.run(router.handle(payload))

    RichPrinter(show_metadata=show_metadata).print_envelope(
        status, body, meta={"provider": provider, "model": model, "chain": use_chain}
    )
    if status != 200:
        raise typer.Exit(code=1)


if __name__ == "__main__":
    app()
