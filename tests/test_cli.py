from unittest.mock import AsyncMock, patch

from rich.console import Console
from typer.testing import CliRunner

from finrouter.cli import app
from finrouter.printer import RichPrinter

runner = CliRunner()


class TestRichPrinter:

    def test_success_envelope(self):
        out = Console(record=True, width=80)
        printer = RichPrinter(output_console=out)

        printer.print_envelope(200, {"content": "**AAPL** is up", "hasToolUse": False}, {"provider": "anthropic"})

        text = out.export_text()
        assert "AAPL is up" in text
        assert "anthropic" in text
        assert printer.get_text() == "**AAPL** is up"

    def test_error_envelope(self):
        out = Console(record=True, width=80)

        RichPrinter(output_console=out).print_envelope(
            400, {"error": "Failed to process file content", "details": "Invalid base64"}
        )

        text = out.export_text()
        assert "Failed to process file content" in text
        assert "400" in text


@patch("finrouter.cli.FinanceRouter")
def test_ask_routes_through_handle(mock_router_cls):
    mock_router_cls.return_value.handle = AsyncMock(return_value=(200, {"content": "ok", "hasToolUse": False}))

    result = runner.invoke(app, ["ask", "Analyze AAPL", "--model", "gpt-4o", "--provider", "openai"])

    assert result.exit_code == 0
    payload = mock_router_cls.return_value.handle.call_args.args[0]
    assert payload["provider"] == "openai"
    assert payload["messages"] == [{"role": "user", "content": "Analyze AAPL"}]


@patch("finrouter.cli.FinanceRouter")
def test_ask_chart_type_uses_chain(mock_router_cls):
    mock_router_cls.return_value.handle_chain = AsyncMock(return_value=(200, {"content": "{}", "hasToolUse": False}))

    result = runner.invoke(app, ["ask", "Q1 100", "-m", "claude", "--chart-type", "pie"])

    assert result.exit_code == 0
    assert mock_router_cls.return_value.handle_chain.call_args.args[0]["chartType"] == "pie"


@patch("finrouter.cli.FinanceRouter")
def test_ask_error_exits_nonzero(mock_router_cls):
    mock_router_cls.return_value.handle = AsyncMock(
        return_value=(500, {"error": "Unsupported provider: mistral"})
    )

    result = runner.invoke(app, ["ask", "hi", "-m", "x", "-p", "mistral"])

    assert result.exit_code == 1
