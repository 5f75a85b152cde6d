import json

import anthropic
import pytest
from unittest.mock import patch
from langchain_core.language_models.fake_chat_models import FakeListChatModel
from langchain_core.runnables import RunnableLambda
from langchain_google_genai.chat_models import ChatGoogleGenerativeAIError

from finrouter.chains import (
    FinancialAnalysis,
    create_chart_chain,
    create_structured_analysis_chain,
    get_model,
    run_chain,
)
from finrouter.errors import ChainOutputError, ChartSpecError, ProviderError, UnsupportedProviderError

MESSAGES = [{"role": "user", "content": "Revenue: Q1 100, Q2 120, Q3 90"}]

ANALYSIS_JSON = json.dumps({
    "insights": ["Revenue peaked in Q2"],
    "trends": ["Volatile quarter-on-quarter"],
    "risks": ["Q3 decline"],
    "recommendations": ["Investigate Q3 costs"],
})


def fake_model(*responses):
    return FakeListChatModel(responses=list(responses))


def failing_gemini(_):
    raise ChatGoogleGenerativeAIError("Error calling model 'gemini-2.0-flash' (INVALID_ARGUMENT): API key not valid")


class TestGetModel:

    @patch("finrouter.chains.ChatGoogleGenerativeAI")
    @patch("finrouter.chains.ChatOpenAI")
    @patch("finrouter.chains.ChatAnthropic")
    def test_unknown_provider_fails_fast(self, mock_anthropic, mock_openai, mock_google, settings):
        with pytest.raises(UnsupportedProviderError):
            get_model("unknown-provider", "model", settings)

        mock_anthropic.assert_not_called()
        mock_openai.assert_not_called()
        mock_google.assert_not_called()

    @patch("finrouter.chains.ChatAnthropic")
    def test_anthropic_model(self, mock_anthropic, settings):
        get_model("anthropic", "claude-3-opus-20240229", settings)
        mock_anthropic.assert_called_once_with(model="claude-3-opus-20240229", api_key="sk-test-anthropic")

    @patch("finrouter.chains.ChatOpenAI")
    def test_openai_model(self, mock_openai, settings):
        get_model("openai", "gpt-4-turbo-preview", settings)
        mock_openai.assert_called_once_with(model="gpt-4-turbo-preview", api_key="sk-test-openai")

    @patch("finrouter.chains.ChatGoogleGenerativeAI")
    def test_google_model(self, mock_google, settings):
        get_model("google", "gemini-pro", settings)
        mock_google.assert_called_once_with(model="gemini-pro", google_api_key="AIza-test-google")


class TestChains:

    @pytest.mark.asyncio
    async def test_structured_chain_parses_into_model(self, settings):
        with patch("finrouter.chains.get_model", return_value=fake_model(ANALYSIS_JSON)):
            chain = create_structured_analysis_chain("anthropic", "claude", settings)

        result = await chain.ainvoke({"data": "Revenue: Q1 100"})

        assert isinstance(result, FinancialAnalysis)
        assert result.risks == ["Q3 decline"]

    @pytest.mark.asyncio
    async def test_chart_chain_returns_raw_text(self, settings):
        reply = '{"type": "bar", "title": "Revenue"}'
        with patch("finrouter.chains.get_model", return_value=fake_model(reply)):
            chain = create_chart_chain("openai", "gpt-4o", settings)

        assert await chain.ainvoke({"chartType": "bar", "data": "Q1 100"}) == reply


class TestRunChain:

    @pytest.mark.asyncio
    async def test_analysis_chain(self, settings):
        with patch("finrouter.chains.get_model", return_value=fake_model("1. Insights ...")):
            envelope = await run_chain("anthropic", "claude", MESSAGES, settings)

        assert envelope == {"content": "1. Insights ...", "hasToolUse": False}

    @pytest.mark.asyncio
    async def test_structured_result_is_json_encoded(self, settings):
        with patch("finrouter.chains.get_model", return_value=fake_model(ANALYSIS_JSON)):
            envelope = await run_chain("google", "gemini-pro", MESSAGES, settings, structured=True)

        assert json.loads(envelope["content"]) == json.loads(ANALYSIS_JSON)

    @pytest.mark.asyncio
    async def test_structured_parse_failure(self, settings):
        with patch("finrouter.chains.get_model", return_value=fake_model("Revenue looks fine.")):
            with pytest.raises(ChainOutputError):
                await run_chain("anthropic", "claude", MESSAGES, settings, structured=True)

    @pytest.mark.asyncio
    async def test_unknown_provider_makes_no_call(self, settings):
        with patch("finrouter.chains.get_model") as mock_get_model:
            with pytest.raises(UnsupportedProviderError):
                await run_chain("unknown-provider", "model", MESSAGES, settings)

        mock_get_model.assert_not_called()

    @pytest.mark.asyncio
    async def test_unknown_chart_type(self, settings):
        with patch("finrouter.chains.get_model") as mock_get_model:
            with pytest.raises(ChartSpecError):
                await run_chain("openai", "gpt-4o", MESSAGES, settings, chart_type="radar")

        mock_get_model.assert_not_called()

    @pytest.mark.asyncio
    async def test_sdk_error_is_labelled(self, settings):
        with patch("finrouter.chains.get_model", side_effect=anthropic.AnthropicError("missing key")):
            with pytest.raises(ProviderError) as exc_info:
                await run_chain("anthropic", "claude", MESSAGES, settings)

        assert exc_info.value.label == "Anthropic API Error"

    @pytest.mark.asyncio
    async def test_google_integration_error_is_labelled(self, settings):
        with patch("finrouter.chains.get_model", return_value=RunnableLambda(failing_gemini)):
            with pytest.raises(ProviderError) as exc_info:
                await run_chain("google", "gemini-2.0-flash", MESSAGES, settings)

        assert exc_info.value.label == "Google Generative AI Error"
        assert "API key not valid" in exc_info.value.details


class TestHandleChain:

    @pytest.mark.asyncio
    async def test_unknown_provider_is_500(self, router):
        with patch("finrouter.chains.get_model") as mock_get_model:
            status, body = await router.handle_chain({
                "messages": MESSAGES, "model": "x", "provider": "unknown-provider",
            })

        assert status == 500
        assert body == {"error": "Unsupported provider: unknown-provider"}
        mock_get_model.assert_not_called()

    @pytest.mark.asyncio
    async def test_chart_request(self, router):
        with patch("finrouter.chains.get_model", return_value=fake_model('{"chartType": "line"}')):
            status, body = await router.handle_chain({
                "messages": MESSAGES, "model": "claude", "chartType": "line",
            })

        assert status == 200
        assert body == {"content": '{"chartType": "line"}', "hasToolUse": False}

    @pytest.mark.asyncio
    async def test_google_failure_envelope(self, router):
        with patch("finrouter.chains.get_model", return_value=RunnableLambda(failing_gemini)):
            status, body = await router.handle_chain({
                "messages": MESSAGES, "model": "gemini-2.0-flash", "provider": "google",
            })

        assert status == 500
        assert body["error"] == "Google Generative AI Error"
