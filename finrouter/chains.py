"""
Prompt-chaining design: prompt template | chat model | output parser.

Each ``create_*_chain`` factory returns a LangChain runnable that takes
``{"data": ...}`` (plus ``chartType`` for the chart chain) and yields either
raw text or a validated ``FinancialAnalysis``.
"""
import logging
from typing import Any, Dict, List, Optional, Tuple, Type

from langchain_anthropic import ChatAnthropic
from langchain_core.exceptions import OutputParserException
from langchain_core.language_models.chat_models import BaseChatModel
from langchain_core.output_parsers import PydanticOutputParser, StrOutputParser
from langchain_core.prompts import ChatPromptTemplate
from langchain_core.runnables import Runnable
from langchain_google_genai import ChatGoogleGenerativeAI
from langchain_google_genai.chat_models import ChatGoogleGenerativeAIError
from langchain_openai import ChatOpenAI
from pydantic import BaseModel

from .charts import validate_chart_type
from .config import Settings
from .errors import ChainOutputError, ProviderError, UnsupportedProviderError
from .providers import AnthropicProvider, GeminiProvider, OpenAIProvider
from .types import ChatMessage, ResponseEnvelope
from .utils import last_message_text

logger = logging.getLogger(__name__)

ANALYSIS_TEMPLATE = """
Analyze this financial data:
{data}

Provide:
1. Key insights
2. Notable trends
3. Potential risks
4. Recommendations
"""

CHART_TEMPLATE = """
Create a {chartType} chart visualization for:
{data}

Return the chart configuration as a valid JSON object with:
1. Chart type
2. Data series
3. Labels
4. Colors
5. Title
"""

STRUCTURED_ANALYSIS_TEMPLATE = """
Analyze this financial data and provide a structured response:
{data}

{format_instructions}
"""


class FinancialAnalysis(BaseModel):
    """Structured four-section analysis."""
    insights: List[str]
    trends: List[str]
    risks: List[str]
    recommendations: List[str]


# The Google integration re-raises SDK failures as its own error type
_INTEGRATION_ERRORS: Dict[str, Tuple[Type[BaseException], ...]] = {
    "google": (ChatGoogleGenerativeAIError,),
}

# Error classes raised by each provider, reported under its label
_PROVIDER_ERRORS: Dict[str, Tuple[str, Tuple[Type[BaseException], ...]]] = {
    cls.name: (cls.error_label, cls.sdk_errors + _INTEGRATION_ERRORS.get(cls.name, ()))
    for cls in (AnthropicProvider, OpenAIProvider, GeminiProvider)
}


def _key(name: str, value: Optional[str]) -> Dict[str, str]:
    return {name: value} if value else {}


def get_model(provider: str, model_name: str, settings: Settings) -> BaseChatModel:
    """
    Build the chat model for a provider tag.

    Raises:
        UnsupportedProviderError: For any tag other than anthropic/openai/google.
            Raised before any model is constructed.
    """
    # Unset keys are omitted so each integration falls back to its own env lookup
    match provider:
        case "anthropic":
            return ChatAnthropic(model=model_name, **_key("api_key", settings.anthropic_api_key))
        case "openai":
            return ChatOpenAI(model=model_name, **_key("api_key", settings.openai_api_key))
        case "google":
            return ChatGoogleGenerativeAI(
                model=model_name, **_key("google_api_key", settings.google_api_key)
            )
        case _:
            raise UnsupportedProviderError(provider)


def create_analysis_chain(provider: str, model_name: str, settings: Settings) -> Runnable:
    model = get_model(provider, model_name, settings)
    prompt = ChatPromptTemplate.from_template(ANALYSIS_TEMPLATE)
    return prompt | model | StrOutputParser()


def create_chart_chain(provider: str, model_name: str, settings: Settings) -> Runnable:
    # The JSON in the reply is left to the caller to parse
    model = get_model(provider, model_name, settings)
    prompt = ChatPromptTemplate.from_template(CHART_TEMPLATE)
    return prompt | model | StrOutputParser()


def create_structured_analysis_chain(
    provider: str, model_name: str, settings: Settings
) -> Runnable:
    """
    Analysis chain whose output is validated into ``FinancialAnalysis``.

    The parser's format instructions are baked into the prompt; a reply that
    does not match the schema raises ``OutputParserException`` on invoke.
    """
    model = get_model(provider, model_name, settings)
    parser = PydanticOutputParser(pydantic_object=FinancialAnalysis)
    prompt = ChatPromptTemplate.from_template(STRUCTURED_ANALYSIS_TEMPLATE).partial(
        format_instructions=parser.get_format_instructions()
    )
    return prompt | model | parser


async def run_chain(
    provider: str,
    model_name: str,
    messages: List[ChatMessage],
    settings: Settings,
    chart_type: Optional[str] = None,
    structured: bool = False,
) -> ResponseEnvelope:
    """
    Pick a pipeline, run it on the last message, and wrap the result.

    Args:
        provider (str): Provider tag.
        model_name (str): Model identifier.
        messages (List[ChatMessage]): Conversation; the last message is the data blob.
        settings (Settings): Process configuration holding the API keys.
        chart_type (str, optional): Selects the chart chain.
        structured (bool): Selects the structured-analysis chain.

    Returns:
        ResponseEnvelope: Text content; structured results are JSON-encoded.

    Raises:
        UnsupportedProviderError: Unknown provider, before any outbound call.
        ChartSpecError: Unknown chart type, before any outbound call.
        ChainOutputError: The model reply did not match the structured schema.
        ProviderError: The provider SDK failed.
    """
    if provider not in _PROVIDER_ERRORS:
        raise UnsupportedProviderError(provider)
    label, sdk_errors = _PROVIDER_ERRORS[provider]

    inputs: Dict[str, Any] = {"data": last_message_text(messages)}
    if chart_type:
        inputs["chartType"] = validate_chart_type(chart_type)
        factory, kind = create_chart_chain, "chart"
    elif structured:
        factory, kind = create_structured_analysis_chain, "structured"
    else:
        factory, kind = create_analysis_chain, "analysis"

    logger.debug("Running %s chain: provider=%s model=%s", kind, provider, model_name)

    try:
        # Construction raises the SDK auth error when a key is missing
        chain = factory(provider, model_name, settings)
        result = await chain.ainvoke(inputs)
    except OutputParserException as e:
        raise ChainOutputError(f"Model output did not match the expected format: {e}") from e
    except sdk_errors as e:
        raise ProviderError(label, getattr(e, "message", None) or str(e)) from e

    if isinstance(result, BaseModel):
        content = result.model_dump_json()
    else:
        content = result

    return {"content": content, "hasToolUse": False}
