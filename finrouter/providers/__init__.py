from .base import BaseLLMProvider
from .openai import OpenAIProvider
from .anthropic import AnthropicProvider
from .gemini import GeminiProvider

__all__ = ["BaseLLMProvider", "OpenAIProvider", "AnthropicProvider", "GeminiProvider"]
