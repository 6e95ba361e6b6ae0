"""Backend adapters. Each one turns a ``ModelRequest`` into a ``ModelResponse``."""

from .bedrock import BedrockAdapter
from .gemini import GeminiAdapter
from .groq import GroqAdapter
from .ollama import OllamaAdapter

__all__ = ["BedrockAdapter", "GeminiAdapter", "GroqAdapter", "OllamaAdapter"]
