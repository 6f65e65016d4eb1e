"""Extraction adapters."""

from ...config import LLMConfig, LLMProvider
from ...ports.extraction import ExtractionPort
from .claude_api import ClaudeAPIAdapter
from .ollama import OllamaAdapter

__all__ = ["ClaudeAPIAdapter", "OllamaAdapter", "create_extraction_adapter"]


def create_extraction_adapter(config: LLMConfig) -> ExtractionPort:
    """Create extraction adapter based on configuration."""
    if config.provider == LLMProvider.OLLAMA:
        return OllamaAdapter(model=config.model, base_url=config.ollama_url, timeout=config.timeout)
    elif config.provider == LLMProvider.CLAUDE_API:
        return ClaudeAPIAdapter(model=config.model, timeout=config.timeout)
    else:
        raise ValueError(f"Unknown LLM provider: {config.provider}")
