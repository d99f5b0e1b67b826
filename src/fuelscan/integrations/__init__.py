"""Fuelscan integrations module."""

from fuelscan.integrations.anthropic_client import ClaudeClient
from fuelscan.integrations.base import ProviderClient
from fuelscan.integrations.ocr import OCREngine, TextExtractor
from fuelscan.integrations.openai_client import ChatGPTClient
from fuelscan.integrations.secrets import DotenvSecretStore, SecretStore, mask_secret

__all__ = [
    "ChatGPTClient",
    "ClaudeClient",
    "DotenvSecretStore",
    "OCREngine",
    "ProviderClient",
    "SecretStore",
    "TextExtractor",
    "mask_secret",
]
