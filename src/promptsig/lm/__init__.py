from .base import BaseLM, LanguageModel, LMCallOptions, UsageStats, to_conversation
from .client import ClientLM

__all__ = [
    "BaseLM",
    "ClientLM",
    "LanguageModel",
    "LMCallOptions",
    "UsageStats",
    "to_conversation",
]
