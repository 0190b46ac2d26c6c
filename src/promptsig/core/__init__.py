"""Core components for typed prompting.

This module provides signatures, prompt building and output parsing,
and the modules that combine them with a language model (Predict, ChainOfThought, ReAct).
"""

from .exceptions import (
    ConfigurationError,
    MaxStepsExceededError,
    PredictionError,
    PromptsigError,
    SignatureError,
)
from .signature import FieldSpec, Signature, ensure_signature
from .prompt import build_prompt
from .parser import coerce_value, extract_field_value, parse_output
from .prediction import Prediction
from .example import Example
from .tool import Tool, normalize_tools, tool
from .module import Module
from .predict import ChainOfThought, Predict
from .react import ReAct, StepRecord

__all__ = [
    # Signatures
    "FieldSpec",
    "Signature",
    "ensure_signature",
    # Prompting and parsing
    "build_prompt",
    "coerce_value",
    "extract_field_value",
    "parse_output",
    # Results
    "Example",
    "Prediction",
    "StepRecord",
    # Tools
    "Tool",
    "normalize_tools",
    "tool",
    # Modules
    "Module",
    "Predict",
    "ChainOfThought",
    "ReAct",
    # Exceptions
    "PromptsigError",
    "ConfigurationError",
    "SignatureError",
    "PredictionError",
    "MaxStepsExceededError",
]
