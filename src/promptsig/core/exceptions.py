"""Exceptions raised by promptsig modules.

Tool failures and unparseable answers inside the ReAct loop are never raised;
they are reported back to the model as observations.
"""


class PromptsigError(Exception):
    """Base class for all promptsig errors."""


class ConfigurationError(PromptsigError):
    """A module is missing something it needs to run (signature, language model)."""


class SignatureError(ConfigurationError, ValueError):
    """A signature declaration is malformed."""


class PredictionError(PromptsigError):
    """Building the prompt, calling the model, or parsing the reply failed."""


class MaxStepsExceededError(PromptsigError):
    """The agentic loop ran out of steps before a final answer."""

    def __init__(self, max_steps: int, module: str = "ReAct"):
        self.max_steps = max_steps
        super().__init__(f"{module} exceeded maximum steps ({max_steps}) without finding answer")
