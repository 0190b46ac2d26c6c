"""Base class for prompting modules.

A Module binds a Signature to a language model and turns keyword inputs into a Prediction.
Modules are asyncio-native: ``await module.acall(**inputs)`` runs ``forward``,
while ``module(**inputs)`` drives the coroutine to completion synchronously.
"""

from __future__ import annotations

from abc import ABC, abstractmethod
import asyncio
import inspect
import json
import logging
from pathlib import Path
from typing import Any, ClassVar, Type

from .exceptions import ConfigurationError
from .prediction import Prediction
from .signature import Signature, ensure_signature
from .. import config
from ..lm.base import LanguageModel, LMCallOptions
from ..utilities import maybe_await, synchronize, to_snake_case

logger = logging.getLogger(__name__)


class Module(ABC):
    """Reusable strategy for turning inputs into a model call and a parsed result.

    Parameters
    ----------
    signature : Signature | str
        The signature, or a string declaration such as ``"question -> answer"``.
    lm : LanguageModel | None, optional
        Language model to use, by default None (the configured default, resolved at call time)
    options : LMCallOptions | None, optional
        Generation options forwarded to every model call, by default None

    Raises
    ------
    ConfigurationError
        If no signature is provided.
    SignatureError
        If a string signature is malformed.
    """

    registry: ClassVar[dict[str, Type[Module]]] = {}

    def __init_subclass__(cls, **kwargs: Any):
        super().__init_subclass__(**kwargs)
        Module.registry[cls.__name__] = cls

    def __init__(
        self,
        signature: Signature | str,
        lm: LanguageModel | None = None,
        options: LMCallOptions | None = None,
    ):
        self.name = to_snake_case(self.__class__.__name__)
        self.signature = ensure_signature(signature)
        self._lm = lm
        self.options = options
        self.compiled = False

    @property
    def lm(self) -> LanguageModel:
        """The language model for this module, falling back to the configured default."""
        return self._lm if self._lm is not None else config.get_default_lm()

    @lm.setter
    def lm(self, lm: LanguageModel | None):
        self._lm = lm

    @abstractmethod
    async def forward(self, **inputs: Any) -> Prediction:
        """Run the module on the given inputs."""
        ...

    async def acall(self, **inputs: Any) -> Prediction:
        return await self.forward(**inputs)

    def __call__(self, **inputs: Any) -> Prediction:
        return synchronize(self.forward, **inputs)

    async def generate(self, lm: LanguageModel, prompt: str) -> str:
        """Request one completion.

        Asynchronous models are awaited directly.
        Synchronous models run in a worker thread so they do not block the event loop.
        """
        if inspect.iscoroutinefunction(lm.generate):
            completion = await lm.generate(prompt, self.options)
        else:
            completion = await maybe_await(await asyncio.to_thread(lm.generate, prompt, self.options))
        logger.debug(f"{self.name} completion: {completion!r}")
        return completion

    def dump_state(self) -> dict[str, Any]:
        """Serializable description of this module."""
        return {
            "type": self.__class__.__name__,
            "signature": self.signature.model_dump(mode="json"),
            "compiled": self.compiled,
            "options": self.options.model_dump(mode="json", exclude_none=True) if self.options else None,
        }

    @classmethod
    def from_state(cls, state: dict[str, Any], **kwargs: Any) -> Module:
        """Rebuild a module from ``dump_state`` output; kwargs are passed to the constructor."""
        options = state.get("options")
        module = cls(
            signature=Signature.model_validate(state["signature"]),
            options=LMCallOptions(**options) if options else None,
            **kwargs,
        )
        module.compiled = bool(state.get("compiled", False))
        return module

    def save(self, path: str | Path) -> None:
        """Save the module definition as JSON. Language models and tools are not saved."""
        Path(path).write_text(json.dumps(self.dump_state(), indent=2))
        logger.debug(f"Saved {self.name} to {path}")

    @classmethod
    def load(cls, path: str | Path, **kwargs: Any) -> Module:
        """Load a module saved with ``save``.

        Parameters
        ----------
        path : str | Path
            Location of the saved module.
        **kwargs
            Constructor arguments that are not saved, i.e. ``lm=`` or ``tools=``.

        Raises
        ------
        ConfigurationError
            If the saved module type is unknown or does not match the class ``load`` was called on.
        """
        state = json.loads(Path(path).read_text())
        module_type = state.get("type")
        if module_type not in Module.registry:
            raise ConfigurationError(f"Unknown module type '{module_type}'")

        module_cls = Module.registry[module_type]
        if not issubclass(module_cls, cls):
            raise ConfigurationError(f"Saved module '{module_type}' is not a {cls.__name__}")
        return module_cls.from_state(state, **kwargs)

    def __repr__(self) -> str:
        return f"{self.__class__.__name__}({self.signature})"
