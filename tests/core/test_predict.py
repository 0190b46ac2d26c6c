from __future__ import annotations

import asyncio

import pytest

from promptsig import config
from promptsig.core.exceptions import ConfigurationError, PredictionError, SignatureError
from promptsig.core.predict import ANSWER_SUFFIX, REASONING_SUFFIX, ChainOfThought, Predict, TraceEntry
from promptsig.core.prediction import Prediction
from promptsig.lm import LMCallOptions


class TestPredict:
    def test_basic(self, scripted_lm):
        lm = scripted_lm("answer: Paris")
        qa = Predict("question -> answer", lm=lm)

        result = qa(question="Capital of France?")
        assert isinstance(result, Prediction)
        assert result == {"answer": "Paris"}
        assert lm.prompts == [
            "question: Capital of France?\n\nProvide the answer in this format:\nanswer: [your response]"
        ]

    def test_typed_outputs(self, scripted_lm):
        lm = scripted_lm("answer: Paris\nconfidence: 0.95")
        qa = Predict("question -> answer, confidence: float", lm=lm)
        assert qa(question="q") == {"answer": "Paris", "confidence": 0.95}

    def test_missing_outputs_are_none(self, scripted_lm):
        qa = Predict("question -> answer, confidence: float", lm=scripted_lm("I don't know"))
        assert qa(question="q") == {"answer": None, "confidence": None}

    def test_acall(self, async_scripted_lm):
        lm = async_scripted_lm("Paris")
        qa = Predict("question -> answer", lm=lm)
        assert asyncio.run(qa.acall(question="q")) == {"answer": "Paris"}

    def test_call_inside_running_loop(self, scripted_lm):
        qa = Predict("question -> answer", lm=scripted_lm("Paris"))

        async def main():
            return qa(question="q")

        assert asyncio.run(main()) == {"answer": "Paris"}

    def test_options_forwarded(self, scripted_lm):
        lm = scripted_lm("Paris")
        options = LMCallOptions(temperature=0.2)
        Predict("question -> answer", lm=lm, options=options)(question="q")
        assert lm.options == [options]

    def test_generation_failure_wrapped(self, scripted_lm):
        qa = Predict("question -> answer", lm=scripted_lm())
        with pytest.raises(PredictionError, match="Prediction failed: ScriptedLM ran out of replies") as excinfo:
            qa(question="q")
        assert isinstance(excinfo.value.__cause__, RuntimeError)

    def test_default_lm(self, scripted_lm):
        lm = scripted_lm("Paris")
        config.configure(lm=lm)
        assert Predict("question -> answer")(question="q") == {"answer": "Paris"}

    def test_no_lm(self):
        qa = Predict("question -> answer")
        with pytest.raises(ConfigurationError, match="No language model configured"):
            qa(question="q")

    def test_no_signature(self, scripted_lm):
        with pytest.raises(ConfigurationError, match="No signature provided"):
            Predict(None, lm=scripted_lm())

    def test_malformed_signature(self, scripted_lm):
        with pytest.raises(SignatureError):
            Predict("question answer", lm=scripted_lm())

    def test_trace(self, scripted_lm):
        qa = Predict("question -> answer", lm=scripted_lm("Paris", "Paris"))
        assert qa(question="q").trace == ()

        config.configure(tracing=True)
        trace = qa(question="q").trace
        assert len(trace) == 1
        assert isinstance(trace[0], TraceEntry)
        assert trace[0].completion == "Paris"
        assert trace[0].prompt.startswith("question: q")


class TestChainOfThought:
    def test_two_calls(self, scripted_lm):
        lm = scripted_lm("France's capital is Paris.", "answer: Paris")
        cot = ChainOfThought("question -> answer", lm=lm)

        result = cot(question="Capital of France?")
        assert result == {"answer": "Paris", "reasoning": "France's capital is Paris."}

        base = "question: Capital of France?\n\nProvide the answer in this format:\nanswer: [your response]"
        assert lm.prompts == [
            f"{base}\n\n{REASONING_SUFFIX}",
            f"{base}\n\nReasoning: France's capital is Paris.\n\n{ANSWER_SUFFIX}",
        ]

    def test_failure_wrapped(self, scripted_lm):
        cot = ChainOfThought("question -> answer", lm=scripted_lm("Some reasoning"))
        with pytest.raises(PredictionError, match="ChainOfThought failed"):
            cot(question="q")

    def test_trace(self, scripted_lm):
        config.configure(tracing=True)
        cot = ChainOfThought("question -> answer", lm=scripted_lm("because", "Paris"))
        assert [entry.completion for entry in cot(question="q").trace] == ["because", "Paris"]
