from __future__ import annotations

import pytest

from promptsig.core.prompt import build_prompt, render_inputs, render_output_format
from promptsig.core.signature import Signature


@pytest.fixture
def qa():
    return Signature.from_string("question, context -> answer")


class TestRenderInputs:
    def test_declared_order(self, qa):
        lines = render_inputs(qa, {"context": "Europe", "question": "Capital of France?"})
        assert lines == ["question: Capital of France?", "context: Europe"]

    def test_missing_and_none_skipped(self, qa):
        assert render_inputs(qa, {"question": "q"}) == ["question: q"]
        assert render_inputs(qa, {"question": "q", "context": None}) == ["question: q"]
        assert render_inputs(qa, {}) == []

    def test_unknown_keys_ignored(self, qa):
        assert render_inputs(qa, {"question": "q", "extra": "x"}) == ["question: q"]

    def test_prefix(self):
        sig = Signature.from_fields(inputs=[{"name": "question", "prefix": "Q:"}], outputs=[{"name": "answer"}])
        assert render_inputs(sig, {"question": "why?"}) == ["Q: why?"]

    def test_falsy_values_rendered(self, qa):
        assert render_inputs(qa, {"question": 0, "context": ""}) == ["question: 0", "context: "]


class TestRenderOutputFormat:
    def test_single_output(self, qa):
        assert render_output_format(qa) == "Provide the answer in this format:\nanswer: [your response]"

    def test_multiple_outputs(self):
        sig = Signature.from_string("question -> answer, confidence: float")
        assert render_output_format(sig) == (
            "Provide the following fields:\nanswer (string): [your response]\nconfidence (float): [your response]"
        )

    def test_structured(self):
        sig = Signature.from_fields(
            inputs=[{"name": "company"}],
            outputs=[{"name": "symbol", "description": "Ticker symbol"}, {"name": "price"}],
        )
        assert render_output_format(sig) == (
            "Provide:\nsymbol (Ticker symbol): [your response]\nprice (Output field: price): [your response]"
        )

    def test_no_outputs(self):
        assert render_output_format(Signature.from_string("question ->")) == ""


class TestBuildPrompt:
    def test_layout(self, qa):
        prompt = build_prompt(qa, {"question": "Capital of France?"})
        assert prompt == (
            "question: Capital of France?\n\nProvide the answer in this format:\nanswer: [your response]"
        )

    def test_instructions_first(self):
        sig = Signature.from_string("question -> answer", instructions="Answer in one word.")
        prompt = build_prompt(sig, {"question": "q"})
        assert prompt.startswith("Answer in one word.\n\nquestion: q")

    def test_suffix_last(self, qa):
        prompt = build_prompt(qa, {"question": "q"}, suffix="Think first.")
        assert prompt.endswith("answer: [your response]\n\nThink first.")

    def test_one_line_per_present_input(self, qa):
        for inputs in ({}, {"question": "q"}, {"context": "c"}, {"question": "q", "context": "c"}):
            prompt = build_prompt(qa, inputs)
            for name in qa.input_names:
                expected = 1 if name in inputs else 0
                assert sum(line.startswith(f"{name}:") for line in prompt.splitlines()) == expected

    def test_no_inputs(self, qa):
        assert build_prompt(qa, {}) == "Provide the answer in this format:\nanswer: [your response]"
