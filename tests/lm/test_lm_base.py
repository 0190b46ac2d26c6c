from __future__ import annotations

from pydantic import BaseModel, ValidationError
import pytest

from promptsig.lm import LanguageModel, LMCallOptions, UsageStats, to_conversation
from promptsig.types_.core import Conversation, UserMessage


class Person(BaseModel):
    name: str
    age: int


class TestLMCallOptions:
    def test_unset_dropped(self):
        assert LMCallOptions().to_params() == {}
        assert LMCallOptions(temperature=0.0, stop=["END"]).to_params() == {"temperature": 0.0, "stop": ["END"]}

    def test_validation(self):
        with pytest.raises(ValidationError):
            LMCallOptions(top_p=2)
        with pytest.raises(ValidationError):
            LMCallOptions(seed=1)


class TestToConversation:
    def test_conversation_passthrough(self):
        conversation = Conversation.from_prompt("hi")
        assert to_conversation(conversation) is conversation

    def test_mixed(self):
        conversation = to_conversation([{"role": "system", "content": "sys"}, UserMessage(content="hi")])
        assert conversation.to_messages() == [
            {"role": "system", "content": "sys"},
            {"role": "user", "content": "hi"},
        ]


class TestBaseLM:
    def test_protocol(self, scripted_lm, async_scripted_lm):
        assert isinstance(scripted_lm("a"), LanguageModel)
        assert isinstance(async_scripted_lm("a"), LanguageModel)

    def test_generate_uses_chat(self, scripted_lm):
        lm = scripted_lm("Paris")
        options = LMCallOptions(temperature=0)
        assert lm.generate("Capital of France?", options) == "Paris"
        assert lm.prompts == ["Capital of France?"]
        assert lm.options == [options]

    def test_usage(self, scripted_lm):
        lm = scripted_lm("a", "b")
        lm.generate("one")
        lm.generate("two")
        assert lm.get_usage() == UsageStats(prompt_tokens=20, completion_tokens=10, total_tokens=30)
        lm.reset_usage()
        assert lm.get_usage() == UsageStats()


class TestGenerateStructured:
    def test_pydantic_schema(self, scripted_lm):
        lm = scripted_lm('Here you go:\n```json\n{"name": "Ada", "age": 36}\n```')
        person = lm.generate_structured("Who wrote the first program?", Person)
        assert person == Person(name="Ada", age=36)
        assert '"age"' in lm.prompts[0]
        assert lm.prompts[0].startswith("Who wrote the first program?\n\nRespond only with a JSON object")

    def test_repairs_json(self, scripted_lm):
        lm = scripted_lm("{'name': 'Ada', 'age': 36,}")
        assert lm.generate_structured("prompt", Person) == Person(name="Ada", age=36)

    def test_dict_schema(self, scripted_lm):
        lm = scripted_lm('{"tags": ["a", "b"]}')
        schema = {"type": "object", "properties": {"tags": {"type": "array"}}}
        assert lm.generate_structured("prompt", schema) == {"tags": ["a", "b"]}

    def test_invalid(self, scripted_lm):
        lm = scripted_lm('{"name": "Ada"}')
        with pytest.raises(ValidationError):
            lm.generate_structured("prompt", Person)
