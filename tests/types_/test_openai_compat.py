import pytest

from aisuite.framework.chat_completion_response import ChatCompletionResponse as AISuiteChatCompletion
from aisuite.framework.choice import Choice as AISuiteChatCompletionChoice
from aisuite.framework.message import Message as AISuiteChatCompletionMessage
from openai.types.chat.chat_completion import (
    ChatCompletion as OpenAIChatCompletion,
    Choice as OpenAIChatCompletionChoice,
)
from openai.types.chat.chat_completion_message import ChatCompletionMessage as OpenAIChatCompletionMessage
from openai.types.completion_usage import CompletionUsage as OpenAICompletionUsage

from promptsig.types_.openai_compat import (
    ChatCompletion,
    ChatCompletionChoice,
    ChatCompletionMessage,
    CompletionUsage,
    convert_response,
)


@pytest.fixture
def content():
    return ["raindrops on roses", "whiskers on kittens", "warm woolen mittens"]


def test_passthrough():
    completion = ChatCompletion(choices=[ChatCompletionChoice(message=ChatCompletionMessage(content="hi"))])
    assert convert_response(completion) is completion


def test_openai_content_completion(content):
    completion = OpenAIChatCompletion(
        id="test123",
        created=1234567,
        model="openai:gpt-fake",
        object="chat.completion",
        choices=[
            OpenAIChatCompletionChoice(
                finish_reason="stop",
                index=0,
                message=OpenAIChatCompletionMessage(role="assistant", content=content[0]),
            )
        ],
        usage=OpenAICompletionUsage(prompt_tokens=12, completion_tokens=3, total_tokens=15),
    )

    converted = convert_response(completion)
    assert isinstance(converted, ChatCompletion)
    assert converted.id == "test123"
    assert converted.choices[0].finish_reason == "stop"
    assert converted.choices[0].message.role == "assistant"
    assert converted.content == content[0]
    assert converted.usage == CompletionUsage(prompt_tokens=12, completion_tokens=3, total_tokens=15)


def test_openai_multicontent_completion(content):
    completion = OpenAIChatCompletion(
        id="test123",
        created=1234567,
        model="openai:gpt-fake",
        object="chat.completion",
        choices=[
            OpenAIChatCompletionChoice(
                finish_reason="stop",
                index=i,
                message=OpenAIChatCompletionMessage(role="assistant", content=c),
            )
            for i, c in enumerate(content)
        ],
    )

    converted = convert_response(completion)
    assert [choice.message.content for choice in converted.choices] == content
    # content reads the first choice
    assert converted.content == content[0]
    assert converted.usage is None


def test_aisuite_content_completion(content):
    choice = AISuiteChatCompletionChoice()
    choice.finish_reason = "stop"
    choice.message = AISuiteChatCompletionMessage(
        role="assistant",
        content=content[0],
        tool_calls=None,
        refusal=None,
    )
    completion = AISuiteChatCompletion()
    completion.choices = [choice]

    converted = convert_response(completion)
    assert isinstance(converted, ChatCompletion)
    assert isinstance(converted.choices[0], ChatCompletionChoice)
    assert isinstance(converted.choices[0].message, ChatCompletionMessage)

    assert converted.choices[0].finish_reason == "stop"
    assert converted.choices[0].message.role == "assistant"
    assert converted.content == content[0]


def test_aisuite_refusal():
    choice = AISuiteChatCompletionChoice()
    choice.finish_reason = "content_filter"
    choice.message = AISuiteChatCompletionMessage(
        role="assistant",
        content=None,
        tool_calls=None,
        refusal="Content was filtered",
    )
    completion = AISuiteChatCompletion()
    completion.choices = [choice]

    converted = convert_response(completion)
    assert converted.choices[0].message.refusal == "Content was filtered"
    assert converted.content == ""


def test_empty_choices():
    assert ChatCompletion(choices=[]).content == ""
