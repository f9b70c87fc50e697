"""Unit tests for model-output parsing and message sanitizing."""
from everything_converter.models.chat_schemas import ChatMessage
from everything_converter.models.conversion import ConversionAnswer, ParsedAnswer, UnparsedAnswer
from everything_converter.utils.openai import (
    normalize_answer,
    parse_conversion_answer,
    sanitize_messages,
    strip_code_fences,
)


def test_plain_json_answer_is_parsed():
    parsed = parse_conversion_answer('{"result": "0.39 dolphins", "explanation": "58/150"}')

    assert isinstance(parsed, ParsedAnswer)
    assert parsed.to_answer() == ConversionAnswer("0.39 dolphins", "58/150")


def test_fenced_json_answer_is_parsed():
    text = '```json\n{"result": "90.00 EUR", "explanation": "rate 0.9"}\n```'

    assert normalize_answer(text) == ConversionAnswer("90.00 EUR", "rate 0.9")


def test_single_line_fence_is_stripped():
    assert strip_code_fences('```{"result": "1"}```') == '{"result": "1"}'
    assert strip_code_fences("````\nhello\n````") == "hello"


def test_prose_becomes_the_explanation():
    answer = normalize_answer("About 0.4 dolphins, roughly.")

    assert answer.result == ""
    assert answer.explanation == "About 0.4 dolphins, roughly."


def test_non_object_json_is_unparsed():
    assert isinstance(parse_conversion_answer("[1, 2, 3]"), UnparsedAnswer)
    assert isinstance(parse_conversion_answer('"just a string"'), UnparsedAnswer)


def test_empty_fields_are_unparsed():
    parsed = parse_conversion_answer('{"result": "", "explanation": ""}')

    assert isinstance(parsed, UnparsedAnswer)
    assert parsed.to_answer().explanation == '{"result": "", "explanation": ""}'


def test_non_string_fields_are_stringified():
    answer = normalize_answer('{"result": 42, "explanation": null}')

    assert answer == ConversionAnswer("42", "")


def test_empty_output_normalizes_to_empty_answer():
    assert normalize_answer("") == ConversionAnswer("", "")
    assert normalize_answer(None) == ConversionAnswer("", "")


def test_sanitize_messages_drops_empty_content():
    messages = [
        ChatMessage(role="system", content="sys"),
        {"role": "user", "content": ""},
        None,
        {"role": "assistant", "content": {"result": "1"}},
    ]

    assert sanitize_messages(messages) == [
        {"role": "system", "content": "sys"},
        {"role": "assistant", "content": '{"result": "1"}'},
    ]
