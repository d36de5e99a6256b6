"""Tests for message formatting."""

import pytest

from connection.base import Message, MessageType
from output.formatter import FormatError, Formatter


def request(data):
    return Message(type=MessageType.REQUEST, data=data)


def response(data):
    return Message(type=MessageType.RESPONSE, data=data)


@pytest.fixture
def formatter():
    return Formatter()


def test_plain_text_is_unchanged(formatter):
    data = 'GET / HTTP/1.1\r\nHost: example.com\r\n\r\n'

    assert formatter.format_message(request(data)) == data
    assert formatter.format_for_file(request(data)) == data


def test_json_object_is_indented_with_sorted_keys(formatter):
    msg = response('{"status": 200, "body": "ok"}')

    assert formatter.format_message(msg) == '{\n  "body": "ok",\n  "status": 200\n}'


def test_json_object_is_compact_for_files(formatter):
    msg = response('{"status": 200, "body": "ok"}')

    assert formatter.format_for_file(msg) == '{"body":"ok","status":200}'


def test_json_array(formatter):
    assert formatter.format_for_file(response('[3, {"b": 1, "a": 2}]')) == '[3,{"a":2,"b":1}]'


def test_broken_json_is_passed_through(formatter):
    data = '{"status": 200, "body": "ok"'

    assert formatter.format_message(response(data)) == data
    assert formatter.format_for_file(response(data)) == data


@pytest.mark.parametrize('data', ['42', '"quoted"', 'true', 'null'])
def test_json_scalars_are_passed_through(formatter, data):
    assert formatter.format_message(response(data)) == data


def test_non_ascii_is_kept(formatter):
    assert formatter.format_for_file(response('{"name": "Zoë"}')) == '{"name":"Zoë"}'


def test_undefined_type_is_rejected(formatter):
    msg = Message(type=MessageType.NOT_DEFINED, data='hello')

    with pytest.raises(FormatError, match='unknown message type'):
        formatter.format_message(msg)
    with pytest.raises(FormatError):
        formatter.format_for_file(msg)


def test_message_type_names():
    assert str(MessageType.REQUEST) == 'Request'
    assert str(MessageType.RESPONSE) == 'Response'
