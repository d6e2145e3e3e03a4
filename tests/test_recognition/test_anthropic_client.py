"""Tests for the Anthropic recognition client."""
import json
from types import SimpleNamespace

import anthropic
import httpx
import pytest

from statement_ingest.models import FailureKind, ParseContext
from statement_ingest.parsers import OcrStatementParser
from statement_ingest.recognition import anthropic_client
from statement_ingest.recognition.anthropic_client import AnthropicRecognitionClient

API_REQUEST = httpx.Request("POST", "https://api.anthropic.com/v1/messages")


def text_reply(text):
    return SimpleNamespace(content=[SimpleNamespace(type="text", text=text)])


def status_error(status_code):
    response = httpx.Response(status_code, request=API_REQUEST)
    return anthropic.APIStatusError(f"status {status_code}", response=response, body=None)


class FakeMessages:
    """Stand-in for ``client.messages`` returning (or raising) one outcome."""

    def __init__(self, outcome):
        self.outcome = outcome
        self.calls = []

    def create(self, **kwargs):
        self.calls.append(kwargs)
        if isinstance(self.outcome, Exception):
            raise self.outcome
        return self.outcome


@pytest.fixture
def make_client():
    def make(outcome):
        messages = FakeMessages(outcome)
        return AnthropicRecognitionClient(client=SimpleNamespace(messages=messages)), messages
    return make


class TestExtractJson:
    """Test JSON extraction from model replies."""

    def test_json_fence(self):
        assert AnthropicRecognitionClient._extract_json('Here:\n```json\n{"a": 1}\n```\nDone') == '{"a": 1}'

    def test_plain_fence(self):
        assert AnthropicRecognitionClient._extract_json('```\n{"a": 1}\n```') == '{"a": 1}'

    def test_bare_json(self):
        assert AnthropicRecognitionClient._extract_json('  {"a": 1}\n') == '{"a": 1}'


class TestAnthropicRecognition:
    """Test recognition through a fake Messages API."""

    def test_fenced_reply_is_recognized(self, make_client, statement_pdf, ocr_payload):
        client, messages = make_client(text_reply(f"```json\n{json.dumps(ocr_payload)}\n```"))
        result = client.recognize(statement_pdf)

        assert result.success is True
        assert len(result.data.items) == 2
        content = messages.calls[0]['messages'][0]['content']
        assert content[0]['type'] == "document"
        assert content[0]['source']['media_type'] == "application/pdf"
        assert 'timeout' not in messages.calls[0]

    def test_reply_that_is_not_json(self, make_client, statement_pdf):
        client, _ = make_client(text_reply("Sorry, I cannot read this document."))
        result = client.recognize(statement_pdf)

        assert result.success is False
        assert result.unavailable is False
        assert result.error == "Recognition reply is not valid JSON"

    @pytest.mark.parametrize("status_code,unavailable", [(500, True), (529, True), (429, True), (400, False)])
    def test_status_errors(self, make_client, statement_pdf, status_code, unavailable):
        client, _ = make_client(status_error(status_code))
        result = client.recognize(statement_pdf)

        assert result.success is False
        assert result.unavailable is unavailable
        assert str(status_code) in result.error

    def test_connection_error_is_unavailable(self, make_client, statement_pdf, categorizer):
        client, _ = make_client(anthropic.APIConnectionError(request=API_REQUEST))
        result = OcrStatementParser(client, categorizer).parse(statement_pdf)

        assert result.success is False
        assert result.failure_kind is FailureKind.CAPABILITY_UNAVAILABLE

    def test_expired_deadline_skips_call(self, make_client, statement_pdf, ocr_payload):
        client, messages = make_client(text_reply(json.dumps(ocr_payload)))
        result = client.recognize(statement_pdf, ParseContext(timeout=0))

        assert result.unavailable is True
        assert messages.calls == []

    def test_timeout_follows_deadline(self, make_client, statement_pdf, ocr_payload):
        client, messages = make_client(text_reply(json.dumps(ocr_payload)))
        client.recognize(statement_pdf, ParseContext(timeout=30))

        assert 0 < messages.calls[0]['timeout'] <= 30

    def test_api_key_required_without_client(self, monkeypatch):
        monkeypatch.setattr(anthropic_client, 'ANTHROPIC_API_KEY', "")

        with pytest.raises(ValueError):
            AnthropicRecognitionClient()
