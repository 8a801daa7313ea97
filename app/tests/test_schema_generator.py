import json

import pytest
import requests

from domains.field_types import OPTIONS_KEY
from domains.schema_generator import build_generation_request, generate_schema, parse_generated_schema
from errors import RATE_LIMIT_ERROR_MESSAGE, ConfigError, SchemaGenerationError
from utils.gemini import extract_json_from_response, parse_brace_span, parse_direct, parse_fenced_block

SCHEMA = {
    "baseName": "顧客管理",
    "tables": [
        {
            "name": "顧客",
            "fields": [
                {"name": "顧客名", "type": "text"},
                {"name": "電話番号", "type": "phone"},
                {"name": "ランク", "type": "single_select", "options": {OPTIONS_KEY: "A,B,C"}},
            ],
            "sampleDataCount": 3,
        }
    ],
}


class FakeResponse:
    def __init__(self, status_code=200, data=None):
        self.status_code = status_code
        self._data = data
        self.text = json.dumps(data, ensure_ascii=False) if data is not None else ""

    @property
    def ok(self):
        return self.status_code < 400

    def json(self):
        if self._data is None:
            raise ValueError("no json")
        return self._data


class FakeGeminiSession:
    def __init__(self, responses):
        self.responses = list(responses)
        self.calls = []

    def post(self, url, **kwargs):
        self.calls.append({"url": url, **kwargs})
        item = self.responses.pop(0) if len(self.responses) > 1 else self.responses[0]
        if isinstance(item, Exception):
            raise item
        return item


def gemini_text(text):
    return FakeResponse(200, {"candidates": [{"content": {"parts": [{"text": text}]}}]})


def run(responses, **kwargs):
    session = FakeGeminiSession(responses)
    sleeps = []
    kwargs.setdefault("base_delay", 1.0)
    schema = generate_schema("顧客管理をしたい", "key-123", session=session, sleep=sleeps.append, **kwargs)
    return schema, session, sleeps


def test_missing_api_key_fails_fast():
    session = FakeGeminiSession([gemini_text(json.dumps(SCHEMA))])
    with pytest.raises(ConfigError):
        generate_schema("prompt", "", session=session, sleep=lambda s: None)
    assert session.calls == []


def test_direct_json_succeeds_on_first_attempt():
    schema, session, sleeps = run([gemini_text(json.dumps(SCHEMA, ensure_ascii=False))])

    assert schema.base_name == "顧客管理"
    assert schema.tables[0].sample_data_count == 3
    assert len(session.calls) == 1
    assert sleeps == []


def test_request_carries_instruction_prompt_and_response_schema():
    schema, session, sleeps = run([gemini_text(json.dumps(SCHEMA))])

    call = session.calls[0]
    assert call["params"] == {"key": "key-123"}
    assert call["url"].endswith(":generateContent")
    body = call["json"]
    assert "system_instruction" in body
    assert "顧客管理をしたい" in body["contents"][0]["parts"][0]["text"]
    config = body["generationConfig"]
    assert config["response_mime_type"] == "application/json"
    assert set(config["response_schema"]["properties"]) == {"baseName", "tables"}


def test_fenced_block_parses_identically_to_unwrapped():
    raw = json.dumps(SCHEMA, ensure_ascii=False)
    fenced = f"以下が設計です。\n```json\n{raw}\n```\nご確認ください。"

    assert parse_generated_schema(fenced) == parse_generated_schema(raw)

    schema, session, sleeps = run([gemini_text(fenced)])
    assert schema == parse_generated_schema(raw)


def test_brace_span_is_last_resort():
    text = "設計結果: " + json.dumps(SCHEMA) + " 以上です"
    assert parse_direct(text) is None
    assert parse_fenced_block(text) is None
    assert parse_brace_span(text) == SCHEMA
    assert extract_json_from_response(text) == SCHEMA


def test_unparseable_text_returns_none():
    assert extract_json_from_response("JSONはありません") is None
    assert extract_json_from_response("[1, 2, 3]") is None


def test_exhausts_attempts_with_increasing_backoff():
    with pytest.raises(SchemaGenerationError) as exc_info:
        run([gemini_text("not json at all")], max_attempts=5)

    assert "JSON" in str(exc_info.value)


def test_attempt_count_and_backoff_are_monotonic():
    session = FakeGeminiSession([gemini_text("not json")])
    sleeps = []
    with pytest.raises(SchemaGenerationError):
        generate_schema("p", "key", max_attempts=5, base_delay=1.0, session=session, sleep=sleeps.append)

    assert len(session.calls) == 5
    assert len(sleeps) == 4
    assert all(later > earlier for earlier, later in zip(sleeps, sleeps[1:]))


def test_http_failure_is_retried():
    schema, session, sleeps = run([FakeResponse(503, {"error": "unavailable"}), gemini_text(json.dumps(SCHEMA))])
    assert schema.base_name == "顧客管理"
    assert len(session.calls) == 2
    assert sleeps == [1.0]


def test_rate_limit_exhaustion_reports_rate_limit_message():
    with pytest.raises(SchemaGenerationError) as exc_info:
        run([FakeResponse(429, {"error": {"status": "RESOURCE_EXHAUSTED"}})], max_attempts=3)

    assert exc_info.value.user_message == RATE_LIMIT_ERROR_MESSAGE


def test_non_rate_limit_exhaustion_keeps_generation_message():
    with pytest.raises(SchemaGenerationError) as exc_info:
        run([FakeResponse(500, {"error": "internal"})], max_attempts=2)

    assert exc_info.value.user_message == SchemaGenerationError.user_message
    assert exc_info.value.user_message != RATE_LIMIT_ERROR_MESSAGE


def test_network_failure_is_retried():
    schema, session, sleeps = run([requests.ConnectionError("down"), gemini_text(json.dumps(SCHEMA))])
    assert schema.base_name == "顧客管理"


def test_missing_candidates_is_retried():
    schema, session, sleeps = run([
        FakeResponse(200, {"promptFeedback": {"blockReason": "OTHER"}}),
        gemini_text(json.dumps(SCHEMA)),
    ])
    assert len(session.calls) == 2


@pytest.mark.parametrize("invalid", [
    {"baseName": "", "tables": SCHEMA["tables"]},
    {"baseName": "顧客管理", "tables": []},
    {"baseName": "顧客管理"},
    {"baseName": "顧客管理", "tables": [{"name": "", "fields": []}]},
])
def test_invalid_shape_is_retried(invalid):
    schema, session, sleeps = run([gemini_text(json.dumps(invalid)), gemini_text(json.dumps(SCHEMA))])
    assert schema.base_name == "顧客管理"
    assert len(session.calls) == 2


def test_sample_data_count_is_clamped():
    data = {
        "baseName": "在庫",
        "tables": [
            {"name": "a", "fields": [], "sampleDataCount": 100},
            {"name": "b", "fields": [], "sampleDataCount": -3},
            {"name": "c", "fields": [], "sampleDataCount": 3.7},
            {"name": "d", "fields": []},
        ],
    }
    schema = parse_generated_schema(json.dumps(data))
    assert [t.sample_data_count for t in schema.tables] == [20, 0, 3, 0]


def test_out_of_range_sample_data_count_is_clamped():
    huge_int = "1" + "0" * 400
    text = (
        '{"baseName": "在庫", "tables": ['
        '{"name": "a", "fields": [], "sampleDataCount": 1e999},'
        '{"name": "b", "fields": [], "sampleDataCount": -1e999},'
        '{"name": "c", "fields": [], "sampleDataCount": Infinity},'
        '{"name": "d", "fields": [], "sampleDataCount": NaN},'
        '{"name": "e", "fields": [], "sampleDataCount": ' + huge_int + '},'
        '{"name": "f", "fields": [], "sampleDataCount": -' + huge_int + '},'
        '{"name": "g", "fields": [], "sampleDataCount": "many"}'
        ']}'
    )
    schema = parse_generated_schema(text)
    assert [t.sample_data_count for t in schema.tables] == [20, 0, 20, 0, 20, 0, 0]


def test_overflowing_sample_data_count_succeeds_on_first_attempt():
    text = '{"baseName": "在庫", "tables": [{"name": "商品", "fields": [], "sampleDataCount": 1e999}]}'

    schema, session, sleeps = run([gemini_text(text)], max_attempts=3)

    assert schema.tables[0].sample_data_count == 20
    assert len(session.calls) == 1
    assert sleeps == []


def test_extra_fields_are_dropped():
    data = {
        "baseName": "在庫",
        "tables": [{"name": "商品", "fields": [{"name": f"f{i}", "type": "text"} for i in range(20)]}],
    }
    schema = parse_generated_schema(json.dumps(data))
    assert len(schema.tables[0].fields) == 15


def test_build_generation_request_is_json_serializable():
    json.dumps(build_generation_request("テスト"), ensure_ascii=False)
