import time

from domains.field_types import FALLBACK_OPTIONS, OPTIONS_KEY
from domains.sample_data import DATE_WINDOW_DAYS, build_sample_records, synthesize
from schemas import FieldSpec


def test_checkbox_alternates_by_parity():
    values = [synthesize("checkbox", {}, i) for i in range(6)]
    assert values == [False, True, False, True, False, True]


def test_single_select_cycles_through_options():
    options = {OPTIONS_KEY: "A,B,C"}
    assert [synthesize("single_select", options, i) for i in range(4)] == ["A", "B", "C", "A"]


def test_single_select_without_options_uses_fallback():
    values = [synthesize("single_select", {}, i) for i in range(3)]
    assert values == FALLBACK_OPTIONS


def test_multi_select_returns_distinct_options():
    options = {OPTIONS_KEY: "赤,青,緑"}
    for i in range(10):
        value = synthesize("multi_select", options, i)
        assert isinstance(value, list)
        assert 1 <= len(value) <= 2
        assert len(set(value)) == len(value)
        assert set(value) <= {"赤", "青", "緑"}


def test_multi_select_with_single_option():
    options = {OPTIONS_KEY: "only"}
    assert all(synthesize("multi_select", options, i) == ["only"] for i in range(4))


def test_text_like_values_include_row_number():
    assert synthesize("text", {}, 0) == "サンプル 1"
    assert synthesize("email", {}, 4) == "sample5@example.com"
    assert synthesize("url", {}, 2) == "https://example.com/item/3"
    phone = synthesize("phone", {}, 11)
    assert phone.startswith("090-") and phone.endswith("0012")


def test_numbers_are_deterministic_and_scale_with_row():
    assert synthesize("number", {}, 0) == synthesize("number", {}, 0)
    assert synthesize("number", {}, 1) > synthesize("number", {}, 0)
    assert synthesize("currency", {}, 2) == 15000


def test_rating_stays_in_range():
    assert {synthesize("rating", {}, i) for i in range(20)} == {1, 2, 3, 4, 5}


def test_dates_fall_within_window():
    window_ms = DATE_WINDOW_DAYS * 24 * 60 * 60 * 1000
    before = int(time.time() * 1000)
    values = [synthesize(t, {}, i) for i in range(20) for t in ("date", "date_time")]
    after = int(time.time() * 1000)
    for value in values:
        assert before - window_ms <= value <= after + window_ms


def test_member_and_unknown_types_are_omitted():
    assert synthesize("member", {}, 0) is None
    assert synthesize("formula", {}, 0) is None


def test_build_sample_records_skips_empty_rows():
    fields = [FieldSpec(name="担当者", type="member"), FieldSpec(name="式", type="formula")]
    assert build_sample_records(fields, 5) == []


def test_build_sample_records_only_includes_synthesized_fields():
    fields = [
        FieldSpec(name="名前", type="text"),
        FieldSpec(name="担当者", type="member"),
        FieldSpec(name="ランク", type="single_select", options={OPTIONS_KEY: "A,B"}),
    ]
    records = build_sample_records(fields, 3)
    assert len(records) == 3
    assert records[0] == {"fields": {"名前": "サンプル 1", "ランク": "A"}}
    assert records[2]["fields"]["ランク"] == "A"
