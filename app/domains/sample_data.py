"""
サンプルデータ生成

フィールドタイプと行番号から、作成したテーブルに投入するダミー値を生成する。
"""
import random
import time
from typing import Any, Dict, List, Mapping, Optional, Sequence

from domains.field_types import FieldType, parse_options

DATE_WINDOW_DAYS = 30
_DAY_MS = 24 * 60 * 60 * 1000


def _random_timestamp_ms() -> int:
    """現在時刻から±30日以内のミリ秒タイムスタンプ"""
    now_ms = int(time.time() * 1000)
    offset = random.randint(-DATE_WINDOW_DAYS * _DAY_MS, DATE_WINDOW_DAYS * _DAY_MS)
    return now_ms + offset


def synthesize(type_name: Optional[str], options: Optional[Mapping[str, Any]], row_index: int) -> Any:
    """
    1フィールド分のサンプル値を生成する

    Args:
        type_name: フィールドタイプ名
        options: 選択肢を含む辞書
        row_index: 0始まりの行番号

    Returns:
        サンプル値。生成できないタイプの場合は None（そのフィールドは行から除外）
    """
    field_type = FieldType.from_name(type_name)
    n = row_index + 1

    if field_type is FieldType.TEXT:
        return f"サンプル {n}"
    if field_type is FieldType.EMAIL:
        return f"sample{n}@example.com"
    if field_type is FieldType.PHONE:
        return f"090-1234-{n % 10000:04d}"
    if field_type is FieldType.URL:
        return f"https://example.com/item/{n}"
    if field_type is FieldType.NUMBER:
        return 123 * n
    if field_type is FieldType.CURRENCY:
        return 5000 * n
    if field_type is FieldType.SINGLE_SELECT:
        choices = parse_options(options)
        return choices[row_index % len(choices)]
    if field_type is FieldType.MULTI_SELECT:
        choices = parse_options(options)
        selected = [choices[row_index % len(choices)]]
        # 奇数行は2つ目の選択肢も付ける
        if len(choices) > 1 and row_index % 2 == 1:
            selected.append(choices[(row_index + 1) % len(choices)])
        return selected
    if field_type in (FieldType.DATE, FieldType.DATE_TIME):
        return _random_timestamp_ms()
    if field_type is FieldType.CHECKBOX:
        return n % 2 == 0
    if field_type is FieldType.RATING:
        return (row_index % 5) + 1

    # member（ユーザーIDが必要）と未対応タイプは生成しない
    return None


def build_sample_records(fields: Sequence[Any], count: int) -> List[Dict[str, Any]]:
    """
    batch_create 用のレコードリストを生成する

    Args:
        fields: name / type / options を持つフィールド定義のリスト
        count: 生成する行数

    Returns:
        [{"fields": {...}}, ...] 形式のリスト。全フィールドが None の行は含まない
    """
    records = []
    for i in range(count):
        record_fields = {}
        for field in fields:
            value = synthesize(field.type, field.options, i)
            if value is not None:
                record_fields[field.name] = value
        if record_fields:
            records.append({"fields": record_fields})
    return records
