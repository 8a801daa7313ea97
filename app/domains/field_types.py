"""
フィールドタイプのマッピング

AIが出力する抽象的なフィールドタイプ名を、Lark Baseのタイプコードと
タイプ別のプロパティに変換する。
"""
import re
from dataclasses import dataclass
from enum import Enum
from typing import Any, Dict, List, Mapping, Optional

# AIの出力で選択肢を格納する固定キー
OPTIONS_KEY = "選択肢文字列"

# 選択肢が空の場合の代替（Larkは選択肢ゼロの選択フィールドを受け付けない）
FALLBACK_OPTIONS = ["Option1", "Option2", "Option3"]

_OPTION_SEPARATORS = re.compile(r"[,、，]")


class FieldType(str, Enum):
    """サポートするフィールドタイプ"""
    TEXT = "text"
    NUMBER = "number"
    SINGLE_SELECT = "single_select"
    MULTI_SELECT = "multi_select"
    DATE = "date"
    DATE_TIME = "date_time"
    CHECKBOX = "checkbox"
    MEMBER = "member"
    PHONE = "phone"
    URL = "url"
    EMAIL = "email"
    CURRENCY = "currency"
    RATING = "rating"
    UNSUPPORTED = "unsupported"

    @classmethod
    def from_name(cls, name: Optional[str]) -> "FieldType":
        """タイプ名から列挙値を取得する（大文字小文字は区別しない）"""
        normalized = (name or "").strip().lower()
        for member in cls:
            if member is not cls.UNSUPPORTED and member.value == normalized:
                return member
        return cls.UNSUPPORTED

    @property
    def is_choice(self) -> bool:
        return self in (FieldType.SINGLE_SELECT, FieldType.MULTI_SELECT)


@dataclass(frozen=True)
class FieldMapping:
    """Lark側のフィールド定義"""
    type: int
    property: Optional[Dict[str, Any]] = None

    def to_payload(self, field_name: str) -> Dict[str, Any]:
        """フィールド作成APIのリクエストボディを組み立てる"""
        payload: Dict[str, Any] = {"field_name": field_name, "type": self.type}
        if self.property is not None:
            payload["property"] = self.property
        return payload


def parse_options(options: Optional[Mapping[str, Any]]) -> List[str]:
    """
    選択肢文字列をリストに分解する

    カンマ区切りで分割し、前後の空白を除去、空要素と重複を除く。
    結果が空の場合は FALLBACK_OPTIONS を返す。
    """
    raw = ""
    if options:
        raw = options.get(OPTIONS_KEY) or ""
    if not isinstance(raw, str):
        raw = str(raw)

    parsed: List[str] = []
    for item in _OPTION_SEPARATORS.split(raw):
        name = item.strip()
        if name and name not in parsed:
            parsed.append(name)

    return parsed or list(FALLBACK_OPTIONS)


def map_field_type(type_name: Optional[str], options: Optional[Mapping[str, Any]] = None) -> Optional[FieldMapping]:
    """
    フィールドタイプ名をLarkのフィールド定義に変換する

    Args:
        type_name: AIが出力したタイプ名
        options: 選択肢を含む辞書（選択フィールドのみ参照）

    Returns:
        FieldMapping。未対応のタイプ名の場合は None（呼び出し側でスキップする）
    """
    field_type = FieldType.from_name(type_name)

    if field_type is FieldType.TEXT:
        return FieldMapping(type=1)
    if field_type is FieldType.NUMBER:
        return FieldMapping(type=2, property={"formatter": "0"})
    if field_type.is_choice:
        choices = [{"name": name} for name in parse_options(options)]
        code = 3 if field_type is FieldType.SINGLE_SELECT else 4
        return FieldMapping(type=code, property={"options": choices})
    if field_type is FieldType.DATE:
        return FieldMapping(type=5, property={"date_formatter": "yyyy/MM/dd"})
    if field_type is FieldType.DATE_TIME:
        return FieldMapping(type=5, property={"date_formatter": "yyyy/MM/dd HH:mm"})
    if field_type is FieldType.CHECKBOX:
        return FieldMapping(type=7)
    if field_type is FieldType.MEMBER:
        return FieldMapping(type=11, property={"multiple": False})
    if field_type is FieldType.PHONE:
        return FieldMapping(type=13)
    if field_type is FieldType.URL:
        return FieldMapping(type=15)
    if field_type is FieldType.EMAIL:
        return FieldMapping(type=23)
    if field_type is FieldType.CURRENCY:
        return FieldMapping(type=25, property={"currency_code": "JPY", "formatter": "#,##0"})
    if field_type is FieldType.RATING:
        return FieldMapping(type=26, property={"symbol": "star", "min": 1, "max": 5})

    return None
