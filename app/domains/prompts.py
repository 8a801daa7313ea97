"""
スキーマ生成用のプロンプトとレスポンススキーマ
"""
from domains.field_types import FieldType, OPTIONS_KEY
from schemas.base import MAX_FIELDS_PER_TABLE, MAX_SAMPLE_RECORDS, MAX_TABLES

SUPPORTED_FIELD_TYPES = [t.value for t in FieldType if t is not FieldType.UNSUPPORTED]


def create_system_instruction() -> str:
    """Base設計用のシステムプロンプトを生成する"""
    field_types = ", ".join(SUPPORTED_FIELD_TYPES)
    return f"""あなたはLark Baseのデータベース設計を行うAPIです。ユーザーの要求を解釈し、指定されたJSON形式のデータのみを返却します。解説や挨拶など、JSON以外のテキストは一切含めないでください。
- ユーザーの要求に最も適したBaseの名前（baseName）を日本語で提案してください。
- テーブル名とフィールド名は日本語で提案してください。
- フィールドタイプは次の中から選択してください: {field_types}
- single_selectやmulti_selectには、適切な選択肢を3〜5個、"{OPTIONS_KEY}" にカンマ区切りの文字列で指定してください。
- テーブル数は最大{MAX_TABLES}個、1テーブルあたりのフィールド数は最大{MAX_FIELDS_PER_TABLE}個までです。
- サンプルデータ数（sampleDataCount）は0から{MAX_SAMPLE_RECORDS}の間で、通常は3から5に設定してください。"""


def create_user_prompt(prompt: str) -> str:
    """ユーザーの要求をBase設計の指示に埋め込む"""
    return f"""以下の要求を満たすLark Baseを設計してください。

要求:
{prompt}

必ず {{"baseName": "...", "tables": [...]}} の形式のJSONオブジェクトのみを出力してください。"""


def create_response_schema() -> dict:
    """Geminiに指定する出力スキーマ（GeneratedSchemaと同じ構造）"""
    return {
        "type": "OBJECT",
        "properties": {
            "baseName": {"type": "STRING"},
            "tables": {
                "type": "ARRAY",
                "items": {
                    "type": "OBJECT",
                    "properties": {
                        "name": {"type": "STRING"},
                        "fields": {
                            "type": "ARRAY",
                            "items": {
                                "type": "OBJECT",
                                "properties": {
                                    "name": {"type": "STRING"},
                                    "type": {"type": "STRING"},
                                    "options": {
                                        "type": "OBJECT",
                                        "properties": {OPTIONS_KEY: {"type": "STRING"}},
                                    },
                                },
                                "required": ["name", "type"],
                            },
                        },
                        "sampleDataCount": {"type": "NUMBER"},
                    },
                    "required": ["name", "fields", "sampleDataCount"],
                },
            },
        },
        "required": ["baseName", "tables"],
    }
