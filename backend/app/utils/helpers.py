import json
from typing import Any


def dump_json(value: Any) -> str:
    return json.dumps(value, ensure_ascii=False, default=str)


def load_json(raw: Any, default: Any = None) -> Any:
    """Text 컬럼에 저장된 JSON을 읽는다. 비어 있거나 깨진 값이면 default를 돌려준다."""
    if raw is None or raw == "":
        return default
    if not isinstance(raw, str):
        return raw
    try:
        return json.loads(raw)
    except json.JSONDecodeError:
        return default
