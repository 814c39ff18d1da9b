"""생성 문서 버전 간 diff를 변경사항 목록으로 펼치는 순수 도메인 로직입니다.

I/O가 없다. 스냅샷 조회와 NotFound 처리는 ``fund_document_service`` 가 담당한다.
"""

import json
from typing import Any, Iterable, List, Optional, Union

from app.config import settings
from app.schemas.diff import DiffSummary, DocumentChange, DocumentDiff
from app.services.display_paths import get_display_path
from app.utils.json_diff import (
    DELETED,
    DOCUMENT_EXCLUDED_FIELDS,
    diff,
    is_array_delta,
    sanitize_for_comparison,
)

ELLIPSIS = "..."


def _truncate(text: str, limit: int) -> str:
    if len(text) > limit:
        return text[:limit] + ELLIPSIS
    return text


def format_value(value: Any, limit: Optional[int] = None) -> str:
    """값을 사람이 읽기 쉬운 문자열로 변환한다. 표시 전용이며 길이 제한을 넘으면 자른다."""
    limit = settings.DIFF_VALUE_MAX_LENGTH if limit is None else limit
    if value is None:
        return "(없음)"
    if isinstance(value, str):
        return _truncate(value, limit)
    if isinstance(value, bool):
        return "예" if value else "아니오"
    if isinstance(value, float) and value.is_integer():
        return str(int(value))
    if isinstance(value, (int, float)):
        return str(value)
    if isinstance(value, (dict, list)):
        return _truncate(json.dumps(value, indent=2, ensure_ascii=False, default=str), limit)
    return _truncate(str(value), limit)


def _child(original: Any, key: str) -> Any:
    if isinstance(original, dict):
        return original.get(key)
    if isinstance(original, list) and key.isdecimal() and int(key) < len(original):
        return original[int(key)]
    return None


def extract_changes(
    delta: Any,
    original: Any = None,
    base_path: str = "",
    document_type: Optional[str] = None,
    root: Any = None,
    updated: Any = None,
) -> List[DocumentChange]:
    """delta를 깊이 우선으로 순회해 경로 기반 변경사항 목록으로 펼친다.

    배열 delta(``_t: "a"``)는 내부로 내려가지 않는다. 배열 원소의 인덱스는 비교 방향에 따라
    달라지므로, 배열 전체를 한 건의 ``modified`` 로 보고해 A→B와 B→A의 경로 집합을 같게 유지한다.
    """
    if root is None:
        root = original
    changes: List[DocumentChange] = []
    if not isinstance(delta, dict):
        return changes

    for key, value in delta.items():
        current_path = f"{base_path}.{key}" if base_path else key

        if isinstance(value, list):
            change = _leaf_change(value, current_path, document_type, root)
            if change is not None:
                changes.append(change)
        elif isinstance(value, dict) and is_array_delta(value):
            changes.append(
                _array_change(_child(original, key), _child(updated, key), current_path, document_type, root)
            )
        elif isinstance(value, dict):
            changes.extend(
                extract_changes(
                    value, _child(original, key), current_path, document_type, root, _child(updated, key)
                )
            )
    return changes


def _array_change(old: Any, new: Any, path: str, document_type: Optional[str], root: Any) -> DocumentChange:
    return DocumentChange(
        path=path,
        type="modified",
        old_value=format_value(old),
        new_value=format_value(new),
        display_path=get_display_path(path, document_type, root),
    )


def _leaf_change(value: list, path: str, document_type: Optional[str], root: Any) -> Optional[DocumentChange]:
    display_path = get_display_path(path, document_type, root)
    if len(value) == 1:
        return DocumentChange(path=path, type="added", new_value=format_value(value[0]), display_path=display_path)
    if len(value) == 2:
        return DocumentChange(
            path=path,
            type="modified",
            old_value=format_value(value[0]),
            new_value=format_value(value[1]),
            display_path=display_path,
        )
    if len(value) == 3 and value[2] == DELETED and value[1] == DELETED:
        return DocumentChange(path=path, type="removed", old_value=format_value(value[0]), display_path=display_path)
    return None


def summarize(changes: Iterable[DocumentChange]) -> DiffSummary:
    kinds = [change.type for change in changes]
    return DiffSummary(
        added=kinds.count("added"),
        removed=kinds.count("removed"),
        modified=kinds.count("modified"),
    )


def diff_payloads(
    from_data: Any,
    to_data: Any,
    *,
    from_version: Union[int, str],
    to_version: Union[int, str],
    excluded_fields: Iterable[str] = DOCUMENT_EXCLUDED_FIELDS,
    document_type: Optional[str] = None,
) -> DocumentDiff:
    """정제한 두 JSON 값을 비교해 ``DocumentDiff`` 를 만든다."""
    sanitized_from = sanitize_for_comparison(from_data, excluded_fields)
    sanitized_to = sanitize_for_comparison(to_data, excluded_fields)

    delta = diff(sanitized_from, sanitized_to)
    if delta is None:
        return DocumentDiff(from_version=from_version, to_version=to_version, changes=[], summary=DiffSummary())

    if isinstance(delta, list) or is_array_delta(delta):
        # 루트 자체가 스칼라·배열이거나 타입이 바뀐 경우
        changes = extract_changes(
            {"": delta},
            {"": sanitized_from},
            document_type=document_type,
            root=sanitized_from,
            updated={"": sanitized_to},
        )
    else:
        changes = extract_changes(delta, sanitized_from, document_type=document_type, updated=sanitized_to)
    return DocumentDiff(
        from_version=from_version,
        to_version=to_version,
        changes=changes,
        summary=summarize(changes),
    )


def snapshot_payload(processed_content: Any, generation_context: Any) -> dict:
    return {"content": processed_content, "context": generation_context}


def compare_snapshots(from_doc: dict, to_doc: dict) -> DocumentDiff:
    """조회된 두 스냅샷(dict: version_number, type, processed_content, generation_context)을 비교한다."""
    return diff_payloads(
        snapshot_payload(from_doc.get("processed_content"), from_doc.get("generation_context")),
        snapshot_payload(to_doc.get("processed_content"), to_doc.get("generation_context")),
        from_version=from_doc.get("version_number"),
        to_version=to_doc.get("version_number"),
        document_type=to_doc.get("type"),
    )
