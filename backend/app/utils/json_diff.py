"""JSON 트리 정제(sanitize)와 구조적 diff 유틸리티.

diff 결과(delta)는 jsondiffpatch 형식을 따른다.

- ``[new]``: 추가
- ``[old, new]``: 수정
- ``[old, 0, 0]``: 삭제
- ``dict``: 하위 트리 변경. 배열 변경은 ``{"_t": "a", ...}`` 로 표시하며
  추가/수정 항목은 새 배열 인덱스, 삭제 항목은 ``"_<원본 인덱스>"`` 키를 쓴다.
"""

from __future__ import annotations

import json
from collections import defaultdict, deque
from typing import Any, Callable, Dict, Iterable, List, Optional, Set

ARRAY_MARKER = "_t"
ARRAY_MARKER_VALUE = "a"
DELETED = 0

DOCUMENT_EXCLUDED_FIELDS = frozenset({
    "processedAt",
    "generatedAt",
    "timestamp",
    "created_at",
    "updated_at",
})

TEMPLATE_EXCLUDED_FIELDS = frozenset({
    "id",
    "created_at",
    "updated_at",
    "is_active",
    "created_by",
    "fund_id",
    "version",
    "description",
})

ObjectHash = Callable[[Any], str]


def sanitize_for_comparison(value: Any, excluded_fields: Iterable[str] = DOCUMENT_EXCLUDED_FIELDS) -> Any:
    """제외 필드를 모든 깊이에서 제거한 깊은 복사본을 돌려준다. 입력은 변경하지 않는다."""
    excluded = excluded_fields if isinstance(excluded_fields, (set, frozenset)) else frozenset(excluded_fields)
    if isinstance(value, dict):
        return {
            key: sanitize_for_comparison(item, excluded)
            for key, item in value.items()
            if key not in excluded
        }
    if isinstance(value, list):
        return [sanitize_for_comparison(item, excluded) for item in value]
    return value


def canonical_json(value: Any) -> str:
    return json.dumps(value, sort_keys=True, ensure_ascii=False, default=str)


def default_object_hash(value: Any) -> str:
    """배열 항목 식별 키: ``id`` → ``title`` → 전체 구조."""
    if isinstance(value, dict):
        if value.get("id"):
            return f"id:{canonical_json(value['id'])}"
        if value.get("title"):
            return f"title:{canonical_json(value['title'])}"
    return f"value:{canonical_json(value)}"


def _json_equal(left: Any, right: Any) -> bool:
    # bool은 int의 하위 타입이라 JSON 의미와 다르게 1 == True가 된다.
    if isinstance(left, bool) or isinstance(right, bool):
        return isinstance(left, bool) and isinstance(right, bool) and left == right
    if isinstance(left, (int, float)) and isinstance(right, (int, float)):
        return left == right
    if type(left) is not type(right):
        return False
    if isinstance(left, dict):
        return left.keys() == right.keys() and all(_json_equal(left[k], right[k]) for k in left)
    if isinstance(left, list):
        return len(left) == len(right) and all(_json_equal(a, b) for a, b in zip(left, right))
    return left == right


def diff(left: Any, right: Any, object_hash: ObjectHash = default_object_hash) -> Optional[Any]:
    """두 JSON 값의 delta를 계산한다. 같으면 ``None``."""
    if _json_equal(left, right):
        return None
    if isinstance(left, dict) and isinstance(right, dict):
        return _diff_objects(left, right, object_hash)
    if isinstance(left, list) and isinstance(right, list):
        return _diff_arrays(left, right, object_hash)
    return [left, right]


def _diff_objects(left: Dict[str, Any], right: Dict[str, Any], object_hash: ObjectHash) -> Optional[Dict[str, Any]]:
    delta: Dict[str, Any] = {}
    for key, old in left.items():
        if key not in right:
            delta[key] = [old, DELETED, DELETED]
            continue
        child = diff(old, right[key], object_hash)
        if child is not None:
            delta[key] = child
    for key, new in right.items():
        if key not in left:
            delta[key] = [new]
    return delta or None


def _diff_arrays(left: List[Any], right: List[Any], object_hash: ObjectHash) -> Optional[Dict[str, Any]]:
    # 항목은 위치가 아니라 식별 키로 매칭한다. 순서 이동은 변경으로 보지 않는다.
    pending: Dict[str, deque] = defaultdict(deque)
    for index, item in enumerate(left):
        pending[object_hash(item)].append(index)

    matched: Dict[int, int] = {}
    added: Set[int] = set()
    for new_index, item in enumerate(right):
        candidates = pending.get(object_hash(item))
        if candidates:
            matched[new_index] = candidates.popleft()
        else:
            added.add(new_index)

    removed = sorted(index for indices in pending.values() for index in indices)

    delta: Dict[str, Any] = {}
    for old_index in removed:
        delta[f"_{old_index}"] = [left[old_index], DELETED, DELETED]
    for new_index in range(len(right)):
        if new_index in matched:
            child = diff(left[matched[new_index]], right[new_index], object_hash)
            if child is not None:
                delta[str(new_index)] = child
        elif new_index in added:
            delta[str(new_index)] = [right[new_index]]

    if not delta:
        return None
    return {ARRAY_MARKER: ARRAY_MARKER_VALUE, **delta}


def is_array_delta(delta: Any) -> bool:
    return isinstance(delta, dict) and delta.get(ARRAY_MARKER) == ARRAY_MARKER_VALUE
