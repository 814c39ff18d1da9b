"""템플릿 섹션 트리 비교와 구조 깊이 기반 시맨틱 버전 계산 로직입니다.

깊이(장/조/항/호/목)로 변경의 수준(level)을 먼저 정하고, 버전 정책이 수준을
major/minor/patch 로 매핑한다. 정책은 ``bump_policy`` 인자로 교체할 수 있다.
"""

from typing import Any, Dict, List, Mapping, Optional

from app.schemas.diff import TemplateChange
from app.services.document_diff import format_value

SECTION_LEVELS = ("chapter", "article", "clause", "item", "sub_item")
DEPTH_LABELS = ("장", "조", "항", "호", "목")

DEFAULT_BUMP_POLICY: Dict[str, str] = {
    "chapter": "major",
    "article": "major",
    "clause": "minor",
    "item": "patch",
    "sub_item": "patch",
}

BUMP_PRIORITY = ("major", "minor", "patch")

NEW_SECTION_FLAG = "_isNew"


def get_section_level(depth: int) -> str:
    if depth <= 1:
        return SECTION_LEVELS[0]
    return SECTION_LEVELS[min(depth, len(SECTION_LEVELS)) - 1]


def get_change_type(depth: int, bump_policy: Mapping[str, str] = DEFAULT_BUMP_POLICY) -> str:
    """depth 1~2(장, 조) major, 3(항) minor, 4 이상(호, 목) patch."""
    return bump_policy[get_section_level(depth)]


def _sections(value: Any) -> List[Dict[str, Any]]:
    if not isinstance(value, list):
        return []
    return [item if isinstance(item, dict) else {} for item in value]


def _depth_of(array_path: str) -> int:
    return sum(1 for part in array_path.split(".") if part.isdecimal()) + 1


def _preview(section: Dict[str, Any]) -> str:
    return section.get("title") or str(section.get("text") or "")[:30] or "(빈 항목)"


def _summary(section: Dict[str, Any]) -> str:
    return section.get("title") or section.get("text") or "(빈 항목)"


def _display(path: str, field: str = "") -> str:
    parts = [p for p in (format_section_path(path), field) if p]
    return " > ".join(parts)


def _text(value: Any) -> Optional[str]:
    return None if value is None else format_value(value)


def compare_sections(
    original_sections: Any,
    modified_sections: Any,
    array_path: str,
    changes: List[TemplateChange],
    bump_policy: Mapping[str, str] = DEFAULT_BUMP_POLICY,
) -> List[TemplateChange]:
    """같은 깊이의 섹션 배열을 위치 기준으로 비교한다.

    배열 길이가 달라지면 항목 수 변경을 먼저 기록한다. 편집기에서 끼워 넣은 섹션은
    ``_isNew`` 로 표시되며, 원본 위치 계산에서 제외된다.
    """
    original = _sections(original_sections)
    modified = _sections(modified_sections)
    depth = _depth_of(array_path)
    change_type = get_change_type(depth, bump_policy)
    level = get_section_level(depth)

    def emit(path: str, description: str, old=None, new=None, field: str = "") -> None:
        changes.append(TemplateChange(
            type=change_type,
            path=path,
            description=description,
            depth=depth,
            level=level,
            old_value=_text(old),
            new_value=_text(new),
            display_path=_display(path, field),
        ))

    if len(original) != len(modified):
        emit(
            array_path,
            f"항목 수 변경: {len(original)} → {len(modified)}",
            old=len(original),
            new=len(modified),
            field="항목 수",
        )

    original_index = 0
    for i, after in enumerate(modified):
        item_path = f"{array_path}.{i}"
        if after.get(NEW_SECTION_FLAG) or original_index >= len(original):
            emit(item_path, f'섹션 추가: "{_preview(after)}"', new=_summary(after))
            continue

        before = original[original_index]
        original_index += 1
        if before.get("title") != after.get("title"):
            emit(
                f"{item_path}.title",
                f'제목 변경: "{before.get("title") or ""}" → "{after.get("title") or ""}"',
                old=before.get("title"),
                new=after.get("title"),
                field="제목",
            )
        if before.get("text") != after.get("text"):
            emit(f"{item_path}.text", "내용 변경", old=before.get("text"), new=after.get("text"), field="내용")
        if before.get("sub") is not None or after.get("sub") is not None:
            compare_sections(before.get("sub"), after.get("sub"), f"{item_path}.sub", changes, bump_policy)

    for i in range(original_index, len(original)):
        before = original[i]
        emit(f"{array_path}.{i}", f'섹션 삭제: "{_preview(before)}"', old=_summary(before))

    return changes


def analyze_template_changes(
    original: Any,
    modified: Any,
    bump_policy: Mapping[str, str] = DEFAULT_BUMP_POLICY,
) -> List[TemplateChange]:
    """두 템플릿 본문(``{"sections": [...]}``)의 구조적 차이를 분석한다."""
    original_sections = original.get("sections") if isinstance(original, dict) else None
    modified_sections = modified.get("sections") if isinstance(modified, dict) else None
    return compare_sections(original_sections, modified_sections, "sections", [], bump_policy)


def parse_version(version: str) -> List[int]:
    parts = []
    for raw in (str(version or "").split(".") + ["0", "0", "0"])[:3]:
        try:
            parts.append(int(raw))
        except ValueError:
            parts.append(0)
    return parts


def calculate_next_version(current_version: str, changes: List[TemplateChange]) -> str:
    """변경사항 중 가장 높은 수준(major > minor > patch)에 맞춰 다음 버전을 계산한다."""
    kinds = {change.type for change in changes}
    if not kinds:
        return current_version

    major, minor, patch = parse_version(current_version)
    if "major" in kinds:
        return f"{major + 1}.0.0"
    if "minor" in kinds:
        return f"{major}.{minor + 1}.0"
    if "patch" in kinds:
        return f"{major}.{minor}.{patch + 1}"
    return current_version


def generate_change_description(changes: List[TemplateChange]) -> str:
    labels = {"major": "주요 변경", "minor": "부 변경", "patch": "경미한 변경"}
    counts = {kind: sum(1 for c in changes if c.type == kind) for kind in BUMP_PRIORITY}
    return ", ".join(f"{labels[kind]} {counts[kind]}건" for kind in BUMP_PRIORITY if counts[kind])


def _numeric_parts(path: str) -> List[int]:
    return [int(part) for part in path.split(".") if part.isdecimal()]


def format_section_path(path: str) -> str:
    # "sections.0.sub.1.text" → "제1장 > 제2조"
    labels = []
    for level, index in enumerate(_numeric_parts(path)):
        label = DEPTH_LABELS[min(level, len(DEPTH_LABELS) - 1)]
        labels.append(f"제{index + 1}{label}")
    return " > ".join(labels)


def get_section_depth(path: str) -> int:
    return len(_numeric_parts(path))


def get_depth_label(depth: int) -> str:
    if 1 <= depth <= len(DEPTH_LABELS):
        return DEPTH_LABELS[depth - 1]
    return "항목"


def get_section_full_label(section_index: int, depth: int, section_title: str) -> str:
    """예: "제1장 총칙", "제4조 목적". 음수 인덱스(부칙 등)는 제목만 표시한다."""
    if section_index < 0:
        return section_title
    return f"제{section_index}{get_depth_label(depth)} {section_title}"
