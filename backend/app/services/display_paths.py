"""diff 경로(`content.sections.2.text` 등)를 화면 표시용 라벨로 바꾸는 규칙 레지스트리입니다.

문서 타입별로 ``(정규식, 포매터)`` 규칙을 우선순위 순서대로 등록한다. 포매터가
``None`` 을 돌려주면 다음 규칙으로 넘어가고, 어떤 규칙도 맞지 않으면 경로의 ``.`` 을
``→`` 로 바꿔 보여준다.
"""

import re
from collections import defaultdict
from dataclasses import dataclass
from typing import Any, Callable, Dict, List, Optional

DEFAULT_RULES = "*"
TEMPLATE_DOCUMENT = "template"

Formatter = Callable[[re.Match, Any], Optional[str]]

FIXED_PATH_LABELS: Dict[str, str] = {
    "fundName": "펀드명",
    "fund.name": "펀드명",
    "fund.address": "펀드 주소",
    "fund.total_cap": "총출자금액",
    "fund.initial_cap": "초기 출자금액",
    "fund.par_value": "1좌당 금액",
    "fund.closed_at": "결성일",
    "fund.duration": "존속기간",
    "fund.payment_schedule": "출자방식",
    "members": "조합원 정보",
    "sections": "본문 조항",
    "membersCount": "조합원 수",
    "totalCap": "총 출자금액",
    "gp.name": "업무집행조합원",
    "gp.address": "업무집행조합원 주소",
    "user.name": "사용자명",
    "user.email": "사용자 이메일",
}

ARTICLE_FIELD_LABELS = {"title": "제목", "content": "내용", "number": "번호", "text": "내용"}

MEMBER_FIELD_LABELS = {
    "name": "이름",
    "units": "출자좌수",
    "amount": "출자금액",
    "total_units": "총 출자좌수",
    "total_amount": "총 출자금액",
    "initial_amount": "초기 출자금액",
    "member_type": "조합원 유형",
}

SECTION_FIELD_LABELS = {"title": "제목", "text": "내용", "index": "순서"}

TEMPLATE_FIELD_LABELS = {
    "title": "제목",
    "text": "내용",
    "index": "순서",
    "type": "타입",
    "filter": "필터",
    "id": "ID",
}


def _field_label(field: str, labels: Dict[str, str]) -> str:
    if field in labels:
        return labels[field]
    return " → ".join(labels.get(part, part) for part in field.split("."))


def strip_root_prefix(path: str) -> str:
    return re.sub(r"^(content|context)\.", "", path)


@dataclass(frozen=True)
class DisplayPathRule:
    pattern: "re.Pattern[str]"
    formatter: Formatter

    def apply(self, path: str, root: Any) -> Optional[str]:
        match = self.pattern.search(path)
        if not match:
            return None
        return self.formatter(match, root)


class DisplayPathRegistry:
    """문서 타입별 표시 라벨 규칙 모음."""

    def __init__(self):
        self._rules: Dict[str, List[DisplayPathRule]] = defaultdict(list)

    def register(self, document_type: str, pattern: str, formatter: Formatter) -> None:
        self._rules[document_type].append(DisplayPathRule(re.compile(pattern), formatter))

    def rules_for(self, document_type: Optional[str]) -> List[DisplayPathRule]:
        specific = self._rules.get(document_type, []) if document_type else []
        return [*specific, *self._rules.get(DEFAULT_RULES, [])]

    def resolve(self, path: str, document_type: Optional[str] = None, root: Any = None) -> str:
        for rule in self.rules_for(document_type):
            label = rule.apply(path, root)
            if label:
                return label
        return strip_root_prefix(path).replace(".", " → ")


# --- 생성 문서(규약, 조합원 명부, 동의서) 공통 규칙 -------------------------

def _fixed_path(match: re.Match, root: Any) -> Optional[str]:
    return FIXED_PATH_LABELS.get(match.group(1))


def _article(match: re.Match, root: Any) -> str:
    article = f"제{int(match.group(1)) + 1}조"
    field = match.group(2)
    if field:
        return f"{article} - {_field_label(field, ARTICLE_FIELD_LABELS)}"
    return article


def _member(match: re.Match, root: Any) -> str:
    return f"조합원 {int(match.group(1)) + 1} - {_field_label(match.group(2), MEMBER_FIELD_LABELS)}"


def _section(match: re.Match, root: Any) -> str:
    return f"섹션 {int(match.group(1)) + 1} - {_field_label(match.group(2), SECTION_FIELD_LABELS)}"


# --- 템플릿 비교 규칙 ------------------------------------------------------

def get_section_index_by_path(root: Any, path: str) -> Optional[Any]:
    """root에서 경로를 따라가 해당 섹션의 ``index`` 필드 값을 찾는다."""
    current = root
    for segment in path.split("."):
        if current is None:
            return None
        if segment.isdecimal():
            if not isinstance(current, list) or int(segment) >= len(current):
                return None
            current = current[int(segment)]
        elif isinstance(current, dict):
            current = current.get(segment)
        else:
            return None
    if isinstance(current, dict) and "index" in current:
        return current["index"]
    return None


def _template_root(match: re.Match, root: Any) -> str:
    return "본문" if match.group(1) == "content" else "부칙"


def _template_appendix_item(match: re.Match, root: Any) -> str:
    return f"부칙 {int(match.group(1)) + 1}번 - {_field_label(match.group(2), TEMPLATE_FIELD_LABELS)}"


def _template_section(match: re.Match, root: Any) -> Optional[str]:
    section = match.group(1)
    remaining = match.group(2)
    field_name = remaining.split(".")[-1]
    field_label = TEMPLATE_FIELD_LABELS.get(field_name, field_name)
    sub_indices = re.findall(r"sub\.(\d+)", remaining)

    base_path = f"content.sections.{section}"
    if not sub_indices:
        index = get_section_index_by_path(root, base_path)
        return f"제{index}조 - {field_label}" if index is not None else None
    article_path = f"{base_path}.sub.{sub_indices[0]}"
    article_index = get_section_index_by_path(root, article_path)
    if len(sub_indices) == 1:
        return f"제{article_index}조 - {field_label}" if article_index is not None else None
    item_index = get_section_index_by_path(root, f"{article_path}.sub.{sub_indices[1]}")
    if article_index is None or item_index is None:
        return None
    return f"제{article_index}조 {item_index}항 - {field_label}"


def _template_fallback(match: re.Match, root: Any) -> str:
    prefix = "본문" if match.group(1) == "content" else "부칙"
    return f"{prefix} → {match.group(2).replace('.', ' → ')}"


def build_default_registry() -> DisplayPathRegistry:
    registry = DisplayPathRegistry()
    registry.register(DEFAULT_RULES, r"^(?:content\.|context\.)?(.+)$", _fixed_path)
    registry.register(DEFAULT_RULES, r"articles\.(\d+)\.?(.*)$", _article)
    registry.register(DEFAULT_RULES, r"members\.(\d+)\.(.+)$", _member)
    registry.register(DEFAULT_RULES, r"sections\.(\d+)\.(.+)$", _section)

    registry.register(TEMPLATE_DOCUMENT, r"^(content|appendix)$", _template_root)
    registry.register(TEMPLATE_DOCUMENT, r"^appendix\.(\d+)\.(.+)$", _template_appendix_item)
    registry.register(TEMPLATE_DOCUMENT, r"^content\.sections\.(\d+)\.(.+)$", _template_section)
    registry.register(TEMPLATE_DOCUMENT, r"^content\.(sections)$", _fixed_path)
    registry.register(TEMPLATE_DOCUMENT, r"^(content|appendix)\.(.+)$", _template_fallback)
    return registry


display_paths = build_default_registry()


def get_display_path(path: str, document_type: Optional[str] = None, root: Any = None) -> str:
    return display_paths.resolve(path, document_type, root)


def register_display_rule(document_type: str, pattern: str, formatter: Formatter) -> None:
    display_paths.register(document_type, pattern, formatter)
