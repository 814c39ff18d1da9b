"""템플릿 섹션 트리에 생성 컨텍스트의 변수(``${fundName}`` 등)를 치환합니다."""

import re
from datetime import date, datetime
from typing import Any, Callable, Dict, List, Optional

PREVIEW_START = "<<PREVIEW>>"
PREVIEW_END = "<<PREVIEW_END>>"

VARIABLE_PATTERN = re.compile(r"\$\{(\w+)\}")

DIGITS = ["", "일", "이", "삼", "사", "오", "육", "칠", "팔", "구"]
GROUP_NAMES = ["", "만", "억", "조"]


class TemplateRenderError(ValueError):
    pass


def _four_digits_to_korean(num: int) -> str:
    result = ""
    for unit_value, unit_name in ((1000, "천"), (100, "백"), (10, "십")):
        digit = (num // unit_value) % 10
        if digit:
            # 십의 자리 1은 '일십'이 아니라 '십'으로 읽는다.
            result += ("" if unit_value == 10 and digit == 1 else DIGITS[digit]) + unit_name
    return result + DIGITS[num % 10]


def convert_number_to_korean(num: int) -> str:
    """예: 123456 → 십이만삼천사백오십육"""
    if num == 0:
        return "영"
    groups: List[int] = []
    while num > 0:
        groups.insert(0, num % 10000)
        num //= 10000
    result = ""
    for position, group in enumerate(groups):
        if group == 0:
            continue
        result += _four_digits_to_korean(group) + GROUP_NAMES[len(groups) - 1 - position]
    return result


def _comma(value: Optional[int]) -> str:
    return f"{value:,}" if value else ""


def _korean_date(value: Any) -> str:
    if not value:
        return ""
    if isinstance(value, str):
        value = date.fromisoformat(value[:10])
    return f"{value.year}년 {value.month}월 {value.day}일"


def build_variables(context: Dict[str, Any], today: Optional[date] = None) -> Dict[str, str]:
    today = today or date.today()
    fund = context.get("fund") or {}
    members = context.get("members") or []
    gp_members = [m for m in members if m.get("member_type") == "GP"]
    lp_members = [m for m in members if m.get("member_type") == "LP"]
    first_gp = gp_members[0] if gp_members else {}
    par_value = fund.get("par_value")
    total_cap = fund.get("total_cap")

    variables = {
        "fundName": fund.get("name") or "",
        "fundNameShort": fund.get("nameShort") or fund.get("name") or "",
        "fundAddress": fund.get("address") or "",
        "parValueKor": convert_number_to_korean(par_value) if par_value else "",
        "parValueComma": _comma(par_value),
        "parValue": convert_number_to_korean(par_value) if par_value else "",
        "totalCapKor": convert_number_to_korean(total_cap) if total_cap else "",
        "totalCapComma": _comma(total_cap),
        "duration": str(fund.get("duration") or 5),
        "startDate": _korean_date(fund.get("closed_at")),
        "userName": ", ".join(m.get("name") or "" for m in gp_members),
        "userEmail": first_gp.get("email") or "",
        "userAddress": fund.get("address") or "",
        "userPhone": first_gp.get("phone") or "",
        "coGP": "공동" if len(gp_members) > 1 else "",
        "gpList": ", ".join(m.get("name") or "" for m in gp_members),
        "lpList": ", ".join(m.get("name") or "" for m in lp_members),
        "today": f"{today.year}. {today.month}. {today.day}.",
        "year": str(today.year),
        "month": str(today.month),
        "day": str(today.day),
    }

    member = context.get("currentMember")
    if member:
        is_corporate = member.get("entity_type") == "corporate"
        variables.update({
            "name": member.get("name") or "",
            "address": member.get("address") or "",
            "shares": str(member.get("total_units") or 0),
            "contact": member.get("phone") or "",
            "birthDateOrBusinessNumber": (
                member.get("business_number") if is_corporate else member.get("birth_date")
            ) or "",
            "birthDate": member.get("birth_date") or "",
            "businessNumber": member.get("business_number") or "",
        })
    return variables


def process_template_variables(text: Optional[str], context: Dict[str, Any], today: Optional[date] = None) -> str:
    if not text:
        return ""
    variables = build_variables(context, today)
    is_preview = bool(context.get("isPreview"))

    def replace(match: "re.Match[str]") -> str:
        name = match.group(1)
        if name not in variables:
            return match.group(0)
        value = variables[name]
        # 값이 없는 결성일은 미리보기 표시 없이 비운다.
        if is_preview and not (name == "startDate" and not value):
            return f"{PREVIEW_START}{value}{PREVIEW_END}"
        return value

    return VARIABLE_PATTERN.sub(replace, text)


def _process_section(section: Any, render: Callable[[Optional[str]], str]) -> Dict[str, Any]:
    if not isinstance(section, dict):
        raise TemplateRenderError("섹션 형식이 올바르지 않습니다.")
    sub = section.get("sub") or []
    if not isinstance(sub, list):
        raise TemplateRenderError("하위 섹션(sub) 형식이 올바르지 않습니다.")
    return {
        **{k: v for k, v in section.items() if k != "_isNew"},
        "text": render(section.get("text")),
        "sub": [_process_section(child, render) for child in sub],
    }


def process_template(
    template_content: Any,
    context: Dict[str, Any],
    appendix: Any = None,
    today: Optional[date] = None,
) -> Dict[str, Any]:
    """템플릿 본문 전체를 치환해 ``processed_content`` 를 만든다."""
    if not isinstance(template_content, dict) or not isinstance(template_content.get("sections"), list):
        raise TemplateRenderError("템플릿 본문에 sections 배열이 없습니다.")

    def render(text: Optional[str]) -> str:
        return process_template_variables(text, context, today)

    processed = {
        "type": template_content.get("type"),
        "sections": [_process_section(section, render) for section in template_content["sections"]],
        "processedAt": datetime.utcnow().isoformat(),
    }
    if appendix is not None:
        processed["appendix"] = appendix
    return processed
