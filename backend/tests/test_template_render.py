from datetime import date

import pytest

from app.services.template_render import (
    PREVIEW_END,
    PREVIEW_START,
    TemplateRenderError,
    build_variables,
    convert_number_to_korean,
    process_template,
    process_template_variables,
)

CONTEXT = {
    "fund": {
        "name": "프로펠 제1호 벤처투자조합",
        "nameShort": "프로펠1호",
        "address": "서울특별시 강남구",
        "par_value": 1000000,
        "total_cap": 1500000000,
        "duration": 7,
        "closed_at": "2026-03-02",
    },
    "members": [
        {"name": "프로펠벤처스", "member_type": "GP", "email": "gp@fund.test", "phone": "02-000-0000"},
        {"name": "김출자", "member_type": "LP"},
        {"name": "이출자", "member_type": "LP"},
    ],
    "isPreview": False,
}


def test_convert_number_to_korean():
    assert convert_number_to_korean(0) == "영"
    assert convert_number_to_korean(123456) == "십이만삼천사백오십육"
    assert convert_number_to_korean(1000000) == "일백만"
    assert convert_number_to_korean(1500000000) == "십오억"


def test_build_variables():
    variables = build_variables(CONTEXT, today=date(2026, 4, 1))
    assert variables["fundName"] == "프로펠 제1호 벤처투자조합"
    assert variables["parValueComma"] == "1,000,000"
    assert variables["totalCapKor"] == "십오억"
    assert variables["duration"] == "7"
    assert variables["startDate"] == "2026년 3월 2일"
    assert variables["gpList"] == "프로펠벤처스"
    assert variables["lpList"] == "김출자, 이출자"
    assert variables["coGP"] == ""
    assert variables["today"] == "2026. 4. 1."


def test_unknown_variables_are_kept():
    text = "${fundName} / ${notAVariable}"
    assert process_template_variables(text, CONTEXT) == "프로펠 제1호 벤처투자조합 / ${notAVariable}"


def test_preview_marks_substituted_values():
    context = {**CONTEXT, "isPreview": True}
    rendered = process_template_variables("${fundNameShort}", context)
    assert rendered == f"{PREVIEW_START}프로펠1호{PREVIEW_END}"


def test_process_template_recurses_into_sub():
    content = {"type": "lpa", "sections": [
        {"index": 1, "title": "총칙", "text": "", "sub": [
            {"index": 1, "title": "명칭", "text": "이 조합은 ${fundName}이라 한다.", "sub": [], "_isNew": True},
        ]},
    ]}

    processed = process_template(content, CONTEXT, appendix=[{"title": "부칙"}])

    article = processed["sections"][0]["sub"][0]
    assert article["text"] == "이 조합은 프로펠 제1호 벤처투자조합이라 한다."
    assert "_isNew" not in article
    assert processed["type"] == "lpa"
    assert processed["appendix"] == [{"title": "부칙"}]
    assert "processedAt" in processed
    assert content["sections"][0]["sub"][0]["text"].startswith("이 조합은 ${fundName}")


@pytest.mark.parametrize("content", [
    None,
    {"sections": "not a list"},
    {"sections": ["not a dict"]},
    {"sections": [{"title": "A", "sub": "broken"}]},
])
def test_malformed_template_raises(content):
    with pytest.raises(TemplateRenderError):
        process_template(content, CONTEXT)
