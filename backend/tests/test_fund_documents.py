import copy

import pytest
from fastapi import HTTPException

from app.services import fund_document_service
from tests.conftest import auth_headers


def _base(fund_id):
    return f"/api/admin/funds/{fund_id}/generated-documents"


def _generate(client, headers, fund_id, body=None, doc_type="lpa"):
    if body is None:
        return client.post(f"{_base(fund_id)}/{doc_type}", headers=headers)
    return client.post(f"{_base(fund_id)}/{doc_type}", json=body, headers=headers)


def test_first_generation_uses_bundled_template(client, seed_fund):
    headers = auth_headers(client, "admin@fund.test")
    resp = _generate(client, headers, seed_fund.fund_id)
    assert resp.status_code == 200, resp.text
    body = resp.json()
    document = body["document"]
    assert document["version_number"] == 1
    assert document["template_version"] == "1.0.0"
    assert document["template_id"] is None
    assert document["is_active"] is True
    assert body["diff"] is None
    assert body["diff_error"] is None

    name_article = document["processed_content"]["sections"][0]["sub"][0]
    assert name_article["text"] == '이 조합은 프로펠 제1호 벤처투자조합(이하 "조합"이라 한다)이라 한다.'
    assert document["generation_context"]["fund"]["closed_at"] == "2026-03-02"


def test_duplicate_generation_is_rejected(client, seed_fund):
    headers = auth_headers(client, "admin@fund.test")
    assert _generate(client, headers, seed_fund.fund_id).status_code == 200

    resp = _generate(client, headers, seed_fund.fund_id)
    assert resp.status_code == 409
    assert resp.json()["detail"]["code"] == "DUPLICATE_DOCUMENT"

    versions = client.get(f"{_base(seed_fund.fund_id)}/lpa/versions", headers=headers).json()
    assert len(versions) == 1


def test_check_duplicate(client, seed_fund):
    headers = auth_headers(client, "admin@fund.test")
    url = f"{_base(seed_fund.fund_id)}/lpa/check-duplicate"
    assert client.get(url, headers=headers).json() == {"is_duplicate": False}
    _generate(client, headers, seed_fund.fund_id)
    assert client.get(url, headers=headers).json() == {"is_duplicate": True}


def test_fund_change_creates_next_version_with_diff(client, seed_fund):
    headers = auth_headers(client, "admin@fund.test")
    fund_id = seed_fund.fund_id
    _generate(client, headers, fund_id)

    client.put(f"/api/funds/{fund_id}", json={"address": "서울특별시 서초구"}, headers=headers)
    resp = _generate(client, headers, fund_id)
    assert resp.status_code == 200, resp.text
    body = resp.json()
    assert body["document"]["version_number"] == 2
    assert body["diff"]["from_version"] == 1
    assert body["diff"]["to_version"] == 2

    labels = {c["path"]: c["display_path"] for c in body["diff"]["changes"]}
    assert labels["context.fund.address"] == "펀드 주소"
    assert all("generatedAt" not in path and "processedAt" not in path for path in labels)

    versions = client.get(f"{_base(fund_id)}/lpa/versions", headers=headers).json()
    assert [v["version_number"] for v in versions] == [2, 1]
    assert [v["is_active"] for v in versions] == [True, False]


def test_modified_content_bumps_template_version(client, seed_fund):
    headers = auth_headers(client, "admin@fund.test")
    fund_id = seed_fund.fund_id
    first = _generate(client, headers, fund_id).json()["document"]

    content = copy.deepcopy(first["processed_content"])
    # 제1장 > 제4조(존속기간) > 1항
    content["sections"][0]["sub"][3]["sub"][0]["text"] = "존속기간은 연장할 수 없다."
    resp = _generate(client, headers, fund_id, {"modified_content": content})
    assert resp.status_code == 200, resp.text
    body = resp.json()

    assert body["document"]["version_number"] == 2
    assert body["document"]["template_version"] == "1.1.0"
    assert [c["type"] for c in body["template_changes"]] == ["minor"]
    assert body["document"]["generation_context"]["changeDescription"] == "부 변경 1건"
    assert body["diff"]["summary"]["added"] + body["diff"]["summary"]["modified"] >= 1


def test_modified_content_keeps_explicit_description(client, seed_fund):
    headers = auth_headers(client, "admin@fund.test")
    first = _generate(client, headers, seed_fund.fund_id).json()["document"]
    content = copy.deepcopy(first["processed_content"])
    content["sections"][0]["title"] = "일반 규정"

    body = _generate(client, headers, seed_fund.fund_id, {
        "modified_content": content,
        "change_description": "제1장 명칭 정비",
    }).json()
    assert body["document"]["template_version"] == "2.0.0"
    assert body["document"]["generation_context"]["changeDescription"] == "제1장 명칭 정비"


def test_render_failure_persists_nothing(client, seed_fund):
    headers = auth_headers(client, "admin@fund.test")
    resp = _generate(client, headers, seed_fund.fund_id, {"modified_content": {"sections": "broken"}})
    assert resp.status_code == 422
    assert client.get(f"{_base(seed_fund.fund_id)}/lpa/versions", headers=headers).json() == []


def test_missing_formation_date(client, seed_users):
    headers = auth_headers(client, "admin@fund.test")
    fund_id = client.post("/api/funds", json={"name": "결성 전 조합"}, headers=headers).json()["fund_id"]
    resp = _generate(client, headers, fund_id)
    assert resp.status_code == 400


def test_unknown_fund_and_type(client, seed_fund):
    headers = auth_headers(client, "admin@fund.test")
    assert _generate(client, headers, 999).status_code == 404
    assert _generate(client, headers, seed_fund.fund_id, doc_type="unknown").status_code == 400


def test_missing_template_is_not_found(client, seed_fund):
    headers = auth_headers(client, "admin@fund.test")
    resp = _generate(client, headers, seed_fund.fund_id, doc_type="lpa_consent_form")
    assert resp.status_code == 404


def test_fund_specific_template_is_used(client, seed_fund):
    headers = auth_headers(client, "admin@fund.test")
    content = {"type": "lpa", "sections": [{"index": 1, "title": "명칭", "text": "${fundNameShort}", "sub": []}]}
    template = client.post("/api/admin/templates/lpa", json={
        "version": "3.1.0", "content": content, "is_active": True, "fund_id": seed_fund.fund_id,
    }, headers=headers).json()

    document = _generate(client, headers, seed_fund.fund_id).json()["document"]
    assert document["template_id"] == template["template_id"]
    assert document["template_version"] == "3.1.0"
    assert document["processed_content"]["sections"][0]["text"] == "프로펠1호"


def test_preview_does_not_persist(client, seed_fund):
    headers = auth_headers(client, "admin@fund.test")
    resp = client.get(f"{_base(seed_fund.fund_id)}/lpa/preview", headers=headers)
    assert resp.status_code == 200, resp.text
    text = resp.json()["processed_content"]["sections"][0]["sub"][0]["text"]
    assert "<<PREVIEW>>" in text
    assert client.get(f"{_base(seed_fund.fund_id)}/lpa/versions", headers=headers).json() == []


def test_diff_endpoint_and_errors(client, seed_fund):
    headers = auth_headers(client, "admin@fund.test")
    fund_id = seed_fund.fund_id
    first = _generate(client, headers, fund_id).json()["document"]
    client.put(f"/api/funds/{fund_id}", json={"duration": 8}, headers=headers)
    second = _generate(client, headers, fund_id).json()["document"]

    url = f"{_base(fund_id)}/lpa/diff"
    resp = client.get(url, params={"from": first["document_id"], "to": second["document_id"]}, headers=headers)
    assert resp.status_code == 200, resp.text
    paths = {c["path"]: c for c in resp.json()["changes"]}
    assert paths["context.fund.duration"]["old_value"] == "5"
    assert paths["context.fund.duration"]["new_value"] == "8"
    assert paths["context.fund.duration"]["display_path"] == "존속기간"

    same = client.get(url, params={"from": first["document_id"], "to": first["document_id"]}, headers=headers)
    assert same.status_code == 400
    missing = client.get(url, params={"from": first["document_id"], "to": 999}, headers=headers)
    assert missing.status_code == 404
    assert missing.json()["detail"] == "문서를 찾을 수 없습니다."


def test_diff_failure_does_not_block_save(client, seed_fund, monkeypatch):
    headers = auth_headers(client, "admin@fund.test")
    fund_id = seed_fund.fund_id
    _generate(client, headers, fund_id)
    client.put(f"/api/funds/{fund_id}", json={"name": "프로펠 제1호 조합"}, headers=headers)

    def broken(*args, **kwargs):
        raise ValueError("boom")

    monkeypatch.setattr(fund_document_service, "compare_snapshots", broken)
    resp = _generate(client, headers, fund_id)
    assert resp.status_code == 200, resp.text
    body = resp.json()
    assert body["document"]["version_number"] == 2
    assert body["diff"] is None
    assert body["diff_error"] == "버전 비교를 할 수 없습니다."


def test_delete_rules(client, seed_fund):
    headers = auth_headers(client, "admin@fund.test")
    fund_id = seed_fund.fund_id
    first = _generate(client, headers, fund_id).json()["document"]
    client.put(f"/api/funds/{fund_id}", json={"duration": 9}, headers=headers)
    second = _generate(client, headers, fund_id).json()["document"]

    resp = client.delete(f"{_base(fund_id)}/lpa/{second['document_id']}", headers=headers)
    assert resp.status_code == 409

    resp = client.delete(f"{_base(fund_id)}/lpa/{first['document_id']}", headers=headers)
    assert resp.status_code == 200

    resp = client.get(f"{_base(fund_id)}/lpa/{first['document_id']}", headers=headers)
    assert resp.status_code == 404
    versions = client.get(f"{_base(fund_id)}/lpa/versions", headers=headers).json()
    assert [v["version_number"] for v in versions] == [2]

    # 삭제된 번호는 재사용하지 않는다
    client.put(f"/api/funds/{fund_id}", json={"duration": 10}, headers=headers)
    third = _generate(client, headers, fund_id).json()["document"]
    assert third["version_number"] == 3


def test_routes_reject_document_of_other_type(client, seed_fund):
    headers = auth_headers(client, "admin@fund.test")
    fund_id = seed_fund.fund_id
    lpa_first = _generate(client, headers, fund_id).json()["document"]
    member_first = _generate(client, headers, fund_id, doc_type="member_list").json()["document"]
    client.put(f"/api/funds/{fund_id}", json={"duration": 9}, headers=headers)
    member_second = _generate(client, headers, fund_id, doc_type="member_list").json()["document"]
    member_id = member_first["document_id"]

    resp = client.get(f"{_base(fund_id)}/lpa/{member_id}", headers=headers)
    assert resp.status_code == 404
    assert resp.json()["detail"] == "문서를 찾을 수 없습니다."

    resp = client.delete(f"{_base(fund_id)}/lpa/{member_id}", headers=headers)
    assert resp.status_code == 404
    assert client.get(f"{_base(fund_id)}/member_list/{member_id}", headers=headers).status_code == 200

    params = {"from": member_id, "to": member_second["document_id"]}
    assert client.get(f"{_base(fund_id)}/lpa/diff", params=params, headers=headers).status_code == 404
    mixed = {"from": lpa_first["document_id"], "to": member_second["document_id"]}
    assert client.get(f"{_base(fund_id)}/lpa/diff", params=mixed, headers=headers).status_code == 404
    assert client.get(f"{_base(fund_id)}/member_list/diff", params=params, headers=headers).status_code == 200


def test_get_document_checks_type_in_service(db, seed_fund, seed_users):
    row = fund_document_service.generate(db, seed_fund.fund_id, "member_list", seed_users["admin"])["document"]

    with pytest.raises(HTTPException) as exc:
        fund_document_service.get_fund_document(db, seed_fund.fund_id, row["document_id"], "lpa")
    assert exc.value.status_code == 404
    found = fund_document_service.get_fund_document(db, seed_fund.fund_id, row["document_id"], "member_list")
    assert found.type == "member_list"


def test_list_fund_documents_and_active(client, seed_fund):
    headers = auth_headers(client, "admin@fund.test")
    fund_id = seed_fund.fund_id
    _generate(client, headers, fund_id)
    _generate(client, headers, fund_id, doc_type="member_list")

    resp = client.get(_base(fund_id), headers=headers)
    assert resp.status_code == 200
    assert {d["type"] for d in resp.json()} == {"lpa", "member_list"}

    active = client.get(f"{_base(fund_id)}/member_list/active", headers=headers).json()
    assert active["version_number"] == 1


def test_reserve_retries_on_version_conflict(db, seed_fund, seed_users, monkeypatch):
    first = fund_document_service.generate(db, seed_fund.fund_id, "lpa", seed_users["admin"])
    assert first["document"]["version_number"] == 1

    real_max = fund_document_service._max_version
    calls = {"count": 0}

    def stale_max(session, fund_id, doc_type):
        calls["count"] += 1
        return 0 if calls["count"] == 1 else real_max(session, fund_id, doc_type)

    monkeypatch.setattr(fund_document_service, "_max_version", stale_max)
    row = fund_document_service.reserve_and_save(
        db,
        fund_id=seed_fund.fund_id,
        doc_type="lpa",
        template_id=None,
        template_version="1.0.0",
        processed_content={"sections": []},
        generation_context={},
        generated_by=seed_users["admin"].user_id,
    )
    assert row.version_number == 2
    assert calls["count"] == 2


def test_reserve_gives_up_after_retries(db, seed_fund, seed_users, monkeypatch):
    fund_document_service.generate(db, seed_fund.fund_id, "lpa", seed_users["admin"])
    monkeypatch.setattr(fund_document_service, "_max_version", lambda *args: 0)

    with pytest.raises(HTTPException) as exc_info:
        fund_document_service.reserve_and_save(
            db,
            fund_id=seed_fund.fund_id,
            doc_type="lpa",
            template_id=None,
            template_version="1.0.0",
            processed_content={"sections": []},
            generation_context={},
            generated_by=None,
        )
    assert exc_info.value.status_code == 409
