import pytest
from fastapi.testclient import TestClient

from api.dependencies import get_extraction_service
from config import create_custom_config
from main import app
from services.extraction_service import ExtractionService

client = TestClient(app)


@pytest.fixture(autouse=True)
def rule_only_service():
    service = ExtractionService(create_custom_config(enable_ai_assistance=False))
    app.dependency_overrides[get_extraction_service] = lambda: service
    yield
    app.dependency_overrides.clear()


def test_health():
    response = client.get("/health")
    assert response.status_code == 200
    data = response.json()
    assert data["status"] == "ok"
    assert "ai_configured" in data
    assert "extraction_mode" in data


def test_status():
    response = client.get("/status")
    assert response.status_code == 200
    data = response.json()
    assert data["rule_extractors"] == ["basic_info", "education", "work_experience", "projects", "skills"]
    assert data["ai_enabled"] is False
    assert data["ai_available"] is False


def test_extract(sample_resume):
    response = client.post("/extract", json={"text": sample_resume})
    assert response.status_code == 200
    data = response.json()
    assert data["basic_info"]["data"]["name"] == "张三"
    assert data["education"]["data"][0]["school"] == "清华大学"
    assert data["work_experience"]["data"][0]["is_current"] is True
    assert data["metadata"]["method"] == "rule-based"
    assert data["metadata"]["fields_missing"] == []
    assert 0.0 <= data["basic_info"]["confidence"] <= 1.0


def test_extract_empty_text():
    response = client.post("/extract", json={"text": "   "})
    assert response.status_code == 400


def test_extract_text_too_long():
    response = client.post("/extract", json={"text": "字" * 50001})
    assert response.status_code == 422


@pytest.mark.parametrize("domain,check", [
    ("basic_info", lambda data: data["phone"] == "13812345678"),
    ("education", lambda data: data[0]["degree"] == "学士"),
    ("experience", lambda data: data[0]["company"] == "北京字节跳动科技有限公司"),
    ("projects", lambda data: data[0]["name"] == "在线教育平台"),
    ("skills", lambda data: len(data["technical_skills"]) > 0),
])
def test_extract_domain(sample_resume, domain, check):
    response = client.post(f"/extract/{domain}", json={"text": sample_resume})
    assert response.status_code == 200
    body = response.json()
    assert body["domain"] == domain
    assert check(body["data"])


def test_extract_unknown_domain(sample_resume):
    response = client.post("/extract/hobbies", json={"text": sample_resume})
    assert response.status_code == 400
    assert "basic_info" in response.json()["detail"]


def test_upload_txt(sample_resume):
    response = client.post(
        "/extract/upload",
        files={"resume_file": ("resume.txt", sample_resume.encode("utf-8"), "text/plain")},
    )
    assert response.status_code == 200
    data = response.json()
    assert data["filename"] == "resume.txt"
    assert data["text_length"] > 0
    assert data["result"]["basic_info"]["data"]["email"] == "zhangsan@example.com"


def test_upload_gbk_txt(sample_resume):
    response = client.post(
        "/extract/upload",
        files={"resume_file": ("resume.md", sample_resume.encode("gbk"), "text/markdown")},
    )
    assert response.status_code == 200
    assert response.json()["result"]["basic_info"]["data"]["name"] == "张三"


def test_upload_rejects_extension():
    response = client.post(
        "/extract/upload",
        files={"resume_file": ("resume.docx", b"PK\x03\x04", "application/octet-stream")},
    )
    assert response.status_code == 400


def test_upload_empty_file():
    response = client.post(
        "/extract/upload",
        files={"resume_file": ("resume.txt", b"", "text/plain")},
    )
    assert response.status_code == 400


def test_validate(sample_resume):
    response = client.post("/extract/validate", json={"text": sample_resume})
    assert response.status_code == 200
    data = response.json()
    assert data["validation"]["is_valid"] is True
    assert data["stats"]["extracted_fields"] == 5
    assert data["stats"]["ai_calls"] == 0


def test_validate_missing_contact():
    response = client.post("/extract/validate", json={"text": "熟练掌握Java和Python"})
    assert response.status_code == 200
    data = response.json()
    assert data["validation"]["is_valid"] is False
    assert data["validation"]["errors"][0]["code"] == "MISSING_CONTACT_INFO"
