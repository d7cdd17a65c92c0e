"""
Tests for the HTTP routes (providers replaced with in-memory fakes)
"""

import base64
import pytest
import sys
from pathlib import Path

# Add project root and src to path
sys.path.insert(0, str(Path(__file__).parent.parent))
sys.path.insert(0, str(Path(__file__).parent.parent / "src"))

from fastapi.testclient import TestClient

from main import app
from api.routes import get_scanner
from exceptions import OCRProviderError
from extractor.orchestrator import DateExtractionOrchestrator
from label_scanner import LabelScanner
from providers.vision_ocr import OCRText
from settings import default_config


IMAGE_B64 = base64.b64encode(b"\xff\xd8\xff\xe0" + b"\x00" * 64).decode("ascii")


class FakeVision:
    def __init__(self, text="", labels=None, objects=None, error=None):
        self.text = text
        self.labels = labels or []
        self.objects = objects or []
        self.error = error
        self.images = []

    async def ocr(self, image_b64):
        self.images.append(image_b64)
        if self.error:
            raise self.error
        return OCRText(raw_text=self.text)

    async def detect_labels(self, image_b64):
        self.images.append(image_b64)
        if self.error:
            raise self.error
        return self.labels, self.objects


class FakeLLM:
    def __init__(self, payload):
        self.payload = payload
        self.calls = 0

    async def complete_json(self, system_prompt, user_text, timeout_ms):
        self.calls += 1
        return self.payload


def make_scanner(vision, llm=None, config=None):
    return LabelScanner(
        config=config or default_config(),
        ocr_client=vision,
        orchestrator=DateExtractionOrchestrator(llm_client=llm),
    )


@pytest.fixture
def client():
    yield TestClient(app)
    app.dependency_overrides.clear()


def use_scanner(scanner):
    app.dependency_overrides[get_scanner] = lambda: scanner


def test_health(client):
    response = client.get("/health")
    assert response.status_code == 200
    assert response.json()["status"] == "healthy"


def test_ping(client):
    response = client.get("/api/ping")
    assert response.status_code == 200
    assert response.json()["ok"] is True
    assert "time" in response.json()


def test_analyze_json_body(client):
    vision = FakeVision(text="BEST BEFORE\n15.03.2026")
    use_scanner(make_scanner(vision))

    response = client.post("/api/analyze", json={"imageBase64": IMAGE_B64})

    assert response.status_code == 200
    data = response.json()
    assert data["ok"] is True
    assert data["productionDateISO"] is None
    assert data["expiryDateISO"] == "2026-03-15"
    assert data["bestBeforeDateISO"] == "2026-03-15"
    assert data["meta"]["source"] == "regex"
    assert data["meta"]["notes"] is None
    assert set(data["meta"]["timingMs"]) == {"total", "vision"}
    assert "15.03.2026" in data["meta"]["debug"]["ocrPreview"]
    assert vision.images == [IMAGE_B64]


def test_analyze_multipart_upload(client):
    vision = FakeVision(text="EXP 2029/03")
    use_scanner(make_scanner(vision))

    raw = base64.b64decode(IMAGE_B64)
    response = client.post("/api/analyze", files={"image": ("label.jpg", raw, "image/jpeg")})

    assert response.status_code == 200
    data = response.json()
    assert data["expiryDateISO"] == "2029-03-01"
    assert data["meta"]["notes"] == "assumed day=01 from year-month"
    assert vision.images == [IMAGE_B64]


def test_analyze_regex_hit_skips_llm(client):
    llm = FakeLLM({"expiry_date": "2030-01-01"})
    use_scanner(make_scanner(FakeVision(text="EXP 2026-03-15"), llm=llm))

    response = client.post("/api/analyze", json={"imageBase64": IMAGE_B64})

    assert response.json()["expiryDateISO"] == "2026-03-15"
    assert llm.calls == 0


def test_analyze_regex_miss_uses_llm(client):
    llm = FakeLLM({"production_date": "2025-01-01", "expiry_date": "2026-01-01", "notes": "from label"})
    use_scanner(make_scanner(FakeVision(text="Ingredients: water, salt"), llm=llm))

    data = client.post("/api/analyze", json={"imageBase64": IMAGE_B64}).json()

    assert llm.calls == 1
    assert data["productionDateISO"] == "2025-01-01"
    assert data["expiryDateISO"] == "2026-01-01"
    assert data["meta"]["notes"] == "from label"
    assert data["meta"]["source"] == "llm"


def test_analyze_no_dates_is_all_null(client):
    use_scanner(make_scanner(FakeVision(text="Ingredients: water, salt")))

    data = client.post("/api/analyze", json={"imageBase64": IMAGE_B64}).json()

    assert data["ok"] is True
    assert data["productionDateISO"] is None
    assert data["expiryDateISO"] is None
    assert data["bestBeforeDateISO"] is None
    assert data["meta"]["notes"] is None


def test_analyze_requires_image(client):
    use_scanner(make_scanner(FakeVision()))

    response = client.post("/api/analyze", json={"imageBase64": "short"})

    assert response.status_code == 400
    assert response.json() == {"ok": False, "error": "image required"}


def test_analyze_ocr_failure_is_surfaced(client):
    vision = FakeVision(error=OCRProviderError("quota exceeded", status_code=429))
    use_scanner(make_scanner(vision))

    response = client.post("/api/analyze", json={"imageBase64": IMAGE_B64})

    assert response.status_code == 400
    assert response.json()["ok"] is False
    assert "429" in response.json()["error"]


def test_analyze_keeps_upload_when_configured(client, tmp_path):
    config = default_config()
    config["server"]["keep_uploads"] = True
    config["server"]["uploads_dir"] = str(tmp_path)
    use_scanner(make_scanner(FakeVision(text="2031"), config=config))

    data = client.post("/api/analyze", json={"imageBase64": IMAGE_B64}).json()

    assert data["expiryDateISO"] == "2031-01-01"
    saved = list(tmp_path.iterdir())
    assert len(saved) == 1
    assert saved[0].read_bytes() == base64.b64decode(IMAGE_B64)


def test_analyze_name(client):
    vision = FakeVision(
        labels=[{"description": "Food", "score": 0.95}, {"description": "peanut butter jar", "score": 0.8}],
        objects=[{"name": "Jar"}],
    )
    use_scanner(make_scanner(vision))

    response = client.post("/api/analyze-name", json={"imageBase64": IMAGE_B64})

    assert response.status_code == 200
    assert response.json() == {"ok": True, "name": "Peanut Butter Jar"}


def test_analyze_name_provider_failure(client):
    use_scanner(make_scanner(FakeVision(error=OCRProviderError("boom"))))

    response = client.post("/api/analyze-name", json={"imageBase64": IMAGE_B64})

    assert response.status_code == 404
    assert response.json()["ok"] is False


def test_extract_from_text_backfills_regex(client):
    llm = FakeLLM({"product_name": " Oat Milk ", "production_date": "2025-01-01"})
    use_scanner(make_scanner(FakeVision(), llm=llm))

    response = client.post("/api/extract-from-text", json={"ocrText": "MFG see lid. EXP 06/2025"})

    assert response.status_code == 200
    data = response.json()
    assert data["productionDateISO"] == "2025-01-01"
    assert data["expiryDateISO"] == "2025-06-01"
    assert data["bestBeforeDateISO"] == "2025-06-01"
    assert data["name"] == "Oat Milk"
    assert llm.calls == 1


def test_extract_from_text_expiry_falls_back_to_best_before(client):
    llm = FakeLLM({"best_before_date": "2027-05-20"})
    use_scanner(make_scanner(FakeVision(), llm=llm))

    data = client.post("/api/extract-from-text", json={"ocrText": "no dates here"}).json()

    assert data["expiryDateISO"] == "2027-05-20"
    assert data["bestBeforeDateISO"] == "2027-05-20"


def test_extract_from_text_requires_text(client):
    use_scanner(make_scanner(FakeVision()))

    response = client.post("/api/extract-from-text", json={"ocrText": "   "})

    assert response.status_code == 400
    assert response.json() == {"ok": False, "error": "ocrText required"}


@pytest.mark.parametrize("body", [
    "{not json",
    "[\"2026-03-15\"]",
    "{\"ocrText\": 123}",
])
def test_extract_from_text_malformed_body_is_bad_request(client, body):
    use_scanner(make_scanner(FakeVision()))

    response = client.post(
        "/api/extract-from-text",
        content=body,
        headers={"content-type": "application/json"},
    )

    assert response.status_code == 400
    assert response.json() == {"ok": False, "error": "ocrText required"}


if __name__ == "__main__":
    pytest.main([__file__, "-v"])
