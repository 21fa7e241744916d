import base64

import pytest
from fastapi.testclient import TestClient

from lottoai import gemini
from lottoai.main import app
from lottoai.presets import SAMPLE_DATA
from lottoai.schemas import PredictedNumbers

client = TestClient(app)

FLAT_FIVE_OF_TEN = {"gameName": "Test", "mainNumbersCount": 5, "mainNumbersRange": {"min": 1, "max": 10}}

@pytest.fixture
def powerball_json(powerball):
    return powerball.model_dump()

def test_healthz(no_gemini_key):
    r = client.get("/healthz")
    assert r.status_code == 200
    assert r.json() == {"ok": True, "ai_configured": False}

def test_presets_and_sample():
    r = client.get("/api/presets")
    assert r.status_code == 200
    body = r.json()
    assert body["default"] in body["presets"]
    assert body["presets"]["SA PowerBall"]["shape"]["special_name"] == "PowerBall"
    assert client.get("/api/sample").json() == {"historical_data": SAMPLE_DATA}

def test_analyze(powerball_json):
    r = client.post("/api/analyze", json={"historical_data": SAMPLE_DATA, "config": powerball_json})
    assert r.status_code == 200
    body = r.json()
    assert body["draw_count"] == 10
    assert body["main"]["hot_numbers"][0] == {"number": 14, "value": 4}
    assert len(body["special"]["overdue_numbers"]) == 5

def test_analyze_accepts_flat_camel_case_config():
    r = client.post("/api/analyze", json={"historicalData": "1 2 3 4 5\na b c\n2 3 4 5 7", "config": FLAT_FIVE_OF_TEN})
    assert r.status_code == 200
    assert r.json()["draw_count"] == 2
    assert r.json()["special"] is None

def test_analyze_blank_text_is_null(powerball_json):
    r = client.post("/api/analyze", json={"historical_data": "  ", "config": powerball_json})
    assert r.status_code == 200
    assert r.json() is None

def test_analyze_rejects_bad_config():
    bad = dict(FLAT_FIVE_OF_TEN, mainNumbersRange={"min": 10, "max": 1})
    assert client.post("/api/analyze", json={"historical_data": "1", "config": bad}).status_code == 422

def test_predict_without_key(no_gemini_key, powerball_json):
    r = client.post("/api/predict", json={"historical_data": SAMPLE_DATA, "config": powerball_json})
    assert r.status_code == 503
    assert "API key is not configured" in r.json()["detail"]

def test_predict_empty_data(gemini_key, powerball_json):
    r = client.post("/api/predict", json={"historical_data": "", "config": powerball_json})
    assert r.status_code == 400
    assert r.json()["detail"] == "Historical data cannot be empty."

def test_predict(monkeypatch, gemini_key, powerball_json):
    seen = {}

    async def fake_predict(text, config, strategy):
        seen.update(text=text, game=config.game_name, strategy=strategy)
        return PredictedNumbers(main_numbers=[1, 2, 3, 4, 5], special_numbers=[6], explanation="because")

    monkeypatch.setattr(gemini, "predict_numbers", fake_predict)
    r = client.post("/api/predict", json={"historical_data": SAMPLE_DATA, "config": powerball_json, "strategy": "overdue"})
    assert r.status_code == 200
    assert r.json() == {"main_numbers": [1, 2, 3, 4, 5], "special_numbers": [6], "explanation": "because"}
    assert seen == {"text": SAMPLE_DATA, "game": "SA PowerBall", "strategy": "overdue"}

def test_predict_unknown_strategy(gemini_key, powerball_json):
    r = client.post("/api/predict", json={"historical_data": SAMPLE_DATA, "config": powerball_json, "strategy": "lucky"})
    assert r.status_code == 422

def test_predict_ai_failure(monkeypatch, gemini_key, powerball_json):
    async def boom(*args):
        raise gemini.AIResponseError("garbage")

    monkeypatch.setattr(gemini, "predict_numbers", boom)
    r = client.post("/api/predict", json={"historical_data": SAMPLE_DATA, "config": powerball_json})
    assert r.status_code == 502
    assert r.json()["detail"].startswith("Failed to get prediction")

def test_scan_appends_extracted_text(monkeypatch, gemini_key):
    async def fake_extract(image, mime_type):
        assert image == b"fake-image"
        assert mime_type == "image/png"
        return "7 8 9 10 11 PB 1"

    monkeypatch.setattr(gemini, "extract_numbers_from_image", fake_extract)
    data = "data:image/png;base64," + base64.b64encode(b"fake-image").decode()
    r = client.post("/api/scan", json={"imageBase64": data, "mimeType": "image/png", "historicalData": "1 2 3 4 5 PB 6\n"})
    assert r.status_code == 200
    assert r.json()["historical_data"] == "1 2 3 4 5 PB 6\n\n7 8 9 10 11 PB 1"

def test_scan_rejects_invalid_base64(gemini_key):
    r = client.post("/api/scan", json={"image_base64": "@@not-base64@@"})
    assert r.status_code == 400

@pytest.mark.parametrize("payload", ["data:image/png;base64", "data:image/png;base64,"])
def test_scan_rejects_data_url_without_payload(gemini_key, payload):
    lenient = TestClient(app, raise_server_exceptions=False)
    r = lenient.post("/api/scan", json={"image_base64": payload})
    assert r.status_code == 400
    assert r.json()["detail"] == "Image data is not valid base64."

def _capture_mime(monkeypatch):
    seen = {}

    async def fake_extract(image, mime_type):
        seen["mime_type"] = mime_type
        return "1 2 3 4 5"

    monkeypatch.setattr(gemini, "extract_numbers_from_image", fake_extract)
    return seen

def test_scan_takes_mime_type_from_data_url(monkeypatch, gemini_key):
    seen = _capture_mime(monkeypatch)
    data = "data:image/png;base64," + base64.b64encode(b"png-bytes").decode()
    assert client.post("/api/scan", json={"image_base64": data}).status_code == 200
    assert seen["mime_type"] == "image/png"

def test_scan_explicit_mime_type_wins_and_plain_base64_defaults_to_jpeg(monkeypatch, gemini_key):
    seen = _capture_mime(monkeypatch)
    data = "data:image/png;base64," + base64.b64encode(b"png-bytes").decode()
    client.post("/api/scan", json={"image_base64": data, "mime_type": "image/webp"})
    assert seen["mime_type"] == "image/webp"

    client.post("/api/scan", json={"image_base64": base64.b64encode(b"raw").decode()})
    assert seen["mime_type"] == "image/jpeg"

def test_clean(monkeypatch, gemini_key):
    async def fake_clean(text):
        return "1 2 3 4 5"

    monkeypatch.setattr(gemini, "clean_and_format_data", fake_clean)
    r = client.post("/api/clean", json={"historical_data": "Draw 1 on 2024-01-01: 1,2,3,4,5"})
    assert r.json() == {"historical_data": "1 2 3 4 5"}

def test_clean_blank_is_noop(no_gemini_key):
    r = client.post("/api/clean", json={"historical_data": "  "})
    assert r.status_code == 200
    assert r.json() == {"historical_data": "  "}

def test_clean_ai_failure(monkeypatch, gemini_key):
    async def boom(text):
        raise gemini.AIServiceError("down")

    monkeypatch.setattr(gemini, "clean_and_format_data", boom)
    r = client.post("/api/clean", json={"historical_data": "x"})
    assert r.status_code == 502

def test_score():
    r = client.post("/api/score", json={
        "predicted": {"mainNumbers": [1, 2, 3, 4, 5], "specialNumbers": [6], "explanation": ""},
        "actualMain": [5, 4, 10, 11, 12],
        "actualSpecial": [7],
    })
    assert r.status_code == 200
    assert r.json() == {"main_hits": [4, 5], "special_hits": []}

def test_root_without_static():
    r = client.get("/")
    assert r.status_code == 200
