"""
Test the CV extraction adapter with the model call mocked out
"""
import asyncio
import json
from datetime import date

import pytest

from profile_engine.errors import ExtractionFailed, ValidationFailed
from profile_engine.schemas.extraction import RawExtraction
from profile_engine.services import cv_extractor
from profile_engine.services.cv_extractor import (
    CVExtractor, calculate_years_of_experience, extract_profile,
    fill_experience_totals, parse_extraction_response, strip_code_fences
)
from profile_engine.services.documents import UploadedDocument

SAMPLE_EXTRACTION = {
    "basic_info": {"first_name": "Ada", "last_name": "Lovelace", "title": "Engineer"},
    "work_experiences": [
        {"title": "Engineer", "company": "Acme", "start_date": "2020-01-01", "end_date": "2023-06-30", "skills": ["Python"]},
    ],
    "educations": [{"degree_diploma": "BSc", "university_school": "UCL"}],
    "skills": [{"name": "Python", "proficiency": 90}, {"name": "SQL"}],
    "languages": [{"language": "English", "is_native": True}],
    "accomplishments": [{"title": "Speaker", "description": "PyCon"}],
}


def _fenced(payload) -> str:
    return "```json\n" + json.dumps(payload) + "\n```"


class RecordingExtractor:
    def __init__(self, raw: RawExtraction):
        self.raw = raw
        self.calls = 0

    async def extract(self, document):
        self.calls += 1
        return self.raw


def test_strip_code_fences():
    """Test markdown fences around model output are removed"""
    assert strip_code_fences('```json\n{"a": 1}\n```') == '{"a": 1}'
    assert strip_code_fences('{"a": 1}') == '{"a": 1}'


def test_fences_inside_values_are_kept():
    """Test backticks quoted inside a JSON string survive fence stripping"""
    payload = {"projects": [{"name": "Docs", "description": "Wrote ```bash``` snippets"}]}

    raw = parse_extraction_response(_fenced(payload))

    assert raw.projects[0]["description"] == "Wrote ```bash``` snippets"
    assert strip_code_fences(json.dumps(payload)) == json.dumps(payload)


def test_parse_invalid_json_is_invalid_response_format():
    """Test a non-JSON reply maps to InvalidResponseFormat"""
    with pytest.raises(ExtractionFailed) as exc:
        parse_extraction_response("Sorry, I could not read this file.")

    assert exc.value.reason == ExtractionFailed.INVALID_RESPONSE_FORMAT
    assert exc.value.retryable is True


def test_parse_non_object_is_invalid_response_format():
    """Test a JSON array is rejected"""
    with pytest.raises(ExtractionFailed) as exc:
        parse_extraction_response("[1, 2, 3]")

    assert exc.value.reason == ExtractionFailed.INVALID_RESPONSE_FORMAT


def test_years_of_experience_uses_month_granularity():
    """Test 41 + 22 months rounds to 5 years"""
    entries = [
        {"start_date": "2020-01-01", "end_date": "2023-06-30"},
        {"start_date": "2018-03-01", "end_date": "2020-01-15"},
    ]

    assert calculate_years_of_experience(entries, today=date(2024, 1, 1)) == 5


def test_years_of_experience_current_and_future_ends():
    """Test current roles run to today and future end dates are clamped"""
    today = date(2024, 7, 1)
    entries = [
        {"start_date": "2023-01-01", "is_current": True},
        {"start_date": "2022-01-01", "end_date": "2030-01-01"},
        {"start_date": "2025-01-01", "end_date": "2026-01-01"},
        {"start_date": "not a date", "end_date": "2020-01-01"},
    ]

    # 18 + 30 + 0 months
    assert calculate_years_of_experience(entries, today=today) == 4


def test_fill_experience_totals_keeps_existing_values():
    """Test totals are derived only when missing"""
    raw = RawExtraction.model_validate({
        "basic_info": {"years_of_experience": 12},
        "work_experiences": [{"start_date": "2020-01-01", "end_date": "2022-01-01"}],
    })

    filled = fill_experience_totals(raw, today=date(2024, 1, 1))

    assert filled.basic_info["years_of_experience"] == 12
    assert filled.basic_info["total_years_experience"] == 2


@pytest.mark.asyncio
async def test_extract_parses_fenced_response(monkeypatch):
    """Test a fenced JSON response is parsed into a raw extraction"""
    async def fake_call(document):
        return _fenced(SAMPLE_EXTRACTION)

    monkeypatch.setattr(cv_extractor, "_call_model", fake_call)
    document = UploadedDocument("cv.pdf", "application/pdf", b"%PDF-1.4 data")

    raw = await CVExtractor(timeout=5).extract(document)

    assert raw.basic_info["first_name"] == "Ada"
    assert raw.basic_info["years_of_experience"] is not None
    assert len(raw.skills) == 2


@pytest.mark.asyncio
async def test_extract_timeout(monkeypatch):
    """Test a slow model call maps to a retryable Timeout"""
    async def slow_call(document):
        await asyncio.sleep(5)
        return "{}"

    monkeypatch.setattr(cv_extractor, "_call_model", slow_call)
    document = UploadedDocument("cv.pdf", "application/pdf", b"%PDF-1.4 data")

    with pytest.raises(ExtractionFailed) as exc:
        await CVExtractor(timeout=0.05).extract(document)

    assert exc.value.reason == ExtractionFailed.TIMEOUT
    assert exc.value.retryable is True
    assert exc.value.status_code == 504


@pytest.mark.asyncio
async def test_extract_service_error(monkeypatch):
    """Test unexpected client errors map to ServiceError"""
    async def broken_call(document):
        raise RuntimeError("503 model overloaded")

    monkeypatch.setattr(cv_extractor, "_call_model", broken_call)
    document = UploadedDocument("cv.pdf", "application/pdf", b"%PDF-1.4 data")

    with pytest.raises(ExtractionFailed) as exc:
        await CVExtractor(timeout=5).extract(document)

    assert exc.value.reason == ExtractionFailed.SERVICE_ERROR


@pytest.mark.asyncio
async def test_extract_not_configured(monkeypatch):
    """Test a missing API key is reported as not retryable"""
    monkeypatch.setattr(cv_extractor, "get_genai_client", lambda: None)
    document = UploadedDocument("cv.pdf", "application/pdf", b"%PDF-1.4 data")

    with pytest.raises(ExtractionFailed) as exc:
        await CVExtractor(timeout=5).extract(document)

    assert exc.value.reason == ExtractionFailed.NOT_CONFIGURED
    assert exc.value.retryable is False


@pytest.mark.asyncio
async def test_extract_profile_summary():
    """Test the preview response carries normalized data and counts"""
    extractor = RecordingExtractor(RawExtraction.model_validate(SAMPLE_EXTRACTION))
    document = UploadedDocument("cv.pdf", "application/pdf", b"%PDF-1.4 data")

    response = await extract_profile(document, extractor)

    assert response.file_info.name == "cv.pdf"
    assert response.file_info.type == "application/pdf"
    assert response.extraction_summary.work_experiences_count == 1
    assert response.extraction_summary.skills_count == 2
    assert response.extraction_summary.languages_count == 1
    assert response.extraction_summary.accomplishments_count == 1
    assert response.extracted_data.basic_info.last_name == "Lovelace"


@pytest.mark.asyncio
async def test_extract_profile_rejects_before_calling_model():
    """Test policy violations fail before any extraction request"""
    extractor = RecordingExtractor(RawExtraction())
    too_big = UploadedDocument("cv.pdf", "application/pdf", b"0" * (15 * 1024 * 1024 + 1))
    wrong_type = UploadedDocument("cv.txt", "text/plain", b"hello")

    with pytest.raises(ValidationFailed):
        await extract_profile(too_big, extractor)
    with pytest.raises(ValidationFailed) as exc:
        await extract_profile(wrong_type, extractor)

    assert "PDF" in exc.value.message
    assert extractor.calls == 0
