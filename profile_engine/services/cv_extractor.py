"""
CV Extraction Service using Gemini for structured data extraction.
Sends the uploaded document to the model with a fixed schema prompt and
returns the raw (untrusted) extraction for the normalizer.
"""
import asyncio
import json
import logging
import math
import re
from datetime import date
from typing import Any, List, Optional

from google import genai
from google.genai import types

from ..config import get_settings
from ..errors import ExtractionFailed
from ..schemas.extraction import RawExtraction
from ..schemas.profile import ExtractionResponse, ExtractionSummary, FileInfo
from .documents import UploadedDocument, cv_extraction_policy, validate_document
from .normalizer import normalize, parse_date, is_current_marker

logger = logging.getLogger(__name__)

settings = get_settings()

# Lazy initialization of Gemini client
_genai_client = None


def get_genai_client():
    """Get the Gemini client, initializing lazily if needed."""
    global _genai_client
    if _genai_client is None:
        if not settings.gemini_api_key:
            logger.warning("GEMINI_API_KEY not set - CV extraction disabled")
            return None
        _genai_client = genai.Client(api_key=settings.gemini_api_key)
    return _genai_client


# ============================================================================
# Extraction Prompt
# ============================================================================

PROMPT_VERSION = "cv-extraction/2"

CV_EXTRACTION_PROMPT = """
Extract candidate profile data from this CV and return STRICT JSON with EXACTLY this structure:
{
  "basic_info": {
    "first_name": "string", "last_name": "string", "title": "string|null",
    "current_position": "string|null", "industry": "string|null",
    "bio": "string|null", "about": "string|null", "professional_summary": "string|null",
    "country": "string|null", "city": "string|null", "location": "string|null",
    "address": "string|null", "phone1": "string|null", "phone2": "string|null",
    "personal_website": "string|null", "github_url": "string|null",
    "linkedin_url": "string|null", "portfolio_url": "string|null",
    "years_of_experience": "number|null", "total_years_experience": "number|null",
    "gender": "enum(male|female|other|prefer_not_to_say)|null",
    "date_of_birth": "YYYY-MM-DD|null",
    "remote_preference": "enum(remote_only|hybrid|onsite|flexible)|null",
    "experience_level": "enum(entry|junior|mid|senior|lead|principal)|null",
    "expected_salary_min": "number|null", "expected_salary_max": "number|null",
    "currency": "string|null",
    "availability_status": "enum(available|open_to_opportunities|not_looking)|null",
    "availability_date": "YYYY-MM-DD|null",
    "notice_period": "number|null (days)",
    "work_availability": "enum(full_time|part_time|contract|internship|freelance|volunteer)|null",
    "open_to_relocation": "boolean|null", "willing_to_travel": "boolean|null"
  },
  "work_experiences": [{
    "title": "string", "company": "string",
    "employment_type": "enum(full_time|part_time|contract|internship|freelance|volunteer)",
    "is_current": "boolean", "start_date": "YYYY-MM-DD", "end_date": "YYYY-MM-DD|null",
    "location": "string|null", "description": "string|null", "skills": "string[]"
  }],
  "educations": [{
    "degree_diploma": "string", "university_school": "string", "field_of_study": "string|null",
    "description": "string|null", "start_date": "YYYY-MM-DD", "end_date": "YYYY-MM-DD|null",
    "grade": "string|null", "activities_societies": "string|null", "skills": "string[]"
  }],
  "certificates": [{
    "name": "string", "issuing_authority": "string", "issue_date": "YYYY-MM-DD|null",
    "expiry_date": "YYYY-MM-DD|null", "credential_id": "string|null",
    "credential_url": "string|null", "description": "string|null", "skills": "string[]"
  }],
  "projects": [{
    "name": "string", "description": "string", "start_date": "YYYY-MM-DD|null",
    "end_date": "YYYY-MM-DD|null", "is_current": "boolean", "role": "string|null",
    "responsibilities": "string[]", "technologies": "string[]", "tools": "string[]",
    "methodologies": "string[]", "is_confidential": "boolean", "can_share_details": "boolean",
    "url": "string|null", "repository_url": "string|null", "skills_gained": "string[]"
  }],
  "skills": [{
    "name": "string", "category": "string|null", "description": "string|null",
    "proficiency": "number|null (0-100)"
  }],
  "awards": [{
    "title": "string", "offered_by": "string", "associated_with": "string|null",
    "date": "YYYY-MM-DD", "description": "string|null", "skills": "string[]"
  }],
  "volunteering": [{
    "role": "string", "institution": "string", "cause": "string|null",
    "start_date": "YYYY-MM-DD", "end_date": "YYYY-MM-DD|null", "is_current": "boolean",
    "description": "string|null"
  }],
  "languages": [{
    "language": "string", "is_native": "boolean",
    "oral_proficiency": "enum(native|fluent|professional|conversational|basic)|null",
    "written_proficiency": "enum(native|fluent|professional|conversational|basic)|null"
  }],
  "accomplishments": [{"title": "string", "description": "string"}]
}

RULES:
1. STRICTLY follow the field names and types above
2. Convert all dates to YYYY-MM-DD format
3. For enums, ONLY use the listed values
4. Use null for unknown values - never fabricate data
5. Return empty arrays for missing sections
6. NEVER include fields that are not in the structure
7. Extract skills from job descriptions, projects and dedicated skills sections
8. Map volunteering organizations to "institution"
9. Return ONLY the JSON object with no additional text
"""


# ============================================================================
# Response parsing
# ============================================================================

_LEADING_FENCE = re.compile(r"^\s*```(?:json|JSON)?\s*")
_TRAILING_FENCE = re.compile(r"\s*```\s*$")


def strip_code_fences(text: str) -> str:
    """Remove a markdown code fence wrapped around a model response."""
    cleaned = _LEADING_FENCE.sub("", text or "", count=1)
    return _TRAILING_FENCE.sub("", cleaned, count=1).strip()


def parse_extraction_response(text: str) -> RawExtraction:
    cleaned = strip_code_fences(text)
    try:
        data = json.loads(cleaned)
    except json.JSONDecodeError as e:
        logger.warning(f"Failed to parse extraction response: {e}; raw response: {cleaned[:300]!r}")
        raise ExtractionFailed("Invalid AI response format", reason=ExtractionFailed.INVALID_RESPONSE_FORMAT)

    if not isinstance(data, dict):
        raise ExtractionFailed(
            "Invalid AI response format: expected a JSON object",
            reason=ExtractionFailed.INVALID_RESPONSE_FORMAT,
        )
    return RawExtraction.model_validate(data)


# ============================================================================
# Experience derivation
# ============================================================================

def months_between(start: date, end: date) -> int:
    """Whole calendar months from start to end, ignoring the day of month."""
    return (end.year - start.year) * 12 + (end.month - start.month)


def calculate_years_of_experience(work_experiences: List[Any], today: Optional[date] = None) -> int:
    """
    Sum each entry's months between start and min(end, today), never negative,
    then round half up to whole years. A missing or "current" end means today.
    """
    today = today or date.today()
    total_months = 0
    for exp in work_experiences:
        if not isinstance(exp, dict):
            continue
        start = parse_date(exp.get("start_date"))
        if start is None:
            continue
        raw_end = exp.get("end_date")
        end = None
        if exp.get("is_current") is not True and not is_current_marker(raw_end):
            end = parse_date(raw_end)
        end = min(end, today) if end else today
        total_months += max(0, months_between(start, end))
    return math.floor(total_months / 12 + 0.5)


def fill_experience_totals(raw: RawExtraction, today: Optional[date] = None) -> RawExtraction:
    """Derive experience totals when the extraction left them out."""
    info = dict(raw.basic_info)
    missing = [key for key in ("years_of_experience", "total_years_experience") if info.get(key) in (None, "")]
    if not missing:
        return raw
    years = calculate_years_of_experience(raw.work_experiences, today=today)
    for key in missing:
        info[key] = years
    return raw.model_copy(update={"basic_info": info})


# ============================================================================
# Extraction adapter
# ============================================================================

async def _call_model(document: UploadedDocument) -> str:
    client = get_genai_client()
    if client is None:
        raise ExtractionFailed(
            "CV extraction is not configured. Please set GEMINI_API_KEY.",
            reason=ExtractionFailed.NOT_CONFIGURED,
        )

    response = await client.aio.models.generate_content(
        model=settings.gemini_model,
        contents=[
            CV_EXTRACTION_PROMPT,
            types.Part.from_bytes(data=document.content, mime_type=document.content_type),
        ],
        config=types.GenerateContentConfig(
            temperature=0.1,
            max_output_tokens=16384,
            response_mime_type="application/json",
        ),
    )
    return response.text or ""


class CVExtractor:
    """Runs one time-bounded extraction request per document."""

    def __init__(self, timeout: Optional[float] = None):
        self.timeout = timeout if timeout is not None else settings.extraction_timeout_seconds

    async def extract(self, document: UploadedDocument) -> RawExtraction:
        try:
            text = await asyncio.wait_for(_call_model(document), timeout=self.timeout)
        except asyncio.TimeoutError:
            logger.warning(f"CV extraction timed out after {self.timeout}s for {document.filename}")
            raise ExtractionFailed(
                "CV extraction timed out. Please try again.",
                reason=ExtractionFailed.TIMEOUT,
            )
        except ExtractionFailed:
            raise
        except Exception as e:
            logger.error(f"CV extraction request failed for {document.filename}: {e}")
            raise ExtractionFailed("Failed to process CV", reason=ExtractionFailed.SERVICE_ERROR)

        return fill_experience_totals(parse_extraction_response(text))


def get_cv_extractor() -> CVExtractor:
    return CVExtractor()


async def extract_profile(document: UploadedDocument, extractor: CVExtractor) -> ExtractionResponse:
    """
    Preview extraction: validate, extract and normalize a CV without
    persisting anything.
    """
    validate_document(document, cv_extraction_policy())

    logger.info(f"Processing CV {document.filename} ({document.size} bytes, {PROMPT_VERSION})")
    raw = await extractor.extract(document)
    profile = normalize(raw)

    summary = ExtractionSummary(
        work_experiences_count=len(profile.work_experiences),
        educations_count=len(profile.educations),
        skills_count=len(profile.skills),
        projects_count=len(profile.projects),
        certificates_count=len(profile.certificates),
        awards_count=len(profile.awards),
        volunteering_count=len(profile.volunteering),
        languages_count=len(profile.languages),
        accomplishments_count=len([a for a in raw.accomplishments if isinstance(a, dict)]),
    )
    logger.info(
        f"✅ CV extracted: {summary.work_experiences_count} exp, "
        f"{summary.educations_count} edu, {summary.skills_count} skills"
    )

    return ExtractionResponse(
        extracted_data=profile,
        file_info=FileInfo(name=document.filename, size=document.size, type=document.content_type),
        extraction_summary=summary,
    )
