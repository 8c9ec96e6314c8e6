"""
Field normalizer: raw AI extraction -> CanonicalProfile.

`normalize` is total. Unknown enum values become None, unparsable dates
become None, missing lists become [], and entries that are not objects are
skipped, so untrusted extraction output can never abort the pipeline.
"""
import enum
import math
import re
from datetime import date, datetime
from typing import Any, Iterable, List, Optional, Type

from ..models import (
    ExperienceLevel, Gender, RemotePreference, AvailabilityStatus,
    EmploymentType, LanguageProficiency, SKILL_NAME_MAX_LENGTH
)
from ..schemas.extraction import RawExtraction
from ..schemas.profile import (
    BasicInfo, WorkExperienceIn, EducationIn, SkillIn, ProjectIn,
    CertificateIn, AwardIn, VolunteeringIn, LanguageIn, CanonicalProfile
)

UNKNOWN = "Unknown"

CURRENT_MARKERS = {"present", "current", "now", "ongoing", "today", "to date", "till date", "till now"}

_DATE_FORMATS = (
    "%Y-%m-%d",
    "%Y/%m/%d",
    "%d/%m/%Y",
    "%Y-%m",
    "%Y/%m",
    "%m/%Y",
    "%m-%Y",
    "%b %Y",
    "%B %Y",
    "%d %b %Y",
    "%d %B %Y",
    "%b %d, %Y",
    "%B %d, %Y",
    "%Y",
)


# ============================================================================
# Scalar coercion helpers
# ============================================================================

def is_current_marker(value: Any) -> bool:
    return isinstance(value, str) and value.strip().lower() in CURRENT_MARKERS


def parse_date(value: Any) -> Optional[date]:
    """Parse a loosely formatted date. Month/year-only values land on day 1."""
    if isinstance(value, datetime):
        return value.date()
    if isinstance(value, date):
        return value
    if isinstance(value, int) and not isinstance(value, bool):
        return date(value, 1, 1) if 1900 <= value <= 2100 else None
    if not isinstance(value, str):
        return None

    text = re.sub(r"\s+", " ", value.strip())
    if not text or is_current_marker(text):
        return None
    if any(c.isalpha() for c in text):
        text = text.replace(".", "")
    # ISO timestamps: keep the calendar part
    if len(text) > 10 and text[4:5] == "-" and text[10:11] in ("T", " "):
        text = text[:10]

    for fmt in _DATE_FORMATS:
        try:
            return datetime.strptime(text, fmt).date()
        except ValueError:
            continue
    return None


def _str(value: Any, max_len: Optional[int] = None) -> Optional[str]:
    if isinstance(value, bool):
        return None
    if isinstance(value, (int, float)):
        value = str(value)
    if not isinstance(value, str):
        return None
    value = value.strip()
    if not value or value.lower() in ("null", "none", "n/a"):
        return None
    return value[:max_len].rstrip() if max_len else value


def _float(value: Any) -> Optional[float]:
    if isinstance(value, bool):
        return None
    if isinstance(value, str):
        cleaned = value.strip().replace(",", "")
        try:
            value = float(cleaned)
        except ValueError:
            return None
    if isinstance(value, (int, float)) and math.isfinite(value):
        return float(value)
    return None


def _int(value: Any) -> Optional[int]:
    number = _float(value)
    return int(round(number)) if number is not None else None


def _bool(value: Any, default: Optional[bool] = None) -> Optional[bool]:
    if isinstance(value, bool):
        return value
    if isinstance(value, str):
        lowered = value.strip().lower()
        if lowered in ("true", "yes", "y", "1"):
            return True
        if lowered in ("false", "no", "n", "0"):
            return False
    return default


def _enum(enum_cls: Type[enum.Enum], value: Any):
    if isinstance(value, enum_cls):
        return value
    if not isinstance(value, str):
        return None
    key = re.sub(r"[\s\-]+", "_", value.strip().lower())
    try:
        return enum_cls(key)
    except ValueError:
        return None


def _str_list(value: Any, max_len: Optional[int] = None) -> List[str]:
    if isinstance(value, str):
        value = value.split(",")
    if not isinstance(value, list):
        return []
    items = []
    for item in value:
        text = _str(item, max_len)
        if text:
            items.append(text)
    return items


def _entries(section: Iterable[Any]) -> List[dict]:
    return [entry for entry in section if isinstance(entry, dict)]


def _label(entry: dict, *keys: str) -> Optional[str]:
    for key in keys:
        text = _str(entry.get(key))
        if text:
            return text
    return None


def _period(entry: dict):
    """Return (start_date, end_date, is_current) for an entry."""
    raw_end = entry.get("end_date")
    is_current = bool(_bool(entry.get("is_current"), False) or is_current_marker(raw_end))
    end = None if is_current else parse_date(raw_end)
    return parse_date(entry.get("start_date")), end, is_current


# ============================================================================
# Section normalizers
# ============================================================================

def normalize_basic_info(info: dict) -> BasicInfo:
    return BasicInfo(
        first_name=_str(info.get("first_name"), 100),
        last_name=_str(info.get("last_name"), 100),
        title=_str(info.get("title"), 200),
        location=_str(info.get("location"), 200),
        phone1=_str(info.get("phone1"), 30),
        current_position=_str(info.get("current_position"), 200),
        industry=_str(info.get("industry"), 200),
        bio=_str(info.get("bio")),
        about=_str(info.get("about")),
        professional_summary=_str(info.get("professional_summary")),
        country=_str(info.get("country"), 100),
        city=_str(info.get("city"), 100),
        address=_str(info.get("address"), 500),
        phone2=_str(info.get("phone2"), 30),
        personal_website=_str(info.get("personal_website"), 500),
        github_url=_str(info.get("github_url"), 500),
        linkedin_url=_str(info.get("linkedin_url"), 500),
        portfolio_url=_str(info.get("portfolio_url"), 500),
        profile_image_url=_str(info.get("profile_image_url"), 500),
        gender=_enum(Gender, info.get("gender")),
        date_of_birth=parse_date(info.get("date_of_birth")),
        years_of_experience=_int(info.get("years_of_experience")),
        total_years_experience=_int(info.get("total_years_experience")),
        experience_level=_enum(ExperienceLevel, info.get("experience_level")),
        remote_preference=_enum(RemotePreference, info.get("remote_preference")),
        availability_status=_enum(AvailabilityStatus, info.get("availability_status")),
        availability_date=parse_date(info.get("availability_date")),
        work_availability=_enum(EmploymentType, info.get("work_availability")),
        expected_salary_min=_float(info.get("expected_salary_min")),
        expected_salary_max=_float(info.get("expected_salary_max")),
        currency=_str(info.get("currency"), 10),
        notice_period=_int(info.get("notice_period")),
        open_to_relocation=_bool(info.get("open_to_relocation")),
        willing_to_travel=_bool(info.get("willing_to_travel")),
    )


def _skill_names(value: Any) -> List[str]:
    return _str_list(value, SKILL_NAME_MAX_LENGTH)


def _entry_skills(entry: dict) -> List[str]:
    return _skill_names(entry.get("skills")) or _skill_names(entry.get("skill_ids"))


def normalize_work_experiences(section: List[Any]) -> List[WorkExperienceIn]:
    result = []
    for entry in _entries(section):
        title = _label(entry, "title", "role", "position")
        company = _label(entry, "company", "employer", "organization")
        if not title and not company:
            continue
        start, end, is_current = _period(entry)
        result.append(WorkExperienceIn(
            title=(title or UNKNOWN)[:200],
            company=(company or UNKNOWN)[:300],
            employment_type=_enum(EmploymentType, entry.get("employment_type")),
            is_current=is_current,
            start_date=start,
            end_date=end,
            location=_str(entry.get("location"), 200),
            description=_str(entry.get("description")),
            skills=_entry_skills(entry),
            media_url=_str(entry.get("media_url"), 500),
        ))
    return result


def normalize_educations(section: List[Any]) -> List[EducationIn]:
    result = []
    for entry in _entries(section):
        degree = _label(entry, "degree_diploma", "degree")
        school = _label(entry, "university_school", "school", "institution")
        if not degree and not school:
            continue
        start, end, _ = _period(entry)
        result.append(EducationIn(
            degree_diploma=(degree or UNKNOWN)[:200],
            university_school=(school or UNKNOWN)[:300],
            field_of_study=_str(entry.get("field_of_study"), 200),
            description=_str(entry.get("description")),
            start_date=start,
            end_date=end,
            grade=_str(entry.get("grade") or entry.get("gpa"), 100),
            activities_societies=_str(entry.get("activities_societies")),
            skills=_entry_skills(entry),
            media_url=_str(entry.get("media_url"), 500),
        ))
    return result


def normalize_skills(section: List[Any]) -> List[SkillIn]:
    result = []
    for entry in section:
        if isinstance(entry, str):
            entry = {"name": entry}
        if not isinstance(entry, dict):
            continue
        name = _str(entry.get("name"), SKILL_NAME_MAX_LENGTH)
        if not name:
            continue
        proficiency = _int(entry.get("proficiency"))
        if proficiency is not None and not 0 <= proficiency <= 100:
            proficiency = None
        years = _float(entry.get("years_of_experience"))
        result.append(SkillIn(
            name=name,
            category=_str(entry.get("category"), 100),
            description=_str(entry.get("description")),
            proficiency=proficiency,
            years_of_experience=years if years is not None and years >= 0 else None,
        ))
    return result


def normalize_projects(section: List[Any]) -> List[ProjectIn]:
    result = []
    for entry in _entries(section):
        name = _label(entry, "name", "title")
        if not name:
            continue
        start, end, is_current = _period(entry)
        result.append(ProjectIn(
            name=name[:300],
            description=_str(entry.get("description")),
            start_date=start,
            end_date=end,
            is_current=is_current,
            role=_str(entry.get("role"), 200),
            responsibilities=_str_list(entry.get("responsibilities")),
            technologies=_str_list(entry.get("technologies")),
            tools=_str_list(entry.get("tools")),
            methodologies=_str_list(entry.get("methodologies")),
            is_confidential=bool(_bool(entry.get("is_confidential"), False)),
            can_share_details=bool(_bool(entry.get("can_share_details"), True)),
            url=_str(entry.get("url"), 500),
            repository_url=_str(entry.get("repository_url"), 500),
            media_urls=_str_list(entry.get("media_urls")),
            skills_gained=_skill_names(entry.get("skills_gained")),
        ))
    return result


def normalize_certificates(section: List[Any]) -> List[CertificateIn]:
    result = []
    for entry in _entries(section):
        name = _label(entry, "name", "title")
        if not name:
            continue
        result.append(CertificateIn(
            name=name[:300],
            issuing_authority=(_label(entry, "issuing_authority", "issuer") or UNKNOWN)[:200],
            issue_date=parse_date(entry.get("issue_date")),
            expiry_date=parse_date(entry.get("expiry_date")),
            credential_id=_str(entry.get("credential_id"), 200),
            credential_url=_str(entry.get("credential_url"), 500),
            description=_str(entry.get("description")),
            skills=_entry_skills(entry),
            media_url=_str(entry.get("media_url"), 500),
        ))
    return result


def normalize_awards(section: List[Any]) -> List[AwardIn]:
    result = []
    for entry in _entries(section):
        title = _label(entry, "title", "name")
        if not title:
            continue
        result.append(AwardIn(
            title=title[:300],
            offered_by=(_label(entry, "offered_by", "issuer") or UNKNOWN)[:200],
            associated_with=_str(entry.get("associated_with"), 200),
            date=parse_date(entry.get("date")),
            description=_str(entry.get("description")),
            media_url=_str(entry.get("media_url"), 500),
            skills=_entry_skills(entry),
        ))
    return result


def normalize_volunteering(section: List[Any]) -> List[VolunteeringIn]:
    result = []
    for entry in _entries(section):
        role = _label(entry, "role", "title")
        institution = _label(entry, "institution", "organization")
        if not role and not institution:
            continue
        start, end, is_current = _period(entry)
        result.append(VolunteeringIn(
            role=(role or UNKNOWN)[:200],
            institution=(institution or UNKNOWN)[:300],
            cause=_str(entry.get("cause"), 200),
            start_date=start,
            end_date=end,
            is_current=is_current,
            description=_str(entry.get("description")),
            media_url=_str(entry.get("media_url"), 500),
            skills=_entry_skills(entry),
        ))
    return result


def normalize_languages(section: List[Any]) -> List[LanguageIn]:
    result = []
    for entry in section:
        if isinstance(entry, str):
            entry = {"language": entry}
        if not isinstance(entry, dict):
            continue
        language = _str(entry.get("language"), 100)
        if not language:
            continue
        result.append(LanguageIn(
            language=language,
            is_native=bool(_bool(entry.get("is_native"), False)),
            oral_proficiency=_enum(LanguageProficiency, entry.get("oral_proficiency")),
            written_proficiency=_enum(LanguageProficiency, entry.get("written_proficiency")),
        ))
    return result


def normalize(raw: RawExtraction) -> CanonicalProfile:
    """Map a raw extraction into the canonical profile shape."""
    return CanonicalProfile(
        basic_info=normalize_basic_info(raw.basic_info),
        work_experiences=normalize_work_experiences(raw.work_experiences),
        educations=normalize_educations(raw.educations),
        skills=normalize_skills(raw.skills),
        projects=normalize_projects(raw.projects),
        certificates=normalize_certificates(raw.certificates),
        awards=normalize_awards(raw.awards),
        volunteering=normalize_volunteering(raw.volunteering),
        languages=normalize_languages(raw.languages),
    )
