"""
Test normalization of raw AI extraction output
"""
from datetime import date

from profile_engine.models import EmploymentType, ExperienceLevel, LanguageProficiency
from profile_engine.schemas.extraction import RawExtraction
from profile_engine.services.normalizer import UNKNOWN, normalize, parse_date


def test_parse_date_formats():
    """Test the date shapes CVs commonly use"""
    assert parse_date("2020-01-15") == date(2020, 1, 15)
    assert parse_date("2020-01") == date(2020, 1, 1)
    assert parse_date("Jan 2021") == date(2021, 1, 1)
    assert parse_date("March 2019") == date(2019, 3, 1)
    assert parse_date("2018") == date(2018, 1, 1)
    assert parse_date("2022-06-30T00:00:00Z") == date(2022, 6, 30)
    assert parse_date(2017) == date(2017, 1, 1)


def test_parse_date_rejects_garbage():
    """Test unparsable values become None instead of raising"""
    assert parse_date("Present") is None
    assert parse_date("sometime last year") is None
    assert parse_date("") is None
    assert parse_date(None) is None
    assert parse_date({"year": 2020}) is None


def test_malformed_sections_become_empty():
    """Test non-list sections and non-object entries are dropped"""
    raw = RawExtraction.model_validate({
        "basic_info": "not an object",
        "work_experiences": "three years at Acme",
        "educations": None,
        "skills": [42, None, "Python", {"name": "  "}],
        "projects": [{"description": "no name"}],
    })

    profile = normalize(raw)

    assert profile.basic_info.first_name is None
    assert profile.work_experiences == []
    assert profile.educations == []
    assert [s.name for s in profile.skills] == ["Python"]
    assert profile.projects == []


def test_unknown_enum_values_become_none():
    """Test enum fields tolerate values outside the allowed set"""
    raw = RawExtraction.model_validate({
        "basic_info": {"experience_level": "Senior", "gender": "robot", "remote_preference": "on the moon"},
        "work_experiences": [{"title": "Dev", "company": "Acme", "employment_type": "Full-Time"}],
        "languages": [{"language": "French", "oral_proficiency": "Fluent", "written_proficiency": "meh"}],
    })

    profile = normalize(raw)

    assert profile.basic_info.experience_level == ExperienceLevel.SENIOR
    assert profile.basic_info.gender is None
    assert profile.basic_info.remote_preference is None
    assert profile.work_experiences[0].employment_type == EmploymentType.FULL_TIME
    assert profile.languages[0].oral_proficiency == LanguageProficiency.FLUENT
    assert profile.languages[0].written_proficiency is None


def test_missing_labels_use_placeholder():
    """Test a partially labelled entry is kept with a placeholder"""
    raw = RawExtraction.model_validate({
        "work_experiences": [
            {"title": "Data Analyst"},
            {"start_date": "2020-01"},
        ],
        "certificates": [{"name": "AWS SAA"}],
    })

    profile = normalize(raw)

    assert len(profile.work_experiences) == 1
    assert profile.work_experiences[0].company == UNKNOWN
    assert profile.certificates[0].issuing_authority == UNKNOWN


def test_current_role_has_no_end_date():
    """Test 'Present' end dates mark the entry as current"""
    raw = RawExtraction.model_validate({
        "work_experiences": [
            {"title": "Engineer", "company": "Acme", "start_date": "2021-03", "end_date": "Present"},
            {"title": "Intern", "company": "Beta", "start_date": "2019-06", "end_date": "2019-09", "is_current": "no"},
        ],
    })

    current, past = normalize(raw).work_experiences

    assert current.is_current is True
    assert current.end_date is None
    assert past.is_current is False
    assert past.end_date == date(2019, 9, 1)


def test_skill_lists_and_numbers_are_coerced():
    """Test comma separated skills and numeric strings"""
    raw = RawExtraction.model_validate({
        "basic_info": {"first_name": " Grace ", "expected_salary_min": "85,000", "notice_period": "30", "open_to_relocation": "yes"},
        "work_experiences": [{"title": "Dev", "company": "Acme", "skills": "Python, SQL , "}],
        "skills": [{"name": "Go", "proficiency": 250}, {"name": "Rust", "proficiency": "80"}],
    })

    profile = normalize(raw)

    assert profile.basic_info.first_name == "Grace"
    assert profile.basic_info.expected_salary_min == 85000.0
    assert profile.basic_info.notice_period == 30
    assert profile.basic_info.open_to_relocation is True
    assert profile.work_experiences[0].skills == ["Python", "SQL"]
    assert profile.skills[0].proficiency is None
    assert profile.skills[1].proficiency == 80


def test_referenced_skill_names_cover_all_sections():
    """Test skills referenced outside the skills list are collected"""
    raw = RawExtraction.model_validate({
        "skills": [{"name": "React"}],
        "work_experiences": [{"title": "Dev", "company": "Acme", "skills": ["react", "Node"]}],
        "projects": [{"name": "Shop", "skills_gained": ["Stripe"]}],
    })

    names = normalize(raw).referenced_skill_names()

    assert names == ["React", "react", "Node", "Stripe"]


def test_oversized_skill_names_are_clipped():
    """Test skill names longer than the catalog column are clipped, not rejected"""
    long_name = "Distributed " * 14
    raw = RawExtraction.model_validate({
        "skills": [{"name": long_name}],
        "work_experiences": [{"title": "Dev", "company": "Acme", "skills": [long_name, "Go"]}],
        "projects": [{"name": "Shop", "skills_gained": [long_name]}],
    })

    profile = normalize(raw)

    assert len(long_name) > 100
    assert len(profile.skills[0].name) <= 100
    assert len(profile.work_experiences[0].skills[0]) <= 100
    assert profile.work_experiences[0].skills[1] == "Go"
    assert len(profile.projects[0].skills_gained[0]) <= 100
    assert not profile.skills[0].name.endswith(" ")
