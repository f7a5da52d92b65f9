# ============================================================================
# FILE: tests/unit/test_pattern_extractor.py
# ============================================================================
"""
Unit tests for regex field extraction
"""

import pytest

from nanopore_ingestion.core.context.enums import ConfidenceLevel, FieldSource
from nanopore_ingestion.extractors.pattern_extractor import (
    FieldPattern,
    PatternFieldExtractor,
    PatternScoring,
)
from nanopore_ingestion.utils.exceptions import ConfigurationError


@pytest.fixture
def extractor(nanopore_template):
    return PatternFieldExtractor(nanopore_template.fields, nanopore_template.pattern_scoring)


def by_name(fields):
    return {f.field_name: f for f in fields}


def test_sample_name_and_email(extractor):
    """Short form with a sample code and an email"""
    fields = by_name(extractor.extract_nanopore_form_fields("Sample Name: X-1\nEmail: a@b.com"))

    assert set(fields) == {"sample_name", "submitter_email"}
    assert fields["sample_name"].value == "X-1"
    assert fields["submitter_email"].value == "a@b.com"

    email = fields["submitter_email"]
    assert email.confidence >= 0.8
    assert email.confidence_level in (ConfidenceLevel.HIGH, ConfidenceLevel.VERY_HIGH)
    assert email.source == FieldSource.PATTERN


def test_full_form(extractor, sample_form_lines):
    fields = by_name(extractor.extract_nanopore_form_fields("\n".join(sample_form_lines)))

    assert fields["sample_name"].value == "S-100"
    assert fields["project_id"].value == "PRJ-42"
    assert fields["submitter_name"].value == "Jane Smith"
    assert fields["submitter_email"].value == "jane.smith@example.org"
    assert fields["lab_name"].value == "Genomics Core"
    assert fields["sample_type"].value == "DNA"
    assert fields["concentration"].value == "25.5"
    assert fields["volume"].value == "30"
    assert fields["priority"].value == "high"
    assert "chart_field" not in fields


def test_confidence_heuristics(extractor):
    fields = by_name(extractor.extract_fields(
        "Sample Name: X-1\nConcentration: 25.5 ng/ul\nVolume: 30 ul\nPriority: low"
    ))

    # base + code
    assert fields["sample_name"].confidence == pytest.approx(0.8)
    # base + length + numeric
    assert fields["concentration"].confidence == pytest.approx(0.9)
    # base + numeric (too short for the length bonus)
    assert fields["volume"].confidence == pytest.approx(0.7)
    # base only
    assert fields["priority"].confidence == pytest.approx(0.5)
    assert fields["priority"].confidence_level == ConfidenceLevel.MEDIUM


def test_confidence_is_capped():
    # email pattern + length + numeric would sum to 1.2
    extractor = PatternFieldExtractor([FieldPattern(name="mailbox", pattern=r"box@(\d+)")])

    [field] = extractor.extract_fields("box@12345")
    assert field.confidence == pytest.approx(1.0)
    assert field.confidence_level == ConfidenceLevel.VERY_HIGH


def test_scoring_override():
    catalog = [FieldPattern(name="code", pattern=r"code:\s*(\S+)")]
    extractor = PatternFieldExtractor(catalog, PatternScoring(base=0.9, code_bonus=0.5))

    [field] = extractor.extract_fields("code: AB-12")
    assert field.confidence == pytest.approx(1.0)


def test_target_fields_restrict_catalog(extractor):
    fields = extractor.extract_fields("Sample Name: X-1\nEmail: a@b.com", ["submitter_email"])
    assert [f.field_name for f in fields] == ["submitter_email"]


def test_page_estimate(extractor):
    lines = ["filler line"] * 60 + ["Email: late@example.com"]
    fields = by_name(extractor.extract_fields("\n".join(lines)))

    # line 60 of a 50-lines-per-page layout lands on page 2
    assert fields["submitter_email"].page_number == 2


def test_page_estimate_first_page(extractor):
    fields = by_name(extractor.extract_fields("Sample Name: X-1"))
    assert fields["sample_name"].page_number == 1


def test_no_matches(extractor):
    assert extractor.extract_fields("nothing useful here") == []


def test_invalid_pattern_rejected():
    with pytest.raises(ConfigurationError):
        FieldPattern(name="broken", pattern="(unclosed")


def test_unknown_flag_rejected():
    with pytest.raises(ConfigurationError):
        FieldPattern.from_dict({"name": "x", "pattern": "x", "flags": ["VERBOSE_PLUS"]})


@pytest.mark.asyncio
async def test_strategy_interface(extractor):
    fields = await extractor.extract("Sample Name: X-1")
    assert fields[0].field_name == "sample_name"
