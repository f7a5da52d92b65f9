# ============================================================================
# FILE: tests/unit/test_template_repository.py
# ============================================================================
"""
Unit tests for processing template loading
"""

import json

import pytest

from nanopore_ingestion.core.context.enums import ProcessingType
from nanopore_ingestion.core.template_repository import ProcessingTemplate, TemplateRepository
from nanopore_ingestion.utils.exceptions import ConfigurationError
from nanopore_ingestion.validators.rules import FieldType


def test_bundled_nanopore_template(templates):
    template = templates.get("nanopore_sample_form")

    assert template.processing_type == ProcessingType.PDF_EXTRACTION
    assert len(template.field_names) == 14
    assert template.field_names[0] == "sample_name"
    assert "chart_field" in template.field_names
    assert template.extraction_prompt.startswith("Extract the following fields")

    rules = {r.field_name: r for r in template.validation_rules}
    assert rules["submitter_email"].type == FieldType.EMAIL
    assert rules["sample_type"].allowed_values == ["dna", "rna", "protein", "other"]
    assert rules["flow_cell_count"].min_value == 1


def test_templates_are_cached(templates):
    assert templates.get("nanopore_sample_form") is templates.get("nanopore_sample_form")


def test_list_and_catalog(templates):
    assert "nanopore_sample_form" in templates.list()
    assert len(templates.get_field_catalog("nanopore_sample_form")) == 14
    assert len(templates.get_rules("nanopore_sample_form")) == 12


def test_unknown_template(templates):
    with pytest.raises(ConfigurationError, match="Unknown processing template"):
        templates.get("no_such_form")


def test_custom_template_directory(tmp_path):
    (tmp_path / "tube_label.json").write_text(json.dumps({
        "name": "tube_label",
        "processing_type": "ai_extraction",
        "fields": [{"name": "tube_id", "pattern": "tube[:\\s]*(\\S+)"}],
        "validation_rules": [{"field_name": "tube_id", "required": True}],
        "scoring": {"base": 0.6},
    }))
    repository = TemplateRepository(templates_dir=tmp_path)

    template = repository.get("tube_label")

    assert repository.list() == ["tube_label"]
    assert template.processing_type == ProcessingType.AI_EXTRACTION
    assert template.pattern_scoring.base == 0.6
    assert template.pattern_scoring.code_bonus == 0.3
    assert template.extraction_prompt is None


def test_broken_template_file(tmp_path):
    (tmp_path / "broken.json").write_text("{not json")

    with pytest.raises(ConfigurationError):
        TemplateRepository(templates_dir=tmp_path).get("broken")


@pytest.mark.parametrize("data", [
    {"description": "no name"},
    {"name": "x", "processing_type": "telepathy"},
    {"name": "x", "validation_rules": [{"field_name": "a", "type": "date"}]},
    {"name": "x", "fields": [{"name": "a", "pattern": "(unclosed"}]},
])
def test_invalid_definitions(data):
    with pytest.raises(ConfigurationError):
        ProcessingTemplate.from_dict(data)


@pytest.mark.parametrize("name", ["../secret", "sub/form", "form.json", "", "name\n"])
def test_template_name_must_be_plain(tmp_path, name):
    templates_dir = tmp_path / "templates"
    templates_dir.mkdir()
    (tmp_path / "secret.json").write_text(json.dumps({"name": "secret"}))

    with pytest.raises(ConfigurationError, match="Invalid template name"):
        TemplateRepository(templates_dir=templates_dir).get(name)


def test_template_with_bad_rule_pattern(tmp_path):
    (tmp_path / "broken_rule.json").write_text(json.dumps({
        "name": "broken_rule",
        "validation_rules": [{"field_name": "sample_name", "pattern": "("}],
    }))

    with pytest.raises(ConfigurationError, match="Invalid pattern"):
        TemplateRepository(templates_dir=tmp_path).get("broken_rule")
