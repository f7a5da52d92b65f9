# ============================================================================
# src/nanopore_ingestion/llm/prompts.py
# ============================================================================
"""
Prompt builders for the text-generation endpoint.
"""

import json
from typing import Any, Dict, List, Optional


DEFAULT_EXTRACTION_INSTRUCTION = (
    "Extract the following information from this nanopore sample submission form:"
)


def build_extraction_prompt(
    text: str,
    target_fields: List[str],
    instruction: Optional[str] = None
) -> str:
    """
    Prompt asking for a flat JSON object keyed by the target field names.
    """
    instruction = instruction or DEFAULT_EXTRACTION_INSTRUCTION
    field_list = "\n".join(f"- {name}" for name in target_fields)
    example = json.dumps({name: "value or null" for name in target_fields[:3]}, indent=2)

    return f"""{instruction}

Fields to extract:
{field_list}

Document text:
{text}

Please return the extracted data as a flat JSON object with these exact field names as keys.
If a field is not found, use null as the value.

Example format:
{example}

JSON:"""


def build_answer_prompt(question: str, context: str) -> str:
    return f"""Based on the following context, please answer the question:

Context:
{context}

Question: {question}

Please provide a clear, accurate answer based only on the information in the context.
If the context doesn't contain enough information to answer the question, say so."""


def build_validation_prompt(fields: Dict[str, Any], rules: List[Dict[str, Any]]) -> str:
    return f"""Please validate the following form data against the provided rules:

Form Data:
{json.dumps(fields, indent=2)}

Validation Rules:
{json.dumps(rules, indent=2)}

Please return a JSON object with:
- isValid: boolean
- errors: array of error messages
- suggestions: array of improvement suggestions
- confidence: number between 0 and 1

JSON:"""
