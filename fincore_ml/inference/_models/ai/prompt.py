"""Prompt construction and response parsing shared by AI providers."""

import json
import logging
import re
from uuid import UUID

from fincore_ml.exceptions import AIProviderError

from .protocol import AIClassificationRequest, AISuggestion

logger = logging.getLogger(__name__)

# Penalty applied when the model names a category that was not offered
UNKNOWN_CATEGORY_PENALTY = 0.3

SYSTEM_PROMPT = (
    "You are a finance assistant that classifies company bank transactions "
    "into the organization's chart of categories. Answer with JSON only."
)

# English instructions work better with small models, even for Portuguese data
DEFAULT_PROMPT_TEMPLATE = """Classify this bank transaction.

TRANSACTION:
- Description: {description}
- Amount: {amount} ({direction})

AVAILABLE CATEGORIES:
{categories_list}

AVAILABLE COST CENTERS:
{cost_centers_list}

TASK: Select the most appropriate category and, if one clearly applies, a cost center.
If the transaction moves money between the organization's own accounts (for example a credit card bill payment or a transfer to its savings account), set is_transfer to true and leave the category empty.

Respond with ONLY this JSON format, no additional text:
{{"category_id": "...", "category_name": "...", "cost_center_id": "..." or null, "cost_center_name": "..." or null, "confidence": 0.X, "is_transfer": false, "reasoning": "Brief explanation"}}

- category_id: The id in brackets of the chosen category
- confidence: Your certainty from 0.0 to 1.0 (use LOW confidence if nothing fits)
- reasoning: Brief explanation (1 sentence)
"""  # NOQA: E501


def _format_options(options: list[tuple[UUID, str]]) -> str:
    if not options:
        return "(none)"
    return "\n".join(f"- [{option_id}] {name}" for option_id, name in options)


def build_prompt(
    request: AIClassificationRequest,
    template: str = DEFAULT_PROMPT_TEMPLATE,
) -> str:
    direction = (
        "expense/outgoing"
        if request.transaction_type == "expense"
        else "income/incoming"
    )
    return template.format(
        description=request.description,
        amount=abs(request.amount),
        direction=direction,
        categories_list=_format_options([(c.id, c.name) for c in request.categories]),
        cost_centers_list=_format_options(
            [(c.id, c.name) for c in request.cost_centers]
        ),
    )


def extract_json(text: str) -> dict | None:
    # Try to find JSON in code blocks first
    json_match = re.search(r"```(?:json)?\s*(\{.*?\})\s*```", text, re.DOTALL)
    if json_match:
        try:
            return json.loads(json_match.group(1))
        except json.JSONDecodeError:
            pass

    # Try to find raw JSON object
    json_match = re.search(r"\{[^{}]*\}", text)
    if json_match:
        try:
            return json.loads(json_match.group(0))
        except json.JSONDecodeError:
            pass

    return None


def _resolve_option(
    raw_id: object,
    raw_name: object,
    options: dict[UUID, str],
) -> UUID | None:
    """Map the model's answer to an offered option, by id and then by name."""
    if raw_id:
        try:
            option_id = UUID(str(raw_id))
        except ValueError:
            option_id = None
        if option_id in options:
            return option_id

    if isinstance(raw_name, str) and raw_name.strip():
        wanted = raw_name.strip().casefold()
        for option_id, name in options.items():
            if name.casefold() == wanted:
                return option_id

    return None


def parse_suggestion(text: str, request: AIClassificationRequest) -> AISuggestion:
    data = extract_json(text)
    if data is None:
        logger.debug("Could not parse AI response: %s", text[:100])
        raise AIProviderError("malformed response: no JSON object found")

    try:
        confidence = float(data.get("confidence", 0.5))
    except (TypeError, ValueError):
        msg = "malformed response: confidence is not a number"
        raise AIProviderError(msg) from None

    is_transfer = data.get("is_transfer") is True
    categories = {c.id: c.name for c in request.categories}
    cost_centers = {c.id: c.name for c in request.cost_centers}

    category_id = _resolve_option(
        data.get("category_id"), data.get("category_name"), categories
    )
    if category_id is None and not is_transfer and (
        data.get("category_id") or data.get("category_name")
    ):
        logger.debug(
            "AI suggested unknown category: %s / %s",
            data.get("category_id"),
            data.get("category_name"),
        )
        confidence -= UNKNOWN_CATEGORY_PENALTY

    cost_center_id = _resolve_option(
        data.get("cost_center_id"), data.get("cost_center_name"), cost_centers
    )

    reasoning = data.get("reasoning") or data.get("reason")
    return AISuggestion(
        category_id=None if is_transfer else category_id,
        cost_center_id=None if is_transfer else cost_center_id,
        confidence=max(0.0, min(1.0, confidence)),
        is_transfer=is_transfer,
        reasoning=str(reasoning) if reasoning else None,
    )
