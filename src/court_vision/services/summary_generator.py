"""Feature summary generation from video annotations.

Turns an annotation payload of any size into a bounded prompt, asks the
language model for a fixed-schema JSON summary and validates what comes
back. Model output varies between calls (non-zero temperature), so callers
must not rely on exact values.
"""

import asyncio
import json
from collections.abc import Sequence

from court_vision.adapters.llm.base import LLMMessage, LLMProvider, LLMResponse
from court_vision.config import settings
from court_vision.domain.errors import (
    MalformedResponseError,
    SchemaViolationError,
    UpstreamError,
)
from court_vision.domain.models import (
    REQUIRED_SUMMARY_KEYS,
    AnalysisSummary,
    AnnotationPayload,
    LabelAnnotation,
)
from court_vision.logging import get_logger

logger = get_logger(__name__)

NO_LABELS_SENTINEL = "No labels found"

SUMMARY_SCHEMA_TEMPLATE = """{
  "shotZones": {
    "rim": "percentage string",
    "shortMid": "percentage string",
    "longMid": "percentage string",
    "corners": "percentage string",
    "aboveBreak": "percentage string"
  },
  "playStyle": {
    "passVsShoot": "percentage string",
    "driveVsPullUp": "percentage string"
  },
  "defense": {
    "avgDefDistance": "distance string, e.g. \\"4.2 ft\\"",
    "blowByRate": "percentage string",
    "helpGapFrequency": "percentage string"
  },
  "rimTendencies": {
    "finishRate": "percentage string",
    "kickOutRate": "percentage string",
    "vsTallerDefenders": "percentage string",
    "foulDrawRate": "percentage string"
  },
  "hotSpots": ["zone label", "zone label"],
  "handDominance": {
    "left": "percentage string",
    "right": "percentage string"
  }
}"""

SYSTEM_PROMPT = "You are a basketball analyst AI."

PROMPT_TEMPLATE = """You are a basketball analyst. Using the video metadata below, estimate the \
player's feature summary.

VIDEO METADATA:
{feature_lines}

Return a JSON object that matches this schema exactly:
{schema}

RULES:
1. Respond with valid JSON only, matching the schema exactly (same keys, same nesting).
2. Invent reasonable numbers from the metadata, and vary them between answers rather than \
returning fixed defaults.
3. Do not include any text, explanation or markdown outside the JSON object."""


def extract_feature_lines(
    labels: AnnotationPayload | Sequence[LabelAnnotation] | None,
    limit: int | None = None,
) -> str:
    """Describe the first `limit` labels, one per line.

    Labels keep the order of the source payload so the same payload always
    yields the same text.

    Args:
        labels: Annotation payload or its label list
        limit: Number of labels to include. Defaults to settings.feature_line_limit

    Returns:
        Lines of "<description>: <n> segments", or "No labels found"
    """
    if limit is None:
        limit = settings.feature_line_limit
    if isinstance(labels, AnnotationPayload):
        labels = labels.labels
    if not labels or limit <= 0:
        return NO_LABELS_SENTINEL

    return "\n".join(
        f"{label.description}: {label.segment_count} segments" for label in list(labels)[:limit]
    )


def build_prompt(feature_lines: str, schema: str = SUMMARY_SCHEMA_TEMPLATE) -> str:
    """Compose the summary prompt with the schema embedded verbatim."""
    return PROMPT_TEMPLATE.format(feature_lines=feature_lines, schema=schema)


def parse_and_validate(raw_text: str) -> AnalysisSummary:
    """Extract and validate the summary object from model output.

    Models often wrap JSON in prose, so the text between the first "{" and
    the last "}" is parsed. Only top-level key presence is checked; values
    are free-form model estimates.

    Raises:
        MalformedResponseError: If no JSON object can be parsed
        SchemaViolationError: If required top-level keys are missing
    """
    start = raw_text.find("{")
    end = raw_text.rfind("}")
    if start == -1 or end == -1 or end < start:
        raise MalformedResponseError("Model response contains no JSON object", raw_text)

    try:
        data = json.loads(raw_text[start : end + 1])
    except json.JSONDecodeError as e:
        raise MalformedResponseError(f"Model response is not valid JSON: {e}", raw_text) from e

    if not isinstance(data, dict):
        raise MalformedResponseError("Model response JSON is not an object", raw_text)

    missing = [key for key in REQUIRED_SUMMARY_KEYS if key not in data]
    if missing:
        raise SchemaViolationError(
            f"Model response missing required fields: {missing}", raw_text, missing
        )

    return AnalysisSummary.from_dict(data)


class SummaryGenerator:
    """Generates fixed-schema feature summaries from annotation payloads."""

    def __init__(
        self,
        llm_provider: LLMProvider | None = None,
        temperature: float | None = None,
        timeout: float | None = None,
        feature_limit: int | None = None,
    ) -> None:
        """Initialize the generator.

        Args:
            llm_provider: LLM provider. If None, selected from config.
            temperature: Sampling temperature. Defaults to settings.llm_temperature.
            timeout: Seconds to wait for the model. Defaults to settings.llm_timeout_seconds.
            feature_limit: Labels per prompt. Defaults to settings.feature_line_limit.
        """
        if llm_provider is None:
            from court_vision.adapters.factory import get_llm_provider

            llm_provider = get_llm_provider()
        self.llm = llm_provider
        self.temperature = settings.llm_temperature if temperature is None else temperature
        self.timeout = settings.llm_timeout_seconds if timeout is None else timeout
        self.feature_limit = feature_limit or settings.feature_line_limit

    async def invoke(self, prompt: str) -> str:
        """Send the prompt to the language model and return its raw text.

        Raises:
            UpstreamError: If the provider fails or does not answer in time
        """
        messages = [
            LLMMessage(role="system", content=SYSTEM_PROMPT),
            LLMMessage(role="user", content=prompt),
        ]
        try:
            response: LLMResponse = await asyncio.wait_for(
                self.llm.complete(
                    messages=messages,
                    temperature=self.temperature,
                    max_tokens=settings.llm_max_tokens,
                    json_mode=True,
                ),
                timeout=self.timeout,
            )
        except TimeoutError as e:
            logger.error("summary_llm_timed_out", provider=self.llm.name, timeout=self.timeout)
            raise UpstreamError(
                f"Language model {self.llm.name} did not answer within {self.timeout:g} seconds"
            ) from e
        except Exception as e:
            logger.error("summary_llm_failed", provider=self.llm.name, error=str(e))
            raise UpstreamError(f"Language model {self.llm.name} failed: {e}") from e

        return response.content

    async def generate(self, payload: AnnotationPayload) -> AnalysisSummary:
        """Build the prompt, call the model and validate the answer."""
        feature_lines = extract_feature_lines(payload, self.feature_limit)
        prompt = build_prompt(feature_lines)

        logger.info(
            "summary_generation_started",
            llm_provider=self.llm.name,
            label_count=len(payload.labels),
        )

        raw_text = await self.invoke(prompt)

        try:
            summary = parse_and_validate(raw_text)
        except (MalformedResponseError, SchemaViolationError) as e:
            logger.error(
                "summary_parse_failed",
                error_kind=str(e.kind),
                error=e.message,
                content=raw_text[:500],
            )
            raise

        logger.info("summary_generated", hot_spots=summary.hot_spots)
        return summary

    async def health_check(self) -> bool:
        """Check if the generator's LLM provider is healthy."""
        return await self.llm.health_check()
