"""Prompt enhancement for section images.

Turns a plain image intent into a detailed generation prompt:
1. Extract visual attributes (subject, composition, lighting, ...) from the intent
2. Refine an optimized prompt over several chat iterations, feeding back the
   previous iteration's confidence and expected issues
3. Stop once the model's confidence reaches the quality threshold or the
   iteration limit is hit

Every prompt carries a negative prompt built from fixed artifact lists plus
the model's own suggestions.

Usage:
    enhancer = PromptEnhancer()
    result = enhancer.enhance(intent)
    if result.success:
        print(result.final_prompt.optimized_prompt)
"""

from __future__ import annotations

import json
import logging
import time
from dataclasses import asdict, dataclass, field
from typing import Iterable, Optional

from src.common.config import Settings, get_openai_api_key, settings as default_settings

from .prompts import (
    ENHANCEMENT_SYSTEM_PROMPT,
    build_attribute_extraction_prompt,
    build_prompt_optimization_prompt,
)

logger = logging.getLogger(__name__)

DEFAULT_CONFIDENCE = 70
FIRST_ITERATION_FEEDBACK = "None - this is the first iteration."

COMMON_ARTIFACTS = [
    "blurry", "low quality", "distorted", "pixelated", "amateur", "synthetic",
    "artificial", "fake looking", "watermark", "text overlay", "logo", "signature",
]

ANATOMICAL_ARTIFACTS = [
    "extra fingers", "missing fingers", "deformed hands", "mutated hands",
    "extra limbs", "missing limbs", "fused fingers", "bad anatomy",
    "unnatural proportions", "asymmetric face",
]

PHOTOGRAPHY_ARTIFACTS = [
    "poor composition", "cluttered background", "messy", "chaotic",
    "oversaturated", "undersaturated", "overexposed", "underexposed",
    "harsh shadows", "flat lighting", "unnatural lighting",
]

GENERIC_ISSUES = [
    "generic stock photo", "cliché", "boring", "uninspired", "typical",
    "overused concept", "clickbait", "sensational",
]

USE_CASE_ARTIFACTS = {
    "blog-header": ["clickbait style", "sensational", "over-dramatic", "cheesy"],
    "social-post": ["too busy", "overwhelming", "hard to read", "cluttered"],
    "hero-banner": ["empty space", "sparse", "underwhelming", "plain"],
    "product-feature": ["unrealistic product", "floating objects", "impossible physics"],
    "team-photo": ["stiff poses", "forced smiles", "awkward positioning"],
    "concept-illustration": ["too literal", "uninspired metaphor", "confusing concept"],
}

PEOPLE_KEYWORDS = ("person", "people", "man", "woman", "team", "worker", "executive")


def build_negative_prompt(
    intent: str,
    use_case: str = "blog-header",
    additional: Iterable[str] = (),
) -> str:
    """Comma-separated, de-duplicated list of things the image must avoid.

    Anatomical artifacts are included when the intent mentions people
    (substring match) or the use case is a team photo.
    """
    negatives = [*COMMON_ARTIFACTS, *PHOTOGRAPHY_ARTIFACTS, *GENERIC_ISSUES]

    lowered = intent.lower()
    if use_case == "team-photo" or any(word in lowered for word in PEOPLE_KEYWORDS):
        negatives.extend(ANATOMICAL_ARTIFACTS)

    negatives.extend(USE_CASE_ARTIFACTS.get(use_case, []))
    negatives.extend(a.strip() for a in additional if a and a.strip())

    return ", ".join(dict.fromkeys(negatives))


def parse_json_response(content: str) -> dict | None:
    """Parse a JSON object from a chat response, tolerating code fences."""
    content = content.strip()
    if "```json" in content:
        content = content.split("```json")[1].split("```")[0]
    elif content.startswith("```"):
        content = content.split("```")[1]

    try:
        data = json.loads(content.strip())
    except json.JSONDecodeError:
        logger.warning("Failed to parse enhancement response: %s", content[:200])
        return None
    return data if isinstance(data, dict) else None


@dataclass
class EnhancedPrompt:
    optimized_prompt: str
    negative_prompt: str
    reasoning: str = ""
    expected_issues: list[str] = field(default_factory=list)
    technical_details: dict[str, str] = field(default_factory=dict)
    iteration: int = 1
    confidence_score: int = DEFAULT_CONFIDENCE


@dataclass
class PromptEnhancementResult:
    success: bool
    final_prompt: Optional[EnhancedPrompt] = None
    iterations: list[EnhancedPrompt] = field(default_factory=list)
    attributes: dict = field(default_factory=dict)
    processing_time: float = 0.0  # seconds
    error: Optional[str] = None

    @property
    def total_iterations(self) -> int:
        return len(self.iterations)

    def to_dict(self) -> dict:
        """Stage summary: per-iteration confidence plus the final prompt."""
        return {
            "iterations": [
                {
                    "iteration": p.iteration,
                    "optimized_prompt": p.optimized_prompt,
                    "confidence_score": p.confidence_score,
                    "reasoning": p.reasoning,
                }
                for p in self.iterations
            ],
            "final_prompt": asdict(self.final_prompt) if self.final_prompt else None,
            "total_iterations": self.total_iterations,
            "processing_time": self.processing_time,
        }


class PromptEnhancer:
    """Iterative prompt refinement through the OpenAI chat API."""

    def __init__(
        self,
        api_key: str | None = None,
        config: Settings | None = None,
        max_iterations: int | None = None,
        quality_threshold: int | None = None,
    ) -> None:
        self.config = config or default_settings
        images = self.config.images
        self.api_key = api_key
        self.model = images.enhancement_model
        self.max_iterations = max_iterations or images.enhancement_max_iterations
        self.quality_threshold = (
            quality_threshold if quality_threshold is not None
            else images.enhancement_quality_threshold
        )
        self._client = None

    def _get_client(self):
        """Lazy-initialize the OpenAI client."""
        if self._client is None:
            from openai import OpenAI
            self._client = OpenAI(api_key=self.api_key or get_openai_api_key())
        return self._client

    def _chat_json(self, prompt: str) -> dict | None:
        client = self._get_client()
        try:
            response = client.chat.completions.create(
                model=self.model,
                messages=[
                    {"role": "system", "content": ENHANCEMENT_SYSTEM_PROMPT},
                    {"role": "user", "content": prompt},
                ],
                temperature=0.7,
                response_format={"type": "json_object"},
            )
        except Exception:
            logger.warning("Enhancement request failed", exc_info=True)
            return None
        return parse_json_response(response.choices[0].message.content or "")

    def enhance(
        self,
        intent: str,
        use_case: str = "blog-header",
        style: str = "photorealistic",
        aspect_ratio: str = "16:9",
    ) -> PromptEnhancementResult:
        """Refine an intent into an optimized prompt.

        Raises:
            ValueError: If no OpenAI API key is configured.
        """
        self._get_client()
        start = time.monotonic()

        attributes = self._chat_json(
            build_attribute_extraction_prompt(intent, use_case, style, aspect_ratio)
        )
        if attributes is None:
            return PromptEnhancementResult(
                success=False,
                processing_time=time.monotonic() - start,
                error="Failed to extract visual attributes",
            )

        result = PromptEnhancementResult(success=False, attributes=attributes)
        feedback = FIRST_ITERATION_FEEDBACK

        for iteration in range(1, self.max_iterations + 1):
            data = self._chat_json(
                build_prompt_optimization_prompt(
                    intent, use_case, style, aspect_ratio,
                    attributes=json.dumps(attributes, ensure_ascii=False, indent=2),
                    feedback=feedback,
                    threshold=self.quality_threshold,
                )
            )
            prompt = self._to_enhanced_prompt(data, intent, use_case, iteration)
            if prompt is None:
                logger.warning("Iteration %d produced no usable prompt", iteration)
                break

            result.iterations.append(prompt)
            logger.info(
                "Enhancement iteration %d/%d: confidence %d%%",
                iteration, self.max_iterations, prompt.confidence_score,
            )
            if prompt.confidence_score >= self.quality_threshold:
                break
            feedback = self._build_feedback(prompt)

        result.processing_time = time.monotonic() - start
        if not result.iterations:
            result.error = "Failed to generate any prompts"
            return result

        result.success = True
        result.final_prompt = result.iterations[-1]
        return result

    @staticmethod
    def _to_enhanced_prompt(
        data: dict | None, intent: str, use_case: str, iteration: int
    ) -> EnhancedPrompt | None:
        if not data or not isinstance(data.get("optimizedPrompt"), str):
            return None

        custom = data.get("negativePrompt") or ""
        confidence = data.get("confidenceScore")
        if not isinstance(confidence, (int, float)) or isinstance(confidence, bool):
            confidence = DEFAULT_CONFIDENCE
        issues = data.get("expectedIssues")
        details = data.get("technicalDetails")

        return EnhancedPrompt(
            optimized_prompt=data["optimizedPrompt"].strip(),
            negative_prompt=build_negative_prompt(
                intent, use_case, custom.split(",") if isinstance(custom, str) else ()
            ),
            reasoning=str(data.get("reasoning") or ""),
            expected_issues=[str(i) for i in issues] if isinstance(issues, list) else [],
            technical_details=details if isinstance(details, dict) else {},
            iteration=iteration,
            confidence_score=int(confidence),
        )

    def _build_feedback(self, prompt: EnhancedPrompt) -> str:
        lines = [
            f"Iteration {prompt.iteration} generated a prompt with "
            f"{prompt.confidence_score}% confidence."
        ]
        if prompt.expected_issues:
            lines.append("\nExpected issues to address:")
            lines.extend(f"- {issue}" for issue in prompt.expected_issues)

        lines.append("\nFor the next iteration, focus on:")
        lines.append("- More specific technical details")
        lines.append("- A composition that avoids the generic stock photo feel")
        lines.append("- A precise lighting description")
        lines.append("- Front-loading the main subject")
        lines.append(
            f"- Reaching {self.quality_threshold}+ confidence by being more specific"
        )
        return "\n".join(lines)
