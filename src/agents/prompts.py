"""Prompt templates for section image generation and prompt enhancement.

The intent text is consumed by an external image generator, so it is plain
natural language with the style constraints spelled out at the end.
"""

IMAGE_STYLE_GUIDE = """\
Style: Photorealistic, professional, modern, magazine-quality
Purpose: Blog section header that visually represents the content
Aspect ratio: 16:9 (blog header format)"""


def build_image_intent_prompt(
    section_title: str,
    blog_title: str,
    blog_description: str,
    content_summary: str,
    previous_context: str = "",
) -> str:
    """Build the image-generation intent for one blog section.

    Callers are responsible for truncating content_summary and
    previous_context; this function only lays the text out.
    """
    previous = f"Previous context: {previous_context}" if previous_context else ""

    prompt = f"""Professional blog header image for section titled "{section_title}".

Blog context: {blog_title} - {blog_description}

Section content summary:
{content_summary}

{previous}

{IMAGE_STYLE_GUIDE}"""

    return prompt.strip()


# ---------------------------------------------------------------------------
# Prompt enhancement
# ---------------------------------------------------------------------------

ENHANCEMENT_SYSTEM_PROMPT = (
    "You are an expert photography director and prompt engineer for image "
    "generation models. Always respond with valid JSON only."
)

ATTRIBUTE_EXTRACTION_PROMPT = """Analyze the image intent below and extract the visual attributes that should guide image generation.

User Intent: {intent}
Use Case: {use_case}
Style Preference: {style}
Aspect Ratio: {aspect_ratio}

Extract: the main subject; composition (framing, perspective, focal point); lighting (type, direction, mood); style (genre, aesthetic, references); technical details (camera, lens, aperture, ISO); colors (palette, temperature, saturation); and mood.

Respond with JSON in exactly this shape:
{{
  "subject": "...",
  "composition": {{"framing": "...", "perspective": "...", "focalPoint": "..."}},
  "lighting": {{"type": "...", "direction": "...", "mood": "..."}},
  "style": {{"genre": "...", "aesthetic": "...", "references": ["..."]}},
  "technical": {{"camera": "...", "lens": "...", "aperture": "...", "iso": "..."}},
  "colors": {{"palette": ["..."], "temperature": "...", "saturation": "..."}},
  "mood": ["..."]
}}

Be specific. Favor attributes that produce photorealistic, professional results."""

PROMPT_OPTIMIZATION_PROMPT = """Write the best possible image generation prompt for the request below.

## Input
User Intent: {intent}
Use Case: {use_case}
Style: {style}
Aspect Ratio: {aspect_ratio}

## Visual Attributes
{attributes}

## Previous Iteration Feedback
{feedback}

## Requirements
- Paragraph format, not a keyword list, with the main subject in the first sentence
- Fill the entire {aspect_ratio} frame edge to edge, with no borders or empty space
- No AI artifacts: synthetic skin, malformed hands, impossible physics, unnatural lighting
- Concrete technical details: camera body, lens, aperture, ISO, lighting setup
- A distinctive composition that does not read as a generic stock photo
- End with the mood and atmosphere

## Output
Respond with JSON only:
{{
  "optimizedPrompt": "...",
  "negativePrompt": "artifacts to avoid, comma-separated",
  "reasoning": "...",
  "expectedIssues": ["..."],
  "technicalDetails": {{"composition": "...", "lighting": "...", "cameraSettings": "...", "colorPalette": "..."}},
  "confidenceScore": 85
}}

confidenceScore is your 0-100 estimate of how well the prompt will perform. Aim for {threshold} or higher; if lower, list the reasons in expectedIssues."""


def build_attribute_extraction_prompt(
    intent: str, use_case: str, style: str, aspect_ratio: str
) -> str:
    return ATTRIBUTE_EXTRACTION_PROMPT.format(
        intent=intent, use_case=use_case, style=style, aspect_ratio=aspect_ratio
    )


def build_prompt_optimization_prompt(
    intent: str,
    use_case: str,
    style: str,
    aspect_ratio: str,
    attributes: str,
    feedback: str,
    threshold: int,
) -> str:
    """Build the request for one refinement iteration.

    `attributes` is the JSON-serialized attribute extraction; `feedback`
    summarizes the previous iteration.
    """
    return PROMPT_OPTIMIZATION_PROMPT.format(
        intent=intent,
        use_case=use_case,
        style=style,
        aspect_ratio=aspect_ratio,
        attributes=attributes,
        feedback=feedback,
        threshold=threshold,
    )
