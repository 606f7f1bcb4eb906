"""Content-to-image pipeline.

For one blog post: analyze the document, then for each of the first N
sections needing an image run

    content analysis -> intent generation -> prompt enhancement -> image generation

recording status and timing per stage. Without an enhancer the intent is
sent to the generator unchanged. A failing section marks its current
stage as errored and the pipeline moves on to the next section.
"""

from __future__ import annotations

import time
from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Optional

from src.common.config import Settings, settings as default_settings
from src.common.logging import setup_logging

from .content_analyzer import (
    ContentSection,
    analyze_content,
    extract_body_content,
    generate_image_intent,
    parse_frontmatter,
)
from .document_store import MDXDocumentStore
from .image_generator import ImageGenerationOptions, ImageGenerator
from .mdx_updater import ImageInsertion, suggest_layout
from .prompt_enhancement import PromptEnhancer

logger = setup_logging(module_name="agents.pipeline")

SUMMARY_CHARS = 500


def _now_ms() -> int:
    return int(time.time() * 1000)


class StageStatus(str, Enum):
    PENDING = "pending"
    PROCESSING = "processing"
    COMPLETED = "completed"
    ERROR = "error"


@dataclass
class PipelineStage:
    name: str
    status: StageStatus = StageStatus.PENDING
    start_time: Optional[int] = None
    end_time: Optional[int] = None
    data: dict[str, Any] = field(default_factory=dict)

    def start(self) -> None:
        self.status = StageStatus.PROCESSING
        self.start_time = _now_ms()

    def complete(self, data: dict[str, Any]) -> None:
        self.data = data
        self.end_time = _now_ms()
        self.status = StageStatus.COMPLETED

    def fail(self, error: str) -> None:
        self.data = {"error": error}
        self.end_time = _now_ms()
        self.status = StageStatus.ERROR

    def to_dict(self) -> dict:
        return {
            "name": self.name,
            "status": self.status.value,
            "start_time": self.start_time,
            "end_time": self.end_time,
            "data": self.data,
        }


@dataclass
class SectionPipelineResult:
    """Stage records for one section."""
    section: ContentSection
    stages: dict[str, PipelineStage] = field(
        default_factory=lambda: {
            "content_analysis": PipelineStage("Content Analysis"),
            "intent_generation": PipelineStage("Intent Generation"),
            "prompt_enhancement": PipelineStage("Prompt Enhancement"),
            "image_generation": PipelineStage("Image Generation"),
        }
    )
    final_image_url: Optional[str] = None

    @property
    def succeeded(self) -> bool:
        return self.final_image_url is not None

    def current_stage(self) -> Optional[PipelineStage]:
        return next(
            (s for s in self.stages.values() if s.status == StageStatus.PROCESSING),
            None,
        )

    def to_dict(self) -> dict:
        content = self.section.content
        return {
            "section_title": self.section.title,
            "section_content": content[:SUMMARY_CHARS] + ("..." if len(content) > SUMMARY_CHARS else ""),
            "stages": {key: stage.to_dict() for key, stage in self.stages.items()},
            "final_image_url": self.final_image_url,
        }


@dataclass
class PipelineRunResult:
    slug: str
    title: str
    description: str
    category: Optional[str]
    pipelines: list[SectionPipelineResult] = field(default_factory=list)
    total_processing_time: int = 0  # milliseconds

    def to_dict(self) -> dict:
        return {
            "blog_post": {
                "slug": self.slug,
                "title": self.title,
                "description": self.description,
                "category": self.category,
            },
            "pipelines": [p.to_dict() for p in self.pipelines],
            "total_processing_time": self.total_processing_time,
        }


class ContentImagePipeline:
    """Generates images for the sections of one blog post.

    Usage:
        pipeline = ContentImagePipeline(
            MDXDocumentStore(), OpenAIImageGenerator(), enhancer=PromptEnhancer()
        )
        run = pipeline.run("my-post")
        insertions = build_insertions(run)
    """

    def __init__(
        self,
        store: MDXDocumentStore,
        generator: ImageGenerator,
        enhancer: PromptEnhancer | None = None,
        max_sections: int | None = None,
        config: Settings | None = None,
    ):
        self.store = store
        self.generator = generator
        self.enhancer = enhancer
        config = config or default_settings
        self.max_sections = max_sections if max_sections is not None else config.images.max_sections

    def run(self, slug: str) -> PipelineRunResult:
        """Run the pipeline for a post.

        Raises:
            DocumentNotFoundError: If the post does not exist.
        """
        start = _now_ms()
        mdx_content = self.store.read(slug)
        frontmatter = parse_frontmatter(mdx_content)
        analysis = analyze_content(extract_body_content(mdx_content), frontmatter)

        logger.info(
            'Analyzing "%s" - found %d sections needing images',
            analysis.title, len(analysis.sections),
        )

        run = PipelineRunResult(
            slug=slug,
            title=analysis.title,
            description=analysis.description,
            category=analysis.metadata.category,
        )
        for section in analysis.sections[: self.max_sections]:
            run.pipelines.append(
                self._run_section(slug, section, analysis.title, analysis.description)
            )

        run.total_processing_time = _now_ms() - start
        return run

    def _run_section(
        self,
        slug: str,
        section: ContentSection,
        blog_title: str,
        blog_description: str,
    ) -> SectionPipelineResult:
        result = SectionPipelineResult(section=section)
        stages = result.stages

        try:
            stages["content_analysis"].start()
            stages["content_analysis"].complete(
                {
                    "section_title": section.title,
                    "content_length": len(section.content),
                    "heading_level": section.heading_level,
                }
            )

            stages["intent_generation"].start()
            intent = generate_image_intent(section, blog_title, blog_description)
            stages["intent_generation"].complete({"intent": intent})
            logger.info('Generated intent for "%s" (%d chars)', section.title, len(intent))

            stages["prompt_enhancement"].start()
            prompt = self._enhance(intent, stages["prompt_enhancement"])
            logger.info('Prompt ready for "%s" (%d chars)', section.title, len(prompt))

            stages["image_generation"].start()
            image = self.generator.generate(
                prompt, ImageGenerationOptions(filename=f"{slug}-section-{section.title}")
            )
            if not image.success:
                raise RuntimeError(f"Image generation failed: {image.error}")
            stages["image_generation"].complete(
                {"image_url": image.image_url, "processing_time": image.processing_time}
            )
            result.final_image_url = image.image_url
            logger.info('Generated image for "%s" (%.1fs)', section.title, image.processing_time)

        except Exception as e:
            logger.error('Error processing section "%s": %s', section.title, e)
            current = result.current_stage()
            if current:
                current.fail(str(e))

        return result

    def _enhance(self, intent: str, stage: PipelineStage) -> str:
        """Optimized prompt for the generator; the intent itself when no enhancer is set."""
        if self.enhancer is None:
            stage.complete({"skipped": True, "final_prompt": {"optimized_prompt": intent}})
            return intent

        enhanced = self.enhancer.enhance(intent)
        if not enhanced.success:
            raise RuntimeError(f"Prompt enhancement failed: {enhanced.error}")
        stage.complete(enhanced.to_dict())
        return enhanced.final_prompt.optimized_prompt


def build_insertions(run: PipelineRunResult) -> list[ImageInsertion]:
    """Approved insertions for every section that produced an image."""
    return [
        ImageInsertion(
            section_title=p.section.title,
            image_url=p.final_image_url,
            image_path=p.final_image_url,
            alt_text=p.section.title,
            approved=True,
            layout=suggest_layout(p.section.title, p.section.content),
        )
        for p in run.pipelines
        if p.succeeded
    ]
