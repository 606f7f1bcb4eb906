# Agents: MDX section analysis and image insertion
"""
Tooling that illustrates authored blog posts:
- content_analyzer: section extraction, image intents, frontmatter subset parser
- mdx_updater: insertion validation, placement and rendering
- document_store: MDX files on disk, backups, validated rewrites
- prompt_enhancement: iterative prompt refinement and negative prompts
- image_generator: OpenAI-backed image generation, generated image listing
- pipeline: analyze -> intent -> enhance -> image, per section
"""

from .content_analyzer import (
    ContentAnalysisResult,
    ContentSection,
    SectionContext,
    analyze_content,
    extract_body_content,
    generate_image_intent,
    parse_frontmatter,
)
from .document_store import DocumentNotFoundError, InsertionValidationError, MDXDocumentStore
from .mdx_updater import (
    ImageInsertion,
    ImageLayout,
    MDXUpdateResult,
    ValidationResult,
    create_image_line,
    suggest_layout,
    update_mdx_with_images,
    validate_insertions,
)
from .prompt_enhancement import PromptEnhancementResult, PromptEnhancer, build_negative_prompt

__all__ = [
    "ContentAnalysisResult",
    "ContentSection",
    "DocumentNotFoundError",
    "ImageInsertion",
    "ImageLayout",
    "InsertionValidationError",
    "MDXDocumentStore",
    "MDXUpdateResult",
    "PromptEnhancementResult",
    "PromptEnhancer",
    "SectionContext",
    "ValidationResult",
    "analyze_content",
    "build_negative_prompt",
    "create_image_line",
    "extract_body_content",
    "generate_image_intent",
    "parse_frontmatter",
    "suggest_layout",
    "update_mdx_with_images",
    "validate_insertions",
]
