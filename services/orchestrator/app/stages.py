"""Step labels shown to polling clients while an article is generated."""

from __future__ import annotations

from blogforge_schemas import GenerationStep

TITLE_LABEL = "Title"
INTRODUCTION_LABEL = "Introduction"
CONCLUSION_LABEL = "Conclusion"
DONE_LABEL = "Done"

STEP_LABELS = {
    GenerationStep.LOCKING: "Preparing",
    GenerationStep.TITLE_AND_META: TITLE_LABEL,
    GenerationStep.INTRODUCTION: INTRODUCTION_LABEL,
    GenerationStep.CLOSING: CONCLUSION_LABEL,
    GenerationStep.COMPLETED: DONE_LABEL,
    GenerationStep.FAILED: "Failed",
}

# Title, introduction and closing wrap the body sections.
FIXED_STEP_COUNT = 3


def total_step_count(body_section_count: int) -> int:
    return FIXED_STEP_COUNT + max(body_section_count, 0)


def label_after_body_section(headings: list[str], index: int) -> str:
    """Label of the step that follows body section ``index``."""

    if index + 1 < len(headings):
        return headings[index + 1]
    return CONCLUSION_LABEL


def first_body_label(headings: list[str]) -> str:
    return headings[0] if headings else CONCLUSION_LABEL
