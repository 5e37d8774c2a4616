"""Article generation: budgeting, outline, prompts, cleanup, progress and the run engine."""

from .budget import WordBudget, plan_word_budget, resolve_word_target, token_ceiling
from .engine import ContentOrchestrator
from .outline import OutlineResolution, OutlineResolver, is_placeholder_heading, needs_regeneration
from .progress import ProgressProjection
from .prompts import PromptPolicy

__all__ = [
    "WordBudget",
    "plan_word_budget",
    "resolve_word_target",
    "token_ceiling",
    "ContentOrchestrator",
    "OutlineResolution",
    "OutlineResolver",
    "is_placeholder_heading",
    "needs_regeneration",
    "ProgressProjection",
    "PromptPolicy",
]
