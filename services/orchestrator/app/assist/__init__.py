from .engine import refine_content, suggest_title

__all__ = ["refine_content", "suggest_title"]
