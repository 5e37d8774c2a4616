"""Prompts for the standalone title and refinement helpers."""

from __future__ import annotations

TITLE_SUGGESTION_PROMPT = """
Create an SEO title for the keyword: "{keyword}".
STRICT RULES:
- MUST contain the exact keyword "{keyword}" once
- Length: 50-70 characters maximum
- Word count: 6-12 words
- Use simple, everyday words only
- Make it specific and valuable (e.g. "How to...", "Why...", "Best...")
- No clickbait, no all-caps, no complex words
- Return ONLY the title text, nothing else, no quotes.
""".strip()

REFINE_SYSTEM_PROMPT = (
    "You are a content editor. The user gives you blog content and an editing instruction. "
    "Apply the instruction and return the FULL modified content. Keep all markdown formatting, "
    "headings, bold text and structure exactly the same. Only change what the user asks you to "
    "change. Return ONLY the modified content: no explanations, no preamble."
)

REFINE_PROMPT = """
Here is the blog content:

---
{content}
---

Apply this edit: {instruction}

Return the full modified content with the edit applied. Keep all formatting intact.
""".strip()
