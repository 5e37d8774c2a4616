"""Prompt text for the article generation steps."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Optional

from blogforge_schemas import ContentJob

BASE_SYSTEM_PROMPT = """
You are a senior SEO content strategist with two decades of experience in search ranking,
EEAT, topical authority and conversion-focused writing. You write blog posts that are fully
optimised for search, read naturally and can rank on the first page for competitive keywords.

STRICT RULES:

1. PARAGRAPHS: At most 2 sentences per paragraph. No exceptions.

2. SENTENCES: 10-15 words each. Short, concise and direct. No filler words.

3. SIMPLE WORDS: Everyday language at a 7th-grade reading level. No academic vocabulary.

4. KEYWORD CONTROL: Keyword density must stay at or below 1.05%. Use the exact main keyword
1-2 times per section and natural variations or synonyms everywhere else. Never use the exact
keyword 3 or more times in one section.

5. TRANSITIONS: Use "However", "Additionally", "Moreover" and "Therefore" at most once each in
the whole article. Prefer natural segues such as Still, Yet, That said, As a result, Meanwhile.

6. VOICE: Active voice only.

7. BOLD: Use **bold** for key terms, product names and data points.

8. LISTS: Use dashes (-) for bullet points. Never use asterisks, emoji or special symbols.

9. NO HEADINGS: Do not output h1, h2, h3 or ### markers in body content.

10. DATA: Every section includes at least one real, publicly known figure: user numbers,
market size, growth or adoption rates, pricing benchmarks or performance metrics. When an
exact number is uncertain, give a reasonable range.

11. CRITERIA: Judge every tool, platform or approach with measurable criteria such as
performance, cost, growth, engagement, ease of use, ROI or risk.

12. BLOCKED CONTENT: No repeated ideas, no vague statements, no motivational language, no
theory without a practical example, no corporate tone, no claims without a reason or data.

13. DECISIONS: The reader must be able to decide within 5 minutes of reading: what is best,
who should choose it, why it wins and when not to use it.

14. BANNED PHRASES: Never write "In today's", "It's important", "In conclusion", "Let's dive",
"When it comes to", "At the end of the day", "studies show", "research indicates",
"game-changer" or "revolutionary".
""".strip()

BASE_RULE_COUNT = 14

INR_CURRENCY_RULE = (
    "CRITICAL CURRENCY RULE: You MUST use ONLY INR (₹ / Rupees) for all pricing, salaries, "
    "costs, and monetary values. NEVER use USD ($)."
)
USD_CURRENCY_RULE = (
    "CRITICAL CURRENCY RULE: You MUST use ONLY USD ($) for all pricing, salaries, costs, "
    "and monetary values."
)
DEFAULT_CURRENCY_RULE = "Use USD ($) for all pricing, costs, and monetary values."

_USD_MARKETS = ("global", "united states", "uk", "united kingdom")

OUTLINE_SYSTEM_PROMPT = (
    "Generate SEO blog section headings. Return ONLY headings, one per line. "
    "No numbering, no explanation, no quotes."
)

OUTLINE_PROMPT = (
    'Generate exactly {count} H2 headings for a blog about "{keyword}". '
    "Short, specific, SEO-friendly. One per line."
)

TITLE_META_SYSTEM_PROMPT = (
    "You generate SEO blog titles and meta descriptions. Return ONLY a JSON object with "
    "'title' and 'meta_description' string properties. No markdown formatting, no explanation."
)

TITLE_META_PROMPT = """
Create an SEO title and meta description for the keyword: "{keyword}".

STRICT RULES:
- MUST contain the EXACT, UNALTERED keyword: "{keyword}"
- Title length: 50-70 characters maximum
- Meta description length: STRICTLY 150-160 characters, a compelling summary that earns the click
- Use simple, everyday words only
- Return ONLY valid JSON: {{"title": "...", "meta_description": "..."}}
""".strip()

_FORMAT_RULE = (
    "FORMAT: MAXIMUM 2 sentences per paragraph. NO EXCEPTIONS. Sentences 10-15 words. "
    "Simple words. Active voice. Dashes (-) for lists, never asterisks."
)

INTRODUCTION_PROMPT = """
Write the introduction for a blog titled "{title}" about "{keyword}".{reference} Tone: {tone}.
CRITICAL LENGTH: STRICTLY limit your response to around {words} words. DO NOT WRITE MORE THAN THIS.

STRUCTURE:
1. PROBLEM: State the real problem the reader faces, anchored by a specific number or data point.
2. GAP: Show why current approaches fail. Name the gap: cost, speed, quality or scale.
3. PROMISE: Tell the reader exactly what this article delivers.

DATA RULE: Include at least 1 real, publicly known data point.

KEYWORD RULES (TARGET DENSITY: ~1%):
- Use the EXACT keyword "{keyword}" exactly 1 time.
- Use synonyms or variations for every other mention.
- Never repeat the keyword in back-to-back sentences.

{format_rule} No headings.
- DO NOT start your response with the blog title. DO NOT repeat the title. Write only the introduction paragraphs.
""".strip()

SECTION_PROMPT = """
Write the section "{heading}" for a blog about "{keyword}".{reference} Tone: {tone}.
CRITICAL LENGTH: STRICTLY limit your response to around {words} words. DO NOT WRITE MORE THAN THIS.

STRUCTURE:
1. CORE CLAIM: State the main point with a supporting data point.
2. HOW IT WORKS: Explain the mechanism in plain terms and why it matters.
3. EVIDENCE: Compare options, show before/after or give a real-world example with measurable criteria.
4. PRACTICAL LIST: 3-5 items using dashes (-) with **bold labels** and short, specific explanations.
5. BOTTOM LINE: End with a clear verdict on what works, what does not, and for whom.

DATA RULE: Include at least 1 real number in this section.

KEYWORD RULES (TARGET DENSITY: ~1%):
- Use the EXACT keyword "{keyword}" between 1 and 2 times in this section.
- Use synonyms or variations for every other mention.
- Never repeat the keyword in consecutive sentences.

{format_rule} No section heading in output.
""".strip()

CLOSING_PROMPT = """
Write the conclusion AND FAQs for the blog "{title}" about "{keyword}". Tone: {tone}.
CRITICAL LENGTH: STRICTLY limit the ENTIRE output to around {words} words combined.

CONCLUSION (write first):
- Full, proper sentences. Avoid "However", "Additionally", "Moreover", "Therefore".
- DECISION SUMMARY: The best option, who should choose it and why it wins.
- WHEN NOT TO USE: One scenario where a different approach is better.
- FINAL VERDICT: A clear, actionable last statement.
- Use the EXACT keyword "{keyword}" exactly 1 time.
- Do not start with "In conclusion" or "To sum up".
- DO NOT output a heading for the conclusion. Do NOT output "## Conclusion".

Then write FAQs:

## Frequently Asked Questions

### 1. [Specific question about {keyword} with a data angle]?
[2-3 sentence answer with a real number or benchmark. Use **bold** for key terms.]

### 2. [How/Why comparison question]?
[Answer with a clear comparison and measurable criteria.]

### 3. [Common misconception or concern]?
[Answer that corrects the misconception with evidence or logic.]

{format_rule} No fake statistics.
""".strip()


def currency_rule(target_country: Optional[str]) -> str:
    country = (target_country or "").lower()
    if "india" in country:
        return INR_CURRENCY_RULE
    if any(market in country for market in _USD_MARKETS):
        return USD_CURRENCY_RULE
    return DEFAULT_CURRENCY_RULE


@dataclass(frozen=True)
class PromptPolicy:
    """Per-job prompt rules, assembled once before the first generation call."""

    currency_rule: str = DEFAULT_CURRENCY_RULE
    custom_details: Optional[str] = None
    secondary_keywords: tuple[str, ...] = ()
    internal_links: tuple[str, ...] = ()

    @classmethod
    def for_job(cls, job: ContentJob) -> "PromptPolicy":
        details = (job.custom_details or "").strip()
        return cls(
            currency_rule=currency_rule(job.target_country),
            custom_details=details or None,
            secondary_keywords=tuple(job.secondary_keywords),
            internal_links=tuple(job.internal_links),
        )

    @property
    def keyword_list(self) -> str:
        return ", ".join(self.secondary_keywords)

    def fragments(self) -> list[str]:
        fragments = [self.currency_rule]
        if self.custom_details:
            fragments.append(
                "CRITICAL REQUIRED DETAILS: The user explicitly asked you to include this specific "
                f'information (e.g., a phone number, name, location, or fact): "{self.custom_details}". '
                "You MUST weave these exact details into the article."
            )
        if self.secondary_keywords:
            fragments.append(
                "SECONDARY KEYWORDS: You MUST try to naturally weave in these secondary keywords: "
                f"{self.keyword_list}."
            )
        if self.internal_links:
            fragments.append(
                "INTERNAL LINKS: You MUST naturally integrate the following URLs into the content "
                f"using highly relevant anchor text: {', '.join(self.internal_links)}."
            )
        return fragments

    @property
    def system_prompt(self) -> str:
        numbered = [
            f"{BASE_RULE_COUNT + index}. {fragment}"
            for index, fragment in enumerate(self.fragments(), start=1)
        ]
        return BASE_SYSTEM_PROMPT + "\n\n" + "\n".join(numbered)

    def reference_clause(self, lead: str = "Reference") -> str:
        if not self.secondary_keywords:
            return ""
        return f" {lead}: {self.keyword_list}."


def introduction_prompt(policy: PromptPolicy, *, title: str, keyword: str, tone: str, words: int) -> str:
    return INTRODUCTION_PROMPT.format(
        title=title,
        keyword=keyword,
        reference=policy.reference_clause("Also reference"),
        tone=tone,
        words=words,
        format_rule=_FORMAT_RULE,
    )


def section_prompt(policy: PromptPolicy, *, heading: str, keyword: str, tone: str, words: int) -> str:
    return SECTION_PROMPT.format(
        heading=heading,
        keyword=keyword,
        reference=policy.reference_clause(),
        tone=tone,
        words=words,
        format_rule=_FORMAT_RULE,
    )


def closing_prompt(*, title: str, keyword: str, tone: str, words: int) -> str:
    return CLOSING_PROMPT.format(title=title, keyword=keyword, tone=tone, words=words, format_rule=_FORMAT_RULE)
