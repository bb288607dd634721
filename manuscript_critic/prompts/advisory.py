"""
Advisory Prompts - Quick Analysis, Version Comparison, Fix Suggestions
Narrow single-purpose schemas that reuse the same extraction contract.
"""

ADVISORY_SYSTEM_PROMPT = """You are an expert manuscript editor. Answer with a single JSON object that follows the requested schema exactly, with no other text."""

QUICK_ANALYSIS_PROMPT_TEMPLATE = """Analyze this text for {category_name} ({category_description}):

<text>
{text}
</text>

Respond with JSON only:
{{
  "score": <0-100>,
  "feedback": "<2-3 sentence assessment>",
  "suggestions": ["<improvement 1>", "<improvement 2>", "<improvement 3>"]
}}"""

VERSION_COMPARISON_PROMPT_TEMPLATE = """Compare these two versions of text and assess the improvement:

ORIGINAL:
<original>
{original}
</original>

REVISED:
<revised>
{revised}
</revised>

Respond with JSON only:
{{
  "improvement": <-100 to +100, where positive means improved>,
  "changedAspects": [
    {{"aspect": "<what changed>", "change": <-10 to +10>, "note": "<brief explanation>"}}
  ],
  "summary": "<overall assessment of the revision>"
}}"""

FIX_SUGGESTION_PROMPT_TEMPLATE = """You found this issue in a manuscript:

Issue Type: {issue_type}
Severity: {severity}
Title: {title}
Description: {description}

Original text:
<excerpt>
{excerpt}
</excerpt>

Provide exactly 3 different rewrite options that fix this issue while maintaining the author's voice.

Respond with JSON only:
{{
  "rewriteOptions": [
    "<rewrite option 1>",
    "<rewrite option 2>",
    "<rewrite option 3>"
  ],
  "explanation": "<why these rewrites address the issue>"
}}"""
