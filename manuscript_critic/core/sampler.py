"""
Content Sampling for long manuscripts

Fits an arbitrarily long manuscript into a bounded analysis budget. Text that
fits is passed through untouched; longer text is reduced to three labelled
windows (beginning, middle, ending) so the model knows the excerpt is partial
and where each piece sits in the whole.
"""

from dataclasses import dataclass
from typing import List

CHARS_PER_TOKEN = 4

BEGINNING_MARKER = "[BEGINNING]"
MIDDLE_MARKER = "[MIDDLE SAMPLE]"
ENDING_MARKER = "[ENDING]"


@dataclass(frozen=True)
class SampleWindow:
    """A half-open [start, end) character range of the source text."""
    label: str
    start: int
    end: int

    @property
    def length(self) -> int:
        return self.end - self.start


def _format_excerpt(beginning: str, middle: str, ending: str) -> str:
    return (
        f"{BEGINNING_MARKER}\n{beginning}\n\n"
        f"{MIDDLE_MARKER}\n{middle}\n\n"
        f"{ENDING_MARKER}\n{ending}"
    )


# Characters added by the section markers and separators
MARKER_OVERHEAD = len(_format_excerpt("", "", ""))


def budget_chars(token_budget: int, chars_per_token: int = CHARS_PER_TOKEN) -> int:
    """Character equivalent of a token budget."""
    if token_budget < 1 or chars_per_token < 1:
        raise ValueError("token_budget and chars_per_token must be positive")
    return token_budget * chars_per_token


def plan_windows(
    text_length: int,
    token_budget: int,
    chars_per_token: int = CHARS_PER_TOKEN,
) -> List[SampleWindow]:
    """
    Split the budget into beginning, middle and ending windows.

    Windows are clamped to [0, text_length]; the middle window is centred on
    text_length / 2.
    """
    window = budget_chars(token_budget, chars_per_token) // 3

    beginning = SampleWindow(BEGINNING_MARKER, 0, min(window, text_length))

    middle_start = max(0, text_length // 2 - window // 2)
    middle = SampleWindow(MIDDLE_MARKER, middle_start, min(text_length, middle_start + window))

    ending = SampleWindow(ENDING_MARKER, max(0, text_length - window), text_length)

    return [beginning, middle, ending]


def sample_manuscript(
    text: str,
    token_budget: int,
    chars_per_token: int = CHARS_PER_TOKEN,
) -> str:
    """
    Reduce text to a bounded excerpt.

    Returns text unchanged when it fits the budget. Otherwise the result is at
    most budget_chars(token_budget) + MARKER_OVERHEAD characters long.
    """
    if len(text) <= budget_chars(token_budget, chars_per_token):
        return text

    beginning, middle, ending = plan_windows(len(text), token_budget, chars_per_token)
    return _format_excerpt(
        text[beginning.start:beginning.end],
        text[middle.start:middle.end],
        text[ending.start:ending.end],
    )


def is_sampled(text: str, token_budget: int, chars_per_token: int = CHARS_PER_TOKEN) -> bool:
    """Whether sample_manuscript would shorten this text."""
    return len(text) > budget_chars(token_budget, chars_per_token)


def count_words(text: str) -> int:
    """Whitespace-delimited word count."""
    return len(text.split())
