"""Math Delimiter Normalization — rewrites legacy MathJax delimiters to dollar delimiters.

Invariants:
    - Output never contains a legacy marker: \\( \\) \\[ \\] (else SanitizationFailed)
    - Empty input returns "" immediately
    - Text without legacy markers is returned unchanged (collapse rules are gated)
    - normalize(normalize(s)) == normalize(s) whenever the first call succeeds
    - Never returns partially cleaned text

Design Decisions:
    - Ordered tuple of DelimiterRule over chained str.replace: the ordering
      dependency is data, and each rule is testable in isolation
    - Doubly-escaped pairs are rewritten first; the singly-escaped rules then take
      one or two backslashes on either side, so a mixed pair ("\\\\(x\\)") never
      leaves a stray backslash in front of a "$"
    - Rewrite rules match an open marker with its nearest close marker (non-greedy,
      DOTALL). An unmatched marker is left in place and trips the post-condition
      instead of being turned into a lone "$" the renderer cannot pair
    - Collapse runs only when a rewrite fired on this call: canonical input like
      "$a$ $b$" is left alone, which is also what makes the function idempotent
    - Known limit: a block directly followed by an inline (\\[a\\]\\(b\\)) yields "$$$"
      at the seam, and the collapse turns it into "$$a$$b$". Collapse cannot tell that
      seam from a redundant wrapper like "$$\\[x\\]$$", and redundant wrappers are the
      common case in model output
"""

import re
from collections.abc import Callable
from dataclasses import dataclass

from mathtutor.core.errors import SanitizationFailed

INLINE = "$"
BLOCK = "$$"

Replacement = Callable[[re.Match[str]], str] | str


@dataclass(frozen=True)
class DelimiterRule:
    """One rewrite step: pattern, replacement, and when it may run."""
    name: str
    pattern: re.Pattern[str]
    replacement: Replacement
    only_after_rewrite: bool = False

    def apply(self, text: str) -> tuple[str, int]:
        """Apply the rule, returning (new_text, substitutions)."""
        return self.pattern.subn(self.replacement, text)


def _wrap(delimiter: str) -> Callable[[re.Match[str]], str]:
    # Callable replacement: the body is inserted verbatim, backslashes included
    return lambda m: f"{delimiter}{m.group('body')}{delimiter}"


REWRITE_RULES: tuple[DelimiterRule, ...] = (
    DelimiterRule(
        "double_escaped_inline",
        re.compile(r"\\\\\((?P<body>.*?)\\\\\)", re.DOTALL),
        _wrap(INLINE),
    ),
    DelimiterRule(
        "double_escaped_block",
        re.compile(r"\\\\\[(?P<body>.*?)\\\\\]", re.DOTALL),
        _wrap(BLOCK),
    ),
    DelimiterRule(
        "escaped_inline",
        re.compile(r"\\\\?\((?P<body>.*?)\\\\?\)", re.DOTALL),
        _wrap(INLINE),
    ),
    DelimiterRule(
        "escaped_block",
        re.compile(r"\\\\?\[(?P<body>.*?)\\\\?\]", re.DOTALL),
        _wrap(BLOCK),
    ),
)

# "$$$", "$$$$" ... -> "$$". Maximal match, so one pass reaches a fixpoint.
# Space-separated pairs ("$b$ $$") are two valid delimiters, never a rewrite artifact.
COLLAPSE_RULE = DelimiterRule(
    "collapse_delimiter_runs",
    re.compile(r"\${3,}"),
    BLOCK,
    only_after_rewrite=True,
)

DELIMITER_RULES: tuple[DelimiterRule, ...] = (*REWRITE_RULES, COLLAPSE_RULE)

_LEGACY_MARKER = re.compile(r"\\[()\[\]]")


def find_legacy_marker(text: str) -> str | None:
    """Return the first legacy marker in text, or None if there is none."""
    match = _LEGACY_MARKER.search(text)
    return match.group(0) if match else None


def normalize_math_delimiters(text: str) -> str:
    """Rewrite legacy math delimiters into the dollar dialect.

    Raises SanitizationFailed (carrying original and cleaned text) if any
    legacy marker survives the rules.
    """
    if not text:
        return ""

    cleaned = text
    rewritten = False
    for rule in DELIMITER_RULES:
        if rule.only_after_rewrite and not rewritten:
            continue
        cleaned, count = rule.apply(cleaned)
        if count and not rule.only_after_rewrite:
            rewritten = True

    marker = find_legacy_marker(cleaned)
    if marker is not None:
        raise SanitizationFailed(original=text, cleaned=cleaned, marker=marker)
    return cleaned
