"""Raw-text substitutions applied before the document is parsed."""

from __future__ import annotations

import re
from typing import Iterable, List

from ..logging import get_logger
from ..models import ReplacementRule

RULE_SEPARATOR = ":::"
BRANDING_PATTERN = re.compile(r"^# (Awesome[\s-].+)$", re.MULTILINE)
BRANDING_SUFFIX = " with stars"
# JavaScript style group references accepted in regex replacements.
DOLLAR_REFERENCE = re.compile(r"\$(?:(\$)|(&)|([1-9]\d?)|<([A-Za-z_]\w*)>)")

logger = get_logger("replacements")


def parse_rule_lines(raw: str, kind: str) -> List[ReplacementRule]:
    """Parse newline-separated ``find:::replace`` pairs.

    Only the first separator splits a line; lines without one are ignored.
    """
    rules: List[ReplacementRule] = []
    for line in raw.split("\n"):
        if not line.strip() or RULE_SEPARATOR not in line:
            continue
        find, replace = line.split(RULE_SEPARATOR, 1)
        rules.append(ReplacementRule(kind=kind, find=find, replace=replace))  # type: ignore[arg-type]
    return rules


def parse_replacement_rules(
    find_and_replace_raw: str = "",
    regex_find_and_replace_raw: str = "",
    *,
    branding: bool = False,
) -> List[ReplacementRule]:
    """Build the ordered rule list: branding first, then literal, then regex rules."""
    rules: List[ReplacementRule] = [ReplacementRule.branding()] if branding else []
    rules.extend(parse_rule_lines(find_and_replace_raw or "", "literal"))
    rules.extend(parse_rule_lines(regex_find_and_replace_raw or "", "regex"))
    return rules


def expand_dollar_references(replace: str, groups: int = 99) -> str:
    """Rewrite ``$1``, ``$<name>``, ``$&`` and ``$$`` into ``re.sub`` template syntax.

    Backslash references such as ``\\1`` keep their usual meaning. A two digit
    reference above ``groups`` is read as a one digit reference followed by a
    literal digit.
    """

    def _convert(match: re.Match[str]) -> str:
        dollar, whole, number, name = match.groups()
        if dollar:
            return "$"
        if whole:
            return r"\g<0>"
        if number:
            if len(number) == 2 and int(number) > groups:
                return rf"\g<{number[0]}>{number[1]}"
            return rf"\g<{number}>"
        return rf"\g<{name}>"

    return DOLLAR_REFERENCE.sub(_convert, replace)


def apply_replacements(content: str, rules: Iterable[ReplacementRule]) -> str:
    """Apply each rule to the raw text, left to right."""
    processed = content
    for rule in rules:
        if rule.kind == "literal":
            if not rule.find:
                continue
            logger.debug("Applying literal replacement: '%s' -> '%s'", rule.find, rule.replace)
            processed = processed.replace(rule.find, rule.replace)
        elif rule.kind == "regex":
            try:
                pattern = re.compile(rule.find, re.MULTILINE)
            except re.error as exc:
                logger.warning("Skipping invalid regex pattern '%s': %s", rule.find, exc)
                continue
            logger.debug("Applying regex replacement: /%s/m -> '%s'", rule.find, rule.replace)
            try:
                processed = pattern.sub(
                    expand_dollar_references(rule.replace, pattern.groups), processed
                )
            except (re.error, IndexError) as exc:
                logger.warning(
                    "Skipping regex rule '%s' with invalid replacement '%s': %s",
                    rule.find,
                    rule.replace,
                    exc,
                )
        elif rule.kind == "branding":
            logger.debug("Applying default branding replacement for title.")
            processed = BRANDING_PATTERN.sub(_brand_title, processed)
    return processed


def _brand_title(match: re.Match[str]) -> str:
    title = match.group(1)
    # Already branded titles stay as they are so reruns do not stack suffixes.
    if title.rstrip().endswith(BRANDING_SUFFIX.strip()):
        return match.group(0)
    return f"# {title}{BRANDING_SUFFIX}"


__all__ = [
    "BRANDING_SUFFIX",
    "RULE_SEPARATOR",
    "apply_replacements",
    "expand_dollar_references",
    "parse_replacement_rules",
    "parse_rule_lines",
]
