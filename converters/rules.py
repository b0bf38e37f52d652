"""Rewrite rule primitives shared by the document and export converters.

A rule is a pure ``str -> str`` function with a name. A rule either matches
and transforms its target or returns the input unchanged; rules never raise
on malformed markup. Rules run strictly in list order.
"""

import html
import logging
import re
from typing import Callable, Iterable, List, NamedTuple

logger = logging.getLogger('wordpress_mdx_migrator.converters.rules')

TAG_PATTERN = re.compile(r'<[^>]+>')


class RewriteRule(NamedTuple):
    """A named, pure string transformation."""
    name: str
    apply: Callable[[str], str]


def apply_rules(text: str, rules: Iterable[RewriteRule]) -> str:
    """Run ``rules`` over ``text`` in order and return the result."""
    for rule in rules:
        before = text
        text = rule.apply(text)
        if text != before:
            logger.debug(f"Rule '{rule.name}' rewrote content ({len(before)} -> {len(text)} chars)")
    return text


def strip_html(markup: str) -> str:
    """Drop every tag, keeping the text between them."""
    return TAG_PATTERN.sub('', markup)


def decode_entities(text: str) -> str:
    """Decode HTML entities once; non-breaking spaces become plain spaces."""
    return html.unescape(text).replace('\xa0', ' ')


class PlaceholderStash:
    """
    Keeps fragments out of reach of later rules.

    ``stash`` returns an opaque token containing no markup characters, so no
    tag, paragraph or whitespace rule can alter it. ``restore`` swaps every
    token back for its fragment.
    """

    TOKEN_PATTERN = re.compile(r'@@STASH(\d+)@@')

    def __init__(self):
        self._fragments: List[str] = []

    def stash(self, fragment: str) -> str:
        self._fragments.append(fragment)
        return f"@@STASH{len(self._fragments) - 1}@@"

    def restore(self, text: str) -> str:
        def replace(match):
            index = int(match.group(1))
            if index < len(self._fragments):
                return self._fragments[index]
            return match.group(0)

        return self.TOKEN_PATTERN.sub(replace, text)

    def __len__(self) -> int:
        return len(self._fragments)


__all__ = [
    'RewriteRule',
    'apply_rules',
    'strip_html',
    'decode_entities',
    'PlaceholderStash',
]
