"""Inline markup conversion: links, emphasis and inline code."""

import re

from .rules import strip_html

LINK_PATTERN = re.compile(
    r'<a\b[^>]*?\shref\s*=\s*(?:"([^"]*)"|\'([^\']*)\')[^>]*>(.*?)</a>',
    re.IGNORECASE | re.DOTALL
)
BOLD_PATTERN = re.compile(r'<(strong|b)(?:\s[^>]*)?>(.*?)</\1>', re.IGNORECASE | re.DOTALL)
ITALIC_PATTERN = re.compile(r'<(em|i)(?:\s[^>]*)?>(.*?)</\1>', re.IGNORECASE | re.DOTALL)
INLINE_CODE_PATTERN = re.compile(r'<code(?:\s[^>]*)?>(.*?)</code>', re.IGNORECASE | re.DOTALL)


def _replace_link(match) -> str:
    href = match.group(1) if match.group(1) is not None else match.group(2)
    return f"[{strip_html(match.group(3))}]({href})"


def convert_inline(markup: str, strip_tags: bool = False) -> str:
    """
    Convert inline HTML to Markdown.

    Link text is stripped of markup before the link is emitted. With
    ``strip_tags`` any tag left after conversion is dropped. Entities are
    left encoded: an encoded angle bracket in inline code or prose must not
    look like a tag to the cleanup pass, which decodes them.
    """
    result = LINK_PATTERN.sub(_replace_link, markup)
    result = BOLD_PATTERN.sub(r'**\2**', result)
    result = ITALIC_PATTERN.sub(r'*\2*', result)
    result = INLINE_CODE_PATTERN.sub(r'`\1`', result)
    if strip_tags:
        result = strip_html(result)
    return result


__all__ = ['convert_inline']
