"""Block-level text conversion: headings, paragraphs, lists and quotes."""

import re

from .inline_converter import convert_inline
from .rules import strip_html

HEADING_PATTERN = re.compile(r'<h([2-4])(?:\s[^>]*)?>(.*?)</h\1>', re.IGNORECASE | re.DOTALL)
PARAGRAPH_PATTERN = re.compile(r'<p(?:\s[^>]*)?>(.*?)</p>', re.IGNORECASE | re.DOTALL)
# Innermost lists only: the body may not contain another list opening tag
LIST_PATTERN = re.compile(
    r'<(ul|ol)(?:\s[^>]*)?>((?:(?!<(?:ul|ol)[\s>]).)*?)</\1>',
    re.IGNORECASE | re.DOTALL
)
LIST_ITEM_PATTERN = re.compile(r'<li(?:\s[^>]*)?>(.*?)</li>', re.IGNORECASE | re.DOTALL)
BLOCKQUOTE_PATTERN = re.compile(r'<blockquote(?:\s[^>]*)?>(.*?)</blockquote>', re.IGNORECASE | re.DOTALL)


def convert_headings(text: str) -> str:
    """``<h2>``-``<h4>`` become ATX headings with tag-free content."""
    def replace(match):
        level = int(match.group(1))
        title = strip_html(match.group(2)).strip()
        return f"\n{'#' * level} {title}\n"

    return HEADING_PATTERN.sub(replace, text)


def convert_paragraphs(text: str) -> str:
    """Paragraphs become inline-converted text; empty paragraphs vanish."""
    def replace(match):
        converted = convert_inline(match.group(1).strip()).strip()
        return f"\n{converted}\n" if converted else ''

    return PARAGRAPH_PATTERN.sub(replace, text)


def _list_item(marker: str, content: str) -> str:
    """One list item; continuation lines are indented under the marker."""
    lines = convert_inline(content.strip()).strip().split('\n')
    indent = ' ' * (len(marker) + 1)
    rest = [f"{indent}{line}" if line.strip() else '' for line in lines[1:]]
    return '\n'.join([f"{marker} {lines[0]}"] + rest) + '\n'


def convert_lists(text: str) -> str:
    """
    Unordered lists become ``-`` items, ordered lists ``1.``, ``2.``, ...

    Innermost lists convert first so a nested list ends up indented inside
    its parent item.
    """
    def replace(match):
        ordered = match.group(1).lower() == 'ol'
        items = LIST_ITEM_PATTERN.findall(match.group(2))
        rendered = [
            _list_item(f"{index}." if ordered else '-', item)
            for index, item in enumerate(items, start=1)
        ]
        return '\n' + ''.join(rendered) + '\n'

    while True:
        converted = LIST_PATTERN.sub(replace, text)
        if converted == text:
            return converted
        text = converted


def convert_blockquotes(text: str) -> str:
    """Blockquotes become ``>``-prefixed lines."""
    def replace(match):
        content = convert_inline(match.group(1), strip_tags=True).strip()
        content = re.sub(r'\n\s*\n+', '\n\n', content)
        lines = [f"> {line.strip()}" if line.strip() else '>' for line in content.split('\n')]
        return '\n' + '\n'.join(lines) + '\n'

    return BLOCKQUOTE_PATTERN.sub(replace, text)


def convert_text_blocks(text: str) -> str:
    """Paragraphs, lists, then blockquotes."""
    text = convert_paragraphs(text)
    text = convert_lists(text)
    return convert_blockquotes(text)


__all__ = [
    'convert_headings',
    'convert_paragraphs',
    'convert_lists',
    'convert_blockquotes',
    'convert_text_blocks',
]
