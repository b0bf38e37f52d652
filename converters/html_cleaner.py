"""Structural cleanup of markup left over after block conversion."""

import logging
import re

from bs4 import BeautifulSoup, Comment, Tag

logger = logging.getLogger('wordpress_mdx_migrator.converters.html_cleaner')

BLOCK_COMMENT_PATTERN = re.compile(r'<!--\s*/?wp:.*?-->', re.DOTALL)
TRAILING_SPACE_PATTERN = re.compile(r'[ \t]+\n')
BLANK_RUN_PATTERN = re.compile(r'\n{3,}')

CONTAINER_TAGS = ['div', 'figure', 'figcaption', 'section', 'article', 'center', 'span']


def strip_block_comments(text: str) -> str:
    """Remove ``<!-- wp:... -->`` and ``<!-- /wp:... -->`` markers only."""
    return BLOCK_COMMENT_PATTERN.sub('', text)


class HtmlCleaner:
    """
    Removes markup the target format cannot represent.

    The text is parsed once into a tree, so nested elements of the same
    name are removed or unwrapped as a whole. Parsing also decodes every
    entity left in the text; the result is serialized without re-escaping,
    which makes this the single decoding step for prose.
    """

    def __init__(self, logger: logging.Logger = None):
        self.logger = logger or logging.getLogger('wordpress_mdx_migrator.converters.html_cleaner')

    def clean(self, text: str) -> str:
        """
        Run the structural cleanup in a fixed order.

        Comments go first, then whole elements that must disappear with
        their content (icon containers, styled elements), then tags whose
        content is kept.
        """
        # html.parser keeps bare text as is; lxml would wrap it in <p>
        soup = BeautifulSoup(text, 'html.parser')

        for comment in soup.find_all(string=lambda node: isinstance(node, Comment)):
            comment.extract()

        self._remove_elements(soup.find_all(['a', 'div'], class_='icon-container'))
        self._remove_elements(soup.find_all(style=True))

        for element in soup.find_all(CONTAINER_TAGS):
            self._unwrap_element(element)

        for line_break in soup.find_all('br'):
            line_break.replace_with('\n')

        # Whatever <p> is left was never closed or never opened
        for paragraph in soup.find_all('p'):
            paragraph.insert_before('\n')
            paragraph.insert_after('\n')
            paragraph.unwrap()

        return soup.decode_contents(formatter=None).replace('\xa0', ' ')

    def _remove_elements(self, elements) -> None:
        for element in elements:
            if element.decomposed:
                continue
            self.logger.debug(f"Removing element with content: {element.name} {element.get('class', '')}")
            element.decompose()

    def _unwrap_element(self, element: Tag) -> None:
        """Unwrap element while preserving child content."""
        element.unwrap()


def normalize_whitespace(text: str) -> str:
    """Collapse runs of blank lines to one and trim the result."""
    text = TRAILING_SPACE_PATTERN.sub('\n', text)
    text = BLANK_RUN_PATTERN.sub('\n\n', text)
    return text.strip()


__all__ = ['HtmlCleaner', 'strip_block_comments', 'normalize_whitespace']
