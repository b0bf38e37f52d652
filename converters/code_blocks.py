"""Code block rewriting for block-editor and syntax highlighter markup."""

import logging
import re
from typing import Dict, Mapping, Optional

from .rules import PlaceholderStash, decode_entities

logger = logging.getLogger('wordpress_mdx_migrator.converters.code_blocks')

DEFAULT_LANGUAGE = 'javascript'
SYNTAXHIGHLIGHTER_DEFAULT_LANGUAGE = 'bash'
DEFAULT_LANGUAGE_ALIASES: Dict[str, str] = {
    'js': 'javascript',
    'jscript': 'javascript',
    'markup': 'html',
}

CODE_BLOCK_PATTERN = re.compile(
    r'<!--\s*wp:code\s*(\{.*?\})?\s*-->\s*<pre\b[^>]*>\s*<code\b([^>]*)>(.*?)</code>\s*</pre>\s*'
    r'<!--\s*/wp:code\s*-->',
    re.IGNORECASE | re.DOTALL
)
SYNTAXHIGHLIGHTER_BLOCK_PATTERN = re.compile(
    r'<!--\s*wp:syntaxhighlighter/code\s*(\{.*?\})?\s*-->\s*<pre\b[^>]*>(.*?)</pre>\s*'
    r'<!--\s*/wp:syntaxhighlighter/code\s*-->',
    re.IGNORECASE | re.DOTALL
)
BARE_CODE_PATTERN = re.compile(
    r'<pre\b[^>]*class="[^"]*\bwp-block-code\b[^"]*"[^>]*>\s*<code\b([^>]*)>(.*?)</code>\s*</pre>',
    re.IGNORECASE | re.DOTALL
)
BARE_SYNTAXHIGHLIGHTER_PATTERN = re.compile(
    r'<pre\b[^>]*class="[^"]*\bwp-block-syntaxhighlighter-code\b[^"]*"[^>]*>(.*?)</pre>',
    re.IGNORECASE | re.DOTALL
)

CLASS_LANGUAGE_PATTERN = re.compile(r'class\s*=\s*["\'][^"\']*\blanguage-([\w+#.-]+)', re.IGNORECASE)
LANG_ATTRIBUTE_PATTERN = re.compile(r'(?<![\w-])lang\s*=\s*["\']([^"\']+)["\']', re.IGNORECASE)
METADATA_LANGUAGE_PATTERN = re.compile(r'"language"\s*:\s*"([^"]+)"')


class CodeBlockConverter:
    """
    Converts code blocks to fenced code.

    Language priority for block-editor code: ``language-*`` class, then the
    ``lang`` attribute, then the block metadata, then the default. Code is
    trimmed and entity-decoded once, then stashed so later rules never see
    it.
    """

    def __init__(
        self,
        stash: PlaceholderStash,
        default_language: str = DEFAULT_LANGUAGE,
        syntaxhighlighter_default_language: str = SYNTAXHIGHLIGHTER_DEFAULT_LANGUAGE,
        language_aliases: Optional[Mapping[str, str]] = None
    ):
        self.stash = stash
        self.default_language = default_language
        self.syntaxhighlighter_default_language = syntaxhighlighter_default_language
        self.language_aliases = dict(
            DEFAULT_LANGUAGE_ALIASES if language_aliases is None else language_aliases
        )

    def convert(self, text: str) -> str:
        """Rewrite every recognized code block shape, commented forms first."""
        text = CODE_BLOCK_PATTERN.sub(self._replace_code_block, text)
        text = SYNTAXHIGHLIGHTER_BLOCK_PATTERN.sub(self._replace_syntaxhighlighter_block, text)
        text = BARE_CODE_PATTERN.sub(
            lambda m: self._fence(self.resolve_language(m.group(1)), m.group(2)), text
        )
        return BARE_SYNTAXHIGHLIGHTER_PATTERN.sub(
            lambda m: self._fence(self.syntaxhighlighter_default_language, m.group(1)), text
        )

    def resolve_language(self, code_attributes: str, metadata: Optional[str] = None) -> str:
        """Pick the fence language from the code element and block metadata."""
        for pattern, source in ((CLASS_LANGUAGE_PATTERN, code_attributes),
                                (LANG_ATTRIBUTE_PATTERN, code_attributes),
                                (METADATA_LANGUAGE_PATTERN, metadata)):
            match = pattern.search(source or '')
            if match:
                return self.normalize_language(match.group(1))
        return self.normalize_language(self.default_language)

    def normalize_language(self, language: str) -> str:
        language = language.strip()
        return self.language_aliases.get(language, self.language_aliases.get(language.lower(), language))

    def _replace_code_block(self, match) -> str:
        metadata, attributes, code = match.group(1), match.group(2), match.group(3)
        return self._fence(self.resolve_language(attributes, metadata), code)

    def _replace_syntaxhighlighter_block(self, match) -> str:
        metadata, code = match.group(1), match.group(2)
        language = self.syntaxhighlighter_default_language
        found = METADATA_LANGUAGE_PATTERN.search(metadata or '')
        if found:
            language = found.group(1)
        return self._fence(self.normalize_language(language), code)

    def _fence(self, language: str, code: str) -> str:
        code = decode_entities(code.strip())
        token = self.stash.stash(f"```{language}\n{code}\n```")
        return f"\n{token}\n"


__all__ = [
    'CodeBlockConverter',
    'DEFAULT_LANGUAGE',
    'SYNTAXHIGHLIGHTER_DEFAULT_LANGUAGE',
    'DEFAULT_LANGUAGE_ALIASES',
]
