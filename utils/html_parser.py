"""
HTML cleanup for Wikipedia search excerpts.
The REST search API wraps matched terms in <span class="searchmatch"> markup.
"""
import re
from bs4 import BeautifulSoup


class HTMLParser:
    """Turns Wikipedia excerpt snippets into plain text suitable for a prompt."""

    # Phrasing from disambiguation pages that reads badly out of context
    EXCERPT_REPLACEMENTS = [
        (re.compile(r'Disambiguation – '), ''),
        (re.compile(r"If you're looking for "), ''),
        (re.compile(r'\bsee\b'), 'refer to'),
    ]

    _whitespace: re.Pattern = re.compile(r'\s+')

    @staticmethod
    def strip_tags(html: str) -> str:
        """Remove markup and collapse whitespace."""
        if not html:
            return ""

        if '<' not in html:
            text = html
        else:
            text = BeautifulSoup(html, 'html.parser').get_text()

        return HTMLParser._whitespace.sub(' ', text).strip()

    @staticmethod
    def clean_excerpt(excerpt: str) -> str:
        """
        Clean a search excerpt for inclusion in the AI context.

        Args:
            excerpt: Raw excerpt returned by the search endpoint

        Returns:
            Plain-text excerpt with disambiguation boilerplate rewritten
        """
        text = HTMLParser.strip_tags(excerpt)
        for pattern, replacement in HTMLParser.EXCERPT_REPLACEMENTS:
            text = pattern.sub(replacement, text)
        return text
