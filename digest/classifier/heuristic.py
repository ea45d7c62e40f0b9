"""Signal-based article detection on the raw page."""

import re

from bs4 import BeautifulSoup

from digest.constants import (
    ARTICLE_URL_PATTERN,
    ARTICLE_WORD_THRESHOLD,
    INVISIBLE_TAGS,
)
from digest.log import get_logger
from digest.models import ArticleCandidate, PageDocument

from .base import ClassificationStrategy, parse_document

logger = get_logger(__name__)

_URL_RE = re.compile(ARTICLE_URL_PATTERN, re.IGNORECASE)


class HeuristicStrategy(ClassificationStrategy):
    """Flags a page as an article when any single signal fires.

    Signals: an <article> element, og:type=article, an article-ish keyword in
    the URL, or more than ``word_threshold`` visible words. The summary input
    is the raw page markup.
    """

    def __init__(self, word_threshold: int = ARTICLE_WORD_THRESHOLD) -> None:
        self.word_threshold = word_threshold

    def classify(self, document: PageDocument) -> ArticleCandidate:
        soup = parse_document(document)

        is_article = (
            self.has_article_element(soup)
            or self.has_article_og_type(soup)
            or self.url_matches(document.url)
            or self.visible_word_count(soup) > self.word_threshold
        )
        logger.debug(f"Heuristic classification of {document.url!r}: {is_article}")

        return ArticleCandidate(is_article=is_article, title="", content=document.html)

    @staticmethod
    def has_article_element(soup: BeautifulSoup) -> bool:
        return soup.find("article") is not None

    @staticmethod
    def has_article_og_type(soup: BeautifulSoup) -> bool:
        og_type = soup.find("meta", attrs={"property": "og:type"})
        if og_type is None:
            return False
        return str(og_type.get("content", "")).strip() == "article"

    @staticmethod
    def url_matches(url: str) -> bool:
        return bool(_URL_RE.search(url))

    @staticmethod
    def visible_word_count(soup: BeautifulSoup) -> int:
        """Count whitespace-separated words outside scripts and styles.

        Mutates ``soup``; callers pass the private tree from parse_document.
        """
        root = soup.body or soup
        for node in root.find_all(list(INVISIBLE_TAGS)):
            node.decompose()
        return len(root.get_text(" ").split())
