"""Readable-content extraction backed by readability-lxml."""

import math
import re

from bs4 import BeautifulSoup, Tag
from readability import Document

from digest.constants import READERABLE_MIN_CONTENT_LENGTH, READERABLE_MIN_SCORE
from digest.exceptions import ClassificationError
from digest.log import get_logger
from digest.models import ExtractedContent, PageDocument

from .base import ContentExtractor, parse_document

logger = get_logger(__name__)

UNLIKELY_CANDIDATES = re.compile(
    r"-ad-|ai2html|banner|breadcrumbs|combx|comment|community|cover-wrap|disqus|"
    r"extra|footer|gdpr|header|legends|menu|related|remark|replies|rss|shoutbox|"
    r"sidebar|skyscraper|social|sponsor|supplemental|ad-break|agegate|pagination|"
    r"pager|popup|yom-remote",
    re.IGNORECASE,
)
OK_MAYBE_CANDIDATE = re.compile(
    r"and|article|body|column|content|main|shadow", re.IGNORECASE
)


class ReadabilityExtractor(ContentExtractor):
    """Extracts article prose with readability-lxml.

    ``is_readerable`` scores paragraph-like nodes: every visible, likely
    candidate with at least ``min_content_length`` characters of text adds
    ``sqrt(length - min_content_length)``; the page is readable once the
    score exceeds ``min_score``.
    """

    def __init__(
        self,
        min_content_length: int = READERABLE_MIN_CONTENT_LENGTH,
        min_score: float = READERABLE_MIN_SCORE,
    ) -> None:
        self.min_content_length = min_content_length
        self.min_score = min_score

    def is_readerable(self, document: PageDocument) -> bool:
        soup = parse_document(document)
        score = 0.0

        for node in self._candidate_nodes(soup):
            if not self._is_visible(node):
                continue
            match_string = " ".join(node.get("class", [])) + " " + node.get("id", "")
            if UNLIKELY_CANDIDATES.search(match_string) and not OK_MAYBE_CANDIDATE.search(
                match_string
            ):
                continue
            if node.name == "p" and node.find_parent("li") is not None:
                continue

            text_length = len(node.get_text().strip())
            if text_length < self.min_content_length:
                continue

            score += math.sqrt(text_length - self.min_content_length)
            if score > self.min_score:
                return True

        return False

    def extract(self, document: PageDocument) -> ExtractedContent | None:
        try:
            readable = Document(document.html, url=document.url or None)
            title = readable.short_title() or ""
            content_html = readable.summary(html_partial=True)
        except Exception as e:
            raise ClassificationError(f"readability failed: {e}") from e

        text = BeautifulSoup(content_html, "lxml").get_text(" ", strip=True)
        if not text:
            logger.debug(f"No readable text extracted from {document.url!r}")
            return None

        return ExtractedContent(title=title.strip(), text=text)

    @staticmethod
    def _candidate_nodes(soup: BeautifulSoup) -> list[Tag]:
        nodes: list[Tag] = list(soup.find_all(["p", "pre", "article"]))
        seen = {id(node) for node in nodes}
        # <div>text<br>text</div> layouts count as paragraphs
        for br in soup.select("div > br"):
            parent = br.parent
            if isinstance(parent, Tag) and id(parent) not in seen:
                seen.add(id(parent))
                nodes.append(parent)
        return nodes

    @staticmethod
    def _is_visible(node: Tag) -> bool:
        style = str(node.get("style", "")).replace(" ", "").lower()
        if "display:none" in style:
            return False
        if node.has_attr("hidden"):
            return False
        aria_hidden = node.get("aria-hidden")
        if aria_hidden == "true" and "fallback-image" not in node.get("class", []):
            return False
        return True
