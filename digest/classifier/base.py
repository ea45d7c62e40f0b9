"""Base classes for page classification."""

from abc import ABC, abstractmethod

from bs4 import BeautifulSoup

from digest.models import ArticleCandidate, ExtractedContent, PageDocument


class ContentExtractor(ABC):
    """Pluggable readable-content extraction capability."""

    @abstractmethod
    def is_readerable(self, document: PageDocument) -> bool:
        """Check whether the page probably holds readable prose.

        Args:
            document: Page to inspect

        Returns:
            True if extraction is worth attempting
        """
        pass

    @abstractmethod
    def extract(self, document: PageDocument) -> ExtractedContent | None:
        """Extract the title and plain-text body.

        Args:
            document: Page to extract from

        Returns:
            Extracted content, or None when nothing readable was found
        """
        pass


class ClassificationStrategy(ABC):
    """Decides whether a page is an article."""

    @abstractmethod
    def classify(self, document: PageDocument) -> ArticleCandidate:
        """Classify a page.

        Implementations may raise; ContentClassifier absorbs the error.
        """
        pass

    def get_strategy_name(self) -> str:
        return self.__class__.__name__.replace("Strategy", "").lower()


def parse_document(document: PageDocument) -> BeautifulSoup:
    """Parse the document into a fresh tree.

    The tree is detached from the caller's document, so removing nodes from it
    never alters the page.
    """
    return BeautifulSoup(document.html, "lxml")
