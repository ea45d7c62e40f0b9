"""Page classifier composing a strategy with failure containment."""

from digest.log import get_logger
from digest.models import ArticleCandidate, PageDocument
from digest.types import ClassifierMode

from .base import ClassificationStrategy, ContentExtractor
from .heuristic import HeuristicStrategy
from .readability_extractor import ReadabilityExtractor

logger = get_logger(__name__)


class ExtractorStrategy(ClassificationStrategy):
    """Lets a content extractor decide readability and produce the text."""

    def __init__(self, extractor: ContentExtractor) -> None:
        self.extractor = extractor

    def classify(self, document: PageDocument) -> ArticleCandidate:
        if not self.extractor.is_readerable(document):
            return ArticleCandidate.negative()

        extracted = self.extractor.extract(document)
        if extracted is None:
            return ArticleCandidate.negative()

        return ArticleCandidate(
            is_article=True, title=extracted.title, content=extracted.text
        )


class ContentClassifier:
    """Classifies pages; never raises."""

    def __init__(self, strategy: ClassificationStrategy) -> None:
        self.strategy = strategy

    def classify(self, document: PageDocument) -> ArticleCandidate:
        """Classify a page, degrading to "not an article" on any failure.

        Args:
            document: Page to classify

        Returns:
            Article candidate for this page load
        """
        try:
            candidate = self.strategy.classify(document)
        except Exception as e:
            logger.warning(
                f"Classification with {self.strategy.get_strategy_name()} "
                f"failed for {document.url!r}: {e}"
            )
            return ArticleCandidate.negative()

        logger.info(
            f"Page {document.url!r} classified as "
            f"{'article' if candidate.is_article else 'non-article'}"
        )
        return candidate


def create_classifier(
    mode: ClassifierMode, extractor: ContentExtractor | None = None
) -> ContentClassifier:
    """Build a classifier for the configured mode.

    Args:
        mode: Classification strategy to use
        extractor: Extractor for extractor mode (defaults to readability)

    Returns:
        Configured classifier
    """
    if mode == ClassifierMode.EXTRACTOR:
        return ContentClassifier(ExtractorStrategy(extractor or ReadabilityExtractor()))
    return ContentClassifier(HeuristicStrategy())
