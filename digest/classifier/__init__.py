"""Article detection for loaded pages."""

from .base import ClassificationStrategy, ContentExtractor
from .classifier import ContentClassifier, ExtractorStrategy, create_classifier
from .heuristic import HeuristicStrategy
from .readability_extractor import ReadabilityExtractor

__all__ = [
    "ClassificationStrategy",
    "ContentClassifier",
    "ContentExtractor",
    "ExtractorStrategy",
    "HeuristicStrategy",
    "ReadabilityExtractor",
    "create_classifier",
]
