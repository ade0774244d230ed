"""Unit discovery: standard library classification and import loading."""

from depviz.loader.classifier import StandardClassifier, default_classifier, is_standard
from depviz.loader.loader import TEST_FILE_PATTERNS, UnitLoader, is_test_file, load_units
from depviz.loader.unit import LIST_ERROR, PARSE_ERROR, Unit, UnitError, missing_unit

__all__ = [
    "LIST_ERROR",
    "PARSE_ERROR",
    "StandardClassifier",
    "TEST_FILE_PATTERNS",
    "Unit",
    "UnitError",
    "UnitLoader",
    "default_classifier",
    "is_standard",
    "is_test_file",
    "load_units",
    "missing_unit",
]
