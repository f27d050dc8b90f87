"""Symbol extraction from generated source files."""

from extract.base import SourceExtractor
from extract.python import PythonExtractor
from extract.query import ExtractionError
from extract.typescript import TypeScriptExtractor

__all__ = [
    "ExtractionError",
    "PythonExtractor",
    "SourceExtractor",
    "TypeScriptExtractor",
]
