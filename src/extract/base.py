"""Shared plumbing for tree-sitter based symbol extractors."""

from __future__ import annotations

import logging
from abc import ABC, abstractmethod
from typing import TYPE_CHECKING

from tree_sitter import Language, Parser

from extract.query import ExtractionError, first_error_line

if TYPE_CHECKING:
    from pathlib import Path

    from tree_sitter import Node, Tree

    from symbols.models import SourceDetails

logger = logging.getLogger(__name__)


class SourceExtractor(ABC):
    """Parses source text and reduces the tree to ``SourceDetails``.

    Subclasses supply the grammar and ``extract_root``. An instance holds its
    own parser and no per-file state, so one instance can serve every file of
    a comparison run.
    """

    language_name = "unknown"

    def __init__(self, language: Language) -> None:
        self._parser = Parser(language)

    @property
    def name(self) -> str:
        """Extractor name for logging and identification."""
        return self.language_name

    def parse(self, source: bytes) -> Tree:
        return self._parser.parse(source)

    def parse_file(self, file_path: Path) -> Tree:
        return self.parse(file_path.read_bytes())

    def extract(self, tree: Tree) -> SourceDetails:
        root = tree.root_node
        error_line = first_error_line(root)
        if error_line is not None:
            logger.warning(
                "%s parser reported a syntax error near line %d; "
                "extracting what the tree contains",
                self.name,
                error_line,
            )
        return self.extract_root(root)

    @abstractmethod
    def extract_root(self, root: Node) -> SourceDetails:
        """Reduce a parsed root node to the symbols it declares."""

    def extract_source(self, source: str | bytes) -> SourceDetails:
        if isinstance(source, str):
            source = source.encode("utf8")
        return self.extract(self.parse(source))

    def extract_file(self, file_path: Path) -> SourceDetails:
        """Parse and extract one file; shape errors carry the file path."""
        logger.debug("Extracting %s symbols from %s", self.name, file_path)
        tree = self.parse_file(file_path)
        try:
            return self.extract(tree)
        except ExtractionError as exc:
            raise exc.with_path(file_path) from exc


__all__ = ["SourceExtractor"]
