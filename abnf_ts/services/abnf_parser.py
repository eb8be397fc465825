"""
ABNF parser adapter.

Parses ABNF source text with the tree-sitter-abnf grammar and converts the
resulting tree into SyntaxNode models, so the translator never touches
tree-sitter objects directly.
"""

import ctypes
from pathlib import Path
from typing import Optional, Union

import tree_sitter

from abnf_ts.models.syntax_node import SyntaxNode
from abnf_ts.utils.logging import get_logger

logger = get_logger(__name__)


class AbnfParseError(Exception):
    """Raised when the ABNF grammar cannot be loaded or the source cannot be parsed."""
    pass


def load_language(library_path: Union[str, Path], language_name: str = "abnf") -> tree_sitter.Language:
    """
    Load a compiled tree-sitter grammar from a shared library.

    Args:
        library_path: Path to the shared library built from tree-sitter-abnf
        language_name: Grammar name; the library must export ``tree_sitter_<name>``

    Returns:
        tree_sitter.Language for the grammar

    Raises:
        AbnfParseError: If the library or its entry point cannot be loaded
    """
    path = Path(library_path)
    if not path.exists():
        raise AbnfParseError(
            f"Tree-sitter library not found at {path}. "
            "Build tree-sitter-abnf as a shared library first."
        )

    try:
        library = ctypes.cdll.LoadLibrary(str(path.resolve()))
        entry_point = getattr(library, f"tree_sitter_{language_name}")
    except (OSError, AttributeError) as e:
        raise AbnfParseError(f"Failed to load {language_name} grammar from {path}: {e}")

    entry_point.restype = ctypes.c_void_p
    new_capsule = ctypes.pythonapi.PyCapsule_New
    new_capsule.restype = ctypes.py_object
    new_capsule.argtypes = (ctypes.c_void_p, ctypes.c_char_p, ctypes.c_void_p)
    return tree_sitter.Language(new_capsule(entry_point(), b"tree_sitter.Language", None))


class AbnfParser:
    """Parses ABNF source into SyntaxNode trees using tree-sitter."""

    def __init__(
        self,
        library_path: Optional[Path] = None,
        language_name: Optional[str] = None,
        language: Optional[tree_sitter.Language] = None,
    ):
        """
        Initialize the ABNF parser.

        Args:
            library_path: Shared library path. If None, uses settings.
            language_name: Grammar name inside the library. If None, uses settings.
            language: Preloaded language, bypassing the shared library.
        """
        if language is None:
            from abnf_ts.config import settings
            language = load_language(
                library_path or settings.abnf_language_library,
                language_name or settings.abnf_language_name,
            )

        self._parser = tree_sitter.Parser(language)
        logger.info("ABNF parser initialized successfully")

    def parse(self, source: str) -> SyntaxNode:
        """
        Parse ABNF source text.

        Args:
            source: ABNF grammar text

        Returns:
            SyntaxNode for the root of the concrete syntax tree
        """
        content = source.encode("utf8")
        tree = self._parser.parse(content)
        if tree.root_node is None:
            raise AbnfParseError("Failed to parse ABNF source")

        if tree.root_node.has_error:
            logger.warning("ABNF source contains syntax errors; affected rules will be reported as unsupported")

        return convert_node(tree.root_node, content)

    def parse_file(self, path: Path) -> SyntaxNode:
        try:
            source = Path(path).read_text(encoding="utf-8")
        except OSError as e:
            raise AbnfParseError(f"Failed to read ABNF source {path}: {e}")

        root = self.parse(source)
        logger.debug(f"Successfully parsed ABNF file: {path}")
        return root


def convert_node(ts_node: tree_sitter.Node, content: bytes) -> SyntaxNode:
    """
    Convert tree-sitter Node to SyntaxNode model.

    Args:
        ts_node: tree-sitter Node
        content: Source bytes the tree was parsed from

    Returns:
        SyntaxNode model instance
    """
    return SyntaxNode(
        kind=ts_node.type,
        named=ts_node.is_named,
        text=content[ts_node.start_byte:ts_node.end_byte].decode("utf8", errors="replace"),
        start_line=ts_node.start_point[0] + 1,  # Convert to 1-indexed
        start_column=ts_node.start_point[1],
        children=[convert_node(child, content) for child in ts_node.children],
    )
