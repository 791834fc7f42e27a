"""Tree-sitter module loader for JavaScript/TypeScript sources."""
from dataclasses import dataclass
from pathlib import Path
from typing import Iterator, Optional, Tuple
from tree_sitter import Language, Node, Parser, Tree
import tree_sitter_javascript as tsjavascript
import tree_sitter_typescript as tstypescript

from .diagnostics import ParseError


class LanguageParser:
    """JavaScript/TypeScript parser using the tree-sitter v0.25+ API."""

    SUPPORTED_LANGUAGES = {
        '.js': 'javascript',
        '.jsx': 'javascript',
        '.mjs': 'javascript',
        '.cjs': 'javascript',
        '.ts': 'typescript',
        '.mts': 'typescript',
        '.cts': 'typescript',
        '.tsx': 'tsx',
    }

    def __init__(self, language: str):
        """Initialize parser for given language (javascript, typescript, tsx).

        Args:
            language: One of 'javascript', 'typescript', 'tsx'

        Raises:
            ValueError: If language is not supported
        """
        self.language = language
        self.parser = self._create_parser()

    def _create_parser(self) -> Parser:
        """Factory method using tree-sitter v0.25+ API.

        Returns:
            Configured Parser instance

        Raises:
            ValueError: If language is not supported
        """
        if self.language == 'javascript':
            lang = Language(tsjavascript.language())
        elif self.language == 'typescript':
            lang = Language(tstypescript.language_typescript())
        elif self.language == 'tsx':
            lang = Language(tstypescript.language_tsx())
        else:
            raise ValueError(f"Unsupported language: {self.language}")

        return Parser(lang)

    def parse_source(self, source_code: bytes) -> Tree:
        """Parse raw source bytes."""
        return self.parser.parse(source_code)

    @classmethod
    def language_for(cls, file_path: str | Path) -> Optional[str]:
        """Language name for a file, or None if the extension is not supported."""
        return cls.SUPPORTED_LANGUAGES.get(Path(file_path).suffix.lower())

    @classmethod
    def from_file_extension(cls, file_path: str | Path) -> Optional['LanguageParser']:
        """Create parser based on file extension.

        Args:
            file_path: Path to determine language from

        Returns:
            LanguageParser instance, or None if extension not supported
        """
        language = cls.language_for(file_path)
        if language:
            return cls(language)
        return None


@dataclass(frozen=True, eq=False)
class Module:
    """A parsed source module. Identity is its resolved path."""
    path: Path
    source: bytes
    tree: Tree
    language: str

    @property
    def root(self) -> Node:
        return self.tree.root_node

    @property
    def declarations(self) -> Tuple[Node, ...]:
        """Top-level statements in source order."""
        return tuple(self.root.named_children)

    @property
    def text(self) -> str:
        return self.source.decode('utf-8')

    @property
    def is_declaration_file(self) -> bool:
        return self.path.name.endswith(('.d.ts', '.d.mts', '.d.cts'))

    @property
    def has_jsx(self) -> bool:
        return any(node.type in JSX_NODE_TYPES for node in walk(self.root))


JSX_NODE_TYPES = {'jsx_element', 'jsx_self_closing_element'}


def walk(node: Node) -> Iterator[Node]:
    """Iteratively traverse tree using a stack and yield all nodes in source order."""
    stack = [node]
    while stack:
        current = stack.pop()
        yield current
        # Add children in reverse order to maintain left-to-right traversal
        stack.extend(reversed(current.children))


def node_text(node: Node) -> str:
    return node.text.decode('utf-8', errors='replace')


def string_value(node: Node) -> Optional[str]:
    """Literal value of a `string` node or a substitution-free template string."""
    if node.type == 'string':
        return node_text(node)[1:-1]
    if node.type == 'template_string':
        if any(child.type == 'template_substitution' for child in node.named_children):
            return None
        return node_text(node)[1:-1]
    return None


def line_of(node: Node) -> int:
    """1-based start line of a node."""
    return node.start_point[0] + 1


def _first_syntax_error(root: Node) -> Optional[Node]:
    for node in walk(root):
        if node.type == 'ERROR' or node.is_missing:
            return node
    return None


def load_module(file_path: str | Path) -> Module:
    """Read and parse a module.

    Only parses the file; project files are never executed.

    Args:
        file_path: Path to a JavaScript/TypeScript source file

    Returns:
        Parsed Module

    Raises:
        ParseError: If the file cannot be read, decoded, or parsed cleanly
    """
    path = Path(file_path).resolve()
    parser = LanguageParser.from_file_extension(path)
    if parser is None:
        raise ParseError(path, f"unsupported file type '{path.suffix}'")

    try:
        with open(path, 'rb') as f:
            source_code = f.read()
        source_code.decode('utf-8')
    except UnicodeDecodeError:
        raise ParseError(path, "file is not valid UTF-8") from None
    except OSError as exc:
        raise ParseError(path, f"cannot read file ({exc.strerror or exc})") from None

    tree = parser.parse_source(source_code)
    if tree.root_node.has_error:
        error_node = _first_syntax_error(tree.root_node)
        line = line_of(error_node) if error_node is not None else None
        where = f" on line {line}" if line is not None else ""
        raise ParseError(path, f"syntax error{where}", line)

    return Module(path=path, source=source_code, tree=tree, language=parser.language)
