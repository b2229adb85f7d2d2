"""Tree-sitter powered source fact extractor for JavaScript and TypeScript."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Callable, Dict, Iterable, Iterator, List, Optional, Sequence, Tuple, Union

import tree_sitter_javascript
import tree_sitter_typescript
from tree_sitter import Language, Node, Parser

from .base import SourceExtractor
from ..logging import get_logger
from ..models import FunctionSpan, GlobalMutation, SourceFacts

_GRAMMARS: Dict[str, Callable[[], object]] = {
    "javascript": tree_sitter_javascript.language,
    "typescript": tree_sitter_typescript.language_typescript,
    "tsx": tree_sitter_typescript.language_tsx,
}

_LANGUAGE_BY_SUFFIX = {
    ".js": "javascript",
    ".jsx": "javascript",
    ".mjs": "javascript",
    ".cjs": "javascript",
    ".ts": "typescript",
    ".mts": "typescript",
    ".cts": "typescript",
    ".tsx": "tsx",
}

_FUNCTION_NODES = frozenset(
    {
        "function_declaration",
        "generator_function_declaration",
        "function_expression",
        "function",
        "generator_function",
        "arrow_function",
        "method_definition",
    }
)
_FUNCTION_VALUES = frozenset({"function_expression", "function", "generator_function", "arrow_function"})
_FUNCTION_DECLARATIONS = frozenset({"function_declaration", "generator_function_declaration"})
_VARIABLE_DECLARATIONS = frozenset({"lexical_declaration", "variable_declaration"})
_REASSIGNABLE_KINDS = frozenset({"let", "var"})


# The only top-level shapes the extractor inspects. Every other node kind is
# dropped while the program body is read.


@dataclass(frozen=True)
class _FunctionDecl:
    name: str
    exported: bool
    has_return_type: bool


@dataclass(frozen=True)
class _Binding:
    name: str
    line: int
    function_valued: bool
    has_return_type: bool


@dataclass(frozen=True)
class _VariableDecl:
    kind: str
    exported: bool
    bindings: Tuple[_Binding, ...]


_TopLevel = Union[_FunctionDecl, _VariableDecl]


class TreeSitterExtractor(SourceExtractor):
    """Extracts function spans, imports, comments and declarations."""

    def __init__(self) -> None:
        self._parsers: Dict[str, Parser] = {}
        self.logger = get_logger("analyzers.tree_sitter")

    def language_for(self, path: str) -> Optional[str]:
        lower = path.lower()
        if lower.endswith(".d.ts"):
            return None
        for suffix, language in _LANGUAGE_BY_SUFFIX.items():
            if lower.endswith(suffix):
                return language
        return None

    def extract(self, text: str, language: str) -> SourceFacts:
        lines = text.split("\n")
        import_count = count_import_lines(lines)
        comment_lines = count_comment_lines(lines)
        total_lines = len(lines)

        parser = self._get_parser(language)
        tree = parser.parse(text.encode("utf-8"))
        root = tree.root_node
        if root.has_error:
            self.logger.debug("Parse errors in %s source; function facts skipped", language)
            return SourceFacts(
                import_count=import_count,
                comment_lines=comment_lines,
                total_lines=total_lines,
            )

        declarations = list(_read_program(root))
        return SourceFacts(
            functions=tuple(_collect_functions(root)),
            import_count=import_count,
            comment_lines=comment_lines,
            total_lines=total_lines,
            global_mutations=tuple(_global_mutations(declarations)),
            missing_return_types=_missing_return_types(declarations),
        )

    def _get_parser(self, language: str) -> Parser:
        parser = self._parsers.get(language)
        if parser is not None:
            return parser
        factory = _GRAMMARS.get(language)
        if factory is None:
            raise ValueError(f"Unsupported language: {language}")
        parser = Parser(Language(factory()))
        self._parsers[language] = parser
        return parser


def count_import_lines(lines: Sequence[str]) -> int:
    """Count ``import`` statements and ``require`` bindings, one per line."""
    count = 0
    for line in lines:
        stripped = line.strip()
        if stripped.startswith(("import ", "import{")):
            count += 1
        elif stripped.startswith(("const ", "let ", "var ")) and "require(" in stripped:
            count += 1
    return count


def count_comment_lines(lines: Sequence[str]) -> int:
    """Count lines that are ``//`` comments or inside a ``/* */`` block."""
    count = 0
    in_block = False
    for line in lines:
        stripped = line.strip()
        if in_block:
            count += 1
            if "*/" in stripped:
                in_block = False
        elif stripped.startswith("//"):
            count += 1
        elif stripped.startswith("/*"):
            count += 1
            if "*/" not in stripped:
                in_block = True
    return count


def _text(node: Optional[Node]) -> str:
    if node is None or node.text is None:
        return ""
    return node.text.decode("utf-8", errors="ignore")


def _line(node: Node) -> int:
    return node.start_point[0] + 1


def _walk(root: Node) -> Iterator[Node]:
    stack = [root]
    while stack:
        node = stack.pop()
        yield node
        stack.extend(reversed(node.children))


def _collect_functions(root: Node) -> Iterable[FunctionSpan]:
    for node in _walk(root):
        if not node.is_named or node.type not in _FUNCTION_NODES:
            continue
        line_count = node.end_point[0] - node.start_point[0] + 1
        yield FunctionSpan(name=_function_name(node), line_count=line_count)


def _function_name(node: Node) -> str:
    name = _text(node.child_by_field_name("name"))
    if name:
        return name
    parent = node.parent
    if parent is not None and parent.type == "variable_declarator":
        bound = parent.child_by_field_name("name")
        if bound is not None and bound.type == "identifier":
            return _text(bound)
    prefix = "arrow" if node.type == "arrow_function" else "anonymous"
    return f"{prefix}@{_line(node)}"


def _read_program(root: Node) -> Iterable[_TopLevel]:
    for child in root.named_children:
        if child.type in _VARIABLE_DECLARATIONS:
            yield _variable_decl(child, exported=False)
        elif child.type in _FUNCTION_DECLARATIONS:
            yield _function_decl(child, exported=False)
        elif child.type == "export_statement":
            item = _export_item(child)
            if item is not None:
                yield item


def _export_item(node: Node) -> Optional[_TopLevel]:
    declaration = node.child_by_field_name("declaration")
    if declaration is not None:
        if declaration.type in _VARIABLE_DECLARATIONS:
            return _variable_decl(declaration, exported=True)
        if declaration.type in _FUNCTION_DECLARATIONS:
            return _function_decl(declaration, exported=True)
        return None
    is_default = any(child.type == "default" for child in node.children)
    value = node.child_by_field_name("value")
    if is_default and value is not None and value.is_named and value.type in _FUNCTION_VALUES:
        return _function_decl(value, exported=True)
    return None


def _function_decl(node: Node, *, exported: bool) -> _FunctionDecl:
    return _FunctionDecl(
        name=_text(node.child_by_field_name("name")) or "default",
        exported=exported,
        has_return_type=node.child_by_field_name("return_type") is not None,
    )


def _variable_decl(node: Node, *, exported: bool) -> _VariableDecl:
    if node.type == "variable_declaration":
        kind = "var"
    else:
        kind_node = node.child_by_field_name("kind")
        if kind_node is None and node.children:
            kind_node = node.children[0]
        kind = _text(kind_node)

    bindings: List[_Binding] = []
    for declarator in node.named_children:
        if declarator.type != "variable_declarator":
            continue
        name_node = declarator.child_by_field_name("name")
        if name_node is None or name_node.type != "identifier":
            continue
        value = declarator.child_by_field_name("value")
        function_valued = value is not None and value.is_named and value.type in _FUNCTION_VALUES
        bindings.append(
            _Binding(
                name=_text(name_node),
                line=_line(name_node),
                function_valued=function_valued,
                has_return_type=function_valued
                and value.child_by_field_name("return_type") is not None,
            )
        )
    return _VariableDecl(kind=kind, exported=exported, bindings=tuple(bindings))


def _global_mutations(declarations: Iterable[_TopLevel]) -> Iterable[GlobalMutation]:
    for item in declarations:
        if isinstance(item, _VariableDecl) and item.kind in _REASSIGNABLE_KINDS:
            for binding in item.bindings:
                yield GlobalMutation(name=binding.name, line=binding.line)


def _missing_return_types(declarations: Iterable[_TopLevel]) -> int:
    count = 0
    for item in declarations:
        if not item.exported:
            continue
        if isinstance(item, _FunctionDecl):
            if not item.has_return_type:
                count += 1
        else:
            count += sum(
                1 for binding in item.bindings if binding.function_valued and not binding.has_return_type
            )
    return count


__all__ = ["TreeSitterExtractor", "count_comment_lines", "count_import_lines"]
