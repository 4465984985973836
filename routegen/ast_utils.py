"""AST utilities and import collection for code generation.

This module provides helper functions for building Python AST nodes
and utilities for collecting and organizing imports during code generation.
"""

import ast
import sys
from collections.abc import Iterable

from routegen.ir import ImportRef, TypeExpr

__all__ = [
    # AST helpers
    '_name',
    '_argument',
    '_assign',
    '_call',
    '_dict',
    '_fstring',
    '_async_method',
    '_class',
    '_all',
    '_type',
    # Import collection
    'ImportCollector',
]


def _name(name: str) -> ast.Name:
    return ast.Name(id=name, ctx=ast.Load())


def _argument(name: str, value: ast.expr | None = None) -> ast.arg:
    return ast.arg(
        arg=name,
        annotation=value,
    )


def _assign(target: ast.expr, value: ast.expr) -> ast.Assign:
    # Ensure target has Store context
    if isinstance(target, ast.Name):
        target = ast.Name(id=target.id, ctx=ast.Store())
    elif isinstance(target, ast.Attribute):
        target.ctx = ast.Store()
    return ast.Assign(
        targets=[target],
        value=value,
    )


def _call(
    func: ast.expr,
    args: list[ast.expr] | None = None,
    keywords: list[ast.keyword] | None = None,
) -> ast.Call:
    return ast.Call(
        func=func,
        args=args or [],
        keywords=keywords or [],
    )


def _dict(
    entries: list[tuple[str, ast.expr]], spread: ast.expr | None = None
) -> ast.Dict:
    """``{**spread, 'key': value, ...}``; a ``None`` key is a ``**`` entry."""
    keys: list[ast.expr | None] = []
    values: list[ast.expr] = []
    if spread is not None:
        keys.append(None)
        values.append(spread)
    for key, value in entries:
        keys.append(ast.Constant(value=key))
        values.append(value)
    return ast.Dict(keys=keys, values=values)


def _fstring(parts: list[str | ast.expr]) -> ast.expr:
    """Build an f-string from literal text and expressions.

    Collapses to a plain string constant when there is nothing to format.
    """
    if all(isinstance(part, str) for part in parts):
        return ast.Constant(value=''.join(parts))

    values: list[ast.expr] = []
    for part in parts:
        if isinstance(part, str):
            if not part:
                continue
            if values and isinstance(values[-1], ast.Constant):
                values[-1] = ast.Constant(value=values[-1].value + part)
            else:
                values.append(ast.Constant(value=part))
        else:
            values.append(
                ast.FormattedValue(value=part, conversion=-1, format_spec=None)
            )
    return ast.JoinedStr(values=values)


def _async_method(
    name: str,
    args: list[ast.arg],
    body: list[ast.stmt],
    returns: ast.expr | None = None,
) -> ast.AsyncFunctionDef:
    return ast.AsyncFunctionDef(
        name=name,
        args=ast.arguments(
            posonlyargs=[],
            args=[_argument('self')] + args,
            kwonlyargs=[],
            kw_defaults=[],
            defaults=[],
        ),
        body=body,
        decorator_list=[],
        returns=returns,
    )


def _class(name: str, body: list[ast.stmt]) -> ast.ClassDef:
    return ast.ClassDef(
        name=name,
        bases=[],
        keywords=[],
        body=body or [ast.Pass()],
        decorator_list=[],
    )


def _all(names: Iterable[str]) -> ast.Assign:
    return _assign(
        target=_name('__all__'),
        value=ast.Tuple(
            elts=[ast.Constant(value=name) for name in names], ctx=ast.Load()
        ),
    )


def _type(type_expr: TypeExpr) -> ast.expr:
    """Parse a type's source text back into an annotation expression."""
    return ast.parse(type_expr.text, mode='eval').body


# =============================================================================
# Import Collection
# =============================================================================


class ImportCollector:
    """Collects and manages imports for generated Python code.

    This class provides a centralized way to collect imports from various
    sources during code generation and convert them to AST import statements.
    It automatically deduplicates imports and sorts them for consistent output.

    Example:
        >>> collector = ImportCollector()
        >>> collector.add_import('app.models', 'User')
        >>> collector.add_ref(ImportRef('typing', 'Any'))
        >>> imports = collector.to_ast()
        >>> # Returns [ImportFrom(module='typing', names=['Any']),
        >>> #          ImportFrom(module='app.models', names=['User'])]
    """

    def __init__(self):
        """Initialize an empty import collector."""
        self._imports: dict[str, set[tuple[str, str | None]]] = {}
        self._modules: set[tuple[str, str | None]] = set()

    def add_import(self, module: str, name: str, asname: str | None = None) -> None:
        """Add a single ``from module import name [as asname]`` import.

        Args:
            module: The module to import from (e.g., 'typing', 'app.models').
            name: The name to import (e.g., 'Any', 'User').
            asname: Optional local alias.
        """
        if module not in self._imports:
            self._imports[module] = set()
        self._imports[module].add((name, asname))

    def add_module(self, module: str, asname: str | None = None) -> None:
        """Add a plain ``import module [as asname]`` import."""
        self._modules.add((module, asname))

    def add_ref(self, ref: ImportRef) -> None:
        if ref.module == 'builtins':
            return
        if ref.name is None:
            self.add_module(ref.module, ref.alias)
        else:
            self.add_import(ref.module, ref.name, ref.alias)

    def add_refs(self, refs: Iterable[ImportRef]) -> None:
        for ref in refs:
            self.add_ref(ref)

    def _get_import_category(self, module: str) -> int:
        """Get the sort category for a module.

        Uses sys.stdlib_module_names to dynamically detect standard library modules.

        Returns:
            0 for standard library, 1 for third-party, 2 for local/relative imports.
        """
        if module.startswith('.'):
            return 2

        base_module = module.split('.')[0]
        if base_module in sys.stdlib_module_names:
            return 0

        return 1

    def _sort_key(self, module: str) -> tuple[int, str]:
        return self._get_import_category(module), module

    def to_ast(self) -> list[ast.Import | ast.ImportFrom]:
        """Convert collected imports to AST import statements.

        Imports are sorted according to Python conventions:
        1. Standard library imports
        2. Third-party imports
        3. Local/relative imports

        Plain ``import`` statements come before ``from`` imports within the
        same category. Names within each import are sorted alphabetically.

        Returns:
            List of ast.Import and ast.ImportFrom statements, properly sorted.
        """
        statements: list[tuple[tuple[int, int, str, str], ast.stmt]] = []

        for module, asname in self._modules:
            category, name = self._sort_key(module)
            statements.append(
                (
                    (category, 0, name, asname or ''),
                    ast.Import(names=[ast.alias(name=module, asname=asname)]),
                )
            )

        for module, names in self._imports.items():
            if module.startswith('.'):
                level = len(module) - len(module.lstrip('.'))
                import_module = module.lstrip('.') or None
            else:
                level = 0
                import_module = module

            category, name = self._sort_key(module)
            statements.append(
                (
                    (category, 1, name, ''),
                    ast.ImportFrom(
                        module=import_module,
                        names=[
                            ast.alias(name=n, asname=a)
                            for n, a in sorted(names, key=lambda x: (x[0], x[1] or ''))
                        ],
                        level=level,
                    ),
                )
            )

        return [statement for _, statement in sorted(statements, key=lambda s: s[0])]

