"""Static types read from Python annotations.

PythonType wraps an annotation expression together with the module it was
written in, so that the names it mentions can be turned back into imports for
the generated client and structured types can be inspected for their fields.
"""

import ast
import builtins
import logging
from collections.abc import Iterator
from typing import TYPE_CHECKING

from routegen.ir import ImportRef

if TYPE_CHECKING:
    from routegen.source.project import PythonModule, SourceProject

__all__ = ['PythonType', 'ASYNC_WRAPPERS', 'base_name', 'strip_annotated']

logger = logging.getLogger(__name__)

# Wrapper name -> index of the carried type among its type arguments.
ASYNC_WRAPPERS = {
    'Awaitable': 0,
    'Future': 0,
    'Task': 0,
    'Coroutine': -1,
}

_BUILTIN_NAMES = frozenset(dir(builtins))
_ANY = ImportRef('typing', 'Any')


def base_name(node: ast.expr) -> str | None:
    """Last component of a (possibly module-qualified) name."""
    if isinstance(node, ast.Name):
        return node.id
    if isinstance(node, ast.Attribute):
        return node.attr
    return None


def _type_arguments(node: ast.Subscript) -> list[ast.expr]:
    if isinstance(node.slice, ast.Tuple):
        return list(node.slice.elts)
    return [node.slice]


def _dotted_parts(node: ast.expr) -> list[str] | None:
    if isinstance(node, ast.Name):
        return [node.id]
    if isinstance(node, ast.Attribute):
        parts = _dotted_parts(node.value)
        return parts + [node.attr] if parts is not None else None
    return None


def strip_annotated(node: ast.expr | None) -> ast.expr | None:
    """``Annotated[T, ...]`` -> ``T``; anything else is returned unchanged."""
    while (
        isinstance(node, ast.Subscript)
        and base_name(node.value) == 'Annotated'
        and isinstance(node.slice, ast.Tuple)
        and node.slice.elts
    ):
        node = node.slice.elts[0]
    return node


def _parse_forward_reference(value: str) -> ast.expr | None:
    try:
        return ast.parse(value, mode='eval').body
    except SyntaxError:
        return None


def _referenced_names(node: ast.expr) -> Iterator[str]:
    """Root names an annotation refers to, in source order.

    String forward references are parsed and searched; the arguments of
    ``Literal[...]`` are values rather than types and are skipped.
    """
    if isinstance(node, ast.Name):
        yield node.id
    elif isinstance(node, ast.Attribute):
        yield from _referenced_names(node.value)
    elif isinstance(node, ast.Subscript):
        yield from _referenced_names(node.value)
        if base_name(node.value) != 'Literal':
            yield from _referenced_names(node.slice)
    elif isinstance(node, ast.Constant) and isinstance(node.value, str):
        reference = _parse_forward_reference(node.value)
        if reference is not None:
            yield from _referenced_names(reference)
    else:
        for child in ast.iter_child_nodes(node):
            if isinstance(child, ast.expr):
                yield from _referenced_names(child)


class PythonType:
    """A type annotation in the context of its defining module.

    A missing annotation is treated as ``Any``.
    """

    def __init__(
        self,
        annotation: ast.expr | None,
        module: 'PythonModule',
        project: 'SourceProject | None' = None,
    ):
        self.annotation = strip_annotated(annotation)
        self.module = module
        self.project = project

    def __repr__(self) -> str:
        return f'PythonType({self.text!r})'

    @property
    def text(self) -> str:
        if self.annotation is None:
            return 'Any'
        return ast.unparse(self.annotation)

    @property
    def imports(self) -> tuple[ImportRef, ...]:
        if self.annotation is None:
            return (_ANY,)

        imports: list[ImportRef] = []
        for name in _referenced_names(self.annotation):
            ref = self._import_for(name)
            if ref is not None and ref not in imports:
                imports.append(ref)
        return tuple(imports)

    def _import_for(self, name: str) -> ImportRef | None:
        module = self.module
        if name in module.from_imports:
            source_module, imported_name = module.from_imports[name]
            return ImportRef(
                source_module,
                imported_name,
                name if name != imported_name else None,
            )
        if name in module.module_imports:
            imported_module, alias = module.module_imports[name]
            return ImportRef(imported_module, None, alias)
        if name in module.definitions:
            return ImportRef(module.name, name)
        if name not in _BUILTIN_NAMES:
            logger.debug(f"Cannot resolve '{name}' referenced in {module.path}")
        return None

    def _wrap(self, annotation: ast.expr | None, module: 'PythonModule | None' = None):
        return PythonType(annotation, module or self.module, self.project)

    def unwrap_async(self) -> 'PythonType':
        node = self.annotation
        if not isinstance(node, ast.Subscript):
            return self
        index = ASYNC_WRAPPERS.get(base_name(node.value))
        if index is None:
            return self
        return self._wrap(_type_arguments(node)[index])

    def is_void(self) -> bool:
        node = self.annotation
        return isinstance(node, ast.Constant) and node.value is None

    def get_property(self, name: str) -> 'PythonType | None':
        resolved = self._resolve_class(self.annotation, self.module)
        if resolved is None:
            return None
        return self._class_property(*resolved, name, set())

    def _resolve_class(
        self, node: ast.expr | None, module: 'PythonModule'
    ) -> tuple['PythonModule', ast.ClassDef] | None:
        if isinstance(node, ast.Constant) and isinstance(node.value, str):
            node = _parse_forward_reference(node.value)
        parts = _dotted_parts(node) if node is not None else None
        if not parts:
            return None

        if len(parts) == 1:
            if self.project is not None:
                return self.project.find_class(module, parts[0])
            if parts[0] in module.classes:
                return module, module.classes[parts[0]]
            return None

        # models.User / app.models.User through ``import`` statements
        if self.project is None or parts[0] not in module.module_imports:
            return None
        imported_module, alias = module.module_imports[parts[0]]
        if alias is not None:
            module_name = '.'.join([imported_module] + parts[1:-1])
        else:
            module_name = '.'.join(parts[:-1])
        target = self.project.modules.get(module_name)
        if target is None:
            return None
        return self.project.find_class(target, parts[-1])

    def _class_property(
        self,
        module: 'PythonModule',
        class_def: ast.ClassDef,
        name: str,
        seen: set[tuple[str, str]],
    ) -> 'PythonType | None':
        if (module.name, class_def.name) in seen:
            return None
        seen.add((module.name, class_def.name))

        for statement in class_def.body:
            if (
                isinstance(statement, ast.AnnAssign)
                and isinstance(statement.target, ast.Name)
                and statement.target.id == name
            ):
                return self._wrap(statement.annotation, module)

        for base in class_def.bases:
            resolved = self._resolve_class(base, module)
            if resolved is not None:
                found = self._class_property(*resolved, name, seen)
                if found is not None:
                    return found
        return None
