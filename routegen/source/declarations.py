"""Declaration adapters over Python ``ast`` nodes.

Controllers are plain classes decorated NestJS-style::

    @Controller('/users')
    class UsersController:
        @Get('/:id')
        async def getUser(self, id: Annotated[int, Param('id')]) -> User: ...

        @Post()
        async def createUser(self, payload: CreateUserDto = Body()) -> None: ...

Parameter annotations come either from ``Annotated`` metadata or from a call
used as the parameter default.
"""

import ast
import dataclasses
from functools import cached_property
from typing import TYPE_CHECKING

from routegen.source.types import PythonType, base_name

if TYPE_CHECKING:
    from routegen.source.project import PythonModule, SourceProject

__all__ = [
    'PythonAnnotation',
    'PythonParameter',
    'PythonMethod',
    'PythonClass',
    'PythonSourceUnit',
]

_PATH_KEYWORD = 'path'


@dataclasses.dataclass(frozen=True)
class PythonAnnotation:
    name: str
    arguments: tuple[str, ...] = ()

    @classmethod
    def from_node(cls, node: ast.expr) -> 'PythonAnnotation | None':
        """Read ``Name``, ``Name(...)`` or ``mod.Name(...)``; other expressions are not annotations."""
        if isinstance(node, ast.Call):
            name = base_name(node.func)
            if name is None:
                return None
            arguments = [ast.unparse(arg) for arg in node.args]
            if not arguments:
                arguments = [
                    ast.unparse(kw.value) for kw in node.keywords if kw.arg == _PATH_KEYWORD
                ]
            return cls(name, tuple(arguments))

        name = base_name(node)
        if name is None:
            return None
        return cls(name)


def _annotations_from(nodes) -> tuple[PythonAnnotation, ...]:
    annotations = (PythonAnnotation.from_node(node) for node in nodes)
    return tuple(a for a in annotations if a is not None)


def _metadata_nodes(annotation: ast.expr | None) -> list[ast.expr]:
    if (
        isinstance(annotation, ast.Subscript)
        and base_name(annotation.value) == 'Annotated'
        and isinstance(annotation.slice, ast.Tuple)
    ):
        return list(annotation.slice.elts[1:])
    return []


@dataclasses.dataclass(frozen=True)
class PythonParameter:
    name: str
    annotations: tuple[PythonAnnotation, ...]
    type: PythonType

    @classmethod
    def from_arg(
        cls,
        arg: ast.arg,
        default: ast.expr | None,
        module: 'PythonModule',
        project: 'SourceProject | None',
    ) -> 'PythonParameter':
        nodes = _metadata_nodes(arg.annotation)
        if isinstance(default, ast.Call):
            nodes.append(default)
        return cls(
            name=arg.arg,
            annotations=_annotations_from(nodes),
            type=PythonType(arg.annotation, module, project),
        )


class PythonMethod:
    def __init__(
        self,
        node: ast.FunctionDef | ast.AsyncFunctionDef,
        module: 'PythonModule',
        project: 'SourceProject | None' = None,
    ):
        self.node = node
        self.module = module
        self.project = project

    @property
    def name(self) -> str:
        return self.node.name

    @cached_property
    def annotations(self) -> tuple[PythonAnnotation, ...]:
        return _annotations_from(self.node.decorator_list)

    @property
    def is_static(self) -> bool:
        return any(a.name == 'staticmethod' for a in self.annotations)

    @cached_property
    def return_type(self) -> PythonType:
        return PythonType(self.node.returns, self.module, self.project)

    @cached_property
    def parameters(self) -> tuple[PythonParameter, ...]:
        args = self.node.args
        positional = args.posonlyargs + args.args
        defaults: list[ast.expr | None] = [None] * (
            len(positional) - len(args.defaults)
        ) + list(args.defaults)
        pairs = list(zip(positional, defaults))
        if not self.is_static:
            # self / cls
            pairs = pairs[1:]
        pairs += list(zip(args.kwonlyargs, args.kw_defaults))

        return tuple(
            PythonParameter.from_arg(arg, default, self.module, self.project)
            for arg, default in pairs
        )


class PythonClass:
    def __init__(
        self,
        node: ast.ClassDef,
        module: 'PythonModule',
        project: 'SourceProject | None' = None,
    ):
        self.node = node
        self.module = module
        self.project = project

    @property
    def name(self) -> str:
        return self.node.name

    @cached_property
    def annotations(self) -> tuple[PythonAnnotation, ...]:
        return _annotations_from(self.node.decorator_list)

    @cached_property
    def methods(self) -> tuple[PythonMethod, ...]:
        return tuple(
            PythonMethod(statement, self.module, self.project)
            for statement in self.node.body
            if isinstance(statement, (ast.FunctionDef, ast.AsyncFunctionDef))
        )


class PythonSourceUnit:
    """One parsed source file, exposing its top-level classes."""

    def __init__(self, module: 'PythonModule', project: 'SourceProject | None' = None):
        self.module = module
        self.project = project

    def __repr__(self) -> str:
        return f'PythonSourceUnit({self.module.path!r})'

    @property
    def name(self) -> str:
        return self.module.file_name

    @cached_property
    def classes(self) -> tuple[PythonClass, ...]:
        return tuple(
            PythonClass(node, self.module, self.project)
            for node in self.module.tree.body
            if isinstance(node, ast.ClassDef)
        )
