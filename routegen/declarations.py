"""Capability interfaces the extractor reads declarations through.

Any front end (the bundled Python ``ast`` reader, a test double, another
language's parser) can feed the extractor by providing objects that satisfy
these protocols. Nothing here depends on a specific syntax tree.
"""

from collections.abc import Sequence
from typing import Protocol, runtime_checkable

from routegen.ir import ImportRef

__all__ = [
    'Annotation',
    'DeclaredType',
    'ParameterDeclaration',
    'MethodDeclaration',
    'ClassDeclaration',
    'SourceUnit',
]


@runtime_checkable
class Annotation(Protocol):
    """A named tag attached to a declaration.

    ``arguments`` holds the source text of each positional argument, e.g.
    ``"'/users'"`` for ``Controller('/users')``.
    """

    @property
    def name(self) -> str: ...

    @property
    def arguments(self) -> Sequence[str]: ...


@runtime_checkable
class DeclaredType(Protocol):
    """A resolvable static type."""

    @property
    def text(self) -> str: ...

    @property
    def imports(self) -> Sequence[ImportRef]: ...

    def unwrap_async(self) -> 'DeclaredType':
        """Remove one asynchronous-result layer, or return ``self``."""
        ...

    def is_void(self) -> bool: ...

    def get_property(self, name: str) -> 'DeclaredType | None':
        """Type of the named property of a structured type, if any."""
        ...


@runtime_checkable
class ParameterDeclaration(Protocol):
    @property
    def name(self) -> str: ...

    @property
    def annotations(self) -> Sequence[Annotation]: ...

    @property
    def type(self) -> DeclaredType: ...


@runtime_checkable
class MethodDeclaration(Protocol):
    @property
    def name(self) -> str: ...

    @property
    def annotations(self) -> Sequence[Annotation]: ...

    @property
    def return_type(self) -> DeclaredType: ...

    @property
    def parameters(self) -> Sequence[ParameterDeclaration]: ...


@runtime_checkable
class ClassDeclaration(Protocol):
    @property
    def name(self) -> str: ...

    @property
    def annotations(self) -> Sequence[Annotation]: ...

    @property
    def methods(self) -> Sequence[MethodDeclaration]: ...


@runtime_checkable
class SourceUnit(Protocol):
    @property
    def name(self) -> str: ...

    @property
    def classes(self) -> Sequence[ClassDeclaration]: ...
