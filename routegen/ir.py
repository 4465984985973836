"""Intermediate representation of extracted routes.

The IR is a tree of frozen dataclasses built once by the extractor and
consumed once by the client generator:

- RouteFile: one controller source unit
- RouteClass: one controller class in that unit
- Route: one routed method, with its path segments, verb and bindings
"""

import dataclasses
import enum

__all__ = [
    'Verb',
    'ImportRef',
    'TypeExpr',
    'LiteralSegment',
    'ParameterSegment',
    'PathSegment',
    'RequestBody',
    'ResponseBody',
    'QueryParameters',
    'Route',
    'RouteClass',
    'RouteFile',
    'PATH_SEPARATOR',
    'CLIENT_CLASS_SUFFIX',
]

PATH_SEPARATOR = '/'
CLIENT_CLASS_SUFFIX = 'Client'


class Verb(str, enum.Enum):
    GET = 'GET'
    POST = 'POST'
    PUT = 'PUT'
    DELETE = 'DELETE'
    PATCH = 'PATCH'


@dataclasses.dataclass(frozen=True)
class ImportRef:
    """An import needed for a type annotation to resolve.

    ``ImportRef('app.models', 'User')`` is ``from app.models import User``;
    ``ImportRef('app.models', None, 'models')`` is ``import app.models as models``.
    """

    module: str
    name: str | None = None
    alias: str | None = None


@dataclasses.dataclass(frozen=True)
class TypeExpr:
    text: str
    imports: tuple[ImportRef, ...] = ()


@dataclasses.dataclass(frozen=True)
class LiteralSegment:
    text: str


@dataclasses.dataclass(frozen=True)
class ParameterSegment:
    """A `:name` path segment.

    ``suffix`` is literal text following the name in the same segment, e.g.
    the `.json` of `:name.json`.
    """

    name: str
    type: TypeExpr
    suffix: str = ''


PathSegment = LiteralSegment | ParameterSegment


@dataclasses.dataclass(frozen=True)
class RequestBody:
    binding_name: str
    type: TypeExpr


@dataclasses.dataclass(frozen=True)
class ResponseBody:
    type: TypeExpr


@dataclasses.dataclass(frozen=True)
class QueryParameters:
    binding_name: str
    type: TypeExpr


@dataclasses.dataclass(frozen=True)
class Route:
    name: str
    path_segments: tuple[PathSegment, ...]
    verb: Verb
    request_body: RequestBody | None = None
    response_body: ResponseBody | None = None
    query_parameters: QueryParameters | None = None

    @property
    def path_parameters(self) -> tuple[ParameterSegment, ...]:
        return tuple(s for s in self.path_segments if isinstance(s, ParameterSegment))

    @property
    def path(self) -> str:
        """The route path in its ``:name`` form, e.g. ``/users/:id``."""
        return PATH_SEPARATOR.join(
            s.text if isinstance(s, LiteralSegment) else f':{s.name}{s.suffix}'
            for s in self.path_segments
        )


@dataclasses.dataclass(frozen=True)
class RouteClass:
    base_name: str
    routes: tuple[Route, ...] = ()

    @property
    def client_name(self) -> str:
        return f'{self.base_name}{CLIENT_CLASS_SUFFIX}'


@dataclasses.dataclass(frozen=True)
class RouteFile:
    api_name: str
    base_file_name: str
    route_classes: tuple[RouteClass, ...] = ()
