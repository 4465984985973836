"""Route extraction from annotated controller declarations.

The extractor walks declaration units through the protocols defined in
``routegen.declarations`` and builds the immutable route model from
``routegen.ir``. It never touches the filesystem.
"""

import logging
import re
from collections.abc import Iterable, Sequence
from pathlib import PurePosixPath

from routegen import roles
from routegen.declarations import (
    Annotation,
    ClassDeclaration,
    DeclaredType,
    MethodDeclaration,
    ParameterDeclaration,
    SourceUnit,
)
from routegen.exceptions import (
    DuplicateClientError,
    ExtractionError,
    ParameterNotFoundError,
)
from routegen.ir import (
    PATH_SEPARATOR,
    LiteralSegment,
    ParameterSegment,
    PathSegment,
    QueryParameters,
    RequestBody,
    ResponseBody,
    Route,
    RouteClass,
    RouteFile,
    TypeExpr,
)
from routegen.utils import literal_text, remove_suffix

__all__ = ['RouteExtractor', 'DEFAULT_API_NAME', 'DEFAULT_FILE_SUFFIX']

logger = logging.getLogger(__name__)

DEFAULT_API_NAME = 'api'
DEFAULT_FILE_SUFFIX = '_controller.py'
CONTROLLER_CLASS_SUFFIX = 'Controller'

# `:name`, an optional `(regex)` constraint, then literal text kept as a suffix.
PATH_PARAMETER_PATTERN = re.compile(
    r'^:([A-Za-z_][A-Za-z0-9_]*)(?:\([^)]*\))?(.*)$'
)


def _find_role(
    annotations: Iterable[Annotation], kind: roles.RoleKind
) -> Annotation | None:
    """First annotation whose role table entry has the given kind."""
    for annotation in annotations:
        role = roles.lookup_role(annotation.name)
        if role is not None and role.kind is kind:
            return annotation
    return None


def _to_type_expr(declared: DeclaredType) -> TypeExpr:
    return TypeExpr(text=declared.text, imports=tuple(declared.imports))


class RouteExtractor:
    """Builds RouteFile models from controller declaration units.

    Args:
        api_name: The API group the generated clients belong to. Copied into
            every RouteFile; it decides the output sub-directory.
        file_suffix: Suffix stripped from a unit name to form its base file
            name, e.g. ``users_controller.py`` -> ``users``.

    Example:
        >>> extractor = RouteExtractor(api_name='backend')
        >>> route_files = extractor.extract(project.units)
    """

    def __init__(
        self,
        api_name: str = DEFAULT_API_NAME,
        file_suffix: str = DEFAULT_FILE_SUFFIX,
    ):
        self.api_name = api_name
        self.file_suffix = file_suffix

    def extract(self, units: Iterable[SourceUnit]) -> list[RouteFile]:
        """Extract a RouteFile for every unit declaring at least one controller.

        Raises:
            ParameterNotFoundError: If a path parameter has no type binding.
            DuplicateClientError: If two controllers of one unit share a client name.
            ExtractionError: If a controller declares two routes with one name.
        """
        route_files = []
        for unit in units:
            if not self.is_controller_unit(unit):
                logger.debug(f'Skipping {unit.name}: no controller class')
                continue
            route_files.append(self.extract_file(unit))
        return route_files

    def is_controller_unit(self, unit: SourceUnit) -> bool:
        return any(self.is_controller_class(c) for c in unit.classes)

    def is_controller_class(self, class_declaration: ClassDeclaration) -> bool:
        controller = _find_role(
            class_declaration.annotations, roles.RoleKind.CONTROLLER
        )
        return controller is not None

    def extract_file(self, unit: SourceUnit) -> RouteFile:
        route_classes = tuple(
            self.extract_class(c) for c in unit.classes if self.is_controller_class(c)
        )

        seen: set[str] = set()
        for route_class in route_classes:
            if route_class.client_name in seen:
                raise DuplicateClientError(route_class.client_name, unit.name)
            seen.add(route_class.client_name)

        route_file = RouteFile(
            api_name=self.api_name,
            base_file_name=self.base_file_name(unit.name),
            route_classes=route_classes,
        )
        logger.info(
            f'Extracted {sum(len(c.routes) for c in route_classes)} route(s) '
            f'from {unit.name}'
        )
        return route_file

    def base_file_name(self, unit_name: str) -> str:
        base_name = remove_suffix(unit_name, self.file_suffix)
        if base_name == unit_name:
            # Not following the naming convention: fall back to the bare stem.
            base_name = PurePosixPath(unit_name).stem
        return base_name

    def extract_class(self, class_declaration: ClassDeclaration) -> RouteClass:
        controller = _find_role(
            class_declaration.annotations, roles.RoleKind.CONTROLLER
        )
        base_path = self._annotation_path(controller)

        routes = []
        names: set[str] = set()
        for method in class_declaration.methods:
            verb_annotation = self._verb_annotation(method)
            if verb_annotation is None:
                continue
            if method.name in names:
                raise ExtractionError(
                    f"Route '{method.name}' is declared more than once",
                    context=class_declaration.name,
                )
            names.add(method.name)
            routes.append(
                self.extract_route(
                    base_path, verb_annotation, method, class_declaration.name
                )
            )

        return RouteClass(
            base_name=remove_suffix(class_declaration.name, CONTROLLER_CLASS_SUFFIX),
            routes=tuple(routes),
        )

    def _verb_annotation(self, method: MethodDeclaration) -> Annotation | None:
        return _find_role(method.annotations, roles.RoleKind.ROUTE)

    def _annotation_path(self, annotation: Annotation | None) -> str:
        """Read the first argument of an annotation as a path literal.

        Arguments that are not plain string literals contribute nothing.
        """
        if annotation is None or not annotation.arguments:
            return ''
        argument = annotation.arguments[0]
        text = literal_text(argument)
        if text is None:
            logger.debug(
                f'Ignoring non-literal argument {argument!r} of @{annotation.name}'
            )
            return ''
        return text

    def extract_route(
        self,
        base_path: str,
        verb_annotation: Annotation,
        method: MethodDeclaration,
        class_name: str | None = None,
    ) -> Route:
        return Route(
            name=method.name,
            path_segments=self.parse_path(
                base_path + self._annotation_path(verb_annotation), method, class_name
            ),
            verb=roles.verb_for(verb_annotation.name),
            request_body=self.extract_request_body(method),
            response_body=self.extract_response_body(method),
            query_parameters=self.extract_query_parameters(method),
        )

    def parse_path(
        self, path: str, method: MethodDeclaration, class_name: str | None = None
    ) -> tuple[PathSegment, ...]:
        segments: list[PathSegment] = []
        for part in path.split(PATH_SEPARATOR):
            match = PATH_PARAMETER_PATTERN.match(part)
            if match is None:
                segments.append(LiteralSegment(part))
                continue
            name, suffix = match.groups()
            declared = self.resolve_path_parameter_type(method, name, class_name)
            segments.append(ParameterSegment(name, _to_type_expr(declared), suffix))
        return tuple(segments)

    def resolve_path_parameter_type(
        self,
        method: MethodDeclaration,
        parameter_name: str,
        class_name: str | None = None,
    ) -> DeclaredType:
        """Find the type bound to a path parameter.

        A ``Param('<name>')`` binding supplies the parameter's own type; a
        ``Params`` binding supplies the matching property of its structured
        type.

        Raises:
            ParameterNotFoundError: If no parameter binds the name.
        """
        for parameter in method.parameters:
            param = _find_role(parameter.annotations, roles.RoleKind.PATH_PARAM)
            if param is not None:
                if self._annotation_path(param) == parameter_name:
                    return parameter.type
                continue
            params = _find_role(parameter.annotations, roles.RoleKind.PATH_PARAMS)
            if params is not None:
                property_type = parameter.type.get_property(parameter_name)
                if property_type is not None:
                    return property_type
        raise ParameterNotFoundError(method.name, parameter_name, class_name)

    def _first_parameter_with(
        self, parameters: Sequence[ParameterDeclaration], kind: roles.RoleKind
    ) -> ParameterDeclaration | None:
        return next(
            (p for p in parameters if _find_role(p.annotations, kind) is not None),
            None,
        )

    def extract_request_body(self, method: MethodDeclaration) -> RequestBody | None:
        parameter = self._first_parameter_with(method.parameters, roles.RoleKind.BODY)
        if parameter is None:
            return None
        return RequestBody(
            binding_name=parameter.name,
            type=_to_type_expr(parameter.type.unwrap_async()),
        )

    def extract_response_body(self, method: MethodDeclaration) -> ResponseBody | None:
        response_type = method.return_type.unwrap_async()
        if response_type.is_void():
            return None
        return ResponseBody(type=_to_type_expr(response_type))

    def extract_query_parameters(
        self, method: MethodDeclaration
    ) -> QueryParameters | None:
        parameter = self._first_parameter_with(
            method.parameters, roles.RoleKind.QUERY_PARAMS
        )
        if parameter is None:
            return None
        return QueryParameters(
            binding_name=parameter.name,
            type=_to_type_expr(parameter.type),
        )
