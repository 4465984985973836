"""Client generation from the route model.

The generator turns each RouteFile into a ClientModule: a structured tree of
``ast`` class, method and statement nodes. It never produces text itself;
rendering and writing is the job of ``routegen.emitter``.

Every route becomes::

    async def <name>(self, <path params...>, <body>, <query>, options: RequestOptions) -> <Response | None>:
        url = f'<segments joined with "/">'
        return await request({**options, 'url': url, 'method': '<VERB>', 'body': ..., 'query_params': ...})
"""

import ast
import dataclasses
import logging
from collections.abc import Iterable
from pathlib import PurePosixPath

from routegen.ast_utils import (
    ImportCollector,
    _all,
    _argument,
    _assign,
    _async_method,
    _call,
    _class,
    _dict,
    _fstring,
    _name,
    _type,
)
from routegen.exceptions import CodeGenerationError
from routegen.ir import (
    PATH_SEPARATOR,
    ParameterSegment,
    Route,
    RouteClass,
    RouteFile,
    TypeExpr,
)
from routegen.utils import sanitize_parameter_name

__all__ = [
    'ClientGenerator',
    'ClientModule',
    'DEFAULT_RUNTIME_MODULE',
    'DEFAULT_CLIENT_SUFFIX',
    'REQUEST_FUNCTION',
    'REQUEST_OPTIONS_TYPE',
]

logger = logging.getLogger(__name__)

DEFAULT_RUNTIME_MODULE = 'api_runtime'
DEFAULT_CLIENT_SUFFIX = '_client'

REQUEST_FUNCTION = 'request'
REQUEST_OPTIONS_TYPE = 'RequestOptions'
OPTIONS_PARAMETER = 'options'
URL_VARIABLE = 'url'

RESERVED_PARAMETER_NAMES = frozenset(
    {'self', OPTIONS_PARAMETER, URL_VARIABLE, REQUEST_FUNCTION, REQUEST_OPTIONS_TYPE}
)


@dataclasses.dataclass
class ClientModule:
    """One generated client module.

    Attributes:
        api_name: The API group directory the module belongs to.
        module_name: The module file name without extension.
        body: Module statements (imports and client classes).
        exports: Client class names defined by the module.
    """

    api_name: str
    module_name: str
    body: list[ast.stmt]
    exports: list[str] = dataclasses.field(default_factory=list)

    @property
    def relative_path(self) -> str:
        return str(PurePosixPath(self.api_name) / f'{self.module_name}.py')


class ClientGenerator:
    """Generates async client classes from extracted routes.

    Args:
        runtime_module: Module the generated code imports ``request`` and
            ``RequestOptions`` from.
        client_suffix: Suffix appended to the base file name of each module.

    Example:
        >>> generator = ClientGenerator(runtime_module='myapp.http')
        >>> modules = generator.generate(route_files)
    """

    def __init__(
        self,
        runtime_module: str = DEFAULT_RUNTIME_MODULE,
        client_suffix: str = DEFAULT_CLIENT_SUFFIX,
    ):
        self.runtime_module = runtime_module
        self.client_suffix = client_suffix

    def generate(self, route_files: Iterable[RouteFile]) -> list[ClientModule]:
        return [self.generate_module(route_file) for route_file in route_files]

    def generate_module(self, route_file: RouteFile) -> ClientModule:
        imports = ImportCollector()
        imports.add_import(self.runtime_module, REQUEST_FUNCTION)
        imports.add_import(self.runtime_module, REQUEST_OPTIONS_TYPE)

        classes = [
            self.generate_class(route_class, imports)
            for route_class in route_file.route_classes
        ]
        exports = [route_class.client_name for route_class in route_file.route_classes]

        body: list[ast.stmt] = [*imports.to_ast(), _all(exports), *classes]
        logger.debug(
            f'Generated {len(classes)} client class(es) for {route_file.base_file_name}'
        )
        return ClientModule(
            api_name=route_file.api_name,
            module_name=f'{route_file.base_file_name}{self.client_suffix}',
            body=body,
            exports=exports,
        )

    def generate_class(
        self, route_class: RouteClass, imports: ImportCollector
    ) -> ast.ClassDef:
        methods = [
            self.generate_method(route, imports, route_class.client_name)
            for route in route_class.routes
        ]
        return _class(route_class.client_name, methods)

    def generate_method(
        self,
        route: Route,
        imports: ImportCollector,
        client_name: str | None = None,
    ) -> ast.AsyncFunctionDef:
        context = f'{client_name}.{route.name}' if client_name else route.name
        parameter_names = self._parameter_names(route, context)

        arguments = [
            _argument(parameter_names[id(segment)], self._annotation(segment.type, imports))
            for segment in route.path_parameters
        ]
        if route.request_body is not None:
            arguments.append(
                _argument(
                    parameter_names[id(route.request_body)],
                    self._annotation(route.request_body.type, imports),
                )
            )
        if route.query_parameters is not None:
            arguments.append(
                _argument(
                    parameter_names[id(route.query_parameters)],
                    self._annotation(route.query_parameters.type, imports),
                )
            )
        arguments.append(_argument(OPTIONS_PARAMETER, _name(REQUEST_OPTIONS_TYPE)))

        if route.response_body is not None:
            returns = self._annotation(route.response_body.type, imports)
        else:
            returns = ast.Constant(value=None)

        return _async_method(
            name=route.name,
            args=arguments,
            body=self._method_body(route, parameter_names),
            returns=returns,
        )

    def _parameter_names(self, route: Route, context: str) -> dict[int, str]:
        """Generated parameter name for each path segment and binding, keyed by identity.

        Names that would shadow ``self``, ``options``, ``url`` or the runtime
        imports get a trailing underscore.
        """
        bindings = [(segment, segment.name) for segment in route.path_parameters]
        if route.request_body is not None:
            bindings.append((route.request_body, route.request_body.binding_name))
        if route.query_parameters is not None:
            bindings.append(
                (route.query_parameters, route.query_parameters.binding_name)
            )

        names: dict[int, str] = {}
        used: set[str] = set()
        for binding, raw_name in bindings:
            name = sanitize_parameter_name(raw_name)
            if name in RESERVED_PARAMETER_NAMES:
                # Same suffix rule as Python keywords.
                name = f'{name}_'
            if name in used:
                raise CodeGenerationError(
                    f"Parameter '{name}' is bound more than once", context=context
                )
            used.add(name)
            names[id(binding)] = name
        return names

    def _annotation(self, type_expr: TypeExpr, imports: ImportCollector) -> ast.expr:
        try:
            annotation = _type(type_expr)
        except SyntaxError as e:
            raise CodeGenerationError(
                f"Invalid type expression '{type_expr.text}'", cause=e
            ) from e
        imports.add_refs(type_expr.imports)
        return annotation

    def _url_expression(self, route: Route, parameter_names: dict[int, str]) -> ast.expr:
        parts: list[str | ast.expr] = []
        for index, segment in enumerate(route.path_segments):
            if index:
                parts.append(PATH_SEPARATOR)
            if isinstance(segment, ParameterSegment):
                parts.append(_name(parameter_names[id(segment)]))
                parts.append(segment.suffix)
            else:
                parts.append(segment.text)
        return _fstring(parts)

    def _method_body(
        self, route: Route, parameter_names: dict[int, str]
    ) -> list[ast.stmt]:
        entries: list[tuple[str, ast.expr]] = [
            ('url', _name(URL_VARIABLE)),
            ('method', ast.Constant(value=route.verb.value)),
        ]
        if route.request_body is not None:
            entries.append(('body', _name(parameter_names[id(route.request_body)])))
        if route.query_parameters is not None:
            entries.append(
                ('query_params', _name(parameter_names[id(route.query_parameters)]))
            )

        dispatch = _call(
            _name(REQUEST_FUNCTION),
            args=[_dict(entries, spread=_name(OPTIONS_PARAMETER))],
        )
        return [
            _assign(_name(URL_VARIABLE), self._url_expression(route, parameter_names)),
            ast.Return(value=ast.Await(value=dispatch)),
        ]
