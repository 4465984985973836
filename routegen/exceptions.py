"""Custom exceptions for routegen.

This module defines a hierarchy of exceptions used throughout routegen to
provide clear, actionable error messages for the different failure scenarios
of loading, extracting, generating and writing client code.
"""


class RouteGenError(Exception):
    """Base exception for all routegen errors.

    All exceptions raised by routegen inherit from this class, making it easy
    to catch all routegen-related errors with a single except clause.

    Example:
        try:
            codegen.generate()
        except RouteGenError as e:
            print(f"routegen error: {e}")
    """

    def __init__(self, message: str, *args, **kwargs):
        self.message = message
        super().__init__(message, *args, **kwargs)


class SourceError(RouteGenError):
    """Base exception for source-related errors."""

    pass


class SourceLoadError(SourceError):
    """Failed to read or parse a controller source file.

    Attributes:
        source: The path of the source that failed to load.
        cause: The underlying exception that caused the failure.
    """

    def __init__(self, source: str, cause: Exception | None = None):
        self.source = source
        self.cause = cause
        message = f"Failed to load source '{source}'"
        if cause:
            message += f': {cause}'
        super().__init__(message)


class ExtractionError(RouteGenError):
    """Error while building the route model from controller declarations.

    Attributes:
        context: Additional context about what was being extracted.
    """

    def __init__(self, message: str, context: str | None = None):
        self.context = context
        full_message = message
        if context:
            full_message = f'{message} (while extracting {context})'
        super().__init__(full_message)


class ParameterNotFoundError(ExtractionError):
    """A path parameter has no resolvable type binding.

    Raised when a route path contains ``:name`` but none of the method's
    parameters binds ``name`` through ``Param('name')`` or a ``Params``
    structured type.

    Attributes:
        route_name: The name of the route method.
        parameter_name: The path parameter that could not be bound.
        class_name: The controller class declaring the route, if known.
    """

    def __init__(
        self,
        route_name: str,
        parameter_name: str,
        class_name: str | None = None,
    ):
        self.route_name = route_name
        self.parameter_name = parameter_name
        self.class_name = class_name
        location = f'{class_name}.{route_name}' if class_name else route_name
        super().__init__(
            f"No parameter with name '{parameter_name}' found in method '{route_name}'",
            context=location,
        )


class DuplicateClientError(ExtractionError):
    """Two controllers in the same file resolve to the same client class name.

    Attributes:
        client_name: The generated client class name that collides.
        file_name: The source unit containing both controllers.
    """

    def __init__(self, client_name: str, file_name: str):
        self.client_name = client_name
        self.file_name = file_name
        super().__init__(
            f"Client class '{client_name}' would be generated more than once",
            context=file_name,
        )


class CodeGenerationError(RouteGenError):
    """Error during client code generation.

    Attributes:
        context: Additional context about what was being generated.
        cause: The underlying exception that caused the failure.
    """

    def __init__(
        self, message: str, context: str | None = None, cause: Exception | None = None
    ):
        self.context = context
        self.cause = cause
        full_message = message
        if context:
            full_message = f'{message} (while generating {context})'
        if cause:
            full_message += f': {cause}'
        super().__init__(full_message)


class ConfigurationError(RouteGenError):
    """Error in configuration.

    Attributes:
        config_path: The path to the configuration file, if applicable.
        field: The specific configuration field that is invalid.
    """

    def __init__(
        self, message: str, config_path: str | None = None, field: str | None = None
    ):
        self.config_path = config_path
        self.field = field
        full_message = message
        if config_path:
            full_message = f"{message} in '{config_path}'"
        if field:
            full_message += f' (field: {field})'
        super().__init__(full_message)


class OutputError(RouteGenError):
    """Error writing generated output.

    Attributes:
        output_path: The path where output was being written.
        cause: The underlying exception that caused the failure.
    """

    def __init__(self, output_path: str, cause: Exception | None = None):
        self.output_path = output_path
        self.cause = cause
        message = f"Failed to write output to '{output_path}'"
        if cause:
            message += f': {cause}'
        super().__init__(message)
