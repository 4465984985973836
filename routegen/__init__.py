"""routegen - Generate typed API clients from annotated controller classes.

routegen reads controller modules written with NestJS-style decorators
(``@Controller``, ``@Get``, ``@Post``, ...), extracts every route into a small
intermediate model and generates one async client class per controller with
one method per route.

Quick Start:
    >>> from routegen import Codegen, ProjectConfig
    >>>
    >>> config = ProjectConfig(source="./app/controllers", output="./clients")
    >>> Codegen(config).generate()

CLI Usage:
    $ routegen generate --config routegen.yaml
    $ routegen inspect   # Show extracted routes without writing files
"""

from importlib.metadata import PackageNotFoundError, version

from routegen.codegen import Codegen
from routegen.config import CodegenConfig, ProjectConfig, get_config
from routegen.emitter import CodeEmitter, FileEmitter, StringEmitter
from routegen.exceptions import (
    CodeGenerationError,
    ConfigurationError,
    DuplicateClientError,
    ExtractionError,
    OutputError,
    ParameterNotFoundError,
    RouteGenError,
    SourceError,
    SourceLoadError,
)
from routegen.extractor import RouteExtractor
from routegen.generator import ClientGenerator, ClientModule
from routegen.source import SourceProject

__all__ = [
    # Main classes
    'Codegen',
    'RouteExtractor',
    'ClientGenerator',
    'ClientModule',
    'SourceProject',
    # Code emission
    'CodeEmitter',
    'FileEmitter',
    'StringEmitter',
    # Configuration
    'CodegenConfig',
    'ProjectConfig',
    'get_config',
    # Exceptions
    'RouteGenError',
    'SourceError',
    'SourceLoadError',
    'ExtractionError',
    'ParameterNotFoundError',
    'DuplicateClientError',
    'CodeGenerationError',
    'ConfigurationError',
    'OutputError',
]

try:
    __version__ = version('routegen')
except PackageNotFoundError:
    __version__ = 'unknown'
