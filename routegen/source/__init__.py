"""Python source front end.

Parses controller modules with ``ast`` and exposes them through the
declaration protocols the extractor consumes.
"""

from routegen.source.declarations import (
    PythonAnnotation,
    PythonClass,
    PythonMethod,
    PythonParameter,
    PythonSourceUnit,
)
from routegen.source.project import PythonModule, SourceProject
from routegen.source.types import PythonType

__all__ = [
    'SourceProject',
    'PythonModule',
    'PythonType',
    'PythonAnnotation',
    'PythonParameter',
    'PythonMethod',
    'PythonClass',
    'PythonSourceUnit',
]
