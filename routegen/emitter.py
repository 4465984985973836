"""Code emitter interfaces and implementations for code generation output.

This module provides the CodeEmitter interface and concrete implementations
for emitting generated client modules in different forms (Python files on
disk, in-memory strings).
"""

import ast
import logging
from abc import ABC, abstractmethod
from pathlib import Path, PurePosixPath

from upath import UPath

from routegen.ast_utils import _all
from routegen.exceptions import CodeGenerationError, OutputError
from routegen.generator import ClientModule

__all__ = ['CodeEmitter', 'FileEmitter', 'StringEmitter', 'render_module']

logger = logging.getLogger(__name__)

CLIENT_DOCSTRING = 'Generated API client. Do not edit by hand.'
PACKAGE_DOCSTRING = 'Generated API clients.'


def render_module(
    body: list[ast.stmt], name: str, docstring: str | None = None
) -> str:
    """Render module statements to validated Python source.

    Args:
        body: List of AST statements forming the module body.
        name: Module name, used in error messages.
        docstring: Optional module-level docstring.

    Raises:
        CodeGenerationError: If the AST cannot be rendered or the result
            is not valid Python.
    """
    if docstring:
        body = [ast.Expr(value=ast.Constant(value=docstring))] + body

    module = ast.Module(body=body, type_ignores=[])
    ast.fix_missing_locations(module)

    try:
        source = ast.unparse(module)
    except Exception as e:
        raise CodeGenerationError(
            'Failed to unparse module', context=name, cause=e
        ) from e

    try:
        compile(source, f'{name}.py', 'exec')
    except SyntaxError as e:
        raise CodeGenerationError(
            'Generated code has invalid syntax', context=name, cause=e
        ) from e

    return source + '\n'


class CodeEmitter(ABC):
    """Abstract base class for code emitters.

    A CodeEmitter takes the structured modules produced by the generator and
    outputs them somewhere (files, strings, ...).
    """

    @abstractmethod
    def emit_module(
        self,
        body: list[ast.stmt],
        relative_path: str,
        docstring: str | None = None,
    ) -> str:
        """Emit a complete Python module.

        Args:
            body: List of AST statements forming the module body.
            relative_path: Posix path of the module below the output root,
                e.g. ``api/users_client.py``.
            docstring: Optional module-level docstring.

        Returns:
            The path to the emitted file, or the code string, depending
            on the implementation.
        """
        pass

    def emit_client(self, client_module: ClientModule) -> str:
        """Emit one generated client module."""
        return self.emit_module(
            client_module.body, client_module.relative_path, docstring=CLIENT_DOCSTRING
        )

    def emit_init(self, client_modules: list[ClientModule]) -> list[str]:
        """Emit an ``__init__.py`` per API group re-exporting its client classes.

        Returns:
            The emitted paths or code strings, one per API group.
        """
        groups: dict[str, list[ClientModule]] = {}
        for client_module in client_modules:
            groups.setdefault(client_module.api_name, []).append(client_module)

        emitted = []
        for api_name, modules in sorted(groups.items()):
            body: list[ast.stmt] = []
            exports: list[str] = []
            for client_module in sorted(modules, key=lambda m: m.module_name):
                body.append(
                    ast.ImportFrom(
                        module=client_module.module_name,
                        names=[ast.alias(name=name) for name in client_module.exports],
                        level=1,
                    )
                )
                exports.extend(client_module.exports)
            body.append(_all(exports))
            emitted.append(
                self.emit_module(
                    body,
                    str(PurePosixPath(api_name) / '__init__.py'),
                    docstring=PACKAGE_DOCSTRING,
                )
            )
        return emitted


class FileEmitter(CodeEmitter):
    """Emits generated code to Python files on disk.

    This emitter writes generated code to files below an output directory,
    creating API group directories as needed.
    """

    def __init__(self, output_dir: str | Path | UPath):
        """Initialize the file emitter.

        Args:
            output_dir: Directory where files will be written.
        """
        self.output_dir = UPath(output_dir)
        self._written_files: list[str] = []

    def emit_module(
        self,
        body: list[ast.stmt],
        relative_path: str,
        docstring: str | None = None,
    ) -> str:
        source = render_module(
            body, str(PurePosixPath(relative_path).with_suffix('')), docstring
        )
        return self._write_file(relative_path, source)

    def _write_file(self, relative_path: str, content: str) -> str:
        """Write content to a file below the output directory.

        Raises:
            OutputError: If the file cannot be written.
        """
        file_path = self.output_dir.joinpath(*PurePosixPath(relative_path).parts)
        try:
            file_path.parent.mkdir(parents=True, exist_ok=True)
            file_path.write_text(content, encoding='utf-8')
        except OSError as e:
            raise OutputError(str(file_path), cause=e) from e

        logger.info(f'Wrote {file_path}')
        self._written_files.append(str(file_path))
        return str(file_path)

    def get_written_files(self) -> list[str]:
        """Get list of all files written by this emitter."""
        return self._written_files.copy()


class StringEmitter(CodeEmitter):
    """Emits generated code as strings.

    This emitter is useful for testing or when you need to inspect the
    generated code before writing it.
    """

    def __init__(self):
        self._modules: dict[str, str] = {}

    def emit_module(
        self,
        body: list[ast.stmt],
        relative_path: str,
        docstring: str | None = None,
    ) -> str:
        source = render_module(
            body, str(PurePosixPath(relative_path).with_suffix('')), docstring
        )
        self._modules[relative_path] = source
        return source

    def get_module(self, relative_path: str) -> str | None:
        """Get a previously emitted module by its relative path."""
        return self._modules.get(relative_path)

    def get_all_modules(self) -> dict[str, str]:
        """Get all emitted modules, keyed by relative path."""
        return self._modules.copy()
