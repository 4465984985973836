"""Loading and indexing Python controller sources.

A SourceProject parses every selected ``.py`` file with ``ast`` and keeps a
module index so that type references can be followed across modules, e.g.
to look up the fields of a ``Params`` model imported from another file.
"""

import ast
import dataclasses
import fnmatch
import logging
from collections.abc import Iterable, Mapping, Sequence
from pathlib import Path, PurePosixPath

from routegen.exceptions import SourceLoadError

__all__ = ['PythonModule', 'SourceProject', 'DEFAULT_INCLUDE']

logger = logging.getLogger(__name__)

DEFAULT_INCLUDE = ('*.py',)


def module_name_for(path: str, package: str | None = None) -> tuple[str, bool]:
    """Return the dotted module name for a relative path and whether it is a package."""
    parts = list(PurePosixPath(path).with_suffix('').parts)
    is_package = bool(parts) and parts[-1] == '__init__'
    if is_package:
        parts = parts[:-1]
    if package:
        parts = package.split('.') + parts
    return '.'.join(parts), is_package


def resolve_relative_module(
    module_name: str, is_package: bool, level: int, target: str | None
) -> str:
    """Resolve ``from <level dots><target> import ...`` to an absolute module name."""
    if level == 0:
        return target or ''
    parts = module_name.split('.') if module_name else []
    if not is_package:
        parts = parts[:-1]
    if level > 1:
        parts = parts[: len(parts) - (level - 1)]
    if target:
        parts.append(target)
    return '.'.join(parts)


@dataclasses.dataclass
class PythonModule:
    """A parsed module and the names it binds at top level.

    Attributes:
        name: Dotted module name.
        path: Path relative to the project root, in posix form.
        tree: The parsed module.
        is_package: Whether the module is a package ``__init__``.
        classes: Top-level class definitions by name.
        definitions: Every name bound at top level by a definition or assignment.
        from_imports: Local name -> (absolute module, imported name).
        module_imports: Local name -> (imported module, alias or None).
    """

    name: str
    path: str
    tree: ast.Module
    is_package: bool = False
    classes: dict[str, ast.ClassDef] = dataclasses.field(default_factory=dict)
    definitions: set[str] = dataclasses.field(default_factory=set)
    from_imports: dict[str, tuple[str, str]] = dataclasses.field(default_factory=dict)
    module_imports: dict[str, tuple[str, str | None]] = dataclasses.field(
        default_factory=dict
    )

    @classmethod
    def parse(cls, source: str, path: str, package: str | None = None) -> 'PythonModule':
        """Parse module source.

        Raises:
            SourceLoadError: If the source is not valid Python.
        """
        try:
            tree = ast.parse(source, filename=path)
        except SyntaxError as e:
            raise SourceLoadError(path, cause=e) from e

        name, is_package = module_name_for(path, package)
        module = cls(name=name, path=path, tree=tree, is_package=is_package)
        module._index()
        return module

    @property
    def file_name(self) -> str:
        return PurePosixPath(self.path).name

    def _index(self) -> None:
        for node in self.tree.body:
            if isinstance(node, ast.ClassDef):
                self.classes[node.name] = node
                self.definitions.add(node.name)
            elif isinstance(node, (ast.FunctionDef, ast.AsyncFunctionDef)):
                self.definitions.add(node.name)
            elif isinstance(node, ast.Assign):
                for target in node.targets:
                    if isinstance(target, ast.Name):
                        self.definitions.add(target.id)
            elif isinstance(node, ast.AnnAssign) and isinstance(node.target, ast.Name):
                self.definitions.add(node.target.id)
            elif isinstance(node, ast.ImportFrom):
                source_module = resolve_relative_module(
                    self.name, self.is_package, node.level, node.module
                )
                for alias in node.names:
                    if alias.name == '*':
                        continue
                    self.from_imports[alias.asname or alias.name] = (
                        source_module,
                        alias.name,
                    )
            elif isinstance(node, ast.Import):
                for alias in node.names:
                    if alias.asname:
                        self.module_imports[alias.asname] = (alias.name, alias.asname)
                    else:
                        self.module_imports[alias.name.split('.')[0]] = (
                            alias.name,
                            None,
                        )


class SourceProject:
    """An index of parsed Python modules.

    Example:
        >>> project = SourceProject.load('./app', exclude=['tests/*'])
        >>> for unit in project.units:
        ...     print(unit.name)
    """

    def __init__(self, modules: Iterable[PythonModule]):
        self.modules: dict[str, PythonModule] = {}
        self._ordered: list[PythonModule] = []
        for module in modules:
            self.modules[module.name] = module
            self._ordered.append(module)

    @classmethod
    def from_sources(
        cls, sources: Mapping[str, str], package: str | None = None
    ) -> 'SourceProject':
        """Build a project from in-memory ``{relative path: source}`` entries."""
        return cls(
            PythonModule.parse(source, path, package)
            for path, source in sorted(sources.items())
        )

    @classmethod
    def load(
        cls,
        root: str | Path,
        include: Sequence[str] = DEFAULT_INCLUDE,
        exclude: Sequence[str] = (),
        package: str | None = None,
    ) -> 'SourceProject':
        """Parse every selected file below ``root``.

        Patterns use fnmatch semantics against the posix path relative to
        ``root``, so ``*`` also matches across directories.

        Raises:
            SourceLoadError: If the root is missing or a file cannot be read or parsed.
        """
        root = Path(root)
        if not root.is_dir():
            raise SourceLoadError(str(root), cause=NotADirectoryError(str(root)))

        modules = []
        for path in sorted(p for p in root.rglob('*.py') if p.is_file()):
            relative = path.relative_to(root).as_posix()
            if not any(fnmatch.fnmatch(relative, pattern) for pattern in include):
                continue
            if any(fnmatch.fnmatch(relative, pattern) for pattern in exclude):
                logger.debug(f'Excluding {relative}')
                continue
            try:
                source = path.read_text(encoding='utf-8')
            except (OSError, UnicodeDecodeError) as e:
                raise SourceLoadError(str(path), cause=e) from e
            modules.append(PythonModule.parse(source, relative, package))

        logger.info(f'Loaded {len(modules)} module(s) from {root}')
        return cls(modules)

    @property
    def units(self) -> list['PythonSourceUnit']:
        from routegen.source.declarations import PythonSourceUnit

        return [PythonSourceUnit(module, self) for module in self._ordered]

    def find_class(
        self,
        module: PythonModule,
        name: str,
        _seen: set[tuple[str, str]] | None = None,
    ) -> tuple[PythonModule, ast.ClassDef] | None:
        """Locate the class a name refers to from inside ``module``.

        Follows from-imports (and therefore re-exports) through the modules
        known to this project.
        """
        seen = _seen if _seen is not None else set()
        if (module.name, name) in seen:
            return None
        seen.add((module.name, name))

        if name in module.classes:
            return module, module.classes[name]
        if name in module.from_imports:
            source_module, imported_name = module.from_imports[name]
            target = self.modules.get(source_module)
            if target is not None:
                return self.find_class(target, imported_name, seen)
        return None

