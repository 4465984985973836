"""Code generation orchestration for routegen.

This module provides the main Codegen class that runs the pipeline for one
configured project: load controller sources, extract routes, generate client
modules and write them out.
"""

import logging

from routegen.config import ProjectConfig
from routegen.emitter import CodeEmitter, FileEmitter
from routegen.exceptions import CodeGenerationError
from routegen.extractor import RouteExtractor
from routegen.generator import ClientGenerator, ClientModule
from routegen.ir import RouteFile
from routegen.source import SourceProject

__all__ = ['Codegen']

logger = logging.getLogger(__name__)


class Codegen:
    """Main code generator for creating clients from annotated controllers.

    This class orchestrates the entire code generation process:
    - Loading and parsing controller sources
    - Extracting the route model from decorated classes and methods
    - Generating client classes with one async method per route
    - Writing output modules below ``<output>/<api_name>/``

    Extraction runs to completion before anything is generated, so a broken
    route (for example an unbound path parameter) fails the whole run and
    no partial client is written.

    Attributes:
        config: The ProjectConfig containing source and output settings.

    Example:
        >>> config = ProjectConfig(source='./app', output='./clients')
        >>> Codegen(config).generate()
        # Creates ./clients/api/users_client.py, ...
    """

    def __init__(
        self,
        config: ProjectConfig,
        project: SourceProject | None = None,
        emitter: CodeEmitter | None = None,
    ):
        """Initialize the code generator.

        Args:
            config: Configuration specifying sources and output location.
            project: Optional pre-loaded sources. Loaded from ``config.source``
                when not provided.
            emitter: Optional emitter. A FileEmitter writing to
                ``config.output`` is used when not provided.
        """
        self.config = config
        self._project = project
        self.emitter = emitter or FileEmitter(config.output)
        self.extractor = RouteExtractor(
            api_name=config.api_name, file_suffix=config.controller_file_suffix
        )
        self.generator = ClientGenerator(
            runtime_module=config.runtime_module, client_suffix=config.client_suffix
        )

    @property
    def project(self) -> SourceProject:
        if self._project is None:
            self._project = SourceProject.load(
                self.config.source,
                include=self.config.include,
                exclude=self.config.exclude,
                package=self.config.package,
            )
        return self._project

    def extract(self) -> list[RouteFile]:
        """Extract the route model of every controller file.

        Raises:
            SourceLoadError: If a source file cannot be parsed.
            ExtractionError: If a route cannot be extracted.
        """
        return self.extractor.extract(self.project.units)

    def build(self) -> list[ClientModule]:
        """Extract and generate client modules without writing them."""
        client_modules = self.generator.generate(self.extract())

        paths: dict[str, ClientModule] = {}
        for client_module in client_modules:
            if client_module.relative_path in paths:
                raise CodeGenerationError(
                    'Two controller files map to the same client module',
                    context=client_module.relative_path,
                )
            paths[client_module.relative_path] = client_module
        return client_modules

    def generate(self) -> list[str]:
        """Run the full pipeline and emit every client module.

        Returns:
            The emitted paths (or sources, for a StringEmitter).
        """
        client_modules = self.build()
        if not client_modules:
            logger.warning(f'No controllers found in {self.config.source}')
            return []

        emitted = [self.emitter.emit_client(m) for m in client_modules]
        if self.config.create_init:
            emitted.extend(self.emitter.emit_init(client_modules))
        return emitted
