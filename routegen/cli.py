import logging
from typing import Annotated

import typer
from rich.console import Console
from rich.logging import RichHandler
from rich.progress import Progress, SpinnerColumn, TextColumn
from rich.table import Table

from routegen.codegen import Codegen
from routegen.config import get_config
from routegen.exceptions import RouteGenError

console = Console()
app = typer.Typer(
    name='routegen',
    help='Generate typed API clients from annotated controller classes',
    no_args_is_help=True,
)

ConfigOption = Annotated[
    str | None,
    typer.Option('--config', '-c', help='Path to configuration file (YAML)'),
]
VerboseOption = Annotated[
    bool, typer.Option('--verbose', '-v', help='Show debug logging')
]


def _configure_logging(verbose: bool) -> None:
    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.WARNING,
        format='%(message)s',
        handlers=[RichHandler(console=console, show_path=False)],
    )


@app.command()
def generate(config: ConfigOption = None, verbose: VerboseOption = False) -> None:
    """Generate client code for every configured project.

    If no config file is specified, will look for routegen.yaml/routegen.yml
    in the current directory or a [tool.routegen] table in pyproject.toml.

    Examples:
        routegen generate
        routegen generate --config my-config.yaml
    """
    _configure_logging(verbose)
    try:
        codegen_config = get_config(config)

        for project_config in codegen_config.projects:
            with Progress(
                SpinnerColumn(),
                TextColumn('[progress.description]{task.description}'),
                console=console,
            ) as progress:
                task = progress.add_task(
                    f'Generating clients for {project_config.source} in {project_config.output}...',
                    total=None,
                )
                written = Codegen(project_config).generate()
                progress.update(
                    task,
                    description=f'Code generation completed for {project_config.source}!',
                )

            console.print('[dim]Generated files:[/dim]')
            for path in written:
                console.print(f'  - {path}')

        console.print('[green]Successfully generated code[/green]')
    except RouteGenError as e:
        console.print(f'[red]Error:[/red] {e}')
        raise typer.Exit(1)


def _describe(type_holder) -> str:
    return type_holder.type.text if type_holder is not None else '-'


@app.command()
def inspect(config: ConfigOption = None, verbose: VerboseOption = False) -> None:
    """Show the routes that would be generated, without writing anything."""
    _configure_logging(verbose)
    try:
        codegen_config = get_config(config)

        for project_config in codegen_config.projects:
            table = Table(title=f'{project_config.source} -> {project_config.api_name}')
            for column in ('Client', 'Method', 'Verb', 'Path', 'Body', 'Query', 'Response'):
                table.add_column(column)

            for route_file in Codegen(project_config).extract():
                for route_class in route_file.route_classes:
                    for route in route_class.routes:
                        table.add_row(
                            route_class.client_name,
                            route.name,
                            route.verb.value,
                            route.path,
                            _describe(route.request_body),
                            _describe(route.query_parameters),
                            route.response_body.type.text if route.response_body else 'None',
                        )
            console.print(table)
    except RouteGenError as e:
        console.print(f'[red]Error:[/red] {e}')
        raise typer.Exit(1)


@app.command()
def version() -> None:
    """Show the version of routegen."""
    from routegen import __version__

    console.print(f'routegen version: {__version__}')


if __name__ == '__main__':
    app()
