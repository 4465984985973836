import os
import tomllib
from pathlib import Path

import yaml
from pydantic import BaseModel, Field, ValidationError
from pydantic_settings import BaseSettings, SettingsConfigDict

from routegen.exceptions import ConfigurationError
from routegen.extractor import DEFAULT_API_NAME, DEFAULT_FILE_SUFFIX
from routegen.generator import DEFAULT_CLIENT_SUFFIX, DEFAULT_RUNTIME_MODULE
from routegen.source.project import DEFAULT_INCLUDE

DEFAULT_FILENAMES = ['routegen.yaml', 'routegen.yml']


class ProjectConfig(BaseModel):
    """Represents a single controller project to generate clients for."""

    source: str = Field(..., description='Root directory of the controller sources.')

    output: str = Field(..., description='Output directory for the generated clients.')

    api_name: str = Field(
        DEFAULT_API_NAME,
        description='API group name; generated modules go to <output>/<api_name>/.',
    )

    package: str | None = Field(
        None,
        description='Dotted package the source root corresponds to, used to import server-side types.',
    )

    include: list[str] = Field(
        list(DEFAULT_INCLUDE),
        description='fnmatch patterns (relative to source) of files to read.',
    )

    exclude: list[str] = Field(
        default_factory=list,
        description='fnmatch patterns (relative to source) of files to skip.',
    )

    controller_file_suffix: str = Field(
        DEFAULT_FILE_SUFFIX,
        description='Suffix stripped from controller file names to form client module names.',
    )

    client_suffix: str = Field(
        DEFAULT_CLIENT_SUFFIX, description='Suffix of generated client module names.'
    )

    runtime_module: str = Field(
        DEFAULT_RUNTIME_MODULE,
        description='Module providing the request function and RequestOptions type.',
    )

    create_init: bool = Field(
        True, description='Whether to write an __init__.py re-exporting the clients.'
    )


class CodegenConfig(BaseSettings):
    model_config = SettingsConfigDict(env_prefix='ROUTEGEN_')

    projects: list[ProjectConfig] = Field(
        ..., description='List of controller projects to process.'
    )


def load_yaml(path: str | Path) -> dict:
    try:
        return yaml.safe_load(Path(path).read_text()) or {}
    except (OSError, yaml.YAMLError) as e:
        raise ConfigurationError(
            f'Cannot read configuration: {e}', config_path=str(path)
        ) from e


def _validate(data: dict, source: str) -> CodegenConfig:
    try:
        return CodegenConfig.model_validate(data)
    except ValidationError as e:
        first = e.errors()[0]
        raise ConfigurationError(
            f'Invalid configuration: {first["msg"]}',
            config_path=source,
            field='.'.join(str(part) for part in first['loc']),
        ) from e


def get_config(path: str | None = None) -> CodegenConfig:
    """Load configuration from a file, the working directory or pyproject.toml.

    Raises:
        ConfigurationError: If no configuration is found or it is invalid.
    """
    if path:
        return _validate(load_yaml(path), path)

    cwd = Path(os.getcwd())

    for filename in DEFAULT_FILENAMES:
        candidate = cwd / filename
        if candidate.exists():
            return _validate(load_yaml(candidate), str(candidate))

    pyproject_path = cwd / 'pyproject.toml'

    if pyproject_path.exists():
        pyproject = tomllib.loads(pyproject_path.read_text())
        tools = pyproject.get('tool', {})

        if 'routegen' in tools:
            return _validate(tools['routegen'], str(pyproject_path))

    raise ConfigurationError('No routegen configuration found', config_path=str(cwd))
