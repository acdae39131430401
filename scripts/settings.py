"""POEditor Export Settings.

Settings of an export run, read from an optional JSON file and completed from the
command line and the environment.

Example settings file::

    {
        "projectID": "12345",
        "languages": ["de", "fr", "zh-CN"],
        "outputFolder": "App/Resources",
        "mapping": {"fr": ["fr", "fr-CA"]}
    }
"""

import os
from collections.abc import Iterable
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any

import orjson
from errors import ConfigurationError

API_TOKEN_ENV: str = "POEDITOR_API_TOKEN"


@dataclass(frozen=True)
class ExportSettings:
    """Settings of one export run.

    Attributes:
        project_id (str): The POEditor project ID
        languages (frozenset[str]): POEditor language codes to export, all project
            languages when empty
        output_folder (str | None): Export root, absolute or relative to the
            working directory
        mapping (dict[str, list[str]] | None): Xcode locales whose output is
            written to a list of other .lproj folders instead
        api_token (str | None): POEditor API token
    """

    project_id: str
    languages: frozenset[str] = field(default_factory=frozenset)
    output_folder: str | None = None
    mapping: dict[str, list[str]] | None = None
    api_token: str | None = None

    def with_languages(self, languages: Iterable[str]) -> "ExportSettings":
        """A copy of these settings exporting the given languages."""
        return ExportSettings(
            project_id=self.project_id,
            languages=frozenset(languages),
            output_folder=self.output_folder,
            mapping=self.mapping,
            api_token=self.api_token,
        )

    def resolve_api_token(self) -> str:
        """The API token from the settings or the environment.

        Raises:
            ConfigurationError: If no token is configured.
        """
        token = self.api_token or os.environ.get(API_TOKEN_ENV)
        if not token:
            raise ConfigurationError(
                f"No POEditor API token, pass --api-token or set {API_TOKEN_ENV}"
            )
        return token


def parse_mapping(data: Any) -> dict[str, list[str]] | None:
    """Validate a locale mapping read from a settings file.

    Args:
        data (Any): The decoded "mapping" value.

    Returns:
        dict[str, list[str]] | None: Folder locales per Xcode locale.

    Raises:
        ConfigurationError: If the mapping is not an object of string lists.
    """
    if data is None:
        return None
    if not isinstance(data, dict):
        raise ConfigurationError("mapping must be an object")

    mapping: dict[str, list[str]] = {}
    for locale, folders in data.items():
        if isinstance(folders, str):
            folders = [folders]
        if not isinstance(folders, list) or not all(isinstance(f, str) for f in folders):
            raise ConfigurationError(f"mapping for '{locale}' must be a list of locales")
        mapping[locale] = folders
    return mapping


def parse_mapping_options(options: Iterable[str]) -> dict[str, list[str]]:
    """Parse command-line mapping options of the form "fr=fr,fr-CA".

    Raises:
        ConfigurationError: If an option has no "=" or no folders.
    """
    mapping: dict[str, list[str]] = {}
    for option in options:
        locale, sep, folders = option.partition("=")
        names = [name.strip() for name in folders.split(",") if name.strip()]
        if not sep or not locale.strip() or not names:
            raise ConfigurationError(f"Invalid mapping '{option}', expected LOCALE=FOLDER[,FOLDER]")
        mapping[locale.strip()] = names
    return mapping


def settings_from_dict(data: dict[str, Any]) -> ExportSettings:
    """Build settings from a decoded settings file.

    Raises:
        ConfigurationError: If a value has the wrong type.
    """
    project_id = data.get("projectID", "")
    if isinstance(project_id, int):
        project_id = str(project_id)
    if not isinstance(project_id, str):
        raise ConfigurationError("projectID must be a string")

    languages = data.get("languages", [])
    if not isinstance(languages, list) or not all(isinstance(code, str) for code in languages):
        raise ConfigurationError("languages must be a list of language codes")

    output_folder = data.get("outputFolder")
    if output_folder is not None and not isinstance(output_folder, str):
        raise ConfigurationError("outputFolder must be a string")

    api_token = data.get("apiToken")
    if api_token is not None and not isinstance(api_token, str):
        raise ConfigurationError("apiToken must be a string")

    return ExportSettings(
        project_id=project_id,
        languages=frozenset(languages),
        output_folder=output_folder,
        mapping=parse_mapping(data.get("mapping")),
        api_token=api_token,
    )


def load_settings_file(file_path: Path) -> ExportSettings:
    """Load export settings from a JSON file.

    Args:
        file_path (Path): The path to the settings file.

    Returns:
        ExportSettings: The loaded settings.

    Raises:
        ConfigurationError: If the file cannot be read or is not a settings object.
    """
    try:
        data = orjson.loads(file_path.read_bytes())
    except (orjson.JSONDecodeError, OSError) as e:
        raise ConfigurationError(f"Failed to read settings {file_path}: {e}") from e

    if not isinstance(data, dict):
        raise ConfigurationError(f"Settings file {file_path} must contain an object")
    return settings_from_dict(data)


def save_settings_file(file_path: Path, settings: ExportSettings) -> None:
    """Save export settings as a JSON file, leaving the API token out.

    Args:
        file_path (Path): The path to save the settings file.
        settings (ExportSettings): The settings to save.

    Raises:
        ConfigurationError: If the file cannot be written.
    """
    data: dict[str, Any] = {
        "projectID": settings.project_id,
        "languages": sorted(settings.languages),
    }
    if settings.output_folder is not None:
        data["outputFolder"] = settings.output_folder
    if settings.mapping is not None:
        data["mapping"] = settings.mapping

    try:
        with file_path.open("wb") as f:
            f.write(orjson.dumps(data, option=orjson.OPT_INDENT_2 | orjson.OPT_SORT_KEYS))
    except OSError as e:
        raise ConfigurationError(f"Failed to save settings {file_path}: {e}") from e
