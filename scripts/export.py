"""POEditor Strings Exporter.

This script exports the translations of a POEditor project into Xcode .lproj
folders. Each language is exported as JSON, split into one .strings file per
source context and written to every .lproj folder the language maps to.
Languages are exported one at a time and the run stops at the first failure.
"""

import argparse
import sys
from dataclasses import dataclass, field
from pathlib import Path

from convert import (
    EXPORT_FORMATS,
    file_extension,
    group_by_file_name,
    parse_export_payload,
    save_strings_file,
)
from errors import ConfigurationError, DirectoryCreationError, ExportError, WriteError
from locales import canonicalize_locale, destination_folders, export_root, locale_display_name
from poeditor import POEditorClient
from settings import (
    ExportSettings,
    load_settings_file,
    parse_mapping_options,
    save_settings_file,
)

STRUCTURED_FORMAT: str = "json"


@dataclass
class ExportSummary:
    """Outcome of a completed export run.

    Attributes:
        written (list[Path]): Written files, in the order they were written
        skipped_contexts (dict[str, list[str]]): Contexts without a strings file
            name, per POEditor language code
    """

    written: list[Path] = field(default_factory=list)
    skipped_contexts: dict[str, list[str]] = field(default_factory=dict)


def write_structured_export(
    payload: bytes, folders: list[Path], root: Path
) -> tuple[list[Path], list[str]]:
    """Split a JSON export into strings files and write them to every folder.

    Args:
        payload (bytes): The JSON export of one language.
        folders (list[Path]): The .lproj folders to write to.
        root (Path): The export root, for display purposes.

    Returns:
        tuple[list[Path], list[str]]: The written files and the skipped contexts.
    """
    files, skipped = group_by_file_name(parse_export_payload(payload))

    for context in skipped:
        print(f"Warning: Skipping context '{context}', not a strings file", file=sys.stderr)

    written: list[Path] = []
    for name, translations in files.items():
        for folder in folders:
            file_path = save_strings_file(translations, name, folder)
            written.append(file_path)
            print(f"\t✓ {file_path.relative_to(root)}")

    return written, skipped


def write_flat_export(payload: bytes, platform_locale: str, export_format: str, root: Path) -> Path:
    """Write an export unchanged as <root>/<locale>.<extension>.

    Raises:
        WriteError: If the file cannot be written.
    """
    output_file = root / f"{platform_locale}.{file_extension(export_format)}"
    try:
        output_file.write_bytes(payload)
    except OSError as e:
        raise WriteError(f"Unable to write {output_file}: {e}") from e

    print(f"\t✓ {output_file.name}")
    return output_file


def export_language(
    code: str,
    settings: ExportSettings,
    client: POEditorClient,
    root: Path,
    export_format: str = STRUCTURED_FORMAT,
    for_xcode: bool = True,
) -> tuple[list[Path], list[str]]:
    """Export a single POEditor language.

    Args:
        code (str): The POEditor language code.
        settings (ExportSettings): The export settings.
        client (POEditorClient): Client used to request the export.
        root (Path): The export root.
        export_format (str, optional): POEditor export type. Defaults to "json".
        for_xcode (bool, optional): Split the export into strings files. Defaults
            to True.

    Returns:
        tuple[list[Path], list[str]]: The written files and the skipped contexts.

    Raises:
        ExportError: If any step of the export fails.
    """
    platform_locale = canonicalize_locale(code)
    print(f"\nExporting {locale_display_name(platform_locale)} [{platform_locale}]...")

    folders = destination_folders(platform_locale, settings, root)
    if (settings.mapping or {}).get(platform_locale):
        print(f"Language is mapped, creating: {', '.join(f.stem for f in folders)}")

    output_folder = folders[0] if for_xcode else root
    try:
        output_folder.mkdir(parents=True, exist_ok=True)
    except OSError as e:
        raise DirectoryCreationError(f"Unable to create output folder {output_folder}: {e}") from e

    payload = client.export_translations(settings.project_id, code, export_format)

    if for_xcode:
        return write_structured_export(payload, folders, root)
    return [write_flat_export(payload, platform_locale, export_format, root)], []


def run_export(
    settings: ExportSettings,
    client: POEditorClient,
    export_format: str = STRUCTURED_FORMAT,
    for_xcode: bool = True,
    working_dir: Path | None = None,
) -> ExportSummary:
    """Export every configured language, in sorted order.

    Args:
        settings (ExportSettings): The export settings.
        client (POEditorClient): Client used to talk to POEditor.
        export_format (str, optional): POEditor export type. Defaults to "json".
        for_xcode (bool, optional): Split exports into strings files. Defaults to
            True.
        working_dir (Path | None, optional): Folder a relative output folder is
            resolved against. Defaults to the current working directory.

    Returns:
        ExportSummary: What was written and skipped.

    Raises:
        ExportError: On the first failure; remaining languages are not exported.
    """
    if not settings.project_id:
        raise ConfigurationError("No POEditor project ID")
    file_extension(export_format)
    if for_xcode and export_format != STRUCTURED_FORMAT:
        raise ConfigurationError(
            f"Xcode exports need the '{STRUCTURED_FORMAT}' format, got '{export_format}'"
        )

    if not settings.languages:
        settings = settings.with_languages(client.list_languages(settings.project_id))
        if not settings.languages:
            raise ConfigurationError(f"Project {settings.project_id} has no languages")

    root = export_root(settings, working_dir)
    count = len(settings.languages)
    lang_str = "One language" if count == 1 else f"{count} languages"
    print(f"{lang_str} will be exported to {root}")

    summary = ExportSummary()
    for code in sorted(settings.languages):
        written, skipped = export_language(code, settings, client, root, export_format, for_xcode)
        summary.written.extend(written)
        if skipped:
            summary.skipped_contexts[code] = skipped

    print("\nExport complete")
    return summary


def build_parser() -> argparse.ArgumentParser:
    """Build the command-line parser."""
    parser = argparse.ArgumentParser(
        description="Export POEditor translations into Xcode .strings files",
    )
    parser.add_argument("-c", "--config", type=Path, help="Path to a JSON settings file")
    parser.add_argument("-p", "--project-id", help="POEditor project ID")
    parser.add_argument(
        "-l",
        "--language",
        action="append",
        dest="languages",
        metavar="CODE",
        help="POEditor language code to export, repeatable (default: all project languages)",
    )
    parser.add_argument(
        "-o", "--output-folder", help="Export root folder (default: POEditor)"
    )
    parser.add_argument(
        "-f",
        "--format",
        default=STRUCTURED_FORMAT,
        choices=EXPORT_FORMATS,
        help="POEditor export format (default: json)",
    )
    parser.add_argument(
        "--no-xcode",
        action="store_false",
        dest="for_xcode",
        help="Save each export as a single file instead of splitting it into .lproj folders",
    )
    parser.add_argument(
        "-m",
        "--map",
        action="append",
        default=[],
        metavar="LOCALE=FOLDER[,FOLDER]",
        help="Write a locale to these .lproj folders instead of its own, repeatable",
    )
    parser.add_argument("--api-token", help="POEditor API token (default: $POEDITOR_API_TOKEN)")
    parser.add_argument(
        "--save-config", type=Path, metavar="PATH", help="Save the resulting settings to PATH"
    )
    return parser


def settings_from_args(args: argparse.Namespace) -> ExportSettings:
    """Combine the settings file and command-line options, options winning.

    Raises:
        ConfigurationError: If the settings file or an option is invalid.
    """
    base = load_settings_file(args.config) if args.config else ExportSettings(project_id="")

    mapping = base.mapping
    if args.map:
        mapping = {**(mapping or {}), **parse_mapping_options(args.map)}

    return ExportSettings(
        project_id=args.project_id or base.project_id,
        languages=frozenset(args.languages) if args.languages else base.languages,
        output_folder=args.output_folder or base.output_folder,
        mapping=mapping,
        api_token=args.api_token or base.api_token,
    )


def main(argv: list[str] | None = None) -> None:
    """Command-line entry point for the exporter."""
    args = build_parser().parse_args(argv)

    try:
        settings = settings_from_args(args)
        if args.save_config:
            save_settings_file(args.save_config, settings)
            print(f"Saved settings to {args.save_config}")

        client = POEditorClient(settings.resolve_api_token())
        run_export(settings, client, export_format=args.format, for_xcode=args.for_xcode)
    except ExportError as e:
        print(f"\nExport Failed: {e}", file=sys.stderr)
        sys.exit(1)


if __name__ == "__main__":
    main()
