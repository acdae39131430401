"""POEditor Locale Mapping.

Maps POEditor language codes to Xcode locale identifiers and works out the .lproj
folders each exported language is written to.
"""

from pathlib import Path

from babel import Locale, UnknownLocaleError
from settings import ExportSettings

DEFAULT_OUTPUT_FOLDER: str = "POEditor"

# POEditor still uses region codes for Chinese
POEDITOR_LOCALES: dict[str, str] = {
    "zh-CN": "zh-Hans",
    "zh-TW": "zh-Hant",
}


def parse_locale_identifier(identifier: str) -> Locale | None:
    """Parse a locale identifier with CLDR alias resolution.

    Args:
        identifier (str): A locale identifier such as "pt_br" or "zh-Hans".

    Returns:
        Locale | None: The babel locale, or None if CLDR does not know it.
    """
    try:
        return Locale.parse(identifier.strip().replace("_", "-"), sep="-")
    except (ValueError, TypeError, UnknownLocaleError):
        return None


def canonical_locale_identifier(identifier: str) -> str:
    """Canonicalize a locale identifier.

    Args:
        identifier (str): A locale identifier such as "pt_br" or "sh".

    Returns:
        str: The canonical identifier, e.g. "pt-BR" or "sr-Latn", or the identifier
            unchanged if it cannot be parsed.
    """
    locale = parse_locale_identifier(identifier)
    if locale is None:
        return identifier

    subtags = (locale.language, locale.script, locale.territory, locale.variant)
    return "-".join(subtag for subtag in subtags if subtag)


def locale_display_name(identifier: str) -> str:
    """The English name of a locale, e.g. "Portuguese (Brazil)" for "pt-BR"."""
    locale = parse_locale_identifier(identifier)
    if locale is None:
        return identifier
    return locale.get_display_name("en") or identifier


def canonicalize_locale(code: str) -> str:
    """Convert a POEditor language code to an Xcode locale identifier.

    Args:
        code (str): The POEditor language code.

    Returns:
        str: The Xcode locale identifier.
    """
    return canonical_locale_identifier(POEDITOR_LOCALES.get(code, code))


def export_root(settings: ExportSettings, working_dir: Path | None = None) -> Path:
    """Determine the export root folder.

    Args:
        settings (ExportSettings): The export settings.
        working_dir (Path | None, optional): Folder relative output folders are
            resolved against. Defaults to the current working directory.

    Returns:
        Path: The absolute export root.
    """
    output_folder = Path(settings.output_folder or DEFAULT_OUTPUT_FOLDER)
    if output_folder.is_absolute():
        return output_folder
    return (working_dir or Path.cwd()) / output_folder


def destination_folders(
    platform_locale: str, settings: ExportSettings, root: Path | None = None
) -> list[Path]:
    """The .lproj folders the translations of a locale are written to.

    Args:
        platform_locale (str): The Xcode locale identifier.
        settings (ExportSettings): The export settings.
        root (Path | None, optional): The export root. Defaults to export_root().

    Returns:
        list[Path]: The folders, in the order they are written. A mapping entry for
            the locale replaces the default folder.
    """
    if root is None:
        root = export_root(settings)

    mapped = (settings.mapping or {}).get(platform_locale)
    if mapped:
        return [root / f"{locale}.lproj" for locale in mapped]
    return [root / f"{platform_locale}.lproj"]
