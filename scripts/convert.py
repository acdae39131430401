"""POEditor Export Converter.

This module turns POEditor JSON exports into Apple .strings files. It parses
export payloads into per-context translations, derives the strings file name for
each context and reads and writes the .strings format itself.
"""

import re
import sys
from collections import OrderedDict
from collections.abc import Iterable, Mapping
from dataclasses import dataclass, field
from pathlib import Path

import orjson
from errors import ConfigurationError, MalformedPayloadError, WriteError

DEFAULT_CONTEXT: str = "Localizable.strings"
STRINGS_EXTENSIONS: tuple[str, ...] = ("strings", "storyboard", "plist")
PLURAL_KEY_FORMAT: str = "{term}##{{{category}}}"

EXPORT_FORMATS: tuple[str, ...] = (
    "po",
    "pot",
    "mo",
    "xls",
    "xlsx",
    "csv",
    "ini",
    "resw",
    "resx",
    "android_strings",
    "apple_strings",
    "xliff",
    "properties",
    "key_value_json",
    "json",
    "yml",
    "xlf",
    "xmb",
    "xtb",
    "arb",
)

_ESCAPES: dict[str, str] = {"\\": "\\\\", '"': '\\"', "\n": "\\n", "\r": "\\r", "\t": "\\t"}
_UNESCAPES: dict[str, str] = {"n": "\n", "r": "\r", "t": "\t", "0": "\0"}

_STRINGS_TOKEN = re.compile(
    r'/\*.*?\*/|//[^\n]*|"((?:[^"\\]|\\.)*)"\s*=\s*"((?:[^"\\]|\\.)*)"\s*;',
    re.DOTALL,
)
_ESCAPE_SEQUENCE = re.compile(r"\\(U[0-9a-fA-F]{4}|.)", re.DOTALL)


@dataclass(frozen=True)
class HasDefinition:
    """A term translated with a single string."""

    value: str


@dataclass(frozen=True)
class HasPlurals:
    """A term translated with one string per plural category."""

    forms: dict[str, str] = field(default_factory=dict)


@dataclass(frozen=True)
class NotTranslated:
    """A term without a translation in the exported language."""


TranslatedTerm = HasDefinition | HasPlurals | NotTranslated


@dataclass(frozen=True)
class Translation:
    """A single exported term.

    Attributes:
        term (str): The term, used as the strings key
        comment (str | None): Comment for translators, written above the entry
        translated (TranslatedTerm): The translation of the term
    """

    term: str
    comment: str | None
    translated: TranslatedTerm


def normalize_context(context: str) -> str:
    """Reduce a POEditor context to the file name it refers to.

    Args:
        context (str): The raw context of a term.

    Returns:
        str: "Localizable.strings" for an empty context, otherwise the part after
            the last "/".
    """
    if not context:
        return DEFAULT_CONTEXT
    return context.rsplit("/", 1)[-1]


def strings_file_name(context: str) -> str | None:
    """The strings file name to write the terms of a context to.

    Args:
        context (str): A normalized context such as "Main.storyboard".

    Returns:
        str | None: The output file name, or None if the context is not a
            strings, storyboard or plist file.
    """
    name = context.rsplit("/", 1)[-1]
    base, dot, extension = name.rpartition(".")
    if not dot or extension not in STRINGS_EXTENSIONS:
        return None

    if extension == "plist":
        return f"{base}Plist.strings"
    return f"{base}.strings"


def parse_translated_term(definition: object) -> TranslatedTerm:
    """Pick the TranslatedTerm variant from the shape of a definition field."""
    if isinstance(definition, str):
        return HasDefinition(definition)
    if isinstance(definition, dict) and all(
        isinstance(k, str) and isinstance(v, str) for k, v in definition.items()
    ):
        return HasPlurals(dict(definition))
    return NotTranslated()


def parse_translation(record: object, index: int) -> tuple[str, Translation]:
    """Parse one record of a POEditor JSON export.

    Args:
        record (object): The decoded record.
        index (int): Position of the record in the payload, for error messages.

    Returns:
        tuple[str, Translation]: The normalized context and the translation.

    Raises:
        MalformedPayloadError: If the record has no string term or context.
    """
    if not isinstance(record, dict):
        raise MalformedPayloadError(f"Record {index} is not an object")

    term = record.get("term")
    context = record.get("context")
    if not isinstance(term, str) or not term:
        raise MalformedPayloadError(f"Record {index} has no term")
    if not isinstance(context, str):
        raise MalformedPayloadError(f"Record {index} ({term!r}) has no context")

    comment = record.get("comment")
    if not isinstance(comment, str):
        comment = None

    translation = Translation(
        term=term,
        comment=comment,
        translated=parse_translated_term(record.get("definition")),
    )
    return normalize_context(context), translation


def parse_export_payload(raw: bytes) -> dict[str, tuple[Translation, ...]]:
    """Group the records of a POEditor JSON export by normalized context.

    Args:
        raw (bytes): The downloaded export.

    Returns:
        dict[str, tuple[Translation, ...]]: Translations per context, in the order
            they appear in the payload.

    Raises:
        MalformedPayloadError: If the payload is not a list of valid records.
    """
    try:
        records = orjson.loads(raw)
    except orjson.JSONDecodeError as e:
        raise MalformedPayloadError(f"Export is not valid JSON: {e}") from e

    if not isinstance(records, list):
        raise MalformedPayloadError("Export is not a list of terms")

    contexts: dict[str, list[Translation]] = {}
    for index, record in enumerate(records):
        context, translation = parse_translation(record, index)
        contexts.setdefault(context, []).append(translation)

    return {context: tuple(translations) for context, translations in contexts.items()}


def group_by_file_name(
    contexts: Mapping[str, Iterable[Translation]],
) -> tuple[dict[str, tuple[Translation, ...]], list[str]]:
    """Merge contexts that are written to the same strings file.

    Contexts are visited in sorted order, so translations of contexts sharing a
    file name are concatenated in that order.

    Args:
        contexts (Mapping[str, Iterable[Translation]]): Translations per context.

    Returns:
        tuple: Translations per file name, and the contexts that have no strings
            file name.
    """
    files: dict[str, tuple[Translation, ...]] = {}
    skipped: list[str] = []

    for context in sorted(contexts):
        name = strings_file_name(context)
        if name is None:
            skipped.append(context)
            continue
        files[name] = files.get(name, ()) + tuple(contexts[context])

    return files, skipped


def plural_key(term: str, category: str) -> str:
    """The strings key of one plural category of a term."""
    return PLURAL_KEY_FORMAT.format(term=term, category=category)


def escape_strings_value(text: str) -> str:
    """Escape text for use inside a quoted .strings key or value."""
    return "".join(_ESCAPES.get(char, char) for char in text)


def unescape_strings_value(text: str) -> str:
    """Resolve the escape sequences of a quoted .strings key or value."""

    def replace(match: re.Match[str]) -> str:
        sequence = match.group(1)
        if len(sequence) == 5 and sequence[0] == "U":
            return chr(int(sequence[1:], 16))
        return _UNESCAPES.get(sequence, sequence)

    return _ESCAPE_SEQUENCE.sub(replace, text)


def strings_entries(translations: Iterable[Translation]) -> list[tuple[str, str, str | None]]:
    """Expand translations into (key, value, comment) strings entries.

    Plural translations give one entry per category, untranslated terms none.

    Raises:
        TypeError: If a translation carries an unknown TranslatedTerm.
    """
    entries: list[tuple[str, str, str | None]] = []

    for translation in translations:
        translated = translation.translated
        if isinstance(translated, HasDefinition):
            entries.append((translation.term, translated.value, translation.comment))
        elif isinstance(translated, HasPlurals):
            for category, value in translated.forms.items():
                entries.append((plural_key(translation.term, category), value, translation.comment))
        elif isinstance(translated, NotTranslated):
            continue
        else:
            raise TypeError(f"Unknown translated term: {translated!r}")

    return entries


def convert_translations_to_strings(translations: Iterable[Translation]) -> str:
    """Convert translations to .strings file content.

    Args:
        translations (Iterable[Translation]): The translations to convert.

    Returns:
        str: The .strings file content.
    """
    blocks: list[str] = []
    for key, value, comment in strings_entries(translations):
        lines: list[str] = []
        if comment:
            lines.append(f"/* {comment.replace('*/', '* /')} */")
        lines.append(f'"{escape_strings_value(key)}" = "{escape_strings_value(value)}";')
        blocks.append("\n".join(lines))

    if not blocks:
        return ""
    return "\n\n".join(blocks) + "\n"


def convert_strings_to_dict(strings_content: str) -> OrderedDict[str, str]:
    """Convert .strings file content to an ordered dictionary.

    Args:
        strings_content (str): The content of the .strings file.

    Returns:
        OrderedDict: Keys and values in file order, comments dropped.
    """
    data: OrderedDict[str, str] = OrderedDict()

    for match in _STRINGS_TOKEN.finditer(strings_content.replace("\ufeff", "")):
        key, value = match.group(1), match.group(2)
        if key is None:
            continue
        data[unescape_strings_value(key)] = unescape_strings_value(value)

    return data


def save_strings_file(translations: Iterable[Translation], file_name: str, folder: Path) -> Path:
    """Write translations to a .strings file, replacing any existing file.

    Args:
        translations (Iterable[Translation]): The translations to write.
        file_name (str): Name of the strings file.
        folder (Path): The .lproj folder to write into, created if missing.

    Returns:
        Path: The path of the written file.

    Raises:
        WriteError: If the folder or file cannot be written.
    """
    file_path = folder / file_name
    content = convert_translations_to_strings(translations)

    try:
        folder.mkdir(parents=True, exist_ok=True)
        file_path.write_text(content, encoding="utf-8", newline="\n")
    except OSError as e:
        raise WriteError(f"Unable to write {file_path}: {e}") from e

    return file_path


def load_strings_file(file_path: Path) -> OrderedDict[str, str]:
    """Load a .strings file into an ordered dictionary.

    Args:
        file_path (Path): The path to the .strings file.

    Returns:
        OrderedDict: The keys and values of the file.
    """
    return convert_strings_to_dict(file_path.read_text(encoding="utf-8"))


def file_extension(export_format: str) -> str:
    """The file extension POEditor uses for an export format.

    Args:
        export_format (str): A POEditor export type such as "apple_strings".

    Returns:
        str: The file extension without a leading dot.

    Raises:
        ConfigurationError: If the export format is unknown.
    """
    if export_format not in EXPORT_FORMATS:
        raise ConfigurationError(
            f"Unsupported export format '{export_format}'. "
            f"Supported formats: {', '.join(EXPORT_FORMATS)}"
        )

    if export_format in ("android_strings", "apple_strings"):
        return "strings"
    if export_format == "key_value_json":
        return "json"
    return export_format


def convert_export_file(export_file: Path, output_folder: Path) -> list[Path]:
    """Split a downloaded POEditor JSON export into strings files.

    Args:
        export_file (Path): The path to the JSON export.
        output_folder (Path): The folder to write the strings files into.

    Returns:
        list[Path]: The written files.
    """
    contexts = parse_export_payload(export_file.read_bytes())
    files, skipped = group_by_file_name(contexts)

    for context in skipped:
        print(f"Warning: Skipping context '{context}', not a strings file", file=sys.stderr)

    return [
        save_strings_file(translations, name, output_folder) for name, translations in files.items()
    ]


def main() -> None:
    """Command-line entry point for converting a saved JSON export."""
    if len(sys.argv) < 2:
        print("Usage: python convert.py <export.json> [output_folder]")
        print("Splits a POEditor JSON export into one .strings file per context.")
        print("\nExamples:")
        print("  python convert.py de.json                 # Write to the current folder")
        print("  python convert.py de.json de.lproj        # Write to de.lproj")
        sys.exit(1)

    export_file = Path(sys.argv[1])
    output_folder = Path(sys.argv[2]) if len(sys.argv) > 2 else Path.cwd()

    if not export_file.exists():
        print(f"Error: Input file '{export_file}' does not exist")
        sys.exit(1)

    try:
        written = convert_export_file(export_file, output_folder)
    except (MalformedPayloadError, WriteError) as e:
        print(f"Error: {e}")
        sys.exit(1)

    for file_path in written:
        print(f"Created {file_path}")


if __name__ == "__main__":
    main()
