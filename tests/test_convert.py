"""Tests for parsing POEditor exports and reading and writing .strings files."""

import orjson
import pytest
from convert import (
    HasDefinition,
    HasPlurals,
    NotTranslated,
    Translation,
    convert_export_file,
    convert_strings_to_dict,
    convert_translations_to_strings,
    file_extension,
    group_by_file_name,
    load_strings_file,
    normalize_context,
    parse_export_payload,
    plural_key,
    save_strings_file,
    strings_file_name,
)
from errors import ConfigurationError, MalformedPayloadError


def payload(*records: dict) -> bytes:
    return orjson.dumps(list(records))


class TestStringsFileName:
    def test_strings_context(self):
        assert strings_file_name("Foo.strings") == "Foo.strings"

    def test_storyboard_context(self):
        assert strings_file_name("Main.storyboard") == "Main.strings"

    def test_plist_context(self):
        assert strings_file_name("dir/Bar.plist") == "BarPlist.strings"

    def test_unknown_extension(self):
        assert strings_file_name("x.png") is None

    def test_no_extension(self):
        assert strings_file_name("Localizable") is None


class TestNormalizeContext:
    def test_empty_context_is_localizable(self):
        assert normalize_context("") == "Localizable.strings"

    def test_directories_are_stripped(self):
        assert normalize_context("App/Base.lproj/Main.storyboard") == "Main.storyboard"

    def test_plain_context_is_unchanged(self):
        assert normalize_context("Foo.strings") == "Foo.strings"


class TestParseExportPayload:
    def test_definition_variants(self):
        contexts = parse_export_payload(
            payload(
                {"term": "hello", "context": "", "definition": "Hallo"},
                {
                    "term": "files",
                    "context": "",
                    "definition": {"one": "%d Datei", "other": "%d Dateien"},
                },
                {"term": "bye", "context": "", "definition": None},
                {"term": "later", "context": ""},
            )
        )

        translated = [t.translated for t in contexts["Localizable.strings"]]
        assert translated == [
            HasDefinition("Hallo"),
            HasPlurals({"one": "%d Datei", "other": "%d Dateien"}),
            NotTranslated(),
            NotTranslated(),
        ]

    def test_plural_categories_are_preserved(self):
        forms = {"zero": "a", "one": "b", "two": "c", "few": "d", "many": "e", "other": "f"}
        contexts = parse_export_payload(payload({"term": "t", "context": "", "definition": forms}))

        assert contexts["Localizable.strings"][0].translated == HasPlurals(forms)

    def test_comment(self):
        contexts = parse_export_payload(
            payload(
                {"term": "a", "context": "", "definition": "A", "comment": "Button title"},
                {"term": "b", "context": "", "definition": "B", "comment": ""},
                {"term": "c", "context": "", "definition": "C"},
            )
        )

        assert [t.comment for t in contexts["Localizable.strings"]] == ["Button title", "", None]

    def test_empty_context_matches_localizable(self):
        contexts = parse_export_payload(
            payload(
                {"term": "a", "context": "", "definition": "A"},
                {"term": "b", "context": "Localizable.strings", "definition": "B"},
            )
        )

        assert list(contexts) == ["Localizable.strings"]
        assert [t.term for t in contexts["Localizable.strings"]] == ["a", "b"]

    def test_nested_contexts_are_merged_in_order(self):
        contexts = parse_export_payload(
            payload(
                {"term": "1", "context": "a/b/Foo.strings", "definition": "x"},
                {"term": "2", "context": "Foo.strings", "definition": "x"},
                {"term": "3", "context": "a/b/Foo.strings", "definition": "x"},
                {"term": "4", "context": "Bar.strings", "definition": "x"},
            )
        )

        assert [t.term for t in contexts["Foo.strings"]] == ["1", "2", "3"]
        assert [t.term for t in contexts["Bar.strings"]] == ["4"]

    def test_empty_list(self):
        assert parse_export_payload(b"[]") == {}

    @pytest.mark.parametrize(
        "raw",
        [
            b"",
            b"   ",
            b"null",
            b"not json",
            b'{"term": "a", "context": ""}',
            b'["a"]',
            b'[{"context": ""}]',
            b'[{"term": "a"}]',
            b'[{"term": "", "context": ""}]',
            b'[{"term": "a", "context": 5}]',
        ],
    )
    def test_malformed_payload(self, raw):
        with pytest.raises(MalformedPayloadError):
            parse_export_payload(raw)


class TestGroupByFileName:
    def test_contexts_with_same_file_are_concatenated_in_sorted_order(self):
        first = Translation("from_strings", None, HasDefinition("a"))
        second = Translation("from_storyboard", None, HasDefinition("b"))

        files, skipped = group_by_file_name(
            {"Foo.strings": (first,), "Foo.storyboard": (second,)}
        )

        assert files == {"Foo.strings": (second, first)}
        assert skipped == []

    def test_unresolved_contexts_are_skipped(self):
        translation = Translation("t", None, HasDefinition("a"))

        files, skipped = group_by_file_name(
            {"image.png": (translation,), "Info.plist": (translation,)}
        )

        assert list(files) == ["InfoPlist.strings"]
        assert skipped == ["image.png"]


class TestStringsFile:
    def test_content(self):
        content = convert_translations_to_strings(
            [
                Translation("hello", "Greeting", HasDefinition("Hallo")),
                Translation("bye", None, HasDefinition("Tschüss")),
                Translation("later", None, NotTranslated()),
            ]
        )

        assert content == '/* Greeting */\n"hello" = "Hallo";\n\n"bye" = "Tschüss";\n'

    def test_empty_comment_is_not_written(self):
        content = convert_translations_to_strings([Translation("a", "", HasDefinition("A"))])

        assert content == '"a" = "A";\n'

    def test_untranslated_only(self):
        assert convert_translations_to_strings([Translation("a", None, NotTranslated())]) == ""

    def test_plural_round_trip(self, tmp_path):
        forms = {"one": "%d file", "other": "%d files"}
        translations = [Translation("files", "Count", HasPlurals(forms))]

        file_path = save_strings_file(translations, "Localizable.strings", tmp_path / "en.lproj")
        data = load_strings_file(file_path)

        assert data == {
            plural_key("files", "one"): "%d file",
            plural_key("files", "other"): "%d files",
        }

    def test_escaping_round_trip(self, tmp_path):
        value = 'Say "hi"\\n\nnext\tline'
        translations = [Translation('key "quoted"', "a */ comment", HasDefinition(value))]

        file_path = save_strings_file(translations, "Foo.strings", tmp_path)

        assert load_strings_file(file_path) == {'key "quoted"': value}

    def test_overwrites_existing_file(self, tmp_path):
        (tmp_path / "Foo.strings").write_text('"old" = "value";\n', encoding="utf-8")

        save_strings_file([Translation("new", None, HasDefinition("x"))], "Foo.strings", tmp_path)

        assert load_strings_file(tmp_path / "Foo.strings") == {"new": "x"}

    def test_read_hand_written_file(self):
        content = (
            "\ufeff// Header\n"
            '/* "fake" = "entry"; */\n'
            '"a" = "A /* not a comment */";\n'
            '"b"="\\U00e9";\n'
        )

        assert convert_strings_to_dict(content) == {"a": "A /* not a comment */", "b": "é"}


class TestFileExtension:
    @pytest.mark.parametrize(
        "export_format, extension",
        [
            ("apple_strings", "strings"),
            ("android_strings", "strings"),
            ("key_value_json", "json"),
            ("json", "json"),
            ("xliff", "xliff"),
        ],
    )
    def test_extension(self, export_format, extension):
        assert file_extension(export_format) == extension

    def test_unknown_format(self):
        with pytest.raises(ConfigurationError):
            file_extension("docx")


def test_convert_export_file(tmp_path, capsys):
    export_file = tmp_path / "de.json"
    export_file.write_bytes(
        payload(
            {"term": "title", "context": "Base.lproj/Main.storyboard", "definition": "Titel"},
            {"term": "name", "context": "Info.plist", "definition": "Name"},
            {"term": "icon", "context": "Assets/icon.png", "definition": "Symbol"},
        )
    )

    written = convert_export_file(export_file, tmp_path / "de.lproj")

    assert [p.name for p in written] == ["InfoPlist.strings", "Main.strings"]
    assert load_strings_file(tmp_path / "de.lproj" / "Main.strings") == {"title": "Titel"}
    assert "icon.png" in capsys.readouterr().err
