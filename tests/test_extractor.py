"""Tests for the XML and source-code fact extractors."""

import pytest

from aster.analyzer.extractor import FileRecord, extract_source_file, extract_xml_file
from aster.errors import ExtractionError


def write(tmp_path, name, content, mode='w'):
    path = tmp_path / name
    if mode == 'wb':
        path.write_bytes(content)
    else:
        path.write_text(content, encoding='utf-8')
    return path


class TestSourceExtractor:
    """Java/Kotlin R.string.<id> scanning."""

    def test_multiple_refs_single_line(self, tmp_path):
        """Two references on one line yield two usages, in order."""
        path = write(tmp_path, 'Test.java', """
            class Cool {
                int values = [ R.string.foo, R.string.bar ];
            }
        """)

        record = extract_source_file(path)

        assert record.referenced_ids == ('foo', 'bar')
        assert record.declared_ids == ()
        assert record.path == str(path)

    def test_every_occurrence_counts(self, tmp_path):
        """N occurrences (including repeats) yield exactly N usages."""
        path = write(tmp_path, 'Screen.kt', (
            "val a = getString(R.string.title)\n"
            "val b = getString(R.string.title)\n"
            "val c = getString(R.string.subtitle_2)\n"
        ))

        record = extract_source_file(path)

        assert record.referenced_ids == ('title', 'title', 'subtitle_2')

    def test_other_resource_types_ignored(self, tmp_path):
        """R.layout / R.id / R.drawable accesses are not string usages."""
        path = write(tmp_path, 'Main.java', (
            "setContentView(R.layout.main);\n"
            "findViewById(R.id.title);\n"
            "setIcon(R.drawable.logo);\n"
        ))

        assert extract_source_file(path).referenced_ids == ()

    def test_dots_are_literal(self, tmp_path):
        """Only a literal 'R.string.' prefix matches, not 'R' + any char + 'string' + any char."""
        path = write(tmp_path, 'Odd.java', "String s = RXstringYfoo + R_string_bar;\n")

        assert extract_source_file(path).referenced_ids == ()

    def test_identifier_captured_whole(self, tmp_path):
        """The capture is the full identifier token after the prefix, whatever precedes it."""
        path = write(tmp_path, 'Dialog.java', "builder.setPositiveButton(android.R.string.ok, null);\n")

        assert extract_source_file(path).referenced_ids == ('ok',)

    def test_invalid_utf8_on_matching_line(self, tmp_path):
        """A reference line that is not UTF-8 makes the file a soft failure."""
        path = write(tmp_path, 'Broken.java', b"x = R.string.name; // \xff\xfe\n", mode='wb')

        with pytest.raises(ExtractionError) as excinfo:
            extract_source_file(path)

        assert str(path) in str(excinfo.value)

    def test_invalid_utf8_elsewhere_tolerated(self, tmp_path):
        """Lines without a reference are never decoded."""
        path = write(tmp_path, 'Latin1.java', b"// caf\xe9\nx = R.string.menu;\n", mode='wb')

        assert extract_source_file(path).referenced_ids == ('menu',)

    def test_unreadable_file(self, tmp_path):
        """A missing file raises ExtractionError naming the path."""
        with pytest.raises(ExtractionError, match='Gone.java'):
            extract_source_file(tmp_path / 'Gone.java')


class TestXmlExtractor:
    """Resource and manifest XML scanning."""

    def test_single_declaration(self, tmp_path):
        """One <string> element yields one declaration and no usages."""
        path = write(tmp_path, 'strings.xml', (
            '<?xml version="1.0" encoding="utf-8"?>\n'
            '<resources>\n'
            '    <string name="X">Some text</string>\n'
            '</resources>\n'
        ))

        record = extract_xml_file(path)

        assert record == FileRecord(path=str(path), declared_ids=('X',), referenced_ids=())

    def test_attribute_usage(self, tmp_path):
        """@string/<id> in a namespaced attribute is a usage."""
        path = write(tmp_path, 'layout.xml', (
            '<LinearLayout xmlns:android="http://schemas.android.com/apk/res/android">\n'
            '    <TextView android:id="@+id/title" android:text="@string/title" />\n'
            '    <Button android:text="@string/ok_button" android:contentDescription="@string/ok_desc" />\n'
            '</LinearLayout>\n'
        ))

        record = extract_xml_file(path)

        assert record.declared_ids == ()
        assert record.referenced_ids == ('title', 'ok_button', 'ok_desc')

    def test_framework_strings_not_captured(self, tmp_path):
        """@android:string/... points at the platform, not the app."""
        path = write(tmp_path, 'menu.xml', (
            '<menu xmlns:android="http://schemas.android.com/apk/res/android">\n'
            '    <item android:title="@android:string/cancel" />\n'
            '</menu>\n'
        ))

        assert extract_xml_file(path).referenced_ids == ()

    def test_cdata_usage(self, tmp_path):
        """References inside CDATA sections are usages."""
        path = write(tmp_path, 'raw.xml', (
            '<resources>\n'
            '    <item><![CDATA[see @string/help_link and @string/help_more]]></item>\n'
            '</resources>\n'
        ))

        assert extract_xml_file(path).referenced_ids == ('help_link', 'help_more')

    def test_text_alias_and_array_items(self, tmp_path):
        """String aliases and array items reference other strings through text."""
        path = write(tmp_path, 'values.xml', (
            '<resources>\n'
            '    <string name="save_alias">@string/save</string>\n'
            '    <string-array name="planets">\n'
            '        <item>@string/mercury</item>\n'
            '        <item>@string/venus</item>\n'
            '    </string-array>\n'
            '</resources>\n'
        ))

        record = extract_xml_file(path)

        assert record.declared_ids == ('save_alias',)
        assert record.referenced_ids == ('save', 'mercury', 'venus')

    def test_element_declares_and_uses(self, tmp_path):
        """A <string> element's other attributes can still contribute usages."""
        path = write(tmp_path, 'strings.xml', (
            '<resources xmlns:tools="http://schemas.android.com/tools">\n'
            '    <string name="copy" tools:text="@string/original">Copy</string>\n'
            '</resources>\n'
        ))

        record = extract_xml_file(path)

        assert record.declared_ids == ('copy',)
        assert record.referenced_ids == ('original',)

    def test_only_string_elements_declare(self, tmp_path):
        """plurals and string-array names are not string declarations."""
        path = write(tmp_path, 'plurals.xml', (
            '<resources>\n'
            '    <plurals name="songs"><item quantity="one">1 song</item></plurals>\n'
            '    <string-array name="colors"><item>red</item></string-array>\n'
            '    <string name="real">Real</string>\n'
            '</resources>\n'
        ))

        assert extract_xml_file(path).declared_ids == ('real',)

    def test_duplicate_declarations_kept(self, tmp_path):
        """Each declaration occurrence is recorded."""
        path = write(tmp_path, 'dupes.xml', (
            '<resources>\n'
            '    <string name="twice">One</string>\n'
            '    <string name="twice">Two</string>\n'
            '</resources>\n'
        ))

        assert extract_xml_file(path).declared_ids == ('twice', 'twice')

    def test_malformed_xml(self, tmp_path):
        """Malformed XML raises ExtractionError annotated with the path."""
        path = write(tmp_path, 'broken.xml', '<resources>\n    <string name="a">oops</resources>\n')

        with pytest.raises(ExtractionError) as excinfo:
            extract_xml_file(path)

        assert excinfo.value.path == str(path)
        assert 'malformed XML' in excinfo.value.reason
