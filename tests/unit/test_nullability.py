"""Unit tests for the class-file reader and the nullability index."""

import zipfile
from pathlib import Path

import pytest

from dslgen.core.exceptions import ClassFileError
from dslgen.models import AnnotationVocabulary, MethodSignature, Nullability
from dslgen.services.nullability import ClassPath, NullabilityIndex
from dslgen.services.nullability.classfile import parse_class
from dslgen.services.nullability.service import convert_type_name, format_method_name


class TestClassFileReader:
    """Tests for the minimal class-file parser."""

    def test_parses_methods(self, assemble_class, text_view_methods):
        info = parse_class(assemble_class("android/widget/TextView", text_view_methods()))

        assert info.name == "android/widget/TextView"
        names = [m.name for m in info.methods]
        assert names == ["<init>", "setText", "setHint", "setTag", "setPadding", "setLines"]

        set_text = info.methods[1]
        assert [v.name for v in set_text.local_variables] == ["this", "text"]
        assert set_text.invisible_parameter_annotations == [["Landroidx/annotation/NonNull;"]]
        assert info.methods[3].invisible_parameter_annotations is None

    def test_bad_magic(self):
        with pytest.raises(ClassFileError):
            parse_class(b"\x00\x01\x02\x03" + b"\x00" * 16)

    def test_truncated(self, assemble_class, text_view_methods):
        data = assemble_class("android/widget/TextView", text_view_methods())
        with pytest.raises(ClassFileError) as exc_info:
            parse_class(data[:40], "android.widget.TextView")
        assert exc_info.value.class_name == "android.widget.TextView"


class TestNameNormalization:
    """Tests for descriptor and method name normalization."""

    @pytest.mark.parametrize(
        "descriptor,expected",
        [
            ("Ljava/lang/CharSequence;", "java.lang.CharSequence"),
            ("Landroid/view/View$OnClickListener;", "android.view.View.OnClickListener"),
            ("I", "int"),
            ("[I", "int"),
            ("[Ljava/lang/String;", "java.lang.String"),
            ("Z", "boolean"),
        ],
    )
    def test_convert_type_name(self, descriptor, expected):
        assert convert_type_name(descriptor) == expected

    def test_format_method_name(self):
        assert format_method_name("setText") == "text"
        assert format_method_name("setOnClickListener") == "onClickListener"
        assert format_method_name("settle") == "settle"
        assert format_method_name("access$000") is None
        assert format_method_name("lambda-0") is None


class TestNullabilityIndex:
    """Tests for recording and looking up nullability facts."""

    def test_records_single_parameter_methods(self, class_dir):
        index = NullabilityIndex(AnnotationVocabulary.STABLE, ClassPath([class_dir]))

        # setText, setHint and setLines; the constructor and setPadding are skipped
        assert index.record_class("android.widget.TextView") == 3
        assert len(index) == 3

        assert index.lookup("android.widget.TextView", "setText", "java.lang.CharSequence") is Nullability.NON_NULL
        assert index.lookup("android.widget.TextView", "text", "java.lang.CharSequence") is Nullability.NON_NULL
        assert index.lookup("android.widget.TextView", "hint", "java.lang.CharSequence") is Nullability.NULLABLE
        assert index.lookup("android.widget.TextView", "lines", "int") is Nullability.NULLABLE

    def test_unannotated_method_is_unknown(self, class_dir):
        index = NullabilityIndex(AnnotationVocabulary.STABLE, ClassPath([class_dir]))
        index.record_class("android/widget/TextView.class")

        assert index.lookup("android.widget.TextView", "setTag", "java.lang.Object") is Nullability.UNKNOWN
        assert index.is_parameter_nullable("android.widget.TextView", "setTag", "java.lang.Object") is None
        assert index.is_parameter_nullable("android.widget.TextView", "setHint", "java.lang.CharSequence") is True

    def test_missing_class_is_skipped(self, class_dir):
        index = NullabilityIndex(AnnotationVocabulary.STABLE, ClassPath([class_dir]))
        assert index.record_class("android.widget.Missing") == 0
        assert len(index) == 0

    def test_malformed_class_is_skipped(self, temp_dir):
        broken = temp_dir / "broken" / "android" / "widget" / "Broken.class"
        broken.parent.mkdir(parents=True)
        broken.write_bytes(b"\xca\xfe\xba\xbe\x00")

        index = NullabilityIndex(AnnotationVocabulary.STABLE, ClassPath([temp_dir / "broken"]))
        assert index.record_class("android.widget.Broken") == 0

    def test_corrupt_archive_member_is_skipped(self, temp_dir, assemble_class, text_view_methods):
        resource = "android/widget/TextView.class"
        jar = temp_dir / "corrupt.jar"
        with zipfile.ZipFile(jar, "w", compression=zipfile.ZIP_DEFLATED) as zf:
            zf.writestr(resource, assemble_class("android/widget/TextView", text_view_methods()))
            size = zf.getinfo(resource).compress_size

        # Overwrite the deflate stream with an invalid block type
        data = bytearray(jar.read_bytes())
        start = 30 + len(resource)
        data[start:start + size] = b"\xff" * size
        jar.write_bytes(bytes(data))

        class_path = ClassPath([jar])
        index = NullabilityIndex(AnnotationVocabulary.STABLE, class_path)
        try:
            assert index.record_class("android.widget.TextView") == 0
        finally:
            class_path.close()

    def test_unreadable_file_falls_through_to_next_entry(self, temp_dir, class_dir, monkeypatch):
        jar = temp_dir / "android.jar"
        with zipfile.ZipFile(jar, "w") as zf:
            zf.writestr("android/widget/TextView.class", (class_dir / "android/widget/TextView.class").read_bytes())

        def deny(path):
            raise PermissionError(13, "Permission denied", str(path))

        monkeypatch.setattr(Path, "read_bytes", deny)
        class_path = ClassPath([class_dir, jar])
        index = NullabilityIndex(AnnotationVocabulary.STABLE, class_path)
        try:
            assert index.record_class("android.widget.TextView") == 3
        finally:
            class_path.close()

        assert NullabilityIndex(AnnotationVocabulary.STABLE, ClassPath([class_dir])).record_class(
            "android.widget.TextView"
        ) == 0

    def test_recent_vocabulary(self, temp_dir, assemble_class, text_view_methods):
        methods = text_view_methods(text_annotation="Landroidx/annotation/RecentlyNullable;")
        path = temp_dir / "sdk" / "android" / "widget" / "TextView.class"
        path.parent.mkdir(parents=True)
        path.write_bytes(assemble_class("android/widget/TextView", methods))
        class_path = ClassPath([temp_dir / "sdk"])

        stable = NullabilityIndex.for_sdk(False, class_path)
        stable.record_class("android.widget.TextView")
        assert stable.lookup("android.widget.TextView", "text", "java.lang.CharSequence") is Nullability.UNKNOWN

        recent = NullabilityIndex.for_sdk(True, class_path)
        recent.record_class("android.widget.TextView")
        assert recent.vocabulary is AnnotationVocabulary.RECENT
        assert recent.lookup("android.widget.TextView", "text", "java.lang.CharSequence") is Nullability.NULLABLE
        # Stable annotations are ignored by the recent vocabulary
        assert recent.lookup("android.widget.TextView", "hint", "java.lang.CharSequence") is Nullability.UNKNOWN

    def test_jar_class_path(self, temp_dir, assemble_class, text_view_methods):
        jar = temp_dir / "android.jar"
        with zipfile.ZipFile(jar, "w") as zf:
            zf.writestr("android/widget/TextView.class", assemble_class("android/widget/TextView", text_view_methods()))

        class_path = ClassPath([temp_dir / "missing-dir", jar])
        index = NullabilityIndex(AnnotationVocabulary.STABLE, class_path)
        try:
            assert index.record_class("android.widget.TextView") == 3
        finally:
            class_path.close()

    def test_first_entry_wins(self, temp_dir, class_dir, assemble_class, text_view_methods):
        other = temp_dir / "other" / "android" / "widget" / "TextView.class"
        other.parent.mkdir(parents=True)
        other.write_bytes(assemble_class(
            "android/widget/TextView",
            text_view_methods(text_annotation="Landroidx/annotation/Nullable;"),
        ))

        index = NullabilityIndex(AnnotationVocabulary.STABLE, ClassPath([class_dir, temp_dir / "other"]))
        index.record_class("android.widget.TextView")
        assert index.lookup("android.widget.TextView", "text", "java.lang.CharSequence") is Nullability.NON_NULL

    def test_facts_are_sorted(self, class_dir):
        index = NullabilityIndex(AnnotationVocabulary.STABLE, ClassPath([class_dir]))
        index.record_classes(["android.widget.TextView", "android.widget.Missing"])

        assert [signature for signature, _ in index.facts()] == [
            MethodSignature("android.widget.TextView", "hint", "java.lang.CharSequence"),
            MethodSignature("android.widget.TextView", "lines", "int"),
            MethodSignature("android.widget.TextView", "text", "java.lang.CharSequence"),
        ]
