"""Unit tests for the Kotlin source writer."""

from dslgen.services.codegen import GeneratedFile, KotlinFileWriter
from dslgen.services.codegen.kotlin import split_qualified

SUPPRESSED = ["DEPRECATION", "UNCHECKED_CAST", "MemberVisibilityCanBePrivate", "unused"]


class TestSplitQualified:
    def test_nested_class(self):
        assert split_qualified("android.view.View.OnClickListener") == ("android.view", ["View", "OnClickListener"])

    def test_top_level_member(self):
        assert split_qualified("dev.inkremental.attr") == ("dev.inkremental", ["attr"])


class TestKotlinFileWriter:
    """Tests for import collection and rendering."""

    def test_header_and_imports(self):
        w = KotlinFileWriter("dev.inkremental.dsl.android", "Sample", SUPPRESSED)
        w.line(f"val a: {w.type('android.view.View.OnClickListener')}")
        w.line(f"val b: {w.type('kotlin.collections.List<android.net.Uri>')}")
        w.line(f"val c: {w.name('dev.inkremental.dsl.android.Dip')}")
        w.line(f"val d = {w.member('dev.inkremental.attr')}")

        rendered = w.render()

        assert rendered.content.splitlines()[:4] == [
            '@file:Suppress("DEPRECATION", "UNCHECKED_CAST", "MemberVisibilityCanBePrivate", "unused")',
            "",
            "package dev.inkremental.dsl.android",
            "",
        ]
        assert "import android.net.Uri\nimport android.view.View\nimport dev.inkremental.attr\n" in rendered.content
        assert "import kotlin" not in rendered.content
        assert "import dev.inkremental.dsl.android.Dip" not in rendered.content
        assert "val a: View.OnClickListener" in rendered.content
        assert "val b: List<Uri>" in rendered.content
        assert "val c: Dip" in rendered.content
        assert rendered.content.endswith("val d = attr\n")

    def test_simple_name_collision_uses_qualified_name(self):
        w = KotlinFileWriter("a.b", "F", SUPPRESSED)
        assert w.name("android.widget.Toolbar") == "Toolbar"
        assert w.name("androidx.appcompat.widget.Toolbar") == "androidx.appcompat.widget.Toolbar"
        assert w.name("android.widget.Toolbar") == "Toolbar"

        content = w.render().content
        assert "import android.widget.Toolbar" in content
        assert "import androidx.appcompat.widget.Toolbar" not in content

    def test_blocks_indent(self):
        w = KotlinFileWriter("a.b", "F", SUPPRESSED, indent="    ")
        with w.block("object X"):
            with w.block("init"):
                w.line("run()")
        assert w.render().content.endswith("object X {\n    init {\n        run()\n    }\n}\n")

    def test_generated_file_key(self):
        generated = GeneratedFile(package="dev.inkremental.dsl.android.widget", file_name="TextView", content="")
        assert generated.key == "dev/inkremental/dsl/android/widget/TextView.kt"
