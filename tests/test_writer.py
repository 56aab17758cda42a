from hypothesis import given, strategies as st
import pytest

from mkjava.codegen import AstNode, JavaWriter, WriterConfig
from mkjava.model import ClassReference


class MockNode(AstNode):
    def write(self, writer: JavaWriter) -> None:
        writer.write("MockNode content")


packages = st.from_regex(r"[a-z]{1,6}(\.[a-z]{1,6}){0,2}", fullmatch=True)
simple_names = st.from_regex(r"[A-Z][A-Za-z]{0,6}", fullmatch=True)
references = st.builds(ClassReference, name=simple_names, package_name=packages)


def import_lines(output: str) -> list[str]:
    return [ln for ln in output.splitlines() if ln.startswith("import ")]


@pytest.fixture
def writer() -> JavaWriter:
    return JavaWriter(WriterConfig(package_name="com.example"))


def test_write_simple_text(writer: JavaWriter) -> None:
    writer.write("Hello")
    assert writer.render() == "package com.example;\n\nHello"


def test_write_lines_with_indentation(writer: JavaWriter) -> None:
    writer.write_line("Line 1")
    writer.indent()
    writer.write_line("Line 2")
    writer.dedent()
    writer.write_line("Line 3")
    assert writer.buffer == "Line 1\n    Line 2\nLine 3\n"


def test_write_line_without_text_is_bare_newline(writer: JavaWriter) -> None:
    writer.indent()
    writer.write_line()
    assert writer.buffer == "\n"


def test_write_does_not_indent(writer: JavaWriter) -> None:
    writer.indent()
    writer.write("x")
    writer.start_line("y")
    assert writer.buffer == "x    y"


def test_custom_indent_unit() -> None:
    w = JavaWriter(WriterConfig("com.example", indent="\t"))
    with w.indented():
        with w.indented():
            w.write_line("deep")
    assert w.buffer == "\t\tdeep\n"
    assert w.indent_level == 0


def test_indented_restores_level_on_error(writer: JavaWriter) -> None:
    with pytest.raises(RuntimeError):
        with writer.indented():
            raise RuntimeError("boom")
    assert writer.indent_level == 0


def test_empty_writer_renders_only_package() -> None:
    assert JavaWriter.for_package("com.example").render() == "package com.example;\n\n"


def test_skip_package_declaration() -> None:
    w = JavaWriter.for_package("com.example", skip_package_declaration=True)
    w.write_line("class A {}")
    assert w.render() == "class A {}\n"
    assert "package" not in str(w)


def test_reference_becomes_import(writer: JavaWriter) -> None:
    writer.add_reference(ClassReference("ArrayList", "java.util"))
    assert "import java.util.ArrayList;" in writer.render()


def test_same_package_reference_not_imported(writer: JavaWriter) -> None:
    writer.add_reference(ClassReference("SamePackageClass", "com.example"))
    assert "import com.example.SamePackageClass;" not in writer.render()
    assert writer.imports == []


def test_default_package_reference_not_imported(writer: JavaWriter) -> None:
    writer.add_reference(ClassReference("Loose", ""))
    assert writer.imports == []


def test_explicit_import(writer: JavaWriter) -> None:
    writer.add_import("java.time.LocalDate")
    assert "import java.time.LocalDate;" in writer.render()


def test_imports_sorted(writer: JavaWriter) -> None:
    writer.add_reference(ClassReference("HttpServletRequest", "javax.servlet.http"))
    writer.add_reference(ClassReference("List", "java.util"))
    writer.add_reference(ClassReference("File", "java.io"))
    assert import_lines(writer.render()) == [
        "import java.io.File;",
        "import java.util.List;",
        "import javax.servlet.http.HttpServletRequest;",
    ]


def test_blank_line_after_imports(writer: JavaWriter) -> None:
    writer.add_import("java.util.List")
    writer.write_line("class A {}")
    assert writer.render() == "package com.example;\n\nimport java.util.List;\n\nclass A {}\n"


def test_no_blank_line_without_imports(writer: JavaWriter) -> None:
    writer.write_line("class A {}")
    assert writer.render() == "package com.example;\n\nclass A {}\n"


def test_dedup_imports_and_references(writer: JavaWriter) -> None:
    writer.add_reference(ClassReference("ArrayList", "java.util"))
    writer.add_reference(ClassReference("ArrayList", "java.util"))
    writer.add_import("java.util.ArrayList")
    writer.add_import("java.util.ArrayList")
    assert writer.render().strip() == "package com.example;\n\nimport java.util.ArrayList;"


def test_dedent_floor(writer: JavaWriter) -> None:
    writer.dedent()
    writer.dedent()
    assert writer.indent_level == 0
    writer.write_line("No indentation")
    assert writer.buffer == "No indentation\n"


def test_ensure_trailing_newline_adds_when_missing(writer: JavaWriter) -> None:
    writer.write("Text without newline")
    writer.ensure_trailing_newline()
    writer.write("Text on new line")
    assert writer.buffer == "Text without newline\nText on new line"


def test_ensure_trailing_newline_noop_after_newline(writer: JavaWriter) -> None:
    writer.write_line("Text with newline")
    writer.ensure_trailing_newline()
    writer.write("No extra newline")
    assert writer.buffer == "Text with newline\nNo extra newline"


def test_ensure_trailing_newline_on_empty_buffer(writer: JavaWriter) -> None:
    writer.ensure_trailing_newline()
    writer.write("")
    writer.ensure_trailing_newline()
    assert writer.buffer == ""


def test_blank_line_appends_newline(writer: JavaWriter) -> None:
    writer.write_line("a")
    writer.blank_line()
    writer.write_line("b")
    assert writer.buffer == "a\n\nb\n"


def test_write_node(writer: JavaWriter) -> None:
    writer.write_node(MockNode())
    assert "MockNode content" in writer.render()


def test_ast_node_is_abstract() -> None:
    with pytest.raises(TypeError):
        AstNode()  # type: ignore[abstract]


def test_write_doc(writer: JavaWriter) -> None:
    with writer.indented():
        writer.write_doc("First line.\nSecond line.", ["@param id The id"])
    assert writer.buffer == (
        "    /**\n"
        "     * First line.\n"
        "     * Second line.\n"
        "     * @param id The id\n"
        "     */\n"
    )


def test_write_doc_absent(writer: JavaWriter) -> None:
    writer.write_doc(None)
    writer.write_doc("")
    assert writer.buffer == ""


def test_format_code() -> None:
    assert JavaWriter.format_code("public   void   method()   {") == "public void method() {"


# ---------- properties ----------

@given(st.lists(references, min_size=1, max_size=8), st.integers(min_value=1, max_value=3))
def test_dedup_property(refs: list[ClassReference], times: int) -> None:
    w = JavaWriter.for_package("com.example")
    for _ in range(times):
        for ref in refs:
            w.add_reference(ref)
            w.add_import(ref.qualified_name)
    lines = import_lines(w.render())
    assert len(lines) == len(set(lines))
    assert {ln[len("import "):-1] for ln in lines} == {r.qualified_name for r in refs}


@given(st.lists(references, max_size=10))
def test_sort_property(refs: list[ClassReference]) -> None:
    w = JavaWriter.for_package("com.example")
    for ref in refs:
        w.add_reference(ref)
    names = [ln[len("import "):-1] for ln in import_lines(w.render())]
    assert names == sorted(set(names))
    assert all(a < b for a, b in zip(names, names[1:]))


@given(st.lists(simple_names, min_size=1, max_size=5), st.integers(min_value=1, max_value=4))
def test_same_package_suppression_property(names: list[str], times: int) -> None:
    w = JavaWriter.for_package("com.example")
    for _ in range(times):
        for name in names:
            w.add_reference(ClassReference(name, "com.example"))
    assert import_lines(w.render()) == []
    assert w.render() == "package com.example;\n\n"


@given(st.lists(references, max_size=5))
def test_blank_line_law(refs: list[ClassReference]) -> None:
    w = JavaWriter.for_package("com.example", skip_package_declaration=True)
    for ref in refs:
        w.add_reference(ref)
    w.write_line("body")
    out = w.render()
    header, _, body = out.rpartition("body\n")
    assert body == ""
    if w.imports:
        assert header.endswith(";\n\n")
    else:
        assert header == ""


@given(st.text(alphabet="ab\n ", max_size=20))
def test_trailing_newline_idempotent(text: str) -> None:
    once = JavaWriter.for_package("p")
    once.write(text)
    once.ensure_trailing_newline()
    twice = JavaWriter.for_package("p")
    twice.write(text)
    twice.ensure_trailing_newline()
    twice.ensure_trailing_newline()
    assert once.buffer == twice.buffer
    assert once.buffer == "" or once.buffer.endswith("\n")


@given(st.integers(min_value=0, max_value=5), st.integers(min_value=0, max_value=10))
def test_indent_floor_property(ups: int, downs: int) -> None:
    w = JavaWriter.for_package("p")
    for _ in range(ups):
        w.indent()
    for _ in range(downs):
        w.dedent()
    assert w.indent_level == max(0, ups - downs)


def test_render_logs_body_size(writer: JavaWriter, caplog: pytest.LogCaptureFixture) -> None:
    writer.add_import("java.util.List")
    writer.write_line("class A {}")
    with caplog.at_level("DEBUG", logger="mkjava.codegen"):
        writer.render()
    assert "Rendered com.example: 1 imports, 11 body chars" in caplog.text
