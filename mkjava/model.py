from __future__ import annotations

import logging
import textwrap
from dataclasses import dataclass, field
from enum import Enum
from typing import Callable, Iterable

"""Java construct model.

Every construct is a small dataclass implementing :class:`AstNode`: it knows
how to write its own tokens into a :class:`JavaWriter` and registers each
external type it mentions so the writer can derive the import block.
Composite constructs (classes, interfaces, enums) delegate to their members
in a fixed section order and separate members with exactly one blank line.
"""

from .codegen import AstNode, JavaWriter, WriterConfig

logger = logging.getLogger(__name__)


# -----------------------------
# References & types
# -----------------------------

@dataclass(frozen=True)
class ClassReference:
    name: str
    package_name: str

    @property
    def qualified_name(self) -> str:
        if not self.package_name:
            return self.name
        return f"{self.package_name}.{self.name}"

    @classmethod
    def parse(cls, qualified_name: str) -> ClassReference:
        package, _, name = qualified_name.rpartition(".")
        return cls(name=name, package_name=package)


class Access(str, Enum):
    PUBLIC = "public"
    PROTECTED = "protected"
    PRIVATE = "private"
    PACKAGE_PRIVATE = ""

    def __str__(self) -> str:
        return self.value


@dataclass
class JavaType(AstNode):
    name: str
    reference: ClassReference | None = None
    arguments: list[JavaType] = field(default_factory=list)
    array_dimensions: int = 0

    def write(self, writer: JavaWriter) -> None:
        if self.reference is not None:
            writer.add_reference(self.reference)
        writer.write(self.name)
        if self.arguments:
            writer.write("<")
            _write_joined(writer, self.arguments)
            writer.write(">")
        writer.write("[]" * self.array_dimensions)

    # ----------- factories ------------

    @classmethod
    def int_(cls) -> JavaType:
        return cls("int")

    @classmethod
    def long(cls) -> JavaType:
        return cls("long")

    @classmethod
    def short(cls) -> JavaType:
        return cls("short")

    @classmethod
    def byte(cls) -> JavaType:
        return cls("byte")

    @classmethod
    def float_(cls) -> JavaType:
        return cls("float")

    @classmethod
    def double(cls) -> JavaType:
        return cls("double")

    @classmethod
    def boolean(cls) -> JavaType:
        return cls("boolean")

    @classmethod
    def char(cls) -> JavaType:
        return cls("char")

    @classmethod
    def void(cls) -> JavaType:
        return cls("void")

    @classmethod
    def string(cls) -> JavaType:
        return cls("String")

    @classmethod
    def object(cls) -> JavaType:
        return cls("Object")

    @classmethod
    def generic(cls, name: str) -> JavaType:
        """A type variable such as ``T``; never imported."""
        return cls(name)

    @classmethod
    def of(cls, reference: ClassReference, *arguments: JavaType) -> JavaType:
        return cls(reference.name, reference, list(arguments))

    @classmethod
    def list_of(cls, item: JavaType) -> JavaType:
        return cls.of(ClassReference("List", "java.util"), item)

    @classmethod
    def set_of(cls, item: JavaType) -> JavaType:
        return cls.of(ClassReference("Set", "java.util"), item)

    @classmethod
    def map_of(cls, key: JavaType, value: JavaType) -> JavaType:
        return cls.of(ClassReference("Map", "java.util"), key, value)

    @classmethod
    def optional_of(cls, item: JavaType) -> JavaType:
        return cls.of(ClassReference("Optional", "java.util"), item)

    @classmethod
    def array_of(cls, item: JavaType) -> JavaType:
        return cls(item.name, item.reference, list(item.arguments), item.array_dimensions + 1)


# -----------------------------
# Leaf nodes
# -----------------------------

@dataclass
class CodeBlock(AstNode):
    """Free-form statements; a string is written line by line at the current indentation."""
    code: str | Callable[[JavaWriter], None] = ""
    references: list[ClassReference] = field(default_factory=list)

    def write(self, writer: JavaWriter) -> None:
        for ref in self.references:
            writer.add_reference(ref)
        if callable(self.code):
            self.code(writer)
            return
        text = textwrap.dedent(self.code).strip("\n")
        if not text:
            return
        for ln in text.split("\n"):
            if ln.strip():
                writer.write_line(ln.rstrip())
            else:
                writer.blank_line()


@dataclass
class JavaAnnotation(AstNode):
    name: str
    reference: ClassReference | None = None
    argument: str | None = None
    named_arguments: dict[str, str] = field(default_factory=dict)

    def write(self, writer: JavaWriter) -> None:
        if self.reference is not None:
            writer.add_reference(self.reference)
        writer.write(f"@{self.name}")
        if self.argument is not None:
            writer.write(f"({self.argument})")
        elif self.named_arguments:
            args = ", ".join(f"{k} = {v}" for k, v in self.named_arguments.items())
            writer.write(f"({args})")


@dataclass
class JavaParameter(AstNode):
    name: str
    type: JavaType
    docs: str | None = None
    annotations: list[JavaAnnotation] = field(default_factory=list)
    final: bool = False

    def write(self, writer: JavaWriter) -> None:
        for ann in self.annotations:
            ann.write(writer)
            writer.write(" ")
        if self.final:
            writer.write("final ")
        self.type.write(writer)
        writer.write(f" {self.name}")


@dataclass
class JavaField(AstNode):
    name: str
    type: JavaType
    access: Access = Access.PRIVATE
    static: bool = False
    final: bool = False
    initializer: str | None = None
    annotations: list[JavaAnnotation] = field(default_factory=list)
    javadoc: str | None = None

    def write(self, writer: JavaWriter) -> None:
        writer.write_doc(self.javadoc)
        _write_annotations(writer, self.annotations)
        writer.start_line(_modifiers(self.access, ("static", self.static), ("final", self.final)))
        self.type.write(writer)
        writer.write(f" {self.name}")
        if self.initializer is not None:
            writer.write(f" = {self.initializer}")
        writer.write(";")
        writer.write_line()


@dataclass
class JavaMethod(AstNode):
    name: str
    access: Access = Access.PUBLIC
    parameters: list[JavaParameter] = field(default_factory=list)
    return_type: JavaType | None = None
    body: CodeBlock | None = None
    static: bool = False
    abstract: bool = False
    final: bool = False
    synchronized: bool = False
    default: bool = False
    override: bool = False
    annotations: list[JavaAnnotation] = field(default_factory=list)
    javadoc: str | None = None
    throws: list[ClassReference] = field(default_factory=list)
    type_parameters: list[str] = field(default_factory=list)

    def write(self, writer: JavaWriter) -> None:
        writer.write_doc(self.javadoc, _param_tags(self.parameters))
        annotations = list(self.annotations)
        if self.override:
            annotations.insert(0, JavaAnnotation("Override"))
        _write_annotations(writer, annotations)

        writer.start_line(_modifiers(
            self.access,
            ("abstract", self.abstract),
            ("default", self.default),
            ("static", self.static),
            ("final", self.final),
            ("synchronized", self.synchronized),
        ))
        if self.type_parameters:
            writer.write(f"<{', '.join(self.type_parameters)}> ")
        (self.return_type or JavaType.void()).write(writer)
        writer.write(f" {self.name}(")
        _write_joined(writer, self.parameters)
        writer.write(")")
        _write_throws(writer, self.throws)

        if self.body is None or self.abstract:
            writer.write(";")
            writer.write_line()
            return
        _write_block(writer, self.body)


@dataclass
class JavaConstructor:
    """
    Constructor record; written by the class or enum that owns it, since the
    signature needs the owner's name.

    ``super_args`` / ``this_args`` hold the argument expressions of a leading
    delegation call. ``None`` means no call; an empty list writes ``super();``.
    """
    access: Access = Access.PUBLIC
    parameters: list[JavaParameter] = field(default_factory=list)
    body: CodeBlock | None = None
    javadoc: str | None = None
    annotations: list[JavaAnnotation] = field(default_factory=list)
    super_args: list[str] | None = None
    this_args: list[str] | None = None
    throws: list[ClassReference] = field(default_factory=list)

    def __post_init__(self) -> None:
        if self.super_args is not None and self.this_args is not None:
            raise ValueError("A constructor may delegate to super(...) or this(...), not both.")

    def write_for(self, owner: str, writer: JavaWriter) -> None:
        writer.write_doc(self.javadoc, _param_tags(self.parameters))
        _write_annotations(writer, self.annotations)

        writer.start_line(_modifiers(self.access) + owner + "(")
        _write_joined(writer, self.parameters)
        writer.write(")")
        _write_throws(writer, self.throws)
        writer.write(" {")
        writer.write_line()
        with writer.indented():
            if self.super_args is not None:
                writer.write_line(f"super({', '.join(self.super_args)});")
            elif self.this_args is not None:
                writer.write_line(f"this({', '.join(self.this_args)});")
            if self.body is not None:
                self.body.write(writer)
                writer.ensure_trailing_newline()
        writer.write_line("}")


# -----------------------------
# Type declarations
# -----------------------------

class _Declaration:
    """Top-level rendering shared by classes, interfaces and enums."""
    name: str
    package_name: str

    @property
    def reference(self) -> ClassReference:
        return ClassReference(self.name, self.package_name)

    def to_code(self, *, skip_package_declaration: bool = False) -> str:
        writer = JavaWriter(WriterConfig(
            package_name=self.package_name,
            skip_package_declaration=skip_package_declaration or not self.package_name,
        ))
        writer.write_node(self)  # type: ignore[arg-type]
        return writer.render()

    def _write_header(
        self,
        writer: JavaWriter,
        keyword_line: str,
        type_parameters: list[str],
        clauses: Iterable[tuple[str, list[ClassReference]]],
    ) -> None:
        writer.start_line(keyword_line)
        if type_parameters:
            writer.write(f"<{', '.join(type_parameters)}>")
        for keyword, refs in clauses:
            if not refs:
                continue
            writer.write(f" {keyword} ")
            for i, ref in enumerate(refs):
                if i:
                    writer.write(", ")
                writer.add_reference(ref)
                writer.write(ref.name)
        writer.write(" {")
        writer.write_line()


@dataclass
class JavaClass(_Declaration, AstNode):
    name: str
    package_name: str = ""
    access: Access = Access.PUBLIC
    abstract: bool = False
    final: bool = False
    static: bool = False
    extends: ClassReference | None = None
    implements: list[ClassReference] = field(default_factory=list)
    annotations: list[JavaAnnotation] = field(default_factory=list)
    javadoc: str | None = None
    type_parameters: list[str] = field(default_factory=list)
    fields: list[JavaField] = field(default_factory=list)
    constructors: list[JavaConstructor] = field(default_factory=list)
    methods: list[JavaMethod] = field(default_factory=list)
    nested_classes: list[JavaClass] = field(default_factory=list)
    nested_interfaces: list[JavaInterface] = field(default_factory=list)
    nested_enums: list[JavaEnum] = field(default_factory=list)

    def add_field(self, fld: JavaField) -> None:
        self.fields.append(fld)

    def add_constructor(self, ctor: JavaConstructor) -> None:
        self.constructors.append(ctor)

    def add_method(self, method: JavaMethod) -> None:
        self.methods.append(method)

    def add_nested_class(self, nested: JavaClass) -> None:
        self.nested_classes.append(nested)

    def add_nested_interface(self, nested: JavaInterface) -> None:
        self.nested_interfaces.append(nested)

    def add_nested_enum(self, nested: JavaEnum) -> None:
        self.nested_enums.append(nested)

    def write(self, writer: JavaWriter) -> None:
        writer.write_doc(self.javadoc)
        _write_annotations(writer, self.annotations)
        # abstract, final, static: fixed order, combinations are not checked
        mods = _modifiers(
            self.access, ("abstract", self.abstract), ("final", self.final), ("static", self.static),
        )
        self._write_header(
            writer,
            f"{mods}class {self.name}",
            self.type_parameters,
            [("extends", [self.extends] if self.extends else []), ("implements", self.implements)],
        )
        with writer.indented():
            _write_members(writer, [
                *self.fields,
                *(_bind_constructor(c, self.name) for c in self.constructors),
                *self.methods,
                *self.nested_classes,
                *self.nested_interfaces,
                *self.nested_enums,
            ])
        writer.write_line("}")


@dataclass
class JavaInterface(_Declaration, AstNode):
    name: str
    package_name: str = ""
    access: Access = Access.PUBLIC
    static: bool = False
    extends: list[ClassReference] = field(default_factory=list)
    annotations: list[JavaAnnotation] = field(default_factory=list)
    javadoc: str | None = None
    type_parameters: list[str] = field(default_factory=list)
    fields: list[JavaField] = field(default_factory=list)
    methods: list[JavaMethod] = field(default_factory=list)
    nested_interfaces: list[JavaInterface] = field(default_factory=list)

    def add_field(self, fld: JavaField) -> None:
        self.fields.append(fld)

    def add_method(self, method: JavaMethod) -> None:
        self.methods.append(method)

    def add_nested_interface(self, nested: JavaInterface) -> None:
        self.nested_interfaces.append(nested)

    def write(self, writer: JavaWriter) -> None:
        writer.write_doc(self.javadoc)
        _write_annotations(writer, self.annotations)
        mods = _modifiers(self.access, ("static", self.static))
        self._write_header(
            writer, f"{mods}interface {self.name}", self.type_parameters, [("extends", self.extends)],
        )
        with writer.indented():
            _write_members(writer, [*self.fields, *self.methods, *self.nested_interfaces])
        writer.write_line("}")


@dataclass
class JavaEnum(_Declaration, AstNode):
    name: str
    package_name: str = ""
    access: Access = Access.PUBLIC
    static: bool = False
    implements: list[ClassReference] = field(default_factory=list)
    annotations: list[JavaAnnotation] = field(default_factory=list)
    javadoc: str | None = None
    values: list[str] = field(default_factory=list)
    constants_with_string_values: dict[str, str] = field(default_factory=dict)
    fields: list[JavaField] = field(default_factory=list)
    constructors: list[JavaConstructor] = field(default_factory=list)
    methods: list[JavaMethod] = field(default_factory=list)

    def add_field(self, fld: JavaField) -> None:
        self.fields.append(fld)

    def add_constructor(self, ctor: JavaConstructor) -> None:
        self.constructors.append(ctor)

    def add_method(self, method: JavaMethod) -> None:
        self.methods.append(method)

    def _string_value_members(self) -> list[AstNode]:
        if not self.constants_with_string_values:
            return []
        return [
            JavaField("value", JavaType.string(), Access.PRIVATE, final=True),
            _bind_constructor(JavaConstructor(
                access=Access.PRIVATE,
                parameters=[JavaParameter("value", JavaType.string())],
                body=CodeBlock("this.value = value;"),
            ), self.name),
            JavaMethod("getValue", return_type=JavaType.string(), body=CodeBlock("return value;")),
        ]

    def write(self, writer: JavaWriter) -> None:
        writer.write_doc(self.javadoc)
        _write_annotations(writer, self.annotations)
        mods = _modifiers(self.access, ("static", self.static))
        self._write_header(writer, f"{mods}enum {self.name}", [], [("implements", self.implements)])

        if self.constants_with_string_values:
            constants = [
                f'{name}("{_escape(value)}")'
                for name, value in self.constants_with_string_values.items()
            ]
        else:
            constants = list(self.values)
        members: list[AstNode] = [
            *self._string_value_members(),
            *self.fields,
            *(_bind_constructor(c, self.name) for c in self.constructors),
            *self.methods,
        ]

        with writer.indented():
            for i, constant in enumerate(constants):
                writer.start_line(constant)
                if i < len(constants) - 1:
                    writer.write(",")
                elif members:
                    writer.write(";")
                writer.write_line()
            if members:
                if constants:
                    writer.blank_line()
                else:
                    writer.write_line(";")
                _write_members(writer, members)
        writer.write_line("}")


# -----------------------------
# Helpers
# -----------------------------

def _modifiers(access: Access, *flags: tuple[str, bool]) -> str:
    """Leading modifier tokens with a trailing space, e.g. ``"public static "``."""
    tokens = [access.value] if access.value else []
    tokens.extend(token for token, on in flags if on)
    return "".join(f"{t} " for t in tokens)


def _write_joined(writer: JavaWriter, nodes: Iterable[AstNode], sep: str = ", ") -> None:
    for i, node in enumerate(nodes):
        if i:
            writer.write(sep)
        node.write(writer)


def _write_annotations(writer: JavaWriter, annotations: Iterable[JavaAnnotation]) -> None:
    for ann in annotations:
        writer.start_line()
        ann.write(writer)
        writer.write_line()


def _write_throws(writer: JavaWriter, throws: list[ClassReference]) -> None:
    if not throws:
        return
    writer.write(" throws ")
    for i, ref in enumerate(throws):
        if i:
            writer.write(", ")
        writer.add_reference(ref)
        writer.write(ref.name)


def _write_block(writer: JavaWriter, body: CodeBlock) -> None:
    writer.write(" {")
    writer.write_line()
    with writer.indented():
        body.write(writer)
        writer.ensure_trailing_newline()
    writer.write_line("}")


def _write_members(writer: JavaWriter, members: Iterable[AstNode]) -> None:
    for i, member in enumerate(members):
        if i:
            writer.blank_line()
        member.write(writer)
        writer.ensure_trailing_newline()


def _param_tags(parameters: Iterable[JavaParameter]) -> list[str]:
    return [f"@param {p.name} {p.docs}" for p in parameters if p.docs]


def _escape(value: str) -> str:
    return value.replace("\\", "\\\\").replace('"', '\\"')


@dataclass
class _BoundConstructor(AstNode):
    constructor: JavaConstructor
    owner: str

    def write(self, writer: JavaWriter) -> None:
        self.constructor.write_for(self.owner, writer)


def _bind_constructor(ctor: JavaConstructor, owner: str) -> AstNode:
    return _BoundConstructor(ctor, owner)
