from __future__ import annotations

import logging
import re
from typing import Any, Literal, NotRequired, TypedDict

from .model import (
    Access, ClassReference, CodeBlock, JavaAnnotation, JavaClass, JavaConstructor,
    JavaEnum, JavaField, JavaInterface, JavaMethod, JavaParameter, JavaType,
)

logger = logging.getLogger(__name__)


# "import" is a Python keyword; the functional form allows it as a key.
AnnotationSpec = TypedDict("AnnotationSpec", {
    "name": str,
    "import": NotRequired[str],
    "argument": NotRequired[str],
    "named_arguments": NotRequired[dict[str, str]],
})


class ParameterSpec(TypedDict):
    name: str
    type: str
    docs: NotRequired[str]
    final: NotRequired[bool]
    annotations: NotRequired[list[AnnotationSpec]]


class FieldSpec(TypedDict):
    name: str
    type: str
    access: NotRequired[str]
    static: NotRequired[bool]
    final: NotRequired[bool]
    initializer: NotRequired[str]
    javadoc: NotRequired[str]
    annotations: NotRequired[list[AnnotationSpec]]


class MethodSpec(TypedDict):
    name: str
    access: NotRequired[str]
    return_type: NotRequired[str]
    parameters: NotRequired[list[ParameterSpec]]
    body: NotRequired[str]
    static: NotRequired[bool]
    abstract: NotRequired[bool]
    final: NotRequired[bool]
    synchronized: NotRequired[bool]
    default: NotRequired[bool]
    override: NotRequired[bool]
    javadoc: NotRequired[str]
    throws: NotRequired[list[str]]
    type_parameters: NotRequired[list[str]]
    annotations: NotRequired[list[AnnotationSpec]]


class ConstructorSpec(TypedDict, total=False):
    access: str
    parameters: list[ParameterSpec]
    body: str
    javadoc: str
    super_args: list[str]
    this_args: list[str]
    throws: list[str]
    annotations: list[AnnotationSpec]


class ClassSpec(TypedDict):
    name: str
    kind: NotRequired[Literal["class"]]
    package: NotRequired[str]
    access: NotRequired[str]
    abstract: NotRequired[bool]
    final: NotRequired[bool]
    static: NotRequired[bool]
    extends: NotRequired[str]
    implements: NotRequired[list[str]]
    javadoc: NotRequired[str]
    type_parameters: NotRequired[list[str]]
    imports: NotRequired[list[str]]
    annotations: NotRequired[list[AnnotationSpec]]
    fields: NotRequired[list[FieldSpec]]
    constructors: NotRequired[list[ConstructorSpec]]
    methods: NotRequired[list[MethodSpec]]
    nested: NotRequired[list[dict[str, Any]]]


class InterfaceSpec(TypedDict):
    name: str
    kind: Literal["interface"]
    package: NotRequired[str]
    access: NotRequired[str]
    static: NotRequired[bool]
    extends: NotRequired[list[str]]
    javadoc: NotRequired[str]
    type_parameters: NotRequired[list[str]]
    annotations: NotRequired[list[AnnotationSpec]]
    fields: NotRequired[list[FieldSpec]]
    methods: NotRequired[list[MethodSpec]]
    nested: NotRequired[list[dict[str, Any]]]


class EnumSpec(TypedDict):
    name: str
    kind: Literal["enum"]
    package: NotRequired[str]
    access: NotRequired[str]
    static: NotRequired[bool]
    implements: NotRequired[list[str]]
    javadoc: NotRequired[str]
    values: NotRequired[list[str]]
    string_values: NotRequired[dict[str, str]]
    annotations: NotRequired[list[AnnotationSpec]]
    fields: NotRequired[list[FieldSpec]]
    constructors: NotRequired[list[ConstructorSpec]]
    methods: NotRequired[list[MethodSpec]]


# -------------------------
# Type strings
# -------------------------

PRIMITIVES: frozenset[str] = frozenset(
    {"boolean", "byte", "char", "short", "int", "long", "float", "double", "void"}
)

_TOKEN = re.compile(r"\s*(?:([A-Za-z_$][\w$]*(?:\.[A-Za-z_$][\w$]*)*)|(<|>|,|\[\]|\?))")


def _tokenize(text: str) -> list[str]:
    tokens: list[str] = []
    pos = 0
    text = text.rstrip()
    while pos < len(text):
        m = _TOKEN.match(text, pos)
        if m is None:
            raise ValueError(f"Unexpected character in type {text!r} at offset {pos}")
        tokens.append(m.group(1) or m.group(2))
        pos = m.end()
    return tokens


def _is_qualified(name: str) -> bool:
    # java.util.List -> yes; Outer.Inner and plain names -> no
    head, _, tail = name.rpartition(".")
    return bool(head) and head.split(".")[0][:1].islower() and tail[:1].isupper()


def parse_type(text: str) -> JavaType:
    """
    Parse a Java type string such as ``java.util.Map<String, java.time.LocalDate>[]``.

    Dotted names whose package segments are lower-case become references that
    the writer will import; everything else is emitted as written.
    """
    tokens = _tokenize(text)
    if not tokens:
        raise ValueError("Empty type string")
    jtype, pos = _parse_type_at(tokens, 0, text)
    if pos != len(tokens):
        raise ValueError(f"Trailing tokens in type {text!r}: {' '.join(tokens[pos:])}")
    return jtype


def _parse_type_at(tokens: list[str], pos: int, text: str) -> tuple[JavaType, int]:
    if pos >= len(tokens):
        raise ValueError(f"Unexpected end of type {text!r}")
    name = tokens[pos]
    if name in ("<", ">", ",", "[]"):
        raise ValueError(f"Expected a type name in {text!r}, got {name!r}")
    pos += 1
    if name == "?":
        jtype = JavaType("?")
        if pos < len(tokens) and tokens[pos] in ("extends", "super"):
            bound_kw = tokens[pos]
            bound, pos = _parse_type_at(tokens, pos + 1, text)
            jtype = JavaType(f"? {bound_kw} {bound.name}", bound.reference, bound.arguments,
                             bound.array_dimensions)
        return jtype, pos
    if _is_qualified(name):
        jtype = JavaType.of(ClassReference.parse(name))
    else:
        jtype = JavaType(name)

    if pos < len(tokens) and tokens[pos] == "<":
        pos += 1
        while True:
            arg, pos = _parse_type_at(tokens, pos, text)
            jtype.arguments.append(arg)
            if pos >= len(tokens):
                raise ValueError(f"Unclosed '<' in type {text!r}")
            if tokens[pos] == ",":
                pos += 1
                continue
            if tokens[pos] == ">":
                pos += 1
                break
            raise ValueError(f"Expected ',' or '>' in type {text!r}, got {tokens[pos]!r}")
    while pos < len(tokens) and tokens[pos] == "[]":
        jtype.array_dimensions += 1
        pos += 1
    return jtype, pos


# -------------------------
# Builders
# -------------------------

def mk_access(value: str | None, default: Access) -> Access:
    if value is None:
        return default
    if value in ("", "package", "package-private"):
        return Access.PACKAGE_PRIVATE
    try:
        return Access(value)
    except ValueError:
        raise ValueError(f"Unknown access modifier {value!r}") from None


def mk_annotation(spec: AnnotationSpec) -> JavaAnnotation:
    imp = spec.get("import")
    return JavaAnnotation(
        name=spec["name"],
        reference=ClassReference.parse(imp) if imp else None,
        argument=spec.get("argument"),
        named_arguments=dict(spec.get("named_arguments", {})),
    )


def mk_parameter(spec: ParameterSpec) -> JavaParameter:
    return JavaParameter(
        name=spec["name"],
        type=parse_type(spec["type"]),
        docs=spec.get("docs"),
        final=bool(spec.get("final", False)),
        annotations=[mk_annotation(a) for a in spec.get("annotations", [])],
    )


def mk_field(spec: FieldSpec) -> JavaField:
    return JavaField(
        name=spec["name"],
        type=parse_type(spec["type"]),
        access=mk_access(spec.get("access"), Access.PRIVATE),
        static=bool(spec.get("static", False)),
        final=bool(spec.get("final", False)),
        initializer=spec.get("initializer"),
        javadoc=spec.get("javadoc"),
        annotations=[mk_annotation(a) for a in spec.get("annotations", [])],
    )


def mk_method(spec: MethodSpec) -> JavaMethod:
    body = spec.get("body")
    return_type = spec.get("return_type")
    return JavaMethod(
        name=spec["name"],
        access=mk_access(spec.get("access"), Access.PUBLIC),
        parameters=[mk_parameter(p) for p in spec.get("parameters", [])],
        return_type=parse_type(return_type) if return_type else None,
        body=CodeBlock(body) if body is not None else None,
        static=bool(spec.get("static", False)),
        abstract=bool(spec.get("abstract", False)),
        final=bool(spec.get("final", False)),
        synchronized=bool(spec.get("synchronized", False)),
        default=bool(spec.get("default", False)),
        override=bool(spec.get("override", False)),
        javadoc=spec.get("javadoc"),
        throws=[ClassReference.parse(t) for t in spec.get("throws", [])],
        type_parameters=list(spec.get("type_parameters", [])),
        annotations=[mk_annotation(a) for a in spec.get("annotations", [])],
    )


def mk_constructor(spec: ConstructorSpec) -> JavaConstructor:
    body = spec.get("body")
    return JavaConstructor(
        access=mk_access(spec.get("access"), Access.PUBLIC),
        parameters=[mk_parameter(p) for p in spec.get("parameters", [])],
        body=CodeBlock(body) if body is not None else None,
        javadoc=spec.get("javadoc"),
        super_args=spec.get("super_args"),
        this_args=spec.get("this_args"),
        throws=[ClassReference.parse(t) for t in spec.get("throws", [])],
        annotations=[mk_annotation(a) for a in spec.get("annotations", [])],
    )


def mk_class(spec: ClassSpec, package: str | None = None) -> JavaClass:
    package = spec.get("package", package or "")
    extends = spec.get("extends")
    cls = JavaClass(
        name=spec["name"],
        package_name=package,
        access=mk_access(spec.get("access"), Access.PUBLIC),
        abstract=bool(spec.get("abstract", False)),
        final=bool(spec.get("final", False)),
        static=bool(spec.get("static", False)),
        extends=_mk_reference(extends, package) if extends else None,
        implements=[_mk_reference(i, package) for i in spec.get("implements", [])],
        javadoc=spec.get("javadoc"),
        type_parameters=list(spec.get("type_parameters", [])),
        annotations=[mk_annotation(a) for a in spec.get("annotations", [])],
    )
    for f in spec.get("fields", []):
        cls.add_field(mk_field(f))
    for c in spec.get("constructors", []):
        cls.add_constructor(mk_constructor(c))
    for m in spec.get("methods", []):
        cls.add_method(mk_method(m))
    for nested in spec.get("nested", []):
        node = mk_declaration(nested, package)
        if isinstance(node, JavaClass):
            cls.add_nested_class(node)
        elif isinstance(node, JavaInterface):
            cls.add_nested_interface(node)
        else:
            cls.add_nested_enum(node)
    return cls


def mk_interface(spec: InterfaceSpec, package: str | None = None) -> JavaInterface:
    package = spec.get("package", package or "")
    iface = JavaInterface(
        name=spec["name"],
        package_name=package,
        access=mk_access(spec.get("access"), Access.PUBLIC),
        static=bool(spec.get("static", False)),
        extends=[_mk_reference(e, package) for e in spec.get("extends", [])],
        javadoc=spec.get("javadoc"),
        type_parameters=list(spec.get("type_parameters", [])),
        annotations=[mk_annotation(a) for a in spec.get("annotations", [])],
    )
    for f in spec.get("fields", []):
        iface.add_field(mk_field(f))
    for m in spec.get("methods", []):
        iface.add_method(mk_method(m))
    for nested in spec.get("nested", []):
        node = mk_declaration(nested, package)
        if not isinstance(node, JavaInterface):
            raise ValueError(f"Interface {iface.name} can only nest interfaces, got {nested.get('kind')!r}")
        iface.add_nested_interface(node)
    return iface


def mk_enum(spec: EnumSpec, package: str | None = None) -> JavaEnum:
    package = spec.get("package", package or "")
    enum = JavaEnum(
        name=spec["name"],
        package_name=package,
        access=mk_access(spec.get("access"), Access.PUBLIC),
        static=bool(spec.get("static", False)),
        implements=[_mk_reference(i, package) for i in spec.get("implements", [])],
        javadoc=spec.get("javadoc"),
        values=list(spec.get("values", [])),
        constants_with_string_values=dict(spec.get("string_values", {})),
        annotations=[mk_annotation(a) for a in spec.get("annotations", [])],
    )
    for f in spec.get("fields", []):
        enum.add_field(mk_field(f))
    for c in spec.get("constructors", []):
        enum.add_constructor(mk_constructor(c))
    for m in spec.get("methods", []):
        enum.add_method(mk_method(m))
    return enum


def mk_declaration(
    spec: dict[str, Any], package: str | None = None
) -> JavaClass | JavaInterface | JavaEnum:
    if not isinstance(spec, dict):
        raise TypeError(f"Declaration spec must be an object, got {type(spec).__name__}")
    kind = spec.get("kind", "class")
    logger.debug("Building %s %s", kind, spec.get("name"))
    if kind == "class":
        return mk_class(spec, package)  # type: ignore[arg-type]
    if kind == "interface":
        return mk_interface(spec, package)  # type: ignore[arg-type]
    if kind == "enum":
        return mk_enum(spec, package)  # type: ignore[arg-type]
    raise ValueError(f"Unknown declaration kind {kind!r}. Allowed: class, interface, enum")


def _mk_reference(name: str, package: str) -> ClassReference:
    # Unqualified names resolve to the declaring package, which the writer never imports.
    if "." in name:
        return ClassReference.parse(name)
    return ClassReference(name, package)
