from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import List

import javalang
from javalang.parser import JavaSyntaxError
from javalang.tokenizer import LexerError

from .model import JavaClass, JavaEnum, JavaInterface, JavaMethod

logger = logging.getLogger(__name__)

JAVA_KEYWORDS: frozenset[str] = frozenset({
    "abstract", "assert", "boolean", "break", "byte", "case", "catch", "char",
    "class", "const", "continue", "default", "do", "double", "else", "enum",
    "extends", "final", "finally", "float", "for", "goto", "if", "implements",
    "import", "instanceof", "int", "interface", "long", "native", "new",
    "package", "private", "protected", "public", "return", "short", "static",
    "strictfp", "super", "switch", "synchronized", "this", "throw", "throws",
    "transient", "try", "void", "volatile", "while",
    # literals
    "true", "false", "null",
})

Declaration = JavaClass | JavaInterface | JavaEnum


@dataclass
class ValidationResult:
    ok: bool
    errors: List[str]


def validate_declaration(node: Declaration) -> ValidationResult:
    """
    Structural checks over a declaration tree.

    The writer trusts its caller and emits whatever it is given; this pass is
    opt-in and only reports problems, it never changes the rendered text.
    """
    errors: List[str] = []
    _check(node, errors, path=node.name)

    code = node.to_code()
    try:
        javalang.parse.parse(code)
    except JavaSyntaxError as e:
        where = getattr(e.at, "position", None)
        at = f" at line {where[0]}" if where else ""
        errors.append(f"Rendered `{node.name}` does not parse{at}: {e.description}")
    except LexerError as e:
        errors.append(f"Rendered `{node.name}` does not tokenize: {e}")

    if errors:
        logger.debug("Validation of %s found %d problem(s)", node.name, len(errors))
    return ValidationResult(len(errors) == 0, errors)


def _check(node: Declaration, errors: List[str], path: str) -> None:
    _check_name(node.name, "type", path, errors)

    for fld in node.fields:
        _check_name(fld.name, "field", path, errors)
    seen: set[str] = set()
    for fld in node.fields:
        if fld.name in seen:
            errors.append(f"Duplicate field `{fld.name}` in `{path}`.")
        seen.add(fld.name)

    for method in node.methods:
        _check_method(method, node, path, errors)

    if isinstance(node, JavaClass):
        if node.abstract and node.final:
            errors.append(f"Class `{path}` cannot be both abstract and final.")
        nested: list[Declaration] = [*node.nested_classes, *node.nested_interfaces, *node.nested_enums]
    elif isinstance(node, JavaInterface):
        nested = list(node.nested_interfaces)
    else:
        nested = []
        for constant in [*node.values, *node.constants_with_string_values]:
            _check_name(constant, "enum constant", path, errors)
    for child in nested:
        _check(child, errors, f"{path}.{child.name}")


def _check_method(method: JavaMethod, owner: Declaration, path: str, errors: List[str]) -> None:
    where = f"`{path}.{method.name}`"
    _check_name(method.name, "method", path, errors)
    for param in method.parameters:
        _check_name(param.name, "parameter", f"{path}.{method.name}", errors)

    if method.abstract and method.final:
        errors.append(f"Method {where} cannot be both abstract and final.")
    if method.abstract and method.body is not None:
        errors.append(f"Abstract method {where} must not have a body.")

    if isinstance(owner, JavaInterface):
        if method.default and method.body is None:
            errors.append(f"Default method {where} needs a body.")
        return
    if method.abstract and isinstance(owner, JavaClass) and not owner.abstract:
        errors.append(f"Abstract method {where} in non-abstract class `{path}`.")
    if not method.abstract and method.body is None:
        errors.append(f"Method {where} has no body.")


def _check_name(name: str, what: str, path: str, errors: List[str]) -> None:
    if not name.isidentifier():
        errors.append(f"Invalid {what} name `{name}` in `{path}`.")
    elif name in JAVA_KEYWORDS:
        errors.append(f"Reserved word used as {what} name `{name}` in `{path}`.")

