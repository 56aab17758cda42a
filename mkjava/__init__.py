from .codegen import AstNode, JavaWriter, WriterConfig
from .model import (
    Access, ClassReference, CodeBlock, JavaAnnotation, JavaClass, JavaConstructor,
    JavaEnum, JavaField, JavaInterface, JavaMethod, JavaParameter, JavaType,
)
from .types import mk_declaration, parse_type
from .validation import ValidationResult, validate_declaration

__all__ = [
    # engine
    "AstNode", "JavaWriter", "WriterConfig",
    # model
    "Access", "ClassReference", "CodeBlock", "JavaAnnotation", "JavaClass", "JavaConstructor",
    "JavaEnum", "JavaField", "JavaInterface", "JavaMethod", "JavaParameter", "JavaType",
    # specs & validation
    "mk_declaration", "parse_type", "ValidationResult", "validate_declaration",
]
