from __future__ import annotations

import logging
import re
from abc import ABC, abstractmethod
from dataclasses import dataclass
from typing import TYPE_CHECKING, Iterable

if TYPE_CHECKING:
    from .model import ClassReference

logger = logging.getLogger(__name__)


class AstNode(ABC):
    """Anything that can render itself into a :class:`JavaWriter`."""

    @abstractmethod
    def write(self, writer: JavaWriter) -> None: ...


@dataclass(frozen=True)
class WriterConfig:
    package_name: str
    skip_package_declaration: bool = False
    indent: str = "    "


class JavaWriter:
    """
    Indentation-aware buffer for one Java compilation unit.

    Nodes append body text while they are traversed and register every type
    they mention. Imports are resolved only in :meth:`render`, once the whole
    tree has been visited: explicit imports and references are merged,
    deduplicated, sorted and placed below the package line.
    """

    def __init__(self, config: WriterConfig) -> None:
        self.config = config
        self.package_name = config.package_name
        self.skip_package_declaration = config.skip_package_declaration
        self.indent_level = 0
        self._parts: list[str] = []
        self._imports: set[str] = set()
        self._references: set[str] = set()

    @classmethod
    def for_package(cls, package_name: str, *, skip_package_declaration: bool = False) -> JavaWriter:
        return cls(WriterConfig(package_name, skip_package_declaration=skip_package_declaration))

    # ---------- indentation ----------

    def indent(self) -> None:
        self.indent_level += 1

    def dedent(self) -> None:
        if self.indent_level > 0:
            self.indent_level -= 1

    def indented(self) -> _Indented:
        return _Indented(self)

    @property
    def indentation(self) -> str:
        return self.config.indent * self.indent_level

    # ---------- text ----------

    @property
    def buffer(self) -> str:
        return "".join(self._parts)

    def write(self, text: str) -> None:
        self._parts.append(text)

    def write_line(self, text: str | None = None) -> None:
        if text is not None:
            self._parts.append(self.indentation + text)
        self._parts.append("\n")

    def start_line(self, text: str = "") -> None:
        self._parts.append(self.indentation + text)

    def blank_line(self) -> None:
        self._parts.append("\n")

    def ensure_trailing_newline(self) -> None:
        for part in reversed(self._parts):
            if part:
                if not part.endswith("\n"):
                    self._parts.append("\n")
                return

    def write_node(self, node: AstNode) -> None:
        node.write(self)

    def write_doc(self, text: str | None, tags: Iterable[str] = ()) -> None:
        tags = list(tags)
        if not text and not tags:
            return
        self.write_line("/**")
        if text:
            for ln in text.split("\n"):
                self.write_line(f" * {ln}")
        for tag in tags:
            self.write_line(f" * {tag}")
        self.write_line(" */")

    # ---------- imports ----------

    def add_import(self, import_name: str) -> None:
        self._imports.add(import_name)

    def add_reference(self, reference: ClassReference) -> None:
        if reference.package_name == self.package_name or not reference.package_name:
            logger.debug("Skipping import for %s (same or default package)", reference.name)
            return
        self._references.add(f"{reference.package_name}.{reference.name}")

    @property
    def imports(self) -> list[str]:
        return sorted(self._imports | self._references)

    # ---------- output ----------

    def render(self) -> str:
        out: list[str] = []
        if not self.skip_package_declaration:
            out.append(f"package {self.package_name};\n\n")

        all_imports = self.imports
        for name in all_imports:
            out.append(f"import {name};\n")
        if all_imports:
            out.append("\n")

        body = self.buffer
        out.append(body)
        logger.debug(
            "Rendered %s: %d imports, %d body chars", self.package_name, len(all_imports), len(body),
        )
        return "".join(out)

    def __str__(self) -> str:
        return self.render()

    @staticmethod
    def format_code(code: str) -> str:
        return re.sub(r"\s+", " ", code)


class _Indented:
    def __init__(self, writer: JavaWriter) -> None:
        self.writer = writer

    def __enter__(self) -> JavaWriter:
        self.writer.indent()
        return self.writer

    def __exit__(self, exc_type, exc, tb) -> None:
        self.writer.dedent()
