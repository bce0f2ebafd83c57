"""
Kotlin source writer.

Collects imports while code is written so the body can use simple names, and
renders the file header (file annotations, package, sorted imports).
"""

from __future__ import annotations

import re
from contextlib import contextmanager
from dataclasses import dataclass
from typing import Iterator

# Packages Kotlin imports by default
_DEFAULT_PACKAGES = {"kotlin", "kotlin.collections", "kotlin.jvm", "kotlin.ranges", "kotlin.sequences", "kotlin.text"}
_QUALIFIED_RE = re.compile(r"[A-Za-z_]\w*(?:\.[A-Za-z_]\w*)+")


@dataclass(frozen=True)
class GeneratedFile:
    """One emitted source file."""

    package: str
    file_name: str
    content: str

    @property
    def key(self) -> str:
        """Storage key: package directories plus file name."""
        return "/".join([*self.package.split("."), f"{self.file_name}.kt"])


def split_qualified(name: str) -> tuple[str, list[str]]:
    """Split ``android.view.View.OnClickListener`` into package and class path.

    The first capitalized segment starts the class path.
    """
    segments = name.split(".")
    for i, segment in enumerate(segments):
        if segment[:1].isupper():
            return ".".join(segments[:i]), segments[i:]
    # Top-level member such as ``dev.inkremental.attr``
    return ".".join(segments[:-1]), segments[-1:]


class KotlinFileWriter:
    """Accumulates the body of one Kotlin file."""

    def __init__(self, package: str, file_name: str, suppressed: list[str], indent: str = "  ") -> None:
        self.package = package
        self.file_name = file_name
        self.suppressed = suppressed
        self.indent_unit = indent
        self._imports: dict[str, str] = {}
        self._lines: list[str] = []
        self._level = 0

    def _claim(self, simple: str, qualified: str) -> bool:
        owner = self._imports.get(simple)
        if owner is None:
            self._imports[simple] = qualified
            return True
        return owner == qualified

    def name(self, qualified: str) -> str:
        """Shortest usable reference to a class, importing it when possible."""
        package, class_path = split_qualified(qualified)
        if not package:
            return qualified
        top = f"{package}.{class_path[0]}"
        if self._claim(class_path[0], top):
            return ".".join(class_path)
        return qualified

    def member(self, qualified: str) -> str:
        """Import a top-level function and return its simple name."""
        package, simple = qualified.rsplit(".", 1)
        if package == self.package or self._claim(simple, qualified):
            return simple
        return qualified

    def type(self, expression: str) -> str:
        """Rewrite every qualified name inside a type expression."""
        return _QUALIFIED_RE.sub(lambda m: self.name(m.group(0)), expression)

    def line(self, text: str = "") -> None:
        self._lines.append(f"{self.indent_unit * self._level}{text}" if text else "")

    @contextmanager
    def block(self, opener: str, closer: str = "}") -> Iterator[None]:
        self.line(f"{opener} {{")
        self._level += 1
        try:
            yield
        finally:
            self._level -= 1
            self.line(closer)

    def _import_lines(self) -> list[str]:
        imports = set()
        for qualified in self._imports.values():
            package = qualified.rsplit(".", 1)[0]
            if package in _DEFAULT_PACKAGES or package == self.package:
                continue
            imports.add(qualified)
        return [f"import {name}" for name in sorted(imports)]

    def render(self) -> GeneratedFile:
        warnings = ", ".join(f'"{w}"' for w in self.suppressed)
        header = [f"@file:Suppress({warnings})", "", f"package {self.package}", ""]
        imports = self._import_lines()
        if imports:
            header += imports + [""]
        content = "\n".join(header + self._lines).rstrip("\n") + "\n"
        return GeneratedFile(package=self.package, file_name=self.file_name, content=content)
