"""
Nullability Index Service.

Recovers parameter nullability from compiled classes. Nullability annotations
on platform classes have CLASS retention, so reflection never sees them; they
are only present as invisible parameter annotations in the class files.
"""

from __future__ import annotations

import re
import zipfile
import zlib
from pathlib import Path
from typing import Iterable

from ...core.exceptions import ClassFileError
from ...core.logging import get_logger
from ...models.bytecode import AnnotationVocabulary, MethodSignature, Nullability
from .classfile import MethodInfo, parse_class

logger = get_logger(__name__)

CONSTRUCTOR = "<init>"
_IDENTIFIER_RE = re.compile(r"^[A-Za-z_][A-Za-z0-9_]*$")
_PRIMITIVES = {
    "Z": "boolean",
    "B": "byte",
    "C": "char",
    "S": "short",
    "I": "int",
    "J": "long",
    "F": "float",
    "D": "double",
    "V": "void",
}


def resource_path(class_id: str) -> str:
    """Map ``android.widget.TextView`` (or an existing resource path) to its class resource."""
    if class_id.endswith(".class"):
        return class_id
    return class_id.replace(".", "/") + ".class"


def class_name_from_resource(path: str) -> str:
    return path.removesuffix(".class").replace("/", ".").replace("$", ".")


def convert_type_name(descriptor: str) -> str:
    """Normalize a field descriptor to a dotted class name.

    ``Ljava/lang/CharSequence;`` -> ``java.lang.CharSequence``, ``[I`` -> ``int``,
    ``Landroid/view/View$OnClickListener;`` -> ``android.view.View.OnClickListener``.
    """
    name = descriptor.lstrip("[")
    name = re.sub(r"<.*>", "", name)
    if name in _PRIMITIVES:
        return _PRIMITIVES[name]
    if name.startswith("L"):
        name = name[1:]
    name = name.removesuffix(";")
    return name.replace("/", ".").replace("$", ".")


def format_method_name(name: str) -> str | None:
    """Name under which a method is looked up, None for synthetic methods.

    Property-style setters are keyed by their property name: ``setText`` -> ``text``.
    """
    if not _IDENTIFIER_RE.match(name):
        return None
    if name.startswith("set") and len(name) > 3 and name[3].isupper():
        rest = name[3:]
        return rest[:1].lower() + rest[1:]
    return name


class ClassPath:
    """Ordered list of directories and jar/zip archives holding class files."""

    def __init__(self, entries: Iterable[Path] = ()) -> None:
        self.entries = [Path(entry) for entry in entries]
        self._archives: dict[Path, zipfile.ZipFile] = {}

    def _archive(self, path: Path) -> zipfile.ZipFile:
        if path not in self._archives:
            self._archives[path] = zipfile.ZipFile(path)
        return self._archives[path]

    def read(self, resource: str) -> bytes | None:
        """Return the resource bytes from the first entry holding it.

        Entries where the resource is absent or cannot be read are skipped.
        Returns None when no entry yields the resource.
        """
        for entry in self.entries:
            try:
                if entry.is_dir():
                    candidate = entry / resource
                    if candidate.is_file():
                        return candidate.read_bytes()
                elif entry.is_file():
                    return self._archive(entry).read(resource)
            except KeyError:
                continue
            except (OSError, zipfile.BadZipFile, zlib.error) as e:
                logger.debug(
                    "Skipping unreadable class resource",
                    entry=str(entry),
                    resource=resource,
                    error=str(e),
                )
        return None

    def close(self) -> None:
        for archive in self._archives.values():
            archive.close()
        self._archives.clear()


class NullabilityIndex:
    """Lookup of first-parameter nullability keyed by (class, method, parameter type)."""

    def __init__(self, vocabulary: AnnotationVocabulary, class_path: ClassPath) -> None:
        self.vocabulary = vocabulary
        self.class_path = class_path
        self._facts: dict[MethodSignature, Nullability] = {}

    @classmethod
    def for_sdk(cls, is_source_sdk: bool, class_path: ClassPath) -> NullabilityIndex:
        """Pick the annotation vocabulary the way SDK stubs require."""
        vocabulary = AnnotationVocabulary.RECENT if is_source_sdk else AnnotationVocabulary.STABLE
        return cls(vocabulary, class_path)

    def __len__(self) -> int:
        return len(self._facts)

    def _classify(self, annotations: list[str]) -> Nullability:
        for descriptor in annotations:
            nullability = self.vocabulary.classify(descriptor)
            if nullability is not Nullability.UNKNOWN:
                return nullability
        return Nullability.UNKNOWN

    def _is_candidate(self, method: MethodInfo) -> bool:
        # Exactly one declared parameter plus the receiver
        return (
            method.name != CONSTRUCTOR
            and bool(method.invisible_parameter_annotations)
            and len(method.local_variables) == 2
        )

    def record_class(self, class_id: str) -> int:
        """Scan one class and record the nullability of its single-argument methods.

        Returns:
            Number of facts recorded; 0 when the class is missing or unreadable.
        """
        resource = resource_path(class_id)
        data = self.class_path.read(resource)
        if data is None:
            logger.debug("Class not on class path", resource=resource)
            return 0

        class_name = class_name_from_resource(resource)
        try:
            info = parse_class(data, class_name)
        except ClassFileError as e:
            logger.debug("Skipping unreadable class", resource=resource, error=str(e))
            return 0

        recorded = 0
        for method in info.methods:
            if not self._is_candidate(method):
                continue
            method_name = format_method_name(method.name)
            if method_name is None:
                continue
            argument = sorted(method.local_variables, key=lambda v: v.index)[1]
            signature = MethodSignature(class_name, method_name, convert_type_name(argument.descriptor))
            annotations = method.invisible_parameter_annotations or [[]]
            self._facts[signature] = self._classify(annotations[0])
            recorded += 1

        logger.debug("Class scanned", class_name=class_name, facts=recorded)
        return recorded

    def record_classes(self, class_ids: Iterable[str]) -> int:
        return sum(self.record_class(class_id) for class_id in class_ids)

    def lookup(self, declaring_type: str, method_name: str, param_type: str) -> Nullability:
        formatted = format_method_name(method_name)
        if formatted is None:
            return Nullability.UNKNOWN
        signature = MethodSignature(declaring_type, formatted, param_type)
        return self._facts.get(signature, Nullability.UNKNOWN)

    def is_parameter_nullable(self, declaring_type: str, method_name: str, param_type: str) -> bool | None:
        return self.lookup(declaring_type, method_name, param_type).as_optional_bool()

    def facts(self) -> list[tuple[MethodSignature, Nullability]]:
        """Recorded facts in a stable order."""
        return sorted(
            self._facts.items(),
            key=lambda item: (item[0].class_name, item[0].method_name, item[0].first_arg_type),
        )
