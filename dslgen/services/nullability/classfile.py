"""
Minimal JVM class-file reader.

Reads only what the nullability index needs: the constant pool, the method
table, local variable tables from ``Code`` attributes and invisible parameter
annotations. Everything else is skipped by length.
"""

from __future__ import annotations

import struct
from dataclasses import dataclass, field

from ...core.exceptions import ClassFileError

MAGIC = 0xCAFEBABE

# Constant pool tag -> fixed payload size in bytes (Utf8 is variable)
_CP_SIZES = {
    3: 4,  # Integer
    4: 4,  # Float
    5: 8,  # Long
    6: 8,  # Double
    7: 2,  # Class
    8: 2,  # String
    9: 4,  # Fieldref
    10: 4,  # Methodref
    11: 4,  # InterfaceMethodref
    12: 4,  # NameAndType
    15: 3,  # MethodHandle
    16: 2,  # MethodType
    17: 4,  # Dynamic
    18: 4,  # InvokeDynamic
    19: 2,  # Module
    20: 2,  # Package
}
_CP_UTF8 = 1
_CP_CLASS = 7
_WIDE_TAGS = {5, 6}


@dataclass
class LocalVariable:
    index: int
    name: str
    descriptor: str


@dataclass
class MethodInfo:
    name: str
    local_variables: list[LocalVariable] = field(default_factory=list)
    # One list of annotation descriptors per parameter, None when the attribute is absent
    invisible_parameter_annotations: list[list[str]] | None = None


@dataclass
class ClassInfo:
    name: str
    methods: list[MethodInfo] = field(default_factory=list)


class _Reader:
    def __init__(self, data: bytes, class_name: str) -> None:
        self.data = data
        self.pos = 0
        self.class_name = class_name

    def take(self, size: int) -> bytes:
        end = self.pos + size
        if end > len(self.data):
            raise ClassFileError(
                message=f"unexpected end of data, wanted {size} bytes",
                class_name=self.class_name,
                offset=self.pos,
            )
        chunk = self.data[self.pos:end]
        self.pos = end
        return chunk

    def u1(self) -> int:
        return self.take(1)[0]

    def u2(self) -> int:
        return struct.unpack(">H", self.take(2))[0]

    def u4(self) -> int:
        return struct.unpack(">I", self.take(4))[0]

    def skip(self, size: int) -> None:
        self.take(size)

    def sub(self, size: int) -> _Reader:
        return _Reader(self.take(size), self.class_name)


class _ConstantPool:
    def __init__(self, reader: _Reader) -> None:
        self.utf8: dict[int, str] = {}
        self.classes: dict[int, int] = {}
        count = reader.u2()
        index = 1
        while index < count:
            tag = reader.u1()
            if tag == _CP_UTF8:
                length = reader.u2()
                # Modified UTF-8 only differs for NUL and supplementary chars
                self.utf8[index] = reader.take(length).decode("utf-8", errors="replace")
            elif tag == _CP_CLASS:
                self.classes[index] = reader.u2()
            elif tag in _CP_SIZES:
                reader.skip(_CP_SIZES[tag])
            else:
                raise ClassFileError(
                    message=f"unknown constant pool tag {tag}",
                    class_name=reader.class_name,
                    offset=reader.pos - 1,
                )
            index += 2 if tag in _WIDE_TAGS else 1

    def text(self, index: int) -> str:
        try:
            return self.utf8[index]
        except KeyError:
            raise ClassFileError(message=f"constant #{index} is not Utf8") from None

    def class_name(self, index: int) -> str | None:
        if index == 0:
            return None
        if index not in self.classes:
            raise ClassFileError(message=f"constant #{index} is not a Class")
        return self.text(self.classes[index])


def _skip_element_value(reader: _Reader) -> None:
    tag = chr(reader.u1())
    if tag in "BCDFIJSZsc":
        reader.skip(2)
    elif tag == "e":
        reader.skip(4)
    elif tag == "@":
        _read_annotation(reader)
    elif tag == "[":
        for _ in range(reader.u2()):
            _skip_element_value(reader)
    else:
        raise ClassFileError(
            message=f"unknown element value tag {tag!r}",
            class_name=reader.class_name,
            offset=reader.pos - 1,
        )


def _read_annotation(reader: _Reader) -> int:
    type_index = reader.u2()
    for _ in range(reader.u2()):
        reader.skip(2)
        _skip_element_value(reader)
    return type_index


def _read_parameter_annotations(reader: _Reader, pool: _ConstantPool) -> list[list[str]]:
    parameters = []
    for _ in range(reader.u1()):
        annotations = [pool.text(_read_annotation(reader)) for _ in range(reader.u2())]
        parameters.append(annotations)
    return parameters


def _read_local_variables(reader: _Reader, pool: _ConstantPool) -> list[LocalVariable]:
    reader.skip(4)  # max_stack, max_locals
    reader.skip(reader.u4())  # code
    reader.skip(reader.u2() * 8)  # exception table
    variables: list[LocalVariable] = []
    for _ in range(reader.u2()):
        name = pool.text(reader.u2())
        body = reader.sub(reader.u4())
        if name != "LocalVariableTable":
            continue
        for _ in range(body.u2()):
            body.skip(4)  # start_pc, length
            var_name = pool.text(body.u2())
            descriptor = pool.text(body.u2())
            variables.append(LocalVariable(index=body.u2(), name=var_name, descriptor=descriptor))
    return variables


def _read_method(reader: _Reader, pool: _ConstantPool) -> MethodInfo:
    reader.skip(2)  # access flags
    method = MethodInfo(name=pool.text(reader.u2()))
    reader.skip(2)  # descriptor
    for _ in range(reader.u2()):
        name = pool.text(reader.u2())
        body = reader.sub(reader.u4())
        if name == "Code":
            method.local_variables.extend(_read_local_variables(body, pool))
        elif name == "RuntimeInvisibleParameterAnnotations":
            method.invisible_parameter_annotations = _read_parameter_annotations(body, pool)
    return method


def _skip_members(reader: _Reader) -> None:
    for _ in range(reader.u2()):
        reader.skip(6)
        for _ in range(reader.u2()):
            reader.skip(2)
            reader.skip(reader.u4())


def parse_class(data: bytes, class_name: str = "") -> ClassInfo:
    """Parse class bytes.

    Raises:
        ClassFileError: If the data is not a well-formed class file.
    """
    reader = _Reader(data, class_name)
    if reader.u4() != MAGIC:
        raise ClassFileError(message="bad magic number", class_name=class_name)
    reader.skip(4)  # minor, major
    pool = _ConstantPool(reader)
    reader.skip(2)  # access flags
    this_class = pool.class_name(reader.u2()) or class_name
    reader.skip(2)  # super class
    reader.skip(reader.u2() * 2)  # interfaces
    _skip_members(reader)  # fields

    info = ClassInfo(name=this_class)
    for _ in range(reader.u2()):
        info.methods.append(_read_method(reader, pool))
    return info
