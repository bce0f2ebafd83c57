"""
Module descriptor data models.

These models represent the JSON module descriptors the generator consumes: a module
declares views, each view declares the attributes the DSL exposes for it.
"""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import Iterator

from pydantic import BaseModel, ConfigDict, Field, PrivateAttr
from pydantic.alias_generators import to_camel

# Kotlin types whose JVM canonical name differs from the Kotlin name
KOTLIN_TO_JVM = {
    "kotlin.Any": "java.lang.Object",
    "kotlin.String": "java.lang.String",
    "kotlin.CharSequence": "java.lang.CharSequence",
    "kotlin.Int": "int",
    "kotlin.Long": "long",
    "kotlin.Short": "short",
    "kotlin.Byte": "byte",
    "kotlin.Char": "char",
    "kotlin.Float": "float",
    "kotlin.Double": "double",
    "kotlin.Boolean": "boolean",
    "kotlin.IntArray": "int",
    "kotlin.LongArray": "long",
    "kotlin.FloatArray": "float",
    "kotlin.BooleanArray": "boolean",
    "kotlin.collections.List": "java.util.List",
    "kotlin.collections.Map": "java.util.Map",
}


class _DescriptorModel(BaseModel):
    """Base for descriptor models: camelCase in JSON, snake_case in Python."""

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)


def capitalize_first(text: str) -> str:
    return text[:1].upper() + text[1:]


def lower_first(text: str) -> str:
    return text[:1].lower() + text[1:]


def _render_generic(name: str, params: list[str]) -> str:
    if not params:
        return name
    return f"{name}<{', '.join(params)}>"


class DslTransformer(str, Enum):
    """Generation-time rules that alter an attribute's emitted setter."""

    FLOAT_PIXEL_TO_DIP_SIZE = "FloatPixelToDipSizeTransformer"
    REQUIRES_API_21 = "RequiresApi21Transformer"

    @classmethod
    def _missing_(cls, value: object) -> DslTransformer | None:
        # Model producers historically spell it "FLoatPixelToDipSizeTransformer"
        if isinstance(value, str):
            for member in cls:
                if member.value.casefold() == value.casefold():
                    return member
        return None


class ParameterModel(_DescriptorModel):
    """A parameter of a listener callback."""

    name: str
    type: str


class FunctionModel(_DescriptorModel):
    """One callback method of a listener type."""

    name: str
    parameters: list[ParameterModel] = Field(default_factory=list)
    return_type: str = Field(default="kotlin.Unit")

    @property
    def arg_names(self) -> list[str]:
        """Positional names used when forwarding the callback."""
        return [f"a{i}" for i in range(len(self.parameters))]


class TypeModel(_DescriptorModel):
    """A type reference as accepted by an attribute setter."""

    name: str = Field(description="Fully-qualified Kotlin type name")
    type_params: list[str] = Field(default_factory=list)
    is_interface: bool = Field(default=False)
    is_sam_like: bool = Field(default=False, description="Single abstract method type")
    is_nullable: bool = Field(default=False)
    is_array: bool = Field(default=False)
    is_vararg: bool = Field(default=False)
    functions: list[FunctionModel] = Field(default_factory=list)

    @property
    def star_projected(self) -> str:
        return _render_generic(self.name, ["*"] * len(self.type_params))

    @property
    def parametrized(self) -> str:
        return _render_generic(self.name, self.type_params)

    @property
    def sort_key(self) -> tuple[str, str, bool, bool, bool]:
        """Orders value types that share a name but differ in parameters or nullability."""
        return self.name, self.parametrized, self.is_nullable, self.is_array, self.is_vararg

    @property
    def function_type(self) -> str:
        """Kotlin lambda type equivalent to a SAM-like listener."""
        function = self.functions[0]
        params = ", ".join(p.type for p in function.parameters)
        return f"({params}) -> {function.return_type}"

    @property
    def arg_type(self) -> str:
        """Type of the DSL method parameter, without nullability."""
        if self.is_sam_like and self.is_interface and self.functions:
            return self.function_type
        return self.parametrized

    @property
    def jvm_name(self) -> str:
        """Canonical JVM name, as recorded by the nullability index."""
        if self.is_array and self.type_params:
            # The index drops array markup and keys arrays by element type
            element = self.type_params[0]
            return KOTLIN_TO_JVM.get(element, element)
        return KOTLIN_TO_JVM.get(self.name, self.name)


class AttrModel(_DescriptorModel):
    """A configurable attribute or callback of a view."""

    name: str = Field(description="DSL method name")
    setter_name: str | None = Field(default=None, description="Framework setter name")
    type: TypeModel
    is_listener: bool = Field(default=False)
    transformers: list[DslTransformer] | None = Field(default=None)

    _owner: ViewModel | None = PrivateAttr(default=None)

    # Graph nodes compare by identity, field equality would walk the backlinks
    def __eq__(self, other: object) -> bool:
        return self is other

    def __hash__(self) -> int:
        return id(self)

    @property
    def owner(self) -> ViewModel:
        if self._owner is None:
            raise RuntimeError(f"Attribute '{self.name}' is not attached to a view")
        return self._owner

    @property
    def setter(self) -> str:
        return self.setter_name or f"set{capitalize_first(self.name)}"

    @property
    def is_nullable(self) -> bool:
        return self.type.is_nullable

    @property
    def is_array(self) -> bool:
        return self.type.is_array

    @property
    def is_vararg(self) -> bool:
        return self.type.is_vararg

    def has_transformer(self, transformer: DslTransformer) -> bool:
        return transformer in (self.transformers or [])


@dataclass(frozen=True)
class UnresolvedSupertype:
    """A super type known only by name."""

    name: str


@dataclass(frozen=True)
class ResolvedSupertype:
    """A super type linked to its view."""

    view: ViewModel


class ViewModel(_DescriptorModel):
    """A view type targeted by generated configuration code."""

    name: str = Field(description="Fully-qualified view type name")
    type_params: list[str] = Field(default_factory=list)
    super_type: str | None = Field(default=None, description="Parent view, None for roots")
    attrs: list[AttrModel] = Field(default_factory=list)

    _supertype: UnresolvedSupertype | ResolvedSupertype | None = PrivateAttr(default=None)
    _module_package: str = PrivateAttr(default="")

    def __eq__(self, other: object) -> bool:
        return self is other

    def __hash__(self) -> int:
        return id(self)

    def model_post_init(self, __context: object) -> None:
        if self.super_type is not None:
            self._supertype = UnresolvedSupertype(self.super_type)

    @property
    def supertype(self) -> UnresolvedSupertype | ResolvedSupertype | None:
        return self._supertype

    def resolve_supertype(self, parent: ViewModel) -> None:
        self._supertype = ResolvedSupertype(parent)

    @property
    def parent(self) -> ViewModel | None:
        """Resolved parent view; raises if the super type is still pending."""
        supertype = self._supertype
        if supertype is None:
            return None
        if isinstance(supertype, UnresolvedSupertype):
            raise RuntimeError(f"Super type of '{self.name}' is not resolved yet")
        return supertype.view

    @property
    def is_root(self) -> bool:
        return self._supertype is None

    @property
    def module_package(self) -> str:
        return self._module_package

    @property
    def simple_name(self) -> str:
        return self.name.rsplit(".", 1)[-1]

    @property
    def star_projected_type(self) -> str:
        return _render_generic(self.name, ["*"] * len(self.type_params))

    @property
    def parametrized_type(self) -> str | None:
        if not self.type_params:
            return None
        return _render_generic(self.name, self.type_params)

    @property
    def scope_package(self) -> str:
        """Package of the generated scope, mirroring the view's own package leaf.

        ``androidx.appcompat.widget.Toolbar`` in module ``dev.inkremental.dsl.androidx.appcompat``
        gets ``dev.inkremental.dsl.androidx.appcompat.widget``.
        """
        view_package = self.name.rsplit(".", 1)[0] if "." in self.name else ""
        leaf = view_package.rsplit(".", 1)[-1]
        if not leaf:
            return self._module_package
        return f"{self._module_package}.{leaf}"

    @property
    def scope_type(self) -> str:
        return f"{self.scope_package}.{self.simple_name}Scope"

    @property
    def factory_name(self) -> str:
        return lower_first(self.simple_name)

    def ancestors(self) -> Iterator[ViewModel]:
        """Walk the resolved super type chain, nearest parent first."""
        current = self.parent
        while current is not None:
            yield current
            current = current.parent

    def is_assignable_from(self, other: ViewModel) -> bool:
        """True when ``other`` is this view or one of its descendants."""
        if other is self:
            return True
        return any(ancestor is self for ancestor in other.ancestors())


class ModuleModel(_DescriptorModel):
    """Top-level unit read from a descriptor file."""

    module_package: str
    name: str
    manual_setter: str | None = Field(
        default=None, description="Fully-qualified hand-written setter object"
    )
    javadoc_contains: str = Field(default="", description="Extra text for generated KDoc")
    views: list[ViewModel] = Field(default_factory=list)

    @property
    def setter_type(self) -> str:
        return f"{self.module_package}.{self.name}Setter"

    def backlink(self) -> ModuleModel:
        """Attach every view to this module and every attribute to its view."""
        for view in self.views:
            view._module_package = self.module_package
            for attr in view.attrs:
                attr._owner = view
        return self
