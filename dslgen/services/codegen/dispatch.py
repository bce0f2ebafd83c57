"""
Attribute dispatcher generation.

The resolved attributes are first laid out as an ordered dispatch table, one
branch per surviving (owner, value type) candidate, then rendered as the body
of the module's ``AttributeSetter`` object: an outer ``when`` on the attribute
name and an inner ``when`` over that name's branches.
"""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import Iterator

from ...core.config import OutputConfig, RuntimeConfig
from ...models.descriptor import AttrModel, FunctionModel, ModuleModel, TypeModel, ViewModel
from .kotlin import GeneratedFile, KotlinFileWriter
from .transformers import INT, pixel_to_dip_applies

FUNCTION_STAR = "kotlin.Function<*>"


class BranchKind(str, Enum):
    """How a dispatch branch applies its value."""

    SETTER = "setter"
    LISTENER = "listener"
    PIXEL_TO_DIP = "pixel_to_dip"


@dataclass(frozen=True)
class DispatchBranch:
    attr: AttrModel
    kind: BranchKind

    @property
    def owner(self) -> ViewModel:
        return self.attr.owner

    @property
    def value_type(self) -> TypeModel:
        return self.attr.type


def branch_kind(attr: AttrModel) -> BranchKind:
    if attr.is_listener:
        return BranchKind.LISTENER
    if pixel_to_dip_applies(attr):
        return BranchKind.PIXEL_TO_DIP
    return BranchKind.SETTER


@dataclass
class DispatchTable:
    """Ordered (attribute name -> branches) table."""

    entries: dict[str, list[DispatchBranch]]

    @classmethod
    def build(cls, resolved: dict[str, list[AttrModel]]) -> DispatchTable:
        return cls(
            entries={
                name: [DispatchBranch(attr, branch_kind(attr)) for attr in attrs]
                for name, attrs in resolved.items()
            }
        )

    def __len__(self) -> int:
        return len(self.entries)

    def branches(self) -> Iterator[tuple[str, DispatchBranch]]:
        for name, branches in self.entries.items():
            for branch in branches:
                yield name, branch


class DispatcherRenderer:
    """Renders a module's dispatch object from its table."""

    def __init__(self, runtime: RuntimeConfig, output: OutputConfig, generator: str) -> None:
        self.runtime = runtime
        self.output = output
        self.generator = generator

    def render(self, module: ModuleModel, table: DispatchTable) -> GeneratedFile:
        setter_name = f"{module.name}Setter"
        w = KotlinFileWriter(module.module_package, setter_name, self.output.suppressed_warnings, self.output.indent)

        w.line("/**")
        w.line(" * DSL for creating views and setting their attributes.")
        w.line(f" * This file has been generated by {{@code {self.generator}}}")
        if module.javadoc_contains:
            w.line(f" * {module.javadoc_contains}.")
        w.line(" * Please, don't edit it manually unless for debugging.")
        w.line(" */")

        setter_interface = w.name(f"{self.runtime.entry_type}.AttributeSetter")
        with w.block(f"public object {setter_name} : {setter_interface}<Any>"):
            view = w.name(self.runtime.view_class)
            signature = f"public override fun set(v: {view}, name: String, arg: Any?, old: Any?): Boolean"
            with w.block(f"{signature} = when (name)"):
                for name, branches in table.entries.items():
                    with w.block(f'"{name}" -> when'):
                        for branch in branches:
                            self._render_branch(w, branch)
                        w.line("else -> false")
                w.line("else -> false")
        return w.render()

    def _render_branch(self, w: KotlinFileWriter, branch: DispatchBranch) -> None:
        if branch.kind is BranchKind.LISTENER:
            self._render_listener(w, branch.attr)
        else:
            self._render_setter(w, branch.attr, branch.kind)

    def _receiver(self, w: KotlinFileWriter, owner: ViewModel) -> str:
        parametrized = owner.parametrized_type
        return f"(v as {w.type(parametrized)})" if parametrized else "v"

    @staticmethod
    def _guard(instance_test: str | None, value_test: str) -> str:
        return f"{instance_test} && {value_test}" if instance_test else value_test

    def _render_setter(self, w: KotlinFileWriter, attr: AttrModel, kind: BranchKind) -> None:
        owner = attr.owner
        instance_test = None if owner.is_root else f"v is {w.type(owner.star_projected_type)}"
        receiver = "v" if owner.is_root else self._receiver(w, owner)
        value_type = attr.type

        if attr.is_nullable:
            with w.block(f"{self._guard(instance_test, 'arg == null')} ->"):
                w.line(f"{receiver}.{attr.setter}(null as {w.type(value_type.parametrized)}?)")
                w.line("true")

        if kind is BranchKind.PIXEL_TO_DIP:
            dip = w.member(self.runtime.member("dip"))
            with w.block(f"{self._guard(instance_test, f'arg is {w.type(INT)}')} ->"):
                w.line(f"{receiver}.{attr.setter}({dip}(arg).toFloat())")
                w.line("true")
            return

        with w.block(f"{self._guard(instance_test, f'arg is {w.type(value_type.star_projected)}')} ->"):
            w.line(f"{receiver}.{attr.setter}({self._argument(w, value_type)})")
            w.line("true")

    def _argument(self, w: KotlinFileWriter, value_type: TypeModel) -> str:
        typed = f"arg as {w.type(value_type.parametrized)}"
        if value_type.is_vararg:
            return f"*({typed})" if value_type.type_params else "*arg"
        if value_type.type_params:
            return typed
        return "arg"

    def _render_listener(self, w: KotlinFileWriter, attr: AttrModel) -> None:
        owner = attr.owner
        if owner.is_root:
            self._render_listener_branches(w, attr, "v")
            return
        with w.block(f"v is {w.type(owner.star_projected_type)} -> when"):
            self._render_listener_branches(w, attr, self._receiver(w, owner))
            w.line("else -> false")

    def _render_listener_branches(self, w: KotlinFileWriter, attr: AttrModel, receiver: str) -> None:
        value_type = attr.type
        plain = w.type(value_type.parametrized)
        with w.block("arg == null ->"):
            w.line(f"{receiver}.{attr.setter}(null as {plain}?)")
            w.line("true")

        checked = w.type(FUNCTION_STAR) if value_type.is_sam_like else plain
        with w.block(f"arg is {checked} ->"):
            if value_type.is_sam_like:
                w.line(f"arg as {w.type(value_type.function_type)}")
            if value_type.is_sam_like and value_type.is_interface:
                function = value_type.functions[0]
                args = ", ".join(function.arg_names)
                call = self._callback_call(w, function, functional=True)
                body = f"{args} -> {call}" if args else call
                w.line(f"{receiver}.{attr.setter} {{ {body} }}")
            else:
                supertype = plain if value_type.is_interface else f"{plain}()"
                with w.block(f"{receiver}.{attr.setter}(object : {supertype}", closer="})"):
                    for function in value_type.functions:
                        self._render_callback(w, function, functional=value_type.is_sam_like)
            w.line("true")

    def _callback_call(self, w: KotlinFileWriter, function: FunctionModel, functional: bool) -> str:
        target = "arg" if functional else f"arg.{function.name}"
        render = w.name(self.runtime.entry_type)
        return f"{target}({', '.join(function.arg_names)}).also {{ {render}.render() }}"

    def _render_callback(self, w: KotlinFileWriter, function: FunctionModel, functional: bool) -> None:
        params = ", ".join(
            f"{name}: {w.type(p.type)}" for name, p in zip(function.arg_names, function.parameters)
        )
        returns = w.type(function.return_type)
        call = self._callback_call(w, function, functional)
        w.line(f"public override fun {function.name}({params}): {returns} = {call}")
