"""
Per-view DSL file generation.

Each view gets a factory function and an abstract scope class holding one
configuration method per attribute. The scope's companion object registers the
module's dispatcher with the runtime.
"""

from __future__ import annotations

from ...core.config import OutputConfig, RuntimeConfig
from ...models.descriptor import AttrModel, ModuleModel, ViewModel
from .kotlin import GeneratedFile, KotlinFileWriter
from .transformers import pixel_to_dip_applies, requires_api_21


class ScopeRenderer:
    """Renders the factory and scope class of one view."""

    def __init__(self, runtime: RuntimeConfig, output: OutputConfig) -> None:
        self.runtime = runtime
        self.output = output

    def render(self, module: ModuleModel, view: ViewModel) -> GeneratedFile:
        w = KotlinFileWriter(view.scope_package, view.simple_name, self.output.suppressed_warnings, self.output.indent)
        scope = w.name(view.scope_type)

        v = w.member(self.runtime.member("v"))
        bind = w.member(self.runtime.member("bind"))
        with w.block(f"public fun {view.factory_name}(configure: {scope}.() -> Unit = {{}})"):
            w.line(f"return {v}<{w.type(view.star_projected_type)}>(configure.{bind}({scope}))")
        w.line()

        with w.block(f"public abstract class {scope} : {self._parent_scope(w, view)}()"):
            for attr in sorted(view.attrs, key=lambda a: (a.name, *a.type.sort_key)):
                self._render_method(w, attr)
            if view.attrs:
                w.line()
            self._render_companion(w, module, scope)
        return w.render()

    def _parent_scope(self, w: KotlinFileWriter, view: ViewModel) -> str:
        parent = view.parent
        if parent is None:
            return w.name(self.runtime.member(self.runtime.root_view_scope))
        return w.name(parent.scope_type)

    def _render_method(self, w: KotlinFileWriter, attr: AttrModel) -> None:
        attr_fn = w.member(self.runtime.member("attr"))
        if requires_api_21(attr):
            annotation = w.name(self.runtime.requires_api_annotation)
            codes = w.name(self.runtime.build_version_codes)
            w.line(f"@{annotation}(api = {codes}.LOLLIPOP)")

        if pixel_to_dip_applies(attr):
            dip = w.name(self.runtime.dip_class)
            w.line(f'public fun {attr.name}(arg: {dip}): Unit = {attr_fn}("{attr.name}", arg.value)')
            return

        w.line(f'public fun {attr.name}(arg: {self._arg_type(w, attr)}): Unit = {attr_fn}("{attr.name}", arg)')

    def _arg_type(self, w: KotlinFileWriter, attr: AttrModel) -> str:
        rendered = w.type(attr.type.arg_type)
        if not attr.is_nullable:
            return rendered
        if rendered.startswith("("):
            # Function types need parentheses before the nullability marker
            return f"({rendered})?"
        return f"{rendered}?"

    def _render_companion(self, w: KotlinFileWriter, module: ModuleModel, scope: str) -> None:
        entry = w.name(self.runtime.entry_type)
        with w.block(f"public companion object : {scope}()"):
            with w.block("init"):
                w.line(f"{entry}.registerAttributeSetter({w.name(module.setter_type)})")
                if module.manual_setter:
                    w.line(f"{entry}.registerAttributeSetter({w.member(module.manual_setter)})")
