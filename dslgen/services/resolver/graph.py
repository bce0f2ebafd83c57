"""
View model graph.

Views reference their super types by name, and a super type may live in a
dependency module or appear later in the same descriptor. Views are collected
first and linked in a single ``finalize`` pass.
"""

from __future__ import annotations

from ...core.exceptions import SupertypeCycleError, UnresolvedSupertypeError
from ...core.logging import get_logger
from ...models.descriptor import ModuleModel, UnresolvedSupertype, ViewModel

logger = get_logger(__name__)


class ViewGraph:
    """Registry of every view seen in one generation run."""

    def __init__(self) -> None:
        self._views: dict[str, ViewModel] = {}
        self._pending: list[ViewModel] = []
        self._dependency_views: set[str] = set()
        self.ignored: list[str] = []
        self._finalized = False

    def __len__(self) -> int:
        return len(self._views)

    def __contains__(self, name: object) -> bool:
        return name in self._views

    def get(self, name: str) -> ViewModel | None:
        return self._views.get(name)

    @property
    def views(self) -> list[ViewModel]:
        return list(self._views.values())

    @property
    def finalized(self) -> bool:
        return self._finalized

    def process_view(self, view: ViewModel) -> bool:
        """Register a view and remember its super type for later linking.

        Returns:
            False when another view of the same name was registered first.
        """
        registered = self._views.get(view.name)
        if registered is not None:
            if registered is view:
                return True
            logger.warning("Duplicate view definition ignored", view=view.name)
            self.ignored.append(view.name)
            return False
        self._views[view.name] = view
        if isinstance(view.supertype, UnresolvedSupertype):
            self._pending.append(view)
        return True

    def process_module(self, module: ModuleModel, dependency: bool = False) -> None:
        """Register every view of a module.

        Views that lose to an earlier registration are removed from the module,
        so nothing downstream renders a view the graph never links.
        """
        kept = [view for view in module.views if self.process_view(view)]
        if len(kept) != len(module.views):
            module.views = kept
        if dependency:
            self._dependency_views.update(view.name for view in kept)
        logger.debug(
            "Module processed",
            module=module.name,
            views=len(kept),
            dependency=dependency,
        )

    def is_dependency_view(self, view: ViewModel) -> bool:
        return view.name in self._dependency_views

    def finalize(self) -> None:
        """Link every pending super type reference.

        Raises:
            UnresolvedSupertypeError: If a super type matches no registered view.
            SupertypeCycleError: If a super type chain loops back on itself.
        """
        for view in self._pending:
            supertype = view.supertype
            if not isinstance(supertype, UnresolvedSupertype):
                continue
            parent = self._views.get(supertype.name)
            if parent is None:
                raise UnresolvedSupertypeError(
                    message="check the dependency descriptors passed to the generator",
                    context={"registered_views": len(self._views)},
                    view_name=view.name,
                    super_name=supertype.name,
                )
            view.resolve_supertype(parent)
        self._pending.clear()

        for view in self._views.values():
            self._check_chain(view)

        self._finalized = True
        logger.info("View graph finalized", views=len(self._views))

    def _check_chain(self, view: ViewModel) -> None:
        seen: list[str] = []
        current: ViewModel | None = view
        while current is not None:
            if current.name in seen:
                raise SupertypeCycleError(
                    message="super type chain does not terminate at a root",
                    chain=seen + [current.name],
                )
            seen.append(current.name)
            current = current.parent
