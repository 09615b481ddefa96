"""Named table of available modules.

The registry replaces building and evaluating a call expression per flake:
modules are registered once, their slots reserved at registration, and
the run looks them up by name.
"""

import logging

from masclab.cache.records import FIRST_SLOT
from masclab.contracts import (
    ModuleDependencyError,
    SlotConflictError,
    UnknownModuleError,
)

__all__ = ['ModuleRegistry', 'default_registry']

logger = logging.getLogger(__name__)


class ModuleRegistry:
    """Maps module names to FlakeModule instances and owns slot reservations."""

    def __init__(self, modules=()):
        self._modules = {}
        self._slot_owners = {}
        for module in modules:
            self.register(module)

    def register(self, module) -> None:
        """Add a module and reserve its output slots.

        Raises
        ------
        ValueError
            If the name is empty or already registered.
        SlotConflictError
            If a slot overlaps the base columns, repeats within the module,
            or is already reserved by another module.
        """
        name = module.name
        if not name:
            raise ValueError(f"{type(module).__name__} has no name")
        if name in self._modules:
            raise ValueError(f"Module '{name}' is already registered")

        slots = tuple(module.resolve_output_slots())
        if len(set(slots)) != len(slots):
            raise SlotConflictError(f"Module '{name}' lists a slot twice: {slots}")
        for slot in slots:
            if slot < FIRST_SLOT:
                raise SlotConflictError(
                    f"Module '{name}' slot {slot} overlaps base columns (first slot is {FIRST_SLOT})"
                )
            owner = self._slot_owners.get(slot)
            if owner is not None:
                raise SlotConflictError(f"Slot {slot} of '{name}' is already reserved by '{owner}'")

        self._modules[name] = module
        for slot in slots:
            self._slot_owners[slot] = name
        logger.debug("Registered module %s -> slots %s", name, slots)

    def get(self, name: str):
        try:
            return self._modules[name]
        except KeyError:
            raise UnknownModuleError(name, self._modules) from None

    def names(self) -> list:
        return list(self._modules)

    def slot_owner(self, slot: int):
        return self._slot_owners.get(slot)

    def __contains__(self, name):
        return name in self._modules

    def __len__(self):
        return len(self._modules)

    def select(self, names) -> list:
        """Validate a run's module list and return the modules in order.

        Raises
        ------
        UnknownModuleError
            If a name is not registered.
        ModuleDependencyError
            If a name repeats, a dependency is not registered, or a selected
            dependency is scheduled after its dependent.
        """
        selected = []
        seen = set()
        for name in names:
            if name in seen:
                raise ModuleDependencyError(f"Module '{name}' selected more than once")
            module = self.get(name)
            for dep in module.dependencies:
                if dep not in self._modules:
                    raise ModuleDependencyError(
                        f"Module '{name}' depends on '{dep}', which is not available"
                    )
                if dep in names and dep not in seen:
                    raise ModuleDependencyError(
                        f"Module '{name}' depends on '{dep}', which must run before it"
                    )
                if dep not in names:
                    logger.info("Module %s reads cached output of %s (not selected)", name, dep)
            seen.add(name)
            selected.append(module)
        return selected


def default_registry() -> ModuleRegistry:
    """Registry of the modules shipped with masclab."""
    from masclab.modules.geometry import FlakeGeometryModule, FlakeShapeModule

    return ModuleRegistry([FlakeGeometryModule(), FlakeShapeModule()])
