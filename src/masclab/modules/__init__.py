"""Analysis modules and the adapter that invokes them.

- base: FlakeModule interface, FlakeContext, ModuleInputs
- registry: named module table with slot reservation
- adapter: input resolution, invocation, output slots
- geometry: built-in flake_geometry and flake_shape modules
"""

from masclab.modules.base import FlakeContext, FlakeModule, ModuleInputs
from masclab.modules.registry import ModuleRegistry, default_registry
from masclab.modules.adapter import ModuleAdapter

__all__ = [
    "FlakeContext",
    "FlakeModule",
    "ModuleInputs",
    "ModuleRegistry",
    "default_registry",
    "ModuleAdapter",
]
