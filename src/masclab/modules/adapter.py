"""Module adapter: the only place the runner touches module code.

Every exception a module raises is re-raised as ModuleExecutionError with
the module name and flake ordinal attached. Nothing is swallowed here; the
runner decides the recovery.
"""

import logging
from pathlib import Path

from masclab.contracts import ModuleExecutionError
from masclab.modules.base import ModuleInputs

__all__ = ['ModuleAdapter']

logger = logging.getLogger(__name__)


class ModuleAdapter:
    """Resolves inputs, invokes, and reports output slots for registered modules."""

    def __init__(self, registry, path_to_flakes):
        self.registry = registry
        self.path_to_flakes = Path(path_to_flakes)

    def resolve_inputs(self, module_name: str, record, context) -> ModuleInputs:
        """Build the invocation inputs of one module for one record.

        The module sees the full image path, the region column, the crop
        box as (col_offset, row_offset), and the per-flake context.
        """
        module = self.registry.get(module_name)
        img_fullpath = self.path_to_flakes / record.source_path
        try:
            module_inputs = module.resolve_inputs(img_fullpath, record.region, record.crop_box, context)
        except Exception as e:
            raise ModuleExecutionError(module_name, context.flake_ordinal, e) from e
        return ModuleInputs(img_fullpath, record.region, record.crop_box, module_inputs)

    def invoke(self, module_name: str, inputs: ModuleInputs, flake_ordinal: int) -> list:
        """Run a module and return its outputs as a list.

        Raises
        ------
        ModuleExecutionError
            If the module raises, or returns something other than a list or tuple.
        """
        module = self.registry.get(module_name)
        try:
            outputs = module.run(inputs)
        except Exception as e:
            raise ModuleExecutionError(module_name, flake_ordinal, e) from e

        if not isinstance(outputs, (list, tuple)):
            cause = TypeError(f"run() returned {type(outputs).__name__}, expected list or tuple")
            raise ModuleExecutionError(module_name, flake_ordinal, cause)
        return list(outputs)

    def resolve_output_slots(self, module_name: str) -> tuple:
        return tuple(self.registry.get(module_name).resolve_output_slots())
