"""Module interface and per-flake invocation context.

A module is a named analysis unit with three parts:

1. ``resolve_inputs(img_fullpath, region, crop_box, context)`` picks what
   the module needs for one flake
2. ``run(inputs)`` returns an ordered list of outputs
3. ``output_slots`` says which record slot each output lands in

Modules are registered once in a ModuleRegistry and never discovered
per flake.
"""

__all__ = ['FlakeModule', 'FlakeContext', 'ModuleInputs']


class FlakeContext:
    """Read-only per-flake state handed to ``resolve_inputs``.

    Replaces the mutable ``settings.filledFlake`` scratch field: the filled
    flake of the current record travels here, next to the immutable config.
    """

    __slots__ = ("flake_ordinal", "position", "timestamp", "cam_id",
                 "filled_flake", "slots", "config")

    def __init__(self, flake_ordinal, position, timestamp, cam_id,
                 filled_flake, slots, config):
        self.flake_ordinal = flake_ordinal
        self.position = position
        self.timestamp = timestamp
        self.cam_id = cam_id
        self.filled_flake = filled_flake
        self.slots = dict(slots)
        self.config = config

    @property
    def resolution(self) -> float:
        return self.filled_flake.resolution


class ModuleInputs:
    """Everything one module invocation receives."""

    __slots__ = ("img_fullpath", "region", "crop_box", "module_inputs")

    def __init__(self, img_fullpath, region, crop_box, module_inputs):
        self.img_fullpath = img_fullpath
        self.region = region
        self.crop_box = crop_box
        self.module_inputs = module_inputs


class FlakeModule:
    """Base class for analysis modules.

    Subclasses set ``name`` and ``output_slots`` and implement ``run``.
    ``dependencies`` names modules whose slots this one reads; they must be
    registered, and must run earlier when selected in the same run.

    Example::

        class MaxIntensity(FlakeModule):
            name = "max_intensity"
            output_slots = (12,)

            def run(self, inputs):
                image = load_flake_image(inputs.img_fullpath)
                return [float(image.max())]
    """

    name: str = ""
    output_slots: tuple = ()
    dependencies: tuple = ()

    def resolve_inputs(self, img_fullpath, region, crop_box, context: FlakeContext) -> dict:
        """Module-specific inputs. Default: the filled flake and its resolution."""
        return {
            "filled_flake": context.filled_flake.mask,
            "resolution": context.resolution,
        }

    def run(self, inputs: ModuleInputs) -> list:
        raise NotImplementedError

    def resolve_output_slots(self) -> tuple:
        return tuple(self.output_slots)

    def __repr__(self):
        return f"{type(self).__name__}(name={self.name!r}, slots={self.output_slots})"
