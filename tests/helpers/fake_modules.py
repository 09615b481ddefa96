"""Fake modules, images and fill capabilities for runner tests."""

from datetime import date

import numpy as np

from masclab.modules import FlakeModule

DAY = date(2019, 1, 10)


def flake_name(ts, flake_id=0, cam_id=0):
    """MASC-style image filename for a capture time."""
    return f"{ts:%Y.%m.%d_%H.%M.%S}_flake_{flake_id}_cam_{cam_id}.png"


def fake_image(size=9, pad=2):
    """Square flake of ones on a zero background."""
    image = np.zeros((size, size))
    image[pad:size - pad, pad:size - pad] = 1.0
    return image


class CountingFill:
    """Fill capability that records every call."""

    def __init__(self):
        self.calls = 0

    def __call__(self, image, line_fill, resolution):
        self.calls += 1
        return np.asarray(image) > 0


class ConstantModule(FlakeModule):
    """Writes the same values for every flake."""

    def __init__(self, name="constant", slots=(6, 7), values=None):
        self.name = name
        self.output_slots = tuple(slots)
        self.values = list(values) if values is not None else list(range(1, len(slots) + 1))
        self.seen = []

    def run(self, inputs):
        self.seen.append(inputs.img_fullpath)
        return list(self.values)


class FailingModule(ConstantModule):
    """Raises on the n-th call (1-based)."""

    def __init__(self, name="failing", slots=(6, 7), fail_on=2):
        super().__init__(name, slots)
        self.fail_on = fail_on
        self.calls = 0

    def run(self, inputs):
        self.calls += 1
        if self.calls == self.fail_on:
            raise RuntimeError("boom")
        return super().run(inputs)


class WrongArityModule(ConstantModule):
    """Returns one value fewer than it has slots."""

    def __init__(self, name="wrong_arity", slots=(8, 9)):
        super().__init__(name, slots)
        self.calls = 0

    def run(self, inputs):
        self.calls += 1
        return [0.0] * (len(self.output_slots) - 1)


class InputRecordingModule(ConstantModule):
    """Keeps every ModuleInputs it receives."""

    def __init__(self, name="recording", slots=(12,)):
        super().__init__(name, slots, values=[1])
        self.inputs = []

    def run(self, inputs):
        self.inputs.append(inputs)
        return [len(self.inputs)]
