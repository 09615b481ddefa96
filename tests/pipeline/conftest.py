import pytest

from masclab.modules import ModuleRegistry
from masclab.pipeline import ModuleRunner


@pytest.fixture
def make_runner(internal_config, store, counting_fill, image_loader):
    """Factory for a ModuleRunner over fake modules, fill and image loader."""
    def _make(*modules, config=None, registry=None):
        if registry is None:
            registry = ModuleRegistry(modules)
        return ModuleRunner(
            config if config is not None else internal_config,
            registry=registry,
            store=store,
            fill=counting_fill,
            load_image=image_loader,
        )

    return _make

