import pytest

from core.schema_registry import DEFAULT_REGISTRY
from models import ParamSchema
from runtime.environment import RuntimeEnv
from runtime.settings import load_settings


def test_instance_requires_initialisation() -> None:
    RuntimeEnv.reset()
    with pytest.raises(RuntimeError):
        RuntimeEnv.instance()


def test_initialise_uses_default_registry() -> None:
    env = RuntimeEnv.initialize(load_settings())
    assert RuntimeEnv.instance() is env
    assert env.registry is DEFAULT_REGISTRY


def test_registry_can_be_swapped() -> None:
    env = RuntimeEnv.instance()
    newer = DEFAULT_REGISTRY.with_schema("lamb", ParamSchema(keys=("cols",)))
    env.registry = newer
    assert RuntimeEnv.instance().registry is newer
