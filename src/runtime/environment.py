# SPDX-License-Identifier: MIT
"""Runtime environment singleton for shared settings and state."""

from __future__ import annotations

from threading import Lock
from typing import TYPE_CHECKING

import logfire

from core.schema_registry import DEFAULT_REGISTRY, SchemaRegistry

if TYPE_CHECKING:  # pragma: no cover - for type checkers only
    from runtime.settings import Settings


class RuntimeEnv:
    """Thread-safe singleton storing application settings and the schema registry."""

    _instance: "RuntimeEnv" | None = None
    _lock = Lock()

    def __init__(
        self, settings: "Settings", registry: SchemaRegistry | None = None
    ) -> None:
        """Initialise the runtime environment."""
        self.settings = settings
        self._state_lock = Lock()
        self._registry = registry or DEFAULT_REGISTRY
        logfire.debug("RuntimeEnv created", settings=repr(settings))

    @property
    def registry(self) -> SchemaRegistry:
        """Return the schema registry used for encoding and decoding."""
        with self._state_lock:
            return self._registry

    @registry.setter
    def registry(self, registry: SchemaRegistry) -> None:
        """Swap in ``registry``, for example one carrying newer schemas."""
        with self._state_lock:
            self._registry = registry

    @classmethod
    def initialize(
        cls, settings: "Settings", registry: SchemaRegistry | None = None
    ) -> "RuntimeEnv":
        """Initialise and return the runtime environment.

        Args:
            settings: Validated application settings.
            registry: Optional schema registry; defaults to the built-in one.

        Returns:
            The active :class:`RuntimeEnv` instance.
        """
        with logfire.span("runtime_env.initialize"):
            with cls._lock:
                logfire.info(
                    "Initialising runtime environment",
                    default_version=settings.default_version,
                )
                cls._instance = cls(settings, registry)
                return cls._instance

    @classmethod
    def instance(cls) -> "RuntimeEnv":
        """Return the current runtime environment.

        Raises:
            RuntimeError: If :meth:`initialize` was not called.
        """
        inst = cls._instance
        if inst is None:
            logfire.error("RuntimeEnv accessed before initialisation")
            raise RuntimeError("RuntimeEnv has not been initialised")
        return inst

    @classmethod
    def reset(cls) -> None:
        """Clear the active runtime environment.

        Useful for tests needing a fresh configuration.
        """
        with logfire.span("runtime_env.reset"):
            with cls._lock:
                logfire.info("Resetting runtime environment")
                cls._instance = None


__all__ = ["RuntimeEnv"]
