"""Deterministic parameter generation for artwork tokens."""

from .generators import GENERATORS, generate_params, random_params

__all__ = ["GENERATORS", "generate_params", "random_params"]
