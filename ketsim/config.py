# ketsim/config.py
from __future__ import annotations

from functools import lru_cache
from typing import Literal

from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """
    Simulator defaults, overridable through ``KETSIM_*`` environment variables.
    Keyword arguments passed to the API always win over these.
    """

    # --- Numerics ---
    # None -> picked from DTYPE (see validation.default_tolerance)
    TOLERANCE: float | None = None
    DTYPE: Literal["complex128", "complex64"] = "complex128"

    # --- Kernels ---
    BACKEND: Literal["serial", "numpy", "numba"] = "numpy"
    NUM_THREADS: int | None = None

    model_config = SettingsConfigDict(
        env_prefix="KETSIM_",
        env_file=".env",
        extra="ignore",
    )


@lru_cache(maxsize=1)
def get_settings() -> Settings:
    return Settings()
