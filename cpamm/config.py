"""
Runtime configuration.

Both configs are frozen dataclasses with safe defaults; `load_config` builds
them from a YAML file of the form:

    engine:
      minimum_liquidity: 1000
      burn_address: "0x000...0"
    dispatcher:
      chain_id: cpamm-local
      require_signatures: true
      max_instruction_bytes: 4096
"""

from __future__ import annotations

from dataclasses import dataclass, fields
from pathlib import Path
from typing import Any, Mapping, Tuple, Type, TypeVar, Union

import yaml

from .kernels.python.lp_math import MINIMUM_LIQUIDITY
from .state.balances import BURN_ADDRESS


@dataclass(frozen=True)
class PoolEngineConfig:
    # LP shares locked forever on the first deposit.
    minimum_liquidity: int = MINIMUM_LIQUIDITY
    # Holder of the locked shares; must be an identity nobody can sign for.
    burn_address: str = BURN_ADDRESS

    def __post_init__(self) -> None:
        if not isinstance(self.minimum_liquidity, int) or isinstance(self.minimum_liquidity, bool):
            raise TypeError("minimum_liquidity must be an int")
        if self.minimum_liquidity <= 0:
            raise ValueError(f"minimum_liquidity must be positive: {self.minimum_liquidity}")
        if not isinstance(self.burn_address, str) or not self.burn_address:
            raise ValueError("burn_address must be a non-empty string")


@dataclass(frozen=True)
class DispatcherConfig:
    # Bind signatures to one deployment so they cannot be replayed elsewhere.
    chain_id: str = "cpamm-local"
    # If False, the signer field is trusted as already authenticated by the host.
    require_signatures: bool = True
    # Applied before hashing or signature verification.
    max_instruction_bytes: int = 4096

    def __post_init__(self) -> None:
        if not isinstance(self.chain_id, str) or not self.chain_id:
            raise ValueError("chain_id must be a non-empty string")
        if not isinstance(self.require_signatures, bool):
            raise TypeError("require_signatures must be a bool")
        if not isinstance(self.max_instruction_bytes, int) or self.max_instruction_bytes <= 0:
            raise ValueError("max_instruction_bytes must be a positive int")


_C = TypeVar("_C", PoolEngineConfig, DispatcherConfig)


def _build(cls: Type[_C], section: Any, name: str) -> _C:
    if section is None:
        return cls()
    if not isinstance(section, Mapping):
        raise TypeError(f"config section {name!r} must be a mapping")
    known = {f.name for f in fields(cls)}
    unknown = sorted(set(section) - known)
    if unknown:
        raise ValueError(f"unknown keys in config section {name!r}: {', '.join(unknown)}")
    return cls(**dict(section))


def config_from_mapping(obj: Any) -> Tuple[PoolEngineConfig, DispatcherConfig]:
    if obj is None:
        obj = {}
    if not isinstance(obj, Mapping):
        raise TypeError("config root must be a mapping")
    unknown = sorted(set(obj) - {"engine", "dispatcher"})
    if unknown:
        raise ValueError(f"unknown config sections: {', '.join(unknown)}")
    return (
        _build(PoolEngineConfig, obj.get("engine"), "engine"),
        _build(DispatcherConfig, obj.get("dispatcher"), "dispatcher"),
    )


def load_config(path: Union[str, Path]) -> Tuple[PoolEngineConfig, DispatcherConfig]:
    """Load engine and dispatcher configs from a YAML file."""
    obj = yaml.safe_load(Path(path).read_text(encoding="utf-8"))
    return config_from_mapping(obj)
