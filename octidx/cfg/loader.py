from __future__ import annotations

import sys
from dataclasses import MISSING, asdict, fields, is_dataclass
from pathlib import Path
from typing import Any, Callable, Literal, Mapping, Type, Union, get_args, get_origin, get_type_hints

import yaml

from .schema import Config

_MAX_DEPTH_LIMIT = 64

_TRUE_WORDS = frozenset({"1", "true", "yes", "y", "on"})
_FALSE_WORDS = frozenset({"0", "false", "no", "n", "off"})


class ConfigError(ValueError):
    pass


def load_config(path: Union[str, Path]) -> Config:
    p = Path(path)
    if not p.exists():
        raise ConfigError(f"Config file not found: {p}")
    try:
        text = p.read_text(encoding="utf-8")
    except OSError as exc:
        raise ConfigError(f"Failed to read config file: {p}") from exc
    return loads_config(text)


def loads_config(yaml_text: str) -> Config:
    try:
        data = yaml.safe_load(yaml_text) or {}
    except yaml.YAMLError as exc:
        raise ConfigError(f"Invalid configuration data: {exc}") from exc

    if not isinstance(data, Mapping):
        raise ConfigError(f"Top-level configuration must be a mapping, got {type(data).__name__}")

    cfg = _from_mapping(Config, data, path="config")
    validate_config(cfg)
    return cfg


def validate_config(cfg: Config) -> None:
    depth = cfg.octree.max_depth
    if depth < 0:
        raise ConfigError("octree.max_depth must be >= 0")
    if depth > _MAX_DEPTH_LIMIT:
        # Cube edges underflow long before this.
        raise ConfigError(f"octree.max_depth must be <= {_MAX_DEPTH_LIMIT}")
    if not (cfg.octree.padding > 0.0):
        raise ConfigError("octree.padding must be > 0")
    if not (cfg.cloud.scale > 0.0):
        raise ConfigError("cloud.scale must be > 0")
    if cfg.render.dpi <= 0:
        raise ConfigError("render.dpi must be > 0")


def to_dict(cfg: Config) -> dict:
    return asdict(cfg)


def _from_mapping(cls: Type[Any], data: Mapping[str, Any], path: str) -> Any:
    names = [f.name for f in fields(cls)]
    unknown = sorted(str(k) for k in data.keys() if k not in names)
    if unknown:
        raise ConfigError(f"Unknown field(s) at {path}: {', '.join(unknown)}")

    mod = sys.modules.get(cls.__module__)
    hints = get_type_hints(cls, globalns=None if mod is None else vars(mod))

    kwargs: dict[str, Any] = {}
    for f in fields(cls):
        if f.name in data:
            kwargs[f.name] = _coerce_value_to_type(data[f.name], hints[f.name], f"{path}.{f.name}")
        elif f.default is MISSING and f.default_factory is MISSING:
            raise ConfigError(f"Missing required field: {path}.{f.name}")
    return cls(**kwargs)


def _coerce_value_to_type(value: Any, typ: Any, path: str) -> Any:
    if is_dataclass_type(typ):
        if value is None:
            return typ()
        if not isinstance(value, Mapping):
            raise ConfigError(f"Expected mapping at {path}, got {type(value).__name__}")
        return _from_mapping(typ, value, path)

    if get_origin(typ) is Literal:
        return _to_literal(value, get_args(typ), path)

    coerce = _SCALARS.get(typ)
    if coerce is None:
        raise ConfigError(f"Unsupported field type at {path}: {typ!r}")
    return coerce(value, path)


def _to_literal(value: Any, choices: tuple, path: str) -> Any:
    if isinstance(value, str):
        s = value.strip()
        for candidate in (s, s.lower(), s.upper()):
            if candidate in choices:
                return candidate
    elif value in choices:
        return value
    raise ConfigError(f"{path}: expected one of {', '.join(map(repr, choices))}, got {value!r}")


def _to_bool(value: Any, path: str) -> bool:
    if isinstance(value, bool):
        return value
    if isinstance(value, str):
        low = value.strip().lower()
        if low in _TRUE_WORDS:
            return True
        if low in _FALSE_WORDS:
            return False
    raise ConfigError(f"Expected bool at {path}, got {value!r}")


def _to_int(value: Any, path: str) -> int:
    if isinstance(value, bool):
        raise ConfigError(f"Expected int at {path}, got bool")
    if isinstance(value, int):
        return value
    if isinstance(value, float) and value.is_integer():
        return int(value)
    if isinstance(value, str):
        try:
            return int(value)
        except ValueError:
            pass
    raise ConfigError(f"Expected int at {path}, got {value!r}")


def _to_float(value: Any, path: str) -> float:
    if isinstance(value, bool):
        raise ConfigError(f"Expected float at {path}, got bool")
    if isinstance(value, (int, float)):
        return float(value)
    if isinstance(value, str):
        # PyYAML reads exponents without a dot ("1e-6") as strings.
        try:
            return float(value)
        except ValueError:
            pass
    raise ConfigError(f"Expected float at {path}, got {value!r}")


_SCALARS: dict[Any, Callable[[Any, str], Any]] = {
    bool: _to_bool,
    int: _to_int,
    float: _to_float,
}


def is_dataclass_type(t: Any) -> bool:
    return isinstance(t, type) and is_dataclass(t)
