"""
Tooling configuration for txcore.

Values are layered, later layers winning:

    defaults  <  TOML/JSON file  <  TXCORE_* environment  <  load(**overrides)

The file is the `config_file` argument or, failing that, $TXCORE_CONFIG.
Each section is a small dataclass and anything out of range raises
ConfigError.

Three sections exist:

    [network]  genesis_id, genesis_hash   stamped on transactions built by the CLI
    [group]    max_size                   limit for group assembly
    [log]      level, format, file        handed to txcore.logging.configure

Encoding and identifier derivation never read configuration.
"""

from __future__ import annotations

import json
import os
import sys
import tomllib
from dataclasses import asdict, dataclass, field
from pathlib import Path
from typing import Any, Dict, List, Optional

from txcore.errors import ConfigError
from txcore.utils.bytes import b64decode, from_hex

DEFAULT_MAX_GROUP_SIZE = 16
DEFAULT_LOG_LEVEL = "INFO"

_LOG_FORMATS = {"", "auto", "json", "text"}
_LOG_LEVELS = {"DEBUG", "INFO", "WARNING", "WARN", "ERROR", "CRITICAL"}


def _expand(p: str | Path) -> Path:
    return Path(p).expanduser().resolve()


def _env_int(name: str) -> int:
    v = os.environ[name]
    try:
        return int(v, 0)
    except ValueError as e:
        raise ConfigError(f"{name} must be int", value=v).with_cause(e)


def _parse_digest_text(text: str) -> bytes:
    """32-byte value from hex (optionally 0x-prefixed) or standard base64."""
    s = text.strip()
    raw: Optional[bytes] = None
    if len(s) in (64, 66):
        try:
            raw = from_hex(s)
        except ValueError:
            raw = None
    if raw is None:
        try:
            raw = b64decode(s)
        except ValueError as e:
            raise ConfigError("genesis_hash must be hex or base64", value=s).with_cause(e)
    if len(raw) != 32:
        raise ConfigError("genesis_hash must decode to 32 bytes", length=len(raw))
    return raw


@dataclass
class NetworkConfig:
    genesis_id: str = ""
    genesis_hash: str = ""  # base64 or hex text; empty = unset

    def genesis_hash_bytes(self) -> Optional[bytes]:
        if not self.genesis_hash:
            return None
        return _parse_digest_text(self.genesis_hash)


@dataclass
class GroupConfig:
    max_size: int = DEFAULT_MAX_GROUP_SIZE

    def validate(self) -> None:
        if isinstance(self.max_size, bool) or not isinstance(self.max_size, int) or self.max_size < 1:
            raise ConfigError("group.max_size must be a positive integer", value=self.max_size)


@dataclass
class LogConfig:
    level: str = DEFAULT_LOG_LEVEL
    format: str = "auto"  # "json" | "text" | "auto"
    file: Optional[str] = None

    def validate(self) -> None:
        if str(self.level).strip().upper() not in _LOG_LEVELS:
            raise ConfigError("unknown log level", value=self.level)
        if str(self.format).strip().lower() not in _LOG_FORMATS:
            raise ConfigError("log.format must be json, text or auto", value=self.format)


@dataclass
class Config:
    network: NetworkConfig = field(default_factory=NetworkConfig)
    group: GroupConfig = field(default_factory=GroupConfig)
    log: LogConfig = field(default_factory=LogConfig)

    def header_defaults(self) -> Dict[str, Any]:
        """Header fields every new transaction inherits from the network."""
        out: Dict[str, Any] = {}
        if self.network.genesis_id:
            out["genesis_id"] = self.network.genesis_id
        gh = self.network.genesis_hash_bytes()
        if gh is not None:
            out["genesis_hash"] = gh
        return out

    def to_dict(self) -> Dict[str, Any]:
        return asdict(self)


def _load_file(path: Path) -> Dict[str, Any]:
    if not path.exists():
        raise ConfigError("config file not found", path=str(path))
    suffix = path.suffix.lower()
    try:
        with path.open("rb") as f:
            if suffix in {".toml", ".tml"}:
                data = tomllib.load(f)
            elif suffix == ".json":
                data = json.load(f)
            else:
                raise ConfigError("unsupported config format; use .toml or .json", path=str(path))
    except (tomllib.TOMLDecodeError, json.JSONDecodeError, UnicodeDecodeError) as e:
        raise ConfigError("config file is not valid", path=str(path)).with_cause(e)
    if not isinstance(data, dict):
        raise ConfigError("config file must hold a table/object", path=str(path))
    return data


def _merge_dict(a: Dict[str, Any], b: Dict[str, Any]) -> Dict[str, Any]:
    """Recursive merge; `b` wins."""
    out = dict(a)
    for k, v in b.items():
        if isinstance(v, dict) and isinstance(out.get(k), dict):
            out[k] = _merge_dict(out[k], v)  # type: ignore[arg-type]
        else:
            out[k] = v
    return out


def _env_layer() -> Dict[str, Any]:
    env: Dict[str, Dict[str, Any]] = {"network": {}, "group": {}, "log": {}}
    if "TXCORE_GENESIS_ID" in os.environ:
        env["network"]["genesis_id"] = os.environ["TXCORE_GENESIS_ID"].strip()
    if "TXCORE_GENESIS_HASH" in os.environ:
        env["network"]["genesis_hash"] = os.environ["TXCORE_GENESIS_HASH"].strip()
    if "TXCORE_GROUP_MAX_SIZE" in os.environ:
        env["group"]["max_size"] = _env_int("TXCORE_GROUP_MAX_SIZE")
    if "TXCORE_LOG_LEVEL" in os.environ:
        env["log"]["level"] = os.environ["TXCORE_LOG_LEVEL"].strip()
    if "TXCORE_LOG_FORMAT" in os.environ:
        env["log"]["format"] = os.environ["TXCORE_LOG_FORMAT"].strip()
    if "TXCORE_LOG_FILE" in os.environ:
        env["log"]["file"] = os.environ["TXCORE_LOG_FILE"].strip() or None
    return {k: v for k, v in env.items() if v}


def _section(base: Dict[str, Any], name: str, cls: type) -> Any:
    raw = base.get(name) or {}
    if not isinstance(raw, dict):
        raise ConfigError(f"[{name}] must be a table", value=raw)
    try:
        return cls(**raw)
    except TypeError as e:
        raise ConfigError(f"unknown key in [{name}]", keys=sorted(raw)).with_cause(e)


def load(config_file: Optional[str | Path] = None, **overrides: Any) -> Config:
    """
    Build a validated Config from the layers described in the module docstring.

    `overrides` are section dicts, e.g. ``load(group={"max_size": 4})``.
    """
    base: Dict[str, Any] = Config().to_dict()

    config_file = config_file or os.environ.get("TXCORE_CONFIG") or None
    if config_file:
        base = _merge_dict(base, _load_file(_expand(config_file)))

    base = _merge_dict(base, _env_layer())

    if overrides:
        base = _merge_dict(base, overrides)

    unknown = sorted(set(base) - {"network", "group", "log"})
    if unknown:
        raise ConfigError("unknown config sections", sections=unknown)

    cfg = Config(
        network=_section(base, "network", NetworkConfig),
        group=_section(base, "group", GroupConfig),
        log=_section(base, "log", LogConfig),
    )
    _validate_config(cfg)
    return cfg


def _validate_config(cfg: Config) -> None:
    if not isinstance(cfg.network.genesis_id, str):
        raise ConfigError("network.genesis_id must be a string", value=cfg.network.genesis_id)
    cfg.network.genesis_hash_bytes()
    cfg.group.validate()
    cfg.log.validate()


def main(argv: List[str] | None = None) -> int:
    """
    CLI usage:

        python -m txcore.config                      # load defaults/env; print JSON
        python -m txcore.config path/to/config.toml  # load file; print JSON
    """
    argv = list(argv if argv is not None else sys.argv[1:])
    path = argv[0] if argv else None
    try:
        cfg = load(path)
    except ConfigError as e:
        print(f"config error: {e}", file=sys.stderr)
        return 2
    print(json.dumps(cfg.to_dict(), indent=2, sort_keys=True))
    return 0


if __name__ == "__main__":
    raise SystemExit(main())
