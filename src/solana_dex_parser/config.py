"""
Parser configuration.

``ParseConfig`` is the option set the orchestrator consumes. It can be built
in code, from a dict, or from a YAML file; ``${VAR}`` references in the file
are resolved from the environment (a ``.env`` file is loaded first) and
``DEX_PARSER_*`` variables override individual options.
"""

import os
import re
from dataclasses import dataclass, field, replace
from pathlib import Path
from typing import Any, Mapping, Optional

import yaml
from dotenv import load_dotenv
from solders.pubkey import Pubkey

from solana_dex_parser.interfaces.core import DexFamily
from solana_dex_parser.utils.logger import get_logger

logger = get_logger(__name__)

ENV_PREFIX = "DEX_PARSER_"
_ENV_REF = re.compile(r"\$\{([^}]+)\}")
_TRUE = {"1", "true", "yes", "on"}
_FALSE = {"0", "false", "no", "off"}

ALL_FAMILIES: frozenset[DexFamily] = frozenset(f for f in DexFamily if f is not DexFamily.UNKNOWN)


def _parse_bool(value: Any, name: str) -> bool:
    if isinstance(value, bool):
        return value
    text = str(value).strip().lower()
    if text in _TRUE:
        return True
    if text in _FALSE:
        return False
    raise ValueError(f"{name}: expected a boolean, got {value!r}")


def _parse_pubkeys(values: Any, name: str) -> Optional[frozenset[Pubkey]]:
    if values is None:
        return None
    if isinstance(values, str):
        values = [v for v in values.split(",") if v.strip()]
    try:
        return frozenset(
            v if isinstance(v, Pubkey) else Pubkey.from_string(str(v).strip()) for v in values
        )
    except ValueError as e:
        raise ValueError(f"{name}: invalid program id ({e})") from e


def _parse_families(values: Any) -> frozenset[DexFamily]:
    if isinstance(values, Mapping):
        # per-family switch map: {raydium: false, ...}
        enabled = set(ALL_FAMILIES)
        for name, on in values.items():
            family = DexFamily.from_name(str(name))
            if _parse_bool(on, f"families.{name}"):
                enabled.add(family)
            else:
                enabled.discard(family)
        return frozenset(enabled)
    if isinstance(values, str):
        values = [v for v in values.split(",") if v.strip()]
    return frozenset(
        v if isinstance(v, DexFamily) else DexFamily.from_name(str(v)) for v in values
    )


@dataclass(frozen=True)
class ParseConfig:
    """Options recognized by the parser."""

    try_unknown_dex: bool = True            # run the fallback on unmatched programs
    aggregate_trades: bool = True           # collapse multi-leg routes into one trade
    enabled_families: frozenset[DexFamily] = field(default_factory=lambda: ALL_FAMILIES)
    program_ids: Optional[frozenset[Pubkey]] = None         # only parse these programs
    ignore_program_ids: Optional[frozenset[Pubkey]] = None  # never parse these programs

    def is_family_enabled(self, family: str) -> bool:
        try:
            return DexFamily(family) in self.enabled_families
        except ValueError:
            return False

    def is_program_allowed(self, program_id: Pubkey) -> bool:
        if self.program_ids is not None and program_id not in self.program_ids:
            return False
        if self.ignore_program_ids is not None and program_id in self.ignore_program_ids:
            return False
        return True

    def with_families(self, *families: DexFamily, enabled: bool = True) -> "ParseConfig":
        current = set(self.enabled_families)
        if enabled:
            current.update(families)
        else:
            current.difference_update(families)
        return replace(self, enabled_families=frozenset(current))

    @classmethod
    def from_dict(cls, data: Optional[Mapping[str, Any]]) -> "ParseConfig":
        """Build a config from plain values (YAML / JSON shaped)."""
        data = dict(data or {})
        unknown = set(data) - {
            "try_unknown_dex", "aggregate_trades", "families", "enabled_families",
            "program_ids", "ignore_program_ids",
        }
        if unknown:
            raise ValueError(f"Unknown config options: {', '.join(sorted(unknown))}")

        kwargs: dict[str, Any] = {}
        for name in ("try_unknown_dex", "aggregate_trades"):
            if name in data:
                kwargs[name] = _parse_bool(data[name], name)
        families = data.get("families", data.get("enabled_families"))
        if families is not None:
            kwargs["enabled_families"] = _parse_families(families)
        for name in ("program_ids", "ignore_program_ids"):
            if data.get(name) is not None:
                kwargs[name] = _parse_pubkeys(data[name], name)
        return cls(**kwargs)


def _resolve_env_refs(raw: str) -> str:
    def substitute(match: re.Match) -> str:
        name = match.group(1)
        value = os.environ.get(name)
        if value is None:
            raise ValueError(f"${{{name}}} is not set in the environment")
        return value

    return _ENV_REF.sub(substitute, raw)


def _env_overrides() -> dict[str, Any]:
    overrides: dict[str, Any] = {}
    for option in ("try_unknown_dex", "aggregate_trades", "families",
                   "program_ids", "ignore_program_ids"):
        value = os.environ.get(ENV_PREFIX + option.upper())
        if value is not None and value.strip():
            overrides[option] = value
    return overrides


def load_config(path: Optional[str | Path] = None, use_env: bool = True) -> ParseConfig:
    """Load a ``ParseConfig`` from YAML, applying ``DEX_PARSER_*`` overrides.

    The YAML document may hold the options at the top level or under a
    ``parser:`` key.
    """
    if use_env:
        load_dotenv()

    data: dict[str, Any] = {}
    if path is not None:
        config_path = Path(path)
        raw = config_path.read_text(encoding="utf-8")
        loaded = yaml.safe_load(_resolve_env_refs(raw)) or {}
        if not isinstance(loaded, Mapping):
            raise ValueError(f"{config_path}: expected a mapping at the top level")
        data = dict(loaded.get("parser", loaded))
        logger.info(f"[CONFIG] Loaded parser config from {config_path}")

    if use_env:
        overrides = _env_overrides()
        if overrides:
            logger.info(f"[CONFIG] Environment overrides: {', '.join(sorted(overrides))}")
        data.update(overrides)
    return ParseConfig.from_dict(data)
