"""
Configuration loading, discovery and validation for remix.

Public API:
    load_config(path=None) -> dict
    validate_config(cfg) -> dict
    discover_config_path(explicit, cwd=None, env=None) -> (path | None, source)

- validate_config raises ConfigError listing every problem (field paths +
  constraints), one per line, in a stable order.
- It returns a **new** normalized dict; the input is not mutated.
"""
from __future__ import annotations

import os
from pathlib import Path
from typing import Any, Dict, List, Mapping, Optional, Tuple

import yaml

from ..errors import ConfigError

__all__ = [
    "CONFIG_VERSION",
    "DEFAULTS",
    "discover_config_path",
    "load_config",
    "validate_config",
]

CONFIG_VERSION = "v1"

# Relative default searched under the current working directory
DEFAULT_REL = Path("configs") / "config.yaml"
# XDG subpath under $XDG_CONFIG_HOME (or ~/.config if unset)
XDG_SUBPATH = Path("remix") / "config.yaml"


# ------------------------------
# Defaults
# ------------------------------

DEFAULTS: Dict[str, Any] = {
    "version": CONFIG_VERSION,
    "diff": {
        "modify_fields": "both",   # both | changed
    },
    "codec": {
        "strict": True,            # False: skip malformed deltas with a warning
    },
    "apply": {
        "report_skipped": True,    # log skipped (stale) deltas at WARNING
    },
    "logs": {
        "enabled": False,          # JSONL lifecycle events (remix.jsonl)
        "dir": None,               # None -> REMIX_LOG_DIR or ./.logs
    },
}

ALLOWED_SECTIONS: Dict[str, set] = {
    "diff": {"modify_fields"},
    "codec": {"strict"},
    "apply": {"report_skipped"},
    "logs": {"enabled", "dir"},
}
ALLOWED_TOP = {"version", *ALLOWED_SECTIONS}
MODIFY_FIELDS = {"both", "changed"}


# ------------------------------
# Utilities
# ------------------------------

def _lev(a: str, b: str) -> int:
    """Tiny Levenshtein distance for did-you-mean suggestions."""
    dp = list(range(len(b) + 1))
    for i, ca in enumerate(a, 1):
        prev = dp[0]
        dp[0] = i
        for j, cb in enumerate(b, 1):
            prev, dp[j] = dp[j], min(dp[j] + 1, dp[j - 1] + 1, prev + (0 if ca == cb else 1))
    return dp[-1]


def _suggest_key(bad: str, allowed: set) -> Optional[str]:
    """Closest allowed key within distance <= 2, else None."""
    best_key, best_dist = None, 99
    for k in sorted(allowed):
        d = _lev(bad, k)
        if d < best_dist:
            best_key, best_dist = k, d
    return best_key if best_dist <= 2 else None


def _err(errors: List[str], path: str, msg: str) -> None:
    errors.append(f"{path} {msg}")


def _unknown(errors: List[str], path: str, key: str, allowed: set) -> None:
    sug = _suggest_key(key, allowed)
    hint = f" (did you mean '{sug}')" if sug else ""
    _err(errors, f"{path}{key}", f"unknown key{hint}")


def _coerce_bool(v: Any) -> Optional[bool]:
    if isinstance(v, bool):
        return v
    if isinstance(v, str):
        s = v.strip().lower()
        if s in {"1", "true", "yes", "on"}:
            return True
        if s in {"0", "false", "no", "off"}:
            return False
    return None


# ------------------------------
# Validation
# ------------------------------

def validate_config(cfg: Mapping[str, Any] | None) -> Dict[str, Any]:
    """Validate and normalize `cfg` against DEFAULTS; raise ConfigError on errors."""
    errors: List[str] = []
    src = dict(cfg or {})

    for k in src:
        if k not in ALLOWED_TOP:
            _unknown(errors, "", str(k), ALLOWED_TOP)

    version = src.get("version", CONFIG_VERSION)
    if version != CONFIG_VERSION:
        _err(errors, "version", f"must be '{CONFIG_VERSION}', got {version!r}")

    out: Dict[str, Any] = {"version": CONFIG_VERSION}
    for section, allowed in ALLOWED_SECTIONS.items():
        merged = dict(DEFAULTS[section])
        raw = src.get(section)
        if raw is None:
            raw = {}
        if not isinstance(raw, Mapping):
            _err(errors, section, "must be a mapping")
            raw = {}
        for k, v in raw.items():
            if k not in allowed:
                _unknown(errors, f"{section}.", str(k), allowed)
                continue
            merged[k] = v
        out[section] = merged

    mf = out["diff"]["modify_fields"]
    if mf not in MODIFY_FIELDS:
        _err(errors, "diff.modify_fields", f"must be one of {sorted(MODIFY_FIELDS)}, got {mf!r}")

    for path in (("codec", "strict"), ("apply", "report_skipped"), ("logs", "enabled")):
        b = _coerce_bool(out[path[0]][path[1]])
        if b is None:
            _err(errors, ".".join(path), f"must be a boolean, got {out[path[0]][path[1]]!r}")
        else:
            out[path[0]][path[1]] = b

    log_dir = out["logs"]["dir"]
    if log_dir is not None and not isinstance(log_dir, str):
        _err(errors, "logs.dir", "must be a string path or null")

    if errors:
        raise ConfigError("\n".join(errors))
    return out


# ------------------------------
# Env overrides
# ------------------------------

def _apply_env_overrides(cfg: Dict[str, Any], env: Mapping[str, str]) -> Dict[str, Any]:
    """REMIX_DIFF_MODIFY_FIELDS=both|changed -> diff.modify_fields."""
    mf = env.get("REMIX_DIFF_MODIFY_FIELDS")
    if mf:
        diff = dict(cfg.get("diff") or {})
        diff["modify_fields"] = mf.strip().lower()
        cfg = dict(cfg)
        cfg["diff"] = diff
    return cfg


# ------------------------------
# Discovery + loader
# ------------------------------

def _coerce_candidate(p: Path) -> Optional[Path]:
    """Resolve a file, or a directory holding config.yaml; None if absent."""
    if p.is_dir():
        p = p / "config.yaml"
    if p.is_file():
        return p.resolve()
    return None


def discover_config_path(
    explicit: Optional[str],
    cwd: Optional[Path] = None,
    env: Optional[Mapping[str, str]] = None,
) -> Tuple[Optional[Path], str]:
    """Deterministic config discovery.

    Order:
      0) explicit path (--config)
      1) $REMIX_CONFIG (file or dir -> config.yaml)
      2) CWD: ./configs/config.yaml
      3) XDG: ${XDG_CONFIG_HOME:-$HOME/.config}/remix/config.yaml

    Returns (selected_path or None, source_tag). Source tags: 'explicit',
    'explicit-missing', 'env:REMIX_CONFIG', 'cwd:configs/config.yaml', 'xdg', 'none'.
    """
    cwd = cwd or Path.cwd()
    env = dict(os.environ if env is None else env)

    if explicit:
        expanded = Path(os.path.expandvars(explicit)).expanduser()
        sel = _coerce_candidate(expanded)
        if sel is not None:
            return sel, "explicit"
        return expanded, "explicit-missing"

    cenv = env.get("REMIX_CONFIG")
    if cenv:
        sel = _coerce_candidate(Path(os.path.expandvars(cenv)).expanduser())
        if sel is not None:
            return sel, "env:REMIX_CONFIG"

    sel = _coerce_candidate(cwd / DEFAULT_REL)
    if sel is not None:
        return sel, "cwd:configs/config.yaml"

    xdg_base = env.get("XDG_CONFIG_HOME") or str(Path.home() / ".config")
    sel = _coerce_candidate(Path(xdg_base).expanduser() / XDG_SUBPATH)
    if sel is not None:
        return sel, "xdg"

    return None, "none"


def load_config(path: str | Path | None = None, *, env: Optional[Mapping[str, str]] = None) -> Dict[str, Any]:
    """
    Load a YAML config and return it validated and normalized.
    No path => DEFAULTS (plus env overrides). A missing explicit file or a
    YAML syntax error raises ConfigError.
    """
    env = os.environ if env is None else env
    data: Dict[str, Any] = {}
    if path is not None:
        p = Path(path)
        try:
            with open(p, "r", encoding="utf-8") as f:
                loaded = yaml.safe_load(f)
        except FileNotFoundError as e:
            raise ConfigError(f"config file not found: {p}") from e
        except yaml.YAMLError as e:
            raise ConfigError(f"failed to parse YAML in {p}: {e}") from e
        if loaded is None:
            loaded = {}
        if not isinstance(loaded, dict):
            raise ConfigError(f"{p}: top-level YAML must be a mapping")
        data = loaded
    return validate_config(_apply_env_overrides(data, env))
