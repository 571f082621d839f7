"""Configuration loader for notelink.toml."""

from dataclasses import dataclass, field
from pathlib import Path
from typing import Any

try:
    import tomllib
except ImportError:
    import tomli as tomllib  # type: ignore

from .core.errors import ConfigError
from .core.model import DisambiguationPolicy

CONFIG_NAME = "notelink.toml"


@dataclass
class VaultConfig:
    """One named vault directory."""
    name: str
    path: Path


@dataclass
class RefsConfig:
    """Note reference expansion settings."""
    max_depth: int = 3
    normalize_legacy: bool = True


@dataclass
class LinksConfig:
    """Link resolution settings."""
    disambiguation: DisambiguationPolicy = DisambiguationPolicy.SAME_VAULT


@dataclass
class NotelinkConfig:
    """Complete notelink configuration."""
    vaults: list[VaultConfig]
    refs: RefsConfig = field(default_factory=RefsConfig)
    links: LinksConfig = field(default_factory=LinksConfig)
    source: Path | None = None


def _parse_vaults(data: Any, base: Path) -> list[VaultConfig]:
    if not isinstance(data, list):
        raise ConfigError("'vaults' must be an array of tables")
    vaults = []
    seen = set()
    for entry in data:
        if not isinstance(entry, dict) or "name" not in entry:
            raise ConfigError("every vault needs a 'name'", {"vault": entry})
        name = str(entry["name"])
        if name in seen:
            raise ConfigError(f"duplicate vault name: {name}", {"vault": name})
        seen.add(name)
        path = Path(entry.get("path", name))
        if not path.is_absolute():
            path = base / path
        vaults.append(VaultConfig(name=name, path=path))
    return vaults


def _table(data: dict[str, Any], name: str) -> dict[str, Any]:
    value = data.get(name, {})
    if not isinstance(value, dict):
        raise ConfigError(f"'{name}' must be a table")
    return value


def _parse_refs(data: dict[str, Any]) -> RefsConfig:
    max_depth = data.get("max_depth", 3)
    if isinstance(max_depth, bool) or not isinstance(max_depth, int) or max_depth < 0:
        raise ConfigError(
            "refs.max_depth must be a non-negative integer", {"max_depth": max_depth}
        )
    normalize = data.get("normalize_legacy", True)
    if not isinstance(normalize, bool):
        raise ConfigError("refs.normalize_legacy must be true or false")
    return RefsConfig(max_depth=max_depth, normalize_legacy=normalize)


def _parse_links(data: dict[str, Any]) -> LinksConfig:
    raw = data.get("disambiguation", DisambiguationPolicy.SAME_VAULT.value)
    try:
        policy = DisambiguationPolicy(raw)
    except ValueError:
        allowed = ", ".join(p.value for p in DisambiguationPolicy)
        raise ConfigError(
            f"links.disambiguation must be one of: {allowed}", {"value": raw}
        ) from None
    return LinksConfig(disambiguation=policy)


def load_config(
    config_path: Path | None = None, workspace_path: Path | None = None
) -> NotelinkConfig:
    """
    Load configuration from notelink.toml.

    Search order:
    1. config_path (if provided)
    2. cwd/notelink.toml
    3. workspace_path/notelink.toml

    Relative vault paths are taken from the workspace, or from the directory
    holding the config file when no workspace is given. Without a
    ``[[vaults]]`` table the workspace itself is the only vault, named after
    its directory.

    Args:
        config_path: Explicit path to config file
        workspace_path: Workspace root for fallback search

    Returns:
        NotelinkConfig with resolved settings

    Raises:
        ConfigError: if the file is not valid TOML or holds invalid values
    """
    toml_data: dict[str, Any] = {}
    source = None

    search_paths = []
    if config_path:
        search_paths.append(config_path)
    search_paths.append(Path.cwd() / CONFIG_NAME)
    if workspace_path:
        search_paths.append(workspace_path / CONFIG_NAME)

    for path in search_paths:
        if path.exists():
            try:
                with open(path, "rb") as f:
                    toml_data = tomllib.load(f)
            except tomllib.TOMLDecodeError as exc:
                raise ConfigError(f"{path}: {exc}", {"path": str(path)}) from exc
            source = path
            break

    if workspace_path is not None:
        base = workspace_path
    elif source is not None:
        base = source.parent
    else:
        base = Path.cwd()

    if "vaults" in toml_data:
        vaults = _parse_vaults(toml_data["vaults"], base)
    else:
        vaults = [VaultConfig(name=base.resolve().name, path=base)]

    return NotelinkConfig(
        vaults=vaults,
        refs=_parse_refs(_table(toml_data, "refs")),
        links=_parse_links(_table(toml_data, "links")),
        source=source,
    )
