"""
Configuration loading and search root resolution.

The configuration file is a YAML document (by default
`~/.kube/switch-config.yaml`):

    vaultAPIAddress: https://vault.example.com:8200
    kubeconfigName: "*.yaml"
    kubeconfigPaths:
      - path: ~/.kube/clusters
        store: filesystem
      - path: secret/kubeconfigs
        store: vault
    hooks:
      - name: refresh
        type: Executable
        path: /usr/local/bin/refresh
        arguments: ["--all"]
        interval: 24h

Everything is resolved once into an immutable `SwitchConfig` that the CLI
passes into the core. Vault credentials are resolved separately, and only when
a Vault search root is actually registered.
"""

from dataclasses import dataclass
import os
from pathlib import Path
import re
from typing import Any, Mapping

import yaml

from constants import (
    DEFAULT_KUBECONFIG_NAME,
    DEFAULT_KUBECONFIG_PATH,
    VAULT_ADDR_ENV,
    VAULT_TOKEN_ENV,
    VAULT_TOKEN_FILE_NAME,
)
from core.exceptions import ConfigurationError, FileReadError
from core.file_io import FileReader, FilesystemFileReader
from core.models import HookDefinition, HookType, PathSpec, StoreKind, SwitchConfig

_INTERVAL_PART = re.compile(r"(\d+)([smhd])")
_INTERVAL_UNITS = {"s": 1, "m": 60, "h": 3600, "d": 86400}


@dataclass(frozen=True)
class VaultCredentials:
    address: str
    token: str


def load_config_file(
    config_path: Path, reader: FileReader | None = None
) -> dict[str, Any]:
    """
    Read the raw configuration document.

    A missing file is not an error: it yields an empty mapping so that the
    tool works out of the box against `~/.kube/config`.

    Raises:
        ConfigurationError: If the file cannot be read, is not valid YAML, or
            its top level is not a mapping.
    """
    if not config_path.exists():
        return {}

    reader = reader if reader is not None else FilesystemFileReader()
    try:
        content = reader.read_text(config_path)
        data = yaml.safe_load(content)
    except FileReadError as e:
        raise ConfigurationError(
            message=f"Failed to read config file '{config_path}'",
            original_exception=e,
        ) from e
    except yaml.YAMLError as e:
        raise ConfigurationError(
            message=f"Config file '{config_path}' is not valid YAML",
            original_exception=e,
        ) from e

    if data is None:
        return {}
    if not isinstance(data, dict):
        raise ConfigurationError(
            f"Config file '{config_path}' must contain a mapping at the top level"
        )
    return data


def parse_store_kind(value: Any) -> StoreKind:
    try:
        return StoreKind(str(value).strip().lower())
    except ValueError as e:
        raise ConfigurationError(
            message=f"Unknown store {value!r}. Available stores: "
            + ", ".join(list(StoreKind)),
            original_exception=e,
        ) from e


def parse_interval(value: Any) -> int:
    """
    Convert a hook interval into seconds.

    Accepts a non-negative integer number of seconds or a duration string made
    of `<n>s`, `<n>m`, `<n>h` and `<n>d` parts, e.g. `90s`, `24h` or `1h30m`.

    Raises:
        ConfigurationError: If the value is negative or cannot be parsed.
    """
    if value is None:
        return 0
    if isinstance(value, bool):
        raise ConfigurationError(f"Invalid hook interval: {value!r}")
    if isinstance(value, int):
        if value < 0:
            raise ConfigurationError(f"Hook interval must not be negative: {value}")
        return value

    text = str(value).strip().replace(" ", "")
    if text.isdigit():
        return int(text)
    parts = _INTERVAL_PART.findall(text)
    if not parts or "".join(n + u for n, u in parts) != text:
        raise ConfigurationError(f"Invalid hook interval: {value!r}")
    return sum(int(n) * _INTERVAL_UNITS[u] for n, u in parts)


def _parse_hook(entry: Any) -> HookDefinition:
    if not isinstance(entry, dict) or not entry.get("name"):
        raise ConfigurationError(f"Every hook needs a name, got: {entry!r}")

    name = str(entry["name"])
    raw_type = entry.get("type", HookType.EXECUTABLE)
    try:
        hook_type = HookType(raw_type)
    except ValueError as e:
        raise ConfigurationError(
            message=f"Hook '{name}' has unknown type {raw_type!r}",
            original_exception=e,
        ) from e

    interval = entry.get("interval")
    if interval is None and isinstance(entry.get("execution"), dict):
        interval = entry["execution"].get("interval")

    arguments = entry.get("arguments") or []
    if not isinstance(arguments, list):
        raise ConfigurationError(f"Hook '{name}' arguments must be a list")

    hook = HookDefinition(
        name=name,
        type=hook_type,
        interval_seconds=parse_interval(interval),
        path=entry.get("path"),
        arguments=tuple(str(a) for a in arguments),
        command=entry.get("command"),
    )
    if hook.type == HookType.EXECUTABLE and not hook.path:
        raise ConfigurationError(f"Executable hook '{name}' needs a path")
    if hook.type == HookType.INLINE_COMMAND and not hook.command:
        raise ConfigurationError(f"Inline command hook '{name}' needs a command")
    return hook


def normalize_location(location: str, store: StoreKind) -> str:
    """
    Normalize a search root location for its store.

    Filesystem locations get `~` and environment variables expanded and are
    made absolute. Vault prefixes lose surrounding slashes.
    """
    if store == StoreKind.FILESYSTEM:
        expanded = os.path.expandvars(os.path.expanduser(location))
        return str(Path(expanded).absolute())
    return location.strip().strip("/")


def resolve_path_specs(
    entries: Any,
    name_filter: str,
    override_path: str | None = None,
    override_store: StoreKind | str = StoreKind.FILESYSTEM,
) -> tuple[PathSpec, ...]:
    """
    Turn configured `kubeconfigPaths` entries plus an optional command-line
    override into normalized search roots.

    When neither the configuration nor the command line names a search root,
    `~/.kube/config` is searched.

    Raises:
        ConfigurationError: If an entry is malformed or names an unknown store.
    """
    if entries is None:
        entries = []
    if not isinstance(entries, list):
        raise ConfigurationError("'kubeconfigPaths' must be a list")

    specs: list[PathSpec] = []
    for entry in entries:
        if not isinstance(entry, dict) or not entry.get("path"):
            raise ConfigurationError(
                f"Every entry in 'kubeconfigPaths' needs a path, got: {entry!r}"
            )
        store = parse_store_kind(entry.get("store", StoreKind.FILESYSTEM))
        specs.append(
            PathSpec(
                location=normalize_location(str(entry["path"]), store),
                store=store,
                name_filter=name_filter,
            )
        )

    if override_path:
        store = parse_store_kind(override_store)
        specs.append(
            PathSpec(normalize_location(override_path, store), store, name_filter)
        )

    if not specs:
        specs.append(
            PathSpec(str(DEFAULT_KUBECONFIG_PATH), StoreKind.FILESYSTEM, name_filter)
        )

    return tuple(specs)


def build_switch_config(
    config_path: Path,
    kubeconfig_path: str | None = None,
    store: StoreKind | str = StoreKind.FILESYSTEM,
    kubeconfig_name: str | None = None,
    reader: FileReader | None = None,
) -> SwitchConfig:
    """
    Load the configuration file and merge the command-line overrides into an
    immutable `SwitchConfig`.

    The name filter is taken from the command line, then `kubeconfigName` in
    the file, then the default `config`.

    Raises:
        ConfigurationError: If the file or any entry in it is invalid.
    """
    raw = load_config_file(config_path, reader)

    name_filter = kubeconfig_name or raw.get("kubeconfigName") or DEFAULT_KUBECONFIG_NAME

    hooks_raw = raw.get("hooks") or []
    if not isinstance(hooks_raw, list):
        raise ConfigurationError("'hooks' must be a list")
    hooks = tuple(_parse_hook(h) for h in hooks_raw)
    names = [h.name for h in hooks]
    duplicates = sorted({n for n in names if names.count(n) > 1})
    if duplicates:
        raise ConfigurationError(f"Duplicate hook names: {', '.join(duplicates)}")

    vault_address = raw.get("vaultAPIAddress")

    return SwitchConfig(
        path_specs=resolve_path_specs(
            raw.get("kubeconfigPaths"), str(name_filter), kubeconfig_path, store
        ),
        vault_api_address=str(vault_address) if vault_address else None,
        hooks=hooks,
    )


def resolve_vault_credentials(
    config_address: str | None,
    address_flag: str | None = None,
    token_flag: str | None = None,
    environ: Mapping[str, str] | None = None,
    home: Path | None = None,
    reader: FileReader | None = None,
) -> VaultCredentials:
    """
    Resolve the Vault address and token.

    Both values follow the precedence `flag > environment variable > file`:
    the address falls back from `--vault-api-address` to `VAULT_ADDR` to
    `vaultAPIAddress` in the configuration file, the token from
    `--vault-token` to `VAULT_TOKEN` to `~/.vault-token`.

    Raises:
        ConfigurationError: If no address or no token can be found.
    """
    environ = environ if environ is not None else os.environ
    home = home if home is not None else Path.home()
    reader = reader if reader is not None else FilesystemFileReader()

    address = address_flag or environ.get(VAULT_ADDR_ENV) or config_address
    if not address:
        raise ConfigurationError(
            "When using the vault store, the Vault API address has to be provided "
            f'via "--vault-api-address", the "{VAULT_ADDR_ENV}" environment variable '
            'or "vaultAPIAddress" in the config file'
        )

    token = token_flag or environ.get(VAULT_TOKEN_ENV)
    if not token:
        token_file = home / VAULT_TOKEN_FILE_NAME
        if token_file.is_file():
            try:
                token = reader.read_text(token_file).strip()
            except FileReadError as e:
                raise ConfigurationError(
                    message=f"Failed to read Vault token file '{token_file}'",
                    original_exception=e,
                ) from e
    if not token:
        raise ConfigurationError(
            "When using the vault store, a Vault token must be provided via "
            f'"--vault-token", the "{VAULT_TOKEN_ENV}" environment variable '
            f'or the token file "~/{VAULT_TOKEN_FILE_NAME}"'
        )

    return VaultCredentials(address=address.rstrip("/"), token=token)
