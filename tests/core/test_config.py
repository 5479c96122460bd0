"""
Tests for configuration loading.

Tests cover:
- load_config_file: missing, empty, invalid files
- parse_interval: seconds and duration strings
- resolve_path_specs / build_switch_config: search roots, name filter, hooks
- resolve_vault_credentials: address and token precedence
"""

from pathlib import Path

import pytest

from core.config import (
    build_switch_config,
    load_config_file,
    parse_interval,
    parse_store_kind,
    resolve_path_specs,
    resolve_vault_credentials,
)
from core.exceptions import ConfigurationError
from core.file_io import MockFileReader
from core.models import HookType, PathSpec, StoreKind

CONFIG = """\
vaultAPIAddress: http://vault.example:8200
kubeconfigName: "*.yaml"
kubeconfigPaths:
  - path: /clusters
    store: filesystem
  - path: /secret/kube/
    store: vault
hooks:
  - name: refresh
    type: Executable
    path: /usr/local/bin/refresh
    arguments: ["--all"]
    interval: 24h
  - name: sync
    type: InlineCommand
    command: echo synced
    execution:
      interval: 30m
"""


@pytest.fixture
def config_file(tmp_path):
    def _factory(content: str) -> Path:
        path = tmp_path / "switch-config.yaml"
        path.write_text(content)
        return path

    return _factory


# ============================================================================
# Tests for load_config_file
# ============================================================================


@pytest.mark.unit
def test_load_config_file_missing_is_empty(tmp_path):
    assert load_config_file(tmp_path / "absent.yaml") == {}


@pytest.mark.unit
def test_load_config_file_empty_document(config_file):
    assert load_config_file(config_file("")) == {}


@pytest.mark.unit
def test_load_config_file_invalid_yaml(config_file):
    with pytest.raises(ConfigurationError, match="not valid YAML"):
        load_config_file(config_file("kubeconfigPaths: [unclosed"))


@pytest.mark.unit
def test_load_config_file_top_level_list(config_file):
    with pytest.raises(ConfigurationError, match="mapping"):
        load_config_file(config_file("- a\n- b\n"))


@pytest.mark.unit
@pytest.mark.mock
def test_load_config_file_uses_injected_reader(config_file):
    reader = MockFileReader(return_value=b"kubeconfigName: kc\n")

    assert load_config_file(config_file("ignored"), reader) == {"kubeconfigName": "kc"}


# ============================================================================
# Tests for parse_interval / parse_store_kind
# ============================================================================


@pytest.mark.unit
@pytest.mark.parametrize(
    "value, expected",
    [(None, 0), (90, 90), ("120", 120), ("90s", 90), ("24h", 86400), ("1h30m", 5400), ("2d", 172800)],
)
def test_parse_interval_valid(value, expected):
    assert parse_interval(value) == expected


@pytest.mark.unit
@pytest.mark.parametrize("value", [-1, "soon", "10x", "h1", True])
def test_parse_interval_invalid(value):
    with pytest.raises(ConfigurationError):
        parse_interval(value)


@pytest.mark.unit
def test_parse_store_kind_is_case_insensitive():
    assert parse_store_kind("Vault") == StoreKind.VAULT


@pytest.mark.unit
def test_parse_store_kind_unknown():
    with pytest.raises(ConfigurationError, match="Unknown store 's3'"):
        parse_store_kind("s3")


# ============================================================================
# Tests for resolve_path_specs
# ============================================================================


@pytest.mark.unit
def test_resolve_path_specs_defaults_to_kube_config():
    specs = resolve_path_specs(None, "config")

    assert len(specs) == 1
    assert specs[0].store == StoreKind.FILESYSTEM
    assert specs[0].location.endswith(str(Path(".kube") / "config"))


@pytest.mark.unit
def test_resolve_path_specs_appends_override_last():
    specs = resolve_path_specs(
        [{"path": "/a"}], "config", override_path="kv/extra/", override_store="vault"
    )

    assert specs == (
        PathSpec("/a", StoreKind.FILESYSTEM, "config"),
        PathSpec("kv/extra", StoreKind.VAULT, "config"),
    )


@pytest.mark.unit
def test_resolve_path_specs_expands_home(monkeypatch, tmp_path):
    monkeypatch.setenv("HOME", str(tmp_path))

    specs = resolve_path_specs([{"path": "~/clusters"}], "config")

    assert specs[0].location == str(tmp_path / "clusters")


@pytest.mark.unit
@pytest.mark.parametrize("entries", ["not-a-list", [{"store": "vault"}], ["plain"]])
def test_resolve_path_specs_rejects_malformed_entries(entries):
    with pytest.raises(ConfigurationError):
        resolve_path_specs(entries, "config")


# ============================================================================
# Tests for build_switch_config
# ============================================================================


@pytest.mark.unit
def test_build_switch_config_full_document(config_file):
    config = build_switch_config(config_file(CONFIG))

    assert config.vault_api_address == "http://vault.example:8200"
    assert config.path_specs == (
        PathSpec("/clusters", StoreKind.FILESYSTEM, "*.yaml"),
        PathSpec("secret/kube", StoreKind.VAULT, "*.yaml"),
    )
    refresh, sync = config.hooks
    assert refresh.type == HookType.EXECUTABLE
    assert refresh.arguments == ("--all",)
    assert refresh.interval_seconds == 86400
    assert sync.type == HookType.INLINE_COMMAND
    assert sync.command == "echo synced"
    assert sync.interval_seconds == 1800


@pytest.mark.unit
def test_build_switch_config_name_flag_wins(config_file):
    config = build_switch_config(config_file(CONFIG), kubeconfig_name="kc")

    assert {spec.name_filter for spec in config.path_specs} == {"kc"}


@pytest.mark.unit
def test_build_switch_config_without_file(tmp_path):
    config = build_switch_config(tmp_path / "absent.yaml")

    assert [s.name_filter for s in config.path_specs] == ["config"]
    assert config.hooks == ()
    assert config.vault_api_address is None


@pytest.mark.unit
def test_build_switch_config_duplicate_hook_names(config_file):
    content = "hooks:\n  - {name: a, command: x, type: InlineCommand}\n  - {name: a, command: y, type: InlineCommand}\n"

    with pytest.raises(ConfigurationError, match="Duplicate hook names: a"):
        build_switch_config(config_file(content))


@pytest.mark.unit
@pytest.mark.parametrize(
    "hook",
    [
        "{name: a, type: Executable}",
        "{name: a, type: InlineCommand}",
        "{name: a, type: Webhook, command: x}",
        "{type: Executable, path: /bin/true}",
    ],
)
def test_build_switch_config_invalid_hooks(config_file, hook):
    with pytest.raises(ConfigurationError):
        build_switch_config(config_file(f"hooks:\n  - {hook}\n"))


# ============================================================================
# Tests for resolve_vault_credentials
# ============================================================================


@pytest.mark.unit
def test_vault_credentials_flags_win(tmp_path):
    credentials = resolve_vault_credentials(
        "http://config:8200",
        address_flag="http://flag:8200/",
        token_flag="flag-token",
        environ={"VAULT_ADDR": "http://env:8200", "VAULT_TOKEN": "env-token"},
        home=tmp_path,
    )

    assert credentials.address == "http://flag:8200"
    assert credentials.token == "flag-token"


@pytest.mark.unit
def test_vault_credentials_environment_beats_file(tmp_path):
    (tmp_path / ".vault-token").write_text("file-token\n")

    credentials = resolve_vault_credentials(
        "http://config:8200",
        environ={"VAULT_ADDR": "http://env:8200", "VAULT_TOKEN": "env-token"},
        home=tmp_path,
    )

    assert credentials.address == "http://env:8200"
    assert credentials.token == "env-token"


@pytest.mark.unit
def test_vault_credentials_fall_back_to_config_and_token_file(tmp_path):
    (tmp_path / ".vault-token").write_text("file-token\n")

    credentials = resolve_vault_credentials("http://config:8200", environ={}, home=tmp_path)

    assert credentials.address == "http://config:8200"
    assert credentials.token == "file-token"


@pytest.mark.unit
def test_vault_credentials_missing_address(tmp_path):
    with pytest.raises(ConfigurationError, match="Vault API address"):
        resolve_vault_credentials(None, token_flag="t", environ={}, home=tmp_path)


@pytest.mark.unit
def test_vault_credentials_missing_token(tmp_path):
    with pytest.raises(ConfigurationError, match="Vault token"):
        resolve_vault_credentials("http://config:8200", environ={}, home=tmp_path)
