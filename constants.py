"""
Default locations and limits used across the kswitch CLI.

All user-facing locations live under `~/.kube`, next to the default
kubeconfig, so that the switch, clean and hooks commands agree on them
without sharing any runtime state.
"""

from pathlib import Path

KUBE_DIR = Path.home() / ".kube"

DEFAULT_CONFIG_PATH = KUBE_DIR / "switch-config.yaml"
DEFAULT_STATE_DIR = KUBE_DIR / "switch-state"
DEFAULT_KUBECONFIG_PATH = KUBE_DIR / "config"
DEFAULT_KUBECONFIG_NAME = "config"

# Only materialized kubeconfigs live here, `clean` removes everything in it
TEMP_KUBECONFIG_DIR = KUBE_DIR / "switch_tmp"
TEMP_KUBECONFIG_PREFIX = "config."

HOOK_STATE_FILE_NAME = "hook-state.json"
HOOK_TIMEOUT_SECONDS = 300

# https://developer.hashicorp.com/vault/docs/commands/token-helper
VAULT_TOKEN_FILE_NAME = ".vault-token"
VAULT_ADDR_ENV = "VAULT_ADDR"
VAULT_TOKEN_ENV = "VAULT_TOKEN"
VAULT_TIMEOUT_SECONDS = 10.0
VAULT_KUBECONFIG_FIELD = "config"

# Symlinked directories can form cycles, the walk never goes deeper than this
MAX_WALK_DEPTH = 8

PREVIEW_MAX_LINES = 40
