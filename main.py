"""
kswitch CLI Entry Point.

This module implements the command-line interface for kswitch, a tool that
discovers kubeconfig files across local directories and HashiCorp Vault, lets
the operator pick one and hands it to the current shell session.

Commands:

1.  **switch**: Resolves the configured search roots, discovers kubeconfigs in
    every store, opens the interactive picker and writes the selection to a
    fresh file under `~/.kube/switch_tmp`. The path of that file is the only
    thing printed on stdout, so a shell function can do
    `export KUBECONFIG=$(kswitch switch)`.
2.  **clean**: Removes all kubeconfig files created by `switch`.
3.  **hooks**: Runs the hooks configured in the switch config file, respecting
    each hook's minimum interval unless `--run-immediately` is given.

Usage:
    $ kswitch switch --kubeconfig-path ~/clusters --kubeconfig-name "*.yaml"
    $ kswitch clean
    $ kswitch hooks --hook-name refresh --run-immediately

Dependencies:
    - Typer: CLI argument parsing and app structure.
    - Rich: Terminal UI, colors, and logging output.
    - Inquirer: Interactive terminal prompts.
    - httpx: Vault HTTP API access.
    - PyYAML: Configuration file parsing.
"""

from pathlib import Path
from typing import Annotated, NoReturn

import typer

from adapters.hook_runner import SubprocessHookRunner
from constants import DEFAULT_CONFIG_PATH, DEFAULT_STATE_DIR
from core.config import build_switch_config
from core.exceptions import (
    ConfigurationError,
    DiscoveryError,
    EmptyDiscoveryError,
    FetchError,
    FileIOError,
    TempFileError,
)
from core.hooks import run_hooks
from core.materializer import SwitchMaterializer
from core.models import HookState, StoreKind
from core.registry import create_registry
from core.switcher import run_switch
from ui.prompts import InquirerPicker
from utils import pr, setup_logging

app = typer.Typer(help="The kubectx for operators.", no_args_is_help=True)

ConfigPathOption = Annotated[
    Path,
    typer.Option(
        "--config-path",
        dir_okay=False,
        resolve_path=True,
        help="Path on the local filesystem to the configuration file.",
    ),
]
StateDirectoryOption = Annotated[
    Path,
    typer.Option(
        "--state-directory",
        file_okay=False,
        resolve_path=True,
        help="Path to the local directory used for storing internal state.",
    ),
]
VerboseOption = Annotated[
    bool, typer.Option("--verbose", "-v", help="Enable debug logging.")
]


@app.command()
def switch(
    kubeconfig_path: Annotated[
        str | None,
        typer.Option(
            help="Path to be recursively searched for kubeconfig files. Can be a file "
            "or a directory on the local filesystem or a path in Vault. Added to the "
            "paths of the config file. Defaults to ~/.kube/config when nothing is configured.",
        ),
    ] = None,
    store: Annotated[
        StoreKind,
        typer.Option(help="The backing store of --kubeconfig-path."),
    ] = StoreKind.FILESYSTEM,
    kubeconfig_name: Annotated[
        str | None,
        typer.Option(
            help="Only shows kubeconfig files with this name. Accepts wildcard "
            "arguments '*' and '?'. Defaults to 'config'.",
        ),
    ] = None,
    show_preview: Annotated[
        bool,
        typer.Option(
            help="Show a preview of the highlighted kubeconfig. Disable it when using "
            "Vault to prevent excessive requests against the API.",
        ),
    ] = True,
    vault_api_address: Annotated[
        str | None,
        typer.Option(
            help='The API address of Vault. Overrides "VAULT_ADDR" and the '
            '"vaultAPIAddress" field of the config file.',
        ),
    ] = None,
    vault_token: Annotated[
        str | None,
        typer.Option(
            help='The Vault token. Overrides "VAULT_TOKEN" and the ~/.vault-token file.',
        ),
    ] = None,
    config_path: ConfigPathOption = DEFAULT_CONFIG_PATH,
    verbose: VerboseOption = False,
):
    """
    Launch the kubeconfig switcher.

    Discovers kubeconfigs in every configured store, lets the operator pick
    one and prints the path of a private copy of it.

    Raises:
        typer.Exit: With code 1 on configuration, discovery, fetch or
            temporary file errors. Aborting the selection exits with code 0
            and prints nothing on stdout.
    """
    setup_logging(verbose)

    try:
        config = build_switch_config(
            config_path,
            kubeconfig_path=kubeconfig_path,
            store=store,
            kubeconfig_name=kubeconfig_name,
        )
        with create_registry(config, vault_api_address, vault_token) as registry:
            result = run_switch(
                registry,
                InquirerPicker(),
                SwitchMaterializer(),
                show_preview=show_preview,
                on_discovery_error=print_discovery_warning,
            )
    except ConfigurationError as e:
        print_fatal_err("Configuration Error", e.message)
    except DiscoveryError as e:
        for error in e.errors:
            print_discovery_warning(error)
        print_fatal_err("Discovery Error", e.message)
    except EmptyDiscoveryError as e:
        print_fatal_err("No Kubeconfigs Found", e.message)
    except FetchError as e:
        print_fatal_err("Fetch Error", e.message)
    except TempFileError as e:
        print_temp_file_err(e)

    if result.state is None:
        pr("[yellow]No kubeconfig selected.[/yellow]")
        raise typer.Exit(0)

    pr(f"[green]Switched to {result.state.source_candidate_id}[/green]")
    typer.echo(str(result.state.temp_file_path))


@app.command()
def clean(verbose: VerboseOption = False):
    """
    Cleans all temporary kubeconfig files created in ~/.kube/switch_tmp.
    """
    setup_logging(verbose)

    try:
        removed = SwitchMaterializer().clean()
    except TempFileError as e:
        print_temp_file_err(e)

    pr(f"[green]Removed {removed} temporary kubeconfig file(s).[/green]")
    typer.echo(removed)


@app.command()
def hooks(
    hook_name: Annotated[
        str | None,
        typer.Option(help="The name of the hook that should be run. Runs all hooks if omitted."),
    ] = None,
    run_immediately: Annotated[
        bool,
        typer.Option(
            "--run-immediately",
            help="Run hooks right away. Do not respect the hooks execution interval.",
        ),
    ] = False,
    config_path: ConfigPathOption = DEFAULT_CONFIG_PATH,
    state_directory: StateDirectoryOption = DEFAULT_STATE_DIR,
    verbose: VerboseOption = False,
):
    """
    Run configured hooks.

    Raises:
        typer.Exit: With code 1 if the configuration is invalid or any hook failed.
    """
    setup_logging(verbose)

    try:
        config = build_switch_config(config_path)
        outcomes = run_hooks(
            config.hooks,
            state_directory,
            SubprocessHookRunner(),
            hook_name=hook_name,
            force=run_immediately,
        )
    except ConfigurationError as e:
        print_fatal_err("Configuration Error", e.message)
    except FileIOError as e:
        print_file_io_err(e)

    if not outcomes:
        pr("[yellow]No hooks configured.[/yellow]")
        return

    for outcome in outcomes:
        if outcome.state == HookState.SUCCEEDED:
            pr(f"[green]✔ {outcome.name}[/green] succeeded")
        elif outcome.state == HookState.FAILED:
            pr(f"[red]✘ {outcome.name}[/red] failed: {outcome.error}")
        else:
            pr(f"[dim]• {outcome.name} is not due yet[/dim]")

    if any(outcome.state == HookState.FAILED for outcome in outcomes):
        raise typer.Exit(code=1)


def print_discovery_warning(e: DiscoveryError) -> None:
    pr(f"[yellow]⚠ Warning:[/yellow] {e.message}")


def print_fatal_err(title: str, message: str) -> NoReturn:
    """
    Displays a one-line cause for a fatal error and exits.

    Raises:
        typer.Exit: Always raises with exit code 1 to terminate the application.
    """
    pr(f"❌ [bold red]{title}:[/bold red] {message}")
    raise typer.Exit(code=1)


def print_temp_file_err(e: TempFileError) -> NoReturn:
    """
    Displays a user-friendly error message for temporary kubeconfig failures.

    Raises:
        typer.Exit: Always raises with exit code 1 to terminate the application.
    """
    pr(f"❌ [bold red]Workspace Error:[/bold red] {e.message}")
    pr(
        "\n[yellow]Quick Fix:[/yellow] Ensure ~/.kube/switch_tmp is writable and you have free disk space."
    )
    pr(f"Diagnostics: {e.diagnostic_info}")
    raise typer.Exit(code=1) from e


def print_file_io_err(e: FileIOError) -> NoReturn:
    """
    Displays a user-friendly error message for file I/O operation failures.

    Raises:
        typer.Exit: Always raises with exit code 1 to terminate the application.
    """
    pr(f"❌ [bold red]File I/O Error:[/bold red] {e.message}")
    if e.file_path:
        pr(f"File path: [yellow]{e.file_path}[/yellow]")
    if e.original_exception:
        pr(f"\nTechnical details: {e.original_exception}")

    raise typer.Exit(code=1) from e


if __name__ == "__main__":
    app()
