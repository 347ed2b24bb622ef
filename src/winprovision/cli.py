"""CLI interface for winprovision"""

import logging
from pathlib import Path
from typing import List, Optional, Tuple

import click

from winprovision.application.apply_service import ApplyService
from winprovision.application.provision_service import ProvisionService
from winprovision.domain.models.platform import Architecture, InstallScope
from winprovision.domain.models.results import ToolStatus
from winprovision.infrastructure.config.config_manager import ConfigManager
from winprovision.infrastructure.http_client import HttpClient
from winprovision.infrastructure.installer import ToolInstaller
from winprovision.infrastructure.platform_info import (
    detect_architecture,
    is_elevated,
    resolve_install_root,
    resolve_scope,
)
from winprovision.infrastructure.release_feed import ReleaseFeed

logger = logging.getLogger(__name__)


def setup_logging(verbose: bool = False) -> None:
    """Setup logging configuration"""
    level = logging.DEBUG if verbose else logging.INFO
    logging.basicConfig(
        level=level,
        format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
        datefmt="%Y-%m-%d %H:%M:%S",
        force=True,
    )
    logging.getLogger().setLevel(level)
    # urllib3 logs every connection at DEBUG
    logging.getLogger("urllib3").setLevel(logging.INFO if verbose else logging.WARNING)


def _die(message: str, verbose: bool = False, exc: Optional[Exception] = None) -> None:
    """Exit with a user-friendly error message"""
    if exc is not None:
        logger.error(message, exc_info=verbose)
    else:
        logger.error(message)
    raise click.ClickException(message)


def _load_config(ctx) -> ConfigManager:
    return ConfigManager(config_path=ctx.obj.get("config_path"))


def _resolve_install_root(
    config_manager: ConfigManager,
    scope_override: Optional[str],
    root_override: Optional[Path],
) -> Tuple[InstallScope, Path]:
    """Resolve install scope and root from config and CLI overrides

    Args:
        config_manager: Configuration manager
        scope_override: Scope from the command line
        root_override: Install root from the command line

    Returns:
        Tuple of (scope, install root)
    """
    install_config = config_manager.get_install_config()
    if root_override is not None:
        install_config = install_config.model_copy(update={"root": str(root_override)})
    setting = scope_override or install_config.scope
    elevated = is_elevated() if setting == "auto" else False
    scope = resolve_scope(setting, elevated)
    root = resolve_install_root(install_config, scope)
    logger.info(f"Install scope: {scope.value}, install root: {root}")
    return scope, root


def _create_installer(root: Path) -> ToolInstaller:
    return ToolInstaller(root)


def _output_statuses(statuses: List[ToolStatus]) -> None:
    """Output tool statuses to console"""
    for status in statuses:
        line = f"{status.name:<10} {status.action:<10}"
        if status.version:
            line += f" {status.version}"
        elif status.release:
            line += f" {status.release}"
        if status.path:
            line += f" ({status.path})"
        if status.error:
            line += f" ERROR: {status.error}"
        click.echo(line)


@click.group()
@click.option("--verbose", "-v", is_flag=True, help="Enable verbose logging")
@click.option(
    "--config",
    type=click.Path(exists=True, path_type=Path),
    help="Path to .provision.yml config file",
)
@click.pass_context
def cli(ctx, verbose: bool, config: Path):
    """winprovision - Windows image tool provisioning"""
    ctx.ensure_object(dict)
    setup_logging(verbose)
    ctx.obj["config_path"] = config
    ctx.obj["verbose"] = verbose


@cli.command()
@click.pass_context
def arch(ctx):
    """Print the detected host architecture."""
    verbose = ctx.obj.get("verbose", False)
    try:
        click.echo(detect_architecture().value)
    except Exception as e:
        _die(str(e), verbose=verbose, exc=e)


@cli.command()
@click.argument("tools", nargs=-1)
@click.option("--force", is_flag=True, help="Reinstall tools that are already present")
@click.option(
    "--scope",
    type=click.Choice(["auto", "user", "machine"], case_sensitive=False),
    help="Install scope. Overrides config.",
)
@click.option(
    "--root",
    type=click.Path(file_okay=False, path_type=Path),
    help="Install root directory. Overrides config.",
)
@click.pass_context
def install(ctx, tools: Tuple[str, ...], force: bool, scope: Optional[str], root: Optional[Path]):
    """Download and install tools from their release feeds.

    TOOLS: Tool names to install (default: all configured tools)
    """
    verbose = ctx.obj.get("verbose", False)
    http_client = None
    try:
        config_manager = _load_config(ctx)
        _, install_root = _resolve_install_root(
            config_manager, scope.lower() if scope else None, root
        )
        architecture: Architecture = detect_architecture()
        logger.info(f"Architecture: {architecture.value}")

        http_config = config_manager.get_http_config()
        http_client = HttpClient(http_config, config_manager.get_retry_config())
        download_dir = config_manager.get_install_config().download_dir

        service = ProvisionService(
            tools=config_manager.get_tools(),
            feed=ReleaseFeed(http_client, http_config.api_url),
            http_client=http_client,
            installer=_create_installer(install_root),
            architecture=architecture,
            download_dir=Path(download_dir) if download_dir else None,
        )
        statuses = service.ensure_tools(list(tools) or None, force=force)
    except click.ClickException:
        raise
    except Exception as e:
        _die(f"Fatal error: {e}", verbose=verbose, exc=e)
    finally:
        if http_client is not None:
            http_client.close()

    _output_statuses(statuses)
    failed = [s for s in statuses if not s.is_successful]
    if failed:
        _die(f"{len(failed)} of {len(statuses)} tools failed to install")
    click.echo(f"\nProvisioning completed: {len(statuses)} tools ready")


@cli.command()
@click.argument("tools", nargs=-1)
@click.option(
    "--scope",
    type=click.Choice(["auto", "user", "machine"], case_sensitive=False),
    help="Install scope. Overrides config.",
)
@click.option(
    "--root",
    type=click.Path(file_okay=False, path_type=Path),
    help="Install root directory. Overrides config.",
)
@click.pass_context
def status(ctx, tools: Tuple[str, ...], scope: Optional[str], root: Optional[Path]):
    """Show which tools are installed.

    TOOLS: Tool names to check (default: all configured tools)
    """
    verbose = ctx.obj.get("verbose", False)
    try:
        config_manager = _load_config(ctx)
        _, install_root = _resolve_install_root(
            config_manager, scope.lower() if scope else None, root
        )
        installer = _create_installer(install_root)
        service = ProvisionService(tools=config_manager.get_tools(), installer=installer)
        statuses = service.status(list(tools) or None)
    except click.ClickException:
        raise
    except Exception as e:
        _die(f"Fatal error: {e}", verbose=verbose, exc=e)

    _output_statuses(statuses)


@cli.command(context_settings={"ignore_unknown_options": True})
@click.argument("tool", type=str)
@click.argument("document", type=click.Path(exists=True, dir_okay=False, path_type=Path))
@click.argument("extra_args", nargs=-1, type=click.UNPROCESSED)
@click.option(
    "--ensure/--no-ensure",
    default=True,
    help="Install the tool first if it is missing (default: on)",
)
@click.option(
    "--scope",
    type=click.Choice(["auto", "user", "machine"], case_sensitive=False),
    help="Install scope. Overrides config.",
)
@click.option(
    "--root",
    type=click.Path(file_okay=False, path_type=Path),
    help="Install root directory. Overrides config.",
)
@click.pass_context
def apply(
    ctx,
    tool: str,
    document: Path,
    extra_args: Tuple[str, ...],
    ensure: bool,
    scope: Optional[str],
    root: Optional[Path],
):
    """Apply a configuration document with an installed tool.

    TOOL: Tool name (e.g. dsc, bicep, winget)
    DOCUMENT: Path to the configuration document
    EXTRA_ARGS: Additional arguments passed to the tool (after --)
    """
    verbose = ctx.obj.get("verbose", False)
    http_client = None
    try:
        config_manager = _load_config(ctx)
        tool_config = config_manager.get_tool_config(tool)
        _, install_root = _resolve_install_root(
            config_manager, scope.lower() if scope else None, root
        )
        installer = _create_installer(install_root)

        if ensure and installer.find_executable(tool, tool_config) is None:
            http_config = config_manager.get_http_config()
            http_client = HttpClient(http_config, config_manager.get_retry_config())
            download_dir = config_manager.get_install_config().download_dir
            provision_service = ProvisionService(
                tools=config_manager.get_tools(),
                feed=ReleaseFeed(http_client, http_config.api_url),
                http_client=http_client,
                installer=installer,
                architecture=detect_architecture(),
                download_dir=Path(download_dir) if download_dir else None,
            )
            provision_service.ensure_tool(tool)

        apply_service = ApplyService(config_manager.get_tools(), installer)
        result = apply_service.apply(tool, document, list(extra_args))
    except click.ClickException:
        raise
    except Exception as e:
        _die(f"Fatal error: {e}", verbose=verbose, exc=e)
    finally:
        if http_client is not None:
            http_client.close()

    if result.output:
        click.echo(result.output)
    click.echo(f"\nApplied {document} with {tool}")


def main():
    """Main entry point"""
    cli(obj={})


if __name__ == "__main__":
    main()
