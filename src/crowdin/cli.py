"""
Click CLI for Crowdin file synchronization.

This module is the composition root for command-line use: each command
builds a CrowdinClient, runs one asynchronous operation and closes the
client again.
"""

import asyncio
import json
import logging
import sys
from dataclasses import dataclass
from pathlib import Path

import click

from src.oauth.config import CrowdinOAuthConfig
from src.oauth.exceptions import AuthorizationError, CrowdinOAuthError

from .client import CrowdinClient
from .exceptions import CrowdinAPIError
from .formats import export_as_xliff
from .models import Language

logger = logging.getLogger(__name__)


@dataclass
class CLIContext:
    """Context object passed to all CLI commands.

    Attributes:
        config: OAuth configuration
        verbose: Verbose output enabled
        json: JSON output enabled
    """

    config: CrowdinOAuthConfig
    verbose: bool
    json: bool


def print_error(message: str) -> None:
    """Print error message to stderr."""
    click.secho(f"Error: {message}", fg="red", err=True)


def print_success(message: str) -> None:
    """Print success message."""
    click.secho(message, fg="green")


def _run(coro) -> None:
    """Run a command coroutine, turning client errors into exit code 1."""
    try:
        asyncio.run(coro)
    except (CrowdinAPIError, CrowdinOAuthError) as e:
        print_error(str(e))
        sys.exit(1)


@click.group()
@click.option("--verbose", "-v", is_flag=True, help="Verbose output")
@click.option("--json", "output_json", is_flag=True, help="JSON output (where supported)")
@click.pass_context
def cli(ctx: click.Context, verbose: bool, output_json: bool) -> None:
    """
    Crowdin Sync - Sign in to Crowdin and transfer translation files.

    Requires CROWDIN_CLIENT_ID to be set to the OAuth application's client ID.
    """
    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.WARNING,
        format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
    )

    try:
        config = CrowdinOAuthConfig.from_env()
    except CrowdinOAuthError as e:
        print_error(str(e))
        sys.exit(1)

    ctx.obj = CLIContext(config=config, verbose=verbose, json=output_json)


async def _login(cli_ctx: CLIContext) -> None:
    async with CrowdinClient(cli_ctx.config) as client:
        pending = client.authenticate()

        click.echo("Authorize the application in your browser:")
        click.echo(f"\n  {client.oauth.authorization_url}\n")
        uri = click.prompt("Paste the address your browser was redirected to").strip()

        if not client.is_oauth_callback(uri):
            raise AuthorizationError(
                f"Not a sign-in callback (expected {cli_ctx.config.redirect_uri}...)"
            )

        client.handle_oauth_callback(uri)
        if not pending.done():
            pending.cancel()
            raise AuthorizationError("Callback does not match this sign-in request")
        await pending

        user = await client.get_user_info()
        print_success(f"Signed in as {user.name} ({user.login})")


@cli.command()
@click.pass_obj
def login(cli_ctx: CLIContext) -> None:
    """
    Sign in to Crowdin through the browser.

    Example: crowdin-sync login
    """
    _run(_login(cli_ctx))


async def _logout(cli_ctx: CLIContext) -> None:
    async with CrowdinClient(cli_ctx.config) as client:
        client.sign_out()
    print_success("Signed out")


@cli.command()
@click.pass_obj
def logout(cli_ctx: CLIContext) -> None:
    """Forget the stored Crowdin token."""
    _run(_logout(cli_ctx))


async def _status(cli_ctx: CLIContext) -> None:
    async with CrowdinClient(cli_ctx.config) as client:
        if not client.is_signed_in():
            click.echo("Not signed in. Run 'crowdin-sync login'.")
            return

        user = await client.get_user_info()
        if cli_ctx.json:
            click.echo(
                json.dumps(
                    {
                        "login": user.login,
                        "name": user.name,
                        "api": client.token_manager.api_base_url,
                    }
                )
            )
            return

        click.echo(f"Signed in as {user.name} ({user.login})")
        click.echo(f"API:  {client.token_manager.api_base_url}")


@cli.command()
@click.pass_obj
def status(cli_ctx: CLIContext) -> None:
    """Show the signed-in user."""
    _run(_status(cli_ctx))


async def _projects(cli_ctx: CLIContext) -> None:
    async with CrowdinClient(cli_ctx.config) as client:
        projects = await client.get_user_projects()

    if cli_ctx.json:
        click.echo(json.dumps([{"id": p.id, "name": p.name} for p in projects]))
        return

    if not projects:
        click.echo("No accessible projects found.")
        return

    click.echo(f"{'ID':>10}  Name")
    click.echo("-" * 40)
    for project in projects:
        click.echo(f"{project.id:>10}  {project.name}")


@cli.command()
@click.pass_obj
def projects(cli_ctx: CLIContext) -> None:
    """List projects whose files you can access."""
    _run(_projects(cli_ctx))


async def _files(cli_ctx: CLIContext, project_id: int) -> None:
    async with CrowdinClient(cli_ctx.config) as client:
        project = await client.get_project_info(project_id)

    if cli_ctx.json:
        click.echo(json.dumps(project.to_dict()))
        return

    click.secho(f"=== {project.name} ({project.id}) ===", bold=True)
    click.echo(f"Languages: {', '.join(lang.tag for lang in project.languages) or '-'}")
    click.echo()
    click.echo(f"{'ID':>10}  {'Export':<6}  Path")
    for project_file in project.files:
        export = "xliff" if export_as_xliff(project_file.extension) else "as is"
        click.echo(f"{project_file.id:>10}  {export:<6}  {project_file.path}")


@cli.command()
@click.argument("project_id", type=int)
@click.pass_obj
def files(cli_ctx: CLIContext, project_id: int) -> None:
    """
    List a project's languages and files.

    Example: crowdin-sync files 12345
    """
    _run(_files(cli_ctx, project_id))


async def _download(
    cli_ctx: CLIContext, project_id: int, file_id: int, language: str, output: Path
) -> None:
    async with CrowdinClient(cli_ctx.config) as client:
        await client.download_file(
            project_id, Language.try_parse(language), file_id, output.suffix.lstrip("."), output
        )
    print_success(f"Saved {output}")


@cli.command()
@click.argument("project_id", type=int)
@click.argument("file_id", type=int)
@click.argument("language")
@click.argument("output", type=click.Path(dir_okay=False, path_type=Path))
@click.pass_obj
def download(
    cli_ctx: CLIContext, project_id: int, file_id: int, language: str, output: Path
) -> None:
    """
    Download a file's translation.

    The export format follows OUTPUT's extension: .po and .xliff files are
    exported as is, anything else as XLIFF.

    Example: crowdin-sync download 12345 67 de messages-de.po
    """
    _run(_download(cli_ctx, project_id, file_id, language, output))


async def _upload(
    cli_ctx: CLIContext, project_id: int, file_id: int, language: str, source: Path
) -> None:
    async with CrowdinClient(cli_ctx.config) as client:
        await client.upload_file(
            project_id,
            Language.try_parse(language),
            file_id,
            source.suffix.lstrip("."),
            source.read_bytes(),
        )
    print_success(f"Uploaded {source}")


@cli.command()
@click.argument("project_id", type=int)
@click.argument("file_id", type=int)
@click.argument("language")
@click.argument("source", type=click.Path(exists=True, dir_okay=False, path_type=Path))
@click.pass_obj
def upload(
    cli_ctx: CLIContext, project_id: int, file_id: int, language: str, source: Path
) -> None:
    """
    Upload a file's translation.

    Example: crowdin-sync upload 12345 67 de messages-de.po
    """
    _run(_upload(cli_ctx, project_id, file_id, language, source))


if __name__ == "__main__":
    cli()
