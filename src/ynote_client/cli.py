"""Command-line interface for ynote_client."""

from __future__ import annotations

import logging
import sys
from pathlib import Path
from typing import Any

import click

from ynote_client import (
    AuthorizationError,
    Credentials,
    ServerError,
    UserInfo,
    YnoteClient,
)
from ynote_client.config import get_config, validate_config
from ynote_client.explorer import TIME_FORMAT, Explorer, render_notebooks, sort_notebooks
from ynote_client.token_store import load_access_token, save_access_token

logger = logging.getLogger(__name__)


def get_client(settings: dict[str, Any]) -> tuple[YnoteClient, Path]:
    """Create a YnoteClient with the saved access token, if there is one.

    Returns (client, token_file). Exits if the configuration is incomplete.
    """
    if not validate_config(**settings):
        sys.exit(1)
    config = get_config(**settings)
    token_file: Path = config["YNOTE_TOKEN_FILE"]
    client = YnoteClient(
        Credentials(config["YNOTE_CONSUMER_KEY"], config["YNOTE_CONSUMER_SECRET"]),
        config["YNOTE_BASE_URL"],
        access_token=load_access_token(token_file),
        timeout=config["YNOTE_TIMEOUT"],
    )
    return client, token_file


def authorize(client: YnoteClient, token_file: Path) -> Credentials:
    """Run the three-legged OAuth flow and save the access token."""
    click.echo("Requesting temporary credentials ...")
    temp_cred = client.request_temporary_credentials()

    auth_url = client.authorization_url(temp_cred)
    click.echo("Authorize this application in your browser:")
    click.echo(auth_url)
    click.launch(auth_url)

    verifier = click.prompt("Please input the verifier").strip()
    access_token = client.request_token(temp_cred, verifier)
    save_access_token(token_file, access_token)
    return access_token


def ensure_user(client: YnoteClient, token_file: Path) -> UserInfo:
    """Fetch the user, re-authorizing once if the token was rejected."""
    if not client.is_authorized:
        click.echo(f"Access token ({token_file}) not found, try authorize...")
        authorize(client, token_file)
    try:
        return client.user_info()
    except ServerError as e:
        if not e.is_token_invalid:
            raise
        logger.info("Access token rejected; re-authorizing")
        click.echo("Access token is no longer valid, try authorize...")
        authorize(client, token_file)
        return client.user_info()


@click.group()
@click.version_option(package_name="ynote-client")
@click.option("--consumer-key", default=None, help="Application consumer key")
@click.option("--consumer-secret", default=None, help="Application consumer secret")
@click.option("--base-url", default=None, help="Service URL base")
@click.option(
    "--token-file",
    type=click.Path(path_type=Path),
    default=None,
    help="Access token file path (default: ~/.ynote/access_token.json)",
)
@click.option("--verbose", "-v", is_flag=True, help="Enable debug logging")
@click.pass_context
def main(
    ctx: click.Context,
    consumer_key: str | None,
    consumer_secret: str | None,
    base_url: str | None,
    token_file: Path | None,
    verbose: bool,
) -> None:
    """Youdao Note CLI - Browse and edit your notebooks."""
    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.WARNING,
        format="%(asctime)s - %(levelname)s - %(message)s",
        datefmt="%Y-%m-%d %H:%M:%S",
    )
    ctx.obj = {
        "YNOTE_CONSUMER_KEY": consumer_key,
        "YNOTE_CONSUMER_SECRET": consumer_secret,
        "YNOTE_BASE_URL": base_url,
        "YNOTE_TOKEN_FILE": token_file,
    }


@main.command()
@click.pass_obj
def login(settings: dict[str, Any]) -> None:
    """Authorize this application and save the access token."""
    try:
        client, token_file = get_client(settings)
        with client:
            authorize(client, token_file)
            user = client.user_info()
        click.echo(click.style(f"Authorized as {user.user}", fg="green"))
    except AuthorizationError as e:
        click.echo(click.style(f"Authorization failed: {e}", fg="red"), err=True)
        sys.exit(1)
    except Exception as e:
        click.echo(click.style(f"Error: {e}", fg="red"), err=True)
        sys.exit(1)


@main.command()
@click.pass_obj
def explore(settings: dict[str, Any]) -> None:
    """Browse notebooks and notes interactively.

    Commands are read one per line: a number opens an entry, "a"/"n" go back
    up, "q" quits. Each menu lists the commands it accepts.
    """
    try:
        client, token_file = get_client(settings)
        with client:
            user = ensure_user(client, token_file)
            last_login = user.last_login_time.astimezone().strftime(TIME_FORMAT)
            click.echo(f"Hi, {user.user}(last login at {last_login})")
            Explorer(client).run()
    except AuthorizationError as e:
        click.echo(click.style(f"Authorization failed: {e}", fg="red"), err=True)
        sys.exit(1)
    except Exception as e:
        click.echo(click.style(f"Error: {e}", fg="red"), err=True)
        sys.exit(1)


@main.command()
@click.pass_obj
def notebooks(settings: dict[str, Any]) -> None:
    """List all notebooks, grouped."""
    try:
        client, token_file = get_client(settings)
        with client:
            ensure_user(client, token_file)
            items = sort_notebooks(client.list_notebooks())

        if not items:
            click.echo("(no notebooks)")
        for line in render_notebooks(items):
            click.echo(line)
    except AuthorizationError as e:
        click.echo(click.style(f"Authorization failed: {e}", fg="red"), err=True)
        sys.exit(1)
    except Exception as e:
        click.echo(click.style(f"Error: {e}", fg="red"), err=True)
        sys.exit(1)


if __name__ == "__main__":
    main()
