"""Command line entry point: issue one resilient JSON request and print the result"""

import json
import logging
import sys
from pathlib import Path

import click
from dotenv import load_dotenv
from rich.console import Console
from rich.markup import escape

# Load .env before Settings reads the environment
_env_file = Path.cwd() / ".env"
if _env_file.exists():
    load_dotenv(_env_file)

from resilient_http.client import ResilientHttpClient  # noqa: E402
from resilient_http.config import Settings  # noqa: E402
from resilient_http.exceptions import ResilientHttpError  # noqa: E402
from resilient_http.resilience import RetryEvent  # noqa: E402

console = Console()
err_console = Console(stderr=True)


def setup_logging(verbose: bool, settings: Settings):
    """Configure logging based on verbosity"""
    level = logging.DEBUG if verbose else settings.log_level.upper()
    logging.basicConfig(
        level=level,
        format='%(asctime)s - %(name)s - %(levelname)s - %(message)s',
        datefmt='%H:%M:%S'
    )


def parse_headers(values: tuple[str, ...]) -> dict[str, str]:
    """Parse repeated ``Name: value`` options"""
    headers = {}
    for value in values:
        name, sep, content = value.partition(":")
        if not sep or not name.strip():
            raise click.BadParameter(f"expected 'Name: value', got {value!r}", param_hint="--header")
        headers[name.strip()] = content.strip()
    return headers


def parse_body(data: str | None):
    if data is None:
        return None
    try:
        return json.loads(data)
    except json.JSONDecodeError as e:
        raise click.BadParameter(f"invalid JSON: {e}", param_hint="--data")


def _run(ctx: click.Context, method: str, url: str, headers: tuple[str, ...], data: str | None = None):
    opts = ctx.obj
    settings = Settings()
    setup_logging(opts["verbose"], settings)

    overrides = {}
    if opts["max_attempts"] is not None:
        overrides["max_attempts"] = opts["max_attempts"]
    if opts["retry_wait"] is not None:
        overrides["retry_wait"] = opts["retry_wait"]

    def on_retry(event: RetryEvent):
        err_console.print(
            f"[yellow]Retry {event.attempt_number}/{event.max_attempts - 1}[/yellow] "
            f"after failure: {escape(str(event.error))}"
        )

    with ResilientHttpClient(settings.to_client_config(**overrides)) as client:
        client.add_retry_listener(on_retry)
        try:
            result = client.request(
                method,
                url,
                headers=parse_headers(headers),
                body=parse_body(data),
                expect_body=method != "DELETE",
            )
        except ResilientHttpError as e:
            err_console.print(f"[red]Error:[/red] {type(e).__name__}: {escape(str(e))}")
            sys.exit(1)

    if result is None:
        click.echo("OK (no content)")
    else:
        console.print_json(json.dumps(result))


@click.group()
@click.version_option(version='0.1.0', prog_name='resilient-http')
@click.option('--max-attempts', type=int, default=None, help='Override the maximum number of attempts')
@click.option('--retry-wait', type=float, default=None, help='Override the seconds waited between attempts')
@click.option('--verbose', '-v', is_flag=True, help='Verbose output')
@click.pass_context
def cli(ctx, max_attempts, retry_wait, verbose):
    """Resilient JSON HTTP client with rate limiting and retry"""
    ctx.obj = {"max_attempts": max_attempts, "retry_wait": retry_wait, "verbose": verbose}


header_option = click.option('--header', '-H', 'headers', multiple=True, help="Header as 'Name: value' (can repeat)")
data_option = click.option('--data', '-d', default=None, help='JSON request body')


@cli.command()
@click.argument('url')
@header_option
@click.pass_context
def get(ctx, url, headers):
    """GET a URL and print the JSON response"""
    _run(ctx, "GET", url, headers)


@cli.command()
@click.argument('url')
@header_option
@click.pass_context
def delete(ctx, url, headers):
    """DELETE a URL"""
    _run(ctx, "DELETE", url, headers)


@cli.command()
@click.argument('url')
@header_option
@data_option
@click.pass_context
def post(ctx, url, headers, data):
    """POST a JSON body and print the JSON response"""
    _run(ctx, "POST", url, headers, data)


@cli.command()
@click.argument('url')
@header_option
@data_option
@click.pass_context
def put(ctx, url, headers, data):
    """PUT a JSON body and print the JSON response"""
    _run(ctx, "PUT", url, headers, data)


@cli.command()
@click.argument('url')
@header_option
@data_option
@click.pass_context
def patch(ctx, url, headers, data):
    """PATCH a JSON body and print the JSON response"""
    _run(ctx, "PATCH", url, headers, data)


if __name__ == '__main__':
    cli()
