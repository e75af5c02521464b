"""
Command-line interface for LPKM.

    lpkm init [--type=ed25519|rsa] [--size=N]
    lpkm id
    lpkm key gen <name> --type=rsa|ed25519 [--size=N]
    lpkm key list [-l]
    lpkm key rename <old> <new> [--force]
    lpkm key rm <name...> [-l]

Client errors exit with status 1 and internal errors with status 3. Status 2
is left to click for malformed command lines.
"""

import sys
from contextlib import contextmanager
from typing import Iterable

import click

from .config import KEY_TYPE_ED25519, REPO_PATH_ENV, VALID_KEY_TYPES
from .errors import LPKMError, is_client_error
from .logger import get_logger
from .models import KeyRecord, RenameResult
from .repo import Repository, resolve_repo_path
from .utils.canonical_json import canonicalize

ENC_TEXT = "text"
ENC_JSON = "json"

# Key types are checked by the manager so an unknown type is an input error
KEY_TYPES_HELP = "|".join(sorted(VALID_KEY_TYPES))


class InternalError(click.ClickException):
    """Storage, derivation and other non-input failures."""

    exit_code = 3

    def show(self, file=None):
        click.echo(f"Internal error: {self.format_message()}", file=file, err=file is None)


@contextmanager
def handle_errors():
    """Translate LPKM errors into classified click exceptions."""
    try:
        yield
    except LPKMError as e:
        if is_client_error(e):
            raise click.ClickException(str(e))
        raise InternalError(str(e))


def _open_repo(ctx: click.Context) -> Repository:
    with handle_errors():
        repo = Repository(ctx.obj['repo'])
    return ctx.with_resource(repo)


def _emit_json(obj):
    click.echo(canonicalize(obj))


def format_key_list(records: Iterable[KeyRecord], with_identity: bool) -> str:
    """
    Render key records one per line: the name, or the identity and name
    in aligned columns.

    Both columns are padded to their widest cell plus one space, so every
    long-format line has the same length.
    """
    records = list(records)
    if not with_identity:
        return "".join(f"{r.name}\n" for r in records)

    id_width = max((len(r.identity) for r in records), default=0) + 1
    name_width = max((len(r.name) for r in records), default=0) + 1
    return "".join(f"{r.identity.ljust(id_width)}{r.name.ljust(name_width)}\n" for r in records)


def format_rename(result: RenameResult) -> str:
    """Render a rename result as a single line."""
    line = f"Key {result.identity} renamed to {result.now}"
    if result.overwrote:
        line += " with overwriting"
    return line + "\n"


@click.group()
@click.option(
    "--repo",
    envvar=REPO_PATH_ENV,
    type=click.Path(file_okay=False),
    help=f"Repository directory (default: ${REPO_PATH_ENV} or ~/.lpkm).",
)
@click.option(
    "--enc",
    type=click.Choice([ENC_TEXT, ENC_JSON]),
    default=ENC_TEXT,
    show_default=True,
    help="Output encoding.",
)
@click.option("--log-level", default=None, help="Log level (DEBUG, INFO, WARNING, ...).")
@click.pass_context
def main(ctx, repo, enc, log_level):
    """Local-first keypair manager."""
    ctx.ensure_object(dict)
    ctx.obj['repo'] = str(resolve_repo_path(repo))
    ctx.obj['enc'] = enc
    get_logger(level=log_level)


@main.command("init")
@click.option("--type", "-t", "key_type", default=KEY_TYPE_ED25519, show_default=True,
              help=f"Type of the self key ({KEY_TYPES_HELP}).")
@click.option("--size", "-s", type=int, help="Size of the self key (rsa only).")
@click.pass_context
def init_cmd(ctx, key_type, size):
    """Initialize a repository and generate its self key."""
    with handle_errors():
        repo = ctx.with_resource(Repository.init(ctx.obj['repo'], key_type.lower() if key_type else None, size))

    if ctx.obj['enc'] == ENC_JSON:
        _emit_json({'repo': str(repo.path), 'identity': repo.identity})
    else:
        click.echo(f"initialized repository at {repo.path}")
        click.echo(f"peer identity: {repo.identity}")


@main.command("id")
@click.pass_context
def id_cmd(ctx):
    """Show the identity of the self key."""
    repo = _open_repo(ctx)

    if ctx.obj['enc'] == ENC_JSON:
        _emit_json({'identity': repo.identity, 'key_type': repo.self_keypair.key_type})
    else:
        click.echo(repo.identity)


@main.group("key")
def key_group():
    """Create, list, rename and remove named keypairs."""


@key_group.command("gen")
@click.argument("name")
@click.option("--type", "-t", "key_type", help=f"Type of the key to create ({KEY_TYPES_HELP}).")
@click.option("--size", "-s", type=int, help="Size of the key to generate (rsa only).")
@click.pass_context
def key_gen(ctx, name, key_type, size):
    """Create a new keypair."""
    repo = _open_repo(ctx)

    with handle_errors():
        identity = repo.manager.generate(name, key_type.lower() if key_type else None, size)

    if ctx.obj['enc'] == ENC_JSON:
        _emit_json(KeyRecord(name=name, identity=identity).to_dict())
    else:
        click.echo(identity)


@key_group.command("list")
@click.option("-l", "long_format", is_flag=True, help="Show extra information about keys.")
@click.pass_context
def key_list(ctx, long_format):
    """List all local keypairs."""
    repo = _open_repo(ctx)

    with handle_errors():
        records = repo.manager.list_keys()

    if ctx.obj['enc'] == ENC_JSON:
        _emit_json({'keys': [r.to_dict() for r in records]})
    else:
        click.echo(format_key_list(records, long_format), nl=False)


@key_group.command("rename")
@click.argument("name")
@click.argument("new_name")
@click.option("--force", "-f", is_flag=True, help="Allow to overwrite an existing key.")
@click.pass_context
def key_rename(ctx, name, new_name, force):
    """Rename a keypair."""
    repo = _open_repo(ctx)

    with handle_errors():
        result = repo.manager.rename(name, new_name, force=force)

    if ctx.obj['enc'] == ENC_JSON:
        _emit_json(result.to_dict())
    else:
        click.echo(format_rename(result), nl=False)


@key_group.command("rm")
@click.argument("names", nargs=-1)
@click.option("-l", "long_format", is_flag=True, help="Show extra information about keys.")
@click.pass_context
def key_rm(ctx, names, long_format):
    """Remove keypairs. Names may also be given on stdin, one per line."""
    if not names:
        stdin = sys.stdin
        if not stdin.isatty():
            names = tuple(line.strip() for line in stdin if line.strip())
    if not names:
        raise click.ClickException("missing key names to remove")

    repo = _open_repo(ctx)

    with handle_errors():
        records = repo.manager.remove(names)

    if ctx.obj['enc'] == ENC_JSON:
        _emit_json({'keys': [r.to_dict() for r in records]})
    else:
        click.echo(format_key_list(records, long_format), nl=False)


if __name__ == "__main__":
    main()
