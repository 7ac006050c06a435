"""Command line interface:  seed-users

Examples:

    seed-users --preset home                  # user200..user201 under /cluster-data/user-homes
    seed-users --preset nohome                # user0..user9,  no home directory
    seed-users --start 0 --end 50 --uid-base 200000 --prefix lab --strict
"""

from enum import Enum
from pathlib import Path
from typing import Optional

import typer

from seedusers import accounts, privilege
from seedusers.config import LOG_JSON, resolve_config
from seedusers.lock import batch_lock
from seedusers.log import Log
from seedusers.manifest import write_manifest
from seedusers.provision import Provisioner, plan
from seedusers.types import ConfigError, LockError, PrivilegeError

app = typer.Typer(help="Batch-create UNIX user accounts over a range of indices.")


class Preset(str, Enum):
    home = "home"
    nohome = "nohome"


def make_store(dry_run: bool) -> accounts.AccountStore:
    if dry_run:
        return accounts.DryRunStore(echo=typer.echo)
    return accounts.UseraddStore()


@app.command()
def seed(
    preset: Optional[Preset] = typer.Option(None, "--preset", help="Start from a named batch"),
    config: Optional[Path] = typer.Option(None, "--config", help="YAML file of batch parameters"),
    start: Optional[int] = typer.Option(None, "--start", help="First index"),
    end: Optional[int] = typer.Option(None, "--end", help="Index after the last one"),
    uid_base: Optional[int] = typer.Option(None, "--uid-base", help="UID of index 0"),
    prefix: Optional[str] = typer.Option(None, "--prefix", help="User name prefix [user]"),
    shell: Optional[str] = typer.Option(None, "--shell", help="Login shell [/bin/bash]"),
    home_root: Optional[str] = typer.Option(None, "--home-root", help="Directory holding pre-provisioned homes"),
    strict: Optional[bool] = typer.Option(None, "--strict/--permissive", help="Fail the batch if any account fails"),
    timed: Optional[bool] = typer.Option(None, "--timing/--no-timing", help="Report time per account [on with --home-root]"),
    check_home: Optional[bool] = typer.Option(None, "--check-home/--no-check-home", help="Warn about missing home directories"),
    lock_file: Optional[str] = typer.Option(None, "--lock-file", help="Serialize batches on this lock file"),
    lock_timeout: float = typer.Option(10.0, "--lock-timeout", help="Seconds to wait for the lock"),
    manifest: Optional[Path] = typer.Option(None, "--manifest", help="Write a YAML record of the batch"),
    dry_run: bool = typer.Option(False, "--dry-run", help="Print useradd commands without running them"),
    json_log: bool = typer.Option(LOG_JSON, "--json-log/--no-json-log", help="Log diagnostics as JSON events"),
    debug: bool = typer.Option(False, "--debug", help="Enable debug diagnostics"),
):
    """Add one account per index in [START, END) with uid UID_BASE+index."""
    log = Log("seedusers")
    log.set_json_mode(json_log)
    log.set_level("DEBUG" if debug else "INFO")
    overrides = dict(
        start=start,
        end=end,
        uid_base=uid_base,
        prefix=prefix,
        shell=shell,
        home_root=home_root,
        strict=strict,
        timed=timed,
        check_home=check_home,
        lock_file=lock_file,
    )
    try:
        batch = resolve_config(preset.value if preset else None, config, overrides)
        requests = plan(
            batch.start, batch.end, batch.uid_base, batch.prefix, batch.shell, batch.home_root
        )
    except ConfigError as exc:
        log.error(f"Invalid batch: {exc}")
        typer.echo(f"Error: {exc}", err=True)
        raise typer.Exit(2)

    if not dry_run:
        identity = privilege.current_identity()
        try:
            privilege.check_privilege(identity)
        except PrivilegeError as exc:
            log.critical(f"Refusing to run as {identity}")
            typer.echo(str(exc))
            raise typer.Exit(1)

    provisioner = Provisioner(
        make_store(dry_run),
        log=log,
        echo=typer.echo,
        timed=batch.is_timed,
        strict=batch.strict,
        check_home=batch.check_home,
    )
    try:
        with batch_lock(batch.lock_file, timeout=lock_timeout, log=log):
            if batch.strict and not dry_run:
                provisioner.preflight(requests)
            report = provisioner.provision(requests)
    except LockError as exc:
        log.error(str(exc))
        typer.echo(f"Error: {exc}", err=True)
        raise typer.Exit(1)

    if manifest is not None:
        try:
            write_manifest(manifest, report)
        except OSError as exc:
            log.exception(exc, f"Cannot write manifest {manifest}:", exc)
            typer.echo(f"Error: cannot write manifest {manifest}: {exc}", err=True)
            raise typer.Exit(1)
        log.info(f"Wrote manifest {manifest}")
    raise typer.Exit(report.exit_code)


def main():
    app()


if __name__ == "__main__":
    main()
