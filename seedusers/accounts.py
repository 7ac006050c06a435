"""Account stores wrapping the OS account-creation primitive.

An AccountStore has a single operation,  create_account(request),  which
either returns None or raises ProvisionError.  The provisioner only talks
to this interface so tests and dry runs can substitute their own store
for the real /etc/passwd.
"""

import os
import pwd
import shlex
import subprocess

from seedusers.types import AccountRequest, ProvisionError

USERADD = os.environ.get("SEEDUSERS_USERADD", "useradd")

# -----------------------------------------------------------------------------------------


def run(cmd, cwd=".", timeout=30, check=True):
    """Run subprocess `cmd` in dir `cwd` failing if not completed within `timeout` seconds
    or if `cmd` returns a non-zero exit status and `check` is set.
    """
    return subprocess.run(
        cmd,
        capture_output=True,
        text=True,
        check=check,
        cwd=cwd,
        timeout=timeout,
    )


def useradd_command(request: AccountRequest, useradd=USERADD) -> list[str]:
    """Return the argv which adds `request` without creating a home directory."""
    cmd = [useradd, "-m" if request.create_home else "-M", "-s", str(request.shell)]
    if request.home is not None:
        cmd.extend(["-d", str(request.home)])
    cmd.extend(["-u", str(request.uid), str(request.username)])
    return cmd


def user_exists(username: str) -> bool:
    try:
        pwd.getpwnam(str(username))
        return True
    except KeyError:
        return False


def uid_exists(uid: int) -> bool:
    try:
        pwd.getpwuid(int(uid))
        return True
    except KeyError:
        return False


def check_home_dir(request: AccountRequest) -> bool:
    """True if `request` has no home or its home already exists as a directory."""
    return request.home is None or os.path.isdir(request.home)


# -----------------------------------------------------------------------------------------


class AccountStore:
    """Capability interface for adding one account."""

    def create_account(self, request: AccountRequest) -> None:
        raise NotImplementedError


class UseraddStore(AccountStore):
    """Adds accounts to the local system with useradd.  Must be root."""

    def __init__(self, useradd=USERADD, timeout=30):
        self.useradd = useradd
        self.timeout = timeout

    def create_account(self, request: AccountRequest) -> None:
        cmd = useradd_command(request, self.useradd)
        try:
            result = run(cmd, timeout=self.timeout, check=False)
        except subprocess.TimeoutExpired:
            raise ProvisionError(request, f"{self.useradd} timed out after {self.timeout}s")
        except OSError as exc:
            raise ProvisionError(request, f"cannot run {self.useradd}: {exc}")
        if result.returncode != 0:
            message = result.stderr.strip() or f"{self.useradd} exited {result.returncode}"
            raise ProvisionError(request, message, result.returncode)


class DryRunStore(AccountStore):
    """Prints what would be done instead of doing it."""

    def __init__(self, echo=print, useradd=USERADD):
        self.echo = echo
        self.useradd = useradd

    def create_account(self, request: AccountRequest) -> None:
        self.echo("+ " + shlex.join(useradd_command(request, self.useradd)))
        self.echo("  " + request.passwd_line())
