"""Top level library module planning and running one batch of account creations.

A batch is a contiguous range of indices [start, end).  Index i becomes the
user  prefix+i  with uid  base+i,  an optional home  home_root/prefix+i,  and
the configured login shell.  Accounts are added strictly one at a time;  a
failed account is never retried and earlier accounts are never rolled back.
"""

import time
from pathlib import PurePosixPath

from seedusers.types import (
    AccountRequest,
    BatchReport,
    ConfigError,
    ProvisionError,
    ProvisionResult,
    ShellPath,
    Uid,
    UserName,
)
from seedusers import accounts
from seedusers.log import Log

COMPLETION_MESSAGE = "User creation completed."

# -----------------------------------------------------------------------------------------


def plan(
    start: int,
    end: int,
    uid_base: int,
    prefix: str = "user",
    shell: str = "/bin/bash",
    home_root: str | PurePosixPath | None = None,
) -> list[AccountRequest]:
    """Return one AccountRequest per index in [start, end)."""
    if end < start:
        raise ConfigError(f"End index {end} is before start index {start}")
    try:
        shell = ShellPath(shell)
    except (TypeError, ValueError) as exc:
        raise ConfigError(str(exc)) from exc
    root = PurePosixPath(home_root) if home_root is not None else None
    requests = []
    for index in range(start, end):
        try:
            username = UserName(f"{prefix}{index}")
            uid = Uid(uid_base + index)
        except (TypeError, ValueError) as exc:
            raise ConfigError(f"Index {index}: {exc}") from exc
        home = root / username if root is not None else None
        requests.append(AccountRequest(username, uid, shell, home))
    return requests


def report_line(result: ProvisionResult, timed: bool = False) -> str:
    """Format the human readable line describing one attempted account."""
    request = result.request
    line = f"User {request.username} created with UID {request.uid}"
    if request.home is not None:
        line += f", home directory set to {request.home},"
    line += f" and login shell {request.shell}"
    if timed:
        line += f" in {result.elapsed:.6f} seconds"
    return line


def failure_line(result: ProvisionResult) -> str:
    request = result.request
    return f"User {request.username} (UID {request.uid}) FAILED: {result.error.message}"


# -----------------------------------------------------------------------------------------


class Provisioner:
    """Adds each requested account through `store`,  reporting as it goes.

    In permissive mode (the default) primitive failures are logged and the
    account is reported like any other.  In strict mode failures are reported
    as such, listed after the loop, and make the batch exit code 1.
    """

    def __init__(
        self,
        store: accounts.AccountStore,
        log: Log | None = None,
        echo=print,
        timed: bool = False,
        strict: bool = False,
        check_home: bool = False,
        clock=time.perf_counter,
    ):
        self.store = store
        self.log = log or Log("seedusers")
        self.echo = echo
        self.timed = timed
        self.strict = strict
        self.check_home = check_home
        self.clock = clock

    def preflight(self, requests, user_exists=None, uid_exists=None) -> list[str]:
        """Return messages for requested names or uids already in the account database."""
        user_exists = user_exists or accounts.user_exists
        uid_exists = uid_exists or accounts.uid_exists
        collisions = []
        for request in requests:
            if user_exists(request.username):
                collisions.append(f"User name {request.username} already exists")
            if uid_exists(request.uid):
                collisions.append(f"UID {request.uid} already in use")
        for message in collisions:
            self.log.warning(message)
        return collisions

    def create(self, request: AccountRequest) -> ProvisionResult:
        """Add one account, timing the primitive call."""
        self.log.debug(f"Adding {request.passwd_line()}")
        started = self.clock()
        try:
            self.store.create_account(request)
            error = None
        except ProvisionError as exc:
            error = exc
        elapsed = self.clock() - started
        result = ProvisionResult(request, elapsed, error)
        if error is not None:
            self.log.warning(f"Account creation failed for {error}")
        elif self.check_home and not accounts.check_home_dir(request):
            result.home_missing = True
            self.log.warning(f"Home directory {request.home} for {request.username} does not exist")
        return result

    def provision(self, requests) -> BatchReport:
        """Add every request in order and emit the report and completion banner."""
        report = BatchReport(strict=self.strict)
        self.log.info(
            f"Adding {len(requests)} accounts",
            "(strict)." if self.strict else "(permissive).",
        )
        for request in requests:
            result = self.create(request)
            report.results.append(result)
            if self.strict and not result.ok:
                self.echo(failure_line(result))
            else:
                self.echo(report_line(result, self.timed))
        if self.strict and report.failures:
            self.log.error(f"{len(report.failures)} of {len(requests)} accounts failed:")
            for result in report.failures:
                self.log.error(f"  {result.error}")
        self.echo(COMPLETION_MESSAGE)
        return report
