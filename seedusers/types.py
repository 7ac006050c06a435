"""This module defines basic types for batch account creation, formalizing
the distinctions between the UNIX identifiers handed to the account-creation
primitive and the records produced by a provisioning run.
"""

import re
from dataclasses import dataclass, field
from pathlib import PurePosixPath

# -----------------------------------------------------------------------------------------
#                                Errors
# -----------------------------------------------------------------------------------------


class SeedUsersError(Exception):
    """Base class for all errors raised by seedusers."""


class PrivilegeError(SeedUsersError):
    """The caller lacks the administrative privilege needed to add accounts."""


class ConfigError(SeedUsersError):
    """The batch parameters are inconsistent or out of range."""


class LockError(SeedUsersError):
    """Another batch holds the run lock."""


class ProvisionError(SeedUsersError):
    """The account-creation primitive failed for one request."""

    def __init__(self, request, message, returncode=None):
        super().__init__(message)
        self.request = request
        self.message = message
        self.returncode = returncode

    def __str__(self):
        return f"{self.request.username} (UID {self.request.uid}): {self.message}"


# -----------------------------------------------------------------------------------------
#                                Names
# -----------------------------------------------------------------------------------------


class StrComparable(str):
    """Base class for making str subclasses comparable to themselves or str
    instances.   Note that intentionally not even subclasses are comparable,
    only a class and str.
    """

    def _check_class(self, other):
        """Comparable if type(other) is type(self) or str.   TypeError othewise."""
        if type(other) not in [str, type(None), type(self)]:
            raise TypeError(f"{type(self)} cannot be compared to {type(other)}.")

    def __eq__(self, other):
        self._check_class(other)
        return str(self) == str(other)

    def __hash__(self):
        return hash(str(self))


class UserName(StrComparable):
    """Name acceptable to useradd and /etc/passwd on Debian/Ubuntu systems."""

    MAX_LEN: int = 32

    # From: https://systemd.io/USER_NAMES/
    @classmethod
    def is_valid(cls, name: str) -> bool:
        """Return True IFF `name` should work as a UNIX user name."""
        return bool(
            isinstance(name, str)
            and len(name) <= cls.MAX_LEN
            and name.isascii()
            and re.match("^[a-z][a-z0-9-]{0,31}$", name)
        )

    def __new__(cls, value):
        if not cls.is_valid(value):
            raise ValueError(f"Value is not a valid UNIX user name: {value}")
        return super().__new__(cls, value)


class ShellPath(StrComparable):
    """Absolute path of a login shell,  e.g. /bin/bash."""

    def __new__(cls, value):
        if not isinstance(value, str):
            raise TypeError("Shell is not a string.")
        if not value.startswith("/") or re.search(r"[\s:]", value):
            raise ValueError(f"Shell must be an absolute path without spaces or colons: {value}")
        return super().__new__(cls, value)


# -----------------------------------------------------------------------------------------
#                                Integer Ids and Ranges
# -----------------------------------------------------------------------------------------


class RangedId(int):
    """Baseclass for the unix ids handed to the account-creation primitive."""

    min_id: int | None = None
    max_id: int | None = None

    def __new__(cls, value):
        cls.validate(value)
        return super().__new__(cls, value)

    @classmethod
    def validate(cls, value):
        if not isinstance(value, int) or isinstance(value, bool):
            raise TypeError("Value is not an integer")
        if value < cls.min_id or value > cls.max_id:
            raise ValueError(
                f"Value is not in the valid range {cls.min_id} to {cls.max_id}"
            )


class Uid(RangedId):
    """ID corresponding to a user defined in /etc/passwd.  (uid_t)-1 is
    reserved by the kernel to mean "no change" and is excluded.
    """

    min_id = 0
    max_id = 2**32 - 2


# -----------------------------------------------------------------------------------------
#                                Identity
# -----------------------------------------------------------------------------------------


@dataclass(frozen=True)
class Identity:
    """The effective identity the process runs under."""

    euid: int
    name: str = ""

    @property
    def is_admin(self) -> bool:
        return self.euid == 0

    def __str__(self):
        return f"{self.name or self.euid} (euid {self.euid})"


# -----------------------------------------------------------------------------------------
#                               Requests & Results
# -----------------------------------------------------------------------------------------


@dataclass(frozen=True)
class AccountRequest:
    """Everything the account-creation primitive needs to add one user.
    Home directories are never created by the primitive itself;  when
    `home` is set it is expected to be provisioned elsewhere.
    """

    username: UserName
    uid: Uid
    shell: ShellPath
    home: PurePosixPath | None = None
    create_home: bool = False

    def passwd_line(self) -> str:
        """Render the request in /etc/passwd layout with a personal gid."""
        home = str(self.home) if self.home is not None else ""
        return f"{self.username}:x:{self.uid}:{self.uid}::{home}:{self.shell}"


@dataclass
class ProvisionResult:
    """Outcome of one primitive call."""

    request: AccountRequest
    elapsed: float
    error: ProvisionError | None = None
    home_missing: bool = False

    @property
    def ok(self) -> bool:
        return self.error is None

    def to_dict(self) -> dict:
        return {
            "username": str(self.request.username),
            "uid": int(self.request.uid),
            "shell": str(self.request.shell),
            "home": str(self.request.home) if self.request.home is not None else None,
            "elapsed": round(self.elapsed, 6),
            "status": "created" if self.ok else "failed",
            "error": self.error.message if self.error else None,
            "home_missing": self.home_missing,
        }


@dataclass
class BatchReport:
    """All results of one provisioning run."""

    strict: bool = False
    results: list[ProvisionResult] = field(default_factory=list)

    @property
    def failures(self) -> list[ProvisionResult]:
        return [result for result in self.results if not result.ok]

    @property
    def exit_code(self) -> int:
        """Permissive runs always succeed;  strict runs fail if any account did."""
        return 1 if self.strict and self.failures else 0


# -----------------------------------------------------------------------------------------


__all__ = [
    "SeedUsersError",
    "PrivilegeError",
    "ConfigError",
    "LockError",
    "ProvisionError",
    "StrComparable",
    "UserName",
    "ShellPath",
    "RangedId",
    "Uid",
    "Identity",
    "AccountRequest",
    "ProvisionResult",
    "BatchReport",
]
