"""Privilege guard run before any account is touched."""

import os
import pwd

from seedusers.types import Identity, PrivilegeError

NOT_ROOT_MESSAGE = "This script must be run as root."


def current_identity() -> Identity:
    """Return the effective identity of this process."""
    euid = os.geteuid()
    try:
        name = pwd.getpwuid(euid).pw_name
    except KeyError:
        name = str(euid)
    return Identity(euid, name)


def check_privilege(identity: Identity) -> None:
    """Raise PrivilegeError unless `identity` is administrative.  Fatal, no retries."""
    if not identity.is_admin:
        raise PrivilegeError(NOT_ROOT_MESSAGE)
