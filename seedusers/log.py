"""This module provides a Log class for logging diagnostics in a simple way.
Optionally the log format can be configured as JSON event messages, one per
line, instead of plain text.

Diagnostics are written to stderr so that stdout carries only the
provisioning report.
"""

import os
import sys
import socket
import traceback
import datetime
import json

# ========================================================================================

NULL_TIME = "0001-01-01T01:01"


def get_host_id():
    name = os.environ.get("HOSTNAME") or socket.gethostname() or "0"
    return name.split(".")[0]


def now():
    return trim_time(datetime.datetime.now().isoformat("T"))


def trim_time(t):
    """Trim subseconds to milliseconds and drop any timezone."""
    if t is None:
        return NULL_TIME
    if "." not in t:
        return t[:19]
    return t[: t.index(".") + 4]


# ========================================================================================


class Log:
    def __init__(self, subsystem, json_mode=False, debug_mode=False, stream=None):
        self.json_mode = json_mode
        self.debug_mode = debug_mode
        self.subsystem = subsystem
        self.stream = stream
        self.host_id = get_host_id()
        self.environment = os.environ.get("ENVIRONMENT", "unknown-environment")
        self.deployment = os.environ.get("DEPLOYMENT_NAME", "seedusers")

    def set_level(self, level):
        """If level is "DEBUG" then enable debug mode and output log.debug
        messages.   Otherwise mute log.debug messages."""
        old, self.debug_mode = self.debug_mode, level == "DEBUG"
        return old

    def set_json_mode(self, events: bool = False):
        """When False output events as plain text.  When True output JSON."""
        old, self.json_mode = self.json_mode, events
        return old

    def log(self, kind, *args, **keys):
        return self._log(kind, now(), *args, **keys)

    def _log(self, kind, timestamp, *args, **keys):
        d = dict(keys)
        d["status"] = kind
        d["subsystem"] = self.subsystem
        d["host"] = self.host_id
        d["timestamp"] = timestamp
        d["message"] = " ".join([str(arg) for arg in args])
        d["service"] = self.deployment
        d["env"] = self.environment
        json_mode = d.pop("json_mode", self.json_mode)
        stream = self.stream or sys.stderr
        if json_mode:
            print(json.dumps(d, default=str), file=stream)
        else:
            print(
                d["timestamp"],
                kind,
                ":",
                self.deployment,
                ":",
                self.environment,
                ":",
                self.subsystem,
                ":",
                d["message"],
                file=stream,
            )
        stream.flush()
        return d

    def debug(self, *args, **keys):
        if self.debug_mode:
            return self.log("DEBUG", *args, **keys)

    def info(self, *args, **keys):
        return self.log("INFO", *args, **keys)

    def warning(self, *args, **keys):
        return self.log("WARN", *args, **keys)

    def error(self, *args, **keys):
        return self.log("ERROR", *args, **keys)

    def critical(self, *args, **keys):
        return self.log("CRITICAL", *args, **keys)

    def exception(self, exc, *args, **keys):
        keys = dict(keys)
        keys.update(
            {
                "error.stack": traceback.format_exc(),
                "error.message": " ".join([str(arg) for arg in args]),
                "error.kind": exc.__class__.__name__,
            }
        )
        return self.error(*args, json_mode=True, **keys)
