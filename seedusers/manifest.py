"""YAML manifest of a provisioning run.

The manifest is a table of the form

    {"entries": [{"username": "user0", "uid": 100000, "shell": "/bin/bash",
                  "home": None, "elapsed": 0.0123, "status": "created",
                  "error": None, "home_missing": False},
                 ...]}

with one entry per attempted account,  in the order attempted.
"""

import yaml

from seedusers.types import BatchReport


def to_table(report: BatchReport) -> dict:
    return {"entries": [result.to_dict() for result in report.results]}


def write_manifest(path, report: BatchReport) -> None:
    with open(path, "w") as f:
        yaml.dump(to_table(report), f, sort_keys=False)


def load_manifest(path) -> dict:
    with open(path, "r") as f:
        return yaml.safe_load(f)
