"""Key=value output records for the calling automation."""

import os
from typing import Optional


class OutputSink:
    """
    Emits ``key=value`` records.

    Records are appended to the file named by ``GITHUB_OUTPUT`` when it is
    set, otherwise printed to stdout prefixed with ``OUTPUT``.
    """

    def __init__(self, path: Optional[str] = None):
        self.path = path if path is not None else os.environ.get('GITHUB_OUTPUT', '')

    def set_output(self, key: str, value: str) -> None:
        if self.path:
            with open(self.path, 'a', encoding='utf-8') as f:
                f.write(f"{key}={value}\n")
        else:
            print(f"OUTPUT {key}={value}")
