from __future__ import annotations


class CollectionError(Exception):
    """Pool state could not be read; no report can be produced."""


class CommandError(CollectionError):
    def __init__(self, cmd: list[str], reason: str) -> None:
        self.cmd = list(cmd)
        self.reason = reason
        super().__init__(f"command failed: {' '.join(self.cmd)}: {reason}")


class ParseError(CollectionError):
    def __init__(self, cmd: list[str], text: str, what: str = "output") -> None:
        self.cmd = list(cmd)
        self.text = text
        super().__init__(f"cannot parse {what} of {' '.join(self.cmd)}: {text!r}")


class NoDisksFound(CollectionError):
    def __init__(self, pool: str) -> None:
        self.pool = pool
        super().__init__(f"no member disks found in pool {pool!r}")
