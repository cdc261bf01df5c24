from __future__ import annotations

import subprocess

import structlog

from zpool_safety.errors import CommandError

log = structlog.get_logger(__name__)


class CommandRunner:
    """Runs an external tool to completion and returns its stdout."""

    def run(self, cmd: list[str]) -> str:
        log.debug("command.run", cmd=" ".join(cmd))
        try:
            return subprocess.check_output(cmd, text=True, stderr=subprocess.PIPE)
        except FileNotFoundError:
            raise CommandError(cmd, "executable not found") from None
        except subprocess.CalledProcessError as e:
            reason = (e.stderr or "").strip() or f"exit status {e.returncode}"
            raise CommandError(cmd, reason) from e
        except OSError as e:
            raise CommandError(cmd, str(e)) from e
