"""Running tool executables"""

import logging
import subprocess
from dataclasses import dataclass
from pathlib import Path
from typing import List, Optional, Sequence

from winprovision.domain.errors import ToolInvocationError

logger = logging.getLogger(__name__)


@dataclass
class CommandResult:
    """Exit code and captured output of a finished process"""

    args: List[str]
    exit_code: int
    stdout: str = ""
    stderr: str = ""

    @property
    def output(self) -> str:
        """stdout and stderr joined, stdout first"""
        return "\n".join(part for part in (self.stdout.strip(), self.stderr.strip()) if part)


def run_command(
    args: Sequence[str],
    timeout: Optional[float] = None,
    cwd: Optional[Path] = None,
    check: bool = True,
) -> CommandResult:
    """Run a command and capture its output

    Args:
        args: Executable and arguments
        timeout: Seconds before the process is killed (None = no limit)
        cwd: Working directory
        check: Raise on non-zero exit code

    Returns:
        CommandResult

    Raises:
        ToolInvocationError: If the process cannot start, times out, or exits
            non-zero while check is set
    """
    args = [str(a) for a in args]
    logger.debug(f"Running: {' '.join(args)}")
    try:
        completed = subprocess.run(
            args,
            capture_output=True,
            text=True,
            timeout=timeout,
            cwd=cwd,
        )
    except FileNotFoundError as e:
        raise ToolInvocationError(args, None, str(e)) from e
    except subprocess.TimeoutExpired as e:
        raise ToolInvocationError(args, None, f"timed out after {timeout}s") from e

    result = CommandResult(
        args=args,
        exit_code=completed.returncode,
        stdout=completed.stdout or "",
        stderr=completed.stderr or "",
    )
    if check and result.exit_code != 0:
        raise ToolInvocationError(args, result.exit_code, result.output)
    return result
