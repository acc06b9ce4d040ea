"""
Running the external command-line tools everything else is built on (git, the browser, waitress, node, tasklist).

Every call comes back as a ToolResult rather than raising, so the sequences can decide for themselves whether a
failed step should stop them or just be reported.
"""


from dataclasses import dataclass
import enum
import shutil
import subprocess
import sys


class BuildError(Exception):
    """
    Base for everything this package raises on purpose.
    """


class ToolError(BuildError):
    """
    A tool failed and the caller can't carry on without its output.
    """

    def __init__(self, result, message=None):
        self.result = result
        if message is None:
            message = f"{' '.join(result.args)} failed"
            if result.stderr.strip():
                message += ": " + result.stderr.strip()
        super().__init__(message)


class ToolStatus(enum.Enum):
    OK = "ok"
    NOT_FOUND = "not found"
    FAILED = "failed"


@dataclass
class ToolResult:
    args: list
    status: ToolStatus
    returncode: int = 0
    stdout: str = ""
    stderr: str = ""

    @property
    def ok(self):
        return self.status is ToolStatus.OK


def _resolve(args):
    """
    Look the executable up on the PATH.
        Parameters:
            args (list): The command line.
        Returns:
            The command line with the executable replaced by its full path, or None if it isn't installed.
    """
    # Popen() doesn't look in the path for things like npm.cmd on Windows unless shell=True, hence which().
    executable = shutil.which(args[0])
    if executable is None:
        return None
    return [executable] + list(args[1:])


def run_tool(args, cwd=None, capture=True):
    """
    Run a command and wait for it to complete.
        Parameters:
            args (list):    The command line, executable first.
            cwd (str):      Directory to run in, defaults to the current one.
            capture (bool): True to capture stdout/stderr, False to let them go to the console.
        Returns:
            A ToolResult.
    """
    args = [str(arg) for arg in args]
    resolved = _resolve(args)
    if resolved is None:
        return ToolResult(args, ToolStatus.NOT_FOUND, returncode=-1, stderr=f"{args[0]}: command not found")

    # Hook messages and localized tool output aren't always valid in the locale's encoding.
    completed = subprocess.run(resolved, cwd=cwd, capture_output=capture, text=True, errors="replace")
    status = ToolStatus.OK if completed.returncode == 0 else ToolStatus.FAILED
    return ToolResult(args, status, completed.returncode, completed.stdout or "", completed.stderr or "")


def spawn_tool(args, cwd=None):
    """
    Start a long-lived process (server, browser) and return without waiting for it.
        Parameters:
            args (list): The command line, executable first.
            cwd (str):   Directory to run in, defaults to the current one.
        Returns:
            A ToolResult, OK meaning only that the process was started.
    """
    args = [str(arg) for arg in args]
    resolved = _resolve(args)
    if resolved is None:
        return ToolResult(args, ToolStatus.NOT_FOUND, returncode=-1, stderr=f"{args[0]}: command not found")

    if sys.platform == "win32":
        subprocess.Popen(resolved, cwd=cwd,
            creationflags=subprocess.DETACHED_PROCESS | subprocess.CREATE_NEW_PROCESS_GROUP)
    else:
        subprocess.Popen(resolved, cwd=cwd, start_new_session=True)
    return ToolResult(args, ToolStatus.OK)
