# sandbox/commands.py
import pathlib, shlex, shutil, subprocess
from typing import List, Optional, Union
from ..utils.config import get_settings
from ..utils.logger import get_logger

log = get_logger("Commands")

PathLike = Union[str, pathlib.Path]

class CommandError(Exception):
    """Raised when an external tool is missing or a checked command fails."""
    def __init__(self, code: str, message: str):
        self.code = code
        super().__init__(message)

def run_command(cmd: List[str], cwd: Optional[PathLike] = None, *, check: bool = False) -> int:
    """
    Runs `cmd` with `cwd` as its working directory and returns the exit code.
    The calling process never changes directory.
    """
    executable = shutil.which(cmd[0])
    if executable is None:
        raise CommandError("missing", f"required tool not found in PATH: {cmd[0]}")

    log.info(f"Running in {cwd or '.'}: {' '.join(shlex.quote(str(c)) for c in cmd)}")
    res = subprocess.run(
        [executable] + [str(c) for c in cmd[1:]],
        cwd=str(cwd) if cwd is not None else None,
        capture_output=True,
        text=True,
    )
    log.info(f"Exited with return code: {res.returncode}")
    if res.stdout:
        log.info(f"stdout: {res.stdout.rstrip()}")
    if res.stderr:
        log.info(f"stderr: {res.stderr.rstrip()}")

    if check and res.returncode != 0:
        error_msg = f"Command failed ({res.returncode}): {' '.join(str(c) for c in cmd)}\n{res.stderr}"
        log.error(error_msg)
        raise CommandError("exit", error_msg)
    return res.returncode

def git(args: List[str], cwd: Optional[PathLike] = None, *, check: bool = False) -> int:
    return run_command([get_settings().git_bin] + args, cwd, check=check)

def cabal(args: List[str], cwd: Optional[PathLike] = None, *, check: bool = False) -> int:
    return run_command([get_settings().cabal_bin] + args, cwd, check=check)

def elm_make(binary: PathLike, project_dir: PathLike) -> int:
    """Builds the project in `project_dir` with GHC's time/alloc profiler on (+RTS -p)."""
    return run_command([str(binary), "+RTS", "-p"], project_dir)

def succeeded(returncode: int) -> bool:
    return returncode == 0
