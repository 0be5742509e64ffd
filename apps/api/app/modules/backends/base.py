import logging
import subprocess
from abc import ABC, abstractmethod
from collections.abc import Sequence
from dataclasses import dataclass
from pathlib import Path

logger = logging.getLogger("attestgate.invoker")


@dataclass(frozen=True)
class InvocationResult:
    succeeded: bool
    exit_code: int | None
    stdout: str
    stderr: str
    timed_out: bool = False


def run_command(
    cmd: Sequence[str],
    *,
    cwd: Path | None = None,
    timeout: float | None = None,
) -> InvocationResult:
    """Run *cmd* to completion and capture both streams, without judging the exit code."""
    # Messages carry the base name only, never the host path.
    program = Path(cmd[0]).name
    try:
        proc = subprocess.run(
            list(cmd),
            capture_output=True,
            text=True,
            errors="replace",
            cwd=cwd,
            timeout=timeout,
            check=False,
        )
    except subprocess.TimeoutExpired as exc:
        logger.warning("invocation_timed_out", extra={"event_name": "invocation_timed_out"})
        return InvocationResult(
            succeeded=False,
            exit_code=None,
            stdout=_as_text(exc.stdout),
            stderr=f"{program} timed out after {timeout:g} seconds",
            timed_out=True,
        )
    except FileNotFoundError:
        return InvocationResult(
            succeeded=False,
            exit_code=None,
            stdout="",
            stderr=f"command not found: {program}",
        )

    return InvocationResult(
        succeeded=proc.returncode == 0,
        exit_code=proc.returncode,
        stdout=proc.stdout or "",
        stderr=proc.stderr or "",
    )


def _as_text(value: str | bytes | None) -> str:
    if value is None:
        return ""
    if isinstance(value, bytes):
        return value.decode("utf-8", errors="replace")
    return value


def sign_arguments(input_path: str, output_path: str, *, manifest: str, trust_bundle: str) -> list[str]:
    return [
        input_path,
        "-m",
        manifest,
        "-o",
        output_path,
        "-f",
        "trust",
        "--trust_anchors",
        trust_bundle,
    ]


def verify_arguments(input_path: str, *, trust_bundle: str) -> list[str]:
    return [input_path, "trust", "--trust_anchors", trust_bundle]


class ExecutionBackend(ABC):
    """Where and how the attestation tool runs."""

    name: str

    def prepare(self) -> None:
        """Make the backend ready to run the tool. Must be idempotent."""

    @abstractmethod
    def sign(self, input_path: Path, output_path: Path) -> InvocationResult: ...

    @abstractmethod
    def verify(self, input_path: Path) -> InvocationResult: ...
