from pathlib import Path

from app.modules.backends.base import (
    ExecutionBackend,
    InvocationResult,
    run_command,
    sign_arguments,
    verify_arguments,
)


PROBE_TIMEOUT_SECONDS = 10.0


class LocalBackend(ExecutionBackend):
    """Runs the tool found on the host, with host-absolute paths."""

    name = "local"

    def __init__(
        self,
        *,
        tool: str,
        work_dir: Path,
        manifest: str,
        trust_bundle: str,
        timeout: float | None = None,
    ) -> None:
        self.tool = tool
        self.work_dir = work_dir
        self.manifest = manifest
        self.trust_bundle = trust_bundle
        self.timeout = timeout

    def sign(self, input_path: Path, output_path: Path) -> InvocationResult:
        args = sign_arguments(
            str(input_path),
            str(output_path),
            manifest=self.manifest,
            trust_bundle=self.trust_bundle,
        )
        return run_command([self.tool, *args], cwd=self.work_dir, timeout=self.timeout)

    def verify(self, input_path: Path) -> InvocationResult:
        args = verify_arguments(str(input_path), trust_bundle=self.trust_bundle)
        return run_command([self.tool, *args], cwd=self.work_dir, timeout=self.timeout)


def probe_local_tool(tool: str) -> bool:
    """True when ``<tool> --help`` exits cleanly on the host."""
    return run_command([tool, "--help"], timeout=PROBE_TIMEOUT_SECONDS).succeeded
