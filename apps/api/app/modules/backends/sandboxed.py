import logging
import uuid
from pathlib import Path, PurePosixPath

from app.core.errors import BackendUnavailable
from app.modules.backends.base import (
    ExecutionBackend,
    InvocationResult,
    run_command,
    sign_arguments,
    verify_arguments,
)

logger = logging.getLogger("attestgate.sandbox")

SANDBOX_TOOL = "c2patool"
CONTAINER_PREFIX = "attestgate"


class SandboxedBackend(ExecutionBackend):
    """Runs the tool inside a throwaway container with the work dir bind-mounted.

    Uses the docker CLI directly. Paths handed to the container are relative to
    the mount point, never host-absolute.
    """

    name = "sandboxed"

    def __init__(
        self,
        *,
        image: str,
        work_dir: Path,
        manifest: str,
        trust_bundle: str,
        docker_bin: str = "docker",
        build_context: str = ".",
        mount_point: str = "/app",
        timeout: float | None = None,
    ) -> None:
        self.image = image
        self.work_dir = work_dir.resolve()
        self.manifest = manifest
        self.trust_bundle = trust_bundle
        self.docker_bin = docker_bin
        self.build_context = build_context
        self.mount_point = mount_point
        self.timeout = timeout

    def prepare(self) -> None:
        inspect = run_command([self.docker_bin, "image", "inspect", self.image])
        if inspect.succeeded:
            return

        logger.info(
            "sandbox_image_build_started",
            extra={"event_name": "sandbox_image_build_started", "image": self.image},
        )
        build = run_command(
            [self.docker_bin, "build", "-t", self.image, self.build_context],
            cwd=self.work_dir,
        )
        if not build.succeeded:
            logger.error(
                "sandbox_image_build_failed",
                extra={
                    "event_name": "sandbox_image_build_failed",
                    "image": self.image,
                    "exit_code": build.exit_code,
                },
            )
            detail = build.stderr.strip() or build.stdout.strip()
            message = f"Failed to build Docker image {self.image}"
            raise BackendUnavailable(f"{message}: {detail}" if detail else message)

        logger.info(
            "sandbox_image_built",
            extra={"event_name": "sandbox_image_built", "image": self.image},
        )

    def sign(self, input_path: Path, output_path: Path) -> InvocationResult:
        args = sign_arguments(
            self.mounted_path(input_path),
            self.mounted_path(output_path),
            manifest=self.manifest,
            trust_bundle=self.trust_bundle,
        )
        return self._run_tool(args)

    def verify(self, input_path: Path) -> InvocationResult:
        args = verify_arguments(self.mounted_path(input_path), trust_bundle=self.trust_bundle)
        return self._run_tool(args)

    def mounted_path(self, path: Path) -> str:
        """*path* relative to the mounted work dir, in container (POSIX) form."""
        try:
            relative = path.resolve().relative_to(self.work_dir)
        except ValueError as exc:
            raise BackendUnavailable(f"{path.name} is outside the sandbox mount") from exc
        return PurePosixPath(*relative.parts).as_posix()

    def run_command_line(self, args: list[str], *, container_name: str) -> list[str]:
        return [
            self.docker_bin,
            "run",
            "--rm",
            "--name",
            container_name,
            "-v",
            f"{self.work_dir}:{self.mount_point}",
            "-w",
            self.mount_point,
            self.image,
            SANDBOX_TOOL,
            *args,
        ]

    def _run_tool(self, args: list[str]) -> InvocationResult:
        container_name = f"{CONTAINER_PREFIX}_{uuid.uuid4().hex}"
        result = run_command(
            self.run_command_line(args, container_name=container_name), timeout=self.timeout
        )
        if result.timed_out:
            # Killing the client leaves the container running; remove it explicitly.
            self._remove_container(container_name)
        return result

    def _remove_container(self, container_name: str) -> None:
        removal = run_command([self.docker_bin, "rm", "-f", container_name])
        if not removal.succeeded:
            logger.warning(
                "sandbox_container_removal_failed",
                extra={
                    "event_name": "sandbox_container_removal_failed",
                    "image": self.image,
                    "exit_code": removal.exit_code,
                },
            )
