import logging
import threading
from collections.abc import Callable

from app.core.config import Settings, settings
from app.modules.backends.base import ExecutionBackend
from app.modules.backends.local import LocalBackend, probe_local_tool
from app.modules.backends.sandboxed import SandboxedBackend

logger = logging.getLogger("attestgate.backends")

LOCAL_MODES = frozenset({"local"})
SANDBOX_MODES = frozenset({"docker", "sandboxed"})


class BackendSelector:
    """Process-wide, lazily made backend choice.

    ``resolve`` picks the backend once; ``ready`` additionally prepares it. A
    failed preparation is not cached, so the next request retries it.
    """

    def __init__(
        self,
        config: Settings,
        *,
        probe: Callable[[str], bool] = probe_local_tool,
    ) -> None:
        self._config = config
        self._probe = probe
        self._backend: ExecutionBackend | None = None
        self._prepared = False
        self._resolve_lock = threading.Lock()
        self._prepare_lock = threading.Lock()

    def resolve(self) -> ExecutionBackend:
        backend = self._backend
        if backend is not None:
            return backend
        with self._resolve_lock:
            if self._backend is None:
                self._backend = self._select()
                logger.info(
                    "backend_resolved",
                    extra={"event_name": "backend_resolved", "backend": self._backend.name},
                )
            return self._backend

    def prepare(self, backend: ExecutionBackend) -> None:
        if self._prepared:
            return
        # Held across the build so concurrent requests wait on one preparation.
        with self._prepare_lock:
            if self._prepared:
                return
            backend.prepare()
            self._prepared = True

    def ready(self) -> ExecutionBackend:
        backend = self.resolve()
        self.prepare(backend)
        return backend

    def install(self, backend: ExecutionBackend, *, prepared: bool = True) -> None:
        with self._resolve_lock, self._prepare_lock:
            self._backend = backend
            self._prepared = prepared

    def reset(self) -> None:
        with self._resolve_lock, self._prepare_lock:
            self._backend = None
            self._prepared = False

    def _select(self) -> ExecutionBackend:
        mode = self._config.normalized_mode
        if mode in LOCAL_MODES:
            return self._local()
        if mode in SANDBOX_MODES:
            return self._sandboxed()
        if self._probe(self._config.c2patool_bin):
            return self._local()
        return self._sandboxed()

    def _local(self) -> LocalBackend:
        return LocalBackend(
            tool=self._config.c2patool_bin,
            work_dir=self._config.resolved_work_dir,
            manifest=self._config.manifest_path,
            trust_bundle=self._config.trust_bundle_path,
            timeout=self._config.invocation_timeout_seconds,
        )

    def _sandboxed(self) -> SandboxedBackend:
        return SandboxedBackend(
            image=self._config.c2pa_docker_image,
            work_dir=self._config.resolved_work_dir,
            manifest=self._config.manifest_path,
            trust_bundle=self._config.trust_bundle_path,
            docker_bin=self._config.docker_bin,
            build_context=self._config.docker_build_context,
            mount_point=self._config.sandbox_mount_point,
            timeout=self._config.invocation_timeout_seconds,
        )


_selector = BackendSelector(settings)


def get_backend_selector() -> BackendSelector:
    return _selector
