from pathlib import Path

from pydantic_settings import BaseSettings, SettingsConfigDict

BASE_DIR = Path(__file__).resolve().parents[2]


class Settings(BaseSettings):
    app_name: str = "attestgate-api"
    app_env: str = "development"
    app_host: str = "0.0.0.0"
    app_port: int = 8080

    log_level: str = "INFO"

    # "local" forces the host tool, "docker"/"sandboxed" forces the container;
    # anything else probes the host first.
    c2pa_mode: str = ""
    c2patool_bin: str = "c2patool"
    docker_bin: str = "docker"
    c2pa_docker_image: str = "c2pa-demo"
    docker_build_context: str = "."
    sandbox_mount_point: str = "/app"

    manifest_path: str = "manifest.json"
    trust_bundle_path: str = "C2PA-TRUST-BUNDLE.pem"

    work_dir: Path = Path.cwd()
    upload_dir: Path = Path("uploads")
    output_dir: Path = Path("signed")
    keep_signed_outputs: bool = True
    invocation_timeout_seconds: float | None = None

    static_dir: Path = Path("client/dist")

    model_config = SettingsConfigDict(
        env_file=(str(BASE_DIR / ".env"), ".env"),
        env_file_encoding="utf-8",
    )

    @property
    def resolved_work_dir(self) -> Path:
        return self.work_dir.resolve()

    @property
    def upload_path(self) -> Path:
        return self._under_work_dir(self.upload_dir)

    @property
    def output_path(self) -> Path:
        return self._under_work_dir(self.output_dir)

    @property
    def static_path(self) -> Path:
        return self._under_work_dir(self.static_dir)

    @property
    def normalized_mode(self) -> str:
        return self.c2pa_mode.strip().lower()

    def _under_work_dir(self, path: Path) -> Path:
        if path.is_absolute():
            return path
        return self.resolved_work_dir / path


settings = Settings()
