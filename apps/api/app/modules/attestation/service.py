import logging
from dataclasses import dataclass
from pathlib import Path
from time import perf_counter

from app.core.errors import ArtifactMissing, InvocationFailure
from app.modules.backends.base import InvocationResult
from app.modules.backends.selector import BackendSelector
from app.modules.payload_codec.codec import (
    EncodedPayload,
    decode,
    encode,
    extension_for,
    media_type_for_extension,
)
from app.modules.staging.service import StagingArea

logger = logging.getLogger("attestgate.attestation")


@dataclass(frozen=True)
class SignOutcome:
    artifact_name: str
    artifact_payload: EncodedPayload


@dataclass(frozen=True)
class VerifyOutcome:
    ok: bool
    output: str
    error: str


def interpret_sign(
    result: InvocationResult,
    *,
    output_path: Path,
    extension: str,
    staging: StagingArea,
) -> SignOutcome:
    if not result.succeeded:
        message = result.stderr.strip() or result.stdout.strip() or None
        raise InvocationFailure(message)

    try:
        signed = staging.read(output_path)
    except FileNotFoundError as exc:
        raise ArtifactMissing() from exc

    return SignOutcome(
        artifact_name=output_path.name,
        artifact_payload=encode(signed, media_type_for_extension(extension)),
    )


def interpret_verify(result: InvocationResult) -> VerifyOutcome:
    return VerifyOutcome(
        ok=result.succeeded,
        output=result.stdout.strip(),
        error=result.stderr.strip(),
    )


def _log_invocation(
    operation: str, backend: str, result: InvocationResult, started: float
) -> None:
    logger.info(
        "attestation_invoked",
        extra={
            "event_name": "attestation_invoked",
            "operation": operation,
            "backend": backend,
            "exit_code": result.exit_code,
            "status": "ok" if result.succeeded else "failed",
            "latency_ms": round((perf_counter() - started) * 1000, 2),
        },
    )


def sign_image(
    *,
    image_name: str | None,
    image_data: object,
    staging: StagingArea,
    selector: BackendSelector,
    keep_output: bool = True,
) -> SignOutcome:
    image = decode(image_data, file_name=image_name)
    extension = extension_for(image_name)
    backend = selector.ready()

    output_path = staging.reserve_output_path(extension)
    started = perf_counter()
    with staging.staged_input(image.data, prefix="in", extension=extension) as staged:
        result = backend.sign(staged.path, output_path)
    _log_invocation("sign", backend.name, result, started)

    try:
        outcome = interpret_sign(
            result, output_path=output_path, extension=extension, staging=staging
        )
    finally:
        if not keep_output:
            staging.discard(output_path)

    logger.info(
        "image_signed",
        extra={"event_name": "image_signed", "file_name": outcome.artifact_name},
    )
    return outcome


def verify_image(
    *,
    image_name: str | None,
    image_data: object,
    staging: StagingArea,
    selector: BackendSelector,
) -> VerifyOutcome:
    image = decode(image_data, file_name=image_name)
    extension = extension_for(image_name)
    backend = selector.ready()

    started = perf_counter()
    with staging.staged_input(image.data, prefix="verify", extension=extension) as staged:
        result = backend.verify(staged.path)
    _log_invocation("verify", backend.name, result, started)

    return interpret_verify(result)
