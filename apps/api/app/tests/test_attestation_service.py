import base64
from pathlib import Path

import pytest

from app.core.errors import ArtifactMissing, BackendUnavailable, InvocationFailure, MalformedPayload
from app.modules.attestation.service import (
    interpret_verify,
    sign_image,
    verify_image,
)
from app.modules.backends.base import InvocationResult
from app.modules.backends.selector import BackendSelector
from app.modules.payload_codec.codec import decode
from app.modules.staging.service import StagingArea
from app.tests.stubs import JPEG_BYTES, StubBackend, staged_inputs

DATA_URL = "data:image/jpeg;base64," + base64.b64encode(JPEG_BYTES).decode()


class _UnpreparableBackend(StubBackend):
    def prepare(self) -> None:
        raise BackendUnavailable("Failed to build Docker image c2pa-demo")


class _CrashingBackend(StubBackend):
    def sign(self, input_path: Path, output_path: Path) -> InvocationResult:
        assert input_path.exists()
        raise OSError("fork failed")


def test_sign_success_returns_written_artifact(
    staging: StagingArea, selector: BackendSelector
) -> None:
    artifact = b"signed-bytes" * 64
    backend = StubBackend(artifact=artifact)
    selector.install(backend)

    outcome = sign_image(
        image_name="a.png", image_data=DATA_URL, staging=staging, selector=selector
    )

    assert outcome.artifact_name.startswith("signed_")
    assert outcome.artifact_name.endswith(".png")
    assert outcome.artifact_payload.media_type == "image/png"
    assert decode(outcome.artifact_payload.to_data_url()).data == artifact
    assert backend.seen_inputs == [JPEG_BYTES]
    assert staged_inputs(staging) == []
    assert (staging.output_dir / outcome.artifact_name).exists()


def test_sign_can_discard_output_after_read(
    staging: StagingArea, selector: BackendSelector
) -> None:
    selector.install(StubBackend(copy_input=True))

    outcome = sign_image(
        image_name="a.jpg",
        image_data=DATA_URL,
        staging=staging,
        selector=selector,
        keep_output=False,
    )

    assert not (staging.output_dir / outcome.artifact_name).exists()


def test_sign_failure_uses_stderr(staging: StagingArea, selector: BackendSelector) -> None:
    selector.install(StubBackend(exit_code=1, stderr="bad manifest\n", stdout="ignored"))

    with pytest.raises(InvocationFailure) as excinfo:
        sign_image(image_name="a.jpg", image_data=DATA_URL, staging=staging, selector=selector)

    assert excinfo.value.message == "bad manifest"
    assert staged_inputs(staging) == []


@pytest.mark.parametrize(
    ("stdout", "stderr", "expected"),
    [("tool said no", "", "tool said no"), ("", "  ", "Signing failed")],
)
def test_sign_failure_message_fallbacks(
    staging: StagingArea,
    selector: BackendSelector,
    stdout: str,
    stderr: str,
    expected: str,
) -> None:
    selector.install(StubBackend(exit_code=1, stdout=stdout, stderr=stderr))

    with pytest.raises(InvocationFailure) as excinfo:
        sign_image(image_name="a.jpg", image_data=DATA_URL, staging=staging, selector=selector)

    assert excinfo.value.message == expected


def test_sign_success_without_artifact_is_artifact_missing(
    staging: StagingArea, selector: BackendSelector
) -> None:
    selector.install(StubBackend(exit_code=0))

    with pytest.raises(ArtifactMissing):
        sign_image(image_name="a.jpg", image_data=DATA_URL, staging=staging, selector=selector)

    assert staged_inputs(staging) == []


def test_malformed_payload_never_reaches_backend(
    staging: StagingArea, selector: BackendSelector
) -> None:
    backend = StubBackend()
    selector.install(backend, prepared=False)

    with pytest.raises(MalformedPayload):
        sign_image(image_name="a.jpg", image_data="not-base64!!", staging=staging, selector=selector)

    assert backend.calls == []
    assert staged_inputs(staging) == []


def test_unavailable_backend_aborts_before_staging(
    staging: StagingArea, selector: BackendSelector
) -> None:
    backend = _UnpreparableBackend()
    selector.install(backend, prepared=False)

    with pytest.raises(BackendUnavailable):
        verify_image(image_name="a.jpg", image_data=DATA_URL, staging=staging, selector=selector)

    assert backend.calls == []
    assert staged_inputs(staging) == []


def test_exception_inside_invocation_still_releases_input(
    staging: StagingArea, selector: BackendSelector
) -> None:
    selector.install(_CrashingBackend())

    with pytest.raises(OSError):
        sign_image(image_name="a.jpg", image_data=DATA_URL, staging=staging, selector=selector)

    assert staged_inputs(staging) == []


@pytest.mark.parametrize("exit_code", [0, 1, 2])
def test_verify_reports_tool_outcome(
    staging: StagingArea, selector: BackendSelector, exit_code: int
) -> None:
    backend = StubBackend(exit_code=exit_code, stdout="  report\n", stderr="\nwarn ")
    selector.install(backend)

    outcome = verify_image(
        image_name="a.jpg", image_data=DATA_URL, staging=staging, selector=selector
    )

    assert outcome.ok is (exit_code == 0)
    assert outcome.output == "report"
    assert outcome.error == "warn"
    assert backend.calls[0][0] == "verify"
    assert backend.calls[0][1].name.startswith("verify_")
    assert staged_inputs(staging) == []


def test_interpret_verify_keeps_streams_verbatim_apart_from_trim() -> None:
    outcome = interpret_verify(
        InvocationResult(succeeded=False, exit_code=2, stdout="mismatch", stderr="")
    )

    assert (outcome.ok, outcome.output, outcome.error) == (False, "mismatch", "")
