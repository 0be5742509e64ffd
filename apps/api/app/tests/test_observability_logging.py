import base64
import json
import logging

import pytest
from fastapi.testclient import TestClient

from app.modules.backends.selector import BackendSelector
from app.observability.logging import JsonLogFormatter
from app.tests.stubs import JPEG_BYTES, StubBackend


def test_observability_logs_include_invocation_fields(
    client: TestClient,
    selector: BackendSelector,
    caplog: pytest.LogCaptureFixture,
) -> None:
    caplog.set_level(logging.INFO)
    selector.install(StubBackend(exit_code=2, stdout="mismatch"))

    verify = client.post(
        "/api/verify",
        json={"imageName": "a.jpg", "imageData": base64.b64encode(JPEG_BYTES).decode()},
    )
    assert verify.status_code == 200

    invocation_logs = [
        record
        for record in caplog.records
        if getattr(record, "event_name", None) == "attestation_invoked"
    ]
    assert invocation_logs
    invocation = invocation_logs[-1]
    assert getattr(invocation, "operation", None) == "verify"
    assert getattr(invocation, "backend", None) == "stub"
    assert getattr(invocation, "exit_code", None) == 2
    assert getattr(invocation, "status", None) == "failed"
    assert getattr(invocation, "latency_ms", None) is not None

    http_logs = [
        record for record in caplog.records if getattr(record, "event_name", None) == "http_request"
    ]
    assert any(getattr(record, "path", None) == "/api/verify" for record in http_logs)
    assert all(getattr(record, "status", None) is not None for record in http_logs)


def test_unhandled_errors_are_logged_with_traceback(
    client: TestClient,
    selector: BackendSelector,
    caplog: pytest.LogCaptureFixture,
) -> None:
    class _Exploding(StubBackend):
        def sign(self, input_path, output_path):  # type: ignore[no-untyped-def]
            raise RuntimeError("boom")

    caplog.set_level(logging.INFO)
    selector.install(_Exploding())

    response = client.post(
        "/api/sign",
        json={"imageName": "a.jpg", "imageData": base64.b64encode(JPEG_BYTES).decode()},
    )
    assert response.status_code == 500

    errors = [
        record
        for record in caplog.records
        if getattr(record, "event_name", None) == "unhandled_request_error"
    ]
    assert errors
    assert errors[-1].exc_info is not None
    assert getattr(errors[-1], "path", None) == "/api/sign"


def test_json_formatter_emits_extra_fields() -> None:
    record = logging.LogRecord(
        name="attestgate.attestation",
        level=logging.INFO,
        pathname=__file__,
        lineno=1,
        msg="attestation_invoked",
        args=(),
        exc_info=None,
    )
    record.event_name = "attestation_invoked"
    record.operation = "sign"
    record.exit_code = 0
    record.unrelated = "dropped"

    payload = json.loads(JsonLogFormatter().format(record))

    assert payload["level"] == "INFO"
    assert payload["logger"] == "attestgate.attestation"
    assert payload["message"] == "attestation_invoked"
    assert payload["operation"] == "sign"
    assert payload["exit_code"] == 0
    assert "unrelated" not in payload
    assert "timestamp" in payload
