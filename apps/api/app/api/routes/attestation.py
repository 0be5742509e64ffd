import logging
from typing import Annotated

from fastapi import APIRouter, Depends

from app.core.config import settings
from app.core.openapi import SIGN_ERROR_RESPONSES, VERIFY_ERROR_RESPONSES
from app.modules.attestation.service import sign_image, verify_image
from app.modules.backends.selector import BackendSelector, get_backend_selector
from app.modules.staging.service import StagingArea, get_staging_area
from app.schemas.attestation import ImageRequest, SignResponse, VerifyResponse

router = APIRouter(prefix="/api", tags=["attestation"])
Staging = Annotated[StagingArea, Depends(get_staging_area)]
Selector = Annotated[BackendSelector, Depends(get_backend_selector)]
logger = logging.getLogger("attestgate.api")


# Plain ``def`` endpoints: FastAPI runs them in its threadpool, so the blocking
# tool invocation never stalls the event loop.
@router.post(
    "/sign",
    response_model=SignResponse,
    summary="Sign Image",
    description="Embeds a provenance manifest into the submitted image and returns the result.",
    responses=SIGN_ERROR_RESPONSES,
)
def sign_endpoint(payload: ImageRequest, staging: Staging, selector: Selector) -> SignResponse:
    outcome = sign_image(
        image_name=payload.image_name,
        image_data=payload.image_data,
        staging=staging,
        selector=selector,
        keep_output=settings.keep_signed_outputs,
    )
    return SignResponse(
        file_name=outcome.artifact_name,
        data_url=outcome.artifact_payload.to_data_url(),
    )


@router.post(
    "/verify",
    response_model=VerifyResponse,
    summary="Verify Image",
    description=(
        "Checks the provenance manifest of the submitted image against the trust anchors. "
        "A failed verification is reported with `ok: false` and HTTP 200."
    ),
    responses=VERIFY_ERROR_RESPONSES,
)
def verify_endpoint(payload: ImageRequest, staging: Staging, selector: Selector) -> VerifyResponse:
    outcome = verify_image(
        image_name=payload.image_name,
        image_data=payload.image_data,
        staging=staging,
        selector=selector,
    )
    if not outcome.ok:
        logger.info(
            "verification_negative",
            extra={"event_name": "verification_negative", "file_name": payload.image_name},
        )
    return VerifyResponse(ok=outcome.ok, output=outcome.output, error=outcome.error)
