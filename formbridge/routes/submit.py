"""
FormBridge - Submit Route Handler
==================================

What:  POST /submit accepts the public form; OPTIONS /submit answers preflight.
How:   Reads the multipart form, separates text fields from the ``image``
       attachment, and delegates to the SubmissionService on app.state.
Who:   Called directly by the HTML form or by fetch() from a static site.

Request Flow:
    1. Parse multipart/form-data (urlencoded bodies work too, minus the image)
    2. First value wins for repeated text fields; files other than ``image`` are ignored
    3. An ``image`` part with no filename and no bytes counts as "no image"
    4. SubmissionService validates, uploads, appends
    5. 200 with the variant's payload; errors go through the global handlers
"""

import logging
from typing import Dict, Optional

from fastapi import APIRouter, Depends, Request, Response
from starlette.datastructures import UploadFile

from formbridge.schemas.submission import (
    CatalogSubmitResponse,
    ErrorResponse,
    PriceSubmitResponse,
)
from formbridge.services.submission_service import ImageUpload, SubmissionService

logger = logging.getLogger(__name__)

IMAGE_FIELD = "image"

router = APIRouter(tags=["Submissions"])


def get_submission_service(request: Request) -> SubmissionService:
    """FastAPI dependency: the service built for this application instance."""
    return request.app.state.submission_service


async def read_image(upload: UploadFile) -> Optional[ImageUpload]:
    content = await upload.read()
    if not upload.filename and not content:
        return None
    return ImageUpload(
        filename=upload.filename or "",
        content=content,
        content_type=upload.content_type,
    )


@router.post(
    "/submit",
    responses={
        200: {
            "description": "Submission stored. Body depends on the configured variant.",
            "content": {
                "application/json": {
                    "schema": {
                        "oneOf": [
                            PriceSubmitResponse.model_json_schema(by_alias=True),
                            CatalogSubmitResponse.model_json_schema(by_alias=True),
                        ]
                    }
                }
            },
        },
        400: {"description": "Missing required fields", "model": ErrorResponse},
        500: {"description": "Content store failure", "model": ErrorResponse},
    },
    summary="Submit a form entry",
    description=(
        "Multipart form with the variant's text fields and an optional `image` file. "
        "The image is committed to the repository and the entry is appended to the "
        "record-list JSON file."
    ),
)
async def submit(
    request: Request,
    service: SubmissionService = Depends(get_submission_service),
) -> dict:
    fields: Dict[str, str] = {}
    image: Optional[ImageUpload] = None

    form = await request.form()
    try:
        for key, value in form.multi_items():
            if isinstance(value, UploadFile):
                if key == IMAGE_FIELD and image is None:
                    image = await read_image(value)
                continue
            fields.setdefault(key, value)
    finally:
        await form.close()

    logger.info(
        "Received submission: %d fields, image=%s",
        len(fields),
        f"{image.filename} ({len(image.content)} bytes)" if image else "none",
    )

    result = await service.submit(fields, image)
    return result.model_dump(by_alias=True)


@router.options("/submit", include_in_schema=False)
async def submit_preflight() -> Response:
    """Bare OPTIONS (no CORS request headers) gets an empty 200 as well."""
    return Response(status_code=200)
