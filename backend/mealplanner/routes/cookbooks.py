"""
Meal Planner Backend - Cookbook Routes
======================================

What:  POST /upload-cookbook (multipart field `cookbookFile`) and GET /cookbooks.

Request Flow (upload):
    1. BodySizeLimitMiddleware has already refused declared bodies over the cap
    2. Starlette parses the multipart body; FastAPI hands us the UploadFile
    3. The whole file is read into memory and re-checked against the cap
    4. CookbookService writes the blob, then the metadata record

Responses:
    200 {"success": true, "message": "Cookbook uploaded successfully."}
    400 {"success": false, "message": "No file uploaded."}
    413 file over MAX_UPLOAD_SIZE
    500 {"success": false, "message": "Failed to upload cookbook."}
"""

import logging
from typing import Optional

from fastapi import APIRouter, Depends, File, UploadFile
from sqlalchemy.ext.asyncio import AsyncSession

from mealplanner.config import settings
from mealplanner.database import get_db_session
from mealplanner.exceptions import ClientInputError, PayloadTooLargeError
from mealplanner.schemas.common import ErrorResponse
from mealplanner.schemas.cookbook import CookbookListResponse, UploadCookbookResponse
from mealplanner.services.cookbook_service import cookbook_service

logger = logging.getLogger(__name__)

router = APIRouter(tags=["Cookbooks"])


@router.post(
    "/upload-cookbook",
    response_model=UploadCookbookResponse,
    responses={
        400: {"description": "No file uploaded", "model": ErrorResponse},
        413: {"description": "File too large", "model": ErrorResponse},
        500: {"description": "Blob or document store failure", "model": ErrorResponse},
    },
    summary="Upload a cookbook file",
)
async def upload_cookbook(
    cookbook_file: Optional[UploadFile] = File(
        default=None,
        alias="cookbookFile",
        description="Cookbook file (any type, max 100MB)",
    ),
    db: AsyncSession = Depends(get_db_session),
) -> UploadCookbookResponse:
    # Browsers send an empty, nameless part when no file was chosen
    if cookbook_file is None or not cookbook_file.filename:
        raise ClientInputError(message="No file uploaded.", field="cookbookFile")

    try:
        if cookbook_file.size is not None and cookbook_file.size > settings.max_upload_size:
            raise PayloadTooLargeError(settings.max_upload_size, cookbook_file.size)

        content = await cookbook_file.read()
        if len(content) > settings.max_upload_size:
            raise PayloadTooLargeError(settings.max_upload_size, len(content))

        logger.info(
            "Received cookbook upload: filename=%s, size=%d bytes, type=%s",
            cookbook_file.filename,
            len(content),
            cookbook_file.content_type,
        )

        await cookbook_service.upload_cookbook(
            db,
            filename=cookbook_file.filename,
            content=content,
            content_type=cookbook_file.content_type,
        )
        return UploadCookbookResponse()
    finally:
        await cookbook_file.close()


@router.get(
    "/cookbooks",
    response_model=CookbookListResponse,
    responses={500: {"description": "Document store failure", "model": ErrorResponse}},
    summary="List all uploaded cookbooks",
)
async def list_cookbooks(db: AsyncSession = Depends(get_db_session)) -> CookbookListResponse:
    cookbooks = await cookbook_service.list_cookbooks(db)
    return CookbookListResponse(cookbooks=cookbooks)
