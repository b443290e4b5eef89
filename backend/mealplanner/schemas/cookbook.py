"""
Meal Planner Backend - Cookbook Schemas
=======================================

What:  Response models for POST /upload-cookbook and GET /cookbooks.

The upload request itself is multipart (`cookbookFile` field) and is parsed
by Starlette, not by a pydantic model.
"""

import uuid
from datetime import datetime
from typing import List

from pydantic import Field

from mealplanner.schemas.common import ApiModel


class UploadCookbookResponse(ApiModel):
    success: bool = Field(default=True)
    message: str = Field(default="Cookbook uploaded successfully.")


class CookbookItem(ApiModel):
    """One document of the `cookbooks` collection."""

    id: uuid.UUID
    name: str = Field(description="Original filename")
    storage_path: str = Field(description="Blob key of the stored file")
    uploaded_at: datetime
    content_type: str
    size_bytes: int


class CookbookListResponse(ApiModel):
    """All uploaded cookbooks, in no guaranteed order."""

    success: bool = Field(default=True)
    cookbooks: List[CookbookItem]
