"""Safety document routes.

Uploads arrive as multipart form data; the file is written under
``UPLOAD_DIR`` and only its path is stored with the record.
"""

import logging
from typing import List, Optional

from fastapi import APIRouter, File, Form, UploadFile, status

from api.routes.auth import CurrentUserDep
from core.dependencies import EntityStoreDep
from schemas.document import SafetyDocument, SafetyDocumentCreate
from utils.uploads import discard_upload, save_upload

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api/documents", tags=["Documents"])


def _split_tags(tags: Optional[str]) -> List[str]:
    if not tags:
        return []
    return [tag.strip() for tag in tags.split(",") if tag.strip()]


@router.get("", response_model=List[SafetyDocument], summary="List documents")
async def list_documents(
    store: EntityStoreDep,
    current_user: CurrentUserDep,
    category: Optional[str] = None,
    search: Optional[str] = None,
) -> List[SafetyDocument]:
    """List documents, searched or filtered by category.

    ``search`` takes precedence over ``category`` when both are given.
    """
    if search:
        return await store.search_documents(search)
    if category:
        return await store.get_documents_by_category(category)
    return await store.get_all_documents()


@router.post(
    "",
    response_model=SafetyDocument,
    status_code=status.HTTP_201_CREATED,
    summary="Upload a document",
)
async def upload_document(
    store: EntityStoreDep,
    current_user: CurrentUserDep,
    title: str = Form(..., min_length=1),
    category: str = Form(..., min_length=1),
    tags: Optional[str] = Form(None, description="Comma separated tags"),
    file: UploadFile = File(...),
) -> SafetyDocument:
    file_path = await save_upload(file)
    try:
        document = await store.create_document(
            SafetyDocumentCreate(
                title=title,
                category=category,
                file_path=file_path,
                uploaded_by=current_user.id,
                tags=_split_tags(tags),
            )
        )
    except Exception:
        discard_upload(file_path)
        raise
    logger.info("User %s uploaded document %s", current_user.username, document.id)
    return document
