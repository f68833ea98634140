# app/services/slide_ingest.py
"""
One PDF in, one slide prompt per page out.

The PDF is rasterized page by page (see pdf_render), every PNG is uploaded
to the slides bucket under the session's folder, and a slide prompt that
points at the image is appended for each page.
"""
from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional
import logging
import os
import tempfile
import uuid

from fastapi import HTTPException
from sqlalchemy.orm import Session

from app.config import settings
from app.models.prompts import Prompt
from app.models.sessions import ClassSession
from app.schemas.prompt_content import SlideContent, dump_content
from app.services.pdf_render import PdfRenderError, PdfRenderer, PdfToolsMissing, looks_like_pdf
from app.services.prompt_service import ordered_prompts
from app.services.storage_service import SlideStorage

logger = logging.getLogger(__name__)

PDF_MIME_TYPES = {"application/pdf", "application/x-pdf"}


@dataclass
class IngestResult:
    session_id: int
    page_count: int
    prompts: List[Prompt] = field(default_factory=list)
    images: List[Dict[str, Any]] = field(default_factory=list)


def build_storage_path(session_id: int, page_number: int) -> str:
    return f"{session_id}/{uuid.uuid4()}-page-{page_number}.png"


def _slide_title(custom_title: Optional[str], page: int, page_count: int, slide_index: int) -> str:
    if custom_title and page_count == 1:
        return custom_title
    if custom_title:
        return f"{custom_title} (page {page})"
    return f"Slide {slide_index + 1}"


def ingest_pdf(
    db: Session,
    storage: SlideStorage,
    renderer: PdfRenderer,
    session: ClassSession,
    user_id: str,
    data: bytes,
    content_type: Optional[str],
    filename: Optional[str],
    title: Optional[str] = None,
    detail: Optional[str] = None,
) -> IngestResult:
    mime = (content_type or "").lower()
    if mime and mime not in PDF_MIME_TYPES:
        raise HTTPException(status_code=415, detail="Only PDF uploads are supported")
    if not looks_like_pdf(data):
        raise HTTPException(status_code=415, detail="Uploaded file does not look like a PDF")

    title = (title or "").strip() or None
    detail = (detail or "").strip() or "Uploaded from PDF"
    uploaded: List[str] = []

    with tempfile.TemporaryDirectory(prefix="pdf-upload-") as tmpdir:
        pdf_path = os.path.join(tmpdir, "source.pdf")
        with open(pdf_path, "wb") as f:
            f.write(data)

        try:
            page_count = renderer.page_count(pdf_path)
            if page_count > settings.max_pdf_pages:
                raise HTTPException(
                    status_code=400,
                    detail=f"PDF has {page_count} pages; max allowed is {settings.max_pdf_pages}",
                )
            pages = renderer.render(pdf_path, tmpdir)
        except PdfToolsMissing:
            logger.exception("PDF tools missing")
            raise HTTPException(status_code=503, detail="PDF rendering tools are not available on the server")
        except PdfRenderError:
            logger.exception("PDF rendering failed for session %s", session.session_id)
            raise HTTPException(status_code=500, detail="Failed to process PDF")

        existing = ordered_prompts(db, session.session_id)
        result = IngestResult(session_id=session.session_id, page_count=page_count)

        try:
            for page in pages:
                storage_path = build_storage_path(session.session_id, page.page_number)
                with open(page.path, "rb") as f:
                    storage.upload(storage_path, f.read(), "image/png")
                uploaded.append(storage_path)
                public_url = storage.public_url(storage_path)

                slide_index = len(existing) + len(result.prompts)
                content = SlideContent(
                    title=_slide_title(title, page.page_number, page_count, slide_index),
                    detail=detail,
                    asset_url=public_url,
                    asset_path=storage_path,
                    asset_type="image",
                    asset_name=filename,
                    page=page.page_number,
                    total_pages=page_count,
                )
                prompt = Prompt(
                    session_id=session.session_id,
                    slide_index=slide_index,
                    kind="slide",
                    content=dump_content(content),
                    is_open=False,
                    released=False,
                    created_by=user_id,
                )
                db.add(prompt)
                result.prompts.append(prompt)
                result.images.append({"page": page.page_number, "path": storage_path, "publicUrl": public_url})
            db.flush()
        except Exception:
            logger.exception("slide ingest failed for session %s, removing %d uploads", session.session_id, len(uploaded))
            try:
                storage.remove(uploaded)
            except Exception:
                logger.exception("cleanup of uploaded slides failed")
            raise HTTPException(status_code=500, detail="Failed to store slides")

    logger.info("session %s: %d slides ingested from %s", session.session_id, page_count, filename)
    return result
