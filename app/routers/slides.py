from typing import Optional

from fastapi import APIRouter, Depends, File, Form, HTTPException, UploadFile
from sqlalchemy.orm import Session

from app.deps import CurrentUser, ensure_role, get_current_user, get_db, get_renderer, get_storage
from app.models.prompts import Prompt
from app.schemas.prompt import PromptOut, SlideAssetIn
from app.schemas.prompt_content import dump_content, parse_content
from app.services import session_service
from app.services.pdf_render import PdfRenderer
from app.services.slide_ingest import ingest_pdf
from app.services.storage_service import SlideStorage

router = APIRouter(prefix="/api", tags=["slides"])


# PDF -> one slide prompt per page (sync so poppler runs in the threadpool)
@router.post("/slides/upload")
@router.post("/uploads")
def upload_slides(
    file: UploadFile = File(...),
    session_id: Optional[int] = Form(None),
    sessionId: Optional[int] = Form(None),
    title: Optional[str] = Form(None),
    detail: Optional[str] = Form(None),
    db: Session = Depends(get_db),
    user: CurrentUser = Depends(get_current_user),
    storage: SlideStorage = Depends(get_storage),
    renderer: PdfRenderer = Depends(get_renderer),
):
    target_id = session_id if session_id is not None else sessionId
    if target_id is None:
        raise HTTPException(status_code=400, detail="session_id is required")

    ensure_role(user, "teacher", "Only teachers can upload slides.")
    session = session_service.get_session_or_404(db, target_id)
    session_service.ensure_owner(session, user, "Only the session owner can upload slides.")

    data = file.file.read()
    result = ingest_pdf(
        db,
        storage,
        renderer,
        session,
        user.id,
        data,
        content_type=file.content_type,
        filename=file.filename,
        title=title,
        detail=detail,
    )
    return {
        "session_id": result.session_id,
        "page_count": result.page_count,
        "createdSlides": len(result.prompts),
        "images": result.images,
        "prompts": [PromptOut.model_validate(p).model_dump(mode="json") for p in result.prompts],
    }


# attach an already-uploaded asset to the slide at slideIndex
@router.post("/slides/asset", response_model=PromptOut)
def attach_slide_asset(
    payload: SlideAssetIn,
    db: Session = Depends(get_db),
    user: CurrentUser = Depends(get_current_user),
):
    ensure_role(user, "teacher", "Only teachers can update slides.")
    session = session_service.get_session_or_404(db, payload.session_id)
    session_service.ensure_owner(session, user)

    prompt = (
        db.query(Prompt)
        .filter(
            Prompt.session_id == session.session_id,
            Prompt.slide_index == payload.slide_index,
            Prompt.kind == "slide",
        )
        .first()
    )
    if prompt is None:
        raise HTTPException(status_code=404, detail="No slide found at that position")

    content = parse_content(prompt.kind, prompt.content)
    content.asset_url = payload.asset_url
    content.asset_path = payload.storage_path
    content.asset_type = payload.asset_type
    content.asset_name = payload.asset_name
    prompt.content = dump_content(content)
    db.flush()
    return prompt
