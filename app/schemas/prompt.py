from pydantic import BaseModel, ConfigDict, Field
from datetime import datetime
from typing import Any, Dict, List, Literal, Optional

# -- Request --

class PromptCreateIn(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    session_id: int = Field(..., alias="sessionId")
    kind: Literal["mcq", "short_text", "long_text", "slide"]
    slide_index: Optional[int] = Field(None, alias="slideIndex")
    create_new_slide: bool = Field(False, alias="createNewSlide")
    title: Optional[str] = None
    detail: Optional[str] = None
    # mcq
    question: Optional[str] = None
    options: Optional[List[Any]] = None
    correct_option_index: Optional[Any] = Field(None, alias="correctOptionIndex")
    # short_text / long_text
    prompt: Optional[str] = None
    char_limit: Optional[int] = Field(None, alias="charLimit")
    word_limit: Optional[int] = Field(None, alias="wordLimit")
    rubric_hint: Optional[str] = Field(None, alias="rubricHint")

class ReorderIn(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    session_id: int = Field(..., alias="sessionId")
    prompt_ids: List[int] = Field(..., alias="promptIds")

class SlideAssetIn(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    session_id: int = Field(..., alias="sessionId")
    slide_index: int = Field(..., alias="slideIndex")
    asset_url: str = Field(..., min_length=1, alias="assetUrl")
    storage_path: Optional[str] = Field(None, alias="storagePath")
    asset_type: Literal["image", "pdf"] = Field(..., alias="assetType")
    asset_name: Optional[str] = Field(None, alias="assetName")

# -- Response --

class PromptOut(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    prompt_id: int
    session_id: int
    slide_index: int
    kind: str
    content: Dict[str, Any]
    is_open: bool
    released: bool
    created_at: Optional[datetime] = None
