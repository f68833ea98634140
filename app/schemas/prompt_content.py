# app/schemas/prompt_content.py
"""
Prompt content as a tagged union on ``kind``.

Each prompt row stores one of these models (dumped by alias) in its JSON
``content`` column. ``build_content`` creates content for a new prompt,
``parse_content`` reads a stored payload back into the right model.
"""
from typing import Annotated, Any, Dict, Literal, Optional, Union

from pydantic import BaseModel, ConfigDict, Field, TypeAdapter, field_validator, model_validator

PromptKind = Literal["mcq", "short_text", "long_text", "slide"]

DEFAULT_TITLES: Dict[str, str] = {
    "mcq": "New multiple choice prompt",
    "short_text": "New short response prompt",
    "long_text": "New long response prompt",
    "slide": "New slide",
}

DEFAULT_DETAILS: Dict[str, str] = {
    "mcq": "Add options and customize your question.",
    "short_text": "Describe what students should answer.",
    "long_text": "Describe what students should write about.",
    "slide": "Upload supporting materials or add talking points.",
}

DEFAULT_RESPONSE_PROMPT = "Tap to edit response instructions"


class _ContentBase(BaseModel):
    model_config = ConfigDict(populate_by_name=True, extra="ignore")

    title: str
    detail: str = ""


class McqContent(_ContentBase):
    kind: Literal["mcq"] = "mcq"
    question: str
    options: list[str] = Field(default_factory=list)
    correct_option_index: Optional[int] = Field(None, alias="correctOptionIndex")

    @field_validator("options", mode="before")
    @classmethod
    def clean_options(cls, v: Any) -> list[str]:
        if not isinstance(v, list):
            return []
        cleaned = [opt.strip() if isinstance(opt, str) else "" for opt in v]
        return [opt for opt in cleaned if opt]

    @field_validator("correct_option_index", mode="before")
    @classmethod
    def drop_non_int_index(cls, v: Any) -> Optional[int]:
        # bools are ints in python; neither they nor floats count as an index
        if isinstance(v, bool) or not isinstance(v, int):
            return None
        return v

    @model_validator(mode="after")
    def clamp_correct_index(self) -> "McqContent":
        idx = self.correct_option_index
        if idx is not None and not (0 <= idx < len(self.options)):
            self.correct_option_index = None
        return self


class ShortTextContent(_ContentBase):
    kind: Literal["short_text"] = "short_text"
    prompt: str = DEFAULT_RESPONSE_PROMPT
    char_limit: Optional[int] = Field(None, alias="charLimit", gt=0)


class LongTextContent(_ContentBase):
    kind: Literal["long_text"] = "long_text"
    prompt: str = DEFAULT_RESPONSE_PROMPT
    word_limit: Optional[int] = Field(None, alias="wordLimit", gt=0)
    rubric_hint: Optional[str] = Field(None, alias="rubricHint")


class SlideContent(_ContentBase):
    kind: Literal["slide"] = "slide"
    asset_url: Optional[str] = Field(None, alias="assetUrl")
    asset_path: Optional[str] = Field(None, alias="assetPath")
    asset_type: Optional[Literal["image", "pdf"]] = Field(None, alias="assetType")
    asset_name: Optional[str] = Field(None, alias="assetName")
    page: Optional[int] = None
    total_pages: Optional[int] = Field(None, alias="totalPages")


PromptContent = Annotated[
    Union[McqContent, ShortTextContent, LongTextContent, SlideContent],
    Field(discriminator="kind"),
]

_content_adapter = TypeAdapter(PromptContent)


def parse_content(kind: str, raw: Optional[Dict[str, Any]]) -> PromptContent:
    """Read a stored content payload, trusting the row's kind over the payload's."""
    data = dict(raw or {})
    data["kind"] = kind
    data.setdefault("title", DEFAULT_TITLES.get(kind, ""))
    if kind == "mcq":
        data.setdefault("question", data["title"])
    return _content_adapter.validate_python(data)


def dump_content(content: PromptContent) -> Dict[str, Any]:
    return content.model_dump(by_alias=True)


def build_content(kind: str, meta: Dict[str, Any]) -> PromptContent:
    """
    Content for a new (or re-edited) prompt.
    - title/detail fall back to per-kind defaults
    - mcq: options trimmed, blank options dropped, bad correct index -> None
    - mcq question falls back to the title
    """
    title = _clean_str(meta.get("title")) or DEFAULT_TITLES[kind]
    detail = meta.get("detail")
    detail = detail.strip() if isinstance(detail, str) else DEFAULT_DETAILS[kind]

    if kind == "mcq":
        return McqContent(
            title=title,
            detail=detail,
            question=_clean_str(meta.get("question")) or title,
            options=meta.get("options") or [],
            correct_option_index=meta.get("correctOptionIndex"),
        )
    if kind == "short_text":
        return ShortTextContent(
            title=title,
            detail=detail,
            prompt=_clean_str(meta.get("prompt")) or DEFAULT_RESPONSE_PROMPT,
            char_limit=meta.get("charLimit"),
        )
    if kind == "long_text":
        return LongTextContent(
            title=title,
            detail=detail,
            prompt=_clean_str(meta.get("prompt")) or DEFAULT_RESPONSE_PROMPT,
            word_limit=meta.get("wordLimit"),
            rubric_hint=_clean_str(meta.get("rubricHint")),
        )
    if kind == "slide":
        return SlideContent(
            title=title,
            detail=detail,
            asset_url=meta.get("assetUrl"),
            asset_path=meta.get("assetPath"),
            asset_type=meta.get("assetType"),
            asset_name=meta.get("assetName"),
            page=meta.get("page"),
            total_pages=meta.get("totalPages"),
        )
    raise ValueError(f"unknown prompt kind: {kind!r}")


def _clean_str(value: Any) -> Optional[str]:
    if not isinstance(value, str):
        return None
    value = value.strip()
    return value or None
