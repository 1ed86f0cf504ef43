from pydantic import BaseModel, ConfigDict, Field, field_validator


class GenerationRequest(BaseModel):
    """One call's input. Created per `generate()` call, never persisted."""

    model_config = ConfigDict(frozen=True)

    word: str
    scene_id: str | None = "default"
    custom_scene_text: str | None = None

    @field_validator("word")
    @classmethod
    def word_must_not_be_blank(cls, v: str) -> str:
        v = v.strip()
        if not v:
            raise ValueError("word must not be empty")
        return v

    @field_validator("scene_id")
    @classmethod
    def normalise_scene_id(cls, v: str | None) -> str:
        return (v or "").strip().lower() or "default"


class DecodedStream(BaseModel):
    """Fully assembled accumulators of one decoded response."""

    reasoning: str = ""
    content: str = ""


class GenerationResult(BaseModel):
    """The validated scene card.

    The model emits Chinese keys; both those wire aliases and the Python field
    names are accepted on input. `to_payload()` serialises back to the wire keys.
    """

    model_config = ConfigDict(frozen=True, populate_by_name=True, strict=True)

    english_word: str = Field(alias="英语")
    keyword_breakdown: str = Field(alias="关键词")
    worldview: str = Field(alias="世界观")
    image_description: str = Field(alias="图像描述")

    def to_payload(self) -> dict[str, str]:
        return self.model_dump(by_alias=True)
