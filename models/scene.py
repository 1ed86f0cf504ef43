from pydantic import BaseModel, ConfigDict, field_validator


class SceneSetting(BaseModel):
    """Thematic backdrop injected into the prompt.

    Both strings must be non-empty; the scene catalog never hands out a setting
    that fails this check (it falls back to the default scene instead).
    """

    model_config = ConfigDict(frozen=True)

    background: str   # e.g. "现代日常生活"
    description: str  # instruction for the image description

    @field_validator("background", "description")
    @classmethod
    def must_not_be_blank(cls, v: str) -> str:
        v = v.strip()
        if not v:
            raise ValueError("background and description must not be empty")
        return v
