"""Memo text handed to the note-taking webhook (Flomo)."""
from models.generation import GenerationResult
from settings import Settings

SCENE_TAG = "#场景记忆"


def format_note(
    result: GenerationResult,
    tag: str | None = None,
    *,
    settings: Settings | None = None,
) -> str:
    """Render a scene card as a Markdown-ish memo.

    A blank `tag` falls back to `settings.default_tag`; SCENE_TAG is always
    appended.
    """
    tag = (tag or "").strip() or (settings or Settings()).default_tag
    return (
        f"📝 {result.english_word}\n"
        "\n"
        "---\n"
        "💡 助记拆解：\n"
        f"{result.keyword_breakdown}\n"
        "\n"
        "🌟 场景描述：\n"
        f"{result.image_description}\n"
        "\n"
        "\n"
        f"{tag} {SCENE_TAG}"
    )
