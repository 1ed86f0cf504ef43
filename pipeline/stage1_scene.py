"""Stage 1: Scene Catalog. Resolve a scene id to its SceneSetting.

Total function over its input: unknown ids, a `custom` scene without text,
and any setting that fails validation all fall back to the default scene.
"""
import logging

from pydantic import ValidationError

from models.scene import SceneSetting

logger = logging.getLogger(__name__)

DEFAULT_SCENE_ID = "default"
CUSTOM_SCENE_ID = "custom"

_SCENES: dict[str, SceneSetting] = {
    "default": SceneSetting(
        background="现代日常生活",
        description="在日常生活场景中描述该单词的含义和用法",
    ),
    "harrypotter": SceneSetting(
        background="哈利波特魔法世界",
        description="在霍格沃茨魔法学校或魔法世界中展现该单词的含义",
    ),
    "zhenhuanchuan": SceneSetting(
        background="甄嬛传宫廷",
        description="在清朝宫廷中展现该单词的含义",
    ),
}


def resolve(scene_id: str | None, custom_text: str | None = None) -> SceneSetting:
    """Return the setting for `scene_id`; never raises."""
    key = (scene_id or "").strip().lower()

    if key == CUSTOM_SCENE_ID:
        return _custom_scene(custom_text)

    setting = _SCENES.get(key)
    if setting is None:
        if key and key != DEFAULT_SCENE_ID:
            logger.warning("Unknown scene %r; using default scene.", scene_id)
        return _SCENES[DEFAULT_SCENE_ID]
    return setting


def available_scenes() -> list[str]:
    """Scene ids in display order, ending with the free-text `custom` scene."""
    return [*_SCENES, CUSTOM_SCENE_ID]


def _custom_scene(custom_text: str | None) -> SceneSetting:
    text = (custom_text or "").strip()
    if not text:
        logger.warning("Custom scene selected without text; using default scene.")
        return _SCENES[DEFAULT_SCENE_ID]
    try:
        return SceneSetting(background=text, description=f"在{text}中展现该单词的含义")
    except ValidationError as exc:
        logger.warning("Invalid custom scene (%s); using default scene.", exc)
        return _SCENES[DEFAULT_SCENE_ID]
