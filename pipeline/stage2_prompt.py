"""Stage 2: Prompt Composer. Render the instruction block for one word.

The template fixes the contract the extractor relies on:
  1. a single JSON object with exactly the four string fields, nothing else
  2. a simple, memorable phonetic/morphological breakdown of the word
  3. the meaning is embedded in the image description (bold or bracketed),
     never stated as a bare translation
  4. the scene background and description appear verbatim, so the model
     cannot invent its own setting

Interpolation points: `$word` (once), `$background` (twice: example and
format), `$description` (once).
"""
from string import Template

from models.scene import SceneSetting

_PROMPT_TEMPLATE = Template("""\
# Role
Create memory aids based on user input English words.
--------------
# Object
Requirements: Provide keywords and visual memory aids, but do not directly state the Chinese meaning. Instead, incorporate the meaning into the memory aids.
--------------
# Rules
Conditions:
1) The broken-down keywords must be simple and meaningful, based on how the word sounds or is built
2) Image descriptions must be reasonable, logical, engaging and have contrast
3) The word's [Chinese meaning] must be marked in bold or enclosed in parentheses (such as **公平**)
4) Must strictly follow the JSON format below: one JSON object with exactly the four fields 英语, 关键词, 世界观, 图像描述, all strings
5) Do not output any other content, do not output any other content, do not output any other content
6) Use emojis appropriately to add fun
7) For words with multiple meanings (e.g. noun vs verb), describe comprehensively based on context
8) Must strictly follow the given scene's worldview, no creating or modifying scene settings
--------------
# Example

{
    "英语": "justice",
    "关键词": "just（只）+ice（冰）",
    "世界观": "$background",
    "图像描述": "一个小孩跟妈妈抱怨被别的孩子打了。作为安慰，他只得到了一个冰激凌，但也算是**公平**地解决了"
}
--------------
# Format
{
    "英语": "$word",
    "关键词": "拆解的关键词",
    "世界观": "$background",
    "图像描述": "$description"
}""")


def compose(word: str, setting: SceneSetting) -> str:
    """Render the prompt for `word` in `setting`. Pure; never fails."""
    return _PROMPT_TEMPLATE.substitute(
        word=word,
        background=setting.background,
        description=setting.description,
    )
