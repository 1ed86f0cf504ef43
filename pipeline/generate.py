"""Generation Pipeline: word + scene in, validated scene card out.

    idle → composing → dispatching → streaming → extracting → done
                            │             │           │
                            └─────────────┴───────────┴──→ failed

Composing (scene catalog + prompt composer) cannot fail. Dispatching may
loop through retry attempts inside the dispatcher. Streaming and extracting
are never retried: the upstream call already succeeded, so a bad payload is
surfaced to the caller, who may resubmit.

Each call owns its decoder and accumulators; the reasoning callback is a
per-call argument, so concurrent calls cannot see each other's progress.
"""
import logging
from collections.abc import Callable

import httpx

from models.events import GenerationState, StreamEvent
from models.generation import GenerationRequest, GenerationResult
from pipeline import stage1_scene, stage2_prompt, stage3_dispatch, stage4_decode, stage5_extract
from pipeline.errors import MissingCredential, PipelineError
from settings import Settings

logger = logging.getLogger(__name__)


async def generate(
    word: str,
    scene_id: str | None = "default",
    custom_text: str | None = None,
    credential: str | None = None,
    on_reasoning: Callable[[str], None] | None = None,
    *,
    settings: Settings | None = None,
    http_client: httpx.AsyncClient | None = None,
) -> GenerationResult:
    """Generate one scene card.

    `credential` falls back to `settings.api_key`. `on_reasoning` receives
    each reasoning delta in arrival order while the model is "thinking".

    Raises a PipelineError subclass on failure, and pydantic's
    ValidationError (a ValueError) when `word` is blank.
    """
    settings = settings or Settings()
    request = GenerationRequest(word=word, scene_id=scene_id, custom_scene_text=custom_text)
    credential = credential or settings.api_key
    state = GenerationState.IDLE

    try:
        if not credential or not credential.strip():
            raise MissingCredential("no API key configured")

        state = _advance(state, GenerationState.COMPOSING, request)
        setting = stage1_scene.resolve(request.scene_id, request.custom_scene_text)
        prompt = stage2_prompt.compose(request.word, setting)
        logger.debug("Prompt composed (%d chars, scene %r).", len(prompt), setting.background)

        state = _advance(state, GenerationState.DISPATCHING, request)
        async with stage3_dispatch.dispatch(
            prompt, credential.strip(), settings, http_client=http_client
        ) as body:
            state = _advance(state, GenerationState.STREAMING, request)
            decoded = await stage4_decode.decode(body, _reasoning_forwarder(on_reasoning))

        state = _advance(state, GenerationState.EXTRACTING, request)
        result = stage5_extract.extract(decoded.content, expected_word=request.word)
    except PipelineError as exc:
        logger.warning("Generation for %r failed while %s: %s", request.word, state.value, exc)
        _advance(state, GenerationState.FAILED, request)
        raise

    _advance(state, GenerationState.DONE, request)
    logger.info("Scene card generated for %r (%s).", request.word, result.worldview)
    return result


def _advance(
    current: GenerationState,
    new: GenerationState,
    request: GenerationRequest,
) -> GenerationState:
    logger.debug("[%s] %s → %s", request.word, current.value, new.value)
    return new


def _reasoning_forwarder(
    on_reasoning: Callable[[str], None] | None,
) -> Callable[[StreamEvent], None] | None:
    if on_reasoning is None:
        return None

    def forward(event: StreamEvent) -> None:
        if event.kind == "reasoning":
            on_reasoning(event.delta)

    return forward
