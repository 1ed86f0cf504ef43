"""Stage 4: Stream Decoder. Split the raw body into reasoning and content.

The transport delivers opaque byte chunks. A chunk may hold zero, one or
several complete lines, and a line (or a multi-byte character) may straddle
two chunks. Bytes are decoded incrementally at the chunk boundary so split
characters survive; the line splitter then buffers the trailing partial line
until its newline arrives.

Each complete `data:` line is parsed as a JSON fragment and two optional
fields are read:
  choices[0].delta.reasoning_content  -> "reasoning" event
  choices[0].delta.content            -> "content" event
Every non-empty increment is appended to its accumulator and emitted at once,
reasoning before content within one line. Anything else (keep-alives,
comments, `[DONE]`, junk) is ignored. At end of stream an unterminated line
is discarded, never guessed at.

Services that ignore `stream: true` answer with one plain JSON body. When a
body carried no event frames at all it is parsed once as a whole: a
chat-completion object contributes `choices[0].message.*`, any other JSON
object is taken verbatim as the content.
"""
import codecs
import json
import logging
from collections.abc import AsyncIterable, Callable

from models.events import StreamEvent
from models.generation import DecodedStream

logger = logging.getLogger(__name__)

_DATA_PREFIX = "data:"
_DONE_MARKER = "[DONE]"

# Upper bound on the body kept for the non-streamed fallback. Streams with
# event frames never need it.
_MAX_PLAIN_BODY_CHARS = 1_000_000


class StreamDecoder:
    """Per-call decoding state. Never shared between calls."""

    def __init__(self) -> None:
        self._decoder = codecs.getincrementaldecoder("utf-8")(errors="replace")
        self._pending = ""
        self._reasoning: list[str] = []
        self._content: list[str] = []
        self._frames = 0
        self._plain_body: list[str] = []
        self._plain_size = 0

    def feed(self, chunk: bytes) -> list[StreamEvent]:
        """Consume one transport chunk; return the events it completed, in order."""
        text = self._decoder.decode(chunk)
        if not text:
            return []
        self._keep_plain(text)

        lines = (self._pending + text).split("\n")
        self._pending = lines.pop()  # "" when the chunk ended on a newline

        events: list[StreamEvent] = []
        for line in lines:
            events.extend(self._parse_line(line.rstrip("\r")))
        return events

    def finish(self) -> tuple[DecodedStream, list[StreamEvent]]:
        """Close the stream; return the accumulators and any late events.

        Late events only occur for non-streamed bodies, which are parsed here.
        """
        tail = self._decoder.decode(b"", final=True)
        self._keep_plain(tail)
        if self._pending or tail:
            logger.debug("Discarding unterminated trailing line (%d chars).",
                         len(self._pending) + len(tail))
        self._pending = ""

        events: list[StreamEvent] = []
        if self._frames == 0 and self._plain_body:
            events = self._parse_plain_body("".join(self._plain_body))

        return (
            DecodedStream(reasoning="".join(self._reasoning), content="".join(self._content)),
            events,
        )

    # -----------------------------------------------------------------------
    # Parsing
    # -----------------------------------------------------------------------

    def _parse_line(self, line: str) -> list[StreamEvent]:
        if not line.startswith(_DATA_PREFIX):
            return []
        data = line[len(_DATA_PREFIX):].strip()
        if not data or data == _DONE_MARKER:
            return []
        try:
            fragment = json.loads(data)
        except json.JSONDecodeError:
            logger.debug("Ignoring unparsable event line: %.80s", data)
            return []

        self._frames += 1
        return self._accumulate(_first_choice_field(fragment, "delta"))

    def _parse_plain_body(self, body: str) -> list[StreamEvent]:
        body = body.strip()
        if not body:
            return []
        try:
            payload = json.loads(body)
        except json.JSONDecodeError:
            logger.debug("Non-streamed body is not JSON; ignoring (%d chars).", len(body))
            return []
        if not isinstance(payload, dict):
            return []

        if "choices" in payload:
            logger.debug("Decoding non-streamed chat completion body.")
            return self._accumulate(_first_choice_field(payload, "message"))

        logger.debug("Decoding bare JSON body as content.")
        return self._accumulate({"content": body})

    def _accumulate(self, fields: dict) -> list[StreamEvent]:
        events: list[StreamEvent] = []
        reasoning = fields.get("reasoning_content")
        if isinstance(reasoning, str) and reasoning:
            self._reasoning.append(reasoning)
            events.append(StreamEvent(kind="reasoning", delta=reasoning))
        content = fields.get("content")
        if isinstance(content, str) and content:
            self._content.append(content)
            events.append(StreamEvent(kind="content", delta=content))
        return events

    def _keep_plain(self, text: str) -> None:
        if self._frames or not text or self._plain_size >= _MAX_PLAIN_BODY_CHARS:
            return
        self._plain_body.append(text)
        self._plain_size += len(text)


def _first_choice_field(payload: object, field: str) -> dict:
    """Return `payload["choices"][0][field]` or {} for any other shape."""
    if not isinstance(payload, dict):
        return {}
    choices = payload.get("choices")
    if not isinstance(choices, list) or not choices or not isinstance(choices[0], dict):
        return {}
    value = choices[0].get(field)
    return value if isinstance(value, dict) else {}


async def decode(
    raw_stream: AsyncIterable[bytes],
    on_event: Callable[[StreamEvent], None] | None = None,
) -> DecodedStream:
    """Drain `raw_stream`, reporting each event to `on_event` as it is decoded."""
    decoder = StreamDecoder()
    async for chunk in raw_stream:
        for event in decoder.feed(chunk):
            if on_event is not None:
                on_event(event)

    decoded, late_events = decoder.finish()
    for event in late_events:
        if on_event is not None:
            on_event(event)

    logger.debug("Stream decoded: %d reasoning chars, %d content chars.",
                 len(decoded.reasoning), len(decoded.content))
    return decoded
