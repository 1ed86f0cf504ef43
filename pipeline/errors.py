"""Classified failures of the generation pipeline.

Every failure that leaves `generate()` is one of these. `str(err)` is the
diagnostic text for logs; `err.user_message` is the short text shown in the
popup. Neither ever contains the credential or an unbounded upstream payload.
"""

_SNIPPET_LIMIT = 200


def bounded_snippet(text: str | None, limit: int = _SNIPPET_LIMIT) -> str | None:
    """Trim diagnostic text to `limit` characters, marking the cut."""
    if text is None:
        return None
    if len(text) <= limit:
        return text
    return text[:limit] + "…"


class PipelineError(Exception):
    kind = "pipeline_error"
    user_message = "生成描述失败，请稍后重试"
    retryable = False

    def __init__(
        self,
        detail: str = "",
        *,
        status: int | None = None,
        snippet: str | None = None,
    ) -> None:
        self.detail = detail
        self.status = status
        self.snippet = bounded_snippet(snippet)
        super().__init__(self._describe())

    def _describe(self) -> str:
        text = self.kind
        if self.status is not None:
            text += f" [{self.status}]"
        if self.detail:
            text += f": {self.detail}"
        if self.snippet:
            text += f" (snippet={self.snippet!r})"
        return text


class MissingCredential(PipelineError):
    kind = "missing_credential"
    user_message = "请先设置 API Key"


class Timeout(PipelineError):
    kind = "timeout"
    user_message = "请求超时，请稍后重试"
    retryable = True


class TransientHttp(PipelineError):
    kind = "transient_http"
    user_message = "服务暂时不可用，请稍后重试"
    retryable = True


class TransportFailure(TransientHttp):
    """Network-level failure before any HTTP status was received."""

    kind = "transport_failure"
    user_message = "网络连接失败，请检查网络后重试"


class FatalHttp(PipelineError):
    kind = "fatal_http"
    user_message = "请求被拒绝，请检查 API 配置"


class MalformedPayload(PipelineError):
    kind = "malformed_payload"
    user_message = "API 返回数据格式错误"


class ExtractionFailed(PipelineError):
    kind = "extraction_failed"
    user_message = "生成的内容格式不正确"


def classify_status(status: int) -> type[PipelineError] | None:
    """Map an HTTP status code to its error class; `None` means success."""
    if 200 <= status < 300:
        return None
    if status in (401, 403):
        return FatalHttp
    if status == 429 or 500 <= status < 600:
        return TransientHttp
    return FatalHttp
