"""Known OpenAI-compatible chat endpoints the add-on can talk to.

`base_url` excludes the `/chat/completions` suffix; the OpenAI SDK appends it.
"""
from pydantic import BaseModel, ConfigDict, Field


class EndpointPreset(BaseModel):
    model_config = ConfigDict(frozen=True)

    base_url: str
    model: str
    timeout_seconds: float = Field(gt=0.0)


ENDPOINT_PRESETS: dict[str, EndpointPreset] = {
    "siliconflow": EndpointPreset(
        base_url="https://api.siliconflow.cn/v1",
        model="deepseek-ai/DeepSeek-V3",
        timeout_seconds=60.0,
    ),
    "glm": EndpointPreset(
        base_url="https://open.bigmodel.cn/api/paas/v4",
        model="glm-4-flash",
        timeout_seconds=60.0,
    ),
    # Reasoning model: long "thinking" phase before the first content token
    "volcengine": EndpointPreset(
        base_url="https://ark.cn-beijing.volces.com/api/v3",
        model="ep-20250217174423-28s6w",
        timeout_seconds=180.0,
    ),
}
