"""Mock Anthropic objects: Message, content blocks, usage, and a scripted client.

Invariants:
    - _Block supports model_dump(exclude_none) like the SDK's pydantic blocks
    - FakeClient returns scripted responses in order and records every call's params
"""


class _Block:
    """Mock content block (text, tool_use)."""

    def __init__(self, **kwargs):
        self._data = kwargs
        for k, v in kwargs.items():
            setattr(self, k, v)

    def model_dump(self, exclude_none=False):
        d = dict(self._data)
        if exclude_none:
            d = {k: v for k, v in d.items() if v is not None}
        return d


class _Usage:
    def __init__(
        self, input_tokens=100, output_tokens=50,
        cache_creation_input_tokens=0, cache_read_input_tokens=0,
    ):
        self.input_tokens = input_tokens
        self.output_tokens = output_tokens
        self.cache_creation_input_tokens = cache_creation_input_tokens
        self.cache_read_input_tokens = cache_read_input_tokens


class _Message:
    def __init__(self, content, stop_reason="end_turn", usage=None):
        self.content = content
        self.stop_reason = stop_reason
        self.usage = usage or _Usage()


def text_block(text: str) -> _Block:
    return _Block(type="text", text=text, citations=None)


def tool_use_block(id: str, name: str, input: dict) -> _Block:
    return _Block(type="tool_use", id=id, name=name, input=input)


def message(*blocks, stop_reason="end_turn", **usage) -> _Message:
    return _Message(list(blocks), stop_reason=stop_reason, usage=_Usage(**usage))


class FakeClient:
    """Stands in for ResilientAnthropicClient."""

    def __init__(self, *responses):
        self._responses = list(responses)
        self.calls: list[dict] = []

    async def create_message(self, *, context=None, **params):
        self.calls.append(params)
        return self._responses.pop(0)
