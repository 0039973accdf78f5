"""Request Metadata: routing and identity context attached to every inbound envelope.

Invariants:
    - No validation on construction: every field may be absent
    - thread present -> append to that conversation; absent -> consumer allocates a new thread
    - user is an UNVERIFIED display label. It must never reach an authentication
      or authorization path: it is whatever the upstream caller claims
      (e.g. the handle of a chat user talking to a bot)
"""

from pydantic import ConfigDict

from agentwire.core.domain_types import Principal, ThreadId, new_thread_id
from agentwire.schemas.wire import WireModel


class RequestMeta(WireModel):
    """Metadata for an agent or tool request."""
    model_config = ConfigDict(frozen=True)

    engine: Principal | None = None
    thread: ThreadId | None = None
    user: str | None = None

    @property
    def starts_new_thread(self) -> bool:
        return self.thread is None

    def resolve_thread(self) -> ThreadId:
        """Existing thread id, or a freshly allocated one when absent."""
        return self.thread if self.thread is not None else new_thread_id()
