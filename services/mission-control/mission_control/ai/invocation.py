import logging

from ..config import CapabilityFlags
from ..schemas.actions import AiInvocationRequest, AiInvocationResult

logger = logging.getLogger(__name__)

DISABLED_MESSAGE = "AI invocation is disabled."
DEFAULT_DRAFT = "Help me decide what matters most today."


def _local_reply(draft: str) -> str:
    # Offline stub: no provider is wired in.
    focus = draft.strip() or DEFAULT_DRAFT
    return f"{focus} Start with the one action at the top of Mission Control."


def invoke_ai(request: AiInvocationRequest, capabilities: CapabilityFlags) -> AiInvocationResult:
    if not capabilities.AI_INVOCATION_ENABLED:
        logger.debug("AI invocation skipped: capability disabled")
        return AiInvocationResult(status="disabled", message=DISABLED_MESSAGE, aiContext=request.aiContext)
    return AiInvocationResult(
        status="ok",
        message="Reply generated locally.",
        reply=_local_reply(request.draft),
        aiContext=request.aiContext,
    )
