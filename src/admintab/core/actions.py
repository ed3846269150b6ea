"""Invocation of ajax/popup action handlers."""

from __future__ import annotations

import logging

from .context import RequestContext
from .descriptors import ActionResult, TableDescriptor
from .grammar import ActionKind

__all__ = ["run_action"]

logger = logging.getLogger(__name__)

_CALLABLE_KINDS = (ActionKind.AJAX, ActionKind.POPUP)


def run_action(desc: TableDescriptor, action_id: str, ctx: RequestContext) -> ActionResult:
    """
    Run the handler of an ajax or popup action.

    Handler exceptions are logged and reported as a failed ActionResult so a broken
    button does not break the page.

    Raises:
        KeyError: If the descriptor has no such action.
        ValueError: If the action kind has no handler (jump, iframe, field_filter).
    """
    action = desc.action(action_id)
    if action.kind not in _CALLABLE_KINDS or action.handler is None:
        raise ValueError(f"action {action_id!r} of kind {action.kind.value!r} has no handler")
    logger.info("running action %s.%s for %s", desc.name, action_id, ctx.user)
    try:
        result = action.handler(ctx)
    except Exception as exc:
        logger.exception("action %s.%s failed", desc.name, action_id)
        return ActionResult(success=False, message=str(exc) or type(exc).__name__)
    if not isinstance(result, ActionResult):
        logger.warning(
            "action %s.%s returned %s, not an ActionResult",
            desc.name,
            action_id,
            type(result).__name__,
        )
        return ActionResult(success=False, message="action returned no result")
    return result
