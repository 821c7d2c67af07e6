"""Command dispatching: requests in, result envelopes out."""

from .handler import (
    SUPPORTED_ACTIONS,
    CommandDispatcher,
    create_dispatcher,
    infer_branch_action,
)
from .models import CommandContext, CommandRequest, OperationResult

__all__ = [
    "CommandDispatcher",
    "create_dispatcher",
    "infer_branch_action",
    "CommandContext",
    "CommandRequest",
    "OperationResult",
    "SUPPORTED_ACTIONS",
]
