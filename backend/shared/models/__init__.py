"""Shared data models for the deploy bot."""

from .deploy_queue import DeployQueueError, EmptyQueueError, Holder, Matcher, QueueEntry, matches

__all__ = [
    "DeployQueueError",
    "EmptyQueueError",
    "Holder",
    "Matcher",
    "QueueEntry",
    "matches",
]
