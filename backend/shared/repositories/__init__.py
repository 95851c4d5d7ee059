"""Shared repository layer for the deploy bot."""

from .deploy_queue import DeployQueue

__all__ = [
    "DeployQueue",
]
