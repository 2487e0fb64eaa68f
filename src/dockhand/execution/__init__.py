"""Workflows built on the engine verbs."""

from .container_runner import ContainerRunner, RunResult

__all__ = ["ContainerRunner", "RunResult"]
