"""Use cases do pipeline de mídia."""

from .process_backlog import BacklogOutcome, ProcessBacklogUseCase

__all__ = ["BacklogOutcome", "ProcessBacklogUseCase"]
