# orientation/pipeline/__init__.py
# ============================================================
# Pipeline Package
# ============================================================
# Key classes:
#   - PipelineOrchestrator: document → pages → verdicts
#   - DocumentResult: Dataclass holding all pages' verdicts
#   - WorkDispatcher: parallel fan-out over a page list
# ============================================================

from orientation.pipeline.dispatcher import WorkDispatcher, resolve_worker_count
from orientation.pipeline.orchestrator import DocumentResult, PipelineOrchestrator

__all__ = ["DocumentResult", "PipelineOrchestrator", "WorkDispatcher", "resolve_worker_count"]
