"""
Structured JSON logging for ingestion observability.

Provides structured logging with run IDs for correlating logs across
pipeline stages, plus context managers for stage and LLM call timing.
"""

import json
import logging
import sys
import time
from contextlib import contextmanager
from contextvars import ContextVar
from datetime import UTC, datetime

# Context variables for run correlation
run_id_var: ContextVar[str | None] = ContextVar("run_id", default=None)
stage_var: ContextVar[str | None] = ContextVar("stage", default=None)

_EXTRA_FIELDS = (
    "event",
    "duration_ms",
    "provider",
    "model",
    "source",
    "url",
    "items",
    "processed",
    "stories_created",
    "skipped",
    "pruned",
    "tokens_in",
    "tokens_out",
    "cost_usd",
)


# -----------------------------------------------------------------------------
# JSON Formatter
# -----------------------------------------------------------------------------


class JSONFormatter(logging.Formatter):
    """
    Format log records as single-line JSON.

    Output format:
    {"timestamp": "...", "level": "INFO", "message": "...", "run_id": "...", ...}
    """

    def format(self, record: logging.LogRecord) -> str:
        log_data = {
            "timestamp": datetime.now(UTC).isoformat().replace("+00:00", "Z"),
            "level": record.levelname,
            "logger": record.name,
            "message": record.getMessage(),
        }

        run_id = run_id_var.get()
        if run_id:
            log_data["run_id"] = run_id

        stage = stage_var.get()
        if stage:
            log_data["stage"] = stage

        if record.exc_info:
            log_data["exception"] = self.formatException(record.exc_info)

        for key in _EXTRA_FIELDS:
            if hasattr(record, key):
                log_data[key] = getattr(record, key)

        return json.dumps(log_data, default=str)


def configure_logging(json_format: bool = True, level: str = "INFO") -> None:
    """
    Configure root logging for deployment or local development.

    Args:
        json_format: If True, use JSON format. If False, use human-readable format.
        level: Log level (DEBUG, INFO, WARNING, ERROR)
    """
    root_logger = logging.getLogger()
    root_logger.setLevel(getattr(logging, level.upper()))

    # Remove existing handlers
    for handler in root_logger.handlers[:]:
        root_logger.removeHandler(handler)

    handler = logging.StreamHandler(sys.stdout)
    handler.setLevel(getattr(logging, level.upper()))

    if json_format:
        handler.setFormatter(JSONFormatter())
    else:
        handler.setFormatter(logging.Formatter("%(asctime)s [%(levelname)s] %(name)s: %(message)s"))

    root_logger.addHandler(handler)

    # Reduce noise from third-party libraries
    logging.getLogger("httpx").setLevel(logging.WARNING)
    logging.getLogger("httpcore").setLevel(logging.WARNING)
    logging.getLogger("openai").setLevel(logging.WARNING)
    logging.getLogger("sqlalchemy").setLevel(logging.WARNING)


# -----------------------------------------------------------------------------
# Context Managers
# -----------------------------------------------------------------------------


@contextmanager
def log_run(run_id: str):
    """Bind a run ID to every log record emitted inside the block."""
    token = run_id_var.set(run_id)
    try:
        yield
    finally:
        run_id_var.reset(token)


@contextmanager
def log_stage(stage: str):
    """
    Context manager for stage-level logging.

    Logs stage start and end with duration, automatically tracks timing.

    Usage:
        with log_stage("fetch"):
            # ... stage logic ...
    """
    token = stage_var.set(stage)

    start_time = time.time()
    logger = logging.getLogger("civicwire.pipeline")

    logger.info(f"Stage {stage} started", extra={"event": "stage_start"})

    try:
        yield
        duration_ms = int((time.time() - start_time) * 1000)
        logger.info(
            f"Stage {stage} completed",
            extra={"event": "stage_complete", "duration_ms": duration_ms},
        )
    except Exception as e:
        duration_ms = int((time.time() - start_time) * 1000)
        logger.error(
            f"Stage {stage} failed: {e}",
            extra={"event": "stage_failed", "duration_ms": duration_ms},
        )
        raise
    finally:
        stage_var.reset(token)


@contextmanager
def log_llm_call(provider: str, model: str):
    """
    Context manager for LLM call instrumentation.

    Logs call end with timing, tokens, and cost estimates.

    Usage:
        with log_llm_call("gemini", "gemini-2.0-flash") as metrics:
            response = client.post(...)
            metrics["tokens_in"] = usage["promptTokenCount"]
    """
    start_time = time.time()
    logger = logging.getLogger("civicwire.llm")
    metrics: dict = {"tokens_in": 0, "tokens_out": 0}

    try:
        yield metrics

        duration_ms = int((time.time() - start_time) * 1000)
        cost_usd = _estimate_llm_cost(provider, model, metrics["tokens_in"], metrics["tokens_out"])

        logger.info(
            f"LLM call completed: {provider}/{model} ({duration_ms}ms, ${cost_usd:.4f})",
            extra={
                "event": "llm_call_complete",
                "provider": provider,
                "model": model,
                "duration_ms": duration_ms,
                "tokens_in": metrics["tokens_in"],
                "tokens_out": metrics["tokens_out"],
                "cost_usd": cost_usd,
            },
        )
    except Exception as e:
        duration_ms = int((time.time() - start_time) * 1000)
        logger.error(
            f"LLM call failed: {provider}/{model} - {e}",
            extra={
                "event": "llm_call_failed",
                "provider": provider,
                "model": model,
                "duration_ms": duration_ms,
            },
        )
        raise


# -----------------------------------------------------------------------------
# LLM Cost Estimation
# -----------------------------------------------------------------------------

# Approximate costs per 1M tokens
LLM_COSTS = {
    ("gemini", "gemini-2.0-flash"): {"input": 0.10, "output": 0.40},
    ("gemini", "gemini-1.5-flash"): {"input": 0.075, "output": 0.30},
    ("deepseek", "deepseek-chat"): {"input": 0.27, "output": 1.10},
    ("deepseek", "deepseek-reasoner"): {"input": 0.55, "output": 2.19},
}


def _estimate_llm_cost(provider: str, model: str, tokens_in: int, tokens_out: int) -> float:
    """Estimate LLM cost based on token usage."""
    key = (provider.lower(), model.lower())

    costs = LLM_COSTS.get(key)

    # Partial match for model name variations
    if not costs:
        for (p, m), c in LLM_COSTS.items():
            if p == provider.lower() and m in model.lower():
                costs = c
                break

    if not costs:
        costs = {"input": 1.0, "output": 3.0}

    input_cost = (tokens_in / 1_000_000) * costs["input"]
    output_cost = (tokens_out / 1_000_000) * costs["output"]

    return round(input_cost + output_cost, 6)
