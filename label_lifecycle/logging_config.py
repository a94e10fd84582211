# label_lifecycle/logging_config.py
"""
Structured JSON logging for the API and lifecycle jobs.

Every line emitted inside log_job() carries the job id and job name, so all
entries of one cleanup or classification run can be pulled out of the log
stream together. Oracle calls and storage operations are timed by their own
context managers.
"""

import json
import logging
import sys
import time
import uuid
from contextlib import contextmanager
from contextvars import ContextVar
from dataclasses import dataclass, field
from datetime import UTC, datetime
from typing import Iterator

job_id_var: ContextVar[str | None] = ContextVar("job_id", default=None)
job_name_var: ContextVar[str | None] = ContextVar("job_name", default=None)

# Record attributes (passed via extra=) that are copied into the payload
STRUCTURED_FIELDS = frozenset({
    "event",
    "duration_ms",
    "items_processed",
    "items_failed",
    "provider",
    "model",
    "call_type",
    "tokens_in",
    "tokens_out",
    "cost_usd",
    "operation",
    "key",
    "object_count",
    "video_id",
    "organization_id",
    "label_name",
})

NOISY_LOGGERS = ("httpx", "httpcore", "openai", "botocore", "boto3", "urllib3", "sqlalchemy.engine")

PLAIN_FORMAT = "%(asctime)s [%(levelname)s] %(name)s: %(message)s"


class JSONFormatter(logging.Formatter):
    """
    One JSON object per line:
    {"timestamp": "...Z", "level": "INFO", "logger": "...", "message": "...", "job_id": "...", ...}
    """

    def format(self, record: logging.LogRecord) -> str:
        payload = {
            "timestamp": datetime.fromtimestamp(record.created, UTC).isoformat().replace("+00:00", "Z"),
            "level": record.levelname,
            "logger": record.name,
            "message": record.getMessage(),
        }
        payload.update(
            (name, value)
            for name, value in (("job_id", job_id_var.get()), ("job", job_name_var.get()))
            if value
        )
        payload.update(
            (name, value) for name, value in record.__dict__.items() if name in STRUCTURED_FIELDS
        )
        if record.exc_info:
            payload["exception"] = self.formatException(record.exc_info)
        return json.dumps(payload, default=str)


def configure_logging(json_format: bool = True, level: str = "INFO") -> None:
    """Replace root handlers with a single stdout handler (JSON or plain text)."""
    numeric_level = logging.getLevelName(level.upper())
    if not isinstance(numeric_level, int):
        numeric_level = logging.INFO

    handler = logging.StreamHandler(sys.stdout)
    handler.setFormatter(JSONFormatter() if json_format else logging.Formatter(PLAIN_FORMAT))

    root = logging.getLogger()
    root.handlers[:] = [handler]
    root.setLevel(numeric_level)

    for name in NOISY_LOGGERS:
        logging.getLogger(name).setLevel(logging.WARNING)


def _elapsed_ms(started: float) -> int:
    return int((time.monotonic() - started) * 1000)


# -----------------------------------------------------------------------------
# Timed blocks
# -----------------------------------------------------------------------------


@contextmanager
def log_job(job_name: str, job_id: str | None = None) -> Iterator[str]:
    """
    Bind a job id to every log line in the block; log start, end and failure.

        with log_job("cleanup_expired_videos") as job_id:
            run_cleanup(db)
    """
    job_id = job_id or uuid.uuid4().hex[:12]
    tokens = (job_id_var.set(job_id), job_name_var.set(job_name))
    logger = logging.getLogger("lifecycle.jobs")
    started = time.monotonic()

    logger.info(f"[JOB] {job_name} started", extra={"event": "job_start"})
    try:
        yield job_id
    except Exception as e:
        logger.error(
            f"[JOB] {job_name} failed: {e}",
            extra={"event": "job_failed", "duration_ms": _elapsed_ms(started)},
            exc_info=True,
        )
        raise
    else:
        logger.info(
            f"[JOB] {job_name} finished",
            extra={"event": "job_complete", "duration_ms": _elapsed_ms(started)},
        )
    finally:
        job_id_var.reset(tokens[0])
        job_name_var.reset(tokens[1])


@contextmanager
def log_llm_call(provider: str, model: str, call_type: str) -> Iterator[dict]:
    """
    Time one oracle call. The caller fills in token usage:

        with log_llm_call("openai", model, "classify_video") as metrics:
            response = client.chat.completions.create(...)
            metrics["tokens_in"] = response.usage.prompt_tokens
            metrics["tokens_out"] = response.usage.completion_tokens
    """
    logger = logging.getLogger("lifecycle.llm")
    context = {"provider": provider, "model": model, "call_type": call_type}
    metrics = {"tokens_in": 0, "tokens_out": 0}
    started = time.monotonic()

    try:
        yield metrics
    except Exception as e:
        logger.error(
            f"[LLM] {provider}/{model} {call_type} failed: {e}",
            extra={**context, "event": "llm_call_failed", "duration_ms": _elapsed_ms(started)},
        )
        raise

    duration_ms = _elapsed_ms(started)
    cost_usd = estimate_llm_cost(model, metrics["tokens_in"], metrics["tokens_out"])
    logger.info(
        f"[LLM] {provider}/{model} {call_type} ok in {duration_ms}ms "
        f"({metrics['tokens_in']}+{metrics['tokens_out']} tokens, ${cost_usd:.4f})",
        extra={**context, **metrics, "event": "llm_call_complete", "duration_ms": duration_ms, "cost_usd": cost_usd},
    )


@contextmanager
def log_storage_operation(operation: str, key: str) -> Iterator[dict]:
    """
    Time one asset store call. The caller reports how many objects it touched:

        with log_storage_operation("list", prefix) as metrics:
            metrics["object_count"] = len(keys)
    """
    logger = logging.getLogger("lifecycle.storage")
    context = {"operation": operation, "key": key}
    metrics = {"object_count": 0}
    started = time.monotonic()

    try:
        yield metrics
    except Exception as e:
        logger.error(
            f"[STORAGE] {operation} {key} failed: {e}",
            extra={**context, "event": "storage_failed", "duration_ms": _elapsed_ms(started)},
        )
        raise

    logger.debug(
        f"[STORAGE] {operation} {key}: {metrics['object_count']} objects",
        extra={**context, **metrics, "event": "storage_complete", "duration_ms": _elapsed_ms(started)},
    )


# -----------------------------------------------------------------------------
# Batch progress
# -----------------------------------------------------------------------------


@dataclass
class ProgressTracker:
    """
    Per-item counters for a batch job, logged every `log_every` items and
    once more on finish().
    """

    total: int
    stage: str
    log_every: int = 10

    succeeded: int = field(default=0, init=False)
    failed: int = field(default=0, init=False)
    _started: float = field(default_factory=time.time, init=False, repr=False)

    @property
    def processed(self) -> int:
        return self.succeeded + self.failed

    def increment(self, success: bool = True) -> None:
        if success:
            self.succeeded += 1
        else:
            self.failed += 1
        if self.processed == self.total or self.processed % self.log_every == 0:
            self._emit("progress_update", "progress")

    def finish(self) -> dict:
        """Log the final counts and return them."""
        self._emit("progress_complete", "done")
        return {
            "processed": self.processed,
            "succeeded": self.succeeded,
            "failed": self.failed,
            "duration_seconds": round(time.time() - self._started, 1),
        }

    def _emit(self, event: str, verb: str) -> None:
        logging.getLogger("lifecycle.progress").info(
            f"[{self.stage.upper()}] {verb} {self.processed}/{self.total} "
            f"({self.succeeded} ok, {self.failed} failed)",
            extra={
                "event": event,
                "items_processed": self.processed,
                "items_failed": self.failed,
                "duration_ms": int((time.time() - self._started) * 1000),
            },
        )


# -----------------------------------------------------------------------------
# Oracle cost estimate
# -----------------------------------------------------------------------------

# USD per 1M tokens (input, output)
LLM_PRICES: dict[str, tuple[float, float]] = {
    "gpt-4o-mini": (0.15, 0.60),
    "gpt-4.1-mini": (0.40, 1.60),
    "gpt-4o": (2.50, 10.00),
}
FALLBACK_PRICE = (1.0, 3.0)


def estimate_llm_cost(model: str, tokens_in: int, tokens_out: int) -> float:
    """Rough USD cost of one call. Dated model ids match their base name."""
    model = model.lower()
    price = LLM_PRICES.get(model)
    if price is None:
        # Longest prefix first so gpt-4o-mini-2024-07-18 does not match gpt-4o
        for name in sorted(LLM_PRICES, key=len, reverse=True):
            if model.startswith(name):
                price = LLM_PRICES[name]
                break
    price_in, price_out = price or FALLBACK_PRICE
    return round((tokens_in * price_in + tokens_out * price_out) / 1_000_000, 6)
