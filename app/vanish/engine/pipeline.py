"""Operation pipeline: the state machine behind every cache operation.

The pipeline is a plain synchronous object. Each call to :meth:`Pipeline.step`
performs exactly one unit of work (probing, one item, cleanup, purge or
clear) and moves to the next state:

    checking -> confirming -> moving    -> cleanup -> done
                           -> restoring ------------> done
    purging  -> done
    clearing -> done

``error`` is reachable from any working state and ``cancelled`` from
``confirming``. Both are terminal, like ``done``. A driver (the CLI or a
test) calls :meth:`step` until :attr:`Pipeline.is_terminal`, answering
:meth:`confirm` whenever the pipeline waits in ``confirming``.
"""

import logging
from collections.abc import Callable, Sequence
from dataclasses import dataclass, field
from datetime import datetime
from enum import Enum

from vanish.core.config import VanishConfig
from vanish.core.errors import (
    CacheDirectoryError,
    IncompleteRemovalError,
    IndexStoreError,
    ItemFailure,
    VanishError,
)
from vanish.core.index import IndexStore
from vanish.core.oplog import OperationLog
from vanish.engine.mover import MoveEngine, probe_candidates
from vanish.engine.restorer import RestoreEngine
from vanish.engine.retention import PurgeResult, RetentionEngine
from vanish.models.entry import CacheEntry, PendingItem, RestoreCandidate

logger = logging.getLogger(__name__)

# Errors that abort the whole pipeline instead of skipping one item
FATAL_ERRORS: tuple[type[VanishError], ...] = (CacheDirectoryError, IndexStoreError)

# Number of processed paths listed in the summary
SUMMARY_ITEM_LIMIT = 5


class Operation(str, Enum):
    """Operation driven by a pipeline."""

    DELETE = "delete"
    RESTORE = "restore"
    PURGE = "purge"
    CLEAR = "clear"


class PipelineState(str, Enum):
    """State of a pipeline.

    Attributes:
        CHECKING: Probing candidate paths or matching index entries.
        CONFIRMING: Waiting for a yes/no decision.
        MOVING: Moving candidates into the cache, one per step.
        RESTORING: Restoring candidates, one per step.
        CLEANUP: Purging expired entries after a delete.
        PURGING: Purging entries older than the requested window.
        CLEARING: Clearing the whole cache.
        DONE: Finished; see :meth:`Pipeline.summary`.
        ERROR: Aborted; see :attr:`Pipeline.error_message`.
        CANCELLED: Declined during confirmation, nothing was changed.
    """

    CHECKING = "checking"
    CONFIRMING = "confirming"
    MOVING = "moving"
    RESTORING = "restoring"
    CLEANUP = "cleanup"
    PURGING = "purging"
    CLEARING = "clearing"
    DONE = "done"
    ERROR = "error"
    CANCELLED = "cancelled"


TERMINAL_STATES = frozenset({PipelineState.DONE, PipelineState.ERROR, PipelineState.CANCELLED})


@dataclass(frozen=True, slots=True)
class PipelineSummary:
    """Final report of a pipeline run.

    Attributes:
        operation: Operation that was run.
        state: Terminal state reached.
        processed_count: Items moved, restored or purged.
        skipped: Items that failed or did not exist.
        first_paths: Original paths of the first processed items.
        more_count: Processed items not listed in ``first_paths``.
        expires_at: When the moved items become eligible for purge
            (delete only).
        cleaned_count: Expired items removed by post-delete cleanup.
        warnings: Non-fatal problems, e.g. cleanup failures.
        error_message: Reason for an ``error`` state.
    """

    operation: Operation
    state: PipelineState
    processed_count: int
    skipped: tuple[ItemFailure, ...]
    first_paths: tuple[str, ...]
    more_count: int
    expires_at: datetime | None = None
    cleaned_count: int = 0
    warnings: tuple[str, ...] = ()
    error_message: str | None = None

    @property
    def skipped_count(self) -> int:
        return len(self.skipped)


@dataclass(slots=True)
class _Progress:
    processed: list[CacheEntry] = field(default_factory=lambda: [])
    failures: list[ItemFailure] = field(default_factory=lambda: [])
    warnings: list[str] = field(default_factory=lambda: [])


class Pipeline:
    """Sequential state machine for delete, restore, purge and clear.

    Attributes:
        operation: Operation being run.
        state: Current state.
        error_message: Message for the ``error`` state.
        pending: Probed candidates (delete).
        candidates: Matched restore candidates (restore).
        processed: Entries processed so far, in order.
        failures: Items skipped so far, in order.
    """

    def __init__(
        self,
        operation: Operation,
        config: VanishConfig,
        targets: Sequence[str] = (),
        *,
        purge_days: int | str | None = None,
        no_confirm: bool = False,
        mover: MoveEngine | None = None,
        restorer: RestoreEngine | None = None,
        retention: RetentionEngine | None = None,
    ) -> None:
        """Initialize the pipeline.

        Args:
            operation: Operation to run.
            config: Resolved configuration.
            targets: Paths (delete) or patterns (restore).
            purge_days: Retention window for purge.
            no_confirm: Skip the confirming state. The configured
                ``cache.no_confirm`` has the same effect.
            mover: Move engine override.
            restorer: Restore engine override.
            retention: Retention engine override.
        """
        self.operation = operation
        self._config = config
        self._targets = list(targets)
        self._purge_days = purge_days
        self._no_confirm = no_confirm or config.cache.no_confirm

        store = IndexStore(config.cache_dir)
        oplog = OperationLog(config.logging.directory, config.logging.enabled)
        self._mover = mover or MoveEngine(config, store, oplog)
        self._restorer = restorer or RestoreEngine(config, store, oplog)
        self._retention = retention or RetentionEngine(config, store, oplog)

        self.pending: list[PendingItem] = []
        self.candidates: list[RestoreCandidate] = []
        self.cleanup_result: PurgeResult | None = None
        self.error_message: str | None = None
        self._progress = _Progress()
        self._cursor = 0
        self._pending_work: list[PendingItem] = []
        self._restore_work: list[RestoreCandidate] = []

        if operation is Operation.PURGE:
            self.state = PipelineState.PURGING
        elif operation is Operation.CLEAR:
            self.state = PipelineState.CLEARING
        else:
            self.state = PipelineState.CHECKING

    # ------------------------------------------------------------------
    # Read-only views for drivers
    # ------------------------------------------------------------------

    @property
    def is_terminal(self) -> bool:
        return self.state in TERMINAL_STATES

    @property
    def awaiting_confirmation(self) -> bool:
        return self.state is PipelineState.CONFIRMING

    @property
    def processed(self) -> list[CacheEntry]:
        return list(self._progress.processed)

    @property
    def processed_count(self) -> int:
        return len(self._progress.processed)

    @property
    def failures(self) -> list[ItemFailure]:
        return list(self._progress.failures)

    @property
    def pending_valid(self) -> list[PendingItem]:
        """Probed candidates that exist and will be moved."""
        return [item for item in self.pending if item.exists]

    @property
    def total(self) -> int:
        """Number of items the working state will process."""
        if self.operation is Operation.DELETE:
            return len(self._pending_work)
        return len(self._restore_work)

    @property
    def position(self) -> int:
        """Index of the next item to process."""
        return self._cursor

    @property
    def current(self) -> PendingItem | RestoreCandidate | None:
        """Item the next step will process, if any."""
        if self._cursor >= self.total:
            return None
        if self.state is PipelineState.MOVING:
            return self._pending_work[self._cursor]
        if self.state is PipelineState.RESTORING:
            return self._restore_work[self._cursor]
        return None

    @property
    def succeeded(self) -> bool:
        """True if the pipeline finished without any skipped item."""
        return self.state is PipelineState.DONE and not self._progress.failures

    # ------------------------------------------------------------------
    # Transitions
    # ------------------------------------------------------------------

    def step(self) -> PipelineState:
        """Perform one unit of work and return the new state.

        Does nothing in ``confirming`` (see :meth:`confirm`) or in a
        terminal state.
        """
        handlers: dict[PipelineState, Callable[[], None]] = {
            PipelineState.CHECKING: self._check,
            PipelineState.MOVING: self._move_next,
            PipelineState.RESTORING: self._restore_next,
            PipelineState.CLEANUP: self._cleanup,
            PipelineState.PURGING: self._purge,
            PipelineState.CLEARING: self._clear,
        }
        handler = handlers.get(self.state)
        if handler is None:
            return self.state

        previous = self.state
        try:
            handler()
        except FATAL_ERRORS as e:
            self._fail(str(e))
        if self.state is not previous:
            logger.debug(
                "Pipeline %s: %s -> %s", self.operation.value, previous.value, self.state.value
            )
        return self.state

    def confirm(self, accepted: bool) -> PipelineState:
        """Answer the confirmation prompt.

        Args:
            accepted: True to proceed, False to cancel without changes.

        Raises:
            RuntimeError: If the pipeline is not awaiting confirmation.
        """
        if not self.awaiting_confirmation:
            msg = f"Pipeline is not awaiting confirmation (state: {self.state.value})"
            raise RuntimeError(msg)
        if accepted:
            self._start_work()
        else:
            self.state = PipelineState.CANCELLED
            logger.info("Pipeline %s cancelled by user", self.operation.value)
        return self.state

    def run(
        self,
        confirm: Callable[["Pipeline"], bool] | None = None,
        on_step: Callable[["Pipeline"], None] | None = None,
    ) -> PipelineState:
        """Drive the pipeline to a terminal state.

        Args:
            confirm: Called when confirmation is needed; its return value
                is passed to :meth:`confirm`. Without a callback the
                pipeline is cancelled at the confirmation point.
            on_step: Called after every step, e.g. to render progress.

        Returns:
            The terminal state.
        """
        while not self.is_terminal:
            if self.awaiting_confirmation:
                self.confirm(confirm(self) if confirm is not None else False)
                continue
            self.step()
            if on_step is not None:
                on_step(self)
        return self.state

    def summary(self) -> PipelineSummary:
        """Build the final report."""
        processed = self._progress.processed
        expires_at = None
        if self.operation is Operation.DELETE and processed:
            expires_at = processed[0].expires_at(self._config.retention_days)

        return PipelineSummary(
            operation=self.operation,
            state=self.state,
            processed_count=len(processed),
            skipped=tuple(self._progress.failures),
            first_paths=tuple(e.original_path for e in processed[:SUMMARY_ITEM_LIMIT]),
            more_count=max(0, len(processed) - SUMMARY_ITEM_LIMIT),
            expires_at=expires_at,
            cleaned_count=self.cleanup_result.purged_count if self.cleanup_result else 0,
            warnings=tuple(self._progress.warnings),
            error_message=self.error_message,
        )

    # ------------------------------------------------------------------
    # State handlers
    # ------------------------------------------------------------------

    def _check(self) -> None:
        if self.operation is Operation.DELETE:
            self.pending = probe_candidates(self._targets)
            for item in self.pending:
                if not item.exists:
                    self._progress.failures.append(
                        ItemFailure(path=item.path, error=item.error or "does not exist")
                    )
            self._pending_work = [item for item in self.pending if item.exists]
            if not self._pending_work:
                self._fail("No valid files or directories found")
                return
        else:
            try:
                self.candidates = self._restorer.find_matches(self._targets)
            except FATAL_ERRORS:
                raise
            except VanishError as e:
                self._fail(str(e))
                return
            self._restore_work = list(self.candidates)
            if not self._restore_work:
                self._fail("No matching items found in cache for restoration")
                return

        if self._no_confirm:
            self._start_work()
        else:
            self.state = PipelineState.CONFIRMING

    def _start_work(self) -> None:
        self._cursor = 0
        if self.operation is Operation.DELETE:
            self.state = PipelineState.MOVING
        else:
            self.state = PipelineState.RESTORING

    def _move_next(self) -> None:
        item = self._pending_work[self._cursor]
        try:
            self._progress.processed.append(self._mover.process(item))
        except FATAL_ERRORS:
            raise
        except IncompleteRemovalError as e:
            self._record_incomplete(item.path, e)
        except VanishError as e:
            logger.warning("Skipping %s: %s", item.path, e)
            self._progress.failures.append(ItemFailure(path=item.path, error=str(e)))

        self._cursor += 1
        if self._cursor >= len(self._pending_work):
            self.state = PipelineState.CLEANUP

    def _restore_next(self) -> None:
        candidate = self._restore_work[self._cursor]
        try:
            self._progress.processed.append(self._restorer.process(candidate))
        except FATAL_ERRORS:
            raise
        except IncompleteRemovalError as e:
            self._record_incomplete(candidate.entry.original_path, e)
        except VanishError as e:
            logger.warning("Could not restore %s: %s", candidate.entry.original_path, e)
            self._progress.failures.append(
                ItemFailure(path=candidate.entry.original_path, error=str(e))
            )

        self._cursor += 1
        if self._cursor >= len(self._restore_work):
            self.state = PipelineState.DONE

    def _record_incomplete(self, path: str, error: IncompleteRemovalError) -> None:
        if error.entry is None:
            self._progress.failures.append(ItemFailure(path=path, error=str(error)))
            return
        self._progress.processed.append(error.entry)
        self._progress.warnings.append(str(error))

    def _cleanup(self) -> None:
        try:
            self.cleanup_result = self._retention.cleanup()
        except VanishError as e:
            logger.warning("Cleanup of expired items failed: %s", e)
            self._progress.warnings.append(f"Cleanup failed: {e}")
        else:
            for failure in self.cleanup_result.failures:
                self._progress.warnings.append(f"Cleanup kept {failure.path}: {failure.error}")
        self.state = PipelineState.DONE

    def _purge(self) -> None:
        if self._purge_days is None:
            self._fail("Purge requires a number of days")
            return
        try:
            result = self._retention.purge(self._purge_days)
        except FATAL_ERRORS:
            raise
        except VanishError as e:
            self._fail(str(e))
            return
        self._progress.processed.extend(result.purged)
        self._progress.failures.extend(result.failures)
        self.state = PipelineState.DONE

    def _clear(self) -> None:
        try:
            self._retention.clear()
        except FATAL_ERRORS:
            raise
        except VanishError as e:
            self._fail(str(e))
            return
        self.state = PipelineState.DONE

    def _fail(self, message: str) -> None:
        logger.error("Pipeline %s failed: %s", self.operation.value, message)
        self.error_message = message
        self.state = PipelineState.ERROR
