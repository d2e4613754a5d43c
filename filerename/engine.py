"""Engine facade coordinating selection, preview, execution and history."""

import logging
import threading
from collections.abc import Sequence
from dataclasses import dataclass
from enum import Enum, auto

from filerename.channel import SelectionChannel
from filerename.errors import ExecutionInProgressError, HistoryUnavailableError, NoPreviewError
from filerename.history import HistoryStore
from filerename.models.history import HistoryEntry
from filerename.models.rename import PreviewResult, RenameOutcome, TransformSpec
from filerename.processors.preview_generator import generate_preview
from filerename.processors.rename_executor import FileSystem, RenameExecutor


logger = logging.getLogger(__name__)


class EngineState(Enum):
    IDLE = auto()
    SELECTED = auto()
    PREVIEWED = auto()
    EXECUTED = auto()


@dataclass(frozen=True)
class PreviewRequest:
    """A preview requested against a snapshot of the selection.

    Requests are numbered in the order they are issued. Only the result of the
    most recently issued request is applied to the engine.
    """

    generation: int
    spec: TransformSpec
    paths: tuple[str, ...]


class RenameEngine:
    """Holds the current selection and last preview for one rename workflow.

    States move IDLE -> SELECTED -> PREVIEWED -> EXECUTED. Selecting files
    returns to SELECTED (or IDLE for an empty selection) and invalidates any
    preview, including previews still being computed. Executing requires a
    preview and replaces the selection with the post-rename paths.
    """

    def __init__(
        self,
        history: HistoryStore,
        filesystem: FileSystem | None = None,
        channel: SelectionChannel | None = None,
        initial_files: Sequence[str] | None = None,
    ) -> None:
        """Initialize the engine.

        Args:
            history: Store receiving every transform that renamed at least one file.
            filesystem: Filesystem service used for renames. Defaults to the real filesystem.
            channel: Optional channel delivering selections from other launches.
            initial_files: Paths selected at startup.
        """
        self.history = history
        self.executor = RenameExecutor(filesystem)
        self.history_degraded = False

        self._lock = threading.RLock()
        self._execute_lock = threading.Lock()
        self._state = EngineState.IDLE
        self._selection: list[str] = []
        self._preview: PreviewResult | None = None
        self._spec: TransformSpec | None = None
        self._generation = 0

        self._unsubscribe = channel.subscribe(self.select_files) if channel is not None else None

        if initial_files:
            self.select_files(initial_files)

    @property
    def state(self) -> EngineState:
        return self._state

    @property
    def selection(self) -> list[str]:
        with self._lock:
            return list(self._selection)

    @property
    def last_preview(self) -> PreviewResult | None:
        return self._preview

    @property
    def last_spec(self) -> TransformSpec | None:
        """The transform of the most recently applied preview."""
        return self._spec

    def close(self) -> None:
        """Stop receiving selections from the channel."""
        if self._unsubscribe is not None:
            self._unsubscribe()
            self._unsubscribe = None

    def select_files(self, paths: Sequence[str]) -> list[str]:
        """Replace the current selection.

        This is the single ingestion point for startup arguments, file chooser
        results and forwarded selections.

        Returns:
            The new selection.
        """
        with self._lock:
            self._selection = list(paths)
            self._preview = None
            self._generation += 1
            self._state = EngineState.SELECTED if self._selection else EngineState.IDLE
            logger.info("Selected %d file(s)", len(self._selection))
            return list(self._selection)

    def preview(
        self,
        pattern: str,
        replacement: str = "",
        is_regex: bool = False,
        case_insensitive: bool = False,
    ) -> PreviewResult:
        """Preview a transform over the current selection."""
        spec = TransformSpec(
            pattern=pattern,
            replacement=replacement,
            is_regex=is_regex,
            case_insensitive=case_insensitive,
        )
        return self.preview_spec(spec)

    def preview_spec(self, spec: TransformSpec) -> PreviewResult:
        """Preview a transform and make it the current preview.

        The result is returned even if a newer request superseded it while it
        was computed; in that case it is not applied to the engine.
        """
        request = self.begin_preview(spec)
        result = self._compute(request)
        self._apply(result)
        return result

    def refresh_preview(self) -> PreviewResult | None:
        """Recompute the last transform against the current selection.

        Returns:
            The new preview, or None if no transform was previewed yet.
        """
        if self._spec is None:
            return None
        return self.preview_spec(self._spec)

    def begin_preview(self, spec: TransformSpec) -> PreviewRequest:
        """Issue a preview request, superseding every earlier request."""
        with self._lock:
            self._generation += 1
            return PreviewRequest(generation=self._generation, spec=spec, paths=tuple(self._selection))

    def complete_preview(self, request: PreviewRequest) -> PreviewResult | None:
        """Compute a requested preview and apply it if it is still the latest.

        Safe to call from a worker thread.

        Returns:
            The applied preview, or None if the request was superseded.
        """
        result = self._compute(request)
        return result if self._apply(result) else None

    def _compute(self, request: PreviewRequest) -> PreviewResult:
        return generate_preview(request.paths, request.spec, generation=request.generation)

    def _apply(self, result: PreviewResult) -> bool:
        with self._lock:
            if result.generation != self._generation:
                logger.debug("Discarding superseded preview #%d (latest #%d)", result.generation, self._generation)
                return False

            self._spec = result.spec
            if self._state is EngineState.IDLE:
                return True

            self._preview = result
            self._state = EngineState.PREVIEWED
            return True

    def execute(self, show_progress: bool = False) -> RenameOutcome:
        """Rename the files of the current preview.

        With no changed entry this is a no-op and returns an empty outcome.
        Per-file failures are reported in the outcome, never raised. If any
        file was renamed the transform is recorded in history.

        Raises:
            NoPreviewError: If there is no current preview.
            ExecutionInProgressError: If another execute call is running.
        """
        if not self._execute_lock.acquire(blocking=False):
            raise ExecutionInProgressError("A rename batch is already running")

        try:
            with self._lock:
                preview = self._preview
                if self._state is not EngineState.PREVIEWED or preview is None:
                    raise NoPreviewError("Nothing has been previewed for the current selection")

                if preview.changed_count == 0:
                    logger.info("Nothing to rename")
                    return RenameOutcome(new_file_paths=list(self._selection))

                outcome = self.executor.execute(preview.entries, show_progress=show_progress)

                self._selection = list(outcome.new_file_paths)
                self._preview = None
                self._generation += 1
                self._state = EngineState.EXECUTED

            if outcome.success_count > 0:
                self.add_to_history(preview.spec)
            return outcome
        finally:
            self._execute_lock.release()

    def get_history(self) -> list[HistoryEntry]:
        """Return previously executed transforms, most recent first."""
        return self.history.entries()

    def add_to_history(self, spec: TransformSpec) -> bool:
        """Record a transform in history.

        Returns:
            False if the history could not be saved.
        """
        try:
            self.history.record(spec)
        except HistoryUnavailableError as exc:
            logger.warning("Could not save history: %s", exc)
            self.history_degraded = True
            return False
        self.history_degraded = False
        return True

    def clear_history(self) -> bool:
        """Remove all history entries.

        Returns:
            False if the history could not be cleared.
        """
        try:
            self.history.clear()
        except HistoryUnavailableError as exc:
            logger.warning("Could not clear history: %s", exc)
            self.history_degraded = True
            return False
        self.history_degraded = False
        return True
