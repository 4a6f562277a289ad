"""Import wizard: connect, choose options, preview, import, summary.

The import itself runs on a background thread. Observers poll
``get_status()``, which returns an immutable ImportStatus snapshot; the
completed count and the current item label are always swapped together
under a lock, so a snapshot never shows an item as in progress after it
has been counted.
"""

import logging
import threading
from dataclasses import replace
from typing import Iterable, Optional

from ...api.tmdb import TmdbApi
from ...api.trakt import TraktApi, TraktAuthError
from ...db import Database
from ...models import ImportOptions, ImportPreview, ImportStatus, ImportStep, SyncResult
from ..core.exceptions import AuthenticationError, InvalidTransitionError
from .candidates import fetch_candidates
from .preview import build_preview
from .reconcile import SOURCE_IMPORT, LibraryReconciler
from .sync_status import SyncStatusTracker

logger = logging.getLogger(__name__)

OPTION_NAMES = (
    "import_watched_movies",
    "import_watched_series",
    "import_ratings",
    "import_watchlist",
)


class ImportOrchestrator:
    """State machine driving a Trakt import.

    Steps move CONNECT -> SELECT_OPTIONS -> PREVIEW -> IMPORTING -> COMPLETE.
    Guards (nothing selected, nothing new to import) make an action return
    False and leave the step unchanged. Using an action from the wrong step
    raises InvalidTransitionError.
    """

    def __init__(
        self,
        trakt: TraktApi,
        library: Database,
        tmdb: TmdbApi,
        options: Optional[ImportOptions] = None,
        tracker: Optional[SyncStatusTracker] = None,
    ):
        """Initialize the wizard.

        Args:
            trakt: Trakt API client
            library: Local library database
            tmdb: TMDB API client
            options: Initial import options
            tracker: Status tracker (created from the library if omitted)
        """
        self.trakt = trakt
        self.library = library
        self.tracker = tracker or SyncStatusTracker(library, trakt)
        self.reconciler = LibraryReconciler(library, tmdb, source=SOURCE_IMPORT)

        self._step = ImportStep.CONNECT
        self._options = options or ImportOptions()
        self._preview: Optional[ImportPreview] = None
        self._result: Optional[SyncResult] = None
        self._auth_error: Optional[str] = None

        self._status = ImportStatus()
        self._status_lock = threading.Lock()
        self._cancel = threading.Event()
        self._worker: Optional[threading.Thread] = None

    # -------------------------------------------------------------- state --

    @property
    def step(self) -> ImportStep:
        return self._step

    @property
    def options(self) -> ImportOptions:
        return self._options

    @property
    def preview(self) -> Optional[ImportPreview]:
        return self._preview

    @property
    def result(self) -> Optional[SyncResult]:
        """SyncResult of the finished import, once COMPLETE."""
        return self._result

    @property
    def auth_error(self) -> Optional[str]:
        """Why the last import was aborted back to CONNECT, if it was."""
        return self._auth_error

    @property
    def can_start_import(self) -> bool:
        return (
            self._step == ImportStep.PREVIEW
            and self._preview is not None
            and self._preview.new_items > 0
        )

    def _require_step(self, *steps: ImportStep):
        if self._step not in steps:
            expected = " or ".join(step.value for step in steps)
            raise InvalidTransitionError(
                f"Action not available in step '{self._step.value}' (expected {expected})"
            )

    def _move_to(self, step: ImportStep):
        logger.debug(f"Import wizard: {self._step.value} -> {step.value}")
        self._step = step

    # ------------------------------------------------------------ connect --

    def check_connection(self) -> bool:
        """Advance to option selection if a Trakt session already exists."""
        self._require_step(ImportStep.CONNECT)
        if not self.trakt.is_authenticated():
            return False
        self.tracker.record_authenticated()
        self._move_to(ImportStep.SELECT_OPTIONS)
        return True

    def submit_auth_code(self, code: str):
        """Exchange an OAuth authorization code and advance.

        Raises:
            AuthenticationError: If Trakt rejects the code
        """
        self._require_step(ImportStep.CONNECT)
        try:
            self.trakt.exchange_code(code)
        except TraktAuthError as e:
            raise AuthenticationError(f"Trakt rejected the authorization code: {e}") from e
        self.tracker.record_authenticated()
        self._move_to(ImportStep.SELECT_OPTIONS)

    def logout(self):
        """Forget stored Trakt tokens and return to CONNECT."""
        if self._step == ImportStep.IMPORTING:
            raise InvalidTransitionError("Cannot log out while an import is running")
        self.trakt.clear_tokens()
        self.tracker.record_logged_out()
        self._preview = None
        self._move_to(ImportStep.CONNECT)

    # ------------------------------------------------------------ options --

    def set_options(self, **flags: bool):
        """Set one or more import flags by name."""
        self._require_step(ImportStep.SELECT_OPTIONS)
        unknown = set(flags) - set(OPTION_NAMES)
        if unknown:
            raise ValueError(f"Unknown import options: {', '.join(sorted(unknown))}")
        self._options = replace(self._options, **flags)

    def toggle_option(self, name: str) -> bool:
        """Flip one import flag and return its new value."""
        self._require_step(ImportStep.SELECT_OPTIONS)
        if name not in OPTION_NAMES:
            raise ValueError(f"Unknown import option: {name}")
        value = not getattr(self._options, name)
        self._options = replace(self._options, **{name: value})
        return value

    def proceed_to_preview(self) -> bool:
        """Advance to the preview step. Requires at least one selected option."""
        self._require_step(ImportStep.SELECT_OPTIONS)
        if not self._options.any_selected():
            return False
        self._preview = None
        self._move_to(ImportStep.PREVIEW)
        return True

    # ------------------------------------------------------------ preview --

    def load_preview(self) -> ImportPreview:
        """Fetch history and compare it with the library.

        Raises:
            AuthenticationError: If the Trakt session is no longer valid;
                the wizard returns to CONNECT.
        """
        self._require_step(ImportStep.PREVIEW)
        try:
            candidates = fetch_candidates(self.trakt, self._options)
        except TraktAuthError as e:
            self._move_to(ImportStep.CONNECT)
            raise AuthenticationError(str(e)) from e

        self._preview = build_preview(candidates.items(), self.library)
        return self._preview

    def back_to_options(self):
        self._require_step(ImportStep.PREVIEW)
        self._move_to(ImportStep.SELECT_OPTIONS)

    # ------------------------------------------------------------- import --

    def start_import(self, background: bool = True) -> bool:
        """Start importing. Requires a preview with new items.

        Args:
            background: Run on a worker thread (default) or block until done

        Returns:
            False if there is nothing new to import
        """
        self._require_step(ImportStep.PREVIEW)
        if not self.can_start_import:
            return False

        self._cancel.clear()
        self._result = None
        self._auth_error = None
        with self._status_lock:
            self._status = ImportStatus(in_progress=True)
        self._move_to(ImportStep.IMPORTING)

        if background:
            self._worker = threading.Thread(target=self._run_import, name="cinelog-import", daemon=True)
            self._worker.start()
        else:
            self._run_import()
        return True

    def _set_current(self, label: Optional[str]):
        with self._status_lock:
            self._status = replace(self._status, current_item=label)

    def _item_done(self, errors: Iterable[str]):
        with self._status_lock:
            self._status = replace(
                self._status,
                completed=self._status.completed + 1,
                current_item=None,
                errors=self._status.errors + tuple(errors),
            )

    def _run_import(self):
        result = SyncResult()
        try:
            candidates = fetch_candidates(self.trakt, self._options, strict=False)
            result.errors.extend(candidates.errors)
            items = candidates.items()
            with self._status_lock:
                self._status = replace(
                    self._status,
                    total=len(items),
                    errors=self._status.errors + tuple(candidates.errors),
                )
            logger.info(f"Importing {len(items)} items from Trakt")

            for item in items:
                if self._cancel.is_set():
                    logger.info("Import cancelled")
                    result.cancelled = True
                    break
                self._set_current(item.title)
                item_result = self.reconciler.reconcile(item)
                result.merge(item_result)
                self._item_done(item_result.errors)

            if not result.cancelled:
                self.tracker.record_sync_completed()
            logger.info(
                f"Import complete: {result.new_movie_watches} movie watches, "
                f"{result.new_episode_watches} episode watches, "
                f"{result.updated_items} updated, {len(result.errors)} errors"
            )
            self._result = result
            self._move_to(ImportStep.COMPLETE)

        except TraktAuthError as e:
            logger.error(f"Import aborted, Trakt authentication failed: {e}")
            result.errors.append(f"Trakt authentication failed: {e}")
            self._auth_error = str(e)
            self._result = result
            self._move_to(ImportStep.CONNECT)

        except Exception as e:
            logger.exception("Import failed")
            result.errors.append(f"Import failed: {e}")
            with self._status_lock:
                self._status = replace(self._status, errors=self._status.errors + (f"Import failed: {e}",))
            self._result = result
            self._move_to(ImportStep.COMPLETE)

        finally:
            with self._status_lock:
                self._status = replace(self._status, in_progress=False, current_item=None)

    def get_status(self) -> ImportStatus:
        """Snapshot of the running (or last) import."""
        with self._status_lock:
            return self._status

    def request_cancellation(self) -> bool:
        """Ask a running import to stop before its next item.

        Returns:
            False if no import is running
        """
        if self._step != ImportStep.IMPORTING:
            return False
        self._cancel.set()
        return True

    def wait(self, timeout: Optional[float] = None) -> bool:
        """Wait for a background import to finish.

        Returns:
            True if no import is running anymore
        """
        if self._worker is not None:
            self._worker.join(timeout)
            return not self._worker.is_alive()
        return True

    # ----------------------------------------------------------- complete --

    def import_more(self):
        """Start over from option selection after a finished import."""
        self._require_step(ImportStep.COMPLETE)
        self._preview = None
        self._result = None
        with self._status_lock:
            self._status = ImportStatus()
        self._move_to(ImportStep.SELECT_OPTIONS)
