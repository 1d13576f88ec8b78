"""
One user session: preferences, staging, submission and history.

The GUI and the CLI both drive the app through HomeworkSession. It holds
the API key in memory only and writes every scan change to local storage
immediately.
"""

import logging
from typing import Callable, List, Optional

from .classification import group_scans, scans_in_category
from .input.staging import StagingBatch
from .models import (
    AppMode,
    Category,
    EducationLevel,
    ExplanationStyle,
    Scan,
    Subject,
    UserPreferences,
)
from .solvers import GeminiClient, SolveRequest, SolverRegistry, get_default_registry
from .solvers.base import DEFAULT_QUESTION_COUNT, clamp_question_count
from .utils.config import AppConfig
from .utils.errors import ApiKeyMissingError, EduSolverError
from .utils.storage import HistoryDatabase, LocalStorage, PreferenceStore

logger = logging.getLogger(__name__)

FAILURE_PREFIX = "Failed: "

ClientFactory = Callable[[str], GeminiClient]


class HomeworkSession:
    """
    Orchestrates staging, solving and history for one app run.

    Usage:
        session = HomeworkSession(AppConfig.from_env())
        session.set_api_key(key)
        session.staging.add_text("2x + 3 = 7")
        scan = session.submit()
    """

    def __init__(
        self,
        config: Optional[AppConfig] = None,
        storage: Optional[LocalStorage] = None,
        client_factory: Optional[ClientFactory] = None,
    ):
        self.config = config or AppConfig()
        self.storage = storage or LocalStorage(self.config.storage_path)
        self.history = HistoryDatabase(self.storage, limit=self.config.history_limit)
        self.preference_store = PreferenceStore(self.storage)
        self._client_factory = client_factory or self._default_client

        self._api_key: Optional[str] = None
        self._registry: Optional[SolverRegistry] = None

        self.preferences: UserPreferences = self.preference_store.load()
        self.mode = AppMode.STUDENT
        self.explanation_style = ExplanationStyle.DETAILED
        self._question_count = DEFAULT_QUESTION_COUNT
        self.staging = StagingBatch(max_images=self.config.max_images)

    def _default_client(self, api_key: str) -> GeminiClient:
        return GeminiClient(api_key, model_name=self.config.model_name)

    # === API key ===

    def set_api_key(self, api_key: str) -> None:
        """Use this key for the rest of the session. It is never written to disk."""
        api_key = (api_key or "").strip()
        if not api_key:
            raise ApiKeyMissingError()
        self._api_key = api_key
        self._registry = None

    def reset_api_key(self) -> None:
        self._api_key = None
        self._registry = None

    @property
    def has_api_key(self) -> bool:
        return self._api_key is not None

    def _get_registry(self) -> SolverRegistry:
        """Lazy-create solvers for the current key."""
        if self._api_key is None:
            raise ApiKeyMissingError()
        if self._registry is None:
            self._registry = get_default_registry(self._client_factory(self._api_key))
        return self._registry

    # === Preferences ===

    def set_level(self, level: EducationLevel) -> None:
        self.preferences.level = level
        self.preference_store.save(self.preferences)

    def set_subject(self, subject: Subject) -> None:
        self.preferences.subject = subject
        self.preference_store.save(self.preferences)

    def set_custom_subject(self, custom_subject: str) -> None:
        self.preferences.custom_subject = custom_subject
        self.preference_store.save(self.preferences)

    # === Mode and staging ===

    def set_mode(self, mode: AppMode) -> None:
        self.mode = mode

    def toggle_mode(self) -> AppMode:
        """Switch between student and teacher mode."""
        self.mode = AppMode.TEACHER if self.mode == AppMode.STUDENT else AppMode.STUDENT
        return self.mode

    @property
    def question_count(self) -> int:
        return self._question_count

    @question_count.setter
    def question_count(self, count: int) -> None:
        self._question_count = clamp_question_count(count)

    def start_new(self) -> None:
        """Begin a new batch: empty staging, default style."""
        self.staging.clear()
        self.explanation_style = ExplanationStyle.DETAILED

    # === Submission ===

    def create_scan(self, save: bool = True) -> Scan:
        """
        Turn the staged batch into a pending scan and save it.

        With save=False the scan is built but never written to history.

        Raises:
            ApiKeyMissingError: If no key has been entered.
            EmptyBatchError: If nothing is staged.
            MissingSubjectError: Teacher mode with an unnamed other subject.
        """
        if not self.has_api_key:
            raise ApiKeyMissingError()

        prefs = self.preferences
        self.staging.validate(self.mode, prefs.subject, prefs.custom_subject)

        custom = None
        if prefs.subject == Subject.OTHER and prefs.custom_subject.strip():
            custom = prefs.custom_subject.strip()

        scan = Scan(
            images=list(self.staging.images),
            text_inputs=list(self.staging.texts),
            explanation_style=self.explanation_style,
            education_level=prefs.level,
            subject=prefs.subject,
            custom_subject=custom,
            mode=self.mode,
            question_count=self._question_count if self.mode == AppMode.TEACHER else None,
            loading=True,
        )
        if save:
            self.history.save_scan(scan)
        logger.info(
            "Created scan %s (%s, %d image(s), %d text(s))",
            scan.id,
            scan.mode.value,
            len(scan.images),
            len(scan.text_inputs),
        )
        return scan

    def run_scan(self, scan: Scan, save: bool = True) -> Scan:
        """
        Solve a pending scan and store the outcome.

        Failures are recorded on the scan rather than raised. The stored
        record is updated exactly once.
        """
        try:
            solver = self._get_registry().get_solver(scan.mode)
            if solver is None:
                raise EduSolverError(f"No solver available for {scan.mode.value} mode")
            result = solver.solve(SolveRequest.from_scan(scan, self.config.response_language))
            if result.success:
                scan.solution = result.text
            else:
                scan.error = FAILURE_PREFIX + (result.error_message or "Unknown error")
        except EduSolverError as e:
            scan.error = FAILURE_PREFIX + e.user_message

        scan.loading = False
        if scan.error:
            logger.warning("Scan %s failed: %s", scan.id, scan.error)
        else:
            logger.info("Scan %s solved", scan.id)

        if save:
            self.history.update_scan(
                scan.id, solution=scan.solution, error=scan.error, loading=False
            )
        return scan

    def submit(self, save: bool = True) -> Scan:
        """Create and solve a scan from the staged batch."""
        return self.run_scan(self.create_scan(save), save)

    # === History ===

    @property
    def scans(self) -> List[Scan]:
        return self.history.get_scans()

    def get_scan(self, scan_id: str) -> Scan:
        return self.history.get_scan(scan_id)

    def delete_scan(self, scan_id: str) -> bool:
        deleted = self.history.delete_scan(scan_id)
        if deleted:
            logger.info("Deleted scan %s", scan_id)
        return deleted

    def clear_history(self) -> int:
        return self.history.clear_all()

    def categories(self) -> List[Category]:
        """History groups for the current mode, most recent first."""
        return group_scans(self.scans, self.mode)

    def scans_in_category(self, category: Category) -> List[Scan]:
        return scans_in_category(self.scans, category, self.mode)
