"""
Upload and listing orchestration.

``UploadOrchestrator`` walks one upload through an explicit state machine:

    NO_FILE  -> MISSING_FILE
    VALIDATE -> INVALID_FILE
    VALIDATE -> SELECT_BACKEND -> REMOTE_ATTEMPT -> SUCCESS
    VALIDATE -> SELECT_BACKEND -> REMOTE_ATTEMPT -> LOCAL_STORE   (fallback)
    VALIDATE -> SELECT_BACKEND -> LOCAL_STORE -> SUCCESS | STORAGE_FAILED

Every run ends in exactly one of ``SUCCESS``, ``MISSING_FILE``,
``INVALID_FILE`` or ``STORAGE_FAILED``. The states visited are kept on the
outcome so the fallback transition is observable.
"""

import logging
import os
from dataclasses import dataclass, field
from enum import Enum
from typing import List, Optional

from uploads_api.adapters.storage import CloudinaryStorage, LocalDiskStorage
from uploads_api.errors import LocalStorageError, RemoteStorageError, StorageError, log_error
from uploads_api.models import IncomingFile, StoredFileRecord
from uploads_api.utils.decorators import log_duration
from uploads_api.validation import RejectReason, sanitize_filename, validate_upload

logger = logging.getLogger(__name__)


class UploadState(str, Enum):
    NO_FILE = "no_file"
    VALIDATE = "validate"
    SELECT_BACKEND = "select_backend"
    REMOTE_ATTEMPT = "remote_attempt"
    LOCAL_STORE = "local_store"
    SUCCESS = "success"
    MISSING_FILE = "missing_file"
    INVALID_FILE = "invalid_file"
    STORAGE_FAILED = "storage_failed"


TERMINAL_STATES = frozenset({
    UploadState.SUCCESS,
    UploadState.MISSING_FILE,
    UploadState.INVALID_FILE,
    UploadState.STORAGE_FAILED,
})


@dataclass
class UploadOutcome:
    state: UploadState
    record: Optional[StoredFileRecord] = None
    reason: Optional[RejectReason] = None
    fallback: bool = False
    trail: List[UploadState] = field(default_factory=list)

    @property
    def ok(self) -> bool:
        return self.state is UploadState.SUCCESS


@dataclass
class ListOutcome:
    files: List[StoredFileRecord] = field(default_factory=list)
    error: Optional[StorageError] = None

    @property
    def ok(self) -> bool:
        return self.error is None


class UploadOrchestrator:
    """Validate an upload, pick a backend and persist it, falling back to disk once."""

    def __init__(
        self,
        local: LocalDiskStorage,
        remote: Optional[CloudinaryStorage] = None,
        remote_configured: bool = False,
        debug: bool = False,
    ):
        if remote_configured and remote is None:
            raise ValueError("remote_configured requires a remote storage backend")
        self.local = local
        self.remote = remote
        self.remote_configured = remote_configured
        self.debug = debug

    @log_duration("upload pipeline", logger_name=__name__)
    async def handle_upload(self, file: Optional[IncomingFile]) -> UploadOutcome:
        outcome = UploadOutcome(state=UploadState.NO_FILE if file is None else UploadState.VALIDATE)
        outcome.trail.append(outcome.state)
        if file is None:
            return self._finish(outcome, UploadState.MISSING_FILE)

        extension = os.path.splitext(file.original_name)[1]
        verdict = validate_upload(file.content_type, extension, file.size_bytes)
        if not verdict.accepted:
            outcome.reason = verdict.reason
            logger.info("Rejected upload %r: %s", file.original_name, verdict.reason.value)
            return self._finish(outcome, UploadState.INVALID_FILE)

        sanitized_name = sanitize_filename(file.original_name) or "file"
        self._advance(outcome, UploadState.SELECT_BACKEND)

        if self.remote_configured and file.in_memory:
            self._advance(outcome, UploadState.REMOTE_ATTEMPT)
            try:
                outcome.record = await self.remote.store(file.content, file.original_name, sanitized_name)
                return self._finish(outcome, UploadState.SUCCESS)
            except RemoteStorageError as e:
                logger.warning("Remote upload failed, falling back to local disk: %s", e)
                outcome.fallback = True

        self._advance(outcome, UploadState.LOCAL_STORE)
        try:
            content = file.read_bytes()
            outcome.record = await self.local.store(content, sanitized_name, extension)
        except (LocalStorageError, OSError) as e:
            log_error("local store", e, include_traceback=self.debug)
            return self._finish(outcome, UploadState.STORAGE_FAILED)
        return self._finish(outcome, UploadState.SUCCESS)

    @staticmethod
    def _advance(outcome: UploadOutcome, state: UploadState) -> None:
        outcome.state = state
        outcome.trail.append(state)

    def _finish(self, outcome: UploadOutcome, state: UploadState) -> UploadOutcome:
        if state not in TERMINAL_STATES:
            raise ValueError(f"{state} is not a terminal upload state")
        self._advance(outcome, state)
        return outcome


class ListingOrchestrator:
    """List stored files from whichever single backend is active."""

    def __init__(
        self,
        local: LocalDiskStorage,
        remote: Optional[CloudinaryStorage] = None,
        remote_configured: bool = False,
        debug: bool = False,
    ):
        if remote_configured and remote is None:
            raise ValueError("remote_configured requires a remote storage backend")
        self.local = local
        self.remote = remote
        self.remote_configured = remote_configured
        self.debug = debug

    @log_duration("listing pipeline", logger_name=__name__)
    async def handle_list(self) -> ListOutcome:
        # active backend only; never merged with or retried against local
        backend = self.remote if self.remote_configured else self.local
        try:
            return ListOutcome(files=await backend.list())
        except StorageError as e:
            log_error(f"{type(backend).__name__} list", e, include_traceback=self.debug)
            return ListOutcome(error=e)
