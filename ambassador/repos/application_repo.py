from __future__ import annotations

from typing import Protocol

from ambassador.models.application import Application
from ambassador.services.unit_of_work import journaled_set, record_undo


class ApplicationRepo(Protocol):
    def get(self, application_id: int) -> Application | None: ...
    def add(self, application: Application) -> None: ...
    def history_of(self, applicant: str) -> list[int]: ...


class InMemoryApplicationRepo:
    def __init__(self) -> None:
        self._by_id: dict[int, Application] = {}
        self._history: dict[str, list[int]] = {}

    def get(self, application_id: int) -> Application | None:
        return self._by_id.get(application_id)

    def add(self, application: Application) -> None:
        if application.id in self._by_id:
            raise ValueError("application id already exists")
        journaled_set(self._by_id, application.id, application)

        history = self._history.get(application.applicant)
        if history is None:
            journaled_set(self._history, application.applicant, [application.id])
        else:
            history.append(application.id)
            record_undo(history.pop)

    def history_of(self, applicant: str) -> list[int]:
        return list(self._history.get(applicant, ()))
