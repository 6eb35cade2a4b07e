"""HTTP handlers for per-user search history and client notes."""

from fastapi import HTTPException, status

from digitization_finder.dto import ClientNoteRequest, HistoryResponse, SearchHistoryRequest
from digitization_finder.protocols import HistoryStore

from .errors import http_error


class HistoryHandler:
    """HTTP handlers backed by the HistoryStore."""

    def __init__(self, store: HistoryStore) -> None:
        self._store = store

    async def get_searches(self, user_id: str) -> HistoryResponse:
        try:
            return HistoryResponse(items=self._store.get_searches(user_id))
        except Exception as e:
            raise http_error(e, "fetch search history") from e

    async def add_search(self, user_id: str, request: SearchHistoryRequest) -> dict:
        try:
            return self._store.add_search(user_id, request.client_folder_id, request.client_name)
        except Exception as e:
            raise http_error(e, "save search history") from e

    async def get_note(self, user_id: str, folder_id: str) -> dict:
        try:
            note = self._store.get_note(user_id, folder_id)
        except Exception as e:
            raise http_error(e, "fetch client note") from e

        if note is None:
            raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="No note for this client")
        return note

    async def save_note(self, user_id: str, request: ClientNoteRequest) -> dict:
        try:
            return self._store.save_note(user_id, request.client_folder_id, request.note)
        except Exception as e:
            raise http_error(e, "save client note") from e
