"""HTTP client for the citation backend (lookup, export and selection endpoints)."""
from __future__ import annotations

import logging
import time
from typing import Any, Dict, Optional, Sequence

import httpx
from pydantic import ValidationError

from .config import Settings
from .errors import ExportFailure, LookupFailure
from .models import ExportArtifact, LookupResult
from .schemas import FormatRequestPayload, FormatResponsePayload, SelectMatchPayload
from .services import ExportSerializer, LookupService, SelectionNotifier
from .styles import CitationStyle

logger = logging.getLogger(__name__)

RETRYABLE_STATUS = {500, 502, 503, 504}


class CitationApiClient(LookupService, ExportSerializer, SelectionNotifier):
    name = "http"

    def __init__(
        self,
        base_url: str,
        timeout: float = 10.0,
        max_retries: int = 2,
        backoff_factor: float = 0.5,
        transport: Optional[httpx.BaseTransport] = None,
    ) -> None:
        self.base_url = base_url.rstrip("/")
        self.timeout = timeout
        self.max_retries = max(1, max_retries)
        self.backoff_factor = backoff_factor
        self._client = httpx.Client(
            base_url=self.base_url,
            timeout=timeout,
            headers=self._headers(),
            transport=transport,
        )

    @classmethod
    def from_settings(cls, settings: Settings, **kwargs: Any) -> "CitationApiClient":
        return cls(
            settings.api_url,
            timeout=settings.timeout,
            max_retries=settings.max_retries,
            **kwargs,
        )

    @staticmethod
    def _headers() -> Dict[str, str]:
        return {
            "Content-Type": "application/json",
            "User-Agent": "citation-formatter/0.1",
        }

    @property
    def is_closed(self) -> bool:
        return self._client.is_closed

    def close(self) -> None:
        self._client.close()

    def resolve(self, references: Sequence[str], style: CitationStyle) -> LookupResult:
        payload = FormatRequestPayload(
            references="\n".join(references), format=CitationStyle.parse(style).value
        )
        try:
            response = self._post_with_retries("/api/format", payload.model_dump())
        except httpx.HTTPError as exc:
            raise LookupFailure(f"Failed to format references: {exc}") from exc
        try:
            return FormatResponsePayload.model_validate(response.json()).to_result()
        except (ValueError, ValidationError) as exc:
            raise LookupFailure(f"Malformed response from lookup service: {exc}") from exc

    def export(self, references: Sequence[str], fmt: str) -> ExportArtifact:
        payload = FormatRequestPayload(references="\n".join(references), format=fmt)
        try:
            response = self._post_with_retries("/api/download", payload.model_dump())
        except httpx.HTTPError as exc:
            raise ExportFailure(f"Failed to download references: {exc}") from exc
        file_name = _filename_from_disposition(response.headers.get("content-disposition"))
        return ExportArtifact(content=response.content, file_name=file_name or f"references.{fmt}")

    def notify_selection(self, reference_index: int, selected_option_index: int) -> None:
        payload = SelectMatchPayload(
            reference_index=reference_index, selected_option_index=selected_option_index
        )
        try:
            self._post_with_retries("/api/select-match", payload.model_dump(by_alias=True))
        except httpx.HTTPError as exc:
            raise LookupFailure(f"Failed to record selection: {exc}") from exc

    def _post_with_retries(self, path: str, payload: Dict[str, Any]) -> httpx.Response:
        attempt = 0
        while True:
            attempt += 1
            try:
                response = self._client.post(path, json=payload)
                response.raise_for_status()
                return response
            except httpx.RequestError as exc:
                error: httpx.HTTPError = exc
                retryable = True
            except httpx.HTTPStatusError as exc:
                error = exc
                retryable = exc.response.status_code in RETRYABLE_STATUS
            logger.warning("POST %s failed (attempt %d/%d): %s", path, attempt, self.max_retries, error)
            if not retryable or attempt >= self.max_retries:
                raise error
            time.sleep(self.backoff_factor * (2 ** (attempt - 1)))


def _filename_from_disposition(header: Optional[str]) -> Optional[str]:
    if not header or "filename=" not in header:
        return None
    name = header.split("filename=", 1)[1].split(";", 1)[0]
    return name.replace('"', "").strip() or None


__all__ = ["CitationApiClient"]
