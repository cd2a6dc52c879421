"""Informate API client.

A thin wrapper around the Informate REST API for scripts, bots and
integration checks.  It mirrors the helper used by the mobile app: every
call sends ``Accept: application/json`` and, once a token is known, an
``Authorization: Bearer <token>`` header.  Event create/update are sent as
``multipart/form-data`` so a banner image can ride along.

Every public method returns a tuple ``(data, error)``.  On success
``error`` is ``None`` and ``data`` is the ``data`` member of the
response envelope (or ``True`` for calls that only return a message).
On failure ``data`` is ``None`` (or an empty list) and ``error`` is a
dictionary with ``status_code`` and ``message``.

Example::

    client = InformateClient(base_url="https://example.com/api")
    client.login("organizer@example.com", "secret123")
    event_id, err = client.create_event({"nama_acara": "Seminar AI",
                                         "tanggal_mulai": "2025-03-01 10:00:00",
                                         "lokasi": "Aula A"})
"""

from __future__ import annotations

import logging
import mimetypes
import os
from typing import Any, Dict, List, Optional, Tuple

import requests


logger = logging.getLogger(__name__)

Error = Dict[str, Any]

EVENT_FIELDS = (
    "nama_acara",
    "deskripsi",
    "tanggal_mulai",
    "lokasi",
    "kategori",
    "kuota_maksimal",
    "harga_tiket",
    "contact_person",
)


class InformateClient:
    """Client for the Informate event API."""

    def __init__(
        self,
        *,
        base_url: str,
        token: Optional[str] = None,
        session: Optional[requests.Session] = None,
        timeout: float = 15,
    ) -> None:
        """Initialise the API client.

        Args:
            base_url: Base URL including the API prefix, e.g.
                ``https://example.com/api``.
            token: Optional bearer token from a previous login.
            session: Optional requests session.  If not supplied a
                session will be created automatically.
            timeout: Per-request timeout in seconds.
        """
        self.base_url = base_url.rstrip("/")
        self.token = token
        self.session = session or requests.Session()
        self.timeout = timeout

    # ------------------------------------------------------------------
    # Low level HTTP helpers
    # ------------------------------------------------------------------
    def _request(
        self,
        method: str,
        path: str,
        *,
        params: Dict[str, Any] | None = None,
        json_body: Any | None = None,
        form: Dict[str, Any] | None = None,
        files: Dict[str, Any] | None = None,
    ) -> Tuple[Optional[Any], Optional[Error]]:
        """Perform an HTTP request and unwrap the response envelope.

        Returns ``(envelope, None)`` on success, ``(None, error)`` on
        failure.
        """
        url = f"{self.base_url}{path}"
        headers: Dict[str, str] = {"Accept": "application/json"}
        if self.token:
            headers["Authorization"] = f"Bearer {self.token}"
        try:
            logger.debug("Sending %s request to %s", method, url)
            response = self.session.request(
                method=method,
                url=url,
                params=params,
                json=json_body,
                data=form,
                files=files,
                headers=headers,
                timeout=self.timeout,
            )
            response.raise_for_status()
            if response.content:
                return response.json(), None
            return {}, None
        except requests.HTTPError as exc:
            status = exc.response.status_code if exc.response is not None else None
            message = ""
            if exc.response is not None:
                try:
                    err_json = exc.response.json()
                    message = err_json.get("message") or err_json.get("detail") or str(err_json)
                except ValueError:
                    message = exc.response.text
            if not message:
                message = str(exc)
            logger.error("API request failed (%s): %s", status, message)
            return None, {"status_code": status, "message": message}
        except requests.RequestException as exc:
            logger.error("API request failed: %s", exc)
            return None, {"status_code": None, "message": str(exc)}

    @staticmethod
    def _event_form(fields: Dict[str, Any]) -> Dict[str, str]:
        return {
            name: "" if fields[name] is None else str(fields[name])
            for name in EVENT_FIELDS
            if name in fields
        }

    @staticmethod
    def _image_files(image_path: Optional[str]) -> Optional[Dict[str, Any]]:
        if not image_path:
            return None
        media_type = mimetypes.guess_type(image_path)[0] or "application/octet-stream"
        with open(image_path, "rb") as f:
            content = f.read()
        return {"banner_image": (os.path.basename(image_path), content, media_type)}

    # ------------------------------------------------------------------
    # Auth operations
    # ------------------------------------------------------------------
    def register(self, nama: str, email: str, password: str, role: str = "user") -> Tuple[Optional[Dict[str, Any]], Optional[Error]]:
        """Create an account and return the new user."""
        body, error = self._request(
            "POST", "/auth/register",
            json_body={"nama": nama, "email": email, "password": password, "role": role},
        )
        if error:
            return None, error
        return body.get("data"), None

    def login(self, email: str, password: str) -> Tuple[Optional[Dict[str, Any]], Optional[Error]]:
        """Log in and remember the returned token for later calls."""
        body, error = self._request(
            "POST", "/auth/login", json_body={"email": email, "password": password}
        )
        if error:
            return None, error
        data = body.get("data") or {}
        self.token = data.get("token")
        return data.get("user"), None

    def me(self) -> Tuple[Optional[Dict[str, Any]], Optional[Error]]:
        body, error = self._request("GET", "/auth/me")
        if error:
            return None, error
        return body.get("data"), None

    def forgot_password(self, email: str) -> Tuple[bool, Optional[Error]]:
        """Ask for a reset token.  Succeeds whether or not ``email`` exists."""
        _, error = self._request("POST", "/auth/forgot-password", json_body={"email": email})
        return error is None, error

    def reset_password(self, token: str, new_password: str) -> Tuple[bool, Optional[Error]]:
        _, error = self._request(
            "POST", "/auth/reset-password",
            json_body={"token": token, "new_password": new_password},
        )
        return error is None, error

    def list_users(self) -> Tuple[List[Dict[str, Any]], Optional[Error]]:
        """All accounts (organizers only)."""
        body, error = self._request("GET", "/users")
        if error:
            return [], error
        return body.get("data") or [], None

    # ------------------------------------------------------------------
    # Event operations
    # ------------------------------------------------------------------
    def list_events(
        self,
        *,
        search: Optional[str] = None,
        category: Optional[str] = None,
        month: Optional[int] = None,
        year: Optional[int] = None,
        start_date: Optional[str] = None,
        end_date: Optional[str] = None,
    ) -> Tuple[List[Dict[str, Any]], Optional[Error]]:
        """Retrieve events, optionally filtered.

        ``is_bookmarked`` in the result reflects the logged-in user, if any.
        """
        params = {
            "search": search,
            "category": category,
            "month": month,
            "year": year,
            "startDate": start_date,
            "endDate": end_date,
        }
        body, error = self._request(
            "GET", "/events", params={k: v for k, v in params.items() if v is not None}
        )
        if error:
            return [], error
        return body.get("data") or [], None

    def list_categories(self) -> Tuple[List[str], Optional[Error]]:
        body, error = self._request("GET", "/events/categories")
        if error:
            return [], error
        return body.get("data") or [], None

    def get_event(self, event_id: int) -> Tuple[Optional[Dict[str, Any]], Optional[Error]]:
        body, error = self._request("GET", f"/events/{event_id}")
        if error:
            return None, error
        return body.get("data"), None

    def create_event(self, fields: Dict[str, Any], image_path: Optional[str] = None) -> Tuple[Optional[int], Optional[Error]]:
        """Create an event and return its id.

        Args:
            fields: Event fields keyed by their API names
                (``nama_acara``, ``tanggal_mulai``, ``lokasi``, ...).
            image_path: Optional JPEG/PNG file to upload as the banner.
        """
        body, error = self._request(
            "POST", "/events", form=self._event_form(fields), files=self._image_files(image_path)
        )
        if error:
            return None, error
        return (body.get("data") or {}).get("event_id"), None

    def update_event(self, event_id: int, fields: Dict[str, Any], image_path: Optional[str] = None) -> Tuple[bool, Optional[Error]]:
        """Replace an event's fields.  The banner is kept unless ``image_path`` is given."""
        _, error = self._request(
            "PUT", f"/events/{event_id}",
            form=self._event_form(fields), files=self._image_files(image_path),
        )
        return error is None, error

    def delete_event(self, event_id: int) -> Tuple[bool, Optional[Error]]:
        _, error = self._request("DELETE", f"/events/{event_id}")
        return error is None, error

    # ------------------------------------------------------------------
    # Bookmark operations
    # ------------------------------------------------------------------
    def bookmark(self, event_id: int) -> Tuple[bool, Optional[Error]]:
        _, error = self._request("POST", f"/events/{event_id}/bookmark")
        return error is None, error

    def remove_bookmark(self, event_id: int) -> Tuple[bool, Optional[Error]]:
        _, error = self._request("DELETE", f"/events/{event_id}/bookmark")
        return error is None, error

    def list_bookmarks(self) -> Tuple[List[Dict[str, Any]], Optional[Error]]:
        body, error = self._request("GET", "/bookmarks")
        if error:
            return [], error
        return body.get("data") or [], None
