from __future__ import annotations
import requests
from typing import List, Dict, Any, Optional
from core.config import HTTP_TIMEOUT
from core.exceptions import PBError

# colecciones (ver pb_bootstrap.py)
STUDY_DATA = "study_data"
NOTES = "notes"
FORUM_POSTS = "forum_posts"
FEEDBACKS = "feedbacks"


class PocketBaseClient:
    def __init__(self, base_url: str, timeout: float = HTTP_TIMEOUT):
        self.base_url = base_url.rstrip("/")
        self.timeout = timeout
        self.session = requests.Session()
        self.token: Optional[str] = ""
        self.user_id: Optional[str] = ""
        self.current_user: Dict[str, Any] = {}

    def _records_url(self, collection: str, record_id: Optional[str] = None) -> str:
        url = f"{self.base_url}/api/collections/{collection}/records"
        return f"{url}/{record_id}" if record_id else url

    def _send(self, method: str, url: str, what: str, **kwargs) -> requests.Response:
        try:
            r = self.session.request(method, url, timeout=self.timeout, **kwargs)
        except requests.RequestException as e:
            raise PBError(f"{what} failed: {e}") from e
        if not r.ok:
            raise PBError(f"{what} failed: {r.status_code} {r.text}", status=r.status_code)
        return r

    def _list(self, collection: str, filt: Optional[str] = None, sort: Optional[str] = None,
              per_page: int = 200) -> List[Dict[str, Any]]:
        params: Dict[str, Any] = {"perPage": per_page}
        if filt:
            params["filter"] = filt
        if sort:
            params["sort"] = sort
        r = self._send("GET", self._records_url(collection), f"List {collection}", params=params)
        return r.json().get("items", [])

    def _create(self, collection: str, payload: Dict[str, Any]) -> Dict[str, Any]:
        r = self._send("POST", self._records_url(collection), f"Create {collection}", json=payload)
        return r.json()

    def _patch(self, collection: str, record_id: str, fields: Dict[str, Any]) -> Dict[str, Any]:
        r = self._send("PATCH", self._records_url(collection, record_id), f"Update {collection}/{record_id}", json=fields)
        return r.json()

    def _delete(self, collection: str, record_id: str) -> None:
        self._send("DELETE", self._records_url(collection, record_id), f"Delete {collection}/{record_id}")

    # ---------- auth ----------
    def login(self, identity: str, password: str) -> bool:
        url = f"{self.base_url}/api/collections/users/auth-with-password"
        r = self._send("POST", url, "Login", json={"identity": identity, "password": password})
        data = r.json()
        self.token = data.get("token")
        self.current_user = data.get("record", {}) or {}
        self.user_id = self.current_user.get("id")
        if not self.token or not self.user_id:
            raise PBError("Missing token or user id in login response")
        self.session.headers.update({"Authorization": f"Bearer {self.token}"})
        return True

    def register(self, username: str, email: str, password: str) -> bool:
        """Crea el usuario y deja la sesión iniciada."""
        payload = {"username": username, "email": email, "password": password, "passwordConfirm": password}
        self._create("users", payload)
        return self.login(email, password)

    def logout(self) -> None:
        self.session.headers.pop("Authorization", None)
        self.token = ""
        self.user_id = ""
        self.current_user = {}

    @property
    def username(self) -> str:
        return self.current_user.get("username") or self.current_user.get("name") or "Usuario"

    # ---------- study data (un documento por usuario) ----------
    def get_study_data(self) -> Optional[Dict[str, Any]]:
        items = self._list(STUDY_DATA, filt=f'owner = "{self.user_id}"', per_page=1)
        return items[0] if items else None

    def ensure_study_data(self, username: str, avatar: str = "") -> Dict[str, Any]:
        rec = self.get_study_data()
        if rec:
            return rec
        payload = {
            "owner": self.user_id,
            "username": username,
            "avatar": avatar,
            "settings": {"notifications": True, "sound_enabled": True},
            "data": {"tasks": [], "projects": [], "profile": None},
        }
        return self._create(STUDY_DATA, payload)

    def update_study_data(self, record_id: str, data: Dict[str, Any]) -> Dict[str, Any]:
        return self._patch(STUDY_DATA, record_id, {"data": data})

    def update_profile_fields(self, record_id: str, **fields) -> Dict[str, Any]:
        return self._patch(STUDY_DATA, record_id, fields)

    def list_all_study_data(self) -> List[Dict[str, Any]]:
        return self._list(STUDY_DATA, sort="username", per_page=500)

    # ---------- notes ----------
    def list_notes(self) -> List[Dict[str, Any]]:
        return self._list(NOTES, filt=f'owner = "{self.user_id}"', sort="-updated", per_page=500)

    def create_note(self, **fields) -> Dict[str, Any]:
        return self._create(NOTES, dict(fields, owner=self.user_id))

    def update_note(self, note_id: str, **fields) -> Dict[str, Any]:
        return self._patch(NOTES, note_id, fields)

    def delete_note(self, note_id: str) -> None:
        self._delete(NOTES, note_id)

    # ---------- forum ----------
    def list_posts(self) -> List[Dict[str, Any]]:
        return self._list(FORUM_POSTS, sort="-created", per_page=200)

    def create_post(self, **fields) -> Dict[str, Any]:
        return self._create(FORUM_POSTS, dict(fields, owner=self.user_id))

    def update_post(self, post_id: str, **fields) -> Dict[str, Any]:
        return self._patch(FORUM_POSTS, post_id, fields)

    def delete_post(self, post_id: str) -> None:
        self._delete(FORUM_POSTS, post_id)

    # ---------- feedback ----------
    def list_feedback(self) -> List[Dict[str, Any]]:
        return self._list(FEEDBACKS, sort="-created", per_page=200)

    def create_feedback(self, **fields) -> Dict[str, Any]:
        return self._create(FEEDBACKS, fields)
