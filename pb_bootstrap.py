# ==== pb_bootstrap.py ====
# Crea/actualiza las colecciones de SmartStudy en PocketBase usando la Admin API.
# Ejecutar con:  python pb_bootstrap.py   (lee SMARTSTUDY_PB_URL y las credenciales admin del entorno)

import sys
import requests
from loguru import logger

from core.config import ADMIN_EMAIL, ADMIN_PASSWORD, BASE_URL
from core.log import configure_logging

OWNER_FIELD = {"name": "owner", "type": "relation", "required": True,
               "options": {"collectionId": "_pb_users_auth_", "cascadeDelete": True, "maxSelect": 1}}
OWNER_ONLY = "owner = @request.auth.id"
AUTHENTICATED = "@request.auth.id != ''"


def die(msg):
    logger.error(msg)
    sys.exit(1)


class PBAdmin:
    def __init__(self, base):
        self.base = base.rstrip('/')
        self.s = requests.Session()

    def admin_login(self, email, password):
        r = self.s.post(f"{self.base}/api/admins/auth-with-password", json={
            "identity": email,
            "password": password
        }, timeout=15)
        if not r.ok:
            die(f"[LOGIN] {r.status_code}: {r.text}")
        tok = r.json().get("token")
        if not tok:
            die("[LOGIN] missing token")
        self.s.headers.update({"Authorization": f"Bearer {tok}"})
        logger.info("Admin login OK")

    def get_collection(self, name_or_id):
        r = self.s.get(f"{self.base}/api/collections/{name_or_id}", timeout=15)
        if r.status_code == 404:
            return None
        if not r.ok:
            die(f"[GET {name_or_id}] {r.status_code}: {r.text}")
        return r.json()

    def create_collection(self, payload):
        r = self.s.post(f"{self.base}/api/collections", json=payload, timeout=20)
        if not r.ok:
            die(f"[CREATE {payload.get('name')}] {r.status_code}: {r.text}")
        return r.json()

    def update_collection(self, id_or_name, payload):
        r = self.s.patch(f"{self.base}/api/collections/{id_or_name}", json=payload, timeout=20)
        if not r.ok:
            die(f"[UPDATE {id_or_name}] {r.status_code}: {r.text}")
        return r.json()


def spec_study_data():
    # un documento por usuario: tasks/projects/profile viajan juntos en "data"
    return {
        "name": "study_data",
        "type": "base",
        "schema": [
            OWNER_FIELD,
            {"name": "username", "type": "text", "required": True, "options": {"min": 1, "max": 120}},
            {"name": "avatar", "type": "url", "required": False, "options": {}},
            {"name": "settings", "type": "json", "required": False, "options": {}},
            {"name": "data", "type": "json", "required": False, "options": {}},
        ],
        "indexes": [
            "CREATE UNIQUE INDEX idx_study_data_owner ON study_data (owner)"
        ],
        # el directorio de usuarios y las tendencias leen todos los documentos
        "listRule": AUTHENTICATED,
        "viewRule": AUTHENTICATED,
        "createRule": AUTHENTICATED,
        "updateRule": OWNER_ONLY,
        "deleteRule": OWNER_ONLY
    }


def spec_notes():
    return {
        "name": "notes",
        "type": "base",
        "schema": [
            OWNER_FIELD,
            {"name": "title", "type": "text", "required": False, "options": {"max": 200}},
            {"name": "content", "type": "editor", "required": False, "options": {}},
            {"name": "type", "type": "select", "required": True,
             "options": {"maxSelect": 1, "values": ["text", "checklist"]}},
            {"name": "items", "type": "json", "required": False, "options": {}},
            {"name": "tags", "type": "json", "required": False, "options": {}},
            {"name": "color", "type": "text", "required": False, "options": {"pattern": "^#?[0-9A-Fa-f]{3,8}$"}},
            {"name": "created_at", "type": "text", "required": False, "options": {}},
            {"name": "updated_at", "type": "text", "required": False, "options": {}},
        ],
        "indexes": [
            "CREATE INDEX idx_notes_owner ON notes (owner)"
        ],
        "listRule": OWNER_ONLY,
        "viewRule": OWNER_ONLY,
        "createRule": AUTHENTICATED,
        "updateRule": OWNER_ONLY,
        "deleteRule": OWNER_ONLY
    }


def spec_forum_posts():
    return {
        "name": "forum_posts",
        "type": "base",
        "schema": [
            OWNER_FIELD,
            {"name": "author", "type": "text", "required": True, "options": {"max": 120}},
            {"name": "author_avatar", "type": "text", "required": False, "options": {}},
            {"name": "title", "type": "text", "required": True, "options": {"min": 1, "max": 200}},
            {"name": "content", "type": "text", "required": True, "options": {"max": 10000}},
            {"name": "likes", "type": "json", "required": False, "options": {}},
            {"name": "comments", "type": "json", "required": False, "options": {}},
            {"name": "tags", "type": "json", "required": False, "options": {}},
            {"name": "created_at", "type": "text", "required": False, "options": {}},
        ],
        "indexes": [],
        "listRule": AUTHENTICATED,
        "viewRule": AUTHENTICATED,
        "createRule": AUTHENTICATED,
        # likes y comentarios los escribe cualquier usuario logueado
        "updateRule": AUTHENTICATED,
        "deleteRule": OWNER_ONLY
    }


def spec_feedbacks():
    return {
        "name": "feedbacks",
        "type": "base",
        "schema": [
            {"name": "author", "type": "text", "required": True, "options": {"max": 120}},
            {"name": "type", "type": "select", "required": True,
             "options": {"maxSelect": 1, "values": ["feature", "bug", "other"]}},
            {"name": "content", "type": "text", "required": True, "options": {"min": 1, "max": 5000}},
            {"name": "created_at", "type": "text", "required": False, "options": {}},
        ],
        "indexes": [],
        "listRule": AUTHENTICATED,
        "viewRule": AUTHENTICATED,
        "createRule": AUTHENTICATED,
        "updateRule": None,
        "deleteRule": None
    }


COLLECTIONS = (spec_study_data, spec_notes, spec_forum_posts, spec_feedbacks)


def upsert_collection(pb: PBAdmin, spec: dict):
    existing = pb.get_collection(spec["name"])
    if not existing:
        return pb.create_collection(spec)
    cid = existing.get("id") or spec["name"]
    # Asegura que el nombre permanezca igual para patch por id
    spec_with_id_name = spec.copy()
    spec_with_id_name["id"] = cid
    spec_with_id_name["name"] = existing["name"]
    return pb.update_collection(cid, spec_with_id_name)


def main():
    configure_logging()
    if not ADMIN_EMAIL or not ADMIN_PASSWORD:
        die("Set SMARTSTUDY_PB_ADMIN_EMAIL and SMARTSTUDY_PB_ADMIN_PASSWORD")
    pb = PBAdmin(BASE_URL)
    pb.admin_login(ADMIN_EMAIL, ADMIN_PASSWORD)

    for spec in COLLECTIONS:
        col = upsert_collection(pb, spec())
        logger.info(f"OK: {col.get('name')} {col.get('id')}")

    logger.info("Bootstrap complete.")


if __name__ == "__main__":
    main()
