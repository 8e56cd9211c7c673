"""Reglas del foro: crear posts/comentarios, likes y etiquetas."""
from __future__ import annotations
import datetime as dt
import uuid
from collections import Counter
from typing import List, Optional, Tuple

from core.models import ForumComment, ForumPost


def _now_iso() -> str:
    return dt.datetime.now(dt.timezone.utc).isoformat()


def parse_tags(tags_text: str) -> List[str]:
    return [t.strip() for t in (tags_text or "").split(",") if t.strip()]


def new_post(author: str, title: str, content: str, tags_text: str = "",
             author_avatar: Optional[str] = None) -> ForumPost:
    if not title.strip() or not content.strip():
        raise ValueError("El post necesita título y contenido")
    return ForumPost(
        id="",  # lo asigna el backend
        author=author,
        title=title.strip(),
        content=content.strip(),
        tags=parse_tags(tags_text),
        created_at=_now_iso(),
        author_avatar=author_avatar,
    )


def new_comment(author: str, content: str, author_avatar: Optional[str] = None) -> ForumComment:
    if not content.strip():
        raise ValueError("Comentario vacío")
    return ForumComment(id=uuid.uuid4().hex, author=author, content=content.strip(),
                        created_at=_now_iso(), author_avatar=author_avatar)


def toggle_like(post: ForumPost, username: str) -> ForumPost:
    if username in post.likes:
        post.likes = [u for u in post.likes if u != username]
    else:
        post.likes = post.likes + [username]
    return post


def tag_counts(posts: List[ForumPost]) -> List[Tuple[str, int]]:
    counts = Counter(tag for p in posts for tag in p.tags)
    return sorted(counts.items(), key=lambda kv: (-kv[1], kv[0]))


def filter_by_tag(posts: List[ForumPost], tag: Optional[str]) -> List[ForumPost]:
    if not tag:
        return list(posts)
    return [p for p in posts if tag in p.tags]
