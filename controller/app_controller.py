import datetime as dt
import uuid
from dataclasses import replace
from typing import List, Optional

from loguru import logger

from core.exceptions import PBError
from core.models import (
    FEEDBACK_TYPES,
    ChecklistItem,
    Feedback,
    ForumPost,
    Note,
    PhoneUsageSurvey,
    Project,
    RemediationPlan,
    SleepSurvey,
    StudentProfile,
    Task,
    UserData,
    UserSettings,
)
from services import forum, ssr_classifier
from services.gemini_service import GeminiService
from services.pomodoro import PomodoroTimer
from services.schedule import (
    DashboardStats,
    TrendStats,
    community_trends,
    dashboard_stats,
    find_task,
    split_study_block,
    tasks_for_day,
)
from storage.pocketbase import PocketBaseClient

AVATAR_URL = "https://api.dicebear.com/7.x/notionists/svg?seed={seed}"


def _now_iso() -> str:
    return dt.datetime.now(dt.timezone.utc).isoformat()


class AppController:
    """Coordina la UI con el backend (PocketBase), Gemini y los servicios de dominio.

    Los errores de red/backend se loguean y la UI recibe el estado por defecto.
    """
    def __init__(self, client: PocketBaseClient, ai: GeminiService):
        self.client = client
        self.ai = ai
        self.data = UserData()
        self.settings = UserSettings()
        self.avatar = ""
        self.record_id: Optional[str] = None
        self.notes: List[Note] = []
        self.posts: List[ForumPost] = []
        self.pomodoro = PomodoroTimer()

    @property
    def username(self) -> str:
        return self.client.username

    # ---- session ----
    def load_user(self) -> UserData:
        default_avatar = AVATAR_URL.format(seed=self.username)
        try:
            rec = self.client.ensure_study_data(self.username, avatar=default_avatar)
        except PBError as e:
            logger.error(f"Could not load user data: {e}")
            self.data = UserData()
            return self.data
        self.record_id = rec.get("id")
        self.data = UserData.from_record(rec.get("data"))
        settings = rec.get("settings") or {}
        self.settings = UserSettings(
            notifications=settings.get("notifications", True),
            sound_enabled=settings.get("sound_enabled", True),
        )
        self.avatar = rec.get("avatar") or default_avatar
        logger.info(f"Loaded {len(self.data.tasks)} tasks, {len(self.data.projects)} projects")
        return self.data

    def save(self) -> bool:
        if not self.record_id:
            logger.warning("No study data record; skipping save")
            return False
        try:
            self.client.update_study_data(self.record_id, self.data.to_record())
            return True
        except PBError as e:
            logger.error(f"Error saving data: {e}")
            return False

    def logout(self) -> None:
        self.client.logout()
        self.data = UserData()
        self.record_id = None
        self.notes = []
        self.posts = []

    # ---- tasks ----
    def tasks_for(self, date: str) -> List[Task]:
        return tasks_for_day(self.data.tasks, date)

    def add_task(self, title: str, date: str, start_time: str, duration: int, category: str = "study",
                 description: str = "", auto_split: bool = True) -> List[Task]:
        if not title.strip():
            return []
        new_tasks = split_study_block(title.strip(), date, start_time, duration, category, description, auto_split)
        self.data.tasks.extend(new_tasks)
        self.save()
        return new_tasks

    def update_task(self, task_id: str, **fields) -> Optional[Task]:
        task = find_task(self.data.tasks, task_id)
        if task is None:
            return None
        updated = replace(task, **fields)
        self.data.tasks = [updated if t.id == task_id else t for t in self.data.tasks]
        self.save()
        return updated

    def toggle_task(self, task_id: str) -> Optional[Task]:
        task = find_task(self.data.tasks, task_id)
        if task is None:
            return None
        return self.update_task(task_id, completed=not task.completed)

    def delete_task(self, task_id: str) -> bool:
        before = len(self.data.tasks)
        self.data.tasks = [t for t in self.data.tasks if t.id != task_id]
        if len(self.data.tasks) == before:
            return False
        self.save()
        return True

    # ---- projects ----
    def add_project(self, name: str, deadline: str = "", progress: int = 0, description: str = "") -> Optional[Project]:
        if not name.strip():
            return None
        project = Project(id=uuid.uuid4().hex, name=name.strip(), deadline=deadline,
                          progress=progress, description=description)
        self.data.projects.append(project)
        self.save()
        return project

    def update_project(self, project_id: str, **fields) -> Optional[Project]:
        current = next((p for p in self.data.projects if p.id == project_id), None)
        if current is None:
            return None
        updated = replace(current, **fields)
        self.data.projects = [updated if p.id == project_id else p for p in self.data.projects]
        self.save()
        return updated

    def delete_project(self, project_id: str) -> None:
        self.data.projects = [p for p in self.data.projects if p.id != project_id]
        self.save()

    # ---- notes ----
    def load_notes(self) -> List[Note]:
        try:
            self.notes = [Note.from_record(r) for r in self.client.list_notes()]
        except PBError as e:
            logger.error(f"Error loading notes: {e}")
            self.notes = []
        return self.notes

    def create_note(self, note_type: str = "text") -> Optional[Note]:
        now = _now_iso()
        note = Note(id="", title="", content="", type=note_type, created_at=now, updated_at=now,
                    items=[ChecklistItem("")] if note_type == "checklist" else [])
        try:
            rec = self.client.create_note(**note.to_record())
        except PBError as e:
            logger.error(f"Error creating note: {e}")
            return None
        note.id = rec.get("id", "")
        self.notes.insert(0, note)
        return note

    def save_note(self, note: Note) -> bool:
        note.updated_at = _now_iso()
        try:
            self.client.update_note(note.id, **note.to_record())
        except PBError as e:
            logger.error(f"Error saving note {note.id}: {e}")
            return False
        self.notes = [note if n.id == note.id else n for n in self.notes]
        return True

    def delete_note(self, note_id: str) -> bool:
        try:
            self.client.delete_note(note_id)
        except PBError as e:
            logger.error(f"Error deleting note {note_id}: {e}")
            return False
        self.notes = [n for n in self.notes if n.id != note_id]
        return True

    def search_notes(self, term: str) -> List[Note]:
        term = (term or "").lower()
        return [n for n in self.notes if term in n.title.lower() or term in n.content.lower()]

    def toggle_checklist_item(self, note: Note, index: int) -> bool:
        if not 0 <= index < len(note.items):
            return False
        item = note.items[index]
        item.done = not item.done
        return self.save_note(note)

    # ---- forum ----
    def load_posts(self) -> List[ForumPost]:
        try:
            self.posts = [ForumPost.from_record(r) for r in self.client.list_posts()]
        except PBError as e:
            logger.error(f"Error loading forum posts: {e}")
            self.posts = []
        return self.posts

    def create_post(self, title: str, content: str, tags_text: str = "") -> Optional[ForumPost]:
        try:
            post = forum.new_post(self.username, title, content, tags_text, author_avatar=self.avatar)
        except ValueError as e:
            logger.warning(f"Invalid post: {e}")
            return None
        try:
            rec = self.client.create_post(**post.to_record())
        except PBError as e:
            logger.error(f"Error creating post: {e}")
            return None
        post.id = rec.get("id", "")
        self.posts.insert(0, post)
        return post

    def _find_post(self, post_id: str) -> Optional[ForumPost]:
        return next((p for p in self.posts if p.id == post_id), None)

    def delete_post(self, post_id: str) -> bool:
        post = self._find_post(post_id)
        if post is None or post.author != self.username:
            return False
        try:
            self.client.delete_post(post_id)
        except PBError as e:
            logger.error(f"Error deleting post {post_id}: {e}")
            return False
        self.posts = [p for p in self.posts if p.id != post_id]
        return True

    def like_post(self, post_id: str) -> Optional[ForumPost]:
        post = self._find_post(post_id)
        if post is None:
            return None
        previous = list(post.likes)
        forum.toggle_like(post, self.username)
        try:
            self.client.update_post(post_id, likes=post.likes)
        except PBError as e:
            logger.error(f"Error updating likes for {post_id}: {e}")
            post.likes = previous
            return None
        return post

    def comment_post(self, post_id: str, content: str) -> Optional[ForumPost]:
        post = self._find_post(post_id)
        if post is None:
            return None
        try:
            comment = forum.new_comment(self.username, content, author_avatar=self.avatar)
        except ValueError:
            return None
        post.comments.append(comment)
        try:
            self.client.update_post(post_id, comments=post.to_record()["comments"])
        except PBError as e:
            logger.error(f"Error saving comment on {post_id}: {e}")
            post.comments.remove(comment)
            return None
        return post

    # ---- SSR ----
    def needs_onboarding(self) -> bool:
        return self.data.profile is None

    def complete_survey(self, phone: PhoneUsageSurvey, sleep: SleepSurvey,
                        today: Optional[dt.date] = None) -> StudentProfile:
        """Clasifica la encuesta, pide a Gemini la agenda de hoy y guarda todo.

        La agenda generada reemplaza solo las tareas de hoy; si Gemini no
        devuelve nada, las tareas quedan como estaban.
        """
        today = today or dt.date.today()
        analysis = ssr_classifier.build_analysis(phone, sleep)
        profile = StudentProfile(name=self.username, phone_survey=phone, sleep_survey=sleep, analysis=analysis)

        hours = ssr_classifier.available_study_hours(phone)
        topics = ssr_classifier.focus_topics(phone)
        date = today.isoformat()
        initial_tasks = self.ai.generate_smart_schedule(topics, date, hours)

        self.data.profile = profile
        if initial_tasks:
            self.data.tasks = [t for t in self.data.tasks if t.date != date] + initial_tasks
        else:
            logger.warning("No AI schedule generated; keeping current tasks")
        self.save()
        logger.info(f"SSR profile saved: phone={analysis.phone.group_name} sleep={analysis.sleep.group_name}")
        return profile

    def skip_survey(self) -> StudentProfile:
        self.data.profile = ssr_classifier.demo_profile(self.username)
        self.save()
        return self.data.profile

    # ---- AI ----
    def remediation_plan(self, subject: str, problem: str) -> Optional[RemediationPlan]:
        if not subject.strip() or not problem.strip():
            return None
        return self.ai.generate_remediation_plan(subject.strip(), problem.strip())

    def ai_usage_report(self) -> Optional[dict]:
        profile = self.data.profile
        if profile is None or not profile.phone_survey.is_complete():
            return None
        return self.ai.analyze_student_profile(profile.phone_survey)

    # ---- stats ----
    def dashboard(self) -> DashboardStats:
        return dashboard_stats(self.data.tasks, self.data.projects)

    def _all_study_data(self) -> List[dict]:
        try:
            return self.client.list_all_study_data()
        except PBError as e:
            logger.error(f"Error loading community data: {e}")
            return []

    def community_trends(self) -> TrendStats:
        records = self._all_study_data()
        return community_trends([UserData.from_record(r.get("data")).tasks for r in records])

    def user_directory(self, term: str = "") -> List[dict]:
        term = (term or "").lower()
        users = []
        for r in self._all_study_data():
            name = r.get("username") or ""
            if term in name.lower():
                data = UserData.from_record(r.get("data"))
                users.append({
                    "username": name,
                    "avatar": r.get("avatar") or "",
                    "tasks": len(data.tasks),
                    "completed": sum(1 for t in data.tasks if t.completed),
                    "has_profile": data.profile is not None,
                })
        return users

    # ---- settings ----
    def update_settings(self, notifications: bool, sound_enabled: bool, avatar: Optional[str] = None) -> bool:
        self.settings = UserSettings(notifications=notifications, sound_enabled=sound_enabled)
        fields = {"settings": {"notifications": notifications, "sound_enabled": sound_enabled}}
        if avatar is not None:
            self.avatar = avatar
            fields["avatar"] = avatar
        if not self.record_id:
            return False
        try:
            self.client.update_profile_fields(self.record_id, **fields)
            return True
        except PBError as e:
            logger.error(f"Error saving settings: {e}")
            return False

    # ---- feedback ----
    def submit_feedback(self, fb_type: str, content: str) -> bool:
        if not content.strip():
            return False
        if fb_type not in FEEDBACK_TYPES:
            fb_type = "other"
        try:
            self.client.create_feedback(author=self.username, type=fb_type,
                                        content=content.strip(), created_at=_now_iso())
            return True
        except PBError as e:
            logger.error(f"Error sending feedback: {e}")
            return False

    def load_feedback(self) -> List[Feedback]:
        try:
            return [Feedback.from_record(r) for r in self.client.list_feedback()]
        except PBError as e:
            logger.error(f"Error loading feedback: {e}")
            return []

    # ---- pomodoro ----
    def sync_pomodoro(self, now: Optional[dt.datetime] = None) -> Optional[Task]:
        return self.pomodoro.sync_with_schedule(self.data.tasks, now or dt.datetime.now())
