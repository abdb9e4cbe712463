"""
JSON file memory store.

Keeps the agent's memory in qa-agent.memory.json at the project root.
The whole file is loaded by open() and written back by flush(); every other
operation works on the in-memory snapshot.
"""
import json
from datetime import datetime
from pathlib import Path
from typing import Any, Dict, List, Optional

from core.domain.memory import (
    AppMemoryProfile,
    MemorySnapshot,
    ProcessedTask,
    UserCorrection,
    UserPreferences
)
from core.interfaces.memory_store import IMemoryStore
from core.services.metrics.logger import StructuredLogger, get_logger


MEMORY_FILE_NAME = "qa-agent.memory.json"


class JsonMemoryStore(IMemoryStore):
    """Memory store backed by a single JSON file."""

    def __init__(
        self,
        project_root: Optional[str] = None,
        file_name: str = MEMORY_FILE_NAME,
        logger: Optional[StructuredLogger] = None
    ):
        """Initialize store.

        Args:
            project_root: Directory holding the memory file (cwd by default)
            file_name: Memory file name
            logger: Structured logger
        """
        root = Path(project_root) if project_root else Path.cwd()
        self.path = root / file_name
        self.logger = logger or get_logger()
        self._snapshot: Optional[MemorySnapshot] = None

    @property
    def is_open(self) -> bool:
        return self._snapshot is not None

    def open(self) -> MemorySnapshot:
        """Load the memory file. A missing or unreadable file gives a fresh snapshot."""
        if self._snapshot is not None:
            return self._snapshot

        if not self.path.exists():
            self._snapshot = MemorySnapshot()
            self.logger.log_memory_event("created", str(self.path))
            return self._snapshot

        try:
            with open(self.path, 'r', encoding='utf-8') as f:
                self._snapshot = MemorySnapshot.from_dict(json.load(f))
            self.logger.log_memory_event("loaded", str(self.path))
        except (OSError, ValueError, TypeError, AttributeError) as e:
            # json.JSONDecodeError is a ValueError
            self.logger.warning("memory_load_failed", path=str(self.path), error=str(e))
            self._snapshot = MemorySnapshot()

        return self._snapshot

    def flush(self) -> None:
        """Write the whole snapshot back to disk."""
        snapshot = self._require()
        snapshot.last_updated = datetime.now().isoformat()

        self.path.parent.mkdir(parents=True, exist_ok=True)
        with open(self.path, 'w', encoding='utf-8') as f:
            json.dump(snapshot.to_dict(), f, indent=2, ensure_ascii=False)

        self.logger.log_memory_event("flushed", str(self.path))

    def _require(self) -> MemorySnapshot:
        if self._snapshot is None:
            raise RuntimeError("Memory store is not open; call open() first")
        return self._snapshot

    # Application profiles

    def get_app_profile(self, app_name: str) -> Optional[AppMemoryProfile]:
        return self._require().application_profiles.get(app_name)

    def set_app_profile(self, app_name: str, profile: AppMemoryProfile) -> None:
        profile.name = app_name
        profile.last_used = datetime.now().isoformat()
        self._require().application_profiles[app_name] = profile

    # Preferences

    @staticmethod
    def _preference_attr(key: str) -> str:
        """Accept either the attribute name or the memory file key."""
        if key in UserPreferences.KEYS:
            return key
        for attr, json_key in UserPreferences.KEYS.items():
            if json_key == key:
                return attr
        raise KeyError(f"Unknown preference: {key}")

    def get_preference(self, key: str) -> Any:
        return getattr(self._require().user_preferences, self._preference_attr(key))

    def set_preference(self, key: str, value: Any) -> None:
        setattr(self._require().user_preferences, self._preference_attr(key), value)

    def get_all_preferences(self) -> UserPreferences:
        return self._require().user_preferences

    # Processed tasks

    def record_processed_task(self, task: ProcessedTask) -> None:
        """Insert or replace a processed task; it becomes the last synced task."""
        snapshot = self._require()
        for idx, existing in enumerate(snapshot.processed_tasks):
            if existing.task_id == task.task_id:
                snapshot.processed_tasks[idx] = task
                break
        else:
            snapshot.processed_tasks.append(task)
        snapshot.last_synced_task_id = task.task_id

    def get_processed_task(self, task_id: int) -> Optional[ProcessedTask]:
        for task in self._require().processed_tasks:
            if task.task_id == task_id:
                return task
        return None

    def get_last_synced_task_id(self) -> Optional[int]:
        return self._require().last_synced_task_id

    # Corrections

    def record_correction(self, original_text: str, new_text: str, context_label: str) -> UserCorrection:
        """Remember that `original_text` was edited to `new_text`.

        Repeated edits of the same text bump the frequency and keep the
        latest replacement. Context labels are kept once each.
        """
        snapshot = self._require()
        now = datetime.now().isoformat()

        for correction in snapshot.user_corrections:
            if correction.pattern == original_text:
                correction.frequency += 1
                correction.correction = new_text
                correction.add_example(context_label)
                correction.last_used = now
                return correction

        correction = UserCorrection(
            pattern=original_text,
            correction=new_text,
            examples=[context_label],
            last_used=now
        )
        snapshot.user_corrections.append(correction)
        return correction

    def get_user_corrections(self) -> List[UserCorrection]:
        return sorted(self._require().user_corrections, key=lambda c: c.frequency, reverse=True)

    def suggest_corrections(self, text: str) -> List[UserCorrection]:
        """Corrections whose pattern matches `text` (case-insensitive), most frequent first.

        Suggestions only; nothing is applied to the text.
        """
        needle = (text or "").strip().lower()
        if not needle:
            return []
        return [
            c for c in self.get_user_corrections()
            if c.pattern.strip().lower() == needle or c.pattern.strip().lower() in needle
        ]

    # Maintenance

    def update(self, dotted_key: str, value: Any) -> None:
        """Set a value by dotted path in the file layout, e.g. 'userPreferences.includeWaits'."""
        keys = [k for k in dotted_key.split('.') if k]
        if not keys:
            raise ValueError("Empty memory key")

        data: Dict[str, Any] = self._require().to_dict()
        node = data
        for key in keys[:-1]:
            if not isinstance(node.get(key), dict):
                node[key] = {}
            node = node[key]
        node[keys[-1]] = value

        self._snapshot = MemorySnapshot.from_dict(data)

    def reset(self) -> None:
        """Forget everything and write an empty memory file."""
        self._snapshot = MemorySnapshot()
        self.flush()
        self.logger.log_memory_event("reset", str(self.path))

    def get_stats(self) -> Dict[str, Any]:
        snapshot = self._require()
        return {
            'version': snapshot.version,
            'created_at': snapshot.created_at,
            'last_updated': snapshot.last_updated,
            'processed_tasks': len(snapshot.processed_tasks),
            'application_profiles': len(snapshot.application_profiles),
            'user_corrections': len(snapshot.user_corrections),
            'last_synced_task_id': snapshot.last_synced_task_id,
        }

    def snapshot(self) -> MemorySnapshot:
        return self._require()
