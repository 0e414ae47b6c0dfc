"""Session management for per-user lookup state"""

import asyncio
from typing import Dict, Optional
from datetime import datetime
from weatherlookup.config import settings
from weatherlookup.core.lookup import ActionTracker, LookupResult
from weatherlookup.models.lookup import DisplayModel
from weatherlookup.models.weather import Units, WeatherRequest
import logging

logger = logging.getLogger(__name__)


class UserSession:
    """Represents one user's lookup state"""

    def __init__(self, session_id: str):
        self.session_id = session_id
        self.created_at = datetime.now()
        self.last_accessed = datetime.now()
        self.tracker = ActionTracker()
        self.units = Units(settings.default_units)
        self.last_request: Optional[WeatherRequest] = None
        self.display: Optional[DisplayModel] = None

    def touch(self):
        """Update last accessed time"""
        self.last_accessed = datetime.now()

    def apply(self, result: LookupResult) -> bool:
        """Overwrite the displayed result unless a newer action has started."""
        if result.superseded or not self.tracker.is_current(result.generation):
            return False
        self.display = result.display
        if result.succeeded:
            self.last_request = result.request
        return True

    @property
    def age_minutes(self) -> float:
        """Get session age in minutes"""
        return (datetime.now() - self.created_at).total_seconds() / 60

    @property
    def idle_minutes(self) -> float:
        """Get idle time in minutes"""
        return (datetime.now() - self.last_accessed).total_seconds() / 60


class SessionManager:
    """Manages lookup sessions for users"""

    _instance: Optional["SessionManager"] = None

    def __new__(cls):
        """Implements the singleton pattern for the SessionManager."""
        if cls._instance is None:
            cls._instance = super().__new__(cls)
        return cls._instance

    def __init__(self):
        """Initializes the session manager's state."""
        if not hasattr(self, "_initialized"):
            self._initialized = True
            self._sessions: Dict[str, UserSession] = {}
            self._lock = asyncio.Lock()
            self._cleanup_task: Optional[asyncio.Task] = None
            self.session_timeout_minutes = settings.session_timeout_minutes
            self.idle_timeout_minutes = settings.session_idle_timeout_minutes

    async def start(self):
        """Start the cleanup task"""
        if not self._cleanup_task:
            self._cleanup_task = asyncio.create_task(self._cleanup_loop())
            logger.info("Session manager started")

    async def stop(self):
        """Stop the cleanup task and forget all sessions"""
        if self._cleanup_task:
            self._cleanup_task.cancel()
            try:
                await self._cleanup_task
            except asyncio.CancelledError:
                pass
            self._cleanup_task = None

        async with self._lock:
            self._sessions.clear()

        logger.info("Session manager stopped")

    async def get_or_create_session(self, session_id: str) -> UserSession:
        """Get existing session or create new one"""
        async with self._lock:
            if session_id in self._sessions:
                session = self._sessions[session_id]
                session.touch()
                return session

            logger.info(f"Creating new session {session_id}")
            session = UserSession(session_id)
            self._sessions[session_id] = session
            return session

    async def get_session(self, session_id: str) -> Optional[UserSession]:
        """Get existing session by ID"""
        async with self._lock:
            session = self._sessions.get(session_id)
            if session:
                session.touch()
            return session

    async def destroy_session(self, session_id: str):
        """Destroy a specific session"""
        async with self._lock:
            if self._sessions.pop(session_id, None) is not None:
                logger.info(f"Destroyed session {session_id}")

    async def _cleanup_loop(self):
        """Background task to clean up expired sessions"""
        while True:
            try:
                await asyncio.sleep(60)
                await self._cleanup_expired_sessions()
            except asyncio.CancelledError:
                break
            except Exception as e:
                logger.error(f"Error in cleanup loop: {e}")

    async def _cleanup_expired_sessions(self):
        """Remove expired or idle sessions"""
        async with self._lock:
            expired_sessions = [
                session_id
                for session_id, session in self._sessions.items()
                if session.age_minutes > self.session_timeout_minutes
                or session.idle_minutes > self.idle_timeout_minutes
            ]

            for session_id in expired_sessions:
                logger.info(f"Cleaning up expired session {session_id}")
                del self._sessions[session_id]

    @property
    def active_sessions(self) -> int:
        """Get count of active sessions"""
        return len(self._sessions)


# Global instance
session_manager = SessionManager()
