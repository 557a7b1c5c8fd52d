"""Core domain models.

The session controller, the backend client and the stub backend all speak in
these types. Pydantic is used for validation and serialisation at every
data boundary; anything the backend owns (scenes, handles, summaries) is
frozen so the client can only replace it, never edit it.
"""

from __future__ import annotations

from datetime import datetime
from enum import Enum
from typing import Literal

from pydantic import BaseModel, ConfigDict, Field

StoryStatus = Literal["active", "complete"]

DEFAULT_ADVENTURE = 60
DEFAULT_ROMANCE = 20
DEFAULT_NIGHTLIFE = 20


class MoodWeights(BaseModel):
    """Adventure / romance / nightlife weighting sent with a new story."""

    adventure: int = Field(default=DEFAULT_ADVENTURE, ge=0, le=100)
    romance: int = Field(default=DEFAULT_ROMANCE, ge=0, le=100)
    nightlife: int = Field(default=DEFAULT_NIGHTLIFE, ge=0, le=100)

    @property
    def total(self) -> int:
        return self.adventure + self.romance + self.nightlife


class Choice(BaseModel):
    """A selectable option within a scene."""

    model_config = ConfigDict(frozen=True)

    id: str
    text: str


class Scene(BaseModel):
    """One narrative beat: text plus the choices offered after it."""

    model_config = ConfigDict(frozen=True)

    text: str
    choices: tuple[Choice, ...] = ()

    def has_choice(self, choice_id: str) -> bool:
        return any(c.id == choice_id for c in self.choices)


class StoryHandle(BaseModel):
    """Opaque reference to a story owned by the backend."""

    model_config = ConfigDict(frozen=True)

    id: str
    title: str


class StorySummary(BaseModel):
    """Row in the recent stories list."""

    model_config = ConfigDict(frozen=True)

    id: str
    title: str
    # parsed when ISO-formatted, otherwise kept as the raw string
    created_at: datetime | str | None = Field(default=None, union_mode="left_to_right")
    steps: int = 0


class SessionState(str, Enum):
    IDLE = "idle"
    PENDING_START = "pending_start"
    ACTIVE = "active"
    PENDING_CHOOSE = "pending_choose"
    COMPLETE = "complete"


class SessionSnapshot(BaseModel):
    """Read-only view of the controller for rendering."""

    model_config = ConfigDict(frozen=True)

    state: SessionState
    busy: bool
    story: StoryHandle | None = None
    scene: Scene | None = None

    @property
    def is_complete(self) -> bool:
        return self.state is SessionState.COMPLETE


# ---------------------------------------------------------------------------
# Wire payloads — /api/story/*
# ---------------------------------------------------------------------------

class StartRequest(BaseModel):
    protagonist: str
    setting: str
    weights: MoodWeights


class StartResponse(BaseModel):
    story_id: str
    title: str
    scene: Scene

    @property
    def handle(self) -> StoryHandle:
        return StoryHandle(id=self.story_id, title=self.title)


class ChooseRequest(BaseModel):
    story_id: str
    choice_id: str


class ChooseResponse(BaseModel):
    scene: Scene
    is_complete: bool = False


class StoryDetail(BaseModel):
    """Full story as returned by GET /api/story/{id}."""

    id: str
    title: str
    scenes: list[Scene] = Field(default_factory=list)
    status: StoryStatus = "active"

    @property
    def handle(self) -> StoryHandle:
        return StoryHandle(id=self.id, title=self.title)

    @property
    def last_scene(self) -> Scene | None:
        return self.scenes[-1] if self.scenes else None


class StoryList(BaseModel):
    items: list[StorySummary] = Field(default_factory=list)
