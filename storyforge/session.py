"""Session controller — the story state machine.

States:

    IDLE ──start──▶ PENDING_START ──ok──▶ ACTIVE ──choose──▶ PENDING_CHOOSE
                          │                 ▲                   │
                          └─fail─▶ (prior)  └──ok, not done─────┤
                                            ◀──────fail─────────┤
                                                                └─ok, done─▶ COMPLETE

open_existing(id) is a side transition from any settled state: on success it
lands in ACTIVE or COMPLETE depending on the fetched status, on failure
nothing changes.

The controller owns the active {story, scene, completion} triple. Nothing
else mutates it; renderers read snapshot(). While a start or choose request
is in flight ``busy`` is set and further start/choose calls are no-ops, so
responses are always applied in the order their requests were issued.
"""

from __future__ import annotations

import asyncio
import logging
from typing import Protocol

from storyforge.client import BackendClient, TransportError
from storyforge.feed import RecentStoriesFeed
from storyforge.models import (
    MoodWeights,
    Scene,
    SessionSnapshot,
    SessionState,
    StoryHandle,
)
from storyforge.weights import normalize

logger = logging.getLogger(__name__)

START_FAILED = "Unable to start story. Is the backend running?"
CHOOSE_FAILED = "Unable to continue the story."

SECTION_SETUP = "setup"
SECTION_STORY = "story"


# ---------------------------------------------------------------------------
# Presenter — capabilities the controller needs from the UI layer
# ---------------------------------------------------------------------------

class Presenter(Protocol):
    def notify_error(self, message: str) -> None: ...

    def focus_section(self, name: str) -> None: ...


class NullPresenter:
    """Presenter that only logs. Used when no UI is attached."""

    def notify_error(self, message: str) -> None:
        logger.error("%s", message)

    def focus_section(self, name: str) -> None:
        logger.debug("focus section=%s", name)


# ---------------------------------------------------------------------------
# SessionController
# ---------------------------------------------------------------------------

class SessionController:
    """Drives one play session against a story backend.

    Args:
        backend:   Anything matching BackendClient.
        presenter: Receives blocking error notifications and focus requests.
                   Defaults to NullPresenter.
        feed:      Recent stories cache refreshed after starts and completions.
                   Defaults to a RecentStoriesFeed over the same backend.
    """

    def __init__(
        self,
        backend: BackendClient,
        presenter: Presenter | None = None,
        feed: RecentStoriesFeed | None = None,
    ) -> None:
        self._backend = backend
        self._presenter = presenter or NullPresenter()
        self._feed = feed or RecentStoriesFeed(backend)
        self._state = SessionState.IDLE
        self._busy = False
        self._story: StoryHandle | None = None
        self._scene: Scene | None = None
        # bumped on every issued request; a result is applied only if it is still current
        self._generation = 0

    # ------------------------------------------------------------------
    # Read side
    # ------------------------------------------------------------------

    @property
    def state(self) -> SessionState:
        return self._state

    @property
    def busy(self) -> bool:
        return self._busy

    @property
    def story(self) -> StoryHandle | None:
        return self._story

    @property
    def scene(self) -> Scene | None:
        return self._scene

    @property
    def is_complete(self) -> bool:
        return self._state is SessionState.COMPLETE

    @property
    def feed(self) -> RecentStoriesFeed:
        return self._feed

    def snapshot(self) -> SessionSnapshot:
        return SessionSnapshot(
            state=self._state, busy=self._busy,
            story=self._story, scene=self._scene,
        )

    # ------------------------------------------------------------------
    # Lifecycle
    # ------------------------------------------------------------------

    def open(self) -> asyncio.Task[None]:
        """Kick off the initial recent-stories load. Call from a running loop."""
        return self._feed.schedule_refresh(delay=0)

    async def aclose(self) -> None:
        await self._feed.aclose()

    # ------------------------------------------------------------------
    # Transitions
    # ------------------------------------------------------------------

    async def start(self, protagonist: str, setting: str, weights: MoodWeights) -> bool:
        """Start a new story. Returns False if rejected or the request failed."""
        if self._busy:
            logger.debug("start ignored: request already in flight (state=%s)", self._state.value)
            return False

        prior = self._state
        self._busy = True
        self._generation += 1
        self._state = SessionState.PENDING_START
        result = None
        try:
            result = await self._backend.start(protagonist, setting, normalize(weights))
        except TransportError as e:
            logger.warning("start failed: %s", e)
            self._state = prior
            self._presenter.notify_error(START_FAILED)
            return False
        finally:
            self._busy = False
            if result is None:
                self._state = prior

        self._story = result.handle
        self._scene = result.scene
        self._state = SessionState.ACTIVE
        logger.info("story started id=%s title=%r", self._story.id, self._story.title)
        self._feed.schedule_refresh()
        self._presenter.focus_section(SECTION_STORY)
        return True

    async def choose(self, choice_id: str) -> bool:
        """Advance the active story. Returns False if rejected or the request failed."""
        if self._busy:
            logger.debug("choose ignored: request already in flight (state=%s)", self._state.value)
            return False
        if self._state is SessionState.COMPLETE:
            logger.debug("choose ignored: story %s is complete", self._story.id if self._story else None)
            return False
        if self._story is None or self._state is not SessionState.ACTIVE:
            logger.debug("choose ignored: no active story (state=%s)", self._state.value)
            return False

        story_id = self._story.id
        self._busy = True
        self._generation += 1
        self._state = SessionState.PENDING_CHOOSE
        result = None
        try:
            result = await self._backend.choose(story_id, choice_id)
        except TransportError as e:
            logger.warning("choose failed story=%s choice=%s: %s", story_id, choice_id, e)
            self._state = SessionState.ACTIVE
            self._presenter.notify_error(CHOOSE_FAILED)
            return False
        finally:
            self._busy = False
            if result is None:
                self._state = SessionState.ACTIVE

        self._scene = result.scene
        if result.is_complete:
            self._state = SessionState.COMPLETE
            logger.info("story complete id=%s", story_id)
            self._feed.schedule_refresh()
        else:
            self._state = SessionState.ACTIVE
        return True

    async def open_existing(self, story_id: str) -> bool:
        """Load a story from the backend and make it the active one.

        Failures are logged and otherwise ignored; the current session stays
        as it was.
        """
        if self._busy:
            logger.debug("open_existing ignored: request already in flight")
            return False

        self._generation += 1
        issued = self._generation
        try:
            detail = await self._backend.get_by_id(story_id)
        except TransportError as e:
            logger.warning("open_existing failed story=%s: %s", story_id, e)
            return False

        last = detail.last_scene
        if last is None:
            logger.warning("open_existing: story %s has no scenes", story_id)
            return False
        if issued != self._generation:
            # another start, choose or open was issued while the fetch was in flight
            logger.debug("open_existing dropped: superseded story=%s", story_id)
            return False

        self._story = detail.handle
        self._scene = last
        self._state = SessionState.COMPLETE if detail.status == "complete" else SessionState.ACTIVE
        logger.info("story opened id=%s status=%s", detail.id, detail.status)
        self._presenter.focus_section(SECTION_STORY)
        return True
