"""In-memory stand-in for the narrative backend.

Serves the same /api/story/* contract as the real service with canned,
deterministic scenes so the client can be exercised without a generator:

    POST /api/story/start    → first scene
    POST /api/story/choose   → next scene; the story completes after max_steps choices
    GET  /api/story/list     → newest first
    GET  /api/story/{id}     → full scene history

Run it with `python main.py stub` or `uvicorn storyforge.stub_backend:app`.
"""

from __future__ import annotations

import itertools
from datetime import datetime, timezone

from fastapi import APIRouter, FastAPI, HTTPException, Request

from storyforge.models import (
    Choice,
    ChooseRequest,
    ChooseResponse,
    MoodWeights,
    Scene,
    StartRequest,
    StartResponse,
    StoryDetail,
    StoryList,
    StorySummary,
)

DEFAULT_MAX_STEPS = 3

_MOOD_BEATS = {
    "adventure": ("a locked door hums with stolen current", "Pick the lock", "Find another way in"),
    "romance": ("a familiar voice calls your name across the rain", "Turn around", "Keep walking"),
    "nightlife": ("the club's bass shakes the puddles outside", "Slip past the bouncer", "Buy a round at the bar"),
}


def dominant_mood(weights: MoodWeights) -> str:
    """Axis with the highest weight; ties resolve in adventure, romance, nightlife order."""
    ranked = {"adventure": weights.adventure, "romance": weights.romance, "nightlife": weights.nightlife}
    return max(ranked, key=lambda axis: ranked[axis])


class StubStory:
    def __init__(
        self, story_id: str, protagonist: str, setting: str, weights: MoodWeights
    ) -> None:
        self.id = story_id
        self.protagonist = protagonist
        self.setting = setting
        self.weights = weights
        self.title = f"{protagonist} in {setting}"
        self.created_at = datetime.now(timezone.utc)
        self.scenes: list[Scene] = []
        self.complete = False

    @property
    def steps(self) -> int:
        return len(self.scenes)

    def detail(self) -> StoryDetail:
        return StoryDetail(
            id=self.id, title=self.title, scenes=list(self.scenes),
            status="complete" if self.complete else "active",
        )

    def summary(self) -> StorySummary:
        return StorySummary(
            id=self.id, title=self.title,
            created_at=self.created_at.isoformat(), steps=self.steps,
        )


class StubStore:
    """Stories held in memory for the lifetime of the app, in creation order."""

    def __init__(self, max_steps: int = DEFAULT_MAX_STEPS) -> None:
        self.max_steps = max_steps
        self._stories: dict[str, StubStory] = {}
        self._ids = itertools.count(1)

    def get(self, story_id: str) -> StubStory | None:
        return self._stories.get(story_id)

    def all(self) -> list[StubStory]:
        return list(reversed(self._stories.values()))

    def start(self, protagonist: str, setting: str, weights: MoodWeights) -> StubStory:
        story = StubStory(f"story-{next(self._ids)}", protagonist, setting, weights)
        story.scenes.append(self._scene(story, step=0))
        self._stories[story.id] = story
        return story

    def choose(self, story: StubStory, choice_id: str) -> Scene:
        current = story.scenes[-1]
        if not current.has_choice(choice_id):
            raise KeyError(choice_id)
        step = story.steps
        if step >= self.max_steps:
            scene = Scene(
                text=(
                    f"Dawn breaks over {story.setting}. {story.protagonist}'s night "
                    "is over, and the city keeps its secrets."
                ),
            )
            story.complete = True
        else:
            scene = self._scene(story, step=step, after=choice_id)
        story.scenes.append(scene)
        return scene

    def _scene(self, story: StubStory, step: int, after: str | None = None) -> Scene:
        mood = dominant_mood(story.weights)
        beat, first, second = _MOOD_BEATS[mood]
        opening = (
            f"{story.protagonist} arrives in {story.setting}"
            if after is None
            else f"After choosing {after}, {story.protagonist} presses on"
        )
        return Scene(
            text=f"{opening}, and {beat}.",
            choices=(
                Choice(id=f"s{step}-a", text=first),
                Choice(id=f"s{step}-b", text=second),
            ),
        )


# ---------------------------------------------------------------------------
# Routes
# ---------------------------------------------------------------------------

router = APIRouter()


def _store(request: Request) -> StubStore:
    return request.app.state.store


@router.get("/health")
async def health():
    """Health check."""
    return {"status": "ok"}


@router.post("/story/start", response_model=StartResponse)
async def start_story(body: StartRequest, request: Request):
    """Create a story and return its opening scene."""
    story = _store(request).start(body.protagonist, body.setting, body.weights)
    return StartResponse(story_id=story.id, title=story.title, scene=story.scenes[0])


@router.post("/story/choose", response_model=ChooseResponse)
async def choose(body: ChooseRequest, request: Request):
    """Apply a choice and return the next scene."""
    store = _store(request)
    story = store.get(body.story_id)
    if not story:
        raise HTTPException(404, "Story not found")
    if story.complete:
        raise HTTPException(409, "Story is complete")
    try:
        scene = store.choose(story, body.choice_id)
    except KeyError:
        raise HTTPException(400, "Unknown choice")
    return ChooseResponse(scene=scene, is_complete=story.complete)


@router.get("/story/list", response_model=StoryList)
async def list_stories(request: Request):
    """List stories, newest first."""
    return StoryList(items=[s.summary() for s in _store(request).all()])


@router.get("/story/{story_id}", response_model=StoryDetail)
async def get_story(story_id: str, request: Request):
    """Get a story with its full scene history."""
    story = _store(request).get(story_id)
    if not story:
        raise HTTPException(404, "Story not found")
    return story.detail()


def create_app(max_steps: int = DEFAULT_MAX_STEPS) -> FastAPI:
    app = FastAPI(title="StoryForge stub backend")
    app.state.store = StubStore(max_steps=max_steps)
    app.include_router(router, prefix="/api")
    return app


# Default app instance for uvicorn
app = create_app()
