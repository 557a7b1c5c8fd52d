"""Console front-end.

A thin presentation layer over SessionController: it renders snapshots,
turns typed commands into controller calls and implements the Presenter
capability with plain prints.

Commands:
    new                     set up and start a story (prompts for details)
    <n>                     pick choice n of the current scene
    weights <a> <r> <n>     edit mood weights (normalized after each edit)
    recent                  show the recent stories feed
    open <n>                open story n from the recent list
    quit
"""

from __future__ import annotations

import asyncio
import logging
from datetime import datetime
from typing import Awaitable, Callable

from storyforge.models import MoodWeights, SessionSnapshot
from storyforge.session import SECTION_SETUP, SECTION_STORY, SessionController
from storyforge.weights import AXES, MAX_WEIGHT, MIN_WEIGHT, WeightModel

logger = logging.getLogger(__name__)

DEFAULT_PROTAGONIST = "Nova"
DEFAULT_SETTING = "Neon Harbor"

Reader = Callable[[str], Awaitable[str]]
Writer = Callable[[str], None]

USAGE = """\
  new                     set up and start a story
  <n>                     pick choice n
  weights <a> <r> <n>     edit mood weights
  recent                  show recent stories
  open <n>                open story n from the recent list
  quit"""


async def read_line(prompt: str) -> str:
    return await asyncio.to_thread(input, prompt)


class TerminalPresenter:
    def __init__(self, write: Writer = print) -> None:
        self._write = write
        self.errors: list[str] = []

    def notify_error(self, message: str) -> None:
        self.errors.append(message)
        self._write(f"!! {message}")

    def focus_section(self, name: str) -> None:
        if name == SECTION_STORY:
            self._write("\n=== Story ===")
        elif name == SECTION_SETUP:
            self._write("\n=== Setup ===")


def render(snapshot: SessionSnapshot) -> str:
    """Scene text plus numbered choices, or a hint when no story is open."""
    if snapshot.scene is None:
        return "Choose your mood and create the opening scene (type 'new')."
    lines = []
    if snapshot.story:
        lines.append(f"# {snapshot.story.title}")
    lines.append(snapshot.scene.text)
    if snapshot.is_complete:
        lines.append("Complete. Refresh weights or start a new run to remix the night.")
    else:
        for i, choice in enumerate(snapshot.scene.choices, start=1):
            lines.append(f"  [{i}] {choice.text}")
    if snapshot.busy:
        lines.append("...")
    return "\n".join(lines)


def _format_created(value: datetime | str | None) -> str:
    if isinstance(value, datetime):
        return value.strftime("%Y-%m-%d %H:%M")
    return value or ""


def render_weights(weights: MoodWeights) -> str:
    return "  ".join(f"{axis.capitalize()} {getattr(weights, axis)}%" for axis in AXES)


class TerminalApp:
    def __init__(
        self,
        controller: SessionController,
        presenter: TerminalPresenter,
        weights: WeightModel | None = None,
        read: Reader = read_line,
        write: Writer = print,
    ) -> None:
        self.controller = controller
        self.presenter = presenter
        self.weights = weights or WeightModel()
        self._read = read
        self._write = write

    async def _ask(self, prompt: str, default: str) -> str:
        answer = (await self._read(f"{prompt} [{default}]: ")).strip()
        return answer or default

    async def setup_and_start(self) -> bool:
        self.presenter.focus_section(SECTION_SETUP)
        protagonist = await self._ask("Protagonist", DEFAULT_PROTAGONIST)
        setting = await self._ask("Setting", DEFAULT_SETTING)
        self._write(render_weights(self.weights.weights))
        self._write("Creating...")
        return await self.controller.start(protagonist, setting, self.weights.weights)

    def edit_weights(self, values: list[str]) -> None:
        if len(values) != len(AXES):
            self._write("usage: weights <adventure> <romance> <nightlife>")
            return
        # validate all three before the first edit so a bad value changes nothing
        try:
            parsed = [int(raw) for raw in values]
        except ValueError as e:
            logger.debug("weights rejected: %s", values)
            self._write(f"Invalid weights: {e}")
            return
        out_of_range = [v for v in parsed if not MIN_WEIGHT <= v <= MAX_WEIGHT]
        if out_of_range:
            logger.debug("weights rejected: %s", values)
            self._write(f"Invalid weights: each must be between {MIN_WEIGHT} and {MAX_WEIGHT}")
            return
        for axis, value in zip(AXES, parsed):
            self.weights.set(axis, value)
        self._write(render_weights(self.weights.weights))

    def show_recent(self) -> None:
        items = self.controller.feed.items
        if not items:
            self._write("No recent tales.")
            return
        self._write("Recent Tales")
        for i, item in enumerate(items, start=1):
            created = _format_created(item.created_at)
            self._write(f"  [{i}] {item.title}  ({created}, steps: {item.steps})")

    async def handle(self, line: str) -> bool:
        """Run one command. Returns False when the session should end."""
        parts = line.split()
        if not parts:
            return True
        command, args = parts[0].lower(), parts[1:]

        if command in ("quit", "exit", "q"):
            return False
        if command == "new":
            await self.setup_and_start()
        elif command == "weights":
            self.edit_weights(args)
        elif command == "recent":
            await self.controller.feed.refresh()
            self.show_recent()
        elif command == "open" and args and args[0].isdigit():
            items = self.controller.feed.items
            index = int(args[0]) - 1
            if 0 <= index < len(items):
                await self.controller.open_existing(items[index].id)
            else:
                self._write("No such story.")
        elif command.isdigit():
            scene = self.controller.scene
            index = int(command) - 1
            if scene is None or not 0 <= index < len(scene.choices):
                self._write("No such choice.")
            else:
                await self.controller.choose(scene.choices[index].id)
        else:
            logger.debug("unknown command %r", line)
            self._write(USAGE)
            return True

        self._write(render(self.controller.snapshot()))
        return True

    async def run(self) -> None:
        self._write("StoryForge: Craft Your Neon-Night Epic")
        self._write(render_weights(self.weights.weights))
        self.controller.open()
        self._write(render(self.controller.snapshot()))
        try:
            while True:
                try:
                    line = await self._read("> ")
                except EOFError:
                    break
                if not await self.handle(line):
                    break
        finally:
            await self.controller.aclose()
