"""Toast value object — the short operator-facing notification for an action."""

from dataclasses import dataclass

from shuttle_dispatch.domain.value_objects.enums import Tone


@dataclass(frozen=True)
class Toast:
    title: str
    description: str
    tone: Tone = Tone.PRIMARY

    def to_dict(self) -> dict:
        return {"title": self.title, "description": self.description, "tone": self.tone.value}
