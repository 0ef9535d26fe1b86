"""CommandResult — what an operator action produced, always with a toast."""

from __future__ import annotations

from dataclasses import dataclass

from shuttle_dispatch.domain.errors import DispatchError, MutationFailure
from shuttle_dispatch.domain.value_objects.enums import Tone
from shuttle_dispatch.domain.value_objects.toast import Toast


@dataclass(frozen=True)
class CommandResult:
    """``ok`` is True only when a mutation was issued and confirmed.

    No-op guards (already assigned, nothing to undo) come back with
    ``ok=False`` and no ``error``.
    """

    ok: bool
    toast: Toast
    booking_ids: tuple[str, ...] = ()
    error: DispatchError | None = None
    total_recipients: int | None = None

    @classmethod
    def success(cls, title: str, description: str, booking_ids=(), **extra) -> "CommandResult":
        return cls(ok=True, toast=Toast(title, description, Tone.SUCCESS), booking_ids=tuple(booking_ids), **extra)

    @classmethod
    def warning(cls, title: str, description: str, booking_ids=()) -> "CommandResult":
        return cls(ok=False, toast=Toast(title, description, Tone.WARNING), booking_ids=tuple(booking_ids))

    @classmethod
    def rejected(cls, error: DispatchError, booking_ids=()) -> "CommandResult":
        return cls(
            ok=False,
            toast=Toast(error.title, str(error), Tone.WARNING),
            booking_ids=tuple(booking_ids),
            error=error,
        )

    @classmethod
    def failed(cls, title: str, error: DispatchError, booking_ids=()) -> "CommandResult":
        return cls(
            ok=False,
            toast=Toast(title, str(error) or "Please try again shortly.", Tone.DANGER),
            booking_ids=tuple(booking_ids),
            error=error,
        )


def as_mutation_failure(exc: Exception) -> MutationFailure:
    if isinstance(exc, MutationFailure):
        return exc
    return MutationFailure(str(exc) or exc.__class__.__name__)


def plural_bookings(count: int) -> str:
    return f"{count} booking{'' if count == 1 else 's'}"
