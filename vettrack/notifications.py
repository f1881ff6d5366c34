"""
Toast Notifications

One-way notification channel used by the cart and checkout to tell the user
what happened. Sinks never return anything and the caller never checks.
"""

from dataclasses import dataclass
from enum import Enum
from typing import Callable, Optional

from vettrack.i18n import get_text
from vettrack.logging import get_logger

logger = get_logger(__name__)


class ToastVariant(str, Enum):
    """Visual style of a toast."""
    DEFAULT = "default"
    DESTRUCTIVE = "destructive"


@dataclass(frozen=True)
class Toast:
    """A single user-facing notification."""
    title: str
    description: str
    variant: Optional[ToastVariant] = None

    @property
    def is_error(self) -> bool:
        return self.variant == ToastVariant.DESTRUCTIVE

    def to_dict(self) -> dict:
        """Convert to the {title, description, variant?} payload the UI renders."""
        data = {"title": self.title, "description": self.description}
        if self.variant is not None:
            data["variant"] = self.variant.value
        return data


class CollectingSink:
    """
    Sink that queues toasts for the UI to drain.

    Also used by tests to assert on what the user was told.
    """

    def __init__(self):
        self.toasts: list[Toast] = []

    def __call__(self, toast: Toast) -> None:
        self.toasts.append(toast)

    @property
    def last(self) -> Optional[Toast]:
        return self.toasts[-1] if self.toasts else None

    def drain(self) -> list[Toast]:
        """Return queued toasts and empty the queue."""
        toasts, self.toasts = self.toasts, []
        return toasts


class LoggingSink:
    """Sink that writes toasts to the log (headless runs)."""

    def __call__(self, toast: Toast) -> None:
        if toast.is_error:
            logger.warning(f"[toast] {toast.title}: {toast.description}")
        else:
            logger.info(f"[toast] {toast.title}: {toast.description}")


ToastSink = Callable[[Toast], None]


def build_toast(
    key: str,
    lang: str,
    variant: Optional[ToastVariant] = None,
    description_key: str = "description",
    **kwargs,
) -> Toast:
    """
    Build a translated toast from a locale section.

    `key` points at a section holding "title" and the description entry,
    e.g. build_toast("cart.added", "tr", name="Kuru Mama").
    """
    return Toast(
        title=get_text(f"{key}.title", lang),
        description=get_text(f"{key}.{description_key}", lang, **kwargs),
        variant=variant,
    )
