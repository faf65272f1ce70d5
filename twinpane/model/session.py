"""Window-wide display flags."""

from __future__ import annotations

from collections.abc import Callable
from dataclasses import dataclass, field


@dataclass
class Session:
    """Dual pane, preview, and metadata toggles, saved after each change."""

    dual_pane: bool = True
    show_preview: bool = False
    show_metadata: bool = True
    persist: Callable[[dict[str, bool]], None] | None = field(default=None, repr=False, compare=False)

    def as_dict(self) -> dict[str, bool]:
        return {
            "dual_pane": self.dual_pane,
            "show_preview": self.show_preview,
            "show_metadata": self.show_metadata,
        }

    def _save(self) -> None:
        if self.persist is not None:
            self.persist(self.as_dict())

    def toggle_dual_pane(self) -> None:
        self.dual_pane = not self.dual_pane
        self._save()

    def toggle_preview(self) -> None:
        self.show_preview = not self.show_preview
        self._save()

    def toggle_metadata(self) -> None:
        self.show_metadata = not self.show_metadata
        self._save()

    def use_dual_preview(self) -> bool:
        """Right pane mirrors the left pane's selection as a preview."""
        return self.dual_pane and self.show_preview
