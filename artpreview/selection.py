"""
Current selection for the art preview.

Selector collaborators only ever read the current value of an axis or set a
new one. Every accepted change is announced to subscribers with the name of
the axis that changed; renderers read the latest snapshot when they draw.
"""

from dataclasses import dataclass, replace
from typing import Callable, List, Optional

from loguru import logger

from .config import BorderOption, FrameOption, MattingOption
from .errors import SceneIndexError, ValidationError
from .filters import ColorTreatment


ARTWORK = "artwork"
TREATMENT = "treatment"
FRAME = "frame"
MATTING = "matting"
BORDER = "border"
SCENE = "scene"

SELECTION_AXES = (ARTWORK, TREATMENT, FRAME, MATTING, BORDER)


@dataclass(frozen=True)
class Selection:
    """Immutable snapshot of every selection axis."""
    artwork_source: Optional[str]
    treatment: ColorTreatment = ColorTreatment.ORIGINAL
    frame: Optional[FrameOption] = None
    matting: Optional[MattingOption] = None
    border: Optional[BorderOption] = None
    active_scene: int = 0


class SelectionState:
    """Single source of truth for the shopper's current choices."""

    def __init__(self, artwork_source: Optional[str], scene_count: int):
        if scene_count < 1:
            raise ValidationError("At least one scene is required", details={'scene_count': scene_count})
        self.scene_count = scene_count
        self._current = Selection(artwork_source=artwork_source)
        self._subscribers: List[Callable[[str], None]] = []

    @property
    def current(self) -> Selection:
        return self._current

    def snapshot(self) -> Selection:
        return self._current

    def subscribe(self, callback: Callable[[str], None]) -> Callable[[], None]:
        """Register ``callback(axis)``; returns a function that unsubscribes it."""
        self._subscribers.append(callback)

        def unsubscribe():
            if callback in self._subscribers:
                self._subscribers.remove(callback)

        return unsubscribe

    def set_artwork(self, source: Optional[str]) -> None:
        self._update(ARTWORK, artwork_source=source)

    def set_treatment(self, treatment) -> None:
        self._update(TREATMENT, treatment=ColorTreatment.from_name(treatment))

    def set_frame(self, frame: Optional[FrameOption]) -> None:
        self._update(FRAME, frame=frame)

    def set_matting(self, matting: Optional[MattingOption]) -> None:
        _check_thickness(matting, "matting")
        self._update(MATTING, matting=matting)

    def set_border(self, border: Optional[BorderOption]) -> None:
        _check_thickness(border, "border")
        self._update(BORDER, border=border)

    def set_active_scene(self, index: int) -> None:
        if not 0 <= index < self.scene_count:
            raise SceneIndexError(index, self.scene_count)
        self._update(SCENE, active_scene=index)

    def _update(self, axis: str, **changes) -> None:
        updated = replace(self._current, **changes)
        if updated == self._current:
            logger.debug(f"Selection '{axis}' unchanged, no redraw")
            return

        self._current = updated
        logger.info(f"Selection changed: {axis}")
        for callback in list(self._subscribers):
            callback(axis)


def _check_thickness(option, kind: str) -> None:
    if option is not None and option.thickness_px < 0:
        raise ValidationError(
            f"{kind.capitalize()} thickness must not be negative",
            details={'label': option.label, 'thickness_px': option.thickness_px}
        )
