"""
Render orchestration for the main preview and the scene thumbnails.

This module handles:
- The render targets (one main surface, one thumbnail per scene)
- One worker task per target with a single-slot redraw mailbox
- Redraw passes: load layers concurrently, composite, draw, present
- Last-write-wins: a pass whose mailbox was refilled while it was loading
  is dropped, and the worker immediately starts over with the latest selection
"""

import asyncio
from enum import Enum
from typing import Callable, List, Optional, Tuple

from PIL import Image
from loguru import logger

from .compositor import LayerCompositor, create_layer_compositor
from .config import AppConfig, Catalog
from .loader import ImageLoader, create_image_loader
from .render import FrameRenderer
from .selection import SCENE, Selection, SelectionState
from .shadow import create_shadow_renderer


class TargetKind(str, Enum):
    MAIN = "main"
    THUMBNAIL = "thumbnail"


class TargetState(str, Enum):
    IDLE = "idle"
    REDRAWING = "redrawing"


class RenderTarget:
    """A visible output surface with a fixed pixel size."""

    def __init__(self,
                 name: str,
                 size: Tuple[int, int],
                 kind: TargetKind,
                 small_surface: bool,
                 scene_index: Optional[int] = None):
        self.name = name
        self.size = size
        self.kind = kind
        self.small_surface = small_surface  # cheap shadow path
        self.scene_index = scene_index  # None: follows the active scene
        self.surface = Image.new('RGBA', size, (0, 0, 0, 0))
        self.state = TargetState.IDLE
        self.generation = 0
        self.highlighted = False

    @property
    def width(self) -> int:
        return self.size[0]

    @property
    def height(self) -> int:
        return self.size[1]

    def scene_for(self, selection: Selection) -> int:
        return selection.active_scene if self.scene_index is None else self.scene_index

    def present(self, frame: Image.Image, highlighted: bool = False) -> None:
        """Overwrite the whole pixel buffer with a finished frame."""
        self.surface.paste(frame, (0, 0))
        self.highlighted = highlighted
        self.generation += 1

    def __repr__(self) -> str:
        return f"RenderTarget({self.name}, {self.size[0]}x{self.size[1]}, gen={self.generation})"


class TargetWorker:
    """Serializes redraws of one target and coalesces pending requests."""

    def __init__(self, target: RenderTarget, redraw):
        self.target = target
        self._redraw = redraw
        self._requests = 0
        self._wakeup = asyncio.Event()
        self._idle = asyncio.Event()
        self._idle.set()
        self._task: Optional[asyncio.Task] = None

    def start(self) -> None:
        if self._task is None:
            self._task = asyncio.create_task(self._run(), name=f"render-{self.target.name}")

    def request(self) -> None:
        """Ask for a redraw; requests made while one is pending collapse into one."""
        self._requests += 1
        self._idle.clear()
        self._wakeup.set()

    @property
    def idle(self) -> bool:
        return self._idle.is_set()

    async def wait_idle(self) -> None:
        await self._idle.wait()

    async def stop(self) -> None:
        if self._task is None:
            return
        self._task.cancel()
        try:
            await self._task
        except asyncio.CancelledError:
            pass
        self._task = None
        self._idle.set()

    async def _run(self) -> None:
        while True:
            await self._wakeup.wait()
            self._wakeup.clear()
            ticket = self._requests
            self.target.state = TargetState.REDRAWING
            try:
                await self._redraw(self.target, lambda: ticket != self._requests)
            except asyncio.CancelledError:
                raise
            except Exception:
                logger.exception(f"Redraw of {self.target.name} failed")
            finally:
                if not self._wakeup.is_set():
                    self.target.state = TargetState.IDLE
                    self._idle.set()


class RenderOrchestrator:
    """Keeps every render target consistent with the current selection."""

    def __init__(self,
                 config: AppConfig,
                 catalog: Catalog,
                 state: SelectionState,
                 loader: ImageLoader = None,
                 compositor: LayerCompositor = None,
                 frame_renderer: FrameRenderer = None):
        self.config = config
        self.catalog = catalog
        self.state = state
        self.loader = loader or create_image_loader(config)
        self.compositor = compositor or create_layer_compositor()
        self.frame_renderer = frame_renderer or FrameRenderer(
            create_shadow_renderer(config), config.BACKGROUND_COLOR
        )

        self.main_target = self._make_target("main", config.main_size, TargetKind.MAIN)
        self.thumbnail_targets = [
            self._make_target(f"thumb-{i}-{scene.label.lower()}", config.thumb_size,
                              TargetKind.THUMBNAIL, scene_index=i)
            for i, scene in enumerate(catalog.scenes)
        ]

        self._workers = [TargetWorker(target, self._redraw) for target in self.targets]
        self._listeners: List[Callable[[RenderTarget], None]] = []
        self._unsubscribe = None
        self._framed_memo = None

    @property
    def targets(self) -> List[RenderTarget]:
        return [self.main_target] + self.thumbnail_targets

    def _make_target(self, name, size, kind, scene_index=None) -> RenderTarget:
        return RenderTarget(name, size, kind, self.config.is_thumbnail_size(*size), scene_index)

    def on_present(self, callback: Callable[[RenderTarget], None]) -> None:
        """Call ``callback(target)`` every time a target shows a new frame."""
        self._listeners.append(callback)

    async def start(self) -> None:
        """Start the workers, subscribe to selection changes and draw everything once."""
        for worker in self._workers:
            worker.start()
        self._unsubscribe = self.state.subscribe(self._on_selection_change)
        logger.info(f"Render orchestrator started with {len(self.targets)} targets")
        self.redraw_all()

    async def close(self) -> None:
        if self._unsubscribe is not None:
            self._unsubscribe()
            self._unsubscribe = None
        await asyncio.gather(*(worker.stop() for worker in self._workers))
        logger.info("Render orchestrator stopped")

    async def __aenter__(self) -> "RenderOrchestrator":
        await self.start()
        return self

    async def __aexit__(self, exc_type, exc, tb) -> None:
        await self.close()

    def redraw_all(self) -> None:
        for worker in self._workers:
            worker.request()

    async def wait_idle(self) -> None:
        """Wait until no target has a pending or running redraw."""
        while not all(worker.idle for worker in self._workers):
            await asyncio.gather(*(worker.wait_idle() for worker in self._workers))

    def _on_selection_change(self, axis: str) -> None:
        if axis == SCENE:
            # Thumbnails redraw too so the highlight follows the active scene
            logger.debug("Active scene changed, redrawing main target and thumbnails")
        else:
            logger.debug(f"Selection '{axis}' changed, redrawing all targets")
        self.redraw_all()

    async def _redraw(self, target: RenderTarget, is_stale: Callable[[], bool]) -> bool:
        selection = self.state.snapshot()
        scene_index = target.scene_for(selection)
        scene = self.catalog.scenes[scene_index]
        frame = selection.frame
        matting = selection.matting

        art, frame_overlay, frame_mask, matting_overlay, background = await self.loader.load_many(
            selection.artwork_source,
            frame.overlay_source if frame is not None else None,
            frame.mask_source if frame is not None else None,
            matting.overlay_source if matting is not None and matting.thickness_px > 0 else None,
            scene.background_source,
        )

        if is_stale():
            logger.debug(f"Dropping superseded redraw of {target.name}")
            return False

        # Nothing below awaits: the frame is built and presented in one go
        framed_art = self._framed_art(selection, art, frame_overlay, frame_mask, matting_overlay)
        frame_image = self.frame_renderer.render(
            target.size, scene, framed_art, background, target.small_surface
        )
        target.present(frame_image, highlighted=(target.scene_index == selection.active_scene))

        for callback in list(self._listeners):
            callback(target)
        logger.debug(f"Presented {target!r} (scene '{scene.label}')")
        return True

    def _framed_art(self, selection: Selection, art, frame_overlay, frame_mask, matting_overlay):
        if art is None:
            logger.warning(f"Artwork unavailable: {selection.artwork_source}, drawing scene only")
            return None

        # Targets redrawn for the same snapshot share one working surface
        if self._framed_memo is not None and self._framed_memo[0] is selection:
            return self._framed_memo[1]

        framed = self.compositor.composite(
            art,
            matting=selection.matting,
            border=selection.border,
            treatment=selection.treatment,
            frame_overlay=frame_overlay,
            frame_mask=frame_mask,
            matting_overlay=matting_overlay,
            art_size=self.config.art_size,
        )
        self._framed_memo = (selection, framed)
        return framed


def create_orchestrator(config: AppConfig, catalog: Catalog, state: SelectionState = None,
                        loader: ImageLoader = None) -> RenderOrchestrator:
    """Factory function to create a RenderOrchestrator with default collaborators."""
    state = state or SelectionState(catalog.artwork_source, len(catalog.scenes))
    return RenderOrchestrator(config, catalog, state, loader=loader)
