from dataclasses import dataclass, field
from enum import Enum, auto
from pathlib import Path
from typing import Callable, Iterable

import numpy as np
from loguru import logger
from numpy.typing import NDArray

from pyidt.build import (
    InsertionResult,
    InsertionStatus,
    PointOutsideMeshError,
    insert_point_into_triangle,
)
from pyidt.config import TriangulationConfig
from pyidt.mesh import PointStore, PointsView, Triangle, TriangleMesh
from pyidt.topology import lawson_flipping
from pyidt.utils import Vec2d

ANIMATION_WRITERS = {".gif": "pillow", ".mp4": "ffmpeg"}


class EngineState(Enum):
    empty = auto()
    bounded = auto()
    triangulated = auto()


@dataclass(eq=False)
class Triangulation:
    """
    Incrementally maintained Delaunay triangulation inside a fixed super triangle.

    The first three points are always the corners of the super triangle.
    Triangles touching them are kept in the mesh but are not drawable.
    """

    config: TriangulationConfig = field(default_factory=TriangulationConfig)
    on_flip: Callable[[int], None] | None = None
    store: PointStore = field(init=False, repr=False)
    mesh: TriangleMesh = field(init=False, repr=False)
    debug_plots: list[NDArray[np.floating]] = field(default_factory=list, repr=False)

    def __post_init__(self) -> None:
        self.config.validate()
        self.store = PointStore()
        self.mesh = TriangleMesh(bounding_vertices=(0, 1, 2))
        self._fill_bounding_triangle()

    def _fill_bounding_triangle(self) -> None:
        for corner in self.config.bounding_vertices:
            self.store.append(corner)
        self.mesh.add(0, 1, 2)

    @property
    def points(self) -> PointsView:
        return PointsView(self.store)

    @property
    def triangles(self) -> list[Triangle]:
        return self.mesh.triangles

    @property
    def triangle_vertices(self) -> NDArray[np.integer]:
        return self.mesh.vertex_array()

    @property
    def state(self) -> EngineState:
        if len(self.mesh) == 0:
            return EngineState.empty
        if len(self.store) > 3:
            return EngineState.triangulated
        return EngineState.bounded

    def get_points(self) -> PointsView:
        return self.points

    def get_triangles(self) -> list[Triangle]:
        return self.triangles

    def drawable_triangles(self) -> list[Triangle]:
        return [t for t in self.mesh if t.drawable]

    def _insert_stored_point(self, point_idx: int) -> InsertionResult:
        status, edges = insert_point_into_triangle(
            self.store,
            self.mesh,
            tolerance=self.config.barycentric_tolerance,
            duplicate_tolerance=self.config.duplicate_tolerance,
        )
        flips = lawson_flipping(edges, self.store, self.mesh, on_flip=self.on_flip)
        return InsertionResult(status=status, point_idx=point_idx, flips=flips)

    def insert_point(self, point: Vec2d) -> InsertionResult:
        """
        Add a point and restore the Delaunay property.

        A point that cannot be meshed (outside every triangle, or on top of an
        existing vertex) is kept in the point store but no triangle uses it.

        :param point: (x, y) coordinates
        :return: what happened to the point
        :raises PointOutsideMeshError: if the point was not meshed and the
            configuration is strict
        """
        point_idx = self.store.append(point)
        result = self._insert_stored_point(point_idx)
        logger.debug(
            f"Inserted point {point_idx}: {result.status.name}, {result.flips} flips, "
            f"{len(self.mesh)} triangles"
        )
        if self.config.strict and result.status in (
            InsertionStatus.outside,
            InsertionStatus.duplicate,
        ):
            raise PointOutsideMeshError(point_idx, self.store[point_idx], result.status)
        return result

    def insert_points(self, points: Iterable[Vec2d]) -> list[InsertionResult]:
        return [self.insert_point(p) for p in points]

    def triangulate(self) -> None:
        """Rebuild the whole mesh by re-inserting every point in order."""
        if len(self.store) < 3:
            return

        old_points = self.store.snapshot()
        self.mesh.clear()
        self.store.clear()
        logger.debug(f"Retriangulating {len(old_points)} points")
        for point in old_points:
            point_idx = self.store.append(point)
            self._insert_stored_point(point_idx)
        logger.debug(f"Retriangulation done: {len(self.mesh)} triangles")

    def reset(self) -> None:
        """Drop every inserted point and go back to the bare super triangle."""
        self.store.clear()
        self.mesh.clear()
        self._fill_bounding_triangle()
        logger.debug("Triangulation reset to the bounding triangle")

    def plot(
        self,
        show: bool = False,
        title: str = "Triangulation",
        point_labels: bool = False,
        exclude_bounding: bool = True,
        circumcircles: bool = False,
        fontsize: int = 7,
        ax=None,
    ) -> None:
        """
        Plot the triangulation using matplotlib.

        :param show: Whether to call plt.show() after plotting
        :param title: Title of the plot
        :param point_labels: Whether to label points with their indices
        :param exclude_bounding: Draw only drawable triangles and skip the super triangle corners
        :param circumcircles: Whether to draw the circumcircle of every drawn triangle
        :param fontsize: Font size for labels
        :param ax: Draw into this axes instead of a new figure; nothing is recorded then
        """
        import matplotlib.pyplot as plt
        from matplotlib.patches import Circle

        from pyidt.geometry import circumcircle

        own_figure = ax is None
        if own_figure:
            fig, ax = plt.subplots()
        else:
            ax.clear()

        all_points = np.asarray(self.store.view())
        if exclude_bounding:
            triangles = self.drawable_triangles()
            shown_points = all_points[3:]
            first_label = 3
        else:
            triangles = list(self.mesh)
            shown_points = all_points
            first_label = 0

        for tri in triangles:
            pts = all_points[list(tri.vertices)]
            tri_closed = np.vstack([pts, pts[0]])
            style = "b-" if tri.drawable else "k:"
            ax.plot(tri_closed[:, 0], tri_closed[:, 1], style, linewidth=1.0, alpha=0.6)

            if circumcircles:
                circle = circumcircle(*pts)
                if circle is not None:
                    center, radius = circle
                    ax.add_patch(
                        Circle(center, radius, fill=False, color="gray", linestyle="--", alpha=0.3)  # type: ignore[reportArgumentType]
                    )

        if len(shown_points):
            ax.plot(shown_points[:, 0], shown_points[:, 1], "ko", markersize=4, zorder=11)

        if point_labels:
            offset = 2.0
            for idx, (x, y) in enumerate(shown_points, start=first_label):
                ax.text(
                    x + offset,
                    y + offset,
                    str(idx),
                    fontsize=fontsize,
                    ha="left",
                    va="bottom",
                    color="darkgreen",
                )

        ax.set_aspect("equal")
        ax.set_title(title)

        if not own_figure:
            return

        if show:
            plt.show()

        # Convert figure to RGB image in memory
        fig.canvas.draw()
        buf = fig.canvas.buffer_rgba()  # type: ignore[reportAttributeAccessIssue]
        img = np.asarray(buf)[:, :, :3]
        plt.close(fig)
        self.debug_plots.append(img)

    def export_animation(self, filepath: str | Path, fps: int = 2) -> None:
        """
        Write the plots recorded by :meth:`plot` as an animation, one frame
        per plot, each captioned with its position in the sequence.

        :param filepath: Output file, its suffix picks the writer (see ``ANIMATION_WRITERS``)
        :param fps: Frames per second
        :raises ValueError: if nothing was recorded or the suffix is unknown
        """
        filepath = Path(filepath)
        writer = ANIMATION_WRITERS.get(filepath.suffix)
        if writer is None:
            raise ValueError(
                f"Unsupported file format {filepath.suffix!r}. Use one of {sorted(ANIMATION_WRITERS)}"
            )
        if not self.debug_plots:
            raise ValueError("No debug plots to export.")

        import matplotlib.pyplot as plt
        from matplotlib.animation import FuncAnimation

        n_frames = len(self.debug_plots)
        fig, ax = plt.subplots()
        ax.axis("off")
        frame_artist = ax.imshow(self.debug_plots[0])
        caption = ax.text(0.01, 0.01, "", transform=ax.transAxes, fontsize=8, color="gray")

        def show_frame(frame: int):
            frame_artist.set_data(self.debug_plots[frame])
            caption.set_text(f"{frame + 1}/{n_frames}")
            return [frame_artist, caption]

        anim = FuncAnimation(fig, show_frame, frames=n_frames, interval=1000 / fps)
        logger.debug(f"Writing {n_frames} frames to {filepath} with {writer}")
        anim.save(filepath, fps=fps, writer=writer)
        plt.close(fig)


def triangulate(
    points: NDArray[np.floating] | Iterable[Vec2d],
    config: TriangulationConfig | None = None,
) -> Triangulation:
    """
    Build a triangulation of ``points`` inside the configured super triangle.

    :param points: input points, shape (n, 2)
    :param config: engine configuration, defaults to :class:`TriangulationConfig`
    :return: the triangulation, points stored after the three super triangle corners
    """
    triangulation = Triangulation(config=config or TriangulationConfig())
    triangulation.insert_points(np.asarray(points, dtype=float).reshape(-1, 2))
    return triangulation
