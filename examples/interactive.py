"""
Interactive Delaunay triangulation.

Right click inserts a point, "Triangulate" rebuilds the whole mesh and
"Reset" goes back to an empty canvas. Escape closes the window.
"""

import matplotlib.pyplot as plt
from matplotlib.widgets import Button

from pyidt.build import InsertionStatus
from pyidt.delaunay import Triangulation

WIDTH, HEIGHT = 800, 600


class Viewer:
    def __init__(self) -> None:
        self.triangulation = Triangulation()
        self.fig, self.ax = plt.subplots(figsize=(8, 6))
        self.fig.subplots_adjust(bottom=0.15)

        triangulate_ax = self.fig.add_axes((0.15, 0.03, 0.15, 0.06))
        reset_ax = self.fig.add_axes((0.32, 0.03, 0.1, 0.06))
        self.triangulate_button = Button(triangulate_ax, "Triangulate")
        self.reset_button = Button(reset_ax, "Reset")
        self.triangulate_button.on_clicked(self.on_triangulate)
        self.reset_button.on_clicked(self.on_reset)

        self.fig.canvas.mpl_connect("button_press_event", self.on_click)
        self.fig.canvas.mpl_connect("key_press_event", self.on_key)
        self.redraw()

    def redraw(self) -> None:
        n_points = len(self.triangulation.points) - 3
        n_triangles = len(self.triangulation.triangles)
        self.triangulation.plot(ax=self.ax, title=f"Triangles: {n_triangles}   Points: {n_points}")
        self.ax.set_xlim(0, WIDTH)
        # screen coordinates: y grows downwards
        self.ax.set_ylim(HEIGHT, 0)
        self.fig.canvas.draw_idle()

    def on_click(self, event) -> None:
        if event.inaxes is not self.ax or event.button != 3:
            return
        result = self.triangulation.insert_point((event.xdata, event.ydata))
        if result.status is not InsertionStatus.split:
            print(f"Point {result.point_idx} not meshed: {result.status.name}")
        self.redraw()

    def on_triangulate(self, _event) -> None:
        print("Triangulate!")
        self.triangulation.triangulate()
        self.redraw()

    def on_reset(self, _event) -> None:
        self.triangulation.reset()
        self.redraw()

    def on_key(self, event) -> None:
        if event.key == "escape":
            plt.close(self.fig)


if __name__ == "__main__":
    viewer = Viewer()
    plt.show()
