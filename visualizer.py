"""
visualizer.py — Live Density Viewer
====================================
Renders the 2D density field while the simulation runs, using matplotlib
FuncAnimation. Every animation frame injects the configured inflow and
advances the solver by a few sub-steps.

Image orientation matches the PNG frames written by main.py: y = 0 is the
top row.
"""

import matplotlib.animation as animation
import matplotlib.pyplot as plt
from matplotlib.colors import LinearSegmentedColormap

# Custom smoke colormap: black → orange → white
SMOKE_COLORS = ["#000000", "#1a0a00", "#ff6a00", "#ffffff"]
smoke_cmap = LinearSegmentedColormap.from_list("smoke", SMOKE_COLORS)

# (x, y, w, h, density, u, v) in domain units
DEFAULT_INFLOW = (0.45, 0.2, 0.15, 0.03, 1.0, 0.0, 3.0)


class FluidVisualizer:
    """
    Real-time viewer of the fluid simulation.

    Usage (standalone):
        from fluid2d import FluidSolver
        from visualizer import FluidVisualizer

        solver = FluidSolver(128, 128, fluid_density=0.1)
        viz = FluidVisualizer(solver, timestep=0.005)
        viz.run()  # Opens live window
    """

    def __init__(self, solver, timestep: float = 0.005, substeps: int = 4,
                 inflow: tuple = DEFAULT_INFLOW):
        """
        Args:
            solver   : FluidSolver instance
            timestep : Seconds per physics step
            substeps : Physics steps per displayed frame
            inflow   : Source rectangle + values, re-injected before every step
        """
        self.solver = solver
        self.timestep = timestep
        self.substeps = substeps
        self.inflow = inflow
        self.time = 0.0

        self._setup_figure()

    def _setup_figure(self):
        self.fig, self.ax = plt.subplots(1, 1, figsize=(6, 6))
        self.fig.patch.set_facecolor('#0a0a0a')

        self.ax.set_facecolor('#0a0a0a')
        self.ax.set_xticks([])
        self.ax.set_yticks([])
        for spine in self.ax.spines.values():
            spine.set_edgecolor('#333333')

        self.img = self.ax.imshow(
            self.solver.density_image(), cmap=smoke_cmap,
            vmin=0, vmax=1.0,
            interpolation='bilinear',
            origin='upper',
            aspect='equal'
        )

        self.title_text = self.ax.set_title(
            "Fluid Sim — Frame 0 | t=0.000s",
            color='#cccccc', fontsize=10, fontfamily='monospace'
        )

        plt.tight_layout()

    def update(self, frame_num):
        """Called by FuncAnimation each frame. Steps the solver and updates the image."""
        for _ in range(self.substeps):
            self.solver.add_inflow(*self.inflow)
            self.solver.step(self.timestep)
            self.time += self.timestep

        self.img.set_data(self.solver.density_image())

        last = self.solver.perf_log[-1]
        self.title_text.set_text(
            f"Fluid Sim — Frame {frame_num} | t={self.time:.3f}s | "
            f"{last['iterations']} it | {last['total_ms']:.0f}ms"
        )

        return [self.img, self.title_text]

    def run(self, fps: int = 25, frames: int = 400):
        """
        Start the live animation window.

        Args:
            fps    : Target animation frame rate
            frames : Total frames to render
        """
        interval_ms = 1000 // fps
        self.anim = animation.FuncAnimation(
            self.fig,
            self.update,
            frames=frames,
            interval=interval_ms,
            blit=True
        )
        plt.show()

    def save_gif(self, path: str = "smoke.gif", fps: int = 25, frames: int = 100):
        """Save animation as a GIF."""
        print(f"Rendering {frames} frames to {path}...")
        self.anim = animation.FuncAnimation(
            self.fig, self.update, frames=frames, interval=1000 // fps, blit=True
        )
        writer = animation.PillowWriter(fps=fps)
        self.anim.save(path, writer=writer)
        print(f"Saved: {path}")
