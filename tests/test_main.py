import matplotlib

matplotlib.use("Agg")

import matplotlib.pyplot as plt  # noqa: E402
import numpy as np  # noqa: E402

import main  # noqa: E402
from fluid2d import FluidSolver  # noqa: E402
from visualizer import FluidVisualizer  # noqa: E402


def test_parser_defaults():
    args = main.build_parser().parse_args([])
    assert args.mode == "frames"
    assert (args.width, args.height) == (128, 128)
    assert args.density == 0.1
    assert args.dt == 0.005
    assert args.max_iterations == 600
    assert args.tolerance == 1e-5
    assert args.relaxation == "JACOBI"


def test_advance_frame_runs_substeps():
    solver = FluidSolver(16, 16, 0.1)
    elapsed = main.advance_frame(solver, 0.005)

    assert elapsed == 4 * 0.005
    assert solver.frame == 4
    assert solver.d.src.max() > 0.0


def test_frames_mode_writes_pngs(tmp_path):
    main.main([
        "--mode", "frames", "--width", "16", "--height", "16",
        "--duration", "0.035", "--out", str(tmp_path),
        "--relaxation", "GAUSS_SEIDEL",
    ])

    written = sorted(p.name for p in tmp_path.iterdir())
    assert written == ["Frame00000.png", "Frame00001.png"]


def test_headless_mode(capsys):
    main.main(["--mode", "headless", "--width", "12", "--height", "12", "--frames", "2"])
    out = capsys.readouterr().out
    assert "Headless simulation" in out
    assert "Frame 000" in out


def test_visualizer_update_steps_solver():
    solver = FluidSolver(16, 16, 0.1)
    viz = FluidVisualizer(solver, timestep=0.005, substeps=2)
    try:
        artists = viz.update(0)
        assert len(artists) == 2
        assert solver.frame == 2
        np.testing.assert_array_equal(viz.img.get_array(), solver.density_image())
    finally:
        plt.close(viz.fig)
