# main.py
"""
Main entry point for the Particle Gallery.

This script orchestrates the gallery lifecycle:
1. Loads configuration from `config.json` (or --config).
2. Initializes the logging system.
3. Builds the selected screen's particle systems.
4. Runs the window loop, or a headless capture against a RecordingSurface.
5. Handles clean shutdown and optional profiling output.
"""
import argparse
import cProfile
import io
import logging
import pstats
from typing import Any, Dict, List, Optional

from utils import setup_logging, load_config


def parse_args(argv: Optional[List[str]] = None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(description="Animated particle backgrounds.")
    parser.add_argument('--config', default='config.json', help="Path to the JSON configuration file.")
    parser.add_argument('--screen', help="Screen to show first (overrides run_control.screen).")
    parser.add_argument('--headless', action='store_true',
                        help="Run without a window, drawing into a recording surface.")
    parser.add_argument('--frames', type=int, help="Stop after this many frames (overrides run_control.max_frames).")
    parser.add_argument('--list', action='store_true', help="List the available screens and exit.")
    return parser.parse_args(argv)


def log_profile(profiler: cProfile.Profile) -> None:
    logging.info("--- Performance Profile ---")
    s = io.StringIO()
    # Sort by cumulative time spent in the function
    stats = pstats.Stats(profiler, stream=s).sort_stats('cumtime')
    stats.print_stats(20)
    logging.info(f"\n{s.getvalue()}")


def run_headless(config: Dict[str, Any], screen: str, frames: int) -> Dict[str, Any]:
    """
    Runs a screen for a fixed number of 1/60 s frames against a RecordingSurface.

    Returns:
        Dict[str, Any]: Per-system statistics plus the accumulated draw call
        counts under the 'draw_calls' key.
    """
    from constants import NOMINAL_DELTA_TIME
    from effects import build_screen
    from frame_clock import fixed_ticks
    from surface import RecordingSurface

    sim_params = config['simulation_parameters']
    run_params = config['run_control']
    vis_params = config['visualization']
    width, height = vis_params['width'], vis_params['height']

    simulation = build_screen(screen, sim_params.get('systems'), sim_params.get('seed'),
                              run_params.get('log_throttle_frames', 300))
    surface = RecordingSurface(width, height)
    draw_calls: Dict[str, int] = {}

    simulation.start()
    for timestamp in fixed_ticks(NOMINAL_DELTA_TIME, frames):
        surface.clear()
        simulation.frame(timestamp, width, height, surface)
        for op, count in surface.ops().items():
            draw_calls[op] = draw_calls.get(op, 0) + count

    report: Dict[str, Any] = dict(simulation.stats())
    report['draw_calls'] = draw_calls
    simulation.stop()

    logging.info(f"Headless run of '{screen}' finished after {frames} frames at {width}x{height}.")
    for name, stats in report.items():
        logging.info(f"  {name}: {stats}")
    return report


def run_gallery(config: Dict[str, Any], screen: str, max_frames: int) -> None:
    """Shows the gallery window until the user quits or max_frames is reached."""
    from effects import build_screen, screen_names
    from frame_clock import wall_clock_ticks
    from visualization import Visualizer

    sim_params = config['simulation_parameters']
    run_params = config['run_control']
    log_throttle = max(1, int(run_params.get('log_throttle_frames', 300)))

    def open_screen(name):
        simulation = build_screen(name, sim_params.get('systems'), sim_params.get('seed'), log_throttle)
        simulation.start()
        return simulation

    names = screen_names()
    index = names.index(screen)
    visualizer = Visualizer(config['visualization'])
    simulation = open_screen(screen)

    frame_num = 0
    for timestamp in wall_clock_ticks():
        # The visualizer's draw method returns False when the user quits.
        if not visualizer.draw(simulation, timestamp):
            break
        frame_num += 1

        if visualizer.pending_switch:
            index = (index + visualizer.pending_switch) % len(names)
            visualizer.pending_switch = 0
            simulation.stop()
            simulation = open_screen(names[index])

        # Hot loops must throttle logs
        if frame_num % log_throttle == 0:
            logging.info(f"Gallery frame {frame_num} on screen '{simulation.name}'.")

        if max_frames and frame_num >= max_frames:
            logging.info(f"Reached max_frames ({max_frames}). Stopping gallery.")
            break

    simulation.stop()
    visualizer.close()
    logging.info("Gallery loop finished.")


def main(argv: Optional[List[str]] = None) -> int:
    """
    The main function to run the gallery.
    """
    args = parse_args(argv)

    # Logging is not set up yet, so we use a print for this one error.
    try:
        config = load_config(args.config)
    except Exception as e:
        print(f"FATAL: Could not load {args.config}. Error: {e}")
        return 1

    setup_logging(config)

    from effects import screen_names

    if args.list:
        for name in screen_names():
            print(name)
        return 0

    run_params = config['run_control']
    screen = args.screen or run_params['screen']
    if screen not in screen_names():
        logging.critical(f"Unknown screen '{screen}'. Available screens: {screen_names()}.")
        return 2
    max_frames = args.frames if args.frames is not None else run_params.get('max_frames', 0)

    logging.info("--- Particle Gallery Starting ---")

    profiler = cProfile.Profile() if run_params.get('profile') else None
    if profiler is not None:
        profiler.enable()

    if args.headless:
        run_headless(config, screen, max_frames or 600)
    else:
        run_gallery(config, screen, max_frames)

    if profiler is not None:
        profiler.disable()
        log_profile(profiler)

    logging.info("--- Particle Gallery Shutting Down ---")
    return 0


if __name__ == "__main__":
    raise SystemExit(main())
