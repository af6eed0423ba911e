#!/usr/bin/env python3

"""
Main Startup Module

Simply call main(args) to start the emulator, replacing args with a dictionary
of options.  This can be done via the Terminal or GUI.

All options must be supplied.  Defaults can be specified with a 'None'.

The machine runs on a worker thread, while the main thread looks after the
host: reading inputs, showing frames and updating the title.  Any error raised
by the machine (such as a stack overflow in the guest program) is re-raised
here once the worker has stopped.
"""

__copyright__ = "Copyright (C) 2022 Gregory Maynard-Hoare"
__license__ = "GNU Affero General Public License v3.0"

from random import Random
from threading import Event, Thread
from time import perf_counter, sleep
from .constants import APP_INTRO, APP_COPYRIGHT, APP_NAME, IO_FREQ
from .debugger import Debugger
from .hostio import Loader
from .machine import Machine

HOST_INTERVAL = 1.0 / IO_FREQ


class StartupError(Exception):
    pass


def run_machine(machine, inputs, renderer, host_interval=HOST_INTERVAL):
    cancel_event = Event()
    errors = []

    def machine_thread():
        try:
            machine.run(cancel_event)
        except Exception as e:  # pylint: disable=broad-except
            errors.append(e)  # Handed back to the main thread below

    thread = Thread(target=machine_thread, name="machine")
    thread.start()
    next_title_time = 0.0

    try:
        while thread.is_alive():
            if inputs.process_messages(machine):
                break

            renderer.refresh_display()
            this_time = perf_counter()

            if this_time >= next_title_time:
                renderer.set_title("{} - {} FPS, {} OPS, {} Hz".format(
                    APP_NAME, machine.ticks_per_second, machine.ops_per_second, machine.get_clock_speed()
                ))
                next_title_time = this_time + 1.0

            sleep(host_interval)
    finally:
        cancel_event.set()
        thread.join()

    # Show whatever was drawn last, such as a program's final screen before EXIT
    renderer.refresh_display()

    if errors:
        raise errors[0]


def main(args):
    print("".join((APP_INTRO, APP_COPYRIGHT)))
    opt_renderer = args["renderer"]
    auto_select_renderer = opt_renderer is None  # If necessary, try PyGame first, then Curses.
    mute_audio = args["mute"]

    # flake8: noqa: F401
    if auto_select_renderer or opt_renderer == "pygame":
        # pylint: disable=unused-import, import-outside-toplevel, raise-missing-from
        try:
            import pygame
        except ImportError:
            if auto_select_renderer:
                opt_renderer = "curses"
            else:
                raise StartupError(
                    "PyGame does not appear to be installed."
                )
        else:
            opt_renderer = "pygame"
            from .inputs.i_pygame import Inputs
            from .renderers.r_pygame import Renderer

            if mute_audio:
                from .audio.a_null import Audio
            else:
                from .audio.a_pygame import Audio

    if opt_renderer == "curses":
        # pylint: disable=unused-import, import-outside-toplevel, raise-missing-from
        try:
            import curses
        except ImportError:
            if auto_select_renderer:
                raise StartupError(
                    "Neither PyGame nor Curses (or Windows-Curses) appear to be installed."
                )

            raise StartupError(
                "Curses (or Windows-Curses) does not appear to be installed."
            )
        else:
            from .inputs.i_curses import Inputs
            from .renderers.r_curses import Renderer

            # Terminal bells are noisy, so stay quiet unless asked
            if mute_audio or mute_audio is None:
                from .audio.a_null import Audio
            else:
                from .audio.a_curses import Audio

    if opt_renderer == "null":
        # pylint: disable=import-outside-toplevel
        from .inputs.i_null import Inputs
        from .renderers.r_null import Renderer
        from .audio.a_null import Audio

    # Read the program before touching the host display, so a bad filename fails cleanly
    program = Loader().load_binary(args["filename"])

    # Set up the debugger and live output if necessary
    debugger = Debugger()
    debugger.set_live(args["debug"])

    renderer = Renderer(
        scale=args["scale"],
        pygame_palette=args["pygame_palette"],
        curses_cursor_mode=args["curses_cursor_mode"],
        smoothing=args["smoothing"]
    )

    try:
        inputs = Inputs(args["keymap"], renderer)
    except Exception:
        renderer.shutdown()
        raise

    audio = Audio()

    # Create a new machine, and plug the host collaborators into it
    machine = Machine(
        redraw=renderer.draw_frame,
        resolution_changed=renderer.resolution_changed,
        audio=audio,
        debugger=debugger,
        rng=Random(args["seed"]),
        clock_speed=args["clock_speed"]
    )

    try:
        # Oversized programs are refused here, before anything runs
        machine.load_program(program)
        run_machine(machine, inputs, renderer)
    finally:
        # The machine has stopped, so shut down the host systems.  __del__ cannot be relied upon when using PyPy
        audio.shutdown()
        inputs.shutdown()
        renderer.shutdown()
