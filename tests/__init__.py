"""Test package for the escape terminal.

The ``*_core`` tests exercise the pygame-free tab logic directly. The smoke
and headless-sim tests run the real loop with pygame's dummy video and audio
drivers so no window is opened. Run ``pytest`` from the project root.
"""
