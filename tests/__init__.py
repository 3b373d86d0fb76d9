"""Test package for Button Blitz.

Core tests drive the generators, the session reducer and the engine with a
fake clock and fixed seeds. The smoke tests run the pygame UI headlessly with
SDL's dummy drivers. Run ``pytest`` from the project root.
"""
