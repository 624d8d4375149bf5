"""Test package for Ring Flight.

Core tests exercise the flight loop without pygame. The smoke tests run the
pygame shell headlessly using SDL's dummy video driver, so no real window is
opened. To run these tests, execute ``pytest`` from the project root.
"""
