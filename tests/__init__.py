"""
Geo-anchored scene engine test suite

Structure:
- unit/: Unit tests for individual components
- integration/: End-to-end sessions on simulated sensor + in-memory scene
- conftest.py: shared fakes (clock, immediate executor, scene, sensor)
"""
