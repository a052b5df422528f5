"""
Sensors — device location/compass collaborator

Provides:
- LocationProvider: the interface the engine consumes
  (permission check, start/stop updates, status, last fix, compass heading)
- Simulated providers for headless runs and tests:
    - SimulatedLocationProvider: scripted status + synthetic walk/heading drift
    - CSVLocationReplay: replay lat,lon,heading rows from a CSV file

Usage examples:
    from sensors.sim import SimulatedLocationProvider, CSVLocationReplay
"""
