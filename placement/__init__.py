"""
Placement — live scene objects and their per-tick targets

- registry.py: ObjectRegistry (ABS / REL placement, removal by tag, 250 m inclusion radius)
- updater.py: signed east/north offsets from the device to each absolute object
"""
