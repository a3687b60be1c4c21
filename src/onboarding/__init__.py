"""Onboarding tour resolution & playback engine.

Subpackages:
 - ``platform``: host platform detection, adapters, selector registry
 - ``design``: theme presets and the theme cascade
 - ``tour``: data model, markdown, step building, playback, seen-state, import/export
 - ``services``: event bus, logging capture, key/value storage backends
"""

__version__ = "0.4.0"
