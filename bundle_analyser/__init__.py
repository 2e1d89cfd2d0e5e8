"""Bundle size analyser: measures import-map bundles and keeps a dated history."""

__version__ = "0.1.0"
