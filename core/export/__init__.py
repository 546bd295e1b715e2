"""Dashboard template export and import.

Templates are versioned JSON snapshots of datasets, widgets, and layers.
See `core.export.service` for the export/import entry points.
"""
