"""Widget option building for the chart rendering engine.

Widgets are driven by a data mapping plus a typed style record rather than
bespoke view logic. This package contains the widget schema, theme colors,
style records, shared option chrome, and the per-type builder registry.
"""
