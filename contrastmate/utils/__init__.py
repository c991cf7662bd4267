"""Pure color and WCAG helpers."""
