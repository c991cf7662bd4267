"""ContrastMate: WCAG 2.1 contrast auditing for design documents."""

__version__ = "0.1.0"
