"""Comment highlights: range tagging, selection resolution, hover tooltips."""
