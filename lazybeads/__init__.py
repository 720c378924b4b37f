"""Terminal UI for the beads (bd) issue tracker."""

__version__ = "0.1.0"
