"""Terminal front-ends for the reader state."""
