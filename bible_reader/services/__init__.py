"""Services backing the reader state: stores, settings, content and the controller."""
