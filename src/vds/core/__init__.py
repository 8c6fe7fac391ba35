"""Cross-cutting primitives: errors, logging, settings, transports."""
