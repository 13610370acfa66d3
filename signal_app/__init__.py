"""Application layer: settings, ensemble config, analysis service and CLI."""
