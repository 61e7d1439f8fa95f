"""I/O layer: settings, OKX client, analysis service, HTTP API and CLI."""
