"""HTTP transport: Flask blueprints and error handlers."""
