"""Runtime settings and the medical vocabulary file."""
