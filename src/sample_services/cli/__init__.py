"""Command-line interface (``sample-services``)."""
