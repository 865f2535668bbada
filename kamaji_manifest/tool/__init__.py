"""Command line tool for kamaji-manifest."""
