"""Shared pytest setup: keep logs and exports out of the user's home directory."""

import os
import tempfile

# Must run before config / session.logging are imported by the test modules
os.environ.setdefault("CSV_PLOTTER_DIR", tempfile.mkdtemp(prefix="csv-plotter-tests-"))
