"""Root conftest: keep test log files out of the working tree."""

import os
import tempfile

os.environ.setdefault("IGNORE_SPACE_LOG_DIR", tempfile.mkdtemp(prefix="ignore-space-logs-"))
