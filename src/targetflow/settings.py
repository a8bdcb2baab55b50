from __future__ import annotations
import os

ENV_PREFIX = "TARGETFLOW_"
BUILD_FILE = os.environ.get("TARGETFLOW_BUILD_FILE", "targetflow_build.py")
