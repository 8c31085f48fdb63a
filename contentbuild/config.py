from __future__ import annotations

APP_NAME = "Content Build Editor"
APP_VERSION = "0.4.0"

HASH_ALGO_DEFAULT = "sha1"
DEFAULT_PROFILE = "iOS"

LOGS_DIRNAME = "logs"
ENV_LOG_LEVEL = "CONTENTBUILD_LOG_LEVEL"
ENV_LOG_TO_CONSOLE = "CONTENTBUILD_LOG_TO_CONSOLE"
ENV_PROFILES_DIR = "CONTENTBUILD_PROFILES_DIR"

# Folders never turned into content items when a folder is opened
IGNORE_DIRS = {".git", "__pycache__", ".venv", "node_modules", "bin", "obj"}

# How often the GUI drains cross-thread output (ms)
OUTPUT_POLL_MS = 100
