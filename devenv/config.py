# devenv/config.py
"""
Static constants and default values for the FlowDesk developer environment.

Anything a contributor may want to change lives in the pydantic models in
devenv/config_models.py; this module only holds fixed names, paths relative
to the project root, and the tool version.
"""

from typing import List

# Represents the version of the bootstrap logic.
SCRIPT_VERSION: str = "1.0.0"

DEFAULT_CONFIG_FILE: str = "flowdesk.yaml"

# --- Persisted state layout (relative to the project root) ---
SETUP_MARKER_NAME: str = ".setup-complete"
SETUP_LOCK_NAME: str = ".setup.lock"

BACKEND_DIR: str = "backend"
FRONTEND_DIR: str = "frontend"
ENV_FILE: str = "backend/.env"
ENV_TEMPLATE_FILE: str = "backend/.env.example"

# Laravel refuses to boot when these are missing.
LARAVEL_WRITABLE_DIRS: List[str] = [
    "backend/storage/framework/sessions",
    "backend/storage/framework/views",
    "backend/storage/framework/cache",
    "backend/bootstrap/cache",
]

# Directories created by the dependency installers, removed by `clean`.
DEPENDENCY_DIRS: List[str] = [
    "node_modules",
    "frontend/node_modules",
    "backend/vendor",
]

# Paths inside the `app` container whose owner must be the app user.
CONTAINER_WRITABLE_PATHS: List[str] = [
    "/var/www/html/storage",
    "/var/www/html/bootstrap/cache",
]

APP_KEY_PATTERN: str = r"^APP_KEY=base64:.+"

# --- Local CI simulation ---
HOOK_TEST_TARGET_FILE: str = "frontend/src/app/page.tsx"
