from __future__ import annotations

# GH / API reads (run list, run view, secret set)
GH_TIMEOUT_SECONDS = 60.0
GH_WATCH_TIMEOUT_SECONDS = 4 * 60 * 60.0

# Build tool (build regenerates the lockfile; publish uploads the package)
BUILD_TIMEOUT_SECONDS = 60 * 60.0
PUBLISH_TIMEOUT_SECONDS = 30 * 60.0

# Idempotent GH read retry policy
GH_READ_RETRY_ATTEMPTS = 3
GH_READ_RETRY_DELAY_SECONDS = 1.0
