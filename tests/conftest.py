import os
import warnings

# Ignore warnings from beanie internals
warnings.filterwarnings("ignore", category=DeprecationWarning, module="beanie.*")

# Set test environment variables before any livecast module reads configuration
os.environ.update(
    {
        "RECORD_STORE_BACKEND": "memory",
        "DEMO_MODE": "true",
        "PROVIDER_WEBHOOK_SECRET": "",
        "RECORDING_MIN_DURATION_SECONDS": "60",
        "RECORDING_MAX_DURATION_SECONDS": "43200",
        "WEBHOOK_MAX_CONFLICT_RETRIES": "1",
        "WEBHOOK_MAX_PROCESSING_ATTEMPTS": "3",
        "WEBHOOK_RETRY_BASE_DELAY_MS": "0",
        "BOOST_EXPIRY_INTERVAL_SECONDS": "0",
        "FEED_DEFAULT_PAGE_SIZE": "20",
        "FEED_MAX_PAGE_SIZE": "100",
    }
)

# Import shared fixtures so they are available to all tests
from tests.fixtures.store_fixtures import *  # noqa: E402, F403
