import os
import warnings

# Ignore warnings from crosscast.shared
warnings.filterwarnings("ignore", category=DeprecationWarning, module="crosscast.shared.*")

# Set test environment variables before crosscast config is loaded
os.environ.update({"DEMO_MODE": "false"})

# Import stream fixtures so they are available to all tests
from tests.fixtures.stream_fixtures import *  # noqa: E402, F403
