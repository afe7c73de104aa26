"""
Pytest configuration for test discovery and imports.

Ensures src/ (the cloner modules) and tests/unit_tests/ (the in-memory
provider fake) are on sys.path so tests can import them directly.
"""

import os
import sys

ROOT_DIR = os.path.dirname(__file__)
SRC_DIR = os.path.join(ROOT_DIR, "src")
UNIT_TESTS_DIR = os.path.join(ROOT_DIR, "tests", "unit_tests")

for path in (SRC_DIR, UNIT_TESTS_DIR):
    if path not in sys.path:
        sys.path.insert(0, path)
