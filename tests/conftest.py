import os
import sys


def pytest_configure():
    # Packages live under src/ (common, klin) and are imported top-level
    src = os.path.join(os.path.dirname(os.path.dirname(os.path.abspath(__file__))), "src")
    if src not in sys.path:
        sys.path.insert(0, src)
