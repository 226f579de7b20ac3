"""
Test suite for Art Preview Compositor.

Unit tests for each pipeline stage plus integration tests that run the
preview factory and the demo renderer end to end.
"""

import sys
from pathlib import Path

# Project root holds the demo script imported by the integration tests
project_root = Path(__file__).parent.parent
if str(project_root) not in sys.path:
    sys.path.insert(0, str(project_root))
