"""
Test suite for the print sheet composition engine.

Unit tests for each pipeline stage plus end-to-end composition tests.
"""

import sys
from pathlib import Path

# Add the project root to the Python path for imports
project_dir = Path(__file__).parent.parent
if str(project_dir) not in sys.path:
    sys.path.insert(0, str(project_dir))
