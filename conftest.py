"""Test configuration for ensuring root-level module imports."""

import os
import sys

# Add the repository root (the directory containing this file) to ``sys.path``
# so the flat modules import the same way ``streamlit run`` sees them.
ROOT_DIR = os.path.abspath(os.path.dirname(__file__))
if ROOT_DIR not in sys.path:
    sys.path.insert(0, ROOT_DIR)
