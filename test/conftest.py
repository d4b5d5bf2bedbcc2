"""
Test configuration for the Bebop test suite
"""

import pytest
import sys
from pathlib import Path

# Add the project root to Python path
project_root = Path(__file__).parent.parent
sys.path.insert(0, str(project_root))

from parsing import LispGrammar
from interpreter import create_builtin_runtime_env
from prelude import create_prelude_env


@pytest.fixture
def grammar():
  """Provide a fresh grammar instance for each test"""
  return LispGrammar()


@pytest.fixture
def env():
  """Root environment holding only the builtins"""
  return create_builtin_runtime_env()


@pytest.fixture
def prelude_env():
  """Root environment with the prelude loaded"""
  return create_prelude_env()
