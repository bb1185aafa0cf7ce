"""
Test configuration for treelox tests
"""

import io
import sys
from pathlib import Path

import pytest

# Add the project root to Python path
project_root = Path(__file__).parent.parent
sys.path.insert(0, str(project_root))

from interpreter import create_interpreter


@pytest.fixture
def session():
    """A fresh interpreter session whose print output is captured"""
    output = io.StringIO()
    interpreter = create_interpreter(output=output)
    return interpreter


@pytest.fixture
def run_lox():
    """Run source in a fresh session and return the printed lines"""
    def _run(source):
        output = io.StringIO()
        create_interpreter(output=output).run_source(source)
        return output.getvalue().splitlines()
    return _run


@pytest.fixture
def feed():
    """Build an input() replacement that replays lines, then signals EOF"""
    def _feed(lines):
        remaining = iter(lines)

        def input_func(prompt):
            try:
                return next(remaining)
            except StopIteration:
                raise EOFError
        return input_func
    return _feed
