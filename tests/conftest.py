import pytest
import z3


@pytest.fixture(autouse=True)
def reset_z3_global_params():
    """Sessions set process-wide z3 parameters; undo them after each test."""
    yield
    z3.reset_params()
