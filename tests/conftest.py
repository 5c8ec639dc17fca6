"""
Shared fixtures for the inheritance engine tests.

Puts the project root on sys.path so the top-level modules and the scripts
package import without installation.
"""

import sys
from pathlib import Path

import pytest

PROJECT_ROOT = Path(__file__).resolve().parent.parent
if str(PROJECT_ROOT) not in sys.path:
    sys.path.insert(0, str(PROJECT_ROOT))

from inheritance_engine import EngineConfig, create_engine  # noqa: E402


@pytest.fixture
def engine():
    return create_engine()


@pytest.fixture
def treasury_engine():
    return create_engine(EngineConfig(spouse_only_radd='treasury'))


@pytest.fixture
def households_csv(tmp_path):
    """A household CSV covering fixed shares, residue, 'awl and radd."""
    path = tmp_path / "households.csv"
    path.write_text(
        "id_case,husband,wife,son,daughter,mother,fullSister,estate_value\n"
        "c1,1,0,0,0,0,0,1000\n"
        "c2,1,0,0,1,0,0,1200\n"
        "c3,0,0,2,1,0,0,4000\n"
        "c4,1,0,0,0,1,2,2400\n",
        encoding="utf-8",
    )
    return path
