"""
Shared pytest fixtures for league fixtures tests.

Running tests:
    pytest tests/
"""
import pytest
import sys
import os

# Add src directory to path for imports
sys.path.insert(0, os.path.join(os.path.dirname(__file__), '..', 'src'))

from league.models import Team


@pytest.fixture
def client():
    """Create a test client."""
    from app import app
    app.config['TESTING'] = True
    with app.test_client() as client:
        yield client


@pytest.fixture
def temp_data_dir(tmp_path, monkeypatch):
    """Point the app at an empty temporary data directory."""
    import app as app_module

    tournaments_dir = tmp_path / "tournaments"
    tournaments_dir.mkdir()

    monkeypatch.setattr(app_module, 'DATA_DIR', str(tmp_path))
    monkeypatch.setattr(app_module, 'TOURNAMENTS_FILE', str(tmp_path / "tournaments.yaml"))
    monkeypatch.setattr(app_module, 'TOURNAMENTS_DIR', str(tournaments_dir))

    return tmp_path


@pytest.fixture
def four_teams():
    return [Team("A", "Alpha"), Team("B", "Bravo"), Team("C", "Charlie"), Team("D", "Delta")]


@pytest.fixture
def three_teams():
    return [Team("A", "Alpha"), Team("B", "Bravo"), Team("C", "Charlie")]
