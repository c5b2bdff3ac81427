import pytest

from ledgerrecon.core.recon.models import ReconciliationConfig, ToleranceMode
from ledgerrecon.core.recon.profiles import clear_cache
from ledgerrecon.core.sample_data import generate_sample_datasets


@pytest.fixture(autouse=True)
def _reset_profile_cache():
    clear_cache()
    yield
    clear_cache()


@pytest.fixture
def sample_datasets():
    """Sample ledger, sample statement and their default configuration."""
    return generate_sample_datasets()


@pytest.fixture
def id_config():
    """Exact match on 'id' with zero absolute tolerance."""
    return ReconciliationConfig(key_columns=("id",), tolerance=0, tolerance_mode=ToleranceMode.ABSOLUTE)
