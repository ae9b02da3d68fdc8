import pathlib
import sys

import pytest


REPO_ROOT = pathlib.Path(__file__).resolve().parents[2]
sys.path.append(str(REPO_ROOT))


@pytest.fixture()
def sample_transactions():
    from backend.ttms.seed.sample_records import sample_transactions

    return sample_transactions()


@pytest.fixture()
def sample_payload():
    from backend.ttms.seed.sample_records import sample_user_payload

    return sample_user_payload()


@pytest.fixture()
def sample_records():
    from backend.ttms.seed.sample_records import sample_record_set

    return sample_record_set()


@pytest.fixture()
def clean_env(monkeypatch):
    for name in ("TTMS_SPIKE_MODE", "TTMS_MONTH_BUCKET", "ENV", "APP_ENV"):
        monkeypatch.delenv(name, raising=False)
    return monkeypatch
