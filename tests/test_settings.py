import pytest

from baselinegate.settings import DEFAULT_DATASET_URL, Settings, load_settings


def test_defaults_when_environment_is_empty():
    settings = load_settings({})

    assert settings == Settings()
    assert settings.max_workers == 4
    assert settings.dataset_url == DEFAULT_DATASET_URL
    assert settings.snapshot_path is None


def test_values_are_read_and_cast():
    settings = load_settings({
        "BASELINEGATE_MAX_WORKERS": "8",
        "BASELINEGATE_RETRY_DELAY": "0.25",
        "BASELINEGATE_SNAPSHOT_PATH": " /data/baseline.json ",
        "BASELINEGATE_BREAKER_FAILURE_THRESHOLD": "2",
        "BASELINEGATE_MAX_RETRIES": "",
    })

    assert settings.max_workers == 8
    assert settings.retry_delay == 0.25
    assert settings.snapshot_path == "/data/baseline.json"
    assert settings.max_retries == 3
    assert settings.breaker_options() == {
        "failure_threshold": 2,
        "recovery_timeout": 30.0,
        "monitoring_period": 60.0,
    }


def test_invalid_numbers_are_rejected():
    with pytest.raises(ValueError, match="BASELINEGATE_MAX_WORKERS"):
        load_settings({"BASELINEGATE_MAX_WORKERS": "many"})

    with pytest.raises(ValueError, match="at least 1"):
        load_settings({"BASELINEGATE_MAX_WORKERS": "0"})

    with pytest.raises(ValueError, match="negative"):
        load_settings({"BASELINEGATE_MAX_RETRIES": "-1"})
