"""
Test configuration merging and the package logger.
"""
import logging

import pytest

from leabrax import layerConfig_std, runConfig_std, ConfigurationError
from leabrax.config import merge_config
from leabrax.logger import setup_logger


def test_merge_keeps_defaults():
    merged = merge_config(layerConfig_std, {"FFFBparams": {"Gi": 2.1}})
    assert merged["FFFBparams"]["Gi"] == 2.1
    assert merged["FFFBparams"]["FF"] == layerConfig_std["FFFBparams"]["FF"]
    assert layerConfig_std["FFFBparams"]["Gi"] == 1.8

    merged["DtParams"]["VmTau"] = 10
    assert layerConfig_std["DtParams"]["VmTau"] == 3.3


def test_merge_without_override_copies():
    merged = merge_config(runConfig_std)
    assert merged == runConfig_std
    assert merged is not runConfig_std


@pytest.mark.parametrize("override", [
    {"Lrate": "fast"},
    {"Lrate": True},
    {"NumCycles": 0},
    {"WtInit": {"Low": float("nan")}},
    {"WtInit": 0.5},
    {"Momentum": 0.9},
])
def test_invalid_overrides(override):
    with pytest.raises(ConfigurationError):
        merge_config(runConfig_std, override)


def test_lrnvar():
    assert merge_config(runConfig_std, {"LrnVar": "Act"})["LrnVar"] == "Act"


def test_logger_writes_to_directory(tmp_path):
    logger = setup_logger(log_dir=str(tmp_path))
    assert logger.name == "leabrax"
    logger.info("hello")
    fileHandlers = [handler for handler in logger.handlers
                    if isinstance(handler, logging.FileHandler)]
    assert any(handler.baseFilename.startswith(str(tmp_path)) for handler in fileHandlers)
    for handler in fileHandlers:
        handler.flush()
    assert any(path.suffix == ".log" for path in tmp_path.iterdir())
    for handler in fileHandlers:
        logger.removeHandler(handler)
        handler.close()
