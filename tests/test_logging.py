import logging

import pytest

from ddstats.utils import setup_logging, get_logger
from ddstats.core.statistics.poisson import log_poisson_pmf


@pytest.mark.parametrize(
    "verbose, level",
    [(0, logging.WARNING), (1, logging.INFO), (2, logging.DEBUG), (5, logging.DEBUG)],
)
def test_setup_logging_levels(verbose, level):
    logger = setup_logging(verbose)
    assert logger.name == "ddstats"
    assert logger.level == level


def test_get_logger_is_namespaced():
    assert get_logger("core.solver").name == "ddstats.core.solver"


def test_clamped_mean_is_logged(caplog):
    with caplog.at_level(logging.WARNING, logger="ddstats"):
        assert log_poisson_pmf(0, -2.0) == 0.0
    assert "clamped" in caplog.text
