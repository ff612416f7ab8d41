"""Run the self-contained docstring examples."""

import doctest

import pytest

from timetally.core import durations
from timetally.core import time as core_time
from timetally.rollups import csv_export, time_windows


@pytest.mark.parametrize("module", [core_time, durations, csv_export, time_windows], ids=lambda m: m.__name__)
def test_docstring_examples(module):
    results = doctest.testmod(module)

    assert results.attempted > 0
    assert results.failed == 0
