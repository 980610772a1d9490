"""
Tests for parameter serialisation and time helpers
"""

import datetime
import logging
from decimal import Decimal
from fractions import Fraction

import numpy as np
import pytest

from errors import UnsupportedParameterType
from utils import parameter_to_text, parameters_to_text, setup_logging, time_of_day, today


class TestParametersToText:
    """Test how stimulus parameters end up in the params column"""

    def test_mixed_parameters(self):
        assert parameters_to_text(["RF", 5, [1, 2, 3]]) == "RF, 5, [1 2 3]"

    def test_empty_parameters(self):
        assert parameters_to_text([]) == ""

    def test_strings_kept_verbatim(self):
        assert parameters_to_text(["a, b", "  x "]) == "a, b,   x "

    def test_floats(self):
        assert parameter_to_text(0.5) == "0.5"
        assert parameter_to_text([1.5, 2.0]) == "[1.5 2.0]"

    def test_numpy_values(self):
        assert parameter_to_text(np.int64(7)) == "7"
        assert parameter_to_text(np.float32(0.25)) == "0.25"
        assert parameter_to_text(np.arange(4)) == "[0 1 2 3]"

    def test_other_numbers_use_their_str(self):
        assert parameters_to_text([Fraction(1, 2), Decimal('0.5'), 1 + 2j]) == "1/2, 0.5, (1+2j)"

    def test_matrix_on_one_line(self):
        assert parameter_to_text(np.array([[1, 2], [3, 4]])) == "[[1 2] [3 4]]"

    def test_long_array_not_wrapped_or_summarised(self):
        text = parameter_to_text(list(range(2000)))
        assert "\n" not in text
        assert "..." not in text
        assert text.endswith("1998 1999]")

    def test_empty_array(self):
        assert parameter_to_text([]) == "[]"

    @pytest.mark.parametrize("value", [
        True,
        np.bool_(False),
        {'size': 3},
        None,
        object(),
        [True, False],
        ["a", "b"],
        [[1, 2], [3]],
    ])
    def test_unsupported_values(self, value):
        with pytest.raises(UnsupportedParameterType):
            parameter_to_text(value)

    def test_unsupported_value_fails_whole_list(self):
        with pytest.raises(UnsupportedParameterType) as info:
            parameters_to_text(["RF", 5, {'bad': 1}])
        assert info.value.value == {'bad': 1}


class TestTimeOfDay:
    """Test time of day normalisation"""

    def test_time_string(self):
        assert time_of_day('15:59:30') == '15:59:30'

    def test_time_without_seconds(self):
        assert time_of_day('9:05') == '09:05:00'

    def test_iso_datetime(self):
        assert time_of_day('2024-05-01 15:59:30') == '15:59:30'

    def test_datetime_objects(self):
        assert time_of_day(datetime.time(8, 1, 2)) == '08:01:02'
        assert time_of_day(datetime.datetime(2024, 5, 1, 23, 0, 59, 999)) == '23:00:59'

    def test_now(self):
        assert len(time_of_day()) == 8

    @pytest.mark.parametrize("value", ['noon', '25:00:00', 12])
    def test_invalid_times(self, value):
        with pytest.raises(ValueError):
            time_of_day(value)

    def test_today_format(self):
        assert today() == datetime.date.today().isoformat()


class TestSetupLogging:
    """Test logger setup"""

    def file_handlers(self, logger):
        return [h for h in logger.handlers if isinstance(h, logging.FileHandler)]

    def test_same_file_twice_keeps_one_handler(self, tmp_path):
        log_file = tmp_path / 'db.log'
        logger = setup_logging(str(log_file))
        setup_logging(str(log_file))

        assert len(self.file_handlers(logger)) == 1
        assert len([h for h in logger.handlers if type(h) is logging.StreamHandler]) == 1

    def test_clear_does_not_remove_open_log(self, tmp_path):
        log_file = tmp_path / 'db.log'
        logger = setup_logging(str(log_file))
        logger.info("first session line")
        setup_logging(str(log_file), clear=True)
        logger.info("second session line")
        for handler in logger.handlers:
            handler.flush()

        text = log_file.read_text()
        assert "first session line" in text
        assert "second session line" in text

    def test_clear_starts_fresh_file(self, tmp_path):
        log_file = tmp_path / 'db.log'
        log_file.write_text("old run\n")
        logger = setup_logging(str(log_file), clear=True)
        logger.info("new run")
        for handler in logger.handlers:
            handler.flush()

        assert "old run" not in log_file.read_text()

    def test_second_file_gets_its_own_handler(self, tmp_path):
        logger = setup_logging(str(tmp_path / 'a.log'))
        setup_logging(str(tmp_path / 'b.log'))

        names = sorted(h.baseFilename for h in self.file_handlers(logger))
        assert names == [str(tmp_path / 'a.log'), str(tmp_path / 'b.log')]
