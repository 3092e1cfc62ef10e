"""Tests for logging setup."""

import json
import logging
import re

import pytest

from snow_change.config import LoggingConfig
from snow_change.logger import (
    JSONFormatter,
    TextFormatter,
    setup_logging,
)


def _record(message='Created CR: CHG1', context=None):
    record = logging.LogRecord(
        name='snow_change.actions',
        level=logging.INFO,
        pathname=__file__,
        lineno=1,
        msg=message,
        args=(),
        exc_info=None,
    )
    if context is not None:
        record.context = context
    return record


class TestFormatters:
    """Tests for log formatters."""

    def test_text_format(self):
        """Lines read [timestamp] [LEVEL] message."""
        line = TextFormatter().format(_record())
        assert re.fullmatch(
            r'\[\d{4}-\d{2}-\d{2} \d{2}:\d{2}:\d{2}\] \[INFO\] Created CR: CHG1', line
        )

    def test_text_format_with_context(self):
        line = TextFormatter().format(_record(context={'cr_id': 'CHG1', 'polls': 3}))
        assert line.endswith('Created CR: CHG1 (cr_id=CHG1, polls=3)')

    def test_json_format(self):
        entry = json.loads(JSONFormatter().format(_record(context={'cr_id': 'CHG1'})))
        assert entry['level'] == 'INFO'
        assert entry['logger'] == 'snow_change.actions'
        assert entry['message'] == 'Created CR: CHG1'
        assert entry['context'] == {'cr_id': 'CHG1'}
        assert re.fullmatch(r'\d{4}-\d{2}-\d{2} \d{2}:\d{2}:\d{2}', entry['time'])

    def test_json_format_without_context(self):
        entry = json.loads(JSONFormatter().format(_record()))
        assert 'context' not in entry


class TestSetupLogging:
    """Tests for setup_logging."""

    def test_level_and_handlers(self):
        logger = setup_logging(LoggingConfig(level='debug', format='text'))

        assert logger.name == 'snow_change'
        assert logger.level == logging.DEBUG
        assert len(logger.handlers) == 1
        assert isinstance(logger.handlers[0].formatter, TextFormatter)
        assert logger.propagate is False

    def test_json_and_file(self, tmp_path):
        log_file = tmp_path / 'logs' / 'snow.log'
        logger = setup_logging(LoggingConfig(level='INFO', format='json', file=str(log_file)))

        logging.getLogger('snow_change.cli').info('hello', extra={'context': {'action': 'wait'}})
        for handler in logger.handlers:
            handler.flush()

        assert len(logger.handlers) == 2
        entry = json.loads(log_file.read_text().splitlines()[0])
        assert entry['message'] == 'hello'
        assert entry['logger'] == 'snow_change.cli'
        assert entry['context'] == {'action': 'wait'}

    def test_repeated_setup_replaces_handlers(self):
        setup_logging(LoggingConfig(format='text'))
        logger = setup_logging(LoggingConfig(format='text'))
        assert len(logger.handlers) == 1

    def test_unopenable_log_file_raises(self, tmp_path):
        blocker = tmp_path / 'not_a_dir'
        blocker.write_text('')

        with pytest.raises(OSError):
            setup_logging(LoggingConfig(file=str(blocker / 'snow.log')))
