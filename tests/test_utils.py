import json
import logging

import pytest

from utils import DEFAULT_CONFIG, load_config, merge_config, setup_logging


def test_merge_config_is_deep_and_pure():
    base = {'a': {'b': 1, 'c': 2}, 'd': 3}
    merged = merge_config(base, {'a': {'c': 5}, 'e': 6})
    assert merged == {'a': {'b': 1, 'c': 5}, 'd': 3, 'e': 6}
    assert base == {'a': {'b': 1, 'c': 2}, 'd': 3}


def test_load_config_fills_defaults(tmp_path):
    path = tmp_path / 'config.json'
    path.write_text(json.dumps({'run_control': {'screen': 'sakura'}}))
    config = load_config(str(path))
    assert config['run_control']['screen'] == 'sakura'
    assert config['run_control']['log_throttle_frames'] == DEFAULT_CONFIG['run_control']['log_throttle_frames']
    assert config['visualization'] == DEFAULT_CONFIG['visualization']


def test_load_config_errors(tmp_path, caplog):
    with caplog.at_level(logging.ERROR):
        with pytest.raises(FileNotFoundError):
            load_config(str(tmp_path / 'missing.json'))
        broken = tmp_path / 'broken.json'
        broken.write_text('{"logging": ')
        with pytest.raises(json.JSONDecodeError):
            load_config(str(broken))
        not_object = tmp_path / 'list.json'
        not_object.write_text('[1, 2]')
        with pytest.raises(ValueError):
            load_config(str(not_object))
    assert len([r for r in caplog.records if r.levelno == logging.ERROR]) == 3


def test_setup_logging_replaces_handlers(tmp_path):
    config = {'logging': {'level': 'debug', 'log_file': str(tmp_path / 'logs' / 'gallery.log')}}
    root = logging.getLogger()
    saved = list(root.handlers), root.level
    try:
        setup_logging(config)
        setup_logging(config)
        assert len(root.handlers) == 2
        assert root.level == logging.DEBUG
        assert (tmp_path / 'logs' / 'gallery.log').exists()
    finally:
        for handler in root.handlers:
            handler.close()
        root.handlers[:] = saved[0]
        root.setLevel(saved[1])
