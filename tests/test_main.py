import json
import logging

import pytest

import main
from utils import DEFAULT_CONFIG, load_config, merge_config


@pytest.fixture
def config_file(tmp_path):
    config = merge_config(DEFAULT_CONFIG, {
        'logging': {'log_file': str(tmp_path / 'gallery.log')},
        'simulation_parameters': {'seed': 3},
    })
    path = tmp_path / 'config.json'
    path.write_text(json.dumps(config))
    return path


@pytest.fixture
def restore_logging():
    root = logging.getLogger()
    saved = list(root.handlers), root.level
    yield
    for handler in root.handlers:
        handler.close()
    root.handlers[:] = saved[0]
    root.setLevel(saved[1])


def test_headless_run(config_file, restore_logging):
    config = load_config(str(config_file))
    report = main.run_headless(config, 'new_year', 120)
    assert set(report) == {'sparkles', 'fireworks', 'confetti', 'bubbles', 'draw_calls'}
    assert report['sparkles']['live'] == 50
    assert report['draw_calls'].get('circle', 0) > 0


def test_main_headless_and_list(config_file, restore_logging, capsys):
    assert main.main(['--config', str(config_file), '--list']) == 0
    assert 'underwater' in capsys.readouterr().out
    assert main.main(['--config', str(config_file), '--headless', '--frames', '30', '--screen', 'atomic']) == 0
    assert main.main(['--config', str(config_file), '--headless', '--screen', 'nope']) == 2


def test_main_missing_config(tmp_path, capsys):
    assert main.main(['--config', str(tmp_path / 'nope.json')]) == 1
    assert 'FATAL' in capsys.readouterr().out


def test_gallery_accepts_zero_log_throttle(config_file, restore_logging, caplog):
    config = merge_config(load_config(str(config_file)), {
        'run_control': {'log_throttle_frames': 0},
        'visualization': {'width': 200, 'height': 300, 'fps': 240},
    })
    with caplog.at_level(logging.INFO):
        main.run_gallery(config, 'premium', 3)
    messages = [record.getMessage() for record in caplog.records]
    assert sum(message.startswith('Gallery frame') for message in messages) == 3
    assert 'Gallery loop finished.' in messages
