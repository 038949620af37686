import json
from dataclasses import replace
from pathlib import Path

import pytest

from aac_image_pipeline import cli
from aac_image_pipeline.config import ConfigManager
from aac_image_pipeline.engine import PipelineEngine
from aac_image_pipeline.input_loader import validate_input
from aac_image_pipeline.output_manager import OutputManager

from tests.conftest import CATEGORY_ID, FakeCardRepository, FakeImageClient, FakeUploader, no_image_error

ENV = {
    "GOOGLE_GENAI_API_KEY": "genai-key",
    "NEXT_PUBLIC_SUPABASE_URL": "https://example.supabase.co",
    "SUPABASE_SERVICE_ROLE_KEY": "service-key",
}


@pytest.fixture
def fake_engine(monkeypatch, make_engine):
    """Route create_engine to an engine built on fakes"""
    created = {}

    def _create_engine(config):
        created["repository"] = FakeCardRepository()
        created["engine"] = make_engine(repository=created["repository"])
        return created["engine"]

    monkeypatch.setattr(cli, "create_engine", _create_engine)
    return created


def _manager(tmp_path, environ=ENV):
    return ConfigManager(project_root=tmp_path, env_files=[], environ=environ)


def test_no_arguments_prints_usage(capsys):
    assert cli.main([]) == 0

    out = capsys.readouterr().out
    assert "usage: aac-generate-images" in out
    assert "batch_1" in out


def test_help_flag_exits_cleanly():
    with pytest.raises(SystemExit) as exc_info:
        cli.main(["-h"])

    assert exc_info.value.code == 0


def test_missing_environment_exits_with_error(tmp_path, write_input, fake_engine):
    path = write_input({"batch_1": [{"keyword": "happy", "prompt": "p", "category_id": CATEGORY_ID}]})

    assert cli.main([str(path)], config_manager=_manager(tmp_path, environ={})) == 1
    assert fake_engine == {}


def test_missing_input_file_exits_with_error(tmp_path, fake_engine):
    assert cli.main([str(tmp_path / "nope.json")], config_manager=_manager(tmp_path)) == 1


def test_invalid_input_lists_errors_and_writes_nothing(tmp_path, monkeypatch, write_input, fake_engine, capsys):
    monkeypatch.chdir(tmp_path)
    path = write_input({"batch_1": [
        {"keyword": "happy", "prompt": "p", "category_id": CATEGORY_ID, "image_path": "./missing.png"},
    ]})

    code = cli.main([str(path)], config_manager=_manager(tmp_path))

    assert code == 1
    assert "  - batch_1[0].image_path file not found: ./missing.png" in capsys.readouterr().out
    assert fake_engine["repository"].insert_calls == 0


def test_successful_run_prints_summary(tmp_path, write_input, fake_engine, capsys):
    path = write_input({"batch_1": [{"keyword": "happy", "prompt": "p", "category_id": CATEGORY_ID}]})

    code = cli.main([str(path)], config_manager=_manager(tmp_path))

    assert code == 0
    out = capsys.readouterr().out
    assert "FINAL SUMMARY" in out
    assert "✅ Successful: 1" in out
    assert "Pipeline completed" in out
    card = fake_engine["repository"].cards["card-1"]
    assert card["is_active"] is True


def test_failed_items_still_exit_zero(tmp_path, write_input, monkeypatch, make_engine):
    monkeypatch.setattr(
        cli, "create_engine",
        lambda config: make_engine(image_client=FakeImageClient(outcomes=[no_image_error()] * 3)),
    )
    path = write_input({"batch_1": [{"keyword": "happy", "prompt": "p", "category_id": CATEGORY_ID}]})

    assert cli.main([str(path)], config_manager=_manager(tmp_path)) == 0


def test_example_prompt_file_is_valid(monkeypatch):
    example = Path(__file__).resolve().parent.parent / "scripts" / "aac-prompts.example.json"
    with open(example, encoding="utf-8") as f:
        data = json.load(f)

    monkeypatch.chdir(example.parent.parent)
    assert validate_input(data) == []


def test_unwritable_output_dir_still_prints_summary(tmp_path, write_input, monkeypatch, sleep, capsys):
    repository = FakeCardRepository()
    monkeypatch.setattr(cli, "create_engine", lambda config: PipelineEngine(
        config=config,
        image_client=FakeImageClient(),
        card_repository=repository,
        uploader=FakeUploader(),
        output_manager=OutputManager(config.output_dir),
        sleep=sleep,
    ))
    blocker = tmp_path / "blocker"
    blocker.write_text("not a directory", encoding="utf-8")
    path = write_input({"batch_1": [{"keyword": "happy", "prompt": "p", "category_id": CATEGORY_ID}]})

    code = cli.main([str(path), "--output-dir", str(blocker / "generated-images")],
                    config_manager=_manager(tmp_path))

    assert code == 0
    assert "FINAL SUMMARY" in capsys.readouterr().out
    assert repository.insert_calls == 1
    assert repository.cards["card-1"]["is_active"] is False


def test_request_timeout_reaches_http_clients():
    config = _manager(Path.cwd()).load_config()
    engine = cli.create_engine(replace(config, request_timeout=5.0))

    assert engine.card_repository.timeout == 5.0
    assert engine.uploader.timeout == 5.0
