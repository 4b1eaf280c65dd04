import json
import os
from pathlib import Path

import pytest

from scenescript.domain.output import DialogueLine, EffectMarker
from scenescript.presentation.cli import app, config
from scenescript.presentation.cli.render import format_effect, format_line, wrap_text_for_box
from scenescript.presentation.cli.save_slots import SaveSlotStore
from scenescript.services import deserialize
from scenescript.services.flow_analyzer import AnalyzerConfig

_STORY = "\n".join(
    [
        "[SAY speaker=A] hi",
        "[BRANCH choice=Go label=go, choice=Stay label=stay]",
        "[LABEL name=go]",
        "[SAY speaker=A] went",
        "[LABEL name=stay]",
    ]
)


def _write(tmp_path: Path, text: str, name: str = "story.md") -> Path:
    path = tmp_path / name
    path.write_text(text, encoding="utf-8")
    return path


def _feed_input(monkeypatch, answers: list[str]) -> None:
    remaining = iter(answers)
    monkeypatch.setattr("builtins.input", lambda _prompt="": next(remaining))


def test_check_reports_diagnostics_and_strict_exit_code(tmp_path: Path, capsys) -> None:
    script = _write(tmp_path, "[LABEL name=l]\n[SAY speaker=A] hi\n[JUMP label=l]")
    assert app.main(["check", str(script)]) == app.EXIT_OK
    out = capsys.readouterr().out
    assert "POTENTIAL_INFINITE_LOOP" in out
    assert "3 instructions" in out
    assert app.main(["check", str(script), "--strict"]) == app.EXIT_DIAGNOSTICS


def test_check_strict_ignores_info_diagnostics(tmp_path: Path, capsys) -> None:
    script = _write(tmp_path, "[PLAY_BGM name=a]\n[PLAY_BGM name=a]")
    assert app.main(["check", str(script), "--strict"]) == app.EXIT_OK
    assert "DUPLICATE_BGM" in capsys.readouterr().out


def test_check_clean_script(tmp_path: Path, capsys) -> None:
    script = _write(tmp_path, _STORY)
    assert app.main(["check", str(script), "--strict"]) == app.EXIT_OK
    assert "No issues found." in capsys.readouterr().out


def test_check_uses_config_file(tmp_path: Path, capsys) -> None:
    script = _write(tmp_path, "[SAY speaker=A] a rather long line")
    settings = tmp_path / "settings.json"
    settings.write_text(json.dumps({"max_text_length": 5}), encoding="utf-8")
    app.main(["check", str(script), "--config", str(settings)])
    assert "LONG_TEXT" in capsys.readouterr().out


def test_check_parse_error_exits_with_two(tmp_path: Path, capsys) -> None:
    script = _write(tmp_path, "[SAY speaker=A] hi\n[JUMP label=missing]")
    assert app.main(["check", str(script)]) == app.EXIT_LOAD_ERROR
    assert "at line 2" in capsys.readouterr().err


def test_check_missing_file_exits_with_two(tmp_path: Path, capsys) -> None:
    assert app.main(["check", str(tmp_path / "nope.md")]) == app.EXIT_LOAD_ERROR
    assert "not found" in capsys.readouterr().err


def test_play_runs_to_the_end(tmp_path: Path, monkeypatch, capsys) -> None:
    monkeypatch.delenv("SCENESCRIPT_DEBUG", raising=False)
    script = _write(tmp_path, _STORY)
    _feed_input(monkeypatch, ["", "1", ""])
    result = app.run_play(script, store=SaveSlotStore(tmp_path / "saves"))
    out = capsys.readouterr().out
    assert result == app.EXIT_OK
    assert "A: hi" in out
    assert "1. Go" in out
    assert "A: went" in out
    assert "The End" in out


def test_play_save_then_resume_mid_branch(tmp_path: Path, monkeypatch, capsys) -> None:
    monkeypatch.delenv("SCENESCRIPT_DEBUG", raising=False)
    script = _write(tmp_path, _STORY)
    store = SaveSlotStore(tmp_path / "saves")
    _feed_input(monkeypatch, ["", "s", "q"])
    assert app.run_play(script, slot=2, store=store) == app.EXIT_OK
    saved = deserialize(store.read_slot(2))
    assert saved.waiting_for_choice
    assert saved.pending_choice_targets == ["go", "stay"]

    _feed_input(monkeypatch, ["2"])
    assert app.run_play(script, slot=2, resume=True, store=store) == app.EXIT_OK
    out = capsys.readouterr().out
    assert "Resumed from slot 2" in out
    assert "A: went" not in out
    assert "The End" in out


def test_play_resume_from_empty_slot_fails(tmp_path: Path, capsys) -> None:
    script = _write(tmp_path, _STORY)
    store = SaveSlotStore(tmp_path / "saves")
    assert app.run_play(script, resume=True, store=store) == app.EXIT_LOAD_ERROR
    assert "Could not resume" in capsys.readouterr().err


def test_play_does_not_prompt_for_silent_steps(tmp_path: Path, monkeypatch, capsys) -> None:
    monkeypatch.delenv("SCENESCRIPT_DEBUG", raising=False)
    script = _write(tmp_path, "[LABEL name=a]\n[PLAY_BGM name=theme]\n[LABEL name=b]\n[SAY speaker=A] only line")
    prompts: list[str] = []

    def fake_input(prompt: str = "") -> str:
        prompts.append(prompt)
        return ""

    monkeypatch.setattr("builtins.input", fake_input)
    assert app.run_play(script, store=SaveSlotStore(tmp_path / "saves")) == app.EXIT_OK
    assert len(prompts) == 1
    assert "A: only line" in capsys.readouterr().out


def test_play_prompts_for_effects_in_debug_mode(tmp_path: Path, monkeypatch, capsys) -> None:
    monkeypatch.setenv("SCENESCRIPT_DEBUG", "1")
    script = _write(tmp_path, "[PLAY_BGM name=theme]\n# scene: intro")
    _feed_input(monkeypatch, ["", ""])
    assert app.run_play(script, store=SaveSlotStore(tmp_path / "saves")) == app.EXIT_OK
    out = capsys.readouterr().out
    assert "<play_bgm name=theme>" in out
    assert "<scene ending=None name=intro>" in out


def test_slots_command_lists_and_deletes(tmp_path: Path, capsys) -> None:
    store = SaveSlotStore(tmp_path, slot_count=3)
    store.write_slot(1, b'{"snapshot_version": 1, "state": {"program_counter": 3, "variables": {}}}')
    (tmp_path / "slot_2.json").write_text("garbage", encoding="utf-8")
    assert app.run_slots(store=store) == app.EXIT_OK
    out = capsys.readouterr().out
    assert "Slot 1: instruction 3" in out
    assert "Slot 2: unreadable" in out
    assert "Slot 3: empty" in out

    assert app.run_slots(delete=1, store=store) == app.EXIT_OK
    assert "Slot 1: empty" in capsys.readouterr().out
    assert not store.slot_exists(1)


def test_slots_command_rejects_unknown_slot(tmp_path: Path, capsys) -> None:
    assert app.run_slots(delete=9, store=SaveSlotStore(tmp_path)) == app.EXIT_LOAD_ERROR
    assert "Could not delete slot 9" in capsys.readouterr().err


def test_main_dispatches_slots_to_the_user_save_dir(monkeypatch, tmp_path: Path, capsys) -> None:
    monkeypatch.setattr(config, "get_save_dir", lambda: tmp_path)
    assert app.main(["slots"]) == app.EXIT_OK
    assert "Slot 1: empty" in capsys.readouterr().out


def test_prompt_rejects_out_of_range_choice(monkeypatch, capsys) -> None:
    _feed_input(monkeypatch, ["9", "x", "2"])
    assert app._prompt_action(2, True) == ("choose", 1)
    out = capsys.readouterr().out
    assert "between 1 and 2" in out
    assert "Please enter a number." in out


def test_load_analyzer_config_defaults_and_normalization(tmp_path: Path) -> None:
    assert config.load_analyzer_config(tmp_path / "missing.json") == AnalyzerConfig()
    broken = tmp_path / "broken.json"
    broken.write_text("{not json", encoding="utf-8")
    assert config.load_analyzer_config(broken) == AnalyzerConfig()
    mixed = tmp_path / "mixed.json"
    mixed.write_text(
        json.dumps(
            {
                "max_text_length": 80,
                "max_consecutive_wait": "long",
                "check_loops": False,
                "warn_duplicate_bgm": "no",
                "unknown": 1,
            }
        ),
        encoding="utf-8",
    )
    loaded = config.load_analyzer_config(mixed)
    assert loaded.max_text_length == 80
    assert loaded.max_consecutive_wait == 5.0
    assert loaded.check_loops is False
    assert loaded.warn_duplicate_bgm is True


def test_save_analyzer_config_round_trip(tmp_path: Path) -> None:
    path = tmp_path / "nested" / "config.json"
    settings = AnalyzerConfig(max_consecutive_wait=2.5, check_quality=False)
    config.save_analyzer_config(settings, path)
    assert config.load_analyzer_config(path) == settings


@pytest.mark.skipif(os.name == "nt", reason="POSIX layout")
def test_user_data_dir_under_home(monkeypatch, tmp_path: Path) -> None:
    monkeypatch.setenv("HOME", str(tmp_path))
    assert config.get_user_data_dir() == tmp_path / ".config" / "scenescript"
    assert config.get_save_dir() == tmp_path / ".config" / "scenescript" / "saves"


def test_debug_enabled_requires_exact_flag(monkeypatch) -> None:
    monkeypatch.setenv("SCENESCRIPT_DEBUG", "1")
    assert config.debug_enabled()
    monkeypatch.setenv("SCENESCRIPT_DEBUG", "true")
    assert not config.debug_enabled()


def test_save_slots_store_and_list(tmp_path: Path) -> None:
    store = SaveSlotStore(tmp_path, slot_count=2)
    store.write_slot(1, b'{"snapshot_version": 1, "state": {"program_counter": 3, "variables": {}}}')
    (tmp_path / "slot_2.json").write_text("garbage", encoding="utf-8")
    slots = store.list_slots()
    assert slots[0].exists and slots[0].program_counter == 3
    assert slots[1].is_corrupt
    store.delete_slot(1)
    assert not store.slot_exists(1)
    with pytest.raises(ValueError):
        store.read_slot(3)


def test_render_helpers() -> None:
    assert format_line(DialogueLine("Alice", "Hi")) == "Alice: Hi"
    assert format_line(DialogueLine(None, "Narration")) == "Narration"
    assert format_effect(EffectMarker("play_bgm", {"name": "theme"})) == "<play_bgm name=theme>"
    assert wrap_text_for_box("one two three four", 9) == ["one two", "  three", "  four"]
