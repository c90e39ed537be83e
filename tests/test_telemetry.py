import pytest

from line_engine.runtime import telemetry


def test_configure_rejects_config_and_preset_together() -> None:
    with pytest.raises(ValueError):
        telemetry.configure(config=object(), preset="development")


def test_configure_rejects_unknown_preset() -> None:
    with pytest.raises(ValueError):
        telemetry.configure(preset="verbose")


def test_span_handle_stringifies_metadata() -> None:
    handle = telemetry.SpanHandle(logger=None, span_name="editor::apply")

    handle.add_metadata("commands", ("move_left", "backspace"))
    handle.add_metadata("insertion_point", 3)

    assert handle.metadata == {
        "commands": "('move_left', 'backspace')",
        "insertion_point": "3",
    }


def test_span_reraises_after_logging_failure() -> None:
    with pytest.raises(RuntimeError):
        with telemetry.span("editor::apply", metadata={"commands": 1}):
            raise RuntimeError("boom")


def test_presets_cover_named_configs() -> None:
    assert sorted(telemetry.PRESETS) == ["development", "performance", "production"]
