from __future__ import annotations

from hackcheck import cli, modes


def test_every_mode_has_a_channel_pattern() -> None:
    assert modes.missing_pattern_modes() == ()
    assert modes.extra_pattern_modes() == ()


def test_only_listing_modes_stream() -> None:
    streaming = {
        mode_type.name
        for mode_type, pattern in modes.MODE_PATTERNS.items()
        if pattern == "stream"
    }
    assert streaming == {"list-files", "list-modes", "show"}


def test_pattern_for_instances() -> None:
    assert modes.pattern_for(modes.Show(symbol="Foo")) == "stream"
    assert modes.pattern_for(modes.Status()) == "rpc"
    assert modes.pattern_for(modes.Format(start=0, end=1)) == "rpc"


def test_mode_names_are_unique() -> None:
    names = modes.mode_names()
    assert len(names) == len(set(names)) == len(modes.ALL_MODES)


def test_every_mode_has_a_cli_command() -> None:
    commands = {command.name for command in cli.app.registered_commands}
    assert commands == set(modes.mode_names())
