def test_import_scenescript_package() -> None:
    import importlib

    module = importlib.import_module("scenescript")
    assert module is not None


def test_public_api_parses_and_steps() -> None:
    import scenescript

    program = scenescript.parse_script("[SAY speaker=A] hi")
    state, output = scenescript.step(scenescript.ExecutionState(), program)
    assert output.lines[0].text == "hi"
    assert scenescript.deserialize(scenescript.serialize(state)) == state
