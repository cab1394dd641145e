import chieftrainer.__main__ as module_main


def test_module_entrypoint_calls_main_entry(monkeypatch) -> None:
    called = {"value": 0}
    monkeypatch.setattr(module_main, "main_entry", lambda: called.__setitem__("value", 1))
    module_main.main()
    assert called["value"] == 1


def test_console_script_exits_with_run_code(monkeypatch) -> None:
    import chieftrainer.main as main

    monkeypatch.setattr(main, "run", lambda: 3)
    try:
        main.main_entry()
    except SystemExit as exc:
        assert exc.code == 3
    else:
        raise AssertionError("main_entry should raise SystemExit")
