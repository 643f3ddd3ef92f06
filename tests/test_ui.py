from rustdrill import ui


def _plain(monkeypatch):
    monkeypatch.delenv("CLICOLOR_FORCE", raising=False)
    monkeypatch.setenv("CLICOLOR", "0")


def test_no_emoji_reflects_environment(monkeypatch):
    monkeypatch.delenv("NO_EMOJI", raising=False)
    assert ui.no_emoji() is False
    monkeypatch.setenv("NO_EMOJI", "1")
    assert ui.no_emoji() is True


def test_bold_plain_when_colours_disabled(monkeypatch):
    _plain(monkeypatch)
    assert ui.bold("`I AM NOT DONE`") == "`I AM NOT DONE`"


def test_bold_forced_wraps_in_escape_codes(monkeypatch):
    monkeypatch.setenv("CLICOLOR_FORCE", "1")
    result = ui.bold("text")
    assert result == "\x1b[1mtext\x1b[0m"


def test_warn_without_emoji(monkeypatch, capsys):
    _plain(monkeypatch)
    monkeypatch.setenv("NO_EMOJI", "1")
    ui.warn("Ran exercises/x.rs with errors")
    assert capsys.readouterr().out == "! Ran exercises/x.rs with errors\n"


def test_warn_with_emoji(monkeypatch, capsys):
    _plain(monkeypatch)
    monkeypatch.delenv("NO_EMOJI", raising=False)
    ui.warn("oops")
    out = capsys.readouterr().out
    assert out.startswith("⚠️ ")
    assert out.rstrip("\n").endswith("oops")


def test_success_without_emoji(monkeypatch, capsys):
    _plain(monkeypatch)
    monkeypatch.setenv("NO_EMOJI", "1")
    ui.success("Successfully ran a.rs")
    assert capsys.readouterr().out == "✓ Successfully ran a.rs\n"


def test_success_with_emoji(monkeypatch, capsys):
    _plain(monkeypatch)
    monkeypatch.delenv("NO_EMOJI", raising=False)
    ui.success("done")
    assert capsys.readouterr().out == "✅ done\n"