from pathlib import Path
from unittest.mock import patch

import pytest

from tests.helpers import API_BASE, FakeBackend
from webtocase.main import main


@pytest.fixture(autouse=True)
def _isolated_env(monkeypatch: pytest.MonkeyPatch, tmp_path: Path) -> None:
    monkeypatch.chdir(tmp_path)
    monkeypatch.setenv("API_BASE", API_BASE)


def _run(backend: FakeBackend, argv: list[str]) -> int:
    with patch("webtocase.main.WebToCaseClient", side_effect=lambda **kwargs: backend.client()):
        return main(argv)


class TestCli:
    def test_success_prints_reference(
        self, backend: FakeBackend, capsys: pytest.CaptureFixture[str]
    ) -> None:
        code = _run(
            backend,
            ["support", "--field", "SuppliedName=Ada", "--field", "SuppliedEmail=ada@example.org"],
        )

        assert code == 0
        assert "Reference: 00001001" in capsys.readouterr().out

    def test_validation_failure_exits_1(
        self, backend: FakeBackend, capsys: pytest.CaptureFixture[str]
    ) -> None:
        code = _run(backend, ["support", "--field", "SuppliedName=Ada"])

        assert code == 1
        assert "Email is required." in capsys.readouterr().err

    def test_missing_file_exits_1(self, backend: FakeBackend, tmp_path: Path) -> None:
        code = _run(backend, ["support", "--file", str(tmp_path / "nope.pdf")])

        assert code == 1
        assert backend.requests == []

    def test_unknown_form_exits_1(self, backend: FakeBackend) -> None:
        backend.form_status = 404

        assert _run(backend, ["missing"]) == 1

    def test_markup_mode(self, backend: FakeBackend, tmp_path: Path) -> None:
        markup = tmp_path / "form.html"
        markup.write_text(
            '<form><input name="SuppliedName" data-required="true" value="Ada">'
            '<input type="email" name="SuppliedEmail" value="ada@example.org"></form>',
            encoding="utf-8",
        )

        code = _run(backend, ["support", "--markup", str(markup)])

        assert code == 0
        assert backend.calls("/submit")[0]["fieldValues"] == {
            "SuppliedName": "Ada",
            "SuppliedEmail": "ada@example.org",
        }

    def test_malformed_field_rejected(self, backend: FakeBackend) -> None:
        with pytest.raises(SystemExit):
            _run(backend, ["support", "--field", "no-equals-sign"])
