"""Tests for format_result output-mode selection."""

import json

from ammonomicon.output.formatters import OutputSettings, format_result
from ammonomicon.services.result import ServiceResult


def _render_result() -> ServiceResult:
    return ServiceResult(
        ok=True,
        op="render",
        data={
            "text": "Use the Shotgun",
            "units": [
                {"kind": "text", "text": "Use the "},
                {"kind": "link", "text": "Shotgun", "category": "guns", "id": "gun_1"},
            ],
            "links": [{"kind": "link", "text": "Shotgun", "category": "guns", "id": "gun_1"}],
            "unresolved": [],
            "loading": False,
        },
    )


class TestFormatResult:
    def test_json_mode(self) -> None:
        output = format_result(_render_result(), json_output=True)
        parsed = json.loads(output)
        assert parsed["op"] == "render"
        assert parsed["data"]["links"][0]["id"] == "gun_1"

    def test_settings_take_precedence(self) -> None:
        output = format_result(
            _render_result(), settings=OutputSettings(quiet=True), json_output=True
        )
        assert output == "Use the Shotgun"

    def test_human_mode(self) -> None:
        output = format_result(_render_result())
        assert output.startswith("Use the Shotgun")
        assert "[1] Shotgun" in output
        assert "guns/gun_1" in output
