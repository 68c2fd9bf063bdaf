from __future__ import annotations

from eduka2pdf.tools_env import ToolStatus, format_report_lines, probe_tools, report_is_ok


def test_optional_tools_do_not_fail_report() -> None:
    report = [
        ToolStatus("img2pdf", True, "/usr/bin/img2pdf"),
        ToolStatus("ocrmypdf", False, "not found on PATH", required=False),
    ]
    assert report_is_ok(report)
    assert format_report_lines(report) == [
        "[OK ] img2pdf: /usr/bin/img2pdf",
        "[-- ] ocrmypdf (optional): not found on PATH",
    ]


def test_missing_required_tool_fails_report() -> None:
    assert not report_is_ok([ToolStatus("img2pdf", False, "not found on PATH")])


def test_probe_tools_names() -> None:
    names = [s.name for s in probe_tools(need_ocr=False)]
    assert names == ["img2pdf", "ocrmypdf", "pymupdf"]
