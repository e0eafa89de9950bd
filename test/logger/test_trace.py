from paramo.elements import CompositeState
from paramo.logger import Logger, format_character_set, format_state


def test_disabled_logger_records_nothing():
    trace = Logger("paramo.test.disabled")
    trace.disabled = True
    trace.section("Stacking")
    trace.info("ignored")
    assert trace.get_html_content() == '<div class="content">\n</div>'


def test_sections_are_closed():
    trace = Logger("paramo.test.sections")
    trace.section("First")
    trace.info("a < b")
    trace.section("Second")
    html = trace.get_html_content()
    assert html.count("<section") == 2
    assert html.count("</section>") == 2
    assert "a &lt; b" in html


def test_segment_table_renders_composites():
    trace = Logger("paramo.test.table")
    trace.segment_table(
        [(CompositeState(("0", "x")), 1.5), (CompositeState(("1", "x")), 0.5)],
        title="Edge 0",
    )
    html = trace.get_html_content()
    assert "Edge 0" in html
    assert "0|x" in html
    assert "State" in html and "End" in html


def test_capture_restores_disabled_state():
    trace = Logger("paramo.test.capture")
    trace.disabled = True
    with trace.capture():
        trace.info("inside")
    assert trace.disabled
    assert "inside" in trace.get_html_content()


def test_write_html(tmp_path):
    trace = Logger("paramo.test.write")
    trace.section("Discretization (res=4)")
    path = trace.write_html(tmp_path / "out" / "trace.html")
    page = path.read_text(encoding="utf-8")
    assert page.startswith("<!DOCTYPE html>")
    assert "Discretization (res=4)" in page
    assert "<style>" in page


def test_formatting():
    assert format_character_set(["B", "A"]) == "[B, A]"
    assert format_state(CompositeState(("0", "x"))) == "0|x"
    assert format_state("1") == "1"
