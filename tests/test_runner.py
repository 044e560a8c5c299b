"""Tests for domstack.core.runner — whole-program runs."""
import pytest

from domstack.core.log_sink import ListLogSink
from domstack.core.result import ErrorKind
from domstack.core.runner import ProgramRunner, run_program
from domstack.core.settings_manager import SettingsManager
from domstack.core.tree_builder import load_program


def program(body):
    return load_program(f'<html><body><div id="code">{body}</div></body></html>', "code")


@pytest.fixture
def sink():
    return ListLogSink()


# ---------------------------------------------------------------------------
# End-to-end programs
# ---------------------------------------------------------------------------

class TestPrograms:
    def test_bind_add_log(self, sink):
        root = program(
            '<LET data-name="a">2</LET>'
            '<LET data-name="b"><ADD><REF>a</REF><REF>a</REF></ADD></LET>'
            '<LOG><REF>b</REF></LOG>'
        )
        result = run_program(root, log=sink)
        assert result.completed
        assert result.error is None
        assert result.store.as_dict() == {"a": "2", "b": 4}
        assert [m for m in sink.messages() if m.startswith("LOG")] == ["LOG(b) => 4"]

    def test_free_then_log(self, sink):
        root = program(
            '<LET data-name="a">10</LET>'
            '<FREE data-name="a"></FREE>'
            '<LOG><REF>a</REF></LOG>'
        )
        result = run_program(root, log=sink)
        assert result.completed
        assert "a" not in result.store
        assert "LOG(a) => <unbound>" in sink.messages()

    def test_ref_unbound_then_log(self, sink):
        root = program("<REF>ghost</REF><LOG><REF>ghost</REF></LOG>")
        result = run_program(root, log=sink)
        assert result.completed
        assert result.executed == 2
        assert "LOG(ghost) => <unbound>" in sink.messages()

    def test_rebinding_last_writer_wins(self):
        root = program('<LET data-name="x">1</LET><LET data-name="x">2</LET>')
        assert run_program(root).store.as_dict() == {"x": "2"}

    def test_sub_program(self, sink):
        root = program(
            '<LET data-name="a">10</LET><LET data-name="b">3</LET><LET data-name="c">2</LET>'
            '<LET data-name="r"><SUB><REF>a</REF><REF>b</REF><REF>c</REF></SUB></LET>'
        )
        result = run_program(root, log=sink)
        assert result.store.get("r") == 5
        assert "SUB 10 3 2 => 5" in sink.messages()

    def test_pretty_printed_source(self):
        root = program("""
            <LET data-name="a">
                2
            </LET>
            <LET data-name="b">
                <ADD>
                    <REF>a</REF>
                    <REF>a</REF>
                </ADD>
            </LET>
        """)
        result = run_program(root)
        assert result.completed
        assert result.store.as_dict() == {"a": "2", "b": 4}


# ---------------------------------------------------------------------------
# Error tiers
# ---------------------------------------------------------------------------

class TestAbort:
    def test_fatal_error_stops_run(self, sink):
        root = program(
            '<LET data-name="before">1</LET>'
            '<ADD><REF>undefinedVar</REF></ADD>'
            '<LET data-name="after">2</LET>'
        )
        result = run_program(root, log=sink)
        assert not result.completed
        assert result.executed == 2
        assert result.error.kind is ErrorKind.INVALID_OPERAND
        # bindings made before the failure are kept, later siblings never run
        assert result.store.as_dict() == {"before": "1"}
        errors = sink.messages("ERROR")
        assert len(errors) == 1
        assert errors[0].startswith("ADD:")
        assert "run aborted" in errors[0]

    def test_fatal_error_inside_let(self):
        root = program(
            '<LET data-name="x"><ADD><REF>nope</REF></ADD></LET>'
            '<LET data-name="y">1</LET>'
        )
        result = run_program(root)
        assert not result.completed
        assert len(result.store) == 0

    def test_invalid_reference_in_log(self):
        root = program('<LOG><REF> </REF></LOG><LET data-name="y">1</LET>')
        result = run_program(root)
        assert result.error.kind is ErrorKind.INVALID_REFERENCE
        assert "y" not in result.store

    def test_recoverable_errors_continue(self, sink):
        root = program(
            '<LET>1</LET>'
            '<FREE></FREE>'
            '<LET data-name="empty"></LET>'
            '<LET data-name="ok">3</LET>'
        )
        result = run_program(root, log=sink)
        assert result.completed
        assert result.executed == 4
        assert result.store.as_dict() == {"ok": "3"}
        warnings = sink.messages("WARNING")
        assert len(warnings) == 3
        assert all(w.endswith("skipped") for w in warnings)

    def test_recoverable_error_in_nested_command(self, sink):
        root = program('<LET data-name="x"><FREE></FREE></LET><LET data-name="y">1</LET>')
        result = run_program(root, log=sink)
        assert result.completed
        assert result.store.as_dict() == {"x": "", "y": "1"}
        assert len(sink.messages("WARNING")) == 1

    def test_unbinding_unbound_does_not_abort(self):
        root = program('<FREE data-name="a"></FREE><LET data-name="b">1</LET>')
        result = run_program(root)
        assert result.completed
        assert result.store.as_dict() == {"b": "1"}


# ---------------------------------------------------------------------------
# Runner behaviour
# ---------------------------------------------------------------------------

class TestProgramRunner:
    def test_fresh_store_per_run(self):
        runner = ProgramRunner()
        first = runner.run(program('<LET data-name="a">1</LET>'))
        second = runner.run(program("<LOG><REF>a</REF></LOG>"))
        assert first.store is not second.store
        assert "a" not in second.store

    def test_empty_program(self):
        result = run_program(program(""))
        assert result.completed
        assert result.executed == 0
        assert len(result.store) == 0

    def test_store_logged(self, sink):
        run_program(program('<LET data-name="a">1</LET><LET data-name="b"><ADD></ADD></LET>'), log=sink)
        assert sink.messages()[-1] == "Store: {a: '1', b: 0}"

    def test_store_not_logged(self, sink):
        settings = SettingsManager()
        settings.set("LOG", "show_store", "false")
        run_program(program('<LET data-name="a">1</LET>'), log=sink, settings=settings)
        assert not any(m.startswith("Store:") for m in sink.messages())

    def test_strict_setting(self, sink):
        settings = SettingsManager()
        settings.set("EVALUATOR", "literal_fallback", "false")
        result = run_program(program('<LET data-name="a">1</LET>'), log=sink, settings=settings)
        assert result.completed
        assert "a" not in result.store
        assert len(sink.messages("WARNING")) == 1

    def test_name_attributes_setting(self):
        settings = SettingsManager()
        settings.set("PROGRAM", "name_attributes", "var")
        result = run_program(program('<LET var="a" data-name="b">1</LET>'), settings=settings)
        assert result.store.as_dict() == {"a": "1"}
