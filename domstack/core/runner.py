"""Program runner — evaluates a program root's top-level children.

One run
-------
- a fresh VariableStore is created
- each top-level child of the root is evaluated in document order
- a recoverable ``Err`` is logged as a WARNING and the run continues
- a fatal ``Err`` is logged as an ERROR and the remaining siblings are
  never evaluated; bindings made so far are kept
- the final store is logged (unless ``show_store`` is off)

Usage
-----
    runner = ProgramRunner(settings=settings, log_fn=log)
    result = runner.run(root)
    if not result.completed:
        ...  # result.error says why
"""
from __future__ import annotations

from dataclasses import dataclass
from typing import Callable

from domstack.core.evaluator import Evaluator, format_value
from domstack.core.result import Err
from domstack.core.settings_manager import SettingsManager
from domstack.core.tree_nodes import Node
from domstack.core.variable_store import VariableStore

LogFn = Callable[[str, str], None]       # (level, message)


@dataclass
class RunResult:
    store:     VariableStore
    completed: bool
    executed:  int                 # top-level nodes evaluated, failing one included
    error:     Err | None = None


class ProgramRunner:
    """Runs programs; every ``run`` call gets its own store."""

    def __init__(
        self,
        settings: SettingsManager | None = None,
        log_fn:   LogFn | None           = None,
    ) -> None:
        self._settings = settings or SettingsManager()
        self._log      = log_fn or (lambda lvl, msg: None)
        self._eval     = Evaluator(
            log_callback     = self._log,
            name_attributes  = self._settings.name_attributes,
            literal_fallback = self._settings.literal_fallback,
        )

    # ------------------------------------------------------------------
    # Public entry point
    # ------------------------------------------------------------------

    def run(self, root: Node) -> RunResult:
        """Evaluate ``root``'s children in order against a new store."""
        store    = VariableStore()
        executed = 0
        error    = None

        for node in root.children:
            executed += 1
            result = self._eval.evaluate(store, node)
            if not isinstance(result, Err):
                continue
            if result.fatal:
                self._log("ERROR", f"{node.tag}: {result}; run aborted")
                error = result
                break
            self._log("WARNING", f"{node.tag}: {result}; skipped")

        if self._settings.show_store:
            self._log("INFO", f"Store: {self._format_store(store)}")
        return RunResult(store=store, completed=error is None, executed=executed, error=error)

    # ------------------------------------------------------------------
    # Helpers
    # ------------------------------------------------------------------

    @staticmethod
    def _format_store(store: VariableStore) -> str:
        items = ", ".join(f"{name}: {format_value(value)}" for name, value in store.as_dict().items())
        return "{" + items + "}"


def run_program(
    root:     Node,
    log:      LogFn | None           = None,
    settings: SettingsManager | None = None,
) -> RunResult:
    """Convenience: run ``root`` once with a new ProgramRunner."""
    return ProgramRunner(settings=settings, log_fn=log).run(root)
