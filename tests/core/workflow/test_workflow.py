# tests/core/workflow/test_workflow.py
"""
Testes do Workflow de polling (Triggers → Playlist).

Os testes asseguram que:
- o Workflow é imutável (setters retornam novas instâncias)
- cada tick consulta cada Trigger uma vez
- falhas da Playlist ou do callback são logadas e não interrompem o loop
- start exige Playlist, inicia e para os Triggers
"""

import threading
import time

import pytest

try:
    from klonk.core.workflow import Workflow
    from klonk.core.trigger import ManualTrigger
    from klonk.core.playlist import Playlist, PlaylistRunOptions
    from klonk.core.result import Err, Ok
    from klonk.core.task import FunctionTask
    from klonk.core.exceptions import WorkflowConfigurationError
except Exception as e:  # noqa: BLE001
    Workflow = None
    _IMPORT_ERR = e
else:
    _IMPORT_ERR = None


def _require_imports():
    if _IMPORT_ERR is not None:
        pytest.fail(
            "Missing workflow module. Implement:\n"
            "- src/klonk/core/workflow.py (Workflow)\n"
            f"Import error: {_IMPORT_ERR}"
        )


def _echo_playlist(p):
    return p.add_task(FunctionTask("echo", lambda x: Ok(x)), lambda event, out: event.data)


def test_setters_return_new_workflows():
    _require_imports()
    base = Workflow.create()
    t = ManualTrigger("t")
    with_trigger = base.add_trigger(t)
    configured = with_trigger.set_playlist(_echo_playlist).set_retry_limit(2)

    assert base.triggers == ()
    assert base.playlist is None
    assert with_trigger.triggers == (t,)
    assert configured.playlist.idents == ("echo",)
    assert configured.run_options == PlaylistRunOptions(retry_delay=1.0, retry_limit=2)
    assert configured.prevent_retry().run_options.retries_enabled is False
    assert configured.set_retry_delay(0.5).run_options.retry_delay == 0.5


def test_duplicate_trigger_ident_is_rejected():
    _require_imports()
    wf = Workflow.create().add_trigger(ManualTrigger("t"))
    with pytest.raises(WorkflowConfigurationError):
        wf.add_trigger(ManualTrigger("t"))


def test_tick_polls_each_trigger_once_and_calls_callback():
    _require_imports()
    a, b = ManualTrigger("a"), ManualTrigger("b")
    a.emit(1)
    a.emit(2)
    b.emit(3)
    seen = []

    wf = Workflow.create().add_trigger(a).add_trigger(b).set_playlist(_echo_playlist)
    processed = wf.tick(callback=lambda event, outputs: seen.append((event.trigger_ident, outputs["echo"])))

    assert processed == 2
    assert seen == [("a", Ok(1)), ("b", Ok(3))]
    assert a.pending == 1


def test_tick_logs_failures_and_keeps_going(event_logger):
    _require_imports()
    a, b = ManualTrigger("a"), ManualTrigger("b")
    a.emit("x")
    b.emit("y")

    def _fail_on_a(data):
        return Err(RuntimeError("boom")) if data == "x" else Ok(data)

    wf = (
        Workflow.create()
        .add_trigger(a)
        .add_trigger(b)
        .set_playlist(lambda p: p.add_task(FunctionTask("t", _fail_on_a), lambda e, o: e.data))
        .prevent_retry()
    )
    processed = wf.tick(logger=event_logger)

    assert processed == 1
    errors = event_logger.find(message="Error during playlist execution")
    assert len(errors) == 1
    assert errors[0]["trigger"] == "a"
    assert errors[0]["error"]["type"] == "TASK_EXECUTION_FAILED"


def test_callback_errors_are_logged(event_logger):
    _require_imports()
    t = ManualTrigger("t")
    t.emit(1)

    def _bad_callback(event, outputs):
        raise ValueError("callback failed")

    wf = Workflow.create().add_trigger(t).set_playlist(_echo_playlist)
    assert wf.tick(callback=_bad_callback, logger=event_logger) == 0
    errors = event_logger.find(message="Error during playlist execution")
    assert errors[0]["error"]["type"] == "ENGINE_EXECUTION_ERROR"
    assert errors[0]["error"]["details"]["exception_class"] == "ValueError"


def test_start_without_playlist_raises():
    _require_imports()
    with pytest.raises(WorkflowConfigurationError):
        Workflow.create().add_trigger(ManualTrigger("t")).start(max_ticks=1)


def test_start_runs_ticks_and_manages_trigger_lifecycle(monkeypatch):
    _require_imports()
    waits = []
    monkeypatch.setattr(Workflow, "_wait", lambda self, seconds: waits.append(seconds))

    t = ManualTrigger("t")
    t.emit("a")
    t.emit("b")
    states = []

    wf = Workflow.create().add_trigger(t).set_playlist(_echo_playlist)
    processed = wf.start(
        interval=0.5,
        callback=lambda event, outputs: states.append(t.running),
        max_ticks=3,
    )

    assert processed == 2
    assert states == [True, True]
    assert t.running is False
    assert waits == [0.5, 0.5]


def test_stop_ends_loop_from_another_thread():
    _require_imports()
    t = ManualTrigger("t")
    wf = Workflow.create().add_trigger(t).set_playlist(_echo_playlist)
    done = threading.Event()

    def _run():
        wf.start(interval=0.01)
        done.set()

    worker = threading.Thread(target=_run, daemon=True)
    worker.start()
    for _ in range(500):
        if t.running:
            break
        time.sleep(0.01)
    t.emit("late")
    wf.stop()
    assert done.wait(timeout=5)
    assert t.running is False
