# tests/e2e/test_health_checker.py
"""
Teste ponta a ponta via namespace público `klonk`.

Cenário: uma Machine percorre uma lista de URLs (self-transition com peso
maior), registra a saúde de cada uma no estado externo e termina em um
estado de resumo. Um Workflow alimentado por Trigger manual roda a mesma
checagem por evento.

Nenhum I/O real: o "fetch" consulta um dicionário de respostas falsas.
"""

import pytest

try:
    import klonk
    from klonk import (
        SKIP,
        Err,
        FunctionTask,
        Machine,
        MachineRunOptions,
        ManualTrigger,
        Ok,
        RunMode,
        Workflow,
        EventLogger,
        unwrap_or,
    )
except Exception as e:  # noqa: BLE001
    klonk = None
    _IMPORT_ERR = e
else:
    _IMPORT_ERR = None


def _require_imports():
    if _IMPORT_ERR is not None:
        pytest.fail(f"Public namespace 'klonk' failed to import: {_IMPORT_ERR}")


RESPONSES = {
    "https://ok.example": {"status": 200, "body": "<title>ok</title>"},
    "https://down.example": {"status": 503, "body": ""},
}


def _fetch(url):
    response = RESPONSES.get(url)
    if response is None:
        return Err(LookupError(url))
    return Ok(response)


def _parse(body):
    start, end = body.find("<title>"), body.find("</title>")
    return Ok({"title": body[start + len("<title>"):end]})


def _check_playlist(p):
    return (
        p.add_task(FunctionTask("fetch", _fetch), lambda state, out: state["urls"][state["index"]])
        .add_task(
            FunctionTask("parse", _parse, validate_fn=lambda body: "<title>" in body),
            lambda state, out: unwrap_or(out["fetch"], {}).get("body") or SKIP,
        )
        .with_finalizer(_record)
    )


def _record(state, outputs):
    fetched = unwrap_or(outputs["fetch"], {})
    state["results"].append(
        {
            "url": state["urls"][state["index"]],
            "healthy": fetched.get("status") == 200,
            "title": unwrap_or(outputs["parse"], {}).get("title") if outputs["parse"] else None,
        }
    )
    state["index"] += 1


def _summary(p):
    def _summarize(state):
        healthy = sum(1 for r in state["results"] if r["healthy"])
        state["summary"] = f"{healthy}/{len(state['results'])} healthy"
        return Ok(state["summary"])

    return p.add_task(FunctionTask("summary", _summarize), lambda state, out: state)


def _build_machine(logger=None):
    return (
        Machine(logger=logger)
        .add_state(
            "check-url",
            lambda n: n.set_playlist(_check_playlist)
            .add_transition("check-url", lambda s: s["index"] < len(s["urls"]), weight=2)
            .add_transition("complete", lambda s: s["index"] >= len(s["urls"]), weight=1)
            .set_retry_limit(3)
            .set_retry_delay(0.5),
            initial=True,
        )
        .add_state("complete", lambda n: n.set_playlist(_summary).prevent_retry())
        .finalize(ident="health-checker")
    )


def test_health_checker_machine_runs_until_leaf(sleeps):
    _require_imports()
    log = EventLogger()
    machine = _build_machine(logger=log)
    state = {"urls": list(RESPONSES), "index": 0, "results": []}

    out = machine.run(state, MachineRunOptions(mode=RunMode.LEAF))

    assert out is state
    assert state["results"] == [
        {"url": "https://ok.example", "healthy": True, "title": "ok"},
        {"url": "https://down.example", "healthy": False, "title": None},
    ]
    assert state["summary"] == "1/2 healthy"
    assert sleeps == []
    entries = [e["state"] for e in log.find(message="Entering state. Running playlist.")]
    assert entries == ["check-url", "check-url", "complete"]
    assert all(e["instance"] == "health-checker" for e in log.find(path="machine.run"))


def test_health_checker_machine_stops_at_roundtrip_in_any_mode(sleeps):
    """
    No modo ANY, a self-transition do estado inicial é um roundtrip:
    apenas a primeira URL é checada.
    """
    _require_imports()
    state = {"urls": list(RESPONSES), "index": 0, "results": []}
    _build_machine().run(state, MachineRunOptions(mode=RunMode.ANY))
    assert [r["url"] for r in state["results"]] == ["https://ok.example"]


def test_workflow_runs_check_per_event(monkeypatch):
    _require_imports()
    monkeypatch.setattr(Workflow, "_wait", lambda self, seconds: None)
    trigger = ManualTrigger("urls")
    trigger.emit({"urls": ["https://ok.example"], "index": 0, "results": []})
    trigger.emit({"urls": ["https://missing.example"], "index": 0, "results": []})
    completed = []

    wf = (
        Workflow.create()
        .add_trigger(trigger)
        .set_playlist(
            lambda p: p.add_task(FunctionTask("fetch", _fetch), lambda event, out: event.data["urls"][0])
        )
        .prevent_retry()
    )
    processed = wf.start(interval=0, callback=lambda event, outputs: completed.append(outputs), max_ticks=2)

    assert processed == 1
    assert completed == [{"fetch": Ok(RESPONSES["https://ok.example"])}]
    assert klonk.__version__ == "0.1.0"
