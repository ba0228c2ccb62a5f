# tests/core/errors/test_error_payload.py
"""
Testes do payload canônico de erro e da hierarquia de exceções.

Os testes asseguram que:
- exceções do Klonk carregam message/details/hint
- cada família de exceção é mapeada para um código estável
- exceções externas viram ENGINE_EXECUTION_ERROR sem expor stack trace
- o payload é serializável (dict puro)
"""

import json

import pytest

try:
    from klonk.core.errors import (
        ENGINE_CONFIGURATION_ERROR,
        ENGINE_EXECUTION_ERROR,
        TASK_EXECUTION_FAILED,
        TASK_VALIDATION_FAILED,
        TRANSITION_CONDITION_FAILED,
        ErrorPayload,
        exception_to_payload,
    )
    from klonk.core.exceptions import (
        ConfigurationError,
        DuplicateIdentError,
        KlonkException,
        TaskExecutionError,
        TaskValidationError,
        TransitionConditionError,
        UnresolvedTransitionError,
    )
except Exception as e:  # noqa: BLE001
    ErrorPayload = None
    _IMPORT_ERR = e
else:
    _IMPORT_ERR = None


def _require_imports():
    if _IMPORT_ERR is not None:
        pytest.fail(
            "Missing errors/exceptions modules. Implement:\n"
            "- src/klonk/core/errors.py (ErrorPayload, exception_to_payload)\n"
            "- src/klonk/core/exceptions.py (KlonkException hierarchy)\n"
            f"Import error: {_IMPORT_ERR}"
        )


def test_klonk_exception_carries_structured_fields():
    _require_imports()
    exc = DuplicateIdentError(message="Duplicate state ident 'A'", details={"state": "A"}, hint="renomeie")
    assert str(exc) == "Duplicate state ident 'A'"
    assert isinstance(exc, ConfigurationError)
    assert isinstance(exc, KlonkException)
    assert exc.details == {"state": "A"}
    assert exc.hint == "renomeie"


@pytest.mark.parametrize(
    "exc_factory, code",
    [
        (lambda: UnresolvedTransitionError(message="State 'x' not found"), "ENGINE_CONFIGURATION_ERROR"),
        (lambda: TaskValidationError(message="bad input"), "TASK_VALIDATION_FAILED"),
        (lambda: TaskExecutionError(message="gave up"), "TASK_EXECUTION_FAILED"),
        (lambda: TransitionConditionError(message="boom"), "TRANSITION_CONDITION_FAILED"),
        (lambda: KlonkException(message="generic"), "ENGINE_EXECUTION_ERROR"),
    ],
)
def test_klonk_exceptions_map_to_stable_codes(exc_factory, code):
    _require_imports()
    payload = exception_to_payload(exc_factory())
    assert payload.type == code
    assert code in {
        ENGINE_CONFIGURATION_ERROR,
        TASK_VALIDATION_FAILED,
        TASK_EXECUTION_FAILED,
        TRANSITION_CONDITION_FAILED,
        ENGINE_EXECUTION_ERROR,
    }


def test_payload_merges_details_and_hint():
    _require_imports()
    exc = TaskExecutionError(message="Task 'fetch' failed", details={"task": "fetch", "retries": 2}, hint="h")
    payload = exception_to_payload(exc)
    assert payload.to_dict() == {
        "type": TASK_EXECUTION_FAILED,
        "message": "Task 'fetch' failed",
        "details": {"exception_class": "TaskExecutionError", "task": "fetch", "retries": 2},
        "hint": "h",
    }


def test_foreign_exceptions_become_engine_execution_errors():
    _require_imports()
    payload = exception_to_payload(ValueError("nope"))
    assert payload.type == ENGINE_EXECUTION_ERROR
    assert payload.message == "nope"
    assert payload.details == {"exception_class": "ValueError"}
    assert payload.hint
    json.dumps(payload.to_dict())
