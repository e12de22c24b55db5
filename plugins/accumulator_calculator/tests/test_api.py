from app import create_app
from plugins.accumulator_calculator.core import CalculatorSettings

PREFIX = "/api/accumulator_calculator"


def _client():
    app = create_app("TestingConfig")
    return app.test_client()


def _new_session(client):
    resp = client.post(f"{PREFIX}/sessions")
    assert resp.status_code == 201
    return resp.get_json()["data"]["session_id"]


def _press(client, session_id, *tokens):
    data = None
    for token in tokens:
        if isinstance(token, (int, float)):
            resp = client.post(f"{PREFIX}/sessions/{session_id}/operand", json={"value": token})
        else:
            resp = client.post(f"{PREFIX}/sessions/{session_id}/operation", json={"symbol": token})
        assert resp.status_code == 200
        data = resp.get_json()["data"]
    return data


def test_operations_endpoint_lists_table():
    client = _client()
    resp = client.get(f"{PREFIX}/operations")
    assert resp.status_code == 200
    payload = resp.get_json()
    assert payload["success"] is True
    kinds = {item["symbol"]: item["kind"] for item in payload["data"]["operations"]}
    assert kinds["×"] == "binary"
    assert kinds["="] == "equals"
    assert kinds["RAN"] == "random"


def test_new_session_is_empty():
    client = _client()
    resp = client.post(f"{PREFIX}/sessions")
    data = resp.get_json()["data"]
    assert data["result"] is None
    assert data["pending"] is False
    assert data["description"] == ""
    assert data["sequence"] == ""
    assert data["entries"] == []


def test_calculator_style_chaining():
    client = _client()
    session_id = _new_session(client)
    data = _press(client, session_id, 3, "+", 4, "×", 5, "=")
    assert data["result"] == 35.0
    assert data["formatted"] == "35"
    assert data["pending"] is False
    assert data["description"] == "(3 + 4) × 5"
    assert data["sequence"] == "(3 + 4) × 5 ="
    assert data["applied"] is True


def test_pending_sequence_uses_ellipsis():
    client = _client()
    session_id = _new_session(client)
    data = _press(client, session_id, 3, "+")
    assert data["pending"] is True
    assert data["sequence"] == "3 + …"


def test_dropped_operation_reports_not_applied():
    client = _client()
    session_id = _new_session(client)
    data = _press(client, session_id, "+")
    assert data["applied"] is False
    assert data["entries"] == []

    data = _press(client, session_id, "bogus")
    assert data["applied"] is False


def test_variables_rebind_without_new_input():
    client = _client()
    session_id = _new_session(client)
    client.post(f"{PREFIX}/sessions/{session_id}/operand", json={"variable": "M"})
    data = _press(client, session_id, "+", 1, "=")
    assert data["result"] == 1.0
    assert data["description"] == "M + 1"

    resp = client.put(f"{PREFIX}/sessions/{session_id}/variables/M", json={"value": 5})
    assert resp.status_code == 200
    data = resp.get_json()["data"]
    assert data["result"] == 6.0
    assert data["variables"] == {"M": 5.0}
    assert len(data["entries"]) == 4

    resp = client.delete(f"{PREFIX}/sessions/{session_id}/variables/M")
    assert resp.get_json()["data"]["result"] == 1.0


def test_undo_and_reset():
    client = _client()
    session_id = _new_session(client)
    _press(client, session_id, 3, "+", 4)
    resp = client.post(f"{PREFIX}/sessions/{session_id}/undo")
    data = resp.get_json()["data"]
    assert data["description"] == "3 +"
    assert data["pending"] is True

    client.put(f"{PREFIX}/sessions/{session_id}/variables/M", json={"value": 2})
    resp = client.post(f"{PREFIX}/sessions/{session_id}/reset")
    data = resp.get_json()["data"]
    assert data["result"] is None
    assert data["pending"] is False
    assert data["entries"] == []
    assert data["variables"] == {}


def test_division_by_zero_is_reported_as_infinite():
    client = _client()
    session_id = _new_session(client)
    data = _press(client, session_id, 1, "÷", 0, "=")
    assert data["result"] is None
    assert data["formatted"] == "inf"
    assert data["description"] == "1 ÷ 0"


def test_session_state_and_delete():
    client = _client()
    session_id = _new_session(client)
    _press(client, session_id, 2, "±")
    resp = client.get(f"{PREFIX}/sessions/{session_id}")
    assert resp.get_json()["data"]["result"] == -2.0

    resp = client.delete(f"{PREFIX}/sessions/{session_id}")
    assert resp.status_code == 200
    resp = client.get(f"{PREFIX}/sessions/{session_id}")
    assert resp.status_code == 404
    assert resp.get_json()["error"]["code"] == "calculator.session_not_found"


def test_unknown_session_returns_404():
    client = _client()
    resp = client.post(f"{PREFIX}/sessions/nope/operand", json={"value": 1})
    assert resp.status_code == 404
    assert resp.get_json()["success"] is False


def test_operand_requires_exactly_one_field():
    client = _client()
    session_id = _new_session(client)
    for body in ({}, {"value": 1, "variable": "M"}, {"value": "abc"}, {"value": 1, "extra": True}):
        resp = client.post(f"{PREFIX}/sessions/{session_id}/operand", json=body)
        assert resp.status_code == 400
        payload = resp.get_json()
        assert payload["success"] is False
        assert payload["error"]["code"] == "calculator.invalid_request"


def test_log_limit_is_enforced():
    app = create_app("TestingConfig")
    app.extensions["accumulator_calculator.settings"] = CalculatorSettings(max_entries=2)
    client = app.test_client()
    session_id = _new_session(client)
    _press(client, session_id, 1, "+")
    resp = client.post(f"{PREFIX}/sessions/{session_id}/operand", json={"value": 2})
    assert resp.status_code == 422
    assert resp.get_json()["error"]["code"] == "calculator.log_full"


def test_stateless_evaluate_replays_through_gating():
    client = _client()
    resp = client.post(
        f"{PREFIX}/evaluate",
        json={
            "entries": [
                {"kind": "operation", "symbol": "+"},
                {"kind": "variable", "name": "x"},
                {"kind": "operation", "symbol": "×"},
                {"kind": "constant", "value": 3},
                {"kind": "operation", "symbol": "="},
            ],
            "variables": {"x": 4},
        },
    )
    assert resp.status_code == 200
    data = resp.get_json()["data"]
    assert data["result"] == 12.0
    assert data["description"] == "x × 3"
    assert len(data["entries"]) == 4


def test_stateless_evaluate_rejects_incomplete_entry():
    client = _client()
    resp = client.post(f"{PREFIX}/evaluate", json={"entries": [{"kind": "constant"}]})
    assert resp.status_code == 400
    assert resp.get_json()["error"]["code"] == "calculator.invalid_request"


def test_full_log_still_ignores_symbols_that_would_not_append():
    app = create_app("TestingConfig")
    app.extensions["accumulator_calculator.settings"] = CalculatorSettings(max_entries=2)
    client = app.test_client()
    session_id = _new_session(client)
    _press(client, session_id, 1, "+")

    for symbol in ("bogus", "×", "="):
        data = _press(client, session_id, symbol)
        assert data["applied"] is False
        assert len(data["entries"]) == 2

    resp = client.post(f"{PREFIX}/sessions/{session_id}/operation", json={"symbol": "π"})
    assert resp.status_code == 422
    assert resp.get_json()["error"]["code"] == "calculator.log_full"
    resp = client.get(f"{PREFIX}/sessions/{session_id}")
    assert len(resp.get_json()["data"]["entries"]) == 2


def test_non_finite_operand_is_rejected():
    client = _client()
    session_id = _new_session(client)
    for body in ('{"value": 1e999}', '{"value": NaN}', '{"value": -Infinity}'):
        resp = client.post(
            f"{PREFIX}/sessions/{session_id}/operand",
            data=body,
            content_type="application/json",
        )
        assert resp.status_code == 400
        assert resp.get_json()["error"]["code"] == "calculator.invalid_request"
    resp = client.get(f"{PREFIX}/sessions/{session_id}")
    assert resp.get_json()["data"]["entries"] == []


def test_non_finite_variable_value_is_rejected():
    client = _client()
    session_id = _new_session(client)
    resp = client.put(
        f"{PREFIX}/sessions/{session_id}/variables/M",
        data='{"value": NaN}',
        content_type="application/json",
    )
    assert resp.status_code == 400
    assert resp.get_json()["error"]["code"] == "calculator.invalid_request"
    resp = client.get(f"{PREFIX}/sessions/{session_id}")
    assert resp.get_json()["data"]["variables"] == {}


def test_stateless_evaluate_rejects_non_finite_values():
    client = _client()
    for body in (
        '{"entries": [{"kind": "constant", "value": Infinity}]}',
        '{"entries": [{"kind": "variable", "name": "x"}], "variables": {"x": NaN}}',
    ):
        resp = client.post(f"{PREFIX}/evaluate", data=body, content_type="application/json")
        assert resp.status_code == 400
        assert resp.get_json()["error"]["code"] == "calculator.invalid_request"
