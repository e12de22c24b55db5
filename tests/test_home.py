from app import create_app


def _client():
    app = create_app("TestingConfig")
    return app.test_client()


def test_home_lists_plugins():
    client = _client()
    response = client.get("/")
    assert response.status_code == 200
    payload = response.get_json()
    assert payload["success"] is True
    titles = [item["title"] for item in payload["data"]["plugins"]]
    assert "Accumulator Calculator" in titles
    assert response.headers.get("Content-Security-Policy")
    assert response.headers.get("X-Request-ID")


def test_unknown_route_returns_json_error():
    client = _client()
    response = client.get("/does-not-exist")
    assert response.status_code == 404
    payload = response.get_json()
    assert payload["success"] is False
    assert payload["error"]["code"] == "not_found"


def test_wrong_method_returns_json_error():
    client = _client()
    response = client.get("/api/accumulator_calculator/evaluate")
    assert response.status_code == 405
    assert response.get_json()["error"]["code"] == "method_not_allowed"
