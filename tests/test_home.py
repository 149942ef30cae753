from app import create_app


def test_home_lists_plugins():
    app = create_app("TestingConfig")
    client = app.test_client()
    response = client.get("/")
    assert response.status_code == 200
    payload = response.get_json()
    assert payload["success"] is True
    titles = [item["title"] for item in payload["data"]["plugins"]]
    assert "Equation Plotter" in titles
    assert response.headers.get("Content-Security-Policy")
    assert response.headers.get("X-Request-ID")


def test_unknown_route_uses_error_envelope():
    client = create_app("TestingConfig").test_client()
    response = client.get("/does-not-exist")
    assert response.status_code == 404
    payload = response.get_json()
    assert payload["success"] is False
    assert payload["error"]["code"] == "not_found"


def test_wrong_method_uses_error_envelope():
    client = create_app("TestingConfig").test_client()
    response = client.get("/api/equation_plotter/evaluate")
    assert response.status_code == 405
    assert response.get_json()["error"]["code"] == "method_not_allowed"


def test_plugin_settings_loaded_from_yaml():
    app = create_app("TestingConfig")
    settings = app.config["PLUGIN_SETTINGS"]["equation_plotter"]
    assert settings["max_points"] == 10000
