def test_health_endpoints(client):
    basic = client.get("/api/health")
    assert basic.status_code == 200
    assert basic.json() == {"status": "ok"}

    live = client.get("/api/health/live")
    assert live.status_code == 200
    assert live.json()["status"] == "ok"

    ready = client.get("/api/health/ready")
    assert ready.status_code in {200, 503}
    payload = ready.json()
    assert "database" in payload
    assert "schema_ok" in payload["database"]


def test_responses_carry_security_and_request_id_headers(client):
    response = client.get("/api/health", headers={"X-Request-ID": "probe-1"})
    assert response.headers["X-Content-Type-Options"] == "nosniff"
    assert response.headers["X-Frame-Options"] == "DENY"
    assert response.headers["X-Request-ID"] == "probe-1"


def test_oversized_request_body_is_rejected(client):
    response = client.post(
        "/api/auth/login",
        content=b"{}",
        headers={"Content-Type": "application/json", "Content-Length": "999999999"},
    )
    assert response.status_code == 413
    assert "too large" in response.json()["message"]
