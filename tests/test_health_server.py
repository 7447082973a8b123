from simple_autoscaler.infra.health_server import create_app


def test_health_endpoint():
    client = create_app().test_client()

    r = client.get("/health")

    assert r.status_code == 200
    assert r.get_json() == {"status": "ok"}


def test_health_endpoint_rejects_post():
    client = create_app().test_client()

    assert client.post("/health").status_code == 405
