from fastapi.testclient import TestClient

from api.main import app


def _graphql(client: TestClient, query: str, **variables) -> dict:
    response = client.post("/graphql", json={"query": query, "variables": variables})
    assert response.status_code == 200
    return response.json()


def test_health_and_root() -> None:
    with TestClient(app) as client:
        health = client.get("/health")
        root = client.get("/")

    assert health.status_code == 200
    assert health.json()["status"] == "healthy"
    assert root.json()["endpoints"]["graphql"] == "/graphql"


def test_graphiql_redirects_to_ide() -> None:
    with TestClient(app) as client:
        response = client.get("/graphiql", follow_redirects=False)

    assert response.status_code in (302, 307)
    assert response.headers["location"] == "/graphql"


def test_graphql_round_trip_over_http() -> None:
    with TestClient(app) as client:
        created = _graphql(
            client,
            "mutation($name: String!) { createUser(name: $name) { success id } }",
            name="Zoe",
        )
        user_id = created["data"]["createUser"]["id"]

        posted = _graphql(
            client,
            'mutation($id: ID!) { createMessage(userId: $id, content: "over http") { success } }',
            id=user_id,
        )
        fetched = _graphql(
            client,
            "query($id: ID!) { getUser(id: $id) { name messages { content } } }",
            id=user_id,
        )
        missing = _graphql(client, '{ getMessage(id: "999999") { id } }')

    assert posted["data"]["createMessage"]["success"] is True
    assert fetched["data"]["getUser"] == {
        "name": "Zoe",
        "messages": [{"content": "over http"}],
    }
    assert missing["errors"][0]["message"] == "Message not found"
