import json

from todo_api.generate_openapi import generate_openapi


def test_writes_schema(tmp_path):
    out = tmp_path / "interfaces" / "openapi.json"
    path = generate_openapi(str(out))
    assert path == str(out)

    schema = json.loads(out.read_text(encoding="utf-8"))
    assert {"/api/health", "/api/todos", "/api/todos/stats", "/api/todos/{todo_id}"} <= set(schema["paths"])
    assert {"get", "post"} <= set(schema["paths"]["/api/todos"])
    assert {"put", "delete"} <= set(schema["paths"]["/api/todos/{todo_id}"])
    assert {t["name"] for t in schema["tags"]} >= {"health", "todos"}
