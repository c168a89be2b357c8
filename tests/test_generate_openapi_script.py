import json

from scripts.generate_openapi import main


def test_writes_document_from_snapshot_file(tmp_path, snapshot_data):
    snapshot_file = tmp_path / "snapshot.json"
    snapshot_file.write_text(json.dumps(snapshot_data), encoding="utf-8")
    out = tmp_path / "docs" / "openapi.json"

    rc = main(["--snapshot", str(snapshot_file), "--output", str(out), "--base-path", "/shop/"])

    assert rc == 0
    document = json.loads(out.read_text(encoding="utf-8"))
    assert document["servers"] == [{"url": "/shop"}]
    assert list(document["paths"]) == ["/accounts/login", "/widgets", "/widgets/{id}"]


def test_invalid_snapshot_fails_without_output(tmp_path):
    snapshot_file = tmp_path / "snapshot.json"
    snapshot_file.write_text(json.dumps({"routes": [{"method": "nodot", "verb": "get", "path": "/x"}]}), encoding="utf-8")
    out = tmp_path / "openapi.json"

    assert main(["--snapshot", str(snapshot_file), "--output", str(out)]) == 1
    assert not out.exists()
