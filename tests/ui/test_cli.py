from __future__ import annotations

import json

import pytest

from remodel.domain import Action
from remodel.ui.cli import main
from tests.support.transport import Call, FakeTransport


def _run(
    capsys: pytest.CaptureFixture[str], transport: FakeTransport, *argv: str
) -> object:
    main(list(argv), transport_factory=lambda: transport)
    return json.loads(capsys.readouterr().out)


def test_create_sends_parsed_fields(
    capsys: pytest.CaptureFixture[str], transport: FakeTransport
) -> None:
    output = _run(capsys, transport, "create", "widgets", "name=Lamp", "size=3", "tags=[\"a\"]")

    assert transport.calls == [
        Call(Action.POST, "widgets", {"name": "Lamp", "size": 3, "tags": ["a"]})
    ]
    assert output == {"name": "Lamp", "size": 3, "tags": ["a"], "id": 1}


def test_show_prints_the_record(
    capsys: pytest.CaptureFixture[str], transport: FakeTransport
) -> None:
    transport.respond(Action.GET, "widgets/7", {"data": {"id": 7, "name": "Lamp"}})

    assert _run(capsys, transport, "show", "widgets", "7") == {"id": 7, "name": "Lamp"}


def test_show_without_envelope(
    capsys: pytest.CaptureFixture[str], transport: FakeTransport
) -> None:
    transport.respond(Action.GET, "widgets/7", {"id": 7, "data": "raw"})

    output = _run(capsys, transport, "--data-field", "", "show", "widgets", "7")

    assert output == {"id": 7, "data": "raw"}


def test_list_passes_query_params(
    capsys: pytest.CaptureFixture[str], transport: FakeTransport
) -> None:
    transport.respond(Action.GET, "widgets", {"data": [{"id": 1}, {"id": 2}]})

    output = _run(capsys, transport, "list", "widgets", "page=2")

    assert output == [{"id": 1}, {"id": 2}]
    assert transport.calls == [Call(Action.GET, "widgets", params={"page": 2})]


def test_update_sends_only_changes_with_put(
    capsys: pytest.CaptureFixture[str], transport: FakeTransport
) -> None:
    transport.respond(Action.GET, "widgets/7", {"data": {"id": 7, "name": "Lamp", "size": 1}})

    output = _run(
        capsys, transport, "--update-method", "put", "update", "widgets", "7", "size=2"
    )

    assert transport.calls[-1] == Call(Action.PUT, "widgets/7", {"size": 2})
    assert output == {"id": 7, "name": "Lamp", "size": 2}


def test_delete_reports_count(
    capsys: pytest.CaptureFixture[str], transport: FakeTransport
) -> None:
    transport.respond(Action.GET, "widgets/1", {"data": {"id": 1}})

    assert _run(capsys, transport, "delete", "widgets", "1", "2") == {"deleted": 1}


def test_missing_record_exits_with_error(
    capsys: pytest.CaptureFixture[str], transport: FakeTransport
) -> None:
    with pytest.raises(SystemExit) as exc:
        main(["show", "widgets", "404"], transport_factory=lambda: transport)

    assert exc.value.code == 1
    assert "not found" in capsys.readouterr().err


def test_malformed_assignment_exits_with_usage_error(transport: FakeTransport) -> None:
    with pytest.raises(SystemExit) as exc:
        main(["create", "widgets", "name"], transport_factory=lambda: transport)

    assert exc.value.code == 2
    assert transport.calls == []
