from __future__ import annotations

import json

import pytest

from remodel.domain import (
    Action,
    ActionNotPermittedError,
    Capabilities,
    Record,
    RecordOptions,
    TransportError,
)
from tests.support.records import Author, Post, Profile, Widget
from tests.support.transport import Call, FakeTransport


def test_existence_is_derived_from_the_key(transport: FakeTransport) -> None:
    post = Post(transport, title="A")

    assert not post.exists()
    post.id = 4
    assert post.exists()
    assert post.get_key_name() == "id"
    post.id = None
    assert not post.exists()


def test_custom_primary_key(transport: FakeTransport) -> None:
    class Account(Record, options=RecordOptions(endpoint="accounts", primary_key="uuid")):
        pass

    account = Account(transport, id=1)
    assert not account.exists()

    account.uuid = "a-b"
    assert account.get_key() == "a-b"


def test_attribute_and_item_access(transport: FakeTransport) -> None:
    post = Post(transport, title="A")

    assert post.title == "A"
    assert post["title"] == "A"
    assert "title" in post
    assert post.get_attribute("missing", "fallback") == "fallback"
    with pytest.raises(AttributeError):
        _ = post.missing
    with pytest.raises(KeyError):
        _ = post["missing"]


def test_relations_must_be_declared(transport: FakeTransport) -> None:
    post = Post(transport)

    with pytest.raises(ValueError, match="declares no relation"):
        post.set_relation("authors", [])


def test_find_hydrates_a_clean_record(transport: FakeTransport) -> None:
    transport.respond(Action.GET, "posts/4", {"data": {"id": 4, "title": "Hello"}})

    post = Post.find(transport, 4)

    assert post is not None
    assert post.exists()
    assert post.is_clean()
    assert post.title == "Hello"
    assert not post.was_recently_created


def test_find_returns_none_on_not_found(transport: FakeTransport) -> None:
    assert Post.find(transport, 404) is None


def test_find_propagates_other_transport_errors(transport: FakeTransport) -> None:
    transport.respond(Action.GET, "posts/4", TransportError("down", status_code=500))

    with pytest.raises(TransportError):
        Post.find(transport, 4)


def test_find_respects_capabilities(transport: FakeTransport) -> None:
    class Outbox(
        Record,
        options=RecordOptions(endpoint="outbox", capabilities=Capabilities.of("post")),
    ):
        pass

    with pytest.raises(ActionNotPermittedError):
        Outbox.find(transport, 1)
    assert transport.calls == []


def test_all_hydrates_nested_relations(transport: FakeTransport) -> None:
    transport.respond(
        Action.GET,
        "authors",
        {
            "data": [
                {
                    "id": 1,
                    "name": "Ada",
                    "posts": [{"id": 10, "title": "Notes", "comments": [{"id": 100}]}],
                    "profile": {"id": 5, "bio": "Maths"},
                },
                {"id": 2, "name": "Grace"},
            ]
        },
    )

    authors = Author.all(transport, page=2)

    assert transport.calls == [Call(Action.GET, "authors", params={"page": 2})]
    ada, grace = authors
    assert "posts" not in ada.get_attributes()
    posts = ada.posts
    assert isinstance(posts, list)
    assert [type(post) for post in posts] == [Post]
    assert posts[0].exists()
    assert posts[0].comments[0].get_key() == 100
    assert isinstance(ada.profile, Profile)
    assert grace.posts is None


def test_refresh_replaces_local_state(transport: FakeTransport) -> None:
    transport.respond(Action.GET, "posts/4", {"data": {"id": 4, "title": "Remote"}})
    post = Post.hydrate(transport, {"id": 4, "title": "Local"})
    post.title = "Edited"

    assert post.refresh() is post

    assert post.title == "Remote"
    assert post.is_clean()


def test_refresh_of_new_record_does_nothing(transport: FakeTransport) -> None:
    post = Post(transport, title="A")

    assert post.refresh() is post
    assert post.fresh() is None
    assert transport.calls == []


def test_refresh_of_vanished_record_fails(transport: FakeTransport) -> None:
    post = Post.hydrate(transport, {"id": 4})

    with pytest.raises(TransportError) as exc:
        post.refresh()

    assert exc.value.status_code == 404


def test_fresh_returns_a_new_instance(transport: FakeTransport) -> None:
    transport.respond(Action.GET, "posts/4", {"data": {"id": 4, "title": "Remote"}})
    post = Post.hydrate(transport, {"id": 4, "title": "Local"})

    fresh = post.fresh()

    assert fresh is not None
    assert fresh is not post
    assert fresh.is_same_as(post)
    assert post.title == "Local"


def test_same_as_compares_type_and_key(transport: FakeTransport) -> None:
    post = Post.hydrate(transport, {"id": 1})

    assert post.is_same_as(Post.hydrate(transport, {"id": 1}))
    assert post.is_not_same_as(Post.hydrate(transport, {"id": 2}))
    assert post.is_not_same_as(Widget.hydrate(transport, {"id": 1}))
    assert post.is_not_same_as(None)
    assert Post(transport).is_not_same_as(Post(transport))


def test_replicate_drops_the_key(transport: FakeTransport) -> None:
    post = Post.hydrate(transport, {"id": 1, "title": "A", "slug": "a"})

    copy = post.replicate(except_=["slug"])

    assert not copy.exists()
    assert copy.get_attributes() == {"title": "A"}
    copy.save()
    assert transport.calls == [Call(Action.POST, "posts", {"title": "A"})]


def test_to_dict_includes_relations_and_hides_fields(transport: FakeTransport) -> None:
    author = Author.hydrate(
        transport,
        {
            "id": 1,
            "name": "Ada",
            "password": "secret",
            "posts": [{"id": 10, "title": "Notes"}],
            "profile": None,
        },
    )

    data = author.to_dict()

    assert data == {
        "id": 1,
        "name": "Ada",
        "posts": [{"id": 10, "title": "Notes"}],
        "profile": None,
    }
    assert json.loads(author.to_json()) == data


def test_api_error_marker_on_record(transport: FakeTransport) -> None:
    assert Post(transport, status_code=500).has_api_error()
    assert not Post(transport, title="A").has_api_error()


def test_define_builds_record_types_at_runtime(transport: FakeTransport) -> None:
    Thing = Record.define("Thing", RecordOptions(endpoint="things"))  # noqa: N806

    thing = Thing(transport, name="A").save()

    assert Thing.record_type_name() == "Thing"
    assert transport.paths() == [(Action.POST, "things")]
    assert repr(thing) == "<Thing id=1>"
