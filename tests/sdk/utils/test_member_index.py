import threading
from dataclasses import dataclass
from typing import Annotated, ClassVar, Optional

import pytest
from pydantic import BaseModel

from restbound import PathOnly, QueryArg
from restbound._utils._member_index import (
    MemberKind,
    TypeIndex,
    clear_type_index_cache,
    get_type_index,
    resolve_path,
)
from restbound.models.errors import InvalidPathError


class Profile(BaseModel):
    id: int
    nickname: Optional[str] = None


class User(BaseModel):
    name: str
    profile: Optional[Profile] = None
    tags: list[str] = []

    def display_name(self) -> str:
        return self.name.upper()

    def reset(self) -> None:
        pass

    def rename(self, name: str) -> str:
        return name

    def _initials(self) -> str:
        return self.name[:1]

    @staticmethod
    def factory() -> "User":
        return User(name="static")


class Envelope(BaseModel):
    user: Optional[User] = None
    request_id: Annotated[str, PathOnly()] = "r-1"
    page: Annotated[int, QueryArg("p")] = 1


@dataclass
class Node:
    value: int
    next: Optional["Node"] = None


class Greeter:
    greeting: str = "hi"
    registry: ClassVar[dict] = {}

    @property
    def shout(self) -> str:
        return self.greeting.upper()

    def __str__(self) -> str:
        return "greeter"

    def __repr__(self) -> str:
        return "Greeter()"


def names(index: TypeIndex) -> list[str]:
    return [member.name for member in index.members]


class TestTypeIndex:
    class TestBuild:
        def test_indexes_fields_and_methods(self):
            index = get_type_index(User)

            assert names(index) == [
                "name",
                "profile",
                "tags",
                "display_name()",
                "_initials()",
            ]

        def test_member_kinds(self):
            index = get_type_index(User)

            assert index.find("name").kind is MemberKind.FIELD
            assert index.find("display_name()").kind is MemberKind.METHOD
            assert index.find("display_name()").is_method

        def test_nullable_members(self):
            index = get_type_index(User)

            assert index.find("profile").nullable
            assert index.find("profile").find("nickname").nullable
            assert not index.find("name").nullable
            assert not index.find("tags").nullable

        def test_skips_void_static_and_parameterized_methods(self):
            index = get_type_index(User)

            assert index.find("reset()") is None
            assert index.find("rename()") is None
            assert index.find("factory()") is None

        def test_nested_types_are_expanded(self):
            profile = get_type_index(User).find("profile")

            assert profile.value_type is Profile
            assert [child.name for child in profile.children] == ["id", "nickname"]

        def test_collections_are_leaves(self):
            tags = get_type_index(User).find("tags")

            assert tags.children == ()

        def test_properties_and_str_override(self):
            index = get_type_index(Greeter)

            assert names(index) == ["greeting", "shout", "__str__()"]
            assert index.find("shout").kind is MemberKind.PROPERTY
            assert index.find("shout").value_type is str

        def test_annotated_tags_are_kept(self):
            index = get_type_index(Envelope)

            assert index.find("request_id").has_tag(PathOnly)
            assert index.find("page").get_tag(QueryArg) == QueryArg("p")
            assert index.find("page").value_type is int

        def test_self_referencing_type_stops_recursion(self):
            index = get_type_index(Node)

            next_member = index.find("next")
            assert next_member.value_type is Node
            assert next_member.children == ()

        def test_lookup_is_case_insensitive(self):
            index = get_type_index(User)

            assert index.find("NAME") is index.find("name")
            assert index.find("Display_Name()") is index.find("display_name()")

    class TestCache:
        def test_same_index_is_returned(self):
            assert get_type_index(User) is get_type_index(User)

        def test_clear_cache_builds_a_new_index(self):
            first = get_type_index(User)
            clear_type_index_cache()

            assert get_type_index(User) is not first

        def test_concurrent_builds_publish_one_index(self):
            clear_type_index_cache()
            barrier = threading.Barrier(8)
            results: list[TypeIndex] = []
            lock = threading.Lock()

            def build() -> None:
                barrier.wait()
                index = get_type_index(Envelope)
                with lock:
                    results.append(index)

            threads = [threading.Thread(target=build) for _ in range(8)]
            for thread in threads:
                thread.start()
            for thread in threads:
                thread.join()

            assert len(results) == 8
            assert all(index is results[0] for index in results)
            assert names(results[0]) == ["user", "request_id", "page"]

    class TestResolve:
        @pytest.fixture
        def envelope(self) -> Envelope:
            return Envelope(user=User(name="ann", profile=Profile(id=7)))

        def test_resolves_nested_member(self, envelope: Envelope):
            assert resolve_path(envelope, "user.profile.id") == 7

        def test_resolution_matches_manual_access(self, envelope: Envelope):
            assert resolve_path(envelope, "user.name") == envelope.user.name
            assert resolve_path(envelope, "page") == envelope.page

        def test_resolves_case_insensitively(self, envelope: Envelope):
            assert resolve_path(envelope, "USER.Profile.ID") == 7

        def test_calls_method_segment(self, envelope: Envelope):
            assert resolve_path(envelope, "user.display_name()") == "ANN"

        def test_short_circuits_on_none(self):
            assert resolve_path(Envelope(user=None), "user.profile.id") is None

        def test_short_circuit_does_not_check_remaining_segments(self):
            assert resolve_path(Envelope(user=None), "user.missing.segment") is None

        def test_rejects_multiple_method_calls(self, envelope: Envelope):
            with pytest.raises(InvalidPathError) as exc_info:
                resolve_path(envelope, "user.display_name().upper()")

            assert (
                str(exc_info.value)
                == "Multiple method calls in the same path are not allowed."
            )

        def test_unknown_member(self, envelope: Envelope):
            with pytest.raises(InvalidPathError) as exc_info:
                resolve_path(envelope, "user.age")

            assert exc_info.value.segment == "age"
            assert exc_info.value.position == 1
            assert str(exc_info.value) == (
                'Member "age" not found in path. Invalid segment at position 1.'
            )

        def test_unknown_method(self, envelope: Envelope):
            with pytest.raises(InvalidPathError) as exc_info:
                resolve_path(envelope, "user.age()")

            assert str(exc_info.value) == (
                'Method "age" not found in path. Invalid segment at position 1.'
            )

        def test_invalid_path_is_a_value_error(self, envelope: Envelope):
            with pytest.raises(ValueError):
                resolve_path(envelope, "nope")

        def test_empty_path(self, envelope: Envelope):
            with pytest.raises(ValueError):
                get_type_index(Envelope).resolve(envelope, "")
