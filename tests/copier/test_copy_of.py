"""Tests for copy_of: allocating copies."""

import io
import threading
from collections import defaultdict
from dataclasses import dataclass, field
from enum import Enum
from typing import IO, Any, NamedTuple

import pytest
from pydantic import BaseModel, ConfigDict

from structcopy import Copier, PreconditionError, copy_of


class Method(Enum):
    GET = "GET"
    POST = "POST"


@dataclass(frozen=True)
class Endpoint:
    host: str
    port: int = 443


class Span(NamedTuple):
    start: int
    end: int


@dataclass
class Envelope:
    endpoint: Endpoint
    method: Method = Method.GET
    span: Span = Span(0, 0)
    labels: set[str] = field(default_factory=set)
    extras: dict[str, Any] = field(default_factory=dict)
    parent: "Envelope | None" = None


def test_copy_equals_original(sample_request):
    """Identity round trip: the copy equals the source field for field."""
    copied = copy_of(sample_request)

    assert copied == sample_request
    assert copied is not sample_request


def test_copy_is_independent_of_original(sample_request):
    """CRITICAL: Mutating either side never affects the other.

    Why: Copies are used to resend requests; a shared list would leak
    retries' changes into the original.
    """
    copied = copy_of(sample_request)

    copied.headers[0].values.append("text/plain")
    copied.headers.pop()
    copied.params["page"] = 3
    sample_request.params.pop("size")

    assert sample_request.headers[0].values == ["application/json"]
    assert len(sample_request.headers) == 2
    assert sample_request.params == {"page": 2}
    assert copied.params == {"page": 3, "size": 50}


def test_nested_structs_are_new_objects(sample_request):
    copied = copy_of(sample_request)

    for original, duplicate in zip(sample_request.headers, copied.headers, strict=True):
        assert original == duplicate
        assert original is not duplicate


def test_frozen_namedtuple_enum_and_set_fields():
    src = Envelope(
        endpoint=Endpoint("example.org"),
        method=Method.POST,
        span=Span(1, 5),
        labels={"a", "b"},
        extras={"nested": [1, {"k": "v"}]},
    )

    copied = copy_of(src)

    assert copied == src
    assert copied.endpoint is not src.endpoint
    assert copied.method is Method.POST
    assert copied.labels is not src.labels
    assert copied.extras["nested"] is not src.extras["nested"]
    assert copied.extras["nested"][1] is not src.extras["nested"][1]


def test_self_referencing_chain():
    leaf = Envelope(endpoint=Endpoint("leaf"))
    root = Envelope(endpoint=Endpoint("root"), parent=leaf)

    copied = copy_of(root)

    assert copied.parent == leaf
    assert copied.parent is not leaf


def test_pydantic_model_copy():
    class Query(BaseModel):
        model_config = ConfigDict(frozen=True)

        terms: list[str]
        limit: int = 10

    src = Query(terms=["a"], limit=5)
    copied = copy_of(src)

    assert copied == src
    assert copied.terms is not src.terms


@pytest.mark.parametrize(
    "src",
    [
        [1, [2, 3]],
        (1, [2]),
        {"a": [1], "b": {"c": 2}},
    ],
)
def test_containers_copy(src):
    copied = copy_of(src)

    assert copied == src
    assert type(copied) is type(src)
    assert copied is not src


def test_defaultdict_keeps_factory():
    src: defaultdict[str, list[int]] = defaultdict(list, {"a": [1]})

    copied = copy_of(src)

    assert copied == src
    copied["new"].append(1)
    assert "new" not in src


def test_stream_fields_are_shared():
    """Streams stay the same object on both sides; everything else is fresh."""

    @dataclass
    class Upload:
        name: str
        body: IO[bytes]
        chunks: list[bytes] = field(default_factory=list)

    stream = io.BytesIO(b"payload")
    src = Upload(name="f", body=stream, chunks=[b"a"])

    copied = copy_of(src)

    assert copied.body is stream
    assert copied.chunks is not src.chunks


def test_custom_alias_predicate_on_copier():
    class Session:
        pass

    @dataclass
    class Call:
        session: Any
        args: list[int] = field(default_factory=list)

    session = Session()
    copier = Copier(alias=lambda v: isinstance(v, Session))

    copied = copier.copy_of(Call(session=session, args=[1]))

    assert copied.session is session


def test_opaque_leaves_are_deep_copied_by_default():
    class Blob:
        def __init__(self) -> None:
            self.data = [1]

    @dataclass
    class Holder:
        blob: Blob

    src = Holder(Blob())

    assert copy_of(src).blob is not src.blob
    assert Copier(copy_leaves=False).copy_of(src).blob is src.blob


@pytest.mark.parametrize("src", [None, 5, "text", 3.5, io.BytesIO(b"x")])
def test_non_composite_source_is_fatal(src):
    """CRITICAL: copy_of needs a reference to a composite value."""
    with pytest.raises(PreconditionError, match="must be a struct, sequence or mapping"):
        copy_of(src)


def test_leaves_that_cannot_be_deep_copied_are_shared():
    """Unpicklable leaves are assigned as is instead of failing the copy."""

    def numbers():
        yield 1

    @dataclass
    class Job:
        lock: Any = None
        pending: Any = None
        retries: list[int] = field(default_factory=list)

    lock = threading.Lock()
    pending = numbers()
    src = Job(lock=lock, pending=pending, retries=[1])

    copied = copy_of(src)

    assert copied.lock is lock
    assert copied.pending is pending
    assert copied.retries == [1]
    assert copied.retries is not src.retries
